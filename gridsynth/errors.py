"""Exceptions raised by gridsynth.

All errors derive from ProcGenError so callers can catch everything the
library raises with a single except clause.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .rules.rotation import ModelRotation


class ProcGenError(Exception):
    """Base exception for gridsynth errors."""

    pass


# -----------------------------------------------------------------------------
# Construction errors
# -----------------------------------------------------------------------------


class RulesError(ProcGenError):
    """Rules cannot be built from the given models and sockets."""

    pass


class GeneratorBuilderError(ProcGenError):
    """A generator cannot be built from the given configuration."""

    pass


# -----------------------------------------------------------------------------
# Generation errors
# -----------------------------------------------------------------------------


class GenerationError(ProcGenError):
    """Generation failed because a node has no possible model left."""

    def __init__(self, node_index: int):
        super().__init__(
            f"Failed to generate, contradiction at node with index {node_index}"
        )
        self.node_index = node_index

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GenerationError):
            return NotImplemented
        return self.node_index == other.node_index

    def __hash__(self) -> int:
        return hash(("GenerationError", self.node_index))


class NodeSetError(ProcGenError):
    """A model cannot be set on a node."""

    pass


class InvalidNodeIndexError(NodeSetError):
    """Node index is outside the grid."""

    def __init__(self, node_index: int):
        super().__init__(f"Invalid node index: {node_index}")
        self.node_index = node_index


class InvalidModelIndexError(NodeSetError):
    """Model variant index does not exist in the rules."""

    def __init__(self, model_index: int):
        super().__init__(f"Invalid model variant index: {model_index}")
        self.model_index = model_index


class InvalidModelRefError(NodeSetError):
    """No variant exists for this (model, rotation) pair."""

    def __init__(self, model_index: int, rotation: "ModelRotation | int"):
        rotation_name = getattr(rotation, "name", rotation)
        super().__init__(
            f"Invalid model reference: model {model_index} with rotation {rotation_name}"
        )
        self.model_index = model_index
        self.rotation = rotation


class IllegalModelError(NodeSetError):
    """Model variant is not possible on the node (banned, or node already set to another)."""

    def __init__(self, model_index: int, node_index: int):
        super().__init__(
            f"Model variant {model_index} is not allowed on node {node_index}"
        )
        self.model_index = model_index
        self.node_index = node_index
