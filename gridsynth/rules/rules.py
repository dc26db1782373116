"""Rules: the compiled adjacency constraints of a generation.

Rules are built once from user models and a socket collection, then never
mutated. A single Rules object can be shared by any number of generators.

Usage:
    sockets = SocketCollection()
    white, black = sockets.create(), sockets.create()
    sockets.add_connection(white, [black])

    models = [
        SocketsCartesian2D.mono(white).new_model(),
        SocketsCartesian2D.mono(black).new_model(),
    ]
    rules = RulesBuilder.cartesian_2d(models, sockets).build()
"""

from __future__ import annotations

import logging
from typing import Sequence, Tuple, Union

from pydantic import BaseModel, ConfigDict

from ..errors import InvalidModelRefError, RulesError
from ..grid.direction import CARTESIAN_2D_ROTATION_AXIS, CoordinateSystem, Direction
from ..logging_config import log_rules_built
from .model import Model, ModelInstance, ModelVariant, expand_models
from .rotation import ALL_MODEL_ROTATIONS, ModelRotation
from .socket import Socket, SocketCollection

logger = logging.getLogger(__name__)

# A variant is referenced by its index, by (model index, rotation) or by a ModelInstance
VariantRef = Union[int, Tuple[int, Union[ModelRotation, int]], ModelInstance]


class ModelInfo(BaseModel):
    """Information about a model variant."""

    model_config = ConfigDict(frozen=True)

    weight: float
    name: str | None = None

    def __str__(self) -> str:
        return f"w: {self.weight}, {self.name}"


class RulesBuilder:
    """Collects the inputs of a Rules object.

    Use cartesian_2d() or cartesian_3d() to start, then build().
    """

    def __init__(
        self,
        models: Sequence[Model],
        socket_collection: SocketCollection,
        coord_system: CoordinateSystem,
    ):
        self._models = list(models)
        self._socket_collection = socket_collection
        self._coord_system = coord_system
        self._rotation_axis = coord_system.default_rotation_axis

    @classmethod
    def cartesian_2d(cls, models: Sequence[Model], socket_collection: SocketCollection) -> RulesBuilder:
        """Rules for a 2D cartesian grid. Models rotate around Z+."""
        return cls(models, socket_collection, CoordinateSystem.CARTESIAN_2D)

    @classmethod
    def cartesian_3d(cls, models: Sequence[Model], socket_collection: SocketCollection) -> RulesBuilder:
        """Rules for a 3D cartesian grid. Models rotate around Y+ unless told otherwise."""
        return cls(models, socket_collection, CoordinateSystem.CARTESIAN_3D)

    def with_rotation_axis(self, rotation_axis: Direction) -> RulesBuilder:
        """Set the axis models are rotated around (3D only)."""
        if (
            self._coord_system == CoordinateSystem.CARTESIAN_2D
            and rotation_axis != CARTESIAN_2D_ROTATION_AXIS
        ):
            raise RulesError(
                f"The rotation axis of 2D rules is {CARTESIAN_2D_ROTATION_AXIS.name} "
                f"and cannot be changed to {rotation_axis.name}"
            )
        self._rotation_axis = rotation_axis
        return self

    def build(self) -> Rules:
        """Build the Rules.

        Raises:
            RulesError: no model variant, no socket connection, or a model
                whose sockets do not match the coordinate system.
        """
        return Rules(
            self._models,
            self._socket_collection,
            self._rotation_axis,
            self._coord_system,
        )


class Rules:
    """Models, their variants and which variants may be adjacent in each direction.

    `allowed_models(variant, direction)` holds the variants that may sit next
    to `variant` on its `direction` side. It is symmetric: if B is allowed
    on the X+ side of A, then A is allowed on the X- side of B.
    """

    def __init__(
        self,
        models: Sequence[Model],
        socket_collection: SocketCollection,
        rotation_axis: Direction,
        coord_system: CoordinateSystem,
    ):
        directions = coord_system.directions
        for index, model in enumerate(models):
            if len(model.sockets) != len(directions):
                raise RulesError(
                    f"Model {index} has {len(model.sockets)} socket lists, "
                    f"{coord_system.value} models need {len(directions)}"
                )

        variants = expand_models(models, rotation_axis)
        # Checked on variants since a model may allow no rotation at all
        if not variants:
            raise RulesError("No model variant to build rules from")
        if not socket_collection.has_connections:
            raise RulesError("No socket connection to build rules from")

        self._coord_system = coord_system
        self._rotation_axis = rotation_axis
        self._original_models_count = len(models)
        self._variants: tuple[ModelVariant, ...] = tuple(variants)
        self._instances: tuple[ModelInstance, ...] = tuple(v.to_instance() for v in variants)
        self._weights: tuple[float, ...] = tuple(v.weight for v in variants)
        self._names: tuple[str | None, ...] = tuple(v.name for v in variants)

        self._variants_mapping: dict[tuple[int, ModelRotation], int] = {
            (v.original_index, v.rotation): index for index, v in enumerate(variants)
        }
        self._allowed_neighbours = self._compile(variants, socket_collection, directions)

        log_rules_built(
            logger,
            self._original_models_count,
            len(variants),
            f"coord_system={coord_system.value} | axis={rotation_axis.name}",
        )

    @staticmethod
    def _compile(
        variants: list[ModelVariant],
        socket_collection: SocketCollection,
        directions: tuple[Direction, ...],
    ) -> tuple[tuple[tuple[int, ...], ...], ...]:
        # sockets_to_models[socket][direction] holds the variants exposing `socket`
        # when seen from `direction`, in variant order
        sockets_to_models: dict[Socket, list[dict[int, None]]] = {}
        for variant_index, variant in enumerate(variants):
            for direction in directions:
                opposite = direction.opposite.value
                for socket in variant.sockets[direction.value]:
                    by_direction = sockets_to_models.setdefault(
                        socket, [{} for _ in directions]
                    )
                    by_direction[opposite][variant_index] = None

        allowed_neighbours = []
        for variant in variants:
            per_direction = []
            for direction in directions:
                # dict keys as an insertion-ordered set
                unique_models: dict[int, None] = {}
                for socket in variant.sockets[direction.value]:
                    for compatible in socket_collection.compatibles(socket):
                        # A socket may be connected without being used by any model
                        by_direction = sockets_to_models.get(compatible)
                        if by_direction is None:
                            continue
                        for allowed in by_direction[direction.value]:
                            unique_models.setdefault(allowed, None)
                per_direction.append(tuple(unique_models))
            allowed_neighbours.append(tuple(per_direction))
        return tuple(allowed_neighbours)

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def coord_system(self) -> CoordinateSystem:
        return self._coord_system

    @property
    def rotation_axis(self) -> Direction:
        return self._rotation_axis

    @property
    def models_count(self) -> int:
        """Number of model variants (expanded from the input models)."""
        return len(self._variants)

    @property
    def original_models_count(self) -> int:
        """Number of input models the rules were built from."""
        return self._original_models_count

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def is_valid_variant_index(self, variant_index: int) -> bool:
        return 0 <= variant_index < len(self._variants)

    def allowed_models(self, variant_index: int, direction: Direction) -> tuple[int, ...]:
        """Variants allowed next to `variant_index` on its `direction` side."""
        return self._allowed_neighbours[variant_index][direction.value]

    def variant(self, variant_index: int) -> ModelVariant:
        return self._variants[variant_index]

    def model_instance(self, variant_index: int) -> ModelInstance:
        return self._instances[variant_index]

    def weight(self, variant_index: int) -> float | None:
        """Weight of a variant, or None if the index is not valid."""
        if not self.is_valid_variant_index(variant_index):
            return None
        return self._weights[variant_index]

    def weight_unchecked(self, variant_index: int) -> float:
        return self._weights[variant_index]

    def name(self, variant_index: int) -> str | None:
        """Name of a variant, or None if the index is not valid or the model has no name."""
        if not self.is_valid_variant_index(variant_index):
            return None
        return self._names[variant_index]

    def model_info(self, variant_index: int) -> ModelInfo:
        return ModelInfo(weight=self._weights[variant_index], name=self._names[variant_index])

    def variant_index(self, model_index: int, rotation: ModelRotation) -> int | None:
        """Variant of model `model_index` rotated by `rotation`, or None if it does not exist."""
        return self._variants_mapping.get((model_index, rotation))

    def resolve_variant_ref(self, variant_ref: VariantRef) -> int:
        """Variant index referenced by `variant_ref`.

        Plain indexes are returned as is, they are checked by the generator.

        Raises:
            InvalidModelRefError: no variant for this (model, rotation) pair
        """
        if isinstance(variant_ref, ModelInstance):
            model_index, rotation = variant_ref.model_index, variant_ref.rotation
        elif isinstance(variant_ref, tuple):
            model_index, rotation = variant_ref
        else:
            return variant_ref

        # Rotations may also be given in degrees
        if not isinstance(rotation, ModelRotation):
            try:
                rotation = ModelRotation(rotation)
            except ValueError:
                raise InvalidModelRefError(model_index, rotation) from None

        variant_index = self.variant_index(model_index, rotation)
        if variant_index is None:
            raise InvalidModelRefError(model_index, rotation)
        return variant_index

    def variant_indexes(self, model_index: int) -> list[int]:
        """All variants of a model, in rotation order."""
        indexes = []
        for rotation in ALL_MODEL_ROTATIONS:
            variant_index = self.variant_index(model_index, rotation)
            if variant_index is not None:
                indexes.append(variant_index)
        return indexes

    def __repr__(self) -> str:
        return (
            f"Rules({self._coord_system.value}, models={self._original_models_count}, "
            f"variants={len(self._variants)})"
        )
