"""
Generator: the public face of a generation.

Created by a GeneratorBuilder. Holds the initial nodes and the retry budget,
and delegates the algorithm to the InternalGenerator.

Usage:
    generator = GeneratorBuilder(rules, grid).with_rng(RngMode.seeded(7)).build()
    gen_info, grid_data = generator.generate_grid()

    # Or step by step
    while generator.select_and_propagate() == GenerationStatus.ONGOING:
        ...

Seeds: every reinitialization draws the next seed from the current random
state. If a generation seeded with s1 fails 14 times before succeeding with
s15, a generator seeded with any of s1 to s15 reaches the same final result,
s15 directly.
"""

from __future__ import annotations

import logging
import queue
from typing import Sequence

from ..errors import InvalidNodeIndexError
from ..grid.definition import GridData, GridDefinition, GridPosition, NodeRef
from ..rules.model import ModelInstance
from ..rules.rules import Rules, VariantRef
from .heuristics import ModelSelectionHeuristic, NodeSelectionHeuristic
from .internal import InternalGenerator
from .types import GeneratedNode, GenerationStatus, GenInfo, InternalGeneratorStatus, RngMode

logger = logging.getLogger(__name__)


class Generator:
    """Fills a grid with model variants that respect the rules."""

    def __init__(
        self,
        rules: Rules,
        grid: GridDefinition,
        initial_nodes: Sequence[tuple[int, int]],
        max_retry_count: int,
        node_heuristic: NodeSelectionHeuristic,
        model_heuristic: ModelSelectionHeuristic,
        rng_mode: RngMode,
        observers: list[queue.SimpleQueue] | None = None,
    ):
        """Prefer GeneratorBuilder, which also runs pregen."""
        self._max_retry_count = max_retry_count
        self._initial_nodes: tuple[tuple[int, int], ...] = tuple(initial_nodes)
        self._internal = InternalGenerator(
            rules,
            grid,
            node_heuristic,
            model_heuristic,
            rng_mode,
            observers,
        )

    def pregen(self, collector: list[GeneratedNode] | None = None) -> GenerationStatus:
        """Initialize supports and set the initial nodes. Called once by the builder."""
        return self._internal.pregen(collector, self._initial_nodes)

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def max_retry_count(self) -> int:
        return self._max_retry_count

    @max_retry_count.setter
    def max_retry_count(self, max_retry_count: int) -> None:
        if max_retry_count < 0:
            raise ValueError(f"max_retry_count must be >= 0, got {max_retry_count}")
        self._max_retry_count = max_retry_count

    @property
    def seed(self) -> int:
        """Seed of the current attempt."""
        return self._internal.seed

    @property
    def grid(self) -> GridDefinition:
        return self._internal.grid

    @property
    def rules(self) -> Rules:
        return self._internal.rules

    @property
    def nodes_left(self) -> int:
        """How many nodes are left to generate."""
        return self._internal.nodes_left_to_generate

    @property
    def status(self) -> InternalGeneratorStatus:
        return self._internal.status

    @property
    def initial_nodes(self) -> tuple[tuple[int, int], ...]:
        return self._initial_nodes

    def _resolve_node(self, node_ref: NodeRef) -> int:
        if isinstance(node_ref, GridPosition) and not self.grid.is_valid_position(node_ref):
            raise InvalidNodeIndexError(self.grid.index_from_position(node_ref))
        return self.grid.node_index(node_ref)

    def possible_model_indexes(self, node_ref: NodeRef) -> list[int]:
        """Variants still possible on a node."""
        node_index = self._resolve_node(node_ref)
        if not self._internal.is_valid_node_index(node_index):
            raise InvalidNodeIndexError(node_index)
        return self._internal.possible_model_indexes(node_index)

    def possible_models_count(self, node_ref: NodeRef) -> int:
        node_index = self._resolve_node(node_ref)
        if not self._internal.is_valid_node_index(node_index):
            raise InvalidNodeIndexError(node_index)
        return self._internal.possible_models_counts[node_index]

    def to_grid_data(self) -> GridData[ModelInstance] | None:
        """The generated grid, or None if the generation is not done."""
        if self._internal.status != InternalGeneratorStatus.DONE:
            return None
        return self._internal.to_grid_data()

    # -------------------------------------------------------------------------
    # Whole generation
    # -------------------------------------------------------------------------

    def generate(self) -> GenInfo:
        """Generate the whole grid, retrying up to max_retry_count times on contradictions.

        An ended generation (done or failed) is reinitialized first. A
        generation started with select_and_propagate is continued.

        Raises:
            GenerationError: the last contradiction, once every attempt failed
        """
        return self._internal.generate(None, self._max_retry_count, self._initial_nodes)

    def generate_grid(self) -> tuple[GenInfo, GridData[ModelInstance]]:
        """Same as generate(), also returning the generated grid."""
        gen_info = self._internal.generate(None, self._max_retry_count, self._initial_nodes)
        return gen_info, self._internal.to_grid_data()

    def generate_collected(self) -> tuple[GenInfo, list[GeneratedNode]]:
        """Same as generate(), also returning the nodes generated by the successful attempt."""
        generated_nodes: list[GeneratedNode] = []
        gen_info = self._internal.generate(generated_nodes, self._max_retry_count, self._initial_nodes)
        return gen_info, generated_nodes

    # -------------------------------------------------------------------------
    # Step by step
    # -------------------------------------------------------------------------

    def select_and_propagate(self) -> GenerationStatus:
        """Advance the generation by one step: pick a node and a model, then propagate.

        One step can generate more than one node when propagation leaves a
        single possible model on some nodes. Once the generation has failed,
        call reinitialize() to start again.

        Raises:
            GenerationError: contradiction, now or during a previous step
        """
        return self._internal.select_and_propagate(None)

    def select_and_propagate_collected(self) -> tuple[GenerationStatus, list[GeneratedNode]]:
        """Same as select_and_propagate(), also returning the generated nodes."""
        generated_nodes: list[GeneratedNode] = []
        status = self._internal.select_and_propagate(generated_nodes)
        return status, generated_nodes

    def set_and_propagate(self, node_ref: NodeRef, variant_ref: VariantRef) -> GenerationStatus:
        """Set a variant on a node, then propagate.

        Setting a node to the variant it already has does nothing.

        Raises:
            NodeSetError: the node or variant is invalid, or the variant is not possible there
            GenerationError: contradiction, now or during a previous step
        """
        return self._internal.set_and_propagate(
            self._resolve_node(node_ref),
            self.rules.resolve_variant_ref(variant_ref),
            None,
        )

    def set_and_propagate_collected(
        self,
        node_ref: NodeRef,
        variant_ref: VariantRef,
    ) -> tuple[GenerationStatus, list[GeneratedNode]]:
        """Same as set_and_propagate(), also returning the generated nodes."""
        generated_nodes: list[GeneratedNode] = []
        status = self._internal.set_and_propagate(
            self._resolve_node(node_ref),
            self.rules.resolve_variant_ref(variant_ref),
            generated_nodes,
        )
        return status, generated_nodes

    def reinitialize(self) -> GenerationStatus:
        """Reset the generation with the next seed and replay the initial nodes."""
        return self._internal.reinitialize(None, self._initial_nodes)

    def reinitialize_collected(self) -> tuple[GenerationStatus, list[GeneratedNode]]:
        """Same as reinitialize(), also returning the nodes generated by pregen."""
        generated_nodes: list[GeneratedNode] = []
        status = self._internal.reinitialize(generated_nodes, self._initial_nodes)
        return status, generated_nodes

    # -------------------------------------------------------------------------
    # Observers
    # -------------------------------------------------------------------------

    def add_observer_queue(self) -> queue.SimpleQueue:
        """Register a new queue receiving every future GenerationUpdate."""
        return self._internal.add_observer()

    def __repr__(self) -> str:
        return (
            f"Generator(seed={self.seed}, status={self.status.value}, "
            f"nodes_left={self.nodes_left}/{self.grid.total_size})"
        )
