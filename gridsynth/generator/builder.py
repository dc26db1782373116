"""
GeneratorBuilder and GeneratorConfig.

Rules and grid are required, everything else has a default kept in a
GeneratorConfig. build() runs pregen right away: support counts are
initialized and the initial nodes are set, so an impossible configuration
fails here and not during generation.

Usage:
    builder = GeneratorBuilder(rules, grid)
    builder.with_rng(RngMode.seeded(42)).with_max_retry_count(10)
    observer = builder.add_queued_stateful_observer()
    generator = builder.with_initial_nodes([(GridPosition(0, 0), black)]).build()
"""

from __future__ import annotations

import logging
import os
import queue
from typing import Iterable, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..constants import DEFAULT_RETRY_COUNT, ENV_MAX_RETRY_COUNT, ENV_NODE_HEURISTIC, ENV_SEED
from ..errors import GeneratorBuilderError, InvalidModelIndexError, InvalidModelRefError, InvalidNodeIndexError
from ..grid.definition import GridData, GridDefinition, GridPosition, NodeRef
from ..rules.rules import Rules, VariantRef
from .generator import Generator
from .heuristics import ModelSelectionHeuristic, NodeSelectionHeuristic
from .observer import QueuedObserver, QueuedStatefulObserver
from .types import GeneratedNode, RngMode

logger = logging.getLogger(__name__)


class GeneratorConfig(BaseModel):
    """Optional configuration of a generator, validated on every assignment."""

    model_config = ConfigDict(validate_assignment=True)

    # Retries after a contradiction: a generation makes at most max_retry_count + 1 attempts
    max_retry_count: int = Field(default=DEFAULT_RETRY_COUNT, ge=0)
    node_heuristic: NodeSelectionHeuristic = NodeSelectionHeuristic.MINIMUM_REMAINING_VALUE
    model_heuristic: ModelSelectionHeuristic = ModelSelectionHeuristic.WEIGHTED_PROBABILITY
    rng_mode: RngMode = Field(default_factory=RngMode.random_seed)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> GeneratorConfig:
        """
        Build a config from environment variables, defaults for the missing ones.

        Reads:
            GRIDSYNTH_MAX_RETRY_COUNT: retry budget (int)
            GRIDSYNTH_NODE_HEURISTIC: minimum_remaining_value, minimum_entropy or random
            GRIDSYNTH_SEED: fixed seed (int), random seed when unset
        """
        env = os.environ if environ is None else environ
        values: dict = {}
        if env.get(ENV_MAX_RETRY_COUNT):
            values["max_retry_count"] = int(env[ENV_MAX_RETRY_COUNT])
        if env.get(ENV_NODE_HEURISTIC):
            values["node_heuristic"] = NodeSelectionHeuristic(env[ENV_NODE_HEURISTIC].lower())
        if env.get(ENV_SEED):
            values["rng_mode"] = RngMode.seeded(int(env[ENV_SEED]))
        return cls(**values)


class GeneratorBuilder:
    """Two-phase factory for Generator: configure, then build()."""

    def __init__(self, rules: Rules, grid: GridDefinition, config: GeneratorConfig | None = None):
        if rules.coord_system != grid.coord_system:
            raise GeneratorBuilderError(
                f"Rules are for a {rules.coord_system.value} grid, "
                f"grid is {grid.coord_system.value}"
            )
        self._rules = rules
        self._grid = grid
        self.config = config.model_copy() if config is not None else GeneratorConfig()
        self._observers: list[queue.SimpleQueue] = []
        self._initial_nodes_refs: list[tuple[NodeRef, VariantRef]] = []

    @property
    def rules(self) -> Rules:
        return self._rules

    @property
    def grid(self) -> GridDefinition:
        return self._grid

    # -------------------------------------------------------------------------
    # Configuration
    # -------------------------------------------------------------------------

    def with_max_retry_count(self, max_retry_count: int) -> GeneratorBuilder:
        """Retries after a contradiction. Defaults to DEFAULT_RETRY_COUNT."""
        self.config.max_retry_count = max_retry_count
        return self

    def with_node_heuristic(self, heuristic: NodeSelectionHeuristic) -> GeneratorBuilder:
        """Defaults to MINIMUM_REMAINING_VALUE."""
        self.config.node_heuristic = heuristic
        return self

    def with_model_heuristic(self, heuristic: ModelSelectionHeuristic) -> GeneratorBuilder:
        """Defaults to WEIGHTED_PROBABILITY."""
        self.config.model_heuristic = heuristic
        return self

    def with_rng(self, rng_mode: RngMode) -> GeneratorBuilder:
        """Defaults to a random seed."""
        self.config.rng_mode = rng_mode
        return self

    def with_initial_nodes(self, initial_nodes: Iterable[tuple[NodeRef, VariantRef]]) -> GeneratorBuilder:
        """Nodes set before any generation step, and again after every reinitialization."""
        self._initial_nodes_refs.extend(initial_nodes)
        return self

    def with_initial_grid(self, grid_data: GridData[Optional[VariantRef]]) -> GeneratorBuilder:
        """Same as with_initial_nodes, from a grid of optional variant references.

        Raises:
            GeneratorBuilderError: the grid data does not have the size of the grid
        """
        data_grid = grid_data.grid
        if (data_grid.size_x, data_grid.size_y, data_grid.size_z) != (
            self._grid.size_x,
            self._grid.size_y,
            self._grid.size_z,
        ):
            raise GeneratorBuilderError(
                f"Initial grid is {data_grid.size_x}x{data_grid.size_y}x{data_grid.size_z}, "
                f"generator grid is {self._grid.size_x}x{self._grid.size_y}x{self._grid.size_z}"
            )
        for node_index, variant_ref in enumerate(grid_data):
            if variant_ref is not None:
                self._initial_nodes_refs.append((node_index, variant_ref))
        return self

    # -------------------------------------------------------------------------
    # Observers
    # -------------------------------------------------------------------------

    def add_queued_observer(self) -> QueuedObserver:
        """Observer that also receives the updates sent during build()."""
        receiver: queue.SimpleQueue = queue.SimpleQueue()
        self._observers.append(receiver)
        return QueuedObserver(receiver)

    def add_queued_stateful_observer(self) -> QueuedStatefulObserver:
        """Stateful observer that also receives the updates sent during build()."""
        receiver: queue.SimpleQueue = queue.SimpleQueue()
        self._observers.append(receiver)
        return QueuedStatefulObserver(self._grid, receiver)

    # -------------------------------------------------------------------------
    # Build
    # -------------------------------------------------------------------------

    def build(self) -> Generator:
        """
        Create the generator and run pregen.

        Raises:
            GeneratorBuilderError: an initial node reference is invalid
            NodeSetError: an initial node cannot be set, e.g. two different
                variants on the same node
            GenerationError: the rules and initial nodes lead to a contradiction
        """
        return self._build(None)

    def build_collected(self) -> tuple[Generator, list[GeneratedNode]]:
        """Same as build(), also returning the nodes generated by pregen."""
        generated_nodes: list[GeneratedNode] = []
        generator = self._build(generated_nodes)
        return generator, generated_nodes

    def _build(self, collector: list[GeneratedNode] | None) -> Generator:
        initial_nodes = [
            (self._resolve_node(node_ref), self._resolve_variant(variant_ref))
            for node_ref, variant_ref in self._initial_nodes_refs
        ]
        generator = Generator(
            self._rules,
            self._grid,
            initial_nodes,
            self.config.max_retry_count,
            self.config.node_heuristic,
            self.config.model_heuristic,
            self.config.rng_mode,
            list(self._observers),
        )
        status = generator.pregen(collector)
        logger.info(
            f"SEED {generator.seed} | BUILD | {status.value} | grid={self._grid.size_x}x{self._grid.size_y}"
            f"x{self._grid.size_z} | variants={self._rules.models_count} | initial_nodes={len(initial_nodes)}"
        )
        return generator

    def _resolve_node(self, node_ref: NodeRef) -> int:
        if isinstance(node_ref, GridPosition):
            if not self._grid.is_valid_position(node_ref):
                raise GeneratorBuilderError(f"Initial node position {tuple(node_ref)} is outside the grid")
            return self._grid.index_from_position(node_ref)
        if not self._grid.is_valid_index(node_ref):
            raise GeneratorBuilderError(
                f"Initial node index {node_ref} is outside the grid"
            ) from InvalidNodeIndexError(node_ref)
        return node_ref

    def _resolve_variant(self, variant_ref: VariantRef) -> int:
        try:
            variant_index = self._rules.resolve_variant_ref(variant_ref)
        except InvalidModelRefError as e:
            raise GeneratorBuilderError(f"Invalid initial node variant: {e}") from e
        if not self._rules.is_valid_variant_index(variant_index):
            raise GeneratorBuilderError(
                f"Invalid initial node variant index: {variant_index}"
            ) from InvalidModelIndexError(variant_index)
        return variant_index
