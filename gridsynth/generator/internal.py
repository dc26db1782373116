"""
Constraint propagation engine.

State of a generation:
- `nodes[node * V + v]` is 1 while variant `v` is still possible on `node`
- `supports[(node * V + v) * D + d]` counts the variants of the neighbour
  on the opposite of `d` that still allow `v` on `node`
- `possible_models_counts[node]` is the number of 1s in the node's row

Banning a variant zeroes its supports and queues it. Propagation pops the
queue and decrements the supports of the neighbours' variants it allowed;
a support reaching 0 bans that variant in turn. A node left without any
possible variant is a contradiction.

This module is internal: use Generator and GeneratorBuilder.
"""

from __future__ import annotations

import logging
import queue
import random
from typing import Sequence

from ..errors import GenerationError, IllegalModelError, InvalidModelIndexError, InvalidNodeIndexError
from ..grid.definition import GridData, GridDefinition
from ..logging_config import log_attempt, log_contradiction, log_reseed
from ..rules.model import ModelInstance
from ..rules.rules import Rules
from .heuristics import ModelSelectionHeuristic, NodeSelectionHeuristic, create_node_selector, select_model
from .observer import FailedUpdate, GeneratedUpdate, GenerationUpdate, ReinitializingUpdate
from .types import GeneratedNode, GenerationStatus, GenInfo, InternalGeneratorStatus, NodeSetStatus, RngMode

logger = logging.getLogger(__name__)

# (node_index, variant_index) pairs set before any generation step
InitialNodes = Sequence[tuple[int, int]]


class InternalGenerator:
    """Mutable generation state and the operations on it.

    Only one thread may call the mutating operations at a time.
    """

    def __init__(
        self,
        rules: Rules,
        grid: GridDefinition,
        node_heuristic: NodeSelectionHeuristic,
        model_heuristic: ModelSelectionHeuristic,
        rng_mode: RngMode,
        observers: list[queue.SimpleQueue] | None = None,
    ):
        # Read-only configuration
        self.grid = grid
        self.rules = rules
        self._models_count = rules.models_count
        self._directions = grid.directions
        self._directions_count = len(self._directions)
        # neighbours[node][direction.value]: index of the neighbour node, or None
        self._neighbours = grid.neighbour_indexes()

        self._node_selector = create_node_selector(node_heuristic, rules, grid.total_size)
        self._model_heuristic = model_heuristic
        self.observers: list[queue.SimpleQueue] = list(observers or [])

        nodes_count = grid.total_size
        self._supports: list[int] = [0] * (nodes_count * self._models_count * self._directions_count)
        self.error: GenerationError | None = None
        self._reset(rng_mode.resolve_seed())

    def _reset(self, seed: int) -> None:
        self.seed = seed
        self._rng = random.Random(seed)
        self.status = InternalGeneratorStatus.ONGOING
        self.error = None

        nodes_count = self.grid.total_size
        self._nodes = bytearray(b"\x01") * (nodes_count * self._models_count)
        self.nodes_left_to_generate = nodes_count
        self.possible_models_counts = [self._models_count] * nodes_count
        self._propagation_stack: list[tuple[int, int]] = []
        self._node_selector.reinitialize()

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def is_model_possible(self, node_index: int, model_index: int) -> bool:
        return self._nodes[node_index * self._models_count + model_index] == 1

    def is_valid_node_index(self, node_index: int) -> bool:
        return 0 <= node_index < len(self.possible_models_counts)

    def possible_model_indexes(self, node_index: int) -> list[int]:
        """Variants still possible on a node, in index order."""
        start = node_index * self._models_count
        row = self._nodes[start:start + self._models_count]
        return [model for model, bit in enumerate(row) if bit]

    def _get_model_index(self, node_index: int) -> int:
        start = node_index * self._models_count
        found = self._nodes.find(1, start, start + self._models_count)
        return found - start if found >= 0 else 0

    def _supports_offset(self, node_index: int, model_index: int) -> int:
        return (node_index * self._models_count + model_index) * self._directions_count

    def supports_count(self, node_index: int, model_index: int, direction_index: int) -> int:
        return self._supports[self._supports_offset(node_index, model_index) + direction_index]

    def _check_if_done(self) -> GenerationStatus:
        if self.nodes_left_to_generate == 0:
            self.status = InternalGeneratorStatus.DONE
            return GenerationStatus.DONE
        self.status = InternalGeneratorStatus.ONGOING
        return GenerationStatus.ONGOING

    # -------------------------------------------------------------------------
    # Initialization
    # -------------------------------------------------------------------------

    def pregen(self, collector: list[GeneratedNode] | None, initial_nodes: InitialNodes) -> GenerationStatus:
        """Initialize the supports then set the initial nodes.

        Raises:
            GenerationError: the rules or the initial nodes lead to a contradiction
            NodeSetError: an initial node cannot be set
        """
        self._initialize_supports_count(collector)
        # If already done, initial nodes must match the generated nodes
        return self._pregen_initial_nodes(collector, initial_nodes)

    def reinitialize(self, collector: list[GeneratedNode] | None, initial_nodes: InitialNodes) -> GenerationStatus:
        """Reset the state with a seed drawn from the current one, then replay pregen.

        Pregen succeeded once, so it cannot fail here.
        """
        previous_seed = self.seed
        next_seed = self._rng.getrandbits(64)
        self._reset(next_seed)
        log_reseed(logger, previous_seed, next_seed)

        self._send(ReinitializingUpdate(seed=self.seed))

        self._initialize_supports_count(collector)
        return self._generate_initial_nodes(collector, initial_nodes)

    def _initialize_supports_count(self, collector: list[GeneratedNode] | None) -> GenerationStatus:
        logger.debug(f"SEED {self.seed} | initializing supports counts")
        rules = self.rules
        supports = self._supports
        directions = self._directions

        try:
            for node in range(self.grid.total_size):
                neighbours = self._neighbours[node]
                for model in range(self._models_count):
                    offset = self._supports_offset(node, model)
                    for direction in directions:
                        opposite = direction.opposite
                        # Border of a non-looping axis: no support, and no ban
                        if neighbours[opposite.value] is None:
                            supports[offset + direction.value] = 0
                            continue
                        allowed_count = len(rules.allowed_models(model, opposite))
                        supports[offset + direction.value] = allowed_count
                        if allowed_count == 0 and self.is_model_possible(node, model):
                            # This model would lead to a contradiction at some point
                            self._ban_model_from_node(node, model, collector)
                            # Supports of every direction were zeroed by the ban
                            break
            self._propagate(collector)
        except GenerationError as err:
            self._signal_contradiction(err)
            raise

        logger.debug(f"SEED {self.seed} | supports counts initialized")
        return self._check_if_done()

    def _pregen_initial_nodes(
        self,
        collector: list[GeneratedNode] | None,
        initial_nodes: InitialNodes,
    ) -> GenerationStatus:
        # Every initial node is checked, even once the grid is done, so that
        # conflicting initial nodes are always reported
        for node_index, model_index in initial_nodes:
            if self._check_set_parameters(node_index, model_index) == NodeSetStatus.ALREADY_SET:
                continue
            self._unchecked_set_and_propagate(node_index, model_index, collector)
        return self._check_if_done()

    def _generate_initial_nodes(
        self,
        collector: list[GeneratedNode] | None,
        initial_nodes: InitialNodes,
    ) -> GenerationStatus:
        for node_index, model_index in initial_nodes:
            # Already generated, and to this model since pregen succeeded
            if self.possible_models_counts[node_index] <= 1:
                continue
            if self._unchecked_set_and_propagate(node_index, model_index, collector) == GenerationStatus.DONE:
                return GenerationStatus.DONE
        return self._check_if_done()

    def _check_set_parameters(self, node_index: int, model_index: int) -> NodeSetStatus:
        """
        Raises:
            InvalidModelIndexError: model_index is not a variant of the rules
            InvalidNodeIndexError: node_index is outside the grid
            IllegalModelError: the variant is not possible on the node
        """
        if not self.rules.is_valid_variant_index(model_index):
            raise InvalidModelIndexError(model_index)
        if not self.is_valid_node_index(node_index):
            raise InvalidNodeIndexError(node_index)
        if not self.is_model_possible(node_index, model_index):
            raise IllegalModelError(model_index, node_index)
        if self.possible_models_counts[node_index] <= 1:
            return NodeSetStatus.ALREADY_SET
        return NodeSetStatus.CAN_BE_SET

    # -------------------------------------------------------------------------
    # Generation
    # -------------------------------------------------------------------------

    def generate(
        self,
        collector: list[GeneratedNode] | None,
        max_retry_count: int,
        initial_nodes: InitialNodes,
    ) -> GenInfo:
        """Generate every remaining node, reinitializing on contradictions.

        Makes at most `max_retry_count + 1` attempts. An ended generation
        (done or failed) is reinitialized first; an ongoing one is continued.

        Raises:
            GenerationError: the last contradiction, once every attempt failed
        """
        last_error: GenerationError | None = None
        for try_index in range(max_retry_count + 1):
            if collector is not None:
                collector.clear()

            if self.status != InternalGeneratorStatus.ONGOING:
                if self.reinitialize(collector, initial_nodes) == GenerationStatus.DONE:
                    log_attempt(logger, self.seed, try_index + 1, max_retry_count + 1, "DONE", "after pregen")
                    return GenInfo(try_count=try_index + 1)

            try:
                self._generate_remaining_nodes(collector)
            except GenerationError as err:
                log_attempt(
                    logger, self.seed, try_index + 1, max_retry_count + 1, "FAILED",
                    f"node={err.node_index}",
                )
                last_error = err
                continue

            log_attempt(logger, self.seed, try_index + 1, max_retry_count + 1, "DONE")
            return GenInfo(try_count=try_index + 1)

        assert last_error is not None
        raise last_error

    def _generate_remaining_nodes(self, collector: list[GeneratedNode] | None) -> None:
        # nodes_left_to_generate bounds the number of steps
        for _ in range(self.nodes_left_to_generate):
            if self._unchecked_select_and_propagate(collector) == GenerationStatus.DONE:
                return

    def select_and_propagate(self, collector: list[GeneratedNode] | None) -> GenerationStatus:
        """One generation step: select a node, select a model, propagate.

        Raises:
            GenerationError: contradiction, now or during a previous step
        """
        if self.status == InternalGeneratorStatus.DONE:
            return GenerationStatus.DONE
        if self.status == InternalGeneratorStatus.FAILED:
            assert self.error is not None
            raise self.error
        return self._unchecked_select_and_propagate(collector)

    def set_and_propagate(
        self,
        node_index: int,
        model_index: int,
        collector: list[GeneratedNode] | None,
    ) -> GenerationStatus:
        """Set a variant on a node and propagate.

        Setting a node to the variant it already has does nothing.

        Raises:
            NodeSetError: the variant cannot be set on the node
            GenerationError: contradiction, now or during a previous step
        """
        if self.status == InternalGeneratorStatus.DONE:
            return GenerationStatus.DONE
        if self.status == InternalGeneratorStatus.FAILED:
            assert self.error is not None
            raise self.error

        if self._check_set_parameters(node_index, model_index) == NodeSetStatus.ALREADY_SET:
            # Nothing to do, and we cannot be done here
            return GenerationStatus.ONGOING
        return self._unchecked_set_and_propagate(node_index, model_index, collector)

    def _unchecked_set_and_propagate(
        self,
        node_index: int,
        model_index: int,
        collector: list[GeneratedNode] | None,
    ) -> GenerationStatus:
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                f"SEED {self.seed} | SET | node={node_index} {self.grid.position(node_index)} | "
                f"model={self.rules.model_instance(model_index)} ({self.rules.name(model_index)})"
            )
        self._signal_selection(collector, node_index, model_index)
        self._handle_selected(node_index, model_index)
        self._propagate_or_fail(collector)
        return self._check_if_done()

    def _unchecked_select_and_propagate(self, collector: list[GeneratedNode] | None) -> GenerationStatus:
        node_index = self._node_selector.select_node(self.possible_models_counts, self._rng)
        if node_index is None:
            self.status = InternalGeneratorStatus.DONE
            return GenerationStatus.DONE

        model_index = select_model(
            self._model_heuristic,
            self.possible_model_indexes(node_index),
            self.rules,
            self._rng,
        )
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                f"SEED {self.seed} | SELECT | node={node_index} {self.grid.position(node_index)} | "
                f"model={self.rules.model_instance(model_index)} ({self.rules.name(model_index)})"
            )
        self._signal_selection(collector, node_index, model_index)
        self._handle_selected(node_index, model_index)
        self._propagate_or_fail(collector)
        return self._check_if_done()

    # -------------------------------------------------------------------------
    # Propagation
    # -------------------------------------------------------------------------

    def _handle_selected(self, node_index: int, selected_model: int) -> None:
        """Collapse a node: every other possible variant is queued for propagation and removed."""
        zeros = [0] * self._directions_count
        for model in range(self._models_count):
            if model == selected_model or not self.is_model_possible(node_index, model):
                continue
            self._propagation_stack.append((node_index, model))
            offset = self._supports_offset(node_index, model)
            self._supports[offset:offset + self._directions_count] = zeros

        start = node_index * self._models_count
        self._nodes[start:start + self._models_count] = bytes(self._models_count)
        self._nodes[start + selected_model] = 1
        self.possible_models_counts[node_index] = 1

    def _ban_model_from_node(
        self,
        node_index: int,
        model_index: int,
        collector: list[GeneratedNode] | None,
    ) -> None:
        """Remove a possible variant from a node and queue it for propagation.

        Raises:
            GenerationError: the node has no possible variant left
        """
        offset = self._supports_offset(node_index, model_index)
        self._supports[offset:offset + self._directions_count] = [0] * self._directions_count
        self._nodes[node_index * self._models_count + model_index] = 0

        models_left = max(self.possible_models_counts[node_index] - 1, 0)
        self.possible_models_counts[node_index] = models_left
        self._node_selector.handle_ban(node_index, model_index, self.rules.weight_unchecked(model_index))

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                f"SEED {self.seed} | BAN | node={node_index} | "
                f"model={self.rules.model_instance(model_index)} | {models_left} left"
            )

        if models_left == 0:
            raise GenerationError(node_index)
        if models_left == 1:
            # Previous bans force the last variant on this node
            self._signal_selection(collector, node_index, self._get_model_index(node_index))

        self._propagation_stack.append((node_index, model_index))

    def _propagate(self, collector: list[GeneratedNode] | None) -> None:
        """Propagate queued bans until the queue is empty.

        Raises:
            GenerationError: a node has no possible variant left
        """
        rules = self.rules
        supports = self._supports
        d_count = self._directions_count
        models_count = self._models_count

        while self._propagation_stack:
            from_node, from_model = self._propagation_stack.pop()
            neighbours = self._neighbours[from_node]
            for direction in self._directions:
                to_node = neighbours[direction.value]
                if to_node is None:
                    continue
                # Decrease the supports of all the variants `from_model` allowed there
                for model in rules.allowed_models(from_model, direction):
                    index = (to_node * models_count + model) * d_count + direction.value
                    if supports[index] > 0:
                        supports[index] -= 1
                        # Only reaching 0 bans, so each ban is queued once
                        if supports[index] == 0:
                            self._ban_model_from_node(to_node, model, collector)

    def _propagate_or_fail(self, collector: list[GeneratedNode] | None) -> None:
        try:
            self._propagate(collector)
        except GenerationError as err:
            self._signal_contradiction(err)
            raise

    # -------------------------------------------------------------------------
    # Signals
    # -------------------------------------------------------------------------

    def add_observer(self) -> queue.SimpleQueue:
        """Register a new observer queue and return it."""
        receiver: queue.SimpleQueue = queue.SimpleQueue()
        self.observers.append(receiver)
        return receiver

    def _send(self, update: GenerationUpdate) -> None:
        for observer in self.observers:
            observer.put(update)

    def _signal_selection(
        self,
        collector: list[GeneratedNode] | None,
        node_index: int,
        model_index: int,
    ) -> None:
        if self.observers or collector is not None:
            node = GeneratedNode(
                node_index=node_index,
                model_instance=self.rules.model_instance(model_index),
            )
            self._send(GeneratedUpdate(node=node))
            if collector is not None:
                collector.append(node)
        self.nodes_left_to_generate = max(self.nodes_left_to_generate - 1, 0)

    def _signal_contradiction(self, error: GenerationError) -> None:
        log_contradiction(logger, self.seed, error.node_index)
        self.status = InternalGeneratorStatus.FAILED
        self.error = error
        self._propagation_stack.clear()
        self._send(FailedUpdate(node_index=error.node_index))

    # -------------------------------------------------------------------------
    # Output
    # -------------------------------------------------------------------------

    def to_grid_data(self) -> GridData[ModelInstance]:
        """The generated grid. Only meaningful once every node is generated."""
        return GridData(
            self.grid,
            [self.rules.model_instance(self._get_model_index(n)) for n in self.grid.indexes()],
        )
