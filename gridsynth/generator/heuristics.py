"""
Node and model selection heuristics.

Each generation step picks one undetermined node, then one of the models
still possible on it. The choice of node has a large impact on the
contradiction rate; the choice of model shapes the output density.

Usage:
    selector = create_node_selector(NodeSelectionHeuristic.MINIMUM_ENTROPY, rules, grid.total_size)
    node = selector.select_node(possible_models_counts, rng)
"""

from __future__ import annotations

import math
import random
import sys
from abc import ABC, abstractmethod
from enum import Enum
from typing import Sequence

from ..constants import MAX_NOISE_VALUE
from ..rules.rules import Rules


class NodeSelectionHeuristic(Enum):
    """How the next node to generate is chosen.

    MINIMUM_REMAINING_VALUE and MINIMUM_ENTROPY behave alike when all models
    have roughly the same weight. RANDOM often causes a very high failure
    rate, except for very simple rules.
    """

    MINIMUM_REMAINING_VALUE = "minimum_remaining_value"
    MINIMUM_ENTROPY = "minimum_entropy"
    RANDOM = "random"


class ModelSelectionHeuristic(Enum):
    """How a model is chosen for the selected node."""

    # Random pick among the possible models, weighted by the models weights
    WEIGHTED_PROBABILITY = "weighted_probability"


# =============================================================================
# Node selection
# =============================================================================


class NodeSelector(ABC):
    """Stateful implementation of a NodeSelectionHeuristic."""

    @abstractmethod
    def select_node(self, possible_models_counts: Sequence[int], rng: random.Random) -> int | None:
        """Pick a node with more than one possible model, or None if there is none."""
        ...

    def handle_ban(self, node_index: int, model_index: int, weight: float) -> None:
        """Called every time a model is banned from a node."""
        pass

    def reinitialize(self) -> None:
        """Called when the generator state is reset."""
        pass


class MinimumRemainingValueSelector(NodeSelector):
    """Picks the node with the fewest possible models. Ties are broken randomly."""

    def select_node(self, possible_models_counts: Sequence[int], rng: random.Random) -> int | None:
        min_value = sys.float_info.max
        picked_node = None
        for index, count in enumerate(possible_models_counts):
            if count > 1:
                # Noise so that equal candidates are not picked in evaluation order
                value = count + MAX_NOISE_VALUE * rng.random()
                if value < min_value:
                    min_value = value
                    picked_node = index
        return picked_node


def entropy(weight_sum: float, weight_log_weight_sum: float) -> float:
    """Shannon entropy of a node from its running weight sums.

    Accumulated float error can push the weight sum to zero or below once
    almost every model is banned: the entropy is then 0.
    """
    if weight_sum <= 0.0:
        return 0.0
    return math.log(weight_sum) - weight_log_weight_sum / weight_sum


class NodeEntropyData:
    """Running entropy data of one node."""

    __slots__ = ("entropy", "weight_sum", "weight_log_weight_sum")

    def __init__(self, weight_sum: float, weight_log_weight_sum: float):
        self.weight_sum = weight_sum
        self.weight_log_weight_sum = weight_log_weight_sum
        self.entropy = entropy(weight_sum, weight_log_weight_sum)

    def copy(self) -> NodeEntropyData:
        return NodeEntropyData(self.weight_sum, self.weight_log_weight_sum)


class MinimumEntropySelector(NodeSelector):
    """Picks the node with the lowest Shannon entropy. Ties are broken randomly.

    Entropies are updated in O(1) on each ban from running sums of
    `weight` and `weight * ln(weight)` over the possible models.
    """

    def __init__(self, rules: Rules, node_count: int):
        self._models_weight_log_weights: list[float] = []
        weight_sum = 0.0
        weight_log_weight_sum = 0.0
        for model_index in range(rules.models_count):
            weight = rules.weight_unchecked(model_index)
            weight_log_weight = weight * math.log(weight)
            self._models_weight_log_weights.append(weight_log_weight)
            weight_sum += weight
            weight_log_weight_sum += weight_log_weight

        self._initial_data = NodeEntropyData(weight_sum, weight_log_weight_sum)
        self._node_entropies = [self._initial_data.copy() for _ in range(node_count)]

    def entropy_of(self, node_index: int) -> float:
        return self._node_entropies[node_index].entropy

    def reinitialize(self) -> None:
        # Per model weights do not change, only the nodes are reset
        self._node_entropies = [self._initial_data.copy() for _ in self._node_entropies]

    def handle_ban(self, node_index: int, model_index: int, weight: float) -> None:
        data = self._node_entropies[node_index]
        data.weight_sum -= weight
        data.weight_log_weight_sum -= self._models_weight_log_weights[model_index]
        data.entropy = entropy(data.weight_sum, data.weight_log_weight_sum)

    def select_node(self, possible_models_counts: Sequence[int], rng: random.Random) -> int | None:
        min_value = sys.float_info.max
        picked_node = None
        for index, count in enumerate(possible_models_counts):
            node_entropy = self._node_entropies[index].entropy
            # Noise is only drawn for nodes that can still win
            if count > 1 and node_entropy < min_value:
                value = node_entropy + MAX_NOISE_VALUE * rng.random()
                if value < min_value:
                    min_value = value
                    picked_node = index
        return picked_node


class RandomSelector(NodeSelector):
    """Picks any node that is not generated yet."""

    def select_node(self, possible_models_counts: Sequence[int], rng: random.Random) -> int | None:
        candidates = [index for index, count in enumerate(possible_models_counts) if count > 1]
        if not candidates:
            return None
        return candidates[rng.randrange(len(candidates))]


def create_node_selector(
    heuristic: NodeSelectionHeuristic,
    rules: Rules,
    node_count: int,
) -> NodeSelector:
    """Build the selector implementing `heuristic`."""
    if heuristic == NodeSelectionHeuristic.MINIMUM_REMAINING_VALUE:
        return MinimumRemainingValueSelector()
    if heuristic == NodeSelectionHeuristic.MINIMUM_ENTROPY:
        return MinimumEntropySelector(rules, node_count)
    if heuristic == NodeSelectionHeuristic.RANDOM:
        return RandomSelector()
    raise ValueError(f"Unknown node selection heuristic: {heuristic}")


# =============================================================================
# Model selection
# =============================================================================


def select_model(
    heuristic: ModelSelectionHeuristic,
    possible_models: Sequence[int],
    rules: Rules,
    rng: random.Random,
) -> int:
    """Pick one of `possible_models`, which must not be empty."""
    if heuristic == ModelSelectionHeuristic.WEIGHTED_PROBABILITY:
        weights = [rules.weight_unchecked(m) for m in possible_models]
        return rng.choices(possible_models, weights=weights)[0]
    raise ValueError(f"Unknown model selection heuristic: {heuristic}")
