"""Tests for gridsynth.generator.heuristics module."""

import math
import random

import pytest

from gridsynth import Rules, RulesBuilder, SocketCollection, SocketsCartesian2D
from gridsynth.generator.heuristics import (
    MinimumEntropySelector,
    MinimumRemainingValueSelector,
    ModelSelectionHeuristic,
    NodeSelectionHeuristic,
    RandomSelector,
    create_node_selector,
    entropy,
    select_model,
)


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def weighted_rules() -> Rules:
    """Two compatible models weighing 1 and 3."""
    sockets = SocketCollection()
    a = sockets.create()
    sockets.add_connection(a, [a])
    models = [
        SocketsCartesian2D.mono(a).new_model().with_weight(1.0),
        SocketsCartesian2D.mono(a).new_model().with_weight(3.0),
    ]
    return RulesBuilder.cartesian_2d(models, sockets).build()


class TestMinimumRemainingValue:
    """Tests for MinimumRemainingValueSelector."""

    def test_picks_fewest_models(self, rng: random.Random):
        """Test the node with the fewest possible models wins."""
        selector = MinimumRemainingValueSelector()
        assert selector.select_node([3, 1, 2, 4], rng) == 2

    def test_ignores_generated_nodes(self, rng: random.Random):
        """Test nodes with at most one model are never picked."""
        selector = MinimumRemainingValueSelector()
        assert selector.select_node([1, 1, 0], rng) is None

    def test_breaks_ties_randomly(self):
        """Test equal candidates are not always picked in order."""
        selector = MinimumRemainingValueSelector()
        picks = {selector.select_node([2] * 10, random.Random(seed)) for seed in range(50)}
        assert len(picks) > 1


class TestEntropy:
    """Tests for the entropy function and MinimumEntropySelector."""

    def test_uniform_entropy(self):
        """Test n equal weights give ln(n)."""
        assert entropy(4.0, 0.0) == pytest.approx(math.log(4))

    @pytest.mark.parametrize("weight_sum", [0.0, -1e-12])
    def test_empty_entropy(self, weight_sum: float):
        """Test a drained weight sum gives 0 instead of a math error."""
        assert entropy(weight_sum, 0.0) == 0.0

    def test_initial_entropies(self, weighted_rules: Rules):
        """Test every node starts with the entropy of all the models."""
        selector = MinimumEntropySelector(weighted_rules, 3)
        expected = math.log(4.0) - (3.0 * math.log(3.0)) / 4.0
        assert all(selector.entropy_of(n) == pytest.approx(expected) for n in range(3))

    def test_ban_lowers_entropy(self, weighted_rules: Rules, rng: random.Random):
        """Test banning updates the node entropy and drives the selection."""
        selector = MinimumEntropySelector(weighted_rules, 3)
        selector.handle_ban(1, 1, weighted_rules.weight_unchecked(1))
        assert selector.entropy_of(1) == pytest.approx(0.0)
        # Counts are still > 1 everywhere: entropy alone picks node 1
        assert selector.select_node([2, 2, 2], rng) == 1

    def test_reinitialize(self, weighted_rules: Rules):
        """Test reinitialize restores the initial entropies."""
        selector = MinimumEntropySelector(weighted_rules, 2)
        initial = selector.entropy_of(0)
        selector.handle_ban(0, 0, weighted_rules.weight_unchecked(0))
        selector.reinitialize()
        assert selector.entropy_of(0) == pytest.approx(initial)

    def test_ignores_generated_nodes(self, weighted_rules: Rules, rng: random.Random):
        """Test a low entropy node with a single model is not picked."""
        selector = MinimumEntropySelector(weighted_rules, 2)
        selector.handle_ban(0, 1, weighted_rules.weight_unchecked(1))
        assert selector.select_node([1, 2], rng) == 1


class TestRandomSelector:
    """Tests for RandomSelector."""

    def test_only_candidates(self, rng: random.Random):
        """Test only nodes with more than one model are picked."""
        selector = RandomSelector()
        for _ in range(20):
            assert selector.select_node([1, 3, 0, 2], rng) in (1, 3)
        assert selector.select_node([1, 0], rng) is None


class TestFactories:
    """Tests for create_node_selector and select_model."""

    @pytest.mark.parametrize("heuristic,expected_type", [
        (NodeSelectionHeuristic.MINIMUM_REMAINING_VALUE, MinimumRemainingValueSelector),
        (NodeSelectionHeuristic.MINIMUM_ENTROPY, MinimumEntropySelector),
        (NodeSelectionHeuristic.RANDOM, RandomSelector),
    ])
    def test_create_node_selector(self, weighted_rules: Rules, heuristic, expected_type):
        """Test each heuristic maps to its selector."""
        assert isinstance(create_node_selector(heuristic, weighted_rules, 4), expected_type)

    def test_select_single_model(self, weighted_rules: Rules, rng: random.Random):
        """Test a lone possible model is always picked."""
        for _ in range(10):
            assert select_model(ModelSelectionHeuristic.WEIGHTED_PROBABILITY, [0], weighted_rules, rng) == 0

    def test_select_among_possible(self, weighted_rules: Rules, rng: random.Random):
        """Test picks stay within the possible models."""
        picks = {
            select_model(ModelSelectionHeuristic.WEIGHTED_PROBABILITY, [0, 1], weighted_rules, rng)
            for _ in range(100)
        }
        assert picks == {0, 1}

    def test_select_follows_weights(self, weighted_rules: Rules, rng: random.Random):
        """Test a model three times heavier is picked about three times as often."""
        draws = 10_000
        heavy = sum(
            select_model(ModelSelectionHeuristic.WEIGHTED_PROBABILITY, [0, 1], weighted_rules, rng)
            for _ in range(draws)
        )
        assert 0.72 < heavy / draws < 0.78
