"""Tests for gridsynth.generator.observer module."""

import queue
import threading

import pytest
from pydantic import TypeAdapter

from gridsynth import (
    GeneratedNode,
    GenerationError,
    GeneratorBuilder,
    GridDefinition,
    ModelInstance,
    RngMode,
    Rules,
)
from gridsynth.generator import (
    FailedUpdate,
    GeneratedUpdate,
    GenerationUpdate,
    QueuedObserver,
    QueuedStatefulObserver,
    ReinitializingUpdate,
)

BLACK = 1


class TestUpdates:
    """Tests for the update models."""

    def test_discriminated_union(self):
        """Test updates are parsed by their type tag."""
        adapter = TypeAdapter(GenerationUpdate)
        assert adapter.validate_python({"type": "failed", "node_index": 3}) == FailedUpdate(node_index=3)
        assert adapter.validate_python({"type": "reinitializing", "seed": 5}) == ReinitializingUpdate(seed=5)
        generated = adapter.validate_python({
            "type": "generated",
            "node": {"node_index": 1, "model_instance": {"model_index": 2, "rotation": 90}},
        })
        assert isinstance(generated, GeneratedUpdate)
        assert generated.node.model_instance.model_index == 2

    def test_json_round_trip(self):
        """Test updates survive a JSON dump, e.g. to stream them elsewhere."""
        adapter = TypeAdapter(GenerationUpdate)
        update = GeneratedUpdate(
            node=GeneratedNode(node_index=4, model_instance=ModelInstance(model_index=1)),
        )
        assert adapter.validate_json(update.model_dump_json()) == update


class TestQueuedObserver:
    """Tests for QueuedObserver."""

    def test_empty_queue(self):
        """Test dequeuing from an empty queue gives nothing."""
        observer = QueuedObserver(queue.SimpleQueue())
        assert observer.dequeue_all() == []
        assert observer.dequeue_one() is None

    def test_builder_observer_sees_pregen(self, checkerboard_rules: Rules, grid_8x8: GridDefinition):
        """Test observers added to the builder receive the updates sent during build."""
        builder = GeneratorBuilder(checkerboard_rules, grid_8x8).with_initial_nodes([(0, BLACK)])
        observer = builder.add_queued_observer()
        builder.build()
        updates = observer.dequeue_all()
        assert len(updates) == 64
        assert all(isinstance(u, GeneratedUpdate) for u in updates)

    def test_late_observer_misses_past_updates(self, terrain_rules: Rules, grid_8x8: GridDefinition):
        """Test observers created from a generator only see future updates."""
        generator = GeneratorBuilder(terrain_rules, grid_8x8).with_rng(RngMode.seeded(0)).build()
        generator.select_and_propagate()
        observer = QueuedObserver.from_generator(generator)
        assert observer.dequeue_one() is None
        generator.select_and_propagate()
        assert isinstance(observer.dequeue_one(), GeneratedUpdate)

    def test_consumer_thread(self, terrain_rules: Rules, grid_8x8: GridDefinition):
        """Test updates can be consumed from another thread."""
        generator = GeneratorBuilder(terrain_rules, grid_8x8).with_rng(RngMode.seeded(1)).build()
        receiver = generator.add_observer_queue()
        seen: list = []

        def consume():
            while len(seen) < grid_8x8.total_size:
                seen.append(receiver.get(timeout=5))

        consumer = threading.Thread(target=consume)
        consumer.start()
        generator.generate()
        consumer.join(timeout=10)

        assert sorted(u.node.node_index for u in seen) == list(grid_8x8.indexes())


class TestQueuedStatefulObserver:
    """Tests for QueuedStatefulObserver."""

    def test_snapshot_follows_generation(self, terrain_rules: Rules, grid_8x8: GridDefinition):
        """Test the snapshot matches the generated grid once every update is applied."""
        generator = GeneratorBuilder(terrain_rules, grid_8x8).with_rng(RngMode.seeded(2)).build()
        observer = QueuedStatefulObserver.from_generator(generator)
        assert observer.grid_data == grid_8x8.new_grid_data(None)

        _, grid_data = generator.generate_grid()
        observer.dequeue_all()

        assert observer.grid_data == grid_data

    def test_dequeue_one_applies_update(self, terrain_rules: Rules, grid_8x8: GridDefinition):
        """Test dequeue_one applies and returns a single update."""
        generator = GeneratorBuilder(terrain_rules, grid_8x8).with_rng(RngMode.seeded(2)).build()
        observer = QueuedStatefulObserver.from_generator(generator)
        generator.set_and_propagate(9, 0)

        update = observer.dequeue_one()

        assert update == GeneratedUpdate(
            node=GeneratedNode(node_index=9, model_instance=ModelInstance(model_index=0)),
        )
        assert observer.grid_data.get(9) == ModelInstance(model_index=0)

    def test_reinitialize_clears_snapshot(self, checkerboard_rules: Rules, grid_8x8: GridDefinition):
        """Test a reinitialization empties the snapshot before pregen fills it again."""
        builder = GeneratorBuilder(checkerboard_rules, grid_8x8).with_initial_nodes([(0, BLACK)])
        observer = builder.add_queued_stateful_observer()
        generator = builder.build()
        observer.dequeue_all()
        assert observer.grid_data.get(63) is not None

        generator.reinitialize()
        update = observer.dequeue_one()
        assert isinstance(update, ReinitializingUpdate)
        assert all(node is None for node in observer.grid_data)

        observer.dequeue_all()
        assert observer.grid_data == generator.to_grid_data()

    def test_failure_clears_snapshot(self, checkerboard_rules: Rules, odd_torus: GridDefinition):
        """Test a failed update empties the snapshot."""
        generator = (
            GeneratorBuilder(checkerboard_rules, odd_torus)
            .with_rng(RngMode.seeded(4))
            .with_max_retry_count(0)
            .build()
        )
        observer = QueuedStatefulObserver.from_generator(generator)
        with pytest.raises(GenerationError):
            generator.select_and_propagate()
        observer.dequeue_all()
        assert all(node is None for node in observer.grid_data)
