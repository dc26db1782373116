"""
Generation updates and the observers consuming them.

The generator pushes every update onto one unbounded queue per observer.
Observers may live on another thread: the queue is the only shared object.

Usage:
    observer = QueuedStatefulObserver.from_generator(generator)
    generator.select_and_propagate()
    observer.dequeue_all()
    observer.grid_data.get(0)  # ModelInstance or None
"""

from __future__ import annotations

import queue
from typing import TYPE_CHECKING, Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Discriminator

from ..grid.definition import GridData, GridDefinition
from ..rules.model import ModelInstance
from .types import GeneratedNode

if TYPE_CHECKING:
    from .generator import Generator


# --- Updates ---

class GeneratedUpdate(BaseModel):
    """A node has been generated."""
    model_config = ConfigDict(frozen=True)
    type: Literal["generated"] = "generated"

    node: GeneratedNode


class ReinitializingUpdate(BaseModel):
    """The generator is being reset to its initial state, with a new seed."""
    model_config = ConfigDict(frozen=True)
    type: Literal["reinitializing"] = "reinitializing"

    seed: int


class FailedUpdate(BaseModel):
    """The generation failed because of a contradiction at `node_index`."""
    model_config = ConfigDict(frozen=True)
    type: Literal["failed"] = "failed"

    node_index: int


GenerationUpdate = Annotated[
    Union[
        GeneratedUpdate,
        ReinitializingUpdate,
        FailedUpdate,
    ],
    Discriminator("type"),
]

UpdateQueue = queue.SimpleQueue


# --- Observers ---

class QueuedObserver:
    """Observer that only queues the updates sent by a generator."""

    def __init__(self, receiver: UpdateQueue):
        self._receiver = receiver

    @classmethod
    def from_generator(cls, generator: Generator) -> QueuedObserver:
        """Create an observer receiving the future updates of `generator`."""
        return cls(generator.add_observer_queue())

    def dequeue_all(self) -> list[GenerationUpdate]:
        """All queued updates, in emission order. May be empty."""
        updates = []
        while True:
            try:
                updates.append(self._receiver.get_nowait())
            except queue.Empty:
                return updates

    def dequeue_one(self) -> GenerationUpdate | None:
        """The oldest queued update, or None if there is none."""
        try:
            return self._receiver.get_nowait()
        except queue.Empty:
            return None


class QueuedStatefulObserver:
    """Observer that also keeps a snapshot of the generation in a GridData.

    Generated updates set their node. Reinitializing and Failed updates reset
    every node to None.
    """

    def __init__(self, grid: GridDefinition, receiver: UpdateQueue):
        self._grid_data: GridData[ModelInstance | None] = grid.new_grid_data(None)
        self._receiver = receiver

    @classmethod
    def from_generator(cls, generator: Generator) -> QueuedStatefulObserver:
        """Create an observer receiving the future updates of `generator`."""
        return cls(generator.grid, generator.add_observer_queue())

    @property
    def grid_data(self) -> GridData[ModelInstance | None]:
        return self._grid_data

    def _apply(self, update: GenerationUpdate) -> None:
        if isinstance(update, GeneratedUpdate):
            self._grid_data.set(update.node.node_index, update.node.model_instance)
        else:
            self._grid_data.reset(None)

    def dequeue_all(self) -> None:
        """Apply every queued update to the snapshot."""
        while True:
            try:
                update = self._receiver.get_nowait()
            except queue.Empty:
                return
            self._apply(update)

    def dequeue_one(self) -> GenerationUpdate | None:
        """Apply the oldest queued update and return it, or None if there is none."""
        try:
            update = self._receiver.get_nowait()
        except queue.Empty:
            return None
        self._apply(update)
        return update
