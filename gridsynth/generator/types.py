"""Value types shared by the generator modules."""

from __future__ import annotations

import random
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from ..rules.model import ModelInstance


class GenerationStatus(Enum):
    """Status of a generation after a successful operation."""

    ONGOING = "ongoing"
    DONE = "done"


class InternalGeneratorStatus(Enum):
    """Status of the generator state, including failure."""

    ONGOING = "ongoing"
    DONE = "done"
    FAILED = "failed"


class NodeSetStatus(Enum):
    """Whether a model can be set on a node, or is set on it already."""

    ALREADY_SET = "already_set"
    CAN_BE_SET = "can_be_set"


class RngMode(BaseModel):
    """How the generator seeds its random number generator.

    Usage:
        RngMode.seeded(42)
        RngMode.random_seed()
    """

    model_config = ConfigDict(frozen=True)

    seed: int | None = Field(default=None, ge=0, lt=2**64)

    @classmethod
    def seeded(cls, seed: int) -> RngMode:
        """Always use `seed` for the first attempt."""
        return cls(seed=seed)

    @classmethod
    def random_seed(cls) -> RngMode:
        """Draw a random seed when the generator is built."""
        return cls(seed=None)

    @property
    def is_seeded(self) -> bool:
        return self.seed is not None

    def resolve_seed(self) -> int:
        """The seed to use: the fixed one, or a freshly drawn 64 bits value."""
        if self.seed is not None:
            return self.seed
        return random.getrandbits(64)


class GenInfo(BaseModel):
    """Information about a successful generation."""

    model_config = ConfigDict(frozen=True)

    # Number of attempts, the successful one included
    try_count: int


class GeneratedNode(BaseModel):
    """A node and the model instance generated on it."""

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    node_index: int
    model_instance: ModelInstance
