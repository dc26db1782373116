"""Model synthesis generator: builder, generator, heuristics and observers."""

from .types import GeneratedNode, GenerationStatus, GenInfo, InternalGeneratorStatus, RngMode
from .heuristics import ModelSelectionHeuristic, NodeSelectionHeuristic
from .observer import (
    FailedUpdate,
    GeneratedUpdate,
    GenerationUpdate,
    QueuedObserver,
    QueuedStatefulObserver,
    ReinitializingUpdate,
)
from .generator import Generator
from .builder import GeneratorBuilder, GeneratorConfig

__all__ = [
    "FailedUpdate",
    "GenInfo",
    "GeneratedNode",
    "GeneratedUpdate",
    "GenerationStatus",
    "GenerationUpdate",
    "Generator",
    "GeneratorBuilder",
    "GeneratorConfig",
    "InternalGeneratorStatus",
    "ModelSelectionHeuristic",
    "NodeSelectionHeuristic",
    "QueuedObserver",
    "QueuedStatefulObserver",
    "ReinitializingUpdate",
    "RngMode",
]
