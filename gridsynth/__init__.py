"""
gridsynth - Model synthesis / wave function collapse for 2D and 3D grids.

Fills a cartesian grid with models so that every pair of adjacent nodes
respects the declared socket connections. Generation is deterministic for
a given seed, and retried with derived seeds on contradictions.

Main entry points:
- RulesBuilder: compiles models and socket connections into Rules
- GeneratorBuilder: creates a Generator for some Rules and a GridDefinition
- QueuedObserver / QueuedStatefulObserver: follow a generation from any thread

Example usage:
    from gridsynth import (
        GeneratorBuilder, GridDefinition, RngMode, RulesBuilder,
        SocketCollection, SocketsCartesian2D,
    )

    sockets = SocketCollection()
    white, black = sockets.create(), sockets.create()
    sockets.add_connection(white, [black])

    models = [
        SocketsCartesian2D.mono(white).new_model().with_name("white"),
        SocketsCartesian2D.mono(black).new_model().with_name("black"),
    ]
    rules = RulesBuilder.cartesian_2d(models, sockets).build()
    grid = GridDefinition.new_cartesian_2d(8, 8)

    generator = GeneratorBuilder(rules, grid).with_rng(RngMode.seeded(42)).build()
    gen_info, grid_data = generator.generate_grid()
"""

from .errors import (
    GenerationError,
    GeneratorBuilderError,
    IllegalModelError,
    InvalidModelIndexError,
    InvalidModelRefError,
    InvalidNodeIndexError,
    NodeSetError,
    ProcGenError,
    RulesError,
)
from .grid import (
    CoordinateSystem,
    Direction,
    GridData,
    GridDefinition,
    GridPosition,
)
from .rules import (
    ALL_MODEL_ROTATIONS,
    Model,
    ModelInstance,
    ModelRotation,
    Rules,
    RulesBuilder,
    Socket,
    SocketCollection,
    SocketsCartesian2D,
    SocketsCartesian3D,
)
from .generator import (
    GeneratedNode,
    GenerationStatus,
    GenInfo,
    Generator,
    GeneratorBuilder,
    GeneratorConfig,
    ModelSelectionHeuristic,
    NodeSelectionHeuristic,
    QueuedObserver,
    QueuedStatefulObserver,
    RngMode,
)
from .logging_config import setup_logging

__all__ = [
    "ALL_MODEL_ROTATIONS",
    "CoordinateSystem",
    "Direction",
    "GenInfo",
    "GeneratedNode",
    "GenerationError",
    "GenerationStatus",
    "Generator",
    "GeneratorBuilder",
    "GeneratorBuilderError",
    "GeneratorConfig",
    "GridData",
    "GridDefinition",
    "GridPosition",
    "IllegalModelError",
    "InvalidModelIndexError",
    "InvalidModelRefError",
    "InvalidNodeIndexError",
    "Model",
    "ModelInstance",
    "ModelRotation",
    "ModelSelectionHeuristic",
    "NodeSelectionHeuristic",
    "NodeSetError",
    "ProcGenError",
    "QueuedObserver",
    "QueuedStatefulObserver",
    "RngMode",
    "Rules",
    "RulesBuilder",
    "RulesError",
    "Socket",
    "SocketCollection",
    "SocketsCartesian2D",
    "SocketsCartesian3D",
    "setup_logging",
]
