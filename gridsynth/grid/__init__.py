"""Cartesian grid utilities: directions, grid definitions and grid data."""

from .direction import (
    CARTESIAN_2D_DIRECTIONS,
    CARTESIAN_2D_ROTATION_AXIS,
    CARTESIAN_3D_DIRECTIONS,
    CoordinateSystem,
    Direction,
    GridDelta,
)
from .definition import GridData, GridDefinition, GridPosition, NodeRef

__all__ = [
    "CARTESIAN_2D_DIRECTIONS",
    "CARTESIAN_2D_ROTATION_AXIS",
    "CARTESIAN_3D_DIRECTIONS",
    "CoordinateSystem",
    "Direction",
    "GridDelta",
    "GridData",
    "GridDefinition",
    "GridPosition",
    "NodeRef",
]
