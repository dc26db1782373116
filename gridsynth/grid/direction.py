"""Directions and coordinate systems for cartesian grids.

Directions are indexed so that their value can be used directly as an offset
into per-direction arrays (supports counts, allowed neighbours, sockets).

The opposite property is crucial for propagation:
if variant A allows variant B on its X+ side, then B must allow A on its X- side.
"""

from __future__ import annotations

from enum import Enum
from typing import NamedTuple


class GridDelta(NamedTuple):
    """A displacement on a grid."""

    dx: int
    dy: int
    dz: int


class Direction(Enum):
    """Oriented axis of a cartesian coordinate system.

    The value is the direction index used by every per-direction array.
    """

    X_FORWARD = 0
    Y_FORWARD = 1
    X_BACKWARD = 2
    Y_BACKWARD = 3
    Z_FORWARD = 4
    Z_BACKWARD = 5

    @property
    def opposite(self) -> Direction:
        """Get the opposite direction."""
        return _DIRECTION_OPPOSITES[self]

    @property
    def delta(self) -> GridDelta:
        """Get the (dx, dy, dz) offset for this direction."""
        return _DIRECTION_DELTAS[self]

    @property
    def rotation_basis(self) -> tuple[Direction, Direction, Direction, Direction]:
        """The four directions orthogonal to this axis, counter-clockwise around it."""
        return _ROTATION_BASES[self]


# Lookup tables for Direction properties
_DIRECTION_OPPOSITES: dict[Direction, Direction] = {
    Direction.X_FORWARD: Direction.X_BACKWARD,
    Direction.X_BACKWARD: Direction.X_FORWARD,
    Direction.Y_FORWARD: Direction.Y_BACKWARD,
    Direction.Y_BACKWARD: Direction.Y_FORWARD,
    Direction.Z_FORWARD: Direction.Z_BACKWARD,
    Direction.Z_BACKWARD: Direction.Z_FORWARD,
}

_DIRECTION_DELTAS: dict[Direction, GridDelta] = {
    Direction.X_FORWARD: GridDelta(1, 0, 0),
    Direction.Y_FORWARD: GridDelta(0, 1, 0),
    Direction.X_BACKWARD: GridDelta(-1, 0, 0),
    Direction.Y_BACKWARD: GridDelta(0, -1, 0),
    Direction.Z_FORWARD: GridDelta(0, 0, 1),
    Direction.Z_BACKWARD: GridDelta(0, 0, -1),
}

_ROTATION_BASES: dict[Direction, tuple[Direction, Direction, Direction, Direction]] = {
    Direction.X_FORWARD: (
        Direction.Y_FORWARD,
        Direction.Z_FORWARD,
        Direction.Y_BACKWARD,
        Direction.Z_BACKWARD,
    ),
    Direction.X_BACKWARD: (
        Direction.Z_FORWARD,
        Direction.Y_FORWARD,
        Direction.Z_BACKWARD,
        Direction.Y_BACKWARD,
    ),
    Direction.Y_FORWARD: (
        Direction.Z_FORWARD,
        Direction.X_FORWARD,
        Direction.Z_BACKWARD,
        Direction.X_BACKWARD,
    ),
    Direction.Y_BACKWARD: (
        Direction.X_FORWARD,
        Direction.Z_FORWARD,
        Direction.X_BACKWARD,
        Direction.Z_BACKWARD,
    ),
    Direction.Z_FORWARD: (
        Direction.X_FORWARD,
        Direction.Y_FORWARD,
        Direction.X_BACKWARD,
        Direction.Y_BACKWARD,
    ),
    Direction.Z_BACKWARD: (
        Direction.Y_FORWARD,
        Direction.X_FORWARD,
        Direction.Y_BACKWARD,
        Direction.X_BACKWARD,
    ),
}


class CoordinateSystem(Enum):
    """Right-handed cartesian coordinate systems.

    2D grids use 4 directions, 3D grids use 6.
    """

    CARTESIAN_2D = "cartesian_2d"
    CARTESIAN_3D = "cartesian_3d"

    @property
    def directions(self) -> tuple[Direction, ...]:
        """All directions of this coordinate system, ordered by index."""
        return _SYSTEM_DIRECTIONS[self]

    @property
    def default_rotation_axis(self) -> Direction:
        """Axis models are rotated around unless told otherwise."""
        return _SYSTEM_ROTATION_AXES[self]


CARTESIAN_2D_DIRECTIONS: tuple[Direction, ...] = (
    Direction.X_FORWARD,
    Direction.Y_FORWARD,
    Direction.X_BACKWARD,
    Direction.Y_BACKWARD,
)

CARTESIAN_3D_DIRECTIONS: tuple[Direction, ...] = CARTESIAN_2D_DIRECTIONS + (
    Direction.Z_FORWARD,
    Direction.Z_BACKWARD,
)

# In 2D the rotation axis cannot change: models turn around Z+.
CARTESIAN_2D_ROTATION_AXIS = Direction.Z_FORWARD

_SYSTEM_DIRECTIONS: dict[CoordinateSystem, tuple[Direction, ...]] = {
    CoordinateSystem.CARTESIAN_2D: CARTESIAN_2D_DIRECTIONS,
    CoordinateSystem.CARTESIAN_3D: CARTESIAN_3D_DIRECTIONS,
}

_SYSTEM_ROTATION_AXES: dict[CoordinateSystem, Direction] = {
    CoordinateSystem.CARTESIAN_2D: CARTESIAN_2D_ROTATION_AXIS,
    CoordinateSystem.CARTESIAN_3D: Direction.Y_FORWARD,
}
