"""Grid definition and grid data.

A GridDefinition only describes the shape of the grid: its size on each
axis, which axes loop, and how positions map to linear node indexes.
It holds no generation state.

Linear addressing: index = x + y * size_x + z * (size_x * size_y)
"""

from __future__ import annotations

from typing import Generic, Iterator, NamedTuple, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field

from .direction import CoordinateSystem, Direction, GridDelta

T = TypeVar("T")


class GridPosition(NamedTuple):
    """A position in a grid.

    2D grids always have z == 0.
    """

    x: int
    y: int
    z: int = 0


# A node can be referenced by its linear index or by its position
NodeRef = Union[int, GridPosition]


class GridDefinition(BaseModel):
    """Shape and topology of a cartesian grid.

    Looping axes wrap around: moving past the last cell lands on the first one.
    Non-looping axes have no neighbour past their bounds.
    """

    model_config = ConfigDict(frozen=True)

    size_x: int = Field(ge=1)
    size_y: int = Field(ge=1)
    size_z: int = Field(default=1, ge=1)
    looping_x: bool = False
    looping_y: bool = False
    looping_z: bool = False
    coord_system: CoordinateSystem = CoordinateSystem.CARTESIAN_2D

    @classmethod
    def new_cartesian_2d(
        cls,
        size_x: int,
        size_y: int,
        looping_x: bool = False,
        looping_y: bool = False,
    ) -> GridDefinition:
        """Create a 2D grid (4 directions, z always 0)."""
        return cls(
            size_x=size_x,
            size_y=size_y,
            size_z=1,
            looping_x=looping_x,
            looping_y=looping_y,
            looping_z=False,
            coord_system=CoordinateSystem.CARTESIAN_2D,
        )

    @classmethod
    def new_cartesian_3d(
        cls,
        size_x: int,
        size_y: int,
        size_z: int,
        looping_x: bool = False,
        looping_y: bool = False,
        looping_z: bool = False,
    ) -> GridDefinition:
        """Create a 3D grid (6 directions)."""
        return cls(
            size_x=size_x,
            size_y=size_y,
            size_z=size_z,
            looping_x=looping_x,
            looping_y=looping_y,
            looping_z=looping_z,
            coord_system=CoordinateSystem.CARTESIAN_3D,
        )

    # -------------------------------------------------------------------------
    # Sizes
    # -------------------------------------------------------------------------

    @property
    def size_xy(self) -> int:
        return self.size_x * self.size_y

    @property
    def total_size(self) -> int:
        """Number of nodes in the grid."""
        return self.size_x * self.size_y * self.size_z

    @property
    def directions(self) -> tuple[Direction, ...]:
        return self.coord_system.directions

    def indexes(self) -> range:
        """All node indexes of the grid."""
        return range(self.total_size)

    def is_valid_index(self, node_index: int) -> bool:
        return 0 <= node_index < self.total_size

    def is_valid_position(self, position: GridPosition) -> bool:
        return (
            0 <= position.x < self.size_x
            and 0 <= position.y < self.size_y
            and 0 <= position.z < self.size_z
        )

    # -------------------------------------------------------------------------
    # Addressing
    # -------------------------------------------------------------------------

    def index(self, x: int, y: int, z: int = 0) -> int:
        """Linear index of a position.

        NO CHECK is done to verify that the position is inside the grid.
        """
        return x + y * self.size_x + z * self.size_xy

    def index_2d(self, x: int, y: int) -> int:
        """Linear index of a position, ignoring the Z axis."""
        return x + y * self.size_x

    def index_from_position(self, position: GridPosition) -> int:
        return self.index(position.x, position.y, position.z)

    def position(self, node_index: int) -> GridPosition:
        """Position of a linear index (inverse of index())."""
        return GridPosition(
            x=node_index % self.size_x,
            y=(node_index // self.size_x) % self.size_y,
            z=node_index // self.size_xy,
        )

    def node_index(self, node_ref: NodeRef) -> int:
        """Resolve a node reference (index or position) to a linear index."""
        if isinstance(node_ref, GridPosition):
            return self.index_from_position(node_ref)
        return node_ref

    # -------------------------------------------------------------------------
    # Neighbours
    # -------------------------------------------------------------------------

    def next_position(self, position: GridPosition, delta: GridDelta) -> GridPosition | None:
        """Position reached when moving by `delta` from `position`.

        Returns None if the destination is outside a non-looping axis.
        """
        coords = []
        for pos, step, size, looping in (
            (position.x, delta.dx, self.size_x, self.looping_x),
            (position.y, delta.dy, self.size_y, self.looping_y),
            (position.z, delta.dz, self.size_z, self.looping_z),
        ):
            next_pos = pos + step
            if looping:
                next_pos %= size
            elif next_pos < 0 or next_pos >= size:
                return None
            coords.append(next_pos)
        return GridPosition(*coords)

    def next_index(self, position: GridPosition, direction: Direction) -> int | None:
        """Index of the neighbour of `position` in `direction`, or None if there is none."""
        next_pos = self.next_position(position, direction.delta)
        if next_pos is None:
            return None
        return self.index_from_position(next_pos)

    def neighbour_indexes(self) -> list[tuple[int | None, ...]]:
        """Neighbour table: `table[node][direction.value]` is the neighbour index or None."""
        directions = self.directions
        table = []
        for node_index in self.indexes():
            position = self.position(node_index)
            table.append(tuple(self.next_index(position, d) for d in directions))
        return table

    # -------------------------------------------------------------------------
    # Grid data
    # -------------------------------------------------------------------------

    def new_grid_data(self, value: T) -> GridData[T]:
        """Create a GridData of this grid's size, every element set to `value`."""
        return GridData(self, [value] * self.total_size)


class GridData(Generic[T]):
    """A GridDefinition plus one element per node, in a linear buffer.

    Usage:
        grid = GridDefinition.new_cartesian_2d(10, 10)
        data = grid.new_grid_data(0)
        data.set_2d(3, 4, 1)
    """

    def __init__(self, grid: GridDefinition, data: list[T]):
        """Prefer GridDefinition.new_grid_data() to get a correctly sized buffer.

        Args:
            grid: Grid this data is laid out on
            data: One element per node, in linear index order
        """
        if len(data) != grid.total_size:
            raise ValueError(
                f"GridData needs {grid.total_size} elements, got {len(data)}"
            )
        self._grid = grid
        self._data = data

    @property
    def grid(self) -> GridDefinition:
        return self._grid

    @property
    def nodes(self) -> list[T]:
        return self._data

    def get(self, node_index: int) -> T:
        return self._data[node_index]

    def set(self, node_index: int, value: T) -> None:
        self._data[node_index] = value

    def get_2d(self, x: int, y: int) -> T:
        return self._data[self._grid.index_2d(x, y)]

    def set_2d(self, x: int, y: int, value: T) -> None:
        self._data[self._grid.index_2d(x, y)] = value

    def get_3d(self, x: int, y: int, z: int) -> T:
        return self._data[self._grid.index(x, y, z)]

    def set_3d(self, x: int, y: int, z: int, value: T) -> None:
        self._data[self._grid.index(x, y, z)] = value

    def reset(self, value: T) -> None:
        """Set every element to `value`."""
        self._data = [value] * self._grid.total_size

    def __len__(self) -> int:
        return len(self._data)

    def __iter__(self) -> Iterator[T]:
        return iter(self._data)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GridData):
            return NotImplemented
        return self._grid == other._grid and self._data == other._data

    def __repr__(self) -> str:
        g = self._grid
        return f"GridData({g.size_x}x{g.size_y}x{g.size_z}, {len(self._data)} nodes)"
