"""Sockets: the connection points of models.

A model has zero or more sockets on each of its sides. Which sockets may
touch is not stored on the sockets or on the models but in a
SocketCollection, as an undirected compatibility relation.

Usage:
    sockets = SocketCollection()
    white, black = sockets.create(), sockets.create()
    sockets.add_connection(white, [black])

    white_model = SocketsCartesian2D.mono(white).new_model()
    black_model = SocketsCartesian2D.mono(black).new_model()
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, NamedTuple, Sequence

from .rotation import ALL_MODEL_ROTATIONS, ModelRotation

if TYPE_CHECKING:
    from .model import Model


class Socket(NamedTuple):
    """A typed connection point.

    `index` is unique per created socket. `rotation` stays ROT_0 except for
    sockets lying on the rotation axis of a rotated model: those share their
    index and differ by rotation.
    """

    index: int
    rotation: ModelRotation = ModelRotation.ROT_0

    def rotated(self, rotation: ModelRotation) -> Socket:
        return Socket(self.index, self.rotation.rotated(rotation))


class SocketCollection:
    """Creates sockets and records which of them can be connected.

    Connections have no direction: connecting `a` to `b` also connects `b`
    to `a`. A socket is not compatible with itself until declared so.
    """

    def __init__(self) -> None:
        self._next_index = 0
        # For uniqueness
        self._uniques: dict[Socket, set[Socket]] = {}
        # For determinism and sequential access
        self._compatibles: dict[Socket, list[Socket]] = {}

    def create(self) -> Socket:
        """Create a new socket in the collection."""
        socket = Socket(self._next_index)
        self._next_index += 1
        return socket

    # -------------------------------------------------------------------------
    # Connections
    # -------------------------------------------------------------------------

    def add_connection(self, from_socket: Socket, to_sockets: Iterable[Socket]) -> SocketCollection:
        """Connect `from_socket` to every socket of `to_sockets`.

        Example:
            sockets.add_connection(a, [a, b])
            # a connects to a and b, b connects to a
        """
        for to_socket in to_sockets:
            self._register_connection(from_socket, to_socket)
        return self

    def add_connections(
        self,
        connections: Iterable[tuple[Socket, Iterable[Socket]]],
    ) -> SocketCollection:
        """Same as add_connection, for several (from, [to, ...]) definitions."""
        for from_socket, to_sockets in connections:
            self.add_connection(from_socket, to_sockets)
        return self

    def add_rotated_connection(self, from_socket: Socket, to_sockets: Sequence[Socket]) -> SocketCollection:
        """Connect every rotation of `from_socket` to every rotation of `to_sockets`.

        Meant for sockets on the rotation axis: models exposing them can be
        stacked whatever their respective rotations.
        """
        for to_rotation in ALL_MODEL_ROTATIONS:
            to_rotated = [s.rotated(to_rotation) for s in to_sockets]
            for from_rotation in ALL_MODEL_ROTATIONS:
                rotated_from = from_socket.rotated(from_rotation)
                for to_socket in to_rotated:
                    self._register_connection(rotated_from, to_socket)
        return self

    def add_rotated_connections(
        self,
        connections: Iterable[tuple[Socket, Sequence[Socket]]],
    ) -> SocketCollection:
        """Same as add_rotated_connection, for several (from, [to, ...]) definitions."""
        for from_socket, to_sockets in connections:
            self.add_rotated_connection(from_socket, to_sockets)
        return self

    def add_constrained_rotated_connection(
        self,
        from_socket: Socket,
        relative_rotations: Sequence[ModelRotation],
        to_sockets: Sequence[Socket],
    ) -> SocketCollection:
        """Connect rotations of two axis sockets only at the given relative rotations.

        `relative_rotations` are relative to ROT_0 of `to_sockets`: ROT_90
        means `from_socket` connects to a `to` socket only when rotated one
        quarter turn more than it, whatever their absolute rotations.
        """
        relative = list(relative_rotations)
        for to_rotation in ALL_MODEL_ROTATIONS:
            to_rotated = [s.rotated(to_rotation) for s in to_sockets]
            for i, from_rotation in enumerate(relative):
                rotated_from = from_socket.rotated(from_rotation)
                for to_socket in to_rotated:
                    self._register_connection(rotated_from, to_socket)
                relative[i] = from_rotation.next
        return self

    def _register_connection_half(self, from_socket: Socket, to_socket: Socket) -> None:
        connectable = self._uniques.setdefault(from_socket, set())
        if to_socket not in connectable:
            connectable.add(to_socket)
            self._compatibles.setdefault(from_socket, []).append(to_socket)

    def _register_connection(self, from_socket: Socket, to_socket: Socket) -> None:
        self._register_connection_half(from_socket, to_socket)
        self._register_connection_half(to_socket, from_socket)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def compatibles(self, socket: Socket) -> tuple[Socket, ...]:
        """Sockets connectable to `socket`, in declaration order."""
        return tuple(self._compatibles.get(socket, ()))

    def is_compatible(self, a: Socket, b: Socket) -> bool:
        return b in self._uniques.get(a, ())

    @property
    def sockets_count(self) -> int:
        """Number of sockets created by this collection."""
        return self._next_index

    @property
    def has_connections(self) -> bool:
        return bool(self._compatibles)


# =============================================================================
# Socket layouts
# =============================================================================


class SocketsCartesian2D:
    """Sockets of a model for a 2D cartesian grid, one list per direction.

    Lists are ordered by direction index: X+, Y+, X-, Y-.
    """

    def __init__(
        self,
        x_pos: Sequence[Socket],
        y_pos: Sequence[Socket],
        x_neg: Sequence[Socket],
        y_neg: Sequence[Socket],
    ):
        self.sockets: tuple[tuple[Socket, ...], ...] = (
            tuple(x_pos),
            tuple(y_pos),
            tuple(x_neg),
            tuple(y_neg),
        )

    @classmethod
    def mono(cls, socket: Socket) -> SocketsCartesian2D:
        """The same single socket on every side."""
        return cls([socket], [socket], [socket], [socket])

    @classmethod
    def simple(cls, x_pos: Socket, x_neg: Socket, y_pos: Socket, y_neg: Socket) -> SocketsCartesian2D:
        """One socket per side."""
        return cls([x_pos], [y_pos], [x_neg], [y_neg])

    @classmethod
    def multiple(
        cls,
        x_pos: Sequence[Socket],
        x_neg: Sequence[Socket],
        y_pos: Sequence[Socket],
        y_neg: Sequence[Socket],
    ) -> SocketsCartesian2D:
        """Several sockets per side."""
        return cls(x_pos, y_pos, x_neg, y_neg)

    def new_model(self) -> Model:
        """Create a Model with these sockets: weight 1.0, no rotation."""
        from .model import Model

        return Model(sockets=self.sockets)


class SocketsCartesian3D:
    """Sockets of a model for a 3D cartesian grid, one list per direction.

    Lists are ordered by direction index: X+, Y+, X-, Y-, Z+, Z-.
    """

    def __init__(
        self,
        x_pos: Sequence[Socket],
        y_pos: Sequence[Socket],
        x_neg: Sequence[Socket],
        y_neg: Sequence[Socket],
        z_pos: Sequence[Socket],
        z_neg: Sequence[Socket],
    ):
        self.sockets: tuple[tuple[Socket, ...], ...] = (
            tuple(x_pos),
            tuple(y_pos),
            tuple(x_neg),
            tuple(y_neg),
            tuple(z_pos),
            tuple(z_neg),
        )

    @classmethod
    def mono(cls, socket: Socket) -> SocketsCartesian3D:
        """The same single socket on every side."""
        return cls([socket], [socket], [socket], [socket], [socket], [socket])

    @classmethod
    def simple(
        cls,
        x_pos: Socket,
        x_neg: Socket,
        z_pos: Socket,
        z_neg: Socket,
        y_pos: Socket,
        y_neg: Socket,
    ) -> SocketsCartesian3D:
        """One socket per side."""
        return cls([x_pos], [y_pos], [x_neg], [y_neg], [z_pos], [z_neg])

    @classmethod
    def multiple(
        cls,
        x_pos: Sequence[Socket],
        x_neg: Sequence[Socket],
        z_pos: Sequence[Socket],
        z_neg: Sequence[Socket],
        y_pos: Sequence[Socket],
        y_neg: Sequence[Socket],
    ) -> SocketsCartesian3D:
        """Several sockets per side."""
        return cls(x_pos, y_pos, x_neg, y_neg, z_pos, z_neg)

    def new_model(self) -> Model:
        """Create a Model with these sockets: weight 1.0, no rotation."""
        from .model import Model

        return Model(sockets=self.sockets)
