"""Tests for gridsynth.rules.socket module."""

import pytest

from gridsynth.grid import Direction
from gridsynth.rules import (
    ALL_MODEL_ROTATIONS,
    ModelRotation,
    Socket,
    SocketCollection,
    SocketsCartesian2D,
    SocketsCartesian3D,
)


@pytest.fixture
def sockets() -> SocketCollection:
    return SocketCollection()


class TestSocketCollection:
    """Tests for socket creation and connections."""

    def test_create_gives_unique_indexes(self, sockets: SocketCollection):
        """Test each created socket gets the next index."""
        created = [sockets.create() for _ in range(3)]
        assert [s.index for s in created] == [0, 1, 2]
        assert all(s.rotation == ModelRotation.ROT_0 for s in created)
        assert sockets.sockets_count == 3

    def test_connection_is_symmetric(self, sockets: SocketCollection):
        """Test connecting a to b also connects b to a."""
        a, b = sockets.create(), sockets.create()
        sockets.add_connection(a, [b])
        assert sockets.is_compatible(a, b)
        assert sockets.is_compatible(b, a)

    def test_not_self_compatible_by_default(self, sockets: SocketCollection):
        """Test a socket only connects to itself when declared so."""
        a, b = sockets.create(), sockets.create()
        sockets.add_connection(a, [b])
        assert not sockets.is_compatible(a, a)
        sockets.add_connection(a, [a])
        assert sockets.is_compatible(a, a)

    def test_duplicates_are_ignored(self, sockets: SocketCollection):
        """Test declaring a connection twice stores it once."""
        a, b = sockets.create(), sockets.create()
        sockets.add_connection(a, [b, b])
        sockets.add_connection(b, [a])
        assert sockets.compatibles(a) == (b,)
        assert sockets.compatibles(b) == (a,)

    def test_compatibles_keep_declaration_order(self, sockets: SocketCollection):
        """Test compatibles are listed in the order they were declared."""
        a, b, c, d = (sockets.create() for _ in range(4))
        sockets.add_connections([(a, [d, b]), (a, [c])])
        assert sockets.compatibles(a) == (d, b, c)

    def test_has_connections(self, sockets: SocketCollection):
        """Test a collection without connections is reported as such."""
        a = sockets.create()
        assert not sockets.has_connections
        assert sockets.compatibles(a) == ()
        sockets.add_connection(a, [a])
        assert sockets.has_connections

    def test_rotated_connection(self, sockets: SocketCollection):
        """Test every rotation of one socket connects to every rotation of the other."""
        a, b = sockets.create(), sockets.create()
        sockets.add_rotated_connection(a, [b])
        for from_rotation in ALL_MODEL_ROTATIONS:
            for to_rotation in ALL_MODEL_ROTATIONS:
                assert sockets.is_compatible(a.rotated(from_rotation), b.rotated(to_rotation))
        assert not sockets.is_compatible(a, a)

    def test_constrained_rotated_connection(self, sockets: SocketCollection):
        """Test only the declared relative rotation connects."""
        a, b = sockets.create(), sockets.create()
        sockets.add_constrained_rotated_connection(a, [ModelRotation.ROT_90], [b])
        for to_rotation in ALL_MODEL_ROTATIONS:
            b_rotated = b.rotated(to_rotation)
            assert sockets.is_compatible(a.rotated(to_rotation.next), b_rotated)
            assert not sockets.is_compatible(a.rotated(to_rotation), b_rotated)
        assert sockets.compatibles(b) == (a.rotated(ModelRotation.ROT_90),)


class TestSocket:
    """Tests for Socket rotation."""

    def test_rotated_keeps_index(self):
        """Test rotating a socket only changes its rotation."""
        socket = Socket(3).rotated(ModelRotation.ROT_90).rotated(ModelRotation.ROT_180)
        assert socket == Socket(3, ModelRotation.ROT_270)


class TestSocketLayouts:
    """Tests for the 2D and 3D socket layouts."""

    def test_2d_simple_layout(self, sockets: SocketCollection):
        """Test sockets are stored by direction index."""
        x_pos, x_neg, y_pos, y_neg = (sockets.create() for _ in range(4))
        layout = SocketsCartesian2D.simple(x_pos=x_pos, x_neg=x_neg, y_pos=y_pos, y_neg=y_neg)
        assert layout.sockets[Direction.X_FORWARD.value] == (x_pos,)
        assert layout.sockets[Direction.Y_FORWARD.value] == (y_pos,)
        assert layout.sockets[Direction.X_BACKWARD.value] == (x_neg,)
        assert layout.sockets[Direction.Y_BACKWARD.value] == (y_neg,)

    def test_2d_multiple_layout(self, sockets: SocketCollection):
        """Test sides may hold several sockets, or none."""
        a, b = sockets.create(), sockets.create()
        layout = SocketsCartesian2D.multiple(x_pos=[a, b], x_neg=[], y_pos=[a], y_neg=[b])
        assert layout.sockets == ((a, b), (a,), (), (b,))

    def test_3d_simple_layout(self, sockets: SocketCollection):
        """Test 3D layouts append Z+ and Z- after the 2D directions."""
        x_pos, x_neg, z_pos, z_neg, y_pos, y_neg = (sockets.create() for _ in range(6))
        layout = SocketsCartesian3D.simple(
            x_pos=x_pos, x_neg=x_neg, z_pos=z_pos, z_neg=z_neg, y_pos=y_pos, y_neg=y_neg,
        )
        assert layout.sockets == ((x_pos,), (y_pos,), (x_neg,), (y_neg,), (z_pos,), (z_neg,))

    def test_mono_layouts(self, sockets: SocketCollection):
        """Test mono puts the same socket on every side."""
        a = sockets.create()
        assert SocketsCartesian2D.mono(a).sockets == ((a,),) * 4
        assert SocketsCartesian3D.mono(a).sockets == ((a,),) * 6

    def test_new_model(self, sockets: SocketCollection):
        """Test new models get the default weight and no rotation."""
        a = sockets.create()
        model = SocketsCartesian2D.mono(a).new_model()
        assert model.sockets == ((a,),) * 4
        assert model.weight == 1.0
        assert model.allowed_rotations == frozenset({ModelRotation.ROT_0})
        assert model.name is None
