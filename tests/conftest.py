"""Shared test fixtures for gridsynth."""

import pytest

from gridsynth import (
    GridDefinition,
    Rules,
    RulesBuilder,
    SocketCollection,
    SocketsCartesian2D,
)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow (skipped by default, run with --run-slow)")


def pytest_addoption(parser):
    """Add --run-slow option to pytest."""
    parser.addoption(
        "--run-slow",
        action="store_true",
        default=False,
        help="Run slow tests (skipped by default)",
    )


def pytest_collection_modifyitems(config, items):
    """Skip slow tests unless --run-slow is passed."""
    if config.getoption("--run-slow"):
        # --run-slow given: don't skip slow tests
        return

    skip_slow = pytest.mark.skip(reason="Slow test (use --run-slow to run)")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


# =============================================================================
# Rules
# =============================================================================

@pytest.fixture
def checkerboard_rules() -> Rules:
    """White only touches black and black only touches white."""
    sockets = SocketCollection()
    white, black = sockets.create(), sockets.create()
    sockets.add_connection(white, [black])
    models = [
        SocketsCartesian2D.mono(white).new_model().with_name("white"),
        SocketsCartesian2D.mono(black).new_model().with_name("black"),
    ]
    return RulesBuilder.cartesian_2d(models, sockets).build()


@pytest.fixture
def terrain_rules() -> Rules:
    """Water, sand and grass. Sand goes anywhere, water never touches grass."""
    sockets = SocketCollection()
    water, sand, grass = sockets.create(), sockets.create(), sockets.create()
    sockets.add_connection(water, [water, sand])
    sockets.add_connection(sand, [sand, grass])
    sockets.add_connection(grass, [grass])
    models = [
        SocketsCartesian2D.mono(water).new_model().with_name("water"),
        SocketsCartesian2D.mono(sand).new_model().with_name("sand"),
        SocketsCartesian2D.mono(grass).new_model().with_name("grass"),
    ]
    return RulesBuilder.cartesian_2d(models, sockets).build()


@pytest.fixture
def open_rules() -> Rules:
    """Three models that can all sit next to each other."""
    sockets = SocketCollection()
    any_side = sockets.create()
    sockets.add_connection(any_side, [any_side])
    models = [
        SocketsCartesian2D.mono(any_side).new_model().with_name(name)
        for name in ("red", "green", "blue")
    ]
    return RulesBuilder.cartesian_2d(models, sockets).build()


# =============================================================================
# Grids
# =============================================================================

@pytest.fixture
def grid_8x8() -> GridDefinition:
    """A non-looping 8x8 grid."""
    return GridDefinition.new_cartesian_2d(8, 8)


@pytest.fixture
def odd_torus() -> GridDefinition:
    """A 3x3 grid looping on both axes: no checkerboard fits on it."""
    return GridDefinition.new_cartesian_2d(3, 3, looping_x=True, looping_y=True)
