"""End-to-end generation scenarios."""

import pytest

from gridsynth import (
    GeneratorBuilder,
    GridData,
    GridDefinition,
    GridPosition,
    ModelInstance,
    NodeSelectionHeuristic,
    RngMode,
    Rules,
    RulesBuilder,
    SocketCollection,
    SocketsCartesian3D,
)

WHITE, BLACK = 0, 1
WATER, SAND, GRASS = 0, 1, 2


def assert_valid_grid(rules: Rules, grid_data: GridData) -> None:
    """Every pair of adjacent nodes is allowed by the rules."""
    grid = grid_data.grid
    for node in grid.indexes():
        instance = grid_data.get(node)
        variant = rules.variant_index(instance.model_index, instance.rotation)
        position = grid.position(node)
        for direction in grid.directions:
            neighbour = grid.next_index(position, direction)
            if neighbour is None:
                continue
            other = grid_data.get(neighbour)
            other_variant = rules.variant_index(other.model_index, other.rotation)
            assert other_variant in rules.allowed_models(variant, direction)


class TestCheckerboard:
    """A fixed corner forces the whole checkerboard."""

    def test_pregen_fills_the_board(self, checkerboard_rules: Rules, grid_8x8: GridDefinition):
        """Test a black corner determines every node during build."""
        generator = (
            GeneratorBuilder(checkerboard_rules, grid_8x8)
            .with_initial_nodes([(GridPosition(0, 0), BLACK)])
            .with_rng(RngMode.seeded(0))
            .build()
        )
        assert generator.nodes_left == 0

        gen_info, grid_data = generator.generate_grid()

        assert gen_info.try_count == 1
        for x in range(8):
            for y in range(8):
                expected = BLACK if (x + y) % 2 == 0 else WHITE
                assert grid_data.get_2d(x, y) == ModelInstance(model_index=expected)
        assert_valid_grid(checkerboard_rules, grid_data)

    def test_even_torus(self, checkerboard_rules: Rules):
        """Test an even looping grid always fits a checkerboard."""
        grid = GridDefinition.new_cartesian_2d(4, 6, looping_x=True, looping_y=True)
        generator = GeneratorBuilder(checkerboard_rules, grid).with_max_retry_count(0).build()
        _, grid_data = generator.generate_grid()
        assert_valid_grid(checkerboard_rules, grid_data)

    def test_3d_checkerboard(self):
        """Test the forced alternation also holds across layers."""
        sockets = SocketCollection()
        white, black = sockets.create(), sockets.create()
        sockets.add_connection(white, [black])
        rules = RulesBuilder.cartesian_3d(
            [SocketsCartesian3D.mono(white).new_model(), SocketsCartesian3D.mono(black).new_model()],
            sockets,
        ).build()
        grid = GridDefinition.new_cartesian_3d(3, 3, 3)
        generator = GeneratorBuilder(rules, grid).with_initial_nodes([(0, WHITE)]).build()
        grid_data = generator.to_grid_data()
        assert grid_data is not None
        assert grid_data.get_3d(1, 1, 1) == ModelInstance(model_index=BLACK)
        assert grid_data.get_3d(2, 2, 2) == ModelInstance(model_index=WHITE)


class TestTerrain:
    """Water, sand and grass islands."""

    @pytest.mark.parametrize("heuristic", list(NodeSelectionHeuristic))
    @pytest.mark.parametrize("seed", [0, 1, 2])
    def test_generated_grid_is_valid(self, terrain_rules: Rules, heuristic: NodeSelectionHeuristic, seed: int):
        """Test every heuristic produces a grid respecting the rules."""
        grid = GridDefinition.new_cartesian_2d(16, 16, looping_x=True)
        generator = (
            GeneratorBuilder(terrain_rules, grid)
            .with_node_heuristic(heuristic)
            .with_rng(RngMode.seeded(seed))
            .build()
        )
        _, grid_data = generator.generate_grid()
        assert_valid_grid(terrain_rules, grid_data)

    def test_initial_nodes_survive_generation(self, terrain_rules: Rules):
        """Test initial nodes are kept in the output, even after reinitializations."""
        grid = GridDefinition.new_cartesian_2d(9, 9)
        initial = [(GridPosition(0, 0), WATER), (GridPosition(8, 8), WATER), (GridPosition(4, 4), GRASS)]
        generator = (
            GeneratorBuilder(terrain_rules, grid)
            .with_initial_nodes(initial)
            .with_rng(RngMode.seeded(42))
            .build()
        )
        for _ in range(3):
            _, grid_data = generator.generate_grid()
            assert grid_data.get_2d(0, 0) == ModelInstance(model_index=WATER)
            assert grid_data.get_2d(8, 8) == ModelInstance(model_index=WATER)
            assert grid_data.get_2d(4, 4) == ModelInstance(model_index=GRASS)
            assert_valid_grid(terrain_rules, grid_data)


class TestRotatedStacks:
    """3D pillars that stack whatever their rotation."""

    @pytest.fixture
    def pillar_rules(self) -> Rules:
        sockets = SocketCollection()
        top, bottom, side = sockets.create(), sockets.create(), sockets.create()
        sockets.add_rotated_connection(top, [bottom])
        sockets.add_connection(side, [side])
        pillar = SocketsCartesian3D.simple(
            x_pos=side, x_neg=side, z_pos=side, z_neg=side, y_pos=top, y_neg=bottom,
        ).new_model().with_all_rotations()
        return RulesBuilder.cartesian_3d([pillar], sockets).build()

    def test_every_rotation_stacks(self, pillar_rules: Rules):
        """Test any rotation may sit on top of any other."""
        assert pillar_rules.models_count == 4
        for variant in range(4):
            assert pillar_rules.allowed_models(variant, pillar_rules.rotation_axis) == (0, 1, 2, 3)

    def test_generate_pillars(self, pillar_rules: Rules):
        """Test a 3D grid of pillars is generated with rotated variants."""
        grid = GridDefinition.new_cartesian_3d(3, 4, 3)
        generator = GeneratorBuilder(pillar_rules, grid).with_rng(RngMode.seeded(9)).build()
        _, grid_data = generator.generate_grid()
        assert_valid_grid(pillar_rules, grid_data)
        assert len({node.rotation for node in grid_data}) > 1
