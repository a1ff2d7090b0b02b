"""Tests for island partitioning."""

import numpy as np
from scipy import ndimage

from archipelago.terrain.config import IslandConfig
from archipelago.terrain.islands import (
    Island,
    fill_small_components,
    find_components,
    index_islands,
    partition_islands,
)


def _sample_grid() -> np.ndarray:
    """10x10 water map with a 5x5 island holding a one-tile lake, plus a one-tile islet."""
    grid = np.zeros((10, 10), dtype=np.int32)
    grid[1:6, 1:6] = 1
    grid[3, 3] = 0
    grid[8, 8] = 1
    return grid


class TestFindComponents:
    """Tests for flood-fill component search."""

    def test_uniform_grid_is_one_component(self) -> None:
        """A 3x3 all-zero grid is a single component of 9 cells."""
        grid = np.zeros((3, 3), dtype=np.int32)
        components = find_components(grid, 0)
        assert len(components) == 1
        assert len(components[0]) == 9

    def test_missing_value_gives_no_components(self) -> None:
        """No cells with the value means no components."""
        grid = np.zeros((4, 4), dtype=np.int32)
        assert find_components(grid, 1) == []

    def test_diagonals_do_not_connect(self) -> None:
        """Diagonal neighbours belong to separate components."""
        grid = np.array([[1, 0], [0, 1]], dtype=np.int32)
        components = find_components(grid, 1)
        assert len(components) == 2
        assert [c[0] for c in components] == [(0, 0), (1, 1)]

    def test_orthogonal_neighbors_connect(self) -> None:
        """An L-shape is one component."""
        grid = np.array([[1, 1, 1], [0, 0, 1], [0, 0, 1]], dtype=np.int32)
        components = find_components(grid, 1)
        assert len(components) == 1
        assert sorted(components[0]) == [(0, 0), (0, 1), (0, 2), (1, 2), (2, 2)]

    def test_start_cell_first(self) -> None:
        """A component starts at its first cell in row-major order."""
        grid = np.zeros((4, 4), dtype=np.int32)
        grid[1:3, 2:4] = 1
        components = find_components(grid, 1)
        assert components[0][0] == (1, 2)

    def test_discovery_order_row_major(self) -> None:
        """Components are listed in row-major order of their first cell."""
        rng = np.random.default_rng(8)
        grid = rng.integers(0, 2, size=(15, 15)).astype(np.int32)
        firsts = [c[0] for c in find_components(grid, 1)]
        assert firsts == sorted(firsts)
        for component in find_components(grid, 1):
            assert component[0] == min(component)

    def test_partition_of_value_cells(self) -> None:
        """Components are disjoint and cover exactly the cells of the value."""
        rng = np.random.default_rng(5)
        grid = rng.integers(0, 3, size=(20, 25)).astype(np.int32)

        for value in range(3):
            components = find_components(grid, value)
            cells = [cell for component in components for cell in component]
            assert len(cells) == len(set(cells))
            expected = {(int(x), int(y)) for x, y in zip(*np.nonzero(grid == value))}
            assert set(cells) == expected

    def test_matches_four_connected_labelling(self) -> None:
        """Components agree with 4-connected labelling."""
        rng = np.random.default_rng(6)
        grid = rng.integers(0, 2, size=(30, 30)).astype(np.int32)
        structure = ndimage.generate_binary_structure(2, 1)
        labeled, num_features = ndimage.label(grid == 1, structure=structure)

        components = find_components(grid, 1)
        assert len(components) == num_features
        for component in components:
            labels = {labeled[cell] for cell in component}
            assert len(labels) == 1
            assert np.sum(labeled == labels.pop()) == len(component)


class TestFillSmallComponents:
    """Tests for rewriting undersized components."""

    def test_small_components_rewritten(self) -> None:
        """Components below the minimum take the replacement value."""
        grid = _sample_grid()
        kept, rewritten = fill_small_components(grid, 1, 5, 0)
        assert rewritten == 1
        assert grid[8, 8] == 0
        assert len(kept) == 1
        assert len(kept[0]) == 24

    def test_minimum_zero_keeps_everything(self) -> None:
        """A zero minimum rewrites nothing."""
        grid = _sample_grid()
        original = grid.copy()
        kept, rewritten = fill_small_components(grid, 1, 0, 0)
        assert rewritten == 0
        assert len(kept) == 2
        np.testing.assert_array_equal(grid, original)


class TestPartitionIslands:
    """Tests for the island post-processing pass."""

    def test_reclassification(self) -> None:
        """Lakes are filled, islets submerged, the rest numbered."""
        grid = _sample_grid()
        config = IslandConfig(minimum_land_tiles=5, minimum_water_tiles=3)
        partition = partition_islands(grid, config)

        assert grid[3, 3] == 1
        assert grid[8, 8] == 0
        assert partition.filled_cells == 1
        assert partition.submerged_cells == 1
        assert len(partition.islands) == 1

        island = partition.islands[0]
        assert island.island_id == 1
        assert island.size == 25
        assert (3, 3) in island

    def test_island_id_grid(self) -> None:
        """Island cells carry their id; everything else is 0."""
        grid = _sample_grid()
        config = IslandConfig(minimum_land_tiles=5, minimum_water_tiles=3)
        partition = partition_islands(grid, config)

        expected = np.zeros((10, 10), dtype=np.int32)
        expected[1:6, 1:6] = 1
        np.testing.assert_array_equal(partition.island_ids, expected)
        assert partition.island_of((2, 2)) == 1
        assert partition.island_of((8, 8)) == 0

    def test_ids_follow_discovery_order(self) -> None:
        """Ids are sequential from 1 in discovery order."""
        grid = np.zeros((12, 12), dtype=np.int32)
        grid[1:4, 1:4] = 1
        grid[1:4, 7:10] = 1
        grid[7:10, 1:4] = 1
        config = IslandConfig(minimum_land_tiles=5, minimum_water_tiles=3)
        partition = partition_islands(grid, config)

        assert [i.island_id for i in partition.islands] == [1, 2, 3]
        assert partition.island_of((2, 2)) == 1
        assert partition.island_of((2, 8)) == 2
        assert partition.island_of((8, 2)) == 3

    def test_retained_islands_meet_minimum(self) -> None:
        """No retained island is smaller than the land minimum."""
        rng = np.random.default_rng(12)
        grid = rng.integers(0, 2, size=(40, 40)).astype(np.int32)
        config = IslandConfig(minimum_land_tiles=8, minimum_water_tiles=4)
        partition = partition_islands(grid, config)

        assert all(island.size >= 8 for island in partition.islands)
        assert sum(i.size for i in partition.islands) == np.sum(grid == 1)

    def test_upper_layers_not_islands(self) -> None:
        """Only main-layer cells belong to islands."""
        grid = np.zeros((8, 8), dtype=np.int32)
        grid[1:7, 1:7] = 1
        grid[3:5, 3:5] = 2
        config = IslandConfig(minimum_land_tiles=5, minimum_water_tiles=3)
        partition = partition_islands(grid, config)

        assert partition.island_of((3, 3)) == 0
        assert partition.islands[0].size == 32

    def test_single_pass(self) -> None:
        """A filled lake that becomes an islet is submerged and left undersized."""
        grid = np.zeros((9, 9), dtype=np.int32)
        grid[2:7, 2:7] = 2
        grid[4, 4] = 0
        config = IslandConfig(minimum_land_tiles=5, minimum_water_tiles=3)
        partition = partition_islands(grid, config)

        # Filled to 1, then submerged back to 0; no further pass
        assert grid[4, 4] == 0
        assert partition.filled_cells == 1
        assert partition.submerged_cells == 1
        assert partition.islands == []

    def test_custom_layers(self) -> None:
        """main_layer and back_layer select the layers involved."""
        grid = np.ones((8, 8), dtype=np.int32)
        grid[2:6, 2:6] = 2
        grid[3, 3] = 1
        config = IslandConfig(
            main_layer=2, back_layer=1, minimum_land_tiles=3, minimum_water_tiles=3
        )
        partition = partition_islands(grid, config)

        assert grid[3, 3] == 2
        assert len(partition.islands) == 1
        assert partition.islands[0].layer == 2
        assert partition.islands[0].size == 16


class TestIndexIslands:
    """Tests for numbering islands without reclassification."""

    def test_grid_not_modified(self) -> None:
        """Indexing leaves the grid untouched."""
        grid = _sample_grid()
        original = grid.copy()
        config = IslandConfig(minimum_land_tiles=5, minimum_water_tiles=3)
        partition = index_islands(grid, config)

        np.testing.assert_array_equal(grid, original)
        assert len(partition.islands) == 1
        assert partition.islands[0].size == 24
        assert partition.island_of((8, 8)) == 0


class TestIsland:
    """Tests for the Island record."""

    def test_membership(self) -> None:
        """Membership matches the cell list."""
        island = Island(island_id=1, layer=1, cells=[(0, 0), (0, 1), (1, 1)])
        assert (0, 1) in island
        assert (1, 0) not in island

    def test_cell_set_cached(self) -> None:
        """The lookup set is built once per island."""
        island = Island(island_id=1, layer=1, cells=[(2, 2), (2, 3)])
        assert island.cell_set is island.cell_set
        assert island.cell_set == frozenset({(2, 2), (2, 3)})
