import numpy as np
import pytest

from meshop.core.pointcloud import PointCloud


def grid_cloud(step=0.5, n=5):
    axis = np.arange(n) * step
    return PointCloud([[x, y, 0.0] for x in axis for y in axis])


def test_extents_follow_insertions():
    """Extents track appended and inserted points."""
    pc = PointCloud()
    pc.append([1.0, 2.0, 3.0])
    assert np.array_equal(pc.lower, [1.0, 2.0, 3.0])
    assert np.array_equal(pc.upper, [1.0, 2.0, 3.0])
    pc.extend([[-1.0, 5.0, 0.0], [0.0, 0.0, 4.0]])
    assert np.array_equal(pc.lower, [-1.0, 0.0, 0.0])
    assert np.array_equal(pc.upper, [1.0, 5.0, 4.0])
    pc.insert(0, [10.0, 10.0, 10.0], n=2)
    assert len(pc) == 5
    assert np.array_equal(pc[0], [10.0, 10.0, 10.0])
    assert np.array_equal(pc.upper, [10.0, 10.0, 10.0])
    ext = pc.extents()
    assert ext.ll == (-1.0, 0.0, 0.0)


def test_empty_cloud_has_no_extents():
    """An empty cloud has no extents."""
    pc = PointCloud([[0, 0, 0]])
    pc.clear()
    assert len(pc) == 0
    assert pc.points.shape == (0, 3)
    with pytest.raises(ValueError):
        pc.lower
    with pytest.raises(ValueError):
        pc.append([1.0, 2.0])


def test_dump_and_load(tmp_path):
    """Dump a cloud to text and load it back."""
    pc = grid_cloud()
    path = tmp_path / 'cloud.txt'
    pc.dump(path)
    back = PointCloud().load(path)
    assert len(back) == len(pc)
    assert np.allclose(back.points, pc.points)
    assert np.array_equal(back.upper, pc.upper)


def test_sampling_delta_on_regular_grid():
    """Sampling delta of a regular grid is its spacing."""
    pc = grid_cloud(step=0.5)
    assert pc.sampling_delta() == pytest.approx(0.5)
    assert pc.sampling_delta(1.0) == pytest.approx(0.5)


def test_sampling_delta_bulk_threshold():
    """The bulk threshold picks the matching distance quantile."""
    pc = PointCloud([[0, 0, 0], [1, 0, 0], [10, 0, 0], [14, 0, 0]])
    # nearest neighbour distances: 1, 1, 4, 4
    assert pc.sampling_delta(0.5) == pytest.approx(1.0)
    assert pc.sampling_delta(0.75) == pytest.approx(4.0)
    with pytest.raises(ValueError):
        pc.sampling_delta(0.0)
    with pytest.raises(ValueError):
        PointCloud([[0, 0, 0]]).sampling_delta()
