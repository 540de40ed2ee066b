import numpy as np
import pytest

from fluid2d import grid
from fluid2d.grid import (
    DisplaySurface, Field, FieldAllocationError, fetch, grid_size, neighbors, sample_bilinear,
)


def test_grid_size_divides_by_pixel_ratio_and_device_scale():
    assert grid_size(DisplaySurface(640, 480)) == (320, 240)
    assert grid_size(DisplaySurface(641, 480)) == (321, 240)
    assert grid_size(DisplaySurface(640, 480, device_scale=2.0)) == (160, 120)
    assert grid_size(DisplaySurface(100, 50), pixel_ratio=1) == (100, 50)


def test_grid_size_rejects_empty_surface():
    with pytest.raises(ValueError):
        grid_size(DisplaySurface(0, 480))


def test_swap_is_its_own_inverse_and_copies_nothing():
    f = Field("velocity", 8, 4, channels=2)
    read, write = f.read, f.write

    f.swap()
    assert f.read is write
    assert f.write is read

    f.swap()
    assert f.read is read
    assert f.write is write


def test_field_buffers_are_float32_with_expected_shape():
    f = Field("density", 5, 3, channels=3)
    for buf in f.buffers:
        assert buf.dtype == np.float32
        assert buf.shape == (3, 5, 3)
    assert f.read is not f.write


def test_allocate_discards_old_contents():
    f = Field("density", 4, 4, channels=1)
    f.read[...] = 7.0
    f.allocate(6, 5)
    assert f.shape == (5, 6, 1)
    assert not f.read.any()
    assert not f.write.any()


def test_allocate_rejects_non_positive_size():
    with pytest.raises(ValueError):
        Field("velocity", 0, 4, channels=2)


def test_out_of_memory_surfaces_as_allocation_error(monkeypatch):
    f = Field("velocity", 4, 4, channels=2)

    def no_memory(*args, **kwargs):
        raise MemoryError("out of memory")

    monkeypatch.setattr(grid.np, "zeros", no_memory)
    with pytest.raises(FieldAllocationError) as info:
        f.allocate(100_000, 100_000)
    assert isinstance(info.value.__cause__, MemoryError)
    # the old buffers are still in place
    assert f.shape == (4, 4, 2)


def test_fetch_wraps_around_edges():
    buf = np.arange(12, dtype=np.float32).reshape(3, 4, 1)
    assert fetch(buf, np.array(-1), np.array(0))[0] == buf[0, 3, 0]
    assert fetch(buf, np.array(4), np.array(3))[0] == buf[0, 0, 0]


def test_sample_bilinear_is_exact_on_cell_centers(random_field):
    buf = random_field((6, 7, 2))
    j, i = np.meshgrid(np.arange(6, dtype=np.float32), np.arange(7, dtype=np.float32), indexing='ij')
    np.testing.assert_array_equal(sample_bilinear(buf, i, j), buf)


def test_sample_bilinear_interpolates_across_the_seam():
    buf = np.zeros((1, 4, 1), dtype=np.float32)
    buf[0, 0, 0] = 1.0
    buf[0, 3, 0] = 3.0
    # halfway between the last column and (wrapped) first column
    value = sample_bilinear(buf, np.array([[3.5]], dtype=np.float32), np.array([[0.0]], dtype=np.float32))
    assert value[0, 0, 0] == pytest.approx(2.0)


def test_neighbors_wrap():
    buf = np.arange(9, dtype=np.float32).reshape(3, 3)
    left, right, down, up = neighbors(buf)
    assert left[0, 0] == buf[0, 2]
    assert right[0, 2] == buf[0, 0]
    assert down[0, 1] == buf[2, 1]
    assert up[2, 1] == buf[0, 1]


def test_new_buffers_leaves_field_untouched_until_adopted():
    f = Field("density", 4, 4, channels=3)
    f.read[...] = 5.0
    f.swap()

    pair = f.new_buffers(8, 2)
    assert f.shape == (4, 4, 3)
    assert f.write[0, 0, 0] == 5.0

    f.adopt(pair)
    assert f.shape == (2, 8, 3)
    assert f.read is pair[0]
    assert f.write is pair[1]
