import numpy as np
import PIL.Image
import pytest

from escapetime import RasterImage, write_gif
from escapetime.image import resolve_format


def test_put_and_get_pixel():
    image = RasterImage(4, 3)
    image.put_pixel(3, 2, (10, 20, 30))
    assert image.get_pixel(3, 2) == (10, 20, 30)
    assert image.array[2, 3].tolist() == [10, 20, 30]
    assert image.get_pixel(0, 0) == (0, 0, 0)


@pytest.mark.parametrize("x,y", [(-1, 0), (4, 0), (0, 3), (0, -1)])
def test_writes_outside_the_raster_fail(x, y):
    with pytest.raises(IndexError):
        RasterImage(4, 3).put_pixel(x, y, (1, 2, 3))


def test_invalid_sizes():
    with pytest.raises(ValueError):
        RasterImage(0, 4)
    with pytest.raises(ValueError):
        RasterImage.from_array(np.zeros((4, 4), dtype=np.uint8))


def test_save_png_round_trip(tmp_path):
    array = np.arange(4 * 5 * 3, dtype=np.uint8).reshape(4, 5, 3)
    image = RasterImage.from_array(array)
    path = image.save(tmp_path / "nested" / "frame.png")
    assert path.exists()
    with PIL.Image.open(path) as saved:
        assert saved.size == (5, 4)
        assert saved.format == "PNG"
        np.testing.assert_array_equal(np.asarray(saved), array)


def test_save_with_explicit_format(tmp_path):
    image = RasterImage(8, 8)
    path = image.save(tmp_path / "frame.out", "jpg")
    with PIL.Image.open(path) as saved:
        assert saved.format == "JPEG"


def test_save_errors_propagate(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    with pytest.raises(OSError):
        RasterImage(2, 2).save(blocker / "frame.png")


def test_write_gif(tmp_path):
    frames = [np.full((6, 6, 3), value, dtype=np.uint8) for value in (0, 120, 240)]
    path = write_gif(tmp_path / "cycle.gif", frames)
    with PIL.Image.open(path) as saved:
        assert saved.format == "GIF"
        assert saved.n_frames == 3


def test_resolve_format():
    assert resolve_format("frame.png") == "PNG"
    assert resolve_format("frame.out", "jpg") == "JPEG"
    assert resolve_format("frame.out", "TIF") == "TIFF"
    assert resolve_format("frame") == "PNG"
    with pytest.raises(ValueError):
        resolve_format("frame.img")


def test_unknown_format_fails_before_writing(tmp_path):
    with pytest.raises(ValueError):
        RasterImage(2, 2).save(tmp_path / "missing" / "frame.img")
    assert not (tmp_path / "missing").exists()
