"""Headless drawing surface."""
from __future__ import annotations

import pytest
from PIL import Image

from signature.exceptions.errors import MalformedDataUrlError
from signature.logic.data_url import encode_data_url, is_image_data_url
from signature.logic.drawing_surface import DrawingSurface
from signature.models.pad_options import PadOptions

from ._images import open_data_url, png_data_url


def _stroke(surface: DrawingSurface) -> None:
    surface.pointer_down(10, 10, t=0)
    surface.pointer_move(60, 30, t=20)
    surface.pointer_move(120, 60, t=40)
    surface.pointer_up(t=50)


def test_new_surface_is_empty_and_white() -> None:
    surface = DrawingSurface(200, 100)
    assert surface.is_empty()
    assert surface.pixel_size == (200, 100)
    assert surface.to_image().getpixel((50, 50)) == (255, 255, 255)


def test_device_pixel_ratio_scales_raster() -> None:
    assert DrawingSurface(200, 100, device_pixel_ratio=2).pixel_size == (400, 200)
    # ratios below 1 are clamped
    assert DrawingSurface(200, 100, device_pixel_ratio=0.5).pixel_size == (200, 100)


def test_resize_rejects_empty_size() -> None:
    surface = DrawingSurface(200, 100)
    with pytest.raises(ValueError):
        surface.resize(0, 100)


def test_pointer_down_leaves_a_dot() -> None:
    surface = DrawingSurface(200, 100)
    assert surface.pointer_down(10, 10, t=0)
    assert not surface.is_empty()
    assert surface.is_drawing
    assert surface.to_image().getpixel((10, 10)) == (0, 0, 0)


def test_stroke_draws_ink_and_notifies_listeners() -> None:
    calls = []
    surface = DrawingSurface(200, 100)
    surface.add_end_stroke_listener(lambda: calls.append("end"))
    _stroke(surface)
    assert calls == ["end"]
    assert surface.stroke_count == 1
    assert not surface.is_drawing
    assert surface.to_image().getpixel((60, 30)) == (0, 0, 0)


def test_small_moves_are_ignored() -> None:
    surface = DrawingSurface(200, 100, options=PadOptions(min_distance=5))
    surface.pointer_down(10, 10, t=0)
    assert not surface.pointer_move(12, 11, t=5)
    assert surface.pointer_move(30, 10, t=10)


def test_removed_listener_is_not_called() -> None:
    calls = []
    listener = lambda: calls.append("end")  # noqa: E731
    surface = DrawingSurface(200, 100)
    surface.add_end_stroke_listener(listener)
    surface.remove_end_stroke_listener(listener)
    _stroke(surface)
    assert calls == []


def test_off_ends_stroke_and_blocks_input() -> None:
    calls = []
    surface = DrawingSurface(200, 100)
    surface.add_end_stroke_listener(lambda: calls.append("end"))
    surface.pointer_down(10, 10, t=0)
    surface.off()
    assert calls == ["end"]
    assert not surface.is_enabled
    assert not surface.pointer_down(50, 50, t=10)
    assert not surface.pointer_up()
    surface.on()
    assert surface.pointer_down(50, 50, t=20)


def test_pointer_cancel_ends_stroke() -> None:
    calls = []
    surface = DrawingSurface(200, 100)
    surface.add_end_stroke_listener(lambda: calls.append("end"))
    assert not surface.pointer_cancel()
    surface.pointer_down(10, 10, t=0)
    assert surface.pointer_cancel()
    assert calls == ["end"]


def test_clear_and_resize_remove_ink() -> None:
    surface = DrawingSurface(200, 100)
    _stroke(surface)
    surface.clear()
    assert surface.is_empty()
    _stroke(surface)
    surface.resize(300, 120)
    assert surface.is_empty()
    assert surface.pixel_size == (300, 120)


def test_to_data_url_png_matches_raster() -> None:
    surface = DrawingSurface(200, 100, device_pixel_ratio=2)
    _stroke(surface)
    url = surface.to_data_url()
    assert is_image_data_url(url)
    img = open_data_url(url)
    assert img.format == "PNG"
    assert img.size == (400, 200)


def test_to_data_url_rejects_unknown_type() -> None:
    with pytest.raises(ValueError):
        DrawingSurface(20, 10).to_data_url("image/gif")


def test_from_data_url_adopts_image_size_and_flattens_alpha() -> None:
    surface = DrawingSurface(640, 224)
    surface.from_data_url(png_data_url(400, 120, transparent=True))
    assert not surface.is_empty()
    assert surface.pixel_size == (400, 120)
    assert surface.css_size == (640, 224)
    img = surface.to_image()
    assert img.mode == "RGB"
    assert img.getpixel((0, 0)) == (255, 255, 255)
    assert img.getpixel((200, 60)) == (0, 0, 0)


def test_from_data_url_failure_leaves_surface_untouched() -> None:
    surface = DrawingSurface(200, 100)
    _stroke(surface)
    before = surface.to_image().tobytes()
    with pytest.raises(MalformedDataUrlError):
        surface.from_data_url(encode_data_url(b"not an image", "image/png"))
    with pytest.raises(MalformedDataUrlError):
        surface.from_data_url("data:image/png;base64,@@")
    assert not surface.is_empty()
    assert surface.to_image().tobytes() == before


def test_from_data_url_rejects_decompression_bomb(monkeypatch) -> None:
    surface = DrawingSurface(200, 100)
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 100)
    with pytest.raises(MalformedDataUrlError):
        surface.from_data_url(png_data_url(300, 100))
    assert surface.is_empty()
    assert surface.pixel_size == (200, 100)
