import numpy as np
import pytest

import tdbot.modules.vision.screen as screen_module
from tdbot.modules.vision.screen import ScreenColorSampler
from tdbot.modules.vision.utils import (
    bgra_to_bgr,
    color_distance,
    color_match,
    parse_hex_color,
    pixel_rgb,
    rect_to_region,
)


def test_parse_hex_color():
    assert parse_hex_color("#FFCC00") == (255, 204, 0)
    assert parse_hex_color("0a0B0c") == (10, 11, 12)


@pytest.mark.parametrize("value", ["#FFF", "#GGGGGG", ""])
def test_parse_hex_color_invalid(value):
    with pytest.raises(ValueError):
        parse_hex_color(value)


def test_color_match_uses_three_times_tolerance():
    assert color_distance((10, 20, 30), (0, 0, 0)) == 60
    assert color_match((10, 20, 30), (0, 0, 0), 20)
    assert not color_match((10, 20, 31), (0, 0, 0), 20)
    assert color_match((5, 5, 5), (5, 5, 5), 0)


def test_rect_to_region_minimum_size():
    assert rect_to_region((10, 20, 110, 70)) == {"left": 10, "top": 20, "width": 100, "height": 50}
    assert rect_to_region((5, 5, 5, 5)) == {"left": 5, "top": 5, "width": 1, "height": 1}


def test_pixel_rgb_swaps_bgr():
    img = np.zeros((2, 2, 3), dtype=np.uint8)
    img[1, 0] = (30, 20, 10)

    assert pixel_rgb(img, 0, 1) == (10, 20, 30)
    with pytest.raises(IndexError):
        pixel_rgb(img, 2, 0)


def test_bgra_to_bgr_drops_alpha():
    raw = np.zeros((4, 4, 4), dtype=np.uint8)

    assert bgra_to_bgr(raw).shape == (4, 4, 3)
    assert bgra_to_bgr(np.zeros((4, 4, 3), dtype=np.uint8)).shape == (4, 4, 3)


def test_color_sampler_reads_single_pixel(monkeypatch):
    grabbed = []

    def _grab(rect):
        grabbed.append(tuple(rect))
        img = np.zeros((1, 1, 3), dtype=np.uint8)
        img[0, 0] = (0, 204, 255)
        return img

    monkeypatch.setattr(screen_module, "grab_area", _grab)

    assert ScreenColorSampler()((50, 60)) == (255, 204, 0)
    assert grabbed == [(50, 60, 51, 61)]


def test_color_sampler_capture_failure(monkeypatch):
    monkeypatch.setattr(screen_module, "grab_area", lambda rect: None)

    assert ScreenColorSampler()((1, 1)) is None
