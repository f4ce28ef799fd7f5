from .utils import (
    ImageLike,
    Rect,
    Rgb,
    load_image,
    pixel_rgb,
    parse_hex_color,
    color_distance,
    color_match,
)

__all__ = [
    "ImageLike",
    "Rect",
    "Rgb",
    "load_image",
    "pixel_rgb",
    "parse_hex_color",
    "color_distance",
    "color_match",
]
