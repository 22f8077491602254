"""Commodity color assignment and color conversions."""

from harvest_board.colors.contrast import contrast_color, hex_to_rgb, hex_to_rgb_blend, hex_to_rgba
from harvest_board.colors.registry import (
    FALLBACK_COMMODITY_COLORS,
    MAIN_COMMODITY_COLORS,
    NEUTRAL_COLOR,
    CommodityColorRegistry,
    normalize_commodity_name,
)

__all__ = [
    "FALLBACK_COMMODITY_COLORS",
    "MAIN_COMMODITY_COLORS",
    "NEUTRAL_COLOR",
    "CommodityColorRegistry",
    "contrast_color",
    "hex_to_rgb",
    "hex_to_rgb_blend",
    "hex_to_rgba",
    "normalize_commodity_name",
]
