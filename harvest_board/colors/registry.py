"""Stable commodity color assignment.

Commodity colors must look identical across page loads and across users, so
the registry is seeded with ``initialize`` at data-refresh time: the same set
of commodity names always yields the same assignment no matter what order
plans arrived in. Names seen later are appended from the fallback palette in
first-seen order.

The registry is a plain instance owned by the application session and passed
to whatever renders colors. It is not thread-safe.
"""

from collections.abc import Iterable

from loguru import logger

NEUTRAL_COLOR = "#E0E0E0"

# Hand-picked colors for high-volume commodities
MAIN_COMMODITY_COLORS: dict[str, str] = {
    "BLOOD": "#FF3B3B",
    "CARA CARA": "#FF6095",
    "MANDARIN": "#FF951B",
    "MINNEOLA": "#F8C471",
    "NAVEL": "#FFEAA7",
    "LEMON": "#F4D03F",
    "GRAPEFRUIT": "#96CEB4",
}

FALLBACK_COMMODITY_COLORS: tuple[str, ...] = (
    "#45B7D1", "#DDA0DD", "#98D8C8", "#BB8FCE", "#85C1E9",
    "#82E0AA", "#F1948A", "#85C1E9", "#AED6F1", "#A9DFBF",
    "#F9E79F", "#D7BDE2", "#A3E4D7", "#E8A87C", "#C7CEEA",
    "#FFB3BA", "#FFDFBA", "#FFFFBA", "#BAFFC9", "#BAE1FF",
)


def normalize_commodity_name(name: str | None) -> str:
    """Normalize a commodity name for color lookup (trimmed, upper-cased)."""
    if not name:
        return ""
    return name.strip().upper()


class CommodityColorRegistry:
    """Maps normalized commodity names to display colors."""

    def __init__(
        self,
        curated: dict[str, str] | None = None,
        fallback: Iterable[str] | None = None,
        neutral: str = NEUTRAL_COLOR,
    ):
        self._curated = {normalize_commodity_name(k): v for k, v in (curated or MAIN_COMMODITY_COLORS).items()}
        self._fallback = tuple(fallback) if fallback is not None else FALLBACK_COMMODITY_COLORS
        if not self._fallback:
            raise ValueError("Fallback palette must contain at least one color")
        self.neutral = neutral
        self._colors: dict[str, str] = {}
        self._next_fallback = 0

    def color_for(self, commodity_name: str | None) -> str:
        """Get the color for a commodity, registering it on first sight.

        Empty names get the neutral color and are never registered.
        """
        normalized = normalize_commodity_name(commodity_name)
        if not normalized:
            return self.neutral

        color = self._colors.get(normalized)
        if color is not None:
            return color

        return self._register(normalized)

    def _register(self, normalized: str) -> str:
        color = self._curated.get(normalized)
        if color is None:
            color = self._fallback[self._next_fallback % len(self._fallback)]
            self._next_fallback += 1
        self._colors[normalized] = color
        return color

    def initialize(self, commodity_names: Iterable[str | None]) -> None:
        """Reset and pre-assign colors in sorted name order.

        Args:
            commodity_names: Commodity names in any order, duplicates and blanks allowed
        """
        self.reset()
        normalized = sorted({normalize_commodity_name(name) for name in commodity_names} - {""})
        for name in normalized:
            self._register(name)
        logger.debug(f"Initialized commodity colors for {len(normalized)} commodities")

    def reset(self) -> None:
        """Forget every assignment and rewind the fallback palette."""
        self._colors.clear()
        self._next_fallback = 0

    def curated_colors(self) -> dict[str, str]:
        return dict(self._curated)

    def assignments(self) -> dict[str, str]:
        return dict(self._colors)

    def __contains__(self, commodity_name: object) -> bool:
        if not isinstance(commodity_name, str):
            return False
        return normalize_commodity_name(commodity_name) in self._colors

    def __len__(self) -> int:
        return len(self._colors)
