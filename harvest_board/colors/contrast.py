"""Color conversions for commodity chips and printed exports."""

DARK_TEXT = "#2C3E50"
LIGHT_TEXT = "#FFFFFF"


def hex_to_rgb(hex_color: str) -> tuple[int, int, int]:
    """Parse ``#RGB``, ``#RRGGBB`` or ``#RRGGBBAA`` into an RGB triple (alpha ignored).

    Raises:
        ValueError: If the string is not a hex color
    """
    clean = hex_color.strip().lstrip("#")
    if len(clean) == 3:
        clean = "".join(ch * 2 for ch in clean)
    if len(clean) not in (6, 8):
        raise ValueError(f"Invalid hex color: {hex_color!r}")
    return (int(clean[0:2], 16), int(clean[2:4], 16), int(clean[4:6], 16))


def contrast_color(hex_color: str) -> str:
    """Pick dark or light text for a background color by perceived luminance."""
    r, g, b = hex_to_rgb(hex_color)
    luminance = (0.299 * r + 0.587 * g + 0.114 * b) / 255
    return DARK_TEXT if luminance > 0.6 else LIGHT_TEXT


def hex_to_rgba(hex_color: str | None, opacity: float = 0.2) -> str | None:
    """Format a hex color as a CSS ``rgba()`` string."""
    if not hex_color:
        return None
    r, g, b = hex_to_rgb(hex_color)
    return f"rgba({r}, {g}, {b}, {opacity})"


def hex_to_rgb_blend(hex_color: str | None, opacity: float = 0.2) -> tuple[int, int, int] | None:
    """Blend a color with white at the given opacity.

    PDF exports cannot draw translucent fills, so a tinted cell background is
    produced as the solid color it would look like over white.
    """
    if not hex_color:
        return None
    r, g, b = hex_to_rgb(hex_color)
    return (
        round(r * opacity + 255 * (1 - opacity)),
        round(g * opacity + 255 * (1 - opacity)),
        round(b * opacity + 255 * (1 - opacity)),
    )
