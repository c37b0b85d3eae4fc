"""Theme colors and color utilities for the UI."""

from __future__ import annotations


class HomeColors:
    """Light theme palette."""

    BG_TOP = "#fff3e0"
    BG_BOTTOM = "#ffe0b2"

    PRIMARY = "#e65100"
    PRIMARY_LIGHT = "#ff8a50"
    PRIMARY_DARK = "#ac1900"

    STAR_ON = "#ffc107"
    STAR_OFF = "#d7ccc8"
    CORRECT = "#43a047"
    WRONG = "#e53935"

    CARD_BG = "rgba(255, 255, 255, 0.85)"
    CARD_BORDER = "rgba(255, 255, 255, 0.6)"

    TEXT_PRIMARY = "#3e2723"
    TEXT_SECONDARY = "#6d4c41"
    TEXT_MUTED = "#a1887f"

    LEVEL_PALETTE = ("#19A7D9", "#F5B23B", "#F26A5A", "#2FBF93", "#4D79FF")


def blend_hex(a: str, b: str, t: float) -> str:
    """Blend two #RRGGBB colors. t=0 -> a, t=1 -> b. Malformed input returns *a*."""
    a = a.strip()
    b = b.strip()
    if not (a.startswith("#") and b.startswith("#") and len(a) == 7 and len(b) == 7):
        return a
    try:
        t = max(0.0, min(1.0, float(t)))
        ar, ag, ab = int(a[1:3], 16), int(a[3:5], 16), int(a[5:7], 16)
        br, bg, bb = int(b[1:3], 16), int(b[3:5], 16), int(b[5:7], 16)
    except ValueError:
        return a
    r = int(ar + (br - ar) * t)
    g = int(ag + (bg - ag) * t)
    bl = int(ab + (bb - ab) * t)
    return f"#{r:02X}{g:02X}{bl:02X}"


def level_color(level_number: int) -> str:
    """Card color for a level, cycling through the palette."""
    palette = HomeColors.LEVEL_PALETTE
    return palette[(max(1, level_number) - 1) % len(palette)]


def star_text(stars: int, max_stars: int = 3) -> str:
    stars = max(0, min(max_stars, stars))
    return "★" * stars + "☆" * (max_stars - stars)
