"""Synthetic satellite-style SVG imagery for the dashboard pages."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple
from xml.sax.saxutils import escape

WIDTH = 800
HEIGHT = 600
DEFAULT_TYPE = "truecolor"
SVG_MEDIA_TYPE = "image/svg+xml"


@dataclass(frozen=True)
class ImagePalette:
    title: str
    colors: Tuple[str, ...]


PALETTES: Dict[str, ImagePalette] = {
    "vegetation": ImagePalette("NDVI Vegetation Index", ("#8B4513", "#DAA520", "#228B22", "#32CD32")),
    "moisture": ImagePalette("SMAP Soil Moisture", ("#4169E1", "#1E90FF", "#87CEEB", "#B0E0E6")),
    "temperature": ImagePalette("Land Surface Temperature", ("#FF4500", "#FF6347", "#FFA500", "#FFD700")),
    "truecolor": ImagePalette("True Color Composite", ("#4A5D23", "#6B8E23", "#8FBC8F", "#90EE90")),
}


def palette_for(data_type: str | None) -> ImagePalette:
    return PALETTES.get(data_type or DEFAULT_TYPE, PALETTES[DEFAULT_TYPE])


def _gradient_stops(colors: Tuple[str, ...]) -> str:
    last = max(len(colors) - 1, 1)
    return "".join(
        f'<stop offset="{index / last * 100:g}%" stop-color="{color}"/>'
        for index, color in enumerate(colors)
    )


def _field_lines() -> str:
    vertical = [
        f'<line x1="{x}" y1="0" x2="{x}" y2="{HEIGHT}"/>' for x in range(WIDTH // 4, WIDTH, WIDTH // 4)
    ]
    horizontal = [
        f'<line x1="0" y1="{y}" x2="{WIDTH}" y2="{y}"/>' for y in range(HEIGHT // 4, HEIGHT, HEIGHT // 4)
    ]
    return "".join(vertical + horizontal)


def render_sample_image(data_type: str | None = DEFAULT_TYPE) -> str:
    """Return an SVG document for ``data_type``; unknown types render as true colour."""

    palette = palette_for(data_type)
    return (
        f'<svg width="{WIDTH}" height="{HEIGHT}" xmlns="http://www.w3.org/2000/svg">'
        "<defs>"
        f'<radialGradient id="grad1" cx="50%" cy="50%" r="80%">{_gradient_stops(palette.colors)}</radialGradient>'
        '<pattern id="farmPattern" patternUnits="userSpaceOnUse" width="50" height="50">'
        '<rect width="50" height="50" fill="url(#grad1)" opacity="0.8"/>'
        '<circle cx="25" cy="25" r="20" fill="none" stroke="rgba(255,255,255,0.2)" stroke-width="1"/>'
        "</pattern>"
        "</defs>"
        '<rect width="100%" height="100%" fill="url(#grad1)"/>'
        '<rect x="0" y="0" width="100%" height="100%" fill="url(#farmPattern)" opacity="0.6"/>'
        f'<g stroke="rgba(255,255,255,0.3)" stroke-width="2" fill="none">{_field_lines()}</g>'
        '<text x="20" y="30" fill="white" font-family="monospace" font-size="14" opacity="0.8">'
        f"{escape(palette.title)}</text>"
        '<text x="20" y="50" fill="white" font-family="monospace" font-size="12" opacity="0.6">'
        "Iowa Farmland • 42.03°N, 93.58°W</text>"
        f'<text x="20" y="{HEIGHT - 20}" fill="white" font-family="monospace" font-size="10" opacity="0.6">'
        "NASA/GSFC • Synthetic demonstration data</text>"
        "</svg>"
    )
