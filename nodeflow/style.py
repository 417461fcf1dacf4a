"""Connection drawing style: colours, widths and JSON loading."""

from __future__ import annotations

import colorsys
import json
import random
import zlib
from dataclasses import dataclass
from typing import Any

from PIL import ImageColor

Color = tuple[int, int, int]

_HUE_RANGE = 0xFF
_LIGHTNESS = 160

_COLOR_KEYS = {
    "ConstructionColor": "construction_color",
    "NormalColor": "normal_color",
    "SelectedColor": "selected_color",
    "SelectedHaloColor": "selected_halo_color",
    "HoveredColor": "hovered_color",
}
_FLOAT_KEYS = {
    "LineWidth": "line_width",
    "ConstructionLineWidth": "construction_line_width",
    "PointDiameter": "point_diameter",
}
_BOOL_KEYS = {
    "UseDataDefinedColors": "use_data_defined_colors",
}


def _to_int(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return int(value)


def parse_color(value: Any) -> Color:
    """Turn a JSON colour (an ``[r, g, b]`` array or a colour name) into RGB."""
    if isinstance(value, list):
        if len(value) < 3:
            raise ValueError(f"colour array needs three components, got {value!r}")
        red, green, blue = (_to_int(component) for component in value[:3])
        return red, green, blue
    if isinstance(value, str):
        try:
            rgb = ImageColor.getrgb(value)
        except ValueError as exc:
            raise ValueError(f"unknown colour {value!r}") from exc
        return rgb[0], rgb[1], rgb[2]
    raise ValueError(f"cannot read a colour from {value!r}")


def _to_float(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    return float(value)


def _to_bool(value: Any) -> bool:
    return value if isinstance(value, bool) else False


@dataclass
class ConnectionStyle:
    """How connections are painted."""

    construction_color: Color = (128, 128, 128)
    normal_color: Color = (0, 0, 0)
    selected_color: Color = (128, 128, 128)
    selected_halo_color: Color = (0, 191, 255)
    hovered_color: Color = (0, 191, 255)
    line_width: float = 3.0
    construction_line_width: float = 2.0
    point_diameter: float = 10.0
    use_data_defined_colors: bool = False

    @classmethod
    def from_json(cls, json_text: str) -> ConnectionStyle:
        """Default style with the values found in ``json_text`` applied on top."""
        style = cls()
        style.load_json_text(json_text)
        return style

    def load_json_text(self, json_text: str) -> None:
        """Override fields from the ``ConnectionStyle`` object of a JSON document.

        Missing or null values keep their current setting; a document that is
        not a JSON object changes nothing.
        """
        try:
            document = json.loads(json_text)
        except json.JSONDecodeError:
            return
        if not isinstance(document, dict):
            return
        values = document.get("ConnectionStyle")
        if not isinstance(values, dict):
            return

        for key, attr in _COLOR_KEYS.items():
            if values.get(key) is not None:
                setattr(self, attr, parse_color(values[key]))
        for key, attr in _FLOAT_KEYS.items():
            if values.get(key) is not None:
                setattr(self, attr, _to_float(values[key]))
        for key, attr in _BOOL_KEYS.items():
            if values.get(key) is not None:
                setattr(self, attr, _to_bool(values[key]))

    def normal_color_for(self, type_id: str) -> Color:
        """A stable colour derived from a data type id."""
        digest = zlib.crc32(type_id.encode("utf-8"))
        hue = random.Random(digest).randrange(_HUE_RANGE)
        saturation = 120 + digest % 129
        red, green, blue = colorsys.hls_to_rgb(
            hue / 360.0, _LIGHTNESS / 255.0, saturation / 255.0
        )
        return round(red * 255), round(green * 255), round(blue * 255)


_current_style = ConnectionStyle()


def set_connection_style(json_text: str) -> ConnectionStyle:
    """Make a style built from ``json_text`` the one in use and return it."""
    global _current_style
    _current_style = ConnectionStyle.from_json(json_text)
    return _current_style


def connection_style() -> ConnectionStyle:
    """The connection style currently in use."""
    return _current_style