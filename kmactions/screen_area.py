"""
Screen and window area descriptors.

A screen area is a dict with a 'type' discriminant plus the fields that
variant needs, e.g. {'type': 'Area', 'left': 0, 'top': 0, 'width': 100,
'height': 50}. The same dict shape is written under either ScreenArea or
ImageScreenArea; the parent key is supplied by the caller.
"""

from typing import Any, Dict, List

from .errors import ConfigurationError
from .xml_utils import render_string

INDEX_AREA_TYPES = ('ScreenIndex', 'WindowIndex')

NAMED_AREA_TYPES = ('WindowName', 'WindowNameContaining', 'WindowNameMatching')

FLAG_AREA_TYPES = (
    'ScreenAll',
    'ScreenMain',
    'ScreenSecond',
    'ScreenThird',
    'ScreenInternal',
    'ScreenExternal',
    'ScreenFront',
    'ScreenBack',
    'ScreenBack2',
    'ScreenMouse',
    'WindowFront',
)

SCREEN_AREA_TYPES = INDEX_AREA_TYPES + NAMED_AREA_TYPES + FLAG_AREA_TYPES + ('Area',)

DEFAULT_SCREEN_AREA = {'type': 'ScreenAll'}


def is_screen_area(value: Any) -> bool:
    return isinstance(value, dict) and bool(value.get('type'))


def _require(area: Dict[str, Any], *fields: str) -> None:
    missing = [name for name in fields if area.get(name) is None]
    if missing:
        raise ConfigurationError(
            f"Screen area '{area['type']}' is missing: {', '.join(missing)}"
        )


def screen_area_lines(key_name: str, area: Dict[str, Any]) -> List[str]:
    """Render a screen area under key_name as unindented plist lines.

    Field order per variant:
        ScreenIndex / WindowIndex  IndexExpression, ScreenAreaType
        Area                       Height, Left, ScreenAreaType, Top, Width
        WindowName*                ScreenAreaType, WindowName
        everything else            ScreenAreaType

    Raises:
        ConfigurationError: unknown type or a variant field is missing.
    """
    area_type = area.get('type')
    lines = [f'<key>{key_name}</key>', '<dict>']

    if area_type in INDEX_AREA_TYPES:
        _require(area, 'index')
        lines += [
            '\t<key>IndexExpression</key>',
            '\t' + render_string(area['index']),
            '\t<key>ScreenAreaType</key>',
            f'\t<string>{area_type}</string>',
        ]
    elif area_type == 'Area':
        # Height, Left, then the type, then Top, Width
        _require(area, 'left', 'top', 'width', 'height')
        lines += [
            '\t<key>HeightExpression</key>',
            '\t' + render_string(area['height']),
            '\t<key>LeftExpression</key>',
            '\t' + render_string(area['left']),
            '\t<key>ScreenAreaType</key>',
            '\t<string>Area</string>',
            '\t<key>TopExpression</key>',
            '\t' + render_string(area['top']),
            '\t<key>WidthExpression</key>',
            '\t' + render_string(area['width']),
        ]
    elif area_type in NAMED_AREA_TYPES:
        _require(area, 'name')
        lines += [
            '\t<key>ScreenAreaType</key>',
            f'\t<string>{area_type}</string>',
            '\t<key>WindowName</key>',
            '\t' + render_string(area['name']),
        ]
    elif area_type in FLAG_AREA_TYPES:
        lines += [
            '\t<key>ScreenAreaType</key>',
            f'\t<string>{area_type}</string>',
        ]
    else:
        raise ConfigurationError(f'Unknown screen area type: {area_type!r}')

    lines.append('</dict>')
    return lines


def screen_area_to_xml(key_name: str, area: Dict[str, Any]) -> str:
    """Render a ScreenArea / ImageScreenArea block as a single string."""
    return '\n'.join(screen_area_lines(key_name, area))
