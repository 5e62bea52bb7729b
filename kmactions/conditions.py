"""
Condition normalization and rendering.

Conditions are plain dicts keyed by Keyboard Maestro field names with a
'ConditionType' discriminant, e.g.

    {'ConditionType': 'Variable', 'Variable': 'Count',
     'VariableConditionType': 'Is', 'VariableValue': '3'}

Before rendering, each condition passes through the normalizer for its
type. Normalizers are pure: they return a new dict, never raise, and coerce
inconsistent input toward a form KM would have written itself.
"""

import copy
import logging
from typing import Any, Callable, Dict, List, Sequence

from .errors import ConfigurationError
from .screen_area import DEFAULT_SCREEN_AREA, is_screen_area, screen_area_lines
from .xml_utils import km_key_order, render_value

logger = logging.getLogger(__name__)

CONDITION_LIST_MATCHES = ('All', 'Any', 'None', 'NotAll')

IMAGE_CLIPBOARD_KEYS = ('ImageNamedClipboardName', 'ImageNamedClipboardRedundandDisplayName')

# Pixel operators: PixelConditionTypeGood -> PixelConditionType.
# Kept exactly as KM pairs them, including the IsMoreBlue and IsLessBlue rows.
PIXEL_CONDITION_PAIRS = {
    'Is': 'IsNot',
    'IsNot': 'IsBrighter',
    'IsBrighter': 'IsDarker',
    'IsDarker': 'IsMoreRed',
    'IsMoreRed': 'IsLessRed',
    'IsLessRed': 'IsMoreGreen',
    'IsMoreGreen': 'IsLessGreen',
    'IsLessGreen': 'IsMoreBlue',
    'IsMoreBlue': 'IsLessBlueIsNot',
    'IsLessBlue': 'IsLessBlue',
}

FRONT_WINDOW_TITLE_REQUIRED = {
    'TitleIs',
    'TitleIsNot',
    'TitleContains',
    'TitleDoesNotContain',
    'TitleMatches',
    'TitleDoesNotMatch',
}

FRONT_WINDOW_TITLE_OPTIONAL = {
    'ExistsButTitleIsNot',
    'ExistsButTitleDoesNotContain',
    'ExistsButTitleDoesNotMatch',
}

# Sentinel KM writes for "include all variables"
ALL_VARIABLES_SENTINEL = '9999'


def _drop(cond: Dict[str, Any], *keys: str) -> None:
    for key in keys:
        cond.pop(key, None)


# =============================================================================
# Normalizers
# =============================================================================

def normalise_found_image(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Normalise a ScreenImage (found image) condition."""
    cond = copy.deepcopy(raw)
    if cond.get('ConditionType') != 'ScreenImage':
        return cond

    if not is_screen_area(cond.get('ScreenArea')):
        cond['ScreenArea'] = dict(DEFAULT_SCREEN_AREA)

    source = cond.get('ImageSource')

    # KM mirrors the search area for a Screen template source
    if source == 'Screen' and not cond.get('ImageScreenArea'):
        cond['ImageScreenArea'] = copy.deepcopy(cond['ScreenArea'])

    _drop(cond, 'ImageSelection')
    if source in (None, 'Image'):
        _drop(cond, 'ImagePath', 'ImageSource', *IMAGE_CLIPBOARD_KEYS)
    elif source == 'File':
        _drop(cond, *IMAGE_CLIPBOARD_KEYS)
    elif source == 'NamedClipboard':
        _drop(cond, 'ImagePath')
    elif source in ('SystemClipboard', 'TriggerClipboard', 'Icon', 'Screen'):
        _drop(cond, 'ImagePath', *IMAGE_CLIPBOARD_KEYS)

    cond.setdefault('DisplayMatches', False)
    cond.setdefault('Fuzz', 0)
    return cond


def normalise_ocr_condition(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Normalise an OCR condition for its ImageSource."""
    cond = copy.deepcopy(raw)
    if cond.get('ConditionType') != 'OCR':
        return cond

    source = cond.get('ImageSource')
    if source == 'File':
        _drop(cond, 'ImageScreenArea', *IMAGE_CLIPBOARD_KEYS)
    elif source == 'NamedClipboard':
        _drop(cond, 'ImagePath', 'ImageScreenArea')
    elif source == 'Screen':
        _drop(cond, 'ImagePath', *IMAGE_CLIPBOARD_KEYS)
    elif source in ('SystemClipboard', 'TriggerClipboard', 'Icon', 'Image'):
        _drop(cond, 'ImagePath', 'ImageScreenArea', *IMAGE_CLIPBOARD_KEYS)
        if source == 'Image':
            # Image is KM's default source
            _drop(cond, 'ImageSource')

    return {key: value for key, value in cond.items() if value is not None}


def normalise_pixel_condition(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Force the Pixel operator fields into one of KM's valid pairs."""
    cond = copy.deepcopy(raw)
    if cond.get('ConditionType') != 'Pixel':
        return cond

    bad = cond.get('PixelConditionType')
    good = cond.get('PixelConditionTypeGood')

    if bad not in PIXEL_CONDITION_PAIRS.values():
        bad = 'IsNot'
    if not isinstance(good, str) or good not in PIXEL_CONDITION_PAIRS:
        good = 'Is'
    if PIXEL_CONDITION_PAIRS[good] != bad:
        bad = PIXEL_CONDITION_PAIRS[good]

    if (bad, good) != (cond.get('PixelConditionType'), cond.get('PixelConditionTypeGood')):
        logger.debug('Pixel operators %r/%r coerced to %r/%r',
                     cond.get('PixelConditionType'), cond.get('PixelConditionTypeGood'),
                     bad, good)

    cond['PixelConditionType'] = bad
    cond['PixelConditionTypeGood'] = good
    return cond


def normalise_window_condition(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Normalise FrontWindow / AnyWindow conditions.

    IsFrontApplication defaults to True, in which case Application is
    dropped; otherwise an Application dict is always present. FrontWindow
    keeps a title only for the operators that compare one.
    """
    cond = copy.deepcopy(raw)
    condition_type = cond.get('ConditionType')
    if condition_type not in ('FrontWindow', 'AnyWindow'):
        return cond

    if cond.get('IsFrontApplication') is None:
        cond['IsFrontApplication'] = True
    if cond['IsFrontApplication']:
        _drop(cond, 'Application')
    elif not cond.get('Application'):
        cond['Application'] = {}

    if condition_type == 'FrontWindow':
        operator = cond.get('FrontWindowConditionType')
        if operator in FRONT_WINDOW_TITLE_REQUIRED:
            if cond.get('FrontWindowTitle') is None:
                logger.debug('FrontWindow %s without a title, using "Untitled"', operator)
                cond['FrontWindowTitle'] = 'Untitled'
        elif operator in FRONT_WINDOW_TITLE_OPTIONAL:
            if cond.get('FrontWindowTitle') is None:
                cond['FrontWindowTitle'] = ''
        else:
            _drop(cond, 'FrontWindowTitle')
    elif cond.get('AnyWindowTitle') is None:
        cond['AnyWindowTitle'] = ''

    return cond


def normalise_script_condition(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Materialise IncludedVariables and drop the includeAllVariables shortcut."""
    cond = copy.deepcopy(raw)
    if cond.get('ConditionType') != 'Script':
        return cond

    if isinstance(cond.get('IncludedVariables'), list):
        pass
    elif cond.get('includeAllVariables') is True:
        cond['IncludedVariables'] = [ALL_VARIABLES_SENTINEL]
    else:
        cond['IncludedVariables'] = []

    _drop(cond, 'includeAllVariables')
    return cond


CONDITION_NORMALIZERS: Dict[str, Callable[[Dict[str, Any]], Dict[str, Any]]] = {
    'ScreenImage': normalise_found_image,
    'OCR': normalise_ocr_condition,
    'Pixel': normalise_pixel_condition,
    'FrontWindow': normalise_window_condition,
    'AnyWindow': normalise_window_condition,
    'Script': normalise_script_condition,
}


def normalise_condition(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Apply the normalizer for the condition's type; others are copied as-is."""
    normalizer = CONDITION_NORMALIZERS.get(raw.get('ConditionType'))
    if normalizer is None:
        return copy.deepcopy(raw)
    return normalizer(raw)


# =============================================================================
# Rendering
# =============================================================================

def condition_lines(condition: Dict[str, Any]) -> List[str]:
    """Render one condition as unindented <dict> lines."""
    cond = normalise_condition(condition)
    condition_type = cond.get('ConditionType')
    lines = ['<dict>']

    for key in km_key_order(cond.keys(), 'condition'):
        value = cond[key]
        if value is None:
            continue

        if key in ('ScreenArea', 'ImageScreenArea') and is_screen_area(value):
            lines.extend('\t' + line for line in screen_area_lines(key, value))
            continue

        if condition_type == 'MouseButton' and key == 'Pressed':
            # KM only writes Pressed when it is false
            if value is False:
                lines += ['\t<key>Pressed</key>', '\t<false/>']
            continue

        # KM stores condition numbers as integers
        if isinstance(value, float) and value.is_integer():
            value = int(value)

        lines.append(f'\t<key>{key}</key>')
        nested_context = 'application' if key == 'Application' else None
        lines.extend('\t' + line for line in render_value(value, nested_context))

    lines.append('</dict>')
    return lines


def condition_to_xml(condition: Dict[str, Any]) -> str:
    """Normalise and render a single condition dict."""
    return '\n'.join(condition_lines(condition))


def conditions_block(conditions: Sequence[Dict[str, Any]], match: str = 'All') -> List[str]:
    """Render the Conditions dict used by If/Then/Else and While.

    Returns lines already indented for a top-level action dict.
    """
    if match not in CONDITION_LIST_MATCHES:
        raise ConfigurationError(
            f"Invalid condition list match '{match}'. "
            f"Expected one of: {', '.join(CONDITION_LIST_MATCHES)}"
        )

    lines = [
        '\t\t<key>Conditions</key>',
        '\t\t<dict>',
        '\t\t\t<key>ConditionList</key>',
    ]
    if conditions:
        lines.append('\t\t\t<array>')
        for condition in conditions:
            lines.extend('\t\t\t\t' + line for line in condition_lines(condition))
        lines.append('\t\t\t</array>')
    else:
        lines.append('\t\t\t<array/>')
    lines += [
        '\t\t\t<key>ConditionListMatch</key>',
        f'\t\t\t<string>{match}</string>',
        '\t\t</dict>',
    ]
    return lines
