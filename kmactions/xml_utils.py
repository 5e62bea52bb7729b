"""
XML rendering helpers for Keyboard Maestro property lists.

Covers escaping, the KM indentation convention, canonical key ordering and
the typed value renderer shared by action builders and condition rendering.

Indentation convention used throughout:
    <dict>          one tab
        <key>...    two tabs
    </dict>         one tab

Multiline <string> content is passed through unindented.
"""

import time
from typing import Any, Dict, Iterable, List, Optional

# =============================================================================
# Constants
# =============================================================================

PLIST_HEADER = (
    '<?xml version="1.0" encoding="UTF-8"?>\n'
    '<!DOCTYPE plist PUBLIC "-//Apple//DTD PLIST 1.0//EN" '
    '"http://www.apple.com/DTDs/PropertyList-1.0.dtd">\n'
    '<plist version="1.0">\n<array>\n'
)

PLIST_FOOTER = '</array>\n</plist>'

XML_ESCAPES = {
    '<': '&lt;',
    '>': '&gt;',
    '&': '&amp;',
    "'": '&apos;',
    '"': '&quot;',
}

# Boolean flags that always trail a condition dict
CONDITION_FLAG_KEYS = ('IsFrontApplication', 'IsFrontWindow', 'IsFront')

APPLICATION_KEY_ORDER = ('BundleIdentifier', 'Match', 'Name', 'NewFile', 'Path')


# =============================================================================
# Escaping and Indentation
# =============================================================================

def escape_for_xml(text: str) -> str:
    """Escape the five XML special characters for use in a text node."""
    return ''.join(XML_ESCAPES.get(ch, ch) for ch in str(text))


def shift_lines(text: str, tabs: int) -> List[str]:
    """Indent a rendered fragment by extra tabs, one level per tab.

    Continuation lines of a multiline <string> are part of the string value
    and are returned untouched.
    """
    pad = '\t' * tabs
    shifted: List[str] = []
    inside_multiline = False

    for line in text.split('\n'):
        trimmed = line.strip()
        if inside_multiline:
            if trimmed.endswith('</string>'):
                inside_multiline = False
            shifted.append(line)
            continue
        if trimmed.startswith('<string>') and not trimmed.endswith('</string>'):
            inside_multiline = True
        shifted.append(pad + line if trimmed else line)

    return shifted


# =============================================================================
# Canonical Key Order
# =============================================================================

def _alpha_key(name: str) -> tuple:
    # Case-insensitive first, lowercase ahead of uppercase on ties
    return (name.casefold(), name.swapcase())


def km_key_order(keys: Iterable[str], context: Optional[str] = None) -> List[str]:
    """Sort dict keys in the order Keyboard Maestro writes them.

    Args:
        keys: Field names to order.
        context: 'action', 'condition', 'application' or None for plain
            alphabetical ordering.

    Returns:
        A new list; the input is not modified.
    """
    if context == 'condition':
        return sorted(keys, key=lambda k: (k in CONDITION_FLAG_KEYS, _alpha_key(k)))

    if context == 'action':
        def action_rank(k: str) -> tuple:
            if k == 'MacroActionType':
                return (0, _alpha_key(k))
            if k == 'ActionUID':
                return (1, _alpha_key(k))
            return (2, _alpha_key(k))
        return sorted(keys, key=action_rank)

    if context == 'application':
        def app_rank(k: str) -> tuple:
            if k in APPLICATION_KEY_ORDER:
                return (0, APPLICATION_KEY_ORDER.index(k), ())
            return (1, 0, _alpha_key(k))
        return sorted(keys, key=app_rank)

    return sorted(keys, key=_alpha_key)


# =============================================================================
# Value Renderer
# =============================================================================

def render_string(value: Any) -> str:
    """Render a <string> tag, self-closing when the value is empty."""
    text = '' if value is None else str(value)
    if text == '':
        return '<string/>'
    return f'<string>{escape_for_xml(text)}</string>'


def render_bool(value: bool) -> str:
    return '<true/>' if value else '<false/>'


def render_value(value: Any, context: Optional[str] = None) -> List[str]:
    """Render a typed value as a list of plist lines.

    Nested lines carry their own relative indentation; the caller prefixes
    the whole block with whatever depth it sits at.

    Args:
        value: str, bool, int, float, list/tuple of text or a dict.
        context: key-order context used when value is a dict.
    """
    if isinstance(value, bool):
        return [render_bool(value)]
    if isinstance(value, int):
        return [f'<integer>{value}</integer>']
    if isinstance(value, float):
        return [f'<real>{value}</real>']
    if isinstance(value, (list, tuple)):
        if not value:
            return ['<array/>']
        return ['<array>'] + ['\t' + render_string(item) for item in value] + ['</array>']
    if isinstance(value, dict):
        return render_dict(value, context)
    return [render_string(value)]


def render_dict(record: Dict[str, Any], context: Optional[str] = None) -> List[str]:
    """Render a dict with canonical key order, skipping None values."""
    keys = [k for k in record if record[k] is not None]
    if not keys:
        return ['<dict/>']

    lines = ['<dict>']
    for key in km_key_order(keys, context):
        lines.append(f'\t<key>{key}</key>')
        nested_context = 'application' if key == 'Application' else None
        lines.extend('\t' + line for line in render_value(record[key], nested_context))
    lines.append('</dict>')
    return lines


def key_value(key: str, value: Any, tabs: int = 2) -> List[str]:
    """Render a <key> line followed by its value lines at the given depth."""
    pad = '\t' * tabs
    return [f'{pad}<key>{key}</key>'] + [pad + line for line in render_value(value)]


def include_if(condition: bool, key: str, value: Any, tabs: int = 2) -> List[str]:
    """Render a key/value pair only when condition holds.

    Builders use this to leave keys that sit at the host's implicit default
    out of the output.
    """
    if not condition:
        return []
    return key_value(key, value, tabs)


# =============================================================================
# Action UID
# =============================================================================

def generate_action_uid(timestamp: Optional[float] = None) -> int:
    """Return an ActionUID based on whole seconds since the epoch."""
    if timestamp is None:
        timestamp = time.time()
    return int(timestamp)


def action_uid_xml(action_uid: Optional[int] = None) -> List[str]:
    uid = generate_action_uid() if action_uid is None else action_uid
    return ['\t\t<key>ActionUID</key>', f'\t\t<integer>{uid}</integer>']

