"""
Keyboard shortcut normalization.

Turns a shortcut given as a string ("Cmd+Shift+KeyD", "a", "F1",
"KeyCode:36"), a bare key code (36) or an existing {mask: keycode} dict
into the {modifier_mask: key_code} form Keyboard Maestro keystroke actions
use. Modifier-only shortcuts map to a key code of None.

Key codes follow JavaScript event.code names; directional modifiers
(CmdLeft, OptRight, ...) are folded into their plain modifier.
"""

import re
from typing import Dict, List, NamedTuple, Optional, Union

from .errors import ConfigurationError

MODIFIER_ORDER = ('Cmd', 'Option', 'Shift', 'Control')

MAC_MODIFIER_CODES = {
    'Cmd': 256,
    'Shift': 512,
    'Option': 2048,
    'Control': 4096,
}

MODIFIER_ALIASES = {
    'Cmd': 'Cmd',
    'Command': 'Cmd',
    'Meta': 'Cmd',
    'CmdLeft': 'Cmd',
    'CmdRight': 'Cmd',
    'CommandLeft': 'Cmd',
    'CommandRight': 'Cmd',
    'MetaLeft': 'Cmd',
    'MetaRight': 'Cmd',
    'Win': 'Cmd',
    'WinLeft': 'Cmd',
    'WinRight': 'Cmd',
    'Windows': 'Cmd',
    'WindowsLeft': 'Cmd',
    'WindowsRight': 'Cmd',
    'Shift': 'Shift',
    'ShiftLeft': 'Shift',
    'ShiftRight': 'Shift',
    'Option': 'Option',
    'OptionLeft': 'Option',
    'OptionRight': 'Option',
    'Opt': 'Option',
    'OptLeft': 'Option',
    'OptRight': 'Option',
    'Alt': 'Option',
    'AltLeft': 'Option',
    'AltRight': 'Option',
    'Ctrl': 'Control',
    'CtrlLeft': 'Control',
    'CtrlRight': 'Control',
    'Control': 'Control',
    'ControlLeft': 'Control',
    'ControlRight': 'Control',
    'macControl': 'Control',
}

JS_CODE_TO_KEY_CODE = {
    'Backquote': 50,
    'Digit1': 18,
    'Digit2': 19,
    'Digit3': 20,
    'Digit4': 21,
    'Digit5': 23,
    'Digit6': 22,
    'Digit7': 26,
    'Digit8': 28,
    'Digit9': 25,
    'Digit0': 29,
    'Minus': 27,
    'Equal': 24,
    'KeyQ': 12,
    'KeyW': 13,
    'KeyE': 14,
    'KeyR': 15,
    'KeyT': 17,
    'KeyY': 16,
    'KeyU': 32,
    'KeyI': 34,
    'KeyO': 31,
    'KeyP': 35,
    'BracketLeft': 33,
    'BracketRight': 30,
    'Backslash': 42,
    'KeyA': 0,
    'KeyS': 1,
    'KeyD': 2,
    'KeyF': 3,
    'KeyG': 5,
    'KeyH': 4,
    'KeyJ': 38,
    'KeyK': 40,
    'KeyL': 37,
    'Semicolon': 41,
    'Quote': 39,
    'KeyZ': 6,
    'KeyX': 7,
    'KeyC': 8,
    'KeyV': 9,
    'KeyB': 11,
    'KeyN': 45,
    'KeyM': 46,
    'Comma': 43,
    'Period': 47,
    'Slash': 44,
    'Space': 49,
    'Tab': 48,
    'Enter': 36,
    'NumpadEnter': 76,
    'Backspace': 51,
    'Delete': 51,
    'Escape': 53,
    'CapsLock': 57,
    'ArrowLeft': 123,
    'ArrowRight': 124,
    'ArrowDown': 125,
    'ArrowUp': 126,
    'Home': 115,
    'End': 119,
    'PageUp': 116,
    'PageDown': 121,
    'F1': 122,
    'F2': 120,
    'F3': 99,
    'F4': 118,
    'F5': 96,
    'F6': 97,
    'F7': 98,
    'F8': 100,
    'F9': 101,
    'F10': 109,
    'F11': 103,
    'F12': 111,
    'F13': 105,
    'F14': 107,
    'F15': 113,
    'F16': 106,
    'F17': 64,
    'F18': 79,
    'F19': 80,
    'F20': 90,
    'Numpad0': 82,
    'Numpad1': 83,
    'Numpad2': 84,
    'Numpad3': 85,
    'Numpad4': 86,
    'Numpad5': 87,
    'Numpad6': 88,
    'Numpad7': 89,
    'Numpad8': 91,
    'Numpad9': 92,
    'NumpadMultiply': 67,
    'NumpadAdd': 69,
    'NumpadSubtract': 78,
    'NumpadDivide': 75,
    'NumpadDecimal': 65,
    'NumpadEqual': 81,
    'NumLock': 71,
    'Insert': 114,
    'PrintScreen': 114,
    'Pause': 131,
}

KEY_CODE_PREFIX_RE = re.compile(r'^KeyCode:(\d+)$')

Shortcut = Union[int, str, Dict[int, Optional[int]]]


class ParsedShortcut(NamedTuple):
    modifiers: List[str]
    key_token: str


def is_modifier(token: str) -> bool:
    return token in MODIFIER_ALIASES


def sort_modifiers(modifiers: List[str]) -> List[str]:
    """Sort canonical modifier names into Cmd, Option, Shift, Control order."""
    return sorted(modifiers, key=MODIFIER_ORDER.index)


def build_modifier_mask(modifiers: List[str]) -> int:
    return sum(MAC_MODIFIER_CODES[m] for m in set(modifiers))


def parse_shortcut(shortcut: str) -> ParsedShortcut:
    """Split 'Cmd+Shift+KeyD' into canonical modifiers and the key token."""
    modifiers: List[str] = []
    key_token = ''
    for part in (p.strip() for p in shortcut.split('+')):
        if not part:
            continue
        if is_modifier(part):
            modifiers.append(MODIFIER_ALIASES[part])
        else:
            key_token = part
    return ParsedShortcut(sort_modifiers(modifiers), key_token)


def combo_mask(combo: str) -> int:
    """Return the modifier mask for a modifier-only combination like 'Cmd+Option'."""
    tokens = [t.strip() for t in combo.split('+') if t.strip()]
    for token in tokens:
        if not is_modifier(token):
            raise ConfigurationError(f'Unknown modifier combination: "{combo}"')
    return build_modifier_mask([MODIFIER_ALIASES[t] for t in tokens])


def _resolve_key_code(key_token: str) -> int:
    explicit = KEY_CODE_PREFIX_RE.match(key_token)
    if explicit:
        code = int(explicit.group(1))
        if 0 <= code <= 255:
            return code
        raise ConfigurationError(f'Key code out of range: {code}')

    if key_token in JS_CODE_TO_KEY_CODE:
        return JS_CODE_TO_KEY_CODE[key_token]

    # Single characters map to KeyX / DigitX
    if len(key_token) == 1:
        ch = key_token.upper()
        if 'A' <= ch <= 'Z':
            return JS_CODE_TO_KEY_CODE[f'Key{ch}']
        if ch in '0123456789':
            return JS_CODE_TO_KEY_CODE[f'Digit{ch}']

    # Multi-digit strings are raw key codes; "1" is the digit key, not code 1
    if re.fullmatch(r'[0-9]{2,}', key_token) and int(key_token) <= 255:
        return int(key_token)

    raise ConfigurationError(f'Unsupported key token: "{key_token}"')


def normalize_shortcut(shortcut: Shortcut) -> Dict[int, Optional[int]]:
    """Normalize any supported shortcut form into {modifier_mask: key_code}.

    Examples:
        normalize_shortcut('Cmd+S')      -> {256: 1}
        normalize_shortcut('a')          -> {0: 0}
        normalize_shortcut(36)           -> {0: 36}
        normalize_shortcut('Shift+Option') -> {2560: None}
        normalize_shortcut({256: 1})     -> {256: 1}

    Raises:
        ConfigurationError: unknown key token or key code out of range.
    """
    if isinstance(shortcut, bool):
        raise ConfigurationError(f'Invalid shortcut: {shortcut!r}')

    if isinstance(shortcut, int):
        if not 0 <= shortcut <= 255:
            raise ConfigurationError(f'Key code out of range: {shortcut}')
        return {0: shortcut}

    if isinstance(shortcut, dict):
        if len(shortcut) != 1:
            raise ConfigurationError(f'Shortcut map must have exactly one entry: {shortcut!r}')
        (mask, key), = shortcut.items()
        if key is not None and not isinstance(key, int):
            raise ConfigurationError(f'Invalid key code in shortcut map: {key!r}')
        return {int(mask): key}

    parsed = parse_shortcut(str(shortcut))
    mask = build_modifier_mask(parsed.modifiers)
    if not parsed.key_token:
        if not parsed.modifiers:
            raise ConfigurationError('Empty shortcut')
        return {mask: None}
    return {mask: _resolve_key_code(parsed.key_token)}
