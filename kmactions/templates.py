"""
Shared XML fragments used by several action builders.

Fragments returned here are lists of lines already indented for a
top-level action dict (two tabs), unless noted otherwise.
"""

from dataclasses import dataclass, fields
from typing import Any, Dict, List, Optional, Tuple, Union

from .errors import ConfigurationError
from .xml_utils import escape_for_xml, km_key_order, render_bool, render_string

PROCESSING_MODES = ('TextTokensOnly', 'Nothing')

APPLICATION_TARGETS = ('Front', 'Specific')


# =============================================================================
# Application
# =============================================================================

@dataclass(frozen=True)
class SpecificApp:
    """Identifies one application for actions that target a specific app."""
    name: Optional[str] = None
    bundle_identifier: Optional[str] = None
    path: Optional[str] = None
    match: Optional[str] = None
    new_file: Optional[str] = None

    @classmethod
    def coerce(cls, value: Union['SpecificApp', Dict[str, Any], None]) -> 'SpecificApp':
        """Accept a SpecificApp, a dict of its field names, or None."""
        if value is None:
            return cls()
        if isinstance(value, cls):
            return value
        if isinstance(value, dict):
            known = {f.name for f in fields(cls)}
            unknown = set(value) - known
            if unknown:
                raise ConfigurationError(
                    f"Unknown application option(s): {', '.join(sorted(unknown))}"
                )
            return cls(**value)
        raise ConfigurationError(f'Invalid application definition: {value!r}')

    def to_plist_fields(self) -> Dict[str, str]:
        app_data: Dict[str, str] = {}
        if self.bundle_identifier:
            app_data['BundleIdentifier'] = self.bundle_identifier
        if self.match:
            app_data['Match'] = self.match
        if self.name:
            app_data['Name'] = self.name
        if self.new_file:
            app_data['NewFile'] = self.new_file
        if self.path:
            app_data['Path'] = self.path
        return app_data


def application_lines(target: str = 'Front',
                      specific: Union[SpecificApp, Dict[str, Any], None] = None) -> List[str]:
    """Render the Application dict as unindented lines.

    The front application is written as an empty <dict/>.
    """
    if target not in APPLICATION_TARGETS:
        raise ConfigurationError(f"Invalid application target '{target}'")
    if target == 'Front':
        return ['<dict/>']

    app_data = SpecificApp.coerce(specific).to_plist_fields()
    if not app_data:
        return ['<dict/>']

    lines = ['<dict>']
    for key in km_key_order(app_data.keys(), 'application'):
        lines.append(f'\t<key>{key}</key>')
        lines.append(f'\t<string>{escape_for_xml(app_data[key])}</string>')
    lines.append('</dict>')
    return lines


def application_xml(key: str, target: str = 'Front',
                    specific: Union[SpecificApp, Dict[str, Any], None] = None) -> List[str]:
    """Render '<key>{key}</key>' plus the Application dict at action depth."""
    return [f'\t\t<key>{key}</key>'] + ['\t\t' + line for line in application_lines(target, specific)]


# =============================================================================
# Clipboards
# =============================================================================

def is_named_clipboard(destination: Any) -> bool:
    return isinstance(destination, dict) and 'name' in destination


def clipboard_destination_xml(destination: Any, prefix: str = 'Destination') -> List[str]:
    """Render the keys that select a clipboard destination.

    destination is None for the system clipboard (no keys),
    'TriggerClipboard', or a named clipboard dict {'name': ..., 'uid': ...}.
    prefix is 'Destination' or 'Target' depending on the action.
    """
    if destination is None or destination == 'SystemClipboard':
        return []
    if destination == 'TriggerClipboard':
        return [f'\t\t<key>{prefix}UseTriggerClipboard</key>', '\t\t<true/>']
    if is_named_clipboard(destination):
        lines = [
            f'\t\t<key>{prefix}NamedClipboardRedundantDisplayName</key>',
            '\t\t' + render_string(destination['name']),
        ]
        if destination.get('uid'):
            lines += [
                f'\t\t<key>{prefix}NamedClipboardUID</key>',
                '\t\t' + render_string(destination['uid']),
            ]
        lines += [f'\t\t<key>{prefix}UseNamedClipboard</key>', '\t\t<true/>']
        return lines
    raise ConfigurationError(f'Invalid clipboard destination: {destination!r}')


# =============================================================================
# Failure and Timeout Flags
# =============================================================================

def stop_on_failure_xml(stop_on_failure: Optional[bool] = None) -> List[str]:
    """KM only stores StopOnFailure when it is explicitly true."""
    if stop_on_failure is True:
        return ['\t\t<key>StopOnFailure</key>', '\t\t<true/>']
    return []


def notify_on_failure_xml(notify_on_failure: Optional[bool] = None) -> List[str]:
    """KM only stores NotifyOnFailure when it is explicitly false."""
    if notify_on_failure is False:
        return ['\t\t<key>NotifyOnFailure</key>', '\t\t<false/>']
    return []


def timeout_xml(notify_on_timeout: bool = True, timeout_aborts: bool = True) -> List[str]:
    """Render NotifyOnTimeOut / TimeOutAbortsMacro.

    TimeOutAbortsMacro is always written. NotifyOnTimeOut is written only
    when it disagrees with what TimeOutAbortsMacro implies: aborting
    implies notifying, not aborting implies silence.
    """
    lines: List[str] = []
    if timeout_aborts != notify_on_timeout:
        lines += ['\t\t<key>NotifyOnTimeOut</key>', '\t\t' + render_bool(notify_on_timeout)]
    lines += ['\t\t<key>TimeOutAbortsMacro</key>', '\t\t' + render_bool(timeout_aborts)]
    return lines


# =============================================================================
# Text
# =============================================================================

def validate_processing_mode(mode: Optional[str]) -> Optional[str]:
    if mode is not None and mode not in PROCESSING_MODES:
        raise ConfigurationError(
            f"Invalid processing mode '{mode}'. Expected one of: {', '.join(PROCESSING_MODES)}"
        )
    return mode


def processing_mode_xml(mode: Optional[str], key: str = 'ProcessingMode') -> List[str]:
    """Processing mode key; omitted for 'process text normally'."""
    if not validate_processing_mode(mode):
        return []
    return [f'\t\t<key>{key}</key>', f'\t\t<string>{mode}</string>']


def text_with_processing_mode_xml(text: str, mode: Optional[str] = None) -> List[str]:
    """Text followed by TextProcessingMode, as Switch/Case writes it."""
    return ['\t\t<key>Text</key>', '\t\t' + render_string(text)] + \
        processing_mode_xml(mode, key='TextProcessingMode')


# =============================================================================
# Window Presets
# =============================================================================

_LEFT = 'SCREENVISIBLE(Main,Left)'
_TOP = 'SCREENVISIBLE(Main,Top)'
_MID_X = 'SCREENVISIBLE(Main,MidX)'
_MID_Y = 'SCREENVISIBLE(Main,MidY)'
_WIDTH = 'SCREENVISIBLE(Main,Width)'
_HEIGHT = 'SCREENVISIBLE(Main,Height)'
_HALF_WIDTH = _WIDTH + '*50%'
_HALF_HEIGHT = _HEIGHT + '*50%'

MOVE_AND_RESIZE_PRESETS: Dict[str, Tuple[str, str, str, str]] = {
    'Custom': (_LEFT, _TOP, _WIDTH, _HEIGHT),
    'FullScreen': (_LEFT, _TOP, _WIDTH, _HEIGHT),
    'LeftColumn': (_LEFT, _TOP, _HALF_WIDTH, _HEIGHT),
    'RightColumn': (_MID_X, _TOP, _HALF_WIDTH, _HEIGHT),
    'TopHalf': (_LEFT, _TOP, _WIDTH, _HALF_HEIGHT),
    'BottomHalf': (_LEFT, _MID_Y, _WIDTH, _HALF_HEIGHT),
    'TopLeft': (_LEFT, _TOP, _HALF_WIDTH, _HALF_HEIGHT),
    'TopRight': (_MID_X, _TOP, _HALF_WIDTH, _HALF_HEIGHT),
    'BottomLeft': (_LEFT, _MID_Y, _HALF_WIDTH, _HALF_HEIGHT),
    'BottomRight': (_MID_X, _MID_Y, _HALF_WIDTH, _HALF_HEIGHT),
}


def get_move_and_resize_defaults(preset: str) -> Tuple[str, str, str, str]:
    """Return (left, top, width, height) expressions for a window preset.

    Unknown presets fall back to the full visible main screen.
    """
    return MOVE_AND_RESIZE_PRESETS.get(preset, MOVE_AND_RESIZE_PRESETS['FullScreen'])
