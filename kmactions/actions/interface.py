"""
Application, menu, keyboard, mouse and notification actions.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence, Union

from ..errors import ConfigurationError
from ..keystroke import Shortcut, combo_mask, normalize_shortcut
from ..screen_area import DEFAULT_SCREEN_AREA, screen_area_lines
from ..templates import (
    SpecificApp,
    application_xml,
    notify_on_failure_xml,
    stop_on_failure_xml,
)
from ..tokens import resolve_token_preset
from .base import (
    ActionDict,
    VirtualAction,
    expression,
    join_actions,
    require_choice,
    require_number,
    round_half_up,
)
from .control import build_pause

logger = logging.getLogger(__name__)

AppSpec = Union[SpecificApp, Dict[str, Any], None]

ALREADY_ACTIVATED_ACTIONS = (
    'Normal',
    'SwitchToLast',
    'BringAllWindows',
    'Reopen',
    'Hide',
    'HideOthers',
    'Quit',
)

QUIT_VARIANTS = ('Quit', 'QuitRelaunch', 'ForceQuit', 'ForceQuitRelaunch')

# PressButton has no AXAction for a plain press
BUTTON_AX_ACTIONS = {
    'PressButtonNamed': None,
    'ShowMenuOfButtonNamed': 'AXShowMenu',
    'DecrementSliderNamed': 'AXDecrement',
    'IncrementSliderNamed': 'AXIncrement',
    'CancelButtonNamed': 'AXCancel',
}

SCROLL_DIRECTIONS = ('Up', 'Down', 'Left', 'Right')

BUTTON_INT = {
    'Left': 0,
    'Right': 1,
    'Center': 2,
    'Button4': 3,
    'Button5': 4,
    'Button6': 5,
}

CLICK_COUNT_INT = {
    'Click': 1,
    'DoubleClick': 2,
    'TripleClick': 3,
}

CLICK_KINDS = ('Move', 'Release') + tuple(CLICK_COUNT_INT)

IMAGE_SOURCES = (
    'Image',
    'Icon',
    'SystemClipboard',
    'TriggerClipboard',
    'NamedClipboard',
    'File',
    'Screen',
)

COORDINATE_REFERENCES = ('Image', 'Window', 'Screen', 'Mouse', 'Absolute')

IMAGE_SELECTIONS = ('Unique', 'Best', 'Top', 'Left', 'Bottom', 'Right')

# Drag modes a single or double click cannot carry
CLICK_ONLY_DRAGS = ('From', 'Drag', 'Release')

DEFAULT_FUZZ = 15

DEFAULT_NAMED_CLIPBOARD_UUID = 'FE1390C3-74DF-4983-9C6B-E2C441F97963'
DEFAULT_NAMED_CLIPBOARD_LABEL = 'Unnamed Named Clipboard'

SOUND_DIRECTORY = '/System/Library/Sounds'
DEFAULT_SOUND = 'Tink'
DEFAULT_VOLUME = 75
SOUND_DEVICE_ID = 'SOUNDEFFECTS'


# =============================================================================
# Applications
# =============================================================================

def build_activate(target: str = 'Front', specific: AppSpec = None,
                   all_windows: bool = False,
                   reopen_windows: bool = False,
                   already_activated_action: str = 'Normal',
                   timeout_aborts: bool = True,
                   action_uid: Optional[int] = None) -> VirtualAction:
    """Activate the front or a specific application."""
    require_choice('already activated action', already_activated_action,
                   ALREADY_ACTIVATED_ACTIONS)

    d = ActionDict()
    d.add_uid(action_uid)
    d.add('AllWindows', all_windows)
    d.add('AlreadyActivatedActionType', already_activated_action)
    d.extend(application_xml('Application', target, specific))
    d.add('MacroActionType', 'ActivateApplication')
    d.add('ReopenWindows', reopen_windows)
    d.add('TimeOutAbortsMacro', timeout_aborts)
    return d.build('ActivateApplication')


def build_quit(variant: str = 'Quit', target: str = 'Front', specific: AppSpec = None,
               timeout_aborts: bool = True,
               action_uid: Optional[int] = None) -> VirtualAction:
    """Quit, relaunch or force quit an application."""
    require_choice('quit variant', variant, QUIT_VARIANTS)

    d = ActionDict()
    # KM writes Action ahead of ActionUID for QuitSpecificApp
    d.add('Action', variant)
    d.add_uid(action_uid)
    d.extend(application_xml('Application', target, specific))
    d.add('MacroActionType', 'QuitSpecificApp')
    d.add('Target', target)
    d.add('TimeOutAbortsMacro', timeout_aborts)
    return d.build('QuitSpecificApp')


def build_show_specific_app(specific: AppSpec, target: str = 'Specific',
                            action_uid: Optional[int] = None) -> VirtualAction:
    d = ActionDict()
    d.add_uid(action_uid)
    d.extend(application_xml('Application', target, specific))
    d.add('MacroActionType', 'ShowSpecificApp')
    return d.build('ShowSpecificApp')


def build_show_status_menu(action_uid: Optional[int] = None) -> VirtualAction:
    d = ActionDict()
    d.add_uid(action_uid)
    # Always false in KM's own output and not editable in the UI
    d.add('IsDisclosed', False)
    d.add('MacroActionType', 'SystemAction')
    d.add('SystemAction', 'ShowStatusMenu')
    return d.build('SystemAction')


# =============================================================================
# Menus and Buttons
# =============================================================================

def build_select_menu_item(menu_path: Sequence[str], target: str = 'Front',
                           specific: AppSpec = None,
                           stop_on_failure: Optional[bool] = None,
                           notify_on_failure: Optional[bool] = None,
                           action_uid: Optional[int] = None) -> VirtualAction:
    """Select a menu item by its path, e.g. ['File', 'Export', 'PDF...'].

    Raises:
        ConfigurationError: menu_path is empty or not a list.
    """
    if not menu_path or not isinstance(menu_path, (list, tuple)):
        raise ConfigurationError('menu_path (list of menu/submenu strings) is required')

    d = ActionDict()
    d.add_uid(action_uid)
    d.add('MacroActionType', 'SelectMenuItem')
    d.add('Menu', ['' if item is None else item for item in menu_path])
    d.extend(notify_on_failure_xml(notify_on_failure))
    d.add_if(stop_on_failure is False, 'StopOnFailure', False)
    d.extend(application_xml('TargetApplication', target, specific))
    d.add('TargetingType', target)
    return d.build('SelectMenuItem')


def build_press_button(action: str, button_name: str,
                       wait_for_enabled_button: bool = False,
                       timeout_aborts: bool = True,
                       notify_on_timeout: bool = True,
                       stop_on_failure: Optional[bool] = None,
                       notify_on_failure: Optional[bool] = None,
                       action_uid: Optional[int] = None) -> VirtualAction:
    """Press, show the menu of, step or cancel a named button or slider.

    Timeout keys are only written when waiting for the button to enable.
    """
    require_choice('button action', action, tuple(BUTTON_AX_ACTIONS))
    ax_action = BUTTON_AX_ACTIONS[action]

    d = ActionDict()
    d.add_if(ax_action is not None, 'AXAction', ax_action)
    d.add_uid(action_uid)
    d.add('ButtonName', button_name)
    d.add('MacroActionType', 'PressButton')
    d.extend(notify_on_failure_xml(notify_on_failure))
    d.add_if(wait_for_enabled_button and timeout_aborts != notify_on_timeout,
             'NotifyOnTimeOut', notify_on_timeout)
    d.add_if(stop_on_failure is False, 'StopOnFailure', False)
    d.add_if(wait_for_enabled_button, 'TimeOutAbortsMacro', timeout_aborts)
    d.add_if(wait_for_enabled_button, 'WaitForEnabledButton', True)
    return d.build('PressButton')


# =============================================================================
# Keyboard
# =============================================================================

def _simulate_keystroke(key_code: int, modifiers: int, press: Optional[str],
                        action_uid: Optional[int]) -> VirtualAction:
    d = ActionDict()
    d.add_uid(action_uid)
    d.add('KeyCode', key_code)
    d.add('MacroActionType', 'SimulateKeystroke')
    d.add('Modifiers', modifiers)
    d.add_if(press is not None, 'Press', press)
    d.add('ReleaseAll', False)
    d.add('TargetApplication', {})
    d.add('TargetingType', 'Front')
    return d.build('SimulateKeystroke')


def build_type_keystroke(keystroke: Shortcut,
                         press_and_hold: bool = False,
                         press_and_repeat: bool = False,
                         hold_time: Optional[float] = None,
                         action_uid: Optional[int] = None) -> VirtualAction:
    """Type a keystroke, optionally held or repeated.

    A hold renders three actions: press, pause (hold_time, or the default
    pause) and release.

    Raises:
        ConfigurationError: press_and_repeat combined with a hold, or a
            modifier-only keystroke.
    """
    if press_and_repeat and (press_and_hold or hold_time is not None):
        raise ConfigurationError(
            'press_and_repeat cannot be combined with press_and_hold or hold_time'
        )

    (modifiers, key_code), = normalize_shortcut(keystroke).items()
    if key_code is None:
        raise ConfigurationError(
            f'TypeKeystroke requires a key, but received modifier-only keystroke: {keystroke!r}'
        )

    if hold_time is not None or press_and_hold:
        return join_actions('SimulateKeystroke', [
            _simulate_keystroke(key_code, modifiers, 'PressAndHold', action_uid),
            build_pause(time=hold_time, action_uid=action_uid),
            _simulate_keystroke(key_code, modifiers, 'Release', action_uid),
        ])
    if press_and_repeat:
        return _simulate_keystroke(key_code, modifiers, 'PressAndRepeat', action_uid)
    return _simulate_keystroke(key_code, modifiers, None, action_uid)


# =============================================================================
# Mouse
# =============================================================================

def _modifier_mask(click_modifiers: Union[int, str, Dict[int, Optional[int]]]) -> int:
    if isinstance(click_modifiers, int) and not isinstance(click_modifiers, bool):
        return click_modifiers
    if isinstance(click_modifiers, str):
        return combo_mask(click_modifiers) if click_modifiers else 0
    (mask, _key_code), = normalize_shortcut(click_modifiers).items()
    return mask


def _clamp_fuzz(fuzz: Optional[float]) -> int:
    if fuzz is None:
        return DEFAULT_FUZZ
    clamped = max(0, min(100, round_half_up(require_number('fuzz', fuzz))))
    if clamped != fuzz:
        logger.debug('Fuzz %r clamped to %d', fuzz, clamped)
    return clamped


def build_click_at_found_image(click_kind: str = 'Click',
                               button: str = 'Left',
                               click_modifiers: Union[int, str, Dict[int, Optional[int]]] = 0,
                               horizontal: Union[int, float, str] = 0,
                               vertical: Union[int, float, str] = 0,
                               relative: str = 'Image',
                               relative_corner: Optional[str] = None,
                               image_source: str = 'Image',
                               fuzz: Optional[float] = None,
                               wait_for_image: Optional[bool] = None,
                               image_selection: str = 'Unique',
                               named_clipboard_uuid: Optional[str] = None,
                               file_path: Optional[str] = None,
                               screen_area: Optional[Dict[str, Any]] = None,
                               image_screen_area: Optional[Dict[str, Any]] = None,
                               mouse_drag: str = 'None',
                               drag_target_x: Union[int, float, str] = 0,
                               drag_target_y: Union[int, float, str] = 0,
                               restore_mouse_location: bool = False,
                               action_uid: Optional[int] = None) -> VirtualAction:
    """Move and/or click relative to a found image, window, screen or the mouse.

    Args:
        click_kind: 'Move', 'Click', 'DoubleClick', 'TripleClick' or 'Release'.
        button: Mouse button name, see BUTTON_INT.
        click_modifiers: Modifier mask, or a shortcut such as 'Cmd+Shift'.
        horizontal: Horizontal offset expression.
        vertical: Vertical offset expression.
        relative: What the offsets are relative to.
        relative_corner: Corner of the reference; defaults to TopLeft for
            Mouse and Absolute, Center otherwise.
        image_source: Template source; only written when relative is Image.
        fuzz: Match fuzziness, clamped to 0-100 and rounded. Defaults to 15.
        wait_for_image: Writes the wait block only when exactly True.
        image_selection: Which match to use when several are found.
        named_clipboard_uuid: Clipboard for a NamedClipboard source.
        file_path: Template image path, required for a File source.
        screen_area: Where to search; defaults to all screens.
        image_screen_area: Template area for a Screen source; falls back to
            screen_area.
        mouse_drag: Drag mode.
        drag_target_x: Drag target horizontal expression.
        drag_target_y: Drag target vertical expression.
        restore_mouse_location: Move the mouse back afterwards. Ignored for
            Release.

    Raises:
        ConfigurationError: File source without file_path, or an unknown
            click kind, button, source, reference or selection.
    """
    require_choice('click kind', click_kind, CLICK_KINDS)
    require_choice('mouse button', button, tuple(BUTTON_INT))
    require_choice('image source', image_source, IMAGE_SOURCES)
    require_choice('coordinate reference', relative, COORDINATE_REFERENCES)
    require_choice('image selection', image_selection, IMAGE_SELECTIONS)
    if image_source == 'File' and not file_path:
        raise ConfigurationError("file_path must be supplied when image_source is 'File'")

    # Release hides the option in KM's editor
    restore = False if click_kind == 'Release' else restore_mouse_location

    if relative_corner is None:
        relative_corner = 'TopLeft' if relative in ('Mouse', 'Absolute') else 'Center'

    if click_kind == 'Move':
        action, click_count = 'Move', 0
    elif click_kind == 'Release':
        action, click_count = 'MoveAndClick', -1
    else:
        click_count = CLICK_COUNT_INT[click_kind]
        action = 'Click' if restore else 'MoveAndClick'

    if click_kind in ('Click', 'DoubleClick') and mouse_drag in CLICK_ONLY_DRAGS:
        mouse_drag = 'None'

    if screen_area is None:
        screen_area = dict(DEFAULT_SCREEN_AREA)
    template_keys = relative == 'Image'

    d = ActionDict()
    d.add('Action', action)
    d.add_uid(action_uid)
    d.add('Button', BUTTON_INT[button])
    d.add('ClickCount', click_count)
    d.add('DisplayMatches', False)
    d.add('DragHorizontalPosition', expression(drag_target_x))
    d.add('DragVerticalPosition', expression(drag_target_y))
    d.add('Fuzz', _clamp_fuzz(fuzz))
    d.add('HorizontalPositionExpression', expression(horizontal))

    if template_keys:
        d.add_if(image_source == 'File', 'ImagePath', file_path)
        if image_source == 'NamedClipboard':
            d.add('ImageNamedClipboardName', named_clipboard_uuid or DEFAULT_NAMED_CLIPBOARD_UUID)
            d.add('ImageNamedClipboardRedundandDisplayName', DEFAULT_NAMED_CLIPBOARD_LABEL)
        if image_source == 'Screen':
            d.extend(_area_lines('ImageScreenArea', image_screen_area or screen_area))
    d.add_if(template_keys and image_selection != 'Unique', 'ImageSelection', image_selection)
    d.add_if(template_keys and image_source != 'Image', 'ImageSource', image_source)

    d.add('MacroActionType', 'MouseMoveAndClick')
    d.add('Modifiers', _modifier_mask(click_modifiers))
    d.add('MouseDrag', mouse_drag)
    d.add('Relative', relative)
    d.add('RelativeCorner', relative_corner)
    d.add('RestoreMouseLocation', restore)
    if template_keys:
        d.extend(_area_lines('ScreenArea', screen_area))
    d.add('VerticalPositionExpression', expression(vertical))

    if wait_for_image is True:
        d.add('TimeOutAbortsMacro', True)
        d.add('WaitForImage', True)
    return d.build('MouseMoveAndClick')


def _area_lines(key_name: str, area: Dict[str, Any]) -> List[str]:
    return ['\t\t' + line for line in screen_area_lines(key_name, area)]


def build_move_and_click(click_kind: str = 'Click',
                         button: str = 'Left',
                         click_modifiers: Union[int, str, Dict[int, Optional[int]]] = 0,
                         horizontal: Union[int, float, str] = 0,
                         vertical: Union[int, float, str] = 0,
                         relative: str = 'Window',
                         relative_corner: str = 'TopLeft',
                         mouse_drag: str = 'None',
                         drag_target_x: Union[int, float, str] = 0,
                         drag_target_y: Union[int, float, str] = 0,
                         restore_mouse_location: bool = False,
                         action_uid: Optional[int] = None) -> VirtualAction:
    """Move and click relative to the front window, a screen or the mouse."""
    if relative == 'Image':
        raise ConfigurationError('build_move_and_click does not search for images; '
                                 'use build_click_at_found_image')
    return build_click_at_found_image(
        click_kind=click_kind,
        button=button,
        click_modifiers=click_modifiers,
        horizontal=horizontal,
        vertical=vertical,
        relative=relative,
        relative_corner=relative_corner,
        mouse_drag=mouse_drag,
        drag_target_x=drag_target_x,
        drag_target_y=drag_target_y,
        restore_mouse_location=restore_mouse_location,
        fuzz=DEFAULT_FUZZ,
        image_selection='Unique',
        action_uid=action_uid,
    )


def build_scroll_wheel_event(scroll_amount: Union[int, float, str], direction: str,
                             stop_on_failure: Optional[bool] = None,
                             notify_on_failure: Optional[bool] = None,
                             action_uid: Optional[int] = None) -> VirtualAction:
    require_choice('scroll direction', direction, SCROLL_DIRECTIONS)

    d = ActionDict()
    d.add_uid(action_uid)
    d.add('MacroActionType', 'ScrollWheelEvent')
    d.extend(notify_on_failure_xml(notify_on_failure))
    d.add('ScrollAmountExpression', expression(scroll_amount))
    d.add('ScrollDirection', direction)
    d.extend(stop_on_failure_xml(stop_on_failure))
    return d.build('ScrollWheelEvent')


# =============================================================================
# Sound and Notifications
# =============================================================================

def is_custom_sound_path(sound: Optional[str]) -> bool:
    return isinstance(sound, str) and '/' in sound


def build_play_sound(sound: str = DEFAULT_SOUND, path: Optional[str] = None,
                     asynchronously: bool = True,
                     volume: float = DEFAULT_VOLUME,
                     timeout_aborts: bool = True,
                     action_uid: Optional[int] = None) -> VirtualAction:
    """Play a built-in sound by name, or a sound file when path contains '/'.

    Volume is clamped to 0-100 and omitted at 100. KM always writes
    TimeOutAbortsMacro as true for this action, so timeout_aborts is
    accepted but not written.
    """
    sound_path = path if is_custom_sound_path(path) else f'{SOUND_DIRECTORY}/{sound}.aiff'
    volume_int = max(0, min(100, round_half_up(require_number('volume', volume))))
    if not timeout_aborts:
        logger.debug('PlaySound ignores timeout_aborts=False')

    d = ActionDict()
    d.add_uid(action_uid)
    d.add_if(asynchronously, 'Asynchronously', True)
    d.add('DeviceID', SOUND_DEVICE_ID)
    d.add('MacroActionType', 'PlaySound')
    d.add('Path', sound_path)
    d.add('TimeOutAbortsMacro', True)
    d.add_if(volume_int != 100, 'Volume', volume_int)
    return d.build('PlaySound')


def build_notification(title: str, body: str, subtitle: str = '', sound: str = '',
                       title_token_preset: Optional[str] = None,
                       subtitle_token_preset: Optional[str] = None,
                       body_token_preset: Optional[str] = None,
                       action_uid: Optional[int] = None) -> VirtualAction:
    """Display a notification.

    sound is a built-in sound name, or a file path (containing '/') in which
    case SoundName is left empty and a Play Sound action is appended.
    """
    custom_sound = is_custom_sound_path(sound)

    d = ActionDict()
    d.add_uid(action_uid)
    d.add('MacroActionType', 'Notification')
    d.add('SoundName', '' if custom_sound else sound)
    d.add('Subtitle', resolve_token_preset(subtitle, subtitle_token_preset))
    d.add('Text', resolve_token_preset(body, body_token_preset))
    d.add('Title', resolve_token_preset(title, title_token_preset))
    notification = d.build('Notification')

    if custom_sound:
        return join_actions('Notification', [
            notification,
            build_play_sound(path=sound, action_uid=action_uid),
        ])
    return notification
