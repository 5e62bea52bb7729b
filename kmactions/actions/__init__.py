"""
Action builders, one function per Keyboard Maestro action kind.

ACTION_BUILDERS maps the 'type' names accepted by the JSON dispatcher in
kmactions.document to the builder functions.
"""

from typing import Callable, Dict

from .base import ActionDict, VirtualAction, join_actions
from .control import (
    build_break_from_loop,
    build_cancel,
    build_comment,
    build_continue_loop,
    build_group,
    build_if_then_else,
    build_pause,
    build_retry_this_loop,
    build_return,
    build_switch_case,
    build_while,
)
from .files import build_file, build_open, build_open_url
from .interface import (
    build_activate,
    build_click_at_found_image,
    build_move_and_click,
    build_notification,
    build_play_sound,
    build_press_button,
    build_quit,
    build_scroll_wheel_event,
    build_select_menu_item,
    build_show_specific_app,
    build_show_status_menu,
    build_type_keystroke,
)
from .text import (
    build_clear_typed_string_buffer,
    build_copy,
    build_cut,
    build_display_text_briefly,
    build_display_text_window,
    build_insert_text,
    build_paste,
    build_set_clipboard_to_text,
    build_set_variable,
    build_set_variable_to_calculation,
    build_use_variable,
)

ACTION_BUILDERS: Dict[str, Callable[..., VirtualAction]] = {
    # Applications
    'Activate': build_activate,
    'Quit': build_quit,
    'ShowSpecificApp': build_show_specific_app,
    'ShowStatusMenu': build_show_status_menu,

    # Control flow
    'Cancel': build_cancel,
    'BreakFromLoop': build_break_from_loop,
    'ContinueLoop': build_continue_loop,
    'RetryThisLoop': build_retry_this_loop,
    'Group': build_group,
    'IfThenElse': build_if_then_else,
    'While': build_while,
    'SwitchCase': build_switch_case,
    'Pause': build_pause,
    'Return': build_return,
    'Comment': build_comment,

    # Text, clipboard and variables
    'InsertText': build_insert_text,
    'DisplayTextBriefly': build_display_text_briefly,
    'DisplayTextWindow': build_display_text_window,
    'Copy': build_copy,
    'Cut': build_cut,
    'Paste': build_paste,
    'SetClipboardToText': build_set_clipboard_to_text,
    'ClearTypedStringBuffer': build_clear_typed_string_buffer,
    'SetVariable': build_set_variable,
    'SetVariableToCalculation': build_set_variable_to_calculation,
    'UseVariable': build_use_variable,

    # Keyboard, mouse and interface
    'TypeKeystroke': build_type_keystroke,
    'ClickAtFoundImage': build_click_at_found_image,
    'MoveAndClick': build_move_and_click,
    'ScrollWheelEvent': build_scroll_wheel_event,
    'SelectMenuItem': build_select_menu_item,
    'PressButton': build_press_button,
    'Notification': build_notification,
    'PlaySound': build_play_sound,

    # Files
    'File': build_file,
    'Open': build_open,
    'OpenURL': build_open_url,
}

__all__ = ['ACTION_BUILDERS', 'ActionDict', 'VirtualAction', 'join_actions'] + \
    sorted(builder.__name__ for builder in ACTION_BUILDERS.values())
