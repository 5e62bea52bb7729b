"""
Text, clipboard and variable actions.
"""

import logging
from typing import Any, Optional

from ..styled_text import generate_basic_rtf, strip_rtf_to_plain_text
from ..templates import (
    clipboard_destination_xml,
    notify_on_failure_xml,
    processing_mode_xml,
    stop_on_failure_xml,
    timeout_xml,
)
from ..tokens import KM_TOKENS, resolve_token_preset
from .base import ActionDict, VirtualAction, require_choice

logger = logging.getLogger(__name__)

INSERT_TEXT_ACTIONS = (
    'ByTyping',
    'ByPasting',
    'ByPastingStyles',
    'DisplayWindow',
    'DisplayBriefly',
    'DisplayLarge',
)

# Only these insert modes keep rich text
STYLED_INSERT_ACTIONS = ('ByPastingStyles', 'DisplayWindow')

SET_VARIABLE_WHERE = ('Prepend', 'Append')

VARIABLE_SCOPE_PREFIXES = {
    'global': '',
    'local': 'LOCAL',
    'instance': 'INSTANCE',
}

USE_VARIABLE_ACTIONS = (
    'SetMouse',
    'SetWindowPosition',
    'SetWindowSize',
    'SetWindowFrame',
    'SetWindowByName',
    'SetWindowByNameContains',
    'SetWindowByNameMatches',
    'SetApplicationByName',
    'SetApplicationByNameContains',
    'SetApplicationByNameMatches',
    'SetSystemVolume',
)

TEXT_PRESETS = {
    'delete': '%Delete%',
    'positionCursor': '%|%',
}


def resolve_text_preset(text: str, preset_mode: Optional[str] = None) -> str:
    """Apply a Set Variable / Set Clipboard preset: delete, positionCursor or a token name."""
    if preset_mode in TEXT_PRESETS:
        return TEXT_PRESETS[preset_mode]
    if preset_mode and preset_mode in KM_TOKENS:
        return KM_TOKENS[preset_mode]
    return text


# =============================================================================
# Insert / Display Text
# =============================================================================

def build_insert_text(text: str, token_preset: Optional[str] = None,
                      action: str = 'ByTyping',
                      processing_mode: Optional[str] = None,
                      include_styled_text: bool = False,
                      rtf_content: Optional[str] = None,
                      targeting_type: str = 'Front',
                      action_uid: Optional[int] = None) -> VirtualAction:
    """Insert, paste or display text.

    StyledText is only written for ByPastingStyles and DisplayWindow. When
    rtf_content is supplied the Text string is re-derived from it, since KM
    treats the rich text as the source of truth.
    """
    require_choice('insert text action', action, INSERT_TEXT_ACTIONS)
    final_text = resolve_token_preset(text, token_preset)

    rtf = None
    if include_styled_text and action in STYLED_INSERT_ACTIONS:
        rtf = rtf_content or generate_basic_rtf(final_text)
        if rtf_content:
            final_text = strip_rtf_to_plain_text(rtf_content)
            logger.debug('Text re-derived from rtf_content: %r', final_text)

    d = ActionDict()
    d.add('Action', action)
    d.add_uid(action_uid)
    d.add('MacroActionType', 'InsertText')
    d.extend(processing_mode_xml(processing_mode))
    if rtf is not None:
        d.add_styled_text(rtf)
    if action == 'ByTyping':
        d.add('TargetApplication', {})
        d.add('TargetingType', targeting_type)
    d.add('Text', final_text)
    return d.build('InsertText')


def build_display_text_briefly(text: str, token_preset: Optional[str] = None,
                               processing_mode: Optional[str] = None,
                               action_uid: Optional[int] = None) -> VirtualAction:
    return build_insert_text(
        resolve_token_preset(text, token_preset),
        action='DisplayBriefly',
        processing_mode=processing_mode,
        include_styled_text=False,
        action_uid=action_uid,
    )


def build_display_text_window(text: str, token_preset: Optional[str] = None,
                              processing_mode: Optional[str] = None,
                              include_styled_text: bool = False,
                              rtf_content: Optional[str] = None,
                              action_uid: Optional[int] = None) -> VirtualAction:
    return build_insert_text(
        resolve_token_preset(text, token_preset),
        action='DisplayWindow',
        processing_mode=processing_mode,
        include_styled_text=include_styled_text,
        rtf_content=rtf_content,
        action_uid=action_uid,
    )


# =============================================================================
# Clipboard
# =============================================================================

def _cut_copy_paste(action: str, notify_on_timeout: bool, timeout_aborts: bool,
                    action_uid: Optional[int]) -> VirtualAction:
    d = ActionDict()
    d.add('Action', action)
    d.add_uid(action_uid)
    d.add('IsDisclosed', False)
    d.add('MacroActionType', 'CutCopyPaste')
    d.extend(timeout_xml(notify_on_timeout, timeout_aborts))
    return d.build('CutCopyPaste')


def build_copy(notify_on_timeout: bool = True, timeout_aborts: bool = True,
               action_uid: Optional[int] = None) -> VirtualAction:
    return _cut_copy_paste('Copy', notify_on_timeout, timeout_aborts, action_uid)


def build_cut(notify_on_timeout: bool = True, timeout_aborts: bool = False,
              action_uid: Optional[int] = None) -> VirtualAction:
    return _cut_copy_paste('Cut', notify_on_timeout, timeout_aborts, action_uid)


def build_paste(notify_on_timeout: bool = True, timeout_aborts: bool = False,
                action_uid: Optional[int] = None) -> VirtualAction:
    return _cut_copy_paste('Paste', notify_on_timeout, timeout_aborts, action_uid)


def build_set_clipboard_to_text(text: str = '', preset_mode: Optional[str] = None,
                                processing_mode: Optional[str] = None,
                                include_styled_text: bool = False,
                                rtf_content: Optional[str] = None,
                                destination: Any = None,
                                stop_on_failure: Optional[bool] = None,
                                notify_on_failure: Optional[bool] = None,
                                action_uid: Optional[int] = None) -> VirtualAction:
    """Set the system, trigger or a named clipboard to text.

    Args:
        text: Clipboard text.
        preset_mode: 'delete', 'positionCursor' or a token name; replaces text.
        processing_mode: 'TextTokensOnly', 'Nothing' or None.
        include_styled_text: Also write a StyledText block.
        rtf_content: RTF for the StyledText block. When given, Text is
            re-derived from it.
        destination: None for the system clipboard, 'TriggerClipboard', or a
            named clipboard dict {'name': ..., 'uid': ...}.
    """
    final_text = resolve_text_preset(text, preset_mode)

    d = ActionDict()
    d.add_uid(action_uid)
    d.add('JustDisplay', False)
    d.add('MacroActionType', 'SetClipboardToText')
    d.extend(notify_on_failure_xml(notify_on_failure))
    d.extend(processing_mode_xml(processing_mode))
    d.extend(stop_on_failure_xml(stop_on_failure))
    if include_styled_text:
        # Basic RTF is generated from the caller's text, not the preset
        d.add_styled_text(rtf_content or generate_basic_rtf(text))
        if rtf_content:
            final_text = strip_rtf_to_plain_text(rtf_content)
            logger.debug('Text re-derived from rtf_content: %r', final_text)
    d.extend(clipboard_destination_xml(destination, prefix='Target'))
    d.add('Text', final_text)
    return d.build('SetClipboardToText')


def build_clear_typed_string_buffer(action_uid: Optional[int] = None) -> VirtualAction:
    d = ActionDict()
    d.add_uid(action_uid)
    d.add('IsDisclosed', False)
    d.add('MacroActionType', 'SystemAction')
    d.add('SystemAction', 'ClearTypedString')
    return d.build('SystemAction')


# =============================================================================
# Variables
# =============================================================================

def build_set_variable(variable: str, text: str = '',
                       processing_mode: Optional[str] = None,
                       where: Optional[str] = None,
                       preset_mode: Optional[str] = None,
                       scope: str = 'global',
                       action_uid: Optional[int] = None) -> VirtualAction:
    """Set a variable to text.

    scope 'local' and 'instance' prefix the name with LOCAL / INSTANCE, the
    way KM recognises local and instance variables.
    """
    require_choice('variable scope', scope, tuple(VARIABLE_SCOPE_PREFIXES))
    if where is not None:
        require_choice('where', where, SET_VARIABLE_WHERE)

    d = ActionDict()
    d.add_uid(action_uid)
    d.add('MacroActionType', 'SetVariableToText')
    d.extend(processing_mode_xml(processing_mode))
    d.add('Text', resolve_text_preset(text, preset_mode))
    d.add('Variable', VARIABLE_SCOPE_PREFIXES[scope] + variable)
    d.add_if(where is not None, 'Where', where)
    return d.build('SetVariableToText')


def build_set_variable_to_calculation(variable: str, text: str,
                                      format: Optional[str] = None,
                                      stop_on_failure: Optional[bool] = None,
                                      notify_on_failure: Optional[bool] = None,
                                      action_uid: Optional[int] = None) -> VirtualAction:
    d = ActionDict()
    d.add_uid(action_uid)
    d.add_if(bool(format), 'Format', format)
    d.add('MacroActionType', 'SetVariableToCalculation')
    d.extend(notify_on_failure_xml(notify_on_failure))
    d.add_if(stop_on_failure is False, 'StopOnFailure', False)
    d.add('Text', text)
    d.add('UseFormat', bool(format))
    d.add('Variable', variable)
    return d.build('SetVariableToCalculation')


def build_use_variable(variable: str, action: str,
                       stop_on_failure: bool = False,
                       notify_on_failure: bool = True,
                       action_uid: Optional[int] = None) -> VirtualAction:
    """Apply a variable's value to the mouse, a window, an app or the volume."""
    require_choice('use variable action', action, USE_VARIABLE_ACTIONS)

    d = ActionDict()
    d.add('Action', action)
    d.add_uid(action_uid)
    d.add('MacroActionType', 'UseVariable')
    d.extend(notify_on_failure_xml(notify_on_failure))
    d.extend(stop_on_failure_xml(stop_on_failure))
    d.add('Variable', variable or '')
    return d.build('UseVariable')
