"""
Control-flow actions: cancel variants, groups, branches, loops, Switch/Case,
pauses, returns and comments.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from ..conditions import conditions_block
from ..errors import ConfigurationError
from ..styled_text import generate_basic_rtf
from ..templates import text_with_processing_mode_xml, timeout_xml
from ..tokens import resolve_token_preset
from ..xml_utils import render_string
from .base import ActionDict, VirtualAction, action_array_lines, expression, require_choice

logger = logging.getLogger(__name__)

CANCEL_TYPES = (
    'CancelAllMacros',
    'CancelAllOtherMacros',
    'CancelThisMacro',
    'CancelJustThisMacro',
    'CancelSpecificMacro',
    'RetryThisLoop',
    'ContinueLoop',
    'BreakFromLoop',
)

PAUSE_UNITS = ('Hours', 'Minutes', 'Seconds', 'Hundredths')

DEFAULT_PAUSE_TIME = 0.05

SWITCH_SOURCES = (
    'Clipboard',
    'NamedClipboard',
    'TriggerClipboard',
    'Variable',
    'Text',
    'Calculation',
    'EnvironmentVariable',
    'File',
)

SWITCH_OPERATORS = (
    'IsEmpty', 'IsNotEmpty', 'Is', 'IsNot', 'Contains', 'DoesNotContain',
    'StartsWith', 'EndsWith', 'IsBefore', 'IsAfter', 'Matches', 'DoesNotMatch',
    'LessThan', 'LessThanOrEqual', 'Equal', 'GreaterThanOrEqual', 'GreaterThan',
    'NotEqual', 'Otherwise',
)


# =============================================================================
# Cancel
# =============================================================================

def build_cancel(cancel_type: str, instance: Optional[str] = None,
                 action_uid: Optional[int] = None) -> VirtualAction:
    """Cancel macros or control the enclosing loop.

    Raises:
        ConfigurationError: unknown cancel type, or CancelSpecificMacro
            without an instance (macro name or UUID).
    """
    require_choice('cancel type', cancel_type, CANCEL_TYPES)
    if cancel_type == 'CancelSpecificMacro' and not instance:
        raise ConfigurationError(
            "CancelSpecificMacro requires an 'instance' (macro name or UUID) to cancel."
        )

    d = ActionDict()
    d.add('Action', cancel_type)
    d.add_uid(action_uid)
    d.add_if(cancel_type == 'CancelSpecificMacro', 'Instance', instance)
    d.add('MacroActionType', 'Cancel')
    return d.build('Cancel')


def build_break_from_loop(action_uid: Optional[int] = None) -> VirtualAction:
    return build_cancel('BreakFromLoop', action_uid=action_uid)


def build_continue_loop(action_uid: Optional[int] = None) -> VirtualAction:
    return build_cancel('ContinueLoop', action_uid=action_uid)


def build_retry_this_loop(action_uid: Optional[int] = None) -> VirtualAction:
    return build_cancel('RetryThisLoop', action_uid=action_uid)


# =============================================================================
# Containers
# =============================================================================

def build_group(name: str, actions: Sequence[VirtualAction],
                timeout_aborts: bool = True,
                action_uid: Optional[int] = None) -> VirtualAction:
    logger.debug('Group %r with %d action(s)', name, len(actions))
    d = ActionDict()
    d.add('ActionName', name)
    d.add_uid(action_uid)
    d.add_actions('Actions', actions)
    d.add('MacroActionType', 'Group')
    d.extend(timeout_xml(timeout_aborts=timeout_aborts))
    return d.build('Group')


def build_if_then_else(conditions: Sequence[Dict[str, Any]],
                       then_actions: Sequence[VirtualAction],
                       else_actions: Optional[Sequence[VirtualAction]] = None,
                       match: str = 'All',
                       timeout_aborts: bool = True,
                       action_uid: Optional[int] = None) -> VirtualAction:
    """If/Then/Else over a condition list.

    Args:
        conditions: Condition dicts; each is normalised before rendering.
        then_actions: Actions run when the conditions match.
        else_actions: Actions run otherwise; an empty list renders <array/>.
        match: 'All', 'Any', 'None' or 'NotAll'.
        timeout_aborts: TimeOutAbortsMacro, always written.
    """
    d = ActionDict()
    d.add_uid(action_uid)
    d.extend(conditions_block(conditions, match))
    d.add_actions('ElseActions', else_actions)
    d.add('MacroActionType', 'IfThenElse')
    d.add_actions('ThenActions', then_actions)
    d.add('TimeOutAbortsMacro', timeout_aborts)
    return d.build('IfThenElse')


def build_while(conditions: Sequence[Dict[str, Any]],
                actions: Sequence[VirtualAction],
                match: str = 'All',
                timeout_aborts: bool = True,
                notify_on_timeout: Optional[bool] = None,
                action_uid: Optional[int] = None) -> VirtualAction:
    """Loop while the condition list matches.

    NotifyOnTimeOut is only written when notify_on_timeout is given.
    """
    d = ActionDict()
    d.add_uid(action_uid)
    d.add_actions('Actions', actions)
    d.extend(conditions_block(conditions, match))
    d.add('MacroActionType', 'While')
    d.add_if(notify_on_timeout is not None, 'NotifyOnTimeOut', notify_on_timeout)
    d.add('TimeOutAbortsMacro', timeout_aborts)
    return d.build('While')


def _case_entry_lines(case: Dict[str, Any]) -> List[str]:
    operator = require_choice('switch operator', case.get('operator'), SWITCH_OPERATORS)
    lines = [
        '\t\t\t<dict>',
        '\t\t\t\t<key>Actions</key>',
    ]
    lines.extend(action_array_lines(case.get('actions'), tabs=4))
    lines += [
        '\t\t\t\t<key>ConditionType</key>',
        f'\t\t\t\t<string>{operator}</string>',
        '\t\t\t\t<key>TestValue</key>',
    ]
    test_value = case.get('test_value')
    lines.append('\t\t\t\t' + render_string('' if test_value is None else test_value))
    lines.append('\t\t\t</dict>')
    return lines


def build_switch_case(source: str, cases: Sequence[Dict[str, Any]],
                      variable: Optional[str] = None,
                      text: str = '',
                      text_processing_mode: Optional[str] = None,
                      calculation: str = '',
                      environment_variable: str = '',
                      path: str = '',
                      named_clipboard: Optional[Dict[str, str]] = None,
                      action_uid: Optional[int] = None) -> VirtualAction:
    """Switch/Case on a variable, text, clipboard, calculation or file.

    Each case is a dict with 'operator', optional 'test_value' and optional
    'actions' (a list of VirtualAction). named_clipboard is
    {'uid': ..., 'name': ...}.

    Raises:
        ConfigurationError: no cases, unknown source or unknown operator.
    """
    require_choice('switch source', source, SWITCH_SOURCES)
    if not cases:
        raise ConfigurationError('SwitchCase requires at least one case entry.')

    d = ActionDict()
    d.add_uid(action_uid)
    d.add_if(source == 'Calculation', 'Calculation', calculation)
    d.extend(['\t\t<key>CaseEntries</key>', '\t\t<array>'])
    for case in cases:
        d.extend(_case_entry_lines(case))
    d.extend(['\t\t</array>'])
    d.add('MacroActionType', 'Switch')
    d.add_if(source == 'File', 'Path', path)
    d.add('Source', source)

    if source == 'Variable':
        d.add('Variable', variable or '')
    elif source == 'Text':
        d.extend(text_with_processing_mode_xml(text, text_processing_mode))
    elif source == 'EnvironmentVariable':
        d.add('Text', environment_variable)
    elif source == 'NamedClipboard' and named_clipboard:
        d.add('ClipboardSourceNamedClipboardUID', named_clipboard.get('uid', ''))
        d.add('ClipboardSourceNamedClipboardRedundantDisplayName',
              named_clipboard.get('name', ''))
    return d.build('Switch')


# =============================================================================
# Timing and Results
# =============================================================================

def build_pause(time: Optional[float] = None, unit: Optional[str] = None,
                action_uid: Optional[int] = None) -> VirtualAction:
    """Pause for time units; Seconds is KM's default and writes no Unit key.

    Raises:
        ConfigurationError: unit given without time, or unknown unit.
    """
    if time is None and unit is not None:
        raise ConfigurationError("Cannot specify 'unit' without 'time'.")
    if unit is not None:
        require_choice('pause unit', unit, PAUSE_UNITS)
    if time is None:
        time = DEFAULT_PAUSE_TIME

    d = ActionDict()
    d.add_uid(action_uid)
    d.add('MacroActionType', 'Pause')
    d.add('Time', expression(time))
    d.add('TimeOutAbortsMacro', True)
    d.add_if(unit is not None and unit != 'Seconds', 'Unit', unit)
    return d.build('Pause')


def build_return(text: str = '', token_preset: Optional[str] = None,
                 action_uid: Optional[int] = None) -> VirtualAction:
    """Return a result from the macro."""
    d = ActionDict()
    d.add_uid(action_uid)
    d.add('MacroActionType', 'Return')
    d.add('Text', resolve_token_preset(text or '', token_preset))
    return d.build('Return')


def build_comment(title: str, text: str = '', rtf_content: Optional[str] = None,
                  action_uid: Optional[int] = None) -> VirtualAction:
    """Comment with a title and styled body; plain text is wrapped in basic RTF."""
    d = ActionDict()
    d.add_uid(action_uid)
    d.add('MacroActionType', 'Comment')
    d.add_styled_text(rtf_content or generate_basic_rtf(text))
    d.add('Title', title)
    return d.build('Comment')
