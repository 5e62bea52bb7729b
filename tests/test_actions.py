import pytest

from kmactions.actions import (
    build_activate,
    build_cancel,
    build_clear_typed_string_buffer,
    build_click_at_found_image,
    build_comment,
    build_copy,
    build_cut,
    build_file,
    build_group,
    build_if_then_else,
    build_insert_text,
    build_move_and_click,
    build_notification,
    build_open,
    build_open_url,
    build_paste,
    build_pause,
    build_play_sound,
    build_press_button,
    build_quit,
    build_return,
    build_scroll_wheel_event,
    build_select_menu_item,
    build_set_clipboard_to_text,
    build_set_variable,
    build_set_variable_to_calculation,
    build_show_status_menu,
    build_switch_case,
    build_type_keystroke,
    build_use_variable,
    build_while,
)
from kmactions.actions.base import expression, round_half_up
from kmactions.errors import ConfigurationError
from kmactions.styled_text import decode_styled_text_data
from kmactions.templates import get_move_and_resize_defaults

UID = 1700000000


def top_keys(xml):
    """Keys of the top-level action dict(s), in order."""
    return [line[7:-6] for line in xml.split('\n') if line.startswith('\t\t<key>')]


def value_of(xml, key):
    """The rendered value line that follows a top-level key."""
    lines = xml.split('\n')
    return lines[lines.index(f'\t\t<key>{key}</key>') + 1].strip()


# =============================================================================
# Shared helpers
# =============================================================================

@pytest.mark.parametrize('value, expected', [(1.0, '1'), (0.5, '0.5'), (3, '3'), ('%Var%', '%Var%')])
def test_expression(value, expected):
    assert expression(value) == expected


@pytest.mark.parametrize('value, expected', [(14.5, 15), (14.4, 14), (0.5, 1), (-0.5, 0)])
def test_round_half_up(value, expected):
    assert round_half_up(value) == expected


def test_move_and_resize_presets():
    assert get_move_and_resize_defaults('RightColumn') == (
        'SCREENVISIBLE(Main,MidX)',
        'SCREENVISIBLE(Main,Top)',
        'SCREENVISIBLE(Main,Width)*50%',
        'SCREENVISIBLE(Main,Height)',
    )
    assert get_move_and_resize_defaults('Nope') == get_move_and_resize_defaults('FullScreen')


# =============================================================================
# Control flow
# =============================================================================

def test_pause_default_layout():
    assert build_pause(action_uid=UID).to_xml() == '\n'.join([
        '\t<dict>',
        '\t\t<key>ActionUID</key>',
        f'\t\t<integer>{UID}</integer>',
        '\t\t<key>MacroActionType</key>',
        '\t\t<string>Pause</string>',
        '\t\t<key>Time</key>',
        '\t\t<string>0.05</string>',
        '\t\t<key>TimeOutAbortsMacro</key>',
        '\t\t<true/>',
        '\t</dict>',
    ])


def test_pause_seconds_writes_no_unit():
    xml = build_pause(time=1.0, unit='Seconds', action_uid=UID).to_xml()
    assert '<key>Unit</key>' not in xml
    assert value_of(xml, 'Time') == '<string>1</string>'


def test_pause_minutes_writes_one_unit():
    xml = build_pause(time=2, unit='Minutes', action_uid=UID).to_xml()
    assert xml.count('<key>Unit</key>') == 1
    assert value_of(xml, 'Unit') == '<string>Minutes</string>'


def test_pause_unit_without_time_raises():
    with pytest.raises(ConfigurationError, match="without 'time'"):
        build_pause(unit='Minutes')


def test_pause_unknown_unit_raises():
    with pytest.raises(ConfigurationError):
        build_pause(time=1, unit='Days')


def test_cancel_specific_macro():
    xml = build_cancel('CancelSpecificMacro', instance='My Macro', action_uid=UID).to_xml()
    assert top_keys(xml) == ['Action', 'ActionUID', 'Instance', 'MacroActionType']
    assert value_of(xml, 'Instance') == '<string>My Macro</string>'


def test_cancel_this_macro_has_no_instance():
    xml = build_cancel('CancelThisMacro', instance='ignored', action_uid=UID).to_xml()
    assert 'Instance' not in xml


def test_cancel_specific_macro_requires_instance():
    with pytest.raises(ConfigurationError, match='requires an'):
        build_cancel('CancelSpecificMacro')


def test_cancel_unknown_type():
    with pytest.raises(ConfigurationError, match='Invalid cancel type'):
        build_cancel('CancelEverything')


def test_group_nests_children_proportionally():
    xml = build_group('Setup', [build_pause(action_uid=2)], action_uid=UID).to_xml()
    lines = xml.split('\n')
    assert lines[:8] == [
        '\t<dict>',
        '\t\t<key>ActionName</key>',
        '\t\t<string>Setup</string>',
        '\t\t<key>ActionUID</key>',
        f'\t\t<integer>{UID}</integer>',
        '\t\t<key>Actions</key>',
        '\t\t<array>',
        '\t\t\t<dict>',
    ]
    assert '\t\t\t\t<key>MacroActionType</key>' in lines
    assert lines[-7:] == [
        '\t\t\t</dict>',
        '\t\t</array>',
        '\t\t<key>MacroActionType</key>',
        '\t\t<string>Group</string>',
        '\t\t<key>TimeOutAbortsMacro</key>',
        '\t\t<true/>',
        '\t</dict>',
    ]


def test_group_of_groups_indents_each_level():
    inner = build_group('Inner', [build_pause(action_uid=3)], action_uid=2)
    xml = build_group('Outer', [inner], action_uid=UID).to_xml()
    assert '\t\t\t\t\t<dict>' in xml.split('\n')
    assert '\t\t\t\t\t\t<string>Pause</string>' in xml.split('\n')


def test_empty_group_renders_empty_array():
    xml = build_group('Nothing', [], action_uid=UID).to_xml()
    assert '\t\t<key>Actions</key>\n\t\t<array/>' in xml


def test_nesting_leaves_multiline_strings_alone():
    child = build_insert_text('first line\nsecond line', action='ByPasting', action_uid=2)
    xml = build_group('Text', [child], action_uid=UID).to_xml()
    assert '<string>first line\nsecond line</string>' in xml


def test_if_then_else_layout():
    xml = build_if_then_else(
        [{'ConditionType': 'Variable', 'Variable': 'Count',
          'VariableConditionType': 'Is', 'VariableValue': '3'}],
        then_actions=[build_pause(action_uid=2)],
        match='Any',
        action_uid=UID,
    ).to_xml()
    assert top_keys(xml) == [
        'ActionUID', 'Conditions', 'ElseActions', 'MacroActionType', 'ThenActions',
        'TimeOutAbortsMacro',
    ]
    assert '\t\t<key>ElseActions</key>\n\t\t<array/>' in xml
    assert '\t\t\t<string>Any</string>' in xml


def test_while_notify_on_timeout_only_when_given():
    conditions = [{'ConditionType': 'Variable', 'Variable': 'Done'}]
    assert 'NotifyOnTimeOut' not in build_while(conditions, [], action_uid=UID).to_xml()
    xml = build_while(conditions, [], notify_on_timeout=False, action_uid=UID).to_xml()
    assert top_keys(xml) == [
        'ActionUID', 'Actions', 'Conditions', 'MacroActionType', 'NotifyOnTimeOut',
        'TimeOutAbortsMacro',
    ]


def test_while_invalid_match():
    with pytest.raises(ConfigurationError):
        build_while([], [], match='Most')


def test_switch_case_on_variable():
    xml = build_switch_case(
        'Variable',
        [
            {'operator': 'Is', 'test_value': 'yes', 'actions': [build_pause(action_uid=2)]},
            {'operator': 'Otherwise'},
        ],
        variable='Answer',
        action_uid=UID,
    ).to_xml()
    lines = xml.split('\n')
    assert top_keys(xml) == ['ActionUID', 'CaseEntries', 'MacroActionType', 'Source', 'Variable']
    assert lines.count('\t\t\t<dict>') == 2
    assert '\t\t\t\t\t<dict>' in lines
    assert '\t\t\t\t<array/>' in lines
    assert '\t\t\t\t<string/>' in lines
    assert value_of(xml, 'Variable') == '<string>Answer</string>'


@pytest.mark.parametrize('test_value, expected', [
    (0, '<string>0</string>'),
    ('', '<string/>'),
    (None, '<string/>'),
])
def test_switch_case_keeps_falsy_test_values(test_value, expected):
    xml = build_switch_case('Variable', [{'operator': 'Equal', 'test_value': test_value}],
                            variable='N', action_uid=UID).to_xml()
    assert f'\t\t\t\t<key>TestValue</key>\n\t\t\t\t{expected}' in xml


def test_switch_case_named_clipboard_and_calculation():
    clip = build_switch_case('NamedClipboard', [{'operator': 'IsEmpty'}],
                             named_clipboard={'uid': 'ABC-123', 'name': 'Stash'},
                             action_uid=UID).to_xml()
    assert value_of(clip, 'ClipboardSourceNamedClipboardUID') == '<string>ABC-123</string>'
    assert value_of(clip, 'ClipboardSourceNamedClipboardRedundantDisplayName') == \
        '<string>Stash</string>'

    calc = build_switch_case('Calculation', [{'operator': 'GreaterThan', 'test_value': '2'}],
                             calculation='1+2', action_uid=UID).to_xml()
    assert top_keys(calc)[:2] == ['ActionUID', 'Calculation']


def test_switch_case_text_source_with_processing_mode():
    xml = build_switch_case('Text', [{'operator': 'Contains', 'test_value': 'a'}],
                            text='%Variable%X%', text_processing_mode='TextTokensOnly',
                            action_uid=UID).to_xml()
    assert top_keys(xml)[-2:] == ['Text', 'TextProcessingMode']


@pytest.mark.parametrize('source, cases', [
    ('Variable', []),
    ('Moon', [{'operator': 'Is'}]),
    ('Variable', [{'operator': 'Resembles'}]),
])
def test_switch_case_rejects(source, cases):
    with pytest.raises(ConfigurationError):
        build_switch_case(source, cases, variable='X')


def test_return_with_token_preset():
    xml = build_return('ignored', token_preset='ARandomUniqueID', action_uid=UID).to_xml()
    assert value_of(xml, 'Text') == '<string>%RandomUUID%</string>'
    assert value_of(build_return(action_uid=UID).to_xml(), 'Text') == '<string/>'


def test_comment_wraps_plain_text_in_rtf():
    xml = build_comment('Note', 'Remember {this}', action_uid=UID).to_xml()
    data = xml.split('<data>')[1].split('</data>')[0]
    assert decode_styled_text_data(data).rtf == '{\\rtf1\\ansi\\deff0 Remember \\{this\\}}'
    assert top_keys(xml) == ['ActionUID', 'MacroActionType', 'StyledText', 'Title']


# =============================================================================
# Text, clipboard and variables
# =============================================================================

def test_insert_text_by_typing_targets_front_app():
    xml = build_insert_text('Hi <you>', action_uid=UID).to_xml()
    assert top_keys(xml) == [
        'Action', 'ActionUID', 'MacroActionType', 'TargetApplication', 'TargetingType', 'Text',
    ]
    assert value_of(xml, 'TargetApplication') == '<dict/>'
    assert value_of(xml, 'Text') == '<string>Hi &lt;you&gt;</string>'


def test_insert_text_by_pasting_has_no_target():
    xml = build_insert_text('Hi', action='ByPasting', processing_mode='Nothing',
                            action_uid=UID).to_xml()
    assert top_keys(xml) == ['Action', 'ActionUID', 'MacroActionType', 'ProcessingMode', 'Text']


def test_insert_text_styled_text_rederives_plain_text():
    rtf = '{\\rtf1\\ansi\\deff0 Rich words}'
    xml = build_insert_text('stale', action='ByPastingStyles', include_styled_text=True,
                            rtf_content=rtf, action_uid=UID).to_xml()
    assert 'StyledText' in top_keys(xml)
    assert value_of(xml, 'Text') == '<string>Rich words</string>'


def test_insert_text_styled_text_ignored_when_typing():
    xml = build_insert_text('plain', include_styled_text=True, action_uid=UID).to_xml()
    assert 'StyledText' not in xml


def test_insert_text_invalid_action():
    with pytest.raises(ConfigurationError):
        build_insert_text('x', action='ByTelepathy')


def test_insert_text_invalid_processing_mode():
    with pytest.raises(ConfigurationError, match='processing mode'):
        build_insert_text('x', processing_mode='Everything')


def test_copy_writes_only_aborts_flag():
    xml = build_copy(action_uid=UID).to_xml()
    assert top_keys(xml) == ['Action', 'ActionUID', 'IsDisclosed', 'MacroActionType',
                             'TimeOutAbortsMacro']


@pytest.mark.parametrize('builder', [build_cut, build_paste])
def test_cut_and_paste_notify_without_aborting(builder):
    xml = builder(action_uid=UID).to_xml()
    assert value_of(xml, 'NotifyOnTimeOut') == '<true/>'
    assert value_of(xml, 'TimeOutAbortsMacro') == '<false/>'


def test_set_clipboard_to_named_clipboard():
    xml = build_set_clipboard_to_text('Copied', destination={'name': 'Stash', 'uid': 'U-1'},
                                      stop_on_failure=True, notify_on_failure=False,
                                      action_uid=UID).to_xml()
    assert top_keys(xml) == [
        'ActionUID', 'JustDisplay', 'MacroActionType', 'NotifyOnFailure', 'StopOnFailure',
        'TargetNamedClipboardRedundantDisplayName', 'TargetNamedClipboardUID',
        'TargetUseNamedClipboard', 'Text',
    ]


def test_set_clipboard_presets_and_trigger_clipboard():
    xml = build_set_clipboard_to_text('x', preset_mode='delete', destination='TriggerClipboard',
                                      action_uid=UID).to_xml()
    assert value_of(xml, 'Text') == '<string>%Delete%</string>'
    assert value_of(xml, 'TargetUseTriggerClipboard') == '<true/>'


def test_set_clipboard_invalid_destination():
    with pytest.raises(ConfigurationError, match='clipboard destination'):
        build_set_clipboard_to_text('x', destination=42)


def test_clear_typed_string_buffer():
    xml = build_clear_typed_string_buffer(action_uid=UID).to_xml()
    assert value_of(xml, 'SystemAction') == '<string>ClearTypedString</string>'


def test_set_variable_scope_and_where():
    xml = build_set_variable('Name', 'Ada', where='Append', scope='local', action_uid=UID).to_xml()
    assert value_of(xml, 'Variable') == '<string>LOCALName</string>'
    assert value_of(xml, 'Where') == '<string>Append</string>'


def test_set_variable_rejects_unknown_scope():
    with pytest.raises(ConfigurationError):
        build_set_variable('Name', scope='galactic')


def test_set_variable_to_calculation():
    plain = build_set_variable_to_calculation('Total', '1+2', action_uid=UID).to_xml()
    assert top_keys(plain) == ['ActionUID', 'MacroActionType', 'Text', 'UseFormat', 'Variable']
    assert value_of(plain, 'UseFormat') == '<false/>'

    formatted = build_set_variable_to_calculation('Total', '1+2', format='0.00',
                                                  stop_on_failure=False, action_uid=UID).to_xml()
    assert top_keys(formatted)[:3] == ['ActionUID', 'Format', 'MacroActionType']
    assert value_of(formatted, 'StopOnFailure') == '<false/>'
    assert value_of(formatted, 'UseFormat') == '<true/>'


def test_use_variable_omits_default_flags():
    xml = build_use_variable('Pos', 'SetMouse', action_uid=UID).to_xml()
    assert 'StopOnFailure' not in xml
    assert 'NotifyOnFailure' not in xml
    loud = build_use_variable('Pos', 'SetMouse', stop_on_failure=True, notify_on_failure=False,
                              action_uid=UID).to_xml()
    assert value_of(loud, 'StopOnFailure') == '<true/>'
    assert value_of(loud, 'NotifyOnFailure') == '<false/>'


# =============================================================================
# Applications, menus and buttons
# =============================================================================

def test_activate_specific_app():
    xml = build_activate('Specific', {'name': 'Safari', 'bundle_identifier': 'com.apple.Safari'},
                         action_uid=UID).to_xml()
    assert '\t\t<dict>\n\t\t\t<key>BundleIdentifier</key>\n\t\t\t<string>com.apple.Safari</string>' \
        '\n\t\t\t<key>Name</key>\n\t\t\t<string>Safari</string>\n\t\t</dict>' in xml


def test_activate_rejects_unknown_app_option():
    with pytest.raises(ConfigurationError, match='Unknown application option'):
        build_activate('Specific', {'nickname': 'Safari'})


def test_quit_writes_action_before_uid():
    xml = build_quit('ForceQuit', action_uid=UID).to_xml()
    assert top_keys(xml) == ['Action', 'ActionUID', 'Application', 'MacroActionType', 'Target',
                             'TimeOutAbortsMacro']
    assert value_of(xml, 'Application') == '<dict/>'


def test_show_status_menu():
    xml = build_show_status_menu(action_uid=UID).to_xml()
    assert value_of(xml, 'IsDisclosed') == '<false/>'


def test_select_menu_item():
    xml = build_select_menu_item(['File', 'Export…', 'PDF'], stop_on_failure=False,
                                 action_uid=UID).to_xml()
    assert '\t\t<array>\n\t\t\t<string>File</string>\n\t\t\t<string>Export…</string>' in xml
    assert top_keys(xml) == ['ActionUID', 'MacroActionType', 'Menu', 'StopOnFailure',
                             'TargetApplication', 'TargetingType']


def test_select_menu_item_requires_path():
    with pytest.raises(ConfigurationError, match='menu_path'):
        build_select_menu_item([])


def test_press_button_plain():
    xml = build_press_button('PressButtonNamed', 'OK', action_uid=UID).to_xml()
    assert top_keys(xml) == ['ActionUID', 'ButtonName', 'MacroActionType']


def test_press_button_show_menu_waiting():
    xml = build_press_button('ShowMenuOfButtonNamed', 'Share', wait_for_enabled_button=True,
                             action_uid=UID).to_xml()
    assert top_keys(xml) == ['AXAction', 'ActionUID', 'ButtonName', 'MacroActionType',
                             'TimeOutAbortsMacro', 'WaitForEnabledButton']
    assert value_of(xml, 'AXAction') == '<string>AXShowMenu</string>'


# =============================================================================
# Keyboard
# =============================================================================

def test_type_keystroke_simple():
    xml = build_type_keystroke('Cmd+S', action_uid=UID).to_xml()
    assert top_keys(xml) == ['ActionUID', 'KeyCode', 'MacroActionType', 'Modifiers',
                             'ReleaseAll', 'TargetApplication', 'TargetingType']
    assert value_of(xml, 'KeyCode') == '<integer>1</integer>'
    assert value_of(xml, 'Modifiers') == '<integer>256</integer>'


def test_type_keystroke_repeat():
    xml = build_type_keystroke('ArrowDown', press_and_repeat=True, action_uid=UID).to_xml()
    assert value_of(xml, 'Press') == '<string>PressAndRepeat</string>'


def test_type_keystroke_hold_renders_press_pause_release():
    action = build_type_keystroke('Shift+KeyA', hold_time=0.5, action_uid=7)
    xml = action.to_xml()
    assert xml.count('\t<dict>') == 3
    assert xml.count('<integer>7</integer>') == 3
    assert xml.index('PressAndHold') < xml.index('<string>Pause</string>') < xml.index('Release</string>')
    assert '<string>0.5</string>' in xml


def test_type_keystroke_hold_without_time_uses_default_pause():
    xml = build_type_keystroke('a', press_and_hold=True, action_uid=UID).to_xml()
    assert '<string>0.05</string>' in xml


def test_type_keystroke_repeat_and_hold_conflict():
    with pytest.raises(ConfigurationError, match='cannot be combined'):
        build_type_keystroke('a', press_and_repeat=True, hold_time=1)


def test_type_keystroke_modifier_only():
    with pytest.raises(ConfigurationError, match='modifier-only'):
        build_type_keystroke('Cmd+Shift')


# =============================================================================
# Mouse
# =============================================================================

def test_click_at_found_image_defaults():
    xml = build_click_at_found_image(action_uid=UID).to_xml()
    assert value_of(xml, 'Action') == '<string>MoveAndClick</string>'
    assert value_of(xml, 'ClickCount') == '<integer>1</integer>'
    assert value_of(xml, 'Fuzz') == '<integer>15</integer>'
    assert value_of(xml, 'RelativeCorner') == '<string>Center</string>'
    assert 'ImageSource' not in top_keys(xml)
    assert 'ImageSelection' not in top_keys(xml)
    assert 'WaitForImage' not in xml
    assert '\t\t<key>ScreenArea</key>\n\t\t<dict>\n\t\t\t<key>ScreenAreaType</key>\n' \
        '\t\t\t<string>ScreenAll</string>\n\t\t</dict>' in xml


@pytest.mark.parametrize('fuzz, expected', [(150, 100), (-3, 0), (14.5, 15), (None, 15)])
def test_click_at_found_image_fuzz_clamped(fuzz, expected):
    xml = build_click_at_found_image(fuzz=fuzz, action_uid=UID).to_xml()
    assert value_of(xml, 'Fuzz') == f'<integer>{expected}</integer>'


@pytest.mark.parametrize('fuzz', ['20', True, [20]])
def test_click_at_found_image_rejects_non_numeric_fuzz(fuzz):
    with pytest.raises(ConfigurationError, match='Invalid fuzz'):
        build_click_at_found_image(fuzz=fuzz, action_uid=UID)


def test_click_at_found_image_file_source_requires_path():
    with pytest.raises(ConfigurationError, match='file_path'):
        build_click_at_found_image(image_source='File')


def test_click_at_found_image_file_source():
    xml = build_click_at_found_image(image_source='File', file_path='/tmp/btn.png',
                                     image_selection='Best', wait_for_image=True,
                                     action_uid=UID).to_xml()
    assert value_of(xml, 'ImagePath') == '<string>/tmp/btn.png</string>'
    assert value_of(xml, 'ImageSelection') == '<string>Best</string>'
    assert value_of(xml, 'ImageSource') == '<string>File</string>'
    assert top_keys(xml)[-2:] == ['TimeOutAbortsMacro', 'WaitForImage']


def test_click_at_found_image_screen_source_mirrors_area():
    xml = build_click_at_found_image(image_source='Screen',
                                     screen_area={'type': 'WindowFront'},
                                     action_uid=UID).to_xml()
    assert '\t\t<key>ImageScreenArea</key>\n\t\t<dict>\n\t\t\t<key>ScreenAreaType</key>\n' \
        '\t\t\t<string>WindowFront</string>' in xml


def test_click_at_found_image_named_clipboard_defaults():
    xml = build_click_at_found_image(image_source='NamedClipboard', action_uid=UID).to_xml()
    assert value_of(xml, 'ImageNamedClipboardName') == \
        '<string>FE1390C3-74DF-4983-9C6B-E2C441F97963</string>'


def test_click_release_never_restores_mouse():
    xml = build_click_at_found_image(click_kind='Release', restore_mouse_location=True,
                                     action_uid=UID).to_xml()
    assert value_of(xml, 'ClickCount') == '<integer>-1</integer>'
    assert value_of(xml, 'RestoreMouseLocation') == '<false/>'


def test_click_with_restore_uses_click_action():
    xml = build_click_at_found_image(restore_mouse_location=True, mouse_drag='Drag',
                                     click_modifiers='Cmd+Shift', action_uid=UID).to_xml()
    assert value_of(xml, 'Action') == '<string>Click</string>'
    assert value_of(xml, 'MouseDrag') == '<string>None</string>'
    assert value_of(xml, 'Modifiers') == '<integer>768</integer>'


def test_click_modifiers_must_be_modifiers_only():
    with pytest.raises(ConfigurationError, match='Unknown modifier combination'):
        build_click_at_found_image(click_modifiers='Cmd+q')


def test_move_and_click_relative_to_window():
    xml = build_move_and_click(horizontal=10.0, vertical='%Var%Y%', action_uid=UID).to_xml()
    assert value_of(xml, 'Relative') == '<string>Window</string>'
    assert value_of(xml, 'RelativeCorner') == '<string>TopLeft</string>'
    assert value_of(xml, 'HorizontalPositionExpression') == '<string>10</string>'
    assert 'ScreenArea' not in xml


def test_move_and_click_rejects_image_reference():
    with pytest.raises(ConfigurationError):
        build_move_and_click(relative='Image')


def test_scroll_wheel_event():
    xml = build_scroll_wheel_event(3, 'Down', action_uid=UID).to_xml()
    assert top_keys(xml) == ['ActionUID', 'MacroActionType', 'ScrollAmountExpression',
                             'ScrollDirection']
    with pytest.raises(ConfigurationError):
        build_scroll_wheel_event(3, 'Sideways')


# =============================================================================
# Sound and notifications
# =============================================================================

def test_notification_without_sound():
    action = build_notification('Done', 'All finished', action_uid=UID)
    xml = action.to_xml()
    assert value_of(xml, 'SoundName') == '<string/>'
    assert 'PlaySound' not in xml
    assert top_keys(xml) == ['ActionUID', 'MacroActionType', 'SoundName', 'Subtitle', 'Text',
                             'Title']


def test_notification_with_named_sound():
    xml = build_notification('Done', 'Body', sound='Glass', action_uid=UID).to_xml()
    assert value_of(xml, 'SoundName') == '<string>Glass</string>'
    assert 'PlaySound' not in xml


def test_notification_with_sound_file_appends_play_sound():
    action = build_notification('Done', 'Body', sound='/Users/me/ding.aiff', action_uid=UID)
    xml = action.to_xml()
    assert action.action_type == 'Notification'
    assert xml.count('\t<dict>') == 2
    assert value_of(xml, 'SoundName') == '<string/>'
    assert '<string>/Users/me/ding.aiff</string>' in xml
    assert '<string>PlaySound</string>' in xml


def test_notification_token_presets():
    xml = build_notification('t', 'b', title_token_preset='MachineName', action_uid=UID).to_xml()
    assert value_of(xml, 'Title') == '<string>%MacName%</string>'


def test_play_sound_defaults():
    xml = build_play_sound(action_uid=UID).to_xml()
    assert top_keys(xml) == ['ActionUID', 'Asynchronously', 'DeviceID', 'MacroActionType', 'Path',
                             'TimeOutAbortsMacro', 'Volume']
    assert value_of(xml, 'Path') == '<string>/System/Library/Sounds/Tink.aiff</string>'
    assert value_of(xml, 'Volume') == '<integer>75</integer>'


@pytest.mark.parametrize('volume, expected', [(100, None), (150, None), (49.5, 50), (-5, 0)])
def test_play_sound_volume(volume, expected):
    xml = build_play_sound(volume=volume, action_uid=UID).to_xml()
    if expected is None:
        assert 'Volume' not in xml
    else:
        assert value_of(xml, 'Volume') == f'<integer>{expected}</integer>'


def test_play_sound_rejects_non_numeric_volume():
    with pytest.raises(ConfigurationError, match='Invalid volume'):
        build_play_sound(volume='loud', action_uid=UID)


def test_play_sound_always_aborts_on_timeout():
    xml = build_play_sound(asynchronously=False, timeout_aborts=False, action_uid=UID).to_xml()
    assert 'Asynchronously' not in xml
    assert value_of(xml, 'TimeOutAbortsMacro') == '<true/>'


# =============================================================================
# Files
# =============================================================================

def test_file_create_unique_writes_output_path():
    xml = build_file('CreateUnique', source='~/Desktop/a.txt', output_path='NewPath',
                     action_uid=UID).to_xml()
    assert top_keys(xml) == ['ActionUID', 'Destination', 'MacroActionType', 'Operation',
                             'OutputPath', 'Source']


def test_file_source_only_operation_clears_destination():
    xml = build_file('Trash', source='/tmp/a', destination='/tmp/b', action_uid=UID).to_xml()
    assert value_of(xml, 'Destination') == '<string/>'


def test_file_unknown_operation():
    with pytest.raises(ConfigurationError):
        build_file('Shred', source='/tmp/a')


def test_open_default_application():
    xml = build_open('/tmp/report.pdf', action_uid=UID).to_xml()
    assert top_keys(xml) == ['ActionUID', 'IsDefaultApplication', 'MacroActionType', 'Path']
    assert value_of(xml, 'IsDefaultApplication') == '<true/>'


def test_open_in_specific_application():
    xml = build_open('/tmp/report.pdf', target='Specific', specific={'name': 'Preview'},
                     stop_on_failure=False, action_uid=UID).to_xml()
    assert top_keys(xml) == ['ActionUID', 'Application', 'IsDefaultApplication',
                             'MacroActionType', 'Path', 'StopOnFailure']
    assert '\t\t\t<key>Name</key>\n\t\t\t<string>Preview</string>' in xml
    assert value_of(xml, 'StopOnFailure') == '<false/>'


def test_open_url_splits_timeout_flags():
    xml = build_open_url('https://example.com/?a=1&b=2', open_in_background=True,
                         timeout_aborts=False, action_uid=UID).to_xml()
    assert top_keys(xml) == ['ActionUID', 'IsDefaultApplication', 'MacroActionType',
                             'NotifyOnTimeOut', 'OpenInBackground', 'TimeOutAbortsMacro', 'URL']
    assert value_of(xml, 'URL') == '<string>https://example.com/?a=1&amp;b=2</string>'
