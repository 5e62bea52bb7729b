"""
File operations and opening files or URLs.
"""

from typing import Any, Dict, Optional, Union

from ..templates import (
    SpecificApp,
    application_xml,
    notify_on_failure_xml,
    processing_mode_xml,
    stop_on_failure_xml,
    timeout_xml,
)
from .base import ActionDict, VirtualAction, require_choice

FILE_OPERATIONS = (
    'Reveal',
    'CreateUnique',
    'OnlyMove',
    'OnlyRename',
    'Move',
    'Copy',
    'Duplicate',
    'Trash',
    'Delete',
    'RecursiveDelete',
)

# Operations that act on the source alone; KM still writes an empty Destination
SOURCE_ONLY_OPERATIONS = ('Reveal', 'Duplicate', 'Trash', 'Delete', 'RecursiveDelete')


def build_file(operation: str, source: str = '', destination: str = '',
               output_path: Optional[str] = None,
               stop_on_failure: Optional[bool] = None,
               notify_on_failure: Optional[bool] = None,
               action_uid: Optional[int] = None) -> VirtualAction:
    """Reveal, create, move, rename, copy, duplicate, trash or delete a file.

    OutputPath is only written for CreateUnique, where it names the variable
    that receives the new path.
    """
    require_choice('file operation', operation, FILE_OPERATIONS)
    dest_value = '' if operation in SOURCE_ONLY_OPERATIONS else destination or ''

    d = ActionDict()
    d.add_uid(action_uid)
    d.add('Destination', dest_value)
    d.add('MacroActionType', 'File')
    d.extend(notify_on_failure_xml(notify_on_failure))
    d.add('Operation', operation)
    d.add_if(operation == 'CreateUnique', 'OutputPath', output_path or '')
    d.add('Source', source)
    d.extend(stop_on_failure_xml(stop_on_failure))
    return d.build('File')


def _is_default_app(target: str, specific: Union[SpecificApp, Dict[str, Any], None]) -> bool:
    if target == 'Front' or not specific:
        return True
    return not SpecificApp.coerce(specific).to_plist_fields()


def build_open(path: str, target: str = 'Front',
               specific: Union[SpecificApp, Dict[str, Any], None] = None,
               stop_on_failure: bool = True,
               notify_on_failure: bool = True,
               action_uid: Optional[int] = None) -> VirtualAction:
    """Open a file, in its default application unless a specific app is given."""
    default_app = _is_default_app(target, specific)

    d = ActionDict()
    d.add_uid(action_uid)
    if not default_app:
        d.extend(application_xml('Application', target, specific))
    d.add('IsDefaultApplication', default_app)
    d.add('MacroActionType', 'Open1File')
    d.extend(notify_on_failure_xml(notify_on_failure))
    d.add('Path', path)
    d.add_if(stop_on_failure is False, 'StopOnFailure', False)
    return d.build('Open1File')


def build_open_url(url: str, target: str = 'Front',
                   specific: Union[SpecificApp, Dict[str, Any], None] = None,
                   processing_mode: Optional[str] = None,
                   open_in_background: bool = False,
                   stop_on_failure: bool = True,
                   notify_on_failure: bool = True,
                   timeout_aborts: bool = True,
                   notify_on_timeout: bool = True,
                   action_uid: Optional[int] = None) -> VirtualAction:
    """Open a URL in the default browser or a specific application.

    NotifyOnTimeOut and TimeOutAbortsMacro are split around the other flags
    to keep KM's alphabetical order.
    """
    default_app = _is_default_app(target, specific)
    timeout_lines = timeout_xml(notify_on_timeout, timeout_aborts)
    notify_lines, aborts_lines = timeout_lines[:-2], timeout_lines[-2:]

    d = ActionDict()
    d.add_uid(action_uid)
    if not default_app:
        d.extend(application_xml('Application', target, specific))
    d.add('IsDefaultApplication', default_app)
    d.add('MacroActionType', 'OpenURL')
    d.extend(notify_on_failure_xml(notify_on_failure))
    d.extend(notify_lines)
    d.add_if(open_in_background, 'OpenInBackground', True)
    d.extend(processing_mode_xml(processing_mode))
    d.add_if(stop_on_failure is False, 'StopOnFailure', False)
    d.extend(aborts_lines)
    d.add('URL', url)
    return d.build('OpenURL')
