"""
Ephemeral document assembly and the JSON-driven action dispatcher.

A document is the plist envelope around a list of rendered actions, the
form Keyboard Maestro accepts for running or importing actions:

    xml = assemble_document([build_pause(time=1)], return_text='done')

build_action turns JSON definitions such as

    {"type": "Group", "name": "Setup",
     "actions": [{"type": "Pause", "time": 0.5}]}

into VirtualAction objects, building nested action lists first.
"""

import copy
import inspect
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from .actions import ACTION_BUILDERS, VirtualAction, build_return
from .errors import ConfigurationError
from .xml_utils import PLIST_FOOTER, PLIST_HEADER

logger = logging.getLogger(__name__)

Fragment = Union[VirtualAction, str]

# Option keys holding lists of child action definitions
NESTED_ACTION_KEYS = ('actions', 'then_actions', 'else_actions')

MACROS_FILE_SUFFIX = '.kmmacros'


# =============================================================================
# Document Assembly
# =============================================================================

def _fragment_xml(fragment: Fragment) -> str:
    if isinstance(fragment, VirtualAction):
        return fragment.to_xml()
    return fragment


def assemble_document(actions: Sequence[Fragment], return_text: Optional[str] = None) -> str:
    """Wrap rendered actions in the plist header and footer.

    Args:
        actions: VirtualAction objects or already rendered XML fragments.
            Fragments are concatenated as given, never re-parsed.
        return_text: When given, a Return action with this text is appended
            so the caller can read a result back.

    Returns:
        The complete plist document.
    """
    fragments: List[Fragment] = list(actions)
    if return_text is not None:
        fragments.append(build_return(return_text))
    if not fragments:
        return PLIST_HEADER + PLIST_FOOTER
    body = '\n'.join(_fragment_xml(f) for f in fragments)
    return PLIST_HEADER + body + '\n' + PLIST_FOOTER


def generate_macro(actions: Sequence[Fragment], plist_wrapping: bool = False) -> str:
    """Render actions as bare fragments, or as a full document when plist_wrapping is set."""
    if not actions:
        logger.info('No actions provided, generating empty macro XML')
    if plist_wrapping:
        return assemble_document(actions)
    return '\n'.join(_fragment_xml(f) for f in actions)


def export_macro_file(xml: str, file_path: Union[str, Path]) -> Path:
    """Write XML to a .kmmacros file, adding the suffix and parent folders as needed."""
    path = Path(file_path)
    if path.suffix != MACROS_FILE_SUFFIX:
        path = path.with_name(path.name + MACROS_FILE_SUFFIX)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        f.write(xml)
    logger.info('Exported %d bytes to %s', path.stat().st_size, path)
    return path


# =============================================================================
# JSON Dispatcher
# =============================================================================

def _build_children(specs: Any, strict: bool) -> List[VirtualAction]:
    if not isinstance(specs, list):
        raise ConfigurationError(f'Expected a list of actions, got {type(specs).__name__}')
    return build_actions(specs, strict=strict)


def build_action(action_json: Dict[str, Any], strict: bool = False) -> Optional[VirtualAction]:
    """Build one action from its JSON definition.

    The 'type' key selects the builder from ACTION_BUILDERS; every other key
    is passed through as a keyword option. 'actions', 'then_actions',
    'else_actions' and each case's 'actions' are built recursively.

    Args:
        action_json: Action definition.
        strict: Raise on an unknown or missing type instead of skipping it.

    Returns:
        The built action, or None when the type is unknown and strict is off.

    Raises:
        ConfigurationError: unknown type in strict mode, or invalid options
            for the chosen builder.
    """
    if not isinstance(action_json, dict):
        raise ConfigurationError(f'Action definition must be an object, got {action_json!r}')

    options = copy.deepcopy(action_json)
    action_type = options.pop('type', None)

    builder = ACTION_BUILDERS.get(action_type)
    if builder is None:
        if strict:
            raise ConfigurationError(f"Unknown action type '{action_type}'")
        logger.warning("Unknown action type '%s', skipping", action_type)
        return None

    for key in NESTED_ACTION_KEYS:
        if key in options:
            options[key] = _build_children(options[key], strict)
    if isinstance(options.get('cases'), list):
        for case in options['cases']:
            if isinstance(case, dict) and 'actions' in case:
                case['actions'] = _build_children(case['actions'], strict)

    try:
        inspect.signature(builder).bind(**options)
    except TypeError as e:
        raise ConfigurationError(f"Invalid options for '{action_type}': {e}") from e
    return builder(**options)


def build_actions(specs: Sequence[Dict[str, Any]], strict: bool = False) -> List[VirtualAction]:
    """Build a list of actions, dropping unknown types unless strict."""
    built: List[VirtualAction] = []
    for spec in specs:
        action = build_action(spec, strict=strict)
        if action is not None:
            built.append(action)
    return built
