"""
kmactions

Deterministic serializer of Keyboard Maestro actions and conditions into
plist XML, plus the StyledText (base64 RTF) codec.
"""

from .actions import ACTION_BUILDERS, VirtualAction
from .conditions import condition_to_xml, normalise_condition
from .document import (
    assemble_document,
    build_action,
    build_actions,
    export_macro_file,
    generate_macro,
)
from .errors import ConfigurationError, KMActionsError, StyledTextError
from .styled_text import decode_styled_text_data, encode_styled_text_data

__version__ = '0.1.0'

__all__ = [
    'ACTION_BUILDERS',
    'ConfigurationError',
    'KMActionsError',
    'StyledTextError',
    'VirtualAction',
    'assemble_document',
    'build_action',
    'build_actions',
    'condition_to_xml',
    'decode_styled_text_data',
    'encode_styled_text_data',
    'export_macro_file',
    'generate_macro',
    'normalise_condition',
]
