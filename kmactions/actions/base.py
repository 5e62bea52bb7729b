"""
Building blocks shared by every action builder.

A builder collects the lines of one top-level action dict in an ActionDict,
then freezes them into a VirtualAction. Child actions (Group, If/Then/Else,
While, Switch/Case) are embedded by shifting their rendered XML right so
nesting stays proportional.
"""

import math
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

from ..errors import ConfigurationError
from ..styled_text import encode_styled_text_data
from ..xml_utils import action_uid_xml, include_if, key_value, shift_lines


# =============================================================================
# Result Type
# =============================================================================

@dataclass(frozen=True)
class VirtualAction:
    """A rendered action: the KM action type plus its indented XML fragment.

    Composite builders (press-and-hold keystrokes, notifications with a
    custom sound) carry more than one <dict> in a single fragment.
    """
    action_type: str
    xml: str

    def to_xml(self) -> str:
        return self.xml


def join_actions(action_type: str, actions: Sequence[VirtualAction]) -> VirtualAction:
    """Concatenate several rendered actions into one fragment."""
    return VirtualAction(action_type, '\n'.join(a.to_xml().strip('\n') for a in actions))


# =============================================================================
# Value Helpers
# =============================================================================

def expression(value: Any) -> str:
    """Render a number or text for a KM expression field.

    Whole floats drop their fractional part so 1.0 is written as 1.
    """
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values, as KM's editor does."""
    return math.floor(value + 0.5)


def require_number(name: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(f'Invalid {name} {value!r}. Expected a number')
    return value


def require_choice(name: str, value: Any, choices: Sequence[str]) -> Any:
    if value not in choices:
        raise ConfigurationError(
            f"Invalid {name} '{value}'. Expected one of: {', '.join(choices)}"
        )
    return value


# =============================================================================
# Line Accumulator
# =============================================================================

class ActionDict:
    """Ordered lines of one top-level action dict.

    Keys are appended in the order the builder calls add*; each builder is
    responsible for KM's key order.
    """

    def __init__(self):
        self.lines: List[str] = []

    def add(self, key: str, value: Any) -> 'ActionDict':
        self.lines.extend(key_value(key, value))
        return self

    def add_if(self, condition: bool, key: str, value: Any) -> 'ActionDict':
        self.lines.extend(include_if(condition, key, value))
        return self

    def extend(self, lines: Sequence[str]) -> 'ActionDict':
        self.lines.extend(lines)
        return self

    def add_uid(self, action_uid: Optional[int] = None) -> 'ActionDict':
        self.lines.extend(action_uid_xml(action_uid))
        return self

    def add_actions(self, key: str, actions: Optional[Sequence[VirtualAction]]) -> 'ActionDict':
        self.lines.append(f'\t\t<key>{key}</key>')
        self.lines.extend(action_array_lines(actions, tabs=2))
        return self

    def add_styled_text(self, rtf: str) -> 'ActionDict':
        self.lines.extend(styled_text_lines(rtf))
        return self

    def build(self, action_type: str) -> VirtualAction:
        xml = '\n'.join(['\t<dict>'] + self.lines + ['\t</dict>'])
        return VirtualAction(action_type, xml)


def action_array_lines(actions: Optional[Sequence[VirtualAction]], tabs: int) -> List[str]:
    """Render child actions as an <array> whose tags sit at the given depth."""
    pad = '\t' * tabs
    if not actions:
        return [pad + '<array/>']
    lines = [pad + '<array>']
    for action in actions:
        # Child dicts are rendered at one tab; move them one level below the array
        lines.extend(shift_lines(action.to_xml().strip('\n'), tabs))
    lines.append(pad + '</array>')
    return lines


def styled_text_lines(rtf: str) -> List[str]:
    """StyledText key and <data> block with base64 lines at action depth."""
    data = encode_styled_text_data(rtf)
    return ['\t\t<key>StyledText</key>', '\t\t<data>'] + \
        ['\t\t' + line for line in data.split('\n')] + ['\t\t</data>']
