"""
StyledText codec.

Keyboard Maestro stores rich text as <key>StyledText</key><data>...</data>,
a base64 blob of RTF wrapped at 76 columns. This module decodes and encodes
those blobs and can rewrite the StyledText of an existing action.

Notes:
    - KM re-archives rich text differently on every save, so two encodings of
      the same RTF are not expected to match. Compare decoded RTF, never the
      base64 text.
    - strip_rtf_to_plain_text is a best-effort preview, not an RTF parser.
"""

import base64
import binascii
import logging
import re
from typing import Callable, NamedTuple

from .errors import StyledTextError
from .xml_utils import escape_for_xml

logger = logging.getLogger(__name__)

BASE64_LINE_WIDTH = 76

STYLED_TEXT_RE = re.compile(
    r'<key>\s*StyledText\s*</key>\s*<data>(?P<data>[\s\S]*?)</data>',
    re.IGNORECASE,
)

PLAIN_TEXT_RE = re.compile(
    r'<key>\s*Text\s*</key>\s*<string>(?P<text>[\s\S]*?)</string>',
    re.IGNORECASE,
)

RTF_HEX_ESCAPE_RE = re.compile(r"\\'([0-9a-fA-F]{2})")
RTF_FONT_TABLE_RE = re.compile(r'\{\\fonttbl[^{}]*(?:\{[^{}]*\}[^{}]*)*\}')
RTF_COLOR_TABLE_RE = re.compile(r'\{\\colortbl[^{}]*(?:\{[^{}]*\}[^{}]*)*\}')
RTF_CONTROL_WORD_RE = re.compile(r'\\[a-zA-Z]+\d*\s?')


class DecodedStyledText(NamedTuple):
    rtf: str
    text: str


def decode_styled_text_data(data: str) -> DecodedStyledText:
    """Decode a StyledText base64 blob into its RTF source and plain text.

    Whitespace and line breaks are ignored. Bytes that are not valid UTF-8
    are replaced rather than dropped.

    Raises:
        StyledTextError: the payload is not valid base64.
    """
    compact = re.sub(r'\s+', '', data)
    try:
        raw = base64.b64decode(compact)
    except (binascii.Error, ValueError) as e:
        raise StyledTextError(f'Failed to decode base64 StyledText: {e}') from e

    rtf = raw.decode('utf-8', errors='replace')
    return DecodedStyledText(rtf=rtf, text=strip_rtf_to_plain_text(rtf))


def encode_styled_text_data(rtf: str, wrap: bool = True) -> str:
    """Encode RTF source as base64, wrapped at 76 columns unless wrap is False."""
    encoded = base64.b64encode(rtf.encode('utf-8')).decode('ascii')
    return wrap_base64(encoded) if wrap else encoded


def wrap_base64(b64: str, width: int = BASE64_LINE_WIDTH) -> str:
    return '\n'.join(b64[i:i + width] for i in range(0, len(b64), width))


def strip_rtf_to_plain_text(rtf: str) -> str:
    """Best-effort plain text from RTF.

    Resolves \\'hh escapes, drops the font and colour tables, replaces
    control words with a space, removes braces and collapses whitespace.
    """
    text = RTF_HEX_ESCAPE_RE.sub(lambda m: bytes.fromhex(m.group(1)).decode('latin-1'), rtf)
    text = RTF_FONT_TABLE_RE.sub('', text)
    text = RTF_COLOR_TABLE_RE.sub('', text)
    text = RTF_CONTROL_WORD_RE.sub(' ', text)
    text = re.sub(r'[{}]', '', text)
    return re.sub(r'\s+', ' ', text).strip()


def generate_basic_rtf(text: str) -> str:
    """Wrap plain text in a minimal RTF document."""
    escaped = text.replace('\\', '\\\\').replace('}', '\\}').replace('{', '\\{')
    return '{\\rtf1\\ansi\\deff0 ' + escaped + '}'


def update_styled_text_in_xml(xml: str, transformer: Callable[[str], str]) -> str:
    """Rewrite the StyledText of an action XML through transformer.

    The transformer receives the decoded RTF and returns new RTF. The data
    block is re-encoded and the sibling <key>Text</key> string is replaced
    with the new plain text. XML without a StyledText block is returned
    unchanged.
    """
    match = STYLED_TEXT_RE.search(xml)
    if not match:
        logger.warning('No <StyledText><data> block found, leaving XML untouched')
        return xml

    decoded = decode_styled_text_data(match.group('data'))
    new_rtf = transformer(decoded.rtf)
    data_xml = '\n'.join(['<key>StyledText</key>', '<data>',
                          encode_styled_text_data(new_rtf), '</data>'])
    updated = xml[:match.start()] + data_xml + xml[match.end():]

    text_match = PLAIN_TEXT_RE.search(updated)
    if not text_match:
        logger.warning('No <key>Text</key> string found, plain text not updated')
        return updated

    plain = escape_for_xml(strip_rtf_to_plain_text(new_rtf))
    start, end = text_match.span('text')
    return updated[:start] + plain + updated[end:]
