"""
kmactions command line

Builds Keyboard Maestro action XML from JSON and converts StyledText blobs.

Usage Examples:

1. List all available action types:
   kmactions --mode list

2. Build a document from a JSON file:
   kmactions --mode build --input actions.json --output actions.kmmacros

3. Build from a JSON string:
   kmactions --mode build --input '{"type": "Pause", "time": 1, "unit": "Minutes"}'

4. Decode a StyledText blob (base64, or an action XML containing one):
   kmactions --mode decode --input styled.txt

5. Encode RTF as a StyledText blob on a single line:
   kmactions --mode encode --input note.rtf --no-wrap
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional

from .actions import ACTION_BUILDERS
from .document import assemble_document, build_actions, export_macro_file
from .errors import KMActionsError
from .styled_text import STYLED_TEXT_RE, decode_styled_text_data, encode_styled_text_data

logger = logging.getLogger(__name__)


def read_input(input_data: str) -> str:
    """Return the contents of input_data if it names a file, else input_data itself."""
    input_path = Path(input_data)
    try:
        is_file = input_path.is_file()
    except (OSError, ValueError):
        # Inline input that cannot be a path
        is_file = False
    if is_file:
        with open(input_path, 'r', encoding='utf-8') as f:
            return f.read()
    return input_data


def write_output(text: str, output_file: Optional[str] = None) -> None:
    if output_file:
        with open(output_file, 'w', encoding='utf-8') as f:
            f.write(text)
        print(f"Output written to {output_file}", file=sys.stderr)
    else:
        print(text)


def list_actions(output_file: Optional[str] = None) -> None:
    """List the action types accepted in build mode."""
    actions = []
    for action_type in sorted(ACTION_BUILDERS):
        doc = (ACTION_BUILDERS[action_type].__doc__ or '').strip()
        actions.append({
            'type': action_type,
            'builder': ACTION_BUILDERS[action_type].__name__,
            'description': doc.split('\n')[0] if doc else '',
        })
    output = {
        'actions': actions,
        'total_actions': len(actions),
    }
    write_output(json.dumps(output, indent=2), output_file)


def build_document(input_data: str, output_file: Optional[str] = None,
                   return_text: Optional[str] = None) -> None:
    """Build a plist document from one action definition or a list of them."""
    specs: Any = json.loads(read_input(input_data))
    if isinstance(specs, dict):
        specs = [specs]
    if not isinstance(specs, list):
        raise KMActionsError('Input JSON must be an action object or a list of actions')

    actions = build_actions(specs, strict=True)
    logger.info('Built %d action(s)', len(actions))
    xml = assemble_document(actions, return_text=return_text)

    if output_file:
        path = export_macro_file(xml, output_file)
        print(f"Document written to {path}", file=sys.stderr)
    else:
        print(xml)


def decode_styled_text(input_data: str, output_file: Optional[str] = None) -> None:
    text = read_input(input_data)
    match = STYLED_TEXT_RE.search(text)
    decoded = decode_styled_text_data(match.group('data') if match else text)
    write_output(json.dumps(decoded._asdict(), indent=2, ensure_ascii=False), output_file)


def encode_styled_text(input_data: str, output_file: Optional[str] = None,
                       wrap: bool = True) -> None:
    write_output(encode_styled_text_data(read_input(input_data), wrap=wrap), output_file)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point with CLI argument parsing."""
    parser = argparse.ArgumentParser(
        description='kmactions - Keyboard Maestro action XML builder',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  List action types:
    kmactions --mode list

  Build from JSON:
    kmactions --mode build --input actions.json --output actions.kmmacros

  Decode StyledText:
    kmactions --mode decode --input styled.txt
        '''
    )
    parser.add_argument(
        '--mode', '-m',
        required=True,
        choices=['build', 'list', 'decode', 'encode'],
        help='Operation mode: build a document, list action types, decode or encode StyledText'
    )
    parser.add_argument(
        '--input', '-i',
        help='Input file or inline string (required for build, decode and encode)'
    )
    parser.add_argument(
        '--output', '-o',
        help='Output file path (optional, prints to stdout if not specified)'
    )
    parser.add_argument(
        '--return-text',
        help='Append a Return action with this text (build mode)'
    )
    parser.add_argument(
        '--wrap',
        action=argparse.BooleanOptionalAction,
        default=True,
        help='Wrap encoded base64 at 76 columns (default: wrap)'
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable debug logging'
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(levelname)s %(name)s: %(message)s',
        stream=sys.stderr,
    )

    if args.mode != 'list' and not args.input:
        print(f"Error: --input required for {args.mode} mode", file=sys.stderr)
        return 1

    try:
        if args.mode == 'list':
            list_actions(args.output)
        elif args.mode == 'build':
            build_document(args.input, args.output, args.return_text)
        elif args.mode == 'decode':
            decode_styled_text(args.input, args.output)
        else:
            encode_styled_text(args.input, args.output, wrap=args.wrap)
        return 0

    except json.JSONDecodeError as e:
        print(f"Error: Invalid JSON input: {e}", file=sys.stderr)
        return 1

    except KMActionsError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
