#!/usr/bin/env python3
"""Excalidraw CLI - Tools for interacting with the Excalidraw Canvas Server.

This CLI provides tools for:
- Health check and canvas clearing
- Creating, updating and deleting single elements
- Importing (batch append or full sync) and exporting element sets
- Querying elements on the canvas (debug)

Usage:
    python -m canvas_tools.excalidraw [command] [--url <canvasUrl>] [options]

Exit codes: 0 success, 1 failure, 2 usage error.
"""

import argparse
import json
import logging
import sys
import traceback
from pathlib import Path

from canvas_tools.common.config import get_server_url
from canvas_tools.excalidraw.api import get_client, utc_timestamp
from canvas_tools.excalidraw.payload import load_json, read_elements

logger = logging.getLogger(__name__)

COMMANDS = ('health', 'clear', 'create', 'update', 'delete', 'import', 'export', 'query')


def import_count(response: dict, submitted: list) -> int:
    """Number of imported elements: server count, else echoed elements, else submitted."""
    count = response.get("count")
    if count is not None:
        return count
    elements = response.get("elements")
    if isinstance(elements, list):
        return len(elements)
    return len(submitted)


def _dump(value) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False)


# =============================================================================
# Command Handlers
# =============================================================================

def cmd_health(args):
    """Check canvas server health."""
    client = get_client(args.url)
    print(client.health())
    return 0


def cmd_clear(args):
    """Clear all elements from the canvas."""
    client = get_client(args.url)
    count = client.clear()
    print(f"Cleared {count} elements from canvas")
    return 0


def cmd_create(args):
    """Create a single element from --data or --file."""
    if not args.data and not args.file:
        args.parser.error("one of --data or --file is required")
    element = load_json(data=args.data, file=args.file)

    client = get_client(args.url)
    print(_dump(client.create_element(element)))
    return 0


def cmd_update(args):
    """Merge updates from --data or --file into an existing element."""
    if not args.data and not args.file:
        args.parser.error("one of --data or --file is required")
    updates = load_json(data=args.data, file=args.file)

    client = get_client(args.url)
    print(_dump(client.update_element(args.id, updates)))
    return 0


def cmd_delete(args):
    """Delete a single element by ID."""
    client = get_client(args.url)
    client.delete_element(args.id)
    print(f"Deleted {args.id}")
    return 0


def cmd_import(args):
    """Import elements from a JSON file (batch append or full sync)."""
    elements = read_elements(args.in_file)

    client = get_client(args.url)
    if args.mode == "sync":
        response = client.sync_elements(elements)
    else:
        response = client.create_elements(elements)

    print(f"Imported {import_count(response, elements)} elements ({args.mode})")
    return 0


def cmd_export(args):
    """Export all canvas elements to a JSON file (or stdout)."""
    client = get_client(args.url)
    elements = client.get_elements()

    payload = {
        "exportedAt": utc_timestamp(),
        "expressServerUrl": args.url,
        "elements": elements,
    }
    text = _dump(payload) + "\n"

    if not args.out:
        sys.stdout.write(text)
        return 0

    out_path = Path(args.out)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(text, encoding='utf-8')
    print(f"Wrote {len(elements)} elements to {args.out}")
    return 0


def element_caption(el: dict) -> str:
    """Visible text of an element: its own text, or the text of its label."""
    label = el.get('label')
    if isinstance(label, dict):
        label = label.get('text')
    caption = el.get('text') or label or ''
    return ' '.join(str(caption).split())


def describe_element(el: dict, width: int = 30) -> str:
    """One-line summary: type, id, position, size and caption."""
    line = f"[{el.get('type', 'unknown')}] {str(el.get('id', 'N/A'))[:12]}  ({el.get('x', 0)}, {el.get('y', 0)})"
    if el.get('width') and el.get('height'):
        line += f"  {el['width']}x{el['height']}"
    caption = element_caption(el)
    if len(caption) > width:
        caption = caption[:width] + "..."
    if caption:
        line += f'  "{caption}"'
    return line


def cmd_query(args):
    """Query elements on the canvas."""
    client = get_client(args.url)
    elements = client.get_elements()

    if args.format == 'json':
        print(_dump(elements))
    elif not elements:
        print("Canvas is empty")
    else:
        print(f"Found {len(elements)} elements:\n")
        for el in elements:
            print(f"  {describe_element(el)}")
    return 0


# =============================================================================
# CLI Setup and Routing
# =============================================================================

def build_parser(default_url: str) -> argparse.ArgumentParser:
    """Build the argument parser, with --url defaulting to default_url."""
    parser = argparse.ArgumentParser(
        prog='excalidraw',
        description='Excalidraw Canvas Server CLI',
        epilog='For detailed help: excalidraw <command> --help',
        allow_abbrev=False,
    )

    # Common parser for shared arguments (inherited by subcommands)
    common_parser = argparse.ArgumentParser(add_help=False, allow_abbrev=False)
    common_parser.add_argument(
        '--url',
        default=default_url,
        help=f'Canvas server URL [env: EXPRESS_SERVER_URL] (default: {default_url})'
    )
    common_parser.add_argument('--debug', action='store_true', help='Enable debug output')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    def add_command(name, func, **kwargs):
        sub = subparsers.add_parser(name, parents=[common_parser], allow_abbrev=False, **kwargs)
        sub.set_defaults(func=func, parser=sub)
        return sub

    add_command('health', cmd_health, help='Check canvas server health')
    add_command('clear', cmd_clear, help='Clear all elements from the canvas')

    create_parser = add_command(
        'create', cmd_create,
        help='Create a single element',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='Examples:\n'
               '  excalidraw create --data \'{"type":"rectangle","x":100,"y":100,"width":300,"height":200}\'\n'
               '  excalidraw create --file element.json',
    )
    create_parser.add_argument('--data', help='Element as inline JSON')
    create_parser.add_argument('--file', help='Path to a JSON file holding the element')

    update_parser = add_command(
        'update', cmd_update,
        help='Update a single element by ID',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='Examples:\n'
               '  excalidraw update --id abc --data \'{"x":200,"y":250,"backgroundColor":"#ffeeee"}\'\n'
               '  excalidraw update --id abc --file updates.json',
    )
    update_parser.add_argument('--id', required=True, help='Element ID')
    update_parser.add_argument('--data', help='Updates as inline JSON')
    update_parser.add_argument('--file', help='Path to a JSON file holding the updates')

    delete_parser = add_command('delete', cmd_delete, help='Delete a single element by ID')
    delete_parser.add_argument('--id', required=True, help='Element ID')

    import_parser = add_command(
        'import', cmd_import,
        help='Import elements from a JSON file',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='Modes:\n'
               '  batch  POST /api/elements/batch    (append; creates elements)\n'
               '  sync   POST /api/elements/sync     (overwrite; clears then writes)',
    )
    import_parser.add_argument(
        '--in', dest='in_file', required=True,
        help='JSON file: an element array, or an object with an "elements" array'
    )
    import_parser.add_argument(
        '--mode',
        choices=['batch', 'sync'],
        default='batch',
        help='Import mode (default: batch)'
    )

    export_parser = add_command('export', cmd_export, help='Export all elements to a JSON file')
    export_parser.add_argument('--out', '-o', help='Output file (default: stdout)')

    query_parser = add_command('query', cmd_query, help='Query elements on the canvas')
    query_parser.add_argument(
        '--format', '-f',
        choices=['text', 'json'],
        default='text',
        help='Output format (default: text)'
    )

    return parser


def hoist_leading_flags(argv, commands):
    """Move flags given before the command to just after it.

    The command parser then applies --url/--debug and ignores anything unknown,
    wherever it appeared on the command line.
    """
    skip_value = False
    for i, token in enumerate(argv):
        if skip_value:
            skip_value = False
            continue
        if token == '--url':
            skip_value = True
        elif token in commands:
            return [token] + argv[:i] + argv[i + 1:]
    return list(argv)


def main(argv=None, environ=None):
    """Main CLI entry point. Returns the process exit status."""
    parser = build_parser(get_server_url(environ))
    argv = hoist_leading_flags(sys.argv[1:] if argv is None else argv, COMMANDS)

    # Unrecognized flags are ignored rather than rejected
    args, unknown = parser.parse_known_args(argv)

    if not args.command:
        parser.print_help(sys.stderr)
        return 2

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format='%(message)s'
    )
    if unknown:
        logger.debug(f"Ignoring unrecognized arguments: {' '.join(unknown)}")

    try:
        return args.func(args)
    except KeyboardInterrupt:
        logger.warning("\nInterrupted by user")
        return 130
    except Exception as e:
        logger.error(f"Error: {e}")
        if args.debug:
            traceback.print_exc()
        return 1


if __name__ == '__main__':
    sys.exit(main())
