"""Command-line interface for quicknotes."""


import argparse
import asyncio
import json
import logging
import sys
from terminaltables import AsciiTable
from quicknotes.api import QuickNotes, Error
from quicknotes.models import Note, PALETTE, format_color, parse_color
from quicknotes.repository import LoadError, PersistenceError


def _snippet(text: str, width: int = 40) -> str:
    first = text.strip().split('\n', 1)[0]
    if len(first) > width or '\n' in text.strip():
        return first[:width - 3].rstrip() + '...'
    return first


def _print_note(note: Note, qn: QuickNotes) -> None:
    print(f'id: {note.id}')
    print(f'title: {note.title}')
    print(f'color: {format_color(note.color_value)}')
    print(f'updated: {note.updated_at.astimezone().strftime(qn.conf.date_format)}')
    if note.content:
        print(note.content)


async def _list(args, qn: QuickNotes) -> int:
    notes = qn.search(args.query or '')
    if args.json:
        print(json.dumps([n.as_json() for n in notes]))
    elif args.table:
        data = [('ID', 'Title', 'Color', 'Updated', 'Content')]
        for note in notes:
            data.append((note.id, note.title, format_color(note.color_value),
                         note.updated_at.astimezone().strftime(qn.conf.date_format), _snippet(note.content)))
        print(AsciiTable(data).table)
    else:
        for note in notes:
            print('--------------------')
            _print_note(note, qn)
    return 0


async def _show(args, qn: QuickNotes) -> int:
    note = qn.find(args.id[0])
    if args.json:
        print(json.dumps(note.as_json()))
    else:
        _print_note(note, qn)
    return 0


async def _new(args, qn: QuickNotes) -> int:
    title = args.title[0] if args.title else None
    color = parse_color(args.color[0]) if args.color else None
    if args.template:
        note = await qn.new_from_template(args.template[0], title=title, color_value=color)
    else:
        note = await qn.new(title or '', args.content or '', color)
    print(f'Created {note.id}')
    return 0


async def _edit(args, qn: QuickNotes) -> int:
    note = qn.find(args.id[0])
    await qn.edit(note.id,
                  title=args.title[0] if args.title else None,
                  content=args.body[0] if args.body else None,
                  color_value=parse_color(args.color[0]) if args.color else None)
    return 0


async def _rm(args, qn: QuickNotes) -> int:
    note = qn.find(args.id[0])
    await qn.delete(note.id)
    print(f'Deleted {note.id}')
    return 0


async def _colors(args, qn: QuickNotes) -> int:
    data = [('Name', 'Value')] + [(name, f'#{value:08X}') for name, value in PALETTE.items()]
    print(AsciiTable(data).table)
    return 0


def _color_arg(value: str) -> str:
    try:
        parse_color(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f'invalid color: {value}')
    return value


def argparser() -> argparse.ArgumentParser:
    colors_help = f'A palette name ({", ".join(PALETTE)}), #RRGGBB, #AARRGGBB, or an integer like 0xFFFFF9C4.'

    parser = argparse.ArgumentParser(prog='quicknotes')
    parser.set_defaults(func=None)
    parser.add_argument('-v', '--verbose', action='store_true', help='Log debugging details to stderr.')

    subs = parser.add_subparsers(title='Commands')

    p_list = subs.add_parser('list', help='List notes, newest first.')
    p_list.add_argument('query', nargs='?',
                        help='Only show notes whose title or content contains this text, ignoring case.')
    p_list_formats = p_list.add_mutually_exclusive_group()
    p_list_formats.add_argument('-j', '--json', help='Output as JSON.', action='store_true')
    p_list_formats.add_argument('-t', '--table', help='Format output as a table.', action='store_true')
    p_list.set_defaults(func=_list)

    p_show = subs.add_parser('show', help='Show a note. The id may be abbreviated to any unique prefix.')
    p_show.add_argument('id', nargs=1)
    p_show.add_argument('-j', '--json', action='store_true', help='Output as JSON.')
    p_show.set_defaults(func=_show)

    p_new = subs.add_parser('new', help='Create a note. This command will print the id of the new note.')
    p_new.add_argument('content', nargs='?', help='Text of the note.')
    p_new.add_argument('-t', '--title', nargs=1, help='Title of the note. Defaults to "Untitled".')
    p_new.add_argument('-c', '--color', nargs=1, type=_color_arg, help=f'Color of the note. {colors_help}')
    p_new.add_argument('-T', '--template', nargs=1,
                       help='Name or path of a Mako template to render as the content. Names are looked up '
                            'in "template_globs" in your ~/.quicknotes.conf.py file.')
    p_new.set_defaults(func=_new)

    p_edit = subs.add_parser('edit', help='Change the title, content, or color of a note.')
    p_edit.add_argument('id', nargs=1)
    p_edit.add_argument('-t', '--title', nargs=1, help='New title. A blank title becomes "Untitled".')
    p_edit.add_argument('-b', '--body', nargs=1, help='New content.')
    p_edit.add_argument('-c', '--color', nargs=1, type=_color_arg, help=f'New color. {colors_help}')
    p_edit.set_defaults(func=_edit)

    p_rm = subs.add_parser('rm', help='Delete a note.')
    p_rm.add_argument('id', nargs=1)
    p_rm.set_defaults(func=_rm)

    p_colors = subs.add_parser('colors', help='Show the named colors.')
    p_colors.set_defaults(func=_colors)

    return parser


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(asctime)s | %(levelname)s | %(name)s | %(message)s',
        stream=sys.stderr,
    )


async def _run(args, qn: QuickNotes) -> int:
    await qn.load()
    return await args.func(args, qn)


def main(args=None) -> int:
    """Runs the tool and returns its exit code.

    args may be an array of string command-line arguments; if absent,
    the process's arguments are used.
    """
    parser = argparser()
    args = parser.parse_args(args)
    if not args.func:
        parser.print_help()
        return 1
    _configure_logging(args.verbose)
    with QuickNotes.for_user() as qn:
        try:
            return asyncio.run(_run(args, qn))
        except LoadError as e:
            print(f'Cannot load notes: {e.message}', file=sys.stderr)
            return 2
        except PersistenceError as e:
            print(e.message, file=sys.stderr)
            return 1
        except Error as e:
            print(str(e), file=sys.stderr)
            return 1
