"""Line-oriented endpoint picker rendered with rich."""
from typing import NamedTuple

from rich.console import Console
from rich.prompt import Prompt
from rich.table import Table
from rich.text import Text

HELP_TEXT = """\
  N, N M, N-M   toggle rows
  /text         search paths and descriptions, / alone clears
  a             select every row in the list
  c             clear the selection
  w             write and quit
  q             quit without writing
  ?             this help"""

SNIP_MARKER = '✂'


class Command(NamedTuple):
    action: str
    value: object = None


def _parse_rows(text, row_count):
    rows = []
    for token in text.replace(',', ' ').split():
        start, sep, end = token.partition('-')
        if not start.isdigit() or (sep and not end.isdigit()):
            return None
        first = int(start)
        last = int(end) if sep else first
        if first > last:
            first, last = last, first
        if first < 1 or last > row_count:
            return None
        for row in range(first, last + 1):
            if row - 1 not in rows:
                rows.append(row - 1)
    return rows


def parse_command(text, row_count):
    """
    Turn one line of user input into a Command.

    Row numbers are 1-based on screen and 0-based in the result.

    Args:
        text (str): The line typed at the prompt
        row_count (int): Number of rows currently displayed

    Returns:
        Command: One of toggle, search, clear-search, select-all, clear,
        write, quit, help or invalid
    """
    text = text.strip()
    if not text:
        return Command('invalid', "Nothing entered, type ? for help")
    if text.startswith('/'):
        query = text[1:].strip()
        return Command('search', query) if query else Command('clear-search')

    simple = {
        'a': 'select-all',
        'c': 'clear',
        'w': 'write',
        'q': 'quit',
        '?': 'help',
        'h': 'help',
    }
    if text.lower() in simple:
        return Command(simple[text.lower()])

    rows = _parse_rows(text, row_count)
    if rows is None:
        return Command('invalid', f"Not a command or row number in 1-{row_count}: {text}")
    return Command('toggle', rows)


def build_table(session, endpoints, title):
    table = Table(title=title, title_justify='center', expand=True)
    table.add_column('#', justify='right', style='dim')
    table.add_column(' ', width=2)
    table.add_column('Method', style='bold')
    table.add_column('Path')
    table.add_column('Summary', overflow='ellipsis', no_wrap=True)

    for row, endpoint in enumerate(endpoints, start=1):
        selected = session.is_selected(endpoint.key)
        table.add_row(
            str(row),
            SNIP_MARKER if selected else '',
            endpoint.method.upper(),
            endpoint.path,
            endpoint.summary or 'No description',
            style='green' if selected else None,
        )
    return table


def render(session, console, source=''):
    """Print the current display list and return it."""
    endpoints = session.display_list()
    count = len(endpoints)
    title = f"{count} endpoints for {source}" if source else f"{count} endpoints"
    table = build_table(session, endpoints, title)

    if not endpoints:
        console.print(Text("No items match your search.", style='yellow'))
    else:
        console.print(table)

    status = Text()
    selected = len(session.selection)
    if selected:
        status.append(str(selected), style='bold green')
        status.append(" endpoints selected")
    else:
        status.append("No endpoints selected")
    if session.searching:
        status.append(f"  search: {session.query.strip()}", style='cyan')
    console.print(status)
    return endpoints


def describe(endpoint):
    """Detail lines for one endpoint: parameters and referenced components."""
    lines = [f"{endpoint.method.upper()} {endpoint.path}"]
    if endpoint.parameters:
        lines.append(f"Parameters: {', '.join(endpoint.parameters)}")
    if endpoint.refs:
        lines.append(f"References: {', '.join(endpoint.refs)}")
    return lines


def run(session, console=None, ask=None, source=''):
    """
    Let the user pick endpoints until they write or quit.

    Args:
        session (Session): Holds the document, selection and query
        console (rich.console.Console, optional): Output target
        ask (callable, optional): Reads one line of input, defaults to rich's Prompt
        source (str): Name of the input shown in the table title

    Returns:
        bool: True when the user asked to write the trimmed document
    """
    console = console or Console()
    ask = ask or (lambda: Prompt.ask("apisnip", console=console, default='', show_default=False))

    endpoints = render(session, console, source)
    while True:
        command = parse_command(ask(), len(endpoints))

        if command.action == 'write':
            return True
        if command.action == 'quit':
            return False
        if command.action == 'help':
            console.print(HELP_TEXT)
            continue
        if command.action == 'invalid':
            console.print(Text(command.value, style='red'))
            continue

        if command.action == 'toggle':
            for row in command.value:
                session.toggle(endpoints[row].key)
            if len(command.value) == 1:
                for line in describe(endpoints[command.value[0]]):
                    console.print(Text(line, style='dim'))
        elif command.action == 'search':
            session.search(command.value)
        elif command.action == 'clear-search':
            session.clear_search()
        elif command.action == 'select-all':
            session.select_all_in_filter()
        elif command.action == 'clear':
            session.clear()

        endpoints = render(session, console, source)
