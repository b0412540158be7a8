# checktable/client/__main__.py - command line front end for a running table service
import argparse
import asyncio
import sys

from checktable.client.api import TableApiClient
from checktable.client.cell import CellState
from checktable.client.view import TableView
from checktable.core.config import get_settings


async def show(view: TableView, as_html: bool) -> int:
    await view.load_and_render(announce_success=False)
    if view.status.kind == "error":
        print(f"Error: {view.status.message}", file=sys.stderr)
        return 1
    print(view.to_html() if as_html else view.to_text())
    return 0


async def toggle(view: TableView, row_id: str, column_key: str, checked: bool) -> int:
    await view.load_and_render(announce_success=False)
    if view.status.kind == "error":
        print(f"Error: {view.status.message}", file=sys.stderr)
        return 1

    try:
        cell = await view.toggle(row_id, column_key, checked)
    except KeyError:
        print(f"Error: no checkbox cell {row_id}/{column_key}", file=sys.stderr)
        return 1

    if cell.outcome is CellState.ROLLED_BACK:
        print(f"Error: {view.status.message}", file=sys.stderr)
        return 1

    state = f"checked on {cell.value}" if cell.checked else "unchecked"
    print(f"{view.status.message}: {row_id}/{column_key} {state}")
    return 0


async def run(args) -> int:
    async with TableApiClient(args.url) as api:
        view = TableView(api)
        if args.command == "show":
            return await show(view, args.html)
        return await toggle(view, args.row_id, args.column_key, args.checked)


def main(argv=None) -> int:
    """Main function for the table client"""
    parser = argparse.ArgumentParser(description="Work with a running check table server")
    parser.add_argument("--url", default=get_settings().API_URL,
                        help="base URL of the server (default: %(default)s)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    show_parser = subparsers.add_parser("show", help="print the table")
    show_parser.add_argument("--html", action="store_true", help="print HTML markup instead of text")

    toggle_parser = subparsers.add_parser("toggle", help="check or uncheck a checkbox cell")
    toggle_parser.add_argument("row_id")
    toggle_parser.add_argument("column_key")
    group = toggle_parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--on", dest="checked", action="store_true", help="check with today's date")
    group.add_argument("--off", dest="checked", action="store_false", help="clear the cell")

    args = parser.parse_args(argv)
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
