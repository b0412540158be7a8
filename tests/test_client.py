"""Tests for the Python table client: API calls, rendering and optimistic toggles."""

from __future__ import annotations

import asyncio
import json
from datetime import date
from pathlib import Path

import httpx
import pytest

from checktable.client import __main__ as cli
from checktable.client.api import ClientError, TableApiClient
from checktable.client.cell import CellBusy, CellState, CheckboxCell
from checktable.client.view import EMPTY_PLACEHOLDER, TableView, TextCell
from checktable.core.config import Settings, get_settings
from checktable.main import app

BASE_URL = "http://testserver"
TODAY = date(2026, 10, 19)


def run_with_view(handler, scenario):
    """Run ``scenario(view)`` against a mocked service and return its result."""
    async def main():
        async with TableApiClient(BASE_URL, transport=httpx.MockTransport(handler)) as api:
            view = TableView(api, today=lambda: TODAY)
            return view, await scenario(view)

    return asyncio.run(main())


# -- API client ---------------------------------------------------------------

def test_get_table(table_document: dict) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/data"
        assert request.headers["cache-control"] == "no-store"
        return httpx.Response(200, json=table_document)

    _, table = run_with_view(handler, lambda view: view.api.get_table())

    assert table == table_document


def test_get_table_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="Server error")

    with pytest.raises(ClientError, match="Failed to load data"):
        run_with_view(handler, lambda view: view.api.get_table())


def test_update_cell_quotes_path_and_sends_value() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.raw_path
        seen["method"] = request.method
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"success": True, "row": {"id": "a b/c", "done": "x"}})

    _, payload = run_with_view(handler, lambda view: view.api.update_cell("a b/c", "done", "x"))

    assert seen["method"] == "PATCH"
    assert seen["path"] == b"/api/rows/a%20b%2Fc/columns/done"
    assert seen["body"] == {"value": "x"}
    assert payload["row"]["done"] == "x"


def test_update_cell_error_message_from_server() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"error": "Row not found"})

    with pytest.raises(ClientError) as excinfo:
        run_with_view(handler, lambda view: view.api.update_cell("r9", "done", ""))

    assert excinfo.value.message == "Row not found"
    assert excinfo.value.status_code == 404


def test_update_cell_error_without_json_body() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="<html>bad gateway</html>")

    with pytest.raises(ClientError, match="Failed to save changes"):
        run_with_view(handler, lambda view: view.api.update_cell("r1", "done", ""))


def test_transport_error_becomes_client_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("Connection refused", request=request)

    with pytest.raises(ClientError, match="Connection refused"):
        run_with_view(handler, lambda view: view.api.update_cell("r1", "done", ""))


# -- Rendering -----------------------------------------------------------------

def test_render_table(table_document: dict) -> None:
    view = TableView(api=None)

    view.render_table(table_document)

    assert view.headers == ["Task", "Owner", "Done", "Shipped", "Rating"]
    assert [row.row_id for row in view.rows] == ["r1", "r2"]

    name, owner, done, shipped, rating = view.rows[1].cells
    assert name == TextCell("name", "text", "")
    assert owner == TextCell("owner", "text", EMPTY_PLACEHOLDER, is_empty=True)
    assert isinstance(done, CheckboxCell)
    assert done.checked is True
    assert done.value == "01.02.26"
    assert shipped.checked is False
    assert shipped.value == ""
    assert rating == TextCell("rating", "stars", "")

    first = view.rows[0].cells
    assert first[1] == TextCell("owner", "text", "Ann")
    assert first[2].aria_label == "Write docs: Done"
    assert first[4] == TextCell("rating", "stars", "3")


def test_to_html(table_document: dict) -> None:
    view = TableView(api=None)
    view.render_table(table_document)
    view.set_status("Changes saved", "success")

    html = view.to_html()

    assert "<th>Task</th>" in html
    assert 'class="status status--success"' in html
    assert 'class="is-empty">—</td>' in html
    assert 'aria-label="Write docs: Done"' in html
    assert 'data-row-id="r2" data-column-key="done" aria-label=": Done" checked>' in html
    assert '<span class="task-table__date">01.02.26</span>' in html


def test_to_html_escapes_values(table_document: dict) -> None:
    table_document["rows"][0]["name"] = "<script>alert(1)</script>"
    view = TableView(api=None)
    view.render_table(table_document)

    assert "<script>" not in view.to_html()


def test_to_text(table_document: dict) -> None:
    view = TableView(api=None)
    view.render_table(table_document)

    lines = view.to_text().splitlines()

    assert lines[0].split() == ["Task", "Owner", "Done", "Shipped", "Rating"]
    assert "[x] 01.02.26" in lines[2]
    assert "[ ]" in lines[1]


# -- Loading -------------------------------------------------------------------

def test_load_and_render(table_document: dict) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=table_document)

    async def scenario(view: TableView):
        await view.load_and_render()
        quiet = view.status
        await view.load_and_render(announce_success=True)
        return quiet

    view, quiet = run_with_view(handler, scenario)

    assert quiet.message == ""
    assert view.status.message == "Data refreshed"
    assert view.table == table_document
    assert len(view.rows) == 2
    assert view.loading is False
    assert view.refresh_disabled is False


def test_load_failure_keeps_previous_view(table_document: dict) -> None:
    responses = [httpx.Response(200, json=table_document), httpx.Response(500)]

    def handler(request: httpx.Request) -> httpx.Response:
        return responses.pop(0)

    async def scenario(view: TableView):
        await view.load_and_render()
        rendered = view.rows
        await view.load_and_render(announce_success=True)
        return rendered

    view, rendered = run_with_view(handler, scenario)

    assert view.rows is rendered
    assert view.status.kind == "error"
    assert view.status.message == "Failed to load data"
    assert view.refresh_disabled is False


# -- Checkbox toggles ------------------------------------------------------------

def test_toggle_to_checked_succeeds(table_document: dict) -> None:
    in_flight = {}

    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            return httpx.Response(200, json=table_document)
        cell = state["view"].find_cell("r1", "done")
        in_flight.update(value=cell.value, checked=cell.checked,
                         disabled=cell.disabled, state=cell.state)
        value = json.loads(request.content)["value"]
        row = dict(table_document["rows"][0], done=value)
        return httpx.Response(200, json={"success": True, "row": row})

    state = {}

    async def scenario(view: TableView):
        state["view"] = view
        await view.load_and_render()
        return await view.toggle("r1", "done", True)

    view, cell = run_with_view(handler, scenario)

    assert in_flight == {"value": "19.10.26", "checked": True,
                         "disabled": True, "state": CellState.PENDING}
    assert cell.disabled is False
    assert cell.value == "19.10.26"
    assert cell.outcome is CellState.RECONCILED
    assert view.status.kind == "success"
    assert view.status.message == "Changes saved"
    assert view.table["rows"][0]["done"] == "19.10.26"


def test_toggle_failure_rolls_back(table_document: dict) -> None:
    in_flight = {}

    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            return httpx.Response(200, json=table_document)
        cell = state["view"].find_cell("r1", "done")
        in_flight.update(value=cell.value, disabled=cell.disabled)
        return httpx.Response(500, json={"error": "Disk full"})

    state = {}

    async def scenario(view: TableView):
        state["view"] = view
        await view.load_and_render()
        return await view.toggle("r1", "done", True)

    view, cell = run_with_view(handler, scenario)

    assert in_flight == {"value": "19.10.26", "disabled": True}
    assert cell.value == ""
    assert cell.checked is False
    assert cell.disabled is False
    assert cell.outcome is CellState.ROLLED_BACK
    assert view.status.kind == "error"
    assert view.status.message == "Disk full"
    assert view.table["rows"][0]["done"] == ""


def test_toggle_to_unchecked_sends_empty_value(table_document: dict) -> None:
    sent = []

    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            return httpx.Response(200, json=table_document)
        sent.append(json.loads(request.content))
        row = dict(table_document["rows"][1], done="")
        return httpx.Response(200, json={"success": True, "row": row})

    async def scenario(view: TableView):
        await view.load_and_render()
        return await view.toggle("r2", "done", False)

    view, cell = run_with_view(handler, scenario)

    assert sent == [{"value": ""}]
    assert cell.checked is False
    assert view.table["rows"][1]["done"] == ""


def test_toggle_while_pending_is_refused(table_document: dict) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=table_document)

    async def scenario(view: TableView):
        await view.load_and_render()
        cell = view.find_cell("r1", "done")
        cell.begin(True, TODAY)
        with pytest.raises(CellBusy):
            await view.on_checkbox_toggle(cell, False)
        return cell

    _, cell = run_with_view(handler, scenario)

    assert cell.state is CellState.PENDING


def test_toggle_unknown_cell(table_document: dict) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=table_document)

    async def scenario(view: TableView):
        await view.load_and_render()
        with pytest.raises(KeyError):
            await view.toggle("r1", "name", True)

    run_with_view(handler, scenario)


def test_toggle_with_malformed_row_rolls_back(table_document: dict) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            return httpx.Response(200, json=table_document)
        return httpx.Response(200, json={"success": True, "row": "oops"})

    async def scenario(view: TableView):
        await view.load_and_render()
        return await view.toggle("r1", "done", True)

    view, cell = run_with_view(handler, scenario)

    assert cell.value == ""
    assert cell.checked is False
    assert cell.disabled is False
    assert cell.outcome is CellState.ROLLED_BACK
    assert view.status.kind == "error"
    assert view.status.message == "Failed to save changes"
    assert view.table["rows"][0]["done"] == ""


# -- Against the real application -----------------------------------------------

def test_end_to_end_toggle(settings: Settings, data_file: Path) -> None:
    app.dependency_overrides[get_settings] = lambda: settings

    async def scenario():
        transport = httpx.ASGITransport(app=app)
        async with TableApiClient(BASE_URL, transport=transport) as api:
            view = TableView(api, today=lambda: TODAY)
            await view.load_and_render(announce_success=True)
            cell = await view.toggle("r1", "shipped", True)
            return view, cell

    try:
        view, cell = asyncio.run(scenario())
    finally:
        app.dependency_overrides.clear()

    assert cell.outcome is CellState.RECONCILED
    assert view.status.message == "Changes saved"
    stored = json.loads(data_file.read_text(encoding="utf-8"))
    assert stored["rows"][0]["shipped"] == "19.10.26"


# -- Command line ------------------------------------------------------------------

@pytest.fixture
def mocked_cli(monkeypatch: pytest.MonkeyPatch, table_document: dict):
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if request.method == "GET":
            return httpx.Response(200, json=table_document)
        value = json.loads(request.content)["value"]
        return httpx.Response(200, json={"success": True, "row": {"id": "r1", "done": value}})

    monkeypatch.setattr(
        cli, "TableApiClient",
        lambda url: TableApiClient(url, transport=httpx.MockTransport(handler)),
    )
    return requests


def test_cli_show(mocked_cli, capsys: pytest.CaptureFixture) -> None:
    assert cli.main(["--url", BASE_URL, "show"]) == 0

    out = capsys.readouterr().out
    assert "Task" in out
    assert "Write docs" in out


def test_cli_toggle(mocked_cli, capsys: pytest.CaptureFixture) -> None:
    assert cli.main(["--url", BASE_URL, "toggle", "r1", "done", "--off"]) == 0

    assert json.loads(mocked_cli[-1].content) == {"value": ""}
    assert "r1/done unchecked" in capsys.readouterr().out


def test_cli_toggle_unknown_cell(mocked_cli, capsys: pytest.CaptureFixture) -> None:
    assert cli.main(["--url", BASE_URL, "toggle", "r1", "name", "--on"]) == 1

    assert "no checkbox cell r1/name" in capsys.readouterr().err
