"""Shared fixtures: a seeded table document, a public directory and an app client."""

from __future__ import annotations

import copy
import json
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from checktable.core.config import Settings, get_settings
from checktable.main import app


SAMPLE_TABLE = {
    "columns": [
        {"key": "name", "label": "Task", "type": "text"},
        {"key": "owner", "label": "Owner", "type": "text"},
        {"key": "done", "label": "Done", "type": "checkbox"},
        {"key": "shipped", "label": "Shipped", "type": "checkbox"},
        {"key": "rating", "label": "Rating", "type": "stars"},
    ],
    "rows": [
        {"id": "r1", "name": "Write docs", "owner": "Ann", "done": "", "shipped": "", "rating": "3"},
        {"id": "r2", "name": "", "owner": "", "done": "01.02.26", "shipped": "", "rating": ""},
    ],
}


@pytest.fixture
def table_document() -> dict:
    return copy.deepcopy(SAMPLE_TABLE)


@pytest.fixture
def data_file(tmp_path: Path, table_document: dict) -> Path:
    path = tmp_path / "data" / "tableData.json"
    path.parent.mkdir()
    path.write_text(json.dumps(table_document, indent=2), encoding="utf-8")
    return path


@pytest.fixture
def public_dir(tmp_path: Path) -> Path:
    root = tmp_path / "public"
    (root / "docs").mkdir(parents=True)
    (root / "index.html").write_text("<h1>table</h1>", encoding="utf-8")
    (root / "app.js").write_text("console.log('ok');", encoding="utf-8")
    (root / "docs" / "index.html").write_text("<h1>docs</h1>", encoding="utf-8")
    (root / "blob.unknownext").write_bytes(b"\x00\x01")
    # Lives next to the public root, must never be served
    (tmp_path / "secret.txt").write_text("top secret", encoding="utf-8")
    return root


@pytest.fixture
def settings(data_file: Path, public_dir: Path) -> Settings:
    return Settings(_env_file=None, DATA_FILE=data_file, PUBLIC_DIR=public_dir)


@pytest.fixture
def client(settings: Settings):
    app.dependency_overrides[get_settings] = lambda: settings
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()
