from __future__ import annotations

import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:  # pragma: no cover - path setup
    sys.path.insert(0, str(ROOT_DIR))

from devserver.config import Config
from devserver.main import create_app

WS_PORT = 8090


@pytest.fixture
def site(tmp_path: Path) -> Path:
    root = tmp_path / "site"
    (root / "docs" / "empty").mkdir(parents=True)
    (root / "index.html").write_text("<h1>Home</h1>\n", encoding="utf-8")
    (root / "docs" / "index.html").write_text("<h1>Docs</h1>\n", encoding="utf-8")
    (root / "docs" / "guide.HTML").write_text("<p>guide</p>", encoding="utf-8")
    (root / "style.css").write_text("body { color: red; }\n", encoding="utf-8")
    (root / "data.bin").write_bytes(bytes(range(256)) * 1024)
    (root / "café.txt").write_text("coffee", encoding="utf-8")
    (tmp_path / "secret.txt").write_text("top secret", encoding="utf-8")
    return root


@pytest.fixture
def config(site: Path) -> Config:
    return Config(host="127.0.0.1", port=4000, ws_port=WS_PORT, root_dir=site, watch=False)


@pytest.fixture
def client(config: Config):
    with TestClient(create_app(config)) as test_client:
        yield test_client
