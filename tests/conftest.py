from pathlib import Path
import pytest
from fastapi.testclient import TestClient

from academia.config import Settings
from academia.database import RecordStore
from academia.main import create_app
from academia.migrations import create_schema


@pytest.fixture
def db_url(tmp_path: Path) -> str:
    """A fresh SQLite database file per test."""
    return f"sqlite:///{tmp_path / 'academia.db'}"


@pytest.fixture
def static_dir(tmp_path: Path) -> Path:
    d = tmp_path / "public"
    d.mkdir()
    (d / "index.html").write_text("<html><body>academia shell</body></html>", encoding="utf-8")
    (d / "app.js").write_text("console.log('academia');", encoding="utf-8")
    return d


@pytest.fixture
def make_settings(db_url, static_dir):
    def _make(**overrides):
        values = {"DATABASE_URL": db_url, "STATIC_DIR": static_dir}
        values.update(overrides)
        return Settings(**values)
    return _make


@pytest.fixture
def client(make_settings):
    """A TestClient whose lifespan (schema + seed) has run."""
    app = create_app(make_settings())
    with TestClient(app) as c:
        yield c


@pytest.fixture
def store(db_url):
    """An empty store with the schema created and nothing seeded."""
    s = RecordStore(db_url)
    create_schema(s)
    yield s
    s.dispose()
