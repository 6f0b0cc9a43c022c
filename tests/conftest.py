import re

import pytest
from fastapi.testclient import TestClient

from st.app import create_app
from st.store import LinkStore
from st.tokens import TokenRegistry

TOKEN_PATTERN = re.compile(r'name="csrftoken" value="([^"]+)"')


@pytest.fixture
def store(tmp_path):
    """A link store backed by a fresh database file."""
    link_store = LinkStore(str(tmp_path / "links.sqlite3"))
    link_store.initialize()
    return link_store


@pytest.fixture
def tokens():
    return TokenRegistry()


@pytest.fixture
def app(store, tokens):
    """Create and configure a new app instance for each test."""
    return create_app(store, tokens)


@pytest.fixture
def client(app):
    """A test client for the app."""
    return TestClient(app)


@pytest.fixture
def fetch_token(client):
    """Loads the add form and returns the token embedded in it."""
    def _fetch():
        response = client.get("/add")
        assert response.status_code == 200
        match = TOKEN_PATTERN.search(response.text)
        assert match, response.text
        return match.group(1)
    return _fetch
