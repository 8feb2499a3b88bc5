from unittest.mock import MagicMock

import pytest
import requests

from tmdb_api import TMDBApi


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def make_response():
    def _make(payload=None, status_code=200, reason="OK"):
        response = MagicMock()
        response.status_code = status_code
        response.reason = reason
        response.json.return_value = payload
        return response
    return _make


@pytest.fixture
def http_session():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def movie_api(http_session):
    return TMDBApi("test-key", "https://tmdb.test/3", session=http_session)
