# ensures the 'src' directory is on sys.path for imports like 'from providers import ...'
import json
import sys
from pathlib import Path
from unittest.mock import Mock

import pytest

root = Path(__file__).resolve().parents[1]
src = root / "src"
if str(src) not in sys.path:
    sys.path.insert(0, str(src))

from providers.rest import RestClient  # noqa: E402


def make_response(status_code, payload):
    """Fake httpx response; payload is JSON-encoded unless already a string."""
    response = Mock()
    response.status_code = status_code
    response.is_success = 200 <= status_code < 300
    response.text = payload if isinstance(payload, str) else json.dumps(payload)
    return response


@pytest.fixture
def json_response():
    """Factory for fake HTTP responses."""
    return make_response


@pytest.fixture
def mock_client():
    """Mock HTTP client; set get.return_value or get.side_effect."""
    return Mock()


@pytest.fixture
def rest(mock_client):
    """RestClient backed by the mock HTTP client."""
    return RestClient(client=mock_client)
