"""Shared fixtures for canvas_tools tests."""

import json
from unittest.mock import patch

import pytest
import requests


def build_response(status_code=200, body=None, text=None, reason=None) -> requests.Response:
    """Build a real requests.Response with a JSON (or raw text) body."""
    resp = requests.Response()
    resp.status_code = status_code
    resp.reason = reason or ("OK" if status_code < 400 else "Error")
    resp.encoding = "utf-8"
    if text is None:
        text = json.dumps(body) if body is not None else ""
    resp._content = text.encode("utf-8")
    return resp


@pytest.fixture
def make_response():
    """Factory for fake server responses."""
    return build_response


@pytest.fixture
def mock_request():
    """Patch requests.request so no test touches the network."""
    with patch("requests.request") as mocked:
        yield mocked


@pytest.fixture
def elements():
    """A couple of opaque canvas elements."""
    return [
        {"id": "rect-1", "type": "rectangle", "x": 100, "y": 100, "width": 300, "height": 200},
        {"id": "label-1", "type": "text", "x": 120, "y": 140, "text": "API Gateway"},
    ]
