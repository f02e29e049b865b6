"""Shared fixtures: a fake alignment service behind requests.post."""

import json
from unittest.mock import MagicMock, patch

import pytest


def make_response(status_code=200, data=None, text=None):
    """Build a requests.Response stand-in."""
    res = MagicMock()
    res.status_code = status_code
    res.text = text if text is not None else json.dumps(data)
    return res


class FakeAlignmentService:
    """Answers lookup requests from a table of best matches and available versions."""

    def __init__(self):
        self.best_matches = {}
        self.available = {}
        self.requests = []

    def __call__(self, url, data=None, timeout=None, **kwargs):
        body = json.loads(data)
        self.requests.append(body)
        entries = []
        for gav in body["gavs"]:
            key = f"{gav['groupId']}:{gav['artifactId']}:{gav['version']}"
            entries.append({
                "groupId": gav["groupId"],
                "artifactId": gav["artifactId"],
                "version": gav["version"],
                "bestMatchVersion": self.best_matches.get(key),
                "availableVersions": self.available.get(key, []),
            })
        return make_response(200, entries)


@pytest.fixture
def fake_da():
    """Patch the HTTP layer with a FakeAlignmentService."""
    service = FakeAlignmentService()
    with patch("common.http_client.requests.post", side_effect=service):
        yield service
