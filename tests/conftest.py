import json
import re
import threading

import pytest

from api.base_client import BaseOracleClient
from models.errors import OracleUnavailable

QUERY_IN_PROMPT = re.compile(r'search query "(.*)" relevant')

DEFAULT_LINKS = [
    {
        "title": "Photosynthesis overview",
        "url": "https://www.nasa.gov/photosynthesis",
        "snippet": "How plants turn light into chemical energy.",
        "thumbnailUrl": "https://images.unsplash.com/photo-1",
    },
    {
        "title": "Photosynthesis lecture",
        "url": "https://www.youtube.com/watch?v=abc123",
        "snippet": "A recorded university lecture.",
        "thumbnailUrl": "https://img.youtube.com/vi/abc123/maxresdefault.jpg",
    },
    {
        "title": "Plant memes",
        "url": "https://www.reddit.com/r/plants",
        "snippet": "Not what you need right now.",
    },
]


def oracle_reply(is_valid=True, reason="Relevant to your work.", links=None) -> str:
    """Build a raw oracle reply as the provider would return it."""
    return json.dumps(
        {
            "isValid": is_valid,
            "reason": reason,
            "suggestedLinks": DEFAULT_LINKS if links is None else links,
        }
    )


class FakeOracleClient(BaseOracleClient):
    """
    Offline oracle. ``replies`` maps a query to a raw reply string or an exception;
    anything unmapped gets ``default``. ``gates`` maps a query to a threading.Event
    the call waits on before answering.
    """

    provider_name = "fake"

    def __init__(self, replies=None, default=None, gates=None, max_links=15):
        super().__init__("test-key", "fake-model", max_links=max_links)
        self.replies = dict(replies or {})
        self.default = oracle_reply() if default is None else default
        self.gates = dict(gates or {})
        self.queries: list[str] = []
        self._lock = threading.Lock()

    def _request_json(self, prompt: str):
        match = QUERY_IN_PROMPT.search(prompt)
        query = match.group(1) if match else ""
        with self._lock:
            self.queries.append(query)

        gate = self.gates.get(query)
        if gate is not None:
            gate.wait(timeout=5)

        reply = self.replies.get(query, self.default)
        if isinstance(reply, Exception):
            raise reply
        return reply


class StaticVerifier:
    def __init__(self, accepted_secret: str = "open-sesame"):
        self.accepted_secret = accepted_secret
        self.calls: list[tuple[str, str]] = []

    def verify(self, identity: str, secret: str) -> bool:
        self.calls.append((identity, secret))
        return secret == self.accepted_secret


@pytest.fixture
def fake_oracle():
    return FakeOracleClient()


@pytest.fixture
def verifier():
    return StaticVerifier()


@pytest.fixture
def unavailable_error():
    return OracleUnavailable(details={"provider": "fake"})
