# src/crawler/services/relay_backends.py
import logging
from abc import ABC, abstractmethod
from typing import List, Optional, Iterable, Dict, Any

import aiohttp

from crawler.errors import RelayError
from crawler.model import RelayResponse, RelaySettings
from crawler.utils.url_utils import UrlUtils

logger = logging.getLogger(__name__)

DEFAULT_RELAYS = [
    RelaySettings(prefix="https://api.allorigins.win/get?url=", envelope=True),
    RelaySettings(prefix="https://corsproxy.io/?"),
    RelaySettings(prefix="https://cors-anywhere.herokuapp.com/"),
    RelaySettings(prefix="https://thingproxy.freeboard.io/fetch/"),
]


async def _read_text(response: aiohttp.ClientResponse) -> str:
    try:
        return await response.text()
    except UnicodeDecodeError:
        content_bytes = await response.read()
        return content_bytes.decode('utf-8', errors='replace')


class RetrievalBackend(ABC):
    """One interchangeable way of getting a page body and status for a URL."""

    name: str = "backend"

    @abstractmethod
    async def fetch(self, session: aiohttp.ClientSession, url: str) -> RelayResponse:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


class DirectBackend(RetrievalBackend):
    """Requests the target URL itself."""

    name = "direct"

    async def fetch(self, session: aiohttp.ClientSession, url: str) -> RelayResponse:
        async with session.get(url, allow_redirects=True) as response:
            body = await _read_text(response)
            return RelayResponse(body=body, status=response.status, headers=dict(response.headers))


class PassthroughRelay(RetrievalBackend):
    """A forwarding service that returns the target body unchanged, with its own status."""

    def __init__(self, prefix: str):
        self.prefix = prefix
        self.name = prefix

    def relay_url(self, url: str) -> str:
        return self.prefix + UrlUtils.encode_component(url)

    async def fetch(self, session: aiohttp.ClientSession, url: str) -> RelayResponse:
        async with session.get(self.relay_url(url)) as response:
            body = await _read_text(response)
            return RelayResponse(body=body, status=response.status, headers=dict(response.headers))


class EnvelopeRelay(PassthroughRelay):
    """
    A forwarding service that wraps the target response in a JSON envelope:
    {"contents": "<body>", "status": {"http_code": 200}}.
    A missing http_code is reported as 200.
    """

    async def fetch(self, session: aiohttp.ClientSession, url: str) -> RelayResponse:
        async with session.get(self.relay_url(url)) as response:
            payload = await response.json(content_type=None)
            headers = dict(response.headers)
        return self.unwrap(payload, url, headers)

    def unwrap(self, payload: Any, url: str, headers: Optional[Dict[str, str]] = None) -> RelayResponse:
        if not isinstance(payload, dict) or payload.get("contents") is None:
            raise RelayError(self.name, url, "envelope without contents")
        status_block = payload.get("status")
        http_code = status_block.get("http_code") if isinstance(status_block, dict) else None
        return RelayResponse(
            body=str(payload["contents"]),
            status=int(http_code) if http_code else 200,
            headers=headers or {}
        )


def build_relays(settings: Iterable[Any]) -> List[RetrievalBackend]:
    """Builds the ordered relay chain from settings entries (dicts or RelaySettings)."""
    relays: List[RetrievalBackend] = []
    for entry in settings:
        relay_settings = entry if isinstance(entry, RelaySettings) else RelaySettings.model_validate(entry)
        relay_cls = EnvelopeRelay if relay_settings.envelope else PassthroughRelay
        relays.append(relay_cls(relay_settings.prefix))
    return relays
