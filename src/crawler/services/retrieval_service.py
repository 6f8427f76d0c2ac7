# src/crawler/services/retrieval_service.py
import asyncio
import logging
import time
from typing import List, Optional, Sequence

import aiohttp

from crawler.errors import RelayError, RetrievalError
from crawler.model import RetrievalResult, RelayResponse
from crawler.services.generate_default_user_agent_service import generate_default_user_agent
from crawler.services.relay_backends import (
    RetrievalBackend, DirectBackend, build_relays, DEFAULT_RELAYS
)
from sitelens.core.managers.config_manager import config_manager

logger = logging.getLogger(__name__)

ATTEMPT_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError, RelayError, ValueError, UnicodeDecodeError)


class RetrievalService:
    """
    Fetches raw page content with one direct attempt followed by an ordered
    chain of relay endpoints.

    Attempts run one after another. Each attempt races against its own timeout
    and is cancelled when the timeout expires. The reported elapsed time is
    measured from the start of the `fetch()` call, so it includes failed attempts.
    """

    def __init__(
            self,
            relays: Optional[Sequence[RetrievalBackend]] = None,
            direct: Optional[RetrievalBackend] = None,
            direct_timeout_ms: Optional[int] = None,
            relay_timeout_ms: Optional[int] = None,
            user_agent: Optional[str] = None,
            session: Optional[aiohttp.ClientSession] = None,
    ):
        self.direct = direct or DirectBackend()
        if relays is None:
            relays = build_relays(config_manager.get_nested("retrieval.relays", DEFAULT_RELAYS))
        self.relays: List[RetrievalBackend] = list(relays)

        self.direct_timeout_ms = int(
            direct_timeout_ms or config_manager.get_nested("retrieval.direct_timeout_ms", 5000)
        )
        self.relay_timeout_ms = int(
            relay_timeout_ms or config_manager.get_nested("retrieval.relay_timeout_ms", 15000)
        )
        self.user_agent = user_agent or generate_default_user_agent()

        self.session = session
        self._owns_session = session is None

    async def __aenter__(self):
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    @property
    def backends(self) -> List[RetrievalBackend]:
        return [self.direct, *self.relays]

    async def initialize(self):
        if self.session is None or self.session.closed:
            default_headers = {
                'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
                'User-Agent': self.user_agent
            }
            self.session = aiohttp.ClientSession(headers=default_headers)
            self._owns_session = True
            logger.debug("RetrievalService: Session initialized.")

    async def close(self):
        if self._owns_session and self.session and not self.session.closed:
            await self.session.close()
            logger.debug("RetrievalService: Session closed.")

    async def fetch(self, url: str, timeout_ms: Optional[int] = None) -> RetrievalResult:
        """
        Returns the first usable response for `url`.

        Args:
            url: Absolute URL to retrieve.
            timeout_ms: Per-relay timeout; defaults to the configured relay timeout.
                        The direct attempt always uses the shorter direct timeout.

        Raises:
            RetrievalError: When the direct attempt and every relay failed.
        """
        start_time = time.perf_counter()
        if self.session is None or self.session.closed:
            await self.initialize()

        relay_timeout_ms = timeout_ms or self.relay_timeout_ms
        last_error: Optional[str] = None

        for attempt, backend in enumerate(self.backends, start=1):
            budget_ms = self.direct_timeout_ms if backend is self.direct else relay_timeout_ms
            try:
                response = await self._attempt(backend, url, budget_ms)
            except ATTEMPT_ERRORS as e:
                last_error = f"{type(e).__name__}: {e}" if str(e) else type(e).__name__
                if backend is self.direct:
                    logger.debug("Direct fetch failed for %s (%s), trying relays...", url, last_error)
                else:
                    logger.debug("Relay %s failed for %s: %s", backend.name, url, last_error)
                continue

            elapsed_ms = int(round((time.perf_counter() - start_time) * 1000))
            logger.debug(
                "Fetched %s via %s (status %s, %d ms, attempt %d)",
                url, backend.name, response.status, elapsed_ms, attempt
            )
            return RetrievalResult(
                url=url,
                raw_content=response.body,
                http_status=response.status,
                elapsed_ms=elapsed_ms,
                response_headers=response.headers,
                backend=backend.name,
                attempts=attempt
            )

        logger.debug("All retrieval attempts failed for %s", url)
        raise RetrievalError(url, tried_count=len(self.backends), last_error=last_error)

    async def _attempt(self, backend: RetrievalBackend, url: str, budget_ms: int) -> RelayResponse:
        # wait_for cancels the attempt on expiry, releasing its connection.
        return await asyncio.wait_for(backend.fetch(self.session, url), timeout=budget_ms / 1000)
