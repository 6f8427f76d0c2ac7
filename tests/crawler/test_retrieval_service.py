# tests/crawler/test_retrieval_service.py
import asyncio
from unittest.mock import MagicMock

import aiohttp
import pytest

from crawler.errors import RelayError, RetrievalError
from crawler.model import RelayResponse, RelaySettings
from crawler.services.relay_backends import (
    EnvelopeRelay, PassthroughRelay, RetrievalBackend, build_relays
)
from crawler.services.retrieval_service import RetrievalService


class ScriptedBackend(RetrievalBackend):
    """Backend that sleeps, then either raises or returns a fixed body."""

    def __init__(self, name, error=None, body="<html>ok</html>", status=200, delay=0.0):
        self.name = name
        self.error = error
        self.body = body
        self.status = status
        self.delay = delay
        self.calls = 0
        self.cancelled = False

    async def fetch(self, session, url):
        self.calls += 1
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        if self.error is not None:
            raise self.error
        return RelayResponse(body=self.body, status=self.status, headers={"Content-Encoding": "gzip"})


def make_service(direct, relays, direct_timeout_ms=1000, relay_timeout_ms=1000):
    session = MagicMock()
    session.closed = False
    return RetrievalService(
        relays=relays,
        direct=direct,
        direct_timeout_ms=direct_timeout_ms,
        relay_timeout_ms=relay_timeout_ms,
        user_agent="test-agent",
        session=session
    )


@pytest.mark.asyncio
async def test_falls_back_to_second_relay():
    direct = ScriptedBackend("direct", error=aiohttp.ClientError("refused"), delay=0.03)
    first = ScriptedBackend("relay-1", error=RelayError("relay-1", "https://example.com", "bad envelope"), delay=0.03)
    second = ScriptedBackend("relay-2", body="<html>second</html>")
    third = ScriptedBackend("relay-3")

    service = make_service(direct, [first, second, third])
    result = await service.fetch("https://example.com")

    assert result.raw_content == "<html>second</html>"
    assert result.http_status == 200
    assert result.backend == "relay-2"
    assert result.attempts == 3
    assert result.elapsed_ms >= 50
    assert third.calls == 0
    assert result.header("content-encoding") == "gzip"


@pytest.mark.asyncio
async def test_direct_success_skips_relays():
    direct = ScriptedBackend("direct", body="<html>direct</html>")
    relay = ScriptedBackend("relay-1")

    result = await make_service(direct, [relay]).fetch("https://example.com")

    assert result.backend == "direct"
    assert relay.calls == 0


@pytest.mark.asyncio
async def test_all_attempts_failing_raises_retrieval_error():
    direct = ScriptedBackend("direct", error=aiohttp.ClientError("refused"))
    relays = [ScriptedBackend(f"relay-{i}", error=ValueError("broken")) for i in range(3)]

    with pytest.raises(RetrievalError) as exc_info:
        await make_service(direct, relays).fetch("https://example.com")

    assert exc_info.value.tried_count == 4
    assert exc_info.value.url == "https://example.com"
    assert "All proxy attempts failed" in str(exc_info.value)
    assert "ValueError" in exc_info.value.last_error


@pytest.mark.asyncio
async def test_slow_attempt_is_cancelled_at_its_timeout():
    slow_direct = ScriptedBackend("direct", delay=1.0)
    relay = ScriptedBackend("relay-1", body="<html>relay</html>")

    service = make_service(slow_direct, [relay], direct_timeout_ms=50)
    result = await service.fetch("https://example.com")

    assert slow_direct.cancelled
    assert result.backend == "relay-1"


@pytest.mark.asyncio
async def test_relay_timeout_override():
    direct = ScriptedBackend("direct", error=aiohttp.ClientError("refused"))
    slow_relay = ScriptedBackend("relay-1", delay=1.0)
    fast_relay = ScriptedBackend("relay-2")

    service = make_service(direct, [slow_relay, fast_relay], relay_timeout_ms=5000)
    result = await service.fetch("https://example.com", timeout_ms=50)

    assert slow_relay.cancelled
    assert result.backend == "relay-2"


def test_envelope_unwrap_reads_contents_and_status():
    relay = EnvelopeRelay("https://relay.test/get?url=")
    response = relay.unwrap({"contents": "<html>x</html>", "status": {"http_code": 404}}, "https://example.com")
    assert response.body == "<html>x</html>"
    assert response.status == 404


def test_envelope_without_status_defaults_to_200():
    relay = EnvelopeRelay("https://relay.test/get?url=")
    assert relay.unwrap({"contents": "body"}, "https://example.com").status == 200


def test_envelope_without_contents_is_a_relay_error():
    relay = EnvelopeRelay("https://relay.test/get?url=")
    with pytest.raises(RelayError):
        relay.unwrap({"status": {"http_code": 200}}, "https://example.com")


def test_relay_url_embeds_encoded_target():
    relay = PassthroughRelay("https://relay.test/?")
    assert relay.relay_url("https://example.com/a b?x=1") == "https://relay.test/?https%3A%2F%2Fexample.com%2Fa%20b%3Fx%3D1"


def test_build_relays_keeps_order_and_types():
    relays = build_relays([
        {"prefix": "https://one.test/get?url=", "envelope": True},
        RelaySettings(prefix="https://two.test/?"),
    ])
    assert [type(r) for r in relays] == [EnvelopeRelay, PassthroughRelay]
    assert [r.name for r in relays] == ["https://one.test/get?url=", "https://two.test/?"]
