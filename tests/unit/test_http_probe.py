"""Tests for the HTTP HEAD existence probe, using httpx's mock transport."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from bundlewright.bridge.http_probe import HttpExistenceProbe
from bundlewright.core.reconciler import ExistenceProbe
from bundlewright.models.reconcile import ProbeResult

STATUS_BY_FILE = {
    "published.bundle": 200,
    "missing.bundle": 404,
    "gone.bundle": 410,
    "forbidden.bundle": 403,
    "throttled.bundle": 429,
    "broken.bundle": 503,
}


def _handler(request: httpx.Request) -> httpx.Response:
    assert request.method == "HEAD"
    name = request.url.path.rsplit("/", 1)[-1]
    if name == "unreachable.bundle":
        raise httpx.ConnectError("connection refused", request=request)
    if name == "slow.bundle":
        raise httpx.ReadTimeout("timed out", request=request)
    return httpx.Response(STATUS_BY_FILE[name])


def _probe_all(names: list[str]) -> list[ProbeResult]:
    async def run() -> list[ProbeResult]:
        client = httpx.AsyncClient(transport=httpx.MockTransport(_handler))
        async with client:
            probe = HttpExistenceProbe("https://cdn.example.test/bundles/", client=client)
            return [await probe.probe(name) for name in names]

    return asyncio.run(run())


class TestHttpExistenceProbe:
    def test_satisfies_protocol(self):
        assert isinstance(HttpExistenceProbe("https://cdn.example.test"), ExistenceProbe)

    def test_url_join(self):
        probe = HttpExistenceProbe("https://cdn.example.test/bundles/")
        assert probe.url_for("a.bundle") == "https://cdn.example.test/bundles/a.bundle"

    def test_empty_base_uri_rejected(self):
        with pytest.raises(ValueError):
            HttpExistenceProbe("")

    def test_success_is_found(self):
        assert _probe_all(["published.bundle"]) == [ProbeResult.FOUND]

    def test_not_found_statuses(self):
        assert _probe_all(["missing.bundle", "gone.bundle"]) == [
            ProbeResult.NOT_FOUND,
            ProbeResult.NOT_FOUND,
        ]

    def test_other_statuses_are_indeterminate(self):
        results = _probe_all(["forbidden.bundle", "throttled.bundle", "broken.bundle"])
        assert results == [ProbeResult.INDETERMINATE] * 3

    def test_transport_errors_are_indeterminate(self):
        assert _probe_all(["unreachable.bundle", "slow.bundle"]) == [
            ProbeResult.INDETERMINATE,
            ProbeResult.INDETERMINATE,
        ]

    def test_owned_client_closed_on_exit(self):
        async def run() -> bool:
            async with HttpExistenceProbe("https://cdn.example.test") as probe:
                client = probe._client
            return client.is_closed

        assert asyncio.run(run()) is True
