"""HTTP HEAD existence probe.

The store must be public and answer HEAD requests for
``{base_uri}/{file_name}``. Status handling:

- 2xx           -> found
- 404, 410      -> not found
- anything else -> indeterminate (auth failures, throttling, 5xx)
- transport errors and timeouts -> indeterminate
"""

from __future__ import annotations

import logging
from types import TracebackType

import httpx

from bundlewright.models.reconcile import ProbeResult

logger = logging.getLogger(__name__)

_NOT_FOUND_STATUSES = frozenset({404, 410})


class HttpExistenceProbe:
    """``ExistenceProbe`` backed by ``httpx.AsyncClient``.

    Parameters
    ----------
    base_uri:
        Base address of the store; file names are appended after a ``/``.
    timeout:
        Per-request timeout in seconds.
    client:
        Optional pre-configured client (e.g. with a mock transport). A
        client passed in is not closed by ``aclose``.
    """

    def __init__(
        self,
        base_uri: str,
        *,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        if not base_uri:
            raise ValueError("base_uri must not be empty")
        self.base_uri = base_uri.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout, follow_redirects=True)

    def url_for(self, file_name: str) -> str:
        return f"{self.base_uri}/{file_name}"

    async def probe(self, file_name: str) -> ProbeResult:
        url = self.url_for(file_name)
        try:
            response = await self._client.head(url)
        except httpx.HTTPError as exc:
            logger.debug("HEAD %s failed: %s", url, exc)
            return ProbeResult.INDETERMINATE

        if response.is_success:
            return ProbeResult.FOUND
        if response.status_code in _NOT_FOUND_STATUSES:
            return ProbeResult.NOT_FOUND
        logger.debug("HEAD %s returned %d", url, response.status_code)
        return ProbeResult.INDETERMINATE

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> HttpExistenceProbe:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()
