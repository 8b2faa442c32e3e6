"""Async HTTP client for the ledger state and submission service."""

from __future__ import annotations

import logging

from dataclasses import dataclass, field
from types import TracebackType

import httpx

from bagkeeper.infrastructure.constants import HTTP_NOT_FOUND, LedgerAPI
from bagkeeper.shared.constants import DEFAULT_TIMEOUT_SECONDS
from bagkeeper.shared.exceptions import ProviderError, SubmissionError

logger = logging.getLogger(__name__)

# =============================================================================
# CLIENT
# =============================================================================

_STATUS_OK_MAX = 299


@dataclass
class LedgerClient:
    """Thin wrapper around the ledger REST API.

    Reads raise :class:`ProviderError`; batch submissions raise
    :class:`SubmissionError`. Payloads are returned as decoded JSON and
    validated by the callers. One connection pool is opened on first use
    and held until :meth:`aclose`; the client is also an async context
    manager.
    """

    base_url: str
    token: str | None = None
    timeout: float = DEFAULT_TIMEOUT_SECONDS
    _http: httpx.AsyncClient | None = field(default=None, init=False, repr=False)

    async def __aenter__(self) -> LedgerClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the pooled HTTP client, if one was opened."""
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    async def get_bags(self) -> object:
        """Fetch every bag with its head and tail.

        Raises:
            ProviderError: If the API call fails.
        """
        return await self._get(LedgerAPI.BAGS)

    async def get_thresholds(self) -> object:
        """Fetch the ascending threshold list.

        Raises:
            ProviderError: If the API call fails.
        """
        return await self._get(LedgerAPI.THRESHOLDS)

    async def get_node(self, entry_id: str) -> object | None:
        """Fetch one list node, or None if the ledger does not know it.

        Raises:
            ProviderError: If the API call fails.
        """
        return await self._get(f"{LedgerAPI.NODES}/{entry_id}", missing_ok=True)

    async def get_weight(self, entry_id: str) -> object:
        """Fetch the authoritative weight of an account.

        Raises:
            ProviderError: If the API call fails.
        """
        return await self._get(f"{LedgerAPI.WEIGHTS}/{entry_id}")

    async def post_rebag_batch(self, payload: dict[str, object]) -> object:
        """Submit a batch of migrations.

        Raises:
            SubmissionError: If the API call fails.
        """
        return await self._post(LedgerAPI.REBAG_BATCH, payload)

    async def post_reposition_batch(self, payload: dict[str, object]) -> object:
        """Submit an ordered batch of reordering instructions.

        Raises:
            SubmissionError: If the API call fails.
        """
        return await self._post(LedgerAPI.REPOSITION_BATCH, payload)

    # =================================================================
    # HTTP helpers
    # =================================================================

    async def _get(self, path: str, *, missing_ok: bool = False) -> object | None:
        url = f"{self.base_url.rstrip('/')}{path}"
        try:
            response = await self._client().get(url, headers=self._headers())
        except httpx.HTTPError as e:
            raise ProviderError(f"GET {path}: {e}") from e

        if missing_ok and response.status_code == HTTP_NOT_FOUND:
            logger.debug("GET %s: not found", path)
            return None
        if response.status_code > _STATUS_OK_MAX:
            raise ProviderError(
                f"GET {path}: HTTP {response.status_code}: {response.text}"
            )
        try:
            return response.json()
        except ValueError as e:
            raise ProviderError(f"GET {path}: response is not JSON") from e

    async def _post(self, path: str, payload: dict[str, object]) -> object:
        url = f"{self.base_url.rstrip('/')}{path}"
        try:
            response = await self._client().post(
                url, json=payload, headers=self._headers()
            )
        except httpx.HTTPError as e:
            raise SubmissionError(f"POST {path}: {e}") from e

        if response.status_code > _STATUS_OK_MAX:
            raise SubmissionError(
                f"POST {path}: HTTP {response.status_code}: {response.text}"
            )
        try:
            return response.json()
        except ValueError as e:
            raise SubmissionError(f"POST {path}: response is not JSON") from e

    def _client(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient(timeout=self.timeout)
        return self._http

    def _headers(self) -> dict[str, str]:
        headers = {"accept": LedgerAPI.ACCEPT_JSON.value}
        if self.token:
            headers["authorization"] = f"Bearer {self.token}"
        return headers
