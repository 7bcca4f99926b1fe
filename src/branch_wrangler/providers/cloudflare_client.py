"""HTTP client for the Cloudflare REST API (v4).

Covers the two calls the provisioner needs: deriving the account id from
the API token, and patching a Pages project's deployment configs. Auth is
a static bearer token. Requests are not retried: a failed publish leaves
created resources intact and the whole run is safe to repeat.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..errors import CloudflareAPIError
from ..settings import DEFAULT_API_BASE_URL

logger = logging.getLogger(__name__)


class CloudflareClient:
    """Synchronous client for the subset of the Cloudflare API used here."""

    def __init__(
        self,
        *,
        api_token: str,
        base_url: str = DEFAULT_API_BASE_URL,
        http_client: httpx.Client | None = None,
    ) -> None:
        if not api_token:
            raise ValueError("api_token is required")

        self._api_token = api_token
        self._base_url = base_url.rstrip("/")
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client()

    # ------ lifecycle ------

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> CloudflareClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    # ------ helpers ------

    def _auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._api_token}"}

    def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any | None = None,
        params: dict[str, str] | None = None,
    ) -> httpx.Response:
        url = f"{self._base_url}{path}"
        try:
            resp = self._client.request(
                method,
                url,
                headers=self._auth_headers(),
                json=json,
                params=params,
            )
        except httpx.HTTPError as exc:
            raise CloudflareAPIError(0, f"{method} {path} failed: {exc}") from exc

        self._raise_for_status(resp)
        return resp

    def _raise_for_status(self, resp: httpx.Response) -> None:
        if resp.is_success:
            return

        body = resp.text
        logger.error(
            "Cloudflare API request failed: %d %s",
            resp.status_code,
            resp.reason_phrase,
            extra={"status_code": resp.status_code, "response_body": body[:500]},
        )
        raise CloudflareAPIError(
            status_code=resp.status_code,
            message=resp.reason_phrase or f"HTTP {resp.status_code}",
            response_body=body,
        )

    @staticmethod
    def _json(resp: httpx.Response) -> dict[str, Any]:
        try:
            payload = resp.json()
        except ValueError as exc:
            raise CloudflareAPIError(
                resp.status_code, "response is not valid JSON", response_body=resp.text,
            ) from exc
        if not isinstance(payload, dict):
            raise CloudflareAPIError(
                resp.status_code,
                f"expected a JSON object, got {type(payload).__name__}",
                response_body=resp.text,
            )
        return payload

    # ------ public API ------

    def fetch_account_ids(self, *, per_page: int = 1) -> list[str]:
        """Return the ids of accounts visible to the API token."""
        resp = self._request("GET", "/accounts", params={"per_page": str(per_page)})
        result = self._json(resp).get("result") or []
        return [str(a["id"]) for a in result if isinstance(a, dict) and a.get("id")]

    def patch_pages_project(
        self,
        account_id: str,
        project_name: str,
        payload: dict[str, Any],
    ) -> dict[str, Any]:
        """PATCH a Pages project. Returns the decoded API response."""
        resp = self._request(
            "PATCH",
            f"/accounts/{account_id}/pages/projects/{project_name}",
            json=payload,
        )
        return self._json(resp)
