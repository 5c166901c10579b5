from __future__ import annotations

import logging
from typing import Any, Optional

import requests

from .config import Settings
from .models import FlightQuery
from .query import query_params

logger = logging.getLogger(__name__)


class KiwiFetcherError(RuntimeError):
    """Error talking to the Kiwi Tequila API."""


class KiwiFetcher:
    """
    Client for the Kiwi Tequila search API (*/v2/search*).
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.tequila.kiwi.com/v2",
        *,
        timeout: int = 30,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_settings(
        cls, settings: Settings, session: Optional[requests.Session] = None
    ) -> "KiwiFetcher":
        return cls(
            settings.kiwi_api_key,
            settings.kiwi_base_url,
            timeout=settings.request_timeout,
            session=session,
        )

    # ──────────────────────────────────────────────────────────

    def search(self, query: FlightQuery) -> Any:
        """Run one flight search and return the decoded JSON body."""
        logger.info(
            "Searching for flights from %s to %s", query.fly_from, query.fly_to
        )
        try:
            resp = self.session.get(
                f"{self.base_url}/search",
                params=query_params(query),
                headers={"apikey": self.api_key, "Accept": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.error("Request to Kiwi API failed: %s", exc)
            raise KiwiFetcherError(f"Request to Kiwi API failed: {exc}") from exc

        if resp.status_code != 200:
            raise KiwiFetcherError(f"HTTP {resp.status_code} – {resp.text[:120]}")

        try:
            return resp.json()
        except ValueError as exc:
            logger.error("Failed to parse API response: %s", exc)
            raise KiwiFetcherError(f"Failed to parse API response: {exc}") from exc

    def close(self) -> None:
        self.session.close()


__all__ = ["KiwiFetcher", "KiwiFetcherError"]
