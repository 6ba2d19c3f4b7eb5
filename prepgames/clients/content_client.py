"""
HTTP JSON client for the content backend (terms, pairs, blocking lists, settings, result sinks).

Endpoints:
  - GET  /questions?type=flashcard&limit=40[&category_id=]
  - GET  /decipher-terms/game[?category_id=]
  - GET  /blocking/categories
  - GET  /settings
  - POST /flashcards/result
  - POST /connection-game/result

Fetch methods raise ContentFetchError; the service decides what to fall back to.
Result posting never raises: failures are logged and the results dropped.
"""

import logging
from typing import Any, Optional

import requests

from prepgames.core.config import settings
from prepgames.core.exceptions import ContentFetchError
from prepgames.core.models import PairData, TermData

logger = logging.getLogger(__name__)


class ContentClient:
    def __init__(
        self,
        base_url: str = settings.CONTENT_URL,
        timeout: float = settings.HTTP_TIMEOUT,
        session: Optional[requests.Session] = None,
        token: Optional[str] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()
        self._headers = {"Authorization": f"Bearer {token}"} if token else {}

    # -- content pools ---
    def fetch_pairs(
        self, category_id: Optional[str] = None, limit: int = settings.CONNECTION_POOL_LIMIT
    ) -> list[PairData]:
        """Flashcard questions of a category, as left/right pairs."""
        params: dict[str, Any] = {"type": "flashcard", "limit": limit}
        if category_id:
            params["category_id"] = category_id
        payload = self._get_json("/questions", params=params)

        data = payload.get("data")
        if not isinstance(data, list):
            raise ContentFetchError("Invalid data format from questions endpoint")

        pairs: list[PairData] = []
        for question in data:
            # malformed entries are skipped, the rest of the pool is still usable
            if not isinstance(question, dict) or question.get("id") is None:
                continue
            content = question.get("content")
            if not isinstance(content, dict) or not content.get("front") or not content.get("back"):
                continue
            pairs.append(
                {
                    "id": str(question["id"]),
                    "left": str(content["front"]),
                    "right": str(content["back"]),
                }
            )
        return pairs

    def fetch_terms(self, category_id: Optional[str] = None) -> list[TermData]:
        """All active terms for a game session: the category's own terms plus the global ones."""
        params = {"category_id": category_id} if category_id else None
        payload = self._get_json("/decipher-terms/game", params=params)

        data = payload.get("data") or []
        if not isinstance(data, list):
            raise ContentFetchError("Invalid data format from decipher terms endpoint")

        return [
            {
                "id": str(term.get("id", "")),
                "term": str(term["term"]).upper(),
                "hint": str(term.get("hint") or ""),
                "definition": str(term.get("definition") or ""),
            }
            for term in data
            if isinstance(term, dict) and term.get("term")
        ]

    # -- global settings ---
    def fetch_blocked_categories(self) -> list[str]:
        payload = self._get_json("/blocking/categories")
        blocked = payload.get("blockedCategories") or []
        if not isinstance(blocked, list):
            raise ContentFetchError("Invalid data format from blocking endpoint")
        return [str(c) for c in blocked]

    def fetch_settings(self) -> dict[str, str]:
        payload = self._get_json("/settings")
        return {str(key): str(value) for key, value in payload.items()}

    # -- session results ---
    def post_flashcard_result(
        self, category_id: Optional[str], cards_reviewed: int, mastered: int
    ) -> bool:
        return self._post_json(
            "/flashcards/result",
            {
                "category_id": category_id,
                "cards_reviewed": cards_reviewed,
                "mastered": mastered,
            },
        )

    def post_matching_result(
        self, category_id: Optional[str], level: int, score: int, matched: int
    ) -> bool:
        return self._post_json(
            "/connection-game/result",
            {
                "category_id": category_id,
                "level": level,
                "score": score,
                "matched": matched,
            },
        )

    # -- Internal helpers --
    def _get_json(
        self, path: str, params: Optional[dict[str, Any]] = None
    ) -> dict[str, Any]:
        url = f"{self.base_url}{path}"
        logger.debug("GET %s params=%s", url, params)
        try:
            r = self._session.get(
                url, params=params, headers=self._headers, timeout=self.timeout
            )
            r.raise_for_status()
            payload = r.json()
        except (requests.RequestException, ValueError) as e:
            raise ContentFetchError(f"GET {url} failed: {e}") from e
        if not isinstance(payload, dict):
            raise ContentFetchError(f"GET {url} returned {type(payload).__name__}, expected an object")
        return payload

    def _post_json(self, path: str, body: dict[str, Any]) -> bool:
        url = f"{self.base_url}{path}"
        try:
            r = self._session.post(
                url, json=body, headers=self._headers, timeout=self.timeout
            )
            r.raise_for_status()
        except requests.RequestException as e:
            logger.error("Failed to submit results to %s: %s", url, e)
            return False
        logger.info("Results submitted to %s", url)
        return True
