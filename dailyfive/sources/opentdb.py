"""
OpenTDB client.

Uses urllib so tests can patch ``urllib.request.urlopen``. Requests are sent
sequentially with a short pause between them to stay under the public rate
limit; each request goes through a ``RetryPolicy``.
"""

from __future__ import annotations

import http.client
import json
import logging
import time
import urllib.error
import urllib.parse
import urllib.request
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from ..data.loader import records_to_questions
from ..data.schemas import DIFFICULTIES, Pools, RawQuestion, empty_pools
from ..qa.normalize import clean_question
from ..utils.resilience import APIError, RetryPolicy
from .base import SourceFailed, SourceOk, SourceResult

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://opentdb.com/api.php"
USER_AGENT = "dailyfive/0.1 (+daily trivia generator)"

# OpenTDB response_code values: 0 ok, 1 no results, 2 invalid parameter,
# 3 token not found, 4 token empty, 5 rate limited
RATE_LIMITED_CODE = 5


def _retry_after_seconds(headers: Any) -> float | None:
    if headers is None:
        return None
    value = headers.get("Retry-After")
    try:
        return float(value) if value else None
    except (TypeError, ValueError):
        return None


def fetch_json(url: str, timeout: float = 12.0) -> dict:
    """GET ``url`` and decode a JSON object.

    Raises:
        APIError: For HTTP errors, malformed bodies and transport failures,
            with ``status_code`` set when the server answered.
    """
    req = urllib.request.Request(url, headers={"User-Agent": USER_AGENT, "Accept": "application/json"})
    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp:  # noqa: S310
            status = getattr(resp, "status", 200)
            body = resp.read()
    except urllib.error.HTTPError as e:
        raise APIError(
            f"HTTP {e.code} from {url}",
            status_code=e.code,
            retry_after=_retry_after_seconds(e.headers),
        ) from e
    except (urllib.error.URLError, http.client.HTTPException, TimeoutError, ConnectionError) as e:
        raise APIError(f"Request to {url} failed: {e}") from e

    if status != 200:
        raise APIError(f"HTTP {status} from {url}", status_code=status)
    try:
        payload = json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise APIError(f"Malformed JSON from {url}: {e}") from e
    if not isinstance(payload, dict):
        raise APIError(f"Unexpected payload type from {url}: {type(payload).__name__}")
    return payload


class OpenTDBSource:
    """Fetch easy/medium/hard pools from the OpenTDB API."""

    name = "opentdb"

    def __init__(
        self,
        api_url: str = DEFAULT_API_URL,
        chunk_sizes: Mapping[str, Sequence[int]] | None = None,
        timeout: float = 12.0,
        politeness_delay: float = 0.3,
        retry_policy: RetryPolicy | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.api_url = api_url
        self.chunk_sizes = dict(chunk_sizes or {d: [8] for d in DIFFICULTIES})
        self.timeout = timeout
        self.politeness_delay = politeness_delay
        self.retry_policy = retry_policy or RetryPolicy(sleep=sleep)
        self.sleep = sleep

    def build_url(self, amount: int, difficulty: str) -> str:
        query = urllib.parse.urlencode(
            {"amount": amount, "type": "multiple", "difficulty": difficulty}
        )
        return f"{self.api_url}?{query}"

    def _fetch_chunk(self, url: str) -> list:
        payload = fetch_json(url, timeout=self.timeout)
        code = payload.get("response_code", 0)
        if code == RATE_LIMITED_CODE:
            raise APIError(f"Rate limited by {url}", status_code=429)
        if code not in (0, None):
            raise APIError(f"OpenTDB response_code {code} for {url}")
        results = payload.get("results")
        if not isinstance(results, list):
            raise APIError(f"Missing results in response from {url}")
        return results

    def fetch_difficulty(self, difficulty: str) -> list[RawQuestion]:
        out: list[RawQuestion] = []
        for amount in self.chunk_sizes.get(difficulty, []):
            url = self.build_url(amount, difficulty)
            rows = self.retry_policy.call(self._fetch_chunk, url)
            out.extend(clean_question(q) for q in records_to_questions(rows, difficulty=difficulty))
            if self.politeness_delay > 0:
                self.sleep(self.politeness_delay)
        return out

    def fetch(self) -> SourceResult:
        pools: Pools = empty_pools()
        for difficulty in DIFFICULTIES:
            try:
                pools[difficulty] = self.fetch_difficulty(difficulty)
            except APIError as e:
                return SourceFailed(self.name, f"{difficulty}: {e}")
            logger.info("Fetched %d %s questions", len(pools[difficulty]), difficulty)
        return SourceOk(self.name, pools)
