"""GeminiProposer - asks a Gemini model to place tasks around fixed events.

A concrete Proposer over the Gemini REST generateContent endpoint. Network
failures and 5xx/429 responses surface as ProposerRequestError so the
assembler's retry budget applies; a request timeout ends the generation.
"""

from typing import Optional

import requests

from src.dayplan.config import PlannerConfig, get_config
from src.dayplan.errors import (
    MalformedResponseError,
    PermanentError,
    ProposalTimeoutError,
    ProposerRequestError,
)
from src.dayplan.logging import get_logger
from src.dayplan.models import ProposalRequest
from src.dayplan.proposal import build_prompt

log = get_logger(__name__)

# Statuses worth another proposal round
_RETRYABLE_STATUSES: frozenset[int] = frozenset({429, 500, 502, 503, 504})


class GeminiProposer:
    """Callable proposer backed by Gemini."""

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.5-flash-lite",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout_seconds: float = 60.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        if not api_key:
            raise PermanentError("Gemini API key is not configured")
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls, config: Optional[PlannerConfig] = None) -> "GeminiProposer":
        config = config or get_config()
        return cls(
            api_key=config.gemini_api_key,
            model=config.gemini_model,
            base_url=config.gemini_base_url,
            timeout_seconds=config.gemini_request_timeout_seconds,
        )

    @property
    def url(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    def __call__(self, request: ProposalRequest) -> str:
        body = {
            "contents": [{"role": "user", "parts": [{"text": build_prompt(request)}]}],
            "generationConfig": {
                "temperature": 0.2,
                "responseMimeType": "application/json",
            },
        }
        headers = {
            "x-goog-api-key": self.api_key,
            "Content-Type": "application/json",
        }

        log.info("gemini_request", model=self.model, tasks=len(request.tasks))
        try:
            resp = self.session.post(
                self.url, headers=headers, json=body, timeout=self.timeout_seconds
            )
        except requests.Timeout as e:
            log.warning("gemini_timeout", timeout_seconds=self.timeout_seconds)
            raise ProposalTimeoutError(f"Gemini request timed out: {e}") from e
        except requests.RequestException as e:
            log.warning("gemini_request_error", error=str(e), type=type(e).__name__)
            raise ProposerRequestError(f"Gemini request failed: {e}") from e

        if resp.status_code != 200:
            log.warning("gemini_http_error", status=resp.status_code, body=resp.text[:500])
            if resp.status_code in _RETRYABLE_STATUSES:
                raise ProposerRequestError(
                    f"Gemini returned HTTP {resp.status_code}",
                    details={"status": resp.status_code},
                )
            raise PermanentError(
                f"Gemini rejected the request with HTTP {resp.status_code}",
                details={"status": resp.status_code, "body": resp.text},
            )

        return self._extract_text(resp)

    @staticmethod
    def _extract_text(resp: requests.Response) -> str:
        try:
            data = resp.json()
            parts = data["candidates"][0]["content"]["parts"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise MalformedResponseError(
                f"Gemini response has no candidate text: {e}", resp.text
            ) from e

        text = "".join(part.get("text", "") for part in parts if isinstance(part, dict))
        if not text.strip():
            raise MalformedResponseError("Gemini returned an empty candidate", resp.text)
        return text
