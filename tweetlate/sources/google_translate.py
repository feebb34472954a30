"""Google Translate v2 client."""

from __future__ import annotations

from typing import Any, Mapping, Optional

import httpx

from tweetlate.core.errors import SourceError
from tweetlate.core.result import Failure, Result, Success, failure_for_status
from tweetlate.models.subscription import Subscription
from tweetlate.utils.logger import get_logger

log = get_logger(__name__)

TRANSLATE_URL = "https://www.googleapis.com/language/translate/v2"


def extract_translation(payload: Mapping[str, Any]) -> str:
    """Pull the first translation out of a successful response body."""
    try:
        translated = payload["data"]["translations"][0]["translatedText"]
    except (KeyError, IndexError, TypeError) as exc:
        raise SourceError("Translation missing from response body", source="google", phase="translate") from exc
    if not isinstance(translated, str):
        raise SourceError("Translation is not text", source="google", phase="translate")
    return translated


class GoogleTranslateClient:
    def __init__(
        self,
        api_key: str,
        *,
        translate_url: str = TRANSLATE_URL,
        timeout: float = 15.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.api_key = api_key
        self.translate_url = translate_url
        self.client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))

    def build_params(self, subscription: Subscription, text: str) -> dict:
        return {
            "key": self.api_key,
            "source": subscription.source_lang,
            "target": subscription.target_lang,
            "q": text,
            "format": "text",
        }

    async def translate(self, subscription: Subscription, text: str) -> Result[str]:
        try:
            response = await self.client.get(self.translate_url, params=self.build_params(subscription, text))
        except httpx.RequestError as exc:
            log.warning(f"Network error translating for {subscription}: {exc}")
            return Failure(f"google request failed: {exc}", retryable=True)

        failure = failure_for_status(response.status_code, "google")
        if failure is not None:
            log.debug(f"Got {response.status_code} from google for {subscription}")
            return failure

        try:
            translated = extract_translation(response.json())
        except ValueError:
            return Failure("google returned a non-JSON body", retryable=True, status_code=response.status_code)
        except SourceError as exc:
            return Failure(exc.message, retryable=False, status_code=response.status_code)

        log.debug(f"Got translation from google for {subscription}")
        return Success(translated)

    async def close(self) -> None:
        await self.client.aclose()


__all__ = ["GoogleTranslateClient", "extract_translation", "TRANSLATE_URL"]
