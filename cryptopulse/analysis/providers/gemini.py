"""
CryptoPulse — Gemini Provider
Native google-genai SDK call with Google Search grounding and retry with
exponential backoff.
"""
import asyncio
from typing import Any, Dict, List, Optional

from google import genai
from google.genai import types

from cryptopulse.analysis.extractor import extract_json
from cryptopulse.analysis.providers.base import BaseProvider, ProviderError
from cryptopulse.config.settings import get_settings
from cryptopulse.data.models import MarketItem, MarketReport, ProviderId
from cryptopulse.utils.logger import get_logger

logger = get_logger("gemini_provider")


def _grounding_urls(response: Any) -> List[Optional[str]]:
    """Citation URLs from the first candidate's grounding chunks, in order."""
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return []
    metadata = getattr(candidates[0], "grounding_metadata", None)
    chunks = getattr(metadata, "grounding_chunks", None) or []
    urls = []
    for chunk in chunks:
        web = getattr(chunk, "web", None)
        urls.append(getattr(web, "uri", None) if web else None)
    return urls


class GeminiProvider(BaseProvider):
    """Search-grounded provider. Items are re-sorted newest first."""

    def __init__(self):
        super().__init__(provider_id=ProviderId.GEMINI)
        self.settings = get_settings().ai
        self._clients: Dict[str, genai.Client] = {}

    def backoff_delay(self, attempt: int) -> float:
        """Seconds to wait after the given failed attempt (1-based): 1s, 2s, 4s..."""
        return self.settings.gemini_backoff_base_seconds * (2 ** (attempt - 1))

    def _client(self, credential: str) -> genai.Client:
        """One SDK client per key, reused across attempts and cycles."""
        client = self._clients.get(credential)
        if client is None:
            client = genai.Client(api_key=credential)
            self._clients[credential] = client
        return client

    async def disconnect(self) -> None:
        clients = list(self._clients.values())
        self._clients.clear()
        for client in clients:
            await client.aio.aclose()
        logger.info("gemini_clients_closed", count=len(clients))

    async def _generate(self, credential: str, prompt: str) -> Any:
        client = self._client(credential)
        return await client.aio.models.generate_content(
            model=self.settings.gemini_model,
            contents=prompt,
            config=types.GenerateContentConfig(
                tools=[types.Tool(google_search=types.GoogleSearch())],
                temperature=self.settings.gemini_temperature,
            ),
        )

    async def produce_report(self, prompt: str, credential: str) -> Optional[MarketReport]:
        max_retries = self.settings.gemini_max_retries

        for attempt in range(1, max_retries + 1):
            try:
                response = await self._generate(credential, prompt)

                text = response.text
                if not text:
                    raise ProviderError("Empty response")

                parsed = extract_json(text)
                raw_items = self._parse_items(parsed)
                urls = _grounding_urls(response)

                items = []
                for index, raw in enumerate(raw_items):
                    raw = {k: v for k, v in raw.items() if k != "url"}
                    url = urls[index] if index < len(urls) else None
                    items.append(MarketItem.model_validate({**raw, "url": url}))

                items.sort(key=lambda item: item.timestamp, reverse=True)

                report = self._build_report(parsed, items)
                logger.info("gemini_report_ok", attempt=attempt, items=len(items),
                            citations=len(urls))
                return report

            except Exception as e:
                logger.warning("gemini_attempt_failed", attempt=attempt, error=str(e))
                if attempt >= max_retries:
                    logger.error("gemini_max_retries_reached", max_retries=max_retries)
                    return None
                await asyncio.sleep(self.backoff_delay(attempt))

        return None
