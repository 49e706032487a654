"""
CryptoPulse — OpenAI-Compatible Chat Completion Provider
Covers DeepSeek, ChatGPT, Grok and Qwen. Single attempt, no retry.
"""
import aiohttp
from typing import Any, Dict, Optional

from cryptopulse.analysis.extractor import extract_json
from cryptopulse.analysis.prompts import USER_MESSAGE
from cryptopulse.analysis.providers.base import BaseProvider, ProviderError
from cryptopulse.config.settings import get_settings
from cryptopulse.data.models import MarketItem, MarketReport, ProviderId
from cryptopulse.utils.logger import get_logger

logger = get_logger("chat_completion_provider")


def _message_content(data: Any) -> Optional[str]:
    """choices[0].message.content, or None when any level is missing."""
    try:
        return data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return None


class OpenAICompatibleProvider(BaseProvider):
    """Generic chat-completion adapter parameterised by base URL and model name."""

    def __init__(self, provider_id: ProviderId, base_url: str, model_name: str):
        super().__init__(provider_id=provider_id)
        self.settings = get_settings().ai
        self.base_url = base_url.rstrip("/")
        self.model_name = model_name
        self._session: Optional[aiohttp.ClientSession] = None

    async def connect(self) -> None:
        timeout = aiohttp.ClientTimeout(total=self.settings.request_timeout_seconds)
        self._session = aiohttp.ClientSession(timeout=timeout)
        logger.info("chat_provider_connected", provider=self.provider_id.value)

    async def disconnect(self) -> None:
        if self._session:
            await self._session.close()
            self._session = None

    def build_payload(self, prompt: str) -> Dict[str, Any]:
        return {
            "model": self.model_name,
            "messages": [
                {"role": "system", "content": prompt},
                {"role": "user", "content": USER_MESSAGE},
            ],
            "temperature": self.settings.chat_temperature,
            "stream": False,
        }

    async def produce_report(self, prompt: str, credential: str) -> Optional[MarketReport]:
        try:
            if not self._session:
                await self.connect()

            url = f"{self.base_url}/chat/completions"
            headers = {
                "Content-Type": "application/json",
                "Authorization": f"Bearer {credential}",
            }

            async with self._session.post(url, json=self.build_payload(prompt),
                                          headers=headers) as resp:
                if resp.status < 200 or resp.status >= 300:
                    raise ProviderError(f"API Error: {resp.status} {resp.reason}")
                data = await resp.json(content_type=None)

            content = _message_content(data)
            if not content:
                raise ProviderError("No content in response")

            parsed = extract_json(content)
            raw_items = self._parse_items(parsed)
            # No live grounding here, so timestamps are only sanitised, never trusted for order
            items = [MarketItem.model_validate({**raw, "url": None}) for raw in raw_items]

            report = self._build_report(parsed, items)
            logger.info("chat_report_ok", provider=self.provider_id.value, items=len(items))
            return report

        except Exception as e:
            logger.error("chat_provider_error", provider=self.provider_id.value, error=str(e))
            return None
