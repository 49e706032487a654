"""
CryptoPulse — Provider Registry
Maps each provider id to its adapter instance.
"""
from typing import Dict

from cryptopulse.analysis.providers.base import BaseProvider
from cryptopulse.analysis.providers.gemini import GeminiProvider
from cryptopulse.analysis.providers.openai_compat import OpenAICompatibleProvider
from cryptopulse.config.settings import get_settings
from cryptopulse.data.models import ProviderId


def build_provider_registry() -> Dict[ProviderId, BaseProvider]:
    """Instantiate one adapter per supported provider."""
    ai = get_settings().ai
    return {
        ProviderId.GEMINI: GeminiProvider(),
        ProviderId.DEEPSEEK: OpenAICompatibleProvider(
            ProviderId.DEEPSEEK, ai.deepseek_base_url, ai.deepseek_model
        ),
        ProviderId.CHATGPT: OpenAICompatibleProvider(
            ProviderId.CHATGPT, ai.chatgpt_base_url, ai.chatgpt_model
        ),
        ProviderId.GROK: OpenAICompatibleProvider(
            ProviderId.GROK, ai.grok_base_url, ai.grok_model
        ),
        ProviderId.QWEN: OpenAICompatibleProvider(
            ProviderId.QWEN, ai.qwen_base_url, ai.qwen_model
        ),
    }
