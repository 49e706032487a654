"""
CryptoPulse — System Prompt Construction
Each provider gets its own persona; all of them share the same output schema.
"""
from datetime import datetime, timezone
from typing import Dict, Optional

from cryptopulse.config.settings import get_settings
from cryptopulse.data.models import ProviderId

REPORT_SCHEMA = """\
JSON structure (must be followed exactly):
{
  "overallSentiment": "one-paragraph summary of market sentiment",
  "items": [
    {
      "id": "unique_id",
      "timestamp": "ISO8601_time",
      "title": "headline",
      "summary": "summary",
      "source": "source name",
      "relatedCoins": ["BTC"],
      "onChainInsight": "on-chain observation or null",
      "signal": "BUY/SELL/NEUTRAL/HOLD",
      "confidence": 90,
      "sourceCredibility": 8
    }
  ]
}"""

USER_MESSAGE = "Analyze the current crypto market and produce the report."

OFFLINE_NOTICE = (
    "Note: as an API model you may not have live internet access. Base your "
    "analysis on the most recent knowledge you have and reason carefully; "
    "timestamps should reflect when the underlying event happened."
)

PERSONAS: Dict[ProviderId, str] = {
    ProviderId.GEMINI: (
        "You are a top-tier crypto market intelligence expert with a view across the whole web.\n"
        "Style: fast, accurate, broad coverage.\n"
        "**You MUST use the Google Search tool to gather the latest real-time news.**"
    ),
    ProviderId.DEEPSEEK: (
        "You are now **DeepSeek**.\n"
        "Style: strictly rational, cold, rigorously logical. Focus on on-chain data and probabilities.\n"
        f"{OFFLINE_NOTICE}"
    ),
    ProviderId.GROK: (
        "You are now **Grok**.\n"
        "Style: witty, sharp, contrarian. Watch community sentiment and meme trends.\n"
        f"{OFFLINE_NOTICE}"
    ),
    ProviderId.QWEN: (
        "You are now **Qwen**.\n"
        "Style: macro perspective, focused on Asian markets and policy interpretation.\n"
        f"{OFFLINE_NOTICE}"
    ),
    ProviderId.CHATGPT: (
        "You are now **ChatGPT** (OpenAI).\n"
        "Style: professional, objective, Wall Street institutional tone.\n"
        f"{OFFLINE_NOTICE}"
    ),
}


def build_system_prompt(provider: ProviderId, now: Optional[datetime] = None,
                        language: Optional[str] = None) -> str:
    """Build the complete system prompt for a provider at a given instant."""
    now = now or datetime.now(timezone.utc)
    language = language or get_settings().ai.report_language
    utc_iso = now.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")

    context = (
        f"Current time (UTC): {utc_iso}\n"
        f"Your task is to analyze the cryptocurrency market.\n"
        f"Write all text values in {language} and output only JSON.\n"
        f"{REPORT_SCHEMA}"
    )
    return f"{PERSONAS[ProviderId(provider)]}\n\n{context}"
