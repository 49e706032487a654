"""
CryptoPulse — Test Configuration & Fixtures
Shared fixtures for all test modules.
"""
import json
import pytest
from types import SimpleNamespace
from typing import List, Optional


@pytest.fixture
def report_payload():
    """Schema-conforming report as a model would emit it."""
    return {
        "overallSentiment": "Cautiously bullish as ETF demand returns.",
        "items": [
            {
                "id": "a1",
                "timestamp": "2025-03-01T10:00:00Z",
                "title": "Spot ETF inflows",
                "summary": "Net inflows of $400M.",
                "source": "Bloomberg",
                "relatedCoins": ["btc"],
                "onChainInsight": "null",
                "signal": "BUY",
                "confidence": 85,
                "sourceCredibility": 9,
            },
            {
                "id": "a2",
                "timestamp": "not a date",
                "title": "Exchange outflows",
                "summary": "Coins leaving exchanges.",
                "source": "Glassnode",
                "relatedCoins": ["ETH"],
                "onChainInsight": "Reserves at 5-year low",
                "signal": "HOLD",
                "confidence": 60,
                "sourceCredibility": 7,
            },
            {
                "id": "a3",
                "timestamp": "2025-03-01T11:30:00+00:00",
                "title": "Regulatory update",
                "summary": "Hearing scheduled.",
                "source": "Reuters",
                "relatedCoins": [],
                "signal": "NEUTRAL",
                "confidence": 40,
                "sourceCredibility": 8,
            },
        ],
    }


@pytest.fixture
def report_text(report_payload):
    """The same report wrapped in prose and a markdown fence."""
    return (
        "Here is today's market report.\n"
        f"```json\n{json.dumps(report_payload)}\n```\n"
        "Let me know if you need more detail."
    )


@pytest.fixture
def gemini_response(report_text):
    """Factory for SDK-shaped responses with optional grounding URLs."""
    def _build(text: Optional[str] = report_text, urls: Optional[List[str]] = None):
        chunks = [SimpleNamespace(web=SimpleNamespace(uri=u)) for u in (urls or [])]
        metadata = SimpleNamespace(grounding_chunks=chunks)
        return SimpleNamespace(
            text=text,
            candidates=[SimpleNamespace(grounding_metadata=metadata)],
        )
    return _build
