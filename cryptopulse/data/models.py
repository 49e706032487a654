"""
CryptoPulse — Data Models
Canonical data structures shared by the analysis, price and notification layers.
"""
import uuid
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional, List, Dict, Any
from datetime import datetime
from enum import Enum

from cryptopulse.utils.helpers import clamp, coerce_timestamp, utc_now


class TradeSignal(str, Enum):
    BUY = "BUY"
    SELL = "SELL"
    NEUTRAL = "NEUTRAL"
    HOLD = "HOLD"


class ProviderId(str, Enum):
    GEMINI = "gemini"
    DEEPSEEK = "deepseek"
    GROK = "grok"
    QWEN = "qwen"
    CHATGPT = "chatgpt"


PROVIDER_DISPLAY_NAMES: Dict[ProviderId, str] = {
    ProviderId.GEMINI: "Gemini Flash",
    ProviderId.DEEPSEEK: "DeepSeek R1",
    ProviderId.GROK: "Grok AI",
    ProviderId.QWEN: "Qwen",
    ProviderId.CHATGPT: "ChatGPT-4o",
}


class CamelModel(BaseModel):
    """Accepts and emits the camelCase keys used in the report schema."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MarketItem(CamelModel):
    """One analysis finding. Lenient on input: models do not follow schemas reliably."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str = Field(default_factory=lambda: uuid.uuid4().hex[:12])
    timestamp: datetime = Field(default_factory=utc_now)
    title: str = ""
    summary: str = ""
    source: str = ""
    related_coins: List[str] = Field(default_factory=list)
    on_chain_insight: Optional[str] = None
    signal: TradeSignal = TradeSignal.NEUTRAL
    confidence: int = 0
    source_credibility: int = 0
    url: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def _id_to_str(cls, v: Any) -> str:
        if v is None or v == "":
            return uuid.uuid4().hex[:12]
        return str(v)

    @field_validator("timestamp", mode="before")
    @classmethod
    def _coerce_timestamp(cls, v: Any) -> datetime:
        return coerce_timestamp(v)

    @field_validator("title", "summary", "source", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str:
        return "" if v is None else str(v)

    @field_validator("related_coins", mode="before")
    @classmethod
    def _coins(cls, v: Any) -> List[str]:
        if v is None:
            return []
        if isinstance(v, str):
            v = [v]
        if not isinstance(v, (list, tuple)):
            return []
        return [str(c).upper() for c in v if c]

    @field_validator("on_chain_insight", mode="before")
    @classmethod
    def _insight(cls, v: Any) -> Optional[str]:
        # Models write the literal "null" when they follow the schema example too closely
        if v is None or (isinstance(v, str) and v.strip().lower() in ("", "null", "none")):
            return None
        return str(v)

    @field_validator("signal", mode="before")
    @classmethod
    def _signal(cls, v: Any) -> TradeSignal:
        try:
            return TradeSignal(str(v).strip().upper())
        except ValueError:
            return TradeSignal.NEUTRAL

    @field_validator("confidence", mode="before")
    @classmethod
    def _confidence(cls, v: Any) -> int:
        return int(clamp(_to_number(v), 0, 100))

    @field_validator("source_credibility", mode="before")
    @classmethod
    def _credibility(cls, v: Any) -> int:
        return int(clamp(_to_number(v), 0, 10))


def _to_number(v: Any) -> float:
    try:
        return round(float(str(v).rstrip("%")))
    except (TypeError, ValueError, OverflowError):
        return 0.0


class MarketReport(CamelModel):
    """One poll result from a provider."""
    items: List[MarketItem]
    overall_sentiment: str = ""
    last_updated: datetime = Field(default_factory=utc_now)
    used_model: Optional[ProviderId] = None

    @field_validator("overall_sentiment", mode="before")
    @classmethod
    def _sentiment(cls, v: Any) -> str:
        return "" if v is None else str(v)


class CoinPrice(BaseModel):
    """Spot price row relayed verbatim from CoinGecko."""
    id: str
    symbol: str
    name: str
    current_price: Optional[float] = None
    price_change_percentage_24h: Optional[float] = None
    image: Optional[str] = None


class TelegramConfig(CamelModel):
    """User-supplied Telegram target."""
    enabled: bool = False
    bot_token: str = ""
    chat_id: str = ""

    @property
    def is_ready(self) -> bool:
        return self.enabled and bool(self.bot_token) and bool(self.chat_id)


class ApiKeys(BaseModel):
    """User-supplied provider API keys, keyed by provider id."""
    model_config = ConfigDict(extra="ignore")

    gemini: str = ""
    deepseek: str = ""
    grok: str = ""
    qwen: str = ""
    chatgpt: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def _blank(cls, v: Any) -> str:
        return "" if v is None else str(v)

    def for_provider(self, provider: ProviderId) -> str:
        return getattr(self, provider.value) or ""
