"""
CryptoPulse — Analysis Facade
Single entry point for market analysis: resolves credentials, builds the
prompt and dispatches to the registered provider adapter.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from cryptopulse.analysis.prompts import build_system_prompt
from cryptopulse.analysis.providers.base import BaseProvider
from cryptopulse.analysis.providers.registry import build_provider_registry
from cryptopulse.config.settings import get_settings
from cryptopulse.data.models import ApiKeys, MarketReport, ProviderId
from cryptopulse.utils.logger import get_logger

logger = get_logger("analysis_service")


class AnalysisError(str, Enum):
    MISSING_CREDENTIAL = "missing_credential"
    UNKNOWN_PROVIDER = "unknown_provider"
    PROVIDER_FAILURE = "provider_failure"


@dataclass
class AnalysisOutcome:
    """Either a report or the reason there is none."""
    provider: Optional[ProviderId]
    report: Optional[MarketReport] = None
    error: Optional[AnalysisError] = None

    @property
    def ok(self) -> bool:
        return self.report is not None


class AnalysisService:
    """Selects the adapter for a provider and returns a uniform outcome."""

    def __init__(self, providers: Optional[Dict[ProviderId, BaseProvider]] = None):
        self.settings = get_settings().ai
        self.providers = providers if providers is not None else build_provider_registry()

    @property
    def default_provider(self) -> ProviderId:
        return ProviderId(self.settings.default_provider)

    def resolve_credential(self, provider: ProviderId, api_keys: ApiKeys) -> str:
        """User key first; the default provider may fall back to the environment key."""
        key = api_keys.for_provider(provider)
        if not key and provider == ProviderId.GEMINI:
            key = self.settings.gemini_api_key
        return key

    async def analyze(self, provider: str, api_keys: ApiKeys) -> AnalysisOutcome:
        try:
            provider_id = ProviderId(provider)
        except ValueError:
            logger.error("unknown_provider", provider=provider)
            return AnalysisOutcome(provider=None, error=AnalysisError.UNKNOWN_PROVIDER)

        adapter = self.providers.get(provider_id)
        if adapter is None:
            logger.error("provider_not_registered", provider=provider_id.value)
            return AnalysisOutcome(provider=provider_id, error=AnalysisError.UNKNOWN_PROVIDER)

        credential = self.resolve_credential(provider_id, api_keys)
        if not credential:
            logger.error("missing_api_key", provider=provider_id.value)
            return AnalysisOutcome(provider=provider_id, error=AnalysisError.MISSING_CREDENTIAL)

        prompt = build_system_prompt(provider_id)
        report = await adapter.produce_report(prompt, credential)
        if report is None:
            return AnalysisOutcome(provider=provider_id, error=AnalysisError.PROVIDER_FAILURE)
        return AnalysisOutcome(provider=provider_id, report=report)

    async def shutdown(self) -> None:
        for adapter in self.providers.values():
            try:
                await adapter.disconnect()
            except Exception as e:
                logger.warning("provider_disconnect_failed",
                               provider=adapter.provider_id.value, error=str(e))


# Singleton
_service: Optional[AnalysisService] = None


def get_analysis_service() -> AnalysisService:
    global _service
    if _service is None:
        _service = AnalysisService()
    return _service
