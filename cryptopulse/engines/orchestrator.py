"""
CryptoPulse — Polling Orchestrator
Owns the refresh timer, merges analysis and price results into the display
state, and forwards newly seen items to Telegram.

Fetches are not serialized: the timer, manual refreshes and provider switches
may overlap, and whichever finishes last wins the display state.
"""
import asyncio
from enum import Enum
from datetime import datetime
from typing import Any, Dict, List, Optional, Set

from pydantic import BaseModel, Field

from cryptopulse.analysis.service import (
    AnalysisError, AnalysisOutcome, AnalysisService, get_analysis_service,
)
from cryptopulse.config.settings import get_settings
from cryptopulse.data.adapters.coingecko_adapter import CoinGeckoAdapter, get_price_adapter
from cryptopulse.data.models import (
    ApiKeys, CoinPrice, MarketItem, ProviderId, TelegramConfig,
)
from cryptopulse.data.store import LocalSettingsStore
from cryptopulse.engines.item_view import (
    ItemSort, SignalFilter, filter_and_sort_items, find_item,
)
from cryptopulse.engines.watermark import WatermarkState, advance, plan_notifications
from cryptopulse.telegram.notifier import TelegramNotifier, get_notifier
from cryptopulse.utils.helpers import utc_now
from cryptopulse.utils.logger import get_logger

logger = get_logger("orchestrator")

INITIAL_MESSAGE = "AI is initializing market connections..."
CONFIGURE_KEY_MESSAGE = "Please configure the {provider} API key in settings"
LOADING_MESSAGE = "Connecting to {provider} API for analysis..."
COMPLETE_MESSAGE = "{provider} analysis complete"
FAILURE_MESSAGE = "Connection interrupted, check API key or network."


class DashboardStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    ERROR = "error"


class DashboardState(BaseModel):
    """Everything the dashboard renders."""
    status: DashboardStatus = DashboardStatus.IDLE
    provider: ProviderId
    sentiment: str = INITIAL_MESSAGE
    items: List[MarketItem] = Field(default_factory=list)
    prices: List[CoinPrice] = Field(default_factory=list)
    last_updated: Optional[datetime] = None
    settings_required: bool = False


class PollingOrchestrator:
    """Refresh loop plus display state and notification watermark."""

    def __init__(
        self,
        analysis: Optional[AnalysisService] = None,
        prices: Optional[CoinGeckoAdapter] = None,
        notifier: Optional[TelegramNotifier] = None,
        store: Optional[LocalSettingsStore] = None,
        refresh_interval: Optional[float] = None,
        settle_delay: Optional[float] = None,
    ):
        settings = get_settings()
        self.analysis = analysis or get_analysis_service()
        self.prices = prices or get_price_adapter()
        self.notifier = notifier or get_notifier()
        self.store = store or LocalSettingsStore()
        self.refresh_interval = refresh_interval or settings.refresh_interval_seconds
        self.settle_delay = settings.settle_delay_seconds if settle_delay is None else settle_delay
        self.send_interval = settings.telegram.send_interval_seconds

        self.telegram_config = TelegramConfig()
        self.api_keys = ApiKeys()
        self.state = DashboardState(provider=self.analysis.default_provider)
        self.watermark = WatermarkState(watermark=utc_now())

        self._settle_task: Optional[asyncio.Task] = None
        self._timer_task: Optional[asyncio.Task] = None
        self._fetch_tasks: Set[asyncio.Task] = set()
        self._notify_lock = asyncio.Lock()
        self._in_flight = 0
        self._fetch_count = 0
        self._failure_count = 0
        self._notifications_sent = 0

    # ─── Lifecycle ──────────────────────────────────────────────

    @property
    def running(self) -> bool:
        return self._timer_task is not None and not self._timer_task.done()

    async def start(self) -> None:
        """Load stored settings, then schedule the first fetch and the refresh loop."""
        if self.running:
            return
        self.telegram_config = self.store.load_telegram_config()
        self.api_keys = self.store.load_api_keys()
        self._settle_task = asyncio.create_task(self._settle_then_fetch())
        self._timer_task = asyncio.create_task(self._refresh_loop())
        logger.info("orchestrator_started", provider=self.state.provider.value,
                    interval=self.refresh_interval)

    async def stop(self) -> None:
        """Cancel the settle delay, the refresh loop and any in-flight fetch."""
        tasks = [t for t in (self._settle_task, self._timer_task) if t is not None]
        tasks.extend(self._fetch_tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._settle_task = None
        self._timer_task = None
        self._fetch_tasks.clear()
        logger.info("orchestrator_stopped")

    async def _settle_then_fetch(self) -> None:
        await asyncio.sleep(self.settle_delay)
        self.trigger_fetch(reason="startup")

    async def _refresh_loop(self) -> None:
        while True:
            await asyncio.sleep(self.refresh_interval)
            logger.info("auto_refresh")
            self.trigger_fetch(reason="timer")

    # ─── Triggers ───────────────────────────────────────────────

    def trigger_fetch(self, provider: Optional[ProviderId] = None,
                      reason: str = "manual") -> asyncio.Task:
        """Start a fetch in the background. Does not reset the refresh timer."""
        task = asyncio.create_task(self.load_data(provider))
        self._fetch_tasks.add(task)
        task.add_done_callback(self._fetch_tasks.discard)
        logger.debug("fetch_triggered", reason=reason,
                     provider=(provider or self.state.provider).value)
        return task

    def select_provider(self, provider: ProviderId) -> Optional[asyncio.Task]:
        """Switch provider and fetch immediately. No-op for the current provider."""
        provider = ProviderId(provider)
        if provider == self.state.provider:
            return None
        self.state.provider = provider
        return self.trigger_fetch(provider, reason="provider_switch")

    def update_settings(self, telegram_config: TelegramConfig, api_keys: ApiKeys) -> None:
        """Persist and apply new credentials."""
        self.telegram_config = telegram_config
        self.api_keys = api_keys
        self.store.save(telegram_config, api_keys)

    # ─── Fetch cycle ────────────────────────────────────────────

    def _needs_key(self, provider: ProviderId) -> bool:
        return (provider != self.analysis.default_provider
                and not self.api_keys.for_provider(provider))

    async def load_data(self, provider: Optional[ProviderId] = None) -> None:
        """One fetch cycle: analysis and prices in parallel, then notifications."""
        provider = ProviderId(provider or self.state.provider)
        name = provider.value.upper()

        if self._needs_key(provider):
            self.state.sentiment = CONFIGURE_KEY_MESSAGE.format(provider=name)
            self.state.settings_required = True
            logger.warning("fetch_skipped_missing_key", provider=provider.value)
            return

        self._in_flight += 1
        self._fetch_count += 1
        self.state.status = DashboardStatus.LOADING
        self.state.settings_required = False
        self.state.sentiment = LOADING_MESSAGE.format(provider=name)

        try:
            outcome, prices = await asyncio.gather(
                self.analysis.analyze(provider, self.api_keys),
                self.prices.fetch_top_coins(),
                return_exceptions=True,
            )

            if isinstance(prices, list):
                self.state.prices = prices
            else:
                logger.error("price_fetch_crashed", error=str(prices))

            if isinstance(outcome, AnalysisOutcome) and outcome.ok:
                report = outcome.report
                self.state.items = report.items
                self.state.sentiment = report.overall_sentiment or COMPLETE_MESSAGE.format(provider=name)
                self.state.last_updated = report.last_updated
                self.state.status = (DashboardStatus.LOADING if self._in_flight > 1
                                     else DashboardStatus.IDLE)
                logger.info("fetch_complete", provider=provider.value, items=len(report.items),
                            prices=len(self.state.prices))
                await self.process_notifications(report.items)
            else:
                self._failure_count += 1
                self.state.status = DashboardStatus.ERROR
                if isinstance(outcome, AnalysisOutcome) and outcome.error == AnalysisError.MISSING_CREDENTIAL:
                    self.state.sentiment = CONFIGURE_KEY_MESSAGE.format(provider=name)
                    self.state.settings_required = True
                else:
                    self.state.sentiment = FAILURE_MESSAGE
                error = outcome.error.value if isinstance(outcome, AnalysisOutcome) else str(outcome)
                logger.warning("fetch_failed", provider=provider.value, error=error)
        finally:
            self._in_flight -= 1
            if self._in_flight == 0 and self.state.status == DashboardStatus.LOADING:
                self.state.status = DashboardStatus.IDLE

    async def process_notifications(self, items: List[MarketItem]) -> int:
        """Announce items newer than the watermark, oldest first. Returns the count sent."""
        config = self.telegram_config
        if not config.is_ready:
            return 0

        async with self._notify_lock:
            fresh, planned = plan_notifications(self.watermark, items)
            if not self.watermark.primed:
                self.watermark = planned
                logger.info("watermark_primed", watermark=self.watermark.watermark.isoformat())
                return 0

            for index, item in enumerate(fresh):
                if index > 0:
                    await asyncio.sleep(self.send_interval)
                await self.notifier.notify(config, item)
                # A failed send still advances: dropped alerts are not retried
                self.watermark = advance(self.watermark, item)
                self._notifications_sent += 1

            if fresh:
                logger.info("notifications_dispatched", count=len(fresh),
                            watermark=self.watermark.watermark.isoformat())
            return len(fresh)

    # ─── Introspection ──────────────────────────────────────────

    def snapshot(self, signal: SignalFilter = SignalFilter.ALL,
                 sort: ItemSort = ItemSort.DATE_DESC) -> Dict[str, Any]:
        """Display state with the item list filtered and ordered for the dashboard."""
        data = self.state.model_dump(mode="json", by_alias=False)
        data["items"] = self.list_items(signal, sort)
        return data

    def list_items(self, signal: SignalFilter = SignalFilter.ALL,
                   sort: ItemSort = ItemSort.DATE_DESC) -> List[Dict[str, Any]]:
        items = filter_and_sort_items(self.state.items, signal, sort)
        return [item.model_dump(mode="json", by_alias=False) for item in items]

    def get_item(self, item_id: str) -> Optional[Dict[str, Any]]:
        item = find_item(self.state.items, item_id)
        return None if item is None else item.model_dump(mode="json", by_alias=False)

    @property
    def stats(self) -> Dict[str, Any]:
        return {
            "running": self.running,
            "in_flight": self._in_flight,
            "fetches": self._fetch_count,
            "failures": self._failure_count,
            "notifications_dispatched": self._notifications_sent,
            "watermark": self.watermark.watermark.isoformat(),
            "watermark_primed": self.watermark.primed,
        }


# Singleton
_orchestrator: Optional[PollingOrchestrator] = None


def get_orchestrator() -> PollingOrchestrator:
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = PollingOrchestrator()
    return _orchestrator
