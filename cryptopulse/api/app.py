"""
CryptoPulse — FastAPI Application
Dashboard API: display state, manual refresh, provider switching and
credential settings.
"""
import uuid
from typing import Dict, Any, Optional
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from cryptopulse.analysis.service import get_analysis_service
from cryptopulse.config.settings import get_settings
from cryptopulse.data.adapters.coingecko_adapter import get_price_adapter
from cryptopulse.data.models import (
    ApiKeys, PROVIDER_DISPLAY_NAMES, ProviderId, TelegramConfig,
)
from cryptopulse.engines.item_view import ItemSort, SignalFilter
from cryptopulse.engines.orchestrator import get_orchestrator
from cryptopulse.telegram.notifier import get_notifier
from cryptopulse.utils.helpers import mask_secret, utc_timestamp
from cryptopulse.utils.logger import get_logger, setup_logging

logger = get_logger("api")

# Application state
app_state: Dict[str, Any] = {
    "instance_id": str(uuid.uuid4())[:8],
    "started_at": None,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan — startup and shutdown."""
    setup_logging()
    settings = get_settings()
    app_state["started_at"] = utc_timestamp()

    logger.info("cryptopulse_starting",
                version=settings.version,
                instance=app_state["instance_id"],
                provider=settings.ai.default_provider)

    orchestrator = get_orchestrator()
    await orchestrator.start()

    logger.info("cryptopulse_ready")

    yield

    # Shutdown
    logger.info("cryptopulse_shutting_down")
    await orchestrator.stop()
    await get_analysis_service().shutdown()
    await get_price_adapter().disconnect()
    await get_notifier().shutdown()


app = FastAPI(
    title="CryptoPulse",
    description="AI crypto market intelligence dashboard",
    version="1.0.0",
    lifespan=lifespan,
)


# ─── Health & Metrics ───────────────────────────────────────────

@app.get("/healthz", tags=["System"])
async def health_check():
    """Fast health check endpoint for load balancers and monitoring."""
    return JSONResponse(
        status_code=200,
        content={
            "status": "healthy",
            "instance": app_state["instance_id"],
            "uptime_since": app_state["started_at"],
            "timestamp": utc_timestamp(),
        },
    )


@app.get("/metrics", tags=["System"])
async def metrics():
    """Fetch and notification counters."""
    settings = get_settings()
    return {
        "app": {
            "name": settings.app_name,
            "version": settings.version,
            "instance_id": app_state["instance_id"],
            "started_at": app_state["started_at"],
        },
        "orchestrator": get_orchestrator().stats,
        "telegram_stats": get_notifier().stats,
        "timestamp": utc_timestamp(),
    }


# ─── Dashboard ──────────────────────────────────────────────────

class ProviderRequest(BaseModel):
    provider: str


class SettingsRequest(BaseModel):
    telegram: TelegramConfig
    api_keys: ApiKeys


@app.get("/api/v1/dashboard", tags=["Dashboard"])
async def dashboard(signal: SignalFilter = SignalFilter.ALL, sort: ItemSort = ItemSort.DATE_DESC):
    """Current display state: sentiment, items, prices and status."""
    return get_orchestrator().snapshot(signal, sort)


@app.get("/api/v1/items", tags=["Dashboard"])
async def list_items(signal: SignalFilter = SignalFilter.ALL, sort: ItemSort = ItemSort.DATE_DESC):
    """Report items filtered by signal and ordered by date or confidence."""
    items = get_orchestrator().list_items(signal, sort)
    return {"signal": signal.value, "sort": sort.value, "count": len(items), "items": items}


@app.get("/api/v1/items/{item_id}", tags=["Dashboard"])
async def item_detail(item_id: str):
    """Full detail of one item from the current report."""
    item = get_orchestrator().get_item(item_id)
    if item is None:
        raise HTTPException(status_code=404, detail=f"Item not found: {item_id}")
    return item


@app.get("/api/v1/providers", tags=["Dashboard"])
async def list_providers():
    """Supported providers and whether a key is available for each."""
    orchestrator = get_orchestrator()
    service = get_analysis_service()
    return {
        "selected": orchestrator.state.provider.value,
        "providers": [
            {
                "id": provider.value,
                "name": PROVIDER_DISPLAY_NAMES[provider],
                "data_source": "Google Search" if provider == ProviderId.GEMINI
                else f"{PROVIDER_DISPLAY_NAMES[provider]} knowledge base",
                "configured": bool(service.resolve_credential(provider, orchestrator.api_keys)),
            }
            for provider in ProviderId
        ],
    }


@app.post("/api/v1/refresh", tags=["Dashboard"], status_code=202)
async def refresh():
    """Fetch immediately, without waiting for the next timer tick."""
    orchestrator = get_orchestrator()
    orchestrator.trigger_fetch(reason="manual")
    return {"status": "refreshing", "provider": orchestrator.state.provider.value}


@app.put("/api/v1/provider", tags=["Dashboard"])
async def select_provider(request: ProviderRequest):
    """Switch the active provider and fetch with it."""
    try:
        provider = ProviderId(request.provider)
    except ValueError:
        raise HTTPException(status_code=404, detail=f"Unknown provider: {request.provider}")

    task = get_orchestrator().select_provider(provider)
    return {"provider": provider.value, "refreshing": task is not None}


# ─── Settings ───────────────────────────────────────────────────

@app.get("/api/v1/settings", tags=["Settings"])
async def read_settings():
    """Stored settings with credentials masked."""
    orchestrator = get_orchestrator()
    telegram = orchestrator.telegram_config
    return {
        "telegram": {
            "enabled": telegram.enabled,
            "botToken": mask_secret(telegram.bot_token),
            "chatId": telegram.chat_id,
        },
        "api_keys": {
            provider.value: mask_secret(orchestrator.api_keys.for_provider(provider))
            for provider in ProviderId
        },
    }


@app.put("/api/v1/settings", tags=["Settings"])
async def save_settings(request: SettingsRequest):
    """Persist Telegram target and provider keys."""
    get_orchestrator().update_settings(request.telegram, request.api_keys)
    return {"status": "saved"}


@app.post("/api/v1/telegram/test", tags=["Telegram"])
async def telegram_test(config: Optional[TelegramConfig] = None):
    """Send a connection-test message to the given or stored target."""
    target = config or get_orchestrator().telegram_config
    if not target.bot_token or not target.chat_id:
        raise HTTPException(status_code=400, detail="Bot token and chat id are required")
    ok = await get_notifier().test_connection(target)
    return {"ok": ok}
