"""
Dashboard HTTP API.
"""

from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from src.coinboard.dashboard import DashboardService
from src.coinboard.health import create_health_endpoints
from src.coinboard.logging import get_logger
from src.coinboard.shared.errors import (
    AuthenticationRequiredError,
    CoinboardError,
    DataUnavailableError,
    ErrorHandler,
    MissingCredentialsError,
    NetworkError,
    RemoteAPIError,
    UnsupportedExchangeError,
)
from src.coinboard.shared.models import (
    Credential,
    Exchange,
    OrderRequest,
    PortfolioSnapshot,
    PriceRecord,
)

logger = get_logger(__name__)


class SignInRequest(BaseModel):
    """Email/password pair."""
    email: str
    password: str


class TradeResponse(BaseModel):
    accepted: bool


def status_for(error: CoinboardError) -> int:
    if isinstance(error, AuthenticationRequiredError):
        return 401
    if isinstance(error, (MissingCredentialsError, UnsupportedExchangeError)):
        return 400
    if isinstance(error, DataUnavailableError):
        return 503
    if isinstance(error, NetworkError):
        return 504
    if isinstance(error, RemoteAPIError):
        return 502
    return 500


def create_app(service: Optional[DashboardService] = None, run_background: bool = True) -> FastAPI:
    """Build the API around ``service``.

    With ``run_background`` the live stream and refresh loop run for the
    lifetime of the app.
    """
    dashboard = service or DashboardService()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if run_background:
            await dashboard.start()
        yield
        if run_background:
            await dashboard.stop()

    app = FastAPI(
        title="Coinboard",
        description="Crypto portfolio dashboard backend",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.dashboard = dashboard

    @app.exception_handler(CoinboardError)
    async def coinboard_error_handler(request: Request, exc: CoinboardError):
        return JSONResponse(
            status_code=status_for(exc),
            content={"error": type(exc).__name__, "message": ErrorHandler.user_message(exc)},
        )

    @app.get("/prices", response_model=List[PriceRecord])
    async def get_prices(symbols: Optional[str] = Query(default=None, description="Comma-separated symbols")):
        wanted = [s.strip() for s in symbols.split(",") if s.strip()] if symbols else None
        return await dashboard.load_prices(wanted)

    @app.get("/prices/live", response_model=List[PriceRecord])
    async def get_live_prices():
        """Current price table, fed by both the stream and the refresh loop."""
        return dashboard.price_table.snapshot()

    @app.get("/movers", response_model=List[PriceRecord])
    async def get_movers():
        return await dashboard.load_movers()

    @app.get("/losers", response_model=List[PriceRecord])
    async def get_losers():
        return await dashboard.load_losers()

    @app.get("/portfolio", response_model=PortfolioSnapshot)
    async def get_portfolio():
        return await dashboard.load_portfolio()

    @app.post("/trades", response_model=TradeResponse)
    async def submit_trade(order: OrderRequest):
        return TradeResponse(accepted=await dashboard.submit_trade(order))

    @app.get("/notifications")
    async def get_notifications() -> List[Dict[str, Any]]:
        return [n.model_dump(mode="json") for n in dashboard.notifications]

    @app.post("/auth/sign-up")
    async def sign_up(body: SignInRequest):
        session = await dashboard.sign_up(body.email, body.password)
        return {"signed_in": session is not None}

    @app.post("/auth/sign-in")
    async def sign_in(body: SignInRequest):
        session = await dashboard.sign_in(body.email, body.password)
        return {"user_id": session.user.id, "email": session.user.email}

    @app.post("/auth/sign-out")
    async def sign_out():
        await dashboard.sign_out()
        return {"signed_in": False}

    @app.put("/api-keys/{exchange}")
    async def save_api_keys(exchange: Exchange, credential: Credential):
        saved = await dashboard.save_api_keys(exchange, credential)
        return {"configured": [e.value for e in saved.configured]}

    create_health_endpoints(app, dashboard.health)
    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(create_app(), host="0.0.0.0", port=8000)
