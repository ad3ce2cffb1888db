"""
Earnings Insight Backend API

Backend for the financial dashboard: fetches market and macroeconomic data
from upstream providers, reshapes it into dashboard-friendly JSON and caches
it briefly in memory.

API Guide:
- /api/economics: Key US economic indicators (inflation, unemployment, GDP, rates)
- /api/earnings-analysis?ticker=AAPL: BUY/HOLD/SELL recommendation from
  earnings-call sentiment, 30-day price trend and macro conditions
- /api/history?ticker=AAPL: 30 days of closes with trend statistics
- /api/earnings?ticker=AAPL: Raw quarterly earnings financials
- /api/stocks: Current prices for the dashboard companies
- /api/health: Service status and cache statistics

Every endpoint answers GET (and a bare OPTIONS for CORS preflight).

How to run the server for development:
    # Start the server (from backend/)
    uvicorn earnings_insight.main:app --host 0.0.0.0 --port 8000

    # Try some endpoints
    GET /api/earnings-analysis?ticker=AAPL
    GET /api/history?ticker=MSFT
"""

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException
from typing import Optional
from datetime import datetime, timezone
import logging
import time
import psutil

from .config import Config, config
from .context import AppContext
from .errors import InsightError, ValidationError

CORS_HEADERS = {
    "Access-Control-Allow-Credentials": "true",
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET,OPTIONS",
    "Access-Control-Allow-Headers": "X-Requested-With, Content-Type, Accept",
}

# Configure logging
logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def get_context(request: Request) -> AppContext:
    return request.app.state.context


def require_ticker(ticker: Optional[str]) -> str:
    if not ticker or not ticker.strip():
        raise ValidationError("Ticker parameter is required")
    return ticker.strip().upper()


def create_app(context: Optional[AppContext] = None, settings: Optional[Config] = None) -> FastAPI:
    """Build the API around an application context (a fresh one by default)"""
    settings = settings or config
    app = FastAPI(title="Earnings Insight API")
    app.state.context = context or AppContext.from_config(settings)
    app.state.startup_time = datetime.now(timezone.utc)

    # Add error handling middleware
    @app.middleware("http")
    async def catch_exceptions_middleware(request, call_next):
        try:
            return await call_next(request)
        except Exception as e:
            logger.error(f"Unhandled error: {str(e)}", exc_info=True)
            return JSONResponse(
                status_code=500,
                content={"error": "Internal server error", "message": "An unexpected error occurred"}
            )

    # Add request logging middleware
    @app.middleware("http")
    async def log_requests(request, call_next):
        start_time = time.time()
        response = await call_next(request)
        duration = time.time() - start_time
        logger.info(f"{request.method} {request.url.path} - Status: {response.status_code} - Duration: {duration:.2f}s")
        return response

    # CORS headers on every response; preflight answered here
    @app.middleware("http")
    async def cors_headers(request, call_next):
        if request.method == "OPTIONS":
            response = Response(status_code=200)
        else:
            response = await call_next(request)
        response.headers.update(CORS_HEADERS)
        return response

    @app.exception_handler(InsightError)
    async def insight_error_handler(request: Request, exc: InsightError):
        if exc.status_code >= 500:
            logger.error(f"{request.url.path} failed: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_payload())

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 405:
            content = {"error": "Method not allowed", "message": "This endpoint only accepts GET requests"}
        elif exc.status_code == 404:
            content = {"error": "Not found", "message": f"No endpoint at {request.url.path}"}
        else:
            content = {"error": "Request failed", "message": str(exc.detail)}
        return JSONResponse(status_code=exc.status_code, content=content)

    @app.get("/")
    async def root():
        return {"message": "Welcome to Earnings Insight API"}

    @app.get("/api/economics")
    async def get_economic_indicators(context: AppContext = Depends(get_context)):
        """Key economic indicators; unavailable ones are listed with available=false"""
        context.require_api_key()
        snapshot, cached, timestamp = await context.economics.get_indicators()
        return {
            "success": True,
            "cached": cached,
            "timestamp": timestamp,
            "data": snapshot.model_dump(by_alias=True),
        }

    @app.get("/api/earnings-analysis")
    async def get_earnings_analysis(ticker: Optional[str] = None, context: AppContext = Depends(get_context)):
        """Investment recommendation for a ticker"""
        symbol = require_ticker(ticker)
        context.require_api_key()
        report, cached = await context.analysis.analyze(symbol)
        return {"success": True, "cached": cached, "data": report}

    @app.get("/api/history")
    async def get_history(ticker: Optional[str] = None, context: AppContext = Depends(get_context)):
        """30-day price history and trend statistics (no API key needed)"""
        symbol = require_ticker(ticker)
        trend, cached = await context.history.get_history(symbol)
        return {"success": True, "cached": cached, "data": trend.model_dump(by_alias=True)}

    @app.get("/api/earnings")
    async def get_earnings(ticker: Optional[str] = None, context: AppContext = Depends(get_context)):
        """Raw quarterly earnings financials"""
        context.require_api_key()
        symbol = require_ticker(ticker)
        data, cached = await context.financials.get_financials(symbol)
        return {"success": True, "cached": cached, "data": data}

    @app.get("/api/stocks")
    async def get_stocks(context: AppContext = Depends(get_context)):
        """Current prices for the dashboard companies"""
        context.require_api_key()
        entries = await context.quotes.get_dashboard_quotes()
        return {
            "success": True,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "data": entries,
            "message": "Stock data retrieved successfully",
        }

    @app.get("/api/health")
    async def health_check(request: Request, context: AppContext = Depends(get_context)):
        """Service status, cache statistics and process resource usage"""
        now = datetime.now(timezone.utc)
        process = psutil.Process()
        memory_info = process.memory_info()
        return {
            "status": "healthy" if context.config.API_KEY else "degraded",
            "timestamp": now.isoformat(),
            "api_key_configured": bool(context.config.API_KEY),
            "environment": context.config.ENV,
            "caches": context.cache_stats(),
            "system": {
                "memory_usage_mb": memory_info.rss / 1024 / 1024,
                "uptime_seconds": (now - request.app.state.startup_time).total_seconds(),
            },
        }

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=config.HOST, port=config.PORT)
