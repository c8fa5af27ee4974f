import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from dotenv import load_dotenv

load_dotenv()

from quotedesk.routes import (
    auth_router,
    agents_router,
    clients_router,
    quotes_router,
    circuit_tracking_router,
    deals_router,
)
from quotedesk.database import init_db, DATABASE_URL
from quotedesk.logging_config import setup_logging
from quotedesk.services.notifications import LoggingNotifier
from quotedesk.services.rate_limit import InMemoryRateLimiter

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="QuoteDesk",
    description="Quotes, commissions and circuit tracking for a telecom reseller",
    version="1.0.0"
)

# App-scoped services, injected into routes via quotedesk.dependencies
app.state.notifier = LoggingNotifier()
app.state.rate_limiter = InMemoryRateLimiter()

# Include routers
app.include_router(auth_router)
app.include_router(agents_router)
app.include_router(clients_router)
app.include_router(quotes_router)
app.include_router(circuit_tracking_router)
app.include_router(deals_router)


@app.on_event("startup")
def on_startup():
    """Configure logging and make sure the database is reachable."""
    setup_logging()
    try:
        init_db()
    except Exception as e:
        # Re-raise as RuntimeError so the server fails loudly
        raise RuntimeError(
            f"Database initialization failed for DATABASE_URL={DATABASE_URL}: {e}"
        ) from e
    logger.info("QuoteDesk started")


@app.get("/health")
async def health():
    return {"ok": True}


# Error handlers
@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    """Render HTTP errors as JSON."""
    return JSONResponse(
        {"error": exc.detail},
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def server_error_handler(request: Request, exc: Exception):
    """Log unexpected errors and return a generic 500."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse({"error": "Internal server error"}, status_code=500)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("quotedesk.main:app", host="0.0.0.0", port=8000, reload=True)
