"""E-series API — FastAPI application entry point."""

import logging
import os

from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from eseries import __version__
from eseries_api.middleware.rate_limit import RateLimitMiddleware
from eseries_api.routes import circuit, filters, rounding

logging.basicConfig(level=os.getenv("ESERIES_LOG_LEVEL", "INFO"))

app = FastAPI(
    title="E-Series API",
    description="IEC 60063 preferred-value rounding and equivalent-circuit search",
    version=__version__,
)

# CORS: configured frontend plus local dev servers
_frontend_url = os.getenv("FRONTEND_URL")
app.add_middleware(
    CORSMiddleware,
    allow_origins=[_frontend_url] if _frontend_url else [],
    allow_origin_regex=r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$",
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Rate limiting, with a separate budget for the circuit search
app.add_middleware(
    RateLimitMiddleware,
    requests_per_minute=int(os.getenv("ESERIES_REQUESTS_PER_MINUTE", "60")),
    search_requests_per_minute=int(os.getenv("ESERIES_SEARCH_REQUESTS_PER_MINUTE", "10")),
)

# Register route modules
app.include_router(rounding.router, prefix="/api", tags=["Rounding"])
app.include_router(circuit.router, prefix="/api", tags=["Circuit"])
app.include_router(filters.router, prefix="/api", tags=["Filters"])


@app.get("/api/health")
async def health_check():
    return {"status": "healthy", "service": "eseries-api", "version": __version__}
