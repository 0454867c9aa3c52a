from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from api.routes import router
import logging
import time
import sentry_sdk

from config import SENTRY_DSN, ENVIRONMENT, VERSION
from logging_config import setup_logging

setup_logging()
logger = logging.getLogger(__name__)

# Initialize Sentry if DSN is configured
if SENTRY_DSN:
    sentry_sdk.init(
        dsn=SENTRY_DSN,
        traces_sample_rate=0.1,
        environment=ENVIRONMENT,
    )


app = FastAPI(
    title="Solana Narrative Radar",
    description="Narrative detection for the Solana ecosystem from DeFi, GitHub and market data",
    version=VERSION,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    response = await call_next(request)
    duration = round(time.time() - start, 3)
    if request.url.path != "/health":
        logger.info("request | %s %s | %s | %.3fs", request.method, request.url.path, response.status_code, duration)
    return response


app.include_router(router, prefix="/api")


@app.get("/health")
async def health():
    return {
        "status": "ok",
        "service": "solana-narrative-radar",
        "version": VERSION,
    }
