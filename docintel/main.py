# docintel/main.py
from contextlib import asynccontextmanager
from datetime import datetime, timezone
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from docintel.api.proxy import router as proxy_router
from docintel.api.v1.router import api_router
from docintel.core.config import settings
from docintel.core.error_handlers import register_error_handlers
from docintel.core.logging import setup_logging
from docintel.observability.metrics import metrics
from docintel.observability.middleware import RequestContextMiddleware
from docintel.schemas import HealthCheck

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("🚀 Server starting...")
    logger.info("Available endpoints:")
    logger.info("  GET  /health - Health check")
    logger.info("  POST /api/ai-proxy - Unified AI proxy")
    logger.info("  POST /api/qwen-proxy - Qwen API proxy")
    logger.info("  POST /api/openai-proxy - OpenAI API proxy")
    yield
    logger.info("👋 Server stopping...")


app = FastAPI(title="DocIntel API", version="1.0.0", lifespan=lifespan)
register_error_handlers(app)


# Request logging
@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.info(f"➡️  {request.method} {request.url.path}")
    try:
        response = await call_next(request)
        metrics.inc("http_requests_total", method=request.method, status=response.status_code)
        logger.info(f"⬅️  {request.method} {request.url.path} → {response.status_code}")
        return response
    except Exception as e:
        logger.error(f"❌ {request.method} {request.url.path} → ERROR: {e}")
        raise


app.add_middleware(RequestContextMiddleware)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_allowed_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health", response_model=HealthCheck)
async def health_check():
    return HealthCheck(status="OK", timestamp=datetime.now(timezone.utc).isoformat())


@app.get("/metrics", response_class=PlainTextResponse)
async def prometheus_metrics():
    return metrics.render_prometheus()


# API routes
app.include_router(proxy_router, prefix="/api", tags=["AI Proxy"])
app.include_router(api_router, prefix="/api/v1")

logger.info("✅ Application configured")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("docintel.main:app", host=settings.HOST, port=settings.PORT)
