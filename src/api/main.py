import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.api.deps import get_settings, get_store
from src.app_shell.config import validate_ops_rules
from src.core.ports.kv import KVStorePort, StoreError
from src.rules.loader import load_rules

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    settings = get_settings()

    # Load rules and validate on startup (fail-fast)
    try:
        rules = load_rules(settings.rules_path)
        validate_ops_rules(rules)
        logger.info("Rules loaded from %s", settings.rules_path)
    except Exception as e:
        logger.critical("Rules load failed: %s", e)
        sys.exit(1)

    yield


app = FastAPI(
    title="Folio API",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    logger.error("Store failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"error": "Storage error"})


# --- Routers ---
from src.api.routes import (  # noqa: E402
    admin_auth,
    admin_dashboard,
    blogs,
    casevault,
    expertise,
    family,
    gallery,
    personal,
    readings,
    research,
    shortener,
    site_config,
    subscribers,
)

app.include_router(admin_auth.router, prefix="/api/admin", tags=["Admin Auth"])
app.include_router(admin_dashboard.router, prefix="/api/admin", tags=["Admin Dashboard"])
app.include_router(family.router, prefix="/api/family", tags=["Family"])
app.include_router(gallery.router, prefix="/api/personal/gallery", tags=["Gallery"])
app.include_router(personal.router, prefix="/api/personal", tags=["Personal"])
app.include_router(blogs.router, prefix="/api/blogs", tags=["Blogs"])
app.include_router(
    expertise.certifications_router, prefix="/api/certifications", tags=["Expertise"]
)
app.include_router(expertise.competitions_router, prefix="/api/competitions", tags=["Expertise"])
app.include_router(expertise.areas_router, prefix="/api/expertise-areas", tags=["Expertise"])
app.include_router(expertise.router, prefix="/api/expertise", tags=["Expertise"])
app.include_router(readings.router, prefix="/api/readings", tags=["Readings"])
app.include_router(shortener.router, prefix="/api/url-shortener", tags=["Shortener"])
app.include_router(shortener.redirect_router, prefix="", tags=["Shortener"])
app.include_router(casevault.router, prefix="/api/casevault", tags=["CaseVault"])
app.include_router(subscribers.router, prefix="/api/subscribers", tags=["Subscribers"])
app.include_router(site_config.profile_router, prefix="/api/profile", tags=["Profile"])
app.include_router(site_config.footer_router, prefix="/api/footer", tags=["Footer"])
app.include_router(research.router, prefix="/api/research", tags=["Research"])


# CORS (Allow Frontend)
origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health_check(store: KVStorePort = Depends(get_store)) -> dict[str, Any]:
    """Health check endpoint."""
    return {"status": "ok", "service": "api", "store": store.ping()}
