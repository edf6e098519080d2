import logging
import os
from collections.abc import Sequence
from functools import lru_cache
from pathlib import Path
from typing import Any, NoReturn

from fastapi import Depends, HTTPException, Query, Request, status

from src.adapters.clock import SystemClock
from src.adapters.memory_kv import InMemoryKVStore
from src.adapters.sqlite.kv_store import SQLiteKVStore
from src.api.auth_utils import ADMIN_COOKIE, FAMILY_COOKIE, PERSONAL_COOKIE
from src.app_shell.rate_limit import RateLimiter
from src.components.admin_dashboard import AdminCategoryService, AdminSectionService
from src.components.auth import (
    AdminAuthService,
    FamilyAuthService,
    MemberDirectory,
    MemberSession,
    PersonalAuthService,
)
from src.components.blogs import BlogService
from src.components.casevault import CaseVaultService
from src.components.expertise import ExpertiseService
from src.components.gallery import GalleryService
from src.components.readings import ReadingService
from src.components.research import ResearchService
from src.components.shortener import ShortenerService
from src.components.site_config import FooterService, ProfileService
from src.components.subscribers import SubscriberService
from src.core.ports.kv import KVStorePort
from src.core.ports.time import TimePort
from src.rules.loader import load_rules
from src.rules.models import Rules

logger = logging.getLogger(__name__)


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        self.data_dir = Path(os.environ.get("FOLIO_DATA_DIR", "./data"))
        self.db_path = str(self.data_dir / "folio.db")
        self.store_backend = os.environ.get("FOLIO_STORE", "sqlite").lower()
        self.rules_path = self.base_dir / "rules.yaml"
        self.admin_auth_token = os.environ.get("ADMIN_AUTH_TOKEN", "")
        self.admin_password = os.environ.get("ADMIN_PASSWORD", "")
        self.admin_api_key = os.environ.get("ADMIN_API_KEY", "")
        self.secret_key = os.environ.get("FOLIO_SECRET_KEY", "dev-secret-unsafe")
        self.public_url = os.environ.get("FOLIO_PUBLIC_URL", "").rstrip("/")
        self.env = os.environ.get("FOLIO_ENV", "development")

    @property
    def is_production(self) -> bool:
        return self.env == "production"


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
@lru_cache
def get_rules(settings: Settings = Depends(get_settings)) -> Rules:
    return load_rules(settings.rules_path)


# --- Clock ---
_clock_instance: SystemClock | None = None


def get_clock() -> TimePort:
    """Get clock singleton."""
    global _clock_instance
    if _clock_instance is None:
        _clock_instance = SystemClock()
    return _clock_instance


# --- Store ---
_store_instance: KVStorePort | None = None


def build_store(settings: Settings, clock: TimePort) -> KVStorePort:
    """Create the store named by FOLIO_STORE."""
    if settings.store_backend == "memory":
        logger.warning("Using the in-memory store; data is lost on restart")
        return InMemoryKVStore(clock)
    if settings.store_backend != "sqlite":
        raise ValueError(f"Unknown FOLIO_STORE backend: {settings.store_backend}")
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    return SQLiteKVStore(settings.db_path, clock)


def get_store(
    settings: Settings = Depends(get_settings),
    clock: TimePort = Depends(get_clock),
) -> KVStorePort:
    """Get store singleton."""
    global _store_instance
    if _store_instance is None:
        _store_instance = build_store(settings, clock)
    return _store_instance


# --- Component Services ---
def get_blog_service(
    store: KVStorePort = Depends(get_store),
    clock: TimePort = Depends(get_clock),
    rules: Rules = Depends(get_rules),
) -> BlogService:
    return BlogService(store, clock, rules.blogs)


def get_expertise_service(
    store: KVStorePort = Depends(get_store),
    clock: TimePort = Depends(get_clock),
) -> ExpertiseService:
    return ExpertiseService(store, clock)


def get_reading_service(
    store: KVStorePort = Depends(get_store),
    clock: TimePort = Depends(get_clock),
) -> ReadingService:
    return ReadingService(store, clock)


def get_section_service(
    store: KVStorePort = Depends(get_store),
    clock: TimePort = Depends(get_clock),
) -> AdminSectionService:
    return AdminSectionService(store, clock)


def get_category_service(
    store: KVStorePort = Depends(get_store),
    clock: TimePort = Depends(get_clock),
) -> AdminCategoryService:
    return AdminCategoryService(store, clock)


def get_shortener_service(
    store: KVStorePort = Depends(get_store),
    clock: TimePort = Depends(get_clock),
    rules: Rules = Depends(get_rules),
) -> ShortenerService:
    return ShortenerService(store, clock, rules.shortener)


def get_casevault_service(
    store: KVStorePort = Depends(get_store),
    clock: TimePort = Depends(get_clock),
) -> CaseVaultService:
    return CaseVaultService(store, clock)


def get_subscriber_service(
    store: KVStorePort = Depends(get_store),
    clock: TimePort = Depends(get_clock),
) -> SubscriberService:
    return SubscriberService(store, clock)


def get_profile_service(
    store: KVStorePort = Depends(get_store),
    clock: TimePort = Depends(get_clock),
) -> ProfileService:
    return ProfileService(store, clock)


def get_footer_service(store: KVStorePort = Depends(get_store)) -> FooterService:
    return FooterService(store)


def get_research_service(
    store: KVStorePort = Depends(get_store),
    clock: TimePort = Depends(get_clock),
) -> ResearchService:
    return ResearchService(store, clock)


def get_gallery_service(
    store: KVStorePort = Depends(get_store),
    clock: TimePort = Depends(get_clock),
) -> GalleryService:
    return GalleryService(store, clock)


# --- Auth Services ---
def get_admin_auth_service(
    profiles: ProfileService = Depends(get_profile_service),
    settings: Settings = Depends(get_settings),
    rules: Rules = Depends(get_rules),
) -> AdminAuthService:
    return AdminAuthService(
        profiles,
        admin_password=settings.admin_password,
        auth_token=settings.admin_auth_token,
        rules=rules.auth,
    )


def get_member_directory(
    store: KVStorePort = Depends(get_store),
    clock: TimePort = Depends(get_clock),
    rules: Rules = Depends(get_rules),
) -> MemberDirectory:
    return MemberDirectory(store, clock, rules.auth)


def get_family_auth_service(
    store: KVStorePort = Depends(get_store),
    members: MemberDirectory = Depends(get_member_directory),
    rules: Rules = Depends(get_rules),
) -> FamilyAuthService:
    return FamilyAuthService(store, members, rules.auth)


def get_personal_auth_service(
    members: MemberDirectory = Depends(get_member_directory),
    clock: TimePort = Depends(get_clock),
    settings: Settings = Depends(get_settings),
    rules: Rules = Depends(get_rules),
) -> PersonalAuthService:
    return PersonalAuthService(members, clock, settings.secret_key, rules.auth)


# Rate limiter singleton; history lives in process memory
_rate_limiter_instance: RateLimiter | None = None


def get_rate_limiter(
    rules: Rules = Depends(get_rules),
    clock: TimePort = Depends(get_clock),
) -> RateLimiter:
    """Get rate limiter singleton."""
    global _rate_limiter_instance
    if _rate_limiter_instance is None:
        _rate_limiter_instance = RateLimiter(rules.rate_limits, clock)
    return _rate_limiter_instance


# --- Guards ---
def require_admin(
    request: Request,
    admin_auth: AdminAuthService = Depends(get_admin_auth_service),
) -> None:
    if not admin_auth.is_authenticated(request.cookies.get(ADMIN_COOKIE)):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")


def is_admin_request(
    request: Request,
    admin_auth: AdminAuthService = Depends(get_admin_auth_service),
) -> bool:
    """Whether the caller holds the admin cookie, without rejecting anyone."""
    return admin_auth.is_authenticated(request.cookies.get(ADMIN_COOKIE))


def require_family_member(
    request: Request,
    family_auth: FamilyAuthService = Depends(get_family_auth_service),
) -> MemberSession:
    session = family_auth.check(request.cookies.get(FAMILY_COOKIE))
    if session is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return session


def require_personal(
    request: Request,
    personal_auth: PersonalAuthService = Depends(get_personal_auth_service),
) -> MemberSession:
    session = personal_auth.check(request.cookies.get(PERSONAL_COOKIE))
    if session is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return session


def require_api_key_or_admin(
    request: Request,
    api_key: str | None = Query(default=None, alias="apiKey"),
    settings: Settings = Depends(get_settings),
    admin_auth: AdminAuthService = Depends(get_admin_auth_service),
) -> None:
    """Subscriber management accepts ``?apiKey=`` or an admin session."""
    if api_key and settings.admin_api_key and api_key == settings.admin_api_key:
        return
    if admin_auth.is_authenticated(request.cookies.get(ADMIN_COOKIE)):
        return
    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")


def error_detail(errors: Sequence[Any]) -> list[dict[str, Any]]:
    """Serialize validation errors the way every route reports them."""
    return [{"code": err.code, "message": err.message, "field": err.field} for err in errors]


_ERROR_STATUS = {
    "not_found": status.HTTP_404_NOT_FOUND,
    "slug_exists": status.HTTP_409_CONFLICT,
    "invalid_credentials": status.HTTP_401_UNAUTHORIZED,
    "not_configured": status.HTTP_503_SERVICE_UNAVAILABLE,
}


def raise_for_errors(
    errors: Sequence[Any], status_overrides: dict[str, int] | None = None
) -> NoReturn:
    """Raise the HTTPException matching the first error's code (400 by default)."""
    statuses = {**_ERROR_STATUS, **(status_overrides or {})}
    code = statuses.get(errors[0].code, status.HTTP_400_BAD_REQUEST) if errors else 400
    raise HTTPException(status_code=code, detail=error_detail(errors))
