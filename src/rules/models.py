from pydantic import BaseModel, Field


class ProjectRules(BaseModel):
    slug: str
    rules_version: str


class CookieRules(BaseModel):
    max_age_seconds: int = 7 * 24 * 60 * 60
    http_only: bool = True
    same_site: str = "lax"
    secure_in_production: bool = True


class AuthRules(BaseModel):
    password_min_length: int = 8
    member_roles: list[str] = Field(default_factory=lambda: ["admin", "user", "visitor"])
    default_member_role: str = "visitor"
    personal_session_minutes: int = 60
    cookie: CookieRules = Field(default_factory=CookieRules)


class RateLimitWindow(BaseModel):
    window_seconds: int
    max_attempts: int | None = None
    max_requests: int | None = None


class RateLimitRules(BaseModel):
    login: RateLimitWindow
    subscribe: RateLimitWindow


class BlogRules(BaseModel):
    words_per_minute: int = 200
    pin_priority_min: int = 0
    pin_priority_max: int = 100
    default_pin_priority: int = 1


class ShortenerRules(BaseModel):
    code_length: int = 6
    redirect_status_code: int = 307


class BackupsRules(BaseModel):
    backup_dir_name: str
    retention_count: int


class OpsRules(BaseModel):
    required_env: list[str]
    backups: BackupsRules


class Rules(BaseModel):
    project: ProjectRules
    auth: AuthRules
    rate_limits: RateLimitRules
    blogs: BlogRules = Field(default_factory=BlogRules)
    shortener: ShortenerRules = Field(default_factory=ShortenerRules)
    ops: OpsRules
