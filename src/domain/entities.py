from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# --- Enums / Literals ---
BlogStatus = Literal["draft", "published", "archived"]
BlogVisibility = Literal["public", "private", "unlisted"]
BlogAudience = Literal["general", "students", "collaborators", "professionals"]
BlogType = Literal["blog", "note", "essay", "project-log", "tutorial", "research"]
ReadingType = Literal["book", "course"]
SectionCategory = Literal["frequent", "content", "management", "tools"]
MemberRole = Literal["admin", "user", "visitor"]


class StoredModel(BaseModel):
    """Base for documents persisted as JSON in the key-value store.

    Attributes are snake_case in Python and camelCase on the wire and in
    storage, so existing data keeps its shape.
    """

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    def to_store(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


# --- Blog ---


class Blog(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    slug: str
    date: str
    type: BlogType = "blog"
    status: BlogStatus = "draft"
    summary: str
    tags: list[str] = Field(default_factory=list)
    linked_project: str | None = None
    linked_publication: str | None = None
    linked_video: str | None = None
    content: str = ""
    version: str = "v1.0"
    canonical: bool = True
    visibility: BlogVisibility = "public"
    audience: BlogAudience = "general"
    last_updated: str | None = None
    created_at: str
    updated_at: str
    reading_time: str | None = None
    views: int = 0
    is_pinned: bool = Field(default=False, alias="isPinned")
    pin_deadline: str | None = Field(default=None, alias="pinDeadline")
    pin_priority: int | None = Field(default=None, alias="pinPriority")

    def to_store(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


# --- Expertise ---


class Certification(StoredModel):
    id: str
    name: str
    issuing_body: str = ""
    date_earned: str = ""
    verification_link: str | None = None
    relevance_note: str = ""
    order: int = 0
    created_at: str


class Competition(StoredModel):
    id: str
    name: str
    year: str = ""
    role: str = ""
    team_context: str | None = None
    outcome: str = ""
    key_learning: str = ""
    order: int = 0
    created_at: str


class ExpertiseArea(StoredModel):
    id: str
    name: str
    descriptor: str = ""
    competency_note: str = ""
    linked_certifications: list[str] = Field(default_factory=list)
    linked_competitions: list[str] = Field(default_factory=list)
    linked_books: list[str] = Field(default_factory=list)
    order: int = 0
    created_at: str


class ReadingItem(StoredModel):
    id: str
    slug: str
    title: str
    author: str
    type: ReadingType
    image_url: str | None = None
    impact_on_thinking: str = ""
    notes: str = ""
    platform: str | None = None
    duration: str | None = None
    completion_date: str | None = None
    order: int = 0
    created_at: str
    updated_at: str


# --- Admin dashboard ---


class AdminSection(StoredModel):
    id: str
    title: str
    description: str = ""
    icon: str = ""
    link_href: str
    link_text: str = ""
    category: SectionCategory = "content"
    priority: int = 0
    is_active: bool = True
    usage_count: int = 0
    last_used: str | None = None
    created_at: str
    updated_at: str


class AdminSectionUsage(StoredModel):
    id: str
    section_id: str
    accessed_at: str
    user_id: str | None = None


class AdminCategory(StoredModel):
    id: str
    name: str
    description: str = ""
    icon: str = ""
    order: int = 0
    is_active: bool = True
    created_at: str
    updated_at: str


# --- CaseVault ---


class CaseRecord(StoredModel):
    """A legal case. Unknown fields are kept as submitted."""

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel, extra="allow")

    id: str
    title: str
    citation: str
    legal_area: str
    judgment_date: str | None = None
    tags: list[str] = Field(default_factory=list)
    legal_principles: list[str] = Field(default_factory=list)
    related_cases: list[str] = Field(default_factory=list)
    has_document: bool = False
    is_own_case: bool = False
    year: int


# --- Subscribers ---


class Subscriber(StoredModel):
    id: str
    full_name: str
    phone_number: str
    date_joined: str


# --- Family / personal access ---


class FamilyMember(StoredModel):
    username: str
    hashed_password: str
    role: MemberRole = "visitor"
    created_at: str
    last_login: str | None = None


# --- Research ---


class ResearchStudy(StoredModel):
    id: str
    title: str
    abstract: str = ""
    year: int
    domain: str
    tags: list[str] = Field(default_factory=list)
    file_url: str | None = None
    external_url: str | None = None
    image_url: str | None = None
    published_in: str | None = None
    author: str = ""
    published_at: str
    featured: bool = False
    views: int = 0


# --- Gallery ---


class GalleryFolder(StoredModel):
    id: str
    name: str
    created_at: str
    is_default: bool = False


class MediaItem(StoredModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel, extra="allow")

    id: str
    url: str
    name: str
    type: str
    folder_id: str | None = None
    caption: str | None = None
    size: int | None = None
    upload_date: str
