"""Blog routes: public reads, admin writes, pinning and view counts."""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from src.api.deps import get_blog_service, is_admin_request, raise_for_errors, require_admin
from src.components.blogs import BlogService
from src.domain.entities import Blog, BlogAudience, BlogStatus, BlogType, BlogVisibility

router = APIRouter()


# --- Request Models ---


class BlogCreateRequest(BaseModel):
    title: str = ""
    summary: str = ""
    slug: str | None = None
    date: str | None = None
    type: BlogType | None = None
    status: BlogStatus | None = None
    tags: list[str] | None = None
    linked_project: str | None = None
    linked_publication: str | None = None
    linked_video: str | None = None
    content: str | None = None
    version: str | None = None
    canonical: bool | None = None
    visibility: BlogVisibility | None = None
    audience: BlogAudience | None = None


class BlogUpdateRequest(BaseModel):
    title: str | None = None
    summary: str | None = None
    slug: str | None = None
    date: str | None = None
    type: BlogType | None = None
    status: BlogStatus | None = None
    tags: list[str] | None = None
    linked_project: str | None = None
    linked_publication: str | None = None
    linked_video: str | None = None
    content: str | None = None
    version: str | None = None
    canonical: bool | None = None
    visibility: BlogVisibility | None = None
    audience: BlogAudience | None = None


class StatusChangeRequest(BaseModel):
    status: BlogStatus


class PinRequest(BaseModel):
    deadline: str | None = None
    priority: int | None = None


def _resolve_or_404(service: BlogService, slug: str) -> Blog:
    blog = service.resolve(slug)
    if blog is None:
        raise HTTPException(status_code=404, detail="Blog not found")
    return blog


# --- Routes ---


@router.get("")
def list_blogs(
    include_all: bool = Query(default=False, alias="all"),
    status: BlogStatus | None = None,
    service: BlogService = Depends(get_blog_service),
    is_admin: bool = Depends(is_admin_request),
) -> list[dict[str, Any]]:
    """Published blogs; ``?all=true`` lists everything for the admin."""
    if include_all:
        if not is_admin:
            raise HTTPException(status_code=401, detail="Unauthorized")
        blogs = service.list_by_status(status) if status else service.list_all()
    else:
        blogs = service.list_published()
    return [b.to_store() for b in blogs]


@router.post("", status_code=201, dependencies=[Depends(require_admin)])
def create_blog(
    data: BlogCreateRequest,
    service: BlogService = Depends(get_blog_service),
) -> dict[str, Any]:
    blog, errors = service.create(data.model_dump(exclude_none=True))
    if blog is None:
        raise_for_errors(errors)
    return blog.to_store()


@router.get("/tags")
def list_tags(service: BlogService = Depends(get_blog_service)) -> list[str]:
    return service.all_tags()


@router.get("/search")
def search_blogs(
    q: str = Query(default=""),
    service: BlogService = Depends(get_blog_service),
    is_admin: bool = Depends(is_admin_request),
) -> list[dict[str, Any]]:
    if not q.strip():
        return []
    results = service.search(q)
    if not is_admin:
        results = [b for b in results if b.status == "published" and b.visibility == "public"]
    return [b.to_store() for b in results]


@router.get("/stats", dependencies=[Depends(require_admin)])
def blog_stats(service: BlogService = Depends(get_blog_service)) -> dict[str, int]:
    stats = service.stats()
    return {
        "total": stats.total,
        "published": stats.published,
        "drafts": stats.drafts,
        "archived": stats.archived,
        "totalTags": stats.total_tags,
        "totalViews": stats.total_views,
    }


@router.get("/tag/{tag}")
def blogs_by_tag(
    tag: str,
    service: BlogService = Depends(get_blog_service),
    is_admin: bool = Depends(is_admin_request),
) -> list[dict[str, Any]]:
    blogs = service.list_by_tag(tag)
    if not is_admin:
        blogs = [b for b in blogs if b.status == "published"]
    return [b.to_store() for b in blogs]


@router.get("/{slug}")
def get_blog(
    slug: str,
    service: BlogService = Depends(get_blog_service),
    is_admin: bool = Depends(is_admin_request),
) -> dict[str, Any]:
    """A blog by slug or id. Unpublished blogs are only visible to the admin."""
    blog = _resolve_or_404(service, slug)
    if blog.status != "published" and not is_admin:
        raise HTTPException(status_code=404, detail="Blog not found")
    return blog.to_store()


@router.put("/{slug}", dependencies=[Depends(require_admin)])
def update_blog(
    slug: str,
    data: BlogUpdateRequest,
    service: BlogService = Depends(get_blog_service),
) -> dict[str, Any]:
    existing = _resolve_or_404(service, slug)
    blog, errors = service.update(existing.id, data.model_dump(exclude_unset=True))
    if blog is None:
        raise_for_errors(errors)
    return blog.to_store()


@router.patch("/{slug}", dependencies=[Depends(require_admin)])
def change_status(
    slug: str,
    data: StatusChangeRequest,
    service: BlogService = Depends(get_blog_service),
) -> dict[str, Any]:
    existing = _resolve_or_404(service, slug)
    blog, errors = service.change_status(existing.id, data.status)
    if blog is None:
        raise_for_errors(errors)
    return blog.to_store()


@router.delete("/{slug}", dependencies=[Depends(require_admin)])
def delete_blog(slug: str, service: BlogService = Depends(get_blog_service)) -> dict[str, Any]:
    existing = _resolve_or_404(service, slug)
    service.delete(existing.id)
    return {"success": True}


@router.post("/{slug}/pin", dependencies=[Depends(require_admin)])
def pin_blog(
    slug: str,
    data: PinRequest,
    service: BlogService = Depends(get_blog_service),
) -> dict[str, Any]:
    existing = _resolve_or_404(service, slug)
    blog, errors = service.pin(existing.id, data.deadline, data.priority)
    if blog is None:
        raise_for_errors(errors)
    return blog.to_store()


@router.delete("/{slug}/pin", dependencies=[Depends(require_admin)])
def unpin_blog(slug: str, service: BlogService = Depends(get_blog_service)) -> dict[str, Any]:
    existing = _resolve_or_404(service, slug)
    blog = service.unpin(existing.id)
    if blog is None:
        raise HTTPException(status_code=404, detail="Blog not found")
    return blog.to_store()


@router.post("/{slug}/views")
def record_view(slug: str, service: BlogService = Depends(get_blog_service)) -> dict[str, int]:
    return {"views": service.increment_views(slug)}


@router.get("/{slug}/views")
def get_views(slug: str, service: BlogService = Depends(get_blog_service)) -> dict[str, int]:
    views = service.get_views(slug)
    if views is None:
        raise HTTPException(status_code=404, detail="Blog not found")
    return {"views": views}
