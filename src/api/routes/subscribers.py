"""Subscriber sign-up (public, rate limited) and management (API key or admin)."""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel

from src.api.auth_utils import client_ip
from src.api.deps import (
    get_rate_limiter,
    get_subscriber_service,
    raise_for_errors,
    require_api_key_or_admin,
)
from src.app_shell.rate_limit import RateLimiter
from src.components.subscribers import SubscriberService

router = APIRouter()


class SubscribeRequest(BaseModel):
    fullName: str = ""
    phoneNumber: str = ""


@router.post("", status_code=201)
def subscribe(
    data: SubscribeRequest,
    request: Request,
    service: SubscriberService = Depends(get_subscriber_service),
    limiter: RateLimiter = Depends(get_rate_limiter),
) -> dict[str, Any]:
    if not limiter.check_subscribe(client_ip(request)):
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many requests, try again later",
        )
    subscriber, errors = service.subscribe(data.fullName, data.phoneNumber)
    if subscriber is None:
        raise_for_errors(errors, {"duplicate": status.HTTP_409_CONFLICT})
    return {
        "success": True,
        "message": "Successfully subscribed",
        "subscriber": subscriber.to_store(),
    }


@router.get("", dependencies=[Depends(require_api_key_or_admin)])
def list_subscribers(
    service: SubscriberService = Depends(get_subscriber_service),
) -> dict[str, Any]:
    subscribers = service.list_all()
    return {
        "count": len(subscribers),
        "subscribers": {phone: s.to_store() for phone, s in subscribers.items()},
    }


@router.delete("/{phone_number}", dependencies=[Depends(require_api_key_or_admin)])
def delete_subscriber(
    phone_number: str, service: SubscriberService = Depends(get_subscriber_service)
) -> dict[str, Any]:
    if not service.delete(phone_number):
        raise HTTPException(status_code=404, detail="Subscriber not found")
    return {"success": True}
