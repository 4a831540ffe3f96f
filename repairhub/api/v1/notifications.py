from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from repairhub.database import get_db
from repairhub.dependencies import get_admin, get_caller
from repairhub.models.notification import NotificationStatus
from repairhub.schemas.caller import CallerContext
from repairhub.schemas.notification import (
    NotificationCreateRequest, MarkReadRequest, DeleteNotificationsRequest, BroadcastRequest,
)
from repairhub.schemas.common import success_response, paginated_response
from repairhub.services.notification_service import notification_service

router = APIRouter(prefix="/notifications")


@router.post("", status_code=status.HTTP_201_CREATED, summary="Store a notification")
def create_notification(
    body:   NotificationCreateRequest,
    db:     Session       = Depends(get_db),
    caller: CallerContext = Depends(get_caller),
):
    return success_response("Notification created", notification_service.create(db, body, caller))


@router.post("/broadcast", status_code=status.HTTP_201_CREATED, summary="Notify many accounts (Admin)")
def broadcast_notification(
    body:   BroadcastRequest,
    db:     Session       = Depends(get_db),
    caller: CallerContext = Depends(get_admin),
):
    """Targets `userIds`, or every account matching `filterCriteria` (`role`, `isActive`)."""
    count = notification_service.broadcast(db, body, caller)
    return success_response(f"Broadcast notification sent to {count} users", {"recipientCount": count})


@router.get("", summary="List the caller's notifications")
def list_notifications(
    page:   int                          = Query(1, ge=1),
    limit:  int                          = Query(20, ge=1, le=100),
    status: Optional[NotificationStatus] = Query(None),
    type:   Optional[str]                = Query(None),
    db:     Session                      = Depends(get_db),
    caller: CallerContext                = Depends(get_caller),
):
    data, total, unread = notification_service.list_own(
        db, caller, page, limit, status.value if status else None, type,
    )
    response = paginated_response("Notifications retrieved successfully", data, total, page, limit)
    response["unreadCount"] = unread
    return response


@router.put("/mark-read", summary="Mark notifications as read")
def mark_read(body: MarkReadRequest, db: Session = Depends(get_db), caller: CallerContext = Depends(get_caller)):
    count = notification_service.mark_read(db, body, caller)
    return success_response(f"{count} notification(s) marked as read", {"updated": count})


@router.delete("", summary="Delete notifications")
def delete_notifications(
    body:   DeleteNotificationsRequest,
    db:     Session       = Depends(get_db),
    caller: CallerContext = Depends(get_caller),
):
    count = notification_service.delete(db, body, caller)
    return success_response(f"{count} notification(s) deleted", {"deleted": count})
