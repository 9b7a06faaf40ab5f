"""Endpoints and websocket handler for realtime notifications."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, WebSocket, WebSocketDisconnect, status
from sqlalchemy.orm import Session

from unihub.application.use_cases.notifications import (
    create_notification as create_notification_uc,
    list_notifications as list_notifications_uc,
    list_pending_join_requests as list_pending_join_requests_uc,
    mark_all_notifications_read as mark_all_notifications_read_uc,
    mark_notification_read as mark_notification_read_uc,
    resolve_leader_filter,
)
from unihub.domain.entities import (
    Notification,
    NotificationFilter,
    PendingJoinRequest,
    Viewer,
    ViewerRole,
)
from unihub.domain.exceptions import NotFoundError, ValidationError
from unihub.infrastructure.database import get_db
from unihub.infrastructure.notifications import notification_manager, presence_registry
from unihub.interfaces.api.schemas import (
    MarkAllReadResponse,
    NotificationCreate,
    NotificationRead,
    PendingJoinRequestRead,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["notifications"])


def _notification_to_schema(notification: Notification) -> NotificationRead:
    return NotificationRead(
        id=notification.id or 0,
        title=notification.title,
        message=notification.message,
        project_id=notification.project_id,
        recipient_email=notification.recipient_email,
        timestamp=notification.created_at,
        read=bool(notification.read),
    )


def _pending_to_schema(request: PendingJoinRequest) -> PendingJoinRequestRead:
    return PendingJoinRequestRead(
        notification_id=request.notification_id,
        email=request.email,
        project_id=request.project_id,
        timestamp=request.created_at,
    )


def _resolve_viewer(view: str | None, viewer_email: str | None) -> Viewer | None:
    if not view:
        return None
    try:
        role = ViewerRole(view.strip().lower())
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unsupported view {view!r}",
        ) from exc
    return Viewer(role=role, email=(viewer_email or "").strip() or None)


def _scope_leader(viewer: Viewer, notification_filter: NotificationFilter | None) -> Viewer:
    if notification_filter is None:
        return viewer
    return replace(
        viewer,
        email=notification_filter.recipient_email or viewer.email,
        project_ids=notification_filter.project_ids,
    )


@router.get("", response_model=list[NotificationRead])
def list_notifications(
    leader_id: str | None = Query(default=None, alias="leaderId"),
    leader_email: str | None = Query(default=None, alias="leaderEmail"),
    view: str | None = Query(default=None),
    viewer_email: str | None = Query(default=None, alias="viewerEmail"),
    db: Session = Depends(get_db),
) -> list[NotificationRead]:
    """Return the most recent notifications, optionally scoped to a leader.

    When ``view`` is given the audience rules for that role are applied
    before returning.
    """

    viewer = _resolve_viewer(view, viewer_email)
    notification_filter = resolve_leader_filter(
        db, leader_id=leader_id, leader_email=leader_email
    )
    if viewer is not None and viewer.role is ViewerRole.LEADER:
        viewer = _scope_leader(viewer, notification_filter)
    notifications = list_notifications_uc(
        db, notification_filter=notification_filter, viewer=viewer
    )
    return [_notification_to_schema(notification) for notification in notifications]


@router.get("/pending-join-requests", response_model=list[PendingJoinRequestRead])
def list_pending_join_requests(
    leader_id: str | None = Query(default=None, alias="leaderId"),
    leader_email: str | None = Query(default=None, alias="leaderEmail"),
    db: Session = Depends(get_db),
) -> list[PendingJoinRequestRead]:
    """Return the join requests still waiting for a leader decision."""

    notification_filter = resolve_leader_filter(
        db, leader_id=leader_id, leader_email=leader_email
    )
    pending = list_pending_join_requests_uc(db, notification_filter=notification_filter)
    return [_pending_to_schema(request) for request in pending]


@router.post("", response_model=NotificationRead, status_code=status.HTTP_201_CREATED)
def create_notification(
    notification_in: NotificationCreate,
    db: Session = Depends(get_db),
) -> NotificationRead:
    """Persist a notification and fan it out to every connected client."""

    try:
        notification = create_notification_uc(
            db,
            title=notification_in.title,
            message=notification_in.message,
            project_id=notification_in.project_id,
            recipient_email=notification_in.recipient_email,
        )
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return _notification_to_schema(notification)


@router.post("/mark-read-all", response_model=MarkAllReadResponse)
def mark_all_notifications_read(
    leader_id: str | None = Query(default=None, alias="leaderId"),
    leader_email: str | None = Query(default=None, alias="leaderEmail"),
    db: Session = Depends(get_db),
) -> MarkAllReadResponse:
    notification_filter = resolve_leader_filter(
        db, leader_id=leader_id, leader_email=leader_email
    )
    updated = mark_all_notifications_read_uc(db, notification_filter=notification_filter)
    return MarkAllReadResponse(success=True, updated=updated)


@router.patch("/{notification_id}/read", response_model=NotificationRead)
def mark_notification_read(
    notification_id: int,
    db: Session = Depends(get_db),
) -> NotificationRead:
    try:
        notification = mark_notification_read_uc(db, notification_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return _notification_to_schema(notification)


def _identified_user(message: dict[str, Any]) -> str | None:
    data = message.get("data")
    candidate = data.get("userId") if isinstance(data, dict) else message.get("userId")
    if candidate is None:
        return None
    user_id = str(candidate).strip()
    return user_id or None


@router.websocket("/ws")
async def notifications_websocket(websocket: WebSocket) -> None:
    """Websocket endpoint that streams every broadcast event to the client."""

    connection_id = await notification_manager.connect(websocket)
    try:
        while True:
            try:
                message = await websocket.receive_json()
            except WebSocketDisconnect:
                raise
            except (KeyError, ValueError):
                logger.debug("Ignoring malformed frame on connection %s", connection_id)
                continue

            if not isinstance(message, dict):
                continue

            message_type = message.get("type")
            if message_type == "ping":
                await websocket.send_json({"type": "pong"})
                continue

            if message_type == "identify":
                user_id = _identified_user(message)
                if user_id is not None:
                    presence_registry.identify(connection_id, user_id)
                continue
    except WebSocketDisconnect:
        pass
    finally:
        notification_manager.disconnect(connection_id)
        presence_registry.disconnect(connection_id)
