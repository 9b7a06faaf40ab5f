"""Persistence helpers for notification entities."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import false, or_
from sqlalchemy.orm import Query, Session

from unihub.domain.entities import Notification, NotificationFilter
from unihub.infrastructure.models import NotificationModel
from unihub.utils import storage_now, to_app_timezone, to_storage_datetime


class NotificationRepository:
    """Provide CRUD operations for :class:`Notification` objects."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, notification_id: int) -> Notification | None:
        model = self.session.get(NotificationModel, notification_id)
        return self._to_entity(model) if model is not None else None

    def list_recent(
        self,
        *,
        notification_filter: NotificationFilter | None = None,
        limit: int | None = 50,
    ) -> Sequence[Notification]:
        query = self._apply_filter(
            self.session.query(NotificationModel), notification_filter
        )
        query = query.order_by(
            NotificationModel.created_at.desc(), NotificationModel.id.desc()
        )
        if limit is not None:
            query = query.limit(limit)
        return [self._to_entity(model) for model in query.all()]

    def create(self, notification: Notification) -> Notification:
        model = NotificationModel()
        model.created_at = to_storage_datetime(notification.created_at) or storage_now()
        model.title = notification.title
        model.message = notification.message
        model.project_id = notification.project_id
        model.recipient_email = notification.recipient_email
        model.read = bool(notification.read)
        model.actor_email = notification.actor_email
        model.activity_title = notification.activity_title
        model.decision = notification.decision
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def mark_as_read(self, notification_id: int) -> Notification | None:
        """Flag a single notification as read and return it."""

        model = self.session.get(NotificationModel, notification_id)
        if model is None:
            return None
        if not model.read:
            model.read = True
            self.session.add(model)
            self.session.commit()
            self.session.refresh(model)
        return self._to_entity(model)

    def mark_all_as_read(
        self, *, notification_filter: NotificationFilter | None = None
    ) -> int:
        """Flag every unread notification matching the filter as read."""

        query = self._apply_filter(
            self.session.query(NotificationModel), notification_filter
        ).filter(NotificationModel.read.is_(False))
        updated = query.update(
            {NotificationModel.read: True}, synchronize_session=False
        )
        if updated:
            self.session.commit()
        return int(updated or 0)

    def mark_join_requests_as_read(
        self, *, project_id: str, message: str, title: str
    ) -> int:
        """Flag the join requests carrying ``message`` for ``project_id``."""

        updated = (
            self.session.query(NotificationModel)
            .filter(
                NotificationModel.title == title,
                NotificationModel.project_id == project_id,
                NotificationModel.message == message,
                NotificationModel.read.is_(False),
            )
            .update({NotificationModel.read: True}, synchronize_session=False)
        )
        if updated:
            self.session.commit()
        return int(updated or 0)

    @staticmethod
    def _apply_filter(
        query: Query, notification_filter: NotificationFilter | None
    ) -> Query:
        if notification_filter is None:
            return query
        clauses = []
        if notification_filter.project_ids:
            clauses.append(
                NotificationModel.project_id.in_(sorted(notification_filter.project_ids))
            )
        if notification_filter.recipient_email:
            clauses.append(
                NotificationModel.recipient_email == notification_filter.recipient_email
            )
        if not clauses:
            return query.filter(false())
        return query.filter(or_(*clauses))

    @staticmethod
    def _to_entity(model: NotificationModel) -> Notification:
        return Notification(
            id=model.id,
            title=model.title,
            message=model.message,
            project_id=model.project_id,
            recipient_email=model.recipient_email,
            read=bool(model.read),
            created_at=to_app_timezone(model.created_at),
            actor_email=model.actor_email,
            activity_title=model.activity_title,
            decision=model.decision,
        )


__all__ = ["NotificationRepository"]
