import logging

from sqlalchemy.orm import Session

from repairhub.models.notification import Notification, NotificationStatus
from repairhub.models.user import User
from repairhub.schemas.caller import CallerContext
from repairhub.schemas.common import iso
from repairhub.schemas.notification import (
    NotificationCreateRequest, MarkReadRequest, DeleteNotificationsRequest, BroadcastRequest,
)
from repairhub.utils.audit import log_action
from repairhub.utils.exceptions import NotFoundException, ForbiddenException, ValidationException

logger = logging.getLogger(__name__)


def _serialize(n: Notification) -> dict:
    return {
        "id":        n.id,
        "userId":    n.userId,
        "message":   n.message,
        "type":      n.type,
        "status":    n.status.value,
        "createdAt": iso(n.createdAt),
    }


class NotificationService:

    def create(self, db: Session, data: NotificationCreateRequest, caller: CallerContext) -> dict:
        target = data.userId if data.userId is not None else caller.id
        if target != caller.id and not caller.is_admin:
            raise ForbiddenException("Only admins can notify other accounts")
        if not db.query(User).filter(User.id == target).first():
            raise NotFoundException("User")

        n = Notification(userId=target, message=data.message, type=data.type)
        db.add(n)
        db.commit()
        db.refresh(n)
        logger.info(f"Notification {n.id} stored for user {target}")
        return _serialize(n)

    def broadcast(self, db: Session, data: BroadcastRequest, caller: CallerContext) -> int:
        if data.userIds:
            ids = list(dict.fromkeys(data.userIds))
            found = {uid for (uid,) in db.query(User.id).filter(User.id.in_(ids)).all()}
            missing = [uid for uid in ids if uid not in found]
            if missing:
                raise ValidationException(details=[{"field": "userIds", "message": f"Unknown user ids: {missing}"}])
        elif data.filterCriteria:
            q = db.query(User.id)
            if data.filterCriteria.role is not None:
                q = q.filter(User.role == data.filterCriteria.role)
            if data.filterCriteria.isActive is not None:
                q = q.filter(User.isActive == data.filterCriteria.isActive)
            ids = [uid for (uid,) in q.order_by(User.id).all()]
        else:
            ids = []

        if not ids:
            raise ValidationException("No target users specified")

        db.add_all([Notification(userId=uid, message=data.message, type=data.type) for uid in ids])
        log_action(db, caller.id, "BROADCAST", "Notification", None,
                   f"Broadcast '{data.type}' to {len(ids)} accounts")
        db.commit()
        logger.info(f"Broadcast by user {caller.id} reached {len(ids)} accounts")
        return len(ids)

    def list_own(
        self, db: Session, caller: CallerContext, page: int, limit: int,
        status: str | None, type_: str | None,
    ) -> tuple[list[dict], int, int]:
        q = db.query(Notification).filter(Notification.userId == caller.id)
        if status:
            q = q.filter(Notification.status == NotificationStatus(status))
        if type_:
            q = q.filter(Notification.type == type_)

        total = q.count()
        unread = (
            db.query(Notification)
            .filter(Notification.userId == caller.id, Notification.status == NotificationStatus.UNREAD)
            .count()
        )
        items = q.order_by(Notification.id.desc()).offset((page - 1) * limit).limit(limit).all()
        return [_serialize(n) for n in items], total, unread

    def mark_read(self, db: Session, data: MarkReadRequest, caller: CallerContext) -> int:
        if not data.markAll and not data.notificationIds:
            raise ValidationException("Notification IDs required or set markAll to true")

        q = db.query(Notification).filter(
            Notification.userId == caller.id,
            Notification.status == NotificationStatus.UNREAD,
        )
        if not data.markAll:
            q = q.filter(Notification.id.in_(data.notificationIds))
        count = q.update({Notification.status: NotificationStatus.READ}, synchronize_session=False)
        db.commit()
        return count

    def delete(self, db: Session, data: DeleteNotificationsRequest, caller: CallerContext) -> int:
        if not data.deleteAll and not data.notificationIds:
            raise ValidationException("Notification IDs required or set deleteAll to true")

        q = db.query(Notification).filter(Notification.userId == caller.id)
        if not data.deleteAll:
            q = q.filter(Notification.id.in_(data.notificationIds))
        count = q.delete(synchronize_session=False)
        db.commit()
        return count


notification_service = NotificationService()
