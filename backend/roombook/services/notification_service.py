# backend/roombook/services/notification_service.py
"""
Notification Service for the Roombook platform

Renders and sends reservation emails, and writes one EmailNotification
audit row for every outcome. Runs in the background worker; nothing on
the booking path waits for it.
"""

from dataclasses import dataclass
from enum import Enum
import logging
from typing import Any, Dict, NamedTuple, Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..models.email_notification import EmailNotificationStatus, EmailNotificationType
from ..models.reservation import Reservation
from ..models.resource import Resource
from ..models.types import utcnow
from ..models.user import User
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories import RepositoryFactory
from ..repositories.email_notification_repository import EmailNotificationRepository
from .base import BaseService
from .email import EmailService
from .template_service import TemplateService

logger = logging.getLogger(__name__)


class NotificationKind(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    CANCELLED = "cancelled"
    ADMIN_ALERT = "admin-alert"
    REMINDER = "reminder"


class _KindSpec(NamedTuple):
    audit_type: EmailNotificationType
    template: str
    subject: str
    to_admin: bool


KIND_SPECS: Dict[NotificationKind, _KindSpec] = {
    NotificationKind.CREATED: _KindSpec(
        EmailNotificationType.RESERVATION_CREATED,
        "email/reservation_created.html",
        "Reservation confirmed: {resource}",
        False,
    ),
    NotificationKind.UPDATED: _KindSpec(
        EmailNotificationType.RESERVATION_UPDATED,
        "email/reservation_updated.html",
        "Reservation updated: {resource}",
        False,
    ),
    NotificationKind.CANCELLED: _KindSpec(
        EmailNotificationType.RESERVATION_CANCELLED,
        "email/reservation_cancelled.html",
        "Reservation cancelled: {resource}",
        False,
    ),
    NotificationKind.ADMIN_ALERT: _KindSpec(
        EmailNotificationType.ADMIN_NOTIFICATION,
        "email/admin_notification.html",
        "New reservation: {resource}",
        True,
    ),
    NotificationKind.REMINDER: _KindSpec(
        EmailNotificationType.RESERVATION_REMINDER,
        "email/reservation_reminder.html",
        "Reminder: {resource}",
        False,
    ),
}

REMINDER_LABELS = {"1hour": "in about an hour", "24hours": "tomorrow"}


@dataclass(frozen=True)
class NotificationResult:
    success: bool
    error: Optional[str] = None


class NotificationService(BaseService):
    """Dispatches reservation notifications and audits each attempt."""

    def __init__(
        self,
        db: Session,
        email_service: Optional[EmailService] = None,
        template_service: Optional[TemplateService] = None,
        audit_repository: Optional[EmailNotificationRepository] = None,
    ):
        super().__init__(db)
        self.email_service = email_service or EmailService(db)
        self.template_service = template_service or TemplateService(db)
        self.audit_repository = audit_repository or RepositoryFactory.create_email_notification_repository(db)

    @BaseService.measure_operation("notify")
    def notify(
        self,
        kind: NotificationKind,
        reservation: Reservation,
        resource: Resource,
        user: User,
        **extra: Any,
    ) -> NotificationResult:
        """
        Send one notification and record its outcome.

        Rendering or delivery problems are reported in the result, not raised.
        """
        spec = KIND_SPECS[kind]
        recipient = settings.admin_email if spec.to_admin else user.email
        context: Dict[str, Any] = {"reservation": reservation, "resource": resource, "user": user}
        if kind == NotificationKind.REMINDER:
            reminder_type = extra.get("reminder_type", "24hours")
            context["reminder_label"] = REMINDER_LABELS.get(reminder_type, "soon")

        try:
            html = self.template_service.render_template(spec.template, context)
        except Exception as e:
            self.logger.error(f"Failed to render {spec.template} for reservation {reservation.id}: {e}")
            result = NotificationResult(success=False, error=f"Template error: {e}")
            self._audit(spec, reservation, recipient, result, attempts=0)
            return result

        send_result = self.email_service.send_email(
            to_email=recipient,
            subject=spec.subject.format(resource=resource.name),
            html_content=html,
        )
        result = NotificationResult(success=send_result.success, error=send_result.error)
        self._audit(spec, reservation, recipient, result, attempts=send_result.attempts)
        return result

    def _audit(
        self,
        spec: _KindSpec,
        reservation: Reservation,
        recipient: str,
        result: NotificationResult,
        attempts: int,
    ) -> None:
        status = EmailNotificationStatus.SENT if result.success else EmailNotificationStatus.FAILED
        error_message = None
        if not result.success:
            error_message = f"{result.error or 'Unknown error'} (after {attempts or 1} attempt(s))"

        prometheus_metrics.record_notification(spec.audit_type.value, status.value)
        with self.transaction():
            self.audit_repository.record(
                reservation_id=reservation.id,
                notification_type=spec.audit_type.value,
                recipient=recipient,
                status=status.value,
                error_message=error_message,
                sent_at=utcnow() if result.success else None,
            )
        self.log_operation(
            "notification_recorded",
            reservation_id=reservation.id,
            notification_type=spec.audit_type.value,
            status=status.value,
        )
