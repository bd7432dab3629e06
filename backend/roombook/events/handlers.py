"""Event handlers - turn reservation events into notifications."""
import json
import logging
from typing import Callable, Dict, Optional

from sqlalchemy.orm import Session

from roombook.models.reservation import Reservation
from roombook.repositories.reservation_repository import ReservationRepository
from roombook.services.notification_service import NotificationKind, NotificationService

logger = logging.getLogger(__name__)


def _load_reservation(db: Session, reservation_id: str) -> Optional[Reservation]:
    """Load reservation with resource and user for notification rendering."""
    return ReservationRepository(db).get_with_details(reservation_id)


def _notify(db: Session, payload_str: str, kind: NotificationKind, *, with_admin: bool = False) -> None:
    payload = json.loads(payload_str)
    reservation = _load_reservation(db, payload["reservation_id"])
    if not reservation:
        logger.warning("Reservation %s not found for %s notification", payload["reservation_id"], kind.value)
        return

    notification_service = NotificationService(db)
    extra = {"reminder_type": payload["reminder_type"]} if "reminder_type" in payload else {}
    result = notification_service.notify(kind, reservation, reservation.resource, reservation.user, **extra)
    logger.info(
        "%s notification for %s: %s",
        kind.value,
        reservation.id,
        "sent" if result.success else f"failed ({result.error})",
    )

    if with_admin:
        admin_result = notification_service.notify(
            NotificationKind.ADMIN_ALERT, reservation, reservation.resource, reservation.user
        )
        if not admin_result.success:
            logger.warning("Admin alert for %s failed: %s", reservation.id, admin_result.error)


def handle_reservation_created(payload_str: str, db: Session) -> None:
    """Send confirmation to the user and an alert to the admin mailbox."""
    _notify(db, payload_str, NotificationKind.CREATED, with_admin=True)


def handle_reservation_updated(payload_str: str, db: Session) -> None:
    _notify(db, payload_str, NotificationKind.UPDATED)


def handle_reservation_cancelled(payload_str: str, db: Session) -> None:
    _notify(db, payload_str, NotificationKind.CANCELLED)


def handle_reservation_reminder(payload_str: str, db: Session) -> None:
    _notify(db, payload_str, NotificationKind.REMINDER)


# Registry of event type -> handler function
EVENT_HANDLERS: Dict[str, Callable[[str, Session], None]] = {
    "event:ReservationCreated": handle_reservation_created,
    "event:ReservationUpdated": handle_reservation_updated,
    "event:ReservationCancelled": handle_reservation_cancelled,
    "event:ReservationReminder": handle_reservation_reminder,
}


def process_event(event_type: str, payload: str, db: Session) -> bool:
    """
    Process an event.

    Returns True if handled, False if not an event type.
    """
    if not event_type.startswith("event:"):
        return False

    handler = EVENT_HANDLERS.get(event_type)
    if not handler:
        logger.warning("No handler for event type: %s", event_type)
        return True  # Consumed but unhandled

    handler(payload, db)
    return True
