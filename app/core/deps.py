"""FastAPI dependencies shared by the scheduling endpoints."""

from app.services.booking import BookingNotifier
from app.services.notification_service import NotificationDispatcher

_dispatcher = NotificationDispatcher()


def get_notifier() -> BookingNotifier:
    """Notification hook handed to the booking engine.

    Overridden in tests through ``app.dependency_overrides``.
    """
    return _dispatcher
