"""Outbound notification channels."""

from traveltrek.services.notifications.dispatch import NotificationDispatcher, get_dispatcher

__all__ = ["NotificationDispatcher", "get_dispatcher"]
