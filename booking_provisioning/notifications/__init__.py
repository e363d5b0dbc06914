# booking_provisioning/notifications/__init__.py
"""Owner notifications sent at the end of provisioning."""

from .interfaces import AbstractEmailSender
from .dispatcher import NotificationDispatcher, render_welcome_email, cancellation_link

__all__ = ["AbstractEmailSender", "NotificationDispatcher", "render_welcome_email", "cancellation_link"]
