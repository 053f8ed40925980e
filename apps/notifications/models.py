"""Notification model.

An inbox entry created when something happens to one of the user's
reservations. Entries are created by the event handlers in
``handlers.py`` and can only be marked as read by their recipient.
"""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore


class Notification(models.Model):
    """A message sent to a user about some event."""

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='notifications'
    )
    event = models.CharField(max_length=64)
    reservation_id = models.UUIDField(null=True, blank=True, db_index=True)
    title = models.CharField(max_length=255)
    message = models.TextField()
    payload = models.JSONField(default=dict, blank=True)
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['user', 'is_read'], name='notification_user_read_idx'),
        ]

    def __str__(self) -> str:
        return f"Notification to {self.user_id}: {self.title}"
