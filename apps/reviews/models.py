"""Models for the review domain.

Defines the ``Review`` entity: the rating and comments one party of a
completed reservation leaves about the other. Each party can submit
exactly one review per reservation and a submitted review is final.
"""

from __future__ import annotations

from datetime import date

from django.conf import settings  # type: ignore
from django.core.validators import MaxValueValidator, MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from .visibility import is_visible


class Review(models.Model):
    """A blind review of one reservation party by the other."""

    class AuthorRole(models.TextChoices):
        GUEST = 'guest', _('Guest')
        HOST = 'host', _('Host')

    reservation = models.ForeignKey(
        'bookings.Reservation', on_delete=models.PROTECT, related_name='reviews'
    )
    property = models.ForeignKey(
        'properties.Property', on_delete=models.CASCADE, related_name='reviews'
    )
    author = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='reviews_written'
    )
    subject = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='reviews_received'
    )
    author_role = models.CharField(max_length=10, choices=AuthorRole.choices)
    rating = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(5)],
        help_text=_('Rating from 1 to 5')
    )
    public_comment = models.TextField(blank=True)
    # Never shown to the other party; operator tooling only
    private_feedback = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(fields=['reservation', 'author'], name='one_review_per_party'),
            models.CheckConstraint(condition=~models.Q(author=models.F('subject')), name='review_not_self'),
            models.CheckConstraint(
                condition=models.Q(rating__gte=1, rating__lte=5), name='review_rating_range'
            ),
        ]
        indexes = [
            models.Index(fields=['property', '-created_at'], name='review_property_created_idx'),
            models.Index(fields=['subject'], name='review_subject_idx'),
        ]

    def __str__(self) -> str:
        return f"Review by {self.author_id} on reservation {self.reservation_id} (Rating: {self.rating})"

    def is_disclosed(self, today: date | None = None) -> bool:
        roles = set(
            Review.objects.filter(reservation_id=self.reservation_id).values_list('author_role', flat=True)
        )
        return is_visible(
            guest_review_exists=Review.AuthorRole.GUEST in roles,
            host_review_exists=Review.AuthorRole.HOST in roles,
            check_out=self.reservation.check_out,
            today=today or timezone.localdate(),
        )
