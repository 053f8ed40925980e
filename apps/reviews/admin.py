"""Operator view of reviews, including private feedback."""

from django.contrib import admin

from .models import Review


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ('reservation', 'author', 'subject', 'author_role', 'rating', 'created_at')
    list_filter = ('author_role', 'rating')
    search_fields = ('reservation__reservation_code', 'author__email', 'subject__email')
    readonly_fields = (
        'reservation',
        'property',
        'author',
        'subject',
        'author_role',
        'rating',
        'public_comment',
        'private_feedback',
        'created_at',
    )

    def has_add_permission(self, request):  # type: ignore
        return False
