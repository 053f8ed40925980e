"""Serializers for reviews.

``private_feedback`` is returned to the review's author only; the other
party and the public never receive it.
"""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Review


class ReviewCreateSerializer(serializers.Serializer):
    """Input for submitting a review; the author comes from the request."""

    reservation = serializers.UUIDField()
    rating = serializers.IntegerField(min_value=1, max_value=5)
    public_comment = serializers.CharField(required=False, allow_blank=True, default='')
    private_feedback = serializers.CharField(required=False, allow_blank=True, default='')


class ReviewSerializer(serializers.ModelSerializer):
    """Read serializer for reviews including related ids."""

    reservation_id = serializers.ReadOnlyField()
    property_id = serializers.ReadOnlyField()
    author_id = serializers.ReadOnlyField()
    subject_id = serializers.ReadOnlyField()
    private_feedback = serializers.SerializerMethodField()

    class Meta:
        model = Review
        fields = [
            'id',
            'reservation_id',
            'property_id',
            'author_id',
            'subject_id',
            'author_role',
            'rating',
            'public_comment',
            'private_feedback',
            'created_at',
        ]
        read_only_fields = fields

    def get_private_feedback(self, obj: Review) -> str | None:
        request = self.context.get('request')
        user_id = getattr(getattr(request, 'user', None), 'id', None)
        if user_id is not None and user_id == obj.author_id:
            return obj.private_feedback
        return None
