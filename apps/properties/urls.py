"""URL routing for the properties domain."""

from __future__ import annotations

from django.urls import path  # type: ignore

from .views import (
    PropertyCalendarBlockView,
    PropertyCalendarUnblockView,
    PropertyCalendarView,
    PropertyQuoteView,
)

urlpatterns = [
    path(
        "<int:property_id>/calendar/",
        PropertyCalendarView.as_view(),
        name="property-calendar",
    ),
    path(
        "<int:property_id>/calendar/block/",
        PropertyCalendarBlockView.as_view(),
        name="property-calendar-block",
    ),
    path(
        "<int:property_id>/calendar/unblock/",
        PropertyCalendarUnblockView.as_view(),
        name="property-calendar-unblock",
    ),
    path(
        "<int:property_id>/quote/",
        PropertyQuoteView.as_view(),
        name="property-quote",
    ),
]
