"""Booking ledger and booking session URLs, mounted under ``/bookings``."""

from django.urls import path

from .views import (
    BookingListCreateView,
    DraftCreateView,
    DraftDetailView,
    DraftPassengersView,
    DraftPaymentView,
    DraftSeatsView,
)

urlpatterns = [
    path('', BookingListCreateView.as_view(), name='list'),
    path('/drafts', DraftCreateView.as_view(), name='draft-create'),
    path('/drafts/<str:session_id>', DraftDetailView.as_view(), name='draft-detail'),
    path('/drafts/<str:session_id>/passengers', DraftPassengersView.as_view(), name='draft-passengers'),
    path('/drafts/<str:session_id>/seats', DraftSeatsView.as_view(), name='draft-seats'),
    path('/drafts/<str:session_id>/payment', DraftPaymentView.as_view(), name='draft-payment'),
]
