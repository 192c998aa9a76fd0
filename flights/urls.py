"""Flight URLs, mounted under ``/flights``."""

from django.urls import path

from .views import FlightDetailView, FlightSearchView, FlightSeatMapView

urlpatterns = [
    path('', FlightSearchView.as_view(), name='search'),
    path('/<str:flight_id>', FlightDetailView.as_view(), name='detail'),
    path('/<str:flight_id>/seats', FlightSeatMapView.as_view(), name='seats'),
]
