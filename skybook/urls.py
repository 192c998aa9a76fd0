"""SkyBook URL configuration."""

from django.urls import include, path

from core.views import HealthCheckView

urlpatterns = [
    path('', HealthCheckView.as_view(), name='health'),
    path('auth/', include(('accounts.urls', 'accounts'), namespace='accounts')),
    path('flights', include(('flights.urls', 'flights'), namespace='flights')),
    path('bookings', include(('flights.booking_urls', 'bookings'), namespace='bookings')),
]
