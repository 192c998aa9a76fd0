"""URL routes for account management."""

from django.urls import path

from .views import RegisterView, SignupView, UserLoginView

urlpatterns = [
    path('login', UserLoginView.as_view(), name='login'),
    path('signup', SignupView.as_view(), name='signup'),
    path('register', RegisterView.as_view(), name='register'),
]
