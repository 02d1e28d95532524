"""Authentication and account routes under /api/v1/."""

from django.urls import path

from .views import RefreshView, SignInView, current_user

urlpatterns = [
    path("auth/signin/", SignInView.as_view(), name="signin"),
    path("auth/refresh/", RefreshView.as_view(), name="token_refresh"),
    path("account/profile/", current_user, name="profile"),
]
