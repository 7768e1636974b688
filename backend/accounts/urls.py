"""
Accounts app URL configuration.

Two route groups, mounted by ``noisewatch/urls.py`` as::

    path("auth/", include((auth_patterns, "auth")))
    path("user/", include((user_patterns, "user")))

Endpoint Map
------------
Authentication
    POST   /auth/register                 → RegisterView
    GET    /auth/verify-email?token=      → VerifyEmailView
    POST   /auth/resend-verification      → ResendVerificationView
    POST   /auth/login                    → LoginView
    POST   /auth/token/refresh            → TokenRefreshView (SimpleJWT)

Accounts
    GET    /user/profile                  → ProfileView
    PUT    /user/update/<id>              → UserUpdateView
    GET    /user/getAll                   → UserListView
    GET    /user/getAllUsersOnly          → UserOnlyListView
    GET    /user/countUsersOnly           → UserOnlyCountView
    PUT    /user/toggle-status/<id>       → ToggleUserStatusView
    DELETE /user/delete/<id>              → UserDeleteView
"""

from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView

from . import views

auth_patterns = [
    path("register", views.RegisterView.as_view(), name="register"),
    path("verify-email", views.VerifyEmailView.as_view(), name="verify-email"),
    path(
        "resend-verification",
        views.ResendVerificationView.as_view(),
        name="resend-verification",
    ),
    path("login", views.LoginView.as_view(), name="login"),
    path("token/refresh", TokenRefreshView.as_view(), name="token-refresh"),
]

user_patterns = [
    path("profile", views.ProfileView.as_view(), name="profile"),
    path("update/<int:user_id>", views.UserUpdateView.as_view(), name="update"),
    path("getAll", views.UserListView.as_view(), name="list"),
    path("getAllUsersOnly", views.UserOnlyListView.as_view(), name="list-users-only"),
    path("countUsersOnly", views.UserOnlyCountView.as_view(), name="count-users-only"),
    path(
        "toggle-status/<int:user_id>",
        views.ToggleUserStatusView.as_view(),
        name="toggle-status",
    ),
    path("delete/<int:user_id>", views.UserDeleteView.as_view(), name="delete"),
]
