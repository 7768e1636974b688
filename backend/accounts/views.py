"""
Accounts app views.

All views follow the **Thin View** pattern: validate input via
serializers, delegate to the service layer, and return the result
wrapped in a DRF ``Response``.  **No business logic** resides here.

View Map
--------
- ``RegisterView``            — POST /auth/register
- ``VerifyEmailView``         — GET  /auth/verify-email?token=
- ``ResendVerificationView``  — POST /auth/resend-verification
- ``LoginView``               — POST /auth/login
- ``ProfileView``             — GET  /user/profile
- ``UserUpdateView``          — PUT / PATCH /user/update/<id>
- ``UserListView``            — GET  /user/getAll
- ``UserOnlyListView``        — GET  /user/getAllUsersOnly
- ``UserOnlyCountView``       — GET  /user/countUsersOnly
- ``ToggleUserStatusView``    — PUT  /user/toggle-status/<id>
- ``UserDeleteView``          — DELETE /user/delete/<id>
"""

from __future__ import annotations

from django.shortcuts import render
from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from core.domain.access import IsAdministrator

from .models import UserType
from .serializers import (
    LoginRequestSerializer,
    RegisterRequestSerializer,
    ResendVerificationSerializer,
    ToggleStatusSerializer,
    UserSerializer,
    UserSummarySerializer,
    UserUpdateSerializer,
)
from .services import (
    AuthenticationService,
    EmailVerificationService,
    UserManagementService,
    UserRegistrationService,
)


# ═══════════════════════════════════════════════════════════════════
#  Authentication Views
# ═══════════════════════════════════════════════════════════════════


class RegisterView(APIView):
    """
    POST /auth/register

    Public endpoint.  Creates an unverified account and emails the
    verification link.  An authenticated administrator may also use it
    to create another administrator.

    Request body  → ``RegisterRequestSerializer`` (JSON or multipart)
    Response body → ``{message, user}`` (201 Created)
    """

    permission_classes = [AllowAny]
    parser_classes = [JSONParser, MultiPartParser, FormParser]

    @extend_schema(
        summary="Register",
        request=RegisterRequestSerializer,
        responses={
            201: OpenApiResponse(description="Account created."),
            400: OpenApiResponse(description="Validation error."),
            403: OpenApiResponse(description="Self-registration as administrator."),
            409: OpenApiResponse(description="Email already registered."),
        },
        tags=["Auth"],
    )
    def post(self, request: Request) -> Response:
        serializer = RegisterRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = UserRegistrationService.register_user(
            serializer.validated_data,
            requested_by=request.user,
        )
        return Response(
            {
                "message": "Registration successful! Please check your email to verify.",
                "user": UserSummarySerializer(user).data,
            },
            status=status.HTTP_201_CREATED,
        )


class VerifyEmailView(APIView):
    """
    GET /auth/verify-email?token=<signed token>

    Opened from the verification email, so it answers with an HTML page
    rather than JSON.
    """

    permission_classes = [AllowAny]
    authentication_classes = []

    PAGES = {
        EmailVerificationService.VERIFIED: (
            200,
            "Email Verified Successfully!",
            "your email has been verified. You can now log in to your account.",
        ),
        EmailVerificationService.ALREADY_VERIFIED: (
            200,
            "Your email is already verified",
            "You can now log in to your account.",
        ),
        EmailVerificationService.INVALID: (
            400,
            "Invalid or expired link",
            "Please register again or request a new verification email.",
        ),
    }

    @extend_schema(
        summary="Verify email",
        parameters=[OpenApiParameter(name="token", type=str, required=True)],
        responses={200: OpenApiResponse(description="HTML page.")},
        tags=["Auth"],
    )
    def get(self, request: Request):
        outcome, user = EmailVerificationService.verify(request.query_params.get("token"))
        status_code, heading, message = self.PAGES[outcome]
        if outcome == EmailVerificationService.VERIFIED:
            message = f"Hi {user.username or user.email}, {message}"
        return render(
            request,
            "accounts/verify_email.html",
            {"heading": heading, "message": message, "success": status_code == 200},
            status=status_code,
        )


class ResendVerificationView(APIView):
    """POST /auth/resend-verification — always answers 200."""

    permission_classes = [AllowAny]
    authentication_classes = []

    @extend_schema(summary="Resend verification email", request=ResendVerificationSerializer, tags=["Auth"])
    def post(self, request: Request) -> Response:
        serializer = ResendVerificationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        EmailVerificationService.resend(serializer.validated_data["email"])
        return Response(
            {
                "message": (
                    "If the account exists and is not yet verified, "
                    "a new verification email has been sent."
                ),
            },
            status=status.HTTP_200_OK,
        )


class LoginView(APIView):
    """
    POST /auth/login

    Public endpoint.  ``{email, password}`` → ``{success, token,
    refresh, user}``.  Login is refused until the email is verified.
    """

    permission_classes = [AllowAny]
    authentication_classes = []

    @extend_schema(
        summary="Login",
        request=LoginRequestSerializer,
        responses={
            200: OpenApiResponse(description="Token pair and account."),
            400: OpenApiResponse(description="Missing fields or invalid credentials."),
            403: OpenApiResponse(description="Email not verified."),
        },
        tags=["Auth"],
    )
    def post(self, request: Request) -> Response:
        serializer = LoginRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = AuthenticationService.login(
            serializer.validated_data["email"],
            serializer.validated_data["password"],
        )
        tokens = AuthenticationService.generate_tokens(user)
        return Response(
            {
                "success": True,
                "token": tokens["access"],
                "refresh": tokens["refresh"],
                "user": UserSummarySerializer(user).data,
            },
            status=status.HTTP_200_OK,
        )


# ═══════════════════════════════════════════════════════════════════
#  Profile Views
# ═══════════════════════════════════════════════════════════════════


class ProfileView(APIView):
    """GET /user/profile — the authenticated caller's account."""

    permission_classes = [IsAuthenticated]

    @extend_schema(summary="Own profile", tags=["Users"])
    def get(self, request: Request) -> Response:
        return Response(
            {"success": True, "user": UserSummarySerializer(request.user).data},
            status=status.HTTP_200_OK,
        )


class UserUpdateView(APIView):
    """
    PUT / PATCH /user/update/<id>

    The account owner or an administrator may change ``username``,
    ``email``, ``password`` and ``profilePhoto``; only an administrator
    may change ``userType``.
    """

    permission_classes = [IsAuthenticated]
    parser_classes = [JSONParser, MultiPartParser, FormParser]

    @extend_schema(summary="Update account", request=UserUpdateSerializer, tags=["Users"])
    def put(self, request: Request, user_id: int) -> Response:
        serializer = UserUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        user = UserManagementService.update_user(
            user_id=user_id,
            data=serializer.validated_data,
            performed_by=request.user,
        )
        return Response(
            {"message": "User updated successfully", "user": UserSerializer(user).data},
            status=status.HTTP_200_OK,
        )

    @extend_schema(summary="Update account (partial)", request=UserUpdateSerializer, tags=["Users"])
    def patch(self, request: Request, user_id: int) -> Response:
        return self.put(request, user_id)


# ═══════════════════════════════════════════════════════════════════
#  Administration Views
# ═══════════════════════════════════════════════════════════════════


class UserListView(APIView):
    """GET /user/getAll — every account, newest first."""

    permission_classes = [IsAdministrator]

    @extend_schema(summary="List all accounts", tags=["Users"])
    def get(self, request: Request) -> Response:
        users = UserManagementService.list_users()
        return Response({"success": True, "users": UserSerializer(users, many=True).data})


class UserOnlyListView(APIView):
    """GET /user/getAllUsersOnly — citizen accounts only."""

    permission_classes = [IsAdministrator]

    @extend_schema(summary="List citizen accounts", tags=["Users"])
    def get(self, request: Request) -> Response:
        users = UserManagementService.list_users(user_type=UserType.USER)
        return Response({"success": True, "users": UserSerializer(users, many=True).data})


class UserOnlyCountView(APIView):
    permission_classes = [IsAdministrator]

    @extend_schema(summary="Count citizen accounts", tags=["Users"])
    def get(self, request: Request) -> Response:
        return Response({"success": True, "count": UserManagementService.count_users()})


class ToggleUserStatusView(APIView):
    """PUT /user/toggle-status/<id> with ``{"status": "active"|"inactive"}``."""

    permission_classes = [IsAdministrator]

    @extend_schema(summary="Activate or deactivate an account", request=ToggleStatusSerializer, tags=["Users"])
    def put(self, request: Request, user_id: int) -> Response:
        serializer = ToggleStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        active = serializer.validated_data["status"] == "active"
        user = UserManagementService.set_active(
            user_id=user_id,
            active=active,
            performed_by=request.user,
        )
        return Response(
            {
                "success": True,
                "message": f"User {'activated' if active else 'deactivated'} successfully",
                "user": UserSerializer(user).data,
            },
            status=status.HTTP_200_OK,
        )


class UserDeleteView(APIView):
    """DELETE /user/delete/<id> — the account's reports are kept."""

    permission_classes = [IsAdministrator]

    @extend_schema(summary="Delete an account", tags=["Users"])
    def delete(self, request: Request, user_id: int) -> Response:
        UserManagementService.delete_user(user_id=user_id, performed_by=request.user)
        return Response(
            {"success": True, "message": "User deleted successfully"},
            status=status.HTTP_200_OK,
        )
