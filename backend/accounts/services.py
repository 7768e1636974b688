"""
Accounts Service Layer.

This module is the **single source of truth** for all business logic
within the ``accounts`` app.  Views must remain *thin*: they validate
input through serializers, call a service method, and return the
result wrapped in a DRF ``Response``.

Architecture
------------
- ``UserRegistrationService``   — account creation + verification email.
- ``EmailVerificationService``  — signed one-time verification tokens.
- ``AuthenticationService``     — email/password login + JWT issuance.
- ``UserManagementService``     — profile updates and admin operations.
"""

from __future__ import annotations

import logging
import smtplib
from typing import Any

from django.conf import settings
from django.contrib.auth import authenticate as django_authenticate
from django.contrib.auth import get_user_model
from django.core import signing
from django.core.files.uploadedfile import UploadedFile
from django.core.mail import send_mail
from django.db import IntegrityError, transaction
from django.db.models import QuerySet
from django.urls import reverse
from rest_framework_simplejwt.tokens import RefreshToken

from core.domain.access import is_admin, require_self_or_admin
from core.domain.exceptions import (
    AuthenticationFailed,
    Conflict,
    DomainError,
    NotFound,
    PermissionDenied,
)
from core.media import MediaStorageService

from .models import UserType

User = get_user_model()

logger = logging.getLogger(__name__)

PROFILE_PHOTO_FOLDER = "user-profiles"


# ═══════════════════════════════════════════════════════════════════
#  Email Verification Service
# ═══════════════════════════════════════════════════════════════════


class EmailVerificationService:
    """
    Issues and redeems email-verification tokens.

    Tokens are ``django.core.signing`` payloads carrying the account
    email, signed with ``SECRET_KEY`` and a dedicated salt.  They expire
    after ``NOISEWATCH["EMAIL_VERIFICATION_MAX_AGE"]`` seconds.
    """

    SALT = "accounts.email-verification"

    VERIFIED = "verified"
    ALREADY_VERIFIED = "already_verified"
    INVALID = "invalid"

    @staticmethod
    def make_token(user: User) -> str:
        return signing.dumps({"email": user.email}, salt=EmailVerificationService.SALT)

    @staticmethod
    def build_link(user: User) -> str:
        base = settings.NOISEWATCH["PUBLIC_URL"].rstrip("/")
        token = EmailVerificationService.make_token(user)
        return f"{base}{reverse('auth:verify-email')}?token={token}"

    @staticmethod
    def send(user: User) -> bool:
        """
        Email the verification link to ``user``.

        Delivery problems are logged and reported through the return
        value; they never abort the calling request.
        """
        link = EmailVerificationService.build_link(user)
        try:
            send_mail(
                subject="Verify Your Email",
                message=(
                    f"Hi {user.username or user.email}, please verify your "
                    f"email by clicking this link: {link}"
                ),
                from_email=settings.DEFAULT_FROM_EMAIL,
                recipient_list=[user.email],
            )
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("Verification email to %s failed: %s", user.email, exc)
            return False
        logger.info("Verification email sent to %s", user.email)
        return True

    @staticmethod
    def verify(token: str | None) -> tuple[str, User | None]:
        """
        Redeem a verification token.

        Returns
        -------
        tuple[str, User | None]
            One of ``VERIFIED``, ``ALREADY_VERIFIED`` or ``INVALID`` plus
            the matching account (``None`` when invalid).

        The flag is flipped with a conditional ``UPDATE`` so concurrent
        redemptions of the same link verify the account exactly once.
        """
        if not token:
            return EmailVerificationService.INVALID, None
        try:
            payload = signing.loads(
                token,
                salt=EmailVerificationService.SALT,
                max_age=settings.NOISEWATCH["EMAIL_VERIFICATION_MAX_AGE"],
            )
        except signing.SignatureExpired:
            logger.info("Expired verification token presented")
            return EmailVerificationService.INVALID, None
        except signing.BadSignature:
            logger.warning("Tampered verification token presented")
            return EmailVerificationService.INVALID, None

        email = payload.get("email") if isinstance(payload, dict) else None
        user = User.objects.filter(email__iexact=email or "").first()
        if user is None:
            return EmailVerificationService.INVALID, None

        updated = User.objects.filter(pk=user.pk, is_verified=False).update(is_verified=True)
        if not updated:
            return EmailVerificationService.ALREADY_VERIFIED, user

        user.is_verified = True
        logger.info("Email verified for user %s", user.pk)
        return EmailVerificationService.VERIFIED, user

    @staticmethod
    def resend(email: str) -> None:
        """Re-send the link for an existing, still unverified account."""
        user = User.objects.filter(email__iexact=email.strip()).first()
        if user is None or user.is_verified:
            logger.info("Verification resend skipped for %s", email)
            return
        EmailVerificationService.send(user)


# ═══════════════════════════════════════════════════════════════════
#  Registration Service
# ═══════════════════════════════════════════════════════════════════


class UserRegistrationService:
    """
    Encapsulates the self-service registration flow.
    """

    @staticmethod
    def register_user(
        validated_data: dict[str, Any],
        *,
        requested_by: Any = None,
    ) -> User:
        """
        Create a new, unverified account and send its verification link.

        Parameters
        ----------
        validated_data : dict
            Cleaned data from ``RegisterRequestSerializer``:
            ``username``, ``email``, ``password``, ``user_type`` and the
            optional ``profile_photo`` upload.
        requested_by : User | AnonymousUser | None
            The caller.  Only an authenticated administrator may create
            another administrator.

        Raises
        ------
        core.domain.exceptions.PermissionDenied
            Self-registration as ``admin``.
        core.domain.exceptions.Conflict
            The email is already registered.
        """
        data = dict(validated_data)
        password = data.pop("password")
        photo: UploadedFile | None = data.pop("profile_photo", None)
        data["email"] = data["email"].strip().lower()

        if data.get("user_type") == UserType.ADMIN and not is_admin(requested_by):
            raise PermissionDenied("Only administrators can create administrator accounts.")

        if User.objects.filter(email__iexact=data["email"]).exists():
            raise Conflict("User already exists")

        stored = None
        if photo is not None:
            stored = MediaStorageService.store(photo, PROFILE_PHOTO_FOLDER)
            data["profile_photo"] = stored.url

        try:
            with transaction.atomic():
                user = User.objects.create_user(password=password, **data)
        except IntegrityError:
            if stored is not None:
                MediaStorageService.discard(stored.name)
            raise Conflict("User already exists")

        logger.info("Registered user %s (%s)", user.pk, user.user_type)
        EmailVerificationService.send(user)
        return user


# ═══════════════════════════════════════════════════════════════════
#  Authentication Service
# ═══════════════════════════════════════════════════════════════════


class AuthenticationService:
    """
    Handles email/password login and JWT token generation.
    """

    @staticmethod
    def login(email: str | None, password: str | None) -> User:
        """
        Validate credentials and return the account.

        Raises
        ------
        DomainError
            ``email`` or ``password`` missing.
        AuthenticationFailed
            Unknown email, wrong password, or deactivated account.
        PermissionDenied
            Correct credentials but the email is not verified yet.
        """
        if not email or not password:
            raise DomainError("Email and password are required")

        user = django_authenticate(email=email, password=password)
        if user is None:
            raise AuthenticationFailed("Invalid credentials")

        if not user.is_verified:
            raise PermissionDenied("Please verify your email before logging in.")

        return user

    @staticmethod
    def generate_tokens(user: User) -> dict[str, str]:
        """
        Issue a JWT access/refresh pair.  The access token carries the
        ``userType`` claim so clients can route without another call.
        """
        refresh = RefreshToken.for_user(user)
        refresh["userType"] = user.user_type
        access = refresh.access_token
        return {
            "access": str(access),
            "refresh": str(refresh),
        }


# ═══════════════════════════════════════════════════════════════════
#  User Management Service
# ═══════════════════════════════════════════════════════════════════


class UserManagementService:
    """
    Profile updates (self or admin) and administrator-only account
    operations: listing, activation toggling, and deletion.
    """

    @staticmethod
    def get_user(user_id: Any) -> User:
        try:
            return User.objects.get(pk=user_id)
        except (User.DoesNotExist, ValueError, TypeError):
            raise NotFound("User not found")

    @staticmethod
    def list_users(*, user_type: str | None = None) -> QuerySet[User]:
        qs = User.objects.all().order_by("-created_at")
        if user_type is not None:
            qs = qs.filter(user_type=user_type)
        return qs

    @staticmethod
    def count_users(*, user_type: str = UserType.USER) -> int:
        return User.objects.filter(user_type=user_type).count()

    @staticmethod
    def update_user(
        *,
        user_id: Any,
        data: dict[str, Any],
        performed_by: User,
    ) -> User:
        """
        Apply a profile update.

        Parameters
        ----------
        data : dict
            Any of ``username``, ``email``, ``password``, ``user_type``,
            ``profile_photo`` (upload).

        Raises
        ------
        NotFound
            Unknown ``user_id``.
        PermissionDenied
            Updating someone else's profile, or a non-admin changing
            ``user_type``.
        Conflict
            The new email belongs to another account.
        """
        user = UserManagementService.get_user(user_id)
        require_self_or_admin(performed_by, user.pk, "You can only update your own profile.")

        data = dict(data)
        if "user_type" in data and not is_admin(performed_by):
            raise PermissionDenied("Only administrators can change the account type.")

        update_fields: list[str] = []

        email = data.get("email")
        if email:
            email = email.strip().lower()
            if User.objects.filter(email__iexact=email).exclude(pk=user.pk).exists():
                raise Conflict("Email is already in use")
            user.email = email
            update_fields.append("email")

        if data.get("username"):
            user.username = data["username"]
            update_fields.append("username")

        if data.get("user_type"):
            user.user_type = data["user_type"]
            update_fields.append("user_type")

        if data.get("password"):
            user.set_password(data["password"])
            update_fields.append("password")

        if not update_fields and data.get("profile_photo") is None:
            raise DomainError("No fields provided to update")

        stored = None
        photo = data.get("profile_photo")
        if photo is not None:
            stored = MediaStorageService.store(photo, PROFILE_PHOTO_FOLDER)
            user.profile_photo = stored.url
            update_fields.append("profile_photo")

        try:
            user.save(update_fields=update_fields + ["updated_at"])
        except IntegrityError:
            if stored is not None:
                MediaStorageService.discard(stored.name)
            raise Conflict("Email is already in use")

        logger.info(
            "User %s updated by %s: %s",
            user.pk, performed_by.pk, ", ".join(update_fields),
        )
        return user

    @staticmethod
    def set_active(*, user_id: Any, active: bool, performed_by: User) -> User:
        user = UserManagementService.get_user(user_id)
        if user.pk == performed_by.pk and not active:
            raise DomainError("You cannot deactivate your own account.")

        user.is_active = active
        user.save(update_fields=["is_active", "updated_at"])
        logger.info(
            "User %s %s by %s",
            user.pk, "activated" if active else "deactivated", performed_by.pk,
        )
        return user

    @staticmethod
    def delete_user(*, user_id: Any, performed_by: User) -> None:
        """
        Delete an account.  Its noise reports are kept and lose their
        owner reference (``on_delete=SET_NULL``).
        """
        user = UserManagementService.get_user(user_id)
        if user.pk == performed_by.pk:
            raise DomainError("You cannot delete your own account.")

        pk = user.pk
        user.delete()
        logger.info("User %s deleted by %s", pk, performed_by.pk)
