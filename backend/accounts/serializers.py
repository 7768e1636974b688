"""
Accounts app serializers.

Contains all Request and Response serializers for the accounts API.
Serializers handle field definitions and basic validation; all domain
rules are delegated to ``services.py``.

Field names on the wire follow the clients' camelCase convention
(``userType``, ``profilePhoto`` …) and are mapped onto the model's
snake_case attributes with ``source=``.
"""

from __future__ import annotations

from rest_framework import serializers

from .models import User, UserType

MIN_PASSWORD_LENGTH = 6


def validate_image_upload(upload):
    content_type = getattr(upload, "content_type", "") or ""
    if not content_type.startswith("image/"):
        raise serializers.ValidationError("Profile photo must be an image file.")
    return upload


# ═══════════════════════════════════════════════════════════════════
#  Response Serializers
# ═══════════════════════════════════════════════════════════════════


class UserSerializer(serializers.ModelSerializer):
    """
    Public representation of an account (never includes the password).

    Both ``id`` and ``_id`` are emitted; older clients read ``_id``.
    """

    _id = serializers.IntegerField(source="pk", read_only=True)
    userType = serializers.CharField(source="user_type", read_only=True)
    profilePhoto = serializers.CharField(source="profile_photo", read_only=True)
    isVerified = serializers.BooleanField(source="is_verified", read_only=True)
    isActive = serializers.BooleanField(source="is_active", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = User
        fields = [
            "id",
            "_id",
            "username",
            "email",
            "userType",
            "profilePhoto",
            "isVerified",
            "isActive",
            "createdAt",
            "updatedAt",
        ]
        read_only_fields = fields


class UserSummarySerializer(serializers.ModelSerializer):
    """Compact account payload returned by register, login, and profile."""

    _id = serializers.IntegerField(source="pk", read_only=True)
    userType = serializers.CharField(source="user_type", read_only=True)
    profilePhoto = serializers.CharField(source="profile_photo", read_only=True)

    class Meta:
        model = User
        fields = ["id", "_id", "username", "email", "userType", "profilePhoto"]
        read_only_fields = fields


# ═══════════════════════════════════════════════════════════════════
#  Request Serializers
# ═══════════════════════════════════════════════════════════════════


class RegisterRequestSerializer(serializers.Serializer):
    """
    Validates new-account registration data (JSON or multipart).

    The ``password`` field is write-only and is hashed by the service
    layer before persisting.
    """

    username = serializers.CharField(max_length=150, required=False, allow_blank=True, default="")
    email = serializers.EmailField()
    password = serializers.CharField(
        write_only=True,
        min_length=MIN_PASSWORD_LENGTH,
        style={"input_type": "password"},
        help_text=f"Minimum {MIN_PASSWORD_LENGTH} characters.",
    )
    userType = serializers.ChoiceField(
        source="user_type",
        choices=UserType.choices,
        default=UserType.USER,
    )
    profilePhoto = serializers.FileField(
        source="profile_photo",
        required=False,
        allow_null=True,
        validators=[validate_image_upload],
    )


class LoginRequestSerializer(serializers.Serializer):
    """
    ``email`` + ``password``.  Both are optional at this level so the
    service can answer a missing field with the fixed
    ``"Email and password are required"`` message.
    """

    email = serializers.CharField(required=False, allow_blank=True, default="")
    password = serializers.CharField(
        required=False,
        allow_blank=True,
        default="",
        write_only=True,
        style={"input_type": "password"},
    )


class ResendVerificationSerializer(serializers.Serializer):
    email = serializers.EmailField()


class UserUpdateSerializer(serializers.Serializer):
    """
    Partial profile update.  Omitted or blank fields are left unchanged.
    """

    username = serializers.CharField(max_length=150, required=False, allow_blank=True)
    email = serializers.EmailField(required=False, allow_blank=True)
    password = serializers.CharField(
        required=False,
        allow_blank=True,
        write_only=True,
        style={"input_type": "password"},
    )
    userType = serializers.ChoiceField(
        source="user_type",
        choices=UserType.choices,
        required=False,
    )
    profilePhoto = serializers.FileField(
        source="profile_photo",
        required=False,
        validators=[validate_image_upload],
    )

    def validate_password(self, value: str) -> str:
        if value and len(value) < MIN_PASSWORD_LENGTH:
            raise serializers.ValidationError(
                f"Ensure this field has at least {MIN_PASSWORD_LENGTH} characters."
            )
        return value


class ToggleStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=["active", "inactive"])
