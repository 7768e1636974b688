"""
Accounts app models.

Defines the custom ``User`` model.  Accounts are identified by their
email address; ``username`` is a display name and need not be unique.
Two account types exist (``admin`` and ``user``); a new account stays
unverified until its email-verification link is redeemed, and login is
refused until then.
"""

from django.conf import settings
from django.contrib.auth.base_user import BaseUserManager
from django.contrib.auth.models import AbstractUser
from django.db import models

from core.models import TimeStampedModel


def default_profile_photo() -> str:
    return settings.NOISEWATCH["DEFAULT_PROFILE_PHOTO"]


class UserType(models.TextChoices):
    ADMIN = "admin", "Administrator"
    USER = "user", "User"


class UserManager(BaseUserManager):
    """Manager for email-identified users."""

    use_in_migrations = True

    def _create_user(self, email, password, **extra_fields):
        if not email:
            raise ValueError("An email address is required.")
        email = self.normalize_email(email).lower()
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_user(self, email, password=None, **extra_fields):
        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        extra_fields.setdefault("user_type", UserType.ADMIN)
        extra_fields.setdefault("is_verified", True)
        if extra_fields.get("is_staff") is not True:
            raise ValueError("Superuser must have is_staff=True.")
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_superuser=True.")
        return self._create_user(email, password, **extra_fields)


class User(TimeStampedModel, AbstractUser):
    """
    NoiseWatch account.

    Citizens register as ``user``; administrators review reports and
    manage accounts.  Passwords are stored with Django's salted hashers.
    """

    username = models.CharField(
        max_length=150,
        blank=True,
        default="",
        verbose_name="Username",
    )
    email = models.EmailField(
        unique=True,
        verbose_name="Email Address",
    )
    user_type = models.CharField(
        max_length=10,
        choices=UserType.choices,
        default=UserType.USER,
        db_index=True,
        verbose_name="User Type",
    )
    profile_photo = models.CharField(
        max_length=500,
        default=default_profile_photo,
        verbose_name="Profile Photo URL",
    )
    is_verified = models.BooleanField(
        default=False,
        verbose_name="Email Verified",
    )

    objects = UserManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["username"]

    class Meta:
        verbose_name = "User"
        verbose_name_plural = "Users"
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.username or self.email} ({self.user_type})"

    @property
    def is_admin(self) -> bool:
        return self.user_type == UserType.ADMIN or self.is_superuser
