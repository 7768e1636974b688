"""
Email authentication backend.

Accounts log in with ``email`` + ``password``.  The lookup is
case-insensitive because addresses are stored lower-cased.

Registered in ``settings.AUTHENTICATION_BACKENDS`` so that Django's
``authenticate()`` call (and the admin site login) dispatches to it.
"""

from __future__ import annotations

from django.contrib.auth import get_user_model
from django.contrib.auth.backends import ModelBackend

User = get_user_model()


class EmailAuthBackend(ModelBackend):
    """
    Authenticate against ``User.email``.

    Accepts either ``email=`` or Django's default ``username=`` keyword
    (the admin login form sends the email as ``username``).
    """

    def authenticate(self, request, email=None, password=None, username=None, **kwargs):
        email = email or username or kwargs.get(User.USERNAME_FIELD)
        if not email or password is None:
            return None

        try:
            user = User.objects.get(email__iexact=email.strip())
        except User.DoesNotExist:
            # Run the default password hasher to mitigate timing attacks
            User().set_password(password)
            return None

        if user.check_password(password) and self.user_can_authenticate(user):
            return user
        return None
