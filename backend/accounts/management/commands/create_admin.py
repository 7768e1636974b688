"""
Management command: create_admin
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

Creates a verified administrator account, or promotes an existing
account with the same email.  Self-registration cannot produce
administrators, so this is how the first one is bootstrapped.

The command is **idempotent**: running it again for the same email
only re-applies the administrator flags (and the password, if given).

Usage::

    python manage.py create_admin --email admin@example.com --password s3cret
    python manage.py create_admin --email admin@example.com --username Barangay
"""

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError

from accounts.models import UserType


class Command(BaseCommand):
    help = "Create or promote a verified NoiseWatch administrator."

    def add_arguments(self, parser):
        parser.add_argument("--email", required=True)
        parser.add_argument("--password", default=None)
        parser.add_argument("--username", default="")

    def handle(self, *args, **options):
        User = get_user_model()
        email = options["email"].strip().lower()
        password = options["password"]

        user = User.objects.filter(email__iexact=email).first()
        if user is None:
            if not password:
                raise CommandError("--password is required when creating a new account.")
            user = User.objects.create_user(
                email=email,
                password=password,
                username=options["username"],
                user_type=UserType.ADMIN,
                is_verified=True,
                is_staff=True,
            )
            self.stdout.write(self.style.SUCCESS(f"  ✓ Created administrator {email}"))
            return

        user.user_type = UserType.ADMIN
        user.is_verified = True
        user.is_staff = True
        user.is_active = True
        if options["username"]:
            user.username = options["username"]
        if password:
            user.set_password(password)
        user.save()
        self.stdout.write(self.style.SUCCESS(f"  ✓ Promoted {email} to administrator"))
