import os
from django.core.management.base import BaseCommand
from django.contrib.auth import get_user_model


class Command(BaseCommand):
    help = (
        "Creates a marketplace admin from environment variables if one does not already exist."
    )

    def handle(self, *args, **kwargs):
        User = get_user_model()
        email = os.environ.get("DJANGO_SUPERUSER_EMAIL", "admin@admin.com")
        password = os.environ.get("DJANGO_SUPERUSER_PASSWORD")

        if not password:
            self.stderr.write(self.style.ERROR("DJANGO_SUPERUSER_PASSWORD is not set."))
            return

        if User.objects.filter(username=email).exists():
            self.stdout.write(
                self.style.WARNING(f"Admin '{email}' already exists. Skipping.")
            )
            return

        User.objects.create_superuser(
            username=email,
            email=email,
            password=password,
            role="admin",
            subscription_active=True,
        )
        self.stdout.write(self.style.SUCCESS(f"Admin '{email}' created successfully!"))
