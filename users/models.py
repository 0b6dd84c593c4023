# users/models.py
from django.contrib.auth.models import AbstractUser
from django.db import models


class CustomUser(AbstractUser):
    ROLE_CHOICES = (('user', 'User'), ('admin', 'Admin'))
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default='user')

    # Paid listing subscription, flipped by the Stripe webhook
    subscription_active = models.BooleanField(default=False)
    stripe_customer_id = models.CharField(max_length=255, blank=True, null=True)
    subscription_updated_at = models.DateTimeField(null=True, blank=True)

    def __str__(self):
        return self.email
