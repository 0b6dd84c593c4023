"""
Paid listing subscription, kept in sync from Stripe.

Only ``subscription_active`` matters to the marketplace; everything else about
billing stays on Stripe's side.
"""

import logging

import stripe
from django.conf import settings
from django.utils import timezone

from .models import CustomUser

logger = logging.getLogger(__name__)

ACTIVE_STATUSES = ("active", "trialing")


def create_checkout_session(user):
    session = stripe.checkout.Session.create(
        api_key=settings.STRIPE_SECRET_KEY,
        mode="subscription",
        line_items=[{"price": settings.STRIPE_SUBSCRIPTION_PRICE_ID, "quantity": 1}],
        client_reference_id=str(user.pk),
        customer_email=user.email,
        metadata={"user_id": str(user.pk)},
        success_url=f"{settings.FRONTEND_URL}/subscription/success",
        cancel_url=f"{settings.FRONTEND_URL}/subscription/cancel",
    )
    return session


def _set_subscription(users, active, customer_id=None):
    changes = {"subscription_active": active, "subscription_updated_at": timezone.now()}
    if customer_id:
        changes["stripe_customer_id"] = customer_id
    return users.update(**changes)


def apply_subscription_event(event):
    """Apply a verified Stripe event. Returns the number of users changed."""
    event_type = event["type"]
    obj = event["data"]["object"]
    # StripeObject stopped being a dict subclass in stripe-python 15
    if hasattr(obj, "to_dict"):
        obj = obj.to_dict()

    if event_type == "checkout.session.completed":
        user_id = obj.get("client_reference_id") or (obj.get("metadata") or {}).get("user_id")
        if not user_id:
            logger.warning("Checkout session %s carries no user reference", obj.get("id"))
            return 0
        changed = _set_subscription(
            CustomUser.objects.filter(pk=user_id), True, customer_id=obj.get("customer")
        )
    elif event_type == "customer.subscription.updated":
        changed = _set_subscription(
            CustomUser.objects.filter(stripe_customer_id=obj.get("customer")),
            obj.get("status") in ACTIVE_STATUSES,
        )
    elif event_type == "customer.subscription.deleted":
        changed = _set_subscription(
            CustomUser.objects.filter(stripe_customer_id=obj.get("customer")), False
        )
    else:
        logger.debug("Ignoring Stripe event %s", event_type)
        return 0

    logger.info("Stripe %s updated %s user(s)", event_type, changed)
    return changed
