import logging

import stripe
from django.conf import settings
from django.contrib.auth.hashers import make_password
from django.core.mail import send_mail
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.views import TokenObtainPairView

from .models import CustomUser
from .subscriptions import apply_subscription_event, create_checkout_session
from api.serializers import (
    MarketplaceTokenObtainPairSerializer,
    RegisterSerializer,
    UserSerializer,
)

logger = logging.getLogger(__name__)


@api_view(["POST"])
@permission_classes([AllowAny])
def register_user(request):
    serializer = RegisterSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=400)
    data = serializer.validated_data

    user = CustomUser.objects.create(
        username=data["email"],
        email=data["email"],
        password=make_password(data["password"]),
        first_name=data.get("name", ""),
    )

    send_mail(
        subject="Welcome to the marketplace!",
        message=f"Hi {user.first_name or user.email},\n\nYour account is ready.",
        from_email=settings.DEFAULT_FROM_EMAIL,
        recipient_list=[user.email],
        fail_silently=True,
    )
    logger.info("Registered user %s", user.pk)

    return Response({"status": "Account Created!", "user_id": user.id}, status=201)


class MarketplaceTokenObtainPairView(TokenObtainPairView):
    serializer_class = MarketplaceTokenObtainPairSerializer


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def get_current_user(request):
    """Returns the currently logged in user's profile"""
    serializer = UserSerializer(request.user)
    return Response(serializer.data)


@api_view(["POST"])
@permission_classes([IsAuthenticated])
def subscription_checkout(request):
    """Starts a Stripe checkout for the listing subscription."""
    if request.user.subscription_active:
        return Response({"error": "Subscription already active"}, status=409)
    try:
        session = create_checkout_session(request.user)
    except stripe.StripeError as e:
        logger.error("Stripe checkout failed for user %s: %s", request.user.pk, e)
        return Response({"error": "Payment provider unavailable"}, status=502)
    return Response({"checkout_url": session.url, "session_id": session.id})


@api_view(["POST"])
@authentication_classes([])
@permission_classes([AllowAny])  # Stripe signs the payload instead
def stripe_webhook(request):
    payload = request.body
    signature = request.META.get("HTTP_STRIPE_SIGNATURE", "")
    try:
        event = stripe.Webhook.construct_event(
            payload, signature, settings.STRIPE_WEBHOOK_SECRET
        )
    except (ValueError, stripe.SignatureVerificationError) as e:
        logger.warning("Rejected Stripe webhook: %s", e)
        return Response({"error": "Invalid webhook"}, status=400)

    apply_subscription_event(event)
    return Response({"received": True})
