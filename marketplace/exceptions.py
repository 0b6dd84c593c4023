"""
Errors raised by the marketplace services.

They are DRF ``APIException`` subclasses, so a view can let them propagate and
DRF renders them as ``{"detail": ...}`` with the matching status code.
"""

from rest_framework import status
from rest_framework.exceptions import APIException


class MarketplaceError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Marketplace request failed."
    default_code = "marketplace_error"


class ValidationError(MarketplaceError):
    """Missing or malformed input. ``detail`` carries the per-field errors."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid input."
    default_code = "invalid"


class NotFoundError(MarketplaceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found."
    default_code = "not_found"


class AuthorizationError(MarketplaceError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "You are not allowed to perform this action."
    default_code = "not_authorized"


class SubscriptionRequiredError(AuthorizationError):
    status_code = status.HTTP_402_PAYMENT_REQUIRED
    default_detail = "An active subscription is required to create listings."
    default_code = "subscription_required"


class ConflictError(MarketplaceError):
    """The entity is no longer in the state the operation requires."""

    status_code = status.HTTP_409_CONFLICT
    default_detail = "The resource changed state; reload it and try again."
    default_code = "conflict"


class ImageUploadError(MarketplaceError):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = "Image upload failed."
    default_code = "image_upload_failed"
