"""Input shapes for the marketplace operations, validated before any state change."""

from decimal import Decimal

from rest_framework import serializers

from .exceptions import ValidationError
from .models import Product

APPROVE = 'approve'
REJECT = 'reject'


def validate(serializer_class, data, **kwargs):
    serializer = serializer_class(data=data, **kwargs)
    if not serializer.is_valid():
        raise ValidationError(serializer.errors)
    return serializer.validated_data


class ProductInput(serializers.Serializer):
    name = serializers.CharField(max_length=200)
    description = serializers.CharField()
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0'))
    currency = serializers.CharField(max_length=3, min_length=3, required=False)
    condition = serializers.ChoiceField(choices=Product.CONDITION_CHOICES, required=False)
    brand = serializers.CharField(max_length=100, required=False, allow_blank=True)
    images = serializers.ListField(child=serializers.CharField(), required=False)
    open_to_trade = serializers.BooleanField(required=False)

    def validate_currency(self, value):
        return value.upper()


class ProductSearchInput(serializers.Serializer):
    name = serializers.CharField(required=False, allow_blank=True)
    brand = serializers.CharField(required=False, allow_blank=True)
    # Bounds are not stored, so they are not held to the price column's width
    min_price = serializers.DecimalField(
        max_digits=None, decimal_places=None, min_value=Decimal('0'), required=False
    )
    max_price = serializers.DecimalField(
        max_digits=None, decimal_places=None, min_value=Decimal('0'), required=False
    )
    seller_id = serializers.IntegerField(required=False)
    open_to_trade = serializers.BooleanField(required=False)
    include_sold = serializers.BooleanField(required=False, default=False)

    def validate(self, attrs):
        low, high = attrs.get('min_price'), attrs.get('max_price')
        if low is not None and high is not None and low > high:
            raise serializers.ValidationError({'min_price': 'Must not exceed max_price.'})
        return attrs


class TradeProposalInput(serializers.Serializer):
    offered_product_id = serializers.UUIDField()
    requested_product_id = serializers.UUIDField()


class TradeResolutionInput(serializers.Serializer):
    decision = serializers.ChoiceField(choices=[APPROVE, REJECT])


class MessageInput(serializers.Serializer):
    body = serializers.CharField()
    recipient_id = serializers.IntegerField(required=False)
