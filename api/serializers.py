from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer
from users.models import CustomUser
from marketplace.models import Product, TradeProposal, Message


# 1. User Serializers
class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = CustomUser
        fields = ['id', 'username', 'email', 'first_name', 'role', 'subscription_active']
        read_only_fields = fields


class PublicUserSerializer(serializers.ModelSerializer):
    """What other marketplace users get to see about a seller or trader."""

    class Meta:
        model = CustomUser
        fields = ['id', 'first_name']


class RegisterSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(min_length=8, write_only=True)
    name = serializers.CharField(max_length=150, required=False, allow_blank=True)

    def validate_email(self, value):
        value = value.lower()
        if CustomUser.objects.filter(username=value).exists():
            raise serializers.ValidationError("An account with this email already exists.")
        return value


class MarketplaceTokenObtainPairSerializer(TokenObtainPairSerializer):
    """Adds the claims the frontend reads without another round trip."""

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['email'] = user.email
        token['role'] = user.role
        return token


# 2. Product Serializer
class ProductSerializer(serializers.ModelSerializer):
    seller = PublicUserSerializer(read_only=True)

    class Meta:
        model = Product
        fields = [
            'id', 'seller', 'name', 'description', 'price', 'currency', 'condition',
            'brand', 'images', 'open_to_trade', 'status', 'sold_at', 'sold_via_trade',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields


# 3. Trade Serializer
class TradeProposalSerializer(serializers.ModelSerializer):
    offered_product = ProductSerializer(read_only=True)
    requested_product = ProductSerializer(read_only=True)
    proposer_name = serializers.CharField(source='proposer.first_name', read_only=True)
    owner_name = serializers.CharField(source='owner.first_name', read_only=True)

    class Meta:
        model = TradeProposal
        fields = [
            'id', 'offered_product', 'requested_product', 'proposer', 'proposer_name',
            'owner', 'owner_name', 'status', 'created_at', 'resolved_at',
        ]
        read_only_fields = fields


# 4. Chat Serializer
class MessageSerializer(serializers.ModelSerializer):
    sender_name = serializers.CharField(source='sender.first_name', read_only=True)

    class Meta:
        model = Message
        fields = ['id', 'product', 'sender', 'sender_name', 'recipient', 'body', 'created_at']
        read_only_fields = fields
