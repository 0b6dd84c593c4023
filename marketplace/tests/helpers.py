from decimal import Decimal

from django.contrib.auth import get_user_model

from marketplace.models import Product
from users.identity import Identity

User = get_user_model()


def make_user(email, subscribed=True, **extra):
    return User.objects.create_user(
        username=email,
        email=email,
        password="correct-horse-42",
        first_name=email.split("@")[0].title(),
        subscription_active=subscribed,
        **extra,
    )


def make_product(seller, **overrides):
    fields = {
        "name": "Road Bike",
        "description": "Aluminium frame, 54cm",
        "price": Decimal("200.00"),
        "brand": "Trek",
        "open_to_trade": True,
    }
    fields.update(overrides)
    return Product.objects.create(seller=seller, **fields)


def identity(user):
    return Identity.from_user(user)
