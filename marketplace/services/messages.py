from django.contrib.auth import get_user_model
from django.db import DEFAULT_DB_ALIAS
from django.db.models import Q

from ..authorization import IS_SELLER, authorize
from ..exceptions import NotFoundError, ValidationError
from ..inputs import MessageInput, validate
from ..models import Message
from .products import ProductService


class MessageService:
    """Append-only conversations attached to a listing."""

    def __init__(self, using=DEFAULT_DB_ALIAS, products=None):
        self.using = using
        self.products = products or ProductService(using=using)

    @property
    def messages(self):
        return Message.objects.using(self.using)

    def post(self, product_id, sender, body, recipient_id=None):
        payload = {'body': body}
        if recipient_id is not None:
            payload['recipient_id'] = recipient_id
        data = validate(MessageInput, payload)
        product = self.products.get(product_id)

        # Buyers write to the seller; the seller has to say which buyer they answer
        if authorize(sender, product, IS_SELLER):
            recipient_id = data.get('recipient_id')
            if recipient_id is None:
                raise ValidationError({'recipient_id': ["Required when the seller replies."]})
            if recipient_id == sender.user_id:
                raise ValidationError({'recipient_id': ["You cannot message yourself."]})
            if not get_user_model().objects.using(self.using).filter(pk=recipient_id).exists():
                raise NotFoundError(f"User {recipient_id} not found")
        else:
            recipient_id = product.seller_id

        return self.messages.create(
            product=product,
            sender_id=sender.user_id,
            recipient_id=recipient_id,
            body=data['body'],
        )

    def thread(self, product_id, actor):
        product = self.products.get(product_id)
        return (
            self.messages.filter(product=product)
            .filter(Q(sender_id=actor.user_id) | Q(recipient_id=actor.user_id))
            .select_related('sender', 'recipient')
            .order_by('created_at', 'id')
        )

    def inbox(self, actor):
        """Latest message of every (listing, counterpart) conversation, newest first."""
        messages = (
            self.messages.filter(Q(sender_id=actor.user_id) | Q(recipient_id=actor.user_id))
            .select_related('product', 'sender', 'recipient')
            .order_by('-created_at', '-id')
        )

        conversations = {}
        for msg in messages:
            other_user = msg.recipient if msg.sender_id == actor.user_id else msg.sender
            key = (msg.product_id, other_user.pk)
            if key not in conversations:
                conversations[key] = {
                    "product_id": msg.product_id,
                    "product_name": msg.product.name,
                    "other_user_id": other_user.pk,
                    "other_user_name": other_user.first_name,
                    "last_message": msg.body,
                    "timestamp": msg.created_at,
                }
        return list(conversations.values())
