import uuid

from django.conf import settings
from django.db import models


class Product(models.Model):
    AVAILABLE = 'available'
    SOLD = 'sold'
    STATUS_CHOICES = ((AVAILABLE, 'Available'), (SOLD, 'Sold'))

    CONDITION_CHOICES = (('New', 'New'), ('Used', 'Used'))

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    seller = models.ForeignKey(
        settings.AUTH_USER_MODEL, related_name='products', on_delete=models.CASCADE
    )
    name = models.CharField(max_length=200)
    description = models.TextField()
    price = models.DecimalField(max_digits=10, decimal_places=2)
    currency = models.CharField(max_length=3, default='USD')
    condition = models.CharField(max_length=10, choices=CONDITION_CHOICES, default='New')
    brand = models.CharField(max_length=100, blank=True)

    # Ordered, fully-qualified image URLs
    images = models.JSONField(default=list, blank=True)
    open_to_trade = models.BooleanField(default=False)

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=AVAILABLE)
    sold_at = models.DateTimeField(null=True, blank=True)
    sold_via_trade = models.ForeignKey(
        'TradeProposal',
        related_name='sold_products',
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.name} ({self.status})"

    @property
    def is_sold(self):
        return self.status == self.SOLD


class TradeProposal(models.Model):
    PENDING = 'pending'
    APPROVED = 'approved'
    REJECTED = 'rejected'
    STATUS_CHOICES = ((PENDING, 'Pending'), (APPROVED, 'Approved'), (REJECTED, 'Rejected'))

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    offered_product = models.ForeignKey(
        Product, related_name='offered_in_trades', on_delete=models.PROTECT
    )
    requested_product = models.ForeignKey(
        Product, related_name='requested_in_trades', on_delete=models.PROTECT
    )
    proposer = models.ForeignKey(
        settings.AUTH_USER_MODEL, related_name='proposed_trades', on_delete=models.CASCADE
    )
    # Seller of the requested product when the proposal was made
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL, related_name='received_trades', on_delete=models.CASCADE
    )
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=PENDING)
    created_at = models.DateTimeField(auto_now_add=True)
    resolved_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"Trade {self.offered_product_id} -> {self.requested_product_id} ({self.status})"

    @property
    def is_pending(self):
        return self.status == self.PENDING


class Message(models.Model):
    product = models.ForeignKey(Product, related_name='messages', on_delete=models.PROTECT)
    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL, related_name='sent_messages', on_delete=models.CASCADE
    )
    recipient = models.ForeignKey(
        settings.AUTH_USER_MODEL, related_name='received_messages', on_delete=models.CASCADE
    )
    body = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['created_at']
