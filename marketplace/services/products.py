import logging

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import DEFAULT_DB_ALIAS, transaction
from django.db.models import Q
from django.db.transaction import TransactionManagementError
from django.utils import timezone

from ..authorization import IS_SELLER, require, require_subscription
from ..exceptions import ConflictError, NotFoundError
from ..images import qualify_image_refs
from ..inputs import ProductInput, ProductSearchInput, validate
from ..models import Message, Product, TradeProposal

logger = logging.getLogger(__name__)


class ProductService:
    """
    Listing lifecycle: ``available`` -> ``sold``.

    Every mutation locks the row, checks ownership against that same row and
    writes with an update conditioned on the product still being available,
    so a product that became sold in the meantime is reported as a conflict.
    """

    def __init__(self, using=DEFAULT_DB_ALIAS):
        self.using = using

    @property
    def products(self):
        return Product.objects.using(self.using)

    def get(self, product_id):
        try:
            return self.products.select_related('seller').get(pk=product_id)
        except (Product.DoesNotExist, DjangoValidationError, ValueError):
            raise NotFoundError(f"Product {product_id} not found")

    def _lock(self, product_id):
        try:
            return self.products.select_for_update().get(pk=product_id)
        except (Product.DoesNotExist, DjangoValidationError, ValueError):
            raise NotFoundError(f"Product {product_id} not found")

    def create(self, seller, attributes):
        require_subscription(seller)
        data = validate(ProductInput, attributes)
        data['images'] = qualify_image_refs(data.get('images', []))
        data.setdefault('currency', settings.DEFAULT_CURRENCY)

        product = self.products.create(seller_id=seller.user_id, **data)
        logger.info("Product %s listed by user %s", product.pk, seller.user_id)
        return product

    def update(self, product_id, actor, changes):
        data = validate(ProductInput, changes, partial=True)
        if 'images' in data:
            data['images'] = qualify_image_refs(data['images'])

        with transaction.atomic(using=self.using):
            product = self._lock(product_id)
            require(actor, product, IS_SELLER)
            if product.is_sold:
                raise ConflictError("Sold products can no longer be edited")
            updated = self.products.filter(pk=product.pk, status=Product.AVAILABLE).update(
                updated_at=timezone.now(), **data
            )
            if updated != 1:
                raise ConflictError("Product was sold while it was being edited")

        product.refresh_from_db(using=self.using)
        return product

    def transition_to_sold(self, product_id, actor):
        with transaction.atomic(using=self.using):
            product = self._lock(product_id)
            require(actor, product, IS_SELLER)
            if product.is_sold:
                raise ConflictError("Product is already sold")
            now = timezone.now()
            updated = self.products.filter(
                pk=product.pk, seller_id=actor.user_id, status=Product.AVAILABLE
            ).update(status=Product.SOLD, sold_at=now, updated_at=now)
            if updated != 1:
                raise ConflictError("Product is already sold")

        logger.info("Product %s marked sold by seller %s", product.pk, actor.user_id)
        product.refresh_from_db(using=self.using)
        return product

    def delete(self, product_id, actor):
        with transaction.atomic(using=self.using):
            product = self._lock(product_id)
            require(actor, product, IS_SELLER)
            if product.is_sold:
                raise ConflictError("Sold products cannot be deleted")
            in_trades = TradeProposal.objects.using(self.using).filter(
                Q(offered_product_id=product.pk) | Q(requested_product_id=product.pk)
            )
            if in_trades.exists():
                raise ConflictError("Products with trade history cannot be deleted")
            if Message.objects.using(self.using).filter(product_id=product.pk).exists():
                raise ConflictError("Products with conversations cannot be deleted")
            deleted, _ = self.products.filter(pk=product.pk, status=Product.AVAILABLE).delete()
            if not deleted:
                raise ConflictError("Product was sold before it could be deleted")

        logger.info("Product %s deleted by seller %s", product_id, actor.user_id)

    def search(self, filters=None):
        data = validate(ProductSearchInput, filters or {})

        products = self.products.select_related('seller')
        if not data['include_sold']:
            products = products.filter(status=Product.AVAILABLE)
        if data.get('name'):
            products = products.filter(name__icontains=data['name'])
        if data.get('brand'):
            products = products.filter(brand=data['brand'])
        if data.get('min_price') is not None:
            products = products.filter(price__gte=data['min_price'])
        if data.get('max_price') is not None:
            products = products.filter(price__lte=data['max_price'])
        if 'seller_id' in data:
            products = products.filter(seller_id=data['seller_id'])
        if 'open_to_trade' in data:
            products = products.filter(open_to_trade=data['open_to_trade'])
        return products.order_by('-created_at')

    def brands(self):
        return list(
            self.products.filter(status=Product.AVAILABLE)
            .exclude(brand='')
            .order_by('brand')
            .values_list('brand', flat=True)
            .distinct()
        )

    def mark_sold_by_trade(self, trade, when):
        """
        Mark both sides of an approved trade sold.

        Runs inside the caller's transaction; raises ConflictError (rolling the
        caller back) unless every product was still available.
        """
        if not transaction.get_connection(self.using).in_atomic_block:
            raise TransactionManagementError("mark_sold_by_trade must run inside transaction.atomic()")

        product_ids = {trade.offered_product_id, trade.requested_product_id}
        updated = self.products.filter(pk__in=product_ids, status=Product.AVAILABLE).update(
            status=Product.SOLD, sold_at=when, sold_via_trade=trade, updated_at=when
        )
        if updated != len(product_ids):
            logger.warning("Trade %s lost the race for its products", trade.pk)
            raise ConflictError("One of the traded products is no longer available")
