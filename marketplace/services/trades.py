import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import DEFAULT_DB_ALIAS, transaction
from django.db.models import Q
from django.utils import timezone

from ..authorization import (
    IS_PROPOSAL_OWNER,
    IS_PROPOSER,
    IS_SELLER,
    authorize,
    require,
    require_any,
)
from ..exceptions import ConflictError, NotFoundError, ValidationError
from ..inputs import APPROVE, REJECT
from ..models import TradeProposal
from .products import ProductService

logger = logging.getLogger(__name__)


class TradeService:
    """
    Barter proposals: ``pending`` -> ``approved`` | ``rejected``.

    Approval sells both products and closes the proposal in one transaction.
    Each write is conditioned on the state read at the start, so of two
    approvals competing for the same product only one can commit.
    """

    def __init__(self, using=DEFAULT_DB_ALIAS, products=None):
        self.using = using
        self.products = products or ProductService(using=using)

    @property
    def trades(self):
        return TradeProposal.objects.using(self.using)

    def _lock(self, proposal_id):
        try:
            return self.trades.select_for_update().get(pk=proposal_id)
        except (TradeProposal.DoesNotExist, DjangoValidationError, ValueError):
            raise NotFoundError(f"Trade {proposal_id} not found")

    def propose(self, proposer, offered_product_id, requested_product_id):
        offered = self.products.get(offered_product_id)
        requested = self.products.get(requested_product_id)

        require(proposer, offered, IS_SELLER, "You can only offer your own products")
        if authorize(proposer, requested, IS_SELLER):
            raise ValidationError({'requested_product_id': ["You cannot trade with yourself."]})
        if offered.is_sold or requested.is_sold:
            raise ConflictError("Sold products cannot be traded")

        trade = self.trades.create(
            offered_product=offered,
            requested_product=requested,
            proposer_id=proposer.user_id,
            owner_id=requested.seller_id,
        )
        logger.info(
            "Trade %s proposed by user %s: %s for %s",
            trade.pk, proposer.user_id, offered.pk, requested.pk,
        )
        return trade

    def resolve(self, proposal_id, actor, decision):
        if decision not in (APPROVE, REJECT):
            raise ValidationError({'decision': [f"Must be '{APPROVE}' or '{REJECT}'."]})

        with transaction.atomic(using=self.using):
            trade = self._lock(proposal_id)
            require(actor, trade, IS_PROPOSAL_OWNER, "Only the owner of the requested product can resolve this trade")
            if not trade.is_pending:
                raise ConflictError(f"Trade already {trade.status}")

            now = timezone.now()
            if decision == APPROVE:
                self.products.mark_sold_by_trade(trade, now)
                status = TradeProposal.APPROVED
            else:
                status = TradeProposal.REJECTED

            updated = self.trades.filter(pk=trade.pk, status=TradeProposal.PENDING).update(
                status=status, resolved_at=now
            )
            if updated != 1:
                raise ConflictError("Trade was resolved by another request")

        logger.info("Trade %s %s by user %s", trade.pk, status, actor.user_id)
        trade.refresh_from_db(using=self.using)
        return trade

    def get(self, proposal_id, actor):
        try:
            trade = self.trades.select_related(
                'offered_product', 'requested_product', 'proposer', 'owner'
            ).get(pk=proposal_id)
        except (TradeProposal.DoesNotExist, DjangoValidationError, ValueError):
            raise NotFoundError(f"Trade {proposal_id} not found")
        require_any(actor, trade, (IS_PROPOSER, IS_PROPOSAL_OWNER))
        return trade

    def list_for(self, actor):
        return (
            self.trades.filter(Q(proposer_id=actor.user_id) | Q(owner_id=actor.user_id))
            .select_related('offered_product', 'requested_product', 'proposer', 'owner')
            .order_by('-created_at')
        )
