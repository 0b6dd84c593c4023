"""
Ownership checks shared by every marketplace mutation.

``authorize`` compares the caller against the ownership field stored on the
entity and never touches the database; callers pass the row they read under
``select_for_update`` so the check and the write see the same state.
"""

import logging

from django.conf import settings

from .exceptions import AuthorizationError, SubscriptionRequiredError

logger = logging.getLogger(__name__)

IS_SELLER = 'is_seller'
IS_PROPOSAL_OWNER = 'is_proposal_owner'
IS_PROPOSER = 'is_proposer'

# relation -> ownership field on the entity
RELATION_FIELDS = {
    IS_SELLER: 'seller_id',
    IS_PROPOSAL_OWNER: 'owner_id',
    IS_PROPOSER: 'proposer_id',
}


def authorize(actor, entity, relation):
    try:
        field = RELATION_FIELDS[relation]
    except KeyError:
        raise ValueError(f"Unknown relation: {relation}")
    if actor is None or entity is None:
        return False
    return getattr(entity, field, None) == actor.user_id


def require(actor, entity, relation, message=None):
    if not authorize(actor, entity, relation):
        logger.warning(
            "Denied %s for user %s on %s %s",
            relation,
            getattr(actor, 'user_id', None),
            type(entity).__name__,
            getattr(entity, 'pk', None),
        )
        raise AuthorizationError(message) if message else AuthorizationError()


def require_any(actor, entity, relations, message=None):
    if not any(authorize(actor, entity, relation) for relation in relations):
        raise AuthorizationError(message) if message else AuthorizationError()


def require_subscription(actor):
    """Paid listings: only subscribed users may create products."""
    if not settings.REQUIRE_SUBSCRIPTION_FOR_LISTINGS:
        return
    if not actor.subscription_active:
        logger.info("User %s tried to list without a subscription", actor.user_id)
        raise SubscriptionRequiredError()
