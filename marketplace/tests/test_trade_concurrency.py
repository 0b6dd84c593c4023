import threading

from django.db import connection
from django.test import TransactionTestCase

from marketplace.exceptions import ConflictError
from marketplace.models import Product, TradeProposal
from marketplace.services import TradeService
from marketplace.tests.helpers import identity, make_product, make_user


class ConcurrentApprovalTest(TransactionTestCase):
    """Two approvals for the same product, run on separate connections."""

    def setUp(self):
        self.seller = make_user("seller@example.com")
        buyer = make_user("buyer@example.com")
        third = make_user("third@example.com")
        self.bike = make_product(self.seller, name="Road Bike")
        self.guitar = make_product(buyer, name="Guitar")
        self.camera = make_product(third, name="Camera")
        trades = TradeService()
        self.proposals = [
            trades.propose(identity(buyer), self.guitar.pk, self.bike.pk),
            trades.propose(identity(third), self.camera.pk, self.bike.pk),
        ]

    def approve_all_at_once(self):
        barrier = threading.Barrier(len(self.proposals))
        results = {}
        lock = threading.Lock()
        owner = identity(self.seller)

        def worker(proposal_id):
            try:
                barrier.wait(timeout=10)
                outcome = TradeService().resolve(proposal_id, owner, "approve").status
            except Exception as exc:
                outcome = exc
            finally:
                connection.close()
            with lock:
                results[proposal_id] = outcome

        threads = [threading.Thread(target=worker, args=(p.pk,)) for p in self.proposals]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=30)
        return results

    def test_only_one_approval_wins(self):
        results = self.approve_all_at_once()
        self.assertEqual(len(results), 2)

        winners = [pk for pk, outcome in results.items() if outcome == TradeProposal.APPROVED]
        losers = [pk for pk, outcome in results.items() if isinstance(outcome, ConflictError)]
        self.assertEqual(len(winners), 1)
        self.assertEqual(len(losers), 1)

        winner = TradeProposal.objects.get(pk=winners[0])
        loser = TradeProposal.objects.get(pk=losers[0])
        self.assertEqual(loser.status, TradeProposal.PENDING)
        self.assertIsNone(loser.resolved_at)

        self.bike.refresh_from_db()
        self.assertEqual(self.bike.status, Product.SOLD)
        self.assertEqual(self.bike.sold_via_trade_id, winner.pk)
        # Only the winning proposal's offered product changed hands
        self.assertEqual(
            Product.objects.get(pk=winner.offered_product_id).status, Product.SOLD
        )
        self.assertEqual(
            Product.objects.get(pk=loser.offered_product_id).status, Product.AVAILABLE
        )
