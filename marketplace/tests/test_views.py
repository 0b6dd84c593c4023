import uuid
from unittest.mock import patch

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase, override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from marketplace.models import Message, Product, TradeProposal
from marketplace.tests.helpers import make_product, make_user


@override_settings(REQUIRE_SUBSCRIPTION_FOR_LISTINGS=True, BACKEND_URL="http://api.test")
class ProductViewTest(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.seller = make_user("seller@example.com")
        self.other = make_user("other@example.com", subscribed=False)
        self.product = make_product(self.seller)
        self.sold = make_product(self.seller, name="Sold bike", status=Product.SOLD)

    def test_listing_is_public_and_hides_sold(self):
        response = self.client.get(reverse("product-list"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([p["id"] for p in response.data], [str(self.product.pk)])
        self.assertEqual(response.data[0]["seller"]["id"], self.seller.pk)

    def test_listing_filters(self):
        response = self.client.get(reverse("product-list"), {"name": "road", "max_price": "200"})
        self.assertEqual(len(response.data), 1)
        response = self.client.get(reverse("product-list"), {"min_price": "oops"})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("min_price", response.data)

    def test_detail_is_public(self):
        response = self.client.get(reverse("product-detail", args=[self.product.pk]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["status"], Product.AVAILABLE)

        response = self.client.get(reverse("product-detail", args=[uuid.uuid4()]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_create_requires_authentication(self):
        response = self.client.post(reverse("product-create"), {}, format="json")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_create_requires_subscription(self):
        self.client.force_authenticate(user=self.other)
        response = self.client.post(
            reverse("product-create"),
            {"name": "Lamp", "description": "Desk lamp", "price": "5"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_402_PAYMENT_REQUIRED)

    def test_create_validates_input(self):
        self.client.force_authenticate(user=self.seller)
        response = self.client.post(
            reverse("product-create"), {"name": "Lamp", "price": "-3"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("description", response.data)
        self.assertIn("price", response.data)

    def test_create_with_json(self):
        self.client.force_authenticate(user=self.seller)
        response = self.client.post(
            reverse("product-create"),
            {
                "name": "Lamp",
                "description": "Desk lamp",
                "price": "5.00",
                "open_to_trade": True,
                "images": ["lamp.jpg"],
            },
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["status"], Product.AVAILABLE)
        self.assertEqual(response.data["images"], ["http://api.test/uploads/lamp.jpg"])
        self.assertTrue(response.data["open_to_trade"])

    @patch("cloudinary.uploader.upload")
    def test_create_with_uploaded_images(self, mock_upload):
        mock_upload.return_value = {"secure_url": "https://res.cloudinary.com/demo/lamp.jpg"}
        self.client.force_authenticate(user=self.seller)
        response = self.client.post(
            reverse("product-create"),
            {
                "name": "Lamp",
                "description": "Desk lamp",
                "price": "5",
                "images": SimpleUploadedFile("lamp.jpg", b"fake-image", content_type="image/jpeg"),
            },
            format="multipart",
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["images"], ["https://res.cloudinary.com/demo/lamp.jpg"])
        mock_upload.assert_called_once()

    @patch("cloudinary.uploader.upload")
    def test_invalid_multipart_create_uploads_nothing(self, mock_upload):
        self.client.force_authenticate(user=self.seller)
        response = self.client.post(
            reverse("product-create"),
            {"name": "Lamp", "images": SimpleUploadedFile("lamp.jpg", b"x", content_type="image/jpeg")},
            format="multipart",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        mock_upload.assert_not_called()

    def test_update(self):
        url = reverse("product-update", args=[self.product.pk])
        self.client.force_authenticate(user=self.other)
        self.assertEqual(
            self.client.put(url, {"price": "1"}, format="json").status_code, status.HTTP_403_FORBIDDEN
        )
        self.client.force_authenticate(user=self.seller)
        response = self.client.put(url, {"price": "180"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["price"], "180.00")

        url = reverse("product-update", args=[self.sold.pk])
        self.assertEqual(
            self.client.put(url, {"price": "1"}, format="json").status_code, status.HTTP_409_CONFLICT
        )

    def test_mark_sold(self):
        url = reverse("product-sold", args=[self.product.pk])
        self.client.force_authenticate(user=self.other)
        self.assertEqual(self.client.post(url).status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(user=self.seller)
        response = self.client.post(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["product"]["status"], Product.SOLD)
        self.assertEqual(self.client.post(url).status_code, status.HTTP_409_CONFLICT)

    def test_delete(self):
        url = reverse("product-delete", args=[self.product.pk])
        self.client.force_authenticate(user=self.other)
        self.assertEqual(self.client.delete(url).status_code, status.HTTP_403_FORBIDDEN)
        self.assertTrue(Product.objects.filter(pk=self.product.pk).exists())

        self.client.force_authenticate(user=self.seller)
        self.assertEqual(self.client.delete(url).status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Product.objects.filter(pk=self.product.pk).exists())

    def test_my_products_include_sold(self):
        make_product(self.other, name="Not mine")
        self.client.force_authenticate(user=self.seller)
        response = self.client.get(reverse("product-mine"))
        self.assertEqual(
            {p["id"] for p in response.data}, {str(self.product.pk), str(self.sold.pk)}
        )

    def test_brands(self):
        response = self.client.get(reverse("brand-list"))
        self.assertEqual(response.data, ["Trek"])


class TradeViewTest(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.seller = make_user("seller@example.com")
        self.buyer = make_user("buyer@example.com", subscribed=False)
        self.p1 = make_product(self.seller, name="Road Bike")
        self.p2 = make_product(self.buyer, name="Guitar")

    def propose(self):
        self.client.force_authenticate(user=self.buyer)
        return self.client.post(
            reverse("trade-propose"),
            {"offered_product_id": str(self.p2.pk), "requested_product_id": str(self.p1.pk)},
            format="json",
        )

    def test_propose_and_approve(self):
        response = self.propose()
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        trade_id = response.data["trade"]["id"]
        self.assertEqual(response.data["trade"]["owner"], self.seller.pk)

        resolve_url = reverse("trade-resolve", args=[trade_id])
        response = self.client.post(resolve_url, {"decision": "approve"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(user=self.seller)
        response = self.client.post(resolve_url, {"decision": "approve"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["trade"]["status"], TradeProposal.APPROVED)
        self.assertEqual(response.data["trade"]["requested_product"]["status"], Product.SOLD)
        self.assertEqual(response.data["trade"]["offered_product"]["status"], Product.SOLD)

        response = self.client.post(resolve_url, {"decision": "reject"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_propose_validates_body(self):
        self.client.force_authenticate(user=self.buyer)
        response = self.client.post(reverse("trade-propose"), {"offered_product_id": "x"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("requested_product_id", response.data)

    def test_propose_requires_authentication(self):
        response = self.client.post(reverse("trade-propose"), {}, format="json")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_resolve_rejects_unknown_decision(self):
        trade_id = self.propose().data["trade"]["id"]
        self.client.force_authenticate(user=self.seller)
        response = self.client.post(
            reverse("trade-resolve", args=[trade_id]), {"decision": "Accepted"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_my_trades_and_detail(self):
        trade_id = self.propose().data["trade"]["id"]
        response = self.client.get(reverse("trade-mine"))
        self.assertEqual([t["id"] for t in response.data], [trade_id])

        outsider = make_user("outsider@example.com")
        self.client.force_authenticate(user=outsider)
        self.assertEqual(self.client.get(reverse("trade-mine")).data, [])
        response = self.client.get(reverse("trade-detail", args=[trade_id]))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class ChatViewTest(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.seller = make_user("seller@example.com")
        self.buyer = make_user("buyer@example.com")
        self.product = make_product(self.seller)
        self.url = reverse("product-chat", args=[self.product.pk])

    def test_chat_round_trip(self):
        self.client.force_authenticate(user=self.buyer)
        response = self.client.post(self.url, {"body": "Still available?"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["recipient"], self.seller.pk)

        self.client.force_authenticate(user=self.seller)
        response = self.client.post(self.url, {"body": "Yes"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.post(
            self.url, {"body": "Yes", "recipient_id": self.buyer.pk}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        self.client.force_authenticate(user=self.buyer)
        response = self.client.get(self.url)
        self.assertEqual([m["body"] for m in response.data], ["Still available?", "Yes"])

        response = self.client.get(reverse("inbox"))
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]["last_message"], "Yes")
        self.assertEqual(Message.objects.count(), 2)

    def test_chat_requires_authentication(self):
        self.assertEqual(self.client.get(self.url).status_code, status.HTTP_401_UNAUTHORIZED)
