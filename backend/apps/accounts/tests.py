from decimal import Decimal
from django.urls import reverse
from rest_framework.test import APITestCase
from rest_framework import status
from apps.accounts.models import User


class TestAccountsAPI(APITestCase):

    def setUp(self):

        # URLs
        self.login_url = reverse("token_obtain_pair")
        self.refresh_url = reverse("token_refresh")
        self.me_url = reverse("accounts:me")
        self.balance_url = reverse("accounts:balance")

        # Test User
        self.user_data = {
            "email": "user@test.com",
            "password": "StrongPass123!"
        }
        self.user = User.objects.create_user(
            email=self.user_data["email"],
            password=self.user_data["password"],
            name="Test User",
            role=User.Role.CLIENT
        )

    # ======================================================
    # JWT LOGIN TESTS
    # ======================================================

    def test_jwt_login_success(self):

        response = self.client.post(self.login_url, self.user_data)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn("access", response.data)
        self.assertIn("refresh", response.data)

    def test_jwt_login_wrong_password(self):

        response = self.client.post(self.login_url, {
            "email": "user@test.com",
            "password": "wrong"
        })

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_jwt_refresh(self):

        tokens = self.client.post(self.login_url, self.user_data).data

        response = self.client.post(self.refresh_url, {"refresh": tokens["refresh"]})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn("access", response.data)

    # ======================================================
    # ME TESTS
    # ======================================================

    def test_me_with_bearer_token(self):

        access = self.client.post(self.login_url, self.user_data).data["access"]
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {access}")

        response = self.client.get(self.me_url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["email"], "user@test.com")
        self.assertEqual(response.data["role"], User.Role.CLIENT)
        self.assertEqual(Decimal(response.data["balance"]), Decimal("0.00"))

    def test_me_requires_authentication(self):

        response = self.client.get(self.me_url)

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    # ======================================================
    # BALANCE TESTS
    # ======================================================

    def test_deposit_adds_to_balance(self):

        self.client.force_authenticate(user=self.user)

        self.client.post(self.balance_url, {"amount": "150.00"}, format="json")
        response = self.client.post(self.balance_url, {"amount": "50.50"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(response.data["balance"]), Decimal("200.50"))
        self.user.refresh_from_db()
        self.assertEqual(self.user.balance, Decimal("200.50"))

    def test_deposit_rejects_non_positive_amount(self):

        self.client.force_authenticate(user=self.user)

        for amount in ("0", "-10"):
            response = self.client.post(self.balance_url, {"amount": amount}, format="json")
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        self.user.refresh_from_db()
        self.assertEqual(self.user.balance, Decimal("0.00"))

    def test_deposit_requires_authentication(self):

        response = self.client.post(self.balance_url, {"amount": "10.00"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
