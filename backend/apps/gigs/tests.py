"""
Tests for gig removal endpoint.
"""
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient
from apps.gigs.models import Gig
from apps.orders.models import Order
from apps.orders.tests.base import OrderFixturesMixin


class GigDeleteAPITestCase(OrderFixturesMixin, TestCase):
    """Test DELETE /api/gigs/<id>/."""

    def setUp(self):
        super().setUp()
        self.api = APIClient()

    def test_owner_deletes_gig_and_cancels_orders(self):
        order = self.place_order()
        self.api.force_authenticate(user=self.freelancer)

        response = self.api.delete(f'/api/gigs/{self.gig.id}/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['cancelled_orders'], 1)
        self.assertFalse(Gig.objects.filter(id=self.gig.id).exists())
        order.refresh_from_db()
        self.assertEqual(order.status, Order.CANCELLED)

    def test_non_owner_forbidden(self):
        self.api.force_authenticate(user=self.client_user)

        response = self.api.delete(f'/api/gigs/{self.gig.id}/')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertTrue(Gig.objects.filter(id=self.gig.id).exists())

    def test_admin_can_delete(self):
        admin = self.freelancer.__class__.objects.create_superuser(
            email='admin@test.com', password='testpass123'
        )
        self.api.force_authenticate(user=admin)

        response = self.api.delete(f'/api/gigs/{self.gig.id}/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_unknown_gig(self):
        self.api.force_authenticate(user=self.freelancer)

        response = self.api.delete('/api/gigs/999999/')

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['code'], 'gig_not_found')
