"""
Integration tests for complete client and freelancer journeys.
Tests end-to-end flows over the HTTP API, from login to review.
"""
from decimal import Decimal
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase
from rest_framework.test import APIClient
from rest_framework import status
from django.contrib.auth import get_user_model
from apps.gigs.models import Gig
from apps.orders.models import Order, RefundLog
from apps.orders.services.late_order_sweeper import LateOrderSweeper
from apps.orders.services.reconciler import SettlementReconciler
from apps.reviews.models import Review

User = get_user_model()


class JourneyTestCase(TestCase):
    """Shared users, gig and JWT-authenticated API clients."""

    def setUp(self):
        self.freelancer = User.objects.create_user(
            email='freelancer@test.com',
            password='testpass123',
            role=User.Role.FREELANCER
        )
        self.client_user = User.objects.create_user(
            email='client@test.com',
            password='testpass123',
            role=User.Role.CLIENT
        )
        self.gig = Gig.objects.create(
            freelancer=self.freelancer,
            title='Landing page copy',
            description='Conversion-focused copywriting',
            category='writing',
            price=100,
            duration_days=2
        )

        self.client_api = self.login('client@test.com')
        self.freelancer_api = self.login('freelancer@test.com')

    def login(self, email):
        api = APIClient()
        response = api.post(
            '/api/auth/token/',
            {'email': email, 'password': 'testpass123'},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        api.credentials(HTTP_AUTHORIZATION=f"Bearer {response.data['access']}")
        return api

    def balance(self, api):
        return Decimal(api.get('/api/accounts/me/').data['balance'])

    def place_order(self):
        self.client_api.post('/api/accounts/balance/', {'amount': '100.00'}, format='json')
        response = self.client_api.post(
            '/api/orders/',
            {'gig_id': self.gig.id, 'requirements': 'Three headline options'},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        return response.data['id']


class ClientJourneyTestCase(JourneyTestCase):
    """
    Test complete happy path.

    Journey:
    1. Client tops up balance
    2. Client orders a gig
    3. Freelancer starts and delivers
    4. Client approves
    5. Client leaves review
    """

    def test_complete_client_journey(self):
        order_id = self.place_order()
        self.assertEqual(self.balance(self.client_api), Decimal('0.00'))

        response = self.freelancer_api.post(f'/api/orders/{order_id}/start/')
        self.assertEqual(response.data['status'], Order.IN_PROGRESS)

        response = self.freelancer_api.post(
            f'/api/orders/{order_id}/deliver/',
            {
                'file': SimpleUploadedFile('copy.txt', b'Headline one', content_type='text/plain'),
                'notes': 'Three options inside'
            },
            format='multipart'
        )
        self.assertEqual(response.data['status'], Order.DELIVERED)

        response = self.client_api.post(f'/api/orders/{order_id}/approve/')
        self.assertEqual(response.data['status'], Order.COMPLETED)
        self.assertEqual(self.balance(self.freelancer_api), Decimal('100.00'))

        response = self.client_api.post(
            f'/api/reviews/orders/{order_id}/',
            {'rating': 5, 'comment': 'Sharp and fast'},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(Review.objects.filter(order_id=order_id).exists())

        me = self.freelancer_api.get('/api/accounts/me/').data
        self.assertEqual(Decimal(me['avg_rating']), Decimal('5.00'))
        self.assertEqual(me['total_reviews'], 1)


class LateOrderJourneyTestCase(JourneyTestCase):
    """Overdue order is swept late, then cancelled by the client at once."""

    def test_late_cancellation_journey(self):
        order_id = self.place_order()
        self.freelancer_api.post(f'/api/orders/{order_id}/start/')
        Order.objects.filter(id=order_id).update(due_date=Order.objects.get(id=order_id).created_at)

        self.assertEqual(LateOrderSweeper.sweep(), 1)

        response = self.client_api.post(
            f'/api/orders/{order_id}/cancel/', {'reason': 'Deadline missed'}, format='json'
        )
        self.assertEqual(response.data['status'], Order.CANCELLED)
        self.assertTrue(response.data['cancellation_approved'])
        self.assertEqual(self.balance(self.client_api), Decimal('100.00'))


class GigRemovalJourneyTestCase(JourneyTestCase):
    """Freelancer deletes a gig; the reconciler refunds open orders."""

    def test_gig_removal_journey(self):
        first = self.place_order()
        second = self.place_order()
        self.freelancer_api.post(f'/api/orders/{second}/start/')

        response = self.freelancer_api.delete(f'/api/gigs/{self.gig.id}/')
        self.assertEqual(response.data['cancelled_orders'], 2)
        self.assertEqual(self.balance(self.client_api), Decimal('0.00'))

        SettlementReconciler.reconcile_settlements()

        self.assertEqual(self.balance(self.client_api), Decimal('200.00'))
        self.assertEqual(RefundLog.objects.filter(order_id__in=[first, second]).count(), 2)

        response = self.client_api.get(f'/api/orders/{first}/')
        self.assertEqual(response.data['status'], Order.CANCELLED)
        self.assertTrue(response.data['refunded'])
