"""
Tests for the order API endpoints and error mapping.
"""
from decimal import Decimal
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase, override_settings
from rest_framework import status
from rest_framework.test import APIClient
from apps.orders.models import Order
from apps.orders.tests.base import OrderFixturesMixin


class OrderAPITestCase(OrderFixturesMixin, TestCase):
    """Test Order API endpoints."""

    def setUp(self):
        super().setUp()
        self.api = APIClient()

    def as_user(self, user):
        self.api.force_authenticate(user=user)
        return self.api

    def test_create_order_success(self):
        self.fund(self.client_user, 100)

        response = self.as_user(self.client_user).post(
            '/api/orders/',
            {'gig_id': self.gig.id, 'requirements': 'Blue and white'},
            format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], Order.PENDING)
        self.assertEqual(response.data['price'], 100)
        self.assertEqual(response.data['client']['email'], self.client_user.email)
        self.assertEqual(self.balance(self.client_user), Decimal('0.00'))

    def test_create_order_unauthorized(self):
        response = self.api.post(
            '/api/orders/',
            {'gig_id': self.gig.id, 'requirements': 'Blue and white'},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_create_order_insufficient_funds(self):
        self.fund(self.client_user, 30)

        response = self.as_user(self.client_user).post(
            '/api/orders/',
            {'gig_id': self.gig.id, 'requirements': 'Blue and white'},
            format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['code'], 'insufficient_funds')
        self.assertEqual(Decimal(response.data['required']), Decimal('100'))
        self.assertEqual(Decimal(response.data['current']), Decimal('30.00'))

    def test_create_order_unknown_gig(self):
        self.fund(self.client_user, 100)

        response = self.as_user(self.client_user).post(
            '/api/orders/',
            {'gig_id': 999999, 'requirements': 'Blue and white'},
            format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['code'], 'gig_not_found')

    def test_create_order_missing_requirements(self):
        response = self.as_user(self.client_user).post(
            '/api/orders/', {'gig_id': self.gig.id}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_orders_for_participants(self):
        order = self.place_order()

        for user in (self.client_user, self.freelancer):
            response = self.as_user(user).get('/api/orders/')
            self.assertEqual(response.status_code, status.HTTP_200_OK)
            self.assertEqual(response.data['count'], 1)
            self.assertEqual(response.data['results'][0]['id'], order.id)

        response = self.as_user(self.stranger).get('/api/orders/')
        self.assertEqual(response.data['count'], 0)

    def test_list_orders_filtering(self):
        self.place_order()
        self.start(self.place_order())

        response = self.as_user(self.client_user).get('/api/orders/', {'status': Order.IN_PROGRESS})

        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['status'], Order.IN_PROGRESS)

    def test_detail_participants_only(self):
        order = self.place_order()

        response = self.as_user(self.freelancer).get(f'/api/orders/{order.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['requirements'], 'Blue and white, vector format')
        self.assertEqual(len(response.data['state_logs']), 1)

        response = self.as_user(self.stranger).get(f'/api/orders/{order.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['code'], 'forbidden')

        response = self.as_user(self.client_user).get('/api/orders/999999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['code'], 'order_not_found')

    def test_full_flow(self):
        order = self.place_order()

        response = self.as_user(self.freelancer).post(f'/api/orders/{order.id}/start/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], Order.IN_PROGRESS)

        upload = SimpleUploadedFile('logo.zip', b'PK\x03\x04 logo', content_type='application/zip')
        response = self.as_user(self.freelancer).post(
            f'/api/orders/{order.id}/deliver/',
            {'file': upload, 'notes': 'Final files attached'},
            format='multipart'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], Order.DELIVERED)
        self.assertTrue(response.data['delivery_file'].startswith(f'deliveries/{order.id}/'))

        response = self.as_user(self.client_user).post(f'/api/orders/{order.id}/approve/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], Order.COMPLETED)
        self.assertTrue(response.data['paid_out'])
        self.assertEqual(self.balance(self.freelancer), Decimal('100.00'))

    def test_invalid_transition_returns_409(self):
        order = self.place_order()

        response = self.as_user(self.client_user).post(f'/api/orders/{order.id}/approve/')

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['code'], 'invalid_transition')

    def test_wrong_party_returns_403(self):
        order = self.place_order()

        response = self.as_user(self.client_user).post(f'/api/orders/{order.id}/start/')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_deliver_requires_notes(self):
        order = self.start(self.place_order())
        upload = SimpleUploadedFile('logo.zip', b'logo', content_type='application/zip')

        response = self.as_user(self.freelancer).post(
            f'/api/orders/{order.id}/deliver/', {'file': upload}, format='multipart'
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        order.refresh_from_db()
        self.assertEqual(order.status, Order.IN_PROGRESS)

    @override_settings(ORDERS={
        'DEFAULT_DURATION_DAYS': 7,
        'LATE_SWEEP_INTERVAL_MINUTES': 30,
        'RECONCILE_INTERVAL_MINUTES': 60,
        'GIG_DELETED_REASON': 'The gig was deleted by the freelancer',
        'MAX_DELIVERY_FILE_MB': 0,
    })
    def test_deliver_rejects_oversized_file(self):
        order = self.start(self.place_order())
        upload = SimpleUploadedFile('logo.zip', b'too big', content_type='application/zip')

        response = self.as_user(self.freelancer).post(
            f'/api/orders/{order.id}/deliver/',
            {'file': upload, 'notes': 'Final files'},
            format='multipart'
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_cancellation_flow(self):
        order = self.place_order()

        response = self.as_user(self.client_user).post(
            f'/api/orders/{order.id}/cancel/', {'reason': 'Changed my mind'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], Order.CANCELLATION_REQUESTED)
        self.assertEqual(response.data['cancellation_requested_by_id'], self.client_user.id)

        response = self.as_user(self.client_user).post(f'/api/orders/{order.id}/approve-cancellation/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        response = self.as_user(self.freelancer).post(f'/api/orders/{order.id}/approve-cancellation/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], Order.CANCELLED)
        self.assertTrue(response.data['refunded'])
        self.assertEqual(self.balance(self.client_user), Decimal('100.00'))

    def test_reject_cancellation(self):
        order = self.place_order()
        self.as_user(self.freelancer).post(
            f'/api/orders/{order.id}/cancel/', {'reason': 'Too busy'}, format='json'
        )

        response = self.as_user(self.client_user).post(f'/api/orders/{order.id}/reject-cancellation/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], Order.IN_PROGRESS)
        self.assertFalse(response.data['cancellation_approved'])

    def test_reject_delivery(self):
        order = self.delivered_order()

        response = self.as_user(self.client_user).post(f'/api/orders/{order.id}/reject/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], Order.IN_PROGRESS)
