"""
Tests for Reviews app.
Tests review creation rules and rating recomputation.
"""
from decimal import Decimal
from io import StringIO
from django.core.exceptions import ValidationError
from django.core.management import call_command
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient
from apps.gigs.models import Gig
from apps.gigs.services.gig_service import GigService
from apps.orders.exceptions import Forbidden, InvalidTransition, OrderNotFound
from apps.orders.tests.base import OrderFixturesMixin
from apps.reviews.models import Review
from apps.reviews.services.review_service import ReviewService


class ReviewServiceTestCase(OrderFixturesMixin, TestCase):
    """Test ReviewService rules and aggregates."""

    def test_create_review_updates_ratings(self):
        order = self.completed_order()

        review = ReviewService.create_review(order.id, self.client_user, 4, 'Great work')

        self.assertEqual(review.gig_id, self.gig.id)
        self.assertEqual(review.freelancer, self.freelancer)
        self.gig.refresh_from_db()
        self.freelancer.refresh_from_db()
        self.assertEqual(self.gig.rating, Decimal('4.00'))
        self.assertEqual(self.gig.total_reviews, 1)
        self.assertEqual(self.freelancer.avg_rating, Decimal('4.00'))
        self.assertEqual(self.freelancer.total_reviews, 1)

    def test_ratings_are_full_averages(self):
        for rating in (5, 4, 4):
            order = self.completed_order()
            ReviewService.create_review(order.id, self.client_user, rating, 'Fine')

        self.gig.refresh_from_db()
        self.assertEqual(self.gig.rating, Decimal('4.33'))
        self.assertEqual(self.gig.total_reviews, 3)

    def test_freelancer_rating_spans_gigs(self):
        ReviewService.create_review(self.completed_order().id, self.client_user, 5, 'Great')

        second_gig = Gig.objects.create(
            freelancer=self.freelancer,
            title='Banner design',
            description='A banner',
            category='design',
            price=self.PRICE
        )
        self.gig = second_gig
        ReviewService.create_review(self.completed_order().id, self.client_user, 2, 'Meh')

        self.freelancer.refresh_from_db()
        second_gig.refresh_from_db()
        self.assertEqual(self.freelancer.avg_rating, Decimal('3.50'))
        self.assertEqual(self.freelancer.total_reviews, 2)
        self.assertEqual(second_gig.rating, Decimal('2.00'))

    def test_only_client_can_review(self):
        order = self.completed_order()

        with self.assertRaises(Forbidden):
            ReviewService.create_review(order.id, self.freelancer, 5, 'Self praise')

    def test_only_completed_orders(self):
        order = self.delivered_order()

        with self.assertRaises(InvalidTransition):
            ReviewService.create_review(order.id, self.client_user, 5, 'Early')

    def test_one_review_per_order(self):
        order = self.completed_order()
        ReviewService.create_review(order.id, self.client_user, 5, 'Great')

        with self.assertRaises(ValidationError):
            ReviewService.create_review(order.id, self.client_user, 1, 'Changed my mind')

        self.assertEqual(Review.objects.filter(order=order).count(), 1)

    def test_rating_range(self):
        order = self.completed_order()

        for rating in (0, 6, True):
            with self.assertRaises(ValidationError):
                ReviewService.create_review(order.id, self.client_user, rating, 'Out of range')

    def test_overlong_comment_rejected(self):
        order = self.completed_order()

        with self.assertRaises(ValidationError):
            ReviewService.create_review(order.id, self.client_user, 5, 'x' * 1001)

        self.assertFalse(Review.objects.filter(order=order).exists())

    def test_unknown_order(self):
        with self.assertRaises(OrderNotFound):
            ReviewService.create_review(999999, self.client_user, 5, 'Ghost')

    def test_review_survives_gig_deletion(self):
        order = self.completed_order()
        ReviewService.create_review(order.id, self.client_user, 5, 'Great')

        GigService.delete_gig(self.gig.id, self.freelancer)

        self.assertEqual(ReviewService.get_gig_reviews(self.gig.id).count(), 1)
        self.assertEqual(ReviewService.get_freelancer_reviews(self.freelancer.id).count(), 1)

    def test_recalculate_all_ratings_repairs_drift(self):
        order = self.completed_order()
        ReviewService.create_review(order.id, self.client_user, 3, 'Okay')
        Gig.objects.filter(id=self.gig.id).update(rating=Decimal('5.00'), total_reviews=9)

        out = StringIO()
        call_command('recalculate_ratings', stdout=out)

        self.gig.refresh_from_db()
        self.assertEqual(self.gig.rating, Decimal('3.00'))
        self.assertEqual(self.gig.total_reviews, 1)
        self.assertIn('Recalculated ratings for 1 gigs', out.getvalue())


class ReviewAPITestCase(OrderFixturesMixin, TestCase):
    """Test Review API endpoints."""

    def setUp(self):
        super().setUp()
        self.api = APIClient()
        self.order = self.completed_order()

    def test_create_review_success(self):
        self.api.force_authenticate(user=self.client_user)

        response = self.api.post(
            f'/api/reviews/orders/{self.order.id}/',
            {'rating': 5, 'comment': 'Great freelancer!'},
            format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['rating'], 5)
        self.assertEqual(response.data['order_id'], self.order.id)
        self.assertEqual(response.data['client']['email'], self.client_user.email)

    def test_create_review_not_client(self):
        self.api.force_authenticate(user=self.freelancer)

        response = self.api.post(
            f'/api/reviews/orders/{self.order.id}/',
            {'rating': 5, 'comment': 'Great'},
            format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_duplicate_review_prevented(self):
        ReviewService.create_review(self.order.id, self.client_user, 5, 'Great')
        self.api.force_authenticate(user=self.client_user)

        response = self.api.post(
            f'/api/reviews/orders/{self.order.id}/',
            {'rating': 4, 'comment': 'Again'},
            format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['code'], 'validation_error')

    def test_invalid_rating(self):
        self.api.force_authenticate(user=self.client_user)

        response = self.api.post(
            f'/api/reviews/orders/{self.order.id}/',
            {'rating': 7, 'comment': 'Too much'},
            format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_public_listings(self):
        ReviewService.create_review(self.order.id, self.client_user, 5, 'Great')

        response = self.api.get(f'/api/reviews/freelancers/{self.freelancer.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)

        response = self.api.get(f'/api/reviews/gigs/{self.gig.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data[0]['comment'], 'Great')
