"""
Management command to rebuild gig and freelancer ratings from reviews.

Usage:
    python manage.py recalculate_ratings
"""
from django.core.management.base import BaseCommand
from apps.reviews.services.review_service import ReviewService


class Command(BaseCommand):
    help = 'Recompute every gig and freelancer rating from the stored reviews'

    def handle(self, *args, **options):
        updated = ReviewService.recalculate_all_ratings()
        self.stdout.write(self.style.SUCCESS(f'Recalculated ratings for {updated} gigs'))
