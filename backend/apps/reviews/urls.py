"""
Review URL patterns.
"""
from django.urls import path
from apps.reviews import views

app_name = 'reviews'

urlpatterns = [
    # Create review
    path('orders/<int:order_id>/', views.create_review, name='create'),

    # Public listings
    path('freelancers/<int:freelancer_id>/', views.get_freelancer_reviews, name='freelancer-reviews'),
    path('gigs/<int:gig_id>/', views.get_gig_reviews, name='gig-reviews'),
]
