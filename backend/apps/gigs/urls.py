"""
Gig URL patterns.
"""
from django.urls import path
from apps.gigs import views

app_name = 'gigs'

urlpatterns = [
    path('<int:pk>/', views.delete_gig, name='delete'),
]
