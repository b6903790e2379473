"""
Order URL patterns.
"""
from django.urls import path
from apps.orders import views

app_name = 'orders'

urlpatterns = [
    # Order CRUD
    path('', views.order_list_create, name='list-create'),
    path('<int:pk>/', views.order_detail, name='detail'),

    # State transitions
    path('<int:pk>/start/', views.start_order, name='start'),
    path('<int:pk>/deliver/', views.deliver_order, name='deliver'),
    path('<int:pk>/approve/', views.approve_delivery, name='approve'),
    path('<int:pk>/reject/', views.reject_delivery, name='reject'),
    path('<int:pk>/cancel/', views.request_cancellation, name='cancel'),
    path('<int:pk>/approve-cancellation/', views.approve_cancellation, name='approve-cancellation'),
    path('<int:pk>/reject-cancellation/', views.reject_cancellation, name='reject-cancellation'),
]
