from django.urls import path
from .views import me_view, deposit_view

app_name = "accounts"

urlpatterns = [
    path("me/", me_view, name="me"),
    path("balance/", deposit_view, name="balance"),
]
