"""
Review admin configuration.
"""
from django.contrib import admin
from apps.reviews.models import Review


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ['id', 'order', 'client', 'freelancer', 'gig_id', 'rating', 'created_at']
    list_filter = ['rating', 'created_at']
    search_fields = ['client__email', 'freelancer__email', 'comment']
    readonly_fields = [
        'id', 'order', 'client', 'freelancer', 'gig',
        'rating', 'comment', 'created_at'
    ]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
