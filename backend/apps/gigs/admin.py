"""
Gig admin configuration.
Deletions go through GigService so open orders are cancelled first.
"""
from django.contrib import admin
from apps.gigs.models import Gig
from apps.gigs.services.gig_service import GigService


@admin.register(Gig)
class GigAdmin(admin.ModelAdmin):
    list_display = ['id', 'title', 'freelancer', 'price', 'duration_days', 'rating', 'total_reviews', 'created_at']
    list_filter = ['category', 'created_at']
    search_fields = ['title', 'freelancer__email']
    readonly_fields = ['rating', 'total_reviews', 'created_at', 'updated_at']

    def delete_model(self, request, obj):
        GigService.delete_gig(obj.id, request.user)

    def delete_queryset(self, request, queryset):
        for gig_id in queryset.values_list('id', flat=True):
            GigService.delete_gig(gig_id, request.user)
