"""
Order admin configuration.
Orders and settlement logs are read-only; changes go through the services.
"""
from django.contrib import admin
from apps.orders.models import Order, OrderStateLog, RefundLog, TransferLog


class OrderStateLogInline(admin.TabularInline):
    model = OrderStateLog
    extra = 0
    readonly_fields = ['from_state', 'to_state', 'event', 'changed_by', 'reason', 'created_at']
    can_delete = False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ['id', 'client', 'freelancer', 'gig_id', 'status', 'is_late', 'price', 'created_at']
    list_filter = ['status', 'is_late', 'created_at']
    search_fields = ['id', 'client__email', 'freelancer__email']
    readonly_fields = [
        'id', 'gig', 'client', 'freelancer', 'price', 'requirements',
        'status', 'due_date', 'is_late', 'delivery_file', 'delivery_notes',
        'cancellation_reason', 'cancellation_requested_by', 'cancellation_approved',
        'created_at', 'updated_at', 'delivered_at', 'completed_at'
    ]
    inlines = [OrderStateLogInline]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


class SettlementLogAdmin(admin.ModelAdmin):
    list_display = ['id', 'order', 'amount', 'created_at']
    search_fields = ['order__id']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


admin.site.register(RefundLog, SettlementLogAdmin)
admin.site.register(TransferLog, SettlementLogAdmin)
