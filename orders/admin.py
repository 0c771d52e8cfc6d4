from django.contrib import admin
from django.utils.translation import gettext_lazy as _
from unfold.admin import ModelAdmin, TabularInline
from unfold.decorators import display
from unfold.contrib.filters.admin import RangeDateTimeFilter, RangeNumericFilter

from .models import Order, OrderItem


class OrderItemInline(TabularInline):
    model = OrderItem
    extra = 0
    fields = ('product', 'quantity', 'unit_price', 'subtotal')
    readonly_fields = ('product', 'quantity', 'unit_price', 'subtotal')
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Order)
class OrderAdmin(ModelAdmin):
    list_display = ['order_number', 'client', 'distributor', 'status_badge',
                    'total_display', 'items_count', 'created_at']
    list_filter = [
        'status',
        'distributor',
        ('created_at', RangeDateTimeFilter),
        ('total', RangeNumericFilter),
    ]
    search_fields = ['order_number', 'client__name', 'client__phone']
    list_filter_submit = True
    list_fullwidth = True
    inlines = [OrderItemInline]
    # Status changes go through the order pipeline so stock stays consistent
    readonly_fields = ['order_number', 'status', 'total', 'created_at', 'updated_at', 'confirmed_at']

    fieldsets = (
        (_('Order Information'), {
            'fields': ('order_number', 'distributor', 'client', 'salesperson', 'status')
        }),
        (_('Delivery'), {
            'fields': ('delivery_address', 'notes')
        }),
        (_('Financial'), {
            'fields': ('total',)
        }),
        (_('Timestamps'), {
            'fields': ('created_at', 'updated_at', 'confirmed_at')
        }),
    )

    @display(description=_("Status"), label=True)
    def status_badge(self, obj):
        colors = {
            'DRAFT': 'info',
            'CONFIRMED': 'success',
            'IN_PREPARATION': 'warning',
            'DELIVERED': 'success',
            'CANCELLED': 'danger',
        }
        return colors.get(obj.status, 'info'), obj.get_status_display()

    @display(description=_("Total"), ordering='total')
    def total_display(self, obj):
        return f"${obj.total:.2f}"

    @display(description=_("Items"))
    def items_count(self, obj):
        return obj.items.count()
