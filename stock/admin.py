from django.contrib import admin
from django.utils.translation import gettext_lazy as _
from unfold.admin import ModelAdmin, TabularInline
from unfold.decorators import display
from unfold.contrib.filters.admin import RangeDateFilter, RangeDateTimeFilter, RangeNumericFilter

from .models import Product, InventoryLot, StockMovement


class InventoryLotInline(TabularInline):
    model = InventoryLot
    extra = 0
    fields = ('lot_number', 'stock_quantity', 'expiration_date', 'is_active')
    readonly_fields = ('lot_number', 'stock_quantity', 'expiration_date')
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Product)
class ProductAdmin(ModelAdmin):
    list_display = ['sku', 'name', 'distributor', 'price_display', 'stock_total', 'status_badge']
    list_filter = [
        'distributor',
        'is_active',
        ('base_price', RangeNumericFilter),
    ]
    search_fields = ['sku', 'name']
    list_filter_submit = True
    inlines = [InventoryLotInline]

    @display(description=_("Price"), ordering='base_price')
    def price_display(self, obj):
        return f"${obj.effective_price:.2f}"

    @display(description=_("Stock"))
    def stock_total(self, obj):
        return sum(lot.stock_quantity for lot in obj.lots.filter(is_active=True))

    @display(description=_("Status"), label=True)
    def status_badge(self, obj):
        if obj.is_active:
            return 'success', _("Active")
        return 'danger', _("Inactive")


@admin.register(InventoryLot)
class InventoryLotAdmin(ModelAdmin):
    list_display = ['lot_number', 'product', 'stock_quantity', 'expiration_date', 'is_active']
    list_filter = ['distributor', 'is_active', ('expiration_date', RangeDateFilter)]
    search_fields = ['lot_number', 'product__sku', 'product__name']
    list_filter_submit = True
    # Quantities only change through ledger movements
    readonly_fields = ['stock_quantity', 'created_at', 'updated_at']


@admin.register(StockMovement)
class StockMovementAdmin(ModelAdmin):
    list_display = ['id', 'lot', 'type_badge', 'quantity', 'previous_stock', 'new_stock', 'reason', 'order', 'created_at']
    list_filter = ['movement_type', ('created_at', RangeDateTimeFilter)]
    search_fields = ['lot__lot_number', 'lot__product__sku', 'reason', 'order__order_number']
    list_filter_submit = True
    list_fullwidth = True

    @display(description=_("Type"), label=True)
    def type_badge(self, obj):
        colors = {
            'INBOUND': 'success',
            'OUTBOUND': 'warning',
            'ADJUSTMENT': 'info',
        }
        return colors.get(obj.movement_type, 'info'), obj.get_movement_type_display()

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
