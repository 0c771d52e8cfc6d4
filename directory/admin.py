from django.contrib import admin
from django.utils.translation import gettext_lazy as _
from unfold.admin import ModelAdmin, TabularInline
from unfold.decorators import display
from unfold.contrib.filters.admin import RangeDateFilter

from .models import Distributor, Salesperson, Customer, CustomerDistributor


class CustomerDistributorInline(TabularInline):
    model = CustomerDistributor
    extra = 0
    fields = ('distributor', 'client_type', 'assigned_salesperson')


@admin.register(Distributor)
class DistributorAdmin(ModelAdmin):
    list_display = ['id', 'name', 'status_badge', 'customer_count', 'created_at']
    list_filter = ['is_active', ('created_at', RangeDateFilter)]
    search_fields = ['name']
    list_filter_submit = True

    @display(description=_("Status"), label=True)
    def status_badge(self, obj):
        if obj.is_active:
            return 'success', _("Active")
        return 'danger', _("Inactive")

    @display(description=_("Customers"))
    def customer_count(self, obj):
        return obj.customer_links.count()


@admin.register(Salesperson)
class SalespersonAdmin(ModelAdmin):
    list_display = ['id', 'name', 'phone', 'distributor', 'is_active']
    list_filter = ['distributor', 'is_active']
    search_fields = ['name', 'phone', 'email']
    list_filter_submit = True


@admin.register(Customer)
class CustomerAdmin(ModelAdmin):
    list_display = ['id', 'name', 'phone', 'city', 'created_at']
    list_filter = ['distributors', ('created_at', RangeDateFilter)]
    search_fields = ['name', 'phone', 'email', 'city']
    list_filter_submit = True
    inlines = [CustomerDistributorInline]
