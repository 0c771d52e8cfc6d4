from django.urls import path
from . import views

app_name = "stock"

urlpatterns = [
    path("search/", views.StockSearchView.as_view(), name="search"),
    path("products/", views.ProductCreateView.as_view(), name="product-create"),
    path("products/<str:sku>/", views.ProductStockView.as_view(), name="product-stock"),
    path("expiring/", views.ExpiringLotsView.as_view(), name="expiring"),

    path("intake/", views.StockIntakeView.as_view(), name="intake"),
    path("lots/<int:lot_id>/adjust/", views.LotAdjustView.as_view(), name="lot-adjust"),
    path("movements/", views.MovementListView.as_view(), name="movement-list"),
]
