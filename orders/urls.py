from django.urls import path
from . import views

app_name = "orders"

urlpatterns = [
    path("", views.OrderListView.as_view(), name="order-list"),
    path("bulk-status/", views.OrderBulkStatusView.as_view(), name="order-bulk-status"),
    path("number/<str:order_number>/", views.OrderByNumberView.as_view(), name="order-by-number"),
    path("suggestions/<int:client_id>/", views.ClientSuggestionsView.as_view(), name="client-suggestions"),
    path("<int:order_id>/", views.OrderDetailView.as_view(), name="order-detail"),
    path("<int:order_id>/confirm/", views.OrderConfirmView.as_view(), name="order-confirm"),
    path("<int:order_id>/status/", views.OrderStatusView.as_view(), name="order-status"),
]
