from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/stock/', include('stock.urls')),
    path('api/orders/', include('orders.urls')),
    path('api/customers/', include('directory.urls')),
    path('api/agent/', include('agent.urls')),
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
]
