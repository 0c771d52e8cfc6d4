"""
Order Services - order pipeline and product suggestions

Usage:
    from orders.services import OrderPipelineService, SuggestionService

    result = OrderPipelineService.create_order(distributor_id=1, client_id=7,
                                               items=[{"sku": "AR-001", "quantity": 4}])
    OrderPipelineService.confirm_order(result["order"]["id"])

    SuggestionService.suggest_products(distributor_id=1, client_id=7, top_n=5)
"""

from .order_service import OrderPipelineService
from .suggestion_service import SuggestionService, ProductFeatures


__all__ = [
    "OrderPipelineService",
    "SuggestionService",
    "ProductFeatures",
]
