from orders.services import OrderPipelineService, SuggestionService
from stock.views import BaseApiView, handle_service_error


class OrderListView(BaseApiView):

    def get(self, request):
        try:
            result = OrderPipelineService.list_by_distributor(
                distributor_id=self.get_distributor_id(request),
                status=request.GET.get("status"),
                client_id=self.get_int_param(request, "client_id"),
                page=self.get_int_param(request, "page", 1),
                per_page=self.get_int_param(request, "per_page", 20),
            )
            return self.success(result)
        except Exception as e:
            return handle_service_error(e)

    def post(self, request):
        try:
            data = self.get_json_body(request)
            result = OrderPipelineService.create_order(
                distributor_id=self.get_distributor_id(request),
                client_id=data.get("client_id"),
                items=data.get("items"),
                salesperson_id=data.get("salesperson_id"),
                delivery_address=data.get("delivery_address", ""),
                notes=data.get("notes", ""),
            )
            return self.success(result, 201)
        except Exception as e:
            return handle_service_error(e)


class OrderDetailView(BaseApiView):

    def get(self, request, order_id):
        try:
            result = OrderPipelineService.get_order_by_id(
                order_id, distributor_id=self.get_distributor_id(request)
            )
            return self.success(result)
        except Exception as e:
            return handle_service_error(e)


class OrderByNumberView(BaseApiView):

    def get(self, request, order_number):
        try:
            result = OrderPipelineService.get_order_by_number(
                order_number, distributor_id=self.get_distributor_id(request)
            )
            return self.success(result)
        except Exception as e:
            return handle_service_error(e)


class OrderConfirmView(BaseApiView):

    def post(self, request, order_id):
        try:
            result = OrderPipelineService.confirm_order(
                order_id, distributor_id=self.get_distributor_id(request)
            )
            return self.success(result)
        except Exception as e:
            return handle_service_error(e)


class OrderStatusView(BaseApiView):

    def post(self, request, order_id):
        try:
            data = self.get_json_body(request)
            result = OrderPipelineService.update_order_status(
                order_id,
                data.get("status"),
                distributor_id=self.get_distributor_id(request),
            )
            return self.success(result)
        except Exception as e:
            return handle_service_error(e)


class OrderBulkStatusView(BaseApiView):

    def post(self, request):
        try:
            data = self.get_json_body(request)
            result = OrderPipelineService.bulk_update_status(
                order_ids=data.get("order_ids"),
                new_status=data.get("status"),
                distributor_id=self.get_distributor_id(request),
            )
            return self.success(result)
        except Exception as e:
            return handle_service_error(e)


class ClientSuggestionsView(BaseApiView):

    def get(self, request, client_id):
        try:
            result = SuggestionService.suggest_products(
                distributor_id=self.get_distributor_id(request),
                client_id=client_id,
                as_of=request.GET.get("as_of"),
                top_n=self.get_int_param(request, "top_n"),
            )
            return self.success(result)
        except Exception as e:
            return handle_service_error(e)
