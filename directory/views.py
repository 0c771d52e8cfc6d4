from directory.services import CustomerService
from stock.views import BaseApiView, handle_service_error


class CustomerListView(BaseApiView):

    def get(self, request):
        try:
            result = CustomerService.list_for_distributor(
                distributor_id=self.get_distributor_id(request),
                query=request.GET.get("q"),
                salesperson_id=self.get_int_param(request, "salesperson_id"),
                page=self.get_int_param(request, "page", 1),
                per_page=self.get_int_param(request, "per_page", 50),
            )
            return self.success(result)
        except Exception as e:
            return handle_service_error(e)
