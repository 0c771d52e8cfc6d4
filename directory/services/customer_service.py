"""
Customer Service - tenant-scoped customer lookups
"""
from typing import Dict, Any

from django.db.models import Q

from directory.models import Customer, CustomerDistributor
from stock.services.base_service import (
    BaseService, success_response, paginate_queryset, NotFoundError,
)


class CustomerService(BaseService):
    model = Customer

    @classmethod
    def serialize(cls, link: CustomerDistributor) -> Dict[str, Any]:
        customer = link.customer
        return {
            "id": customer.id,
            "name": customer.name,
            "phone": customer.phone or None,
            "email": customer.email or None,
            "address": customer.address or None,
            "city": customer.city or None,
            "client_type": link.client_type or None,
            "assigned_salesperson_id": link.assigned_salesperson_id,
        }

    @classmethod
    def get_for_distributor(cls, distributor_id: int, client_id: int) -> Customer:
        """The customer, only when linked to the distributor"""
        link = (
            CustomerDistributor.objects.select_related("customer")
            .filter(distributor_id=distributor_id, customer_id=client_id)
            .first()
        )
        if not link:
            raise NotFoundError("Client", client_id)
        return link.customer

    @classmethod
    def list_for_distributor(cls,
                             distributor_id: int,
                             query: str = None,
                             salesperson_id: int = None,
                             page: int = 1,
                             per_page: int = 50) -> Dict[str, Any]:
        queryset = CustomerDistributor.objects.select_related("customer").filter(
            distributor_id=distributor_id
        )
        if salesperson_id:
            queryset = queryset.filter(assigned_salesperson_id=salesperson_id)
        if query:
            queryset = queryset.filter(
                Q(customer__name__icontains=query)
                | Q(customer__phone__icontains=query)
                | Q(customer__city__icontains=query)
            )
        queryset = queryset.order_by("customer__name", "customer_id")

        links, pagination = paginate_queryset(queryset, page, per_page)
        return success_response({
            "clients": [cls.serialize(link) for link in links],
            "pagination": pagination,
        })
