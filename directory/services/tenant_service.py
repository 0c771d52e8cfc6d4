"""
Tenant resolution for inbound chat identities.

A phone number resolves either to a salesperson (who acts for any of the
distributor's customers) or to a customer ordering for themselves.
"""
import re
from dataclasses import dataclass
from typing import Optional

from directory.models import Salesperson, CustomerDistributor
from stock.services.base_service import TenantResolutionError

SALESPERSON = "salesperson"
CONSUMER = "consumer"


def normalize_phone(phone: str) -> str:
    return re.sub(r"\D", "", phone or "")


@dataclass(frozen=True)
class ResolvedTenant:
    distributor_id: int
    distributor_name: str
    mode: str
    display_name: str
    salesperson_id: Optional[int] = None
    client_id: Optional[int] = None


class TenantResolver:

    @classmethod
    def _candidates(cls, phone: str):
        digits = normalize_phone(phone)
        return {phone.strip(), digits, f"+{digits}"} - {"", "+"}

    @classmethod
    def resolve_phone(cls, phone: str, distributor_id: int = None) -> ResolvedTenant:
        if not normalize_phone(phone):
            raise TenantResolutionError("A phone number is required", "phone_number")
        candidates = cls._candidates(phone)

        salesperson = (
            Salesperson.objects.select_related("distributor")
            .filter(phone__in=candidates, is_active=True, distributor__is_active=True)
            .first()
        )
        if salesperson and distributor_id in (None, salesperson.distributor_id):
            return ResolvedTenant(
                distributor_id=salesperson.distributor_id,
                distributor_name=salesperson.distributor.name,
                mode=SALESPERSON,
                display_name=salesperson.name,
                salesperson_id=salesperson.id,
            )

        links = CustomerDistributor.objects.select_related("customer", "distributor").filter(
            customer__phone__in=candidates, distributor__is_active=True
        )
        if distributor_id is not None:
            links = links.filter(distributor_id=distributor_id)
        links = list(links[:2])

        if not links:
            raise TenantResolutionError(
                f"No salesperson or customer is registered with phone {phone}", "phone_number"
            )
        if len(links) > 1:
            raise TenantResolutionError(
                "This phone number belongs to several distributors; the distributor must be specified",
                "distributor_id",
            )

        link = links[0]
        return ResolvedTenant(
            distributor_id=link.distributor_id,
            distributor_name=link.distributor.name,
            mode=CONSUMER,
            display_name=link.customer.name,
            client_id=link.customer_id,
        )
