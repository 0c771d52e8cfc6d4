from dataclasses import dataclass
from typing import Optional

from directory.services import ResolvedTenant
from directory.services.tenant_service import CONSUMER, SALESPERSON


@dataclass(frozen=True)
class ToolContext:
    """
    Tenant and session identity for one agent turn. Built from the resolved
    phone number and passed to every tool; tool arguments never override it.
    """

    distributor_id: int
    salesperson_id: Optional[int] = None
    client_id: Optional[int] = None
    session_id: str = ""

    @property
    def is_consumer(self) -> bool:
        return self.salesperson_id is None

    @property
    def toolset(self) -> str:
        return CONSUMER if self.is_consumer else SALESPERSON

    @classmethod
    def from_tenant(cls, tenant: ResolvedTenant, session_id: str = "") -> "ToolContext":
        return cls(
            distributor_id=tenant.distributor_id,
            salesperson_id=tenant.salesperson_id,
            client_id=tenant.client_id,
            session_id=session_id,
        )
