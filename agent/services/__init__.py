from .agent_service import SalesAgentService


__all__ = [
    "SalesAgentService",
]
