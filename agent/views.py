import logging

from django.views.decorators.csrf import csrf_exempt
from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.response import Response

from agent.context import ToolContext
from agent.services import SalesAgentService
from agent.tools import TOOLSETS, invoke_tool, tool_definitions
from directory.services import TenantResolver
from stock.services import ServiceError, ValidationError, TenantResolutionError

logger = logging.getLogger(__name__)

GENERIC_FAILURE = "Tuvimos un problema procesando tu mensaje. Intentá de nuevo en unos minutos."

ERROR_STATUS = {
    "VALIDATION_ERROR": status.HTTP_400_BAD_REQUEST,
    "TENANT_RESOLUTION_ERROR": status.HTTP_400_BAD_REQUEST,
    "UNKNOWN_TOOL": status.HTTP_404_NOT_FOUND,
    "NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "INSUFFICIENT_STOCK": status.HTTP_409_CONFLICT,
    "INVALID_TRANSITION": status.HTTP_409_CONFLICT,
}


def _optional_int(value, field):
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be an integer", field)


def _error(e: ServiceError):
    return Response(
        {"success": False, "message": e.message, "error_code": e.code, "details": e.details},
        status=ERROR_STATUS.get(e.code, status.HTTP_400_BAD_REQUEST),
    )


@csrf_exempt
@api_view(["POST"])
def chat(request):
    data = request.data
    try:
        result = SalesAgentService.run(
            phone_number=data.get("phone_number", ""),
            text=data.get("text", ""),
            distributor_id=_optional_int(data.get("distributor_id"), "distributor_id"),
        )
    except ServiceError as e:
        return _error(e)
    except Exception:
        logger.exception("Chat request failed")
        return Response(
            {"success": False, "message": GENERIC_FAILURE},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    return Response(result)


@csrf_exempt
@api_view(["GET"])
def list_tools(request):
    toolset = request.GET.get("toolset", "salesperson")
    if toolset not in TOOLSETS:
        return Response(
            {"success": False, "message": f"Unknown toolset: {toolset}", "error_code": "VALIDATION_ERROR"},
            status=status.HTTP_400_BAD_REQUEST,
        )
    return Response({"success": True, "toolset": toolset, "tools": tool_definitions(toolset)})


@csrf_exempt
@api_view(["POST"])
def run_tool(request, name):
    data = request.data
    try:
        tenant = TenantResolver.resolve_phone(
            data.get("phone_number", ""),
            _optional_int(data.get("distributor_id"), "distributor_id"),
        )
    except (TenantResolutionError, ValidationError) as e:
        return _error(e)

    context = ToolContext.from_tenant(
        tenant, SalesAgentService.session_id_for(tenant.distributor_id, data.get("phone_number", ""))
    )
    result = invoke_tool(name, data.get("arguments") or {}, context)
    if result.get("success"):
        return Response(result)
    return Response(result, status=ERROR_STATUS.get(result.get("error_code"), status.HTTP_400_BAD_REQUEST))


@csrf_exempt
@api_view(["DELETE"])
def expire_conversation(request, session_id):
    return Response(SalesAgentService.reset(session_id))
