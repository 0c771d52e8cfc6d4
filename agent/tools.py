"""
Tool Adapter Layer - the operations the sales agent can call.

Each tool has a pydantic input model and a handler. `invoke_tool` validates
the raw arguments, injects the tenant context and turns business failures
into structured results the model can read and react to. Infrastructure
errors are not caught here.
"""
import copy
import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Type

from pydantic import ValidationError as SchemaValidationError

from agent.context import ToolContext
from agent.schemas import (
    ToolInput,
    ConsultarStockInput,
    SugerirProductosInput,
    CrearOrdenInput,
    ConfirmarOrdenInput,
    ObtenerOrdenInput,
    ListarClientesInput,
    BuscarClientesInput,
)
from directory.services import CustomerService
from directory.services.tenant_service import CONSUMER, SALESPERSON
from orders.services import OrderPipelineService, SuggestionService
from stock.services import CatalogService
from stock.services.base_service import (
    ServiceError, ValidationError, TenantResolutionError, error_response,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Tool:
    name: str
    description: str
    input_model: Type[ToolInput]
    handler: Callable[[Any, ToolContext], Dict[str, Any]]


# ==================== CONTEXT ====================

def resolve_client_id(requested, context: ToolContext) -> int:
    """
    Customers always act on their own account. Salespeople name the client
    explicitly unless the session is already bound to one.
    """
    if context.is_consumer:
        if context.client_id is None:
            raise TenantResolutionError("No customer is associated with this conversation", "client_id")
        if requested is not None and requested != context.client_id:
            raise ValidationError("Customers can only act on their own account", "client_id")
        return context.client_id

    client_id = requested or context.client_id
    if client_id is None:
        raise TenantResolutionError(
            "A client is required. Ask which customer the request is for.", "client_id"
        )
    return client_id


# ==================== HANDLERS ====================

def consultar_stock(args: ConsultarStockInput, context: ToolContext) -> Dict[str, Any]:
    return CatalogService.search_stock(context.distributor_id, args.query)


def sugerir_productos(args: SugerirProductosInput, context: ToolContext) -> Dict[str, Any]:
    return SuggestionService.suggest_products(
        distributor_id=context.distributor_id,
        client_id=resolve_client_id(args.client_id, context),
        as_of=args.as_of,
        top_n=args.top_n,
    )


def crear_orden(args: CrearOrdenInput, context: ToolContext) -> Dict[str, Any]:
    return OrderPipelineService.create_order(
        distributor_id=context.distributor_id,
        client_id=resolve_client_id(args.client_id, context),
        items=[line.model_dump() for line in args.items],
        salesperson_id=context.salesperson_id,
        delivery_address=args.delivery_address or "",
        notes=args.notes or "",
    )


def confirmar_orden(args: ConfirmarOrdenInput, context: ToolContext) -> Dict[str, Any]:
    return OrderPipelineService.confirm_order(args.order_id, distributor_id=context.distributor_id)


def obtener_orden(args: ObtenerOrdenInput, context: ToolContext) -> Dict[str, Any]:
    client_id = context.client_id if context.is_consumer else None
    if args.order_id is not None:
        return OrderPipelineService.get_order_by_id(
            args.order_id, distributor_id=context.distributor_id, client_id=client_id
        )
    return OrderPipelineService.get_order_by_number(
        args.order_number, distributor_id=context.distributor_id, client_id=client_id
    )


def listar_clientes(args, context: ToolContext) -> Dict[str, Any]:
    return CustomerService.list_for_distributor(context.distributor_id, query=args.query)


# ==================== REGISTRY ====================

TOOLS: Dict[str, Tool] = {
    tool.name: tool
    for tool in (
        Tool(
            "consultarStock",
            "Busca productos por nombre o SKU y devuelve precio y stock disponible.",
            ConsultarStockInput,
            consultar_stock,
        ),
        Tool(
            "sugerirProductos",
            "Sugiere productos para un cliente según su historial, popularidad, "
            "novedades y stock próximo a vencer. Cada sugerencia trae sus motivos.",
            SugerirProductosInput,
            sugerir_productos,
        ),
        Tool(
            "crearOrden",
            "Crea una orden en estado pendiente para un cliente. Verifica stock "
            "pero no lo descuenta hasta confirmar.",
            CrearOrdenInput,
            crear_orden,
        ),
        Tool(
            "crearPedido",
            "Crea un pedido pendiente para el cliente de esta conversación.",
            CrearOrdenInput,
            crear_orden,
        ),
        Tool(
            "confirmarOrden",
            "Confirma una orden pendiente y descuenta el stock. Falla si algún "
            "producto ya no tiene stock suficiente.",
            ConfirmarOrdenInput,
            confirmar_orden,
        ),
        Tool(
            "obtenerOrden",
            "Devuelve una orden con sus productos y total.",
            ObtenerOrdenInput,
            obtener_orden,
        ),
        Tool(
            "obtenerPedido",
            "Devuelve un pedido del cliente de esta conversación.",
            ObtenerOrdenInput,
            obtener_orden,
        ),
        Tool(
            "listarClientes",
            "Lista los clientes del distribuidor, con filtro opcional.",
            ListarClientesInput,
            listar_clientes,
        ),
        Tool(
            "buscarClientes",
            "Busca clientes del distribuidor por nombre, teléfono o ciudad.",
            BuscarClientesInput,
            listar_clientes,
        ),
    )
}

TOOLSETS: Dict[str, tuple] = {
    SALESPERSON: (
        "consultarStock",
        "sugerirProductos",
        "crearOrden",
        "confirmarOrden",
        "obtenerOrden",
        "listarClientes",
        "buscarClientes",
    ),
    CONSUMER: (
        "consultarStock",
        "sugerirProductos",
        "crearPedido",
        "obtenerPedido",
    ),
}


# ==================== SCHEMAS ====================

def _inline_refs(schema: Dict[str, Any]) -> Dict[str, Any]:
    """Replace pydantic's $defs/$ref indirection with the definitions themselves"""
    definitions = schema.pop("$defs", {})

    def resolve(node):
        if isinstance(node, dict):
            ref = node.get("$ref")
            if ref and ref.startswith("#/$defs/"):
                return resolve(copy.deepcopy(definitions[ref.split("/")[-1]]))
            return {key: resolve(value) for key, value in node.items()}
        if isinstance(node, list):
            return [resolve(value) for value in node]
        return node

    return resolve(schema)


def tool_definitions(toolset: str = SALESPERSON) -> List[Dict[str, Any]]:
    """OpenAI function-calling specs, ready for `ChatOpenAI.bind_tools`"""
    if toolset not in TOOLSETS:
        raise ValueError(f"Unknown toolset: {toolset}")
    definitions = []
    for name in TOOLSETS[toolset]:
        tool = TOOLS[name]
        parameters = _inline_refs(tool.input_model.model_json_schema(by_alias=True))
        parameters.pop("title", None)
        definitions.append({
            "type": "function",
            "function": {
                "name": tool.name,
                "description": tool.description,
                "parameters": parameters,
            },
        })
    return definitions


# ==================== INVOCATION ====================

def _schema_errors(exc: SchemaValidationError) -> List[Dict[str, str]]:
    return [
        {"field": ".".join(str(part) for part in error["loc"]) or "arguments", "message": error["msg"]}
        for error in exc.errors()
    ]


def invoke_tool(name: str, arguments: Any, context: ToolContext) -> Dict[str, Any]:
    available = TOOLSETS[context.toolset]
    if name not in available:
        logger.warning(f"Unknown tool requested: {name} ({context.toolset})")
        return error_response(
            f"Unknown tool: {name}", "UNKNOWN_TOOL", {"tool": name, "available": list(available)}
        )
    tool = TOOLS[name]

    if arguments is None:
        arguments = {}
    if isinstance(arguments, str):
        try:
            arguments = json.loads(arguments) if arguments.strip() else {}
        except json.JSONDecodeError:
            return error_response(f"Arguments for {name} are not valid JSON", "VALIDATION_ERROR")

    try:
        args = tool.input_model.model_validate(arguments)
    except SchemaValidationError as e:
        logger.warning(f"Tool {name} rejected arguments: {e.error_count()} error(s)")
        return error_response(
            f"Invalid arguments for {name}", "VALIDATION_ERROR", {"errors": _schema_errors(e)}
        )

    try:
        result = tool.handler(args, context)
    except ServiceError as e:
        logger.warning(f"Tool {name} failed for distributor {context.distributor_id}: {e.code} {e.message}")
        return error_response(e.message, e.code, e.details)

    logger.info(f"Tool {name} executed for distributor {context.distributor_id}")
    return result
