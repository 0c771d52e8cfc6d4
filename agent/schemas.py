"""
Input models for the agent tools.

Field names are exposed to the model in camelCase (clientId, topN, ...) and
accepted in either spelling. Unknown fields are rejected.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class ToolInput(BaseModel):
    model_config = ConfigDict(
        extra="forbid",
        str_strip_whitespace=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class ConsultarStockInput(ToolInput):
    query: str = Field(
        min_length=1,
        max_length=200,
        description="Nombre o SKU a buscar. Varios términos separados por coma.",
    )


class SugerirProductosInput(ToolInput):
    client_id: Optional[int] = Field(
        default=None, gt=0, description="Cliente para el que se sugieren productos."
    )
    as_of: Optional[datetime] = Field(
        default=None, description="Fecha de referencia ISO 8601. Por defecto, ahora."
    )
    top_n: Optional[int] = Field(
        default=None, ge=1, le=50, description="Cantidad máxima de sugerencias."
    )


class OrderLineInput(ToolInput):
    sku: str = Field(min_length=1, max_length=50, description="SKU del producto.")
    quantity: int = Field(gt=0, description="Unidades pedidas, entero positivo.")


class CrearOrdenInput(ToolInput):
    client_id: Optional[int] = Field(
        default=None, gt=0, description="Cliente que realiza el pedido."
    )
    items: List[OrderLineInput] = Field(min_length=1, description="Productos y cantidades.")
    delivery_address: Optional[str] = Field(
        default=None, max_length=255, description="Dirección de entrega, si difiere de la del cliente."
    )
    notes: Optional[str] = Field(default=None, max_length=1000, description="Observaciones del pedido.")


class ConfirmarOrdenInput(ToolInput):
    order_id: int = Field(gt=0, description="Identificador de la orden a confirmar.")


class ObtenerOrdenInput(ToolInput):
    order_id: Optional[int] = Field(default=None, gt=0, description="Identificador de la orden.")
    order_number: Optional[str] = Field(
        default=None, min_length=1, max_length=40, description="Número de orden (ORD-...)."
    )

    @model_validator(mode="after")
    def require_reference(self):
        if self.order_id is None and self.order_number is None:
            raise ValueError("orderId or orderNumber is required")
        return self


class ListarClientesInput(ToolInput):
    query: Optional[str] = Field(
        default=None, max_length=100, description="Filtro opcional por nombre, teléfono o ciudad."
    )


class BuscarClientesInput(ToolInput):
    query: str = Field(
        min_length=1, max_length=100, description="Nombre, teléfono o ciudad del cliente."
    )
