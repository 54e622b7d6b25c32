import math
from pydantic import BaseModel
from typing import Optional, Dict, Any, Mapping
from fastapi import HTTPException
from starlette.datastructures import UploadFile

from .models import Number

# Plain text messages returned to clients
MSG_UNAUTHENTICATED = "Token inválido o usuario no autenticado"
MSG_FORBIDDEN = "No tiene permisos para {action} productos"
MSG_REQUIRED_FIELDS = "Todos los campos son obligatorios"
MSG_INVALID_NUMBER = "Precio o cantidad no válidos"
MSG_INVALID_ID = "ID de producto no válido"
MSG_NOT_FOUND = "Producto no encontrado"
MSG_DELETED = "Producto eliminado correctamente"
MSG_INTERNAL = "Error interno del servidor"


class ProductIn(BaseModel):
    name: str
    description: str
    price: Number
    quantity: Number


class ProductUpdateIn(BaseModel):
    """Partial update. Only fields explicitly set are applied, so a
    legitimate ``quantity=0`` is distinguishable from an omitted field."""
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[Number] = None
    quantity: Optional[Number] = None

    def changes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True)


# Request bodies arrive as raw mappings (multipart form or JSON) and are only
# interpreted after the admin gate, so malformed input never outranks a 401.
def text_field(payload: Mapping[str, Any], key: str) -> Optional[str]:
    value = payload.get(key)
    # empty strings and uploads sent in a text slot count as omitted
    if value is None or isinstance(value, (UploadFile, dict, list)):
        return None
    value = str(value)
    return value or None


def upload_field(payload: Mapping[str, Any], key: str) -> Optional[UploadFile]:
    value = payload.get(key)
    if isinstance(value, UploadFile) and value.filename:
        return value
    return None


def parse_number(raw: str) -> Number:
    raw = raw.strip()
    try:
        return int(raw)
    except ValueError:
        pass
    try:
        value = float(raw)
    except ValueError:
        raise HTTPException(status_code=400, detail=MSG_INVALID_NUMBER)
    if not math.isfinite(value):
        raise HTTPException(status_code=400, detail=MSG_INVALID_NUMBER)
    return value


def parse_product_id(raw: Any) -> int:
    if raw is None or isinstance(raw, bool):
        raise HTTPException(status_code=400, detail=MSG_INVALID_ID)
    if isinstance(raw, int):
        return raw
    try:
        return int(str(raw).strip())
    except ValueError:
        raise HTTPException(status_code=400, detail=MSG_INVALID_ID)


def make_product_in(payload: Mapping[str, Any]) -> ProductIn:
    name = text_field(payload, "name")
    description = text_field(payload, "description")
    price = text_field(payload, "price")
    quantity = text_field(payload, "quantity")
    # every field must be present and non-empty
    if not name or not description or not price or not quantity:
        raise HTTPException(status_code=400, detail=MSG_REQUIRED_FIELDS)
    return ProductIn(
        name=name,
        description=description,
        price=parse_number(price),
        quantity=parse_number(quantity),
    )


def make_product_update(payload: Mapping[str, Any]) -> ProductUpdateIn:
    provided: Dict[str, Any] = {}
    for key in ("name", "description"):
        value = text_field(payload, key)
        if value is not None:
            provided[key] = value
    for key in ("price", "quantity"):
        value = text_field(payload, key)
        if value is not None:
            provided[key] = parse_number(value)
    return ProductUpdateIn(**provided)
