# catalog/main.py
import json
import logging
from typing import Any, List, Mapping, Optional

from fastapi import Depends, FastAPI, Header, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from rich.logging import RichHandler
from starlette.exceptions import HTTPException as StarletteHTTPException

from .auth import Authenticator, get_authenticator
from .config import Settings, get_settings, settings
from .controller import ProductController
from .core import MSG_INTERNAL, MSG_REQUIRED_FIELDS
from .database import ProductStore, UserStore, get_product_store, get_user_store
from .models import HealthResponse, Product, ProductWithImage
from .storage import ImageStorage, get_image_storage

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(message)s",
    datefmt="[%X]",
    handlers=[RichHandler(rich_tracebacks=True)],
)
logger = logging.getLogger(__name__)

app = FastAPI(title="product-catalog", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------
# Error rendering (plain text bodies)
# ---------------------------
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return PlainTextResponse(str(exc.detail), status_code=exc.status_code,
                             headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning("rejected request on %s %s: %s", request.method, request.url.path, exc.errors())
    return PlainTextResponse(MSG_REQUIRED_FIELDS, status_code=400)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("unhandled error on %s %s", request.method, request.url.path)
    return PlainTextResponse(MSG_INTERNAL, status_code=500)


# ---------------------------
# Wiring
# ---------------------------
async def read_payload(request: Request) -> Mapping[str, Any]:
    """Request body as a mapping: a multipart or urlencoded form, or a JSON
    object. Anything unreadable is an empty mapping, which the controller
    rejects once the caller has passed the admin gate."""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(("multipart/form-data", "application/x-www-form-urlencoded")):
        return await request.form()
    body = await request.body()
    if not body:
        return {}
    try:
        data = json.loads(body)
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def get_controller(
    products: ProductStore = Depends(get_product_store),
    users: UserStore = Depends(get_user_store),
    images: ImageStorage = Depends(get_image_storage),
    authenticator: Authenticator = Depends(get_authenticator),
    cfg: Settings = Depends(get_settings),
) -> ProductController:
    return ProductController(products, users, images, authenticator,
                             delete_image_on_delete=cfg.DELETE_IMAGE_ON_DELETE)


@app.get("/health", response_model=HealthResponse)
async def health():
    return HealthResponse(status="ok", service="product-catalog")


# ---------------------------
# Product endpoints
# ---------------------------
@app.post("/products", response_model=Product, status_code=201)
async def add_product(
    payload: Mapping[str, Any] = Depends(read_payload),
    authorization: Optional[str] = Header(None),
    controller: ProductController = Depends(get_controller),
):
    return await controller.add_product(authorization, payload)


@app.get("/products", response_model=List[ProductWithImage])
async def list_products(controller: ProductController = Depends(get_controller)):
    return await controller.list_products()


@app.get("/products/{product_id}", response_model=ProductWithImage)
async def get_product(product_id: str, controller: ProductController = Depends(get_controller)):
    return await controller.get_product(product_id)


@app.put("/products", response_model=Product)
async def update_product(
    payload: Mapping[str, Any] = Depends(read_payload),
    authorization: Optional[str] = Header(None),
    controller: ProductController = Depends(get_controller),
):
    return await controller.update_product(authorization, payload)


@app.delete("/products", response_class=PlainTextResponse)
async def delete_product(
    payload: Mapping[str, Any] = Depends(read_payload),
    authorization: Optional[str] = Header(None),
    controller: ProductController = Depends(get_controller),
):
    return await controller.delete_product(authorization, payload)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("catalog.main:app", host="0.0.0.0", port=8085)
