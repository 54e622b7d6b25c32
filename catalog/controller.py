import logging
from typing import Any, List, Mapping, Optional
from fastapi import HTTPException, UploadFile

from .auth import Authenticator, require_admin
from .core import (
    MSG_DELETED, MSG_INTERNAL, MSG_NOT_FOUND, MSG_REQUIRED_FIELDS,
    make_product_in, make_product_update, parse_product_id, upload_field
)
from .database import ProductStore, UserStore
from .models import Product, ProductWithImage
from .storage import ImageStorage

# This file contains the core logic for all product endpoints.

logger = logging.getLogger(__name__)


class ProductController:
    def __init__(self, products: ProductStore, users: UserStore, images: ImageStorage,
                 authenticator: Authenticator, delete_image_on_delete: bool = True):
        self.products = products
        self.users = users
        self.images = images
        self.authenticator = authenticator
        self.delete_image_on_delete = delete_image_on_delete

    def _store_image(self, upload: UploadFile) -> str:
        try:
            return self.images.save(upload.file, upload.filename)
        finally:
            upload.file.close()

    def _with_image(self, product: Product) -> ProductWithImage:
        return ProductWithImage(**product.model_dump(), image=self.images.read_base64(product.image_url))

    # Mutating endpoints
    async def add_product(self, authorization: Optional[str], payload: Mapping[str, Any]) -> Product:
        try:
            await require_admin(self.authenticator, self.users, authorization, "agregar")

            image = upload_field(payload, "image")
            if image is None:
                raise HTTPException(status_code=400, detail=MSG_REQUIRED_FIELDS)
            fields = make_product_in(payload)

            image_url = self._store_image(image)
            # no await between id assignment and insert
            product = Product(id=self.products.next_id(), image_url=image_url, **fields.model_dump())
            self.products.set(product)

            logger.info("product %s created (%s)", product.id, product.name)
            return product
        except HTTPException:
            raise
        except Exception:
            logger.exception("add_product failed")
            raise HTTPException(status_code=500, detail=MSG_INTERNAL)

    async def update_product(self, authorization: Optional[str], payload: Mapping[str, Any]) -> Product:
        try:
            await require_admin(self.authenticator, self.users, authorization, "actualizar")

            pid = parse_product_id(payload.get("productId"))
            product = self.products.get(pid)
            if product is None:
                raise HTTPException(status_code=404, detail=MSG_NOT_FOUND)

            changes = make_product_update(payload).changes()
            image = upload_field(payload, "image")
            if image is not None:
                changes["image_url"] = self._store_image(image)
                if changes["image_url"] != product.image_url:
                    self.images.delete(product.image_url)

            updated = product.model_copy(update=changes)
            self.products.set(updated)

            logger.info("product %s updated: %s", pid, ", ".join(sorted(changes)) or "no changes")
            return updated
        except HTTPException:
            raise
        except Exception:
            logger.exception("update_product failed")
            raise HTTPException(status_code=500, detail=MSG_INTERNAL)

    async def delete_product(self, authorization: Optional[str], payload: Mapping[str, Any]) -> str:
        try:
            await require_admin(self.authenticator, self.users, authorization, "eliminar")

            pid = parse_product_id(payload.get("productId"))
            product = self.products.get(pid)
            if product is None:
                raise HTTPException(status_code=404, detail=MSG_NOT_FOUND)

            # image first, so a failing delete leaves the record in place
            if self.delete_image_on_delete:
                self.images.delete(product.image_url)
            self.products.delete(pid)

            logger.info("product %s deleted", pid)
            return MSG_DELETED
        except HTTPException:
            raise
        except Exception:
            logger.exception("delete_product failed")
            raise HTTPException(status_code=500, detail=MSG_INTERNAL)

    # Read endpoints; an unreadable image fails the whole request
    async def list_products(self) -> List[ProductWithImage]:
        return [self._with_image(p) for p in self.products.list()]

    async def get_product(self, product_id: str) -> ProductWithImage:
        pid = parse_product_id(product_id)
        product = self.products.get(pid)
        if product is None:
            raise HTTPException(status_code=404, detail=MSG_NOT_FOUND)
        return self._with_image(product)
