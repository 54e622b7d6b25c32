# sdk/pycatalog.py
import base64
import mimetypes
import requests
import httpx
from pathlib import Path
from typing import Optional, Union
from rich import print


class CatalogClient:
    def __init__(self, base_url: str = "http://localhost:8085", token: Optional[str] = None, timeout: int = 10):
        self.base_url = base_url.rstrip("/")
        self.session = requests.Session()
        self.timeout = timeout
        if token:
            self.session.headers.update({"Authorization": f"Bearer {token}"})

    def health(self):
        r = self.session.get(f"{self.base_url}/health", timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def _image_part(self, image_path: Union[str, Path]):
        path = Path(image_path)
        content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        return {"image": (path.name, path.read_bytes(), content_type)}

    # Products (admin)
    def add_product(self, name: str, description: str, price: float, quantity: int, image_path: Union[str, Path]):
        data = {"name": name, "description": description, "price": str(price), "quantity": str(quantity)}
        r = self.session.post(f"{self.base_url}/products", data=data, files=self._image_part(image_path),
                              timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def update_product(self, product_id: int, name: Optional[str] = None, description: Optional[str] = None,
                       price: Optional[float] = None, quantity: Optional[int] = None,
                       image_path: Optional[Union[str, Path]] = None):
        # only send what was given; omitted fields stay unchanged server-side
        data = {"productId": str(product_id)}
        for key, value in (("name", name), ("description", description), ("price", price), ("quantity", quantity)):
            if value is not None:
                data[key] = str(value)
        files = self._image_part(image_path) if image_path else None
        r = self.session.put(f"{self.base_url}/products", data=data, files=files, timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def delete_product(self, product_id: int) -> str:
        r = self.session.delete(f"{self.base_url}/products", json={"productId": product_id}, timeout=self.timeout)
        r.raise_for_status()
        return r.text

    # Products (public)
    def list_products(self):
        r = self.session.get(f"{self.base_url}/products", timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def get_product(self, product_id: Union[int, str]):
        r = self.session.get(f"{self.base_url}/products/{product_id}", timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    async def get_product_async(self, product_id: Union[int, str]):
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            r = await client.get(f"{self.base_url}/products/{product_id}")
            r.raise_for_status()
            return r.json()

    @staticmethod
    def save_image(product: dict, dest: Union[str, Path]) -> Path:
        """Write the base64 ``image`` of a fetched product to ``dest``.

        When ``dest`` is a directory the file keeps the stored name.
        """
        dest = Path(dest)
        if dest.is_dir():
            dest = dest / Path(product["imageUrl"]).name
        dest.write_bytes(base64.b64decode(product["image"]))
        return dest


def _strip_image(product: dict) -> dict:
    # base64 payloads are unreadable on a terminal
    return {k: v for k, v in product.items() if k != "image"}


if __name__ == "__main__":
    import argparse
    import os

    parser = argparse.ArgumentParser(description="PyCatalog CLI")
    parser.add_argument("--base-url", default=os.getenv("CATALOG_URL", "http://127.0.0.1:8085"))
    parser.add_argument("--token", default=os.getenv("CATALOG_TOKEN"), help="Bearer token for admin commands")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("list-products", help="List all products")

    gp = subparsers.add_parser("get-product", help="Get a product by its ID")
    gp.add_argument("--product-id", required=True, help="ID of the product")
    gp.add_argument("--save-image", help="Write the product image to this path")

    ap = subparsers.add_parser("add-product", help="Create a product (admin)")
    ap.add_argument("--name", required=True)
    ap.add_argument("--description", required=True)
    ap.add_argument("--price", type=float, required=True)
    ap.add_argument("--quantity", type=int, required=True)
    ap.add_argument("--image", required=True, help="Path of the image to upload")

    up = subparsers.add_parser("update-product", help="Update a product (admin)")
    up.add_argument("--product-id", type=int, required=True)
    up.add_argument("--name")
    up.add_argument("--description")
    up.add_argument("--price", type=float)
    up.add_argument("--quantity", type=int)
    up.add_argument("--image", help="Path of a replacement image")

    dp = subparsers.add_parser("delete-product", help="Delete a product (admin)")
    dp.add_argument("--product-id", type=int, required=True)

    args = parser.parse_args()
    c = CatalogClient(base_url=args.base_url, token=args.token)

    if args.command == "list-products":
        print([_strip_image(p) for p in c.list_products()])

    elif args.command == "get-product":
        product = c.get_product(args.product_id)
        if args.save_image:
            print(f"[green]Image written to {c.save_image(product, args.save_image)}[/green]")
        print(_strip_image(product))

    elif args.command == "add-product":
        print(c.add_product(args.name, args.description, args.price, args.quantity, args.image))

    elif args.command == "update-product":
        print(c.update_product(args.product_id, args.name, args.description, args.price, args.quantity, args.image))

    elif args.command == "delete-product":
        print(c.delete_product(args.product_id))
