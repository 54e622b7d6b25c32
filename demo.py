#!/usr/bin/env python
import asyncio
import os
import sys
import tempfile
from pathlib import Path
from sdk.pycatalog import CatalogClient

# 1x1 transparent PNG
PIXEL_PNG = bytes.fromhex(
    "89504e470d0a1a0a0000000d4948445200000001000000010806000000"
    "1f15c4890000000d49444154789c6360000002000001e221bc330000000049454e44ae426082"
)


def main():
    token = os.getenv("CATALOG_TOKEN")
    if not token:
        sys.exit("Set CATALOG_TOKEN to an admin token known to the whoami service")
    c = CatalogClient(base_url=os.getenv("CATALOG_URL", "http://127.0.0.1:8085"), token=token)
    print("Server:", c.health())

    workdir = Path(tempfile.mkdtemp(prefix="catalog-demo-"))
    image = workdir / "widget.png"
    image.write_bytes(PIXEL_PNG)

    # -----------------------------
    # Create a product
    # -----------------------------
    print("Creating product...")
    created = c.add_product("Widget", "A widget", 10, 5, image)
    print(created)
    pid = created["id"]

    # -----------------------------
    # List / fetch
    # -----------------------------
    print("\nListing products...")
    for p in c.list_products():
        print(p["id"], p["name"], p["imageUrl"], f"{len(p['image'])} base64 chars")

    print(f"\nFetching product {pid} and saving its image...")
    product = asyncio.run(c.get_product_async(pid))
    print(c.save_image(product, workdir / "downloaded.png"))

    # -----------------------------
    # Partial update
    # -----------------------------
    print("\nUpdating price only...")
    print(c.update_product(pid, price=12.5))

    # -----------------------------
    # Delete
    # -----------------------------
    print("\nDeleting product...")
    print(c.delete_product(pid))


if __name__ == "__main__":
    main()
