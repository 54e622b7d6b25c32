# tests/conftest.py
import pytest
from fastapi.testclient import TestClient

from catalog.auth import Unauthenticated, get_authenticator
from catalog.config import Settings, get_settings
from catalog.database import InMemoryProductStore, UserStore, get_product_store, get_user_store
from catalog.main import app
from catalog.models import Identity
from catalog.storage import ImageStorage, get_image_storage

ADMIN = {"Authorization": "Bearer admin-token"}
CUSTOMER = {"Authorization": "Bearer user-token"}
# accepted by the identity service but unknown to the user store
GHOST = {"Authorization": "Bearer ghost-token"}

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-image-payload"


class FakeAuthenticator:
    def __init__(self, known_tokens):
        self.known_tokens = set(known_tokens)
        self.calls = []

    async def verify(self, authorization):
        self.calls.append(authorization)
        if not authorization or not authorization.startswith("Bearer "):
            raise Unauthenticated("missing or malformed header")
        token = authorization[len("Bearer "):]
        if token not in self.known_tokens:
            raise Unauthenticated("unknown token")
        return Identity(token=token)


@pytest.fixture
def upload_dir(tmp_path):
    return tmp_path / "uploads"


@pytest.fixture
def images(upload_dir):
    return ImageStorage(upload_dir)


@pytest.fixture
def users():
    return UserStore({"admin-token": True, "user-token": False})


@pytest.fixture
def authenticator():
    return FakeAuthenticator({"admin-token", "user-token", "ghost-token"})


@pytest.fixture
def make_client(images, users, authenticator):
    """Builds a TestClient over fresh collaborators; keyword arguments
    replace the defaults."""

    def _make(products=None, images=images, users=users, authenticator=authenticator,
              settings=None, raise_server_exceptions=True):
        products = products if products is not None else InMemoryProductStore()
        settings = settings or Settings()
        app.dependency_overrides[get_product_store] = lambda: products
        app.dependency_overrides[get_user_store] = lambda: users
        app.dependency_overrides[get_image_storage] = lambda: images
        app.dependency_overrides[get_authenticator] = lambda: authenticator
        app.dependency_overrides[get_settings] = lambda: settings
        client = TestClient(app, raise_server_exceptions=raise_server_exceptions)
        client.products = products
        return client

    yield _make
    app.dependency_overrides.clear()


@pytest.fixture
def client(make_client):
    return make_client()


def add_product(client, headers=ADMIN, image=PNG_BYTES, filename="widget.png", **fields):
    data = {"name": "Widget", "description": "A widget", "price": "10", "quantity": "5"}
    data.update(fields)
    data = {k: v for k, v in data.items() if v is not None}
    files = {"image": (filename, image, "image/png")} if image is not None else None
    return client.post("/products", data=data, files=files, headers=headers)


def update_product(client, headers=ADMIN, image=None, filename="new.png", **fields):
    files = {"image": (filename, image, "image/png")} if image is not None else None
    return client.put("/products", data=fields, files=files, headers=headers)


def delete_product(client, payload, headers=ADMIN):
    return client.request("DELETE", "/products", json=payload, headers=headers)
