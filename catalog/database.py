from typing import Dict, List, Optional, Protocol

from .config import settings
from .models import Product, User

# This file holds the record stores. Both are in-memory and lost on restart.


class ProductStore(Protocol):
    def get(self, product_id: int) -> Optional[Product]: ...
    def set(self, product: Product) -> None: ...
    def delete(self, product_id: int) -> bool: ...
    def list(self) -> List[Product]: ...
    def next_id(self) -> int: ...
    def __len__(self) -> int: ...


class InMemoryProductStore:
    def __init__(self, id_strategy: str = "counter"):
        if id_strategy not in ("counter", "size"):
            raise ValueError(f"unknown id strategy: {id_strategy}")
        self.id_strategy = id_strategy
        self._products: Dict[int, Product] = {}
        self._last_id = 0

    def get(self, product_id: int) -> Optional[Product]:
        return self._products.get(product_id)

    def set(self, product: Product) -> None:
        self._products[product.id] = product
        self._last_id = max(self._last_id, product.id)

    def delete(self, product_id: int) -> bool:
        return self._products.pop(product_id, None) is not None

    def list(self) -> List[Product]:
        return list(self._products.values())

    def next_id(self) -> int:
        if self.id_strategy == "size":
            # legacy rule: may collide with a live id after a deletion
            return len(self._products) + 1
        return self._last_id + 1

    def __len__(self) -> int:
        return len(self._products)


class UserStore:
    """Users keyed by identity token. Populated by the auth system."""

    def __init__(self, users: Optional[Dict[str, bool]] = None):
        self._users: Dict[str, User] = {}
        for token, admin in (users or {}).items():
            self.add(User(token=token, admin=admin))

    def get(self, token: str) -> Optional[User]:
        return self._users.get(token)

    def add(self, user: User) -> None:
        self._users[user.token] = user

    def remove(self, token: str) -> None:
        self._users.pop(token, None)


PRODUCTS = InMemoryProductStore(settings.PRODUCT_ID_STRATEGY)
USERS = UserStore(settings.SEED_USERS)


def get_product_store() -> ProductStore:
    return PRODUCTS


def get_user_store() -> UserStore:
    return USERS
