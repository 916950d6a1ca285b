"""
In-memory product record store. Stands in for the catalog database; deletes are soft
(is_active = False) and inactive products are invisible to every read.
"""
import itertools
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Product:
    id: int
    name: str
    price: Decimal
    description: str = ""
    image: str = ""
    category: str = ""
    stock_quantity: int = 0
    is_active: bool = True
    created_at: datetime = field(default_factory=_utc_now)
    updated_at: datetime = field(default_factory=_utc_now)


class ProductStore:
    def __init__(self):
        self._products: dict[int, Product] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def _active(self) -> list[Product]:
        return sorted((p for p in self._products.values() if p.is_active), key=lambda p: p.name)

    def list_active(self) -> list[Product]:
        with self._lock:
            return self._active()

    def get(self, product_id: int) -> Product | None:
        with self._lock:
            product = self._products.get(product_id)
            return product if product is not None and product.is_active else None

    def create(
        self,
        name: str,
        price: Decimal,
        description: str = "",
        image: str = "",
        category: str = "",
        stock_quantity: int = 0,
    ) -> Product:
        with self._lock:
            product = Product(
                id=next(self._ids),
                name=name,
                price=price,
                description=description,
                image=image,
                category=category,
                stock_quantity=stock_quantity,
            )
            self._products[product.id] = product
            return product

    def update(self, product_id: int, **changes) -> Product | None:
        """Apply non-empty changes (None and "" leave a field as is). None if not found."""
        with self._lock:
            product = self._products.get(product_id)
            if product is None or not product.is_active:
                return None
            for name in ("name", "description", "image", "price", "stock_quantity"):
                value = changes.get(name)
                if value is not None and value != "":
                    setattr(product, name, value)
            product.updated_at = _utc_now()
            return product

    def delete(self, product_id: int) -> bool:
        with self._lock:
            product = self._products.get(product_id)
            if product is None or not product.is_active:
                return False
            product.is_active = False
            product.updated_at = _utc_now()
            return True

    def by_category(self, category: str) -> list[Product]:
        wanted = category.lower()
        with self._lock:
            return [p for p in self._active() if p.category.lower() == wanted]

    def search(self, term: str) -> list[Product]:
        needle = term.lower()
        with self._lock:
            return [
                p for p in self._active()
                if needle in p.name.lower() or needle in p.description.lower()
            ]


def seed_sample_products(store: ProductStore) -> None:
    store.create(
        "Sample Product 1",
        Decimal("29.99"),
        description="This is a sample product description",
        category="Electronics",
        stock_quantity=100,
    )
    store.create(
        "Sample Product 2",
        Decimal("49.99"),
        description="Another sample product description",
        category="Clothing",
        stock_quantity=50,
    )


store = ProductStore()
seed_sample_products(store)


def get_store() -> ProductStore:
    """Dependency: the process-wide store."""
    return store
