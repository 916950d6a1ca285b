"""
Product service (resource server). Reads are public; every mutating route declares
its own role requirement and re-verifies the bearer token itself, whatever the
gateway already decided. Port 7000.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI

from product_service.config import DELETE_ROLES, WRITE_ROLES
from product_service.schemas import ProductCreate, ProductResponse, ProductUpdate
from product_service.store import ProductStore, get_store
from shop_common.config import LOG_LEVEL
from shop_common.errors import NotFound, ValidationFailure, install_error_handlers
from shop_common.gatekeeper import Capability, Identity
from shop_common.logging_config import configure_logging
from shop_common.security import require

logger = logging.getLogger(__name__)

RequireWrite = require(Capability.any_of(*WRITE_ROLES))
RequireDelete = require(Capability.any_of(*DELETE_ROLES))


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(LOG_LEVEL)
    yield


app = FastAPI(title="Product Service", version="1.0.0", lifespan=lifespan)
install_error_handlers(app)


@app.get("/health")
def health():
    """Health check endpoint."""
    return {"status": "ok", "service": "product_service"}


@app.get("/api/products", response_model=list[ProductResponse])
def list_products(store: ProductStore = Depends(get_store)):
    return store.list_active()


@app.get("/api/products/search", response_model=list[ProductResponse])
def search_products(q: str = "", store: ProductStore = Depends(get_store)):
    """Case-insensitive match on name or description."""
    if not q.strip():
        raise ValidationFailure(
            "Search term is required",
            errors=[{"field": "q", "message": "Search term is required"}],
        )
    return store.search(q.strip())


@app.get("/api/products/category/{category}", response_model=list[ProductResponse])
def products_by_category(category: str, store: ProductStore = Depends(get_store)):
    return store.by_category(category)


@app.get("/api/products/{product_id}", response_model=ProductResponse)
def get_product(product_id: int, store: ProductStore = Depends(get_store)):
    product = store.get(product_id)
    if product is None:
        raise NotFound("Product not found")
    return product


@app.post("/api/products", response_model=ProductResponse, status_code=201)
def create_product(
    body: ProductCreate,
    caller: Identity = RequireWrite,
    store: ProductStore = Depends(get_store),
):
    """Requires Admin or Manager."""
    product = store.create(
        body.name,
        body.price,
        description=body.description,
        image=body.image,
        category=body.category,
        stock_quantity=body.stock_quantity,
    )
    logger.info("%s created product id=%s", caller.subject, product.id)
    return product


@app.put("/api/products/{product_id}", response_model=ProductResponse)
def update_product(
    product_id: int,
    body: ProductUpdate,
    caller: Identity = RequireWrite,
    store: ProductStore = Depends(get_store),
):
    """Requires Admin or Manager. Omitted or empty fields are left unchanged."""
    product = store.update(product_id, **body.model_dump())
    if product is None:
        raise NotFound("Product not found")
    logger.info("%s updated product id=%s", caller.subject, product_id)
    return product


@app.delete("/api/products/{product_id}")
def delete_product(
    product_id: int,
    caller: Identity = RequireDelete,
    store: ProductStore = Depends(get_store),
):
    """Requires Admin. Soft delete."""
    if not store.delete(product_id):
        raise NotFound("Product not found")
    logger.info("%s deleted product id=%s", caller.subject, product_id)
    return {"message": "Product deleted successfully"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "product_service.main:app",
        host="127.0.0.1",
        port=7000,
        reload=True,
    )
