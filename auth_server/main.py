"""
Identity service: login, registration, profile and Admin user management.
Port 9000.
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI

from auth_server.audit import router as audit_router
from auth_server.database import SessionLocal, init_db
from auth_server.routes import router as auth_router
from auth_server.seed import seed_admin_from_env
from shop_common.config import LOG_LEVEL
from shop_common.errors import install_error_handlers
from shop_common.keys import get_signing_secret
from shop_common.logging_config import configure_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables and roles, load the signing secret, seed the Admin from env on startup."""
    configure_logging(LOG_LEVEL)
    init_db()
    get_signing_secret()
    db = SessionLocal()
    try:
        seed_admin_from_env(db)
    finally:
        db.close()
    yield


app = FastAPI(title="Auth Service", version="1.0.0", lifespan=lifespan)
install_error_handlers(app)
app.include_router(auth_router, tags=["auth"])
app.include_router(audit_router)


@app.get("/health")
def health():
    """Health check endpoint."""
    return {"status": "ok", "service": "auth_server"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "auth_server.main:app",
        host="127.0.0.1",
        port=9000,
        reload=True,
    )
