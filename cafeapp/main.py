import logging

from fastapi import FastAPI

from cafeapp.core.config import settings
from cafeapp.middleware.idempotency import install_idempotency
from cafeapp.middleware.order_audit import install_order_audit
from cafeapp.routers import admin, health, inventory, orders, pos, reports, session
from .db import Base, engine

# IMPORTA MODELOS antes de create_all
from .models import document as _document_models  # noqa: F401

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# Crea tablas faltantes
Base.metadata.create_all(bind=engine)

app = FastAPI(title=settings.app_name, version=settings.app_version)

install_order_audit(app)
install_idempotency(app)

app.include_router(health.router)
app.include_router(session.router)
app.include_router(pos.router)
app.include_router(orders.router)
app.include_router(inventory.router)
app.include_router(admin.router)
app.include_router(reports.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("cafeapp.main:app", host="127.0.0.1", port=8010)
