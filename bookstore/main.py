# bookstore/main.py
import logging

from fastapi import FastAPI

from . import config
from .catalog import catalog_router
from .errors import register_exception_handlers


logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

app = FastAPI(
    title="Bookstore Catalog API",
    description=(
        "Lists, filters, sorts and paginates in-stock books, and lets "
        "admins create, update and delete them."
    ),
    version=config.VERSION,
)

register_exception_handlers(app)
app.include_router(catalog_router)


@app.get("/")
def health_check():
    return {"status": "ok", "message": "Bookstore catalog API is running"}
