# medistore/api/__init__.py
from fastapi import FastAPI

from medistore.api.routers import carts, categories, health, medicines, orders, reviews, users


def include_routers(app: FastAPI) -> None:
    app.include_router(health.router)
    app.include_router(users.router)
    app.include_router(categories.router)
    app.include_router(medicines.router)
    app.include_router(carts.router)
    app.include_router(orders.router)
    app.include_router(reviews.router)
