# humidor/api/__init__.py
from fastapi import FastAPI
from humidor.api.routers import admin, carts, health, orders, users


def create_app(lifespan=None) -> FastAPI:
    app = FastAPI(
        title="Humidor Shop",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.include_router(health.router)
    app.include_router(users.router)
    app.include_router(carts.router)
    app.include_router(orders.router)
    app.include_router(admin.router)

    return app
