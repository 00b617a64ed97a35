# storefront/api/__init__.py
from fastapi import FastAPI
from storefront.api.routers import carts, checkout, health, orders, payments, users


def create_app(lifespan=None) -> FastAPI:
    app = FastAPI(
        title="Storefront Checkout Service",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.include_router(health.router)
    app.include_router(users.router)
    app.include_router(carts.router)
    app.include_router(checkout.router)
    app.include_router(orders.router)
    app.include_router(payments.router)

    return app
