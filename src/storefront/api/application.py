"""FastAPI application factory.

The factory does not initialize the domain; ``app.py`` does that once at
import time and tests rely on the session-wide domain fixture instead.
"""

import os
import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from storefront.api.cart import cart_router, coupon_router
from storefront.api.errors import register_exception_handlers
from storefront.api.orders import guest_router, order_router
from storefront.api.products import category_router, product_router
from storefront.api.reviews import review_router
from storefront.domain import storefront
from storefront.utils.logging import bind_request_context, clear_request_context

ROUTERS = (
    product_router,
    category_router,
    coupon_router,
    cart_router,
    order_router,
    guest_router,
    review_router,
)


def allowed_origins():
    raw = os.getenv("ALLOWED_ORIGINS", "*")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def create_app() -> FastAPI:
    app = FastAPI(
        title="Storefront API",
        description="E-commerce storefront: catalogue, cart, coupons, orders and reviews",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def domain_context_middleware(request: Request, call_next):
        """Push the storefront domain context and bind the request log context."""
        clear_request_context()
        bind_request_context(
            request_id=request.headers.get("X-Request-ID") or uuid.uuid4().hex,
            method=request.method,
            path=request.url.path,
        )
        try:
            with storefront.domain_context():
                return await call_next(request)
        finally:
            clear_request_context()

    register_exception_handlers(app)
    for router in ROUTERS:
        app.include_router(router)

    @app.get("/health")
    async def health():
        return JSONResponse(
            content={
                "success": True,
                "message": "Storefront API is running",
                "data": {"domain": storefront.name},
            }
        )

    return app
