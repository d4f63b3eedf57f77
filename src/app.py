"""Bookshop FastAPI application.

Web server that processes commands synchronously via HTTP. Every request runs
inside the bookshop domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV controls which config overlay is applied.
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from bookshop.domain import bookshop, logger
from bookshop.utils.logging import add_context, clear_context

bookshop.init()


@asynccontextmanager
async def lifespan(app: FastAPI):
    from bookshop.identity.service import UserService

    with bookshop.domain_context():
        created = UserService().seed_default_roles()
    if created:
        logger.info("Seeded default roles", roles=created)
    yield


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Bookshop API",
    description="Online bookshop: users, catalogue, carts and loans",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the bookshop domain context and fresh log context for each request."""
    clear_context()
    add_context(method=request.method, path=request.url.path)
    with bookshop.domain_context():
        response = await call_next(request)
    return response


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from bookshop.api import (  # noqa: E402
    book_router,
    cart_router,
    loan_router,
    register_error_handlers,
    user_router,
)

app.include_router(user_router)
app.include_router(cart_router)
app.include_router(book_router)
app.include_router(loan_router)
register_error_handlers(app)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": {"name": bookshop.name}})
