import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import DEFAULT_JWT_SECRET, Settings, get_settings
from .database import Base, make_engine, make_session_factory
from .exceptions import register_exception_handlers
from .logger import setup_logging
from .routes import authentication, customers, order_items, orders
from .tokens import BearerScheme, TokenIssuer, TokenVerifier
from .users import UserStore, make_password_context, seed_identity

log = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application with its own engine, token components and routers."""
    settings = settings or get_settings()
    setup_logging(settings.log_level)
    engine = make_engine(settings.database_url)
    jwt_settings = settings.jwt()
    if jwt_settings.secret == DEFAULT_JWT_SECRET:
        log.warning("JWT_SECRET is not set, tokens are signed with the built-in development secret")

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        Base.metadata.create_all(bind=engine)
        with app.state.session_factory() as db:
            seed_identity(UserStore(db, app.state.password_context), with_accounts=settings.seed_users)
        log.info("%s started", settings.app_name)
        yield
        engine.dispose()

    app = FastAPI(
        title=settings.app_name,
        description="An API to manage customers, orders and order items with role-based access control",
        version=settings.version,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.session_factory = make_session_factory(engine)
    app.state.password_context = make_password_context(settings.password_hash_rounds)
    app.state.token_issuer = TokenIssuer(jwt_settings)
    app.state.token_verifier = TokenVerifier()
    app.state.bearer_scheme = BearerScheme(jwt_settings)

    app.add_middleware(
        CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"]
    )
    register_exception_handlers(app)

    app.include_router(authentication.router)
    app.include_router(customers.router)
    app.include_router(orders.router)
    app.include_router(order_items.router)

    @app.get("/", tags=["Root"])
    def read_root():
        return {"message": "Order Management API is running!"}

    return app


def run():
    settings = get_settings()
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
