import logging
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import APIRouter, FastAPI, Depends, HTTPException, Path, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine

from .config import Settings
from .db import Base, make_engine, make_session_factory, init_schema
from .errors import PersistenceError
from .models import Product
from .schemas import ProductIn, ProductOut, MessageOut, ValidationErrorOut, UserOut
from .store import ProductStore
from shared.security import require_user

logger = logging.getLogger("product-service")

_LOCATION_PREFIXES = ("body", "query", "path", "header")

# Ids outside a signed 64-bit integer can never match a row
ProductId = Annotated[int, Path(ge=1, le=2**63 - 1)]


def get_store(request: Request):
    db = request.app.state.session_factory()
    try:
        yield ProductStore(db)
    finally:
        db.close()


def to_out(p: Product) -> ProductOut:
    return ProductOut(
        id=p.id,
        name=p.name,
        description=p.description,
        price=float(p.price),
        image_url=p.image_url,
    )


def _field_name(err: dict) -> str:
    # A body that is not JSON has the byte offset as its location
    if err.get("type") == "json_invalid":
        return "body"
    parts = list(err.get("loc", ()))
    if parts and parts[0] in _LOCATION_PREFIXES:
        parts = parts[1:]
    return ".".join(str(x) for x in parts) or "body"


router = APIRouter(prefix="/v1", tags=["products"])


@router.get("/products", response_model=list[ProductOut])
def list_products(store: ProductStore = Depends(get_store)):
    return [to_out(p) for p in store.list_all()]


@router.get("/products/search", response_model=list[ProductOut])
def search_products(q: str | None = None, store: ProductStore = Depends(get_store)):
    # No q at all means no search; an empty q matches everything
    if q is None:
        return []
    return [to_out(p) for p in store.find_by_name_contains(q)]


@router.post(
    "/products",
    response_model=ProductOut,
    status_code=201,
    responses={422: {"model": ValidationErrorOut}},
)
def create_product(payload: ProductIn, store: ProductStore = Depends(get_store)):
    return to_out(store.create(payload))


@router.get("/product/{product_id}", response_model=ProductOut)
def get_product(product_id: ProductId, store: ProductStore = Depends(get_store)):
    p = store.find_by_id(product_id)
    if p is None:
        raise HTTPException(404, "Product not found")
    return to_out(p)


@router.put(
    "/product/{product_id}",
    response_model=MessageOut,
    responses={422: {"model": ValidationErrorOut}},
)
@router.put("/products/{product_id}", response_model=MessageOut, include_in_schema=False)
def update_product(product_id: ProductId, payload: ProductIn, store: ProductStore = Depends(get_store)):
    if store.update(product_id, payload) is None:
        raise HTTPException(404, "Product not found")
    return MessageOut(message="updated")


@router.delete("/product/{product_id}", response_model=MessageOut)
def delete_product(product_id: ProductId, store: ProductStore = Depends(get_store)):
    if not store.delete(product_id):
        raise HTTPException(404, "Product not found")
    return MessageOut(message="deleted")


def create_app(settings: Settings | None = None, engine: Engine | None = None) -> FastAPI:
    """
    Build the product API.

    The engine and session factory live on app.state for this app only;
    tests pass their own engine (e.g. in-memory SQLite).
    """
    settings = settings or Settings.from_env()
    owns_engine = engine is None
    if owns_engine:
        engine = make_engine(settings)

    logging.basicConfig(level=settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.auto_create_schema:
            init_schema(engine, settings.db_schema)
            Base.metadata.create_all(bind=engine)
        yield
        if owns_engine:
            engine.dispose()

    app = FastAPI(title="product-service", lifespan=lifespan)
    app.state.settings = settings
    app.state.session_factory = make_session_factory(engine)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        errors: dict[str, list[str]] = {}
        for err in exc.errors():
            errors.setdefault(_field_name(err), []).append(err.get("msg", "Invalid value"))
        body = ValidationErrorOut(message="The given data was invalid.", errors=errors)
        return JSONResponse(status_code=422, content=body.model_dump())

    @app.exception_handler(PersistenceError)
    async def persistence_error(request: Request, exc: PersistenceError):
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=500, content={"detail": "Database error"})

    app.include_router(router)

    @app.get("/user", response_model=UserOut)
    def current_user(claims: dict = Depends(require_user)):
        return UserOut(
            id=str(claims["sub"]),
            email=claims.get("email"),
            is_admin=bool(claims.get("is_admin", False)),
        )

    @app.get("/health")
    def health():
        return {"ok": True}

    return app
