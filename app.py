import logging
from functools import lru_cache
from typing import Optional

from fastapi import Depends, FastAPI, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

import catalog
import config
import sessions
from errors import InventoryError
from models_mongo import get_mongo_collections
from schemas import (
    LoginRequest,
    ProductCreate,
    ProductCreated,
    ProductPage,
    QuantityUpdate,
    QuantityUpdated,
    SignupRequest,
    TokenResponse,
)

logger = logging.getLogger(__name__)

# ------------------------------------------------------------
# Configuration
# ------------------------------------------------------------

app = FastAPI(
    title="Inventory Management API",
    description="Products, stock levels and insertion analytics",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

bearer_scheme = HTTPBearer(auto_error=False)


# get the collections from the inventory database on first use, not at import
@lru_cache(maxsize=1)
def get_collections():
    return get_mongo_collections()


# ------------------------------------------------------------
# Error handling
# ------------------------------------------------------------

@app.exception_handler(InventoryError)
async def inventory_error_handler(request: Request, exc: InventoryError):
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    # report the first problem only, in the same {"message"} shape as every other error
    errors = exc.errors()
    if not errors:
        return JSONResponse(status_code=400, content={"message": "Invalid request"})
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path"))
    message = first.get("msg", "Invalid value")
    if field:
        message = f"{field}: {message}"
    return JSONResponse(status_code=400, content={"message": message})


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"message": "Server error"})


# reads the bearer token from the Authorization header and verifies it
def get_current_user(credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)):
    token = credentials.credentials if credentials else None
    return sessions.verify(token)


@app.get("/")
def read_root():
    return {"message": "Inventory Management API"}


# ------------------------------------------------------------
# Signup and Login
# ------------------------------------------------------------

@app.post("/auth/signup", status_code=status.HTTP_201_CREATED)
def signup(payload: SignupRequest, db=Depends(get_collections)):
    token = sessions.register(db.users, payload.username, payload.password, email=payload.email)
    return {"message": "User created successfully", "token": token}


@app.post("/auth/login", response_model=TokenResponse)
def login(payload: LoginRequest, db=Depends(get_collections)):
    token = sessions.authenticate(db.users, payload.username, payload.password)
    logger.info("User logged in: %s", payload.username)
    return {"token": token}


# ------------------------------------------------------------
# Products (JWT-protected)
# ------------------------------------------------------------

@app.post("/products", response_model=ProductCreated, status_code=status.HTTP_201_CREATED)
def create_product(payload: ProductCreate, current_user=Depends(get_current_user), db=Depends(get_collections)):
    product = catalog.create_product(db.products, payload)
    return {"id": product["id"], "message": "Product added successfully"}


@app.put("/products/{product_id}/quantity", response_model=QuantityUpdated)
def update_product_quantity(
    product_id: str,
    payload: QuantityUpdate,
    current_user=Depends(get_current_user),
    db=Depends(get_collections),
):
    product = catalog.update_quantity(db.products, product_id, payload.quantity)
    return {"message": "Quantity updated", "product": product}


@app.get("/products", response_model=ProductPage)
def get_products(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1),
    current_user=Depends(get_current_user),
    db=Depends(get_collections),
):
    products, total = catalog.list_products(db.products, page=page, limit=limit)
    return {"products": products, "total": total, "page": page, "limit": limit}


# ------------------------------------------------------------
# Analytics (JWT-protected)
# ------------------------------------------------------------

@app.get("/analytics/most-added")
def get_most_added(current_user=Depends(get_current_user), db=Depends(get_collections)):
    return {"products": catalog.most_added(db.products)}


# ------------------------------------------------------------
# Run the API
# ------------------------------------------------------------

if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run(app, host="0.0.0.0", port=config.PORT)
