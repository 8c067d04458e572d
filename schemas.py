from typing import Optional

from pydantic import AliasChoices, BaseModel, EmailStr, Field, field_validator

PRODUCT_TYPES = (
    "Electronics",
    "Clothing",
    "Books",
    "Home & Garden",
    "Sports",
    "Beauty",
    "Toys",
    "Food & Beverages",
    "Automotive",
    "Other",
)

# largest integer BSON can store
MAX_QUANTITY = 2**63 - 1

# ----------------------------
# Pydantic Models
# ----------------------------

class SignupRequest(BaseModel):
    username: str = Field(..., min_length=3)
    password: str = Field(..., min_length=6)
    email: Optional[EmailStr] = None

    @field_validator("email", mode="before")
    @classmethod
    def blank_email_is_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class LoginRequest(BaseModel):
    username: str
    password: str


class TokenResponse(BaseModel):
    token: str


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1)
    type: str
    sku: str = Field(..., min_length=1)
    image_url: Optional[str] = Field(None, validation_alias=AliasChoices("image_url", "imageUrl"))
    description: Optional[str] = None
    quantity: int = Field(..., ge=0, le=MAX_QUANTITY)
    price: float = Field(..., gt=0, allow_inf_nan=False)

    @field_validator("name", "sku")
    @classmethod
    def not_blank(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    @field_validator("type")
    @classmethod
    def known_type(cls, v):
        if v not in PRODUCT_TYPES:
            raise ValueError(f"Product type must be one of: {', '.join(PRODUCT_TYPES)}")
        return v


class QuantityUpdate(BaseModel):
    quantity: int = Field(..., ge=0, le=MAX_QUANTITY)


class ProductOut(BaseModel):
    id: str
    name: str
    type: str
    sku: str
    image_url: Optional[str] = None
    description: Optional[str] = None
    quantity: int
    price: float


class ProductCreated(BaseModel):
    id: str
    message: str


class QuantityUpdated(BaseModel):
    message: str
    product: ProductOut


class ProductPage(BaseModel):
    products: list[ProductOut]
    total: int
    page: int
    limit: int
