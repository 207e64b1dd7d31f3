"""Product catalogue for the shop example."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Product(BaseModel):
    """An item that can be put in the cart."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = ""
    price: float = Field(..., ge=0)
    image: str = ""
    category: str


PRODUCTS: list[Product] = [
    Product(
        id="1",
        name="Wireless Headphones",
        description="Premium wireless headphones with noise cancelling and 30 hours of battery.",
        price=299,
        image="https://images.unsplash.com/photo-1505740420928-5e560c06d30e?w=400&h=400&fit=crop",
        category="Electronics",
    ),
    Product(
        id="2",
        name="Smart Watch",
        description="Multi-purpose smart watch with health tracking and GPS.",
        price=399,
        image="https://images.unsplash.com/photo-1523275335684-37898b6baf30?w=400&h=400&fit=crop",
        category="Electronics",
    ),
    Product(
        id="3",
        name="Laptop Stand",
        description="Ergonomic aluminium stand for a better posture.",
        price=79,
        image="https://images.unsplash.com/photo-1527864550417-7fd91fc51a46?w=400&h=400&fit=crop",
        category="Accessories",
    ),
    Product(
        id="4",
        name="Mechanical Keyboard",
        description="RGB mechanical keyboard with Cherry MX switches.",
        price=149,
        image="https://images.unsplash.com/photo-1511467687858-23d96c32e4ae?w=400&h=400&fit=crop",
        category="Electronics",
    ),
    Product(
        id="5",
        name="USB-C Hub",
        description="7-in-1 hub with HDMI, SD card and USB 3.0 ports.",
        price=59,
        image="https://images.unsplash.com/photo-1625842268584-8f3296236761?w=400&h=400&fit=crop",
        category="Accessories",
    ),
    Product(
        id="6",
        name="HD Webcam",
        description="1080p webcam with autofocus and a built-in microphone.",
        price=89,
        image="https://images.unsplash.com/photo-1587826080692-f439cd0b70da?w=400&h=400&fit=crop",
        category="Electronics",
    ),
]


def get_product_by_id(product_id: str) -> Product | None:
    return next((p for p in PRODUCTS if p.id == product_id), None)


def get_products_by_category(category: str) -> list[Product]:
    return [p for p in PRODUCTS if p.category == category]
