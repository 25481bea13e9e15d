"""Catalog models for the order composer.

A catalog entry is the working copy of one purchasable item while an order
is being entered. Quantity is the only source of truth for selection: an
entry is selected exactly when its quantity is positive.
"""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from pos_order_service.models.order_models import Money, OrderItem

_IMAGE_HOST = "https://hebbkx1anhila5yf.public.blob.vercel-storage.com"


class CatalogEntry(BaseModel):
    """Immutable working state of one catalog item."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Item name")
    price: Money = Field(..., description="Unit price for this order", ge=0)
    quantity: int = Field(default=0, description="Units in the current order", ge=0)
    image_url: str | None = Field(None, description="URL to item image")

    @property
    def selected(self) -> bool:
        """Whether the item is part of the current order."""
        return self.quantity > 0

    @property
    def line_total(self) -> Decimal:
        """Quantity times price."""
        return self.quantity * self.price

    def with_quantity(self, quantity: int) -> "CatalogEntry":
        """Return a copy with a new quantity (floored at zero)."""
        return self.model_copy(update={"quantity": max(0, quantity)})

    def with_price(self, price: Decimal) -> "CatalogEntry":
        """Return a copy with a new unit price (floored at zero)."""
        return self.model_copy(update={"price": max(Decimal(0), price)})

    def to_order_item(self) -> OrderItem:
        """Convert to an order line."""
        return OrderItem.from_line(self.name, self.quantity, self.price)


DEFAULT_CATALOG: tuple[CatalogEntry, ...] = (
    CatalogEntry(
        name="Sada Roti",
        price=Decimal(15),
        image_url=f"{_IMAGE_HOST}/image-45WwEazqnFU9l6Z8dB4ksUDWqZefVq.png",
    ),
    CatalogEntry(
        name="k. Roti",
        price=Decimal(30),
        image_url=f"{_IMAGE_HOST}/image-89N6gSQE3BSKP3ED7sg3jXdorFOjkq.png",
    ),
    CatalogEntry(
        name="Kulcha",
        price=Decimal(40),
        image_url=f"{_IMAGE_HOST}/image-6j3vwC0VyqxeQ33Ywyn2VUAvtYsz6S.png",
    ),
    CatalogEntry(
        name="Sada Nan",
        price=Decimal(30),
        image_url=f"{_IMAGE_HOST}/image-hzMUfQNP09HiDMZMq9joO6FN1Ykvyc.png",
    ),
    CatalogEntry(
        name="Roghni Nan",
        price=Decimal(80),
        image_url=f"{_IMAGE_HOST}/image-hzMUfQNP09HiDMZMq9joO6FN1Ykvyc.png",
    ),
    CatalogEntry(
        name="Alo w. Nan",
        price=Decimal(80),
        image_url=f"{_IMAGE_HOST}/image-hzMUfQNP09HiDMZMq9joO6FN1Ykvyc.png",
    ),
    CatalogEntry(
        name="Channy",
        price=Decimal(100),
        image_url=f"{_IMAGE_HOST}/image-0knmn69ClwqZiBzwRbc4eWNsf5wDlN.png",
    ),
    CatalogEntry(
        name="Paratha",
        price=Decimal(20),
        image_url=f"{_IMAGE_HOST}/image-nmvkOg0rBM7ESBIa9Jm074nEk9cmDX.png",
    ),
)
