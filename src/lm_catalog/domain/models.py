"""Catalog domain model: read-only view used when snapshotting order items."""

from dataclasses import dataclass, field


@dataclass
class Product:
    id: str
    shopkeeper_id: str
    name: str
    price: int  # minor units
    images: list[str] = field(default_factory=list)

    @property
    def primary_image(self) -> str | None:
        return self.images[0] if self.images else None
