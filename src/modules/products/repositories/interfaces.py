"""Product repository interface.

Extends ``IRepository[Product]`` with the SKU look-up and the atomic
stock adjustment used by the Inventory Ledger.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Iterable, List, Optional, Sequence
from uuid import UUID

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.products.models import Product


class IProductRepository(IRepository["Product"]):
    """Repository contract for the Product aggregate."""

    @abstractmethod
    def get_by_sku(self, sku: str) -> Optional[Product]:
        """Retrieve a product by SKU."""

    @abstractmethod
    def get_many(self, ids: Iterable[UUID]) -> List[Product]:
        """Retrieve the live products whose IDs are in *ids*."""

    @abstractmethod
    def get_for_update(self, id: str) -> Optional[Product]:
        """Retrieve a live product and lock its row until commit."""

    @abstractmethod
    def save_fields(self, entity: Product, fields: Sequence[str]) -> Product:
        """Write only ``fields`` of an existing product.

        Columns owned by the Inventory Ledger are left alone unless named.
        """

    @abstractmethod
    def adjust_stock(self, id: UUID, delta: int) -> bool:
        """Add *delta* to ``stock_quantity`` as a single store-level update.

        Returns ``False`` when no product row matched.
        """
