# /callscript/services/product_resolver.py

import logging
from typing import Awaitable, Dict, Iterable, List, Optional, Union

from callscript.models.script import AttendanceType, PersonType, Product
from callscript.services.step_store import StoreNotifier

logger = logging.getLogger(__name__)


class ProductResolver:
    """Translates a configuration selection into a product and its entry step."""

    def get_product_by_id(self, product_id: str) -> Union[Optional[Product], Awaitable[Optional[Product]]]:
        raise NotImplementedError


class InMemoryProductResolver(ProductResolver, StoreNotifier):

    def __init__(self, products: Optional[Iterable[Product]] = None):
        StoreNotifier.__init__(self)
        self._products: Dict[str, Product] = {}
        if products:
            for product in products:
                self._products[product.id] = product

    async def get_product_by_id(self, product_id: str) -> Optional[Product]:
        if not product_id:
            return None
        return self._products.get(product_id)

    async def get_products(self, active_only: bool = False) -> List[Product]:
        products = sorted(self._products.values(), key=lambda product: product.name)
        if active_only:
            return [product for product in products if product.is_active]
        return products

    async def get_eligible_products(self, attendance_type: AttendanceType, person_type: PersonType) -> List[Product]:
        """Active products offered for an attendance type / person type pair."""
        products = await self.get_products(active_only=True)
        return [product for product in products if product.is_eligible(attendance_type, person_type)]

    def find_by_name(self, name: str) -> Optional[Product]:
        return next((product for product in self._products.values() if product.name == name), None)

    def upsert_products(self, products: Iterable[Product]) -> int:
        count = 0
        for product in products:
            self._products[product.id] = product
            count += 1
        if count:
            logger.info(f"Stored {count} products.")
            self.notify_update()
        return count

    def clear(self) -> None:
        self._products.clear()
        self.notify_update()


# Globally accessible instance
product_resolver = InMemoryProductResolver()
