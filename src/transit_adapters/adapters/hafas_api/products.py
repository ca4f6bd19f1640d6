"""Mapping between HAFAS product class bits and products."""

import logging
from collections.abc import Iterable, Sequence

from transit_adapters.domain.models.product import Product

logger = logging.getLogger(__name__)


class ProductsMap:
    """Bit position to product table of one backend.

    Bit ``i`` of a HAFAS product class (``cls``/``pCls``) stands for
    ``products[i]``. Unmapped positions hold None.
    """

    def __init__(self, products: Sequence[Product | None]) -> None:
        self._products = tuple(products)

    def __len__(self) -> int:
        return len(self._products)

    def to_products(self, value: int) -> frozenset[Product]:
        """Decode a bit set into products, ignoring unmapped bits."""
        products = set()
        for i, product in enumerate(self._products):
            if value & (1 << i) and product is not None:
                products.add(product)
        return frozenset(products)

    def to_product(self, value: int) -> Product | None:
        """Decode a single product class bit; None if unknown or unmapped."""
        if value <= 0 or value & (value - 1):
            logger.warning(f"Product class {value} is not a single bit")
            return None
        index = value.bit_length() - 1
        if index >= len(self._products):
            logger.warning(f"Product class {value} is outside the products map")
            return None
        return self._products[index]

    def to_int(self, products: Iterable[Product]) -> int:
        wanted = set(products)
        value = 0
        for i, product in enumerate(self._products):
            if product in wanted:
                value |= 1 << i
        return value

    def to_bit_string(self, products: Iterable[Product]) -> str:
        """One '1'/'0' character per map position, lowest bit first."""
        wanted = set(products)
        return "".join("1" if p is not None and p in wanted else "0" for p in self._products)
