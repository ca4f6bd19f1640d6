"""Product (transit mode) domain model."""

from collections.abc import Iterable
from enum import Enum


class Product(Enum):
    """Closed set of transit modes, identified by a one-character code."""

    HIGH_SPEED_TRAIN = "I"
    REGIONAL_TRAIN = "R"
    SUBURBAN_TRAIN = "S"
    SUBWAY = "U"
    TRAM = "T"
    BUS = "B"
    FERRY = "F"
    CABLECAR = "C"
    ON_DEMAND = "P"
    REPLACEMENT_SERVICE = "E"

    @property
    def code(self) -> str:
        return self.value

    @classmethod
    def from_code(cls, code: str) -> "Product":
        """Look up a product by its one-character code.

        Raises:
            ValueError: If the code is not known.
        """
        return cls(code)

    @classmethod
    def from_codes(cls, codes: str) -> frozenset["Product"]:
        return frozenset(cls.from_code(c) for c in codes)

    @staticmethod
    def to_codes(products: Iterable["Product"]) -> str:
        """Encode products as a code string in enum declaration order."""
        wanted = set(products)
        return "".join(p.code for p in Product if p in wanted)


ALL_PRODUCTS: frozenset[Product] = frozenset(Product)
ALL_EXCEPT_HIGHSPEED: frozenset[Product] = ALL_PRODUCTS - {Product.HIGH_SPEED_TRAIN}
