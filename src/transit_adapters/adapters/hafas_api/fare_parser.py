"""Extraction of fares from a connection's tariff result."""

import logging
from decimal import Decimal

from transit_adapters.adapters.hafas_api.schema import (
    Connection,
    FareEntry,
    FareSet,
    Price,
    Ticket,
    at,
)
from transit_adapters.domain.exceptions import ParserError
from transit_adapters.domain.models.fare import Fare, FareType

logger = logging.getLogger(__name__)

# From 1.27 on prices are objects with an amount in cents.
PRICE_OBJECT_API_LEVEL = 27

# First matching keyword wins, checked per name in order.
_FARE_TYPE_KEYWORDS: tuple[tuple[tuple[str, ...], FareType], ...] = (
    (("erwachsene", "adult"), FareType.ADULT),
    (("kind", "child", "kids"), FareType.CHILD),
    (("ermäßigung", "ermigung"), FareType.CHILD),
    (("schüler", "schler", "azubi"), FareType.STUDENT),
    (("fahrrad",), FareType.BIKE),
    (("senior",), FareType.SENIOR),
)


def normalize_fare_type(*names: str | None) -> FareType:
    """Guess the passenger category from fare or ticket names, defaulting to adult."""
    for name in names:
        if name is None:
            continue
        lowered = name.lower()
        for keywords, fare_type in _FARE_TYPE_KEYWORDS:
            if any(keyword in lowered for keyword in keywords):
                return fare_type
    return FareType.ADULT


class FareParser:
    """Reads ticket, fare and fare-set references of a connection."""

    def __init__(self, api_level: int) -> None:
        self._api_level = api_level

    @staticmethod
    def price_of_object(price: Price | None) -> tuple[str, Decimal] | None:
        if price is None or price.currency is None or price.amount is None or price.amount < 0:
            return None
        return price.currency, Decimal(price.amount) / 100

    def price_of(self, entry: Ticket | FareEntry) -> tuple[str, Decimal] | None:
        if self._api_level >= PRICE_OBJECT_API_LEVEL:
            return self.price_of_object(entry.price)
        if entry.prc is None or entry.cur is None or entry.prc < 0:
            return None
        return entry.cur, Decimal(entry.prc) / 100

    def parse(self, connection: Connection) -> list[Fare]:
        """Parse the fares of a connection.

        Raises:
            ParserError: On a reference type that is not understood.
        """
        tariff = connection.trf_res
        if tariff is None:
            return []

        fares: list[Fare] = []
        fare_sets = tariff.fare_set_l
        if fare_sets is not None and connection.ovw_trf_ref_l is not None:
            for ref in connection.ovw_trf_ref_l:
                fare_set: FareSet | None = at(fare_sets, ref.fare_set_x)
                if ref.type == "T":
                    fares.extend(self._ticket_fare(fare_set, ref.fare_x, ref.ticket_x))
                elif ref.type == "F":
                    fares.extend(self._single_fare(fare_set, ref.fare_x))
                elif ref.type == "FS":
                    fares.extend(self._fare_set_fares(fare_set))
                elif ref.type == "TIBG":
                    # Ticket bundles are not understood; the total price fallback applies.
                    continue
                else:
                    raise ParserError(f"cannot handle tariff reference type: {ref.type}")

        if not fares:
            fallback = self._total_price_fallback(fare_sets or [], tariff.total_price)
            if fallback is not None:
                fares.append(fallback)
        return fares

    def _ticket_fare(
        self, fare_set: FareSet | None, fare_x: int | None, ticket_x: int | None
    ) -> list[Fare]:
        fare: FareEntry | None = at(fare_set.fare_l, fare_x) if fare_set else None
        ticket: Ticket | None = at(fare.ticket_l, ticket_x) if fare else None
        if fare is None or ticket is None:
            return []
        price = self.price_of(ticket)
        if price is None:
            return []
        currency, amount = price
        label = f"{fare.name}\n{ticket.name}"
        return [Fare(label, normalize_fare_type(ticket.name, ticket.desc), currency, amount)]

    def _single_fare(self, fare_set: FareSet | None, fare_x: int | None) -> list[Fare]:
        fare: FareEntry | None = at(fare_set.fare_l, fare_x) if fare_set else None
        if fare is None:
            return []
        price = self.price_of(fare)
        if price is None:
            return []
        currency, amount = price
        return [Fare(fare.name, normalize_fare_type(fare.name), currency, amount)]

    def _fare_set_fares(self, fare_set: FareSet | None) -> list[Fare]:
        if fare_set is None:
            return []
        fares = []
        for fare in fare_set.fare_l:
            price = self.price_of(fare)
            if price is None:
                logger.debug(f"Skipping fare without price in set '{fare_set.name}'")
                continue
            currency, amount = price
            fares.append(Fare(fare_set.name, normalize_fare_type(fare.name), currency, amount))
        return fares

    def _total_price_fallback(self, fare_sets: list[FareSet], total: Price | None) -> Fare | None:
        """First fare priced exactly like the total, adult fares preferred."""
        total_price = self.price_of_object(total)
        if total_price is None:
            return None

        candidates = [
            Fare(fare.name, normalize_fare_type(fare.name), *total_price)
            for fare_set in fare_sets
            for fare in fare_set.fare_l
            if self.price_of_object(fare.price) == total_price
        ]
        for candidate in candidates:
            if candidate.type is FareType.ADULT:
                return candidate
        return candidates[0] if candidates else None
