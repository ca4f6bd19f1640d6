"""Marking of cross-platform-free changes between public legs."""

from dataclasses import replace

from transit_adapters.domain.models.location import Location
from transit_adapters.domain.models.stop import Position, Stop
from transit_adapters.domain.models.trip import Leg, PublicLeg


def _marked(position: Position | None) -> Position | None:
    return position.with_same_platform() if position is not None else None


def _same_station(a: Location, b: Location) -> bool:
    if a.has_id and b.has_id:
        return a.id == b.id
    return a == b


def _mark_arrival(stop: Stop) -> Stop:
    return replace(
        stop,
        planned_arrival_position=_marked(stop.planned_arrival_position),
        predicted_arrival_position=_marked(stop.predicted_arrival_position),
    )


def _mark_departure(stop: Stop) -> Stop:
    return replace(
        stop,
        planned_departure_position=_marked(stop.planned_departure_position),
        predicted_departure_position=_marked(stop.predicted_departure_position),
    )


def link_same_platform(legs: list[Leg]) -> list[Leg]:
    """Flag positions where a public leg continues from the arrival platform of the previous one.

    Two consecutive public legs (individual legs in between are allowed)
    qualify when the change happens at the same station and both positions
    name the same platform. Legs are returned as new objects; the input is
    not modified.
    """
    result = list(legs)
    previous: PublicLeg | None = None
    previous_index = 0
    for index, leg in enumerate(result):
        if not isinstance(leg, PublicLeg):
            continue
        if previous is not None:
            arrival = previous.arrival_stop.arrival_position
            departure = leg.departure_stop.departure_position
            if (
                arrival is not None
                and departure is not None
                and arrival.name == departure.name
                and _same_station(previous.arrival, leg.departure)
            ):
                result[previous_index] = replace(
                    previous, arrival_stop=_mark_arrival(previous.arrival_stop)
                )
                leg = replace(leg, departure_stop=_mark_departure(leg.departure_stop))
                result[index] = leg
        previous, previous_index = leg, index
    return result
