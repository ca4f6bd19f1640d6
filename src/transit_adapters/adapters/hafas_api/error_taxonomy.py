"""Mapping of HAFAS method-level error codes onto result statuses.

Each method family has an explicit table. A code that is not listed, or
listed with a required error text that does not match, is a fatal
UnknownErrorCodeError; nothing is guessed.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

from transit_adapters.domain.exceptions import UnknownErrorCodeError
from transit_adapters.domain.models.results import Status

logger = logging.getLogger(__name__)

LOC_MATCH = "LocMatch"
LOC_GEO_POS = "LocGeoPos"
STATION_BOARD = "StationBoard"
TRIP_SEARCH = "TripSearch"
RECONSTRUCTION = "Reconstruction"
JOURNEY_DETAILS = "JourneyDetails"

TEXT_REQUEST_FAILED = "HCI Service: request failed"
TEXT_PROBLEMS = "HCI Service: problems during service execution"
TEXT_LOCATION = "HCI Service: location missing or invalid"


@dataclass(frozen=True)
class ErrorRule:
    """Status for an error code, optionally only when the error text matches."""

    status: Status
    text: str | None = None

    def matches(self, text: str | None) -> bool:
        return self.text is None or self.text == text


_BACKEND_DOWN: Mapping[str, ErrorRule] = {
    "CGI_READ_FAILED": ErrorRule(Status.SERVICE_DOWN),
    "CGI_NO_SERVER": ErrorRule(Status.SERVICE_DOWN),
    "H_UNKNOWN": ErrorRule(Status.SERVICE_DOWN),
}

_LOCATION_TABLE: Mapping[str, ErrorRule] = MappingProxyType(
    {
        "FAIL": ErrorRule(Status.SERVICE_DOWN, TEXT_REQUEST_FAILED),
        **_BACKEND_DOWN,
    }
)

_STATION_BOARD_TABLE: Mapping[str, ErrorRule] = MappingProxyType(
    {
        "LOCATION": ErrorRule(Status.INVALID_STATION, TEXT_LOCATION),
        "FAIL": ErrorRule(Status.SERVICE_DOWN, TEXT_REQUEST_FAILED),
        "PROBLEMS": ErrorRule(Status.SERVICE_DOWN, TEXT_PROBLEMS),
        **_BACKEND_DOWN,
    }
)

_TRIP_TABLE: dict[str, ErrorRule] = {
    "H890": ErrorRule(Status.NO_TRIPS),  # no connections found
    "H891": ErrorRule(Status.NO_TRIPS),  # no route found
    "H892": ErrorRule(Status.NO_TRIPS),  # request too complex
    "H886": ErrorRule(Status.NO_TRIPS),  # no connections within the requested time interval
    "H895": ErrorRule(Status.TOO_CLOSE),  # departure and arrival too near
    "H9380": ErrorRule(Status.TOO_CLOSE),  # stations defined more than once
    "H9220": ErrorRule(Status.UNRESOLVABLE_ADDRESS),  # no stations near the address
    "H9360": ErrorRule(Status.INVALID_DATE),  # date outside of the timetable period
    "H887": ErrorRule(Status.SERVICE_DOWN),  # kernel computation time limit reached
    "H9240": ErrorRule(Status.SERVICE_DOWN),  # kernel internal error
    "FAIL": ErrorRule(Status.SERVICE_DOWN),
    "PROBLEMS": ErrorRule(Status.SERVICE_DOWN, TEXT_PROBLEMS),
    "LOCATION": ErrorRule(Status.UNKNOWN_LOCATION, TEXT_LOCATION),
    **_BACKEND_DOWN,
}

# A trip that is gone from the schedule reloads as an empty success.
_RECONSTRUCTION_TABLE: dict[str, ErrorRule] = {**_TRIP_TABLE, "H890": ErrorRule(Status.OK)}

_JOURNEY_TABLE: Mapping[str, ErrorRule] = MappingProxyType(
    {
        "H890": ErrorRule(Status.NO_JOURNEY),
        "H887": ErrorRule(Status.SERVICE_DOWN),
        "H9240": ErrorRule(Status.SERVICE_DOWN),
        "FAIL": ErrorRule(Status.SERVICE_DOWN),
        "PROBLEMS": ErrorRule(Status.SERVICE_DOWN, TEXT_PROBLEMS),
        **_BACKEND_DOWN,
    }
)

ERROR_TABLES: Mapping[str, Mapping[str, ErrorRule]] = MappingProxyType(
    {
        LOC_MATCH: _LOCATION_TABLE,
        LOC_GEO_POS: _LOCATION_TABLE,
        STATION_BOARD: _STATION_BOARD_TABLE,
        TRIP_SEARCH: MappingProxyType(_TRIP_TABLE),
        RECONSTRUCTION: MappingProxyType(_RECONSTRUCTION_TABLE),
        JOURNEY_DETAILS: _JOURNEY_TABLE,
    }
)

# Envelope-level errors that are an outcome rather than a fault.
_BENIGN_HEAD_ERRORS: Mapping[str, Mapping[str, Status]] = MappingProxyType(
    {
        TRIP_SEARCH: {"HAMM": Status.SERVICE_DOWN},
        RECONSTRUCTION: {"HAMM": Status.SERVICE_DOWN},
    }
)


def classify_method_error(
    method: str,
    code: str,
    text: str | None = None,
    url: str | None = None,
    page: str | None = None,
) -> Status:
    """Map a method-level error code to a status.

    Raises:
        ValueError: If the method has no error table.
        UnknownErrorCodeError: If the code (with its text) is not in the table.
    """
    try:
        table = ERROR_TABLES[method]
    except KeyError:
        raise ValueError(f"no error table for method {method}") from None

    logger.debug(f"HAFAS error for {method}: err={code}, errTxt={text!r}")
    rule = table.get(code)
    if rule is None or not rule.matches(text):
        raise UnknownErrorCodeError(method, code, text, url, page)
    return rule.status


def classify_head_error(method: str, code: str) -> Status | None:
    """Status for a benign envelope-level error, or None if it is fatal."""
    return _BENIGN_HEAD_ERRORS.get(method, {}).get(code)
