"""Network provider speaking the HAFAS client interface (mgate JSON)."""

import logging
from collections.abc import Callable, Set
from dataclasses import replace
from datetime import datetime
from typing import TYPE_CHECKING, Any, TypeVar

from pydantic import ValidationError

from transit_adapters.adapters.hafas_api.auth import HafasAuthorizer
from transit_adapters.adapters.hafas_api.envelope import (
    SERVER_PRODUCT,
    ParsedResponse,
    build_request_body,
    parse_response,
)
from transit_adapters.adapters.hafas_api.error_taxonomy import (
    JOURNEY_DETAILS,
    LOC_GEO_POS,
    LOC_MATCH,
    RECONSTRUCTION,
    STATION_BOARD,
    TRIP_SEARCH,
    classify_method_error,
)
from transit_adapters.adapters.hafas_api.hci_time import format_hci_date, format_hci_time
from transit_adapters.adapters.hafas_api.http_client import (
    DEFAULT_TIMEOUT_SECONDS,
    HafasHttpClient,
)
from transit_adapters.adapters.hafas_api.lid import normalize_station_id
from transit_adapters.adapters.hafas_api.location_resolver import LocationResolver
from transit_adapters.adapters.hafas_api.profile import LID_ONLY_API_LEVEL, HafasProfile
from transit_adapters.adapters.hafas_api.response_parser import HciResponseParser
from transit_adapters.adapters.hafas_api.schema import (
    HciModel,
    JourneyDetailsResult,
    LocGeoPosResult,
    LocMatchResult,
    StationBoardResult,
    TripSearchResult,
)
from transit_adapters.adapters.hafas_api.signing import RequestSigner
from transit_adapters.adapters.hafas_api.transfers import link_same_platform
from transit_adapters.domain.exceptions import (
    ParserError,
    TransportError,
    UnsupportedOperationError,
)
from transit_adapters.domain.models.capability import Capability
from transit_adapters.domain.models.error_details import ErrorDetails
from transit_adapters.domain.models.location import Location, LocationType, Point
from transit_adapters.domain.models.product import Product
from transit_adapters.domain.models.query import QueryTripsContext, TripOptions, TripQuery
from transit_adapters.domain.models.refs import JourneyRef, TripRef
from transit_adapters.domain.models.results import (
    Endpoint,
    NearbyLocationsResult,
    QueryDeparturesResult,
    QueryJourneyResult,
    QueryTripsResult,
    ResultHeader,
    Status,
    SuggestLocationsResult,
)
from transit_adapters.domain.models.trip import Trip

if TYPE_CHECKING:
    from aiohttp import ClientSession

    from transit_adapters.adapters.config.app_config import AppConfig

logger = logging.getLogger(__name__)

DEFAULT_MAX_DISTANCE = 10000
DEFAULT_MAX_LOCATIONS = 50
DEFAULT_MAX_DEPARTURES = 100
# Backends up to 1.18 can filter equivalent stations themselves.
STATION_BOARD_EQUIV_FILTER_MAX_LEVEL = 18
# Without the backend filter, more entries are requested to survive client-side filtering.
STATION_BOARD_OVERFETCH = 4
CONFIG_GROUPS_MAX_LEVEL = 24
# Station lids are long; plain station numbers are not.
LID_MIN_LENGTH = 10

_LOC_MATCH_TYPES = (LocationType.STATION, LocationType.ADDRESS, LocationType.POI)

ModelT = TypeVar("ModelT", bound=HciModel)
T = TypeVar("T")


class HafasClientInterfaceProvider:
    """Network provider for one HAFAS client interface backend.

    All backend specifics come from the HafasProfile. Every operation is one
    request/response cycle, except trip searches, which may first resolve
    unidentified endpoints. Business outcomes are reported as result statuses;
    an unreachable backend becomes Status.SERVICE_UNREACHABLE. Responses that
    cannot be understood raise ParserError.
    """

    def __init__(
        self,
        profile: HafasProfile,
        session: "ClientSession",
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        user_agent: str | None = None,
        verify_ssl: bool = True,
    ) -> None:
        self._profile = profile
        self._http_client = HafasHttpClient(
            session,
            timeout_seconds=timeout_seconds,
            user_agent=profile.user_agent or user_agent,
            verify_ssl=verify_ssl,
        )
        self._signer = RequestSigner(profile.checksum_salt, profile.mic_mac_salt)
        self._authorizer = HafasAuthorizer(profile, self._http_client)
        self._parser = HciResponseParser(profile)
        self._resolver = LocationResolver(self._match_name, self._match_coordinate)

    @classmethod
    def from_config(
        cls, profile: HafasProfile, session: "ClientSession", config: "AppConfig"
    ) -> "HafasClientInterfaceProvider":
        return cls(
            profile,
            session,
            timeout_seconds=config.request_timeout_seconds,
            user_agent=config.user_agent,
            verify_ssl=config.verify_ssl,
        )

    @property
    def network_id(self) -> str:
        return self._profile.network

    @property
    def capabilities(self) -> Set[Capability]:
        return self._profile.capabilities

    def has_capabilities(self, *capabilities: Capability) -> bool:
        return all(capability in self._profile.capabilities for capability in capabilities)

    def _require(self, capability: Capability) -> None:
        if capability not in self._profile.capabilities:
            raise UnsupportedOperationError(capability.operation)

    def _bare_header(self) -> ResultHeader:
        return ResultHeader(self._profile.network, SERVER_PRODUCT)

    # Request plumbing

    async def _request(
        self, method: str, request: dict[str, Any]
    ) -> tuple[ParsedResponse, str, str]:
        """Send one method request; returns the parsed envelope, the URL and the raw page."""
        auth = await self._authorizer.authorization()
        body = build_request_body(self._profile, method, request, auth)
        url = self._profile.endpoint_url
        page = await self._http_client.post(url, body, self._signer.sign(body))
        return parse_response(self._profile, method, page, url), url, page

    @staticmethod
    def _method_failure(
        method: str, parsed: ParsedResponse, url: str, page: str
    ) -> tuple[Status, ErrorDetails | None] | None:
        """Status for an envelope or method level error; None if the call succeeded."""
        if parsed.status is not None:
            return parsed.status, ErrorDetails(code=parsed.error_code, reason="request rejected")
        result = parsed.result
        if result is None or result.err == "OK":
            return None
        status = classify_method_error(method, result.err, result.err_txt, url, page)
        return status, ErrorDetails(code=result.err, reason=result.err_txt or result.err)

    @staticmethod
    def _validate(model: type[ModelT], parsed: ParsedResponse, url: str, page: str) -> ModelT:
        res = parsed.result.res if parsed.result is not None else None
        if res is None:
            raise ParserError(f"{model.__name__}: missing res", url, page)
        try:
            return model.model_validate(res)
        except ValidationError as e:
            raise ParserError(f"{model.__name__}: {e}", url, page) from e

    @staticmethod
    def _unreachable(e: TransportError) -> ErrorDetails:
        return ErrorDetails(status_code=e.status_code, reason=str(e))

    def _location_json(self, location: Location) -> dict[str, Any]:
        location_id = location.id
        if self._is_lid(location_id):
            return {"lid": location_id}
        if location.type is LocationType.STATION and location.has_id:
            return {"type": "S", "extId": location_id}
        if location.type is LocationType.ADDRESS and location.has_id:
            return {"type": "A", "lid": location_id}
        if location.type is LocationType.POI and location.has_id:
            return {"type": "P", "lid": location_id}
        raise ValueError(f"cannot handle location: {location}")

    def _is_lid(self, location_id: str | None) -> bool:
        return (
            self._profile.use_lid_only
            and location_id is not None
            and len(location_id) > LID_MIN_LENGTH
        )

    # Locations

    async def suggest_locations(
        self,
        constraint: str,
        types: Set[LocationType] | None = None,
        max_locations: int = 0,
    ) -> SuggestLocationsResult:
        self._require(Capability.SUGGEST_LOCATIONS)
        try:
            return await self._loc_match(constraint, types, max_locations)
        except TransportError as e:
            return SuggestLocationsResult(
                status=Status.SERVICE_UNREACHABLE,
                header=self._bare_header(),
                error_details=self._unreachable(e),
            )

    async def _loc_match(
        self, constraint: str, types: Set[LocationType] | None, max_locations: int
    ) -> SuggestLocationsResult:
        if max_locations == 0:
            max_locations = DEFAULT_MAX_LOCATIONS
        if (
            types is None
            or LocationType.ANY in types
            or all(location_type in types for location_type in _LOC_MATCH_TYPES)
        ):
            match_type = "ALL"
        else:
            match_type = "".join(t.value for t in _LOC_MATCH_TYPES if t in types)
        request = {
            "input": {
                "field": "S",
                "loc": {"name": f"{constraint}?", "type": match_type},
                "maxLoc": max_locations,
            }
        }

        parsed, url, page = await self._request(LOC_MATCH, request)
        failure = self._method_failure(LOC_MATCH, parsed, url, page)
        if failure is not None:
            status, details = failure
            return SuggestLocationsResult(
                status=status, header=parsed.header, error_details=details
            )

        result = self._validate(LocMatchResult, parsed, url, page)
        locations = self._parse(
            lambda: self._parser.parse_locations(result.match.loc_l, result.common, False),
            url,
            page,
        )
        return SuggestLocationsResult(header=parsed.header, locations=locations)

    async def query_nearby_locations(
        self,
        types: Set[LocationType],
        location: Location,
        max_distance: int = 0,
        max_locations: int = 0,
        equivs: bool = False,
        products: Set[Product] | None = None,
    ) -> NearbyLocationsResult:
        self._require(Capability.NEARBY_LOCATIONS)
        if location.coord is None:
            raise ValueError(f"nearby lookup needs a coordinate: {location}")
        try:
            return await self._loc_geo_pos(
                types, location.coord, equivs, max_distance, max_locations, products
            )
        except TransportError as e:
            return NearbyLocationsResult(
                status=Status.SERVICE_UNREACHABLE,
                header=self._bare_header(),
                error_details=self._unreachable(e),
            )

    async def _loc_geo_pos(
        self,
        types: Set[LocationType],
        coord: Point,
        equivs: bool,
        max_distance: int,
        max_locations: int,
        products: Set[Product] | None,
    ) -> NearbyLocationsResult:
        if max_distance == 0:
            max_distance = DEFAULT_MAX_DISTANCE
        if max_locations == 0:
            max_locations = DEFAULT_MAX_LOCATIONS
        request: dict[str, Any] = {
            "ring": {"cCrd": {"x": coord.lon_e6, "y": coord.lat_e6}, "maxDist": max_distance},
            "getStops": LocationType.STATION in types,
            "getPOIs": LocationType.POI in types,
        }
        if products is not None:
            value = str(self._profile.products_map.to_int(products))
            request["locFltrL"] = [{"value": value, "mode": "INC", "type": "PROD"}]
        if max_locations > 0:
            request["maxLoc"] = max_locations

        parsed, url, page = await self._request(LOC_GEO_POS, request)
        failure = self._method_failure(LOC_GEO_POS, parsed, url, page)
        if failure is not None:
            status, details = failure
            return NearbyLocationsResult(status=status, header=parsed.header, error_details=details)

        result = self._validate(LocGeoPosResult, parsed, url, page)
        locations = self._parse(
            lambda: self._parser.parse_locations(result.loc_l, result.common, equivs), url, page
        )
        return NearbyLocationsResult(
            header=parsed.header,
            locations=[location for location in locations if location.type in types],
        )

    async def _match_name(self, name: str, max_locations: int) -> list[Location]:
        result = await self._loc_match(name, None, max_locations)
        return result.locations if result.ok else []

    async def _match_coordinate(self, coord: Point, max_locations: int) -> list[Location]:
        result = await self._loc_geo_pos(set(LocationType), coord, True, 0, max_locations, None)
        return result.locations if result.ok else []

    # Departures

    async def query_departures(
        self,
        station_id: str,
        time: datetime | None = None,
        max_departures: int = 0,
        equivs: bool = False,
    ) -> QueryDeparturesResult:
        self._require(Capability.DEPARTURES)
        try:
            return await self._station_board(station_id, time, max_departures, equivs)
        except TransportError as e:
            return QueryDeparturesResult(
                status=Status.SERVICE_UNREACHABLE,
                header=self._bare_header(),
                error_details=self._unreachable(e),
            )

    async def _station_board(
        self, station_id: str, time: datetime | None, max_departures: int, equivs: bool
    ) -> QueryDeparturesResult:
        normalized_id = normalize_station_id(station_id)
        if not normalized_id:
            return QueryDeparturesResult(status=Status.INVALID_STATION, header=self._bare_header())

        tz = self._profile.tz
        when = time or datetime.now(tz)
        can_filter_equivs = self._profile.api_level <= STATION_BOARD_EQUIV_FILTER_MAX_LEVEL
        max_journeys = max_departures or DEFAULT_MAX_DEPARTURES
        if not can_filter_equivs and not equivs:
            max_journeys *= STATION_BOARD_OVERFETCH

        station_key = "lid" if self._is_lid(normalized_id) else "extId"
        request: dict[str, Any] = {
            "type": "DEP",
            "date": format_hci_date(when, tz),
            "time": format_hci_time(when, tz),
            "stbLoc": {"type": "S", "state": "F", station_key: normalized_id},
        }
        if can_filter_equivs:
            request["stbFltrEquiv"] = not equivs
        request["maxJny"] = max_journeys

        parsed, url, page = await self._request(STATION_BOARD, request)
        failure = self._method_failure(STATION_BOARD, parsed, url, page)
        if failure is not None:
            status, details = failure
            return QueryDeparturesResult(status=status, header=parsed.header, error_details=details)

        result = self._validate(StationBoardResult, parsed, url, page)
        station_departures = self._parse(
            lambda: self._parser.parse_departures(result, station_id, equivs), url, page
        )
        return QueryDeparturesResult(header=parsed.header, station_departures=station_departures)

    # Trips

    async def query_trips(
        self,
        from_location: Location,
        via: Location | None,
        to: Location,
        time: datetime,
        departure: bool = True,
        options: TripOptions | None = None,
    ) -> QueryTripsResult:
        self._require(Capability.TRIPS)
        try:
            resolved_from = await self._resolver.resolve(from_location)
            if resolved_from is None:
                return self._unknown_endpoint(Endpoint.FROM, from_location)
            resolved_via = None
            if via is not None:
                resolved_via = await self._resolver.resolve(via)
                if resolved_via is None:
                    return self._unknown_endpoint(Endpoint.VIA, via)
            resolved_to = await self._resolver.resolve(to)
            if resolved_to is None:
                return self._unknown_endpoint(Endpoint.TO, to)

            query = TripQuery(
                resolved_from, resolved_via, resolved_to, time, departure, options or TripOptions()
            )
            return await self._trip_search(query, None, later=True)
        except TransportError as e:
            return self._trips_unreachable(e)

    async def query_more_trips(self, context: QueryTripsContext, later: bool) -> QueryTripsResult:
        self._require(Capability.MORE_TRIPS)
        if context.network != self._profile.network:
            raise ValueError(f"context belongs to network {context.network}")
        cursor = context.later_cursor if later else context.earlier_cursor
        if not cursor:
            raise ValueError(f"no {'later' if later else 'earlier'} trips to query")
        try:
            return await self._trip_search(context.query, cursor, later)
        except TransportError as e:
            return self._trips_unreachable(e)

    def _unknown_endpoint(self, endpoint: Endpoint, location: Location) -> QueryTripsResult:
        logger.info(f"Cannot resolve {endpoint.value} location {location}")
        return QueryTripsResult(
            status=Status.UNKNOWN_LOCATION, header=self._bare_header(), unknown_endpoint=endpoint
        )

    def _trips_unreachable(self, e: TransportError) -> QueryTripsResult:
        return QueryTripsResult(
            status=Status.SERVICE_UNREACHABLE,
            header=self._bare_header(),
            error_details=self._unreachable(e),
        )

    def _trip_search_request(self, query: TripQuery, cursor: str | None) -> dict[str, Any]:
        tz = self._profile.tz
        options = query.options
        request: dict[str, Any] = {}
        if cursor is not None:
            request["ctxScr"] = cursor
        request["depLocL"] = [self._location_json(query.from_location)]
        request["arrLocL"] = [self._location_json(query.to)]
        if query.via is not None:
            request["viaLocL"] = [{"loc": self._location_json(query.via)}]
        request["outDate"] = format_hci_date(query.time, tz)
        request["outTime"] = format_hci_time(query.time, tz)
        request["outFrwd"] = query.departure
        if options.products is not None:
            products_map = self._profile.products_map
            if self._profile.api_level >= LID_ONLY_API_LEVEL:
                request["jnyFltrL"] = [
                    {"value": products_map.to_int(options.products), "mode": "INC", "type": "PROD"},
                    *(dict(f) for f in self._profile.additional_journey_filters),
                ]
            else:
                value = products_map.to_bit_string(options.products)
                request["jnyFltrL"] = [{"value": value, "mode": "BIT", "type": "PROD"}]
        request["gisFltrL"] = [
            {
                "mode": "FB",
                "profile": {"type": "F", "linDistRouting": False, "maxdist": 2000},
                "type": "M",
                "meta": f"foot_speed_{options.walk_speed.value}",
            }
        ]
        request["getPolyline"] = True
        request["getPasslist"] = True
        if self._profile.api_level <= CONFIG_GROUPS_MAX_LEVEL:
            request["getConGroups"] = False
        request["getIST"] = False
        request["getEco"] = False
        request["minChgTime"] = -1
        request["extChgTime"] = -1
        return request

    async def _trip_search(
        self, query: TripQuery, cursor: str | None, later: bool
    ) -> QueryTripsResult:
        endpoints = {"from_location": query.from_location, "via": query.via, "to": query.to}
        parsed, url, page = await self._request(
            TRIP_SEARCH, self._trip_search_request(query, cursor)
        )
        failure = self._method_failure(TRIP_SEARCH, parsed, url, page)
        if failure is not None:
            status, details = failure
            return QueryTripsResult(
                status=status, header=parsed.header, error_details=details, **endpoints
            )

        result = self._validate(TripSearchResult, parsed, url, page)
        trips = self._parse(
            lambda: self._parser.parse_trips(result, query.from_location, query.via, query.to),
            url,
            page,
        )

        later_cursor = result.out_ctx_scr_f or None
        earlier_cursor = result.out_ctx_scr_b or None
        # A backend that hands back the cursor just consumed has nothing later.
        if cursor is not None and later and later_cursor == cursor:
            logger.debug("Trip search made no progress, later trips exhausted")
            later_cursor = None
        context = QueryTripsContext(self._profile.network, query, later_cursor, earlier_cursor)
        return QueryTripsResult(
            header=parsed.header,
            trips=self._post_process(trips),
            context=context,
            **endpoints,
        )

    def _post_process(self, trips: list[Trip]) -> list[Trip]:
        if not self._profile.link_same_platform:
            return trips
        return [replace(trip, legs=link_same_platform(trip.legs)) for trip in trips]

    async def query_reload_trip(self, trip_ref: TripRef) -> QueryTripsResult:
        self._require(Capability.TRIP_RELOAD)
        if trip_ref.network != self._profile.network:
            raise ValueError(f"trip reference belongs to network {trip_ref.network}")
        try:
            return await self._reconstruction(trip_ref)
        except TransportError as e:
            return self._trips_unreachable(e)

    async def _reconstruction(self, trip_ref: TripRef) -> QueryTripsResult:
        request: dict[str, Any] = {}
        if self._profile.use_lid_only:
            request["outReconL"] = [{"ctx": trip_ref.reload_token}]
        else:
            request["ctxRecon"] = trip_ref.reload_token
        request["getPolyline"] = True
        request["getPasslist"] = True
        request["getIST"] = False

        endpoints = {
            "from_location": trip_ref.from_location,
            "via": trip_ref.via,
            "to": trip_ref.to,
        }
        parsed, url, page = await self._request(RECONSTRUCTION, request)
        failure = self._method_failure(RECONSTRUCTION, parsed, url, page)
        if failure is not None:
            status, details = failure
            if status is Status.OK:
                logger.info("Trip to reload no longer exists")
                return QueryTripsResult(header=parsed.header, **endpoints)
            return QueryTripsResult(
                status=status, header=parsed.header, error_details=details, **endpoints
            )

        result = self._validate(TripSearchResult, parsed, url, page)
        trips = self._parse(
            lambda: self._parser.parse_trips(
                result, trip_ref.from_location, trip_ref.via, trip_ref.to
            ),
            url,
            page,
        )
        return QueryTripsResult(header=parsed.header, trips=self._post_process(trips), **endpoints)

    # Journeys

    async def query_journey(self, journey_ref: JourneyRef) -> QueryJourneyResult:
        self._require(Capability.JOURNEY)
        if journey_ref.network != self._profile.network:
            raise ValueError(f"journey reference belongs to network {journey_ref.network}")
        try:
            return await self._journey_details(journey_ref)
        except TransportError as e:
            return QueryJourneyResult(
                status=Status.SERVICE_UNREACHABLE,
                header=self._bare_header(),
                error_details=self._unreachable(e),
            )

    async def _journey_details(self, journey_ref: JourneyRef) -> QueryJourneyResult:
        request = {"jid": journey_ref.journey_id, "getPasslist": True, "getPolyline": True}
        parsed, url, page = await self._request(JOURNEY_DETAILS, request)
        failure = self._method_failure(JOURNEY_DETAILS, parsed, url, page)
        if failure is not None:
            status, details = failure
            return QueryJourneyResult(status=status, header=parsed.header, error_details=details)

        result = self._validate(JourneyDetailsResult, parsed, url, page)
        leg = self._parse(lambda: self._parser.parse_journey(result), url, page)
        if leg is None:
            return QueryJourneyResult(status=Status.NO_JOURNEY, header=parsed.header)
        return QueryJourneyResult(header=parsed.header, journey_leg=leg)

    @staticmethod
    def _parse(parse: Callable[[], T], url: str, page: str) -> T:
        """Run a parser step, attaching URL and page to its errors."""
        try:
            return parse()
        except ParserError as e:
            if e.url is not None:
                raise
            raise ParserError(str(e), url, page) from e
