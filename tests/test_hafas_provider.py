"""Tests for the HAFAS client interface provider, with canned backend responses."""

import json
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from transit_adapters.adapters.config import AppConfig
from transit_adapters.adapters.hafas_api.error_taxonomy import TEXT_LOCATION, TEXT_REQUEST_FAILED
from transit_adapters.adapters.hafas_api.hafas_provider import HafasClientInterfaceProvider
from transit_adapters.adapters.hafas_api.profile import HafasProfile
from transit_adapters.adapters.hafas_api.signing import compute_checksum
from transit_adapters.domain.exceptions import (
    ParserError,
    TransportError,
    UnknownErrorCodeError,
    UnsupportedOperationError,
)
from transit_adapters.domain.models.capability import Capability
from transit_adapters.domain.models.location import Location, LocationType, Point
from transit_adapters.domain.models.product import Product
from transit_adapters.domain.models.query import (
    QueryTripsContext,
    TripOptions,
    TripQuery,
    WalkSpeed,
)
from transit_adapters.domain.models.refs import JourneyRef, TripRef
from transit_adapters.domain.models.results import Endpoint, Status
from transit_adapters.domain.models.stop import Position
from transit_adapters.domain.models.trip import PublicLeg

PageBuilder = Callable[..., str]

ENDPOINT_URL = "https://hafas.example.com/bin/mgate.exe"
WHEN = datetime(2024, 3, 15, 10, 0)

ALEXANDERPLATZ = {"type": "S", "name": "S+U Alexanderplatz", "extId": "900100003",
                  "crd": {"x": 13411399, "y": 52521508}}
FRIEDRICHSTRASSE = {"type": "S", "name": "S+U Friedrichstr.", "extId": "900100001",
                    "crd": {"x": 13387149, "y": 52520519}}
FERNSEHTURM = {"type": "P", "name": "Berlin, Fernsehturm", "lid": "A=4@O=Fernsehturm@",
               "crd": {"x": 13409419, "y": 52520803}}
UNTER_DEN_LINDEN_CRD = {"x": 13390000, "y": 52517000}
BUS_100 = {"name": "Bus 100", "number": "100", "cls": 8}
COMMON = {"locL": [ALEXANDERPLATZ, FRIEDRICHSTRASSE], "prodL": [BUS_100]}


def _section(dep_x: int, arr_x: int, dep: str, arr: str, dep_pf: str, arr_pf: str) -> dict:
    return {
        "type": "JNY",
        "dep": {"locX": dep_x, "dTimeS": dep, "dPlatfS": dep_pf},
        "arr": {"locX": arr_x, "aTimeS": arr, "aPlatfS": arr_pf},
        "jny": {"jid": f"j-{dep}", "prodX": 0, "date": "20240315", "dirTxt": "Zoo"},
    }


def _trip_res(*sections: dict[str, Any], forward: str | None = "F1") -> dict[str, Any]:
    res: dict[str, Any] = {
        "common": COMMON,
        "outConL": [
            {
                "date": "20240315",
                "dep": {"locX": 0},
                "arr": {"locX": 1},
                "ctxRecon": "T$A=1@L=900100003@$A=1@L=900100001@$#7",
                "secL": list(sections) or [_section(0, 1, "101000", "101600", "3", "4")],
            }
        ],
        "outCtxScrB": "B1",
    }
    if forward is not None:
        res["outCtxScrF"] = forward
    return res


@pytest.fixture
def provider(test_profile: HafasProfile) -> HafasClientInterfaceProvider:
    return HafasClientInterfaceProvider(test_profile, MagicMock())


def _stub(provider: HafasClientInterfaceProvider, *pages: str | Exception) -> AsyncMock:
    post = AsyncMock(side_effect=list(pages))
    provider._http_client.post = post  # type: ignore[method-assign]
    return post


def _sent(post: AsyncMock, call: int = -1) -> dict[str, Any]:
    """Method request of a recorded call."""
    body = json.loads(post.call_args_list[call].args[1])
    return body["svcReqL"][1]


class TestCapabilities:
    """Tests for capability declaration and enforcement."""

    def test_when_profile_declares_all_then_all_supported(
        self, provider: HafasClientInterfaceProvider
    ) -> None:
        """Given the default capabilities, when checking, then every operation is supported."""
        assert provider.network_id == "test"
        assert provider.has_capabilities(*Capability)

    @pytest.mark.asyncio
    async def test_when_capability_missing_then_operation_raises(
        self, test_profile: HafasProfile
    ) -> None:
        """Given a trips-only profile, when suggesting locations, then it is unsupported."""
        profile = replace(test_profile, capabilities=frozenset({Capability.TRIPS}))
        provider = HafasClientInterfaceProvider(profile, MagicMock())

        assert provider.has_capabilities(Capability.TRIPS)
        assert not provider.has_capabilities(Capability.TRIPS, Capability.JOURNEY)
        with pytest.raises(UnsupportedOperationError, match="suggest_locations"):
            await provider.suggest_locations("Alex")

    def test_when_built_from_config_then_network_kept(self, test_profile: HafasProfile) -> None:
        """Given an AppConfig, when building the provider, then it serves the profile."""
        config = AppConfig(request_timeout_seconds=3, user_agent="transit-test")

        provider = HafasClientInterfaceProvider.from_config(test_profile, MagicMock(), config)

        assert provider.network_id == "test"


class TestSuggestLocations:
    """Tests for suggest_locations."""

    @pytest.mark.asyncio
    async def test_when_matches_found_then_locations_and_header(
        self,
        provider: HafasClientInterfaceProvider,
        hci_page: PageBuilder,
        test_profile: HafasProfile,
    ) -> None:
        """Given LocMatch results, when suggesting, then locations come in backend order."""
        post = _stub(
            provider,
            hci_page("LocMatch", {"common": {}, "match": {"locL": [ALEXANDERPLATZ, FERNSEHTURM]}}),
        )

        result = await provider.suggest_locations("Alex")

        assert result.ok
        assert [loc.type for loc in result.locations] == [LocationType.STATION, LocationType.POI]
        assert result.header is not None
        assert result.header.server_time == test_profile.tz.localize(datetime(2024, 3, 15, 10, 15))
        assert _sent(post)["req"] == {
            "input": {"field": "S", "loc": {"name": "Alex?", "type": "ALL"}, "maxLoc": 50}
        }

    @pytest.mark.asyncio
    async def test_when_sent_then_authorized_and_signed(
        self, provider: HafasClientInterfaceProvider, hci_page: PageBuilder
    ) -> None:
        """Given a profile with auth and checksum salt, when sending, then both are applied."""
        post = _stub(provider, hci_page("LocMatch", {"match": {}}))

        await provider.suggest_locations("Alex")

        url, body, params = post.call_args.args
        assert url == ENDPOINT_URL
        assert json.loads(body)["auth"] == {"type": "AID", "aid": "secret-aid"}
        assert params == {"checksum": compute_checksum(body, b"test-salt")}

    @pytest.mark.asyncio
    async def test_when_types_restricted_then_match_type_lists_them(
        self, provider: HafasClientInterfaceProvider, hci_page: PageBuilder
    ) -> None:
        """Given stations and POIs only, when suggesting, then the match type is 'SP'."""
        post = _stub(provider, hci_page("LocMatch", {"match": {}}))

        await provider.suggest_locations(
            "Alex", types={LocationType.POI, LocationType.STATION}, max_locations=5
        )

        assert _sent(post)["req"]["input"]["loc"]["type"] == "SP"
        assert _sent(post)["req"]["input"]["maxLoc"] == 5

    @pytest.mark.asyncio
    async def test_when_backend_unreachable_then_service_unreachable(
        self, provider: HafasClientInterfaceProvider
    ) -> None:
        """Given a 503 from the backend, when suggesting, then SERVICE_UNREACHABLE with status."""
        _stub(provider, TransportError(f"HTTP 503 for {ENDPOINT_URL}", 503))

        result = await provider.suggest_locations("Alex")

        assert result.status is Status.SERVICE_UNREACHABLE
        assert result.error_details is not None
        assert result.error_details.status_code == 503
        assert result.locations == []

    @pytest.mark.asyncio
    async def test_when_backend_fails_then_service_down(
        self, provider: HafasClientInterfaceProvider, hci_page: PageBuilder
    ) -> None:
        """Given a FAIL method error, when suggesting, then SERVICE_DOWN with the code."""
        _stub(provider, hci_page("LocMatch", err="FAIL", err_txt=TEXT_REQUEST_FAILED))

        result = await provider.suggest_locations("Alex")

        assert result.status is Status.SERVICE_DOWN
        assert result.error_details is not None
        assert result.error_details.code == "FAIL"

    @pytest.mark.asyncio
    async def test_when_error_code_unknown_then_raises(
        self, provider: HafasClientInterfaceProvider, hci_page: PageBuilder
    ) -> None:
        """Given an unlisted method error, when suggesting, then UnknownErrorCodeError."""
        _stub(provider, hci_page("LocMatch", err="H9999"))

        with pytest.raises(UnknownErrorCodeError) as exc_info:
            await provider.suggest_locations("Alex")

        assert exc_info.value.url == ENDPOINT_URL

    @pytest.mark.asyncio
    async def test_when_page_is_not_json_then_parser_error_with_url(
        self, provider: HafasClientInterfaceProvider
    ) -> None:
        """Given an HTML page, when suggesting, then ParserError carries the URL."""
        _stub(provider, "<html>maintenance</html>")

        with pytest.raises(ParserError) as exc_info:
            await provider.suggest_locations("Alex")

        assert exc_info.value.url == ENDPOINT_URL

    @pytest.mark.asyncio
    async def test_when_result_shape_invalid_then_parser_error(
        self, provider: HafasClientInterfaceProvider, hci_page: PageBuilder
    ) -> None:
        """Given a locL that is not a list, when suggesting, then ParserError."""
        _stub(provider, hci_page("LocMatch", {"match": {"locL": "broken"}}))

        with pytest.raises(ParserError, match="LocMatchResult"):
            await provider.suggest_locations("Alex")


class TestNearbyLocations:
    """Tests for query_nearby_locations."""

    @pytest.mark.asyncio
    async def test_when_no_coordinate_then_value_error(
        self, provider: HafasClientInterfaceProvider
    ) -> None:
        """Given a location without coordinate, when querying nearby, then ValueError."""
        with pytest.raises(ValueError, match="coordinate"):
            await provider.query_nearby_locations(
                {LocationType.STATION}, Location.station("900100003")
            )

    @pytest.mark.asyncio
    async def test_when_types_restricted_then_results_filtered(
        self, provider: HafasClientInterfaceProvider, hci_page: PageBuilder
    ) -> None:
        """Given stations only, when the backend also returns a POI, then it is dropped."""
        post = _stub(
            provider, hci_page("LocGeoPos", {"locL": [FERNSEHTURM, ALEXANDERPLATZ]})
        )

        result = await provider.query_nearby_locations(
            {LocationType.STATION},
            Location.coordinate(Point(52.5215, 13.4114)),
            products={Product.BUS},
        )

        assert [loc.id for loc in result.locations] == ["900100003"]
        assert _sent(post)["req"] == {
            "ring": {"cCrd": {"x": 13411400, "y": 52521500}, "maxDist": 10000},
            "getStops": True,
            "getPOIs": False,
            "locFltrL": [{"value": "8", "mode": "INC", "type": "PROD"}],
            "maxLoc": 50,
        }


class TestQueryDepartures:
    """Tests for query_departures."""

    @staticmethod
    def _board() -> dict[str, Any]:
        return {
            "common": COMMON,
            "jnyL": [
                {
                    "jid": "j1",
                    "date": "20240315",
                    "prodX": 0,
                    "dirTxt": "Zoo",
                    "stbStop": {"locX": 0, "dProdX": 0, "dTimeS": "101000"},
                }
            ],
        }

    @pytest.mark.asyncio
    async def test_when_station_id_empty_after_normalizing_then_invalid_station(
        self, provider: HafasClientInterfaceProvider
    ) -> None:
        """Given station id '000', when querying, then INVALID_STATION without a request."""
        post = _stub(provider)

        result = await provider.query_departures("000")

        assert result.status is Status.INVALID_STATION
        post.assert_not_called()

    @pytest.mark.asyncio
    async def test_when_board_returned_then_departures_grouped(
        self, provider: HafasClientInterfaceProvider, hci_page: PageBuilder
    ) -> None:
        """Given a board for the station, when querying, then one group with the departure."""
        post = _stub(provider, hci_page("StationBoard", self._board()))

        result = await provider.query_departures("900100003", time=WHEN)

        assert result.ok
        station = result.find_station_departures("900100003")
        assert station is not None
        assert [d.line.label for d in station.departures] == ["100"]
        assert _sent(post)["req"] == {
            "type": "DEP",
            "date": "20240315",
            "time": "100000",
            "stbLoc": {"type": "S", "state": "F", "extId": "900100003"},
            "stbFltrEquiv": True,
            "maxJny": 100,
        }

    @pytest.mark.asyncio
    async def test_when_backend_cannot_filter_equivs_then_overfetches(
        self, lid_profile: HafasProfile, hci_page: PageBuilder
    ) -> None:
        """Given a 1.59 backend, when querying without equivs, then more entries are asked."""
        provider = HafasClientInterfaceProvider(lid_profile, MagicMock())
        post = _stub(provider, hci_page("StationBoard", self._board()))

        await provider.query_departures("900100003", time=WHEN, max_departures=10)

        request = _sent(post)["req"]
        assert "stbFltrEquiv" not in request
        assert request["maxJny"] == 40
        assert post.call_args.args[2] == {}

    @pytest.mark.asyncio
    async def test_when_backend_rejects_station_then_invalid_station(
        self, provider: HafasClientInterfaceProvider, hci_page: PageBuilder
    ) -> None:
        """Given a LOCATION error, when querying, then INVALID_STATION."""
        _stub(provider, hci_page("StationBoard", err="LOCATION", err_txt=TEXT_LOCATION))

        result = await provider.query_departures("12345", time=WHEN)

        assert result.status is Status.INVALID_STATION


class TestQueryTrips:
    """Tests for query_trips and query_more_trips."""

    FROM = Location.station("900100003")
    TO = Location.station("900100001")
    QUERY = TripQuery(FROM, None, TO, WHEN)

    @pytest.mark.asyncio
    async def test_when_trips_found_then_page_with_context(
        self, provider: HafasClientInterfaceProvider, hci_page: PageBuilder
    ) -> None:
        """Given a TripSearch result, when querying, then trips and a pagination context."""
        post = _stub(provider, hci_page("TripSearch", _trip_res()))

        result = await provider.query_trips(
            self.FROM,
            None,
            self.TO,
            WHEN,
            options=TripOptions(products=frozenset({Product.BUS}), walk_speed=WalkSpeed.FAST),
        )

        assert result.ok
        assert len(result.trips) == 1
        assert result.from_location == self.FROM
        assert result.context is not None
        assert result.context.can_query_later()
        assert result.context.can_query_earlier()
        request = _sent(post)["req"]
        assert request["depLocL"] == [{"type": "S", "extId": "900100003"}]
        assert request["arrLocL"] == [{"type": "S", "extId": "900100001"}]
        assert (request["outDate"], request["outTime"], request["outFrwd"]) == (
            "20240315",
            "100000",
            True,
        )
        assert request["jnyFltrL"] == [{"value": "00010000", "mode": "BIT", "type": "PROD"}]
        assert request["gisFltrL"][0]["meta"] == "foot_speed_fast"
        assert request["getConGroups"] is False
        assert "ctxScr" not in request

    @pytest.mark.asyncio
    async def test_when_lid_backend_then_product_filter_is_integer(
        self, lid_profile: HafasProfile, hci_page: PageBuilder
    ) -> None:
        """Given a 1.59 backend, when filtering products, then an INC integer filter is sent."""
        profile = replace(
            lid_profile,
            additional_journey_filters=({"value": "GROUP_PT", "mode": "INC", "type": "GROUP"},),
        )
        provider = HafasClientInterfaceProvider(profile, MagicMock())
        post = _stub(provider, hci_page("TripSearch", _trip_res()))
        lid = "A=1@O=S+U Alexanderplatz@X=13411399@Y=52521508@L=900100003@"

        await provider.query_trips(
            Location.station(lid),
            None,
            self.TO,
            WHEN,
            options=TripOptions(products=frozenset({Product.BUS, Product.TRAM})),
        )

        request = _sent(post)["req"]
        assert request["depLocL"] == [{"lid": lid}]
        assert request["jnyFltrL"] == [
            {"value": 12, "mode": "INC", "type": "PROD"},
            {"value": "GROUP_PT", "mode": "INC", "type": "GROUP"},
        ]
        assert "getConGroups" not in request

    @pytest.mark.asyncio
    async def test_when_endpoint_cannot_be_resolved_then_unknown_location_tagged(
        self, provider: HafasClientInterfaceProvider, hci_page: PageBuilder
    ) -> None:
        """Given a destination name without matches, when querying, then UNKNOWN_LOCATION/TO."""
        post = _stub(provider, hci_page("LocMatch", {"match": {"locL": []}}))
        to = Location(LocationType.ADDRESS, place="Berlin", name="Nirgendwo 1")

        result = await provider.query_trips(self.FROM, None, to, WHEN)

        assert result.status is Status.UNKNOWN_LOCATION
        assert result.unknown_endpoint is Endpoint.TO
        assert _sent(post)["meth"] == "LocMatch"
        assert post.await_count == 1

    @pytest.mark.asyncio
    async def test_when_endpoint_named_then_resolved_before_search(
        self, provider: HafasClientInterfaceProvider, hci_page: PageBuilder
    ) -> None:
        """Given a named origin, when querying, then it is matched first and then searched."""
        post = _stub(
            provider,
            hci_page("LocMatch", {"match": {"locL": [ALEXANDERPLATZ]}}),
            hci_page("TripSearch", _trip_res()),
        )

        result = await provider.query_trips(
            Location(LocationType.ANY, name="Alexanderplatz"), None, self.TO, WHEN
        )

        assert result.ok
        assert result.from_location is not None
        assert result.from_location.id == "900100003"
        assert _sent(post, 0)["req"]["input"]["loc"]["name"] == "Alexanderplatz?"
        assert _sent(post, 1)["req"]["depLocL"] == [{"type": "S", "extId": "900100003"}]

    @pytest.mark.asyncio
    async def test_when_resolved_address_has_no_lid_then_value_error_before_search(
        self, provider: HafasClientInterfaceProvider, hci_page: PageBuilder
    ) -> None:
        """Given a match for an address without lid, when querying, then no TripSearch is sent."""
        address = {"type": "A", "name": "Unter den Linden 1", "crd": UNTER_DEN_LINDEN_CRD}
        post = _stub(provider, hci_page("LocMatch", {"match": {"locL": [address]}}))

        with pytest.raises(ValueError, match="cannot handle location"):
            await provider.query_trips(
                Location(LocationType.ANY, name="Unter den Linden 1"), None, self.TO, WHEN
            )

        assert post.await_count == 1
        assert _sent(post)["meth"] == "LocMatch"

    @pytest.mark.asyncio
    async def test_when_origin_station_id_is_zeros_then_unknown_from(
        self, provider: HafasClientInterfaceProvider
    ) -> None:
        """Given origin id '00', when querying, then UNKNOWN_LOCATION/FROM without request."""
        post = _stub(provider)

        result = await provider.query_trips(Location.station("00"), None, self.TO, WHEN)

        assert result.unknown_endpoint is Endpoint.FROM
        post.assert_not_called()

    @pytest.mark.asyncio
    async def test_when_no_connections_then_no_trips(
        self, provider: HafasClientInterfaceProvider, hci_page: PageBuilder
    ) -> None:
        """Given H890, when querying, then NO_TRIPS with the resolved endpoints."""
        _stub(provider, hci_page("TripSearch", err="H890"))

        result = await provider.query_trips(self.FROM, None, self.TO, WHEN)

        assert result.status is Status.NO_TRIPS
        assert result.to == self.TO
        assert result.trips == []

    @pytest.mark.asyncio
    async def test_when_envelope_reports_hamm_then_service_down(
        self, provider: HafasClientInterfaceProvider
    ) -> None:
        """Given a HAMM envelope error, when querying, then SERVICE_DOWN with that code."""
        _stub(provider, json.dumps({"ver": "1.15", "err": "HAMM"}))

        result = await provider.query_trips(self.FROM, None, self.TO, WHEN)

        assert result.status is Status.SERVICE_DOWN
        assert result.error_details is not None
        assert result.error_details.code == "HAMM"

    @pytest.mark.asyncio
    async def test_when_querying_later_then_cursor_sent(
        self, provider: HafasClientInterfaceProvider, hci_page: PageBuilder
    ) -> None:
        """Given a context, when querying later trips, then its forward cursor is sent."""
        post = _stub(
            provider,
            hci_page("TripSearch", _trip_res()),
            hci_page("TripSearch", _trip_res(forward="F2")),
        )
        first = await provider.query_trips(self.FROM, None, self.TO, WHEN)
        assert first.context is not None

        second = await provider.query_more_trips(first.context, later=True)

        assert _sent(post)["req"]["ctxScr"] == "F1"
        assert second.context is not None
        assert second.context.later_cursor == "F2"

    @pytest.mark.asyncio
    async def test_when_cursor_does_not_advance_then_later_exhausted(
        self, provider: HafasClientInterfaceProvider, hci_page: PageBuilder
    ) -> None:
        """Given the backend returning the consumed cursor, when paging, then no later page."""
        _stub(provider, hci_page("TripSearch", _trip_res(forward="F1")))
        context = QueryTripsContext(
            "test",
            query=self.QUERY,
            later_cursor="F1",
        )

        result = await provider.query_more_trips(context, later=True)

        assert result.context is not None
        assert result.context.can_query_later() is False

    @pytest.mark.asyncio
    async def test_when_no_cursor_then_value_error(
        self, provider: HafasClientInterfaceProvider
    ) -> None:
        """Given a context without earlier cursor, when paging earlier, then ValueError."""
        context = QueryTripsContext("test", query=self.QUERY, later_cursor="F1")

        with pytest.raises(ValueError, match="earlier"):
            await provider.query_more_trips(context, later=False)

    @pytest.mark.asyncio
    async def test_when_context_from_other_network_then_value_error(
        self, provider: HafasClientInterfaceProvider
    ) -> None:
        """Given a context issued by another network, when paging, then ValueError."""
        context = QueryTripsContext("rmv", query=self.QUERY, later_cursor="F1")

        with pytest.raises(ValueError, match="rmv"):
            await provider.query_more_trips(context, later=True)

    @pytest.mark.asyncio
    async def test_when_same_platform_linking_enabled_then_change_marked(
        self, test_profile: HafasProfile, hci_page: PageBuilder
    ) -> None:
        """Given a change on the arrival platform, when linking is enabled, then it is marked."""
        provider = HafasClientInterfaceProvider(
            replace(test_profile, link_same_platform=True), MagicMock()
        )
        _stub(
            provider,
            hci_page(
                "TripSearch",
                _trip_res(
                    _section(0, 1, "101000", "101600", "3", "4"),
                    _section(1, 0, "102000", "103000", "4", "1"),
                ),
            ),
        )

        result = await provider.query_trips(self.FROM, None, self.TO, WHEN)

        first, second = result.trips[0].legs
        assert isinstance(first, PublicLeg) and isinstance(second, PublicLeg)
        assert first.arrival_stop.arrival_position == Position("4", same_platform=True)
        assert second.departure_stop.departure_position == Position("4", same_platform=True)


class TestReloadTrip:
    """Tests for query_reload_trip."""

    REF = TripRef("test", "T$A=1@L=900100003@$#7", Location.station("900100003"))

    @pytest.mark.asyncio
    async def test_when_reloaded_then_trip_with_endpoints(
        self, provider: HafasClientInterfaceProvider, hci_page: PageBuilder
    ) -> None:
        """Given a Reconstruction result, when reloading, then the trip is returned."""
        post = _stub(provider, hci_page("Reconstruction", _trip_res()))

        result = await provider.query_reload_trip(self.REF)

        assert result.ok
        assert len(result.trips) == 1
        assert result.from_location == self.REF.from_location
        assert _sent(post)["req"]["ctxRecon"] == self.REF.reload_token

    @pytest.mark.asyncio
    async def test_when_lid_backend_then_recon_list_sent(
        self, lid_profile: HafasProfile, hci_page: PageBuilder
    ) -> None:
        """Given a 1.59 backend, when reloading, then the token goes into outReconL."""
        provider = HafasClientInterfaceProvider(lid_profile, MagicMock())
        post = _stub(provider, hci_page("Reconstruction", _trip_res()))

        await provider.query_reload_trip(self.REF)

        assert _sent(post)["req"]["outReconL"] == [{"ctx": self.REF.reload_token}]

    @pytest.mark.asyncio
    async def test_when_trip_gone_then_ok_without_trips(
        self, provider: HafasClientInterfaceProvider, hci_page: PageBuilder
    ) -> None:
        """Given H890 for a reload, when reloading, then OK with an empty trip list."""
        _stub(provider, hci_page("Reconstruction", err="H890"))

        result = await provider.query_reload_trip(self.REF)

        assert result.status is Status.OK
        assert result.trips == []

    @pytest.mark.asyncio
    async def test_when_ref_from_other_network_then_value_error(
        self, provider: HafasClientInterfaceProvider
    ) -> None:
        """Given a reference of another network, when reloading, then ValueError."""
        with pytest.raises(ValueError, match="bvg"):
            await provider.query_reload_trip(replace(self.REF, network="bvg"))


class TestQueryJourney:
    """Tests for query_journey."""

    REF = JourneyRef("test", "1|123|0|86|15032024")

    @pytest.mark.asyncio
    async def test_when_journey_found_then_leg(
        self, provider: HafasClientInterfaceProvider, hci_page: PageBuilder
    ) -> None:
        """Given journey details with two stops, when querying, then the leg is returned."""
        post = _stub(
            provider,
            hci_page(
                "JourneyDetails",
                {
                    "common": COMMON,
                    "journey": {
                        "jid": self.REF.journey_id,
                        "date": "20240315",
                        "prodX": 0,
                        "stopL": [
                            {"locX": 0, "dTimeS": "101000"},
                            {"locX": 1, "aTimeS": "101600"},
                        ],
                    },
                },
            ),
        )

        result = await provider.query_journey(self.REF)

        assert result.ok
        assert result.journey_leg is not None
        assert result.journey_leg.journey_ref == self.REF
        assert _sent(post)["req"] == {
            "jid": self.REF.journey_id,
            "getPasslist": True,
            "getPolyline": True,
        }

    @pytest.mark.asyncio
    async def test_when_single_stop_then_no_journey(
        self, provider: HafasClientInterfaceProvider, hci_page: PageBuilder
    ) -> None:
        """Given a journey with one stop, when querying, then NO_JOURNEY."""
        _stub(
            provider,
            hci_page(
                "JourneyDetails",
                {"common": COMMON, "journey": {"date": "20240315", "stopL": [{"locX": 0}]}},
            ),
        )

        result = await provider.query_journey(self.REF)

        assert result.status is Status.NO_JOURNEY

    @pytest.mark.asyncio
    async def test_when_backend_has_no_journey_then_no_journey(
        self, provider: HafasClientInterfaceProvider, hci_page: PageBuilder
    ) -> None:
        """Given H890, when querying, then NO_JOURNEY."""
        _stub(provider, hci_page("JourneyDetails", err="H890"))

        result = await provider.query_journey(self.REF)

        assert result.status is Status.NO_JOURNEY

    @pytest.mark.asyncio
    async def test_when_unreachable_then_service_unreachable(
        self, provider: HafasClientInterfaceProvider
    ) -> None:
        """Given a connection failure, when querying, then SERVICE_UNREACHABLE."""
        _stub(provider, TransportError("request failed"))

        result = await provider.query_journey(self.REF)

        assert result.status is Status.SERVICE_UNREACHABLE
        assert result.error_details is not None
        assert result.error_details.status_code is None
