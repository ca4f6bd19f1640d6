"""Translation of HCI method results into domain models.

HCI responses are normalized: locations, products, operators, icons,
remarks and polylines live once in the ``common`` tables and are referenced
by index everywhere else. The parser resolves those references per response;
no state is kept between calls.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime

from transit_adapters.adapters.hafas_api.fare_parser import FareParser
from transit_adapters.adapters.hafas_api.hci_time import parse_hci_date, parse_hci_time
from transit_adapters.adapters.hafas_api.lid import normalize_station_id, unify_lid
from transit_adapters.adapters.hafas_api.polyline import decode_polyline
from transit_adapters.adapters.hafas_api.profile import HafasProfile
from transit_adapters.adapters.hafas_api.schema import (
    Common,
    Connection,
    Icon,
    IconColor,
    Journey,
    JourneyDetailsResult,
    Loc,
    PlatformText,
    Prod,
    Section,
    StationBoardResult,
    StopJson,
    TripSearchResult,
    at,
)
from transit_adapters.domain.exceptions import ParserError
from transit_adapters.domain.models.departure import Departure, StationDepartures
from transit_adapters.domain.models.line import Line, Shape, Style, argb, derive_foreground_color
from transit_adapters.domain.models.line_styles import resolve_line_style
from transit_adapters.domain.models.location import Location, LocationType, Point
from transit_adapters.domain.models.product import Product
from transit_adapters.domain.models.refs import JourneyRef, TripRef
from transit_adapters.domain.models.stop import Position, Stop, parse_position
from transit_adapters.domain.models.trip import IndividualLeg, IndividualType, Leg, PublicLeg, Trip

logger = logging.getLogger(__name__)

WGS84 = "WGS84"
# Remark code carrying the text a leg should show.
LEG_MESSAGE_REMARK_CODE = "l?"
MESSAGE_SEPARATOR = " - "

_SHAPES = {"C": Shape.CIRCLE, "R": Shape.RECT}

_INDIVIDUAL_SECTION_TYPES = {
    "TRSF": IndividualType.TRANSFER,
    "DEVI": IndividualType.TRANSFER,
    "CHKI": IndividualType.CHECK_IN,
    "CHKO": IndividualType.CHECK_OUT,
}

# Stops whose location cannot be resolved still keep their times.
_UNRESOLVED_LOCATION = Location(LocationType.ANY)


def _color(color: IconColor) -> int:
    if color.r == -1 and color.g == -1 and color.b == -1:
        return 0
    return argb(color.a, color.r, color.g, color.b)


def parse_icon_style(icon: Icon) -> Style | None:
    """Style of a backend icon, or None if it has no background color.

    Raises:
        ParserError: On an unknown shape code.
    """
    if icon.bg is None:
        return None
    background = _color(icon.bg)
    foreground = _color(icon.fg) if icon.fg is not None else derive_foreground_color(background)
    if icon.shp is None:
        return Style(background, foreground)
    shape = _SHAPES.get(icon.shp)
    if shape is None:
        raise ParserError(f"unknown icon shape: {icon.shp}")
    return Style(background, foreground, shape)


def _position(text: str | None, structured: PlatformText | None) -> Position | None:
    if structured is not None and structured.txt is not None:
        return Position(structured.txt)
    return parse_position(text)


def _time(base_date: date, text: str | None, profile: HafasProfile) -> datetime | None:
    try:
        return parse_hci_time(base_date, text, profile.tz)
    except ValueError as e:
        raise ParserError(str(e)) from e


def _date(text: str | None) -> date:
    if text is None:
        raise ParserError("missing date")
    try:
        return parse_hci_date(text)
    except ValueError as e:
        raise ParserError(str(e)) from e


@dataclass(frozen=True)
class _Tables:
    """Resolved shared tables of one response."""

    common: Common
    lines: list[Line]


class HciResponseParser:
    """Parses method results of one backend profile."""

    def __init__(self, profile: HafasProfile) -> None:
        self._profile = profile
        self._fare_parser = FareParser(profile.api_level)

    # Shared tables

    def _tables(self, common: Common) -> _Tables:
        styles = [parse_icon_style(icon) for icon in common.ico_l]
        operators = [operator.name for operator in common.op_l]
        lines = [self.parse_line(prod, styles, operators) for prod in common.prod_l]
        return _Tables(common, lines)

    def parse_line(
        self, prod: Prod, styles: list[Style | None], operators: list[str | None]
    ) -> Line:
        """Build a line from a product entry."""
        product = None
        if prod.product_class is not None:
            product = self._profile.products_map.to_product(prod.product_class)

        name = prod.name or None
        number = prod.number
        line_id = None
        if prod.prod_ctx is not None:
            line_id = prod.prod_ctx.line_id
            number = prod.prod_ctx.num or number
        add_name = prod.add_name if self._profile.use_add_name else None
        operator = at(operators, prod.opr_x)
        backend_style = at(styles, prod.ico_x)

        label = self._line_label(product, name, prod.name_s, number, add_name)
        long_name = self._line_name(name, prod.name_s, number, add_name)
        style = resolve_line_style(self._profile.styles, operator, product, label, backend_style)
        return Line(line_id, operator, product, label, long_name, style)

    @staticmethod
    def _line_label(
        product: Product | None,
        name: str | None,
        short_name: str | None,
        number: str | None,
        add_name: str | None,
    ) -> str | None:
        if product in (Product.BUS, Product.TRAM):
            if short_name:
                return short_name
            if number and name and name.endswith(number):
                return number
            return name
        return add_name or short_name or name

    @staticmethod
    def _line_name(
        name: str | None, short_name: str | None, number: str | None, add_name: str | None
    ) -> str | None:
        base = add_name or short_name or name
        if not number:
            return base
        if base is None:
            return number
        if base.endswith(number):
            return base
        return f"{base} ({number})"

    # Locations

    def parse_locations(self, locs: list[Loc], common: Common, equivs: bool) -> list[Location]:
        """Parse a location list; with equivs, stations fold into their master."""
        visited: set[int] | None = set() if equivs else None
        locations = []
        for index in range(len(locs)):
            location = self._parse_loc(locs, index, visited, common)
            if location is not None:
                locations.append(location)
        return locations

    def parse_common_location(
        self, common: Common, index: int | None, follow_master: bool = True
    ) -> Location | None:
        return self._parse_loc(common.loc_l, index, set() if follow_master else None, common)

    def _parse_loc(
        self, locs: list[Loc], index: int | None, visited: set[int] | None, common: Common
    ) -> Location | None:
        loc = at(locs, index)
        if loc is None or index is None or loc.type is None:
            return None

        splitter = self._profile.name_splitter
        products = None
        if loc.type == "S":
            if visited is not None and loc.m_mast_loc_x is not None:
                if loc.m_mast_loc_x in visited:
                    return None
                visited.add(index)
                return self._parse_loc(common.loc_l, loc.m_mast_loc_x, visited, common)
            location_type = LocationType.STATION
            if self._profile.use_lid_only:
                location_id = unify_lid(loc.lid) if loc.lid is not None else None
            else:
                location_id = normalize_station_id(loc.ext_id)
            place, name = splitter.split_station_name(loc.name) if loc.name else (None, None)
            if loc.p_cls is not None:
                products = self._profile.products_map.to_products(loc.p_cls)
        elif loc.type == "P":
            location_type = LocationType.POI
            location_id = loc.lid
            place, name = splitter.split_poi(loc.name) if loc.name else (None, None)
        elif loc.type == "A":
            location_type = LocationType.ADDRESS
            location_id = loc.lid
            if loc.descr:
                place, name = loc.descr, loc.name
            else:
                place, name = splitter.split_address(loc.name) if loc.name else (None, None)
        else:
            raise ParserError(f"unknown location type: {loc.type}")

        coord = None
        if loc.crd is not None:
            self._check_coordinate_system(common, loc.crd_sys_x)
            coord = Point.from_e6(loc.crd.y, loc.crd.x)

        if name is None:
            place = None
        return Location(location_type, location_id, coord, place, name, products)

    @staticmethod
    def _check_coordinate_system(common: Common, crd_sys_x: int | None) -> None:
        crd_sys = at(common.crd_sys_l, crd_sys_x)
        if crd_sys is not None and crd_sys.type != WGS84:
            raise ParserError(f"unknown coordinate system: {crd_sys.type}")

    def _destination(self, dir_txt: str | None) -> Location | None:
        if dir_txt is None:
            return None
        place, name = self._profile.name_splitter.split_station_name(dir_txt)
        return Location(LocationType.ANY, place=place, name=name)

    # Stops, messages and legs

    def _parse_stop(self, stop: StopJson, tables: _Tables, base_date: date) -> Stop:
        location = self.parse_common_location(tables.common, stop.loc_x)
        if location is None:
            logger.warning(f"Stop references unknown location {stop.loc_x}")
            location = _UNRESOLVED_LOCATION
        return Stop(
            location=location,
            planned_arrival_time=_time(base_date, stop.a_time_s, self._profile),
            predicted_arrival_time=_time(base_date, stop.a_time_r, self._profile),
            planned_arrival_position=_position(stop.a_platf_s, stop.a_pltf_s),
            predicted_arrival_position=_position(stop.a_platf_r, stop.a_pltf_r),
            arrival_cancelled=stop.a_cncl,
            planned_departure_time=_time(base_date, stop.d_time_s, self._profile),
            predicted_departure_time=_time(base_date, stop.d_time_r, self._profile),
            planned_departure_position=_position(stop.d_platf_s, stop.d_pltf_s),
            predicted_departure_position=_position(stop.d_platf_r, stop.d_pltf_r),
            departure_cancelled=stop.d_cncl,
        )

    @staticmethod
    def build_message(journey: Journey, common: Common) -> str | None:
        """Leg message from ``l?`` remarks, else the joined ``msgL`` texts."""
        if journey.rem_l is not None:
            message = None
            for ref in journey.rem_l:
                remark = at(common.rem_l, ref.rem_x)
                if remark is not None and remark.code == LEG_MESSAGE_REMARK_CODE:
                    message = remark.txt_n
            return message

        if not journey.msg_l:
            return None
        texts = []
        for ref in journey.msg_l:
            remark = at(common.rem_l, ref.rem_x)
            if remark is not None and remark.txt_n:
                texts.append(remark.txt_n)
            him = at(common.him_l, ref.him_x)
            if him is not None and him.text:
                texts.append(him.text)
        return MESSAGE_SEPARATOR.join(texts) or None

    def _parse_path(self, journey: Journey, common: Common) -> list[Point] | None:
        group = journey.poly_g
        if group is None or not common.poly_l:
            return None
        self._check_coordinate_system(common, group.crd_sys_x)
        path: list[Point] = []
        for poly_x in group.poly_xl:
            polyline = at(common.poly_l, poly_x)
            if polyline is None:
                continue
            if not polyline.delta:
                raise ParserError("only delta encoded polylines are supported")
            try:
                path.extend(decode_polyline(polyline.crd_enc_yx))
            except ValueError as e:
                raise ParserError(f"cannot decode polyline: {e}") from e
        return path

    def _journey_ref(self, journey: Journey) -> JourneyRef | None:
        return JourneyRef(self._profile.network, journey.jid) if journey.jid else None

    def _parse_public_leg(
        self,
        journey: Journey,
        tables: _Tables,
        base_date: date,
        departure_stop: Stop | None,
        arrival_stop: Stop | None,
    ) -> PublicLeg | None:
        line = at(tables.lines, journey.prod_x)
        if line is None:
            line = Line(None, None, None, None)

        intermediate_stops = None
        if journey.stop_l is not None and len(journey.stop_l) >= 2:
            stops = [self._parse_stop(stop, tables, base_date) for stop in journey.stop_l]
            departure_stop = departure_stop or stops[0]
            arrival_stop = arrival_stop or stops[-1]
            intermediate_stops = stops[1:-1]
        if departure_stop is None or arrival_stop is None:
            return None

        return PublicLeg(
            line=line,
            destination=self._destination(journey.dir_txt),
            departure_stop=departure_stop,
            arrival_stop=arrival_stop,
            intermediate_stops=intermediate_stops,
            path=self._parse_path(journey, tables.common),
            message=self.build_message(journey, tables.common),
            journey_ref=self._journey_ref(journey),
        )

    def _parse_section(self, section: Section, tables: _Tables, base_date: date) -> Leg | None:
        departure_stop = self._parse_stop(section.dep, tables, base_date)
        arrival_stop = self._parse_stop(section.arr, tables, base_date)

        if section.type in ("JNY", "TETA"):
            if section.jny is None:
                raise ParserError(f"{section.type} section without journey")
            return self._parse_public_leg(
                section.jny, tables, base_date, departure_stop, arrival_stop
            )

        if section.type == "WALK":
            distance = section.gis.dist if section.gis and section.gis.dist is not None else -1
            if distance < 0:
                return None
            return self._individual_leg(IndividualType.WALK, departure_stop, arrival_stop, distance)

        individual_type = _INDIVIDUAL_SECTION_TYPES.get(section.type)
        if individual_type is None:
            raise ParserError(f"cannot handle section type: {section.type}")
        distance = section.gis.dist if section.gis and section.gis.dist is not None else 0
        return self._individual_leg(individual_type, departure_stop, arrival_stop, distance)

    @staticmethod
    def _individual_leg(
        individual_type: IndividualType, departure: Stop, arrival: Stop, distance: int
    ) -> IndividualLeg:
        departure_time = departure.departure_time
        arrival_time = arrival.arrival_time
        if departure_time is None or arrival_time is None:
            raise ParserError(f"{individual_type.name} section without times")
        return IndividualLeg(
            type=individual_type,
            departure=departure.location,
            departure_time=departure_time,
            arrival=arrival.location,
            arrival_time=arrival_time,
            distance=distance,
        )

    # Method results

    def parse_departures(
        self, result: StationBoardResult, station_id: str, equivs: bool
    ) -> list[StationDepartures]:
        """Group board entries by station, sorted by time.

        Raises:
            ParserError: If an entry lacks its stop or is not at a station.
        """
        tables = self._tables(result.common)
        locs = result.common.loc_l
        wanted_ids = {station_id, normalize_station_id(station_id)}
        grouped: dict[Location, list[Departure]] = {}

        for journey in result.jny_l:
            stop = journey.stb_stop
            if stop is None:
                raise ParserError("board entry without stbStop")
            base_date = _date(journey.date)

            location = self.parse_common_location(result.common, stop.loc_x, follow_master=False)
            if location is None or location.type is not LocationType.STATION:
                raise ParserError(f"board entry not at a station: {stop.loc_x}")
            if not equivs and location.id not in wanted_ids:
                continue

            line = at(tables.lines, stop.d_prod_x)
            if line is None:
                line = Line(None, None, None, None)

            destination = None
            if journey.stop_l:
                last_x = journey.stop_l[-1].loc_x
                last = at(locs, last_x)
                if last is not None and journey.dir_txt and last.name == journey.dir_txt:
                    destination = self.parse_common_location(
                        result.common, last_x, follow_master=False
                    )
            if destination is None:
                destination = self._destination(journey.dir_txt)

            departure = Departure(
                planned_time=_time(base_date, stop.d_time_s, self._profile),
                predicted_time=_time(base_date, stop.d_time_r, self._profile),
                line=line,
                planned_position=_position(stop.d_platf_s, stop.d_pltf_s),
                predicted_position=_position(stop.d_platf_r, stop.d_pltf_r),
                destination=destination,
                cancelled=stop.d_cncl,
                message=self.build_message(journey, result.common),
                journey_ref=self._journey_ref(journey),
            )
            grouped.setdefault(location, []).append(departure)

        return [
            StationDepartures(location, sorted(departures, key=_departure_sort_key))
            for location, departures in grouped.items()
        ]

    def parse_trips(
        self,
        result: TripSearchResult,
        from_location: Location | None,
        via: Location | None,
        to: Location | None,
    ) -> list[Trip]:
        """Parse connections; query endpoints go into each trip's reload reference."""
        tables = self._tables(result.common)
        trips = []
        for connection in result.out_con_l:
            trip = self._parse_connection(connection, tables, from_location, via, to)
            if trip is not None:
                trips.append(trip)
        return trips

    def _parse_connection(
        self,
        connection: Connection,
        tables: _Tables,
        from_location: Location | None,
        via: Location | None,
        to: Location | None,
    ) -> Trip | None:
        base_date = _date(connection.date)
        legs = []
        for section in connection.sec_l:
            leg = self._parse_section(section, tables, base_date)
            if leg is not None:
                legs.append(leg)
        if not legs:
            logger.warning(f"Skipping connection on {connection.date} without usable sections")
            return None

        reload_token = connection.ctx_recon
        if reload_token is None and connection.recon is not None:
            reload_token = connection.recon.ctx
        if reload_token is None:
            raise ParserError("connection without reconstruction context")

        trip_from = self.parse_common_location(tables.common, connection.dep.loc_x)
        trip_to = self.parse_common_location(tables.common, connection.arr.loc_x)
        return Trip(
            id=reload_token.split("#")[0],
            from_location=trip_from or legs[0].departure,
            to=trip_to or legs[-1].arrival,
            legs=legs,
            trip_ref=TripRef(self._profile.network, reload_token, from_location, via, to),
            fares=self._fare_parser.parse(connection),
            changes=connection.chg,
        )

    def parse_journey(self, result: JourneyDetailsResult) -> PublicLeg | None:
        """The journey as a single leg, or None if it has fewer than two stops."""
        journey = result.journey
        if journey is None:
            return None
        tables = self._tables(result.common)
        return self._parse_public_leg(journey, tables, _date(journey.date), None, None)


def _departure_sort_key(departure: Departure) -> tuple[bool, float]:
    # Entries without any time sort last.
    time = departure.time
    return time is None, time.timestamp() if time is not None else 0.0
