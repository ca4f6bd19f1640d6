"""Pydantic schemas for HAFAS client interface responses.

Every field is optional or defaulted: absent and null values both map to the
default, so the parser never has to check for None in lists. Index fields
(``locX``, ``prodX``, ...) stay raw integers and are resolved by the parser.
"""

from collections.abc import Sequence
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

T = TypeVar("T")


def at(items: Sequence[T] | None, index: int | None) -> T | None:
    """Resolve an index field; absent or out of range indices give None."""
    if items is None or index is None or index < 0 or index >= len(items):
        return None
    return items[index]


class HciModel(BaseModel):
    """Base for all HCI messages: camelCase aliases, unknown fields ignored."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data


# Shared tables


class Coordinate(HciModel):
    x: int
    y: int


class CoordinateSystem(HciModel):
    type: str | None = None


class Loc(HciModel):
    type: str | None = None
    name: str | None = None
    lid: str | None = None
    ext_id: str | None = None
    descr: str | None = None
    crd: Coordinate | None = None
    crd_sys_x: int | None = None
    p_cls: int | None = None
    m_mast_loc_x: int | None = None


class ProdCtx(HciModel):
    line_id: str | None = None
    num: str | None = None


class Prod(HciModel):
    name: str = ""
    name_s: str | None = None
    number: str | None = None
    add_name: str | None = None
    ico_x: int | None = None
    opr_x: int | None = None
    product_class: int | None = Field(default=None, alias="cls")
    prod_ctx: ProdCtx | None = None


class Operator(HciModel):
    name: str | None = None


class IconColor(HciModel):
    r: int
    g: int
    b: int
    a: int = 255


class Icon(HciModel):
    bg: IconColor | None = None
    fg: IconColor | None = None
    shp: str | None = None


class Remark(HciModel):
    type: str | None = None
    code: str | None = None
    txt_s: str | None = None
    txt_n: str | None = None
    url: str | None = None


class Him(HciModel):
    head: str | None = None
    lead: str | None = None
    text: str | None = None
    url: str | None = None


class Polyline(HciModel):
    crd_enc_yx: str = Field(default="", alias="crdEncYX")
    delta: bool = True


class Common(HciModel):
    loc_l: list[Loc] = Field(default_factory=list)
    prod_l: list[Prod] = Field(default_factory=list)
    op_l: list[Operator] = Field(default_factory=list)
    ico_l: list[Icon] = Field(default_factory=list)
    crd_sys_l: list[CoordinateSystem] = Field(default_factory=list)
    rem_l: list[Remark] = Field(default_factory=list)
    him_l: list[Him] = Field(default_factory=list)
    poly_l: list[Polyline] = Field(default_factory=list)


# Stops, journeys and sections


class PlatformText(HciModel):
    txt: str | None = None
    type: str | None = None


class StopJson(HciModel):
    loc_x: int | None = None
    a_cncl: bool = False
    a_time_s: str | None = None
    a_time_r: str | None = None
    a_platf_s: str | None = None
    a_platf_r: str | None = None
    a_pltf_s: PlatformText | None = None
    a_pltf_r: PlatformText | None = None
    d_cncl: bool = False
    d_time_s: str | None = None
    d_time_r: str | None = None
    d_platf_s: str | None = None
    d_platf_r: str | None = None
    d_pltf_s: PlatformText | None = None
    d_pltf_r: PlatformText | None = None
    d_prod_x: int | None = None


class MessageRef(HciModel):
    rem_x: int | None = None
    him_x: int | None = None


class PolylineGroup(HciModel):
    poly_xl: list[int] = Field(default_factory=list, alias="polyXL")
    crd_sys_x: int | None = None


class Journey(HciModel):
    jid: str | None = None
    date: str | None = None
    prod_x: int | None = None
    dir_txt: str | None = None
    stop_l: list[StopJson] | None = None
    stb_stop: StopJson | None = None
    poly_g: PolylineGroup | None = None
    rem_l: list[MessageRef] | None = None
    msg_l: list[MessageRef] | None = None


class Gis(HciModel):
    dist: int | None = None


class Section(HciModel):
    type: str
    dep: StopJson = Field(default_factory=StopJson)
    arr: StopJson = Field(default_factory=StopJson)
    jny: Journey | None = None
    gis: Gis | None = None


# Fares


class Price(HciModel):
    amount: int | None = None
    currency: str | None = None


class Ticket(HciModel):
    name: str = ""
    desc: str | None = None
    price: Price | None = None
    prc: int | None = None
    cur: str | None = None


class FareEntry(HciModel):
    name: str = ""
    price: Price | None = None
    prc: int | None = None
    cur: str | None = None
    ticket_l: list[Ticket] = Field(default_factory=list)


class FareSet(HciModel):
    name: str = ""
    fare_l: list[FareEntry] = Field(default_factory=list)


class TariffResult(HciModel):
    fare_set_l: list[FareSet] | None = None
    total_price: Price | None = None


class TariffRef(HciModel):
    type: str
    fare_set_x: int | None = None
    fare_x: int | None = None
    ticket_x: int | None = None


class Recon(HciModel):
    ctx: str | None = None


class Connection(HciModel):
    dep: StopJson = Field(default_factory=StopJson)
    arr: StopJson = Field(default_factory=StopJson)
    date: str
    sec_l: list[Section] = Field(default_factory=list)
    trf_res: TariffResult | None = None
    ovw_trf_ref_l: list[TariffRef] | None = None
    ctx_recon: str | None = None
    recon: Recon | None = None
    chg: int | None = None


# Method results


class ServerInfoResult(HciModel):
    s_d: str | None = None
    s_t: str | None = None


class LocMatchInner(HciModel):
    loc_l: list[Loc] = Field(default_factory=list)


class LocMatchResult(HciModel):
    common: Common = Field(default_factory=Common)
    match: LocMatchInner = Field(default_factory=LocMatchInner)


class LocGeoPosResult(HciModel):
    common: Common = Field(default_factory=Common)
    loc_l: list[Loc] = Field(default_factory=list)


class StationBoardResult(HciModel):
    common: Common = Field(default_factory=Common)
    jny_l: list[Journey] = Field(default_factory=list)


class TripSearchResult(HciModel):
    common: Common = Field(default_factory=Common)
    out_con_l: list[Connection] = Field(default_factory=list)
    out_ctx_scr_f: str | None = None
    out_ctx_scr_b: str | None = None


class JourneyDetailsResult(HciModel):
    common: Common = Field(default_factory=Common)
    journey: Journey | None = None


# Envelope


class ServiceResult(HciModel):
    meth: str | None = None
    err: str = "OK"
    err_txt: str | None = None
    res: dict[str, Any] | None = None


class ResponseEnvelope(HciModel):
    ver: str | None = None
    err: str | None = None
    err_txt: str | None = None
    svc_res_l: list[ServiceResult] | None = None
