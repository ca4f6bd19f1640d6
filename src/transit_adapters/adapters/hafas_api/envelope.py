"""Request envelope construction and response envelope validation.

Every call is a batch of two service requests: ``ServerInfo`` (for the
result header) followed by the actual method. The body is built once as
compact JSON text because the exact text is what gets signed.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from transit_adapters.adapters.hafas_api.error_taxonomy import classify_head_error
from transit_adapters.adapters.hafas_api.hci_time import parse_hci_date, parse_hci_time
from transit_adapters.adapters.hafas_api.profile import HafasProfile
from transit_adapters.adapters.hafas_api.schema import (
    ResponseEnvelope,
    ServerInfoResult,
    ServiceResult,
)
from transit_adapters.domain.exceptions import ParserError
from transit_adapters.domain.models.results import ResultHeader, Status

logger = logging.getLogger(__name__)

SERVER_INFO = "ServerInfo"
SERVER_PRODUCT = "hci"

# Newer backends reject getTimeTablePeriod.
_TIMETABLE_PERIOD_MAX_LEVEL = 75


def build_request_body(
    profile: HafasProfile,
    method: str,
    request: dict[str, Any],
    auth: dict[str, Any] | None,
) -> str:
    """Build the JSON text of a two-request batch for ``method``."""
    server_info: dict[str, Any] = {"getServerDateTime": True}
    if profile.api_level <= _TIMETABLE_PERIOD_MAX_LEVEL:
        server_info["getTimeTablePeriod"] = False

    body: dict[str, Any] = {}
    if auth is not None:
        body["auth"] = auth
    body["client"] = dict(profile.api_client)
    if profile.api_ext is not None:
        body["ext"] = profile.api_ext
    body["ver"] = profile.api_version
    body["lang"] = "deu" if profile.language == "de" else "eng"
    body["svcReqL"] = [
        {"meth": SERVER_INFO, "req": server_info},
        {"meth": method, "cfg": {"polyEnc": "GPA"}, "req": request},
    ]
    body["formatted"] = False
    return json.dumps(body, separators=(",", ":"), ensure_ascii=False)


@dataclass(frozen=True)
class ParsedResponse:
    """Outcome of envelope validation.

    ``result`` is the method's own service result. It is None only when the
    envelope carried a benign error, in which case ``status`` says what it
    means.
    """

    header: ResultHeader
    result: ServiceResult | None
    status: Status | None = None
    error_code: str | None = None


def _parse_header(
    profile: HafasProfile, envelope: ResponseEnvelope, server_info: ServiceResult
) -> ResultHeader:
    if server_info.err != "OK":
        logger.info(f"ServerInfo failed: {server_info.err} {server_info.err_txt or ''}".rstrip())
        return ResultHeader(profile.network, SERVER_PRODUCT, envelope.ver)

    info = ServerInfoResult.model_validate(server_info.res or {})
    server_time = None
    if info.s_d is not None and info.s_t is not None:
        server_time = parse_hci_time(parse_hci_date(info.s_d), info.s_t, profile.tz)
    return ResultHeader(profile.network, SERVER_PRODUCT, envelope.ver, server_time)


def parse_response(
    profile: HafasProfile, method: str, page: str, url: str | None = None
) -> ParsedResponse:
    """Validate a response envelope and split it into header and method result.

    Raises:
        ParserError: If the envelope is malformed or reports a fatal error.
    """
    try:
        envelope = ResponseEnvelope.model_validate(json.loads(page))
    except (json.JSONDecodeError, ValidationError) as e:
        raise ParserError(f"cannot parse response envelope: {e}", url, page) from e

    if envelope.err is not None and envelope.err != "OK":
        status = classify_head_error(method, envelope.err)
        if status is not None:
            logger.debug(f"HAFAS envelope error {envelope.err} for {method}: {status.name}")
            header = ResultHeader(profile.network, SERVER_PRODUCT, envelope.ver)
            return ParsedResponse(header, None, status, envelope.err)
        message = f"{envelope.err} {envelope.err_txt}" if envelope.err_txt else envelope.err
        logger.error(f"HAFAS envelope error for {method}: {message}")
        raise ParserError(message, url, page)

    services = envelope.svc_res_l
    if services is None or len(services) != 2:
        raise ParserError("expected two service results", url, page)

    server_info, result = services
    if server_info.meth != SERVER_INFO:
        raise ParserError(f"expected {SERVER_INFO}, got {server_info.meth}", url, page)
    if result.meth != method:
        raise ParserError(f"expected {method}, got {result.meth}", url, page)

    try:
        header = _parse_header(profile, envelope, server_info)
    except (ValidationError, ValueError) as e:
        raise ParserError(f"cannot parse server info: {e}", url, page) from e
    return ParsedResponse(header, result)
