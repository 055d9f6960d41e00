import math
import re
from typing import Any, Optional

from fastapi import HTTPException, Request
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.formparsers import MultiPartException

from services.config import PathParam, QueryParam
from services.framework.logging import log_event

# ids are stored as BIGINT
MAX_ID = 2**63 - 1

_DIGITS = re.compile(r"[0-9]+")
_INTEGER = re.compile(r"[+-]?[0-9]+")


def convert_path_param(value: str, param: PathParam):
    """
    Convert a raw path segment according to its configured type.
    Integer placeholders only accept plain digit sequences that fit in a BIGINT;
    anything else is rejected with a 400 carrying the configured message.
    """
    if param.type != "int":
        return value

    if not _DIGITS.fullmatch(value):
        raise HTTPException(status_code=400, detail=param.error)

    converted = int(value)
    if converted > MAX_ID:
        raise HTTPException(status_code=400, detail=param.error)
    return converted


def _parse(raw: str, type_: str):
    if type_ == "int":
        if not _INTEGER.fullmatch(raw):
            raise ValueError(raw)
        return int(raw)
    if type_ == "float":
        if raw != raw.strip() or "_" in raw:
            raise ValueError(raw)
        value = float(raw)
        if not math.isfinite(value):
            raise ValueError(raw)
        return value
    return raw


def coerce_param(raw: Optional[Any], param: QueryParam):
    """
    Parse a raw query/form value.

    Absent and empty values give the parameter default, values that do not
    parse give its fallback (the default unless configured), and values
    outside [ge, le] give the default. Surrounding whitespace is not trimmed.
    """
    if not isinstance(raw, str) or raw == "":
        return param.default

    try:
        value = _parse(raw, param.type)
    except ValueError:
        return param.fallback if param.fallback is not None else param.default

    if param.ge is not None and value < param.ge:
        return param.default
    if param.le is not None and value > param.le:
        return param.default

    return value


async def read_form(request: Request):
    """
    Parse the form body. A body that cannot be parsed reads as an empty form.
    """
    try:
        return await request.form()
    except (StarletteHTTPException, MultiPartException) as exc:
        log_event("form_parse_failed", path=request.url.path, error=str(exc))
        return {}


def build_query_dependency(route):
    """
    Generate a FastAPI dependency for extracting query/form params dynamically.
    The returned dict becomes **kwargs to the CRUD handler.
    """
    params = route.query_params
    wants_form = any(p.source == "form" for p in params.values())

    async def query_dep(request: Request):
        try:
            form = await read_form(request) if wants_form else {}
            values = {}
            for name, param in params.items():
                source = form if param.source == "form" else request.query_params
                values[name] = coerce_param(source.get(name), param)
            return values
        finally:
            if wants_form:
                await request.close()

    return query_dep
