"""ETag support for read endpoints."""

import hashlib
import json
from typing import Optional

from fastapi import Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def generate_etag(payload) -> str:
    encoded = json.dumps(jsonable_encoder(payload), sort_keys=True, separators=(",", ":"))
    return '"' + hashlib.sha256(encoded.encode("utf-8")).hexdigest() + '"'


def etag_matches(if_none_match: Optional[str], etag: str) -> bool:
    if not if_none_match:
        return False
    candidates = [tag.strip() for tag in if_none_match.split(",")]
    if "*" in candidates:
        return True
    return any(tag.removeprefix("W/") == etag for tag in candidates)


def cached_json(request: Request, payload, cache_control: Optional[str] = None) -> Response:
    """JSON response carrying an ETag; an empty 304 when the client already has it."""
    etag = generate_etag(payload)
    headers = {"ETag": etag}
    if cache_control:
        headers["Cache-Control"] = cache_control
    if etag_matches(request.headers.get("if-none-match"), etag):
        return Response(status_code=304, headers=headers)
    return JSONResponse(content=jsonable_encoder(payload), headers=headers)
