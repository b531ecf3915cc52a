import hashlib
import json
from typing import Any
from fastapi import Request, Response
from fastapi.encoders import jsonable_encoder


CACHE_CONTROL = 'private, max-age=0, must-revalidate'


def generate_etag(data: Any) -> str:
    """
    Generate an ETag from the serialized response body.

    Pydantic models (or lists of them) are encoded the same way they go out
    on the wire, so the ETag changes whenever the representation does.
    """
    encoded = jsonable_encoder(data, by_alias=True, exclude_unset=True)
    content = json.dumps(encoded, sort_keys=True, separators=(',', ':'))

    etag_hash = hashlib.md5(content.encode('utf-8')).hexdigest()
    return f'"{etag_hash}"'


def check_etag_match(request: Request, current_etag: str) -> bool:
    """
    Check if the ETag in the If-None-Match header matches the current ETag.
    """
    if_none_match = request.headers.get('if-none-match')
    if not if_none_match:
        return False

    # Handle multiple ETags in the header (comma-separated)
    client_etags = [etag.strip() for etag in if_none_match.split(',')]

    return '*' in client_etags or current_etag in client_etags


def set_etag_headers(response: Response, etag: str) -> None:
    response.headers['ETag'] = etag
    response.headers['Cache-Control'] = CACHE_CONTROL


def handle_conditional_request(request: Request, data: Any) -> tuple[str, bool]:
    """
    Handle conditional requests with ETag support.

    Returns:
        tuple: (etag, should_return_304)
    """
    current_etag = generate_etag(data)
    return current_etag, check_etag_match(request, current_etag)


def not_modified(etag: str) -> Response:
    return Response(status_code=304, headers={'ETag': etag, 'Cache-Control': CACHE_CONTROL})
