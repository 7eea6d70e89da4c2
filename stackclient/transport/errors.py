"""Map HTTP error responses onto typed exceptions."""
from __future__ import annotations
from typing import Dict, Optional, Type

from ..exceptions import (
    RequestException,
    UnauthorizedException,
    ForbiddenException,
    ResourceNotFoundException,
    MethodNotAllowedException,
    ConflictException,
    LengthRequiredException,
    UnprocessableEntityException,
    ServerException,
)
from .message import Request, Response

ERROR_LABEL = "A HTTP error occurred"
MAX_BODY_LENGTH = 1024

STATUS_EXCEPTIONS: Dict[int, Type[RequestException]] = {
    401: UnauthorizedException,
    403: ForbiddenException,
    404: ResourceNotFoundException,
    405: MethodNotAllowedException,
    409: ConflictException,
    411: LengthRequiredException,
    422: UnprocessableEntityException,
    500: ServerException,
}


def is_error_status(status: int) -> bool:
    """Only 400..505 are treated as HTTP errors."""
    return 400 <= status <= 505


def format_error_message(request: Request, response: Response) -> str:
    body = response.text
    if len(body) > MAX_BODY_LENGTH:
        body = body[:MAX_BODY_LENGTH] + "..."
    return (
        f"{ERROR_LABEL}\n"
        f"[Status] {response.status_code} ({response.reason_phrase})\n"
        f"[URL] {request.url}\n"
        f"[Message] {body}\n"
    )


def classify(request: Request, response: Response) -> Optional[RequestException]:
    """Build the exception matching the response status.

    Args:
        request: Request that was sent
        response: Response received for it

    Returns:
        Exception instance (not raised) or None when the status is not an error
    """
    status = response.status_code
    if not is_error_status(status):
        return None
    exc_class = STATUS_EXCEPTIONS.get(status, RequestException)
    return exc_class(format_error_message(request, response), request, response)


def raise_for_status(request: Request, response: Response) -> Response:
    """Raise the classified exception, or hand the response back unchanged.

    Raises:
        RequestException: Or the subclass mapped to the status code
    """
    error = classify(request, response)
    if error is not None:
        raise error
    return response
