import pytest

from stackclient.exceptions import (
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
from stackclient.transport.errors import MAX_BODY_LENGTH, classify, raise_for_status
from stackclient.transport.message import Request, Response


@pytest.fixture()
def request_():
    return Request("GET", "https://swift.example.com/v1/AUTH_1/photos")


@pytest.mark.parametrize(
    "status, expected",
    [
        (401, UnauthorizedException),
        (403, ForbiddenException),
        (404, ResourceNotFoundException),
        (405, MethodNotAllowedException),
        (409, ConflictException),
        (411, LengthRequiredException),
        (422, UnprocessableEntityException),
        (500, ServerException),
    ],
)
def test_mapped_status_codes(request_, status, expected):
    error = classify(request_, Response(status, "Reason"))
    assert type(error) is expected
    assert error.status_code == status


@pytest.mark.parametrize("status", [400, 418, 502, 505])
def test_unmapped_error_codes_are_generic(request_, status):
    error = classify(request_, Response(status, "Reason"))
    assert type(error) is RequestException


@pytest.mark.parametrize("status", [200, 201, 204, 301, 304, 399, 506])
def test_non_error_codes(request_, status):
    assert classify(request_, Response(status, "Reason")) is None


def test_error_carries_request_and_response(request_):
    response = Response(404, "Not Found", body=b"No such container")
    error = classify(request_, response)

    assert error.request is request_
    assert error.response is response
    message = str(error)
    assert "A HTTP error occurred" in message
    assert "[Status] 404 (Not Found)" in message
    assert "[URL] https://swift.example.com/v1/AUTH_1/photos" in message
    assert "[Message] No such container" in message


def test_request_and_response_are_read_only(request_):
    error = classify(request_, Response(500, "Internal Server Error"))
    with pytest.raises(AttributeError):
        error.response = None


def test_long_body_is_truncated(request_):
    error = classify(request_, Response(500, "Internal Server Error", body=b"x" * (MAX_BODY_LENGTH + 50)))
    assert "x" * MAX_BODY_LENGTH + "..." in str(error)
    assert "x" * (MAX_BODY_LENGTH + 1) not in str(error)


def test_raise_for_status(request_):
    ok = Response(200, "OK")
    assert raise_for_status(request_, ok) is ok
    with pytest.raises(ForbiddenException):
        raise_for_status(request_, Response(403, "Forbidden"))
