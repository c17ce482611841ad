"""Tests for upstream body decoding."""

import httpx
import pytest

from core.exceptions import BadUpstreamResponse
from services.upstream import _EMPTY, decode_body


@pytest.mark.parametrize(
    ("content", "expected"),
    [
        (b'{"a": 1}', {"a": 1}),
        (b"[1, 2]", [1, 2]),
        (b'"{\\"a\\": 1}"', {"a": 1}),
        (b'"plain text"', "plain text"),
    ],
)
def test_decode_body(content, expected):
    assert decode_body(httpx.Response(200, content=content)) == expected


def test_decode_empty_body():
    assert decode_body(httpx.Response(204)) is _EMPTY


def test_decode_invalid_body():
    with pytest.raises(BadUpstreamResponse) as exc:
        decode_body(httpx.Response(503, content=b"Service Unavailable"))

    assert exc.value.status_code == 502
    assert exc.value.upstream_status == 503


@pytest.mark.parametrize("content", [b"NaN", b'{"points": Infinity}', b'"[-Infinity]"'])
def test_decode_rejects_non_standard_constants(content):
    with pytest.raises(BadUpstreamResponse):
        decode_body(httpx.Response(200, content=content))
