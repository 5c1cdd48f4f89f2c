"""
Unit tests for HTTP response building.
"""

import io

from staticserver.http.response import (
    HTTPResponse,
    Header,
    empty_response,
    server_error,
)


def parse_head(raw: bytes) -> tuple[int, list[tuple[str, str]]]:
    """Re-parse the status code and header list out of serialized bytes."""
    head = raw.split(b"\r\n\r\n", 1)[0].decode("utf-8")
    status_line, *lines = head.split("\r\n")
    version, code = status_line.split(" ")
    assert version == "HTTP/1.1"
    headers = [tuple(line.split(": ", 1)) for line in lines]
    return int(code), headers


class TestHTTPResponse:
    """Tests for HTTPResponse class."""

    def test_defaults(self):
        response = HTTPResponse()

        assert response.status_code == 404
        assert response.headers == [
            Header("Content-Length", 0),
            Header("Content-Type", "text/html"),
        ]
        assert response.body is None

    def test_default_headers_are_not_shared(self):
        first = HTTPResponse()
        first.set_header("X-One", "1")

        assert HTTPResponse().get_header("X-One") is None

    def test_status_line(self):
        assert HTTPResponse().status_line == "HTTP/1.1 404"
        assert HTTPResponse(status_code=200).status_line == "HTTP/1.1 200"

    def test_set_header_updates_in_place(self):
        response = HTTPResponse()
        response.set_header("Content-Type", "text/css")
        response.set_header("Content-Length", 15)

        assert [h.key for h in response.headers] == ["Content-Length", "Content-Type"]
        assert response.get_header("Content-Type") == "text/css"
        assert response.get_header("Content-Length") == 15

    def test_set_header_appends_new_key(self):
        response = HTTPResponse().set_header("X-Custom", "value")

        assert response.headers[-1] == Header("X-Custom", "value")
        assert len(response.headers) == 3

    def test_set_header_is_case_sensitive(self):
        response = HTTPResponse()
        response.set_header("content-type", "text/plain")

        assert response.get_header("Content-Type") == "text/html"
        assert response.get_header("content-type") == "text/plain"
        assert len(response.headers) == 3

    def test_set_header_updates_first_duplicate(self):
        response = HTTPResponse(headers=[Header("X-Dup", "a"), Header("X-Dup", "b")])
        response.set_header("X-Dup", "c")

        assert response.headers == [Header("X-Dup", "c"), Header("X-Dup", "b")]
        assert response.get_header("X-Dup") == "c"

    def test_set_header_chaining(self):
        response = (HTTPResponse()
            .set_header("X-One", "1")
            .set_header("X-Two", "2"))

        assert response.get_header("X-One") == "1"
        assert response.get_header("X-Two") == "2"

    def test_generate_headers_text(self):
        text = HTTPResponse().generate_headers_text()

        assert text == "Content-Length: 0\r\nContent-Type: text/html"

    def test_none_header_value_is_omitted(self):
        response = HTTPResponse()
        response.set_header("Content-Type", None)

        assert response.generate_headers_text() == "Content-Length: 0"
        assert b"Content-Type" not in response.to_bytes()

    def test_to_bytes_bare_response(self):
        """An unsupported-method response on the wire."""
        assert HTTPResponse().to_bytes() == (
            b"HTTP/1.1 404\r\n"
            b"Content-Length: 0\r\n"
            b"Content-Type: text/html\r\n"
            b"\r\n"
        )

    def test_to_bytes_with_body(self):
        response = HTTPResponse(status_code=200)
        response.set_header("Content-Type", "text/css")
        response.set_header("Content-Length", 15)
        response.body = b"body{color:red}"

        assert response.to_bytes() == (
            b"HTTP/1.1 200\r\n"
            b"Content-Length: 15\r\n"
            b"Content-Type: text/css\r\n"
            b"\r\n"
            b"body{color:red}"
        )

    def test_str_body_is_utf8_encoded(self):
        response = HTTPResponse(status_code=200, body="héllo")

        assert response.body_bytes() == "héllo".encode("utf-8")
        assert response.to_bytes().endswith("héllo".encode("utf-8"))

    def test_write_to_matches_to_bytes(self):
        response = HTTPResponse(status_code=200, body=b"payload")
        response.set_header("Content-Length", 7)

        out = io.BytesIO()
        response.write_to(out)

        assert out.getvalue() == response.to_bytes()

    def test_write_to_skips_missing_body(self):
        writes = []

        class Recorder:
            def write(self, data):
                writes.append(data)

        HTTPResponse().write_to(Recorder())

        assert writes == [
            b"HTTP/1.1 404\r\n",
            b"Content-Length: 0\r\nContent-Type: text/html",
            b"\r\n\r\n",
        ]

    def test_round_trip_status_and_headers(self):
        response = HTTPResponse(status_code=302)
        response.set_header("Content-Type", "application/json")
        response.set_header("Location", "/elsewhere")
        response.set_header("X-Trace", "abc: def")

        status, headers = parse_head(response.to_bytes())

        assert status == 302
        assert headers == [
            ("Content-Length", "0"),
            ("Content-Type", "application/json"),
            ("Location", "/elsewhere"),
            ("X-Trace", "abc: def"),
        ]


class TestConvenienceFunctions:
    def test_empty_response(self):
        response = empty_response()

        assert response.status_code == 404
        assert response.body is None

    def test_server_error(self):
        response = server_error()

        assert response.status_code == 500
        assert response.to_bytes().startswith(b"HTTP/1.1 500\r\n")
