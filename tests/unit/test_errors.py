"""Tests for error module."""

import httpx
import pytest

from multi_http.client import AbstractTransferClient
from multi_http.engine import TransferHandle
from multi_http.errors import (
    EngineError,
    ErrorContext,
    MultiHttpError,
    NetworkError,
    RequestError,
    ResponseError,
    TransferCode,
    TransferError,
    ValidationError,
    classify_exception,
    describe,
    is_network_failure,
)

REQUEST = httpx.Request("GET", "https://example.com/a")


class TestErrorContext:
    """Tests for ErrorContext."""

    def test_empty_context(self) -> None:
        """Test empty context string representation."""
        assert str(ErrorContext()) == ""

    def test_context_fields(self) -> None:
        """Test source, field path and hint rendering."""
        ctx = ErrorContext(source="options", field_path="max_redirects", hint="Use 0 or more")
        text = str(ctx)
        assert "[options]" in text
        assert "at 'max_redirects'" in text
        assert "(hint: Use 0 or more)" in text


class TestErrorHierarchy:
    """Tests for the error classes."""

    def test_basic_error(self) -> None:
        """Test basic error creation."""
        error = MultiHttpError("Something went wrong")
        assert error.message == "Something went wrong"
        assert str(error) == "Something went wrong"

    def test_with_hint(self) -> None:
        """Test adding hint to error."""
        error = MultiHttpError("Failed").with_hint("Check the config")
        assert error.context.hint == "Check the config"

    def test_engine_error_cause(self) -> None:
        """Test engine errors keep their cause."""
        cause = OSError("too many open files")
        error = EngineError("Unable to create batch handle", cause=cause)
        assert error.__cause__ is cause
        assert error.context.source == "engine"

    def test_transfer_error_details(self) -> None:
        """Test transfer errors carry request and code."""
        reason = httpx.ConnectError("refused")
        error = NetworkError(
            "Couldn't connect to server",
            request=REQUEST,
            code=TransferCode.COULDNT_CONNECT,
            reason=reason,
        )
        assert isinstance(error, TransferError)
        assert error.request is REQUEST
        assert error.code is TransferCode.COULDNT_CONNECT
        assert error.reason is reason
        assert error.__cause__ is reason
        assert error.context.details["url"] == "https://example.com/a"
        assert error.context.details["method"] == "GET"
        assert error.context.details["code"] == "couldnt_connect"

    def test_response_error_default_code(self) -> None:
        """Test ResponseError defaults to INVALID_RESPONSE."""
        error = ResponseError("No status line", request=REQUEST)
        assert isinstance(error, TransferError)
        assert error.code is TransferCode.INVALID_RESPONSE

    def test_validation_error_fields(self) -> None:
        """Test validation error context."""
        error = ValidationError("Bad option", field="timeout", expected="number", actual="x")
        assert error.field == "timeout"
        assert error.context.field_path == "timeout"
        assert error.context.details == {"expected": "number", "actual": "x"}


class TestClassifyException:
    """Tests for classify_exception."""

    @pytest.mark.parametrize(
        ("exc", "expected"),
        [
            (httpx.ConnectError("Connection refused"), TransferCode.COULDNT_CONNECT),
            (
                httpx.ConnectError("[Errno -2] Name or service not known"),
                TransferCode.COULDNT_RESOLVE_HOST,
            ),
            (
                httpx.ConnectError("[SSL: CERTIFICATE_VERIFY_FAILED] certificate verify failed"),
                TransferCode.SSL_ERROR,
            ),
            (httpx.ReadTimeout("timed out"), TransferCode.OPERATION_TIMEDOUT),
            (httpx.ConnectTimeout("timed out"), TransferCode.OPERATION_TIMEDOUT),
            (httpx.ProxyError("proxy refused"), TransferCode.PROXY_ERROR),
            (httpx.UnsupportedProtocol("ftp://"), TransferCode.UNSUPPORTED_PROTOCOL),
            (httpx.TooManyRedirects("loop"), TransferCode.TOO_MANY_REDIRECTS),
            (httpx.DecodingError("bad gzip"), TransferCode.BAD_CONTENT_ENCODING),
            (httpx.WriteError("broken pipe"), TransferCode.SEND_ERROR),
            (httpx.ReadError("reset by peer"), TransferCode.RECV_ERROR),
            (httpx.RemoteProtocolError("peer closed"), TransferCode.RECV_ERROR),
            (ValueError("unexpected"), TransferCode.INTERNAL_ERROR),
        ],
    )
    def test_classification(self, exc: BaseException, expected: TransferCode) -> None:
        """Test transport exceptions map to result codes."""
        assert classify_exception(exc) is expected

    def test_response_error_keeps_code(self) -> None:
        """Test ResponseError keeps its own code."""
        assert classify_exception(ResponseError("x", request=REQUEST)) is TransferCode.INVALID_RESPONSE

    def test_network_failures(self) -> None:
        """Test which codes mean the server was never reached."""
        assert is_network_failure(TransferCode.COULDNT_RESOLVE_HOST)
        assert is_network_failure(TransferCode.OPERATION_TIMEDOUT)
        assert not is_network_failure(TransferCode.RECV_ERROR)
        assert not is_network_failure(TransferCode.OK)

    def test_describe(self) -> None:
        """Test descriptions of result codes."""
        assert describe(TransferCode.COULDNT_CONNECT) == "Couldn't connect to server"
        assert describe(TransferCode.OPERATION_TIMEDOUT) == "Timeout was reached"


class TestParseError:
    """Tests for AbstractTransferClient.parse_error."""

    def test_ok_is_silent(self, fake_engine) -> None:
        """Test a successful result raises nothing."""
        client = AbstractTransferClient(engine=fake_engine)
        client.parse_error(REQUEST, TransferCode.OK, TransferHandle())

    def test_network_failure(self, fake_engine) -> None:
        """Test network codes raise NetworkError."""
        client = AbstractTransferClient(engine=fake_engine)
        handle = TransferHandle()
        reason = httpx.ConnectError("Connection refused")

        with pytest.raises(NetworkError) as exc_info:
            client.parse_error(REQUEST, TransferCode.COULDNT_CONNECT, handle, reason)

        error = exc_info.value
        assert error.message == "Couldn't connect to server: Connection refused"
        assert error.request is REQUEST
        assert error.context.details["transfer_id"] == handle.id

    def test_other_failure(self, fake_engine) -> None:
        """Test other codes raise RequestError."""
        client = AbstractTransferClient(engine=fake_engine)

        with pytest.raises(RequestError) as exc_info:
            client.parse_error(REQUEST, TransferCode.RECV_ERROR, TransferHandle())

        assert not isinstance(exc_info.value, NetworkError)
        assert exc_info.value.code is TransferCode.RECV_ERROR
