import asyncio

import httpx
import pytest

from bitcoin_mcp.errors import (
    ClassifiedError,
    ErrorCategory,
    InvalidInputError,
    MalformedResponseError,
    NetworkTimeoutError,
    NoResponseError,
    UpstreamStatusError,
    classify,
    operation,
)

NO_RESPONSE = "No response from server. Please check your internet connection."


def _classified(exc, label="Fetching prices"):
    with pytest.raises(ClassifiedError) as excinfo:
        classify(exc, label)
    return excinfo.value


def test_upstream_status_error():
    error = _classified(UpstreamStatusError(503, "Service Unavailable"))

    assert error.category is ErrorCategory.UPSTREAM_STATUS
    assert error.status == 503
    assert error.status_text == "Service Unavailable"
    assert error.message == "Fetching prices failed: 503 Service Unavailable"
    assert str(error) == error.message


def test_httpx_status_error_uses_response():
    request = httpx.Request("GET", "https://cg.test/coins/markets")
    response = httpx.Response(404, request=request)
    exc = httpx.HTTPStatusError("not found", request=request, response=response)

    error = _classified(exc)

    assert error.category is ErrorCategory.UPSTREAM_STATUS
    assert error.message == "Fetching prices failed: 404 Not Found"


def test_timeout_is_network_timeout():
    error = _classified(NetworkTimeoutError("Request timed out after 10.0s"))

    assert error.category is ErrorCategory.NETWORK_TIMEOUT
    assert error.message == f"Fetching prices failed: {NO_RESPONSE}"


def test_httpx_timeout_is_network_timeout():
    error = _classified(httpx.ReadTimeout("timed out"))

    assert error.category is ErrorCategory.NETWORK_TIMEOUT


def test_no_response():
    for exc in (NoResponseError("connection refused"), httpx.ConnectError("refused")):
        error = _classified(exc)
        assert error.category is ErrorCategory.NO_RESPONSE
        assert error.message == f"Fetching prices failed: {NO_RESPONSE}"


def test_input_invalid_and_malformed_keep_their_message():
    invalid = _classified(InvalidInputError("Cryptocurrency name cannot be empty"), "Searching")
    malformed = _classified(MalformedResponseError("Expected a JSON array, got dict"))

    assert invalid.category is ErrorCategory.INPUT_INVALID
    assert invalid.message == "Searching failed: Cryptocurrency name cannot be empty"
    assert malformed.category is ErrorCategory.MALFORMED
    assert malformed.message == "Fetching prices failed: Expected a JSON array, got dict"


def test_unknown_with_and_without_message():
    with_message = _classified(KeyError("name"))
    without_message = _classified(RuntimeError())

    assert with_message.category is ErrorCategory.UNKNOWN
    assert with_message.message == "Fetching prices failed: 'name'"
    assert without_message.category is ErrorCategory.UNKNOWN
    assert without_message.message == "Fetching prices failed: Unknown error occurred"


def test_classified_error_is_not_wrapped_twice():
    original = ClassifiedError("Inner", ErrorCategory.MALFORMED, "empty")

    error = _classified(original, "Outer")

    assert error is original
    assert error.message == "Inner failed: empty"


def test_original_exception_is_chained():
    cause = UpstreamStatusError(500, "Internal Server Error")

    error = _classified(cause)

    assert error.__cause__ is cause


def test_operation_formats_label_from_arguments():
    @operation("Looking up '{symbol}' in {currency}")
    async def lookup(symbol, currency="usd"):
        raise UpstreamStatusError(500, "Internal Server Error")

    with pytest.raises(ClassifiedError) as excinfo:
        asyncio.run(lookup("btc"))

    assert excinfo.value.operation == "Looking up 'btc' in usd"
    assert excinfo.value.message == "Looking up 'btc' in usd failed: 500 Internal Server Error"


def test_operation_passes_results_through():
    @operation("Adding")
    async def add(a, b):
        return a + b

    assert asyncio.run(add(2, 3)) == 5
    assert add.__name__ == "add"
