"""Tests for apm_common.errors and apm_common.response."""

import pytest

from src.apm_common.errors import (
    AdminKeyRequiredError,
    AppError,
    CommitOutcomeUnknownError,
    InternalError,
    InvalidApiKeyError,
    InvalidArgumentError,
    InvalidMarketPricingError,
    MarketAlreadyResolvedError,
    MarketNotFoundError,
    MarketNotOpenError,
    MissingApiKeyError,
    RateLimitError,
    StakeLimitExceededError,
    ThreadNotFoundError,
)
from src.apm_common.response import ErrorResponse, error_response


class TestAppError:
    def test_base_error(self) -> None:
        err = AppError(code=9002, message="Internal error")
        assert err.code == 9002
        assert err.message == "Internal error"
        assert err.http_status == 500
        assert err.details is None

    def test_is_exception(self) -> None:
        assert isinstance(AppError(code=1001, message="test"), Exception)


class TestSpecificErrors:
    @pytest.mark.parametrize(
        "err, code, status",
        [
            (MissingApiKeyError(), 1001, 401),
            (InvalidApiKeyError(), 1002, 401),
            (AdminKeyRequiredError(), 1003, 401),
            (InvalidArgumentError("bad"), 2001, 400),
            (MarketNotFoundError("MKT-1"), 3001, 404),
            (MarketNotOpenError("MKT-1"), 3002, 400),
            (MarketAlreadyResolvedError("MKT-1"), 3003, 400),
            (StakeLimitExceededError(60.0, 50.0), 4001, 400),
            (ThreadNotFoundError("TH-1"), 6001, 404),
            (InvalidMarketPricingError("MKT-1", 1.2), 9001, 500),
            (InternalError(), 9002, 500),
            (CommitOutcomeUnknownError(), 9002, 500),
            (RateLimitError(), 9003, 429),
        ],
    )
    def test_code_and_status(self, err, code, status) -> None:
        assert err.code == code
        assert err.http_status == status

    def test_stake_limit_reports_cap(self) -> None:
        err = StakeLimitExceededError(stake=60.0, max_stake_allowed=50.0)
        assert err.details == {"max_stake_allowed": 50.0}
        assert "60.0" in err.message

    def test_market_id_in_message(self) -> None:
        assert "MKT-9" in MarketNotFoundError("MKT-9").message


class TestErrorResponse:
    def test_shape(self) -> None:
        resp = error_response(3001, "Market not found: MKT-1")
        assert isinstance(resp, ErrorResponse)
        data = resp.model_dump()
        assert set(data) == {"code", "error", "details", "timestamp", "request_id"}
        assert data["error"] == "Market not found: MKT-1"
        assert data["details"] is None
        assert data["request_id"].startswith("req_")

    def test_request_id_override(self) -> None:
        resp = error_response(2001, "bad", details={"k": 1}, request_id="req_abc")
        assert resp.request_id == "req_abc"
        assert resp.details == {"k": 1}
