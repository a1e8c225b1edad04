"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth/Agent
  2xxx: Request arguments
  3xxx: Market
  4xxx: Trade limits
  6xxx: Forum
  9xxx: System
"""

from typing import Any


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        self.details = details
        super().__init__(message)


# --- 1xxx: Auth/Agent ---

class MissingApiKeyError(AppError):
    def __init__(self) -> None:
        super().__init__(1001, "Missing API key", 401)


class InvalidApiKeyError(AppError):
    def __init__(self) -> None:
        super().__init__(1002, "Invalid API key", 401)


class AdminKeyRequiredError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "Admin key required", 401)


# --- 2xxx: Request arguments ---

class InvalidArgumentError(AppError):
    def __init__(self, detail: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(2001, detail, 400, details)


# --- 3xxx: Market ---

class MarketNotFoundError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(3001, f"Market not found: {market_id}", 404)


class MarketNotOpenError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(3002, f"Market is not open for trading: {market_id}", 400)


class MarketAlreadyResolvedError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(3003, f"Market already resolved: {market_id}", 400)


# --- 4xxx: Trade limits ---

class StakeLimitExceededError(AppError):
    def __init__(self, stake: float, max_stake_allowed: float) -> None:
        super().__init__(
            4001,
            f"stake is too large for this market: {stake} > {max_stake_allowed}",
            400,
            {"max_stake_allowed": max_stake_allowed},
        )
        self.max_stake_allowed = max_stake_allowed


# --- 6xxx: Forum ---

class ThreadNotFoundError(AppError):
    def __init__(self, thread_id: str) -> None:
        super().__init__(6001, f"Thread not found: {thread_id}", 404)


# --- 9xxx: System ---

class InvalidMarketPricingError(AppError):
    def __init__(self, market_id: str, yes_price: object) -> None:
        super().__init__(
            9001, f"Invalid market pricing for {market_id}: yes_price={yes_price}", 500
        )


class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)


class CommitOutcomeUnknownError(InternalError):
    def __init__(self) -> None:
        super().__init__("Connection lost during commit; the write may or may not have been applied")


class RateLimitError(AppError):
    def __init__(self) -> None:
        super().__init__(9003, "Rate limit exceeded", 429)
