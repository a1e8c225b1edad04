"""Global enums: must match DB CHECK constraints exactly."""

from enum import Enum


class MarketStatus(str, Enum):
    OPEN = "open"
    RESOLVED = "resolved"


class TradeSide(str, Enum):
    YES = "yes"
    NO = "no"
