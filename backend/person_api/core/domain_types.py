"""Domain Types: closed tag sets shared by the external-call pipeline.

Invariants:
    - All outcome classifications are encoded as Enums, no raw string matching
    - OutcomeTag is a closed set: every attempt maps to exactly one tag

Design Decisions:
    - str Enums: serialize to JSON and log extras without custom encoders
"""

from enum import Enum


class OutcomeTag(str, Enum):
    """Classification of a single outbound attempt."""
    TRANSIENT = "transient"   # network blip, 5xx, 408
    TIMEOUT = "timeout"       # transport-level timeout
    TERMINAL = "terminal"     # success, 4xx, anything retrying will not fix


class FailureReason(str, Enum):
    """Why an external call did not produce a payload."""
    NOT_SUCCESS_STATUS = "not_success_status"
    TIMEOUT = "timeout"
    EXCEPTION = "exception"


class ExchangeDirection(str, Enum):
    """Which side of an HTTP exchange a capture describes."""
    REQUEST = "request"
    RESPONSE = "response"
