"""Outcomes of a single natural-language reasoning call.

Callers dispatch on the variant; only ReasoningOk carries usable data.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ReasoningOk:
    data: dict = field(default_factory=dict)


@dataclass(frozen=True)
class ReasoningMalformed:
    raw: str
    reason: str = "Response was not a JSON object"


@dataclass(frozen=True)
class ReasoningTimeout:
    timeout: float


@dataclass(frozen=True)
class ReasoningTransportError:
    error: str


ReasoningResult = ReasoningOk | ReasoningMalformed | ReasoningTimeout | ReasoningTransportError
