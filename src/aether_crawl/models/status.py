"""Status effects as a tagged-variant map.

Every ``StatusKind`` carries exactly one payload type: a duration in turns,
a stack count, a boolean flag, or an absolute amount. The typed accessors
refuse to read or write a kind through the wrong payload, so "turns remaining"
and "stack count" can never be confused.
"""
from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Payload(str, Enum):
    DURATION = "duration"
    STACKS = "stacks"
    FLAG = "flag"
    AMOUNT = "amount"


class StatusKind(str, Enum):
    TOXIC = "toxic"
    BURNING = "burning"
    FROZEN = "frozen"
    BLEEDING = "bleeding"
    CHILLED = "chilled"
    SHOCKED = "shocked"
    SUNDERED = "sundered"
    BLINDED = "blinded"
    STONESKIN = "stoneskin"
    BLUR = "blur"
    RAGED = "raged"
    SHIELD = "shield"
    FOCUSED = "focused"
    STUNNED = "stunned"
    REGEN = "regen"


PAYLOADS: Mapping[StatusKind, Payload] = MappingProxyType({
    StatusKind.TOXIC: Payload.STACKS,
    StatusKind.BURNING: Payload.DURATION,
    StatusKind.FROZEN: Payload.DURATION,
    StatusKind.BLEEDING: Payload.DURATION,
    StatusKind.CHILLED: Payload.DURATION,
    StatusKind.SHOCKED: Payload.DURATION,
    StatusKind.SUNDERED: Payload.DURATION,
    StatusKind.BLINDED: Payload.DURATION,
    StatusKind.STONESKIN: Payload.DURATION,
    StatusKind.BLUR: Payload.DURATION,
    StatusKind.RAGED: Payload.DURATION,
    StatusKind.SHIELD: Payload.AMOUNT,
    StatusKind.FOCUSED: Payload.FLAG,
    StatusKind.STUNNED: Payload.DURATION,
    StatusKind.REGEN: Payload.DURATION,
})


def _coerce(kind: StatusKind, value: Any) -> int | bool:
    payload = PAYLOADS[kind]
    if payload is Payload.FLAG:
        if not isinstance(value, bool):
            raise TypeError(f"{kind.value} is a flag, got {type(value).__name__}")
        return value
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{kind.value} holds a {payload.value} count, got {type(value).__name__}")
    return max(0, value)


class StatusEffects(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    entries: dict[StatusKind, int | bool] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _validate_payloads(self) -> StatusEffects:
        cleaned: dict[StatusKind, int | bool] = {}
        for kind, value in self.entries.items():
            value = _coerce(kind, value)
            if value:
                cleaned[kind] = value
        self.entries = cleaned
        return self

    # -- Construction / serialization --

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> StatusEffects:
        """Build from the flat ``{"toxic": 2, "focused": True}`` shape. Unknown keys are ignored."""
        known = {k.value for k in StatusKind}
        entries = {StatusKind(k): v for k, v in (data or {}).items() if k in known}
        return cls(entries=entries)

    def to_dict(self) -> dict[str, int | bool]:
        return {kind.value: value for kind, value in self.entries.items()}

    # -- Typed access --

    def _expect(self, kind: StatusKind, payload: Payload) -> None:
        if PAYLOADS[kind] is not payload:
            raise TypeError(f"{kind.value} is a {PAYLOADS[kind].value} effect, not {payload.value}")

    def _store(self, kind: StatusKind, value: int | bool) -> None:
        value = _coerce(kind, value)
        if value:
            self.entries[kind] = value
        else:
            self.entries.pop(kind, None)

    def duration(self, kind: StatusKind) -> int:
        self._expect(kind, Payload.DURATION)
        return int(self.entries.get(kind, 0))

    def stacks(self, kind: StatusKind = StatusKind.TOXIC) -> int:
        self._expect(kind, Payload.STACKS)
        return int(self.entries.get(kind, 0))

    def flag(self, kind: StatusKind = StatusKind.FOCUSED) -> bool:
        self._expect(kind, Payload.FLAG)
        return bool(self.entries.get(kind, False))

    def amount(self, kind: StatusKind = StatusKind.SHIELD) -> int:
        self._expect(kind, Payload.AMOUNT)
        return int(self.entries.get(kind, 0))

    def active(self, kind: StatusKind) -> bool:
        return bool(self.entries.get(kind))

    def set_duration(self, kind: StatusKind, turns: int) -> None:
        self._expect(kind, Payload.DURATION)
        self._store(kind, turns)

    def extend_duration(self, kind: StatusKind, turns: int) -> None:
        """Keep whichever is longer: the current duration or ``turns``."""
        self.set_duration(kind, max(self.duration(kind), turns))

    def decrement(self, kind: StatusKind) -> None:
        self.set_duration(kind, self.duration(kind) - 1)

    def add_stacks(self, kind: StatusKind = StatusKind.TOXIC, count: int = 1) -> None:
        self._expect(kind, Payload.STACKS)
        self._store(kind, self.stacks(kind) + count)

    def set_flag(self, kind: StatusKind, value: bool) -> None:
        self._expect(kind, Payload.FLAG)
        self._store(kind, value)

    def set_amount(self, kind: StatusKind, value: int) -> None:
        self._expect(kind, Payload.AMOUNT)
        self._store(kind, value)

    def add_amount(self, kind: StatusKind, value: int) -> None:
        self.set_amount(kind, self.amount(kind) + value)

    def clear(self, kind: StatusKind) -> None:
        self.entries.pop(kind, None)

    def is_empty(self) -> bool:
        return not self.entries
