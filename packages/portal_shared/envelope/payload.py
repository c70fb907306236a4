"""Payload box carried inside portal envelopes.

Validation outcomes, attempt states, subject records and access-log pages all
travel as ``Payload[T].value`` so that an envelope with no payload (a failed
lookup or a store outage) is distinguishable from one whose payload is a
legitimately empty value such as ``None`` state for an unseen pair.
"""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict


PayloadT = TypeVar("PayloadT")


class Payload(BaseModel, Generic[PayloadT]):
    """Immutable wrapper around one service result."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    value: PayloadT
