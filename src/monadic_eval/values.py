"""Marker results produced by evaluating one statement unit."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class Let:
    name: str
    value: object


@dataclass(frozen=True)
class Unit:
    value: object


@dataclass(frozen=True)
class Unit2:
    value: object


@dataclass(frozen=True)
class Bind:
    name: str
    value: object


@dataclass(frozen=True)
class Do:
    value: object


# ``None`` stands for a plain statement that produced no marker.
Marker = Union[Let, Unit, Unit2, Bind, Do, None]
