"""Dataclasses for storing reaction, rate, and unit information."""

from . import rate, reac, units
from .rate import (
    ArrheniusFunction,
    BlendingFunction,
    BlendType,
    ChebRate,
    CustomRate,
    InterfaceRate,
    PlogRate,
    Rate,
    RateType,
    SimpleRate,
)
from .reac import Composition, Reaction, ThirdBody, Variant
from .units import UnitStack

__all__ = [
    "rate",
    "reac",
    "units",
    "ArrheniusFunction",
    "BlendingFunction",
    "BlendType",
    "ChebRate",
    "CustomRate",
    "InterfaceRate",
    "PlogRate",
    "Rate",
    "RateType",
    "SimpleRate",
    "Composition",
    "Reaction",
    "ThirdBody",
    "Variant",
    "UnitStack",
]
