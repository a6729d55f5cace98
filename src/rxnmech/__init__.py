"""Parsing, classification, and validation of chemical reactions."""

from . import check, data, error, factory, kin, schema
from .check import check_balance, check_species, uses_electrochemistry
from .data.reac import (
    Reaction,
    ThirdBody,
    Variant,
    equation,
    parameters,
    parse_equation,
    rate_coeff_units,
)
from .factory import from_description, is_three_body, reactions, resolve_type
from .kin import Kinetics, Phase

__all__ = [
    # types
    "Reaction",
    "ThirdBody",
    "Variant",
    "Kinetics",
    "Phase",
    # parsing
    "parse_equation",
    # building
    "resolve_type",
    "is_three_body",
    "from_description",
    "reactions",
    # properties
    "equation",
    "parameters",
    "rate_coeff_units",
    # validation
    "check_species",
    "check_balance",
    "uses_electrochemistry",
    # modules
    "check",
    "data",
    "error",
    "factory",
    "kin",
    "schema",
]
