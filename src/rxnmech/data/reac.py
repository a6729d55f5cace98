"""Reaction dataclasses.

Reactions come in a closed set of variants (elementary, three-body, falloff, custom),
identified by a `Variant` tag. Variant-specific data lives on the reaction itself (the
third body) and all variant-specific behavior dispatches on the tag.
"""

import dataclasses
import enum
import logging
import math
import warnings
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

import more_itertools as mit
import pyparsing as pp
from pyparsing import pyparsing_common as ppc

from .. import schema
from ..error import (
    DeprecatedNotationWarning,
    StructuralParseError,
    TypeResolutionError,
    UnsupportedCombinationError,
)
from ..schema import Description
from . import rate as rt_
from .rate import Rate, RateType
from .units import U, UnitStack

if TYPE_CHECKING:
    from ..kin import Kinetics

Composition = dict[str, float]

GENERIC_COLLIDER = "M"
FALLOFF_PREFIX = "(+"
REVERSIBLE_ARROWS = ("<=>", "=")
IRREVERSIBLE_ARROW = "=>"


class Variant(str, enum.Enum):
    """The structural variant of a reaction."""

    ELEMENTARY = "elementary"
    THREE_BODY = "three-body"
    FALLOFF = "falloff"
    CUSTOM = "custom"


# Reaction type tags, mapped onto the reaction variant and the type of rate
TYPE_DCT: dict[str, tuple[Variant, RateType]] = {
    "reaction": (Variant.ELEMENTARY, RateType.ARRHENIUS),
    "elementary": (Variant.ELEMENTARY, RateType.ARRHENIUS),
    "Arrhenius": (Variant.ELEMENTARY, RateType.ARRHENIUS),
    "three-body": (Variant.THREE_BODY, RateType.ARRHENIUS),
    "falloff": (Variant.FALLOFF, RateType.FALLOFF),
    "chemically-activated": (Variant.FALLOFF, RateType.ACTIVATED),
    "pressure-dependent-Arrhenius": (Variant.ELEMENTARY, RateType.PLOG),
    "Chebyshev": (Variant.ELEMENTARY, RateType.CHEB),
    "custom-rate-function": (Variant.CUSTOM, RateType.CUSTOM),
    "interface-Arrhenius": (Variant.ELEMENTARY, RateType.INTERFACE),
    "sticking-Arrhenius": (Variant.ELEMENTARY, RateType.STICKING),
}

HEAD_KEYS = ("type", "equation")
TAIL_KEYS = ("duplicate", "orders", "negative-orders", "nonreactant-orders")


@dataclasses.dataclass
class ThirdBody:
    """A third-body collision partner.

    :param default_efficiency: The efficiency of species without an explicit value
    :param efficiencies: Collision efficiencies by species name
    :param specified_collision_partner: Whether a single, named species is the
        collision partner (rather than the generic "M")
    :param mass_action: Whether the third-body concentration multiplies the rate
    """

    default_efficiency: float = 1.0
    efficiencies: dict[str, float] = dataclasses.field(default_factory=dict)
    specified_collision_partner: bool = False
    mass_action: bool = True

    def __post_init__(self):
        """Initialize attributes."""
        self.default_efficiency = float(self.default_efficiency)
        self.efficiencies = {str(k): float(v) for k, v in self.efficiencies.items()}

    def efficiency(self, name: str) -> float:
        """Get the collision efficiency of a species.

        :param name: The species name
        :return: The efficiency
        """
        return self.efficiencies.get(name, self.default_efficiency)


def third_body_from_data(
    data: Mapping[str, Any], mass_action: bool = True
) -> ThirdBody:
    """Build a generic third body from reaction description data.

    :param data: The reaction description data
    :param mass_action: Whether the third-body concentration multiplies the rate
    :return: The third body
    """
    default = data.get("default-efficiency")
    return ThirdBody(
        default_efficiency=1.0 if default is None else default,
        efficiencies=data.get("efficiencies") or {},
        mass_action=mass_action,
    )


def collision_partner(tb: ThirdBody) -> str:
    """Get the collision partner, as written in the reaction equation.

    :param tb: A third body
    :return: The named collision partner, or "M" for a generic one
    """
    if tb.specified_collision_partner:
        return next(iter(tb.efficiencies))
    return GENERIC_COLLIDER


@dataclasses.dataclass
class Reaction:
    """A reaction.

    :param reactants: Stoichiometric coefficients of the reactants
    :param products: Stoichiometric coefficients of the products
    :param reversible: Whether the reaction is reversible
    :param variant: The structural variant of the reaction
    :param rate: The reaction rate
    :param third_body: The third body, for three-body and falloff reactions
    :param orders: Reaction orders that replace the mass-action ones
    :param duplicate: Whether this is an intentional duplicate of another reaction
    :param allow_nonreactant_orders: Allow orders for species that are not reactants?
    :param allow_negative_orders: Allow negative reaction orders?
    :param valid: Whether all species could be resolved
    :param id: An identifier for the reaction
    :param input: The description the reaction was built from
    :param rate_units: The units of the rate coefficient
    """

    reactants: Composition
    products: Composition
    reversible: bool = True
    variant: Variant = Variant.ELEMENTARY
    rate: Rate | None = None
    third_body: ThirdBody | None = None
    orders: Composition = dataclasses.field(default_factory=dict)
    duplicate: bool = False
    allow_nonreactant_orders: bool = False
    allow_negative_orders: bool = False
    valid: bool = True
    id: str = ""
    input: Description | None = None
    rate_units: UnitStack = dataclasses.field(default_factory=UnitStack)

    def __post_init__(self):
        """Initialize attributes."""
        self.reactants = {str(k): float(v) for k, v in self.reactants.items()}
        self.products = {str(k): float(v) for k, v in self.products.items()}
        self.orders = {str(k): float(v) for k, v in self.orders.items()}
        self.variant = Variant(self.variant)

        if self.variant in (Variant.THREE_BODY, Variant.FALLOFF):
            self.third_body = ThirdBody() if self.third_body is None else self.third_body
            self.third_body.mass_action = self.variant == Variant.THREE_BODY
        else:
            assert self.third_body is None, f"{self.variant} has no third body"

    def __str__(self):
        return equation(self)


# constructors
def from_data(
    rcts: Mapping[str, float],
    prds: Mapping[str, float],
    rate_: Rate | None = None,
    third_body: ThirdBody | None = None,
    variant: Variant | str = Variant.ELEMENTARY,
    reversible: bool = True,
    orders: Mapping[str, float] | None = None,
) -> Reaction:
    """Construct a reaction object from data.

    :param rcts: Stoichiometric coefficients of the reactants
    :param prds: Stoichiometric coefficients of the products
    :param rate_: The reaction rate
    :param third_body: The third body, for three-body and falloff reactions
    :param variant: The structural variant of the reaction
    :param reversible: Whether the reaction is reversible
    :param orders: Reaction orders that replace the mass-action ones
    :return: The reaction object
    """
    rxn = Reaction(
        reactants=dict(rcts),
        products=dict(prds),
        reversible=reversible,
        variant=variant,
        third_body=third_body,
        orders=dict(orders or {}),
    )
    if rate_ is not None:
        set_rate(rxn, rate_)
    return rxn


def from_description(
    desc: Mapping[str, Any] | Description,
    kin: "Kinetics | None" = None,
    type_: str = "elementary",
) -> Reaction:
    """Construct a reaction from a structured description.

    The type must already be resolved (see `factory.resolve_type`).

    :param desc: The reaction description
    :param kin: The kinetics context, used to resolve species and units
    :param type_: The reaction type
    :return: The reaction object, with rate and rate units set
    """
    desc = schema.description(desc)
    data = desc.data()
    variant, rate_type = TYPE_DCT[type_]

    rcts, prds, rev, valid = parse_equation(desc.equation, kin=kin, context=data)
    tb = None
    if variant == Variant.THREE_BODY:
        rcts, prds, tb = strip_three_body(rcts, prds, desc.equation, context=data)
    if variant == Variant.FALLOFF:
        rcts, prds, tb = strip_falloff(rcts, prds, desc.equation, context=data)
    if tb is not None and not tb.specified_collision_partner:
        tb = third_body_from_data(data, mass_action=tb.mass_action)

    orders = dict(desc.orders)
    if kin is not None and not all(map(kin.has_species, orders)):
        valid = False

    rxn = Reaction(
        reactants=rcts,
        products=prds,
        reversible=rev,
        variant=variant,
        third_body=tb,
        orders=orders,
        duplicate=desc.duplicate,
        allow_nonreactant_orders=desc.nonreactant_orders,
        allow_negative_orders=desc.negative_orders,
        valid=valid,
        id=desc.id,
        input=desc,
    )
    rxn.rate_units = rate_coeff_units(rxn, kin)
    set_rate(rxn, rt_.from_data(rate_type, data, units=rxn.rate_units))
    return rxn


# getters
def reactants(rxn: Reaction) -> Composition:
    """Get the reactants, excluding the third body.

    :param rxn: A reaction object
    :return: The stoichiometric coefficients of the reactants
    """
    return rxn.reactants


def products(rxn: Reaction) -> Composition:
    """Get the products, excluding the third body.

    :param rxn: A reaction object
    :return: The stoichiometric coefficients of the products
    """
    return rxn.products


def rate(rxn: Reaction) -> Rate | None:
    """Get the rate.

    :param rxn: A reaction object
    :return: The rate object
    """
    return rxn.rate


def third_body(rxn: Reaction) -> ThirdBody | None:
    """Get the third body, if there is one.

    :param rxn: A reaction object
    :return: The third body
    """
    return rxn.third_body


def input_data(rxn: Reaction) -> dict[str, Any]:
    """Get the description data the reaction was built from.

    :param rxn: A reaction object
    :return: A copy of the description data (empty if built from data)
    """
    return {} if rxn.input is None else rxn.input.data()


# setters
def set_rate(rxn: Reaction, rate_: Rate | None):
    """Set the rate for a reaction.

    Specifying "(+M)" for a Chebyshev reaction is deprecated, and the third body is
    removed with a warning. A literal "M" cannot be combined with a P-Log rate.

    :param rxn: A reaction object, which is modified in place
    :param rate_: The rate object
    """
    rxn.rate = rate_

    falloff_m = f"{FALLOFF_PREFIX}{GENERIC_COLLIDER})"
    if falloff_m in rxn.reactants and rt_.is_chebyshev(rate_):
        msg = (
            f"Specifying '{falloff_m}' in the reaction equation for Chebyshev "
            f"reactions is deprecated: {equation(rxn)}"
        )
        logging.warning(msg)
        warnings.warn(msg, DeprecatedNotationWarning, stacklevel=2)
        rxn.reactants.pop(falloff_m)
        rxn.products.pop(falloff_m, None)

    if GENERIC_COLLIDER in rxn.reactants and rt_.is_plog(rate_):
        raise UnsupportedCombinationError(
            "Found superfluous 'M' in pressure-dependent-Arrhenius reaction.",
            equation=equation(rxn),
            context=input_data(rxn),
        )


# properties
def species(rxn: Reaction) -> tuple[str, ...]:
    """Get the species that are involved in the reaction.

    :param rxn: A reaction object
    :return: The species names, reactants first
    """
    return tuple(mit.unique_everseen([*rxn.reactants, *rxn.products]))


def type_name(rxn: Reaction) -> str:
    """Get the name of the reaction type.

    :param rxn: A reaction object
    :return: The type name
    """
    if rxn.variant == Variant.THREE_BODY:
        return "three-body"
    if rxn.variant == Variant.FALLOFF:
        is_act = rxn.rate is not None and rt_.type_(rxn.rate) == RateType.ACTIVATED
        return "chemically-activated" if is_act else "falloff"
    if rxn.variant == Variant.CUSTOM:
        return "custom-rate-function"
    return "reaction"


def reactant_string(rxn: Reaction) -> str:
    """Get the reactant side of the equation, including the third body.

    :param rxn: A reaction object
    :return: The reactant string
    """
    return composition_string(rxn.reactants) + third_body_string(rxn)


def product_string(rxn: Reaction) -> str:
    """Get the product side of the equation, including the third body.

    :param rxn: A reaction object
    :return: The product string
    """
    return composition_string(rxn.products) + third_body_string(rxn)


def third_body_string(rxn: Reaction) -> str:
    """Get the third-body annotation for each side of the equation.

    :param rxn: A reaction object
    :return: The annotation, e.g. " + M" or " (+M)", or "" if there is no third body
    """
    if rxn.third_body is None:
        return ""

    coll = collision_partner(rxn.third_body)
    if rxn.variant == Variant.FALLOFF:
        return f" {FALLOFF_PREFIX}{coll})"
    return f" + {coll}"


def equation(rxn: Reaction) -> str:
    """Get the equation of a reaction.

    :param rxn: A reaction object
    :return: The equation
    """
    arrow = REVERSIBLE_ARROWS[0] if rxn.reversible else IRREVERSIBLE_ARROW
    return f"{reactant_string(rxn)} {arrow} {product_string(rxn)}"


def composition_string(comp: Composition) -> str:
    """Write one side of an equation.

    :param comp: Stoichiometric coefficients by species name
    :return: The string, with coefficients other than 1 preceding the species
    """
    return " + ".join(
        name if coeff == 1.0 else f"{coeff:g} {name}" for name, coeff in comp.items()
    )


def rate_coeff_units(rxn: Reaction, kin: "Kinetics | None") -> UnitStack:
    """Determine the units of the rate coefficient.

    The result is undetermined (empty) for invalid reactions, since species that
    could not be resolved have no units.

    :param rxn: A reaction object
    :param kin: The kinetics context
    :return: The units of the rate coefficient
    """
    if kin is None or not rxn.valid:
        return UnitStack()

    # Concentration per time
    units = UnitStack.from_standard_units(kin.reaction_phase.standard_concentration_units)
    units.join(1.0)
    units.update(U.Unit("1/s"), 1.0)

    for name, order in rxn.orders.items():
        units.update(kin.species_phase(name).standard_concentration_units, -order)

    for name, coeff in rxn.reactants.items():
        if name == GENERIC_COLLIDER or name.startswith(FALLOFF_PREFIX):
            continue
        if name not in rxn.orders:
            units.update(kin.species_phase(name).standard_concentration_units, -coeff)

    if rxn.third_body is not None:
        units.join(-1.0)

    return units


def parameters(rxn: Reaction, with_input: bool = True) -> dict[str, Any]:
    """Get the reaction description for serialization.

    The computed parameters are built fresh; if requested, the original description
    is merged on top of them, so the input spelling of each key is kept.

    :param rxn: A reaction object
    :param with_input: Merge in the original description?
    :return: The reaction description
    """
    params = {"equation": equation(rxn)}
    if rxn.duplicate:
        params["duplicate"] = True
    if rxn.orders:
        params["orders"] = dict(rxn.orders)
    if rxn.allow_negative_orders:
        params["negative-orders"] = True
    if rxn.allow_nonreactant_orders:
        params["nonreactant-orders"] = True

    if rxn.rate is not None:
        params.update(rxn.rate.parameters())
        if params.get("type", "").startswith(RateType.ARRHENIUS.value):
            params.pop("type")

    tb = rxn.third_body
    if tb is not None and not tb.specified_collision_partner:
        if rxn.variant == Variant.THREE_BODY:
            params["type"] = "three-body"
        if rxn.variant == Variant.THREE_BODY or tb.efficiencies:
            params["efficiencies"] = dict(tb.efficiencies)
            if tb.default_efficiency != 1.0:
                params["default-efficiency"] = tb.default_efficiency

    if with_input:
        params.update(input_data(rxn))

    head = {k: params[k] for k in HEAD_KEYS if k in params}
    tail = {k: params[k] for k in TAIL_KEYS if k in params}
    body = {k: v for k, v in params.items() if k not in head and k not in tail}
    return {**head, **body, **tail}


# Equation parsing
EQUATION_TOKENS = pp.OneOrMore(pp.Word(pp.printables))
COEFFICIENT = ppc.number


def tokenize_equation(eq: str) -> list[str]:
    """Split an equation into whitespace-separated tokens.

    :param eq: The equation
    :return: The tokens
    """
    if not eq.strip():
        return []
    return list(EQUATION_TOKENS.parse_string(eq, parse_all=True))


def is_delimiter(token: str) -> bool:
    """Determine whether a token ends a species in an equation.

    :param token: The token
    :return: `True` if it does, `False` if it doesn't
    """
    return (
        token == "+"
        or token.startswith(FALLOFF_PREFIX)
        or token in REVERSIBLE_ARROWS
        or token == IRREVERSIBLE_ARROW
    )


def read_coefficient(
    token: str, eq: str, context: Mapping[str, Any] | None = None
) -> float:
    """Read a stoichiometric coefficient.

    :param token: The coefficient token
    :param eq: The equation, for error messages
    :param context: The reaction description, for error messages
    :return: The coefficient
    """
    try:
        return float(COEFFICIENT.parse_string(token, parse_all=True)[0])
    except pp.ParseException as err:
        raise StructuralParseError(
            f"Invalid stoichiometric coefficient '{token}' in reaction equation '{eq}'",
            equation=eq,
            context=context,
        ) from err


def parse_equation(
    eq: str, kin: "Kinetics | None" = None, context: Mapping[str, Any] | None = None
) -> tuple[Composition, Composition, bool, bool]:
    """Parse a reaction equation.

    Falloff third bodies, written "(+M)" or "(+ M)", are returned as pseudo-species
    like "(+M)" with a coefficient of -1. A generic collider "M" is returned as-is.

    Species are only resolved against a kinetics context. Without one, nothing is
    looked up and the reaction is always reported as valid.

    :param eq: The equation, e.g. "2 H2 + O2 <=> 2 H2O"
    :param kin: The kinetics context, used to check whether the species exist
    :param context: The reaction description, for error messages
    :return: The reactants, the products, whether the reaction is reversible, and
        whether all species could be resolved (always `True` without a kinetics
        context)
    """
    tokens = tokenize_equation(eq)
    tokens.append("+")  # so the last species is not a special case

    rcts: Composition = {}
    prds: Composition = {}
    reversible = True
    valid = True
    on_reactants = True
    last = None  # index of the last delimiter used
    for idx in range(1, len(tokens)):
        token = tokens[idx]
        if is_delimiter(token):
            name = tokens[idx - 1]
            last_ = -1 if last is None else last
            if last is not None and tokens[last] == FALLOFF_PREFIX:
                # Falloff third body with a space, "(+ M)"
                name = FALLOFF_PREFIX + name
                coeff = -1.0
            elif (
                last_ == idx - 1
                and name.startswith(FALLOFF_PREFIX)
                and name.endswith(")")
            ):
                # Falloff third body without a space, "(+M)"
                coeff = -1.0
            elif last_ == idx - 2:
                coeff = 1.0
            elif last_ == idx - 3:
                coeff = read_coefficient(tokens[idx - 2], eq, context=context)
            else:
                last_token = "n/a" if last is None else tokens[last]
                raise StructuralParseError(
                    f"Error parsing reaction string '{eq}'.\n"
                    f"Current token: '{token}'\nlast_used: '{last_token}'",
                    equation=eq,
                    context=context,
                )

            if (
                kin is not None
                and not kin.has_species(name)
                and coeff != -1.0
                and name != GENERIC_COLLIDER
            ):
                valid = False

            side = rcts if on_reactants else prds
            side[name] = side.get(name, 0.0) + coeff
            last = idx

        if token in REVERSIBLE_ARROWS:
            reversible = True
            on_reactants = False
        elif token == IRREVERSIBLE_ARROW:
            reversible = False
            on_reactants = False

    return rcts, prds, reversible, valid


# Variant processing
def strip_three_body(
    rcts: Composition,
    prds: Composition,
    eq: str,
    context: Mapping[str, Any] | None = None,
) -> tuple[Composition, Composition, ThirdBody]:
    """Remove the collision partner from the reactants and products.

    A generic "M" must appear on both sides. Otherwise, a single species appearing on
    both sides is taken to be an explicitly specified collision partner.

    :param rcts: The parsed reactants
    :param prds: The parsed products
    :param eq: The equation, for error messages
    :param context: The reaction description, for error messages
    :return: The reactants and products without the collision partner, and the
        third body
    """
    rcts = dict(rcts)
    prds = dict(prds)
    if GENERIC_COLLIDER in rcts and GENERIC_COLLIDER in prds:
        rcts.pop(GENERIC_COLLIDER)
        prds.pop(GENERIC_COLLIDER)
        return rcts, prds, ThirdBody()

    tb = detect_efficiencies(rcts, prds, eq)
    if tb is None:
        raise TypeResolutionError(
            f"Reaction equation '{eq}' does not contain third body 'M'",
            equation=eq,
            context=context,
        )
    return rcts, prds, tb


def detect_efficiencies(
    rcts: Composition, prds: Composition, eq: str
) -> ThirdBody | None:
    """Detect an explicitly specified collision partner.

    The collision partner is removed from the reactants and products in place.

    :param rcts: The reactants, which are modified in place
    :param prds: The products, which are modified in place
    :param eq: The equation, for error messages
    :return: The third body, or `None` if no collision partner was found
    """
    names = [n for n in rcts if n in prds]
    if not names:
        return None

    if len(names) > 1:
        raise TypeResolutionError(
            f"Found more than one explicitly specified collision partner\n"
            f"in reaction '{eq}'.",
            equation=eq,
        )

    (name,) = names
    for comp in (rcts, prds):
        if math.trunc(comp[name]) != 1:
            comp[name] -= 1.0
        else:
            comp.pop(name)

    return ThirdBody(
        default_efficiency=0.0,
        efficiencies={name: 1.0},
        specified_collision_partner=True,
    )


def strip_falloff(
    rcts: Composition,
    prds: Composition,
    eq: str,
    context: Mapping[str, Any] | None = None,
) -> tuple[Composition, Composition, ThirdBody]:
    """Remove the falloff third body, "(+M)" or "(+species)", from both sides.

    :param rcts: The parsed reactants
    :param prds: The parsed products
    :param eq: The equation, for error messages
    :param context: The reaction description, for error messages
    :return: The reactants and products without the third body, and the third body
    """
    tb_str = next(
        (n for n, c in rcts.items() if c == -1.0 and n.startswith(FALLOFF_PREFIX)),
        None,
    )
    if tb_str is None:
        raise TypeResolutionError(
            f"Reactants for reaction '{eq}' do not contain a pressure-dependent "
            f"third body",
            equation=eq,
            context=context,
        )

    name = tb_str[len(FALLOFF_PREFIX) : -1]
    if tb_str not in prds:
        raise TypeResolutionError(
            f"Unable to match third body '{name}' in reactants and products of "
            f"reaction '{eq}'",
            equation=eq,
            context=context,
        )

    rcts = {n: c for n, c in rcts.items() if n != tb_str}
    prds = {n: c for n, c in prds.items() if n != tb_str}
    if name == GENERIC_COLLIDER:
        return rcts, prds, ThirdBody(mass_action=False)

    tb = ThirdBody(
        default_efficiency=0.0,
        efficiencies={name: 1.0},
        specified_collision_partner=True,
        mass_action=False,
    )
    return rcts, prds, tb
