"""Resolution of reaction types and construction of reactions from descriptions."""

import logging
import math
from collections.abc import Iterable, Mapping
from typing import Any

from . import check, schema
from .data import reac
from .data.reac import TYPE_DCT, Reaction
from .error import TypeResolutionError
from .kin import Kinetics
from .schema import Description, Errors

DEFAULT_TYPE = "elementary"
INTERFACE_PREFIX = "interface-"
STICKING_PREFIX = "sticking-"


def is_three_body(rxn: Reaction) -> bool:
    """Determine whether a reaction looks like a three-body reaction.

    This is the case if exactly one species appears on both sides with integer
    coefficients (the collision partner), all coefficients are integers, and either
    side involves exactly three species.

    :param rxn: A reaction object
    :return: `True` if it does, `False` if it doesn't
    """
    nfound = sum(
        1
        for name, coeff in rxn.reactants.items()
        if name in rxn.products
        and is_integer(coeff)
        and is_integer(rxn.products[name])
    )
    if nfound != 1:
        return False

    coeffs_r = list(rxn.reactants.values())
    coeffs_p = list(rxn.products.values())
    if not all(map(is_integer, coeffs_r + coeffs_p)):
        return False

    return sum(map(int, coeffs_r)) == 3 or sum(map(int, coeffs_p)) == 3


def is_integer(val: float) -> bool:
    """Determine whether a coefficient is an integer.

    :param val: The coefficient
    :return: `True` if it is, `False` if it isn't
    """
    return math.trunc(val) == val


def resolve_type(desc: Mapping[str, Any] | Description, kin: Kinetics) -> str:
    """Determine the type of reaction for a description.

    For bulk phases without an explicit type, three-body reactions with an explicit
    collision partner are detected from the equation. For surfaces, the type is
    prefixed according to whether a rate constant or a sticking coefficient is given.

    :param desc: The reaction description
    :param kin: The kinetics context
    :return: The reaction type
    """
    desc = schema.description(desc)

    if kin.reaction_phase.ndim == 3:
        type_ = desc.type
        if type_ is None:
            rcts, prds, *_ = reac.parse_equation(
                desc.equation, kin=kin, context=desc.data()
            )
            rxn = Reaction(reactants=rcts, products=prds)
            type_ = "three-body" if is_three_body(rxn) else DEFAULT_TYPE
            logging.debug(f"Inferred reaction type '{type_}' for: {desc.equation}")
    else:
        type_ = interface_type(desc)

    if type_ not in TYPE_DCT:
        raise TypeResolutionError(
            f"Unknown reaction type '{type_}'",
            equation=desc.equation,
            context=desc.data(),
        )
    return type_


def interface_type(desc: Description) -> str:
    """Determine the type of a surface reaction.

    :param desc: The reaction description
    :return: The reaction type, with an "interface-" or "sticking-" prefix
    """
    type_ = desc.type
    if type_ is None or type_ in ("elementary", "reaction"):
        type_ = "Arrhenius"

    if desc.has("rate-constant"):
        prefix = INTERFACE_PREFIX
    elif desc.has("sticking-coefficient"):
        prefix = STICKING_PREFIX
    else:
        raise TypeResolutionError(
            "Unable to infer interface reaction type.",
            equation=desc.equation,
            context=desc.data(),
        )

    return type_ if type_.startswith(prefix) else prefix + type_


def from_description(desc: Mapping[str, Any] | Description, kin: Kinetics) -> Reaction:
    """Build a reaction from a structured description.

    :param desc: The reaction description
    :param kin: The kinetics context
    :return: The reaction object, after structural checks
    """
    desc = schema.description(desc)
    type_ = resolve_type(desc, kin)
    rxn = reac.from_description(desc, kin=kin, type_=type_)
    check.check(rxn)
    return rxn


def reactions(
    descs: Iterable[Mapping[str, Any] | Description], kin: Kinetics
) -> tuple[list[Reaction], Errors]:
    """Build the reactions of a mechanism.

    If the kinetics context skips undeclared species, reactions that reference them
    are left out and reported; otherwise, an error is raised.

    :param descs: The reaction descriptions
    :param kin: The kinetics context
    :return: The reactions, along with the reactions that were left out
    """
    rxns = []
    err = Errors()
    for desc in descs:
        rxn = from_description(desc, kin)
        keep = check.check_species(rxn, kin)
        if keep and rxn.valid:
            rxns.append(rxn)
        elif rxn.valid:
            err.excluded.append(reac.equation(rxn))
        else:
            err.invalid.append(reac.equation(rxn))

    return rxns, err
