"""Validation of reactions against their own invariants and the kinetics context.

The stages are meant to be run in order: `check` (structure), `check_species`
(declarations, followed by `check_balance`). `uses_electrochemistry` is a
classification, not a validation.
"""

import logging
from collections.abc import Iterable

from .data import reac
from .data.reac import Reaction
from .error import BalanceError, ConfigurationError, UndeclaredSpeciesError
from .kin import Kinetics

ELEMENT_TOLERANCE = 1e-4
SITE_TOLERANCE = 1e-5
CHARGE_TOLERANCE = 1e-4


def check(rxn: Reaction):
    """Check the reaction orders and the rate for consistency.

    :param rxn: A reaction object
    """
    eq = reac.equation(rxn)
    ctx = reac.input_data(rxn)

    if not rxn.allow_nonreactant_orders:
        for name in rxn.orders:
            if name not in rxn.reactants:
                raise ConfigurationError(
                    f"Reaction order specified for non-reactant species '{name}'",
                    equation=eq,
                    context=ctx,
                )

    if not rxn.allow_negative_orders:
        for name, order in rxn.orders.items():
            if order < 0.0:
                raise ConfigurationError(
                    f"Negative reaction order specified for species '{name}'",
                    equation=eq,
                    context=ctx,
                )

    # Orders imply non-mass-action kinetics, for which the reverse rate cannot be
    # determined from thermochemistry
    if rxn.reversible and rxn.orders:
        raise ConfigurationError(
            "Reaction orders may only be given for irreversible reactions",
            equation=eq,
            context=ctx,
        )

    if rxn.rate is not None:
        rxn.rate.check(eq)


def undeclared_species(names: Iterable[str], kin: Kinetics) -> list[str]:
    """Get the names that are not declared in the kinetics context.

    :param names: Species names
    :param kin: The kinetics context
    :return: The undeclared names, in order
    """
    return [n for n in names if not kin.has_species(n)]


def undeclared_third_bodies(rxn: Reaction, kin: Kinetics) -> tuple[list[str], bool]:
    """Get the third-body efficiency species that are not declared.

    :param rxn: A reaction object
    :param kin: The kinetics context
    :return: The undeclared species, and whether the reaction has a named collision
        partner
    """
    tb = rxn.third_body
    if tb is None:
        return [], False
    return undeclared_species(tb.efficiencies, kin), tb.specified_collision_partner


def require_species(rxn: Reaction, kin: Kinetics):
    """Require that all reactants and products are declared.

    :param rxn: A reaction object
    :param kin: The kinetics context
    """
    names = undeclared_species(reac.species(rxn), kin)
    if names:
        eq = reac.equation(rxn)
        raise UndeclaredSpeciesError(
            f"Reaction '{eq}'\ncontains undeclared species: '{quoted_join(names)}'",
            species=names,
            equation=eq,
            context=reac.input_data(rxn),
        )


def check_species(rxn: Reaction, kin: Kinetics) -> bool:
    """Check that all species in the reaction are declared, then check the balance.

    If the kinetics context skips undeclared species, reactions that reference them
    are excluded (`False` is returned) instead of raising an error.

    :param rxn: A reaction object
    :param kin: The kinetics context
    :return: `True` if the reaction should be kept, `False` if it should be excluded
    """
    eq = reac.equation(rxn)
    ctx = reac.input_data(rxn)

    names = undeclared_species([*rxn.reactants, *rxn.products], kin)
    if names:
        if kin.skip_undeclared_species:
            logging.debug(f"Excluding reaction with undeclared species: {eq}")
            return False
        raise UndeclaredSpeciesError(
            f"Reaction '{eq}'\ncontains undeclared species: '{quoted_join(names)}'",
            species=names,
            equation=eq,
            context=ctx,
        )

    names = undeclared_species(rxn.orders, kin)
    if names:
        if kin.skip_undeclared_species:
            logging.debug(f"Excluding reaction with undeclared order species: {eq}")
            return False
        raise UndeclaredSpeciesError(
            f"Reaction '{eq}'\ndefines reaction orders for undeclared species: "
            f"'{quoted_join(names)}'",
            species=names,
            equation=eq,
            context=ctx.get("orders", ctx),
        )

    names, specified_partner = undeclared_third_bodies(rxn, kin)
    if names:
        if not kin.skip_undeclared_third_bodies:
            if "efficiencies" in ctx:
                msg = "defines third-body efficiencies for undeclared species"
            else:
                msg = "is a three-body reaction with undeclared species"
            raise UndeclaredSpeciesError(
                f"Reaction '{eq}'\n{msg}: '{quoted_join(names)}'",
                species=names,
                equation=eq,
                context=ctx,
            )
        if kin.skip_undeclared_species and specified_partner:
            logging.debug(f"Excluding reaction with undeclared collision partner: {eq}")
            return False

    check_balance(rxn, kin)
    return True


def check_balance(rxn: Reaction, kin: Kinetics):
    """Check that the reaction is balanced in elements and surface sites.

    :param rxn: A reaction object
    :param kin: The kinetics context
    """
    eq = reac.equation(rxn)
    ctx = reac.input_data(rxn)
    require_species(rxn, kin)

    bal_r: dict[str, float] = {}
    bal_p: dict[str, float] = {}
    for name, coeff in rxn.products.items():
        for elem, count in kin.species_phase(name).composition(name).items():
            bal_r.setdefault(elem, 0.0)
            bal_p[elem] = bal_p.get(elem, 0.0) + coeff * count
    for name, coeff in rxn.reactants.items():
        for elem, count in kin.species_phase(name).composition(name).items():
            bal_r[elem] = bal_r.get(elem, 0.0) + coeff * count

    rows = []
    for elem, val_r in bal_r.items():
        val_p = bal_p.get(elem, 0.0)
        total = val_r + val_p
        if total > 0.0 and abs(val_p - val_r) / total > ELEMENT_TOLERANCE:
            rows.append((elem, val_r, val_p))

    if rows:
        row_str = "".join(f"  {e:<10} {r:<12g} {p:<12g}\n" for e, r, p in rows)
        raise BalanceError(
            f"The following reaction is unbalanced: {eq}\n"
            f"  Element    Reactants    Products\n{row_str}",
            imbalance=rows,
            equation=eq,
            context=ctx,
        )

    surf = kin.surface_phase
    if kin.reaction_phase.ndim == 3 or surf is None:
        return

    sites_r = sum(
        c * surf.size(n) for n, c in rxn.reactants.items() if surf.has_species(n)
    )
    sites_p = sum(
        c * surf.size(n) for n, c in rxn.products.items() if surf.has_species(n)
    )
    if abs(sites_r - sites_p) > SITE_TOLERANCE * (sites_r + sites_p):
        raise BalanceError(
            f"Number of surface sites not balanced in reaction {eq}.\n"
            f"Reactant sites: {sites_r:g}\nProduct sites: {sites_p:g}",
            imbalance=[("sites", sites_r, sites_p)],
            equation=eq,
            context=ctx,
        )


def uses_electrochemistry(rxn: Reaction, kin: Kinetics) -> bool:
    """Determine whether charge is transferred between phases.

    :param rxn: A reaction object
    :param kin: The kinetics context
    :return: `True` if it is, `False` if it isn't
    """
    require_species(rxn, kin)
    charges = [0.0] * len(kin.phases)
    for sign, comp in ((1.0, rxn.products), (-1.0, rxn.reactants)):
        for name, coeff in comp.items():
            idx = kin.species_phase_index(name)
            charges[idx] += sign * coeff * kin.phases[idx].charge(name)

    return any(abs(c) > CHARGE_TOLERANCE for c in charges)


def quoted_join(names: Iterable[str]) -> str:
    """Join names for an error message, e.g. "A', 'B".

    :param names: The names
    :return: The joined string, to be wrapped in single quotes
    """
    return "', '".join(names)
