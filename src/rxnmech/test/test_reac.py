"""Test rxnmech.data.reac functions."""

import pytest

import rxnmech
from rxnmech.data import rate, reac
from rxnmech.error import (
    DeprecatedNotationWarning,
    StructuralParseError,
    TypeResolutionError,
    UnsupportedCombinationError,
)

KIN = rxnmech.kin.from_species(
    names=["H", "O", "H2", "O2", "OH", "H2O", "HO2", "AR", "N2", "CH3", "CH4"],
    formulas=[
        {"H": 1},
        {"O": 1},
        {"H": 2},
        {"O": 2},
        {"H": 1, "O": 1},
        {"H": 2, "O": 1},
        {"H": 1, "O": 2},
        {"Ar": 1},
        {"N": 2},
        {"C": 1, "H": 3},
        {"C": 1, "H": 4},
    ],
)

ARRH = {"A": 1.0e13, "b": 0.0, "Ea": 0.0}


@pytest.mark.parametrize(
    "eq, rcts, prds, rev",
    [
        ("A + B <=> C", {"A": 1, "B": 1}, {"C": 1}, True),
        ("A + B = C", {"A": 1, "B": 1}, {"C": 1}, True),
        ("2 A => B + B", {"A": 2}, {"B": 2}, False),
        ("0.5 A + 1.5 B => C", {"A": 0.5, "B": 1.5}, {"C": 1}, False),
        ("A + B + M <=> C + M", {"A": 1, "B": 1, "M": 1}, {"C": 1, "M": 1}, True),
        ("A (+M) <=> B (+M)", {"A": 1, "(+M)": -1}, {"B": 1, "(+M)": -1}, True),
        ("A (+ M) <=> B (+ M)", {"A": 1, "(+M)": -1}, {"B": 1, "(+M)": -1}, True),
        ("A (+AR) => B (+AR)", {"A": 1, "(+AR)": -1}, {"B": 1, "(+AR)": -1}, False),
    ],
)
def test__parse_equation(eq, rcts, prds, rev):
    """Test reac.parse_equation."""
    rcts_, prds_, rev_, valid = reac.parse_equation(eq)
    print(rcts_, prds_)
    assert rcts_ == rcts
    assert prds_ == prds
    assert rev_ == rev
    assert valid


@pytest.mark.parametrize(
    "eq, valid",
    [
        ("H + O2 <=> O + OH", True),
        ("H + O + M <=> OH + M", True),
        ("H + O2 (+M) <=> HO2 (+M)", True),
        ("H + XYZ <=> O + OH", False),
    ],
)
def test__parse_equation__valid(eq, valid):
    """Test reac.parse_equation against a kinetics context."""
    *_, valid_ = reac.parse_equation(eq, kin=KIN)
    assert valid_ == valid


@pytest.mark.parametrize(
    "eq, match",
    [
        ("A + + B <=> C", "Current token: '\\+'"),
        ("A B C <=> D", "last_used: 'n/a'"),
        ("2x A <=> B", "Invalid stoichiometric coefficient '2x'"),
    ],
)
def test__parse_equation__error(eq, match):
    """Test reac.parse_equation errors."""
    with pytest.raises(StructuralParseError, match=match):
        reac.parse_equation(eq)


@pytest.mark.parametrize(
    "eq, eq_",
    [
        ("A + B <=> C", "A + B <=> C"),
        ("A + B = C", "A + B <=> C"),
        ("2 A => B + B", "2 A => 2 B"),
        ("A   +   0.5 B  =>  C", "A + 0.5 B => C"),
    ],
)
def test__equation(eq, eq_):
    """Test reac.equation."""
    rcts, prds, rev, _ = reac.parse_equation(eq)
    rxn = reac.from_data(rcts, prds, reversible=rev)
    print(reac.equation(rxn))
    assert reac.equation(rxn) == eq_

    # Re-parsing the equation gives the same reaction
    rcts_, prds_, rev_, _ = reac.parse_equation(reac.equation(rxn))
    assert (rcts_, prds_, rev_) == (rcts, prds, rev)


def test__three_body():
    """Test three-body reactions with a generic collider."""
    desc = {
        "equation": "H + O + M <=> OH + M",
        "type": "three-body",
        "rate-constant": ARRH,
        "efficiencies": {"AR": 0.7, "H2O": 12.0},
    }
    rxn = reac.from_description(desc, kin=KIN, type_="three-body")
    assert rxn.variant == reac.Variant.THREE_BODY
    assert rxn.reactants == {"H": 1, "O": 1}
    assert rxn.products == {"OH": 1}
    assert rxn.third_body.default_efficiency == 1.0
    assert not rxn.third_body.specified_collision_partner
    assert rxn.third_body.mass_action
    assert rxn.third_body.efficiency("AR") == 0.7
    assert rxn.third_body.efficiency("N2") == 1.0
    assert reac.equation(rxn) == "H + O + M <=> OH + M"
    assert reac.type_name(rxn) == "three-body"


@pytest.mark.parametrize(
    "eq, partner, rcts, prds",
    [
        ("H + O + AR <=> OH + AR", "AR", {"H": 1, "O": 1}, {"OH": 1}),
        ("2 H + 2 O2 <=> H2 + 2 O2", "O2", {"H": 2, "O2": 1}, {"H2": 1, "O2": 1}),
    ],
)
def test__three_body__collision_partner(eq, partner, rcts, prds):
    """Test three-body reactions with an explicit collision partner."""
    desc = {"equation": eq, "rate-constant": ARRH}
    rxn = reac.from_description(desc, kin=KIN, type_="three-body")
    tb = rxn.third_body
    assert tb.specified_collision_partner
    assert tb.default_efficiency == 0.0
    assert tb.efficiencies == {partner: 1.0}
    assert rxn.reactants == rcts
    assert rxn.products == prds
    assert reac.equation(rxn).endswith(f" + {partner}")


@pytest.mark.parametrize(
    "eq, match",
    [
        ("H + O <=> OH", "does not contain third body 'M'"),
        ("H + O + M <=> OH", "does not contain third body 'M'"),
        ("H + AR + N2 <=> H + AR + N2", "more than one"),
    ],
)
def test__three_body__error(eq, match):
    """Test three-body reaction errors."""
    desc = {"equation": eq, "rate-constant": ARRH}
    with pytest.raises(TypeResolutionError, match=match):
        reac.from_description(desc, kin=KIN, type_="three-body")


@pytest.mark.parametrize(
    "eq, partner",
    [
        ("H + O2 (+M) <=> HO2 (+M)", None),
        ("H + O2 (+ M) <=> HO2 (+ M)", None),
        ("H + O2 (+AR) <=> HO2 (+AR)", "AR"),
    ],
)
def test__falloff(eq, partner):
    """Test falloff reactions."""
    desc = {
        "equation": eq,
        "type": "falloff",
        "low-P-rate-constant": {"A": 6.366e20, "b": -1.72, "Ea": 2.2e6},
        "high-P-rate-constant": {"A": 4.65e12, "b": 0.44, "Ea": 0.0},
        "Troe": {"A": 0.5, "T3": 1.0e-30, "T1": 1.0e30},
    }
    rxn = reac.from_description(desc, kin=KIN, type_="falloff")
    tb = rxn.third_body
    assert rxn.variant == reac.Variant.FALLOFF
    assert rxn.reactants == {"H": 1, "O2": 1}
    assert rxn.products == {"HO2": 1}
    assert rate.is_falloff(rxn.rate)
    assert not tb.mass_action
    if partner is None:
        assert not tb.specified_collision_partner
        assert reac.equation(rxn) == "H + O2 (+M) <=> HO2 (+M)"
    else:
        assert tb.specified_collision_partner
        assert tb.default_efficiency == 0.0
        assert tb.efficiencies == {partner: 1.0}
        assert reac.equation(rxn) == f"H + O2 (+{partner}) <=> HO2 (+{partner})"


@pytest.mark.parametrize(
    "eq, match",
    [
        ("H + O2 <=> HO2", "do not contain a pressure-dependent third body"),
        ("H + O2 <=> HO2 (+M)", "do not contain a pressure-dependent third body"),
        ("H + O2 (+M) <=> HO2", "Unable to match third body 'M'"),
        ("H + O2 (+M) <=> HO2 (+AR)", "Unable to match third body 'M'"),
    ],
)
def test__falloff__error(eq, match):
    """Test falloff reaction errors."""
    desc = {"equation": eq, "type": "falloff"}
    with pytest.raises(TypeResolutionError, match=match):
        reac.from_description(desc, kin=KIN, type_="falloff")


def test__set_rate__chebyshev():
    """Test removal of the deprecated "(+M)" for Chebyshev reactions."""
    desc = {
        "equation": "CH3 + H (+M) <=> CH4 (+M)",
        "type": "Chebyshev",
        "temperature-range": [290.0, 3000.0],
        "pressure-range": [0.01, 100.0],
        "data": [[8.2, -0.8], [0.1, 0.2]],
    }
    with pytest.warns(DeprecatedNotationWarning):
        rxn = reac.from_description(desc, kin=KIN, type_="Chebyshev")
    assert rxn.reactants == {"CH3": 1, "H": 1}
    assert rxn.products == {"CH4": 1}
    assert reac.equation(rxn) == "CH3 + H <=> CH4"

    # The input equation is kept when serializing with the input
    assert reac.parameters(rxn)["equation"] == "CH3 + H (+M) <=> CH4 (+M)"
    assert reac.parameters(rxn, with_input=False)["equation"] == "CH3 + H <=> CH4"


def test__set_rate__plog():
    """Test rejection of "M" for P-Log reactions."""
    desc = {
        "equation": "H + O2 + M <=> HO2 + M",
        "type": "pressure-dependent-Arrhenius",
        "rate-constants": [{"P": 1.0e5, **ARRH}],
    }
    with pytest.raises(UnsupportedCombinationError, match="superfluous 'M'"):
        reac.from_description(desc, kin=KIN, type_="pressure-dependent-Arrhenius")


def test__parameters():
    """Test reac.parameters."""
    desc = {
        "equation": "2 H2 +  O2  =>  2 H2O",
        "rate-constant": ARRH,
        "orders": {"H2": 1.5},
        "duplicate": True,
        "note": "global step",
    }
    rxn = reac.from_description(desc, kin=KIN)
    params = reac.parameters(rxn)
    print(params)
    assert list(params)[0] == "equation"
    assert list(params)[-2:] == ["duplicate", "orders"]
    assert params["equation"] == "2 H2 +  O2  =>  2 H2O"
    assert params["rate-constant"] == ARRH
    assert params["note"] == "global step"
    assert "type" not in params
    params_ = reac.parameters(rxn, with_input=False)
    assert params_["equation"] == "2 H2 + O2 => 2 H2O"
    assert "note" not in params_

    # The input is not modified by serialization
    params["orders"]["H2"] = 2.0
    assert rxn.input.orders == {"H2": 1.5}


@pytest.mark.parametrize(
    "desc, type_, params",
    [
        (
            {"equation": "H + O + M <=> OH + M", "rate-constant": ARRH},
            "three-body",
            {"type": "three-body", "efficiencies": {}},
        ),
        (
            {"equation": "H + O + AR <=> OH + AR", "rate-constant": ARRH},
            "three-body",
            {},
        ),
        (
            {
                "equation": "H + O2 (+M) <=> HO2 (+M)",
                "efficiencies": {"AR": 0.5},
                "default-efficiency": 0.8,
            },
            "falloff",
            {"type": "falloff", "efficiencies": {"AR": 0.5}, "default-efficiency": 0.8},
        ),
        (
            {"equation": "H + O2 (+AR) <=> HO2 (+AR)"},
            "falloff",
            {"type": "falloff"},
        ),
    ],
)
def test__parameters__third_body(desc, type_, params):
    """Test reac.parameters for third-body reactions."""
    rxn = reac.from_description(desc, kin=KIN, type_=type_)
    params_ = reac.parameters(rxn, with_input=False)
    print(params_)
    for key in ("type", "efficiencies", "default-efficiency"):
        assert params_.get(key) == params.get(key), key


def test__custom():
    """Test reactions with a custom rate function."""
    desc = {"equation": "H + O2 => O + OH", "function": lambda t: 1.0e13 / t}
    rxn = reac.from_description(desc, kin=KIN, type_="custom-rate-function")
    assert rxn.variant == reac.Variant.CUSTOM
    assert rxn.third_body is None
    assert reac.type_name(rxn) == "custom-rate-function"
    assert reac.species(rxn) == ("H", "O2", "O", "OH")
    assert rxn.rate.func(1000.0) == pytest.approx(1.0e10)
    assert reac.parameters(rxn, with_input=False) == {
        "type": "custom-rate-function",
        "equation": "H + O2 => O + OH",
    }
