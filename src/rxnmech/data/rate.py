"""Rate dataclasses.

Every rate carries an explicit `RateType` tag, which is what reactions query to apply
rate-specific rules; rate objects are never told apart by class.
"""

import abc
import dataclasses
import enum
from collections.abc import Callable, Mapping, Sequence
from typing import Any

import numpy

from ..error import ConfigurationError
from .units import UnitStack

MatrixLike = Sequence[Sequence[float]] | numpy.ndarray


class RateType(str, enum.Enum):
    """The type of reaction rate (also used as the rate's "type" parameter)."""

    ARRHENIUS = "Arrhenius"
    FALLOFF = "falloff"
    ACTIVATED = "chemically-activated"
    PLOG = "pressure-dependent-Arrhenius"
    CHEB = "Chebyshev"
    CUSTOM = "custom-rate-function"
    INTERFACE = "interface-Arrhenius"
    STICKING = "sticking-Arrhenius"


class BlendType(str, enum.Enum):
    """The type of blending function for high and low-pressure rates."""

    LIND = "Lindemann"
    TROE = "Troe"


TROE_KEYS = ("A", "T3", "T1", "T2")


@dataclasses.dataclass
class ArrheniusFunction:
    """An Arrhenius function, k = A T^b exp(-E/RT).

    :param A: The pre-exponential factor
    :param b: The temperature exponent
    :param E: The activation energy
    """

    A: float = 1.0
    b: float = 0.0
    E: float = 0.0

    def __post_init__(self):
        """Initialize attributes."""
        self.A = float(self.A)
        self.b = float(self.b)
        self.E = float(self.E)


def arrhenius_function_from_data(
    data: Sequence[float] | Mapping[str, float] | ArrheniusFunction,
) -> ArrheniusFunction:
    """Build an Arrhenius function object from data.

    :param data: The Arrhenius parameters (A, b, Ea), as a sequence or as a mapping
        with keys "A", "b", and "Ea"
    :return: The Arrhenius function object
    """
    if isinstance(data, ArrheniusFunction):
        return ArrheniusFunction(*arrhenius_params(data))

    if isinstance(data, Mapping):
        return ArrheniusFunction(
            A=data.get("A", 1.0), b=data.get("b", 0.0), E=data.get("Ea", 0.0)
        )

    return ArrheniusFunction(*data)


def arrhenius_params(k: ArrheniusFunction) -> tuple[float, float, float]:
    """Get the parameters for an Arrhenius function.

    :param k: The Arrhenius function object
    :return: The parameters A, b, E
    """
    return (k.A, k.b, k.E)


def arrhenius_parameters(k: ArrheniusFunction) -> dict[str, float]:
    """Get the description parameters for an Arrhenius function.

    :param k: The Arrhenius function object
    :return: A dictionary with keys "A", "b", "Ea"
    """
    return {"A": k.A, "b": k.b, "Ea": k.E}


@dataclasses.dataclass
class BlendingFunction:
    """A blending function for high and low-pressure rates.

    Types:
        Lindemann   - coeffs: (None)
        Troe        - coeffs: A, T3, T1, (T2)

    :param type_: The type of parametrization
    :param coeffs: A list of coefficients for the parametrization
    """

    type_: BlendType = BlendType.LIND
    coeffs: list[float] | None = None

    def __post_init__(self):
        """Initialize attributes."""
        self.type_ = BlendType(self.type_)
        self.coeffs = None if self.coeffs is None else list(map(float, self.coeffs))


class Rate(abc.ABC):
    """Base class for reaction rates.

    :param units: The units of the rate coefficient, once known
    """

    units: UnitStack | None

    @property
    @abc.abstractmethod
    def type_(self) -> RateType:
        """The type of rate."""
        pass

    @abc.abstractmethod
    def parameters(self) -> dict[str, Any]:
        """Get the parameters of this rate, in the reaction description vocabulary.

        :return: The parameters, including the "type" tag
        """
        pass

    def check(self, equation: str):
        """Check that the rate parameters make sense for a reaction.

        :param equation: The reaction equation, for error messages
        """


@dataclasses.dataclass
class SimpleRate(Rate):
    """Arrhenius-based rate, with optional pressure dependence.

    Types:
        Arrhenius               - k: The rate coefficient
        falloff                 - k: The high-pressure rate coefficient
                                - k0: The low-pressure rate coefficient
                                - f: The blending function, F(T, P_r)
        chemically-activated    - (same as falloff)

    :param k: The (high-pressure limiting) Arrhenius function for the reaction
    :param k0: The low-pressure limiting Arrhenius function for the reaction
    :param f: Falloff function for blending the high- and low-pressure rates
    :param type_: The type of rate
    :param allow_negative_a: Allow negative pre-exponential factors?
    :param units: The units of the rate coefficient
    """

    k: ArrheniusFunction = dataclasses.field(default_factory=ArrheniusFunction)
    k0: ArrheniusFunction | None = None
    f: BlendingFunction | None = None
    type_: RateType = RateType.ARRHENIUS
    allow_negative_a: bool = False
    units: UnitStack | None = None

    def __post_init__(self):
        """Initialize attributes."""
        self.k = arrhenius_function_from_data(self.k)
        self.k0 = None if self.k0 is None else arrhenius_function_from_data(self.k0)
        self.type_ = RateType(self.type_)
        assert self.type_ in (
            RateType.ARRHENIUS,
            RateType.FALLOFF,
            RateType.ACTIVATED,
        ), f"Not a simple rate type: {self.type_}"

        if self.type_ == RateType.ARRHENIUS:
            assert self.f is None, f"f={self.f} requires P-dependent rate type"
            assert self.k0 is None, f"k0={self.k0} requires P-dependent rate type"
        else:
            self.f = BlendingFunction() if self.f is None else self.f

    def parameters(self) -> dict[str, Any]:
        """Get the parameters of this rate.

        :return: The parameters
        """
        if self.type_ == RateType.ARRHENIUS:
            params = {"rate-constant": arrhenius_parameters(self.k)}
        else:
            params = {
                "low-P-rate-constant": arrhenius_parameters(self.k0),
                "high-P-rate-constant": arrhenius_parameters(self.k),
            }
            if self.f.type_ == BlendType.TROE:
                params["Troe"] = dict(zip(TROE_KEYS, self.f.coeffs, strict=False))

        if self.allow_negative_a:
            params["negative-A"] = True

        return {"type": self.type_.value, **params}

    def check(self, equation: str):
        """Check that the rate parameters make sense for a reaction.

        :param equation: The reaction equation, for error messages
        """
        ks = [self.k] if self.k0 is None else [self.k0, self.k]
        if not self.allow_negative_a and any(k.A < 0 for k in ks):
            raise ConfigurationError(
                f"Undeclared negative pre-exponential factor found in reaction "
                f"'{equation}'",
                equation=equation,
            )

        if self.type_ != RateType.ARRHENIUS and self.k0.A * self.k.A < 0:
            raise ConfigurationError(
                f"Inconsistent signs of high- and low-pressure pre-exponential factors "
                f"in reaction '{equation}'",
                equation=equation,
            )

        if self.f is not None and self.f.type_ == BlendType.TROE:
            ncoeffs = len(self.f.coeffs or ())
            if ncoeffs not in (3, 4):
                raise ConfigurationError(
                    f"Troe blending function requires 3 or 4 coefficients, got "
                    f"{ncoeffs}, in reaction '{equation}'",
                    equation=equation,
                )


@dataclasses.dataclass
class PlogRate(Rate):
    """P-Log reaction rate, k(T,P) interpolated between pressures.

    :param ks: Rate coefficients at specific pressures, k_P1, k_P2, ...
    :param ps: An array of pressures, P1, P2, ... [Pa]
    :param units: The units of the rate coefficient
    """

    ks: tuple[ArrheniusFunction, ...]
    ps: tuple[float, ...]
    units: UnitStack | None = None

    def __post_init__(self):
        """Initialize attributes."""
        self.ks = tuple(map(arrhenius_function_from_data, self.ks))
        self.ps = tuple(map(float, self.ps))
        assert len(self.ks) == len(self.ps), f"Mismatch: {self.ks} {self.ps}"

    @property
    def type_(self) -> RateType:
        """The type of rate."""
        return RateType.PLOG

    def parameters(self) -> dict[str, Any]:
        """Get the parameters of this rate.

        :return: The parameters
        """
        rate_consts = [
            {"P": p, **arrhenius_parameters(k)}
            for p, k in zip(self.ps, self.ks, strict=True)
        ]
        return {"type": self.type_.value, "rate-constants": rate_consts}

    def check(self, equation: str):
        """Check that the rate parameters make sense for a reaction.

        Repeated pressures are allowed (their rates are summed), but they must not
        decrease.

        :param equation: The reaction equation, for error messages
        """
        if not self.ps:
            raise ConfigurationError(
                f"No rate constants given for P-Log reaction '{equation}'",
                equation=equation,
            )

        if any(p1 < p0 for p0, p1 in zip(self.ps, self.ps[1:], strict=False)):
            raise ConfigurationError(
                f"Pressures for P-Log reaction '{equation}' must be in increasing "
                f"order: {list(self.ps)}",
                equation=equation,
            )


@dataclasses.dataclass
class ChebRate(Rate):
    """Chebyshev reaction rate, k(T,P) parametrization.

    :param t_limits: The min/max temperature limits [K] for the Chebyshev fit
    :param p_limits: The min/max pressure limits [Pa] for the Chebyshev fit
    :param coeffs: The Chebyshev expansion coefficients
    :param units: The units of the rate coefficient
    """

    t_limits: tuple[float, float]
    p_limits: tuple[float, float]
    coeffs: MatrixLike
    units: UnitStack | None = None

    def __post_init__(self):
        """Initialize attributes."""
        self.t_limits = tuple(map(float, self.t_limits))
        self.p_limits = tuple(map(float, self.p_limits))
        self.coeffs = numpy.array(self.coeffs, dtype=float)
        assert numpy.ndim(self.coeffs) == 2, f"Must be 2-dimensional: {self.coeffs}"

    @property
    def type_(self) -> RateType:
        """The type of rate."""
        return RateType.CHEB

    def parameters(self) -> dict[str, Any]:
        """Get the parameters of this rate.

        :return: The parameters
        """
        return {
            "type": self.type_.value,
            "temperature-range": list(self.t_limits),
            "pressure-range": list(self.p_limits),
            "data": self.coeffs.tolist(),
        }

    def check(self, equation: str):
        """Check that the rate parameters make sense for a reaction.

        :param equation: The reaction equation, for error messages
        """
        limits = {"temperature": self.t_limits, "pressure": self.p_limits}
        for name, (lo, hi) in limits.items():
            if not lo < hi:
                raise ConfigurationError(
                    f"Invalid {name} range ({lo}, {hi}) for Chebyshev reaction "
                    f"'{equation}'",
                    equation=equation,
                )


@dataclasses.dataclass
class InterfaceRate(Rate):
    """Surface rate, given as a rate constant or as a sticking coefficient.

    :param k: The Arrhenius function for the rate constant or sticking coefficient
    :param sticking: Whether this is a sticking coefficient
    :param sticking_species: The sticking species, if it must be specified
    :param units: The units of the rate coefficient
    """

    k: ArrheniusFunction = dataclasses.field(default_factory=ArrheniusFunction)
    sticking: bool = False
    sticking_species: str | None = None
    units: UnitStack | None = None

    def __post_init__(self):
        """Initialize attributes."""
        self.k = arrhenius_function_from_data(self.k)

    @property
    def type_(self) -> RateType:
        """The type of rate."""
        return RateType.STICKING if self.sticking else RateType.INTERFACE

    def parameters(self) -> dict[str, Any]:
        """Get the parameters of this rate.

        :return: The parameters
        """
        key = "sticking-coefficient" if self.sticking else "rate-constant"
        params = {"type": self.type_.value, key: arrhenius_parameters(self.k)}
        if self.sticking_species is not None:
            params["sticking-species"] = self.sticking_species
        return params

    def check(self, equation: str):
        """Check that the rate parameters make sense for a reaction.

        :param equation: The reaction equation, for error messages
        """
        if self.sticking and self.k.A < 0:
            raise ConfigurationError(
                f"Negative sticking coefficient found in reaction '{equation}'",
                equation=equation,
            )


@dataclasses.dataclass
class CustomRate(Rate):
    """Rate given by an arbitrary function of temperature.

    :param func: The rate function, k(T)
    :param units: The units of the rate coefficient
    """

    func: Callable[[float], float] | None = None
    units: UnitStack | None = None

    @property
    def type_(self) -> RateType:
        """The type of rate."""
        return RateType.CUSTOM

    def parameters(self) -> dict[str, Any]:
        """Get the parameters of this rate.

        :return: The parameters
        """
        return {"type": self.type_.value}

    def check(self, equation: str):
        """Check that the rate parameters make sense for a reaction.

        :param equation: The reaction equation, for error messages
        """
        if self.func is None:
            raise ConfigurationError(
                f"No rate function given for reaction '{equation}'",
                equation=equation,
            )

        if not callable(self.func):
            raise ConfigurationError(
                f"Rate function for reaction '{equation}' is not callable: {self.func}",
                equation=equation,
            )


# constructors
def from_data(
    type_: str | RateType,
    data: Mapping[str, Any],
    units: UnitStack | None = None,
) -> Rate:
    """Build a rate object from reaction description data.

    :param type_: The type of rate
    :param data: The reaction description data
    :param units: The units of the rate coefficient
    :return: The rate object
    """
    type_ = RateType(type_)
    neg_a = bool(data.get("negative-A", False))

    if type_ == RateType.ARRHENIUS:
        k = data.get("rate-constant", {})
        return SimpleRate(k=k, type_=type_, allow_negative_a=neg_a, units=units)

    if type_ in (RateType.FALLOFF, RateType.ACTIVATED):
        f = None
        if "Troe" in data:
            troe = data["Troe"]
            coeffs = [troe[k] for k in TROE_KEYS if k in troe]
            f = BlendingFunction(type_=BlendType.TROE, coeffs=coeffs)
        return SimpleRate(
            k=data.get("high-P-rate-constant", {}),
            k0=data.get("low-P-rate-constant", {}),
            f=f,
            type_=type_,
            allow_negative_a=neg_a,
            units=units,
        )

    if type_ == RateType.PLOG:
        rate_consts = data.get("rate-constants", [])
        ps = [r["P"] for r in rate_consts]
        return PlogRate(ks=rate_consts, ps=ps, units=units)

    if type_ == RateType.CHEB:
        return ChebRate(
            t_limits=data.get("temperature-range", (290.0, 3000.0)),
            p_limits=data.get("pressure-range", (0.01, 100.0)),
            coeffs=data.get("data", [[0.0]]),
            units=units,
        )

    if type_ in (RateType.INTERFACE, RateType.STICKING):
        sticking = type_ == RateType.STICKING
        key = "sticking-coefficient" if sticking else "rate-constant"
        return InterfaceRate(
            k=data.get(key, {}),
            sticking=sticking,
            sticking_species=data.get("sticking-species"),
            units=units,
        )

    assert type_ == RateType.CUSTOM, f"Unhandled rate type: {type_}"
    return CustomRate(func=data.get("function"), units=units)


# getters
def type_(rate: Rate) -> RateType:
    """Get the type of rate.

    :param rate: The rate object
    :return: The type of rate
    """
    return rate.type_


def units(rate: Rate) -> UnitStack | None:
    """Get the units of the rate coefficient.

    :param rate: The rate object
    :return: The units
    """
    return rate.units


# properties
def is_falloff(rate: Rate | None) -> bool:
    """Whether this is a falloff or chemically-activated rate.

    :param rate: The rate object
    :return: `True` if it is, `False` if it isn't
    """
    return rate is not None and type_(rate) in (RateType.FALLOFF, RateType.ACTIVATED)


def is_plog(rate: Rate | None) -> bool:
    """Whether this is a P-Log rate.

    :param rate: The rate object
    :return: `True` if it is, `False` if it isn't
    """
    return rate is not None and type_(rate) == RateType.PLOG


def is_chebyshev(rate: Rate | None) -> bool:
    """Whether this is a Chebyshev rate.

    :param rate: The rate object
    :return: `True` if it is, `False` if it isn't
    """
    return rate is not None and type_(rate) == RateType.CHEB


def is_interface(rate: Rate | None) -> bool:
    """Whether this is a surface rate (rate constant or sticking coefficient).

    :param rate: The rate object
    :return: `True` if it is, `False` if it isn't
    """
    return rate is not None and type_(rate) in (RateType.INTERFACE, RateType.STICKING)
