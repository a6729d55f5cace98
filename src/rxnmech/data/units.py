"""Unit stacks for rate coefficients.

A unit stack keeps the factors of a composite unit separate, so that the standard
concentration unit of the reacting phase can still be adjusted after the other factors
have been added (for example, to account for a third-body collision partner).
"""

import dataclasses

import pint

U = pint.UnitRegistry()

UnitLike = str | pint.Unit


def unit(unit_: UnitLike) -> pint.Unit:
    """Get a pint unit from a unit or unit string.

    :param unit_: The unit, or a string to parse into one
    :return: The unit
    """
    return unit_ if isinstance(unit_, pint.Unit) else U.Unit(unit_)


@dataclasses.dataclass
class UnitStack:
    """A product of units raised to exponents.

    The first entry holds the standard units, which start out with an exponent of 0.

    :param stack: Pairs of units and their exponents
    """

    stack: list[tuple[pint.Unit, float]] = dataclasses.field(default_factory=list)

    def __post_init__(self):
        """Initialize attributes."""
        self.stack = [(unit(u), float(e)) for u, e in self.stack]

    def __str__(self):
        if self.is_empty:
            return "<undetermined>"
        return f"{self.product():~}"

    @classmethod
    def from_standard_units(cls, units: UnitLike) -> "UnitStack":
        """Start a new unit stack from the standard units.

        :param units: The standard units
        :return: The unit stack
        """
        return cls(stack=[(units, 0.0)])

    @property
    def is_empty(self) -> bool:
        """Whether the units are undetermined."""
        return not self.stack

    @property
    def standard_exponent(self) -> float:
        """The exponent applied to the standard units."""
        assert not self.is_empty, "Empty unit stack has no standard units"
        return self.stack[0][1]

    def standard_units(self) -> pint.Unit:
        """Get the standard units.

        :return: The standard units
        """
        assert not self.is_empty, "Empty unit stack has no standard units"
        return self.stack[0][0]

    def join(self, exponent: float):
        """Add to the exponent of the standard units.

        :param exponent: The exponent increment
        """
        units, exponent0 = self.stack[0]
        self.stack[0] = (units, exponent0 + exponent)

    def update(self, units: UnitLike, exponent: float):
        """Multiply the stack by units raised to an exponent.

        If the units are already on the stack, their exponent is incremented.

        :param units: The units
        :param exponent: The exponent
        """
        units = unit(units)
        for idx, (units0, exponent0) in enumerate(self.stack):
            if units0 == units:
                self.stack[idx] = (units0, exponent0 + exponent)
                return

        self.stack.append((units, float(exponent)))

    def product(self) -> pint.Unit:
        """Get the composite unit.

        :return: The product of all units on the stack
        """
        assert not self.is_empty, "Cannot evaluate undetermined units"
        prod = U.dimensionless
        for units, exponent in self.stack:
            if exponent:
                prod = prod * units**exponent
        return prod

    def factor(self, system: UnitLike) -> float:
        """Get the conversion factor for a quantity with these units.

        :param system: The units to convert to
        :return: The factor by which to multiply values in these units
        """
        return (1.0 * self.product()).m_as(unit(system))
