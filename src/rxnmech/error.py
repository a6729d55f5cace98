"""Exceptions raised while building and validating reactions."""

from collections.abc import Mapping, Sequence


class ReactionError(ValueError):
    """Base class for reaction construction errors.

    :param message: A description of the problem
    :param equation: The equation of the offending reaction, if known
    :param context: The structured description the reaction was built from, if any
    """

    def __init__(
        self,
        message: str,
        equation: str | None = None,
        context: Mapping[str, object] | None = None,
    ):
        self.message = message
        self.equation = equation
        self.context = None if context is None else dict(context)
        super().__init__(message)

    def __str__(self):
        lines = [self.message]
        if self.equation is not None and self.equation not in self.message:
            lines.append(f"Reaction: {self.equation}")
        if self.context:
            ctx_str = ", ".join(f"{k}: {v!r}" for k, v in self.context.items())
            lines.append(f"Input: {{{ctx_str}}}")
        return "\n".join(lines)


class StructuralParseError(ReactionError):
    """The reaction equation does not follow the equation grammar."""


class ConfigurationError(ReactionError):
    """The reaction violates a structural invariant (orders, reversibility, ...)."""


class UndeclaredSpeciesError(ReactionError):
    """The reaction references species that are not declared.

    :param species: The undeclared species names
    """

    def __init__(
        self,
        message: str,
        species: Sequence[str] = (),
        equation: str | None = None,
        context: Mapping[str, object] | None = None,
    ):
        self.species = list(species)
        super().__init__(message, equation=equation, context=context)


class BalanceError(ReactionError):
    """The reaction is not balanced in elements or surface sites.

    :param imbalance: Rows of (element, reactant sum, product sum); for site
        imbalances, a single ("sites", reactant sites, product sites) row
    """

    def __init__(
        self,
        message: str,
        imbalance: Sequence[tuple[str, float, float]] = (),
        equation: str | None = None,
        context: Mapping[str, object] | None = None,
    ):
        self.imbalance = list(imbalance)
        super().__init__(message, equation=equation, context=context)


class TypeResolutionError(ReactionError):
    """The reaction type is unknown or does not match the equation structure."""


class UnsupportedCombinationError(ReactionError):
    """The equation notation cannot be combined with the reaction rate."""


class DeprecatedNotationWarning(DeprecationWarning):
    """Deprecated equation notation was found and corrected."""
