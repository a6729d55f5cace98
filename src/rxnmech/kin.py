"""Phases and the kinetics context that reactions are resolved against.

These provide the species information that reaction validation needs: species
existence, elemental composition, charge, surface site size, and the standard
concentration units of each phase.
"""

import dataclasses
from collections.abc import Sequence

import polars
import pint

from . import schema
from .data.units import UnitLike, unit
from .schema import Species

STANDARD_CONCENTRATION_UNITS = {3: "kmol/m**3", 2: "kmol/m**2", 1: "kmol/m"}


@dataclasses.dataclass
class Phase:
    """A phase with a set of species.

    :param name: The phase name
    :param species: The species table (see `schema.species_table`)
    :param ndim: The dimensionality: 3 for bulk phases, 2 for surfaces, 1 for edges
    :param concentration_units: The standard concentration units, if not the default
        for the dimensionality
    """

    name: str
    species: polars.DataFrame
    ndim: int = 3
    concentration_units: UnitLike | None = None

    def __post_init__(self):
        """Initialize attributes."""
        assert self.ndim in STANDARD_CONCENTRATION_UNITS, f"Bad ndim: {self.ndim}"
        self.species = Species.validate(self.species)
        if self.concentration_units is None:
            self.concentration_units = STANDARD_CONCENTRATION_UNITS[self.ndim]
        self.concentration_units = unit(self.concentration_units)
        self._rows = {r[Species.name]: r for r in self.species.iter_rows(named=True)}

    @property
    def standard_concentration_units(self) -> pint.Unit:
        """The units of the standard concentration."""
        return self.concentration_units

    @property
    def species_names(self) -> tuple[str, ...]:
        """The names of the species in this phase."""
        return tuple(self.species[Species.name])

    @property
    def elements(self) -> tuple[str, ...]:
        """The elements of this phase."""
        if schema.FORMULA not in self.species:
            return ()
        return tuple(f.name for f in self.species.schema[schema.FORMULA].fields)

    def has_species(self, name: str) -> bool:
        """Determine whether a species is in this phase.

        :param name: The species name
        :return: `True` if it is, `False` if it isn't
        """
        return name in self._rows

    def composition(self, name: str) -> dict[str, float]:
        """Get the elemental composition of a species.

        :param name: The species name
        :return: A dictionary mapping each element of the phase onto its count
        """
        fml = self._rows[name].get(schema.FORMULA) or {}
        return {e: fml.get(e) or 0.0 for e in self.elements}

    def charge(self, name: str) -> float:
        """Get the charge of a species.

        :param name: The species name
        :return: The charge, in units of the elementary charge
        """
        return self._rows[name][Species.charge]

    def size(self, name: str) -> float:
        """Get the number of surface sites occupied by a species.

        :param name: The species name
        :return: The site size
        """
        return self._rows[name][Species.size]


@dataclasses.dataclass
class Kinetics:
    """The kinetics context that reactions are built in.

    :param phases: The phases participating in the reactions
    :param reaction_phase_index: The index of the phase the reactions occur in
    :param skip_undeclared_species: Skip reactions with undeclared species, rather
        than raising an error?
    :param skip_undeclared_third_bodies: Ignore undeclared third-body efficiencies,
        rather than raising an error?
    """

    phases: Sequence[Phase]
    reaction_phase_index: int = 0
    skip_undeclared_species: bool = False
    skip_undeclared_third_bodies: bool = False

    def __post_init__(self):
        """Initialize attributes."""
        self.phases = tuple(self.phases)
        assert self.phases, "Kinetics requires at least one phase"
        assert 0 <= self.reaction_phase_index < len(self.phases), (
            f"Bad reaction phase index {self.reaction_phase_index}"
        )
        self._phase_idx_dct = {}
        for idx, phase in enumerate(self.phases):
            for name in phase.species_names:
                self._phase_idx_dct.setdefault(name, idx)

    @property
    def reaction_phase(self) -> Phase:
        """The phase the reactions occur in."""
        return self.phases[self.reaction_phase_index]

    @property
    def surface_phase(self) -> Phase | None:
        """The first surface phase, if there is one."""
        return next((p for p in self.phases if p.ndim == 2), None)

    @property
    def species_names(self) -> tuple[str, ...]:
        """The names of all species, in phase order."""
        return tuple(self._phase_idx_dct)

    def has_species(self, name: str) -> bool:
        """Determine whether a species is declared in any phase.

        :param name: The species name
        :return: `True` if it is, `False` if it isn't
        """
        return name in self._phase_idx_dct

    def species_phase_index(self, name: str) -> int:
        """Get the index of the phase that contains a species.

        :param name: The species name
        :return: The phase index
        """
        return self._phase_idx_dct[name]

    def species_phase(self, name: str) -> Phase:
        """Get the phase that contains a species.

        :param name: The species name
        :return: The phase
        """
        return self.phases[self.species_phase_index(name)]


def from_species(
    names: Sequence[str],
    formulas: Sequence[dict[str, float]],
    charges: Sequence[float] | None = None,
    skip_undeclared_species: bool = False,
    skip_undeclared_third_bodies: bool = False,
) -> Kinetics:
    """Build a single-phase gas kinetics context from species data.

    :param names: The species names
    :param formulas: The elemental compositions of the species
    :param charges: The species charges
    :param skip_undeclared_species: Skip reactions with undeclared species?
    :param skip_undeclared_third_bodies: Ignore undeclared third-body efficiencies?
    :return: The kinetics context
    """
    spc_df = schema.species_table(names, formulas, charges=charges)
    return Kinetics(
        phases=[Phase(name="gas", species=spc_df)],
        skip_undeclared_species=skip_undeclared_species,
        skip_undeclared_third_bodies=skip_undeclared_third_bodies,
    )
