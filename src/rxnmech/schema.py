"""Schemas for reaction descriptions and species tables."""

import copy
from collections.abc import Mapping, Sequence
from typing import Any

import more_itertools as mit
import pandera.polars as pa
import polars
from pydantic import BaseModel, ConfigDict, Field

Model = pa.DataFrameModel


# Species table schema
class Species(Model):
    """Core species table.

    The `formula` column (not validated here) is a struct of element counts.
    """

    name: str = pa.Field(unique=True)
    charge: float
    size: float

    class Config:
        """Schema configuration."""

        coerce = True


FORMULA = "formula"


def species_table(
    names: Sequence[str],
    formulas: Sequence[Mapping[str, float]],
    charges: Sequence[float] | None = None,
    sizes: Sequence[float] | None = None,
) -> polars.DataFrame:
    """Build a validated species table.

    Element counts that are missing for a species are set to zero.

    :param names: The species names
    :param formulas: The elemental compositions, e.g. {"H": 2, "O": 1}
    :param charges: The species charges (default 0)
    :param sizes: The number of surface sites each species occupies (default 1)
    :return: The species table
    """
    nspc = len(names)
    assert len(formulas) == nspc, f"Mismatched formulas: {names} {formulas}"
    charges = [0.0] * nspc if charges is None else list(charges)
    sizes = [1.0] * nspc if sizes is None else list(sizes)

    elems = list(mit.unique_everseen(e for f in formulas for e in f))
    fmls = [{e: float(f.get(e, 0.0)) for e in elems} for f in formulas]
    data = {Species.name: list(names), Species.charge: charges, Species.size: sizes}
    if elems:
        data[FORMULA] = fmls

    return Species.validate(polars.DataFrame(data))


# Reaction description schema
class Description(BaseModel):
    """A structured reaction description, as loaded from an input file.

    Fields that are specific to the rate parametrization ("rate-constant",
    "low-P-rate-constant", "sticking-coefficient", ...) are retained as extra fields.
    """

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    equation: str
    type: str | None = None
    orders: dict[str, float] = Field(default_factory=dict)
    duplicate: bool = False
    negative_orders: bool = Field(False, alias="negative-orders")
    nonreactant_orders: bool = Field(False, alias="nonreactant-orders")
    id: str = ""
    efficiencies: dict[str, float] | None = None
    default_efficiency: float | None = Field(None, alias="default-efficiency")

    def has(self, key: str) -> bool:
        """Determine whether a key was given in the original description.

        :param key: The key, as spelled in the input
        :return: `True` if it was, `False` if it wasn't
        """
        return key in self.data()

    def get(self, key: str, default: Any = None) -> Any:
        """Get a value from the original description.

        :param key: The key, as spelled in the input
        :param default: The value to return if the key is absent
        :return: The value
        """
        return self.data().get(key, default)

    def data(self) -> dict[str, Any]:
        """Get the original description as a dictionary.

        :return: A copy of the input data, with the original key spellings
        """
        return copy.deepcopy(self.model_dump(by_alias=True, exclude_unset=True))


def description(data: "Mapping[str, Any] | Description") -> Description:
    """Get a reaction description object from data.

    :param data: The description data, or a description object
    :return: The description object
    """
    if isinstance(data, Description):
        return data
    return Description.model_validate(dict(data))


# Error data structure
class Errors(BaseModel):
    """Reactions dropped while loading a mechanism.

    :param excluded: Equations of reactions excluded for undeclared species
    :param invalid: Equations of reactions referencing unresolved species
    """

    excluded: list[str] = Field(default_factory=list)
    invalid: list[str] = Field(default_factory=list)

    def is_empty(self) -> bool:
        """Determine whether the errors object is empty.

        :return: `True` if it is, `False` if it isn't
        """
        return not self.excluded and not self.invalid
