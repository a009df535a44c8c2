from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Iterable, Optional, Tuple, Union

import sympy as sp


# Independent variable used when a system does not name its own.
DEFAULT_IV = sp.Symbol("t", positive=True)


class SpeciesSymbol(sp.Symbol):
    """A SymPy symbol standing for the amount of a species.

    Keeping species in their own ``Symbol`` subclass lets rate expressions be
    inspected for species references: ``SpeciesSymbol("X") != Symbol("X")``.
    """

    __slots__ = ()


def _check_name(name: Any, kind: str) -> str:
    if not isinstance(name, str) or not name.strip():
        raise ValueError(f"{kind} name must be a non-empty string; got {name!r}")
    if any(ch.isspace() for ch in name):
        raise ValueError(f"{kind} name may not contain whitespace; got {name!r}")
    return name


@dataclass(frozen=True)
class Species:
    """A time-varying quantity (concentration or count) of a reaction network.

    Parameters
    ----------
    name:
        Identifier, unique within a system's namespace.
    default:
        Optional default initial value.
    """

    name: str
    default: Optional[Any] = None

    def __post_init__(self) -> None:
        _check_name(self.name, "species")

    @property
    def symbol(self) -> SpeciesSymbol:
        """The SymPy symbol used for this species in rate expressions."""
        return SpeciesSymbol(self.name, real=True)

    def _sympy_(self) -> SpeciesSymbol:
        return self.symbol

    def renamed(self, name: str) -> "Species":
        return replace(self, name=name)

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Parameter:
    """A named symbolic constant (typically a rate constant)."""

    name: str
    default: Optional[Any] = None

    def __post_init__(self) -> None:
        _check_name(self.name, "parameter")

    @property
    def symbol(self) -> sp.Symbol:
        """The SymPy symbol for this parameter (assumed positive)."""
        return sp.Symbol(self.name, positive=True)

    def _sympy_(self) -> sp.Symbol:
        return self.symbol

    def renamed(self, name: str) -> "Parameter":
        return replace(self, name=name)

    def __str__(self) -> str:
        return self.name


SpeciesLike = Union[Species, SpeciesSymbol, str]
ParameterLike = Union[Parameter, sp.Symbol, str]


def _split_names(names: Union[str, Iterable[str]]) -> Tuple[str, ...]:
    if isinstance(names, str):
        names = names.replace(",", " ").split()
    out = tuple(names)
    if not out:
        raise ValueError("at least one name is required")
    return out


def species(names: Union[str, Iterable[str]]) -> Tuple[Species, ...]:
    """Create a tuple of :class:`Species` from ``"A B C"`` or ``["A", "B", "C"]``.

    The return value is always a tuple, so a single species is unpacked with
    ``x, = species("X")``.
    """
    return tuple(Species(name) for name in _split_names(names))


def parameters(names: Union[str, Iterable[str]]) -> Tuple[Parameter, ...]:
    """Create a tuple of :class:`Parameter` from a whitespace-separated string."""
    return tuple(Parameter(name) for name in _split_names(names))


def as_species(obj: SpeciesLike) -> Species:
    """Coerce a species, a species symbol or a name into a :class:`Species`."""
    if isinstance(obj, Species):
        return obj
    if isinstance(obj, SpeciesSymbol):
        return Species(obj.name)
    if isinstance(obj, str):
        return Species(obj)
    raise TypeError(f"expected a Species, SpeciesSymbol or name; got {type(obj).__name__}")


def as_parameter(obj: ParameterLike) -> Parameter:
    """Coerce a parameter, a (non-species) symbol or a name into a :class:`Parameter`."""
    if isinstance(obj, Parameter):
        return obj
    if isinstance(obj, SpeciesSymbol):
        raise TypeError(f"{obj} is a species symbol, not a parameter")
    if isinstance(obj, sp.Symbol):
        return Parameter(obj.name)
    if isinstance(obj, str):
        return Parameter(obj)
    raise TypeError(f"expected a Parameter, Symbol or name; got {type(obj).__name__}")


def species_symbols(expr: sp.Basic) -> set:
    """Species symbols appearing in a SymPy expression."""
    return {s for s in expr.free_symbols if isinstance(s, SpeciesSymbol)}


def parameter_symbols(expr: sp.Basic, iv: Optional[sp.Symbol] = None) -> set:
    """Non-species symbols appearing in ``expr`` (excluding the independent variable)."""
    out = set()
    for s in expr.free_symbols:
        if isinstance(s, SpeciesSymbol):
            continue
        if iv is not None and s.name == iv.name:
            continue
        out.add(s)
    return out
