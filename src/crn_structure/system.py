from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

import sympy as sp

from .errors import DuplicateNameError, InvalidReactionError, NameConflictError, RoleConflictError
from .reaction import Reaction
from .species import (
    DEFAULT_IV,
    Parameter,
    ParameterLike,
    Species,
    SpeciesLike,
    SpeciesSymbol,
    as_parameter,
    as_species,
    parameter_symbols,
    species_symbols,
)
from .stoichiometry import netstoich_matrix, prodstoich_matrix, substoich_matrix


logger = logging.getLogger(__name__)

DUPLICATE_POLICIES = ("ignore", "error")


@dataclass(frozen=True)
class SystemOptions:
    """Per-system configuration.

    Parameters
    ----------
    combinatoric_ratelaws:
        Divide mass-action ODE rate laws by ``prod n_i!`` (see
        :mod:`crn_structure.ratelaws`). Jump propensities are unaffected.
    duplicate_policy:
        What re-adding an identical species or parameter does: ``"ignore"``
        makes it a no-op, ``"error"`` raises :class:`DuplicateNameError`.
    namespace_separator:
        Joins subsystem and entity names when flattening.
    """

    combinatoric_ratelaws: bool = True
    duplicate_policy: str = "ignore"
    namespace_separator: str = "."

    def __post_init__(self) -> None:
        if self.duplicate_policy not in DUPLICATE_POLICIES:
            raise ValueError(
                f"duplicate_policy must be one of {DUPLICATE_POLICIES}; got {self.duplicate_policy!r}"
            )
        if not isinstance(self.namespace_separator, str) or not self.namespace_separator:
            raise ValueError("namespace_separator must be a non-empty string")


def _as_iv(iv: Union[None, str, sp.Symbol]) -> sp.Symbol:
    if iv is None:
        return DEFAULT_IV
    if isinstance(iv, str):
        return sp.Symbol(iv, positive=True)
    if isinstance(iv, sp.Symbol) and not isinstance(iv, SpeciesSymbol):
        return sp.Symbol(iv.name, positive=True)
    raise TypeError(f"independent variable must be a name or a Symbol; got {iv!r}")


class ReactionSystem:
    """A named reaction network: species, parameters, reactions and subsystems.

    Parameters
    ----------
    reactions:
        Initial reactions. Species and parameters they use are added
        automatically (species from the substrate/product lists and from rate
        expressions, parameters from the remaining symbols of the rates).
    iv:
        Independent variable (time); defaults to ``t``.
    species, parameters:
        Explicit entries, added before the reactions so their order and
        defaults take precedence.
    name:
        System name, used as a namespace when the system is a subsystem.
    systems:
        Child systems attached as by :func:`compose`.
    options:
        :class:`SystemOptions`.

    Notes
    -----
    The system is append-only. Derived values (stoichiometry matrices and
    everything computed by :class:`~crn_structure.analyzer.NetworkAnalyzer`)
    are memoized against :attr:`revision`, which every mutation increments.
    """

    def __init__(
        self,
        reactions: Iterable[Reaction] = (),
        iv: Union[None, str, sp.Symbol] = None,
        species: Iterable[SpeciesLike] = (),
        parameters: Iterable[ParameterLike] = (),
        *,
        name: str = "",
        systems: Iterable["ReactionSystem"] = (),
        options: Optional[SystemOptions] = None,
    ) -> None:
        if not isinstance(name, str):
            raise TypeError("name must be a string")
        self.name = name
        self._iv = _as_iv(iv)
        self._options = options if options is not None else SystemOptions()
        self._species: List[Species] = []
        self._parameters: List[Parameter] = []
        self._reactions: List[Reaction] = []
        self._systems: List[ReactionSystem] = []
        self._revision = 0
        self._cache: Dict[str, Tuple[int, Any]] = {}
        self._lock = threading.RLock()

        for s in species:
            self.add_species(s)
        for p in parameters:
            self.add_parameter(p)
        for rx in reactions:
            self.add_reaction(rx)
        for child in systems:
            self.add_system(child)

    # -----------------------------
    # Accessors
    # -----------------------------

    @property
    def iv(self) -> sp.Symbol:
        return self._iv

    @property
    def options(self) -> SystemOptions:
        return self._options

    @property
    def species(self) -> Tuple[Species, ...]:
        return tuple(self._species)

    @property
    def parameters(self) -> Tuple[Parameter, ...]:
        return tuple(self._parameters)

    @property
    def reactions(self) -> Tuple[Reaction, ...]:
        return tuple(self._reactions)

    @property
    def systems(self) -> Tuple["ReactionSystem", ...]:
        return tuple(self._systems)

    @property
    def num_species(self) -> int:
        return len(self._species)

    @property
    def num_parameters(self) -> int:
        return len(self._parameters)

    @property
    def num_reactions(self) -> int:
        return len(self._reactions)

    @property
    def species_names(self) -> List[str]:
        return [s.name for s in self._species]

    @property
    def parameter_names(self) -> List[str]:
        return [p.name for p in self._parameters]

    @property
    def species_symbols(self) -> Tuple[SpeciesSymbol, ...]:
        return tuple(s.symbol for s in self._species)

    @property
    def parameter_symbols(self) -> Tuple[sp.Symbol, ...]:
        return tuple(p.symbol for p in self._parameters)

    @property
    def species_index(self) -> Dict[str, int]:
        """Species name -> position in :attr:`species`."""
        return {s.name: i for i, s in enumerate(self._species)}

    @property
    def parameter_index(self) -> Dict[str, int]:
        """Parameter name -> position in :attr:`parameters`."""
        return {p.name: i for i, p in enumerate(self._parameters)}

    @property
    def revision(self) -> int:
        """Monotonic counter incremented by every mutating operation."""
        return self._revision

    def subsystem(self, name: str) -> "ReactionSystem":
        for child in self._systems:
            if child.name == name:
                return child
        raise KeyError(f"no subsystem named '{name}' in system '{self.name}'")

    def reaction_parameters(self, index: int) -> List[Parameter]:
        """Parameters referenced by the rate of reaction ``index``."""
        pidx = self.parameter_index
        syms = parameter_symbols(self._reactions[index].rate, self._iv)
        return [self._parameters[pidx[s.name]] for s in sorted(syms, key=lambda z: z.name)]

    def default_values(self) -> Dict[sp.Symbol, Any]:
        """Symbol -> default value for every species and parameter that has one."""
        out: Dict[sp.Symbol, Any] = {}
        for s in self._species:
            if s.default is not None:
                out[s.symbol] = s.default
        for p in self._parameters:
            if p.default is not None:
                out[p.symbol] = p.default
        return out

    def symbol_map(self, values: Mapping[Any, Any]) -> Dict[sp.Symbol, Any]:
        """Re-key ``values`` by this system's symbols.

        Keys may be names, :class:`Species`, :class:`Parameter` or SymPy
        symbols; unknown keys raise ``ValueError``.
        """
        sidx = self.species_index
        pidx = self.parameter_index
        out: Dict[sp.Symbol, Any] = {}
        for key, value in values.items():
            if isinstance(key, (Species, SpeciesSymbol)):
                if key.name not in sidx:
                    raise ValueError(f"unknown species '{key.name}'")
                out[self._species[sidx[key.name]].symbol] = value
            elif isinstance(key, (Parameter, sp.Symbol)):
                if key.name not in pidx:
                    raise ValueError(f"unknown parameter '{key.name}'")
                out[self._parameters[pidx[key.name]].symbol] = value
            elif isinstance(key, str):
                if key in sidx:
                    out[self._species[sidx[key]].symbol] = value
                elif key in pidx:
                    out[self._parameters[pidx[key]].symbol] = value
                else:
                    raise ValueError(f"unknown species or parameter '{key}'")
            else:
                raise ValueError(f"cannot interpret {key!r} as a species or parameter")
        return out

    # -----------------------------
    # Memoization
    # -----------------------------

    def memoize(self, key: str, compute: Callable[[], Any]) -> Any:
        """Return the cached value for ``key``, recomputing it if stale.

        A value is stale once :attr:`revision` has moved past the revision it
        was computed at. Exceptions raised by ``compute`` propagate and
        nothing is cached.
        """
        with self._lock:
            hit = self._cache.get(key)
            if hit is not None and hit[0] == self._revision:
                return hit[1]
            logger.debug("computing %s for system %r at revision %d", key, self.name, self._revision)
            value = compute()
            self._cache[key] = (self._revision, value)
            return value

    def reset_network_properties(self) -> None:
        """Drop every memoized value."""
        with self._lock:
            logger.debug("resetting cached properties of system %r", self.name)
            self._cache.clear()
            self._revision += 1

    def _touch(self) -> None:
        with self._lock:
            self._revision += 1
            self._cache.clear()

    # -----------------------------
    # Stoichiometry
    # -----------------------------

    def substoich_matrix(self) -> sp.ImmutableMatrix:
        """Substrate stoichiometry, species × reactions."""
        return self.memoize("substoich", lambda: substoich_matrix(self.species_names, self._reactions))

    def prodstoich_matrix(self) -> sp.ImmutableMatrix:
        """Product stoichiometry, species × reactions."""
        return self.memoize("prodstoich", lambda: prodstoich_matrix(self.species_names, self._reactions))

    def netstoich_matrix(self) -> sp.ImmutableMatrix:
        """Net stoichiometry (product minus substrate), species × reactions."""
        return self.memoize("netstoich", lambda: netstoich_matrix(self.species_names, self._reactions))

    # -----------------------------
    # Mutation
    # -----------------------------

    def add_species(self, s: SpeciesLike) -> int:
        """Append a species and return its index.

        Re-adding an identical species follows ``options.duplicate_policy``.
        """
        s = as_species(s)
        if s.name in self.parameter_index:
            raise RoleConflictError(f"'{s.name}' is already a parameter of system '{self.name}'")
        idx = self.species_index.get(s.name)
        if idx is not None:
            if self._species[idx] != s:
                raise DuplicateNameError(
                    f"species '{s.name}' is already defined differently in system '{self.name}'"
                )
            if self._options.duplicate_policy == "error":
                raise DuplicateNameError(f"species '{s.name}' is already in system '{self.name}'")
            return idx
        self._species.append(s)
        self._touch()
        return len(self._species) - 1

    def add_parameter(self, p: ParameterLike) -> int:
        """Append a parameter and return its index.

        Re-adding an identical parameter follows ``options.duplicate_policy``.
        """
        p = as_parameter(p)
        if p.name in self.species_index:
            raise RoleConflictError(f"'{p.name}' is already a species of system '{self.name}'")
        idx = self.parameter_index.get(p.name)
        if idx is not None:
            if self._parameters[idx] != p:
                raise DuplicateNameError(
                    f"parameter '{p.name}' is already defined differently in system '{self.name}'"
                )
            if self._options.duplicate_policy == "error":
                raise DuplicateNameError(f"parameter '{p.name}' is already in system '{self.name}'")
            return idx
        self._parameters.append(p)
        self._touch()
        return len(self._parameters) - 1

    def add_reaction(self, rx: Reaction) -> int:
        """Append a reaction, registering the species and parameters it uses.

        Returns the index of the new reaction. Raises
        :class:`RoleConflictError` (an :class:`InvalidReactionError` and a
        :class:`DuplicateNameError`) when a name would be both a species and a
        parameter; in that case the system is left unchanged.
        """
        if not isinstance(rx, Reaction):
            raise TypeError(f"expected a Reaction; got {type(rx).__name__}")

        sidx = self.species_index
        pidx = self.parameter_index

        new_species: Dict[str, Species] = {}
        for s in rx.species:
            if s.name in pidx:
                raise RoleConflictError(f"'{s.name}' is a parameter of system '{self.name}', not a species")
            if s.name in sidx:
                known = self._species[sidx[s.name]]
                if s.default is not None and s.default != known.default:
                    raise InvalidReactionError(
                        f"species '{s.name}' has default {s.default!r} here but {known.default!r} in the system"
                    )
            else:
                new_species.setdefault(s.name, s)
        for sym in sorted(species_symbols(rx.rate), key=lambda z: z.name):
            if sym.name in pidx:
                raise RoleConflictError(f"'{sym.name}' is a parameter of system '{self.name}', not a species")
            if sym.name not in sidx:
                new_species.setdefault(sym.name, Species(sym.name))

        new_params: Dict[str, Parameter] = {}
        for sym in sorted(parameter_symbols(rx.rate, self._iv), key=lambda z: z.name):
            if sym.name in sidx or sym.name in new_species:
                raise RoleConflictError(f"'{sym.name}' is used both as a species and as a parameter")
            if sym.name not in pidx:
                new_params[sym.name] = Parameter(sym.name)

        self._species.extend(new_species.values())
        self._parameters.extend(new_params.values())
        self._reactions.append(rx)
        self._touch()
        return len(self._reactions) - 1

    def add_system(self, child: "ReactionSystem") -> int:
        """Attach ``child`` (a copy of it) as a named subsystem; return its index."""
        if not isinstance(child, ReactionSystem):
            raise TypeError(f"expected a ReactionSystem; got {type(child).__name__}")
        if not child.name:
            raise NameConflictError("subsystems must have a non-empty name")
        if child is self:
            raise ValueError("a system cannot contain itself")
        if any(c.name == child.name for c in self._systems):
            raise NameConflictError(f"system '{self.name}' already has a subsystem named '{child.name}'")
        self._systems.append(child.copy())
        self._touch()
        return len(self._systems) - 1

    def merge(self, other: "ReactionSystem") -> "ReactionSystem":
        """Merge ``other``'s species, parameters, reactions and subsystems into this system.

        Entries already present are skipped; a name bound to incompatible
        definitions raises :class:`NameConflictError` and leaves this system
        unchanged. Returns ``self``.
        """
        if not isinstance(other, ReactionSystem):
            raise TypeError(f"expected a ReactionSystem; got {type(other).__name__}")
        if other._iv != self._iv:
            raise NameConflictError(
                f"cannot merge systems with independent variables {self._iv} and {other._iv}"
            )

        sidx = self.species_index
        pidx = self.parameter_index
        add_species: List[Species] = []
        for s in other._species:
            if s.name in pidx:
                raise NameConflictError(f"'{s.name}' is a parameter in '{self.name}' but a species in '{other.name}'")
            if s.name in sidx:
                if self._species[sidx[s.name]] != s:
                    raise NameConflictError(f"species '{s.name}' is defined differently in '{self.name}' and '{other.name}'")
            else:
                add_species.append(s)
        add_params: List[Parameter] = []
        for p in other._parameters:
            if p.name in sidx:
                raise NameConflictError(f"'{p.name}' is a species in '{self.name}' but a parameter in '{other.name}'")
            if p.name in pidx:
                if self._parameters[pidx[p.name]] != p:
                    raise NameConflictError(f"parameter '{p.name}' is defined differently in '{self.name}' and '{other.name}'")
            else:
                add_params.append(p)

        present = set(self._reactions)
        add_reactions = [rx for rx in other._reactions if rx not in present]

        children = {c.name: c for c in self._systems}
        add_children: List[ReactionSystem] = []
        for child in other._systems:
            if child.name in children:
                if children[child.name] != child:
                    raise NameConflictError(f"subsystem '{child.name}' is defined differently in both systems")
            else:
                add_children.append(child.copy())

        logger.debug(
            "merging %r into %r: %d species, %d parameters, %d reactions, %d subsystems",
            other.name, self.name, len(add_species), len(add_params), len(add_reactions), len(add_children),
        )
        self._species.extend(add_species)
        self._parameters.extend(add_params)
        self._reactions.extend(add_reactions)
        self._systems.extend(add_children)
        self._touch()
        return self

    # -----------------------------
    # Copying / equality
    # -----------------------------

    def copy(self, name: Optional[str] = None) -> "ReactionSystem":
        """Return an independent copy (subsystems are copied recursively)."""
        new = ReactionSystem(iv=self._iv, name=self.name if name is None else name, options=self._options)
        new._species = list(self._species)
        new._parameters = list(self._parameters)
        new._reactions = list(self._reactions)
        new._systems = [c.copy() for c in self._systems]
        return new

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ReactionSystem):
            return NotImplemented
        return (
            set(self._species) == set(other._species)
            and set(self._parameters) == set(other._parameters)
            and self._reactions == other._reactions
        )

    __hash__ = None  # mutable

    def __getstate__(self) -> Dict[str, Any]:
        state = self.__dict__.copy()
        state.pop("_lock", None)
        state["_cache"] = {}
        return state

    def __setstate__(self, state: Dict[str, Any]) -> None:
        self.__dict__.update(state)
        self._lock = threading.RLock()

    def __repr__(self) -> str:
        label = f" '{self.name}'" if self.name else ""
        return (
            f"ReactionSystem{label}(species={self.num_species}, parameters={self.num_parameters}, "
            f"reactions={self.num_reactions}, subsystems={len(self._systems)})"
        )


# ---------------------------------------------------------------------
# Composition
# ---------------------------------------------------------------------

def extend(sys: ReactionSystem, other: ReactionSystem, name: Optional[str] = None) -> ReactionSystem:
    """Return a copy of ``sys`` with ``other`` merged into it (see :meth:`ReactionSystem.merge`)."""
    return sys.copy(name=name).merge(other)


def compose(sys: ReactionSystem, *subsystems: ReactionSystem, name: Optional[str] = None) -> ReactionSystem:
    """Return a copy of ``sys`` with ``subsystems`` attached as named children.

    Namespaces stay separate: nothing is merged until :func:`flatten`.
    """
    out = sys.copy(name=name)
    for child in subsystems:
        out.add_system(child)
    logger.debug("composed %r with subsystems %s", out.name, [c.name for c in subsystems])
    return out


def flatten(sys: ReactionSystem, name: Optional[str] = None) -> ReactionSystem:
    """Merge the whole subsystem tree of ``sys`` into one system.

    Entities of a child named ``c`` are renamed ``c<sep>name`` (recursively,
    e.g. ``outer.inner.X``); the root keeps its own names. A collision in the
    flat namespace raises :class:`NameConflictError`.
    """
    sep = sys.options.namespace_separator
    out = ReactionSystem(iv=sys.iv, name=sys.name if name is None else name, options=sys.options)
    owner: Dict[str, str] = {}

    def claim(flat_name: str, where: str) -> None:
        if flat_name in owner:
            raise NameConflictError(f"flattening maps both {owner[flat_name]} and {where} to '{flat_name}'")
        owner[flat_name] = where

    def walk(node: ReactionSystem, prefix: str, path: str) -> None:
        if node.iv != sys.iv:
            raise NameConflictError(f"subsystem {path} uses independent variable {node.iv}, not {sys.iv}")
        smap = {s.name: prefix + s.name for s in node._species}
        pmap = {p.name: prefix + p.name for p in node._parameters}
        for s in node._species:
            claim(smap[s.name], f"species '{s.name}' of {path}")
            out._species.append(s.renamed(smap[s.name]))
        for p in node._parameters:
            claim(pmap[p.name], f"parameter '{p.name}' of {path}")
            out._parameters.append(p.renamed(pmap[p.name]))
        for rx in node._reactions:
            out._reactions.append(rx.xreplace_names(smap, pmap) if prefix else rx)
        for child in node._systems:
            walk(child, prefix + child.name + sep, f"{path}{sep}{child.name}")

    walk(sys, "", f"'{sys.name}'" if sys.name else "the root system")
    out._touch()
    logger.debug("flattened %r into %d species and %d reactions", sys.name, out.num_species, out.num_reactions)
    return out
