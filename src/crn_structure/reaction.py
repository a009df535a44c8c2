from __future__ import annotations

from dataclasses import dataclass
from numbers import Integral, Real
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import sympy as sp

from .errors import InvalidReactionError
from .species import Species, SpeciesSymbol, as_species, species_symbols


StoichTerms = Tuple[Tuple[Species, int], ...]


def _as_coefficient(value: Any) -> int:
    """Validate a stoichiometric coefficient and return it as a Python int."""
    if isinstance(value, bool):
        raise InvalidReactionError(f"stoichiometric coefficient must be an integer; got {value!r}")
    if isinstance(value, sp.Basic):
        if not (value.is_Integer or (value.is_Number and value == int(value))):
            raise InvalidReactionError(f"stoichiometric coefficient must be an integer; got {value}")
        value = int(value)
    elif isinstance(value, Integral):
        value = int(value)
    elif isinstance(value, Real) and float(value).is_integer():
        value = int(value)
    else:
        raise InvalidReactionError(f"stoichiometric coefficient must be an integer; got {value!r}")
    if value <= 0:
        raise InvalidReactionError(f"stoichiometric coefficient must be positive; got {value}")
    return value


def normalize_terms(terms: Iterable[Any], stoich: Optional[Sequence[Any]] = None) -> StoichTerms:
    """Normalize a raw term list into ``((Species, coefficient), ...)``.

    Items of ``terms`` may be species, species names, species symbols or
    ``(species, coefficient)`` pairs. When ``stoich`` is given it must be
    parallel to ``terms``. Repeated mentions are aggregated, so ``[X, X]``
    becomes ``((X, 2),)``; the order of first mention is kept.
    """
    terms = list(terms)
    if stoich is not None:
        stoich = list(stoich)
        if len(stoich) != len(terms):
            raise InvalidReactionError(
                f"got {len(terms)} species but {len(stoich)} stoichiometric coefficients"
            )

    coeffs: Dict[str, int] = {}
    by_name: Dict[str, Species] = {}
    for i, term in enumerate(terms):
        if isinstance(term, tuple):
            if stoich is not None:
                raise InvalidReactionError("give coefficients either in pairs or as a separate list, not both")
            if len(term) != 2:
                raise InvalidReactionError(f"expected a (species, coefficient) pair; got {term!r}")
            spec, c = term
        else:
            spec, c = term, (stoich[i] if stoich is not None else 1)

        try:
            spec = as_species(spec)
        except (TypeError, ValueError) as exc:
            raise InvalidReactionError(str(exc)) from exc
        c = _as_coefficient(c)

        known = by_name.get(spec.name)
        if known is not None and known != spec:
            raise InvalidReactionError(f"species '{spec.name}' is given two different definitions")
        by_name[spec.name] = spec
        coeffs[spec.name] = coeffs.get(spec.name, 0) + c

    return tuple((by_name[name], c) for name, c in coeffs.items())


def _canonical_rate(rate: Any) -> sp.Expr:
    """Sympify a rate and give every symbol its canonical assumptions."""
    try:
        expr = sp.sympify(rate)
    except (sp.SympifyError, TypeError) as exc:
        raise InvalidReactionError(f"rate is not a symbolic expression: {rate!r}") from exc
    if not isinstance(expr, sp.Expr):
        raise InvalidReactionError(f"rate must be a SymPy expression; got {type(expr).__name__}")

    repl = {}
    for s in expr.free_symbols:
        if isinstance(s, SpeciesSymbol):
            canon = Species(s.name).symbol
        elif isinstance(s, sp.Symbol):
            canon = sp.Symbol(s.name, positive=True)
        else:
            continue
        if canon != s:
            repl[s] = canon
    return expr.xreplace(repl) if repl else expr


@dataclass(frozen=True, eq=False)
class Reaction:
    """A single reaction ``substrates --rate--> products``.

    Parameters
    ----------
    rate:
        Rate expression. Species appearing in it must be given as
        :class:`Species` (or :class:`SpeciesSymbol`); every other symbol is a
        parameter.
    substrates, products:
        Raw term lists, see :func:`normalize_terms`.
    substoich, prodstoich:
        Optional coefficient lists parallel to ``substrates`` / ``products``.
    only_use_rate:
        Use ``rate`` literally as the rate law even when it is pure
        mass action.

    Notes
    -----
    The rate is *mass action* when it references no species; the rate law
    is then generated from the substrate stoichiometry (see
    :mod:`crn_structure.ratelaws`).
    """

    rate: sp.Expr
    substrates: StoichTerms
    products: StoichTerms
    only_use_rate: bool = False

    def __init__(
        self,
        rate: Any,
        substrates: Iterable[Any] = (),
        products: Iterable[Any] = (),
        substoich: Optional[Sequence[Any]] = None,
        prodstoich: Optional[Sequence[Any]] = None,
        *,
        only_use_rate: bool = False,
    ) -> None:
        subs = normalize_terms(substrates or (), substoich)
        prods = normalize_terms(products or (), prodstoich)
        if not subs and not prods:
            raise InvalidReactionError("a reaction needs at least one substrate or product")

        clash = {s.name: s for s, _ in subs}
        for s, _ in prods:
            if s.name in clash and clash[s.name] != s:
                raise InvalidReactionError(f"species '{s.name}' is given two different definitions")

        object.__setattr__(self, "rate", _canonical_rate(rate))
        object.__setattr__(self, "substrates", subs)
        object.__setattr__(self, "products", prods)
        object.__setattr__(self, "only_use_rate", bool(only_use_rate))

    # -----------------------------
    # Stoichiometry
    # -----------------------------

    @property
    def substoich(self) -> Dict[str, int]:
        """Substrate coefficients keyed by species name."""
        return {s.name: c for s, c in self.substrates}

    @property
    def prodstoich(self) -> Dict[str, int]:
        """Product coefficients keyed by species name."""
        return {s.name: c for s, c in self.products}

    @property
    def netstoich(self) -> Dict[str, int]:
        """Net change (product minus substrate coefficient) of every species involved.

        Species whose net change is zero (pure catalysts) are omitted.
        """
        net: Dict[str, int] = {}
        for s, c in self.substrates:
            net[s.name] = net.get(s.name, 0) - c
        for s, c in self.products:
            net[s.name] = net.get(s.name, 0) + c
        return {name: v for name, v in net.items() if v != 0}

    @property
    def species(self) -> List[Species]:
        """Substrates then products, each species once."""
        out: Dict[str, Species] = {}
        for s, _ in self.substrates + self.products:
            out.setdefault(s.name, s)
        return list(out.values())

    def reaction_vector(self, species_order: Sequence[str]) -> sp.Matrix:
        """Return the net stoichiometry as a column over ``species_order``."""
        net = self.netstoich
        return sp.Matrix([net.get(name, 0) for name in species_order])

    # -----------------------------
    # Rate classification
    # -----------------------------

    @property
    def is_mass_action(self) -> bool:
        """True iff the rate law is generated from stoichiometry by mass action."""
        return not self.only_use_rate and not species_symbols(self.rate)

    def dependents(self) -> List[Species]:
        """Species the rate law of this reaction depends on.

        Mass-action reactions depend on their substrates; otherwise the
        species referenced by the rate expression are returned, sorted by name.
        """
        if self.is_mass_action:
            return [s for s, _ in self.substrates]
        return [Species(s.name) for s in sorted(species_symbols(self.rate), key=lambda z: z.name)]

    # -----------------------------
    # Substitution helpers
    # -----------------------------

    def xreplace_names(self, species_names: Mapping[str, str], param_names: Mapping[str, str]) -> "Reaction":
        """Return a copy with species and parameters renamed.

        Used by flattening; names missing from the maps are kept.
        """
        def ren(terms: StoichTerms) -> List[Tuple[Species, int]]:
            return [(s.renamed(species_names.get(s.name, s.name)), c) for s, c in terms]

        repl = {}
        for sym in self.rate.free_symbols:
            if isinstance(sym, SpeciesSymbol):
                if sym.name in species_names:
                    repl[sym] = Species(species_names[sym.name]).symbol
            elif isinstance(sym, sp.Symbol) and sym.name in param_names:
                repl[sym] = sp.Symbol(param_names[sym.name], positive=True)
        return Reaction(
            self.rate.xreplace(repl),
            ren(self.substrates),
            ren(self.products),
            only_use_rate=self.only_use_rate,
        )

    # -----------------------------
    # Equality / printing
    # -----------------------------

    def _key(self) -> Tuple[Any, ...]:
        return (
            self.rate,
            frozenset((s.name, c) for s, c in self.substrates),
            frozenset((s.name, c) for s, c in self.products),
            self.only_use_rate,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Reaction):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def to_string(self) -> str:
        def side(terms: StoichTerms) -> str:
            if not terms:
                return "∅"
            return " + ".join(s.name if c == 1 else f"{c}{s.name}" for s, c in terms)

        arrow = "=>" if self.only_use_rate else "-->"
        return f"{self.rate}, {side(self.substrates)} {arrow} {side(self.products)}"

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"Reaction({self.to_string()!r})"
