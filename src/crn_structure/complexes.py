from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, NamedTuple, Sequence, Tuple

import sympy as sp

from .reaction import Reaction


class ReactionComplexElement(NamedTuple):
    """One species (by index in the owning system) and its coefficient in a complex."""

    species_index: int
    stoich: int


@dataclass(frozen=True)
class ReactionComplex:
    """A multiset of species appearing together on one side of a reaction.

    Elements are sorted by species index, so two complexes are equal exactly
    when they are the same multiset. The empty complex stands for a source or
    sink (``∅``).
    """

    elements: Tuple[ReactionComplexElement, ...]

    @classmethod
    def from_stoich(cls, stoich: Dict[str, int], index: Dict[str, int]) -> "ReactionComplex":
        elems = sorted(ReactionComplexElement(index[name], int(c)) for name, c in stoich.items())
        return cls(tuple(elems))

    @property
    def is_empty(self) -> bool:
        return not self.elements

    def __len__(self) -> int:
        return len(self.elements)

    def stoich_vector(self, n_species: int) -> List[int]:
        out = [0] * n_species
        for el in self.elements:
            out[el.species_index] = el.stoich
        return out

    def label(self, species_names: Sequence[str]) -> str:
        """Human-readable form such as ``"S + I"`` or ``"2I"``."""
        if self.is_empty:
            return "∅"
        parts = []
        for el in self.elements:
            name = species_names[el.species_index]
            parts.append(name if el.stoich == 1 else f"{el.stoich}{name}")
        return " + ".join(parts)


def reaction_complexes(
    species_order: Sequence[str],
    reactions: Sequence[Reaction],
) -> Tuple[List[ReactionComplex], List[Tuple[int, int]]]:
    """Collect the deduplicated complexes of a reaction list.

    Returns
    -------
    (complexes, pairs)
        ``complexes`` in order of first appearance (substrate side of a
        reaction before its product side); ``pairs[j]`` is the
        ``(source, destination)`` complex index of reaction ``j``.
    """
    index = {name: i for i, name in enumerate(species_order)}
    complexes: List[ReactionComplex] = []
    position: Dict[ReactionComplex, int] = {}

    def lookup(cplx: ReactionComplex) -> int:
        if cplx not in position:
            position[cplx] = len(complexes)
            complexes.append(cplx)
        return position[cplx]

    pairs: List[Tuple[int, int]] = []
    for rx in reactions:
        src = lookup(ReactionComplex.from_stoich(rx.substoich, index))
        dst = lookup(ReactionComplex.from_stoich(rx.prodstoich, index))
        pairs.append((src, dst))
    return complexes, pairs


def complex_stoich_matrix(complexes: Sequence[ReactionComplex], n_species: int) -> sp.ImmutableMatrix:
    """Species × complexes matrix whose columns are the complexes' stoichiometries."""
    Z = sp.zeros(n_species, len(complexes))
    for j, cplx in enumerate(complexes):
        for el in cplx.elements:
            Z[el.species_index, j] = el.stoich
    return sp.ImmutableMatrix(Z)


def incidence_matrix(n_complexes: int, pairs: Sequence[Tuple[int, int]]) -> sp.ImmutableMatrix:
    """Complexes × reactions matrix: -1 at the source, +1 at the destination.

    A reaction whose source and destination coincide has an all-zero column.
    """
    B = sp.zeros(n_complexes, len(pairs))
    for j, (src, dst) in enumerate(pairs):
        B[src, j] -= 1
        B[dst, j] += 1
    return sp.ImmutableMatrix(B)


def complex_outgoing_matrix(n_complexes: int, pairs: Sequence[Tuple[int, int]]) -> sp.ImmutableMatrix:
    """Complexes × reactions matrix with -1 where a complex is the source of a reaction."""
    D = sp.zeros(n_complexes, len(pairs))
    for j, (src, _dst) in enumerate(pairs):
        D[src, j] = -1
    return sp.ImmutableMatrix(D)
