"""Stoichiometry matrices.

All matrices are indexed ``[species, reaction]`` and hold exact integers. They
are pure functions of the reaction list and the species ordering.
"""

from __future__ import annotations

from typing import Callable, Dict, List, Sequence

import sympy as sp

from .reaction import Reaction


def _stoich_matrix(
    species_order: Sequence[str],
    reactions: Sequence[Reaction],
    column: Callable[[Reaction], Dict[str, int]],
) -> sp.ImmutableMatrix:
    index = {name: i for i, name in enumerate(species_order)}
    M = sp.zeros(len(species_order), len(reactions))
    for j, rx in enumerate(reactions):
        for name, c in column(rx).items():
            if name not in index:
                raise KeyError(f"species '{name}' of reaction {j} is not in the species list")
            M[index[name], j] = c
    return sp.ImmutableMatrix(M)


def substoich_matrix(species_order: Sequence[str], reactions: Sequence[Reaction]) -> sp.ImmutableMatrix:
    """Substrate coefficients, species × reactions."""
    return _stoich_matrix(species_order, reactions, lambda rx: rx.substoich)


def prodstoich_matrix(species_order: Sequence[str], reactions: Sequence[Reaction]) -> sp.ImmutableMatrix:
    """Product coefficients, species × reactions."""
    return _stoich_matrix(species_order, reactions, lambda rx: rx.prodstoich)


def netstoich_matrix(species_order: Sequence[str], reactions: Sequence[Reaction]) -> sp.ImmutableMatrix:
    """Net coefficients (product minus substrate), species × reactions."""
    return _stoich_matrix(species_order, reactions, lambda rx: rx.netstoich)


def left_nullspace_basis(N: sp.MatrixBase, integer_basis: bool = True) -> sp.ImmutableMatrix:
    """Return a basis of ``{g : g^T N = 0}`` as the rows of a matrix.

    With ``integer_basis`` each row is scaled to a primitive integer vector
    whose first nonzero entry is positive.
    """
    n = N.rows
    if N.cols == 0:
        # No reactions: every coordinate is conserved.
        return sp.ImmutableMatrix(sp.eye(n))

    rows: List[sp.Matrix] = []
    for v in N.T.nullspace():
        row = sp.Matrix(v).T
        if integer_basis:
            row = make_integer_row(row)
        rows.append(row)
    if not rows:
        return sp.ImmutableMatrix(sp.zeros(0, n))
    return sp.ImmutableMatrix(sp.Matrix.vstack(*rows))


def make_integer_row(row: sp.Matrix) -> sp.Matrix:
    """Scale a rational row vector to a primitive integer row vector."""
    if row.shape[0] != 1:
        raise ValueError("row must be 1×n")

    # Clear denominators.
    nums = []
    dens = []
    for entry in row.tolist()[0]:
        num, den = sp.fraction(sp.nsimplify(entry))
        nums.append(num)
        dens.append(den)

    lcm = sp.ilcm(*[int(d) for d in dens]) if len(dens) > 1 else (int(dens[0]) if dens else 1)
    ints = [int(sp.Integer(num * (lcm // int(den)))) for num, den in zip(nums, dens)]

    if all(v == 0 for v in ints):
        return row

    # Make primitive by dividing by the gcd.
    g = 0
    for v in ints:
        g = sp.igcd(g, abs(v))
    g = int(g) or 1
    prim = [v // g for v in ints]

    # Canonical sign: first nonzero entry positive.
    for v in prim:
        if v != 0:
            if v < 0:
                prim = [-w for w in prim]
            break

    return sp.Matrix([prim])
