"""ODE, SDE and jump formulations of a reaction system.

These are the hand-off points to external solvers: symbolic right-hand sides
and propensities, plus numpy callables built with :func:`sympy.lambdify`
(for instance ``scipy.integrate.solve_ivp(ode_function(rn, p), ...)``).
Nothing here integrates anything.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping, Optional

import numpy as np
import sympy as sp

from .ratelaws import jump_ratelaw, ode_ratelaw
from .system import ReactionSystem


def _combinatoric(rn: ReactionSystem, combinatoric: Optional[bool]) -> bool:
    return rn.options.combinatoric_ratelaws if combinatoric is None else bool(combinatoric)


def ode_ratelaws(rn: ReactionSystem, combinatoric: Optional[bool] = None) -> List[sp.Expr]:
    """ODE rate law of every reaction, in reaction order."""
    comb = _combinatoric(rn, combinatoric)
    return rn.memoize(f"ode_ratelaws:{comb}", lambda: [ode_ratelaw(rx, comb) for rx in rn.reactions])


def jump_propensities(rn: ReactionSystem, combinatoric: bool = False) -> List[sp.Expr]:
    """Jump-process propensity of every reaction, in reaction order.

    Mass-action propensities are falling factorials; ``combinatoric=True``
    divides them by ``prod n_i!``. ``SystemOptions.combinatoric_ratelaws``
    only affects the ODE rate laws.
    """
    comb = bool(combinatoric)
    return rn.memoize(f"jump_propensities:{comb}", lambda: [jump_ratelaw(rx, comb) for rx in rn.reactions])


def ode_rhs(rn: ReactionSystem, combinatoric: Optional[bool] = None) -> sp.ImmutableMatrix:
    """Return dx/dt = N v(x) as a species × 1 SymPy matrix."""
    N = rn.netstoich_matrix()
    if N.cols == 0:
        return sp.ImmutableMatrix(sp.zeros(rn.num_species, 1))
    v = sp.Matrix(ode_ratelaws(rn, combinatoric))
    return sp.ImmutableMatrix(N * v)


def jacobian(rn: ReactionSystem, combinatoric: Optional[bool] = None) -> sp.ImmutableMatrix:
    """Jacobian of :func:`ode_rhs` with respect to the species."""
    F = sp.Matrix(ode_rhs(rn, combinatoric))
    if rn.num_species == 0:
        return sp.ImmutableMatrix(sp.zeros(0, 0))
    return sp.ImmutableMatrix(F.jacobian(rn.species_symbols))


def sde_noise_matrix(rn: ReactionSystem, combinatoric: Optional[bool] = None) -> sp.ImmutableMatrix:
    """Chemical Langevin noise matrix, ``G[i, j] = N[i, j] * sqrt(v_j)``.

    Species × reactions; the SDE is ``dx = N v dt + G dW`` with one Wiener
    process per reaction.
    """
    N = rn.netstoich_matrix()
    v = ode_ratelaws(rn, combinatoric)
    G = sp.zeros(N.rows, N.cols)
    for j, vj in enumerate(v):
        root = sp.sqrt(vj)
        for i in range(N.rows):
            if N[i, j] != 0:
                G[i, j] = N[i, j] * root
    return sp.ImmutableMatrix(G)


def parameter_substitutions(
    rn: ReactionSystem,
    parameter_values: Optional[Mapping[Any, Any]] = None,
) -> Dict[sp.Symbol, Any]:
    """Parameter symbol -> value, from defaults overridden by ``parameter_values``.

    Raises ``ValueError`` if a parameter ends up without a value.
    """
    subs: Dict[sp.Symbol, Any] = {p.symbol: p.default for p in rn.parameters if p.default is not None}
    if parameter_values:
        given = rn.symbol_map(parameter_values)
        species = set(rn.species_symbols)
        for sym, value in given.items():
            if sym in species:
                raise ValueError(f"'{sym}' is a species, not a parameter")
            subs[sym] = value
    missing = [p.name for p in rn.parameters if p.symbol not in subs]
    if missing:
        raise ValueError(f"no value for parameters {missing}")
    return subs


def initial_state(rn: ReactionSystem, u0: Optional[Mapping[Any, Any]] = None) -> np.ndarray:
    """Initial species vector from species defaults overridden by ``u0``."""
    values: Dict[sp.Symbol, Any] = {s.symbol: s.default for s in rn.species if s.default is not None}
    if u0:
        given = rn.symbol_map(u0)
        params = set(rn.parameter_symbols)
        for sym, value in given.items():
            if sym in params:
                raise ValueError(f"'{sym}' is a parameter, not a species")
            values[sym] = value
    missing = [s.name for s in rn.species if s.symbol not in values]
    if missing:
        raise ValueError(f"no initial value for species {missing}")
    return np.array([float(values[s]) for s in rn.species_symbols], dtype=float)


def ode_function(
    rn: ReactionSystem,
    parameter_values: Optional[Mapping[Any, Any]] = None,
    combinatoric: Optional[bool] = None,
) -> Callable[[float, np.ndarray], np.ndarray]:
    """Numeric right-hand side ``f(t, u)`` with parameters substituted."""
    n = rn.num_species
    F = sp.Matrix(ode_rhs(rn, combinatoric)).subs(parameter_substitutions(rn, parameter_values))
    f_num = sp.lambdify((rn.iv,) + rn.species_symbols, F, modules="numpy")

    def rhs(t: float, u: np.ndarray) -> np.ndarray:
        return np.array(f_num(t, *u), dtype=float).reshape((n,))

    return rhs


def propensity_function(
    rn: ReactionSystem,
    parameter_values: Optional[Mapping[Any, Any]] = None,
    combinatoric: bool = False,
) -> Callable[[np.ndarray, float], np.ndarray]:
    """Numeric propensities ``a(u, t=0.0)``, one entry per reaction."""
    m = rn.num_reactions
    subs = parameter_substitutions(rn, parameter_values)
    A = sp.Matrix(jump_propensities(rn, combinatoric) or [sp.Integer(0)]).subs(subs)
    a_num = sp.lambdify((rn.iv,) + rn.species_symbols, A, modules="numpy")

    def propensities(u: np.ndarray, t: float = 0.0) -> np.ndarray:
        if m == 0:
            return np.zeros(0, dtype=float)
        return np.array(a_num(t, *u), dtype=float).reshape((m,))

    return propensities
