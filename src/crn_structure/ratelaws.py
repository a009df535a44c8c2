"""Rate-law construction.

For a mass-action reaction with rate constant ``k`` and substrate
coefficients ``n_i`` the continuous (ODE) rate law is

    k * prod_i X_i**n_i / n_i!

and the discrete (jump) propensity is the falling factorial

    k * prod_i X_i (X_i - 1) ... (X_i - n_i + 1)  =  k * prod_i C(X_i, n_i) n_i!.

The ODE ``/ n_i!`` factors are the *combinatoric* convention and can be turned
off, which leaves ``k * prod X_i**n_i``. Jump propensities keep the falling
factorial unless ``combinatoric=True`` is passed explicitly, which gives
``k * prod_i C(X_i, n_i)``.
Reactions whose rate references a species (or that set ``only_use_rate``)
use their rate expression literally.

Only substrate mentions enter these products. Product mentions never alter
the combinatorial factor, so a catalyst ``E + S --> E + P`` contributes
``E`` to the rate law exactly once.
"""

from __future__ import annotations

from typing import Any

import sympy as sp

from .reaction import Reaction


def _sym(x: Any) -> sp.Expr:
    return sp.sympify(x)


def ode_ratelaw(rx: Reaction, combinatoric: bool = True) -> sp.Expr:
    """Return the ODE rate law of ``rx`` as a SymPy expression."""
    if not rx.is_mass_action:
        return rx.rate

    law = rx.rate
    coef = sp.Integer(1)
    for spec, n in rx.substrates:
        law *= spec.symbol if n == 1 else spec.symbol ** n
        if combinatoric and n > 1:
            coef *= sp.factorial(n)
    return law / coef if coef != 1 else law


def jump_ratelaw(rx: Reaction, combinatoric: bool = False) -> sp.Expr:
    """Return the jump-process propensity of ``rx`` as a SymPy expression."""
    if not rx.is_mass_action:
        return rx.rate

    law = rx.rate
    coef = sp.Integer(1)
    for spec, n in rx.substrates:
        x = spec.symbol
        law *= x
        for i in range(1, n):
            law *= x - i
        if combinatoric and n > 1:
            coef *= sp.factorial(n)
    return law / coef if coef != 1 else law


# -----------------------------
# Named rate functions
# -----------------------------

def hill(X: Any, v: Any, K: Any, n: Any) -> sp.Expr:
    """Hill activation ``v X^n / (X^n + K^n)``."""
    X, v, K, n = map(_sym, (X, v, K, n))
    return v * X**n / (X**n + K**n)


def hillr(X: Any, v: Any, K: Any, n: Any) -> sp.Expr:
    """Hill repression ``v K^n / (X^n + K^n)``."""
    X, v, K, n = map(_sym, (X, v, K, n))
    return v * K**n / (X**n + K**n)


def hillar(X: Any, Y: Any, v: Any, K: Any, n: Any) -> sp.Expr:
    """Activation by ``X`` with repression by ``Y``: ``v X^n / (X^n + Y^n + K^n)``."""
    X, Y, v, K, n = map(_sym, (X, Y, v, K, n))
    return v * X**n / (X**n + Y**n + K**n)


def mm(X: Any, v: Any, K: Any) -> sp.Expr:
    """Michaelis-Menten ``v X / (X + K)``."""
    X, v, K = map(_sym, (X, v, K))
    return v * X / (X + K)


def mmr(X: Any, v: Any, K: Any) -> sp.Expr:
    """Repressive Michaelis-Menten ``v K / (X + K)``."""
    X, v, K = map(_sym, (X, v, K))
    return v * K / (X + K)
