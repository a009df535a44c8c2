from __future__ import annotations

from typing import Dict

from .ratelaws import hillr
from .reaction import Reaction
from .species import parameters, species
from .system import ReactionSystem


def sir_network() -> ReactionSystem:
    """Susceptible-infected-recovered epidemic model.

    Network:
        S + I --β--> 2I
        I     --γ--> R

    Species order: [S, I, R]
    Parameters: β, γ
    """
    S, I, R = species("S I R")
    beta, gamma = parameters("β γ")
    return ReactionSystem(
        [
            Reaction(beta, [S, I], [(I, 2)]),
            Reaction(gamma, [I], [R]),
        ],
        name="sir",
    )


def sir_with_decay_network() -> ReactionSystem:
    """SIR model where recovered individuals are removed at rate ``S^2``.

    Network:
        S + I --α--> 2I
        I     --β--> R
        R     --S^2--> ∅

    The last rate references a species, so that reaction is not mass action.
    """
    S, I, R = species("S I R")
    alpha, beta = parameters("α β")
    return ReactionSystem(
        [
            Reaction(alpha, [S, I], [(I, 2)]),
            Reaction(beta, [I], [R]),
            Reaction(S.symbol**2, [R], []),
        ],
        name="sir_decay",
    )


def reversible_binding_network() -> ReactionSystem:
    """Reversible binding ``X + Y <--> XY`` with numeric rate constants 1.0 / 2.0."""
    X, Y, XY = species("X Y XY")
    return ReactionSystem(
        [
            Reaction(1.0, [X, Y], [XY]),
            Reaction(2.0, [XY], [X, Y]),
        ],
        name="binding",
    )


def isomerization_network() -> ReactionSystem:
    """Simple isomerization ``A <--> B`` with rate constants k1 / km1."""
    A, B = species("A B")
    k1, km1 = parameters("k1 km1")
    return ReactionSystem(
        [
            Reaction(k1, [A], [B]),
            Reaction(km1, [B], [A]),
        ],
        name="isomerization",
    )


def michaelis_menten_network() -> ReactionSystem:
    """Reversible Michaelis--Menten system.

    Reaction scheme:
        S + E <-> C <-> E + P

    Species order: [S, E, C, P]
    Rate constants: k1, km1, k2, km2
    """
    S, E, C, P = species("S E C P")
    k1, km1, k2, km2 = parameters("k1 km1 k2 km2")
    return ReactionSystem(
        [
            # S + E -> C
            Reaction(k1, [S, E], [C]),
            # C -> S + E
            Reaction(km1, [C], [S, E]),
            # C -> E + P
            Reaction(k2, [C], [E, P]),
            # E + P -> C
            Reaction(km2, [E, P], [C]),
        ],
        species=[S, E, C, P],
        name="michaelis_menten",
    )


def repressilator_network() -> ReactionSystem:
    """Three-gene repressilator with Hill repression and linear degradation.

    Each protein ``Pi`` is produced at rate ``hillr(P_{i-1}, α, K, n)`` and
    degraded with rate constant ``δ``.
    """
    P1, P2, P3 = species("P1 P2 P3")
    alpha, K, n, delta = parameters("α K n δ")
    reactions = []
    for target, repressor in ((P1, P3), (P2, P1), (P3, P2)):
        reactions.append(Reaction(hillr(repressor, alpha, K, n), [], [target]))
        reactions.append(Reaction(delta, [target], []))
    return ReactionSystem(reactions, species=[P1, P2, P3], name="repressilator")


def list_available_networks() -> Dict[str, str]:
    """Name -> one-line description of every built-in network."""
    out = {}
    for fn in (
        sir_network,
        sir_with_decay_network,
        reversible_binding_network,
        isomerization_network,
        michaelis_menten_network,
        repressilator_network,
    ):
        out[fn.__name__] = (fn.__doc__ or "").strip().splitlines()[0]
    return out
