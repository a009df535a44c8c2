"""Rate laws and propensities of the repressilator.

Production uses the Hill repression ``hillr``, so those reactions are not
mass action and their rates are used as written. Degradation is mass action.
The ODE right-hand side is evaluated numerically with ``ode_function``.

Run:
    python examples/repressilator_ratelaws.py
"""

from __future__ import annotations

import numpy as np
import sympy as sp

from crn_structure import (
    jump_propensities,
    ode_function,
    ode_ratelaws,
    ode_rhs,
    odes_to_latex,
    repressilator_network,
)


def main() -> None:
    net = repressilator_network()

    print("Reactions:")
    for rx, law, prop in zip(net.reactions, ode_ratelaws(net), jump_propensities(net)):
        tag = "mass action" if rx.is_mass_action else "literal"
        print(f"  {rx}    [{tag}]  ode: {law}   jump: {prop}")

    print("\nODEs:")
    sp.pprint(ode_rhs(net))
    print()
    print(odes_to_latex(net))

    f = ode_function(net, {"α": 10.0, "K": 1.0, "n": 2.0, "δ": 1.0})
    print("\ndu/dt at u = (1, 2, 3):", f(0.0, np.array([1.0, 2.0, 3.0])))


if __name__ == "__main__":
    main()
