#!/usr/bin/env python3
"""
Basic Usage Examples for crn_structure

This script demonstrates the core features of the package with simple,
self-contained examples.
"""

import numpy as np
import sympy as sp

from crn_structure import (
    NetworkAnalyzer,
    Reaction,
    ReactionSystem,
    list_available_networks,
    michaelis_menten_network,
    ode_ratelaw,
    jump_ratelaw,
    ode_rhs,
    propensity_function,
    parameters,
    species,
)


def example_1_building_a_system():
    """Build a system from Species, Parameter and Reaction objects."""
    print("\n" + "=" * 50)
    print("Example 1: Building a Reaction System")
    print("=" * 50)

    S, I, R = species("S I R")
    beta, gamma = parameters("β γ")
    rn = ReactionSystem(
        [
            Reaction(beta, [S, I], [(I, 2)]),
            Reaction(gamma, [I], [R]),
        ],
        name="sir",
    )
    print(f"\n{rn}")
    print(f"  Species: {rn.species_names}")
    print(f"  Parameters: {rn.parameter_names}")
    for i, rx in enumerate(rn.reactions):
        print(f"    {i+1}. {rx}")

    print("\nNet stoichiometry matrix:")
    sp.pprint(rn.netstoich_matrix())


def example_2_rate_laws():
    """Compare ODE and jump rate laws of a dimerization."""
    print("\n" + "=" * 50)
    print("Example 2: Rate Laws")
    print("=" * 50)

    X, X2 = species("X X2")
    k, = parameters("k")
    rx = Reaction(k, [(X, 2)], [X2])
    print(f"\n{rx}")
    print(f"  ODE rate law:          {ode_ratelaw(rx)}")
    print(f"  Jump propensity:       {jump_ratelaw(rx)}")
    print(f"  Jump (combinatoric):   {jump_ratelaw(rx, combinatoric=True)}")
    print(f"  ODE (non-combinatoric): {ode_ratelaw(rx, combinatoric=False)}")


def example_3_network_structure():
    """Complexes, linkage classes and deficiency."""
    print("\n" + "=" * 50)
    print("Example 3: Network Structure")
    print("=" * 50)

    print("\nAvailable networks:")
    for name, desc in list_available_networks().items():
        print(f"  {name}(): {desc}")

    an = NetworkAnalyzer(michaelis_menten_network())
    print(f"\nComplexes: {an.complex_labels()}")
    print(f"Linkage classes: {an.linkage_classes()}")
    print(f"Deficiency: {an.deficiency()}")
    print(f"Reversible: {an.is_reversible()}")
    print(f"Weakly reversible: {an.is_weakly_reversible()}")
    print("Conservation laws:")
    for q in an.conserved_quantities():
        print(f"  {q} = const")


def example_4_conversions():
    """ODE right-hand side and numeric propensities."""
    print("\n" + "=" * 50)
    print("Example 4: ODE and Jump Conversions")
    print("=" * 50)

    rn = michaelis_menten_network()
    print("\ndx/dt =")
    sp.pprint(ode_rhs(rn))

    a = propensity_function(rn, {"k1": 1.0, "km1": 0.5, "k2": 0.8, "km2": 0.1})
    u = np.array([100.0, 10.0, 0.0, 0.0])
    print(f"\nPropensities at u = {u}: {a(u)}")


def main():
    """Run all examples."""
    print("=" * 50)
    print("CRN STRUCTURE - BASIC USAGE EXAMPLES")
    print("=" * 50)

    example_1_building_a_system()
    example_2_rate_laws()
    example_3_network_structure()
    example_4_conversions()

    print("\n" + "=" * 50)
    print("All examples completed successfully!")
    print("=" * 50)


if __name__ == '__main__':
    main()
