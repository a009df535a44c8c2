"""Structural report for the SIR model and its variant with removal at rate S^2.

This script prints the reaction complexes, linkage classes, deficiency,
reversibility and conservation laws of both networks.

Run:
    python examples/sir_structure.py
"""

from __future__ import annotations

from crn_structure import (
    NetworkAnalyzer,
    ReportOptions,
    format_network_summary,
    format_structure_report,
    sir_network,
    sir_with_decay_network,
)


def main() -> None:
    for net in (sir_network(), sir_with_decay_network()):
        print(format_network_summary(net))
        print()
        print(format_structure_report(net, options=ReportOptions(include_matrices=True)))
        print()

    # Conserved population at a concrete state.
    an = NetworkAnalyzer(sir_network())
    print("S + I + R at (S, I, R) = (990, 10, 0):", an.conserved_quantities({"S": 990, "I": 10, "R": 0}))


if __name__ == "__main__":
    main()
