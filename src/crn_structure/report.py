"""Human-readable reporting utilities.

Console / Markdown summaries and LaTeX export of reaction systems and of
their structural properties. Nothing here is required for the analysis
itself; it is strictly presentation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

import sympy as sp

from .analyzer import NetworkAnalyzer
from .conversion import ode_rhs
from .reaction import Reaction
from .system import ReactionSystem


def _expr_to_str(e: sp.Expr) -> str:
    """Stable string for SymPy expressions in reports."""
    return sp.sstr(e)


@dataclass
class ReportOptions:
    """Tunable knobs for report verbosity."""

    max_reactions: int = 25
    include_defaults: bool = True
    include_conservation_laws: bool = True
    include_matrices: bool = False


def format_reaction(rx: Reaction) -> str:
    """Format a reaction as ``"rate, S + I --> 2I"``."""
    return rx.to_string()


def _format_entities(entities, include_defaults: bool) -> str:
    parts = []
    for e in entities:
        if include_defaults and e.default is not None:
            parts.append(f"{e.name} = {e.default}")
        else:
            parts.append(e.name)
    return ", ".join(parts)


def format_network_summary(rn: ReactionSystem, *, options: Optional[ReportOptions] = None) -> str:
    """Species, parameters, reactions and subsystems of ``rn``."""
    opt = options or ReportOptions()
    lines: List[str] = []
    title = f"Model {rn.name}" if rn.name else "Model"
    lines.append(f"{title} with {rn.num_reactions} reactions")
    lines.append(f"Independent variable: {rn.iv}")
    lines.append(f"Species ({rn.num_species}): {_format_entities(rn.species, opt.include_defaults)}")
    lines.append(f"Parameters ({rn.num_parameters}): {_format_entities(rn.parameters, opt.include_defaults)}")

    if rn.reactions:
        lines.append("Reactions:")
        for i, rx in enumerate(rn.reactions[: int(opt.max_reactions)]):
            lines.append(f"  {i + 1}. {format_reaction(rx)}")
        if rn.num_reactions > opt.max_reactions:
            lines.append(f"  ... ({rn.num_reactions - opt.max_reactions} more)")

    if rn.systems:
        lines.append("Subsystems: " + ", ".join(c.name for c in rn.systems))
    return "\n".join(lines)


def format_structure_report(rn: ReactionSystem, *, options: Optional[ReportOptions] = None) -> str:
    """Complexes, linkage classes, deficiency, reversibility and conservation laws."""
    opt = options or ReportOptions()
    an = NetworkAnalyzer(rn)
    labels = an.complex_labels()

    lines: List[str] = []
    lines.append(f"### Structure of {rn.name or 'network'}")
    lines.append(f"Complexes ({len(labels)}): " + ", ".join(labels))
    classes = an.linkage_classes()
    lines.append(f"Linkage classes ({len(classes)}):")
    for k, lc in enumerate(classes):
        lines.append(f"  {k + 1}. {{" + ", ".join(labels[c] for c in lc) + "}")
    lines.append(f"Stoichiometric rank: {an.stoichiometric_rank()}")
    lines.append(f"Deficiency: {an.deficiency()}")
    lines.append(f"Reversible: {an.is_reversible()}")
    lines.append(f"Weakly reversible: {an.is_weakly_reversible()}")

    if opt.include_conservation_laws:
        laws = an.conserved_quantities()
        if laws:
            lines.append("Conservation laws:")
            lines.extend(f"  {_expr_to_str(q)} = const" for q in laws)
        else:
            lines.append("Conservation laws: none")

    if opt.include_matrices:
        lines.append("Net stoichiometry matrix:")
        lines.append(sp.pretty(rn.netstoich_matrix()))
    return "\n".join(lines)


def reactions_to_latex(rn: ReactionSystem) -> str:
    """Export the reactions to LaTeX, one ``\\xrightarrow`` line per reaction."""

    def side(terms) -> str:
        if not terms:
            return "\\varnothing"
        return " + ".join(
            sp.latex(s.symbol) if c == 1 else f"{c} {sp.latex(s.symbol)}" for s, c in terms
        )

    lines = []
    for rx in rn.reactions:
        arrow = "\\xRightarrow" if rx.only_use_rate else "\\xrightarrow"
        lines.append(f"{side(rx.substrates)} &{arrow}{{{sp.latex(rx.rate)}}} {side(rx.products)}")
    body = " \\\\\n".join(lines)
    return "\\begin{align*}\n" + body + "\n\\end{align*}"


def odes_to_latex(rn: ReactionSystem) -> str:
    """Export the mass-action ODE system to LaTeX.

    Returns an ``align*`` environment with equations of the form
        \\frac{dX}{dt} = F_X(x, k).
    """
    F = ode_rhs(rn)
    lines = []
    for i, x in enumerate(rn.species_symbols):
        lhs = f"\\frac{{d{sp.latex(x)}}}{{d{sp.latex(rn.iv)}}}"
        lines.append(f"{lhs} &= {sp.latex(F[i, 0])}")
    body = " \\\\\n".join(lines)
    return "\\begin{align*}\n" + body + "\n\\end{align*}"
