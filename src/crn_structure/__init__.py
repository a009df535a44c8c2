"""Top-level package API for crn_structure.

This package implements symbolic tools for the **structure** of chemical
reaction networks: canonical stoichiometry, mass-action rate laws for ODE
and jump formulations, and reaction-network theory invariants (complexes,
linkage classes, deficiency, reversibility, conservation laws).

Public API:
- Species, Parameter, Reaction, ReactionSystem
- ode_ratelaw, jump_ratelaw and the hill / mm rate functions
- NetworkAnalyzer
- extend, compose, flatten
- ODE / SDE / jump conversions and reports
- Built-in example networks
"""

import logging

from .errors import (
    ReactionNetworkError,
    InvalidReactionError,
    DuplicateNameError,
    NameConflictError,
    StructuralInconsistencyError,
    RoleConflictError,
)
from .species import Species, Parameter, SpeciesSymbol, species, parameters
from .reaction import Reaction
from .ratelaws import ode_ratelaw, jump_ratelaw, hill, hillr, hillar, mm, mmr
from .complexes import ReactionComplex, ReactionComplexElement
from .system import ReactionSystem, SystemOptions, extend, compose, flatten
from .analyzer import NetworkAnalyzer
from .conversion import (
    ode_ratelaws,
    jump_propensities,
    ode_rhs,
    jacobian,
    sde_noise_matrix,
    initial_state,
    ode_function,
    propensity_function,
)
from .report import (
    ReportOptions,
    format_network_summary,
    format_structure_report,
    reactions_to_latex,
    odes_to_latex,
)
from .examples import (
    sir_network,
    sir_with_decay_network,
    reversible_binding_network,
    isomerization_network,
    michaelis_menten_network,
    repressilator_network,
    list_available_networks,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "ReactionNetworkError",
    "InvalidReactionError",
    "DuplicateNameError",
    "NameConflictError",
    "StructuralInconsistencyError",
    "RoleConflictError",
    "Species",
    "Parameter",
    "SpeciesSymbol",
    "species",
    "parameters",
    "Reaction",
    "ode_ratelaw",
    "jump_ratelaw",
    "hill",
    "hillr",
    "hillar",
    "mm",
    "mmr",
    "ReactionComplex",
    "ReactionComplexElement",
    "ReactionSystem",
    "SystemOptions",
    "extend",
    "compose",
    "flatten",
    "NetworkAnalyzer",
    "ode_ratelaws",
    "jump_propensities",
    "ode_rhs",
    "jacobian",
    "sde_noise_matrix",
    "initial_state",
    "ode_function",
    "propensity_function",
    "ReportOptions",
    "format_network_summary",
    "format_structure_report",
    "reactions_to_latex",
    "odes_to_latex",
    "sir_network",
    "sir_with_decay_network",
    "reversible_binding_network",
    "isomerization_network",
    "michaelis_menten_network",
    "repressilator_network",
    "list_available_networks",
]
