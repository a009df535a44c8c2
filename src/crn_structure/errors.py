"""Exceptions raised by crn_structure.

All errors derive from :class:`ReactionNetworkError`, which is itself a
``ValueError`` so callers that only guard against bad input keep working.
"""

from __future__ import annotations


class ReactionNetworkError(ValueError):
    """Base class for reaction-network errors."""


class InvalidReactionError(ReactionNetworkError):
    """Malformed stoichiometry, coefficient or species/parameter name clash."""


class DuplicateNameError(ReactionNetworkError):
    """A name is reused across the species and parameter roles of a system."""


class NameConflictError(ReactionNetworkError):
    """Incompatible definitions met while merging or flattening systems."""


class StructuralInconsistencyError(ReactionNetworkError):
    """A derived structural value is impossible (e.g. a negative deficiency)."""


class RoleConflictError(InvalidReactionError, DuplicateNameError):
    """One name used both as a species and as a parameter of a system.

    Raised by every add operation, so it can be caught either as an invalid
    reaction or as a duplicate name.
    """
