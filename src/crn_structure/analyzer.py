from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Sequence, Tuple, Union

import networkx as nx
import sympy as sp

from .complexes import (
    ReactionComplex,
    complex_outgoing_matrix,
    complex_stoich_matrix,
    incidence_matrix,
    reaction_complexes,
)
from .errors import StructuralInconsistencyError
from .stoichiometry import left_nullspace_basis
from .system import ReactionSystem


logger = logging.getLogger(__name__)


@dataclass
class NetworkAnalyzer:
    """Structural analysis of a :class:`ReactionSystem`.

    Every result is memoized in the system itself (see
    :meth:`ReactionSystem.memoize`), so analyzers are cheap to create and
    results are recomputed only after the system has been mutated. Nothing
    here modifies the system.

    Parameters
    ----------
    system:
        The network to analyze.

    Examples
    --------
    >>> an = NetworkAnalyzer(rn)
    >>> an.deficiency()
    0
    """

    system: ReactionSystem

    # ---------------------------------------------------------------------
    # Complexes
    # ---------------------------------------------------------------------

    def reaction_complexes(self) -> Tuple[List[ReactionComplex], List[Tuple[int, int]]]:
        """Deduplicated complexes and, per reaction, its (source, destination) complex indices."""
        rn = self.system
        return rn.memoize(
            "reaction_complexes",
            lambda: reaction_complexes(rn.species_names, rn.reactions),
        )

    def complex_labels(self) -> List[str]:
        complexes, _ = self.reaction_complexes()
        names = self.system.species_names
        return [c.label(names) for c in complexes]

    def complex_stoich_matrix(self) -> sp.ImmutableMatrix:
        """Species × complexes matrix (column j is the stoichiometry of complex j)."""
        complexes, _ = self.reaction_complexes()
        return self.system.memoize(
            "complex_stoich_matrix",
            lambda: complex_stoich_matrix(complexes, self.system.num_species),
        )

    def incidence_matrix(self) -> sp.ImmutableMatrix:
        """Complexes × reactions incidence matrix (-1 source, +1 destination)."""
        complexes, pairs = self.reaction_complexes()
        return self.system.memoize("incidence_matrix", lambda: incidence_matrix(len(complexes), pairs))

    def complex_outgoing_matrix(self) -> sp.ImmutableMatrix:
        """Complexes × reactions matrix marking each reaction's source complex with -1."""
        complexes, pairs = self.reaction_complexes()
        return self.system.memoize(
            "complex_outgoing_matrix",
            lambda: complex_outgoing_matrix(len(complexes), pairs),
        )

    # ---------------------------------------------------------------------
    # Reaction-complex graph
    # ---------------------------------------------------------------------

    def incidence_graph(self) -> nx.MultiDiGraph:
        """Directed multigraph of complexes (nodes) and reactions (edges).

        Nodes are complex indices carrying ``complex`` and ``label``
        attributes. Each reaction ``j`` is the edge ``src -> dst`` with key
        ``j`` and attributes ``reaction`` (the index) and ``rate``. Several
        reactions between the same complexes give parallel edges.

        Each call returns a fresh copy, so callers may mutate it.
        """
        return self._incidence_graph().copy()

    def _incidence_graph(self) -> nx.MultiDiGraph:
        return self.system.memoize("incidence_graph", self._build_incidence_graph)

    def _build_incidence_graph(self) -> nx.MultiDiGraph:
        complexes, pairs = self.reaction_complexes()
        labels = self.complex_labels()
        G = nx.MultiDiGraph()
        for i, cplx in enumerate(complexes):
            G.add_node(i, complex=cplx, label=labels[i])
        for j, (src, dst) in enumerate(pairs):
            G.add_edge(src, dst, key=j, reaction=j, rate=self.system.reactions[j].rate)
        return G

    # ---------------------------------------------------------------------
    # Species-reaction graph
    # ---------------------------------------------------------------------

    def species_reaction_graph(self) -> nx.DiGraph:
        """Bipartite directed graph of species and reactions.

        Species nodes are species names (``kind="species"``); reaction nodes
        are reaction indices (``kind="reaction"``, with ``rate`` and
        ``mass_action`` attributes). Edges:

        - ``species -> reaction`` for each substrate, ``role="substrate"``;
        - ``reaction -> species`` for each product, ``role="product"``;
        - ``species -> reaction`` with ``role="modifier"`` and ``stoich=0``
          for a species the rate references without consuming it.

        Every edge carries ``stoich``; edges into a reaction also carry
        ``in_rate``, true when the reaction's rate law depends on that
        species. Each call returns a fresh copy.
        """
        return self.system.memoize("species_reaction_graph", self._build_species_reaction_graph).copy()

    def _build_species_reaction_graph(self) -> nx.DiGraph:
        rn = self.system
        G = nx.DiGraph()
        for s in rn.species:
            G.add_node(s.name, kind="species", bipartite=0)
        for j, rx in enumerate(rn.reactions):
            G.add_node(j, kind="reaction", bipartite=1, rate=rx.rate, mass_action=rx.is_mass_action)
            depends = {s.name for s in rx.dependents()}
            for s, c in rx.substrates:
                G.add_edge(s.name, j, role="substrate", stoich=c, in_rate=s.name in depends)
            for name in sorted(depends - set(rx.substoich)):
                G.add_edge(name, j, role="modifier", stoich=0, in_rate=True)
            for s, c in rx.products:
                G.add_edge(j, s.name, role="product", stoich=c)
        return G

    # ---------------------------------------------------------------------
    # Linkage classes
    # ---------------------------------------------------------------------

    def linkage_classes(self) -> List[List[int]]:
        """Connected components of the reaction-complex graph, ignoring direction.

        Each class is a sorted list of complex indices; classes are ordered by
        their smallest member.
        """
        return self.system.memoize("linkage_classes", self._compute_linkage_classes)

    def _compute_linkage_classes(self) -> List[List[int]]:
        G = self._incidence_graph()
        classes = [sorted(c) for c in nx.connected_components(G.to_undirected(as_view=True))]
        classes.sort(key=lambda c: c[0])
        return classes

    def _linkage_class_reactions(self) -> List[List[int]]:
        _, pairs = self.reaction_complexes()
        owner: Dict[int, int] = {}
        for k, lc in enumerate(self.linkage_classes()):
            for c in lc:
                owner[c] = k
        out: List[List[int]] = [[] for _ in self.linkage_classes()]
        for j, (src, _dst) in enumerate(pairs):
            out[owner[src]].append(j)
        return out

    # ---------------------------------------------------------------------
    # Deficiency
    # ---------------------------------------------------------------------

    def stoichiometric_rank(self) -> int:
        """Rank of the net stoichiometry matrix (dimension of the stoichiometric subspace)."""
        return self.system.memoize("stoichiometric_rank", lambda: int(self.system.netstoich_matrix().rank()))

    def deficiency(self) -> int:
        """Number of complexes minus linkage classes minus stoichiometric rank."""
        return self.system.memoize("deficiency", self._compute_deficiency)

    def _compute_deficiency(self) -> int:
        complexes, _ = self.reaction_complexes()
        n_c = len(complexes)
        n_l = len(self.linkage_classes())
        s = self.stoichiometric_rank()
        delta = n_c - n_l - s
        if delta < 0:
            raise StructuralInconsistencyError(
                f"negative deficiency {delta} (complexes={n_c}, linkage classes={n_l}, rank={s})"
            )
        logger.debug("deficiency of %r: %d - %d - %d = %d", self.system.name, n_c, n_l, s, delta)
        return delta

    def linkage_deficiencies(self) -> List[int]:
        """Deficiency of every linkage class, in :meth:`linkage_classes` order."""
        return self.system.memoize("linkage_deficiencies", self._compute_linkage_deficiencies)

    def _compute_linkage_deficiencies(self) -> List[int]:
        N = self.system.netstoich_matrix()
        out: List[int] = []
        for lc, rxs in zip(self.linkage_classes(), self._linkage_class_reactions()):
            rank = int(N.extract(list(range(N.rows)), rxs).rank()) if rxs else 0
            delta = len(lc) - 1 - rank
            if delta < 0:
                raise StructuralInconsistencyError(
                    f"negative deficiency {delta} for linkage class {lc}"
                )
            out.append(delta)
        return out

    # ---------------------------------------------------------------------
    # Reversibility
    # ---------------------------------------------------------------------

    def is_reversible(self) -> bool:
        """True iff every reaction ``u -> v`` has a reverse reaction ``v -> u``."""
        return self.system.memoize("is_reversible", self._compute_is_reversible)

    def _compute_is_reversible(self) -> bool:
        _, pairs = self.reaction_complexes()
        edges = set(pairs)
        return all((dst, src) in edges for src, dst in pairs)

    def is_weakly_reversible(self) -> bool:
        """True iff every linkage class is strongly connected."""
        return self.system.memoize("is_weakly_reversible", self._compute_is_weakly_reversible)

    def _compute_is_weakly_reversible(self) -> bool:
        G = self._incidence_graph()
        return all(nx.is_strongly_connected(G.subgraph(lc)) for lc in self.linkage_classes())

    # ---------------------------------------------------------------------
    # Conservation laws
    # ---------------------------------------------------------------------

    def conservation_laws(self) -> sp.ImmutableMatrix:
        """Integer basis of the left null space of the net stoichiometry matrix.

        Each row ``g`` satisfies ``g^T N = 0``, so ``g . x`` is constant along
        every trajectory. Rows are primitive integer vectors with a positive
        first nonzero entry.
        """
        return self.system.memoize(
            "conservation_laws",
            lambda: left_nullspace_basis(self.system.netstoich_matrix(), integer_basis=True),
        )

    def conserved_quantities(
        self,
        state: Union[None, Mapping[Any, Any], Sequence[Any]] = None,
    ) -> List[sp.Expr]:
        """Evaluate the conservation laws.

        Parameters
        ----------
        state:
            ``None`` returns the symbolic combinations (e.g. ``A + B``). A
            mapping (keyed by species names, species or symbols) or a sequence
            in species order returns their values at that state.
        """
        rn = self.system
        gamma = self.conservation_laws()
        x = sp.Matrix(rn.species_symbols)
        exprs = [sp.expand((gamma.row(i) * x)[0, 0]) for i in range(gamma.rows)]
        if state is None:
            return exprs

        if isinstance(state, Mapping):
            values = rn.symbol_map(state)
        else:
            state = list(state)
            if len(state) != rn.num_species:
                raise ValueError(f"state must have {rn.num_species} entries; got {len(state)}")
            values = dict(zip(rn.species_symbols, state))

        out: List[sp.Expr] = []
        for e in exprs:
            missing = [s.name for s in e.free_symbols if s not in values]
            if missing:
                raise ValueError(f"state has no value for species {sorted(missing)}")
            out.append(e.xreplace({s: sp.sympify(v) for s, v in values.items()}))
        return out

    # ---------------------------------------------------------------------
    # Subnetworks
    # ---------------------------------------------------------------------

    def subnetworks(self) -> List[ReactionSystem]:
        """Split the network into one :class:`ReactionSystem` per linkage class.

        Reactions are partitioned; each subnetwork holds the species and
        parameters its reactions use. Two subnetworks share a species only
        when that species occurs in complexes of both linkage classes.
        Each call returns fresh copies, so mutating one does not affect later
        results.
        """
        return [sub.copy() for sub in self.system.memoize("subnetworks", self._compute_subnetworks)]

    def _compute_subnetworks(self) -> List[ReactionSystem]:
        rn = self.system
        out: List[ReactionSystem] = []
        defaults = {s.name: s for s in rn.species}
        params = {p.name: p for p in rn.parameters}
        for k, rxs in enumerate(self._linkage_class_reactions()):
            reactions = [rn.reactions[j] for j in rxs]
            used: Dict[str, None] = {}
            for rx in reactions:
                for s in rx.species + rx.dependents():
                    used.setdefault(s.name, None)
            used_params: Dict[str, None] = {}
            for j in rxs:
                for p in rn.reaction_parameters(j):
                    used_params.setdefault(p.name, None)
            sorder = rn.species_index
            porder = rn.parameter_index
            sub = ReactionSystem(
                reactions,
                iv=rn.iv,
                species=[defaults[name] for name in sorted(used, key=sorder.__getitem__)],
                parameters=[params[name] for name in sorted(used_params, key=porder.__getitem__)],
                name=f"{rn.name or 'network'}_{k + 1}",
                options=rn.options,
            )
            out.append(sub)
        return out
