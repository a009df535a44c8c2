import pickle

import pytest
import sympy as sp

from crn_structure import (
    DuplicateNameError,
    InvalidReactionError,
    NameConflictError,
    Parameter,
    RoleConflictError,
    Reaction,
    ReactionSystem,
    Species,
    SystemOptions,
    compose,
    extend,
    flatten,
    parameters,
    species,
)
from crn_structure.examples import isomerization_network, reversible_binding_network, sir_network


def test_species_and_parameters_are_inferred_from_reactions():
    rn = sir_network()
    assert rn.species_names == ["S", "I", "R"]
    assert rn.parameter_names == ["β", "γ"]
    assert rn.num_reactions == 2
    assert rn.iv == sp.Symbol("t", positive=True)


def test_species_referenced_only_by_a_rate_are_added():
    A, B, E = species("A B E")
    k, = parameters("k")
    rn = ReactionSystem([Reaction(k.symbol * E.symbol, [A], [B])])
    assert rn.species_names == ["A", "B", "E"]
    assert rn.parameter_names == ["k"]


def test_explicit_order_takes_precedence():
    rn = isomerization_network()
    other = ReactionSystem(rn.reactions, species=species("B A"), parameters=parameters("km1 k1"))
    assert other.species_names == ["B", "A"]
    assert other.parameter_names == ["km1", "k1"]


def test_adding_a_species_twice_is_idempotent():
    rn = ReactionSystem()
    assert rn.add_species(Species("X")) == 0
    rev = rn.revision
    assert rn.add_species("X") == 0
    assert rn.num_species == 1
    assert rn.revision == rev


def test_duplicate_policy_error():
    rn = ReactionSystem(options=SystemOptions(duplicate_policy="error"))
    rn.add_species("X")
    rn.add_parameter("k")
    with pytest.raises(DuplicateNameError):
        rn.add_species("X")
    with pytest.raises(DuplicateNameError):
        rn.add_parameter("k")


def test_invalid_options():
    with pytest.raises(ValueError):
        SystemOptions(duplicate_policy="replace")
    with pytest.raises(ValueError):
        SystemOptions(namespace_separator="")


def test_name_cannot_be_both_species_and_parameter():
    rn = ReactionSystem()
    rn.add_species("X")
    with pytest.raises(DuplicateNameError):
        rn.add_parameter("X")
    rn.add_parameter("k")
    with pytest.raises(DuplicateNameError):
        rn.add_species("k")


def test_conflicting_defaults_are_rejected():
    rn = ReactionSystem(species=[Species("X", 1.0)])
    with pytest.raises(DuplicateNameError):
        rn.add_species(Species("X", 2.0))
    with pytest.raises(InvalidReactionError):
        rn.add_reaction(Reaction(1, [Species("X", 2.0)], []))


def test_reaction_using_a_parameter_as_species_is_rejected():
    X, = species("X")
    rn = ReactionSystem(parameters=parameters("X"))
    rev = rn.revision
    with pytest.raises(InvalidReactionError):
        rn.add_reaction(Reaction(1, [X], []))
    # Nothing was added.
    assert rn.num_reactions == 0
    assert rn.num_species == 0
    assert rn.revision == rev


def test_role_clash_is_the_same_error_for_every_add_operation():
    X, = species("X")
    rn = ReactionSystem(parameters=parameters("X"))
    for add in (lambda: rn.add_species("X"), lambda: rn.add_reaction(Reaction(1, [X], []))):
        with pytest.raises(RoleConflictError) as info:
            add()
        assert isinstance(info.value, DuplicateNameError)
        assert isinstance(info.value, InvalidReactionError)
    rn = ReactionSystem(species=["k"])
    with pytest.raises(RoleConflictError):
        rn.add_parameter("k")
    with pytest.raises(DuplicateNameError):
        rn.add_reaction(Reaction(Parameter("k"), ["Y"], []))


def test_rate_symbol_named_like_a_species_is_rejected():
    S, = species("S")
    with pytest.raises(InvalidReactionError):
        ReactionSystem([Reaction(sp.Symbol("S") * Parameter("k").symbol, [S], [])])


def test_rate_may_reference_time():
    X, = species("X")
    rn = ReactionSystem([Reaction(Parameter("k").symbol * sp.Symbol("t"), [X], [])])
    assert rn.parameter_names == ["k"]


def test_add_reaction_bumps_revision_and_refreshes_matrices():
    rn = isomerization_network()
    N = rn.netstoich_matrix()
    assert rn.netstoich_matrix() is N
    rev = rn.revision
    C, = species("C")
    assert rn.add_reaction(Reaction(Parameter("k3"), [rn.species[1]], [C])) == 2
    assert rn.revision > rev
    assert rn.netstoich_matrix().shape == (3, 3)


def test_extend_merges_without_touching_inputs():
    a = isomerization_network()
    b = reversible_binding_network()
    c = extend(a, b, name="both")
    assert c.name == "both"
    assert c.species_names == ["A", "B", "X", "Y", "XY"]
    assert c.num_reactions == 4
    assert a.num_species == 2 and b.num_species == 3

    # Reactions already present are not duplicated.
    assert extend(c, a).num_reactions == 4


def test_extend_rejects_conflicts():
    a = isomerization_network()
    clash = ReactionSystem(parameters=parameters("A"))
    with pytest.raises(NameConflictError):
        extend(a, clash)
    other_default = ReactionSystem(species=[Species("A", 5)])
    with pytest.raises(NameConflictError):
        extend(a, other_default)
    with pytest.raises(NameConflictError):
        extend(a, ReactionSystem(iv="tau"))


def test_merge_is_all_or_nothing():
    a = isomerization_network()
    bad = ReactionSystem([Reaction(Parameter("k9"), ["Z"], [])], parameters=parameters("A"))
    with pytest.raises(NameConflictError):
        a.merge(bad)
    assert a.species_names == ["A", "B"]
    assert a.num_reactions == 2


def test_compose_keeps_namespaces_separate():
    root = isomerization_network()
    child = reversible_binding_network()
    composed = compose(root, child)
    assert composed.num_species == 2
    assert [c.name for c in composed.systems] == ["binding"]
    assert composed.subsystem("binding") == child
    # The child is stored as a copy.
    assert composed.subsystem("binding") is not child
    assert root.systems == ()


def test_compose_requires_unique_names():
    root = isomerization_network()
    with pytest.raises(NameConflictError):
        compose(root, ReactionSystem())
    with pytest.raises(NameConflictError):
        compose(root, reversible_binding_network(), reversible_binding_network())


def test_flatten_prefixes_subsystem_names():
    root = isomerization_network()
    child = sir_network()
    flat = flatten(compose(root, child))
    assert flat.species_names == ["A", "B", "sir.S", "sir.I", "sir.R"]
    assert flat.parameter_names == ["k1", "km1", "sir.β", "sir.γ"]
    assert flat.num_reactions == root.num_reactions + child.num_reactions
    assert flat.systems == ()

    infection = flat.reactions[2]
    assert infection.substoich == {"sir.S": 1, "sir.I": 1}
    assert {s.name for s in infection.rate.free_symbols} == {"sir.β"}


def test_flatten_nested():
    leaf = ReactionSystem([Reaction(Parameter("k"), ["X"], [])], name="leaf")
    mid = compose(ReactionSystem(name="mid"), leaf)
    flat = flatten(compose(ReactionSystem(name="top"), mid))
    assert flat.species_names == ["mid.leaf.X"]
    assert flat.parameter_names == ["mid.leaf.k"]


def test_flatten_custom_separator():
    opts = SystemOptions(namespace_separator="__")
    leaf = ReactionSystem([Reaction(1, ["X"], [])], name="leaf")
    flat = flatten(compose(ReactionSystem(name="top", options=opts), leaf))
    assert flat.species_names == ["leaf__X"]


def test_flatten_collision():
    leaf = ReactionSystem([Reaction(1, ["X"], [])], name="leaf")
    root = ReactionSystem(species=["leaf.X"], name="root")
    with pytest.raises(NameConflictError):
        flatten(compose(root, leaf))


def test_flatten_of_flat_system_is_equal():
    rn = sir_network()
    assert flatten(rn) == rn


def test_equality_ignores_species_order_but_not_reaction_order():
    rn = isomerization_network()
    reordered = ReactionSystem(rn.reactions, species=species("B A"))
    assert reordered == rn
    assert ReactionSystem(rn.reactions[::-1]) != rn


def test_copy_is_independent():
    rn = sir_network()
    cp = rn.copy(name="other")
    cp.add_species("D")
    assert cp.name == "other"
    assert rn.num_species == 3


def test_pickle_round_trip():
    rn = compose(sir_network(), isomerization_network())
    rn.netstoich_matrix()
    back = pickle.loads(pickle.dumps(rn))
    assert back == rn
    assert back.subsystem("isomerization") == rn.subsystem("isomerization")
    assert back.netstoich_matrix() == rn.netstoich_matrix()


def test_symbol_map_and_defaults():
    rn = ReactionSystem(
        [Reaction(Parameter("k"), [Species("A", 1.0)], ["B"])],
        parameters=[Parameter("k", 2.0)],
    )
    assert rn.default_values() == {rn.species_symbols[0]: 1.0, rn.parameter_symbols[0]: 2.0}
    m = rn.symbol_map({"A": 3, Species("B"): 4, Parameter("k"): 5})
    assert m == {rn.species_symbols[0]: 3, rn.species_symbols[1]: 4, rn.parameter_symbols[0]: 5}
    with pytest.raises(ValueError):
        rn.symbol_map({"Q": 1})
