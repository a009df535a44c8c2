import pytest
import sympy as sp

from crn_structure import InvalidReactionError, Parameter, Reaction, Species, species, parameters


def test_repeated_mentions_are_aggregated():
    X, Y = species("X Y")
    k, = parameters("k")
    rx = Reaction(k, [X, X, Y], [Y])
    assert rx.substoich == {"X": 2, "Y": 1}
    assert rx.prodstoich == {"Y": 1}


def test_pairs_and_parallel_coefficients_agree():
    X, Y = species("X Y")
    k, = parameters("k")
    a = Reaction(k, [(X, 2)], [(Y, 3)])
    b = Reaction(k, [X], [Y], [2], [3])
    c = Reaction(k, ["X", "X"], ["Y", "Y", "Y"])
    assert a == b == c
    assert hash(a) == hash(b)


@pytest.mark.parametrize("coef", [0, -1, 1.5, sp.Rational(1, 2), True, "2"])
def test_invalid_coefficients_are_rejected(coef):
    X, Y = species("X Y")
    with pytest.raises(InvalidReactionError):
        Reaction(1, [X], [Y], [coef], [1])


def test_integer_valued_float_coefficient_is_accepted():
    X, Y = species("X Y")
    rx = Reaction(1, [X], [Y], [2.0], [1])
    assert rx.substoich == {"X": 2}


def test_empty_reaction_is_rejected():
    with pytest.raises(InvalidReactionError):
        Reaction(1, [], [])


def test_mismatched_coefficient_list_is_rejected():
    X, Y = species("X Y")
    with pytest.raises(InvalidReactionError):
        Reaction(1, [X, Y], [], [1])


def test_is_mass_action_depends_on_species_in_rate():
    S, I = species("S I")
    beta, v, K = parameters("beta v K")
    assert Reaction(beta, [S, I], [(I, 2)]).is_mass_action
    assert Reaction(beta.symbol * 2 + 1, [S], [I]).is_mass_action
    assert Reaction(3.0, [S], [I]).is_mass_action
    assert not Reaction(v.symbol * S.symbol / (K.symbol + S.symbol), [S], [I]).is_mass_action
    # Species that are not substrates still count.
    assert not Reaction(beta.symbol * I.symbol, [S], [I]).is_mass_action


def test_only_use_rate_disables_mass_action():
    X, Y = species("X Y")
    rx = Reaction(Parameter("k"), [X], [Y], only_use_rate=True)
    assert not rx.is_mass_action
    assert "=>" in str(rx)


def test_catalyst_cancels_in_net_stoichiometry():
    E, S, P = species("E S P")
    rx = Reaction(Parameter("k"), [E, S], [E, P])
    assert rx.netstoich == {"S": -1, "P": 1}
    assert rx.reaction_vector(["E", "S", "P"]) == sp.Matrix([0, -1, 1])


def test_dependents():
    S, I, R = species("S I R")
    beta, = parameters("beta")
    assert [s.name for s in Reaction(beta, [S, I], [(I, 2)]).dependents()] == ["S", "I"]
    assert [s.name for s in Reaction(S.symbol**2, [R], []).dependents()] == ["S"]


def test_plain_symbols_become_positive_parameters():
    X, = species("X")
    rx = Reaction(sp.Symbol("k"), [X], [])
    assert rx.rate == Parameter("k").symbol
    assert rx == Reaction(Parameter("k"), [X], [])


def test_string_form():
    S, I = species("S I")
    rx = Reaction(Parameter("beta"), [S, I], [(I, 2)])
    assert str(rx) == "beta, S + I --> 2I"
    assert str(Reaction(1, [S], [])) == "1, S --> ∅"


def test_conflicting_species_definitions_are_rejected():
    with pytest.raises(InvalidReactionError):
        Reaction(1, [Species("X", 1.0)], [Species("X", 2.0)])
