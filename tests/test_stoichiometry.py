import pytest
import sympy as sp

from crn_structure import Reaction, ReactionSystem, Parameter, species
from crn_structure.examples import (
    michaelis_menten_network,
    repressilator_network,
    sir_network,
    sir_with_decay_network,
)
from crn_structure.stoichiometry import left_nullspace_basis, make_integer_row


def test_sir_matrices():
    rn = sir_network()
    assert rn.species_names == ["S", "I", "R"]
    assert rn.substoich_matrix() == sp.Matrix([[1, 0], [1, 1], [0, 0]])
    assert rn.prodstoich_matrix() == sp.Matrix([[0, 0], [2, 0], [0, 1]])
    assert rn.netstoich_matrix() == sp.Matrix([[-1, 0], [1, -1], [0, 1]])


@pytest.mark.parametrize(
    "factory",
    [sir_network, sir_with_decay_network, michaelis_menten_network, repressilator_network],
)
def test_net_is_product_minus_substrate(factory):
    rn = factory()
    N = rn.netstoich_matrix()
    assert N.shape == (rn.num_species, rn.num_reactions)
    assert N == rn.prodstoich_matrix() - rn.substoich_matrix()


def test_columns_match_reaction_vectors():
    rn = michaelis_menten_network()
    N = rn.netstoich_matrix()
    for j, rx in enumerate(rn.reactions):
        assert N[:, j] == rx.reaction_vector(rn.species_names)


def test_catalyst_has_zero_net_entry_but_shows_in_sub_and_prod():
    E, S, P = species("E S P")
    rn = ReactionSystem([Reaction(Parameter("k"), [E, S], [E, P])])
    assert rn.substoich_matrix()[:, 0] == sp.Matrix([1, 1, 0])
    assert rn.prodstoich_matrix()[:, 0] == sp.Matrix([1, 0, 1])
    assert rn.netstoich_matrix()[:, 0] == sp.Matrix([0, -1, 1])


def test_empty_system_matrices():
    rn = ReactionSystem(species=species("A B"))
    assert rn.netstoich_matrix().shape == (2, 0)
    assert left_nullspace_basis(rn.netstoich_matrix()) == sp.eye(2)


def test_left_nullspace_rows_are_primitive_integers():
    N = sp.Matrix([[-2, 0], [1, -1], [0, 3]])
    G = left_nullspace_basis(N)
    assert G.rows == 1
    assert G * N == sp.zeros(1, 2)
    assert list(G) == [3, 6, 2]


def test_make_integer_row():
    row = sp.Matrix([[sp.Rational(-1, 2), sp.Rational(1, 3), 0]])
    assert make_integer_row(row) == sp.Matrix([[3, -2, 0]])
    assert make_integer_row(sp.Matrix([[0, 0]])) == sp.Matrix([[0, 0]])
