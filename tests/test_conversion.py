import numpy as np
import pytest
import sympy as sp

from crn_structure import (
    Parameter,
    Reaction,
    ReactionSystem,
    Species,
    initial_state,
    jacobian,
    jump_propensities,
    ode_function,
    ode_ratelaws,
    ode_rhs,
    propensity_function,
    sde_noise_matrix,
    SystemOptions,
)
from crn_structure.conversion import parameter_substitutions
from crn_structure.examples import isomerization_network, sir_network


def _iso_symbols(rn):
    A, B = rn.species_symbols
    k1, km1 = rn.parameter_symbols
    return A, B, k1, km1


def test_ode_rhs_and_jacobian():
    rn = isomerization_network()
    A, B, k1, km1 = _iso_symbols(rn)
    F = ode_rhs(rn)
    assert sp.simplify(F[0] - (-k1 * A + km1 * B)) == 0
    assert sp.simplify(F[1] - (k1 * A - km1 * B)) == 0
    assert jacobian(rn) == sp.Matrix([[-k1, km1], [k1, -km1]])


def test_sde_noise_matrix():
    rn = isomerization_network()
    A, B, k1, km1 = _iso_symbols(rn)
    G = sde_noise_matrix(rn)
    expected = sp.Matrix(
        [
            [-sp.sqrt(k1 * A), sp.sqrt(km1 * B)],
            [sp.sqrt(k1 * A), -sp.sqrt(km1 * B)],
        ]
    )
    assert sp.simplify(G - expected) == sp.zeros(2, 2)


def test_system_option_controls_ode_combinatoric_default():
    X = Species("X")
    k = Parameter("k")
    rx = Reaction(k, [(X, 2)], [])
    plain = ReactionSystem([rx], options=SystemOptions(combinatoric_ratelaws=False))
    default = ReactionSystem([rx])
    x, ks = X.symbol, k.symbol
    assert ode_ratelaws(default) == [ks * x**2 / 2]
    assert ode_ratelaws(plain) == [ks * x**2]
    assert ode_ratelaws(plain, combinatoric=True) == [ks * x**2 / 2]
    # The option never changes the jump propensity.
    assert sp.expand(jump_propensities(plain)[0] - ks * x * (x - 1)) == 0
    assert sp.expand(jump_propensities(default)[0] - ks * x * (x - 1)) == 0
    assert sp.expand(jump_propensities(default, combinatoric=True)[0] - ks * x * (x - 1) / 2) == 0


def test_ode_function_evaluates_rhs():
    rn = isomerization_network()
    f = ode_function(rn, {"k1": 2.0, "km1": 1.0})
    np.testing.assert_allclose(f(0.0, np.array([1.0, 2.0])), [0.0, 0.0])
    np.testing.assert_allclose(f(0.0, np.array([3.0, 0.0])), [-6.0, 6.0])


def test_ode_function_conserves_total_amount():
    integrate = pytest.importorskip("scipy.integrate")
    rn = isomerization_network()
    f = ode_function(rn, {"k1": 2.0, "km1": 1.0})
    sol = integrate.solve_ivp(f, (0.0, 5.0), [3.0, 0.0], rtol=1e-8, atol=1e-10)
    assert sol.success
    np.testing.assert_allclose(sol.y.sum(axis=0), 3.0, rtol=1e-6)
    # Equilibrium: k1 A = km1 B with A + B = 3.
    np.testing.assert_allclose(sol.y[:, -1], [1.0, 2.0], rtol=1e-3)


def test_propensity_function():
    rn = sir_network()
    a = propensity_function(rn, {"β": 0.1, "γ": 0.05})
    np.testing.assert_allclose(a(np.array([10.0, 2.0, 0.0])), [2.0, 0.1])


def test_dimerization_propensity_is_falling_factorial():
    rn = ReactionSystem([Reaction(Parameter("k"), [(Species("X"), 2)], [])], parameters=[Parameter("k", 1.0)])
    a = propensity_function(rn)
    np.testing.assert_allclose(a(np.array([5.0])), [20.0])
    pairs = propensity_function(rn, combinatoric=True)
    np.testing.assert_allclose(pairs(np.array([5.0])), [10.0])


def test_missing_parameter_values():
    rn = isomerization_network()
    with pytest.raises(ValueError):
        parameter_substitutions(rn, {"k1": 1.0})
    with pytest.raises(ValueError):
        ode_function(rn, {"A": 1.0, "k1": 1.0, "km1": 1.0})


def test_initial_state_from_defaults():
    rn = ReactionSystem(
        [Reaction(Parameter("k"), [Species("A", 1.0)], [Species("B", 0.0)])],
    )
    np.testing.assert_allclose(initial_state(rn), [1.0, 0.0])
    np.testing.assert_allclose(initial_state(rn, {"B": 4}), [1.0, 4.0])
    with pytest.raises(ValueError):
        initial_state(ReactionSystem([Reaction(1, ["A"], [])]))
