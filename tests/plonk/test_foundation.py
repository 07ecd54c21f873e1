"""
Foundation module tests: field.py, polynomial.py, utils.py
"""
import pytest
from zkchain.plonk.field import (
    FR, CURVE_ORDER, G1, G2, Z1,
    ec_mul, ec_add, ec_neg, ec_pairing, is_on_g1,
    get_root_of_unity, get_roots_of_unity,
)
from zkchain.plonk.polynomial import Polynomial, fft, ifft, poly_div, lagrange_basis
from zkchain.plonk.utils import (
    vanishing_poly_eval,
    lagrange_basis_eval,
    public_input_polynomial,
    public_input_poly_eval,
    next_power_of_2,
)


# =====================================================================
# FR arithmetic
# =====================================================================

class TestFR:
    def test_modular_reduction(self):
        assert FR(CURVE_ORDER) == FR(0)
        assert FR(CURVE_ORDER + 7) == FR(7)

    def test_subtraction_wrap(self):
        assert FR(0) - FR(1) == FR(CURVE_ORDER - 1)

    def test_division_inverse(self):
        a = FR(3)
        assert a * (FR(1) / a) == FR(1)

    def test_fermat_little_theorem(self):
        assert FR(7) ** (CURVE_ORDER - 1) == FR(1)

    def test_field_modulus(self):
        assert FR.field_modulus == CURVE_ORDER


# =====================================================================
# EC operations
# =====================================================================

class TestEC:
    def test_ec_mul_fr(self):
        assert ec_mul(G1, FR(5)) == ec_mul(G1, 5)

    def test_ec_mul_modular(self):
        assert ec_mul(G1, CURVE_ORDER) is Z1

    def test_ec_neg(self):
        P = ec_mul(G1, 5)
        assert ec_add(P, ec_neg(P)) is Z1

    def test_ec_mul_scalar_add(self):
        assert ec_add(ec_mul(G1, 3), ec_mul(G1, 7)) == ec_mul(G1, 10)

    def test_ec_pairing_bilinearity(self):
        a, b = 3, 5
        lhs = ec_pairing(G2, ec_mul(G1, a * b))
        rhs = ec_pairing(ec_mul(G2, b), ec_mul(G1, a))
        assert lhs == rhs

    def test_is_on_g1(self):
        """생성자, 무한원점은 유효하고 임의 좌표는 유효하지 않다."""
        assert is_on_g1(G1)
        assert is_on_g1(None)
        x, y = G1
        assert not is_on_g1((x, y + 1))


# =====================================================================
# Roots of Unity
# =====================================================================

class TestRootsOfUnity:
    def test_primitive_root(self):
        omega = get_root_of_unity(4)
        assert omega ** 4 == FR(1)
        assert omega ** 2 != FR(1)

    @pytest.mark.parametrize("n", [0, 3, 1 << 29])
    def test_invalid_size(self, n):
        with pytest.raises(ValueError):
            get_root_of_unity(n)

    def test_get_roots_of_unity_distinct(self):
        roots = get_roots_of_unity(8)
        assert roots[0] == FR(1)
        assert len(set(int(r) for r in roots)) == 8


# =====================================================================
# Polynomial
# =====================================================================

class TestPolynomial:
    def test_trim(self):
        p = Polynomial([FR(1), FR(2), FR(0), FR(0)])
        assert len(p.coeffs) == 2
        assert p.degree == 1

    def test_zero_poly(self):
        assert Polynomial().is_zero()
        assert Polynomial.zero().degree == 0

    def test_add_different_degree(self):
        r = Polynomial([1, 2, 3]) + Polynomial([4])
        assert r.coeffs == [FR(5), FR(2), FR(3)]

    def test_rsub(self):
        r = 5 - Polynomial([1, 2])
        assert r.coeffs == [FR(4), FR(CURVE_ORDER - 2)]

    def test_mul_poly(self):
        # (1 + 2x) * (3 + 4x) = 3 + 10x + 8x^2
        r = Polynomial([1, 2]) * Polynomial([3, 4])
        assert r.coeffs == [FR(3), FR(10), FR(8)]

    def test_mul_scalar(self):
        assert (3 * Polynomial([1, 2])).coeffs == [FR(3), FR(6)]

    def test_evaluate_quadratic(self):
        # 1 + 2x + 3x^2 at x=2 => 17
        assert Polynomial([1, 2, 3]).evaluate(2) == FR(17)

    def test_eq_with_int(self):
        assert Polynomial([FR(5)]) == 5

    def test_shift_argument(self):
        """p(k·x)의 평가는 p를 k·x에서 평가한 값과 같다."""
        p = Polynomial([3, 1, 4, 1])
        k = FR(7)
        assert p.shift_argument(k).evaluate(FR(2)) == p.evaluate(k * FR(2))

    def test_vanishing_on_domain(self):
        z = Polynomial.vanishing(4)
        for root in get_roots_of_unity(4):
            assert z.evaluate(root) == FR(0)
        assert z.evaluate(FR(2)) == FR(15)


# =====================================================================
# FFT / 나눗셈 / Lagrange
# =====================================================================

class TestFFT:
    def test_fft_matches_evaluation(self):
        coeffs = [FR(1), FR(2), FR(3), FR(4)]
        omega = get_root_of_unity(4)
        evals = fft(coeffs, omega)
        p = Polynomial(coeffs)
        for i, root in enumerate(get_roots_of_unity(4)):
            assert evals[i] == p.evaluate(root)

    def test_ifft_inverts_fft(self):
        coeffs = [FR(5), FR(0), FR(7), FR(11), FR(2), FR(0), FR(0), FR(9)]
        omega = get_root_of_unity(8)
        assert ifft(fft(coeffs, omega), omega) == coeffs

    def test_from_evaluations(self):
        evals = [FR(3), FR(1), FR(4), FR(1)]
        omega = get_root_of_unity(4)
        p = Polynomial.from_evaluations(evals, omega)
        for root, expected in zip(get_roots_of_unity(4), evals):
            assert p.evaluate(root) == expected


class TestPolyDiv:
    def test_exact_division(self):
        # (x^2 - 1) / (x - 1) = x + 1
        q, r = poly_div(Polynomial([-1, 0, 1]), Polynomial([-1, 1]))
        assert q == Polynomial([1, 1])
        assert r.is_zero()

    def test_remainder(self):
        # (x^2 + 1) / (x - 1) = x + 1, 나머지 2
        q, r = poly_div(Polynomial([1, 0, 1]), Polynomial([-1, 1]))
        assert q == Polynomial([1, 1])
        assert r == Polynomial([2])

    def test_lower_degree_dividend(self):
        q, r = poly_div(Polynomial([5]), Polynomial([0, 1]))
        assert q.is_zero()
        assert r == Polynomial([5])

    def test_divide_by_zero(self):
        with pytest.raises(ValueError):
            poly_div(Polynomial([1, 2]), Polynomial.zero())


class TestLagrange:
    def test_basis_is_kronecker_delta(self):
        domain = get_roots_of_unity(4)
        L1 = lagrange_basis(domain, 1)
        for j, point in enumerate(domain):
            assert L1.evaluate(point) == (FR(1) if j == 1 else FR(0))

    def test_basis_eval_matches_polynomial(self):
        n = 8
        omega = get_root_of_unity(n)
        domain = get_roots_of_unity(n)
        zeta = FR(123456789)
        for i in (0, 3):
            assert lagrange_basis_eval(i, n, omega, zeta) == lagrange_basis(domain, i).evaluate(zeta)

    def test_basis_eval_on_domain_point(self):
        omega = get_root_of_unity(4)
        assert lagrange_basis_eval(2, 4, omega, omega ** 2) == FR(1)


# =====================================================================
# Utils
# =====================================================================

class TestUtils:
    def test_vanishing_poly_eval(self):
        assert vanishing_poly_eval(4, FR(2)) == FR(15)

    def test_public_input_polynomial_is_negated(self):
        """PI(ωⁱ) = -wᵢ, 공개 입력 행 이후는 0."""
        n = 4
        omega = get_root_of_unity(n)
        pi = public_input_polynomial([FR(2), FR(3)], n, omega)
        domain = get_roots_of_unity(n)
        assert pi.evaluate(domain[0]) == FR(0) - FR(2)
        assert pi.evaluate(domain[1]) == FR(0) - FR(3)
        assert pi.evaluate(domain[2]) == FR(0)

    def test_public_input_eval_matches_polynomial(self):
        n = 8
        omega = get_root_of_unity(n)
        inputs = [FR(5), FR(6), FR(7)]
        zeta = FR(987654321)
        assert (public_input_poly_eval(inputs, n, omega, zeta)
                == public_input_polynomial(inputs, n, omega).evaluate(zeta))

    def test_empty_public_inputs(self):
        assert public_input_polynomial([], 4, get_root_of_unity(4)).is_zero()

    @pytest.mark.parametrize("n, expected", [(0, 1), (1, 1), (3, 4), (4, 4), (5, 8)])
    def test_next_power_of_2(self, n, expected):
        assert next_power_of_2(n) == expected
