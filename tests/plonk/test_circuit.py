"""
Tests for circuit.py and permutation.py

Covers:
- Gate 방정식, 출력 계산, PI 항
- ConstraintSystem: 공개 입력 행 순서, 도메인 패딩, 고정(freeze)
- 배선 순열 σ: 같은 변수의 위치들이 하나의 순환을 이룬다
- 순열 누적자: 올바른 배선이면 z가 1로 돌아온다
"""
import pytest

from zkchain.plonk.field import FR, get_roots_of_unity
from zkchain.plonk.circuit import Gate, ConstraintSystem, ZERO_VARIABLE, MIN_DOMAIN_SIZE
from zkchain.plonk.permutation import K1, K2, build_permutation_polynomials, compute_accumulator


def _addition_system():
    """y, z 공개, x 비공개, x + y == z (3 게이트)."""
    cs = ConstraintSystem()
    y, z, x = cs.new_variable(), cs.new_variable(), cs.new_variable()
    cs.add_public_input(y)
    cs.add_public_input(z)
    cs.add_gate(Gate(1, 1, -1, 0, 0), x, y, z)
    return cs, (x, y, z)


class TestGate:
    def test_addition_gate(self):
        gate = Gate(1, 1, -1, 0, 0)
        assert gate.check(FR(1), FR(2), FR(3))
        assert not gate.check(FR(1), FR(2), FR(4))

    def test_multiplication_gate(self):
        gate = Gate(0, 0, -1, 1, 0)
        assert gate.check(FR(4), FR(5), FR(20))

    def test_solve_output(self):
        """a + 5 = c 게이트의 출력."""
        gate = Gate(1, 0, -1, 0, 5, computes=True)
        assert gate.solve_output(FR(7), FR(0)) == FR(12)

    def test_public_input_gate_with_pi(self):
        """PI 행: a - w = 0."""
        gate = Gate.public_input()
        assert gate.check(FR(9), FR(0), FR(0), pi=FR(0) - FR(9))
        assert not gate.check(FR(9), FR(0), FR(0), pi=FR(0) - FR(8))

    def test_computing_gate_requires_q_o(self):
        with pytest.raises(ValueError):
            Gate(1, 1, 0, 0, 0, computes=True)


class TestConstraintSystem:
    def test_variable_zero_is_reserved(self):
        cs = ConstraintSystem()
        assert cs.new_variable() == 1
        assert ZERO_VARIABLE == 0

    def test_public_inputs_come_first(self):
        cs, (x, y, z) = _addition_system()
        assert cs.public_variables == [y, z]
        assert cs.num_public_inputs == 2
        assert cs.wires[0] == (y, ZERO_VARIABLE, ZERO_VARIABLE)

    def test_public_input_after_gate_rejected(self):
        cs, (x, _, _) = _addition_system()
        with pytest.raises(ValueError):
            cs.add_public_input(x)

    def test_domain_size(self):
        cs, _ = _addition_system()
        assert cs.num_gates == 3
        assert cs.domain_size == MIN_DOMAIN_SIZE == 4

    def test_padding(self):
        cs, _ = _addition_system()
        q_l, q_r, q_o, q_m, q_c = cs.selector_vectors()
        assert len(q_l) == 4
        assert q_l[3] == FR(0) and q_o[3] == FR(0)
        a, b, c = cs.wire_columns()
        assert a[3] == b[3] == c[3] == ZERO_VARIABLE

    def test_freeze(self):
        cs, _ = _addition_system()
        cs.freeze()
        with pytest.raises(RuntimeError):
            cs.new_variable()
        with pytest.raises(RuntimeError):
            cs.add_gate(Gate(1, 1, -1, 0, 0), 1, 2, 3)


class TestPermutation:
    def test_sigma_is_permutation(self):
        cs, _ = _addition_system()
        sigma = cs.build_permutation()
        assert sorted(sigma) == list(range(3 * cs.domain_size))

    def test_copy_cycle(self):
        """y는 0행 a열과 2행 b열에 있다: 두 위치가 서로를 가리킨다."""
        cs, _ = _addition_system()
        n = cs.domain_size
        sigma = cs.build_permutation()
        assert sigma[0] == n + 2
        assert sigma[n + 2] == 0

    def test_permutation_labels(self):
        cs, _ = _addition_system()
        n = cs.domain_size
        domain = get_roots_of_unity(n)
        s1, s2, s3 = build_permutation_polynomials(cs.build_permutation(), n, domain)
        assert s1[0] == K1 * domain[2]
        assert s2[2] == domain[0]
        assert len(s3) == n

    def test_accumulator_wraps_to_one(self):
        """배선이 복사 제약을 만족하면 마지막 곱까지 포함한 누적 곱이 1이다."""
        cs, (x, y, z) = _addition_system()
        n = cs.domain_size
        domain = get_roots_of_unity(n)
        sigma_evals = build_permutation_polynomials(cs.build_permutation(), n, domain)

        values = {ZERO_VARIABLE: FR(0), x: FR(1), y: FR(2), z: FR(3)}
        wires = tuple([values[v] for v in column] for column in cs.wire_columns())
        beta, gamma = FR(11), FR(13)
        z_evals = compute_accumulator(wires, sigma_evals, domain, beta, gamma)
        assert z_evals[0] == FR(1)

        a, b, c = wires
        s1, s2, s3 = sigma_evals
        i = n - 1
        last = z_evals[i] * (
            (a[i] + beta * domain[i] + gamma)
            * (b[i] + beta * K1 * domain[i] + gamma)
            * (c[i] + beta * K2 * domain[i] + gamma)
        ) / (
            (a[i] + beta * s1[i] + gamma)
            * (b[i] + beta * s2[i] + gamma)
            * (c[i] + beta * s3[i] + gamma)
        )
        assert last == FR(1)
