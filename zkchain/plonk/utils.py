"""
PLONK 공유 유틸리티
===================

Prover와 Verifier가 함께 쓰는 스칼라 평가 함수들.

  - vanishing_poly_eval: Z_H(ζ) = ζ^n - 1
  - lagrange_basis_eval: L_i(ζ)
  - public_input_polynomial / public_input_poly_eval: PI(x) 구성과 평가
  - next_power_of_2: 도메인 크기 결정

**공개 입력 규약**:
  공개 입력 wᵢ는 i번째 행의 PI 게이트(q_L = 1)에 놓인다.
  PI(x) = -Σ wᵢ · Lᵢ(x) 로 두면 그 행의 게이트 방정식은
  aᵢ - wᵢ = 0 이 되어, 배선 aᵢ가 공개 값과 같음을 강제한다.
"""

from zkchain.plonk.field import FR
from zkchain.plonk.polynomial import Polynomial


def vanishing_poly_eval(n, zeta):
    """Z_H(ζ) = ζ^n - 1."""
    return zeta ** n - FR(1)


def lagrange_basis_eval(i, n, omega, zeta):
    """L_i(ζ) = (ωⁱ / n) · (ζ^n - 1) / (ζ - ωⁱ).

    ζ가 도메인 점 ωⁱ와 같으면 1을 반환한다.
    """
    if not isinstance(zeta, FR):
        zeta = FR(zeta)
    omega_i = omega ** i
    denominator = zeta - omega_i
    if denominator == FR(0):
        return FR(1)
    return omega_i * vanishing_poly_eval(n, zeta) / (FR(n) * denominator)


def public_input_polynomial(public_inputs, n, omega):
    """PI(x) = -Σ wᵢ · Lᵢ(x) (계수 표현)."""
    if not public_inputs:
        return Polynomial.zero()
    evals = [FR(0)] * n
    for i, value in enumerate(public_inputs):
        evals[i] = FR(0) - FR(int(value))
    return Polynomial.from_evaluations(evals, omega)


def public_input_poly_eval(public_inputs, n, omega, zeta):
    """PI(ζ)를 다항식 보간 없이 Lagrange 기저 평가로 계산한다."""
    result = FR(0)
    for i, value in enumerate(public_inputs):
        result = result - FR(int(value)) * lagrange_basis_eval(i, n, omega, zeta)
    return result


def next_power_of_2(n):
    """n 이상의 가장 작은 2의 거듭제곱 (n ≤ 1이면 1)."""
    p = 1
    while p < n:
        p <<= 1
    return p
