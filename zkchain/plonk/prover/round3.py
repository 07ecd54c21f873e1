"""
PLONK Prover Round 3: 몫 다항식 t(x)
=====================================

  ┌─────────────────────────────────────────────────┐
  │  Verifier → Prover: α                          │
  │  Prover → Verifier: [t_lo]₁, [t_mid]₁, [t_hi]₁ │
  └─────────────────────────────────────────────────┘

C(x) = 게이트 항
     + α · (순열 분자·z(x) - 순열 분모·z(ω·x))
     + α² · (z(x) - 1)·L₁(x)

t(x) = C(x) / Z_H(x). 나머지가 남으면 배선 값이 제약을 만족하지 않는 것이다.
t(x)는 n개 계수씩 t_lo, t_mid, t_hi로 나누고 남는 고차 계수는 t_hi에 둔다.
"""

from zkchain.plonk.field import FR
from zkchain.plonk.polynomial import Polynomial, poly_div, lagrange_basis
from zkchain.plonk.permutation import K1, K2


def execute(state):
    """Round 3을 실행한다.

    Raises:
        ValueError: C(x)가 Z_H(x)로 나누어 떨어지지 않을 때
    """
    state.alpha = state.transcript.challenge_scalar(b"alpha")

    n = state.n
    pk = state.pk
    alpha, beta, gamma = state.alpha, state.beta, state.gamma
    a, b, c, z = state.a_poly, state.b_poly, state.c_poly, state.z_poly

    x = Polynomial([FR(0), FR(1)])
    gamma_poly = Polynomial.constant(gamma)

    # ── 게이트 항 ──
    gate_term = (
        pk.q_l_poly * a
        + pk.q_r_poly * b
        + pk.q_o_poly * c
        + pk.q_m_poly * (a * b)
        + pk.q_c_poly
        + state.pi_poly
    )

    # ── 순열 항 ──
    identity_side = (
        (a + x * beta + gamma_poly)
        * (b + x * (beta * K1) + gamma_poly)
        * (c + x * (beta * K2) + gamma_poly)
        * z
    )
    sigma_side = (
        (a + pk.s_sigma1_poly * beta + gamma_poly)
        * (b + pk.s_sigma2_poly * beta + gamma_poly)
        * (c + pk.s_sigma3_poly * beta + gamma_poly)
        * z.shift_argument(state.omega)
    )
    permutation_term = (identity_side - sigma_side) * alpha

    # ── 경계 항: z(ω⁰) = 1 ──
    boundary_term = (z - Polynomial.constant(FR(1))) * lagrange_basis(state.domain, 0) * (alpha * alpha)

    constraint = gate_term + permutation_term + boundary_term
    t_poly, remainder = poly_div(constraint, Polynomial.vanishing(n))
    if not remainder.is_zero():
        raise ValueError(
            "제약 다항식이 Z_H(x)로 나누어 떨어지지 않습니다. "
            "배선 값이 회로를 만족하지 않습니다."
        )

    # ── t(x) 3-분할 ──
    coeffs = list(t_poly.coeffs) + [FR(0)] * max(0, 3 * n - len(t_poly.coeffs))
    state.t_lo_poly = Polynomial(coeffs[:n])
    state.t_mid_poly = Polynomial(coeffs[n:2 * n])
    state.t_hi_poly = Polynomial(coeffs[2 * n:])

    proof = state.proof
    proof.t_lo_comm, proof.t_mid_comm, proof.t_hi_comm = state.commit_all(
        [state.t_lo_poly, state.t_mid_poly, state.t_hi_poly]
    )
    state.transcript.append_point(b"t_lo_comm", proof.t_lo_comm)
    state.transcript.append_point(b"t_mid_comm", proof.t_mid_comm)
    state.transcript.append_point(b"t_hi_comm", proof.t_hi_comm)
