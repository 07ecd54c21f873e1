"""
PLONK Prover Round 5: 선형화와 열기 증명
=========================================

  ┌─────────────────────────────────────────────────┐
  │  Prover → Verifier: r̄                          │
  │  Verifier → Prover: v                          │
  │  Prover → Verifier: [W_ζ]₁, [W_ζω]₁            │
  └─────────────────────────────────────────────────┘

**선형화 다항식 r(x)**:
  Round 4 평가값을 상수로 대입해 곱셈 항을 "스칼라 × 다항식"으로 바꾼다.
    게이트:  ā·b̄·q_M(x) + ā·q_L(x) + b̄·q_R(x) + c̄·q_O(x) + q_C(x) + PI(ζ)
    순열:    α·(ā+βζ+γ)(b̄+βK1ζ+γ)(c̄+βK2ζ+γ)·z(x)
           - α·(ā+βs̄1+γ)(b̄+βs̄2+γ)·β·z̄ω·S_σ3(x)
           - α·(ā+βs̄1+γ)(b̄+βs̄2+γ)·(c̄+γ)·z̄ω
    경계:    α²·L₁(ζ)·(z(x) - 1)
  r(ζ) = C(ζ) = t(ζ)·Z_H(ζ) 이므로 Verifier는 t(ζ) = r̄ / Z_H(ζ)로 복원한다.

**일괄 열기**:
  W_ζ(x)  = [ (t_comb - t̄) + v(r - r̄) + v²(a - ā) + v³(b - b̄)
              + v⁴(c - c̄) + v⁵(S_σ1 - s̄_σ1) + v⁶(S_σ2 - s̄_σ2) ] / (x - ζ)
  W_ζω(x) = (z(x) - z̄_ω) / (x - ζω)
"""

from zkchain.plonk.field import FR
from zkchain.plonk.polynomial import Polynomial, poly_div
from zkchain.plonk.permutation import K1, K2
from zkchain.plonk.utils import lagrange_basis_eval


def _open_at(poly, point):
    """(poly(x) - poly(point)) / (x - point)의 몫."""
    quotient, _ = poly_div(poly - Polynomial.constant(poly.evaluate(point)),
                           Polynomial([FR(0) - point, FR(1)]))
    return quotient


def execute(state):
    """Round 5를 실행한다."""
    n = state.n
    pk = state.pk
    proof = state.proof
    zeta, omega = state.zeta, state.omega
    alpha, beta, gamma = state.alpha, state.beta, state.gamma

    a_eval, b_eval, c_eval = proof.a_eval, proof.b_eval, proof.c_eval
    s1_eval, s2_eval = proof.s_sigma1_eval, proof.s_sigma2_eval
    z_omega_eval = proof.z_omega_eval

    l1_zeta = lagrange_basis_eval(0, n, omega, zeta)
    pi_zeta = state.pi_poly.evaluate(zeta)

    # ── 1. 선형화 다항식 r(x) ──
    r_poly = (
        pk.q_m_poly * (a_eval * b_eval)
        + pk.q_l_poly * a_eval
        + pk.q_r_poly * b_eval
        + pk.q_o_poly * c_eval
        + pk.q_c_poly
        + Polynomial.constant(pi_zeta)
    )

    z_scalar = (
        alpha
        * (a_eval + beta * zeta + gamma)
        * (b_eval + beta * K1 * zeta + gamma)
        * (c_eval + beta * K2 * zeta + gamma)
    )
    sigma_factor = (a_eval + beta * s1_eval + gamma) * (b_eval + beta * s2_eval + gamma)
    s3_scalar = alpha * sigma_factor * beta * z_omega_eval
    permutation_constant = FR(0) - alpha * sigma_factor * z_omega_eval * (c_eval + gamma)

    r_poly = r_poly + state.z_poly * (z_scalar + alpha * alpha * l1_zeta)
    r_poly = r_poly - pk.s_sigma3_poly * s3_scalar
    r_poly = r_poly + Polynomial.constant(permutation_constant - alpha * alpha * l1_zeta)

    proof.r_eval = r_poly.evaluate(zeta)
    state.transcript.append_scalar(b"r_eval", proof.r_eval)

    # ── 2. v 챌린지 ──
    state.v = state.transcript.challenge_scalar(b"v")
    v = state.v

    # ── 3. 일괄 열기 W_ζ ──
    zeta_n = zeta ** n
    t_combined = (
        state.t_lo_poly
        + state.t_mid_poly * zeta_n
        + state.t_hi_poly * (zeta_n * zeta_n)
    )

    batched = t_combined
    v_power = FR(1)
    for poly in (r_poly, state.a_poly, state.b_poly, state.c_poly,
                 pk.s_sigma1_poly, pk.s_sigma2_poly):
        v_power = v_power * v
        batched = batched + poly * v_power

    # ── 4. W_ζ, W_ζω 커밋 ──
    proof.W_zeta_comm, proof.W_zeta_omega_comm = state.commit_all(
        [_open_at(batched, zeta), _open_at(state.z_poly, zeta * omega)]
    )
    state.transcript.append_point(b"W_zeta_comm", proof.W_zeta_comm)
    state.transcript.append_point(b"W_zeta_omega_comm", proof.W_zeta_omega_comm)
