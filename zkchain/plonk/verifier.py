"""
PLONK Verifier
================

검증 키와 공개 입력만으로 증명을 확인한다.

**과정**:
  1. 트랜스크립트 재생 (공개 입력 → β, γ → α → ζ → r̄ → v → u)
  2. Z_H(ζ), L₁(ζ), PI(ζ) 계산
  3. r(x)의 커밋먼트 부분 [D]₁ 과 상수 r₀ 구성
  4. [F]₁ = [t_comb]₁ + v·([D]₁ + r₀·G₁) + v²[a]₁ + ... + v⁶[S_σ2]₁
     E    = t̄ + v·r̄ + v²ā + ... + v⁶s̄_σ2 + u·z̄_ω,   t̄ = r̄ / Z_H(ζ)
  5. 페어링 검사
       e([W_ζ]₁ + u·[W_ζω]₁, [τ]₂)
         == e(ζ·[W_ζ]₁ + uζω·[W_ζω]₁ + [F]₁ + u·[z]₁ - E·G₁, G₂)

검증은 거부된 증명에 대해 예외 없이 False를 반환한다.
입력 형식 검사는 호출자(zkchain.backend)의 책임이다.
"""

from zkchain.plonk.field import FR, G1, ec_mul, ec_add, ec_neg, ec_pairing
from zkchain.plonk.transcript import Transcript, transcript_label
from zkchain.plonk.permutation import K1, K2
from zkchain.plonk.utils import (
    vanishing_poly_eval,
    lagrange_basis_eval,
    public_input_poly_eval,
)


def verify(proof, public_inputs, vk, srs, recursive=False):
    """PLONK 증명을 검증한다.

    Args:
        proof: Proof
        public_inputs: 공개 입력 (FR 리스트, 길이 vk.num_public_inputs)
        vk: VerificationKey
        srs: 증명에 쓰인 것과 같은 SRS
        recursive: 증명을 만든 백엔드의 재귀 플래그

    Returns:
        bool
    """
    n = vk.n
    omega = vk.omega

    # ── 1. 트랜스크립트 재생 ──
    transcript = Transcript(transcript_label(recursive))
    transcript.append_scalars(b"public_input", public_inputs)
    transcript.append_point(b"a_comm", proof.a_comm)
    transcript.append_point(b"b_comm", proof.b_comm)
    transcript.append_point(b"c_comm", proof.c_comm)
    beta = transcript.challenge_scalar(b"beta")
    gamma = transcript.challenge_scalar(b"gamma")
    transcript.append_point(b"z_comm", proof.z_comm)
    alpha = transcript.challenge_scalar(b"alpha")
    transcript.append_point(b"t_lo_comm", proof.t_lo_comm)
    transcript.append_point(b"t_mid_comm", proof.t_mid_comm)
    transcript.append_point(b"t_hi_comm", proof.t_hi_comm)
    zeta = transcript.challenge_scalar(b"zeta")
    for name in ("a_eval", "b_eval", "c_eval", "s_sigma1_eval", "s_sigma2_eval", "z_omega_eval"):
        transcript.append_scalar(name.encode(), getattr(proof, name))
    transcript.append_scalar(b"r_eval", proof.r_eval)
    v = transcript.challenge_scalar(b"v")
    transcript.append_point(b"W_zeta_comm", proof.W_zeta_comm)
    transcript.append_point(b"W_zeta_omega_comm", proof.W_zeta_omega_comm)
    u = transcript.challenge_scalar(b"u")

    a_eval, b_eval, c_eval = proof.a_eval, proof.b_eval, proof.c_eval
    s1_eval, s2_eval = proof.s_sigma1_eval, proof.s_sigma2_eval
    z_omega_eval = proof.z_omega_eval

    # ── 2. 공개 값 ──
    zh_zeta = vanishing_poly_eval(n, zeta)
    if zh_zeta == FR(0):
        return False
    l1_zeta = lagrange_basis_eval(0, n, omega, zeta)
    pi_zeta = public_input_poly_eval(public_inputs, n, omega, zeta)

    # ── 3. [D]₁ 와 r₀ ──
    D = ec_mul(vk.q_m_comm, a_eval * b_eval)
    D = ec_add(D, ec_mul(vk.q_l_comm, a_eval))
    D = ec_add(D, ec_mul(vk.q_r_comm, b_eval))
    D = ec_add(D, ec_mul(vk.q_o_comm, c_eval))
    D = ec_add(D, vk.q_c_comm)

    z_scalar = (
        alpha
        * (a_eval + beta * zeta + gamma)
        * (b_eval + beta * K1 * zeta + gamma)
        * (c_eval + beta * K2 * zeta + gamma)
        + alpha * alpha * l1_zeta
    )
    D = ec_add(D, ec_mul(proof.z_comm, z_scalar))

    sigma_factor = (a_eval + beta * s1_eval + gamma) * (b_eval + beta * s2_eval + gamma)
    D = ec_add(D, ec_neg(ec_mul(vk.s_sigma3_comm, alpha * sigma_factor * beta * z_omega_eval)))

    r_0 = (
        pi_zeta
        - alpha * sigma_factor * z_omega_eval * (c_eval + gamma)
        - alpha * alpha * l1_zeta
    )

    # ── 4. [F]₁ 와 E ──
    zeta_n = zeta ** n
    F = ec_add(
        proof.t_lo_comm,
        ec_add(ec_mul(proof.t_mid_comm, zeta_n), ec_mul(proof.t_hi_comm, zeta_n * zeta_n)),
    )
    F = ec_add(F, ec_mul(ec_add(D, ec_mul(G1, r_0)), v))

    r_eval = proof.r_eval
    e_scalar = r_eval / zh_zeta + v * r_eval
    v_power = v
    for commitment, evaluation in (
        (proof.a_comm, a_eval),
        (proof.b_comm, b_eval),
        (proof.c_comm, c_eval),
        (vk.s_sigma1_comm, s1_eval),
        (vk.s_sigma2_comm, s2_eval),
    ):
        v_power = v_power * v
        F = ec_add(F, ec_mul(commitment, v_power))
        e_scalar = e_scalar + v_power * evaluation
    e_scalar = e_scalar + u * z_omega_eval

    # ── 5. 페어링 검사 ──
    A = ec_add(proof.W_zeta_comm, ec_mul(proof.W_zeta_omega_comm, u))
    B = ec_mul(proof.W_zeta_comm, zeta)
    B = ec_add(B, ec_mul(proof.W_zeta_omega_comm, u * zeta * omega))
    B = ec_add(B, F)
    B = ec_add(B, ec_mul(proof.z_comm, u))
    B = ec_add(B, ec_neg(ec_mul(G1, e_scalar)))

    return ec_pairing(srs.g2_powers[1], A) == ec_pairing(srs.g2_powers[0], B)
