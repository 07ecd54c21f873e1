"""
PLONK Prover Round 4: 평가값
=============================

  ┌──────────────────────────────────────────────────┐
  │  Verifier → Prover: ζ                           │
  │  Prover → Verifier: ā, b̄, c̄, s̄_σ1, s̄_σ2, z̄_ω   │
  └──────────────────────────────────────────────────┘

z̄_ω = z(ζ·ω)는 순열 제약의 z(ω·x) 항 때문에 필요하다.
"""


def execute(state):
    """Round 4를 실행한다."""
    state.zeta = state.transcript.challenge_scalar(b"zeta")
    zeta = state.zeta
    proof = state.proof

    proof.a_eval = state.a_poly.evaluate(zeta)
    proof.b_eval = state.b_poly.evaluate(zeta)
    proof.c_eval = state.c_poly.evaluate(zeta)
    proof.s_sigma1_eval = state.pk.s_sigma1_poly.evaluate(zeta)
    proof.s_sigma2_eval = state.pk.s_sigma2_poly.evaluate(zeta)
    proof.z_omega_eval = state.z_poly.evaluate(zeta * state.omega)

    for name in ("a_eval", "b_eval", "c_eval", "s_sigma1_eval", "s_sigma2_eval", "z_omega_eval"):
        state.transcript.append_scalar(name.encode(), getattr(proof, name))
