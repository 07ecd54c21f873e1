"""
PLONK Prover Round 2: 순열 누적자 z(x)
=======================================

  ┌─────────────────────────────────────────────────┐
  │  Verifier → Prover: β, γ                       │
  │  Prover → Verifier: [z]₁                       │
  └─────────────────────────────────────────────────┘

z(x)는 ζ와 ζ·ω 두 점에서 열리므로 블라인딩 계수 3개를 쓴다.
"""

from zkchain.plonk.polynomial import Polynomial
from zkchain.plonk.permutation import compute_accumulator
from zkchain.plonk.prover.round1 import blind


def execute(state):
    """Round 2를 실행한다."""
    state.beta = state.transcript.challenge_scalar(b"beta")
    state.gamma = state.transcript.challenge_scalar(b"gamma")

    z_evals = compute_accumulator(
        (state.a_vals, state.b_vals, state.c_vals),
        state.pk.sigma_evals,
        state.domain,
        state.beta,
        state.gamma,
    )
    state.z_poly = blind(Polynomial.from_evaluations(z_evals, state.omega), state.n, 3)

    (state.proof.z_comm,) = state.commit_all([state.z_poly])
    state.transcript.append_point(b"z_comm", state.proof.z_comm)
