"""
PLONK Prover Round 1: 공개 입력과 배선 다항식 커밋먼트
======================================================

  ┌─────────────────────────────────────────────────┐
  │  Prover → Verifier: [a]₁, [b]₁, [c]₁          │
  └─────────────────────────────────────────────────┘

1. 공개 입력을 트랜스크립트에 흡수한다. 이후의 모든 챌린지가
   공개 입력에 묶이므로 다른 공개 입력으로는 같은 증명이 검증되지 않는다.
2. PI(x) = -Σ wᵢ·Lᵢ(x)를 만든다.
3. 배선 값을 IFFT로 보간하고 (b₁·x + b₂)·Z_H(x)로 블라인딩한다.
4. 세 다항식을 커밋한다.
"""

import secrets

from zkchain.plonk.field import FR, CURVE_ORDER
from zkchain.plonk.polynomial import Polynomial
from zkchain.plonk.utils import public_input_polynomial


def blind(poly, n, count):
    """poly + (r₀ + r₁·x + ...)·Z_H(x). 도메인 위의 값은 바뀌지 않는다."""
    coeffs = [FR(secrets.randbelow(CURVE_ORDER)) for _ in range(count)]
    return poly + Polynomial(coeffs) * Polynomial.vanishing(n)


def execute(state):
    """Round 1을 실행한다."""
    n = state.n
    omega = state.omega

    # ── 1. 공개 입력 흡수 ──
    state.transcript.append_scalars(b"public_input", state.public_inputs)
    state.pi_poly = public_input_polynomial(state.public_inputs, n, omega)

    # ── 2. 배선 다항식 보간 + 블라인딩 ──
    state.a_poly = blind(Polynomial.from_evaluations(state.a_vals, omega), n, 2)
    state.b_poly = blind(Polynomial.from_evaluations(state.b_vals, omega), n, 2)
    state.c_poly = blind(Polynomial.from_evaluations(state.c_vals, omega), n, 2)

    # ── 3. 커밋 ──
    proof = state.proof
    proof.a_comm, proof.b_comm, proof.c_comm = state.commit_all(
        [state.a_poly, state.b_poly, state.c_poly]
    )
    state.transcript.append_point(b"a_comm", proof.a_comm)
    state.transcript.append_point(b"b_comm", proof.b_comm)
    state.transcript.append_point(b"c_comm", proof.c_comm)
