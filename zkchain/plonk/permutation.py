"""
PLONK 순열 인자 (Permutation Argument)
========================================

copy constraint를 순열 σ로 인코딩하고 Grand Product로 증명한다.

**코셋 식별자**:
  3n개의 배선 위치를 서로 겹치지 않는 세 코셋에 대응시킨다.
    a 배선 → H,  b 배선 → K1·H,  c 배선 → K2·H

**누적자 z(x)**:
  z(ω⁰) = 1
  z(ωⁱ⁺¹) = z(ωⁱ) · ∏ₖ (wₖ,ᵢ + β·idₖ(ωⁱ) + γ) / (wₖ,ᵢ + β·σₖ(ωⁱ) + γ)

  σ가 배선 값과 일치하면 전체 곱이 1로 돌아온다.
"""

from zkchain.plonk.field import FR

K1 = FR(2)
K2 = FR(3)


def build_permutation_polynomials(sigma, n, domain):
    """σ를 세 열의 평가값 (S_σ1, S_σ2, S_σ3)으로 바꾼다.

    Args:
        sigma: 길이 3n 순열 (ConstraintSystem.build_permutation)
        n: 도메인 크기
        domain: [ω⁰, ..., ω^(n-1)]

    Returns:
        tuple: 길이 n인 FR 리스트 세 개
    """
    cosets = (FR(1), K1, K2)

    def label(position):
        column, row = divmod(position, n)
        return cosets[column] * domain[row]

    return tuple(
        [label(sigma[column * n + row]) for row in range(n)]
        for column in range(3)
    )


def compute_accumulator(wire_values, sigma_evals, domain, beta, gamma):
    """누적자 z의 평가값 [z(ω⁰)=1, ..., z(ω^(n-1))].

    Args:
        wire_values: (a_vals, b_vals, c_vals)
        sigma_evals: (S_σ1, S_σ2, S_σ3) 평가값
        domain: 평가 도메인
        beta, gamma: 챌린지
    """
    a_vals, b_vals, c_vals = wire_values
    s1, s2, s3 = sigma_evals
    z_evals = [FR(1)]
    for i in range(len(domain) - 1):
        x = domain[i]
        numerator = (
            (a_vals[i] + beta * x + gamma)
            * (b_vals[i] + beta * K1 * x + gamma)
            * (c_vals[i] + beta * K2 * x + gamma)
        )
        denominator = (
            (a_vals[i] + beta * s1[i] + gamma)
            * (b_vals[i] + beta * s2[i] + gamma)
            * (c_vals[i] + beta * s3[i] + gamma)
        )
        z_evals.append(z_evals[-1] * numerator / denominator)
    return z_evals
