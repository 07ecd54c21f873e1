"""
PLONK Structured Reference String (SRS)
=========================================

SRS = { G1: [G1, τ·G1, ..., τ^d·G1],  G2: [G2, τ·G2] }

PLONK의 설정은 범용(universal)이라 최대 차수 d 이하의 모든 회로가
같은 SRS를 공유한다. 증명 체인의 모든 단계와, 회로 안에서 이전 증명을
검증하는 재귀 검사도 같은 SRS를 써야 한다.

여기서는 seed로부터 τ를 결정론적으로 만든다 (교육용).
실제 시스템에서는 MPC 세리머니로 τ를 생성하고 폐기해야 한다.

사용 예시:
    >>> srs = load_srs(seed=12345, max_degree=64)
    >>> len(srs.g1_powers)
    65
"""

import functools
import hashlib
import secrets

from zkchain.plonk.field import FR, G1, G2, ec_mul, CURVE_ORDER


class SRS:
    """KZG 커밋먼트용 공개 파라미터.

    속성:
        g1_powers: [τⁱ·G1] (i = 0..max_degree)
        g2_powers: [G2, τ·G2]
        max_degree: 커밋 가능한 최대 다항식 차수
    """

    def __init__(self, g1_powers, g2_powers, max_degree):
        self.g1_powers = g1_powers
        self.g2_powers = g2_powers
        self.max_degree = max_degree

    @classmethod
    def generate(cls, max_degree, seed=None):
        """SRS를 생성한다. seed가 None이면 τ를 무작위로 뽑는다."""
        if seed is not None:
            digest = hashlib.sha256(str(seed).encode()).digest()
            tau = FR(int.from_bytes(digest, "big") % CURVE_ORDER)
        else:
            tau = FR(secrets.randbelow(CURVE_ORDER - 1) + 1)

        g1_powers = []
        tau_power = FR(1)
        for _ in range(max_degree + 1):
            g1_powers.append(ec_mul(G1, tau_power))
            tau_power = tau_power * tau

        return cls(g1_powers, [G2, ec_mul(G2, tau)], max_degree)


@functools.lru_cache(maxsize=8)
def load_srs(seed, max_degree):
    """(seed, max_degree)별로 한 번만 생성해 재사용하는 결정론적 SRS."""
    return SRS.generate(max_degree=max_degree, seed=seed)
