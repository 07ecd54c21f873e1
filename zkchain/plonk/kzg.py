"""
KZG 다항식 커밋먼트
====================

C = p(τ)·G1 = Σ cᵢ · [τⁱ]₁

SRS의 G1 거듭제곱에 계수를 곱해 더하므로 τ를 모르고도 계산할 수 있다.
열기 증명은 Prover Round 5에서 몫 다항식을 직접 커밋하는 방식으로 만들고,
검증은 Verifier의 페어링 검사 한 번으로 묶어서 처리한다.

서로 독립인 커밋먼트는 `commit_many`로 스레드 풀에 나눠 계산할 수 있다.
"""

from zkchain.plonk.field import FR, ec_mul, ec_add


def commit(poly, srs):
    """다항식 poly를 KZG 커밋한다.

    Raises:
        ValueError: 다항식 차수가 SRS 최대 차수를 초과할 때
    """
    if poly.degree > srs.max_degree:
        raise ValueError(
            f"다항식 차수 {poly.degree}가 SRS 최대 차수 {srs.max_degree}를 초과합니다"
        )

    result = None
    for i, coeff in enumerate(poly.coeffs):
        if coeff == FR(0):
            continue
        result = ec_add(result, ec_mul(srs.g1_powers[i], coeff))
    return result


def commit_many(polys, srs, executor=None):
    """여러 다항식을 커밋한다. executor가 있으면 병렬로 계산한다.

    Args:
        polys: Polynomial 리스트
        srs: SRS
        executor: concurrent.futures.Executor 또는 None

    Returns:
        list: polys와 같은 순서의 G1 커밋먼트
    """
    if executor is None:
        return [commit(p, srs) for p in polys]
    return list(executor.map(lambda p: commit(p, srs), polys))
