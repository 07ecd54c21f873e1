"""
PLONK 백엔드 기반: 스칼라 필드와 bn128 곡선 연산
==================================================

증명 체인의 모든 값은 bn128 스칼라 필드 FR 위의 원소이다.

**FR**:
  위수 r ≈ 2^254 인 소수체. 회로 변수, 공개 입력, 다항식 계수,
  Fiat-Shamir 챌린지가 모두 FR 원소이다.

**FQ (기저 필드)**:
  곡선 점의 좌표가 사는 필드. FQ의 위수 q는 r보다 크므로
  좌표를 FR 원소 하나로 옮길 수 없다 → `zkchain.encoding`에서 limb로 분할.

**단위근**:
  r - 1 = 2^28 · m 이므로 2^28 이하의 2의 거듭제곱 크기 도메인을 만들 수 있다.

사용 예시:
    >>> from zkchain.plonk.field import FR, G1, ec_mul
    >>> FR(3) * FR(7)
    21
    >>> P = ec_mul(G1, 5)
"""

from py_ecc import bn128
from py_ecc.fields import bn128_FQ as FQ


class FR(FQ):
    """bn128 스칼라 필드 원소 (모듈러 r 산술)."""
    field_modulus = bn128.curve_order


CURVE_ORDER = bn128.curve_order

# 기저 필드 위수: 좌표 인코딩 범위 검사에 사용
FIELD_MODULUS = bn128.field_modulus

G1 = bn128.G1
G2 = bn128.G2

# bn128에서 무한원점은 None
Z1 = None


def ec_mul(point, scalar):
    """스칼라 곱 scalar · point. scalar는 int 또는 FR."""
    if isinstance(scalar, FR):
        scalar = int(scalar)
    return bn128.multiply(point, scalar % CURVE_ORDER)


def ec_add(p1, p2):
    """같은 그룹 두 점의 덧셈."""
    return bn128.add(p1, p2)


def ec_neg(point):
    """점의 역원 -point."""
    return bn128.neg(point)


def ec_pairing(g2_point, g1_point):
    """최적 Ate 페어링 e(G1, G2).

    주의: py_ecc의 인자 순서는 (G2, G1)이다.
    """
    return bn128.pairing(g2_point, g1_point)


def is_on_g1(point):
    """점이 bn128 G1 위에 있는지 확인한다. 무한원점은 유효한 점이다."""
    if point is None:
        return True
    return bn128.is_on_curve(point, bn128.b)


def get_root_of_unity(n):
    """n차 원시 단위근 ω (n은 2^28 이하의 2의 거듭제곱).

    생성자 g = 5에서 ω = g^((r-1)/n)으로 얻는다.

    Raises:
        ValueError: n이 2의 거듭제곱이 아니거나 2^28을 초과할 때
    """
    if n < 1 or (n & (n - 1)) != 0:
        raise ValueError(f"도메인 크기는 2의 거듭제곱이어야 합니다: {n}")
    if n > (1 << 28):
        raise ValueError(f"도메인 크기는 2^28 이하여야 합니다: {n}")
    if n == 1:
        return FR(1)
    return FR(5) ** ((CURVE_ORDER - 1) // n)


def get_roots_of_unity(n):
    """평가 도메인 H = [1, ω, ω², ..., ω^(n-1)]."""
    omega = get_root_of_unity(n)
    roots = [FR(1)]
    for _ in range(n - 1):
        roots.append(roots[-1] * omega)
    return roots
