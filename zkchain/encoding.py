"""
필드 원소 인코딩
=================

재귀 검사는 검증 키와 증명을 회로 입력, 즉 FR 원소의 나열로 받는다.
이 모듈은 백엔드 객체와 그 필드 원소 표현 사이의 변환을 담당한다.

**좌표 limb 분할**:
  G1 좌표는 기저 필드 FQ(q > r)의 원소라 FR 하나에 담기지 않는다.
  136비트 기준으로 둘로 나눈다:  v = lo + hi · 2^136
  G1 점 = (x_lo, x_hi, y_lo, y_hi), 무한원점 = (0, 0, 0, 0)

**검증 키 필드 (34개)**:
  [n, 공개 입력 수, q_M, q_L, q_R, q_O, q_C, S_σ1, S_σ2, S_σ3]  (커밋먼트마다 4 limb)

**증명 필드 (43개)**:
  커밋먼트 9개 × 4 limb + 평가값 7개

**증명 바이트**: 증명 필드 43개를 각각 32바이트 빅엔디안으로 이어 붙인 것.

**키 해시**: SHA-256(KEY_HASH_TAG ‖ 검증 키 필드들) mod r

순서가 곧 의미이다. 필드 순서를 바꾸면 다른 키/증명으로 해석된다.

모든 디코딩 실패는 ValueError로 알린다. 예외를 도메인 오류로 바꾸는 것은 호출자 몫이다.
"""

import hashlib

from py_ecc.fields import bn128_FQ as FQ

from zkchain.plonk.field import FR, CURVE_ORDER, FIELD_MODULUS, is_on_g1
from zkchain.plonk.preprocessor import VerificationKey
from zkchain.plonk.prover import Proof

LIMB_BITS = 136
LIMB_MASK = (1 << LIMB_BITS) - 1
LIMBS_PER_POINT = 4

VK_FIELDS = 2 + LIMBS_PER_POINT * len(VerificationKey.COMMITMENTS)
PROOF_FIELDS = LIMBS_PER_POINT * len(Proof.COMMITMENTS) + len(Proof.EVALUATIONS)

SCALAR_BYTES = 32
PROOF_BYTES = PROOF_FIELDS * SCALAR_BYTES

KEY_HASH_TAG = b"zkchain-verification-key"


# ─── 스칼라 ───

def to_fr(value):
    """입력 값을 FR로 변환한다.

    허용: FR, int (mod r 축약), 10진 문자열, "0x" 16진 문자열.

    Raises:
        ValueError: 변환할 수 없는 값 (bool 포함)
    """
    if isinstance(value, FR):
        return value
    if isinstance(value, bool):
        raise ValueError(f"bool은 필드 원소가 아닙니다: {value!r}")
    if isinstance(value, int):
        return FR(value % CURVE_ORDER)
    if isinstance(value, str):
        text = value.strip()
        try:
            if text.lower().startswith(("0x", "-0x")):
                number = int(text, 16)
            else:
                number = int(text, 10)
        except ValueError:
            raise ValueError(f"필드 원소로 읽을 수 없는 문자열: {value!r}") from None
        return FR(number % CURVE_ORDER)
    raise ValueError(f"필드 원소로 변환할 수 없는 타입: {type(value).__name__}")


def fr_to_str(value):
    """FR → 10진 문자열 (입력 맵에 넣는 표준 표현)."""
    return str(int(value))


def scalar_to_bytes(value):
    return int(value).to_bytes(SCALAR_BYTES, "big")


# ─── 좌표와 점 ───

def split_limbs(coordinate):
    v = int(coordinate)
    return FR(v & LIMB_MASK), FR(v >> LIMB_BITS)


def join_limbs(lo, hi):
    lo, hi = int(lo), int(hi)
    if lo > LIMB_MASK:
        raise ValueError(f"하위 limb가 {LIMB_BITS}비트를 넘습니다")
    value = lo + (hi << LIMB_BITS)
    if value >= FIELD_MODULUS:
        raise ValueError("좌표가 기저 필드 범위를 벗어납니다")
    return value


def point_to_fields(point):
    if point is None:
        return [FR(0)] * LIMBS_PER_POINT
    x, y = point
    return [*split_limbs(x), *split_limbs(y)]


def point_from_fields(fields):
    """limb 4개 → G1 점.

    Raises:
        ValueError: 범위를 벗어나거나 곡선 위에 있지 않을 때
    """
    if len(fields) != LIMBS_PER_POINT:
        raise ValueError(f"G1 점에는 {LIMBS_PER_POINT}개 필드가 필요합니다")
    if all(int(f) == 0 for f in fields):
        return None
    point = (FQ(join_limbs(fields[0], fields[1])), FQ(join_limbs(fields[2], fields[3])))
    if not is_on_g1(point):
        raise ValueError("커밋먼트가 bn128 G1 위의 점이 아닙니다")
    return point


# ─── 검증 키 ───

def vk_to_fields(vk):
    fields = [FR(vk.n), FR(vk.num_public_inputs)]
    for commitment in vk.commitments():
        fields.extend(point_to_fields(commitment))
    return tuple(fields)


def vk_from_fields(fields):
    fields = [to_fr(f) for f in fields]
    if len(fields) != VK_FIELDS:
        raise ValueError(f"검증 키 필드는 {VK_FIELDS}개여야 합니다: {len(fields)}")
    n, num_public_inputs = int(fields[0]), int(fields[1])
    if num_public_inputs > n:
        raise ValueError("공개 입력 수가 도메인 크기보다 큽니다")

    commitments = {}
    offset = 2
    for name in VerificationKey.COMMITMENTS:
        commitments[name] = point_from_fields(fields[offset:offset + LIMBS_PER_POINT])
        offset += LIMBS_PER_POINT
    return VerificationKey(n, num_public_inputs, **commitments)


def hash_fields(fields):
    """검증 키 필드의 키 해시."""
    digest = hashlib.sha256()
    digest.update(KEY_HASH_TAG)
    for f in fields:
        digest.update(scalar_to_bytes(to_fr(f)))
    return FR(int.from_bytes(digest.digest(), "big") % CURVE_ORDER)


# ─── 증명 ───

def proof_to_fields(proof):
    fields = []
    for name in Proof.COMMITMENTS:
        fields.extend(point_to_fields(getattr(proof, name)))
    for name in Proof.EVALUATIONS:
        fields.append(getattr(proof, name))
    return tuple(fields)


def proof_from_fields(fields):
    fields = [to_fr(f) for f in fields]
    if len(fields) != PROOF_FIELDS:
        raise ValueError(f"증명 필드는 {PROOF_FIELDS}개여야 합니다: {len(fields)}")

    proof = Proof()
    offset = 0
    for name in Proof.COMMITMENTS:
        setattr(proof, name, point_from_fields(fields[offset:offset + LIMBS_PER_POINT]))
        offset += LIMBS_PER_POINT
    for name in Proof.EVALUATIONS:
        setattr(proof, name, fields[offset])
        offset += 1
    return proof


def proof_to_bytes(proof):
    return b"".join(scalar_to_bytes(f) for f in proof_to_fields(proof))


def proof_from_bytes(data):
    """증명 바이트 → Proof. 길이가 다르거나 r 이상의 값이 있으면 ValueError."""
    if not isinstance(data, (bytes, bytearray)):
        raise ValueError(f"증명 바이트가 아닙니다: {type(data).__name__}")
    if len(data) != PROOF_BYTES:
        raise ValueError(f"증명은 {PROOF_BYTES}바이트여야 합니다: {len(data)}")
    fields = []
    for i in range(0, PROOF_BYTES, SCALAR_BYTES):
        value = int.from_bytes(data[i:i + SCALAR_BYTES], "big")
        if value >= CURVE_ORDER:
            raise ValueError("증명 필드 값이 스칼라 필드 범위를 벗어납니다")
        fields.append(FR(value))
    return proof_from_fields(fields)
