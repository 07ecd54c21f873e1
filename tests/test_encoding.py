"""
필드 원소 인코딩 테스트
========================

to_fr 변환 규칙, 좌표 limb, 검증 키/증명 필드 배치, 증명 바이트, 키 해시.
"""

import pytest

from zkchain.encoding import (
    to_fr, fr_to_str,
    split_limbs, join_limbs, LIMB_BITS,
    point_to_fields, point_from_fields,
    vk_to_fields, vk_from_fields, hash_fields,
    proof_from_fields, proof_from_bytes,
    VK_FIELDS, PROOF_FIELDS, PROOF_BYTES,
)
from zkchain.plonk.field import FR, CURVE_ORDER, FIELD_MODULUS, G1, ec_mul
from zkchain.plonk.prover import Proof


class TestToFr:
    @pytest.mark.parametrize("value, expected", [
        (5, 5),
        (-1, CURVE_ORDER - 1),
        (CURVE_ORDER + 2, 2),
        ("42", 42),
        (" 7 ", 7),
        ("0x1f", 31),
        ("-0x1", CURVE_ORDER - 1),
    ])
    def test_accepted(self, value, expected):
        assert to_fr(value) == FR(expected)

    def test_fr_passthrough(self):
        v = FR(9)
        assert to_fr(v) is v

    @pytest.mark.parametrize("value", [True, False, 1.5, None, "abc", "0xzz", [1]])
    def test_rejected(self, value):
        with pytest.raises(ValueError):
            to_fr(value)

    def test_fr_to_str(self):
        assert fr_to_str(FR(123)) == "123"


class TestLimbs:
    def test_split_join(self):
        v = FIELD_MODULUS - 1
        lo, hi = split_limbs(v)
        assert int(lo) < 2 ** LIMB_BITS
        assert join_limbs(lo, hi) == v

    def test_out_of_range(self):
        lo, hi = split_limbs(FIELD_MODULUS - 1)
        with pytest.raises(ValueError):
            join_limbs(lo, hi + FR(1))

    def test_lo_too_wide(self):
        with pytest.raises(ValueError):
            join_limbs(FR(2 ** LIMB_BITS), FR(0))


class TestPoints:
    def test_generator_layout(self):
        fields = point_to_fields(G1)
        assert len(fields) == 4
        assert fields[0] == FR(1) and fields[1] == FR(0)
        assert fields[2] == FR(2) and fields[3] == FR(0)

    def test_infinity(self):
        assert point_to_fields(None) == [FR(0)] * 4
        assert point_from_fields([FR(0)] * 4) is None

    def test_large_point(self):
        P = ec_mul(G1, 123456789)
        assert point_from_fields(point_to_fields(P)) == P

    def test_off_curve(self):
        with pytest.raises(ValueError):
            point_from_fields([FR(1), FR(0), FR(3), FR(0)])


@pytest.fixture(scope="module")
def main_vk(circuits, config):
    from zkchain.backend import build_backend
    with build_backend(circuits["main"], config=config) as bound:
        return bound.backend.verification_key()


class TestVerificationKeyFields:
    def test_layout(self, main_vk):
        fields = vk_to_fields(main_vk)
        assert len(fields) == VK_FIELDS == 34
        assert fields[0] == FR(4)
        assert fields[1] == FR(2)

    def test_decode(self, main_vk):
        assert vk_from_fields(vk_to_fields(main_vk)) == main_vk

    def test_decode_accepts_decimal_strings(self, main_vk):
        as_strings = [fr_to_str(f) for f in vk_to_fields(main_vk)]
        assert vk_from_fields(as_strings) == main_vk

    def test_wrong_length(self, main_vk):
        with pytest.raises(ValueError):
            vk_from_fields(vk_to_fields(main_vk)[:-1])

    def test_invalid_domain(self, main_vk):
        fields = list(vk_to_fields(main_vk))
        fields[0] = FR(6)
        with pytest.raises(ValueError):
            vk_from_fields(fields)

    def test_reordered_commitments(self, main_vk):
        """커밋먼트 순서를 바꾸면 다른 키가 된다."""
        fields = list(vk_to_fields(main_vk))
        fields[2:6], fields[6:10] = fields[6:10], fields[2:6]
        assert vk_from_fields(fields) != main_vk

    def test_hash(self, main_vk):
        fields = vk_to_fields(main_vk)
        assert hash_fields(fields) == hash_fields(list(fields))
        changed = list(fields)
        changed[1] = FR(3)
        assert hash_fields(changed) != hash_fields(fields)


class TestProofFields:
    def test_layout(self, main_result):
        proof = main_result.proof
        fields = proof.to_fields()
        assert len(fields) == PROOF_FIELDS == 43
        assert fields[-1] == proof.r_eval
        assert fields[-7] == proof.a_eval

    def test_decode(self, main_result):
        proof = main_result.proof
        assert Proof.from_fields(proof.to_fields()) == proof

    def test_bytes(self, main_result):
        data = main_result.proof.to_bytes()
        assert len(data) == PROOF_BYTES == 43 * 32
        assert Proof.from_bytes(data) == main_result.proof

    def test_bytes_wrong_length(self, main_result):
        with pytest.raises(ValueError):
            proof_from_bytes(main_result.proof.to_bytes()[:-1])

    def test_bytes_non_canonical(self, main_result):
        data = bytearray(main_result.proof.to_bytes())
        data[-32:] = CURVE_ORDER.to_bytes(32, "big")
        with pytest.raises(ValueError):
            proof_from_bytes(bytes(data))

    def test_fields_wrong_length(self, main_result):
        with pytest.raises(ValueError):
            proof_from_fields(main_result.proof.to_fields() + (FR(0),))
