"""
실행 엔진 (WitnessGenerator) 테스트
=====================================

입력 검사, 계산 게이트, 제약 실패, 재귀 검사 실패.
"""

import pytest

from zkchain.compiler import compile_source
from zkchain.errors import MissingInputError, InvalidInputError, ConstraintUnsatisfiedError
from zkchain.execution import ExecutionEngine
from zkchain.plonk.field import FR, CURVE_ORDER
from zkchain.plonk.srs import load_srs
from zkchain.recursion import build_recursive_inputs


@pytest.fixture(scope="module")
def srs(config):
    return load_srs(config.srs_seed, config.srs_degree)


@pytest.fixture(scope="module")
def main_engine(circuits, srs):
    return ExecutionEngine(circuits["main"], srs)


@pytest.fixture(scope="module")
def rec1_engine(circuits, srs):
    return ExecutionEngine(circuits["rec1"], srs)


class TestWitness:
    def test_public_inputs(self, main_engine, circuits):
        witness = main_engine.execute({"x": 1, "y": 2, "z": 3})
        assert witness.public_inputs == [FR(2), FR(3)]
        assert witness.circuit_digest == circuits["main"].digest

    def test_wire_values_padded(self, main_engine):
        witness = main_engine.execute({"x": 1, "y": 2, "z": 3})
        a, b, c = witness.wire_values
        assert len(a) == len(b) == len(c) == 4
        assert (a[2], b[2], c[2]) == (FR(1), FR(2), FR(3))

    def test_string_inputs(self, main_engine):
        witness = main_engine.execute({"x": "1", "y": "0x2", "z": 3})
        assert witness.public_inputs == [FR(2), FR(3)]

    def test_field_wraparound(self, main_engine, circuits):
        """x = -1 은 r - 1 이고 (r - 1) + 4 = 3 (mod r)."""
        witness = main_engine.execute({"x": -1, "y": 4, "z": 3})
        x = circuits["main"].variables["x"][0]
        assert witness.values[x] == FR(CURVE_ORDER - 1)

    def test_computed_values(self, srs):
        circuit = compile_source("square", "def main(x: Field, out: Public):\n"
                                           "    t = x * x\n"
                                           "    assert t + 5 == out\n")
        witness = ExecutionEngine(circuit, srs).execute({"x": 6, "out": 41})
        assert FR(36) in witness.values
        assert witness.public_inputs == [FR(41)]


class TestInputErrors:
    def test_missing(self, main_engine):
        with pytest.raises(MissingInputError) as exc_info:
            main_engine.execute({"x": 1})
        assert exc_info.value.missing == ("y", "z")

    def test_missing_reported_before_constraints(self, main_engine):
        """값이 틀려도 누락이 먼저 보고된다."""
        with pytest.raises(MissingInputError):
            main_engine.execute({"x": 100, "y": 2})

    def test_unknown_name(self, main_engine):
        with pytest.raises(InvalidInputError):
            main_engine.execute({"x": 1, "y": 2, "z": 3, "w": 4})

    @pytest.mark.parametrize("value", [[1], "abc", 1.0, True, None])
    def test_bad_scalar(self, main_engine, value):
        with pytest.raises(InvalidInputError):
            main_engine.execute({"x": value, "y": 2, "z": 3})

    def test_not_a_map(self, main_engine):
        with pytest.raises(InvalidInputError):
            main_engine.execute([1, 2, 3])

    def test_array_length(self, rec1_engine, main_result):
        inputs = build_recursive_inputs(main_result.public_inputs, main_result.artifacts, {"c": 3})
        inputs["proof"] = inputs["proof"][:-1]
        with pytest.raises(InvalidInputError):
            rec1_engine.execute(inputs)


class TestConstraintErrors:
    def test_wrong_sum(self, main_engine):
        with pytest.raises(ConstraintUnsatisfiedError) as exc_info:
            main_engine.execute({"x": 1, "y": 2, "z": 4})
        assert exc_info.value.gate == 2
        assert "line 2" in exc_info.value.message

    def test_rec1_own_constraint(self, rec1_engine, main_result):
        """c는 내부 공개 입력 z와 같아야 한다."""
        inputs = build_recursive_inputs(main_result.public_inputs, main_result.artifacts, {"c": 4})
        with pytest.raises(ConstraintUnsatisfiedError):
            rec1_engine.execute(inputs)


class TestRecursionCheck:
    def _inputs(self, main_result, **overrides):
        inputs = build_recursive_inputs(main_result.public_inputs, main_result.artifacts, {"c": 3})
        inputs.update(overrides)
        return inputs

    def test_accepts_parent(self, rec1_engine, main_result):
        witness = rec1_engine.execute(self._inputs(main_result))
        assert witness.public_inputs[:2] == [FR(2), FR(3)]
        assert witness.public_inputs[2] == main_result.artifacts.verification_key_hash

    def test_wrong_key_hash(self, rec1_engine, main_result):
        key_hash = main_result.artifacts.verification_key_hash + FR(1)
        with pytest.raises(ConstraintUnsatisfiedError):
            rec1_engine.execute(self._inputs(main_result, key_hash=key_hash))

    def test_wrong_parent_public_inputs(self, rec1_engine, main_result):
        """c도 같이 바꿔 자체 제약은 만족시켜도 재귀 검사에서 걸린다."""
        inputs = self._inputs(main_result, public_inputs=[2, 4], c=4)
        with pytest.raises(ConstraintUnsatisfiedError):
            rec1_engine.execute(inputs)

    def test_tampered_proof(self, rec1_engine, main_result):
        proof = list(main_result.artifacts.proof_fields)
        proof[-1] = proof[-1] + FR(1)
        with pytest.raises(ConstraintUnsatisfiedError):
            rec1_engine.execute(self._inputs(main_result, proof=proof))

    def test_proof_off_curve(self, rec1_engine, main_result):
        proof = list(main_result.artifacts.proof_fields)
        proof[0] = proof[0] + FR(1)
        with pytest.raises(ConstraintUnsatisfiedError) as exc_info:
            rec1_engine.execute(self._inputs(main_result, proof=proof))
        assert isinstance(exc_info.value.__cause__, ValueError)

    def test_undecodable_key(self, rec1_engine, main_result):
        from zkchain.encoding import hash_fields
        vk = [FR(0)] * 34
        vk[0] = FR(3)
        inputs = self._inputs(main_result, verification_key=vk, key_hash=hash_fields(vk))
        with pytest.raises(ConstraintUnsatisfiedError):
            rec1_engine.execute(inputs)

    def test_empty_public_inputs_array(self, main_result):
        """Public[0]은 빈 리스트만 받는다."""
        child = compile_source("square_rec", (
            "def main(verification_key: VerificationKey, proof: Proof,\n"
            "         public_inputs: Public[0], key_hash: Public, w: Public):\n"
            "    verify_proof(verification_key, proof, public_inputs, key_hash)\n"
            "    assert w * w == 9\n"
        ))
        flat = child.schema.validate(build_recursive_inputs([], main_result.artifacts, {"w": 3}))
        assert flat["public_inputs"] == []

        with pytest.raises(InvalidInputError):
            child.schema.validate(
                build_recursive_inputs(main_result.public_inputs, main_result.artifacts, {"w": 3}))
