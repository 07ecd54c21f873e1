"""
RecursiveInputBuilder 테스트
=============================

재귀 필드 병합, 이름 충돌, 재귀 산출물 직렬화.
"""

import pytest

from zkchain.errors import RecursiveInputCollisionError, InvalidInputError
from zkchain.plonk.field import FR
from zkchain.recursion import RecursiveArtifacts, RecursiveInputBuilder, build_recursive_inputs


@pytest.fixture(scope="module")
def merged(circuits, main_result):
    return (RecursiveInputBuilder(circuits["rec1"])
            .with_parent(main_result.public_inputs, main_result.artifacts)
            .with_inputs({"c": 3})
            .build())


class TestMerge:
    def test_keys(self, merged):
        assert set(merged) == {"verification_key", "proof", "public_inputs", "key_hash", "c"}

    def test_verification_key_as_decimal_strings(self, merged, main_result):
        vk = merged["verification_key"]
        assert len(vk) == 34
        assert all(isinstance(f, str) for f in vk)
        assert vk == [str(int(f)) for f in main_result.artifacts.verification_key_fields]

    def test_proof_fields(self, merged, main_result):
        assert merged["proof"] == list(main_result.artifacts.proof_fields)

    def test_public_inputs_passed_through(self, merged, main_result):
        assert merged["public_inputs"] == main_result.public_inputs

    def test_key_hash(self, merged, main_result):
        assert merged["key_hash"] == main_result.artifacts.verification_key_hash

    def test_own_inputs_kept(self, merged):
        assert merged["c"] == 3

    def test_function_matches_builder(self, merged, main_result):
        assert build_recursive_inputs(
            main_result.public_inputs, main_result.artifacts, {"c": 3}) == merged

    def test_accepted_by_schema(self, merged, circuits):
        flat = circuits["rec1"].schema.validate(merged)
        assert flat["c"] == [FR(3)]


class TestCollisions:
    @pytest.mark.parametrize("name", ["verification_key", "proof", "public_inputs", "key_hash"])
    def test_each_reserved_name(self, circuits, name):
        with pytest.raises(RecursiveInputCollisionError) as exc_info:
            RecursiveInputBuilder(circuits["rec1"]).with_inputs({name: 1, "c": 3})
        assert exc_info.value.collisions == (name,)

    def test_all_collisions_listed(self, main_result):
        with pytest.raises(RecursiveInputCollisionError) as exc_info:
            build_recursive_inputs(main_result.public_inputs, main_result.artifacts,
                                   {"proof": 1, "key_hash": 2})
        assert exc_info.value.collisions == ("key_hash", "proof")


class TestBuilderErrors:
    def test_non_recursive_circuit(self, circuits):
        with pytest.raises(InvalidInputError):
            RecursiveInputBuilder(circuits["main"])

    def test_without_parent(self, circuits):
        with pytest.raises(InvalidInputError):
            RecursiveInputBuilder(circuits["rec1"]).with_inputs({"c": 3}).build()


class TestArtifacts:
    def test_dict_round_trip(self, main_result):
        artifacts = main_result.artifacts
        data = artifacts.to_dict()
        assert len(data["verification_key_fields"]) == 34
        assert len(data["proof_fields"]) == 43
        assert RecursiveArtifacts.from_dict(data) == artifacts

    def test_frozen(self, main_result):
        with pytest.raises(AttributeError):
            main_result.artifacts.verification_key_hash = FR(0)
