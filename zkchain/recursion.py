"""
RecursiveInputBuilder
======================

이전 단계의 산출물을 다음 단계의 입력 맵으로 합친다.

  ┌──────────────────────────────────────────────────────────────┐
  │ verification_key  ← 이전 단계 검증 키 필드 (10진 문자열)      │
  │ proof             ← 이전 단계 증명 필드 (FR)                  │
  │ public_inputs     ← 이전 단계 공개 입력 (그대로)              │
  │ key_hash          ← 이전 단계 검증 키 해시 (FR)               │
  │ + 이 단계의 자체 입력                                         │
  └──────────────────────────────────────────────────────────────┘

네 개의 고정 이름(RECURSION_KEYS)과 자체 입력 이름은 서로 겹칠 수 없다.

사용 예시:
    >>> inputs = (RecursiveInputBuilder(rec1)
    ...           .with_parent(main_public_inputs, main_artifacts)
    ...           .with_inputs({"c": 3})
    ...           .build())
"""

from dataclasses import dataclass
from typing import Tuple

from zkchain.abi import (
    VERIFICATION_KEY, PROOF, PUBLIC_INPUTS, KEY_HASH, RECURSION_KEYS,
)
from zkchain.encoding import fr_to_str, to_fr
from zkchain.errors import RecursiveInputCollisionError, InvalidInputError
from zkchain.plonk.field import FR


@dataclass(frozen=True)
class RecursiveArtifacts:
    """한 단계의 검증 재료를 재귀 친화적으로 인코딩한 것."""
    verification_key_fields: Tuple[FR, ...]
    proof_fields: Tuple[FR, ...]
    verification_key_hash: FR

    def to_dict(self):
        return {
            "verification_key_fields": [fr_to_str(f) for f in self.verification_key_fields],
            "proof_fields": [fr_to_str(f) for f in self.proof_fields],
            "verification_key_hash": fr_to_str(self.verification_key_hash),
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            verification_key_fields=tuple(to_fr(f) for f in data["verification_key_fields"]),
            proof_fields=tuple(to_fr(f) for f in data["proof_fields"]),
            verification_key_hash=to_fr(data["verification_key_hash"]),
        )


@dataclass(frozen=True)
class RecursionFields:
    """입력 맵에 들어갈 네 개의 고정 재귀 필드."""
    verification_key: Tuple[str, ...]
    proof: Tuple[FR, ...]
    public_inputs: Tuple[FR, ...]
    key_hash: FR

    @classmethod
    def from_parent(cls, parent_public_inputs, parent_artifacts):
        return cls(
            verification_key=tuple(fr_to_str(f) for f in parent_artifacts.verification_key_fields),
            proof=tuple(parent_artifacts.proof_fields),
            public_inputs=tuple(parent_public_inputs),
            key_hash=parent_artifacts.verification_key_hash,
        )

    def as_inputs(self):
        return {
            VERIFICATION_KEY: list(self.verification_key),
            PROOF: list(self.proof),
            PUBLIC_INPUTS: list(self.public_inputs),
            KEY_HASH: self.key_hash,
        }


def _check_disjoint(inputs):
    collisions = set(inputs) & set(RECURSION_KEYS)
    if collisions:
        raise RecursiveInputCollisionError(collisions)


def build_recursive_inputs(parent_public_inputs, parent_artifacts, inputs):
    """회로 정보 없이 재귀 필드와 자체 입력을 합친다.

    Raises:
        RecursiveInputCollisionError: 자체 입력이 고정 이름을 쓸 때
    """
    inputs = dict(inputs or {})
    _check_disjoint(inputs)
    merged = RecursionFields.from_parent(parent_public_inputs, parent_artifacts).as_inputs()
    merged.update(inputs)
    return merged


class RecursiveInputBuilder:
    """재귀 회로 하나를 위한 입력 맵 빌더."""

    def __init__(self, circuit):
        if not circuit.is_recursive:
            raise InvalidInputError(
                f"{circuit.name}는 이전 증명을 검증하지 않는 회로입니다"
            )
        self.circuit = circuit
        self._fields = None
        self._inputs = {}

    def with_parent(self, parent_public_inputs, parent_artifacts):
        self._fields = RecursionFields.from_parent(parent_public_inputs, parent_artifacts)
        return self

    def with_inputs(self, inputs):
        inputs = dict(inputs or {})
        _check_disjoint(inputs)
        self._inputs = inputs
        return self

    def build(self):
        if self._fields is None:
            raise InvalidInputError(f"{self.circuit.name}: 이전 단계 산출물이 없습니다")
        merged = self._fields.as_inputs()
        merged.update(self._inputs)
        return merged
