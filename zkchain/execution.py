"""
실행 엔진 (WitnessGenerator)
=============================

입력 맵으로 회로를 실행해 Witness를 만든다.

**과정**:
  1. 입력 스키마 검사 (실행 전에 누락/형태 오류를 모두 잡는다)
  2. 매개변수 변수에 값 배정
  3. 게이트를 순서대로 돌며 계산 게이트의 출력 c를 채운다
  4. 모든 게이트 방정식 검사 (공개 입력 행은 PI 항 포함)
  5. 재귀 검사 (verify_proof가 있는 회로만)
       - 검증 키 필드 디코딩
       - key_hash == H(검증 키 필드)
       - 내부 공개 입력 수 == 검증 키의 공개 입력 수
       - 증명 필드 디코딩
       - 재귀 트랜스크립트로 PLONK 검증
     하나라도 실패하면 ConstraintUnsatisfiedError.

key_hash와 내부 공개 입력은 재귀 회로에서 공개 입력으로 선언되므로
검사에 쓰인 값이 그대로 이 단계 증명의 공개 입력이 된다.

**보장 범위**:
  재귀 검사는 이 엔진 안에서만 수행되고 게이트로 표현되지 않는다.
  따라서 이 단계 증명의 검증은 이전 단계의 유효성을 증명하지 않는다.
  이 엔진으로 witness를 만든 정직한 prover의 증명에 대해서만 성립한다.
  엔진을 거치지 않고 직접 만든 Witness는 검사 없이 증명될 수 있다.
"""

import logging

from zkchain.encoding import vk_from_fields, proof_from_fields, hash_fields
from zkchain.errors import ConstraintUnsatisfiedError
from zkchain.plonk.field import FR
from zkchain.plonk.circuit import ZERO_VARIABLE
from zkchain.plonk.verifier import verify

logger = logging.getLogger(__name__)


class Witness:
    """한 번의 실행에 대한 만족 배정.

    속성:
        circuit_digest: 실행한 회로의 digest
        values: 변수 번호 순서의 FR 값
        wire_values: 도메인 크기로 패딩된 (a, b, c) 배선 값
        public_inputs: 공개 입력 (선언 순서)
    """

    def __init__(self, circuit_digest, values, wire_values, public_inputs):
        self.circuit_digest = circuit_digest
        self.values = tuple(values)
        self.wire_values = tuple(tuple(column) for column in wire_values)
        self.public_inputs = list(public_inputs)

    def __len__(self):
        return len(self.values)


class ExecutionEngine:
    """회로 하나에 묶인 실행기.

    재귀 검사에 쓰는 SRS는 이 회로의 백엔드와 같은 것이어야 한다.
    """

    def __init__(self, circuit, srs):
        self.circuit = circuit
        self.srs = srs

    def execute(self, inputs):
        """입력 맵으로 회로를 실행한다.

        Raises:
            MissingInputError: 필수 입력 누락
            InvalidInputError: 형태가 맞지 않는 입력
            ConstraintUnsatisfiedError: 제약 또는 재귀 검사 실패
        """
        circuit = self.circuit
        cs = circuit.constraint_system
        flat = circuit.schema.validate(inputs)

        values = [None] * cs.num_variables
        values[ZERO_VARIABLE] = FR(0)
        for name, indices in circuit.variables.items():
            for index, value in zip(indices, flat[name]):
                values[index] = value

        for gate, (a, b, c) in zip(cs.gates, cs.wires):
            if gate.computes:
                values[c] = gate.solve_output(values[a], values[b])

        num_public = cs.num_public_inputs
        for row, (gate, (a, b, c)) in enumerate(zip(cs.gates, cs.wires)):
            pi = FR(0) - values[a] if row < num_public else None
            if not gate.check(values[a], values[b], values[c], pi):
                where = f" (line {gate.line})" if gate.line is not None else ""
                raise ConstraintUnsatisfiedError(
                    f"{circuit.name}: 게이트 {row}{where}의 제약을 만족하지 않습니다", gate=row
                )

        if circuit.recursion is not None:
            self._check_recursion(values)

        wire_values = tuple(
            [values[variable] for variable in column] for column in cs.wire_columns()
        )
        public_inputs = [values[variable] for variable in cs.public_variables]
        logger.debug("%s: %d variables assigned", circuit.name, len(values))
        return Witness(circuit.digest, values, wire_values, public_inputs)

    def _check_recursion(self, values):
        check = self.circuit.recursion
        name = self.circuit.name

        def fail(reason, cause=None):
            error = ConstraintUnsatisfiedError(
                f"{name}: 재귀 검사 실패 (line {check.line}): {reason}"
            )
            if cause is not None:
                raise error from cause
            raise error

        vk_fields = [values[i] for i in check.verification_key]
        proof_fields = [values[i] for i in check.proof]
        inner_public_inputs = [values[i] for i in check.public_inputs]

        try:
            vk = vk_from_fields(vk_fields)
        except ValueError as exc:
            fail(f"검증 키를 해석할 수 없습니다: {exc}", exc)

        if hash_fields(vk_fields) != values[check.key_hash]:
            fail("key_hash가 검증 키와 일치하지 않습니다")

        if vk.num_public_inputs != len(inner_public_inputs):
            fail(
                f"공개 입력 수 {len(inner_public_inputs)}가 "
                f"검증 키의 {vk.num_public_inputs}와 다릅니다"
            )

        try:
            proof = proof_from_fields(proof_fields)
        except ValueError as exc:
            fail(f"증명을 해석할 수 없습니다: {exc}", exc)

        try:
            accepted = verify(proof, inner_public_inputs, vk, self.srs, recursive=True)
        except (ValueError, ZeroDivisionError) as exc:
            fail(f"검증을 수행할 수 없습니다: {exc}", exc)
        if not accepted:
            fail("이전 증명이 검증되지 않습니다")
