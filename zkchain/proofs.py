"""
ProofGenerator / ProofVerifier 공개 API
=========================================

  compile_circuit(circuit_id)                           → CompiledCircuit
  generate_proof(circuit, inputs)                       → ProofResult
  generate_recursive_proof(circuit, parent_public_inputs, parent_artifacts, inputs)
                                                        → ProofResult
  verify_proof(circuit, proof, public_inputs)           → bool

**ProofResult**: (proof, public_inputs, artifacts)

증명 생성은 두 단계이다.
  1. 백엔드가 (Proof, PublicInputs)를 만든다.
  2. 같은 백엔드가 len(PublicInputs)를 받아 RecursiveArtifacts를 만든다.
"""

from typing import List, NamedTuple

from zkchain.backend import build_backend
from zkchain.loader import CircuitLoader
from zkchain.plonk.field import FR
from zkchain.plonk.prover import Proof
from zkchain.recursion import RecursiveArtifacts, RecursiveInputBuilder


class ProofResult(NamedTuple):
    proof: Proof
    public_inputs: List[FR]
    artifacts: RecursiveArtifacts


def compile_circuit(circuit_id, root=None):
    """회로 이름으로 컴파일한다. 실패하면 CompilationError."""
    return CircuitLoader(root).load(circuit_id)


def generate_proof_and_artifacts(backend, witness):
    """Witness → ProofResult.

    Raises:
        ProofGenerationError: 백엔드 내부 실패
        ArtifactExtractionError: 공개 입력 수 불일치
    """
    proof, public_inputs = backend.generate_proof(witness)
    artifacts = backend.generate_recursive_artifacts(proof, public_inputs, len(public_inputs))
    return ProofResult(proof, public_inputs, artifacts)


def generate_proof(circuit, inputs, recursive=True, config=None):
    """입력 맵으로 witness와 증명, 재귀 산출물을 만든다."""
    with build_backend(circuit, recursive=recursive, config=config) as bound:
        witness = bound.engine.execute(inputs)
        return generate_proof_and_artifacts(bound.backend, witness)


def generate_recursive_proof(circuit, parent_public_inputs, parent_artifacts, inputs,
                             recursive=True, config=None):
    """이전 단계의 증명을 검증하는 회로의 증명을 만든다."""
    merged = (RecursiveInputBuilder(circuit)
              .with_parent(parent_public_inputs, parent_artifacts)
              .with_inputs(inputs)
              .build())
    return generate_proof(circuit, merged, recursive=recursive, config=config)


def verify_proof(circuit, proof, public_inputs, recursive=True, config=None):
    """재귀 설정의 백엔드를 다시 만들어 증명을 검증한다.

    Returns:
        bool: 거부된 증명은 False

    Raises:
        VerificationError: 증명 인코딩 오류, 회로와 맞지 않는 공개 입력 등
    """
    with build_backend(circuit, recursive=recursive, config=config) as bound:
        return bound.backend.verify_proof(proof, public_inputs)
