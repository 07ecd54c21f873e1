"""
zkchain: 재귀 PLONK 증명 체인
==============================

각 단계가 이전 단계의 증명을 회로 안에서 검증하는 증명 체인을 만든다.

    >>> from zkchain import Pipeline, StageSpec
    >>> result = Pipeline([
    ...     StageSpec("main", "addition_main", {"x": 1, "y": 2, "z": 3}),
    ...     StageSpec("rec1", "addition_rec_1", {"c": 3}),
    ...     StageSpec("rec2", "addition_rec_2", {"d": 4}),
    ... ]).run()
    >>> result.verified
    True
"""

from zkchain.compiler import CompiledCircuit, compile_source
from zkchain.config import BackendConfig
from zkchain.errors import (
    ZkChainError,
    CompilationError,
    MissingInputError,
    InvalidInputError,
    ConstraintUnsatisfiedError,
    ProofGenerationError,
    ArtifactExtractionError,
    RecursiveInputCollisionError,
    VerificationError,
    PipelineStateError,
)
from zkchain.pipeline import Pipeline, PipelineResult, StageSpec, StageState
from zkchain.proofs import (
    ProofResult,
    compile_circuit,
    generate_proof,
    generate_recursive_proof,
    verify_proof,
)
from zkchain.recursion import RecursiveArtifacts, RecursiveInputBuilder, build_recursive_inputs

__all__ = [
    "ArtifactExtractionError",
    "BackendConfig",
    "CompilationError",
    "CompiledCircuit",
    "ConstraintUnsatisfiedError",
    "InvalidInputError",
    "MissingInputError",
    "Pipeline",
    "PipelineResult",
    "PipelineStateError",
    "ProofGenerationError",
    "ProofResult",
    "RecursiveArtifacts",
    "RecursiveInputBuilder",
    "RecursiveInputCollisionError",
    "StageSpec",
    "StageState",
    "VerificationError",
    "ZkChainError",
    "build_recursive_inputs",
    "compile_circuit",
    "compile_source",
    "generate_proof",
    "generate_recursive_proof",
    "verify_proof",
]
