"""
PipelineOrchestrator
=====================

단계 목록을 순서대로 실행해 재귀 증명 체인을 만든다.

  회로 컴파일 (전체)
    → 0단계: witness → 증명 → 재귀 산출물
    → i단계: 재귀 입력 구성 (i-1단계 공개 입력 + 산출물 + 자체 입력)
             → witness → 증명 → 재귀 산출물
    → 마지막 단계 검증 (선택)

**단계 상태**:

  UNCOMPILED → COMPILED → WITNESS_BUILT → PROOF_BUILT → ARTIFACTS_EXTRACTED
                                                          ├→ CONSUMED_BY_NEXT_STAGE
                                                          └→ VERIFIED
  (어느 진행 상태에서든) → FAILED

실패한 단계가 생기면 예외에 단계 이름을 기록(`exc.stage`)하고 다시 던진다.
ZkChainError가 아닌 예외는 ZkChainError로 감싸 같은 방식으로 보고한다
(원래 예외는 `__cause__`).
이후 단계는 시도하지 않는다. 검증 결과 False는 예외가 아니라
`PipelineResult.verified is False`로 보고한다.

사용 예시:
    >>> result = Pipeline([
    ...     StageSpec("main", "addition_main", {"x": 1, "y": 2, "z": 3}),
    ...     StageSpec("rec1", "addition_rec_1", {"c": 3}),
    ... ]).run()
    >>> result.verified
    True
"""

import enum
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

from zkchain.backend import build_backend
from zkchain.compiler import CompiledCircuit
from zkchain.config import BackendConfig
from zkchain.errors import ZkChainError, InvalidInputError, PipelineStateError
from zkchain.loader import CircuitLoader
from zkchain.proofs import verify_proof
from zkchain.recursion import RecursiveInputBuilder
from zkchain.serializers import fr_short

logger = logging.getLogger(__name__)


class StageState(enum.Enum):
    UNCOMPILED = "uncompiled"
    COMPILED = "compiled"
    WITNESS_BUILT = "witness_built"
    PROOF_BUILT = "proof_built"
    ARTIFACTS_EXTRACTED = "artifacts_extracted"
    CONSUMED_BY_NEXT_STAGE = "consumed_by_next_stage"
    VERIFIED = "verified"
    FAILED = "failed"


_TRANSITIONS = {
    StageState.UNCOMPILED: {StageState.COMPILED, StageState.FAILED},
    StageState.COMPILED: {StageState.WITNESS_BUILT, StageState.FAILED},
    StageState.WITNESS_BUILT: {StageState.PROOF_BUILT, StageState.FAILED},
    StageState.PROOF_BUILT: {StageState.ARTIFACTS_EXTRACTED, StageState.FAILED},
    StageState.ARTIFACTS_EXTRACTED: {
        StageState.CONSUMED_BY_NEXT_STAGE, StageState.VERIFIED, StageState.FAILED,
    },
    StageState.CONSUMED_BY_NEXT_STAGE: set(),
    StageState.VERIFIED: set(),
    StageState.FAILED: set(),
}


@dataclass
class StageSpec:
    """파이프라인 한 단계의 선언.

    circuit: CompiledCircuit 또는 CircuitLoader가 찾을 회로 이름
    inputs: 이 단계의 자체 입력 (재귀 필드 제외)
    recursive: 백엔드 재귀 플래그. 다음 단계에 임베드되는 단계는 True여야 한다.
    """
    name: str
    circuit: Union[str, CompiledCircuit]
    inputs: Dict[str, Any] = field(default_factory=dict)
    recursive: bool = True

    def __post_init__(self):
        if self.inputs is None:
            self.inputs = {}
        elif not isinstance(self.inputs, dict):
            raise InvalidInputError(
                f"입력은 이름 → 값 맵이어야 합니다: {type(self.inputs).__name__}",
                stage=self.name,
            )


class Stage:
    """실행 중인 단계와 그 산출물."""

    def __init__(self, spec):
        self.name = spec.name
        self.source = spec.circuit
        self.inputs = dict(spec.inputs)
        self.recursive = spec.recursive
        self.circuit = None
        self.witness = None
        self.proof = None
        self.public_inputs = None
        self.artifacts = None
        self.state = StageState.UNCOMPILED
        self.error = None

    def transition(self, new_state):
        if new_state not in _TRANSITIONS[self.state]:
            raise PipelineStateError(
                f"{self.name}: {self.state.value} → {new_state.value} 전이는 허용되지 않습니다",
                stage=self.name,
            )
        self.state = new_state

    def fail(self, error):
        self.error = error
        if StageState.FAILED in _TRANSITIONS[self.state]:
            self.state = StageState.FAILED

    def __repr__(self):
        return f"Stage({self.name!r}, {self.state.value})"


class PipelineResult:
    """완료된 파이프라인 실행. 모든 단계의 공개 입력을 보존한다."""

    def __init__(self, stages, verified, run_id=None):
        self.stages = tuple(stages)
        self.verified = verified
        self.run_id = run_id

    @property
    def terminal(self):
        return self.stages[-1]

    @property
    def proof(self):
        return self.terminal.proof

    @property
    def public_inputs(self):
        return self.terminal.public_inputs

    def stage(self, name):
        for stage in self.stages:
            if stage.name == name:
                return stage
        raise KeyError(name)


class Pipeline:

    def __init__(self, stages, loader=None, config=None, verify_terminal=True, store=None):
        specs = list(stages)
        if not specs:
            raise PipelineStateError("파이프라인에 단계가 없습니다")
        names = [spec.name for spec in specs]
        if len(set(names)) != len(names):
            raise PipelineStateError(f"단계 이름이 중복됩니다: {names}")
        for spec in specs[:-1]:
            if not spec.recursive:
                raise PipelineStateError(
                    f"{spec.name}: 다음 단계에 임베드되는 단계는 recursive=True여야 합니다",
                    stage=spec.name,
                )

        self.specs = specs
        self.loader = loader
        self.config = config or BackendConfig.from_env()
        self.verify_terminal = verify_terminal
        self.store = store

    def run(self):
        stages = [Stage(spec) for spec in self.specs]
        run_id = self.store.create_run([s.name for s in stages]) if self.store else None

        logger.info("Compiling circuits...")
        for stage in stages:
            self._guard(stage, run_id, self._compile, stage)

        previous = None
        for stage in stages:
            self._guard(stage, run_id, self._prove, stage, previous)
            if self.store:
                if previous is not None:
                    self.store.save_stage(run_id, previous)
                self.store.save_stage(run_id, stage)
            previous = stage

        verified = None
        terminal = stages[-1]
        if self.verify_terminal:
            verified = self._guard(terminal, run_id, self._verify, terminal)
            if self.store:
                self.store.save_stage(run_id, terminal)

        if self.store:
            self.store.finish_run(run_id, verified)
        return PipelineResult(stages, verified, run_id)

    def _guard(self, stage, run_id, step, *args):
        """step을 실행하고, 실패하면 단계를 FAILED로 표시한 뒤 다시 던진다."""
        try:
            return step(*args)
        except ZkChainError as exc:
            self._fail(stage, run_id, exc)
            raise
        except Exception as exc:
            error = ZkChainError(f"{type(exc).__name__}: {exc}")
            self._fail(stage, run_id, error)
            raise error from exc

    def _fail(self, stage, run_id, error):
        stage.fail(error)
        error.stage = stage.name
        logger.error("%s failed: %s", stage.name, error.message)
        if self.store:
            self.store.fail_run(run_id, stage, error)

    def _compile(self, stage):
        if isinstance(stage.source, CompiledCircuit):
            stage.circuit = stage.source
        else:
            if self.loader is None:
                self.loader = CircuitLoader()
            stage.circuit = self.loader.load(stage.source)
        stage.transition(StageState.COMPILED)

    def _prove(self, stage, previous):
        circuit = stage.circuit
        logger.info("Generating %s proof...", stage.name)

        if previous is None:
            inputs = stage.inputs
        else:
            inputs = (RecursiveInputBuilder(circuit)
                      .with_parent(previous.public_inputs, previous.artifacts)
                      .with_inputs(stage.inputs)
                      .build())

        with build_backend(circuit, recursive=stage.recursive, config=self.config) as bound:
            witness = bound.engine.execute(inputs)
            stage.witness = witness
            stage.transition(StageState.WITNESS_BUILT)

            proof, public_inputs = bound.backend.generate_proof(witness)
            stage.proof, stage.public_inputs = proof, public_inputs
            stage.witness = None
            stage.transition(StageState.PROOF_BUILT)

            stage.artifacts = bound.backend.generate_recursive_artifacts(
                proof, public_inputs, len(public_inputs)
            )
            stage.transition(StageState.ARTIFACTS_EXTRACTED)

        if previous is not None:
            previous.transition(StageState.CONSUMED_BY_NEXT_STAGE)
        logger.info("%s proof generated", stage.name)
        logger.debug("%s public inputs: %s", stage.name,
                     [fr_short(v) for v in public_inputs])

    def _verify(self, stage):
        logger.info("Verifying %s proof...", stage.name)
        verified = verify_proof(stage.circuit, stage.proof, stage.public_inputs,
                                recursive=stage.recursive, config=self.config)
        if verified:
            stage.transition(StageState.VERIFIED)
            logger.info("%s proof verified", stage.name)
        else:
            logger.warning("%s proof was rejected", stage.name)
        return verified
