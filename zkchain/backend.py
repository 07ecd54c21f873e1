"""
BackendFactory
===============

컴파일된 회로 하나를 PLONK 백엔드와 실행 엔진에 묶는다.

  build_backend(circuit, recursive, config) → BoundBackend(backend, engine)

**BoundBackend**:
  한 단계 동안만 쓰는 소유 값. with 블록을 벗어나면 스레드 풀을 닫는다.

    with build_backend(circuit, recursive=True) as bound:
        witness = bound.engine.execute(inputs)
        proof, public_inputs = bound.backend.generate_proof(witness)

**재귀 플래그**:
  Fiat-Shamir 트랜스크립트의 도메인 레이블을 정한다.
  다음 단계에 임베드될 증명은 반드시 recursive=True 백엔드로 만들어야 한다.

**증명 키 캐시**:
  (회로 이름, SRS seed, SRS 차수)별로 전처리 결과를 하나만 둔다.
  같은 이름의 회로 digest가 바뀌면 이전 항목을 대체하므로 캐시 크기는
  회로 이름 수를 넘지 않는다. clear_key_cache()는 캐시 전체를 비운다.
  전처리는 증명이나 검증 키가 처음 필요할 때 수행된다. 이 시점의 실패
  (SRS가 회로보다 작은 경우 등)는 증명 쪽에서는 ProofGenerationError,
  검증 쪽에서는 VerificationError로 보고된다.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor

from zkchain.config import BackendConfig
from zkchain.encoding import to_fr, vk_to_fields, proof_from_bytes, hash_fields
from zkchain.errors import ProofGenerationError, ArtifactExtractionError, VerificationError
from zkchain.execution import ExecutionEngine
from zkchain.plonk.field import FR, is_on_g1
from zkchain.plonk.srs import load_srs
from zkchain.plonk.preprocessor import preprocess
from zkchain.plonk.prover import Proof, prove
from zkchain.plonk.verifier import verify
from zkchain.recursion import RecursiveArtifacts

logger = logging.getLogger(__name__)

_KEY_CACHE = {}
_KEY_LOCK = threading.Lock()


def clear_key_cache():
    with _KEY_LOCK:
        _KEY_CACHE.clear()


class Backend:
    """회로 하나 + 설정 + 재귀 플래그에 묶인 증명/검증 엔진."""

    def __init__(self, circuit, config, recursive, executor=None):
        self.circuit = circuit
        self.config = config
        self.recursive = recursive
        self.executor = executor

    @property
    def srs(self):
        return load_srs(self.config.srs_seed, self.config.srs_degree)

    def proving_key(self):
        """전처리 결과. 없으면 만들어 캐시한다.

        Raises:
            ValueError: SRS가 이 회로에 비해 작을 때
        """
        key = (self.circuit.name, self.config.srs_seed, self.config.srs_degree)
        digest = self.circuit.digest
        with _KEY_LOCK:
            entry = _KEY_CACHE.get(key)
            if entry is not None and entry[0] == digest:
                return entry[1]
            cs = self.circuit.constraint_system
            logger.debug("preprocessing %s (n=%d)", self.circuit.name, cs.domain_size)
            pk = preprocess(cs, self.srs, self.executor)
            _KEY_CACHE[key] = (digest, pk)
        return pk

    def verification_key(self):
        return self.proving_key().verification_key

    # ── 증명 ──

    def generate_proof(self, witness):
        """Witness로부터 (Proof, PublicInputs)를 만든다.

        Raises:
            ProofGenerationError: 다른 회로의 witness, 증명 설정 부족, 백엔드 내부 실패
        """
        if witness.circuit_digest != self.circuit.digest:
            raise ProofGenerationError(
                f"{self.circuit.name}: 다른 회로에서 만든 witness입니다"
            )
        try:
            pk = self.proving_key()
            proof = prove(pk, witness.wire_values, witness.public_inputs, self.srs,
                          recursive=self.recursive, executor=self.executor)
        except ValueError as exc:
            raise ProofGenerationError(f"{self.circuit.name}: 증명 생성 실패: {exc}") from exc
        return proof, list(witness.public_inputs)

    def generate_recursive_artifacts(self, proof, public_inputs, num_public_inputs):
        """다음 단계가 임베드할 검증 키/증명 필드와 키 해시를 만든다.

        Raises:
            ArtifactExtractionError: num_public_inputs ≠ len(public_inputs)
        """
        if num_public_inputs != len(public_inputs):
            raise ArtifactExtractionError(
                f"{self.circuit.name}: 선언한 공개 입력 수 {num_public_inputs}가 "
                f"실제 {len(public_inputs)}와 다릅니다"
            )
        try:
            vk_fields = vk_to_fields(self.verification_key())
        except ValueError as exc:
            raise ArtifactExtractionError(f"{self.circuit.name}: {exc}") from exc
        return RecursiveArtifacts(
            verification_key_fields=vk_fields,
            proof_fields=proof.to_fields(),
            verification_key_hash=hash_fields(vk_fields),
        )

    # ── 검증 ──

    def verify_proof(self, proof, public_inputs):
        """증명을 검증한다. 거부된 증명은 False.

        Raises:
            VerificationError: 요청 자체를 평가할 수 없을 때
        """
        proof = self._coerce_proof(proof)
        public_inputs = self._coerce_public_inputs(public_inputs)
        try:
            vk = self.verification_key()
        except ValueError as exc:
            raise VerificationError(f"{self.circuit.name}: 검증 키를 만들 수 없습니다: {exc}") from exc
        return verify(proof, public_inputs, vk, self.srs, recursive=self.recursive)

    def _coerce_proof(self, proof):
        if isinstance(proof, (bytes, bytearray)):
            try:
                return proof_from_bytes(proof)
            except ValueError as exc:
                raise VerificationError(f"증명 인코딩을 해석할 수 없습니다: {exc}") from exc
        if not isinstance(proof, Proof):
            raise VerificationError(f"증명 타입이 아닙니다: {type(proof).__name__}")
        for name in Proof.COMMITMENTS:
            point = getattr(proof, name)
            if point is not None and (not isinstance(point, tuple) or not is_on_g1(point)):
                raise VerificationError(f"{name}가 G1 위의 점이 아닙니다")
        for name in Proof.EVALUATIONS:
            if not isinstance(getattr(proof, name), FR):
                raise VerificationError(f"{name}가 필드 원소가 아닙니다")
        return proof

    def _coerce_public_inputs(self, public_inputs):
        if not isinstance(public_inputs, (list, tuple)):
            raise VerificationError(
                f"공개 입력은 리스트여야 합니다: {type(public_inputs).__name__}"
            )
        expected = self.circuit.num_public_inputs
        if len(public_inputs) != expected:
            raise VerificationError(
                f"{self.circuit.name}: 공개 입력 {expected}개가 필요하지만 "
                f"{len(public_inputs)}개가 주어졌습니다"
            )
        try:
            return [to_fr(v) for v in public_inputs]
        except ValueError as exc:
            raise VerificationError(f"공개 입력이 필드 원소가 아닙니다: {exc}") from exc


class BoundBackend:
    """(Backend, ExecutionEngine) 한 쌍. 한 단계의 수명 동안 소유된다."""

    def __init__(self, backend, engine, executor):
        self.backend = backend
        self.engine = engine
        self._executor = executor

    def __iter__(self):
        return iter((self.backend, self.engine))

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def close(self):
        self._executor.shutdown(wait=True)


def build_backend(circuit, recursive=True, config=None):
    """회로를 백엔드와 실행 엔진에 묶는다."""
    config = config or BackendConfig.from_env()
    executor = ThreadPoolExecutor(max_workers=config.threads,
                                  thread_name_prefix=f"zkchain-{circuit.name}")
    backend = Backend(circuit, config, recursive, executor)
    engine = ExecutionEngine(circuit, backend.srs)
    return BoundBackend(backend, engine, executor)
