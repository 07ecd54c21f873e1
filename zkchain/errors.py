"""
증명 체인 예외 계층
====================

  ZkChainError
    ├── CompilationError               회로 소스 오류 (줄 번호 포함)
    ├── MissingInputError              스키마가 요구하는 입력 누락
    ├── InvalidInputError              형태가 맞지 않거나 필드 원소가 아닌 입력
    ├── ConstraintUnsatisfiedError     입력 값이 회로 제약을 만족하지 않음
    ├── ProofGenerationError           백엔드 내부 실패
    ├── ArtifactExtractionError        선언한 공개 입력 수 ≠ 실제 수
    ├── RecursiveInputCollisionError   재귀 필드 이름과 자체 입력 이름 충돌
    ├── VerificationError              검증 요청 자체를 평가할 수 없음
    └── PipelineStateError             허용되지 않은 단계 상태 전이

모든 예외는 `stage` 속성을 가진다. 파이프라인은 실패한 단계 이름을
여기에 기록한 뒤 예외를 다시 던진다.

검증 결과 False는 예외가 아니다.
"""


class ZkChainError(Exception):
    """증명 체인의 모든 예외의 기반 클래스."""

    def __init__(self, message, stage=None):
        super().__init__(message)
        self.message = message
        self.stage = stage

    def __str__(self):
        if self.stage is None:
            return self.message
        return f"[{self.stage}] {self.message}"


class CompilationError(ZkChainError):
    def __init__(self, message, line=None, stage=None):
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message, stage)
        self.line = line


class MissingInputError(ZkChainError):
    def __init__(self, missing, stage=None):
        self.missing = tuple(missing)
        super().__init__(f"필수 입력 누락: {', '.join(self.missing)}", stage)


class InvalidInputError(ZkChainError):
    pass


class ConstraintUnsatisfiedError(ZkChainError):
    def __init__(self, message, gate=None, stage=None):
        super().__init__(message, stage)
        self.gate = gate


class ProofGenerationError(ZkChainError):
    pass


class ArtifactExtractionError(ZkChainError):
    pass


class RecursiveInputCollisionError(ZkChainError):
    def __init__(self, collisions, stage=None):
        self.collisions = tuple(sorted(collisions))
        super().__init__(
            f"재귀 필드와 입력 이름이 겹칩니다: {', '.join(self.collisions)}", stage
        )


class VerificationError(ZkChainError):
    pass


class PipelineStateError(ZkChainError):
    pass
