"""
백엔드 설정
============

  | 필드         | 기본값  | 환경 변수            |
  |--------------|---------|----------------------|
  | threads      | 8       | ZKCHAIN_THREADS      |
  | srs_seed     | 12345   | ZKCHAIN_SRS_SEED     |
  | srs_degree   | 64      | ZKCHAIN_SRS_DEGREE   |

회로 디렉터리는 ZKCHAIN_CIRCUITS_DIR (기본 ./circuits).

같은 설정으로 만든 백엔드끼리만 서로의 증명을 검증할 수 있다.
증명을 만든 설정과 검증하는 설정이 다르면 SRS가 달라져 검증에 실패한다.
"""

import os
from dataclasses import dataclass

DEFAULT_THREADS = 8
DEFAULT_SRS_SEED = 12345
DEFAULT_SRS_DEGREE = 64

CIRCUITS_DIR_ENV = "ZKCHAIN_CIRCUITS_DIR"


def _env_int(name, default):
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name}는 정수여야 합니다: {raw!r}") from None


@dataclass(frozen=True)
class BackendConfig:
    threads: int = DEFAULT_THREADS
    srs_seed: int = DEFAULT_SRS_SEED
    srs_degree: int = DEFAULT_SRS_DEGREE

    def __post_init__(self):
        if self.threads < 1:
            raise ValueError(f"threads는 1 이상이어야 합니다: {self.threads}")
        if self.srs_degree < 1:
            raise ValueError(f"srs_degree는 1 이상이어야 합니다: {self.srs_degree}")

    @classmethod
    def from_env(cls):
        return cls(
            threads=_env_int("ZKCHAIN_THREADS", DEFAULT_THREADS),
            srs_seed=_env_int("ZKCHAIN_SRS_SEED", DEFAULT_SRS_SEED),
            srs_degree=_env_int("ZKCHAIN_SRS_DEGREE", DEFAULT_SRS_DEGREE),
        )


def circuits_root():
    """회로 소스 디렉터리 경로."""
    return os.environ.get(CIRCUITS_DIR_ENV) or os.path.join(os.getcwd(), "circuits")
