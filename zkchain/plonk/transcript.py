"""
PLONK Fiat-Shamir 트랜스크립트
================================

대화식 PLONK를 비대화식으로 바꾸기 위해 지금까지의 메시지를
SHA-256으로 해싱해 챌린지를 만든다.

  공개 입력 → β, γ → α → ζ → v → u

**도메인 레이블**:
  트랜스크립트의 첫 바이트열은 백엔드 설정에 따라 달라진다.
    - 일반 증명:      b"plonk"
    - 재귀용 증명:    b"plonk-recursive"
  다른 레이블로 만든 증명은 챌린지가 달라져 검증에 실패한다.
  따라서 재귀 검사에 들어갈 증명은 반드시 재귀 설정의 백엔드로 만들어야 한다.
"""

import hashlib

from zkchain.plonk.field import FR, CURVE_ORDER

PLAIN_LABEL = b"plonk"
RECURSIVE_LABEL = b"plonk-recursive"


def transcript_label(recursive):
    """백엔드 재귀 플래그에 맞는 도메인 레이블."""
    return RECURSIVE_LABEL if recursive else PLAIN_LABEL


class Transcript:
    """SHA-256 기반 누적 트랜스크립트.

    Prover와 Verifier가 같은 순서로 같은 값을 넣으면 같은 챌린지가 나온다.
    """

    def __init__(self, label=PLAIN_LABEL):
        self.state = bytearray(label)

    def append_scalar(self, label, scalar):
        """FR 값을 32바이트 빅엔디안으로 추가한다."""
        self.state.extend(label)
        self.state.extend((int(scalar) % CURVE_ORDER).to_bytes(32, "big"))

    def append_scalars(self, label, scalars):
        for scalar in scalars:
            self.append_scalar(label, scalar)

    def append_point(self, label, point):
        """G1 점 (x, y)를 추가한다. 무한원점은 64바이트의 0."""
        self.state.extend(label)
        if point is None:
            self.state.extend(b"\x00" * 64)
            return
        x, y = point
        self.state.extend(int(x).to_bytes(32, "big"))
        self.state.extend(int(y).to_bytes(32, "big"))

    def challenge_scalar(self, label):
        """현재 상태의 해시로 챌린지를 만들고, 해시를 다시 상태에 연결한다."""
        self.state.extend(label)
        digest = hashlib.sha256(bytes(self.state)).digest()
        self.state.extend(digest)
        return FR(int.from_bytes(digest, "big") % CURVE_ORDER)
