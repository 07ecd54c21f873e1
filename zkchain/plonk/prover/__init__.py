"""
PLONK Prover — 5-라운드 프로토콜
=================================

  ┌─────────────────────────────────────────────────────┐
  │  Round 1: 공개 입력 흡수, [a]₁, [b]₁, [c]₁ 커밋      │
  │  Round 2: β, γ → 순열 누적자 [z]₁                    │
  │  Round 3: α → 몫 다항식 [t_lo]₁, [t_mid]₁, [t_hi]₁   │
  │  Round 4: ζ → ā, b̄, c̄, s̄_σ1, s̄_σ2, z̄_ω            │
  │  Round 5: v → r̄, [W_ζ]₁, [W_ζω]₁                    │
  └─────────────────────────────────────────────────────┘

재귀 설정의 백엔드는 트랜스크립트 레이블만 다르고 프로토콜은 동일하다.

사용 예시:
    >>> proof = prove(pk, (a_vals, b_vals, c_vals), public_inputs, srs, recursive=True)
"""

from zkchain.plonk.transcript import Transcript, transcript_label
from zkchain.plonk.kzg import commit_many
from zkchain.plonk.prover import round1, round2, round3, round4, round5


class Proof:
    """PLONK 증명.

    커밋먼트 (G1 점):
        a_comm, b_comm, c_comm        — Round 1
        z_comm                        — Round 2
        t_lo_comm, t_mid_comm, t_hi_comm — Round 3
        W_zeta_comm, W_zeta_omega_comm   — Round 5

    평가값 (FR):
        a_eval, b_eval, c_eval, s_sigma1_eval, s_sigma2_eval, z_omega_eval — Round 4
        r_eval                                                              — Round 5

    COMMITMENTS, EVALUATIONS 튜플의 순서가 필드 인코딩 순서이다.
    """

    COMMITMENTS = (
        "a_comm", "b_comm", "c_comm", "z_comm",
        "t_lo_comm", "t_mid_comm", "t_hi_comm",
        "W_zeta_comm", "W_zeta_omega_comm",
    )
    EVALUATIONS = (
        "a_eval", "b_eval", "c_eval",
        "s_sigma1_eval", "s_sigma2_eval", "z_omega_eval", "r_eval",
    )

    def __init__(self):
        for name in self.COMMITMENTS + self.EVALUATIONS:
            setattr(self, name, None)

    def __eq__(self, other):
        if not isinstance(other, Proof):
            return NotImplemented
        return all(
            getattr(self, name) == getattr(other, name)
            for name in self.COMMITMENTS + self.EVALUATIONS
        )

    def to_fields(self):
        from zkchain.encoding import proof_to_fields
        return proof_to_fields(self)

    def to_bytes(self):
        from zkchain.encoding import proof_to_bytes
        return proof_to_bytes(self)

    @classmethod
    def from_fields(cls, fields):
        from zkchain.encoding import proof_from_fields
        return proof_from_fields(fields)

    @classmethod
    def from_bytes(cls, data):
        from zkchain.encoding import proof_from_bytes
        return proof_from_bytes(data)


class ProverState:
    """라운드 사이에서 공유되는 Prover 상태.

    입력:
        a_vals, b_vals, c_vals: 길이 n의 배선 값
        public_inputs: 공개 입력
        pk: ProvingKey
        srs: SRS
        transcript: 재귀 플래그에 맞는 레이블로 시작한 트랜스크립트
        executor: 커밋먼트 병렬화용 Executor 또는 None

    라운드 출력:
        pi_poly, a_poly, b_poly, c_poly, z_poly, t_lo/t_mid/t_hi_poly,
        beta, gamma, alpha, zeta, v, proof
    """

    def __init__(self, wire_values, public_inputs, pk, srs, recursive=False, executor=None):
        self.a_vals, self.b_vals, self.c_vals = wire_values
        self.public_inputs = list(public_inputs)
        self.pk = pk
        self.srs = srs
        self.executor = executor
        self.transcript = Transcript(transcript_label(recursive))

        self.n = pk.n
        self.omega = pk.omega
        self.domain = pk.domain

        self.pi_poly = None
        self.a_poly = None
        self.b_poly = None
        self.c_poly = None
        self.z_poly = None
        self.t_lo_poly = None
        self.t_mid_poly = None
        self.t_hi_poly = None

        self.beta = None
        self.gamma = None
        self.alpha = None
        self.zeta = None
        self.v = None

        self.proof = Proof()

    def commit_all(self, polys):
        return commit_many(polys, self.srs, self.executor)


def prove(pk, wire_values, public_inputs, srs, recursive=False, executor=None):
    """PLONK 증명을 생성한다.

    Args:
        pk: ProvingKey
        wire_values: (a_vals, b_vals, c_vals) — 각각 길이 pk.n
        public_inputs: 공개 입력 값 리스트
        srs: SRS
        recursive: 재귀용 트랜스크립트 레이블을 쓸지 여부
        executor: 커밋먼트 병렬화용 Executor

    Returns:
        Proof

    Raises:
        ValueError: 배선 값이 제약을 만족하지 않거나 SRS가 부족할 때
    """
    state = ProverState(wire_values, public_inputs, pk, srs, recursive, executor)
    for stage in (round1, round2, round3, round4, round5):
        stage.execute(state)
    return state.proof
