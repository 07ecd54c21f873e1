"""
PLONK 전처리기 (Preprocessor)
===============================

회로 구조가 정해지면 셀렉터·순열 다항식을 한 번 계산하고 커밋한다.

**출력물**:
  ProvingKey
    - 도메인: n, ω, H
    - 셀렉터 다항식 q_L, q_R, q_O, q_M, q_C
    - 순열 다항식 S_σ1, S_σ2, S_σ3 와 그 평가값
    - verification_key
  VerificationKey (Verifier와 재귀 검사가 쓰는 부분)
    - n, 공개 입력 수
    - 셀렉터·순열 커밋먼트 8개

전처리는 제약 시스템을 바꾸지 않는다. 패딩은 복사된 벡터 위에서만 일어난다.

사용 예시:
    >>> pk = preprocess(compiled.constraint_system, srs)
    >>> pk.verification_key.n
    4
"""

from zkchain.plonk.field import get_root_of_unity, get_roots_of_unity
from zkchain.plonk.polynomial import Polynomial
from zkchain.plonk.kzg import commit_many
from zkchain.plonk.permutation import build_permutation_polynomials


def required_srs_degree(n):
    """도메인 크기 n의 증명에 필요한 SRS 최대 차수.

    블라인딩 때문에 t_hi(x)의 차수가 n + 5까지 올라간다.
    """
    return n + 5


class VerificationKey:
    """회로의 검증 키.

    속성:
        n: 도메인 크기
        num_public_inputs: 공개 입력 수
        q_m_comm, q_l_comm, q_r_comm, q_o_comm, q_c_comm: 셀렉터 커밋먼트
        s_sigma1_comm, s_sigma2_comm, s_sigma3_comm: 순열 커밋먼트
    """

    # 필드 인코딩 순서 (zkchain.encoding)
    COMMITMENTS = (
        "q_m_comm", "q_l_comm", "q_r_comm", "q_o_comm", "q_c_comm",
        "s_sigma1_comm", "s_sigma2_comm", "s_sigma3_comm",
    )

    def __init__(self, n, num_public_inputs, **commitments):
        missing = [name for name in self.COMMITMENTS if name not in commitments]
        if missing:
            raise ValueError(f"검증 키 커밋먼트 누락: {missing}")
        self.n = n
        self.num_public_inputs = num_public_inputs
        self.omega = get_root_of_unity(n)
        for name in self.COMMITMENTS:
            setattr(self, name, commitments[name])

    def commitments(self):
        return [getattr(self, name) for name in self.COMMITMENTS]

    def __eq__(self, other):
        if not isinstance(other, VerificationKey):
            return NotImplemented
        return (
            self.n == other.n
            and self.num_public_inputs == other.num_public_inputs
            and self.commitments() == other.commitments()
        )


class ProvingKey:
    """Prover가 쓰는 전처리 결과. 속성은 preprocess()에서 채운다."""

    def __init__(self, n, omega, domain):
        self.n = n
        self.omega = omega
        self.domain = domain
        self.q_l_poly = None
        self.q_r_poly = None
        self.q_o_poly = None
        self.q_m_poly = None
        self.q_c_poly = None
        self.s_sigma1_poly = None
        self.s_sigma2_poly = None
        self.s_sigma3_poly = None
        self.sigma = None
        self.sigma_evals = None
        self.verification_key = None


def preprocess(constraint_system, srs, executor=None):
    """제약 시스템을 전처리해 ProvingKey를 만든다.

    Args:
        constraint_system: ConstraintSystem
        srs: SRS
        executor: 커밋먼트 병렬 계산용 Executor (선택)

    Returns:
        ProvingKey

    Raises:
        ValueError: SRS가 이 회로를 증명하기에 작을 때
    """
    n = constraint_system.domain_size
    if srs.max_degree < required_srs_degree(n):
        raise ValueError(
            f"SRS 최대 차수 {srs.max_degree}가 도메인 {n}에 필요한 "
            f"{required_srs_degree(n)}보다 작습니다"
        )

    pk = ProvingKey(n, get_root_of_unity(n), get_roots_of_unity(n))

    # ── 1. 셀렉터 다항식 ──
    selectors = [
        Polynomial.from_evaluations(evals, pk.omega)
        for evals in constraint_system.selector_vectors()
    ]
    pk.q_l_poly, pk.q_r_poly, pk.q_o_poly, pk.q_m_poly, pk.q_c_poly = selectors

    # ── 2. 순열 다항식 ──
    pk.sigma = constraint_system.build_permutation()
    pk.sigma_evals = build_permutation_polynomials(pk.sigma, n, pk.domain)
    sigmas = [Polynomial.from_evaluations(evals, pk.omega) for evals in pk.sigma_evals]
    pk.s_sigma1_poly, pk.s_sigma2_poly, pk.s_sigma3_poly = sigmas

    # ── 3. 커밋먼트 → 검증 키 ──
    q_l, q_r, q_o, q_m, q_c, s1, s2, s3 = commit_many(selectors + sigmas, srs, executor)
    pk.verification_key = VerificationKey(
        n,
        constraint_system.num_public_inputs,
        q_m_comm=q_m, q_l_comm=q_l, q_r_comm=q_r, q_o_comm=q_o, q_c_comm=q_c,
        s_sigma1_comm=s1, s_sigma2_comm=s2, s_sigma3_comm=s3,
    )
    return pk
