"""
PLONK 제약 시스템 (Constraint System)
======================================

컴파일러가 만드는 회로의 산술화 표현.

**게이트 방정식** (행마다 하나):

    q_L·a + q_R·b + q_O·c + q_M·(a·b) + q_C + PI = 0

  | 유형        | q_L | q_R | q_O | q_M | q_C | 의미           |
  |-------------|-----|-----|-----|-----|-----|----------------|
  | 공개 입력    |  1  |  0  |  0  |  0  |  0  | a = wᵢ (PI 항) |
  | 덧셈        |  1  |  1  | -1  |  0  |  0  | a + b = c      |
  | 뺄셈        |  1  | -1  | -1  |  0  |  0  | a - b = c      |
  | 곱셈        |  0  |  0  | -1  |  1  |  0  | a·b = c        |
  | 상수 덧셈    |  1  |  0  | -1  |  0  |  k  | a + k = c      |
  | 동등 검사    |  1  | -1  |  0  |  0  |  0  | a = b          |

**배선**:
  각 행의 a, b, c는 변수 번호를 가리킨다. 같은 변수를 가리키는 배선 위치들은
  하나의 순환(cycle)으로 묶여 순열 σ가 된다 (copy constraint).
  변수 0은 쓰이지 않는 배선 자리를 채우는 0 값 변수이다.

**공개 입력 행**:
  공개 입력은 항상 0번 행부터 선언 순서대로 놓인다.
  이 순서가 곧 증명의 PublicInputs 순서이다.

사용 예시:
    >>> cs = ConstraintSystem()
    >>> y, z = cs.new_variable(), cs.new_variable()
    >>> cs.add_public_input(y); cs.add_public_input(z)
    >>> x = cs.new_variable()
    >>> cs.add_gate(Gate(1, 1, -1, 0, 0), x, y, z)
"""

from zkchain.plonk.field import FR
from zkchain.plonk.utils import next_power_of_2

# 0 값으로 고정되는 채움 변수
ZERO_VARIABLE = 0

# 가장 작은 평가 도메인 크기
MIN_DOMAIN_SIZE = 4


class Gate:
    """PLONK 산술 게이트 한 행.

    속성:
        q_l, q_r, q_o, q_m, q_c: 셀렉터 (FR)
        computes: True면 실행 시 출력 c를 a, b로부터 계산한다 (q_O ≠ 0 필요).
                  False면 이미 값이 정해진 배선들에 대한 검사이다.
        line: 게이트를 만든 소스 줄 번호 (진단용)
    """

    def __init__(self, q_l, q_r, q_o, q_m, q_c, computes=False, line=None):
        self.q_l = FR(q_l) if not isinstance(q_l, FR) else q_l
        self.q_r = FR(q_r) if not isinstance(q_r, FR) else q_r
        self.q_o = FR(q_o) if not isinstance(q_o, FR) else q_o
        self.q_m = FR(q_m) if not isinstance(q_m, FR) else q_m
        self.q_c = FR(q_c) if not isinstance(q_c, FR) else q_c
        self.computes = computes
        self.line = line
        if computes and self.q_o == FR(0):
            raise ValueError("출력을 계산하는 게이트는 q_O가 0이 아니어야 합니다")

    def evaluate(self, a, b, c):
        """q_L·a + q_R·b + q_O·c + q_M·a·b + q_C."""
        return (
            self.q_l * a
            + self.q_r * b
            + self.q_o * c
            + self.q_m * (a * b)
            + self.q_c
        )

    def check(self, a, b, c, pi=None):
        """게이트 방정식(+ PI 항)이 0인지 확인한다."""
        value = self.evaluate(a, b, c)
        if pi is not None:
            value = value + pi
        return value == FR(0)

    def solve_output(self, a, b):
        """c = -(q_L·a + q_R·b + q_M·a·b + q_C) / q_O."""
        partial = self.q_l * a + self.q_r * b + self.q_m * (a * b) + self.q_c
        return (FR(0) - partial) / self.q_o

    @classmethod
    def public_input(cls):
        return cls(1, 0, 0, 0, 0)


class ConstraintSystem:
    """게이트, 배선, 공개 입력 변수의 목록.

    컴파일이 끝나면 `freeze()`로 고정되어 이후 모든 단계에서 읽기 전용으로 공유된다.
    """

    def __init__(self):
        self.gates = []
        self.wires = []
        self.public_variables = []
        self.num_variables = 1  # 0번은 ZERO_VARIABLE
        self.frozen = False

    def _check_mutable(self):
        if self.frozen:
            raise RuntimeError("고정된 제약 시스템은 수정할 수 없습니다")

    def new_variable(self):
        self._check_mutable()
        index = self.num_variables
        self.num_variables += 1
        return index

    def add_public_input(self, variable):
        """공개 입력 행을 추가한다. 다른 게이트보다 먼저 와야 한다."""
        self._check_mutable()
        if len(self.gates) != len(self.public_variables):
            raise ValueError("공개 입력은 산술 게이트보다 앞에 선언되어야 합니다")
        self.public_variables.append(variable)
        self.gates.append(Gate.public_input())
        self.wires.append((variable, ZERO_VARIABLE, ZERO_VARIABLE))
        return len(self.gates) - 1

    def add_gate(self, gate, a, b, c):
        """게이트 한 행을 추가하고 행 번호를 반환한다."""
        self._check_mutable()
        self.gates.append(gate)
        self.wires.append((a, b, c))
        return len(self.gates) - 1

    def freeze(self):
        self.gates = tuple(self.gates)
        self.wires = tuple(self.wires)
        self.public_variables = tuple(self.public_variables)
        self.frozen = True
        return self

    @property
    def num_public_inputs(self):
        return len(self.public_variables)

    @property
    def num_gates(self):
        return len(self.gates)

    @property
    def domain_size(self):
        """게이트 수 이상인 2의 거듭제곱 (최소 MIN_DOMAIN_SIZE)."""
        return next_power_of_2(max(len(self.gates), MIN_DOMAIN_SIZE))

    def selector_vectors(self):
        """도메인 크기로 0-패딩된 (q_L, q_R, q_O, q_M, q_C) 벡터."""
        n = self.domain_size
        padding = [FR(0)] * (n - len(self.gates))
        return (
            [g.q_l for g in self.gates] + padding,
            [g.q_r for g in self.gates] + padding,
            [g.q_o for g in self.gates] + padding,
            [g.q_m for g in self.gates] + padding,
            [g.q_c for g in self.gates] + padding,
        )

    def wire_columns(self):
        """도메인 크기로 패딩된 (a, b, c) 변수 번호 열."""
        n = self.domain_size
        padding = [ZERO_VARIABLE] * (n - len(self.wires))
        columns = ([], [], [])
        for row in self.wires:
            for column, variable in zip(columns, row):
                column.append(variable)
        return tuple(list(column) + padding for column in columns)

    def build_permutation(self):
        """배선 순열 σ (길이 3n)를 만든다.

        위치 규칙: a열 i행 = i, b열 = n + i, c열 = 2n + i.
        같은 변수를 가리키는 위치들을 등장 순서대로 하나의 순환으로 잇는다:
            p₀ → p₁ → ... → p_{k-1} → p₀
        """
        n = self.domain_size
        positions = {}
        for column_index, column in enumerate(self.wire_columns()):
            for row, variable in enumerate(column):
                positions.setdefault(variable, []).append(column_index * n + row)

        sigma = list(range(3 * n))
        for cycle in positions.values():
            for k, position in enumerate(cycle):
                sigma[position] = cycle[(k + 1) % len(cycle)]
        return sigma
