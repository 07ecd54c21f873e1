"""
PLONK 백엔드 기반: FR 위의 다항식과 NTT
========================================

**Polynomial**:
  계수 표현 p(x) = c₀ + c₁x + c₂x² + ... 를 보관한다.
  +, -, *, 스칼라곱, Horner 평가를 지원한다.

**fft / ifft**:
  radix-2 Cooley-Tukey NTT. 도메인 H 위의 평가값 ↔ 계수 변환.
  배선 값, 셀렉터, 순열 벡터를 다항식으로 보간할 때 쓴다.

**poly_div**:
  긴 나눗셈. 몫 다항식 t(x) = C(x) / Z_H(x) 와
  KZG 열기 증명 (p(x) - p(ζ)) / (x - ζ) 에서 사용한다.

사용 예시:
    >>> p = Polynomial([FR(1), FR(2), FR(3)])  # 1 + 2x + 3x²
    >>> p.evaluate(FR(2))
    17
"""

from zkchain.plonk.field import FR


class Polynomial:
    """FR 계수 다항식. 최고차의 0 계수는 잘라서 정규화한다."""

    def __init__(self, coeffs=None):
        if not coeffs:
            coeffs = [FR(0)]
        self.coeffs = [c if isinstance(c, FR) else FR(c) for c in coeffs]
        while len(self.coeffs) > 1 and self.coeffs[-1] == FR(0):
            self.coeffs.pop()

    @property
    def degree(self):
        """차수. 영 다항식의 차수는 0으로 본다."""
        return len(self.coeffs) - 1

    def is_zero(self):
        return len(self.coeffs) == 1 and self.coeffs[0] == FR(0)

    def evaluate(self, point):
        """Horner 방식으로 p(point)를 계산한다."""
        if not isinstance(point, FR):
            point = FR(point)
        result = FR(0)
        for coeff in reversed(self.coeffs):
            result = result * point + coeff
        return result

    def _combine(self, other, sign):
        if isinstance(other, (int, FR)):
            other = Polynomial([other])
        size = max(len(self.coeffs), len(other.coeffs))
        mine = self.coeffs + [FR(0)] * (size - len(self.coeffs))
        theirs = other.coeffs + [FR(0)] * (size - len(other.coeffs))
        if sign > 0:
            return Polynomial([x + y for x, y in zip(mine, theirs)])
        return Polynomial([x - y for x, y in zip(mine, theirs)])

    def __add__(self, other):
        return self._combine(other, 1)

    def __radd__(self, other):
        return self._combine(other, 1)

    def __sub__(self, other):
        return self._combine(other, -1)

    def __rsub__(self, other):
        return Polynomial([other]) - self

    def __neg__(self):
        return Polynomial([FR(0) - c for c in self.coeffs])

    def __mul__(self, other):
        """다항식 곱 (나이브 O(n·m) 합성곱) 또는 스칼라곱."""
        if isinstance(other, (int, FR)):
            scalar = other if isinstance(other, FR) else FR(other)
            return Polynomial([c * scalar for c in self.coeffs])
        out = [FR(0)] * (len(self.coeffs) + len(other.coeffs) - 1)
        for i, a in enumerate(self.coeffs):
            if a == FR(0):
                continue
            for j, b in enumerate(other.coeffs):
                out[i + j] = out[i + j] + a * b
        return Polynomial(out)

    def __rmul__(self, other):
        return self.__mul__(other)

    def __eq__(self, other):
        if isinstance(other, (int, FR)):
            other = Polynomial([other])
        if not isinstance(other, Polynomial):
            return NotImplemented
        return self.coeffs == other.coeffs

    def __repr__(self):
        terms = []
        for i, c in enumerate(self.coeffs):
            if c == FR(0):
                continue
            terms.append(str(int(c)) if i == 0 else f"{int(c)}*x^{i}")
        return "Poly(" + (" + ".join(terms) or "0") + ")"

    def __len__(self):
        return len(self.coeffs)

    def shift_argument(self, factor):
        """p(factor · x)의 계수: cᵢ → factorⁱ · cᵢ.

        순열 제약의 z(ω·x) 항을 만들 때 사용한다.
        """
        out = []
        power = FR(1)
        for coeff in self.coeffs:
            out.append(coeff * power)
            power = power * factor
        return Polynomial(out)

    @classmethod
    def zero(cls):
        return cls([FR(0)])

    @classmethod
    def constant(cls, value):
        return cls([value])

    @classmethod
    def vanishing(cls, n):
        """소거 다항식 Z_H(x) = x^n - 1."""
        coeffs = [FR(0)] * (n + 1)
        coeffs[0] = FR(-1)
        coeffs[n] = FR(1)
        return cls(coeffs)

    @classmethod
    def from_evaluations(cls, evals, omega):
        """도메인 H 위의 평가값을 IFFT로 보간한다."""
        return cls(ifft(evals, omega))


def fft(coeffs, omega):
    """NTT: 계수 → [p(1), p(ω), ..., p(ω^(n-1))]. 길이는 2의 거듭제곱."""
    n = len(coeffs)
    if n == 1:
        value = coeffs[0]
        return [value if isinstance(value, FR) else FR(value)]

    omega_sq = omega * omega
    evens = fft(coeffs[0::2], omega_sq)
    odds = fft(coeffs[1::2], omega_sq)

    half = n // 2
    out = [FR(0)] * n
    twiddle = FR(1)
    for k in range(half):
        t = twiddle * odds[k]
        out[k] = evens[k] + t
        out[k + half] = evens[k] - t
        twiddle = twiddle * omega
    return out


def ifft(evals, omega):
    """역 NTT: ω⁻¹로 NTT를 수행하고 1/n을 곱한다."""
    n_inv = FR(1) / FR(len(evals))
    return [c * n_inv for c in fft(evals, FR(1) / omega)]


def poly_div(a, b):
    """긴 나눗셈 a(x) = b(x)·q(x) + r(x).

    Returns:
        tuple: (q, r)

    Raises:
        ValueError: 제수가 영 다항식일 때
    """
    if b.is_zero():
        raise ValueError("영 다항식으로 나눌 수 없습니다")

    remainder = list(a.coeffs)
    divisor = b.coeffs
    deg_b = len(divisor) - 1
    deg_a = len(remainder) - 1
    if deg_a < deg_b:
        return Polynomial.zero(), Polynomial(remainder)

    quotient = [FR(0)] * (deg_a - deg_b + 1)
    lead_inv = FR(1) / divisor[-1]
    for i in range(deg_a - deg_b, -1, -1):
        coeff = remainder[i + deg_b] * lead_inv
        quotient[i] = coeff
        if coeff == FR(0):
            continue
        for j in range(deg_b + 1):
            remainder[i + j] = remainder[i + j] - coeff * divisor[j]

    return Polynomial(quotient), Polynomial(remainder)


def lagrange_basis(domain, i):
    """도메인 위 i번째 Lagrange 기저 L_i(x)의 계수 표현.

    L_i(d_j) = δ_ij. 경계 제약 (z(x) - 1)·L₁(x)에서 L₁을 만들 때 쓴다.
    """
    result = Polynomial([FR(1)])
    denominator = FR(1)
    for j, point in enumerate(domain):
        if j == i:
            continue
        result = result * Polynomial([FR(0) - point, FR(1)])
        denominator = denominator * (domain[i] - point)
    return result * (FR(1) / denominator)
