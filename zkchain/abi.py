"""
회로 입력 스키마 (ABI)
=======================

컴파일러가 `main`의 매개변수 선언으로부터 만든다.

  | 어노테이션        | kind              | 필드 수 | 공개 |
  |-------------------|-------------------|---------|------|
  | Field             | field             | 1       | ✗    |
  | Public            | field             | 1       | ✓    |
  | Field[N]          | array             | N       | ✗    |
  | Public[N]         | array             | N       | ✓    |
  | VerificationKey   | verification_key  | 34      | ✗    |
  | Proof             | proof             | 43      | ✗    |

재귀 검사를 하는 회로는 네 개의 고정 이름(RECURSION_KEYS)을 매개변수로 선언한다.
나머지 매개변수가 그 단계의 "자체 입력"이다.

`InputSchema.validate()`는 실행 전에 입력 맵 전체를 검사하고
매개변수별 FR 리스트로 평탄화한다.
"""

from zkchain.encoding import to_fr, VK_FIELDS, PROOF_FIELDS
from zkchain.errors import MissingInputError, InvalidInputError

VERIFICATION_KEY = "verification_key"
PROOF = "proof"
PUBLIC_INPUTS = "public_inputs"
KEY_HASH = "key_hash"

RECURSION_KEYS = (VERIFICATION_KEY, PROOF, PUBLIC_INPUTS, KEY_HASH)

FIELD = "field"
ARRAY = "array"
VERIFICATION_KEY_KIND = "verification_key"
PROOF_KIND = "proof"

_FIXED_SIZES = {FIELD: 1, VERIFICATION_KEY_KIND: VK_FIELDS, PROOF_KIND: PROOF_FIELDS}


class Parameter:
    """main 매개변수 하나."""

    def __init__(self, name, kind, size=None, public=False):
        if kind == ARRAY:
            # 공개 입력이 없는 이전 단계를 받는 public_inputs만 크기 0을 허용
            minimum = 0 if name == PUBLIC_INPUTS else 1
            if size is None or size < minimum:
                raise ValueError(f"배열 매개변수 {name}의 크기가 올바르지 않습니다")
        else:
            size = _FIXED_SIZES[kind]
        if public and kind in (VERIFICATION_KEY_KIND, PROOF_KIND):
            raise ValueError(f"{name}: {kind}는 공개 입력이 될 수 없습니다")
        self.name = name
        self.kind = kind
        self.size = size
        self.public = public

    @property
    def is_scalar(self):
        return self.kind == FIELD

    def annotation(self):
        if self.kind == FIELD:
            return "Public" if self.public else "Field"
        if self.kind == ARRAY:
            return f"{'Public' if self.public else 'Field'}[{self.size}]"
        return "VerificationKey" if self.kind == VERIFICATION_KEY_KIND else "Proof"

    def to_dict(self):
        return {
            "name": self.name,
            "type": self.annotation(),
            "size": self.size,
            "public": self.public,
        }

    def __eq__(self, other):
        if not isinstance(other, Parameter):
            return NotImplemented
        return (self.name, self.kind, self.size, self.public) == (
            other.name, other.kind, other.size, other.public)

    def __hash__(self):
        return hash((self.name, self.kind, self.size, self.public))

    def __repr__(self):
        return f"Parameter({self.name}: {self.annotation()})"


class InputSchema:
    """매개변수 목록 (선언 순서 유지)."""

    def __init__(self, parameters):
        self.parameters = tuple(parameters)
        names = [p.name for p in self.parameters]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"중복 매개변수: {duplicates}")
        self._by_name = {p.name: p for p in self.parameters}

    @property
    def names(self):
        return tuple(self._by_name)

    def __getitem__(self, name):
        return self._by_name[name]

    def __contains__(self, name):
        return name in self._by_name

    @property
    def has_recursion(self):
        return any(name in self._by_name for name in RECURSION_KEYS)

    @property
    def own_parameters(self):
        """재귀 필드를 제외한 매개변수."""
        return tuple(p for p in self.parameters if p.name not in RECURSION_KEYS)

    @property
    def num_public_inputs(self):
        return sum(p.size for p in self.parameters if p.public)

    def validate(self, inputs):
        """입력 맵을 검사하고 {이름: [FR, ...]}로 평탄화한다.

        Raises:
            MissingInputError: 선언된 매개변수가 맵에 없을 때 (누락 전부 나열)
            InvalidInputError: 알 수 없는 이름, 형태 불일치, 필드 원소가 아닌 값
        """
        if not isinstance(inputs, dict):
            raise InvalidInputError(f"입력은 이름 → 값 맵이어야 합니다: {type(inputs).__name__}")

        missing = [p.name for p in self.parameters if p.name not in inputs]
        if missing:
            raise MissingInputError(missing)

        unknown = sorted(set(inputs) - set(self._by_name))
        if unknown:
            raise InvalidInputError(f"회로에 선언되지 않은 입력: {', '.join(unknown)}")

        flat = {}
        for param in self.parameters:
            flat[param.name] = self._flatten(param, inputs[param.name])
        return flat

    @staticmethod
    def _flatten(param, value):
        if param.is_scalar:
            if isinstance(value, (list, tuple)):
                raise InvalidInputError(f"{param.name}: 스칼라가 필요합니다")
            values = [value]
        else:
            if not isinstance(value, (list, tuple)):
                raise InvalidInputError(f"{param.name}: 길이 {param.size}의 시퀀스가 필요합니다")
            if len(value) != param.size:
                raise InvalidInputError(
                    f"{param.name}: 길이 {param.size}가 필요하지만 {len(value)}개가 주어졌습니다"
                )
            values = list(value)

        try:
            return [to_fr(v) for v in values]
        except ValueError as exc:
            raise InvalidInputError(f"{param.name}: {exc}") from exc

    def to_list(self):
        return [p.to_dict() for p in self.parameters]
