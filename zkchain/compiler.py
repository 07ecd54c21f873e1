"""
회로 컴파일러
==============

Python 문법의 작은 부분집합으로 쓴 회로 소스를 PLONK 제약 시스템으로 바꾼다.

  def main(x: Field, y: Public, z: Public):
      assert x + y == z

**문장**:
  - `name = expr`                 한 번만 바인딩 (재바인딩 금지)
  - `assert lhs == rhs`           동등 제약
  - `verify_proof(verification_key, proof, public_inputs, key_hash)`
                                  이전 증명의 재귀 검사 (회로당 한 번)
  - `pass`, 독스트링

**식**: 이름, 정수 리터럴, 단항 -, +, -, *, `배열[정수]`.
상수끼리의 연산은 컴파일 시점에 접힌다.

**게이트 배치**:
  0..l-1 행: 공개 입력 (선언 순서, 배열은 인덱스 순서)
  이후:     식마다 계산 게이트 하나, assert마다 검사 게이트 하나.
            `assert a + b == c`처럼 한쪽이 이항 연산이면 게이트 하나로 합친다.

  assert x + y == z  →  PI(y), PI(z), [x + y - z = 0]  →  3 게이트, n = 4

**재귀 검사**:
  verify_proof의 네 인자는 반드시 같은 이름의 매개변수여야 한다.
    verification_key: VerificationKey
    proof: Proof
    public_inputs: Field[k] | Public[k]   (k = 0 이면 공개 입력이 없는 이전 단계)
    key_hash: Field | Public
  이 네 이름은 재귀 검사 전용이다. 검사 자체는 실행 엔진이 네이티브로 수행한다
  (zkchain.execution).
"""

import ast
import hashlib

from zkchain.abi import (
    Parameter, InputSchema,
    FIELD, ARRAY, VERIFICATION_KEY_KIND, PROOF_KIND,
    VERIFICATION_KEY, PROOF, PUBLIC_INPUTS, KEY_HASH, RECURSION_KEYS,
)
from zkchain.errors import CompilationError
from zkchain.plonk.field import FR
from zkchain.plonk.circuit import ConstraintSystem, Gate, ZERO_VARIABLE

ENTRY_POINT = "main"
RECURSION_CALL = "verify_proof"

_SCALAR_ANNOTATIONS = {"Field": False, "Public": True}
_OPAQUE_ANNOTATIONS = {"VerificationKey": VERIFICATION_KEY_KIND, "Proof": PROOF_KIND}
_RECURSION_KINDS = {
    VERIFICATION_KEY: (VERIFICATION_KEY_KIND,),
    PROOF: (PROOF_KIND,),
    PUBLIC_INPUTS: (ARRAY,),
    KEY_HASH: (FIELD,),
}


class RecursionCheck:
    """verify_proof 호출이 참조하는 변수 번호들."""

    def __init__(self, verification_key, proof, public_inputs, key_hash, line):
        self.verification_key = tuple(verification_key)
        self.proof = tuple(proof)
        self.public_inputs = tuple(public_inputs)
        self.key_hash = key_hash
        self.line = line


class CompiledCircuit:
    """컴파일된 회로. 생성 후 바뀌지 않으며 소스 digest로 식별된다.

    속성:
        name: 회로 이름
        source: 원본 소스
        digest: 소스의 SHA-256 (hex)
        schema: InputSchema
        constraint_system: 고정된 ConstraintSystem
        variables: 매개변수 이름 → 변수 번호 튜플
        recursion: RecursionCheck 또는 None
    """

    __slots__ = ("name", "source", "digest", "schema", "constraint_system",
                 "variables", "recursion")

    def __init__(self, name, source, schema, constraint_system, variables, recursion=None):
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "source", source)
        object.__setattr__(self, "digest", hashlib.sha256(source.encode()).hexdigest())
        object.__setattr__(self, "schema", schema)
        object.__setattr__(self, "constraint_system", constraint_system.freeze())
        object.__setattr__(self, "variables", dict(variables))
        object.__setattr__(self, "recursion", recursion)

    def __setattr__(self, name, value):
        raise AttributeError("CompiledCircuit는 수정할 수 없습니다")

    def __eq__(self, other):
        if not isinstance(other, CompiledCircuit):
            return NotImplemented
        return self.name == other.name and self.digest == other.digest

    def __hash__(self):
        return hash((self.name, self.digest))

    def __repr__(self):
        return f"CompiledCircuit({self.name!r}, digest={self.digest[:12]})"

    @property
    def num_public_inputs(self):
        return self.constraint_system.num_public_inputs

    @property
    def is_recursive(self):
        return self.recursion is not None

    def describe(self):
        cs = self.constraint_system
        return {
            "name": self.name,
            "digest": self.digest,
            "parameters": self.schema.to_list(),
            "num_gates": cs.num_gates,
            "domain_size": cs.domain_size,
            "num_public_inputs": cs.num_public_inputs,
            "recursive": self.is_recursive,
        }


def compile_source(name, source):
    """회로 소스를 컴파일한다.

    Raises:
        CompilationError: 문법 오류, main 누락, 지원하지 않는 구문 등
    """
    try:
        module = ast.parse(source)
    except SyntaxError as exc:
        raise CompilationError(f"문법 오류: {exc.msg}", line=exc.lineno) from exc

    main = None
    for node in module.body:
        if isinstance(node, ast.FunctionDef) and node.name == ENTRY_POINT:
            if main is not None:
                raise CompilationError("main이 두 번 정의되었습니다", line=node.lineno)
            main = node
        elif _is_docstring(node):
            continue
        else:
            raise CompilationError("최상위에는 main 정의만 올 수 있습니다", line=node.lineno)
    if main is None:
        raise CompilationError("main 함수가 없습니다")

    return _CircuitBuilder(name, main).build(source)


def _is_docstring(node):
    return (isinstance(node, ast.Expr)
            and isinstance(node.value, ast.Constant)
            and isinstance(node.value.value, str))


# ─── 값 표현 ───
# 식의 결과는 ("const", FR) 또는 ("var", 변수 번호)

def _const(value):
    return ("const", value)


def _var(index):
    return ("var", index)


class _CircuitBuilder:

    def __init__(self, name, function):
        self.name = name
        self.function = function
        self.cs = ConstraintSystem()
        self.parameters = []
        self.variables = {}
        self.bindings = {}
        self.recursion = None

    def build(self, source):
        self._declare_parameters()
        for statement in self.function.body:
            self._statement(statement)
        self._check_recursion_parameters()
        return CompiledCircuit(
            self.name, source, InputSchema(self.parameters), self.cs,
            self.variables, self.recursion,
        )

    # ── 매개변수 ──

    def _declare_parameters(self):
        args = self.function.args
        if (args.vararg or args.kwarg or args.kwonlyargs or args.defaults
                or getattr(args, "posonlyargs", [])):
            raise CompilationError("main은 위치 매개변수만 가질 수 있습니다",
                                   line=self.function.lineno)

        for arg in args.args:
            param = self._parameter(arg)
            if param.name in RECURSION_KEYS and param.kind not in _RECURSION_KINDS[param.name]:
                raise CompilationError(
                    f"{param.name}의 타입은 재귀 검사 규약과 맞지 않습니다: {param.annotation()}",
                    line=arg.lineno,
                )
            if param.kind in (VERIFICATION_KEY_KIND, PROOF_KIND) and param.name not in RECURSION_KEYS:
                raise CompilationError(
                    f"{param.annotation()} 매개변수의 이름은 "
                    f"{VERIFICATION_KEY if param.kind == VERIFICATION_KEY_KIND else PROOF}이어야 합니다",
                    line=arg.lineno,
                )

            indices = tuple(self.cs.new_variable() for _ in range(param.size))
            if param.public:
                for index in indices:
                    self.cs.add_public_input(index)
            self.parameters.append(param)
            self.variables[param.name] = indices

    def _parameter(self, arg):
        annotation = arg.annotation
        line = arg.lineno
        if annotation is None:
            raise CompilationError(f"{arg.arg}에 타입 어노테이션이 없습니다", line=line)

        if isinstance(annotation, ast.Name):
            if annotation.id in _SCALAR_ANNOTATIONS:
                return Parameter(arg.arg, FIELD, public=_SCALAR_ANNOTATIONS[annotation.id])
            if annotation.id in _OPAQUE_ANNOTATIONS:
                return Parameter(arg.arg, _OPAQUE_ANNOTATIONS[annotation.id])
        elif isinstance(annotation, ast.Subscript) and isinstance(annotation.value, ast.Name):
            size = _literal_int(annotation.slice)
            if annotation.value.id in _SCALAR_ANNOTATIONS and size is not None:
                if size < 0 or (size == 0 and arg.arg != PUBLIC_INPUTS):
                    raise CompilationError(f"{arg.arg}: 배열 크기는 1 이상이어야 합니다", line=line)
                return Parameter(arg.arg, ARRAY, size=size,
                                 public=_SCALAR_ANNOTATIONS[annotation.value.id])

        raise CompilationError(f"{arg.arg}: 지원하지 않는 타입 어노테이션", line=line)

    # ── 문장 ──

    def _statement(self, node):
        if isinstance(node, ast.Pass) or _is_docstring(node):
            return
        if isinstance(node, ast.Assign):
            self._assign(node)
        elif isinstance(node, ast.Assert):
            self._assert(node)
        elif isinstance(node, ast.Expr) and isinstance(node.value, ast.Call):
            self._recursion_call(node.value)
        else:
            raise CompilationError(
                f"지원하지 않는 문장: {type(node).__name__}", line=node.lineno
            )

    def _assign(self, node):
        if len(node.targets) != 1 or not isinstance(node.targets[0], ast.Name):
            raise CompilationError("대입 대상은 이름 하나여야 합니다", line=node.lineno)
        target = node.targets[0].id
        if target in self.variables or target in self.bindings:
            raise CompilationError(f"{target}는 이미 정의되었습니다", line=node.lineno)
        self.bindings[target] = self._expr(node.value, node.lineno)

    def _assert(self, node):
        line = node.lineno
        if node.msg is not None:
            raise CompilationError("assert 메시지는 지원하지 않습니다", line=line)
        test = node.test
        if not (isinstance(test, ast.Compare) and len(test.ops) == 1
                and isinstance(test.ops[0], ast.Eq)):
            raise CompilationError("assert는 `lhs == rhs` 형태만 지원합니다", line=line)

        lhs, rhs = test.left, test.comparators[0]
        for binop, other in ((lhs, rhs), (rhs, lhs)):
            if isinstance(binop, ast.BinOp) and self._fused_assert(binop, other, line):
                return
        self._assert_equal(self._expr(lhs, line), self._expr(rhs, line), line)

    def _fused_assert(self, binop, other, line):
        """`op(l, r) == o`를 게이트 하나로 만든다. 합칠 수 없으면 False."""
        if not isinstance(binop.op, (ast.Add, ast.Sub, ast.Mult)):
            return False
        left = self._expr(binop.left, line)
        right = self._expr(binop.right, line)
        if left[0] == "const" and right[0] == "const":
            return False
        result = self._expr(other, line)

        q_l, q_r, q_m, q_c = FR(0), FR(0), FR(0), FR(0)
        a, b = ZERO_VARIABLE, ZERO_VARIABLE
        if isinstance(binop.op, ast.Mult):
            if left[0] == "var" and right[0] == "var":
                q_m, a, b = FR(1), left[1], right[1]
            else:
                (_, k), (_, a) = sorted((left, right))
                q_l = k
        else:
            sign = FR(1) if isinstance(binop.op, ast.Add) else FR(0) - FR(1)
            if left[0] == "var":
                q_l, a = FR(1), left[1]
            else:
                q_c = left[1]
            if right[0] == "var":
                if left[0] == "var":
                    q_r, b = sign, right[1]
                else:
                    q_l, a = sign, right[1]
            else:
                q_c = q_c + sign * right[1]

        if result[0] == "var":
            q_o, c = FR(0) - FR(1), result[1]
        else:
            q_o, c = FR(0), ZERO_VARIABLE
            q_c = q_c - result[1]

        self.cs.add_gate(Gate(q_l, q_r, q_o, q_m, q_c, line=line), a, b, c)
        return True

    def _assert_equal(self, lhs, rhs, line):
        if lhs[0] == "const" and rhs[0] == "const":
            if lhs[1] != rhs[1]:
                raise CompilationError("항상 거짓인 assert", line=line)
            return
        if lhs[0] == "const":
            lhs, rhs = rhs, lhs
        if rhs[0] == "var":
            self.cs.add_gate(Gate(1, -1, 0, 0, 0, line=line), lhs[1], rhs[1], ZERO_VARIABLE)
        else:
            self.cs.add_gate(Gate(1, 0, 0, 0, FR(0) - rhs[1], line=line),
                             lhs[1], ZERO_VARIABLE, ZERO_VARIABLE)

    def _recursion_call(self, call):
        line = call.lineno
        if not (isinstance(call.func, ast.Name) and call.func.id == RECURSION_CALL):
            raise CompilationError("호출할 수 있는 함수는 verify_proof뿐입니다", line=line)
        if self.recursion is not None:
            raise CompilationError("verify_proof는 한 번만 호출할 수 있습니다", line=line)
        names = [arg.id if isinstance(arg, ast.Name) else None for arg in call.args]
        if call.keywords or tuple(names) != RECURSION_KEYS:
            raise CompilationError(
                f"verify_proof의 인자는 ({', '.join(RECURSION_KEYS)})이어야 합니다", line=line
            )
        missing = [name for name in RECURSION_KEYS if name not in self.variables]
        if missing:
            raise CompilationError(
                f"verify_proof에 필요한 매개변수가 없습니다: {', '.join(missing)}", line=line
            )

        self.recursion = RecursionCheck(
            verification_key=self.variables[VERIFICATION_KEY],
            proof=self.variables[PROOF],
            public_inputs=self.variables[PUBLIC_INPUTS],
            key_hash=self.variables[KEY_HASH][0],
            line=line,
        )

    def _check_recursion_parameters(self):
        if self.recursion is not None:
            return
        reserved = [p.name for p in self.parameters if p.name in RECURSION_KEYS]
        if reserved:
            raise CompilationError(
                f"{', '.join(reserved)}는 verify_proof 전용 이름입니다",
                line=self.function.lineno,
            )

    # ── 식 ──

    def _expr(self, node, line):
        line = getattr(node, "lineno", line)

        if isinstance(node, ast.Constant):
            if isinstance(node.value, bool) or not isinstance(node.value, int):
                raise CompilationError(f"지원하지 않는 상수: {node.value!r}", line=line)
            return _const(FR(node.value))

        if isinstance(node, ast.Name):
            return self._name(node.id, line)

        if isinstance(node, ast.Subscript):
            return self._index(node, line)

        if isinstance(node, ast.UnaryOp) and isinstance(node.op, ast.USub):
            operand = self._expr(node.operand, line)
            if operand[0] == "const":
                return _const(FR(0) - operand[1])
            return self._compute(Gate(-1, 0, -1, 0, 0, computes=True, line=line),
                                 operand[1], ZERO_VARIABLE)

        if isinstance(node, ast.BinOp):
            return self._binop(node, line)

        raise CompilationError(f"지원하지 않는 식: {type(node).__name__}", line=line)

    def _name(self, name, line):
        if name in self.bindings:
            return self.bindings[name]
        if name in self.variables:
            param = next(p for p in self.parameters if p.name == name)
            if not param.is_scalar:
                raise CompilationError(f"{name}는 스칼라가 아닙니다", line=line)
            return _var(self.variables[name][0])
        raise CompilationError(f"정의되지 않은 이름: {name}", line=line)

    def _index(self, node, line):
        if not isinstance(node.value, ast.Name):
            raise CompilationError("배열 이름만 인덱싱할 수 있습니다", line=line)
        name = node.value.id
        param = next((p for p in self.parameters if p.name == name), None)
        if param is None or param.kind != ARRAY:
            raise CompilationError(f"{name}는 배열 매개변수가 아닙니다", line=line)
        index = _literal_int(node.slice)
        if index is None:
            raise CompilationError("배열 인덱스는 정수 리터럴이어야 합니다", line=line)
        if not 0 <= index < param.size:
            raise CompilationError(
                f"{name}[{index}]: 인덱스가 범위(0..{param.size - 1})를 벗어납니다", line=line
            )
        return _var(self.variables[name][index])

    def _binop(self, node, line):
        left = self._expr(node.left, line)
        right = self._expr(node.right, line)
        op = node.op

        if left[0] == "const" and right[0] == "const":
            if isinstance(op, ast.Add):
                return _const(left[1] + right[1])
            if isinstance(op, ast.Sub):
                return _const(left[1] - right[1])
            if isinstance(op, ast.Mult):
                return _const(left[1] * right[1])

        if isinstance(op, ast.Add):
            if left[0] == "var" and right[0] == "var":
                return self._compute(Gate(1, 1, -1, 0, 0, computes=True, line=line),
                                     left[1], right[1])
            (_, k), (_, a) = sorted((left, right))
            return self._compute(Gate(1, 0, -1, 0, k, computes=True, line=line), a, ZERO_VARIABLE)

        if isinstance(op, ast.Sub):
            if left[0] == "var" and right[0] == "var":
                return self._compute(Gate(1, -1, -1, 0, 0, computes=True, line=line),
                                     left[1], right[1])
            if left[0] == "var":
                return self._compute(Gate(1, 0, -1, 0, FR(0) - right[1], computes=True, line=line),
                                     left[1], ZERO_VARIABLE)
            return self._compute(Gate(-1, 0, -1, 0, left[1], computes=True, line=line),
                                 right[1], ZERO_VARIABLE)

        if isinstance(op, ast.Mult):
            if left[0] == "var" and right[0] == "var":
                return self._compute(Gate(0, 0, -1, 1, 0, computes=True, line=line),
                                     left[1], right[1])
            (_, k), (_, a) = sorted((left, right))
            if k == FR(0):
                return _const(FR(0))
            return self._compute(Gate(k, 0, -1, 0, 0, computes=True, line=line), a, ZERO_VARIABLE)

        raise CompilationError(f"지원하지 않는 연산자: {type(op).__name__}", line=line)

    def _compute(self, gate, a, b):
        c = self.cs.new_variable()
        self.cs.add_gate(gate, a, b, c)
        return _var(c)


def _literal_int(node):
    if isinstance(node, ast.Constant) and isinstance(node.value, int) \
            and not isinstance(node.value, bool):
        return node.value
    return None
