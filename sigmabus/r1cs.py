"""
R1CS 제약 시스템 (Rank-1 Constraint System)
============================================

회로를 A·z ∘ B·z = C·z 형태의 제약들로 표현한다.

**변수(Variable)**:
  z = [1, 공개 입력..., 비공개 입력(witness)...]
  - instance 변수: 공개 입력. 0번은 항상 상수 1 (ONE).
  - witness 변수: 비공개 값. Prover만 안다.
  내부적으로 instance k 는 정수 k, witness k 는 -(k+1) 로 표현한다.

**선형결합(LinearCombination)**:
  Σ coeff_i · var_i. 덧셈/상수곱은 제약 없이 선형결합으로 처리되고,
  두 변수의 곱만 새로운 witness와 제약 하나를 만든다.

**모드**:
  - PROVE: 실제 값을 할당하고 만족 여부를 검사할 수 있다.
  - SETUP: 키 생성용. 회로의 "모양"(게이트 구조)만 기록하고 값은 무시한다.

**FpVar**:
  회로 안의 필드 원소. 파이썬 연산자로 게이트를 기술할 수 있다.

    >>> cs = ConstraintSystem()
    >>> x = FpVar.new_witness(cs, FR(3))
    >>> y = x * x * x + x + 5
    >>> y.enforce_equal(FpVar.new_input(cs, FR(35)))
    >>> cs.is_satisfied()   # True
"""

import logging

from sigmabus.field import FR, CURVE_ORDER
from sigmabus.exceptions import SynthesisError

logger = logging.getLogger(__name__)

# 상수 1 변수 (instance 0번)
ONE = 0

PROVE = "prove"
SETUP = "setup"


def _to_int(value):
    return int(value) % CURVE_ORDER


def witness_variable(index):
    return -(index + 1)


def is_witness(variable):
    return variable < 0


class LinearCombination:
    """변수 → 계수 사전으로 표현한 선형결합. 계수는 CURVE_ORDER로 축소된 정수."""

    __slots__ = ("terms",)

    def __init__(self, terms=None):
        self.terms = {}
        if terms:
            for var, coeff in terms.items():
                coeff = _to_int(coeff)
                if coeff:
                    self.terms[var] = coeff

    @classmethod
    def zero(cls):
        return cls()

    @classmethod
    def constant(cls, value):
        return cls({ONE: value})

    @classmethod
    def variable(cls, var):
        return cls({var: 1})

    def is_constant(self):
        return all(var == ONE for var in self.terms)

    def constant_value(self):
        return self.terms.get(ONE, 0)

    def __add__(self, other):
        result = LinearCombination()
        result.terms = dict(self.terms)
        for var, coeff in other.terms.items():
            total = (result.terms.get(var, 0) + coeff) % CURVE_ORDER
            if total:
                result.terms[var] = total
            else:
                result.terms.pop(var, None)
        return result

    def __neg__(self):
        return self.scale(CURVE_ORDER - 1)

    def __sub__(self, other):
        return self + (-other)

    def scale(self, factor):
        factor = _to_int(factor)
        result = LinearCombination()
        if factor:
            result.terms = {var: coeff * factor % CURVE_ORDER for var, coeff in self.terms.items()}
        return result

    def __len__(self):
        return len(self.terms)

    def __repr__(self):
        return f"LinearCombination({self.terms})"


class ConstraintSystem:
    """R1CS 제약 시스템.

    속성:
        mode: PROVE 또는 SETUP
        instance_assignment: 공개 입력 값 (0번은 1)
        witness_assignment: witness 값
        constraints: (a, b, c) LinearCombination 튜플 리스트, a·b = c
    """

    def __init__(self, mode=PROVE):
        if mode not in (PROVE, SETUP):
            raise ValueError(f"알 수 없는 모드: {mode}")
        self.mode = mode
        self.num_instance_variables = 1
        self.num_witness_variables = 0
        self.instance_assignment = [1]
        self.witness_assignment = []
        self.constraints = []
        self.labels = []

    def is_in_setup_mode(self):
        return self.mode == SETUP

    @property
    def num_constraints(self):
        return len(self.constraints)

    # ── 변수 할당 ──

    def _check_value(self, value):
        if self.is_in_setup_mode():
            return None
        if value is None:
            raise SynthesisError("assignment missing")
        return _to_int(value)

    def new_input_variable(self, value):
        """공개 입력 변수를 할당한다. 할당 순서가 검증키의 공개 입력 순서가 된다."""
        value = self._check_value(value)
        index = self.num_instance_variables
        self.num_instance_variables += 1
        if value is not None:
            self.instance_assignment.append(value)
        return index

    def new_witness_variable(self, value):
        value = self._check_value(value)
        index = self.num_witness_variables
        self.num_witness_variables += 1
        if value is not None:
            self.witness_assignment.append(value)
        return witness_variable(index)

    def enforce_constraint(self, a, b, c, label=None):
        """a · b = c 제약을 추가한다."""
        self.constraints.append((a, b, c))
        self.labels.append(label)

    # ── 값 계산 ──

    def assigned_value(self, var):
        if self.is_in_setup_mode():
            raise SynthesisError("assignment missing: constraint system is in setup mode")
        if is_witness(var):
            return self.witness_assignment[-var - 1]
        return self.instance_assignment[var]

    def eval_lc(self, lc):
        total = 0
        for var, coeff in lc.terms.items():
            total += coeff * self.assigned_value(var)
        return total % CURVE_ORDER

    def which_is_unsatisfied(self):
        """만족되지 않는 첫 번째 제약의 (인덱스, 레이블)을 반환한다. 모두 만족하면 None."""
        for i, (a, b, c) in enumerate(self.constraints):
            if self.eval_lc(a) * self.eval_lc(b) % CURVE_ORDER != self.eval_lc(c):
                return i, self.labels[i]
        return None

    def is_satisfied(self):
        unsatisfied = self.which_is_unsatisfied()
        if unsatisfied is not None:
            logger.debug("constraint %d (%s) is not satisfied", *unsatisfied)
            return False
        return True

    # ── QAP 변환용 ──

    def column(self, var):
        """변수를 z 벡터의 열 인덱스로 바꾼다: [instance..., witness...]."""
        if is_witness(var):
            return self.num_instance_variables + (-var - 1)
        return var

    def to_matrices(self):
        """A, B, C 희소 행렬. 각 행은 (계수, 열) 리스트."""
        matrices = {"a": [], "b": [], "c": []}
        for a, b, c in self.constraints:
            for key, lc in (("a", a), ("b", b), ("c", c)):
                matrices[key].append(
                    [(coeff, self.column(var)) for var, coeff in lc.terms.items()]
                )
        return matrices

    def full_assignment(self):
        """z = [1, 공개 입력..., witness...] (정수 리스트)."""
        if self.is_in_setup_mode():
            raise SynthesisError("assignment missing: constraint system is in setup mode")
        return list(self.instance_assignment) + list(self.witness_assignment)

    def public_inputs(self):
        """상수 1을 제외한 공개 입력 값 (FR 리스트)."""
        return [FR(v) for v in self.full_assignment()[1:self.num_instance_variables]]


class FpVar:
    """회로 안의 필드 원소 변수.

    상수 FpVar는 cs 없이 존재할 수 있고, 상수끼리의 연산은 제약을 만들지 않는다.
    """

    __slots__ = ("cs", "lc", "_value")

    def __init__(self, cs, lc, value):
        self.cs = cs
        self.lc = lc
        self._value = value

    @classmethod
    def constant(cls, value):
        value = _to_int(value)
        return cls(None, LinearCombination.constant(value), value)

    @classmethod
    def new_input(cls, cs, value):
        var = cs.new_input_variable(value)
        return cls(cs, LinearCombination.variable(var), cs._check_value(value))

    @classmethod
    def new_witness(cls, cs, value):
        var = cs.new_witness_variable(value)
        return cls(cs, LinearCombination.variable(var), cs._check_value(value))

    def is_constant(self):
        return self.lc.is_constant()

    def value(self):
        """할당된 값 (FR). SETUP 모드에서는 None."""
        if self._value is None:
            return None
        return FR(self._value)

    # ── 연산자 ──

    @staticmethod
    def _coerce(other):
        if isinstance(other, FpVar):
            return other
        return FpVar.constant(other)

    @staticmethod
    def _combine_values(a, b, op):
        if a is None or b is None:
            return None
        return op(a, b) % CURVE_ORDER

    def _cs_with(self, other):
        return self.cs if self.cs is not None else other.cs

    def __add__(self, other):
        other = self._coerce(other)
        return FpVar(
            self._cs_with(other),
            self.lc + other.lc,
            self._combine_values(self._value, other._value, lambda a, b: a + b),
        )

    __radd__ = __add__

    def __neg__(self):
        value = None if self._value is None else (-self._value) % CURVE_ORDER
        return FpVar(self.cs, -self.lc, value)

    def __sub__(self, other):
        return self + (-self._coerce(other))

    def __rsub__(self, other):
        return self._coerce(other) - self

    def __mul__(self, other):
        other = self._coerce(other)
        value = self._combine_values(self._value, other._value, lambda a, b: a * b)
        if self.is_constant():
            return FpVar(other.cs, other.lc.scale(self.lc.constant_value()), value)
        if other.is_constant():
            return FpVar(self.cs, self.lc.scale(other.lc.constant_value()), value)

        # 변수 × 변수: 곱을 새 witness로 할당하고 a·b = w 제약 추가
        cs = self._cs_with(other)
        product = FpVar.new_witness(cs, value)
        cs.enforce_constraint(self.lc, other.lc, product.lc)
        return product

    __rmul__ = __mul__

    def square(self):
        return self * self

    def pow_by_constant(self, exponent):
        """self^exponent (square-and-multiply). Poseidon S-box x^α에 사용한다."""
        if exponent < 1:
            raise ValueError(f"지수는 1 이상이어야 합니다: {exponent}")
        result = None
        base = self
        while exponent:
            if exponent & 1:
                result = base if result is None else result * base
            exponent >>= 1
            if exponent:
                base = base.square()
        return result

    def enforce_equal(self, other):
        """self == other 제약: (self - other) · 1 = 0."""
        other = self._coerce(other)
        if self.is_constant() and other.is_constant():
            if self.lc.constant_value() != other.lc.constant_value():
                raise SynthesisError("unsatisfiable: two distinct constants enforced equal")
            return
        cs = self._cs_with(other)
        cs.enforce_constraint(
            self.lc - other.lc,
            LinearCombination.constant(1),
            LinearCombination.zero(),
        )

    def __repr__(self):
        return f"FpVar(value={self._value}, terms={len(self.lc)})"
