"""
R1CS → QAP 변환
================

Groth16 키 생성과 증명 생성에 필요한 QAP 연산.

**도메인**:
  제약 j는 평가 도메인의 ωʲ 지점에 대응한다. 공개 입력 i마다
  (z_i) · 0 = 0 형태의 "입력 제약"을 뒤에 덧붙여, 공개 입력 다항식들이
  서로 선형 독립이 되도록 한다. 도메인 크기 = 제약 수 + 공개 입력 수
  (2의 거듭제곱으로 올림).

**키 생성용 (instance_map_with_evaluation)**:
  비밀 점 τ에서 모든 변수 k의 A_k(τ), B_k(τ), C_k(τ)를 계산한다.
    A_k(τ) = Σ_j A[j][k] · L_j(τ)

**증명용 (witness_map)**:
  h(x) = (A(x)·B(x) - C(x)) / Z_H(x) 의 계수를 구한다.
  평가값 → IFFT → 코셋 FFT → 코셋 위에서 Z_H(g·ωⁱ) = gⁿ - 1 로 나눔 → 코셋 IFFT.
"""

import logging

from sigmabus.field import FR, CURVE_ORDER
from sigmabus.polynomial import EvaluationDomain
from sigmabus.r1cs import ConstraintSystem, PROVE, SETUP
from sigmabus.exceptions import SynthesisError

logger = logging.getLogger(__name__)


def synthesize(circuit, mode=PROVE):
    """회로의 제약을 생성한다. PROVE 모드면 값도 할당된다."""
    cs = ConstraintSystem(mode=mode)
    circuit.generate_constraints(cs)
    if cs.num_constraints == 0:
        raise SynthesisError("circuit produced no constraints")
    return cs


def synthesize_for_setup(circuit):
    return synthesize(circuit, mode=SETUP)


def domain_for(cs):
    try:
        return EvaluationDomain(cs.num_constraints + cs.num_instance_variables)
    except ValueError as exc:
        raise SynthesisError(f"polynomial degree too large: {exc}") from exc


def instance_map_with_evaluation(cs, tau):
    """τ에서 QAP 다항식들을 평가한다.

    Returns:
        (a, b, c, zt, domain): a/b/c는 변수별 A_k(τ), B_k(τ), C_k(τ) (FR 리스트),
                               zt = Z_H(τ)
    """
    domain = domain_for(cs)
    lagrange = domain.evaluate_all_lagrange_coefficients(tau)
    lagrange = [int(v) for v in lagrange]
    zt = domain.evaluate_vanishing_polynomial(tau)

    num_constraints = cs.num_constraints
    num_variables = cs.num_instance_variables + cs.num_witness_variables
    a = [0] * num_variables
    b = [0] * num_variables
    c = [0] * num_variables

    # 입력 제약: 공개 입력 i는 제약 (num_constraints + i) 의 A 쪽에 1로 등장
    for i in range(cs.num_instance_variables):
        a[i] = lagrange[num_constraints + i]

    matrices = cs.to_matrices()
    for j in range(num_constraints):
        u = lagrange[j]
        for coeff, col in matrices["a"][j]:
            a[col] += u * coeff
        for coeff, col in matrices["b"][j]:
            b[col] += u * coeff
        for coeff, col in matrices["c"][j]:
            c[col] += u * coeff

    to_fr = lambda values: [FR(v % CURVE_ORDER) for v in values]
    return to_fr(a), to_fr(b), to_fr(c), zt, domain


def _evaluate_rows(rows, assignment):
    return [
        FR(sum(coeff * assignment[col] for coeff, col in row) % CURVE_ORDER)
        for row in rows
    ]


def witness_map(cs):
    """h(x)의 계수 (길이 = 도메인 크기, 최고차 계수는 0).

    cs는 PROVE 모드로 합성되어 값이 할당되어 있어야 한다.
    """
    domain = domain_for(cs)
    assignment = cs.full_assignment()
    matrices = cs.to_matrices()

    a_evals = _evaluate_rows(matrices["a"], assignment)
    b_evals = _evaluate_rows(matrices["b"], assignment)
    c_evals = _evaluate_rows(matrices["c"], assignment)
    # 입력 제약 행: a = z_i, b = c = 0
    a_evals += [FR(v) for v in assignment[:cs.num_instance_variables]]

    a_coset = domain.coset_fft(domain.ifft(a_evals))
    b_coset = domain.coset_fft(domain.ifft(b_evals))
    c_coset = domain.coset_fft(domain.ifft(c_evals))

    z_coset_inv = FR(1) / (domain.coset_shift ** domain.size - FR(1))
    quotient = [
        (a_coset[i] * b_coset[i] - c_coset[i]) * z_coset_inv
        for i in range(domain.size)
    ]
    h = domain.coset_ifft(quotient)
    logger.debug("witness map: domain size %d", domain.size)
    return h
