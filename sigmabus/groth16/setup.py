"""
Groth16 회로별 키 생성 (Circuit-specific Setup)
================================================

toxic waste (α, β, γ, δ, τ)를 샘플링하여 증명키와 검증키를 만든다.

  σ₁ (G1):
    α, β, δ
    a_query[k]   = A_k(τ)
    b_g1_query[k] = B_k(τ)
    gamma_abc[k] = (β·A_k(τ) + α·B_k(τ) + C_k(τ)) / γ      (공개 입력 k)
    l_query[k]   = (β·A_k(τ) + α·B_k(τ) + C_k(τ)) / δ      (witness k)
    h_query[i]   = τⁱ · Z_H(τ) / δ                          (i < n-1)
  σ₂ (G2):
    β, γ, δ, b_g2_query[k] = B_k(τ)

보안:
  toxic waste를 아는 사람은 임의의 거짓 증명을 만들 수 있다.
  값들은 generate_parameters() 안에서만 존재하고 반환되지 않는다.
"""

import logging

from sigmabus.field import (
    FR, G1, G2,
    batch_mul, ec_mul, ec_pairing, random_nonzero_scalar,
)
from sigmabus.groth16.qap import instance_map_with_evaluation, synthesize_for_setup
from sigmabus.exceptions import SynthesisError

logger = logging.getLogger(__name__)


class VerifyingKey:
    """Groth16 검증키.

    속성:
        alpha_g1, beta_g2, gamma_g2, delta_g2: 검증 방정식의 고정 점
        gamma_abc_g1: [1, 공개 입력...] 각각에 대응하는 G1 점
    """

    def __init__(self, alpha_g1, beta_g2, gamma_g2, delta_g2, gamma_abc_g1):
        self.alpha_g1 = alpha_g1
        self.beta_g2 = beta_g2
        self.gamma_g2 = gamma_g2
        self.delta_g2 = delta_g2
        self.gamma_abc_g1 = list(gamma_abc_g1)
        self._alpha_g1_beta_g2 = None

    @property
    def num_public_inputs(self):
        return len(self.gamma_abc_g1) - 1

    @property
    def alpha_g1_beta_g2(self):
        """e(α, β). 검증마다 같으므로 한 번만 계산한다."""
        if self._alpha_g1_beta_g2 is None:
            self._alpha_g1_beta_g2 = ec_pairing(self.beta_g2, self.alpha_g1)
        return self._alpha_g1_beta_g2


class ProvingKey:
    """Groth16 증명키."""

    def __init__(self, vk, beta_g1, delta_g1, a_query, b_g1_query, b_g2_query,
                 h_query, l_query):
        self.vk = vk
        self.beta_g1 = beta_g1
        self.delta_g1 = delta_g1
        self.a_query = list(a_query)
        self.b_g1_query = list(b_g1_query)
        self.b_g2_query = list(b_g2_query)
        self.h_query = list(h_query)
        self.l_query = list(l_query)

    @property
    def num_variables(self):
        return len(self.a_query)


def generate_parameters(circuit, rng):
    """회로의 게이트 구조로부터 (ProvingKey, VerifyingKey)를 만든다.

    Args:
        circuit: generate_constraints(cs)를 가진 회로 (값은 무시됨)
        rng: random.Random 호환 객체

    Returns:
        (ProvingKey, VerifyingKey)
    """
    cs = synthesize_for_setup(circuit)
    num_instance = cs.num_instance_variables

    alpha = random_nonzero_scalar(rng)
    beta = random_nonzero_scalar(rng)
    gamma = random_nonzero_scalar(rng)
    delta = random_nonzero_scalar(rng)

    # τ는 도메인 밖에서 샘플링한다 (Z_H(τ) ≠ 0)
    for _ in range(16):
        tau = random_nonzero_scalar(rng)
        a, b, c, zt, domain = instance_map_with_evaluation(cs, tau)
        if zt != FR(0):
            break
    else:
        raise SynthesisError("failed to sample an evaluation point outside the domain")

    logger.debug(
        "groth16 setup: %d constraints, %d instance, %d witness, domain %d",
        cs.num_constraints, num_instance, cs.num_witness_variables, domain.size,
    )

    gamma_inv = FR(1) / gamma
    delta_inv = FR(1) / delta

    gamma_abc = [
        (beta * a[k] + alpha * b[k] + c[k]) * gamma_inv
        for k in range(num_instance)
    ]
    l_values = [
        (beta * a[k] + alpha * b[k] + c[k]) * delta_inv
        for k in range(num_instance, len(a))
    ]

    # h_query: τⁱ · Z_H(τ) / δ, i = 0..n-2
    h_values = []
    factor = zt * delta_inv
    tau_power = FR(1)
    for _ in range(domain.size - 1):
        h_values.append(tau_power * factor)
        tau_power = tau_power * tau

    g1_table_inputs = a + b + gamma_abc + l_values + h_values
    g1_points = batch_mul(G1, g1_table_inputs)
    n_vars = len(a)
    a_query = g1_points[:n_vars]
    b_g1_query = g1_points[n_vars:2 * n_vars]
    offset = 2 * n_vars
    gamma_abc_g1 = g1_points[offset:offset + num_instance]
    offset += num_instance
    l_query = g1_points[offset:offset + len(l_values)]
    offset += len(l_values)
    h_query = g1_points[offset:]

    b_g2_query = batch_mul(G2, b)

    vk = VerifyingKey(
        alpha_g1=ec_mul(G1, alpha),
        beta_g2=ec_mul(G2, beta),
        gamma_g2=ec_mul(G2, gamma),
        delta_g2=ec_mul(G2, delta),
        gamma_abc_g1=gamma_abc_g1,
    )
    pk = ProvingKey(
        vk=vk,
        beta_g1=ec_mul(G1, beta),
        delta_g1=ec_mul(G1, delta),
        a_query=a_query,
        b_g1_query=b_g1_query,
        b_g2_query=b_g2_query,
        h_query=h_query,
        l_query=l_query,
    )
    return pk, vk
