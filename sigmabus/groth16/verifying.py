"""
Groth16 검증 (Verifying)
=========================

  e(A, B) == e(α, β) · e(Σ x_i·γ_abc_i, γ) · e(C, δ)

x_0 = 1 이고 x_1.. 은 공개 입력이다. e(α, β)는 검증키에 캐시된다.
"""

import logging

from sigmabus.field import ec_add, ec_pairing, msm
from sigmabus.exceptions import MalformedVerifyingKey

logger = logging.getLogger(__name__)


def prepare_inputs(vk, public_inputs):
    """Σ x_i·γ_abc_i (x_0 = 1)."""
    if len(public_inputs) != vk.num_public_inputs:
        raise MalformedVerifyingKey(
            f"expected {vk.num_public_inputs} public inputs, got {len(public_inputs)}"
        )
    return ec_add(vk.gamma_abc_g1[0], msm(vk.gamma_abc_g1[1:], public_inputs))


def verify_proof(vk, public_inputs, proof):
    """증명이 공개 입력에 대해 유효하면 True.

    곡선 밖의 점이나 부분군 밖의 B를 담은 증명은 페어링 없이 False.

    Raises:
        MalformedVerifyingKey: 공개 입력 개수가 키와 다를 때
    """
    acc = prepare_inputs(vk, public_inputs)
    if not proof.is_well_formed():
        logger.debug("groth16 verify: proof points are not in the expected groups")
        return False

    lhs = ec_pairing(proof.b, proof.a)
    rhs = vk.alpha_g1_beta_g2
    rhs = rhs * ec_pairing(vk.gamma_g2, acc)
    rhs = rhs * ec_pairing(vk.delta_g2, proof.c)
    return lhs == rhs
