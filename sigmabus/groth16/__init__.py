"""
Groth16 SNARK (BN254)
=====================

Sigmabus가 GenZK 관계를 증명할 때 사용하는 백엔드.

    >>> pk, vk = Groth16.circuit_specific_setup(circuit, rng)
    >>> proof = Groth16.prove(pk, circuit, rng)
    >>> Groth16.verify(vk, circuit.public_inputs(), proof)   # True
"""

from sigmabus.groth16.setup import ProvingKey, VerifyingKey, generate_parameters
from sigmabus.groth16.proving import Proof, create_proof, PROOF_BYTES
from sigmabus.groth16.verifying import prepare_inputs, verify_proof


class Groth16:
    """회로별 신뢰 설정을 쓰는 SNARK 백엔드의 인터페이스."""

    Proof = Proof

    @staticmethod
    def circuit_specific_setup(circuit, rng):
        return generate_parameters(circuit, rng)

    @staticmethod
    def prove(pk, circuit, rng):
        return create_proof(pk, circuit, rng)

    @staticmethod
    def verify(vk, public_inputs, proof):
        return verify_proof(vk, public_inputs, proof)


__all__ = [
    "Groth16",
    "ProvingKey",
    "VerifyingKey",
    "Proof",
    "PROOF_BYTES",
    "generate_parameters",
    "create_proof",
    "prepare_inputs",
    "verify_proof",
]
