"""
Sigmabus
========

Sigma 프로토콜 + Groth16 + Poseidon Fiat-Shamir 로 X = x·G 를 증명한다.

    >>> from sigmabus import setup, prove, verify, poseidon_test_config
"""

from sigmabus.exceptions import (
    SigmabusError,
    VerificationError,
    SigmaFail,
    GenZKFail,
    BackendError,
    SynthesisError,
    MalformedVerifyingKey,
)
from sigmabus.poseidon import PoseidonConfig, poseidon_test_config
from sigmabus.transcript import PoseidonTranscript, PoseidonTranscriptVar, prepare_point
from sigmabus.circuits import GenZKCircuit
from sigmabus.groth16 import Groth16
from sigmabus.protocol import Params, SigmaProof, Proof, setup, prove, verify

__all__ = [
    "SigmabusError",
    "VerificationError",
    "SigmaFail",
    "GenZKFail",
    "BackendError",
    "SynthesisError",
    "MalformedVerifyingKey",
    "PoseidonConfig",
    "poseidon_test_config",
    "PoseidonTranscript",
    "PoseidonTranscriptVar",
    "prepare_point",
    "GenZKCircuit",
    "Groth16",
    "Params",
    "SigmaProof",
    "Proof",
    "setup",
    "prove",
    "verify",
]
