import random

import pytest

from sigmabus.field import FR
from sigmabus.groth16 import Groth16

from cubic import CubicCircuit, CUBIC_X, CUBIC_OUT

SETUP_SEED = 1357
PROVER_SEED = 4106


@pytest.fixture(scope="session")
def cubic_keys():
    """(ProvingKey, VerifyingKey) for the cubic circuit."""
    blank = CubicCircuit(FR(0), FR(0))
    return Groth16.circuit_specific_setup(blank, random.Random(SETUP_SEED))


@pytest.fixture(scope="session")
def cubic_proof(cubic_keys):
    pk, _ = cubic_keys
    circuit = CubicCircuit(FR(CUBIC_X), FR(CUBIC_OUT))
    return Groth16.prove(pk, circuit, random.Random(PROVER_SEED))
