import sys
import os
import random

import pytest

# 프로젝트 루트를 sys.path에 추가
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from sigmabus.field import FR, G1, ec_mul
from sigmabus.poseidon import poseidon_test_config
from sigmabus.protocol import setup, prove


# ── 테스트 상수 ──
SETUP_SEED = 20231406
PROVE_SEED = 7
SECRET_X = 7


@pytest.fixture(scope="session")
def poseidon_config():
    """8 full / 31 partial rounds, alpha 5, rate 2."""
    return poseidon_test_config()


@pytest.fixture(scope="session")
def params(poseidon_config):
    """GenZK 회로의 Groth16 키 (세션 전체에서 한 번만 생성)."""
    return setup(random.Random(SETUP_SEED), poseidon_config)


@pytest.fixture(scope="session")
def statement():
    """(x, X = x·G) for x = 7."""
    x = FR(SECRET_X)
    return x, ec_mul(G1, x)


@pytest.fixture(scope="session")
def honest_proof(params, statement):
    """x = 7 에 대한 정직한 Sigmabus 증명."""
    x, _ = statement
    return prove(random.Random(PROVE_SEED), params, None, x)
