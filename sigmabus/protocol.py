"""
Sigmabus 프로토콜: Setup / Prove / Verify
==========================================

X = x·G 를 만족하는 비밀 x를 안다는 것을 영지식으로 증명한다.

**구성**:
  Sigma 프로토콜 (Schnorr)  +  Groth16 (GenZK 관계)  +  Poseidon Fiat-Shamir

  Sigma 프로토콜만으로는 Verifier가 s·G == R + c·X 하나만 확인한다.
  Sigmabus는 Prover가 s를 만들 때 쓴 중간값들이 정직하게 계산되었음을
  (cm = H(x), r_h = H(r, o_h), s = r + c·x) SNARK로 함께 증명한다.

**Prove 순서**:
  1. cm = CRH(x)              → transcript.absorb(cm)
  2. r, o_h ← rng
  3. R = r·G,  r_h = CRH(r, o_h)
  4. transcript.absorb_point(R),  transcript.absorb(r_h)
  5. c = transcript.get_challenge()
  6. s = r + c·x
  7. zk_proof = SNARK.prove(pk, GenZKCircuit(cm, s, r_h, c; x, r, o_h))

**Verify 순서**:
  1. lhs = s·G
  2. 증명의 공개 필드로 트랜스크립트를 재생하여 c를 다시 계산
  3. rhs = R + c·X,  lhs ≠ rhs 이면 SigmaFail
  4. SNARK.verify(vk, [cm, s, r_h, c], zk_proof) 가 거짓이면 GenZKFail

트랜스크립트는 세션마다 새로 만든다. None을 넘기면 내부에서 만든다.

사용 예시:
    >>> params = setup(rng, poseidon_test_config())
    >>> proof = prove(rng, params, None, FR(7))
    >>> verify(params, None, proof, ec_mul(G1, 7))   # 예외가 없으면 유효
"""

import logging
from dataclasses import dataclass
from typing import Any

from sigmabus.circuits import GenZKCircuit
from sigmabus.exceptions import GenZKFail, SigmaFail
from sigmabus.field import (
    FR, G1,
    ec_add, ec_eq, ec_mul, is_on_curve_g1, random_scalar,
)
from sigmabus.groth16 import Groth16
from sigmabus.poseidon.config import PoseidonConfig
from sigmabus.poseidon.sponge import crh_evaluate
from sigmabus.transcript import PoseidonTranscript

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Params:
    """Setup 결과. 여러 번의 Prove/Verify에서 읽기 전용으로 공유된다."""

    poseidon_config: PoseidonConfig
    proving_key: Any
    verifying_key: Any
    snark: Any = Groth16


@dataclass(frozen=True)
class SigmaProof:
    """Sigma 프로토콜 부분: 응답 s, 커밋먼트 R, 해시 커밋먼트 r_h."""

    s: FR
    R: Any
    r_h: FR


@dataclass(frozen=True)
class Proof:
    """Sigmabus 증명."""

    cm: FR
    sigma_proof: SigmaProof
    zk_proof: Any


def setup(rng, poseidon_config, snark=Groth16):
    """GenZK 회로에 대한 증명키/검증키를 생성한다.

    Args:
        rng: random.Random 호환 객체
        poseidon_config: CRH와 트랜스크립트가 공유하는 PoseidonConfig
        snark: circuit_specific_setup / prove / verify를 가진 백엔드

    Returns:
        Params
    """
    circuit = GenZKCircuit.blank(poseidon_config)
    proving_key, verifying_key = snark.circuit_specific_setup(circuit, rng)
    logger.info("sigmabus setup complete")
    return Params(
        poseidon_config=poseidon_config,
        proving_key=proving_key,
        verifying_key=verifying_key,
        snark=snark,
    )


def _new_transcript(params, transcript):
    if transcript is None:
        return PoseidonTranscript(params.poseidon_config)
    return transcript


def prove(rng, params, transcript, x):
    """X = x·G 에 대한 Sigmabus 증명을 만든다.

    Args:
        rng: r, o_h와 SNARK 블라인딩에 쓰는 random.Random 호환 객체
        params: setup()의 결과
        transcript: 이 증명 전용 PoseidonTranscript (None이면 새로 만든다)
        x: 비밀 스칼라 (FR 또는 정수)

    Returns:
        Proof

    Raises:
        BackendError: SNARK 백엔드 결함
    """
    transcript = _new_transcript(params, transcript)
    x = FR(int(x))

    cm = crh_evaluate(params.poseidon_config, [x])
    transcript.absorb(cm)

    r = random_scalar(rng)
    o_h = random_scalar(rng)

    R = ec_mul(G1, r)
    r_h = crh_evaluate(params.poseidon_config, [r, o_h])

    transcript.absorb_point(R)
    transcript.absorb(r_h)

    c = transcript.get_challenge()

    s = r + c * x

    circuit = GenZKCircuit(
        params.poseidon_config,
        cm=cm, s=s, r_h=r_h, c=c,
        x=x, r=r, o_h=o_h,
    )
    zk_proof = params.snark.prove(params.proving_key, circuit, rng)
    logger.debug("sigmabus proof generated")

    return Proof(cm=cm, sigma_proof=SigmaProof(s=s, R=R, r_h=r_h), zk_proof=zk_proof)


def verify(params, transcript, proof, X):
    """Sigmabus 증명을 검증한다. 유효하면 None을 반환한다.

    Args:
        params: setup()의 결과
        transcript: 이 검증 전용 PoseidonTranscript (None이면 새로 만든다)
        proof: prove()가 만든 Proof
        X: 공개 G1 점

    Raises:
        SigmaFail: s·G ≠ R + c·X
        GenZKFail: SNARK가 [cm, s, r_h, c]에 대한 증명을 거부
    """
    transcript = _new_transcript(params, transcript)
    sigma_proof = proof.sigma_proof

    if not (is_on_curve_g1(sigma_proof.R) and is_on_curve_g1(X)):
        logger.info("sigmabus verify: SigmaFail (point not on curve)")
        raise SigmaFail()

    lhs = ec_mul(G1, sigma_proof.s)

    transcript.absorb(proof.cm)
    transcript.absorb_point(sigma_proof.R)
    transcript.absorb(sigma_proof.r_h)
    c = transcript.get_challenge()

    rhs = ec_add(sigma_proof.R, ec_mul(X, c))

    if not ec_eq(lhs, rhs):
        logger.info("sigmabus verify: SigmaFail")
        raise SigmaFail()

    public_inputs = [proof.cm, sigma_proof.s, sigma_proof.r_h, c]
    if not params.snark.verify(params.verifying_key, public_inputs, proof.zk_proof):
        logger.info("sigmabus verify: GenZKFail")
        raise GenZKFail()

    logger.debug("sigmabus verify: proof accepted")
