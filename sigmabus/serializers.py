"""
Sigmabus 데이터 직렬화/역직렬화 헬퍼
====================================

TinyDB와 JSON 응답에 담을 수 있는 형태로 Sigmabus 객체를 변환한다.
FR, G1, G2, PoseidonConfig, ProvingKey, VerifyingKey, Sigmabus Proof 등.

점은 아핀 좌표의 10진수 문자열로 저장하고, 항등원은 None으로 저장한다.
Groth16 증명은 256바이트 인코딩의 hex 문자열이다.
"""

from sigmabus.field import (
    FR, Z1, Z2,
    g1_from_affine, g2_from_affine, to_affine,
)
from sigmabus.groth16 import Proof as Groth16Proof, ProvingKey, VerifyingKey
from sigmabus.poseidon.config import PoseidonConfig
from sigmabus.protocol import Proof, SigmaProof


# ─── FR ───

def serialize_fr(val):
    """FR → str(int)"""
    return str(int(val))


def deserialize_fr(s):
    """str(int) → FR"""
    return FR(int(s))


# ─── G1 point ───

def serialize_g1(point):
    """G1 point → [str, str] or None"""
    affine = to_affine(point)
    if affine is None:
        return None
    return [str(int(affine[0])), str(int(affine[1]))]


def deserialize_g1(data):
    """[str, str] or None → G1 point"""
    if data is None:
        return Z1
    return g1_from_affine(int(data[0]), int(data[1]))


def serialize_g1_list(points):
    return [serialize_g1(p) for p in points]


def deserialize_g1_list(data):
    return [deserialize_g1(p) for p in data]


# ─── G2 point ───

def serialize_g2(point):
    """G2 point → [[str,str],[str,str]] or None"""
    affine = to_affine(point)
    if affine is None:
        return None
    x, y = affine
    return [
        [str(int(x.coeffs[0])), str(int(x.coeffs[1]))],
        [str(int(y.coeffs[0])), str(int(y.coeffs[1]))],
    ]


def deserialize_g2(data):
    """[[str,str],[str,str]] or None → G2 point"""
    if data is None:
        return Z2
    return g2_from_affine(
        (int(data[0][0]), int(data[0][1])),
        (int(data[1][0]), int(data[1][1])),
    )


# ─── PoseidonConfig ───

def serialize_poseidon_config(config):
    return {
        "full_rounds": config.full_rounds,
        "partial_rounds": config.partial_rounds,
        "alpha": config.alpha,
        "rate": config.rate,
        "capacity": config.capacity,
        "mds": [[str(v) for v in row] for row in config.mds],
        "ark": [[str(v) for v in row] for row in config.ark],
    }


def deserialize_poseidon_config(data):
    return PoseidonConfig(
        full_rounds=data["full_rounds"],
        partial_rounds=data["partial_rounds"],
        alpha=data["alpha"],
        mds=[[int(v) for v in row] for row in data["mds"]],
        ark=[[int(v) for v in row] for row in data["ark"]],
        rate=data["rate"],
        capacity=data["capacity"],
    )


# ─── Groth16 keys ───

def serialize_verifying_key(vk):
    """VerifyingKey → dict"""
    return {
        "alpha_g1": serialize_g1(vk.alpha_g1),
        "beta_g2": serialize_g2(vk.beta_g2),
        "gamma_g2": serialize_g2(vk.gamma_g2),
        "delta_g2": serialize_g2(vk.delta_g2),
        "gamma_abc_g1": serialize_g1_list(vk.gamma_abc_g1),
    }


def deserialize_verifying_key(data):
    """dict → VerifyingKey"""
    return VerifyingKey(
        alpha_g1=deserialize_g1(data["alpha_g1"]),
        beta_g2=deserialize_g2(data["beta_g2"]),
        gamma_g2=deserialize_g2(data["gamma_g2"]),
        delta_g2=deserialize_g2(data["delta_g2"]),
        gamma_abc_g1=deserialize_g1_list(data["gamma_abc_g1"]),
    )


def serialize_proving_key(pk):
    """ProvingKey → dict (검증키 포함)"""
    return {
        "vk": serialize_verifying_key(pk.vk),
        "beta_g1": serialize_g1(pk.beta_g1),
        "delta_g1": serialize_g1(pk.delta_g1),
        "a_query": serialize_g1_list(pk.a_query),
        "b_g1_query": serialize_g1_list(pk.b_g1_query),
        "b_g2_query": [serialize_g2(p) for p in pk.b_g2_query],
        "h_query": serialize_g1_list(pk.h_query),
        "l_query": serialize_g1_list(pk.l_query),
    }


def deserialize_proving_key(data):
    """dict → ProvingKey"""
    return ProvingKey(
        vk=deserialize_verifying_key(data["vk"]),
        beta_g1=deserialize_g1(data["beta_g1"]),
        delta_g1=deserialize_g1(data["delta_g1"]),
        a_query=deserialize_g1_list(data["a_query"]),
        b_g1_query=deserialize_g1_list(data["b_g1_query"]),
        b_g2_query=[deserialize_g2(p) for p in data["b_g2_query"]],
        h_query=deserialize_g1_list(data["h_query"]),
        l_query=deserialize_g1_list(data["l_query"]),
    )


# ─── Sigmabus Proof ───

def serialize_proof(proof):
    """Sigmabus Proof → dict"""
    return {
        "cm": serialize_fr(proof.cm),
        "sigma_proof": {
            "s": serialize_fr(proof.sigma_proof.s),
            "R": serialize_g1(proof.sigma_proof.R),
            "r_h": serialize_fr(proof.sigma_proof.r_h),
        },
        "zk_proof": proof.zk_proof.to_bytes().hex(),
    }


def deserialize_proof(data):
    """dict → Sigmabus Proof

    Raises:
        KeyError, TypeError, ValueError: 형식이 잘못되었을 때
    """
    sigma = data["sigma_proof"]
    return Proof(
        cm=deserialize_fr(data["cm"]),
        sigma_proof=SigmaProof(
            s=deserialize_fr(sigma["s"]),
            R=deserialize_g1(sigma["R"]),
            r_h=deserialize_fr(sigma["r_h"]),
        ),
        zk_proof=Groth16Proof.from_bytes(bytes.fromhex(data["zk_proof"])),
    )
