"""
Groth16 증명 생성 (Proving)
============================

  A = α + Σ z_k·A_k(τ) + r·δ                       (G1)
  B = β + Σ z_k·B_k(τ) + s·δ                       (G2, 그리고 C 계산용 G1 사본)
  C = Σ w_k·L_k + Σ h_i·τⁱZ_H(τ)/δ + s·A + r·B₁ - r·s·δ   (G1)

r, s는 증명마다 새로 뽑는 블라인딩 값이다. 같은 회로/값이라도 증명은 매번 다르다.

**인코딩**:
  A(64) ‖ B(128) ‖ C(64) = 256 바이트.
  각 좌표는 32바이트 빅엔디안 아핀 좌표, 항등원은 모두 0.
  G2 좌표는 (x0, x1, y0, y1) 순서 (x = x0 + x1·u).
"""

import logging

from sigmabus.field import (
    FIELD_BYTES, FIELD_MODULUS, Z2,
    ec_add, ec_mul, ec_neg,
    g1_from_affine, g2_from_affine, to_affine,
    is_on_curve_g1, is_on_curve_g2, is_in_subgroup_g2,
    msm, random_scalar, Z1,
)
from sigmabus.groth16.qap import synthesize, witness_map
from sigmabus.exceptions import SynthesisError

logger = logging.getLogger(__name__)

G1_BYTES = 2 * FIELD_BYTES
G2_BYTES = 4 * FIELD_BYTES
PROOF_BYTES = 2 * G1_BYTES + G2_BYTES


# ─────────────────────────────────────────────────────────────────────
# 점 인코딩
# ─────────────────────────────────────────────────────────────────────

def _int_to_bytes(value):
    return int(value).to_bytes(FIELD_BYTES, "big")


def _read_coords(data, count):
    coords = []
    for i in range(count):
        value = int.from_bytes(data[i * FIELD_BYTES:(i + 1) * FIELD_BYTES], "big")
        if value >= FIELD_MODULUS:
            raise ValueError("coordinate is not a canonical base field element")
        coords.append(value)
    return coords


def g1_to_bytes(point):
    affine = to_affine(point)
    if affine is None:
        return bytes(G1_BYTES)
    x, y = affine
    return _int_to_bytes(x) + _int_to_bytes(y)


def g1_from_bytes(data):
    x, y = _read_coords(data, 2)
    if x == 0 and y == 0:
        return Z1
    return g1_from_affine(x, y)


def g2_to_bytes(point):
    affine = to_affine(point)
    if affine is None:
        return bytes(G2_BYTES)
    x, y = affine
    return b"".join(_int_to_bytes(c) for c in (*x.coeffs, *y.coeffs))


def g2_from_bytes(data):
    x0, x1, y0, y1 = _read_coords(data, 4)
    if not (x0 or x1 or y0 or y1):
        return Z2
    return g2_from_affine((x0, x1), (y0, y1))


# ─────────────────────────────────────────────────────────────────────
# 증명
# ─────────────────────────────────────────────────────────────────────

class Proof:
    """Groth16 증명 (A ∈ G1, B ∈ G2, C ∈ G1)."""

    def __init__(self, a, b, c):
        self.a = a
        self.b = b
        self.c = c

    def to_bytes(self):
        return g1_to_bytes(self.a) + g2_to_bytes(self.b) + g1_to_bytes(self.c)

    @classmethod
    def from_bytes(cls, data):
        """256바이트 인코딩을 파싱한다.

        길이와 좌표 범위만 확인한다. 곡선/부분군 검사는 verify가 한다.

        Raises:
            ValueError: 길이가 다르거나 좌표가 기저 필드 밖일 때
        """
        data = bytes(data)
        if len(data) != PROOF_BYTES:
            raise ValueError(f"groth16 proof must be {PROOF_BYTES} bytes, got {len(data)}")
        a = g1_from_bytes(data[:G1_BYTES])
        b = g2_from_bytes(data[G1_BYTES:G1_BYTES + G2_BYTES])
        c = g1_from_bytes(data[G1_BYTES + G2_BYTES:])
        return cls(a, b, c)

    def is_well_formed(self):
        """세 점이 모두 곡선 위에 있고 B가 위수 r 부분군에 속하는지."""
        return (
            is_on_curve_g1(self.a)
            and is_on_curve_g1(self.c)
            and is_on_curve_g2(self.b)
            and is_in_subgroup_g2(self.b)
        )

    def __eq__(self, other):
        if not isinstance(other, Proof):
            return NotImplemented
        return self.to_bytes() == other.to_bytes()

    def __hash__(self):
        return hash(self.to_bytes())

    def __repr__(self):
        return f"Proof({self.to_bytes().hex()[:16]}...)"


def create_proof(pk, circuit, rng):
    """회로 인스턴스에 대한 Groth16 증명을 만든다.

    Args:
        pk: ProvingKey
        circuit: 값이 채워진 회로
        rng: 블라인딩 값 r, s를 뽑을 random.Random 호환 객체

    Raises:
        SynthesisError: 제약이 만족되지 않거나 회로 모양이 키와 다를 때
    """
    cs = synthesize(circuit)
    unsatisfied = cs.which_is_unsatisfied()
    if unsatisfied is not None:
        index, label = unsatisfied
        raise SynthesisError(f"constraint {index} ({label}) is not satisfied")

    num_variables = cs.num_instance_variables + cs.num_witness_variables
    if (num_variables != pk.num_variables
            or cs.num_witness_variables != len(pk.l_query)
            or cs.num_instance_variables != len(pk.vk.gamma_abc_g1)):
        raise SynthesisError("circuit shape does not match the proving key")

    h = witness_map(cs)
    if len(h) - 1 > len(pk.h_query):
        raise SynthesisError("circuit shape does not match the proving key")
    logger.debug("groth16 prove: %d variables, %d h coefficients", num_variables, len(h))

    r = random_scalar(rng)
    s = random_scalar(rng)
    z = cs.full_assignment()
    witness = z[cs.num_instance_variables:]
    vk = pk.vk

    g_a = ec_add(vk.alpha_g1, msm(pk.a_query, z))
    g_a = ec_add(g_a, ec_mul(pk.delta_g1, r))

    g_b2 = ec_add(vk.beta_g2, msm(pk.b_g2_query, z, zero=Z2))
    g_b2 = ec_add(g_b2, ec_mul(vk.delta_g2, s))

    g_b1 = ec_add(pk.beta_g1, msm(pk.b_g1_query, z))
    g_b1 = ec_add(g_b1, ec_mul(pk.delta_g1, s))

    g_c = ec_add(msm(pk.l_query, witness), msm(pk.h_query, h[:len(pk.h_query)]))
    g_c = ec_add(g_c, ec_mul(g_a, s))
    g_c = ec_add(g_c, ec_mul(g_b1, r))
    g_c = ec_add(g_c, ec_neg(ec_mul(pk.delta_g1, r * s)))

    return Proof(g_a, g_b2, g_c)
