"""
Tests for the Poseidon Fiat-Shamir transcript.

Covers:
- Determinism for identical call sequences
- Order sensitivity and omission sensitivity
- Challenge re-absorption
- Point encoding (generator, identity, stability)
- PoseidonTranscriptVar produces the same challenge in-circuit
"""

import pytest

from sigmabus.field import FR, G1, Z1, CURVE_ORDER, FIELD_MODULUS, ec_add, ec_mul, ec_neg, to_affine
from sigmabus.r1cs import ConstraintSystem, FpVar
from sigmabus.transcript import PoseidonTranscript, PoseidonTranscriptVar, prepare_point


CM = FR(1234)
R_POINT = ec_mul(G1, 42)
R_H = FR(5678)


def run_sequence(config, steps):
    t = PoseidonTranscript(config)
    for kind, value in steps:
        if kind == "scalar":
            t.absorb(value)
        else:
            t.absorb_point(value)
    return t.get_challenge()


SIGMABUS_ORDER = [("scalar", CM), ("point", R_POINT), ("scalar", R_H)]


class TestDeterminism:
    """같은 설정 + 같은 호출 순서 → 같은 챌린지."""

    def test_same_sequence_same_challenge(self, poseidon_config):
        c1 = run_sequence(poseidon_config, SIGMABUS_ORDER)
        c2 = run_sequence(poseidon_config, SIGMABUS_ORDER)
        assert c1 == c2

    def test_challenge_is_field_element(self, poseidon_config):
        c = run_sequence(poseidon_config, SIGMABUS_ORDER)
        assert isinstance(c, FR)
        assert 0 <= int(c) < CURVE_ORDER

    def test_reordered_sequence(self, poseidon_config):
        reordered = [SIGMABUS_ORDER[1], SIGMABUS_ORDER[0], SIGMABUS_ORDER[2]]
        assert run_sequence(poseidon_config, reordered) != run_sequence(poseidon_config, SIGMABUS_ORDER)

    def test_swapped_scalars(self, poseidon_config):
        swapped = [("scalar", R_H), ("point", R_POINT), ("scalar", CM)]
        assert run_sequence(poseidon_config, swapped) != run_sequence(poseidon_config, SIGMABUS_ORDER)

    def test_omitted_step(self, poseidon_config):
        assert run_sequence(poseidon_config, SIGMABUS_ORDER[:2]) != run_sequence(poseidon_config, SIGMABUS_ORDER)

    def test_different_point(self, poseidon_config):
        other = [SIGMABUS_ORDER[0], ("point", ec_mul(G1, 43)), SIGMABUS_ORDER[2]]
        assert run_sequence(poseidon_config, other) != run_sequence(poseidon_config, SIGMABUS_ORDER)


class TestChallenge:
    """get_challenge는 c를 다시 흡수한다."""

    def test_consecutive_challenges_differ(self, poseidon_config):
        t = PoseidonTranscript(poseidon_config)
        t.absorb(CM)
        c1 = t.get_challenge()
        c2 = t.get_challenge()
        assert c1 != c2

    def test_reabsorption_matches_manual_sponge(self, poseidon_config):
        """get_challenge == squeeze then absorb(c)."""
        t1 = PoseidonTranscript(poseidon_config)
        t1.absorb(CM)
        c = t1.get_challenge()

        t2 = PoseidonTranscript(poseidon_config)
        t2.absorb(CM)
        squeezed = t2.sponge.squeeze_field_elements(1)[0]
        t2.sponge.absorb(squeezed)

        assert c == squeezed
        assert t1.sponge.state == t2.sponge.state

    def test_absorb_point_equals_two_scalars(self, poseidon_config):
        t1 = PoseidonTranscript(poseidon_config)
        t1.absorb_point(R_POINT)
        t2 = PoseidonTranscript(poseidon_config)
        for coord in prepare_point(R_POINT):
            t2.absorb(coord)
        assert t1.get_challenge() == t2.get_challenge()


class TestPointEncoding:
    """prepare_point: 아핀 좌표 → 스칼라 필드 [x', y']."""

    def test_generator(self):
        """G1 = (1, 2) is already below the scalar modulus."""
        assert prepare_point(G1) == [FR(1), FR(2)]

    def test_identity_encodes_as_zeros(self):
        assert prepare_point(Z1) == [FR(0), FR(0)]

    def test_reduction_modulo_scalar_field(self):
        point = ec_mul(G1, 987654321)
        x, y = to_affine(point)
        assert prepare_point(point) == [FR(int(x) % CURVE_ORDER), FR(int(y) % CURVE_ORDER)]
        assert FIELD_MODULUS > CURVE_ORDER

    def test_projective_representation_does_not_matter(self):
        """2·G computed two ways encodes identically."""
        doubled = ec_mul(G1, 2)
        added = ec_add(G1, G1)
        assert prepare_point(doubled) == prepare_point(added)

    def test_negation_changes_y_only(self):
        p = prepare_point(R_POINT)
        n = prepare_point(ec_neg(R_POINT))
        assert p[0] == n[0]
        assert p[1] != n[1]


class TestTranscriptVar:
    """회로 안의 트랜스크립트가 네이티브와 같은 챌린지를 낸다."""

    def test_in_circuit_challenge_matches(self, poseidon_config):
        native = run_sequence(poseidon_config, SIGMABUS_ORDER)

        cs = ConstraintSystem()
        t = PoseidonTranscriptVar(poseidon_config)
        t.absorb(FpVar.new_witness(cs, CM))
        t.absorb_point_witness(cs, R_POINT)
        t.absorb(FpVar.new_witness(cs, R_H))
        c_var = t.get_challenge()

        assert c_var.value() == native
        assert cs.is_satisfied()

    def test_in_circuit_point_coordinates(self, poseidon_config):
        cs = ConstraintSystem()
        t = PoseidonTranscriptVar(poseidon_config)
        x_var, y_var = t.absorb_point_witness(cs, R_POINT)
        assert [x_var.value(), y_var.value()] == prepare_point(R_POINT)

    def test_in_circuit_challenge_enforced(self, poseidon_config):
        """Binding the in-circuit challenge to a wrong public value is unsatisfiable."""
        native = run_sequence(poseidon_config, SIGMABUS_ORDER)

        cs = ConstraintSystem()
        t = PoseidonTranscriptVar(poseidon_config)
        t.absorb(FpVar.new_witness(cs, CM))
        t.absorb_point_witness(cs, R_POINT)
        t.absorb(FpVar.new_witness(cs, R_H))
        c_var = t.get_challenge()
        c_var.enforce_equal(FpVar.new_input(cs, native + FR(1)))
        assert not cs.is_satisfied()

    @pytest.mark.parametrize("scalar", [0, 1, 2 ** 200])
    def test_scalar_only_sequences(self, poseidon_config, scalar):
        t = PoseidonTranscript(poseidon_config)
        t.absorb(FR(scalar))
        native = t.get_challenge()

        cs = ConstraintSystem()
        tv = PoseidonTranscriptVar(poseidon_config)
        tv.absorb(FpVar.new_witness(cs, FR(scalar)))
        assert tv.get_challenge().value() == native
