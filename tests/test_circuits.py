"""
Tests for GenZKCircuit: satisfiability, public input layout, setup-mode shape.
"""

import pytest

from sigmabus.circuits import GenZKCircuit
from sigmabus.field import FR
from sigmabus.poseidon import crh_evaluate
from sigmabus.r1cs import ConstraintSystem, FpVar, SETUP


def honest_values(config, x=FR(7), r=FR(11), o_h=FR(13), c=FR(17)):
    return dict(
        cm=crh_evaluate(config, [x]),
        s=r + c * x,
        r_h=crh_evaluate(config, [r, o_h]),
        c=c,
        x=x, r=r, o_h=o_h,
    )


def synthesize(config, **values):
    cs = ConstraintSystem()
    GenZKCircuit(config, **values).generate_constraints(cs)
    return cs


class TestGenZKSatisfiability:
    """세 등식이 모두 성립할 때만 만족된다."""

    def test_honest_assignment(self, poseidon_config):
        cs = synthesize(poseidon_config, **honest_values(poseidon_config))
        assert cs.is_satisfied()

    @pytest.mark.parametrize("field", ["cm", "s", "r_h", "c", "x", "r", "o_h"])
    def test_any_wrong_value(self, poseidon_config, field):
        values = honest_values(poseidon_config)
        values[field] = values[field] + FR(1)
        cs = synthesize(poseidon_config, **values)
        assert not cs.is_satisfied()

    def test_zero_secret(self, poseidon_config):
        cs = synthesize(poseidon_config, **honest_values(poseidon_config, x=FR(0)))
        assert cs.is_satisfied()

    def test_check_is_reusable(self, poseidon_config):
        """GenZKCircuit.check can be applied to variables allocated by another circuit."""
        v = honest_values(poseidon_config)
        cs = ConstraintSystem()
        inputs = [FpVar.new_witness(cs, v[k]) for k in ("cm", "s", "r_h", "c", "x", "r", "o_h")]
        GenZKCircuit.check(poseidon_config, *inputs)
        assert cs.num_instance_variables == 1
        assert cs.is_satisfied()


class TestGenZKLayout:
    """공개 입력 배치와 회로 모양."""

    def test_public_inputs_order(self, poseidon_config):
        values = honest_values(poseidon_config)
        cs = synthesize(poseidon_config, **values)
        expected = [values["cm"], values["s"], values["r_h"], values["c"]]
        assert cs.public_inputs() == expected
        assert GenZKCircuit(poseidon_config, **values).public_inputs() == expected

    def test_instance_and_witness_counts(self, poseidon_config):
        cs = synthesize(poseidon_config, **honest_values(poseidon_config))
        assert cs.num_instance_variables == 5  # ONE + cm, s, r_h, c
        assert cs.num_witness_variables >= 3

    def test_blank_circuit_has_same_shape(self, poseidon_config):
        honest = synthesize(poseidon_config, **honest_values(poseidon_config))
        setup_cs = ConstraintSystem(mode=SETUP)
        GenZKCircuit.blank(poseidon_config).generate_constraints(setup_cs)
        assert setup_cs.num_constraints == honest.num_constraints
        assert setup_cs.num_instance_variables == honest.num_instance_variables
        assert setup_cs.num_witness_variables == honest.num_witness_variables
        assert setup_cs.to_matrices() == honest.to_matrices()

    def test_blank_circuit_values(self, poseidon_config):
        blank = GenZKCircuit.blank(poseidon_config)
        assert blank.public_inputs() == [FR(0)] * 4
        assert (blank.x, blank.r, blank.o_h) == (FR(0), FR(0), FR(0))
