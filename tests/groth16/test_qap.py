"""
Tests for the evaluation domain, FFT helpers and the R1CS → QAP maps.
"""

import random

import pytest

from sigmabus.exceptions import SynthesisError
from sigmabus.field import FR, CURVE_ORDER, get_root_of_unity, get_roots_of_unity
from sigmabus.groth16.qap import (
    domain_for,
    instance_map_with_evaluation,
    synthesize,
    synthesize_for_setup,
    witness_map,
)
from sigmabus.polynomial import EvaluationDomain, fft, ifft, next_power_of_2

from cubic import CubicCircuit, SquareCircuit


def eval_poly(coeffs, x):
    result = FR(0)
    for c in reversed(coeffs):
        result = result * x + c
    return result


class TestRootsOfUnity:
    """단위근과 도메인."""

    @pytest.mark.parametrize("n", [1, 2, 8, 512])
    def test_root_order(self, n):
        omega = get_root_of_unity(n)
        assert omega ** n == FR(1)
        if n > 1:
            assert omega ** (n // 2) != FR(1)

    @pytest.mark.parametrize("n", [0, 3, 12, 2 ** 29])
    def test_invalid_sizes(self, n):
        with pytest.raises(ValueError):
            get_root_of_unity(n)

    def test_roots_are_distinct(self):
        roots = get_roots_of_unity(8)
        assert len(set(int(r) for r in roots)) == 8

    @pytest.mark.parametrize("n, expected", [(0, 1), (1, 1), (5, 8), (8, 8), (333, 512)])
    def test_next_power_of_2(self, n, expected):
        assert next_power_of_2(n) == expected


class TestFFT:
    """FFT / IFFT / 코셋 FFT."""

    def test_fft_matches_evaluation(self):
        coeffs = [FR(v) for v in (3, 1, 4, 1, 5, 9, 2, 6)]
        omega = get_root_of_unity(8)
        evals = fft(coeffs, omega)
        for i, root in enumerate(get_roots_of_unity(8)):
            assert evals[i] == eval_poly(coeffs, root)

    def test_ifft_inverts_fft(self):
        coeffs = [FR(v) for v in (7, 0, 0, 11)]
        omega = get_root_of_unity(4)
        assert ifft(fft(coeffs, omega), omega) == coeffs

    def test_domain_pads_input(self):
        domain = EvaluationDomain(5)
        assert domain.size == 8
        assert domain.ifft(domain.fft([FR(1), FR(2)])) == [FR(1), FR(2)] + [FR(0)] * 6

    def test_domain_rejects_long_input(self):
        with pytest.raises(ValueError):
            EvaluationDomain(4).fft([FR(1)] * 5)

    def test_coset_fft_evaluates_on_coset(self):
        domain = EvaluationDomain(4)
        coeffs = [FR(2), FR(0), FR(5)]
        evals = domain.coset_fft(coeffs)
        for i, root in enumerate(get_roots_of_unity(4)):
            assert evals[i] == eval_poly(coeffs, domain.coset_shift * root)

    def test_coset_round_trip(self):
        domain = EvaluationDomain(8)
        coeffs = [FR(i * i + 1) for i in range(8)]
        assert domain.coset_ifft(domain.coset_fft(coeffs)) == coeffs


class TestLagrange:
    """Lagrange 기저와 소거 다항식."""

    def test_vanishing_zero_on_domain(self):
        domain = EvaluationDomain(8)
        for root in get_roots_of_unity(8):
            assert domain.evaluate_vanishing_polynomial(root) == FR(0)

    def test_lagrange_sums_to_one(self):
        domain = EvaluationDomain(8)
        tau = FR(123456789)
        assert sum(domain.evaluate_all_lagrange_coefficients(tau), FR(0)) == FR(1)

    def test_lagrange_interpolates(self):
        """Σ p(ωⁱ)·L_i(τ) == p(τ) for deg p < n."""
        domain = EvaluationDomain(8)
        coeffs = [FR(v) for v in (1, 2, 3, 4, 5)]
        evals = domain.fft(coeffs)
        tau = FR(98765)
        lagrange = domain.evaluate_all_lagrange_coefficients(tau)
        total = sum((e * l for e, l in zip(evals, lagrange)), FR(0))
        assert total == eval_poly(coeffs, tau)

    def test_lagrange_on_domain_point(self):
        domain = EvaluationDomain(4)
        roots = get_roots_of_unity(4)
        assert domain.evaluate_all_lagrange_coefficients(roots[2]) == [FR(0), FR(0), FR(1), FR(0)]


class TestQAP:
    """R1CS → QAP 변환."""

    def test_domain_size_includes_input_constraints(self):
        cs = synthesize(CubicCircuit(FR(3), FR(35)))
        assert cs.num_constraints == 3
        assert domain_for(cs).size == 8

    def test_setup_synthesis_has_no_assignment(self):
        cs = synthesize_for_setup(CubicCircuit(FR(0), FR(0)))
        with pytest.raises(SynthesisError):
            cs.full_assignment()

    @pytest.mark.parametrize("circuit", [
        CubicCircuit(FR(3), FR(35)),
        SquareCircuit(FR(CURVE_ORDER - 5), FR(25)),
    ])
    def test_quotient_identity(self, circuit):
        """A(τ)·B(τ) - C(τ) == h(τ)·Z_H(τ) for a satisfied assignment."""
        cs = synthesize(circuit)
        assert cs.is_satisfied()
        z = cs.full_assignment()

        tau = FR(random.Random(3).randrange(1, CURVE_ORDER))
        a, b, c, zt, domain = instance_map_with_evaluation(cs, tau)
        a_tau = sum((FR(v) * k for v, k in zip(z, a)), FR(0))
        b_tau = sum((FR(v) * k for v, k in zip(z, b)), FR(0))
        c_tau = sum((FR(v) * k for v, k in zip(z, c)), FR(0))

        h = witness_map(cs)
        assert len(h) == domain.size
        assert h[-1] == FR(0)
        assert a_tau * b_tau - c_tau == eval_poly(h, tau) * zt

    def test_instance_polynomials_independent(self):
        """Input constraints give the ONE and public-input columns distinct A polynomials."""
        cs = synthesize_for_setup(CubicCircuit(FR(0), FR(0)))
        a, _, _, _, _ = instance_map_with_evaluation(cs, FR(77))
        assert a[0] != a[1]
