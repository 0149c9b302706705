"""
평가 도메인(Evaluation Domain)과 FFT
======================================

Groth16의 QAP 계산에 필요한 다항식 연산을 제공한다.

**평가 도메인 H**:
  크기 n(2의 거듭제곱)의 곱셈 부분군 H = {1, ω, ω², ..., ω^(n-1)}.
  R1CS의 j번째 제약은 ω^j 지점에 대응한다.

**FFT/IFFT (Number Theoretic Transform)**:
  계수 표현 ↔ H 위의 평가 표현 변환. 재귀적 Cooley-Tukey radix-2.

**코셋 FFT**:
  몫 다항식 h(x) = (A(x)·B(x) - C(x)) / Z_H(x) 계산 시
  H 위에서는 Z_H(x) = 0 이므로 코셋 g·H 에서 평가하여 나눈다.
  코셋 위에서 Z_H(g·ωⁱ) = gⁿ - 1 은 상수이다.

사용 예시:
    >>> domain = EvaluationDomain(8)
    >>> evals = domain.fft([FR(1), FR(2)])
    >>> domain.ifft(evals)[:2]   # [FR(1), FR(2)]
"""

from sigmabus.field import FR, MULTIPLICATIVE_GENERATOR, get_root_of_unity


def fft(coeffs, omega):
    """FFT: 계수 → n개의 단위근에서의 평가값.

    Args:
        coeffs: [c₀, ..., c_{n-1}] FR 원소 리스트 (길이는 2의 거듭제곱)
        omega: n차 원시 단위근

    Returns:
        list[FR]: [p(1), p(ω), ..., p(ω^{n-1})]
    """
    n = len(coeffs)
    if n == 1:
        return [coeffs[0] if isinstance(coeffs[0], FR) else FR(coeffs[0])]

    # 짝수/홀수 분리 (Cooley-Tukey 분할)
    omega_sq = omega * omega
    even_vals = fft(coeffs[0::2], omega_sq)
    odd_vals = fft(coeffs[1::2], omega_sq)

    # 버터플라이 결합
    result = [FR(0)] * n
    omega_k = FR(1)
    half = n // 2
    for k in range(half):
        t = omega_k * odd_vals[k]
        result[k] = even_vals[k] + t
        result[k + half] = even_vals[k] - t
        omega_k = omega_k * omega
    return result


def ifft(evals, omega):
    """IFFT: 평가값 → 계수. ω^{-1}로 FFT 후 n으로 나눈다."""
    n = len(evals)
    coeffs = fft(evals, FR(1) / omega)
    n_inv = FR(1) / FR(n)
    return [c * n_inv for c in coeffs]


def distribute_powers(coeffs, g):
    """cᵢ → gⁱ·cᵢ. p(x)를 p(g·x)로 바꾼다."""
    result = []
    g_power = FR(1)
    for c in coeffs:
        result.append(c * g_power)
        g_power = g_power * g
    return result


def next_power_of_2(n):
    """n 이상의 가장 작은 2의 거듭제곱을 반환한다.

    예시:
        >>> next_power_of_2(5)  # 8
    """
    if n <= 1:
        return 1
    p = 1
    while p < n:
        p <<= 1
    return p


class EvaluationDomain:
    """크기 n의 radix-2 평가 도메인.

    속성:
        size: 도메인 크기 n
        omega: n차 원시 단위근
        coset_shift: 코셋 생성자 g (FR*의 생성자 5)
    """

    def __init__(self, size):
        self.size = next_power_of_2(size)
        self.omega = get_root_of_unity(self.size)
        self.coset_shift = MULTIPLICATIVE_GENERATOR

    def _pad(self, values):
        values = [v if isinstance(v, FR) else FR(v) for v in values]
        if len(values) > self.size:
            raise ValueError(
                f"입력 길이 {len(values)}가 도메인 크기 {self.size}를 초과합니다"
            )
        return values + [FR(0)] * (self.size - len(values))

    def fft(self, coeffs):
        return fft(self._pad(coeffs), self.omega)

    def ifft(self, evals):
        return ifft(self._pad(evals), self.omega)

    def coset_fft(self, coeffs):
        """다항식을 코셋 g·H에서 평가한다."""
        return fft(distribute_powers(self._pad(coeffs), self.coset_shift), self.omega)

    def coset_ifft(self, evals):
        """코셋 g·H 위의 평가값을 계수로 복원한다."""
        coeffs = ifft(self._pad(evals), self.omega)
        return distribute_powers(coeffs, FR(1) / self.coset_shift)

    def evaluate_vanishing_polynomial(self, tau):
        """Z_H(τ) = τⁿ - 1."""
        return tau ** self.size - FR(1)

    def evaluate_all_lagrange_coefficients(self, tau):
        """모든 Lagrange 기저의 τ에서의 값 [L_0(τ), ..., L_{n-1}(τ)].

        L_i(τ) = (Z_H(τ) / n) · ωⁱ / (τ - ωⁱ)

        τ가 도메인 위의 점 ωᵏ 이면 L_k(τ) = 1, 나머지는 0.
        """
        n = self.size
        z_tau = self.evaluate_vanishing_polynomial(tau)
        if z_tau == FR(0):
            result = [FR(0)] * n
            omega_i = FR(1)
            for i in range(n):
                if omega_i == tau:
                    result[i] = FR(1)
                    break
                omega_i = omega_i * self.omega
            return result

        factor = z_tau / FR(n)
        result = []
        omega_i = FR(1)
        for _ in range(n):
            result.append(factor * omega_i / (tau - omega_i))
            omega_i = omega_i * self.omega
        return result

    def __repr__(self):
        return f"EvaluationDomain(size={self.size})"
