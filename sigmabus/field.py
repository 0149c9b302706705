"""
Sigmabus 기반 모듈: 유한체(Finite Field) 및 타원곡선 연산
==========================================================

이 모듈은 Sigmabus 프로토콜 전체에서 사용되는 기본 대수적 도구를 정의한다.

**유한체 FR**:
  bn128(BN254) 타원곡선의 스칼라 필드. 비밀값 x, Sigma 응답 s,
  Poseidon 해시 출력, 회로의 모든 배선 값이 이 필드의 원소이다.

**타원곡선 연산**:
  Sigma 프로토콜의 X = x·G, R = r·G 계산과 Groth16 키/증명의 G1, G2 연산.
  속도를 위해 py_ecc의 optimized_bn128 (사영 좌표) 구현을 사용한다.
  점은 (X, Y, Z) 사영 좌표이며, 아핀 좌표가 필요하면 to_affine()을 쓴다.

**아핀 좌표 → 스칼라 필드 인코딩**:
  트랜스크립트가 G1 점을 흡수할 때 사용하는 좌표 표현.
  기저 필드(Fq) 좌표를 32바이트 리틀엔디안으로 직렬화한 뒤
  스칼라 필드 위수로 축소한다. 회로 안에서도 동일하게 재현할 수 있다.

사용 예시:
    >>> from sigmabus.field import FR, G1, ec_mul
    >>> X = ec_mul(G1, FR(7))   # 7·G
"""

import secrets

from py_ecc.fields import bn128_FQ as FQ
from py_ecc import optimized_bn128 as bn128


# ─────────────────────────────────────────────────────────────────────
# 유한체(Finite Field) FR
# ─────────────────────────────────────────────────────────────────────

class FR(FQ):
    """bn128 스칼라 필드 위의 유한체 원소.

    py_ecc의 FQ 클래스를 상속하여 +, -, *, /, ** 등의 필드 연산을 제공한다.

    예시:
        >>> x = FR(3)
        >>> x * x          # FR(9)
        >>> FR(1) / FR(3)   # 3의 모듈러 역원
    """
    field_modulus = bn128.curve_order


# 스칼라 필드 위수 (곡선 위수)
CURVE_ORDER = bn128.curve_order

# 기저 필드 위수
FIELD_MODULUS = bn128.field_modulus

# 스칼라 필드 위수의 비트 길이 (BN254: 254)
MODULUS_BIT_SIZE = CURVE_ORDER.bit_length()

# 필드 원소 직렬화 길이 (바이트)
FIELD_BYTES = 32


# ─────────────────────────────────────────────────────────────────────
# 타원곡선 상수 및 연산
# ─────────────────────────────────────────────────────────────────────

# G1, G2 생성자 (사영 좌표)
G1 = bn128.G1
G2 = bn128.G2

# 항등원 (point at infinity)
Z1 = bn128.Z1
Z2 = bn128.Z2


def ec_mul(point, scalar):
    """타원곡선 스칼라 곱셈: scalar · point.

    Args:
        point: G1 또는 G2 위의 점
        scalar: 정수 또는 FR 원소

    Returns:
        scalar · point (같은 그룹의 점)
    """
    return bn128.multiply(point, int(scalar) % CURVE_ORDER)


def ec_add(p1, p2):
    """타원곡선 점 덧셈: p1 + p2."""
    return bn128.add(p1, p2)


def ec_neg(point):
    """타원곡선 점의 역원: -point."""
    return bn128.neg(point)


def ec_eq(p1, p2):
    """사영 좌표 표현과 무관하게 두 점이 같은지 비교한다."""
    return bn128.eq(p1, p2)


def ec_is_inf(point):
    return bn128.is_inf(point)


def ec_pairing(g2_point, g1_point):
    """쌍선형 페어링 e(G1, G2) → GT.

    주의:
        py_ecc의 인자 순서는 (G2, G1)이다.
        두 점 모두 곡선 위에 있어야 한다 (그렇지 않으면 py_ecc가 AssertionError).
    """
    return bn128.pairing(g2_point, g1_point)


def is_on_curve_g1(point):
    return bn128.is_on_curve(point, bn128.b)


def is_on_curve_g2(point):
    return bn128.is_on_curve(point, bn128.b2)


def is_in_subgroup_g2(point):
    """G2 점이 위수 r 부분군에 속하는지 확인한다 (트위스트 곡선은 cofactor ≠ 1)."""
    return bn128.is_inf(bn128.multiply(point, CURVE_ORDER))


def to_affine(point):
    """사영 좌표 점을 아핀 좌표 (x, y)로 변환한다. 항등원이면 None."""
    if bn128.is_inf(point):
        return None
    return bn128.normalize(point)


def g1_from_affine(x, y):
    """아핀 정수 좌표로부터 G1 점을 만든다. 곡선 검사는 하지 않는다."""
    return (bn128.FQ(int(x)), bn128.FQ(int(y)), bn128.FQ.one())


def g2_from_affine(x, y):
    """아핀 좌표 ((x0, x1), (y0, y1))로부터 G2 점을 만든다. 곡선 검사는 하지 않는다."""
    return (
        bn128.FQ2([int(x[0]), int(x[1])]),
        bn128.FQ2([int(y[0]), int(y[1])]),
        bn128.FQ2.one(),
    )


def base_to_scalar_field(coord):
    """기저 필드 좌표를 스칼라 필드 원소로 재해석한다.

    좌표의 정수 표현을 32바이트 리틀엔디안으로 인코딩한 뒤,
    그 바이트열을 리틀엔디안 정수로 읽어 CURVE_ORDER로 축소한다.
    회로 안에서도 같은 값을 배선으로 할당할 수 있다.
    """
    le_bytes = int(coord).to_bytes(FIELD_BYTES, "little")
    return FR(int.from_bytes(le_bytes, "little") % CURVE_ORDER)


def batch_mul(base, scalars, window=4):
    """같은 기저점에 대한 여러 스칼라 곱 [s₀·P, s₁·P, ...] (고정 기저 윈도우 방식).

    P·(2^w)^i · j 테이블을 한 번 만들고, 각 곱은 윈도우당 덧셈 한 번으로 계산한다.
    Groth16 키 생성처럼 기저점 하나에 수백 번 곱할 때 사용한다.
    """
    zero = bn128.multiply(base, 0)
    num_windows = -(-MODULUS_BIT_SIZE // window)
    mask = (1 << window) - 1

    table = []
    current = base
    for _ in range(num_windows):
        row = [zero]
        acc = zero
        for _ in range(mask):
            acc = bn128.add(acc, current)
            row.append(acc)
        table.append(row)
        current = bn128.add(acc, current)

    results = []
    for scalar in scalars:
        s = int(scalar) % CURVE_ORDER
        acc = zero
        i = 0
        while s:
            digit = s & mask
            if digit:
                acc = bn128.add(acc, table[i][digit])
            s >>= window
            i += 1
        results.append(acc)
    return results


def msm(bases, scalars, zero=None):
    """다중 스칼라 곱 Σ sᵢ·Pᵢ (Pippenger 버킷 방식).

    Args:
        bases: 같은 그룹의 점 리스트
        scalars: FR/정수 리스트 (bases와 같은 길이)
        zero: 결과 그룹의 항등원 (bases가 비어 있을 때 필요, 기본값 Z1)
    """
    if zero is None:
        zero = bn128.multiply(bases[0], 0) if bases else Z1
    pairs = []
    for base, scalar in zip(bases, scalars):
        s = int(scalar) % CURVE_ORDER
        if s and not bn128.is_inf(base):
            pairs.append((base, s))
    if not pairs:
        return zero

    c = 3 if len(pairs) < 32 else max(3, len(pairs).bit_length() - 2)
    num_windows = -(-MODULUS_BIT_SIZE // c)
    mask = (1 << c) - 1

    result = zero
    for w in reversed(range(num_windows)):
        for _ in range(c):
            result = bn128.double(result)
        buckets = [None] * mask
        shift = w * c
        for base, s in pairs:
            digit = (s >> shift) & mask
            if digit:
                bucket = buckets[digit - 1]
                buckets[digit - 1] = base if bucket is None else bn128.add(bucket, base)
        # Σ j·bucket[j] = 누적합들의 합
        running = None
        window_sum = None
        for bucket in reversed(buckets):
            if bucket is not None:
                running = bucket if running is None else bn128.add(running, bucket)
            if running is not None:
                window_sum = running if window_sum is None else bn128.add(window_sum, running)
        if window_sum is not None:
            result = bn128.add(result, window_sum)
    return result


# ─────────────────────────────────────────────────────────────────────
# 난수 (Randomness)
# ─────────────────────────────────────────────────────────────────────

def default_rng():
    """운영체제 CSPRNG를 감싼 random.Random 호환 객체."""
    return secrets.SystemRandom()


def random_scalar(rng):
    """rng에서 균등 분포의 FR 원소를 샘플링한다.

    Args:
        rng: random.Random 호환 객체 (randrange 지원)
    """
    return FR(rng.randrange(CURVE_ORDER))


def random_nonzero_scalar(rng):
    return FR(rng.randrange(1, CURVE_ORDER))


# ─────────────────────────────────────────────────────────────────────
# 단위근 (Roots of Unity)
# ─────────────────────────────────────────────────────────────────────

# p - 1 = 2^28 × m (m은 홀수)
TWO_ADICITY = 28

# FR*의 생성자. 코셋 이동(coset shift)에도 사용한다.
MULTIPLICATIVE_GENERATOR = FR(5)


def get_root_of_unity(n):
    """n차 원시 단위근 ω를 반환한다.

    Args:
        n: 단위근의 차수 (2의 거듭제곱이어야 하며, ≤ 2^28)

    Raises:
        ValueError: n이 2의 거듭제곱이 아니거나 2^28을 초과할 때

    예시:
        >>> omega = get_root_of_unity(4)
        >>> omega ** 4 == FR(1)  # True
    """
    if n < 1 or (n & (n - 1)) != 0:
        raise ValueError(f"n은 2의 거듭제곱이어야 합니다: {n}")
    if n > (1 << TWO_ADICITY):
        raise ValueError(f"n은 2^{TWO_ADICITY} 이하여야 합니다: {n}")
    if n == 1:
        return FR(1)
    # ω = g^((p-1)/n) 이면 ω^n = g^(p-1) = 1
    return MULTIPLICATIVE_GENERATOR ** ((CURVE_ORDER - 1) // n)


def get_roots_of_unity(n):
    """도메인 H = [1, ω, ω², ..., ω^(n-1)] 을 반환한다."""
    omega = get_root_of_unity(n)
    roots = []
    current = FR(1)
    for _ in range(n):
        roots.append(current)
        current = current * omega
    return roots
