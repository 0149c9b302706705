"""
Poseidon 파라미터 (HashConfig)
===============================

Poseidon 순열의 라운드 수, S-box 지수, MDS 행렬, 라운드 상수를 정의한다.

**Grain LFSR**:
  Poseidon 논문의 파라미터 생성 절차. 80비트 LFSR에 필드 크기,
  상태 폭, 라운드 수를 초기 상태로 넣고, 자기축소(self-shrinking) 방식으로
  비트를 뽑아 라운드 상수(ARK)와 Cauchy MDS 행렬을 결정론적으로 만든다.

**상태 배치**:
  state = [capacity..., rate...]. 입력은 rate 구간에 더해지고,
  출력도 rate 구간에서 읽는다.

**테스트 설정** (poseidon_test_config):
  full_rounds=8, partial_rounds=31, alpha=5, rate=2, capacity=1.
  PoseidonConfig는 불변이며 모든 세션이 공유한다.

사용 예시:
    >>> config = poseidon_test_config()
    >>> config.width  # 3
"""

import functools
import logging

from sigmabus.field import FR, CURVE_ORDER, MODULUS_BIT_SIZE

logger = logging.getLogger(__name__)


class PoseidonGrainLFSR:
    """Poseidon 파라미터 생성용 Grain LFSR.

    속성:
        prime_num_bits: 필드 위수의 비트 길이
        state: 80비트 상태 (bool 리스트)
        head: 순환 버퍼 시작 위치
    """

    def __init__(self, is_sbox_an_inverse, prime_num_bits, state_len,
                 num_full_rounds, num_partial_rounds):
        self.prime_num_bits = prime_num_bits
        state = [False] * 80

        # b0, b1: 필드 종류 (소수체)
        state[1] = True
        # b2..b5: S-box 종류
        state[5] = bool(is_sbox_an_inverse)
        # b6..b17: 필드 비트 길이, b18..b29: 상태 폭 t,
        # b30..b39: R_F, b40..b49: R_P (모두 MSB 먼저)
        for value, start, end in (
            (prime_num_bits, 6, 17),
            (state_len, 18, 29),
            (num_full_rounds, 30, 39),
            (num_partial_rounds, 40, 49),
        ):
            for i in range(end, start - 1, -1):
                state[i] = bool(value & 1)
                value >>= 1
        # b50..b79 = 1
        for i in range(50, 80):
            state[i] = True

        self.state = state
        self.head = 0
        # 처음 160비트는 버린다
        for _ in range(160):
            self._update()

    def _update(self):
        s = self.state
        h = self.head
        new_bit = (s[(h + 62) % 80] ^ s[(h + 51) % 80] ^ s[(h + 38) % 80]
                   ^ s[(h + 23) % 80] ^ s[(h + 13) % 80] ^ s[h])
        s[h] = new_bit
        self.head = (h + 1) % 80
        return new_bit

    def get_bits(self, num_bits):
        """자기축소 출력: 첫 비트가 1일 때만 두 번째 비트를 취한다."""
        bits = []
        for _ in range(num_bits):
            new_bit = self._update()
            while not new_bit:
                self._update()
                new_bit = self._update()
            bits.append(self._update())
        return bits

    def _next_integer(self):
        # 먼저 나온 비트가 최상위 비트
        value = 0
        for bit in self.get_bits(self.prime_num_bits):
            value = (value << 1) | int(bit)
        return value

    def get_field_elements_rejection_sampling(self, num_elems):
        if MODULUS_BIT_SIZE != self.prime_num_bits:
            raise ValueError("LFSR 비트 길이가 스칼라 필드와 다릅니다")
        result = []
        for _ in range(num_elems):
            while True:
                value = self._next_integer()
                if value < CURVE_ORDER:
                    result.append(FR(value))
                    break
        return result

    def get_field_elements_mod_p(self, num_elems):
        return [FR(self._next_integer() % CURVE_ORDER) for _ in range(num_elems)]


def find_poseidon_ark_and_mds(prime_bits, rate, full_rounds, partial_rounds, skip_matrices=0):
    """Grain LFSR로 라운드 상수와 MDS 행렬을 생성한다.

    MDS는 Cauchy 행렬: mds[i][j] = 1 / (xs[i] + ys[j]).

    Returns:
        (ark, mds): ark는 (full_rounds + partial_rounds) × (rate + 1),
                    mds는 (rate + 1) × (rate + 1) FR 행렬
    """
    width = rate + 1
    lfsr = PoseidonGrainLFSR(False, prime_bits, width, full_rounds, partial_rounds)

    ark = []
    for _ in range(full_rounds + partial_rounds):
        ark.append(lfsr.get_field_elements_rejection_sampling(width))

    for _ in range(skip_matrices):
        lfsr.get_field_elements_mod_p(2 * width)

    xs = lfsr.get_field_elements_mod_p(width)
    ys = lfsr.get_field_elements_mod_p(width)
    mds = [[FR(1) / (xs[i] + ys[j]) for j in range(width)] for i in range(width)]
    return ark, mds


class PoseidonConfig:
    """Poseidon 순열 파라미터.

    속성:
        full_rounds: 전체 라운드 수 (짝수, 앞뒤로 절반씩)
        partial_rounds: 부분 라운드 수 (S-box를 state[0]에만 적용)
        alpha: S-box 지수 (x^alpha)
        mds: width × width MDS 행렬
        ark: 라운드별 상수 (full_rounds + partial_rounds) × width
        rate: 흡수/추출 구간 크기
        capacity: 용량 구간 크기
    """

    def __init__(self, full_rounds, partial_rounds, alpha, mds, ark, rate, capacity):
        if full_rounds % 2 != 0:
            raise ValueError(f"full_rounds는 짝수여야 합니다: {full_rounds}")
        width = rate + capacity
        if len(ark) != full_rounds + partial_rounds:
            raise ValueError("라운드 상수 개수가 라운드 수와 다릅니다")
        if any(len(row) != width for row in ark):
            raise ValueError("라운드 상수 행의 길이가 상태 폭과 다릅니다")
        if len(mds) != width or any(len(row) != width for row in mds):
            raise ValueError("MDS 행렬의 크기가 상태 폭과 다릅니다")

        self.full_rounds = full_rounds
        self.partial_rounds = partial_rounds
        self.alpha = alpha
        # 정수로 보관 (순열 내부 연산 속도)
        self.mds = tuple(tuple(int(v) for v in row) for row in mds)
        self.ark = tuple(tuple(int(v) for v in row) for row in ark)
        self.rate = rate
        self.capacity = capacity

    @property
    def width(self):
        return self.rate + self.capacity

    @classmethod
    def from_grain(cls, full_rounds, partial_rounds, alpha, rate, capacity=1, skip_matrices=0):
        """Grain LFSR로 상수를 생성하여 설정을 만든다."""
        if capacity != 1:
            # Grain 상태 폭은 rate + 1로 고정
            raise ValueError("Grain LFSR 파라미터 생성은 capacity=1만 지원합니다")
        logger.debug(
            "deriving poseidon constants: full_rounds=%d partial_rounds=%d alpha=%d rate=%d",
            full_rounds, partial_rounds, alpha, rate,
        )
        ark, mds = find_poseidon_ark_and_mds(
            MODULUS_BIT_SIZE, rate, full_rounds, partial_rounds, skip_matrices
        )
        return cls(full_rounds, partial_rounds, alpha, mds, ark, rate, capacity)

    def __eq__(self, other):
        if not isinstance(other, PoseidonConfig):
            return NotImplemented
        return (
            self.full_rounds == other.full_rounds
            and self.partial_rounds == other.partial_rounds
            and self.alpha == other.alpha
            and self.rate == other.rate
            and self.capacity == other.capacity
            and self.mds == other.mds
            and self.ark == other.ark
        )

    def __hash__(self):
        return hash((self.full_rounds, self.partial_rounds, self.alpha,
                     self.rate, self.capacity, self.mds, self.ark))

    def __repr__(self):
        return (
            f"PoseidonConfig(full_rounds={self.full_rounds}, "
            f"partial_rounds={self.partial_rounds}, alpha={self.alpha}, "
            f"rate={self.rate}, capacity={self.capacity})"
        )


@functools.lru_cache(maxsize=None)
def poseidon_test_config():
    """테스트용 고정 Poseidon 설정 (8 full, 31 partial, alpha 5, rate 2)."""
    return PoseidonConfig.from_grain(full_rounds=8, partial_rounds=31, alpha=5, rate=2)
