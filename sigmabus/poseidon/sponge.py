"""
Poseidon 듀플렉스 스펀지 (네이티브)
====================================

**순열(permutation)**:
  full_rounds/2 개의 전체 라운드 → partial_rounds 개의 부분 라운드
  → full_rounds/2 개의 전체 라운드. 각 라운드는
  ARK(상수 덧셈) → S-box(x^α) → MDS(행렬 곱) 순서이다.

**듀플렉스 모드**:
  - 흡수(absorb): rate 구간에 입력을 더한다. 구간이 차면 순열을 적용한다.
  - 추출(squeeze): 흡수 중이었다면 순열을 적용한 뒤 rate 구간에서 읽는다.
  흡수와 추출을 번갈아 호출할 수 있어 Fiat-Shamir 트랜스크립트에 쓰인다.

**CRH**:
  crh_evaluate(config, inputs) = 새 스펀지에 inputs 흡수 후 원소 하나 추출.
  Sigmabus의 Hash1(x), Hash2(r, o_h)가 이 함수이다.
  회로 버전은 sigmabus.poseidon.constraints 에 있으며 같은 값을 계산한다.
"""

from sigmabus.field import FR, CURVE_ORDER

ABSORBING = "absorbing"
SQUEEZING = "squeezing"


def permute(config, state):
    """Poseidon 순열. state는 정수 리스트이며 새 리스트를 반환한다."""
    p = CURVE_ORDER
    alpha = config.alpha
    width = config.width
    half_full = config.full_rounds // 2
    total = config.full_rounds + config.partial_rounds
    state = list(state)

    for round_index in range(total):
        ark = config.ark[round_index]
        state = [(state[i] + ark[i]) % p for i in range(width)]
        if round_index < half_full or round_index >= half_full + config.partial_rounds:
            state = [pow(s, alpha, p) for s in state]
        else:
            state[0] = pow(state[0], alpha, p)
        state = [
            sum(m * s for m, s in zip(config.mds[i], state)) % p
            for i in range(width)
        ]
    return state


class PoseidonSponge:
    """Poseidon 듀플렉스 스펀지.

    속성:
        config: PoseidonConfig
        state: 정수 리스트 [capacity..., rate...]
        mode: ABSORBING 또는 SQUEEZING
        index: 다음 흡수/추출 위치 (rate 구간 기준)
    """

    def __init__(self, config):
        self.config = config
        self.state = [0] * config.width
        self.mode = ABSORBING
        self.index = 0

    def permute(self):
        self.state = permute(self.config, self.state)

    def _absorb_internal(self, rate_start, elements):
        rate = self.config.rate
        capacity = self.config.capacity
        remaining = list(elements)
        while True:
            if rate_start + len(remaining) <= rate:
                for i, element in enumerate(remaining):
                    pos = capacity + rate_start + i
                    self.state[pos] = (self.state[pos] + element) % CURVE_ORDER
                self.mode = ABSORBING
                self.index = rate_start + len(remaining)
                return
            num_absorbed = rate - rate_start
            for i, element in enumerate(remaining[:num_absorbed]):
                pos = capacity + rate_start + i
                self.state[pos] = (self.state[pos] + element) % CURVE_ORDER
            self.permute()
            remaining = remaining[num_absorbed:]
            rate_start = 0

    def _squeeze_internal(self, rate_start, num_elements):
        rate = self.config.rate
        capacity = self.config.capacity
        output = []
        while True:
            if rate_start + num_elements <= rate:
                start = capacity + rate_start
                output.extend(self.state[start:start + num_elements])
                self.mode = SQUEEZING
                self.index = rate_start + num_elements
                return output
            num_squeezed = rate - rate_start
            start = capacity + rate_start
            output.extend(self.state[start:start + num_squeezed])
            num_elements -= num_squeezed
            self.permute()
            rate_start = 0

    def absorb(self, elements):
        """필드 원소(들)를 흡수한다.

        Args:
            elements: FR/정수 하나 또는 그 리스트
        """
        if not isinstance(elements, (list, tuple)):
            elements = [elements]
        elements = [int(e) % CURVE_ORDER for e in elements]
        if not elements:
            return
        if self.mode == ABSORBING:
            index = self.index
            if index == self.config.rate:
                self.permute()
                index = 0
            self._absorb_internal(index, elements)
        else:
            self._absorb_internal(0, elements)

    def squeeze_field_elements(self, num_elements):
        """필드 원소 num_elements 개를 추출한다 (FR 리스트)."""
        if num_elements < 1:
            return []
        if self.mode == ABSORBING:
            self.permute()
            squeezed = self._squeeze_internal(0, num_elements)
        else:
            index = self.index
            if index == self.config.rate:
                self.permute()
                index = 0
            squeezed = self._squeeze_internal(index, num_elements)
        return [FR(v) for v in squeezed]


def crh_evaluate(config, inputs):
    """Poseidon CRH: 새 스펀지에 inputs를 흡수하고 원소 하나를 추출한다.

    Args:
        config: PoseidonConfig
        inputs: FR/정수 리스트

    Returns:
        FR: 해시 값

    예시:
        >>> cm = crh_evaluate(config, [x])           # Hash1(x)
        >>> r_h = crh_evaluate(config, [r, o_h])     # Hash2(r, o_h)
    """
    sponge = PoseidonSponge(config)
    sponge.absorb(list(inputs))
    return sponge.squeeze_field_elements(1)[0]
