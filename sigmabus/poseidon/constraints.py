"""
Poseidon 회로 가젯 (in-circuit)
================================

네이티브 PoseidonSponge와 완전히 같은 함수를 FpVar 위에서 계산한다.
두 구현이 한 비트라도 다르면 정직한 증명이 거부된다(완전성 붕괴).

**제약 비용**:
  - ARK, MDS: 선형 연산이므로 제약 없음 (선형결합에 흡수)
  - S-box x^5: 제곱, 제곱, 곱 → 제약 3개
  - 상수에 대한 S-box는 제약 없이 계산된다 (예: 첫 라운드의 capacity 원소)

사용 예시:
    >>> cm_var = crh_gadget_evaluate(config, [x_var])
    >>> cm_var.enforce_equal(cm_input)
"""

from sigmabus.r1cs import FpVar
from sigmabus.poseidon.sponge import ABSORBING, SQUEEZING


class PoseidonSpongeVar:
    """회로 안의 Poseidon 듀플렉스 스펀지. 흡수/추출 순서는 네이티브와 같다."""

    def __init__(self, config):
        self.config = config
        self.state = [FpVar.constant(0) for _ in range(config.width)]
        self.mode = ABSORBING
        self.index = 0

    def permute(self):
        config = self.config
        width = config.width
        half_full = config.full_rounds // 2
        state = self.state

        for round_index in range(config.full_rounds + config.partial_rounds):
            ark = config.ark[round_index]
            state = [state[i] + ark[i] for i in range(width)]
            if round_index < half_full or round_index >= half_full + config.partial_rounds:
                state = [s.pow_by_constant(config.alpha) for s in state]
            else:
                state[0] = state[0].pow_by_constant(config.alpha)

            new_state = []
            for i in range(width):
                acc = FpVar.constant(0)
                for j in range(width):
                    acc = acc + state[j] * config.mds[i][j]
                new_state.append(acc)
            state = new_state

        self.state = state

    def _absorb_internal(self, rate_start, elements):
        rate = self.config.rate
        capacity = self.config.capacity
        remaining = list(elements)
        while True:
            if rate_start + len(remaining) <= rate:
                for i, element in enumerate(remaining):
                    pos = capacity + rate_start + i
                    self.state[pos] = self.state[pos] + element
                self.mode = ABSORBING
                self.index = rate_start + len(remaining)
                return
            num_absorbed = rate - rate_start
            for i, element in enumerate(remaining[:num_absorbed]):
                pos = capacity + rate_start + i
                self.state[pos] = self.state[pos] + element
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
        """FpVar(들)을 흡수한다."""
        if isinstance(elements, FpVar):
            elements = [elements]
        elements = list(elements)
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
        if num_elements < 1:
            return []
        if self.mode == ABSORBING:
            self.permute()
            return self._squeeze_internal(0, num_elements)
        index = self.index
        if index == self.config.rate:
            self.permute()
            index = 0
        return self._squeeze_internal(index, num_elements)


def crh_gadget_evaluate(config, inputs):
    """crh_evaluate의 회로 버전. 결과는 FpVar."""
    sponge = PoseidonSpongeVar(config)
    sponge.absorb(list(inputs))
    return sponge.squeeze_field_elements(1)[0]
