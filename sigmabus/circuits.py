"""
GenZK 회로
==========

Sigma 프로토콜의 숨겨진 중간값이 만족해야 하는 관계를 R1CS로 기술한다.

**관계**:
  공개: (cm, s, r_h, c)
  비공개: (x, r, o_h)

    cm  == Poseidon(x)
    r_h == Poseidon(r, o_h)
    s   == r + c·x

**공개 입력 순서**:
  cm, s, r_h, c 순서로 할당한다. 이 순서가 검증키의 공개 입력 배치를 정하며,
  Verifier도 [cm, s, r_h, c] 순서로 공개 입력 벡터를 만든다.

**Setup 시**:
  GenZKCircuit.blank()는 값이 0으로 채워진 인스턴스이다.
  키 생성은 SETUP 모드 제약 시스템에서 게이트 구조만 사용한다.

**해시 일관성**:
  회로 밖(crh_evaluate)과 안(crh_gadget_evaluate)에서 같은 PoseidonConfig와
  같은 스펀지 스케줄을 사용해야 한다.
"""

import logging

from sigmabus.field import FR
from sigmabus.poseidon.constraints import crh_gadget_evaluate
from sigmabus.r1cs import FpVar

logger = logging.getLogger(__name__)


class GenZKCircuit:
    """GenZK 관계 회로.

    속성:
        poseidon_config: PoseidonConfig
        cm, s, r_h, c: 공개 입력 (FR)
        x, r, o_h: 비공개 입력 (FR)
    """

    def __init__(self, poseidon_config, cm, s, r_h, c, x, r, o_h):
        self.poseidon_config = poseidon_config
        # public
        self.cm = cm
        self.s = s
        self.r_h = r_h
        self.c = c
        # private
        self.x = x
        self.r = r
        self.o_h = o_h

    @classmethod
    def blank(cls, poseidon_config):
        """키 생성용 영(0) 인스턴스."""
        zero = FR(0)
        return cls(poseidon_config, zero, zero, zero, zero, zero, zero, zero)

    def public_inputs(self):
        """검증키 배치 순서의 공개 입력 [cm, s, r_h, c]."""
        return [self.cm, self.s, self.r_h, self.c]

    def generate_constraints(self, cs):
        # public inputs
        cm_var = FpVar.new_input(cs, self.cm)
        s_var = FpVar.new_input(cs, self.s)
        r_h_var = FpVar.new_input(cs, self.r_h)
        c_var = FpVar.new_input(cs, self.c)

        # private inputs
        x_var = FpVar.new_witness(cs, self.x)
        r_var = FpVar.new_witness(cs, self.r)
        o_h_var = FpVar.new_witness(cs, self.o_h)

        self.check(self.poseidon_config, cm_var, s_var, r_h_var, c_var, x_var, r_var, o_h_var)
        logger.debug(
            "GenZK constraints: %d constraints, %d instance, %d witness variables",
            cs.num_constraints, cs.num_instance_variables, cs.num_witness_variables,
        )

    @staticmethod
    def check(poseidon_config, cm, s, r_h, c, x, r, o_h):
        """이미 할당된 변수들 위에 GenZK 관계를 강제한다.

        다른 회로 안에서 Sigmabus 관계를 재사용할 때 직접 호출할 수 있다.
        """
        # cm == Commit(x)
        computed_cm = crh_gadget_evaluate(poseidon_config, [x])
        computed_cm.enforce_equal(cm)

        # r_h == HCommit(r, o_h)
        computed_r_h = crh_gadget_evaluate(poseidon_config, [r, o_h])
        computed_r_h.enforce_equal(r_h)

        # s == r + c * x
        s.enforce_equal(r + c * x)
