"""
Sigmabus Fiat-Shamir Transcript
================================

Poseidon 스펀지 기반 비대화식(non-interactive) 변환.

**Fiat-Shamir 변환이란?**
  Sigma 프로토콜은 원래 대화식이다:
  - Prover가 커밋먼트 R을 보내면
  - Verifier가 랜덤 챌린지 c를 보내고
  - Prover가 응답 s = r + c·x 를 보낸다
  Fiat-Shamir 변환은 Verifier의 챌린지를 트랜스크립트 해시로 대체한다.

**Sigmabus 트랜스크립트 순서** (Prover와 Verifier 모두 동일):
  absorb(cm) → absorb_point(R) → absorb(r_h) → get_challenge()
  순서가 바뀌거나 하나라도 빠지면 다른 챌린지가 나오고 검증이 실패한다.

**챌린지 재흡수**:
  get_challenge()는 추출한 c를 즉시 다시 흡수한다.
  같은 접두사에서 독립적인 챌린지를 여러 개 뽑을 수 없게 하고,
  이후의 모든 연산을 이미 발행된 챌린지에 묶는다.

**점 인코딩**:
  바이트 해시가 아닌 필드 원소로 점을 흡수하므로 회로 안에서도 재현된다.
  PoseidonTranscriptVar가 같은 과정을 FpVar 위에서 수행한다.

보안 주의:
  - 트랜스크립트는 세션 하나(증명 하나 또는 검증 하나)에만 사용한다.
  - 세션 간 재사용은 Fiat-Shamir 독립성을 깨뜨린다.

사용 예시:
    >>> t = PoseidonTranscript(poseidon_test_config())
    >>> t.absorb(cm)
    >>> t.absorb_point(R)
    >>> t.absorb(r_h)
    >>> c = t.get_challenge()
"""

from sigmabus.field import FR, base_to_scalar_field, to_affine
from sigmabus.poseidon.sponge import PoseidonSponge
from sigmabus.poseidon.constraints import PoseidonSpongeVar
from sigmabus.r1cs import FpVar


def prepare_point(point):
    """G1 점의 아핀 좌표를 스칼라 필드 원소 [x', y'] 로 변환한다.

    각 좌표의 기저 필드 정수를 리틀엔디안 바이트로 인코딩한 뒤
    스칼라 필드 위수로 축소한다. 항등원(아핀 좌표 없음)은 [0, 0].

    Args:
        point: G1 점 (사영 좌표)

    Returns:
        list[FR]: [x', y']
    """
    affine = to_affine(point)
    if affine is None:
        return [FR(0), FR(0)]
    x, y = affine
    return [base_to_scalar_field(x), base_to_scalar_field(y)]


class PoseidonTranscript:
    """Poseidon 스펀지 기반 Fiat-Shamir 트랜스크립트.

    속성:
        sponge: PoseidonSponge (세션 전용 가변 상태)
    """

    def __init__(self, poseidon_config):
        self.sponge = PoseidonSponge(poseidon_config)

    def absorb(self, value):
        """스칼라 필드 원소 하나를 흡수한다."""
        self.sponge.absorb(value)

    def absorb_point(self, point):
        """G1 점을 [x', y'] 두 원소로 흡수한다."""
        self.sponge.absorb(prepare_point(point))

    def get_challenge(self):
        """챌린지 c를 추출하고, c를 다시 흡수한 뒤 반환한다.

        Returns:
            FR: 챌린지
        """
        c = self.sponge.squeeze_field_elements(1)[0]
        self.sponge.absorb(c)
        return c


class PoseidonTranscriptVar:
    """PoseidonTranscript의 회로 버전.

    점은 prepare_point()로 인코딩된 좌표 변수 두 개로 받는다.
    (좌표를 스칼라 필드에서 재구성하므로 비원생(non-native) 필드 에뮬레이션은 없다.)
    """

    def __init__(self, poseidon_config):
        self.sponge = PoseidonSpongeVar(poseidon_config)

    def absorb(self, var):
        self.sponge.absorb(var)

    def absorb_point(self, x_var, y_var):
        self.sponge.absorb([x_var, y_var])

    def absorb_point_witness(self, cs, point):
        """점의 인코딩 좌표를 witness로 할당하고 흡수한다. 할당된 (x, y) FpVar를 반환한다."""
        x, y = prepare_point(point)
        x_var = FpVar.new_witness(cs, x)
        y_var = FpVar.new_witness(cs, y)
        self.absorb_point(x_var, y_var)
        return x_var, y_var

    def get_challenge(self):
        c = self.sponge.squeeze_field_elements(1)[0]
        self.sponge.absorb(c)
        return c
