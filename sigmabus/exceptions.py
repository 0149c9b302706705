"""
Sigmabus 예외 계층
==================

두 종류의 실패를 구분한다.

**검증 실패 (VerificationError)**: 호출자가 처리할 수 있는 정상적인 거부.
  - SigmaFail: s·G ≠ R + c·X (이산로그 선형 검사 불일치)
  - GenZKFail: SNARK가 커밋된 관계(GenZK)를 거부

  Sigmabus를 다른 프로토콜의 하위 증명으로 합성할 때
  어느 쪽이 실패했는지 알 수 있도록 두 예외는 절대 합치지 않는다.

**백엔드 결함 (BackendError)**: 잘못된 회로, 키 생성 실패 등
  프로그래밍/환경 결함. 재시도하지 않고 그대로 전파한다.
"""


class SigmabusError(Exception):
    """Base exception for Sigmabus errors."""

    pass


class VerificationError(SigmabusError):
    """Proof rejected by the verifier."""

    pass


class SigmaFail(VerificationError):
    """SigmaProof verification failed."""

    def __init__(self, message="SigmaProof verification failed"):
        super().__init__(message)


class GenZKFail(VerificationError):
    """GenZK verification failed."""

    def __init__(self, message="GenZK verification failed"):
        super().__init__(message)


class BackendError(SigmabusError):
    """Fatal fault inside a primitive provider (constraint system, SNARK)."""

    pass


class SynthesisError(BackendError):
    """Constraint synthesis, key generation or proving failed."""

    pass


class MalformedVerifyingKey(BackendError):
    """Verifying key does not match the supplied public inputs."""

    pass
