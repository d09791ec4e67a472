"""
ECIES Error Taxonomy

Every failure raised by the ECIES core is an EciesError. The subclass
tells the caller which category failed:

- InvalidArgumentError: bad input, rejected before anything is allocated
- ResourceExhaustionError: allocation failure
- PrimitiveError: key agreement, point decoding, cipher or MAC failure
- InvariantViolationError: internal size check failed (a bug, never tolerated)
- AuthenticationError: MAC tag mismatch on decryption

EciesError derives from ValueError, like the rest of the package's
validation errors.
"""

from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """Failure categories reported by the ECIES core"""

    INVALID_ARGUMENT = "invalid_argument"
    RESOURCE_EXHAUSTION = "resource_exhaustion"
    PRIMITIVE_FAILURE = "primitive_failure"
    INVARIANT_VIOLATION = "invariant_violation"
    AUTHENTICATION_FAILURE = "authentication_failure"


class EciesError(ValueError):
    """
    Base class for ECIES failures.

    Attributes:
        kind: Failure category
        message: Human-readable description
        operation: Name of the operation that failed (e.g. "ecies_encrypt")
        cause: Underlying exception, if any
    """

    kind = ErrorKind.PRIMITIVE_FAILURE

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        self.message = message
        self.operation = operation
        self.cause = cause
        super().__init__(self._format())

    def _format(self) -> str:
        text = self.message
        if self.operation:
            text = f"{self.operation}: {text}"
        if self.cause is not None:
            text = f"{text} {{error = {self.cause}}}"
        return text


class InvalidArgumentError(EciesError):
    kind = ErrorKind.INVALID_ARGUMENT


class ResourceExhaustionError(EciesError):
    kind = ErrorKind.RESOURCE_EXHAUSTION


class PrimitiveError(EciesError):
    kind = ErrorKind.PRIMITIVE_FAILURE


class KeyReconstructionError(PrimitiveError):
    """The ephemeral public key octets are not a valid point on the curve"""


class DecryptionError(PrimitiveError):
    """The cryptogram could not be decrypted"""


class InvariantViolationError(EciesError):
    kind = ErrorKind.INVARIANT_VIOLATION


class AuthenticationError(DecryptionError):
    """
    MAC tag mismatch.

    The message never says how much of the tag matched or which field
    was corrupted.
    """

    kind = ErrorKind.AUTHENTICATION_FAILURE
