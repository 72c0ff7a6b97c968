"""Exception hierarchy for zkdeploy.

Two failure categories are kept apart:

    DEPLOYMENT   : a contract deploy or registration call failed. Recoverable:
                   the orchestrator logs it and moves on unless fail-fast is set.
    TRANSACTION  : a mint / transfer / shield submission failed. Fatal for the
                   flow that issued it; the caller decides whether to abort.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Failure categories surfaced to callers."""

    ARTIFACT = "ARTIFACT"
    PROOF_LIBRARY = "PROOF_LIBRARY"
    DEPLOYMENT = "DEPLOYMENT"
    TRANSACTION = "TRANSACTION"


class ZkDeployError(Exception):
    """Base exception for zkdeploy errors."""

    kind: ErrorKind = ErrorKind.DEPLOYMENT
    fatal: bool = False

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "fatal": self.fatal,
            "message": self.message,
            "cause": repr(self.cause) if self.cause else None,
        }


class ArtifactError(ZkDeployError):
    """A contract artifact could not be read or parsed."""

    kind = ErrorKind.ARTIFACT
    fatal = True


class ProofLibraryError(ZkDeployError):
    """The proof library could not be loaded or does not fit the protocol."""

    kind = ErrorKind.PROOF_LIBRARY
    fatal = True


class DeploymentError(ZkDeployError):
    """A deployment or registration step failed."""

    kind = ErrorKind.DEPLOYMENT
    fatal = False

    def __init__(
        self,
        message: str,
        step: str = "",
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message, cause=cause)
        self.step = step


class TransactionError(ZkDeployError):
    """A confidential transaction submission failed."""

    kind = ErrorKind.TRANSACTION
    fatal = True

    def __init__(
        self,
        message: str,
        method: str = "",
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message, cause=cause)
        self.method = method
