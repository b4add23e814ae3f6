"""
Exception hierarchy for the L2 proof toolkit.

Exception Categories:
- RetryableException: Transient failures that may succeed on retry (RPC, network)
- NonRetryableException: Permanent failures that won't benefit from retry (bad data)
- ConfigurationException: Startup/config errors that prevent operation

Proof construction errors are categorized:
- StateRootNotFound -> NonRetryableException (nothing committed yet, retry later)
- EmptySlotUnsupported -> NonRetryableException (proof-of-absence not supported)
- IncompleteLongValueProof -> NonRetryableException (verifier could not reassemble)
- TrieProofQueryFailed -> RetryableException (L2 node query failures)
- CommitmentQueryFailed -> RetryableException (L1 commitment query failures)
- ProofStageTimeout -> RetryableException (a network stage ran out of time)
"""

from typing import Optional


class RetryableException(Exception):
    """
    Base class for exceptions that may succeed on retry.

    Use for transient failures like:
    - RPC timeouts
    - Rate limiting
    - Malformed responses from a node under load
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NonRetryableException(Exception):
    """
    Base class for exceptions that won't benefit from retry.

    Use for permanent failures like:
    - Invalid input data
    - Missing on-chain data
    - Unsupported storage states
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationException(NonRetryableException):
    """
    Exception for configuration/startup errors.

    Use when:
    - Required environment variables are missing
    - Invalid configuration values
    - Missing required resources (ABIs)
    """

    pass


class StateRootNotFound(NonRetryableException):
    """
    No committed batch (or an empty batch) at lookup time.

    Callers should retry later, once the batch submitter has appended
    a new batch, not immediately.
    """

    pass


class EmptySlotUnsupported(NonRetryableException):
    """The primary slot holds the all-zero word; proof-of-absence is not built."""

    def __init__(self, slot_key: str):
        super().__init__(
            f"Storage slot {slot_key} is empty, proving an absent record is not supported"
        )
        self.slot_key = slot_key


class IncompleteLongValueProof(NonRetryableException):
    """
    A long-form value is missing proofs for one or more continuation slots.

    A bundle with a subset of continuation slots cannot be reassembled
    by the verifier, so it is never returned.
    """

    def __init__(self, message: str, expected: int = 0, received: int = 0):
        super().__init__(message)
        self.expected = expected
        self.received = received


class TrieProofQueryFailed(RetryableException):
    """
    Exception for eth_getProof failures against the L2 node.

    Covers both transport errors and malformed responses.
    """

    def __init__(
        self, message: str, block_number: Optional[int] = None
    ):
        super().__init__(message)
        self.block_number = block_number


class CommitmentQueryFailed(RetryableException):
    """Exception for failed reads of the L1 State Commitment Chain."""

    pass


class ProofStageTimeout(RetryableException):
    """A network-bound stage did not complete within the stage timeout."""

    def __init__(self, stage: str, timeout: float):
        super().__init__(f"Stage '{stage}' timed out after {timeout:.1f}s")
        self.stage = stage
        self.timeout = timeout
