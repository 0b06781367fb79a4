"""
Error taxonomy for the commitment benchmark.
Every error aborts the current run; nothing is recovered locally.
"""
import typing as t


class CommitBenchError(Exception):
    """Base class for all benchmark failures."""


class ConfigurationError(CommitBenchError):
    """
    The workload cannot be committed under the settlement limits,
    e.g. a single transaction is larger than MAX_ROOT_SIZE.
    """


class SubmissionError(CommitBenchError):
    """
    The settlement layer rejected a root or block commitment.

    Carries the identity of the payload that triggered the rejection so the
    caller can decide what to resubmit.
    """

    def __init__(
        self,
        message: str,
        chunk_index: t.Optional[int] = None,
        block_index: t.Optional[int] = None,
        reason: t.Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.chunk_index = chunk_index
        self.block_index = block_index
        self.reason = reason

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.chunk_index is not None:
            parts.append(f"chunk={self.chunk_index}")
        if self.block_index is not None:
            parts.append(f"block={self.block_index}")
        if self.reason:
            parts.append(f"reason={self.reason}")
        return " ".join(parts)


class TransportError(CommitBenchError):
    """The settlement node is unreachable or a confirmation never arrived."""


class PipelineStateError(CommitBenchError):
    """A pipeline stage was entered before the previous one completed."""
