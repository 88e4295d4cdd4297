"""Reconciliation models — probe outcomes, retry policy and results."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from bundlewright.errors import BundleError
from bundlewright.models.staging import StagedArtifactFile


class ProbeResult(str, Enum):
    """Outcome of one remote existence check."""

    FOUND = "found"
    NOT_FOUND = "not_found"
    INDETERMINATE = "indeterminate"


class RetryPolicy(BaseModel):
    """Retry and concurrency bounds for a reconciliation pass.

    Each staged file is probed at most ``1 + max_retries`` times, with
    ``retry_delay_seconds`` between attempts. At most ``max_concurrency``
    probes are in flight at once.
    """

    model_config = ConfigDict(frozen=True)

    max_retries: int = Field(default=3, ge=0)
    retry_delay_seconds: float = Field(default=0.5, ge=0.0)
    max_concurrency: int = Field(default=8, ge=1)

    @property
    def max_attempts(self) -> int:
        return 1 + self.max_retries


class ReconciliationResult(BaseModel):
    """Partitioned outcome of a reconciliation pass.

    ``needs_upload`` and ``found`` preserve the input order. ``errors``
    holds a ``ProbeIndeterminateError`` for each file whose status could
    not be determined after every retry, and the naming error for each
    file whose remote key could not be built; such files are in neither
    bucket. ``pending`` holds files left unresolved because the pass was
    cancelled.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    needs_upload: list[StagedArtifactFile] = []
    found: list[StagedArtifactFile] = []
    errors: list[BundleError] = []
    pending: list[StagedArtifactFile] = []
    cancelled: bool = False

    @property
    def complete(self) -> bool:
        """True when every staged file was resolved."""
        return not self.cancelled and not self.errors and not self.pending
