"""Reconciled page domain entity."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ReconciledPage:
    """A document produced by dev-time reconciliation.

    Attributes:
        html: The response body
        status_code: Always 200, also for placeholders
        placeholder: True when no materialized document was found
    """

    html: str
    status_code: int = 200
    placeholder: bool = False
