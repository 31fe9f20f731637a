from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class FetchResult:
    """
    Raw output of a fetch backend.
    Transient: handed to the validator and parser, never persisted as-is.
    """
    status_code: Optional[int]
    body: str
    final_url: Optional[str] = None


@dataclass(frozen=True)
class ValidationResult:
    """Verdict of the content validator. `reason` is set only when invalid."""
    valid: bool
    reason: Optional[str] = None
