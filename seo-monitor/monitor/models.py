from dataclasses import dataclass, field
from typing import Iterable, Optional, Tuple

from detection.models import Change
from snapshots.models import PageSnapshot


@dataclass(frozen=True)
class ScrapeOutcome:
    """
    Per-URL scrape result.
    INVARIANT: exactly one of `snapshot` / `error` is set.
    """
    url: str
    snapshot: Optional[PageSnapshot] = None
    error: Optional[str] = None

    def __post_init__(self):
        if (self.snapshot is None) == (self.error is None):
            raise ValueError("ScrapeOutcome needs exactly one of snapshot or error")

    @property
    def ok(self) -> bool:
        return self.snapshot is not None


@dataclass(frozen=True)
class Comparison:
    """Either a first-scrape marker or a non-empty list of changes."""
    url: str
    changes: Tuple[Change, ...] = field(default_factory=tuple)
    first_scrape: bool = False


@dataclass(frozen=True)
class UrlResult:
    outcome: ScrapeOutcome
    comparison: Optional[Comparison] = None


@dataclass(frozen=True)
class RunReport:
    """
    Immutable result of one monitoring run, folded from independent per-URL
    results. Failures are a distinct category, never dropped.
    """
    outcomes: Tuple[ScrapeOutcome, ...] = field(default_factory=tuple)
    comparisons: Tuple[Comparison, ...] = field(default_factory=tuple)

    @classmethod
    def fold(cls, results: Iterable[UrlResult]) -> "RunReport":
        outcomes = []
        comparisons = []
        for result in results:
            outcomes.append(result.outcome)
            if result.comparison is not None:
                comparisons.append(result.comparison)
        return cls(tuple(outcomes), tuple(comparisons))

    @property
    def snapshots(self) -> Tuple[PageSnapshot, ...]:
        return tuple(o.snapshot for o in self.outcomes if o.ok)

    @property
    def failures(self) -> Tuple[ScrapeOutcome, ...]:
        return tuple(o for o in self.outcomes if not o.ok)
