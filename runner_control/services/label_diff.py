"""
Label / Set Differ

Pure functions, no I/O. Computes what a full-replacement update has to send
for a list-valued attribute (runner labels, group repositories, group runners)
while protecting elements that may never be removed, such as read-only runner
labels.

The remote "set" operations replace the whole collection, so the result is
always the complete desired set and never a list of additions/removals.
"""

from dataclasses import dataclass, field
from typing import Hashable, Iterable, List, Optional, Sequence

from runner_control.core.errors import ValidationError


@dataclass(frozen=True)
class LabelDiff:
    to_keep: List[Hashable] = field(default_factory=list)
    to_send: List[Hashable] = field(default_factory=list)
    rejected: List[Hashable] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.rejected

    def raise_for_rejected(self, step: Optional[str] = None) -> None:
        if self.rejected:
            names = ", ".join(str(item) for item in self.rejected)
            raise ValidationError(
                f"Read-only labels cannot be removed: {names}",
                rejected=[str(item) for item in self.rejected],
                step=step,
            )


def _unique(items: Iterable[Hashable]) -> List[Hashable]:
    seen = set()
    result = []
    for item in items:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result


def diff_labels(
    previous: Iterable[Hashable],
    desired: Iterable[Hashable],
    protected: Iterable[Hashable],
) -> LabelDiff:
    """
    Diff a list-valued attribute against its protected elements.

    Args:
        previous: Elements currently present on the remote entity
        desired: Complete desired collection
        protected: Elements that can never be removed once present

    Returns:
        LabelDiff. ``rejected`` lists protected elements of ``previous`` missing
        from ``desired``; when non-empty the whole update must be aborted and
        ``to_send``/``to_keep`` are empty. Otherwise ``to_send`` is ``desired``
        minus ``protected`` (caller order kept) and ``to_keep`` the protected
        elements the remote system retains on its own.
    """
    previous_set = set(previous)
    desired_list = list(desired)
    desired_set = set(desired_list)
    protected_list = _unique(protected)
    protected_set = set(protected_list)

    rejected = sorted(
        (item for item in protected_list if item in previous_set and item not in desired_set),
        key=str,
    )
    if rejected:
        return LabelDiff(rejected=rejected)

    return LabelDiff(
        to_keep=[item for item in protected_list if item in previous_set],
        to_send=[item for item in desired_list if item not in protected_set],
    )


def set_changed(previous: Sequence[Hashable], desired: Sequence[Hashable]) -> bool:
    """True if two collections differ as sets (order and duplicates ignored)."""
    return set(previous or []) != set(desired or [])
