"""
Kernel analysis module.

Evaluates a pending deletion against the safety rules and computes the
automatic cleanup selection.
"""

from typing import Iterable, List, Optional
from dataclasses import dataclass, field

from .detector import KernelRecord


# Auto-clean keeps the latest and the running kernel, so it needs at least
# one more kernel than that to have anything to do.
MIN_KERNELS_FOR_AUTO_CLEAN = 3


@dataclass
class SafetyAssessment:
    """
    Safety evaluation of a pending deletion.

    Attributes:
        selected: Zero-based indices to delete, ascending
        includes_running: True if the running kernel is among them
        deletes_all: True if every installed kernel is selected
    """
    selected: List[int]
    includes_running: bool
    deletes_all: bool

    @property
    def requires_confirmation(self) -> bool:
        """Deletion is never silent: any non-empty selection must be confirmed."""
        return bool(self.selected)


@dataclass
class AutoCleanPlan:
    """
    Result of the auto-clean selection rule.

    Attributes:
        delete: Zero-based indices to delete, ascending
        keep: Zero-based indices retained (latest first, then running)
        reason: Why nothing was selected, if auto-clean is a no-op
    """
    delete: List[int] = field(default_factory=list)
    keep: List[int] = field(default_factory=list)
    reason: Optional[str] = None


def find_running_index(kernels: List[KernelRecord]) -> Optional[int]:
    """
    Locate the running kernel.

    Args:
        kernels: Kernel records

    Returns:
        Optional[int]: Index of the running kernel, or None if not installed
    """
    for index, kernel in enumerate(kernels):
        if kernel.is_running:
            return index
    return None


def assess_selection(kernels: List[KernelRecord], selection: Iterable[int]) -> SafetyAssessment:
    """
    Classify a pending deletion against the safety rules.

    Args:
        kernels: All discovered kernels
        selection: Zero-based indices proposed for deletion

    Returns:
        SafetyAssessment: Flags describing which warnings apply

    Raises:
        ValueError: If an index lies outside the kernel list
    """
    selected = sorted(set(selection))
    for index in selected:
        if index < 0 or index >= len(kernels):
            raise ValueError(f"Invalid kernel index: {index}")

    includes_running = any(kernels[index].is_running for index in selected)
    deletes_all = bool(kernels) and len(selected) == len(kernels)

    return SafetyAssessment(
        selected=selected,
        includes_running=includes_running,
        deletes_all=deletes_all,
    )


def plan_auto_clean(kernels: List[KernelRecord]) -> AutoCleanPlan:
    """
    Select kernels for automatic cleanup.

    The list must be sorted newest first. Index 0 (the latest kernel) and
    the running kernel, if installed, are kept; every other kernel is
    selected. With two kernels or fewer nothing is selected and the plan
    carries the reason.

    Args:
        kernels: All discovered kernels, newest first

    Returns:
        AutoCleanPlan: Indices to delete and to keep
    """
    if len(kernels) < MIN_KERNELS_FOR_AUTO_CLEAN:
        return AutoCleanPlan(
            reason=(
                f"Not enough kernels to clean. You have {len(kernels)} kernel(s) installed.\n"
                "Auto-clean keeps at least the running kernel and the latest kernel."
            ),
        )

    keep = [0]
    running_index = find_running_index(kernels)
    if running_index is not None and running_index != 0:
        keep.append(running_index)

    delete = [index for index in range(len(kernels)) if index not in keep]
    return AutoCleanPlan(delete=delete, keep=keep)
