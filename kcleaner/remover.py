"""
Kernel removal module.

Provides functionality to delete kernel images and module directories,
and to refresh the bootloader configuration afterwards.
"""

import os
import shutil
import subprocess
from typing import Callable, Iterable, List, Optional
from dataclasses import dataclass, field
from enum import Enum

from .detector import KernelRecord, BOOT_DIR, MODULES_DIR
from .utils import find_kernel_files, validate_version


BOOTLOADER_COMMAND = "update-grub"

RUNNING_KERNEL_PROMPT = (
    "WARNING: You are about to delete your RUNNING kernel! "
    "This may cause your system to be unbootable. Are you ABSOLUTELY sure?"
)


class RemovalStatus(Enum):
    """Status of a kernel removal operation."""
    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"


class BootloaderStatus(Enum):
    """Outcome of the bootloader refresh."""
    UPDATED = "updated"
    FAILED = "failed"
    UNAVAILABLE = "unavailable"


@dataclass
class DeletionResult:
    """
    Result of deleting a single kernel.

    Attributes:
        index: Zero-based position of the kernel in the list
        record: The kernel concerned
        status: Outcome of the removal
        exit_code: Exit status of the failing removal step, if any
        message: Error description or removal command output
    """
    index: int
    record: KernelRecord
    status: RemovalStatus
    exit_code: Optional[int] = None
    message: str = ""


@dataclass
class BootloaderResult:
    """Outcome of the bootloader refresh and the exit status of the command."""
    status: BootloaderStatus
    exit_code: Optional[int] = None


@dataclass
class DeletionReport:
    """
    Aggregated results of a deletion batch.

    Attributes:
        results: One entry per selected kernel, in deletion order
        bootloader: Bootloader refresh outcome, None if it was not run
    """
    results: List[DeletionResult] = field(default_factory=list)
    bootloader: Optional[BootloaderResult] = None

    def count(self, status: RemovalStatus) -> int:
        return sum(1 for result in self.results if result.status == status)

    @property
    def succeeded(self) -> int:
        return self.count(RemovalStatus.SUCCESS)

    @property
    def failed(self) -> int:
        return self.count(RemovalStatus.FAILED)

    @property
    def skipped(self) -> int:
        return self.count(RemovalStatus.SKIPPED)


def check_sudo() -> bool:
    """
    Check if the current process has root privileges.

    Returns:
        bool: True if running with sudo/root, False otherwise
    """
    try:
        # On Unix systems, root has UID 0
        return os.geteuid() == 0
    except AttributeError:
        # os.geteuid() not available on Windows
        return False


def generate_removal_commands(
    version: str,
    boot_dir: str = BOOT_DIR,
    modules_dir: str = MODULES_DIR,
) -> List[List[str]]:
    """
    Generate the commands deleting a kernel's files.

    The first command removes every boot file containing the version, the
    second removes the module directory. Paths are passed as separate
    arguments, never through a shell.

    Args:
        version: Kernel version string
        boot_dir: Boot directory
        modules_dir: Root of the kernel module directories

    Returns:
        List[List[str]]: Commands as lists of arguments

    Raises:
        ValueError: If the version is not safe to use
    """
    validate_version(version)

    commands = []
    boot_files = find_kernel_files(version, boot_dir)
    if boot_files:
        commands.append(["rm", "-vf", "--"] + boot_files)
    commands.append(["rm", "-vrf", "--", os.path.join(modules_dir, version)])
    return commands


def remove_kernel(
    index: int,
    record: KernelRecord,
    boot_dir: str = BOOT_DIR,
    modules_dir: str = MODULES_DIR,
) -> DeletionResult:
    """
    Delete a kernel's boot files and module directory.

    Commands run in order and stop at the first failure.

    Args:
        index: Zero-based position of the kernel in the list
        record: Kernel to delete
        boot_dir: Boot directory
        modules_dir: Root of the kernel module directories

    Returns:
        DeletionResult: SUCCESS, or FAILED with the exit status and error
    """
    try:
        commands = generate_removal_commands(record.version, boot_dir, modules_dir)
    except ValueError as e:
        return DeletionResult(index, record, RemovalStatus.FAILED, message=str(e))

    output = []
    for cmd in commands:
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, check=False)
        except OSError as e:
            return DeletionResult(index, record, RemovalStatus.FAILED,
                                  message=f"Failed to execute {cmd[0]}: {e}")

        output.append(result.stdout)
        if result.returncode != 0:
            return DeletionResult(index, record, RemovalStatus.FAILED,
                                  exit_code=result.returncode,
                                  message=result.stderr.strip())

    return DeletionResult(index, record, RemovalStatus.SUCCESS,
                          exit_code=0, message="".join(output).strip())


def update_bootloader(command: str = BOOTLOADER_COMMAND) -> BootloaderResult:
    """
    Regenerate the bootloader configuration.

    A missing bootloader tool is not an error, it is reported as UNAVAILABLE.

    Args:
        command: Name of the bootloader refresh program

    Returns:
        BootloaderResult: Outcome of the refresh
    """
    if shutil.which(command) is None:
        return BootloaderResult(BootloaderStatus.UNAVAILABLE)

    try:
        # Output stays visible to the user
        result = subprocess.run([command], check=False)
    except OSError:
        return BootloaderResult(BootloaderStatus.FAILED)

    if result.returncode == 0:
        return BootloaderResult(BootloaderStatus.UPDATED, exit_code=0)
    return BootloaderResult(BootloaderStatus.FAILED, exit_code=result.returncode)


def delete_kernels(
    kernels: List[KernelRecord],
    selection: Iterable[int],
    confirm: Callable[[str], bool],
    remove: Callable[[int, KernelRecord], DeletionResult],
    refresh: Callable[[], BootloaderResult],
    on_start: Optional[Callable[[int, KernelRecord], None]] = None,
) -> DeletionReport:
    """
    Delete an approved selection of kernels.

    Kernels are processed in ascending index order. The running kernel needs
    its own confirmation; declining skips only that kernel. A failed removal
    does not stop the batch. The bootloader is refreshed once at the end if
    at least one kernel was actually deleted.

    Args:
        kernels: All discovered kernels
        selection: Zero-based indices approved for deletion
        confirm: Asks the operator a yes/no question
        remove: Deletes one kernel
        refresh: Regenerates the bootloader configuration
        on_start: Called before each removal starts

    Returns:
        DeletionReport: Per-kernel results and the bootloader outcome
    """
    report = DeletionReport()

    for index in sorted(set(selection)):
        record = kernels[index]

        if record.is_running and not confirm(RUNNING_KERNEL_PROMPT):
            report.results.append(DeletionResult(index, record, RemovalStatus.SKIPPED))
            continue

        if on_start is not None:
            on_start(index, record)
        report.results.append(remove(index, record))

    if report.succeeded > 0:
        report.bootloader = refresh()

    return report
