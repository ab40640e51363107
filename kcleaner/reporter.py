"""
Output reporting module.

Provides the kernel table and the messages shown during deletion.
"""

import sys
from typing import Dict, List
from enum import Enum

from .analyzer import AutoCleanPlan, SafetyAssessment
from .detector import KernelRecord
from .remover import BootloaderResult, BootloaderStatus, DeletionReport, DeletionResult, RemovalStatus


class OutputLevel(Enum):
    """Output verbosity levels."""
    QUIET = 0
    NORMAL = 1
    VERBOSE = 2


class Reporter:
    """
    Handles formatted output for kcleaner operations.

    Informational output follows the verbosity level. The kernel table,
    warnings and errors are always printed.
    """

    def __init__(self, level: OutputLevel = OutputLevel.NORMAL):
        """
        Initialize the reporter.

        Args:
            level: Output verbosity level
        """
        self.level = level

    def info(self, message: str = "") -> None:
        if self.level != OutputLevel.QUIET:
            print(message)

    def debug(self, message: str) -> None:
        if self.level == OutputLevel.VERBOSE:
            print(message)

    def warning(self, message: str) -> None:
        print(message)

    def error(self, message: str) -> None:
        print(f"Error: {message}", file=sys.stderr)

    def print_kernel_table(self, kernels: List[KernelRecord], sizes: Dict[str, str], boot_dir: str) -> None:
        """
        Print the numbered kernel list.

        Args:
            kernels: Kernels, newest first
            sizes: Disk usage per kernel version
            boot_dir: Boot directory, named when nothing was found
        """
        if not kernels:
            print(f"No kernels found in {boot_dir}")
            return

        print(f"Found {len(kernels)} kernel(s):")
        print()
        print("  # | Version                       | Size      | Running")
        print("----+-------------------------------+-----------+---------")
        for number, kernel in enumerate(kernels, start=1):
            print("%3d | %-29s | %-9s | %s" % (
                number,
                kernel.version,
                sizes.get(kernel.version, "Unknown"),
                "Yes" if kernel.is_running else "No",
            ))
        print()

    def print_selection(self, kernels: List[KernelRecord], assessment: SafetyAssessment) -> None:
        """
        Print the kernels about to be deleted and every applicable warning.

        Args:
            kernels: All discovered kernels
            assessment: Safety evaluation of the selection
        """
        print("You are about to delete the following kernels:")
        print()
        for index in assessment.selected:
            kernel = kernels[index]
            suffix = " (RUNNING)" if kernel.is_running else ""
            print(f"  {index + 1}. {kernel.version}{suffix}")
        self.print_safety_warnings(assessment)

    def print_safety_warnings(self, assessment: SafetyAssessment) -> None:
        if assessment.includes_running:
            print()
            print("WARNING: This includes your RUNNING kernel! System may become unbootable!")
        if assessment.deletes_all:
            print()
            print("CRITICAL WARNING: This will delete ALL kernels! Your system will NOT BOOT!")

    def print_auto_clean_plan(self, kernels: List[KernelRecord], plan: AutoCleanPlan) -> None:
        """
        Print what auto-clean will delete and keep.

        Args:
            kernels: All discovered kernels
            plan: Auto-clean selection
        """
        print("Auto-clean will delete the following kernels:")
        print()
        for index in plan.delete:
            print(f"  {index + 1}. {kernels[index].version}")
        print()
        print("Keeping:")
        for index in plan.keep:
            label = "latest kernel" if index == 0 else "running kernel"
            print(f"  - {kernels[index].version} ({label})")

    def print_commands(self, commands: List[List[str]]) -> None:
        """Print the commands a dry run would have executed."""
        for cmd in commands:
            print(f"[DRY RUN] Would execute: {' '.join(cmd)}")

    def print_removal_start(self, index: int, kernel: KernelRecord) -> None:
        self.info(f"Deleting kernel {kernel.version} (index {index + 1})...")

    def print_removal_result(self, result: DeletionResult) -> None:
        """
        Print the outcome of a single kernel removal.

        Args:
            result: Removal result
        """
        version = result.record.version
        if result.status == RemovalStatus.SUCCESS:
            if result.message:
                self.debug(result.message)
            self.info(f"Successfully deleted kernel {version}")
        elif result.status == RemovalStatus.FAILED:
            if result.exit_code is not None:
                print(f"Error deleting kernel {version} (exit code: {result.exit_code})", file=sys.stderr)
            else:
                print(f"Error deleting kernel {version}", file=sys.stderr)
            if result.message:
                print(f"  {result.message}", file=sys.stderr)
        elif result.status == RemovalStatus.SKIPPED:
            print(f"Skipping deletion of running kernel {version} (index {result.index + 1})")

    def print_bootloader_result(self, result: BootloaderResult) -> None:
        if result.status == BootloaderStatus.UPDATED:
            self.info("GRUB configuration updated successfully.")
        elif result.status == BootloaderStatus.FAILED:
            if result.exit_code is not None:
                self.warning(f"Warning: Failed to update GRUB configuration (exit code: {result.exit_code}).")
            else:
                self.warning("Warning: Failed to update GRUB configuration.")
        else:
            self.warning("Note: GRUB update-grub command not found, skipping bootloader update.")

    def print_summary(self, report: DeletionReport) -> None:
        """
        Print final summary statistics.

        Args:
            report: Results of the deletion batch
        """
        if self.level == OutputLevel.QUIET:
            return

        print()
        if report.succeeded > 0:
            print(f"Successfully deleted {report.succeeded} kernel(s).")
        if report.failed > 0:
            print(f"Failed to delete {report.failed} kernel(s).")
        if report.skipped > 0:
            print(f"Skipped {report.skipped} kernel(s).")
