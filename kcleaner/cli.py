"""
Command-line interface for kcleaner.

Provides argument parsing and orchestrates the list, delete and
auto-clean workflows.
"""

import sys
import argparse
from typing import Dict, List, Optional

from . import __version__
from .detector import KernelRecord, get_running_kernel, get_installed_kernels, BOOT_DIR, MODULES_DIR, PROC_VERSION
from .selection import parse_selection, SelectionError
from .analyzer import assess_selection, plan_auto_clean, SafetyAssessment
from .remover import (
    check_sudo,
    delete_kernels,
    generate_removal_commands,
    remove_kernel,
    update_bootloader,
    BootloaderResult,
)
from .reporter import Reporter, OutputLevel
from .utils import ask_yes_no, get_kernel_size


class _ArgumentError(Exception):
    pass


class _HelpOnErrorParser(argparse.ArgumentParser):
    """Argument parser raising instead of exiting, so bad usage shows the help text."""

    def error(self, message):
        raise _ArgumentError(message)


def create_parser() -> argparse.ArgumentParser:
    """
    Create and configure the argument parser.

    Returns:
        argparse.ArgumentParser: Configured argument parser
    """
    parser = _HelpOnErrorParser(
        prog="kcleaner",
        description="A tool for managing Linux kernel installations",
        epilog=(
            "Examples:\n"
            "  kcleaner -l\n"
            "  kcleaner -d 2,4,7\n"
            "  kcleaner -d 1-3,5,8-10\n"
            "  kcleaner -a\n"
            "\n"
            "Note: Root privileges required for kernel deletion"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
    )

    operation = parser.add_mutually_exclusive_group()
    operation.add_argument(
        "-l", "--list",
        action="store_true",
        help="List all installed kernels",
    )
    operation.add_argument(
        "-d", "--delete",
        metavar="SELECTION",
        help="Delete kernels by their numbers (e.g., -d 1,3,5-7)",
    )
    operation.add_argument(
        "-a", "--auto",
        action="store_true",
        help="Auto-clean: removes all kernels except running and latest",
    )
    operation.add_argument(
        "-h", "--help",
        action="store_true",
        help="Display this help message",
    )
    operation.add_argument(
        "--version",
        action="store_true",
        help="Display the program version",
    )

    parser.add_argument(
        "-n", "--dry-run",
        action="store_true",
        help="Show what would be deleted without deleting anything",
    )

    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )
    verbosity.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress non-essential output",
    )

    parser.add_argument(
        "--numeric-sort",
        action="store_true",
        help="Order versions numerically (5.10 after 5.9) instead of as plain text",
    )
    parser.add_argument(
        "--boot-dir",
        default=BOOT_DIR,
        help=f"Directory holding kernel images (default: {BOOT_DIR})",
    )
    parser.add_argument(
        "--modules-dir",
        default=MODULES_DIR,
        help=f"Directory holding kernel modules (default: {MODULES_DIR})",
    )

    return parser


def _setup_reporter(args) -> Reporter:
    """
    Set up reporter based on command-line arguments.

    Args:
        args: Parsed command-line arguments

    Returns:
        Reporter: Configured reporter instance
    """
    if args.quiet:
        output_level = OutputLevel.QUIET
    elif args.verbose:
        output_level = OutputLevel.VERBOSE
    else:
        output_level = OutputLevel.NORMAL

    return Reporter(output_level)


def _discover(args, reporter: Reporter) -> List[KernelRecord]:
    """
    Detect the running kernel and the installed kernels.

    Discovery problems are reported and leave an empty list.

    Args:
        args: Parsed command-line arguments
        reporter: Reporter instance for output

    Returns:
        List[KernelRecord]: Kernels, newest first
    """
    reporter.debug("Detecting running kernel...")
    running_version = get_running_kernel(PROC_VERSION)
    if running_version:
        reporter.debug(f"Running kernel: {running_version}")
    else:
        reporter.warning(
            f"Warning: Could not determine the running kernel from {PROC_VERSION}; "
            "no kernel will be marked as running."
        )

    reporter.debug(f"Scanning {args.boot_dir}...")
    try:
        kernels = get_installed_kernels(args.boot_dir, running_version, numeric=args.numeric_sort)
    except RuntimeError as e:
        reporter.error(str(e))
        return []

    reporter.debug(f"Found {len(kernels)} kernel image(s)")
    return kernels


def _list_kernels(args, reporter: Reporter, kernels: List[KernelRecord]) -> None:
    sizes: Dict[str, str] = {
        kernel.version: get_kernel_size(kernel.version, args.boot_dir, args.modules_dir)
        for kernel in kernels
    }
    reporter.print_kernel_table(kernels, sizes, args.boot_dir)


def _require_root(args, reporter: Reporter) -> bool:
    """
    Verify root privileges before any deletion.

    Dry runs do not need them.

    Returns:
        bool: True if the operation may go on
    """
    if args.dry_run or check_sudo():
        return True
    reporter.error("Root privileges required for kernel deletion.")
    print("Please run with sudo: sudo kcleaner -d ...", file=sys.stderr)
    return False


def _refresh_bootloader(reporter: Reporter) -> BootloaderResult:
    reporter.info("Updating GRUB bootloader configuration...")
    return update_bootloader()


def _execute(args, reporter: Reporter, kernels: List[KernelRecord], assessment: SafetyAssessment,
             cancel_message: str, done_message: str) -> None:
    """
    Confirm and run an assessed deletion.

    Args:
        args: Parsed command-line arguments
        reporter: Reporter instance for output
        kernels: All discovered kernels
        assessment: Safety evaluation of the selection
        cancel_message: Printed when the operator declines
        done_message: Printed once the batch has run
    """
    if args.dry_run:
        for index in assessment.selected:
            try:
                commands = generate_removal_commands(kernels[index].version, args.boot_dir, args.modules_dir)
            except ValueError as e:
                reporter.error(str(e))
                continue
            reporter.print_commands(commands)
        print("[DRY RUN] No kernels were deleted.")
        return

    if assessment.requires_confirmation and not ask_yes_no("\nProceed with deletion?"):
        print(cancel_message)
        return

    report = delete_kernels(
        kernels,
        assessment.selected,
        confirm=ask_yes_no,
        remove=lambda index, record: remove_kernel(index, record, args.boot_dir, args.modules_dir),
        refresh=lambda: _refresh_bootloader(reporter),
        on_start=reporter.print_removal_start,
    )

    for result in report.results:
        reporter.print_removal_result(result)

    reporter.info()
    reporter.info(done_message)
    reporter.print_summary(report)

    if report.bootloader is not None:
        reporter.print_bootloader_result(report.bootloader)


def _handle_delete(args, reporter: Reporter, kernels: List[KernelRecord]) -> None:
    """
    Handle the manual deletion workflow.

    Args:
        args: Parsed command-line arguments
        reporter: Reporter instance for output
        kernels: All discovered kernels
    """
    if not _require_root(args, reporter):
        return

    try:
        selection = parse_selection(args.delete, len(kernels))
    except SelectionError as e:
        reporter.error(str(e))
        return

    if not selection:
        print("No kernels selected for deletion.")
        return

    assessment = assess_selection(kernels, selection)
    reporter.print_selection(kernels, assessment)
    _execute(args, reporter, kernels, assessment, "Deletion cancelled.", "Deletion completed.")


def _handle_auto(args, reporter: Reporter, kernels: List[KernelRecord]) -> None:
    """
    Handle the auto-clean workflow.

    Args:
        args: Parsed command-line arguments
        reporter: Reporter instance for output
        kernels: All discovered kernels
    """
    if not _require_root(args, reporter):
        return

    plan = plan_auto_clean(kernels)
    if plan.reason:
        print(plan.reason)
        return

    assessment = assess_selection(kernels, plan.delete)
    reporter.print_auto_clean_plan(kernels, plan)
    reporter.print_safety_warnings(assessment)
    _execute(args, reporter, kernels, assessment, "Auto-clean cancelled.", "Auto-clean completed.")


def main(argv: Optional[list] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        int: Always 0; problems are reported as text
    """
    parser = create_parser()

    if argv is None:
        argv = sys.argv[1:]

    try:
        args = parser.parse_args(argv)
    except _ArgumentError:
        parser.print_help()
        return 0

    if args.version:
        print(f"kcleaner {__version__}")
        return 0

    if args.help or not (args.list or args.delete is not None or args.auto):
        parser.print_help()
        return 0

    reporter = _setup_reporter(args)

    try:
        kernels = _discover(args, reporter)
        _list_kernels(args, reporter, kernels)

        if args.delete is not None:
            _handle_delete(args, reporter, kernels)
        elif args.auto:
            _handle_auto(args, reporter, kernels)

    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
    except Exception as e:
        reporter.error(str(e))
        if args.verbose:
            import traceback
            traceback.print_exc()

    return 0


if __name__ == "__main__":
    sys.exit(main())
