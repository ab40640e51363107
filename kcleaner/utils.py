"""
Utility functions.

Shared helpers wrapping the external programs and the operator prompt.
"""

import glob
import os
import re
import subprocess
from typing import Callable, List, Optional, Tuple


UNKNOWN_SIZE = "Unknown"

_SAFE_VERSION = re.compile(r'^[A-Za-z0-9][A-Za-z0-9._+~-]*$')


def run_command(cmd: List[str], check: bool = True) -> Tuple[int, str, str]:
    """
    Run a command and capture output.

    Args:
        cmd: Command as list of arguments
        check: If True, raise exception on non-zero exit code

    Returns:
        Tuple[int, str, str]: (exit_code, stdout, stderr)

    Raises:
        subprocess.CalledProcessError: If check=True and command fails
    """
    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            check=check,
        )
        return result.returncode, result.stdout, result.stderr
    except subprocess.CalledProcessError as e:
        if check:
            raise
        return e.returncode, e.stdout or "", e.stderr or ""


def validate_version(version: str) -> None:
    """
    Make sure a kernel version is safe to use in file patterns and commands.

    Args:
        version: Kernel version string

    Raises:
        ValueError: If the version contains unexpected characters
    """
    if not _SAFE_VERSION.match(version) or ".." in version:
        raise ValueError(f"Refusing to handle unsafe kernel version: {version!r}")


def find_kernel_files(version: str, boot_dir: str) -> List[str]:
    """
    Find every file in the boot directory belonging to a kernel version.

    A file belongs to the version when its name is '<prefix>-<version>' or
    '<prefix>-<version>.img' with a hyphen-free prefix, like 'vmlinuz-<v>',
    'initrd.img-<v>', 'initrd-<v>.img', 'System.map-<v>' and 'config-<v>'.
    Files of a longer version sharing the same start (e.g. '<v>-custom')
    are not matched.

    Args:
        version: Kernel version string
        boot_dir: Boot directory

    Returns:
        List[str]: Matching paths, sorted
    """
    owned = re.compile(r'^[A-Za-z][A-Za-z0-9._]*-' + re.escape(version) + r'(\.img)?$')
    pattern = os.path.join(glob.escape(boot_dir), "*" + glob.escape(version) + "*")
    return sorted(path for path in glob.glob(pattern) if owned.match(os.path.basename(path)))


def get_kernel_size(version: str, boot_dir: str, modules_dir: str) -> str:
    """
    Report the disk space used by a kernel's boot files and modules.

    Only used for display; any failure yields 'Unknown'.

    Args:
        version: Kernel version string
        boot_dir: Boot directory
        modules_dir: Root of the kernel module directories

    Returns:
        str: Human-readable size as printed by du (e.g., '312M')
    """
    try:
        validate_version(version)
    except ValueError:
        return UNKNOWN_SIZE

    paths = find_kernel_files(version, boot_dir)
    module_path = os.path.join(modules_dir, version)
    if os.path.isdir(module_path):
        paths.append(module_path)
    if not paths:
        return UNKNOWN_SIZE

    try:
        returncode, stdout, _ = run_command(["du", "-sch", "--"] + paths, check=False)
    except OSError:
        return UNKNOWN_SIZE
    if returncode != 0:
        return UNKNOWN_SIZE

    for line in reversed(stdout.splitlines()):
        fields = line.split()
        if len(fields) >= 2 and fields[-1] == "total":
            return fields[0]
    return UNKNOWN_SIZE


def ask_yes_no(message: str, input_func: Optional[Callable[[str], str]] = None) -> bool:
    """
    Ask the operator a yes/no question.

    The answer is affirmative only if it starts with 'y' or 'Y'. Anything
    else, including a failure to read input, is a decline.

    Args:
        message: Question to display
        input_func: Function reading one line of input (defaults to input())

    Returns:
        bool: True if the operator confirmed
    """
    if input_func is None:
        input_func = input

    try:
        response = input_func(f"{message} (y/N): ")
    except (EOFError, OSError):
        print("\nError reading input.")
        return False

    return response[:1] in ("y", "Y")
