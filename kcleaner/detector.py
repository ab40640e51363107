"""
Kernel detection module.

Provides functionality to detect the currently running kernel and
discover all kernel images installed in the boot directory.
"""

import os
import re
from typing import List
from dataclasses import dataclass


PROC_VERSION = "/proc/version"
BOOT_DIR = "/boot"
MODULES_DIR = "/lib/modules"
IMAGE_PREFIX = "vmlinuz-"

_PROC_VERSION_PATTERN = re.compile(r'Linux version (\S+)\s')
_DIGITS = re.compile(r'(\d+)')


@dataclass(frozen=True)
class KernelRecord:
    """
    A kernel image found in the boot directory.

    Attributes:
        version: Kernel version string (e.g., '5.15.0-76-generic')
        image_path: Full path of the boot image (e.g., '/boot/vmlinuz-5.15.0-76-generic')
        is_running: True if this is the currently running kernel
    """
    version: str
    image_path: str
    is_running: bool = False


def parse_proc_version(text: str) -> str:
    """
    Extract the kernel version from a /proc/version line.

    Args:
        text: Contents of /proc/version
            (e.g., 'Linux version 5.15.0-76-generic (buildd@lcy02) ...')

    Returns:
        str: Kernel version, or an empty string if the line is not recognised
    """
    line = text.splitlines()[0] if text else ""
    match = _PROC_VERSION_PATTERN.search(line)
    if not match:
        return ""
    return match.group(1)


def get_running_kernel(proc_version: str = PROC_VERSION) -> str:
    """
    Detect the currently running kernel version.

    Reading failures are not fatal: an empty string is returned, which
    matches no installed kernel, so nothing is marked as running.

    Args:
        proc_version: Path of the kernel identity file

    Returns:
        str: Running kernel version string, or '' if it cannot be determined
    """
    try:
        with open(proc_version, encoding="utf-8", errors="replace") as f:
            return parse_proc_version(f.readline())
    except OSError:
        return ""


def version_sort_key(version: str) -> list:
    """
    Natural sort key for a kernel version.

    Digit runs compare as integers so that '5.10.0' sorts above '5.9.0'.
    """
    return [(1, int(part), "") if part.isdigit() else (0, 0, part)
            for part in _DIGITS.split(version) if part]


def sort_kernels(kernels: List[KernelRecord], numeric: bool = False) -> List[KernelRecord]:
    """
    Sort kernels newest first.

    By default versions are compared as plain strings, so '5.9.0' is
    considered newer than '5.10.0'. With numeric=True a natural ordering is
    used instead, falling back to the plain string on ties.

    Args:
        kernels: Kernel records to sort
        numeric: Compare digit runs numerically

    Returns:
        List[KernelRecord]: New list sorted by version, descending
    """
    if numeric:
        return sorted(kernels, key=lambda k: (version_sort_key(k.version), k.version), reverse=True)
    return sorted(kernels, key=lambda k: k.version, reverse=True)


def get_installed_kernels(
    boot_dir: str = BOOT_DIR,
    running_version: str = "",
    numeric: bool = False,
) -> List[KernelRecord]:
    """
    Get list of all kernel images installed in the boot directory.

    Every entry named 'vmlinuz-<version>' becomes one record. The record
    whose version equals running_version is marked as running.

    Args:
        boot_dir: Directory holding the boot images
        running_version: Version of the running kernel ('' matches nothing)
        numeric: Use natural version ordering instead of plain string ordering

    Returns:
        List[KernelRecord]: Kernel records, newest first

    Raises:
        RuntimeError: If the boot directory cannot be read
    """
    try:
        entries = os.listdir(boot_dir)
    except OSError as e:
        raise RuntimeError(f"Failed to open {boot_dir} directory: {e}")

    kernels = []
    for name in entries:
        if not name.startswith(IMAGE_PREFIX):
            continue
        version = name[len(IMAGE_PREFIX):]
        if not version:
            continue
        kernels.append(KernelRecord(
            version=version,
            image_path=os.path.join(boot_dir, name),
            is_running=bool(running_version) and version == running_version,
        ))

    return sort_kernels(kernels, numeric=numeric)
