"""
kcleaner - Linux Kernel Cleanup Tool

A small command-line utility to list the kernel images installed in /boot,
identify the running one, and remove obsolete images either by index
selection or automatically, followed by a bootloader configuration refresh.
"""

__version__ = "0.1.0"
__author__ = "kcleaner Contributors"
__license__ = "MIT"

from .cli import main

__all__ = ["main"]
