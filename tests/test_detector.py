"""
Unit tests for the detector module.

Tests running kernel detection and boot directory scanning.
"""

import os
import tempfile
import unittest

from kcleaner.detector import (
    get_running_kernel,
    get_installed_kernels,
    parse_proc_version,
    sort_kernels,
    version_sort_key,
    KernelRecord,
)


PROC_VERSION_LINE = (
    "Linux version 5.15.0-76-generic (buildd@lcy02-amd64-019) "
    "(gcc (Ubuntu 11.3.0-1ubuntu1~22.04.1) 11.3.0) #83-Ubuntu SMP Thu Jun 15 19:16:32 UTC 2023\n"
)


def _touch(directory, name):
    with open(os.path.join(directory, name), "w") as f:
        f.write("x")


class TestParseProcVersion(unittest.TestCase):
    """Tests for parse_proc_version function."""

    def test_parse_ubuntu_line(self):
        self.assertEqual(parse_proc_version(PROC_VERSION_LINE), "5.15.0-76-generic")

    def test_parse_missing_marker(self):
        self.assertEqual(parse_proc_version("something else entirely\n"), "")

    def test_parse_version_without_trailing_space(self):
        """The version must be followed by whitespace to be recognised."""
        self.assertEqual(parse_proc_version("Linux version 6.1.0"), "")

    def test_parse_empty(self):
        self.assertEqual(parse_proc_version(""), "")


class TestGetRunningKernel(unittest.TestCase):
    """Tests for get_running_kernel function."""

    def test_get_running_kernel_success(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "version")
            with open(path, "w") as f:
                f.write(PROC_VERSION_LINE)

            self.assertEqual(get_running_kernel(path), "5.15.0-76-generic")

    def test_get_running_kernel_unreadable(self):
        """An unreadable identity file degrades to an empty version."""
        with tempfile.TemporaryDirectory() as tmp:
            result = get_running_kernel(os.path.join(tmp, "missing"))

        self.assertEqual(result, "")


class TestGetInstalledKernels(unittest.TestCase):
    """Tests for get_installed_kernels function."""

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.boot_dir = self._tmp.name
        for name in [
            "vmlinuz-5.4.0",
            "vmlinuz-5.10.0",
            "vmlinuz-6.1.0",
            "initrd.img-6.1.0",
            "config-5.4.0",
            "System.map-5.10.0",
        ]:
            _touch(self.boot_dir, name)

    def tearDown(self):
        self._tmp.cleanup()

    def test_only_images_are_listed(self):
        result = get_installed_kernels(self.boot_dir)

        self.assertEqual(len(result), 3)
        self.assertIsInstance(result[0], KernelRecord)
        self.assertEqual(
            {k.image_path for k in result},
            {os.path.join(self.boot_dir, "vmlinuz-" + v) for v in ("5.4.0", "5.10.0", "6.1.0")},
        )

    def test_textual_ordering_by_default(self):
        """Plain string ordering puts 5.4.0 above 5.10.0."""
        result = get_installed_kernels(self.boot_dir)

        self.assertEqual([k.version for k in result], ["6.1.0", "5.4.0", "5.10.0"])

    def test_numeric_ordering(self):
        result = get_installed_kernels(self.boot_dir, numeric=True)

        self.assertEqual([k.version for k in result], ["6.1.0", "5.10.0", "5.4.0"])

    def test_running_kernel_marked(self):
        result = get_installed_kernels(self.boot_dir, running_version="5.10.0")

        running = [k.version for k in result if k.is_running]
        self.assertEqual(running, ["5.10.0"])

    def test_unknown_running_kernel_marks_nothing(self):
        result = get_installed_kernels(self.boot_dir, running_version="")

        self.assertFalse(any(k.is_running for k in result))

    def test_running_kernel_not_installed(self):
        result = get_installed_kernels(self.boot_dir, running_version="6.5.0")

        self.assertFalse(any(k.is_running for k in result))

    def test_empty_boot_dir(self):
        with tempfile.TemporaryDirectory() as tmp:
            self.assertEqual(get_installed_kernels(tmp), [])

    def test_missing_boot_dir(self):
        with self.assertRaises(RuntimeError) as ctx:
            get_installed_kernels(os.path.join(self.boot_dir, "nope"))

        self.assertIn("Failed to open", str(ctx.exception))

    def test_many_kernels_are_not_capped(self):
        with tempfile.TemporaryDirectory() as tmp:
            for i in range(150):
                _touch(tmp, f"vmlinuz-5.15.0-{i}-generic")

            self.assertEqual(len(get_installed_kernels(tmp)), 150)


class TestSortKernels(unittest.TestCase):
    """Tests for version ordering."""

    def _records(self, *versions):
        return [KernelRecord(v, "/boot/vmlinuz-" + v) for v in versions]

    def test_textual_descending(self):
        result = sort_kernels(self._records("5.10.0", "5.4.0", "6.1.0"))

        self.assertEqual(result[0].version, "6.1.0")
        self.assertEqual([k.version for k in result], ["6.1.0", "5.4.0", "5.10.0"])

    def test_textual_keeps_original_quirk(self):
        """As text, 5.9.0 sorts above 5.10.0."""
        result = sort_kernels(self._records("5.10.0", "5.9.0"))

        self.assertEqual(result[0].version, "5.9.0")

    def test_numeric_descending(self):
        result = sort_kernels(self._records("5.9.0", "5.10.0", "5.15.0-76-generic", "5.15.0-9-generic"), numeric=True)

        self.assertEqual(
            [k.version for k in result],
            ["5.15.0-76-generic", "5.15.0-9-generic", "5.10.0", "5.9.0"],
        )

    def test_version_sort_key_compares_numbers(self):
        self.assertGreater(version_sort_key("5.10.0"), version_sort_key("5.9.0"))
        self.assertEqual(version_sort_key("6.1.0"), version_sort_key("6.1.0"))


if __name__ == '__main__':
    unittest.main()
