"""
Unit tests for the deletion safety rules.

Covers the assessment of a selection and the way the executor honours
confirmations and failures.
"""

import unittest
from unittest.mock import MagicMock

from kcleaner.analyzer import assess_selection
from kcleaner.detector import KernelRecord
from kcleaner.remover import (
    delete_kernels,
    BootloaderResult,
    BootloaderStatus,
    DeletionResult,
    RemovalStatus,
    RUNNING_KERNEL_PROMPT,
)


def _kernels(versions, running=None):
    return [KernelRecord(v, f"/boot/vmlinuz-{v}", v == running) for v in versions]


class TestAssessSelection(unittest.TestCase):
    """Test safety classification of a selection."""

    def setUp(self):
        self.kernels = _kernels(
            ["5.15.0-95-generic", "5.15.0-91-generic", "5.15.0-89-generic", "5.15.0-82-generic"],
            running="5.15.0-91-generic",
        )

    def test_safe_selection(self):
        assessment = assess_selection(self.kernels, {2, 3})

        self.assertEqual(assessment.selected, [2, 3])
        self.assertFalse(assessment.includes_running)
        self.assertFalse(assessment.deletes_all)
        self.assertTrue(assessment.requires_confirmation)

    def test_running_kernel_flagged(self):
        assessment = assess_selection(self.kernels, {1, 2})

        self.assertTrue(assessment.includes_running)
        self.assertFalse(assessment.deletes_all)

    def test_all_kernels_flagged(self):
        assessment = assess_selection(self.kernels, {0, 1, 2, 3})

        self.assertTrue(assessment.deletes_all)
        self.assertTrue(assessment.includes_running)
        self.assertTrue(assessment.requires_confirmation)

    def test_all_kernels_without_running(self):
        kernels = _kernels(["v2", "v1"])

        assessment = assess_selection(kernels, [1, 0])

        self.assertTrue(assessment.deletes_all)
        self.assertFalse(assessment.includes_running)
        self.assertEqual(assessment.selected, [0, 1])

    def test_empty_selection_needs_no_confirmation(self):
        assessment = assess_selection(self.kernels, set())

        self.assertFalse(assessment.requires_confirmation)
        self.assertFalse(assessment.deletes_all)

    def test_out_of_range_index(self):
        with self.assertRaises(ValueError):
            assess_selection(self.kernels, {4})


class TestDeleteKernels(unittest.TestCase):
    """Test the deletion executor."""

    def setUp(self):
        self.kernels = _kernels(["v5", "v4", "v3", "v2", "v1"], running="v3")
        self.remove = MagicMock(
            side_effect=lambda index, record: DeletionResult(index, record, RemovalStatus.SUCCESS, exit_code=0)
        )
        self.refresh = MagicMock(return_value=BootloaderResult(BootloaderStatus.UPDATED, exit_code=0))
        self.confirm = MagicMock(return_value=True)

    def test_deletes_in_ascending_order(self):
        report = delete_kernels(self.kernels, {3, 1, 4}, self.confirm, self.remove, self.refresh)

        removed = [c.args[0] for c in self.remove.call_args_list]
        self.assertEqual(removed, [1, 3, 4])
        self.assertEqual(report.succeeded, 3)
        self.assertEqual(self.refresh.call_count, 1)
        self.confirm.assert_not_called()

    def test_running_kernel_needs_own_confirmation(self):
        report = delete_kernels(self.kernels, {1, 2}, self.confirm, self.remove, self.refresh)

        self.confirm.assert_called_once_with(RUNNING_KERNEL_PROMPT)
        self.assertEqual(self.remove.call_count, 2)
        self.assertEqual(report.succeeded, 2)

    def test_declining_running_kernel_skips_only_that_kernel(self):
        self.confirm.return_value = False

        report = delete_kernels(self.kernels, {1, 2, 3}, self.confirm, self.remove, self.refresh)

        removed = [c.args[1].version for c in self.remove.call_args_list]
        self.assertEqual(removed, ["v4", "v2"])
        self.assertEqual(report.skipped, 1)
        self.assertEqual(report.results[1].status, RemovalStatus.SKIPPED)
        self.assertEqual(report.results[1].record.version, "v3")
        self.refresh.assert_called_once()

    def test_failure_does_not_abort_batch(self):
        def remove(index, record):
            if index == 0:
                return DeletionResult(index, record, RemovalStatus.FAILED, exit_code=1, message="boom")
            return DeletionResult(index, record, RemovalStatus.SUCCESS, exit_code=0)

        report = delete_kernels(self.kernels, {0, 1}, self.confirm, remove, self.refresh)

        self.assertEqual(report.failed, 1)
        self.assertEqual(report.succeeded, 1)
        self.assertEqual(report.results[0].exit_code, 1)
        self.refresh.assert_called_once()

    def test_no_refresh_when_nothing_deleted(self):
        self.remove.side_effect = lambda index, record: DeletionResult(index, record, RemovalStatus.FAILED, exit_code=1)

        report = delete_kernels(self.kernels, {0, 1}, self.confirm, self.remove, self.refresh)

        self.assertEqual(report.failed, 2)
        self.refresh.assert_not_called()
        self.assertIsNone(report.bootloader)

    def test_no_refresh_when_only_running_selected_and_declined(self):
        self.confirm.return_value = False

        report = delete_kernels(self.kernels, {2}, self.confirm, self.remove, self.refresh)

        self.remove.assert_not_called()
        self.refresh.assert_not_called()
        self.assertEqual(report.skipped, 1)

    def test_bootloader_outcome_recorded(self):
        self.refresh.return_value = BootloaderResult(BootloaderStatus.UNAVAILABLE)

        report = delete_kernels(self.kernels, {4}, self.confirm, self.remove, self.refresh)

        self.assertEqual(report.bootloader.status, BootloaderStatus.UNAVAILABLE)

    def test_on_start_called_before_each_removal(self):
        events = []
        self.remove.side_effect = lambda index, record: (
            events.append(("remove", index)) or DeletionResult(index, record, RemovalStatus.SUCCESS)
        )

        delete_kernels(self.kernels, {0, 4}, self.confirm, self.remove, self.refresh,
                       on_start=lambda index, record: events.append(("start", index)))

        self.assertEqual(events, [("start", 0), ("remove", 0), ("start", 4), ("remove", 4)])


if __name__ == "__main__":
    unittest.main()
