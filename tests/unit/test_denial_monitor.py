# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2026 Rolegate Contributors

from __future__ import annotations

import logging

import pytest

from rolegate.services.denial_monitor import DenialMonitor
from rolegate.stores import MemoryTTLStore
from tests.conftest import FakeClock


class TestDenialMonitor:
    def test_counts_per_actor(self, denial_monitor: DenialMonitor) -> None:
        denial_monitor.record("alice")
        denial_monitor.record("alice")
        denial_monitor.record("bob")
        assert denial_monitor.denials("alice") == 2
        assert denial_monitor.denials("bob") == 1
        assert denial_monitor.denials("carol") == 0

    def test_threshold_logs_warning_once(
        self, denial_monitor: DenialMonitor, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.INFO, logger="rolegate.services.denial_monitor"):
            for _ in range(5):
                denial_monitor.record("mallory", "assign_role")
        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(warnings) == 1
        assert "mallory" in warnings[0].getMessage()

    def test_window_expiry_resets_count(self, clock: FakeClock) -> None:
        store = MemoryTTLStore(clock=clock)
        monitor = DenialMonitor(store, window_seconds=60, threshold=3)
        monitor.record("alice")
        monitor.record("alice")
        clock.advance(61)
        assert monitor.denials("alice") == 0
        assert monitor.record("alice") == 1

    def test_new_window_evicts_closed_counters(self, clock: FakeClock) -> None:
        store = MemoryTTLStore(clock=clock)
        monitor = DenialMonitor(store, window_seconds=60, threshold=3)
        monitor.record("alice")
        clock.advance(61)
        monitor.record("bob")
        assert len(store) == 1

    def test_reset(self, denial_monitor: DenialMonitor) -> None:
        denial_monitor.record("alice")
        denial_monitor.reset("alice")
        assert denial_monitor.denials("alice") == 0
