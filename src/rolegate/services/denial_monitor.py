# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2026 Rolegate Contributors

from __future__ import annotations

import logging

from rolegate.stores import TTLStore

logger = logging.getLogger(__name__)

_KEY_PREFIX = "authz-denials:"


class DenialMonitor:
    """Counts hierarchy denials per actor within a fixed window.

    A burst of denials from one actor usually means someone is probing the
    hierarchy; crossing the threshold is logged once per window.
    """

    def __init__(self, store: TTLStore, *, window_seconds: float = 900, threshold: int = 20) -> None:
        self.store = store
        self.window_seconds = window_seconds
        self.threshold = threshold

    def record(self, actor_id: str, action: str = "unknown") -> int:
        count = self.store.incr(_KEY_PREFIX + actor_id, self.window_seconds)
        if count == 1:
            # A fresh window; drop counters whose window has closed.
            self.store.evict_expired()
        logger.info("Authorization denied for %s (action=%s)", actor_id, action)
        if count == self.threshold:
            logger.warning(
                "Actor %s reached %d authorization denials within %ss",
                actor_id,
                count,
                self.window_seconds,
            )
        return count

    def denials(self, actor_id: str) -> int:
        return int(self.store.get(_KEY_PREFIX + actor_id) or 0)

    def reset(self, actor_id: str) -> None:
        self.store.delete(_KEY_PREFIX + actor_id)
