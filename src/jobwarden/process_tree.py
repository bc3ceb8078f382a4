"""Descendant discovery for a supervised process."""

from __future__ import annotations

import logging
from typing import List

import psutil

from .process_handle import ProcessHandle

logger = logging.getLogger(__name__)


class ProcessTree:
    """Enumerates live descendants, tolerating processes that exit mid-scan."""

    def enumerate_descendants(self, root: ProcessHandle) -> List[ProcessHandle]:
        """
        Return *root* and its live descendants, deepest first.

        The order is a depth-first post-order: every process appears after all
        of its own descendants and the root comes last. Callers that signal the
        tree reverse it to get parent-first order. A process that disappears or
        cannot be inspected while the scan runs is dropped; if the root itself
        is gone the result is empty.
        """
        snapshot: List[ProcessHandle] = []
        self._collect(root, snapshot)
        return snapshot

    def _collect(self, handle: ProcessHandle, snapshot: List[ProcessHandle]) -> None:
        try:
            children = handle.process.children()
        except (psutil.NoSuchProcess, psutil.AccessDenied):  # policy_guard: allow-silent-handler
            logger.debug("PID %d vanished or is not inspectable; skipping its children", handle.pid)
            children = []

        for child in children:
            self._collect(ProcessHandle(child), snapshot)

        if handle.is_alive():
            snapshot.append(handle)


__all__ = ["ProcessTree"]
