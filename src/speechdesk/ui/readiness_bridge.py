"""
Readiness Signal Bridge

This module re-emits ReadinessCoordinator events as Qt signals so widgets can
connect to readiness changes with the usual signal/slot mechanism.
"""

import logging
from typing import Optional

from PyQt6.QtCore import QObject, pyqtSignal

from speechdesk.models.readiness_events import (
    ReadinessEventKind, StateChangeEvent, FormatAvailabilityEvent,
    AutomaticFormatChangeEvent, ActionEvent
)
from speechdesk.services.readiness_coordinator import ReadinessCoordinator


class ReadinessSignalBridge(QObject):
    """
    Qt front for a ReadinessCoordinator.

    Signals:
        ready_changed: Emitted when the ready flag flips (is_ready)
        format_changed: Emitted on an automatic format change (new_format, reason)
        mp3_availability_changed: Emitted when MP3 output becomes (un)available (available)
        state_changed: Emitted after every state update (section)
        action_requested: Emitted when a user action is relayed (action)
    """

    ready_changed = pyqtSignal(bool)  # is_ready
    format_changed = pyqtSignal(str, str)  # new_format, reason
    mp3_availability_changed = pyqtSignal(bool)  # available
    state_changed = pyqtSignal(str)  # section
    action_requested = pyqtSignal(str)  # action

    def __init__(self, coordinator: ReadinessCoordinator, parent: Optional[QObject] = None):
        """
        Initialize the bridge and subscribe to the coordinator.

        Args:
            coordinator: Coordinator whose events are forwarded
            parent: Parent QObject
        """
        super().__init__(parent)
        self.logger = logging.getLogger(self.__class__.__name__)

        self._coordinator = coordinator
        self._subscriptions = [
            (ReadinessEventKind.STATE_CHANGE, self._on_state_change),
            (ReadinessEventKind.AUTOMATIC_FORMAT_CHANGE, self._on_format_change),
            (ReadinessEventKind.FORMAT_AVAILABILITY, self._on_format_availability),
            (ReadinessEventKind.ACTION, self._on_action),
        ]
        for kind, callback in self._subscriptions:
            coordinator.add_event_listener(kind, callback)

        self.logger.debug("ReadinessSignalBridge attached")

    def detach(self):
        """Stop forwarding coordinator events."""
        for kind, callback in self._subscriptions:
            self._coordinator.remove_event_listener(kind, callback)
        self._subscriptions = []
        self.logger.debug("ReadinessSignalBridge detached")

    def _on_state_change(self, event: StateChangeEvent):
        self.state_changed.emit(event.section.value)
        if event.ready_changed:
            self.ready_changed.emit(event.current.ready)

    def _on_format_change(self, event: AutomaticFormatChangeEvent):
        self.format_changed.emit(event.new_format.value, event.reason)

    def _on_format_availability(self, event: FormatAvailabilityEvent):
        self.mp3_availability_changed.emit(event.mp3_available)

    def _on_action(self, event: ActionEvent):
        self.action_requested.emit(event.action.value)
