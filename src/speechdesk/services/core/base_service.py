"""
Base Service Interface

Lifecycle contract shared by SpeechDesk's background services: a status that
moves through ServiceStatus, an async start/stop pair, a health check, and the
conversion of terminal failures into the message shown in the error banner.
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import Optional, Dict, Any

from speechdesk.models.error import SpeechDeskError
from speechdesk.models.validation import UserFriendlyMessage
from speechdesk.models.service_enums import ServiceStatus
from speechdesk.utils.error_handler import build_user_message


class BaseService(ABC):
    """
    Base class for SpeechDesk services.

    Attributes:
        service_name: Name used in logs and status reports
        status: Current lifecycle status
        logger: Logger named after the concrete class
    """

    def __init__(self, service_name: str):
        self.service_name = service_name
        self.status = ServiceStatus.STOPPED
        self.logger = logging.getLogger(self.__class__.__name__)
        self._status_changed_at: Optional[float] = None

    @abstractmethod
    async def start(self) -> bool:
        """Bring the service up. Returns True when it is usable."""

    @abstractmethod
    async def stop(self) -> bool:
        """Shut the service down. Returns True once stopped."""

    @abstractmethod
    async def health_check(self) -> tuple[bool, Optional[SpeechDeskError]]:
        """Report (is_healthy, error_if_any)."""

    def get_status_info(self) -> Dict[str, Any]:
        return {
            "service_name": self.service_name,
            "status": self.status.value,
            "status_changed_at": self._status_changed_at,
        }

    def handle_service_error(self, error: BaseException, context: str = "") -> UserFriendlyMessage:
        """
        Log a terminal failure and build the message for the error banner.

        Args:
            error: The exception that ended the operation
            context: The operation that failed, e.g. "voice loading"

        Returns:
            UserFriendlyMessage: Title, message and troubleshooting steps
        """
        self.logger.error(f"{self.service_name} failed during {context or 'operation'}: {error}")
        return build_user_message(error, context)

    async def _update_status(self, new_status: ServiceStatus):
        if new_status == self.status:
            return
        self.logger.info(f"{self.service_name}: {self.status.value} -> {new_status.value}")
        self.status = new_status
        self._status_changed_at = time.time()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.service_name}, status={self.status.value})"
