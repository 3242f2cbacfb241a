"""
Ports (interfaces) for progress storage.

These define the contract that infrastructure adapters must implement.
Application services depend on these abstractions, not concrete implementations.
"""

from abc import ABC, abstractmethod

from .models import ProgressItem


class ProgressRepository(ABC):
    """
    Port for reading and writing a learner's progress items.

    Implementations:
        - FileProgressRepository: A YAML or JSON document on disk.
    """

    @abstractmethod
    async def get_all_progress(self) -> list[ProgressItem]:
        """
        Fetch every stored progress item.

        Returns:
            List of ProgressItem objects in storage order.
        """
        pass

    @abstractmethod
    async def get_progress(self, lesson_id: str) -> ProgressItem | None:
        """
        Fetch the progress item for one lesson.

        Args:
            lesson_id: Opaque lesson identifier.

        Returns:
            The stored item, or None when the lesson has no progress yet.
        """
        pass

    @abstractmethod
    async def save_progress(self, item: ProgressItem) -> None:
        """
        Insert or replace the progress item keyed by its lesson_id.
        """
        pass
