from abc import ABC, abstractmethod

from ..models import TextChunk


class BaseTextSplitter(ABC):
    """Abstract base class for text splitters."""

    @abstractmethod
    def split(self, text: str) -> list[TextChunk]:
        """Split text into chunks that keep their source offsets."""
        pass

    def split_text(self, text: str) -> list[str]:
        """Split raw text into chunk strings without offsets."""
        return [chunk.text for chunk in self.split(text)]
