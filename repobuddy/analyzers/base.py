"""Base classes for parser strategies."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import List

from ..models import StructuralNode


class ParserStrategy(ABC):
    """Contract for strategies that turn source text into structural nodes."""

    name: str = "strategy"

    @abstractmethod
    def parse(self, source: str, path: Path) -> List[StructuralNode]:
        """Return the file's structural nodes or raise ``ParseFailure``."""
