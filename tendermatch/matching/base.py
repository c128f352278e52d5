from abc import ABC, abstractmethod

from tendermatch.matching.models import Tender


class BaseTenderSource(ABC):
    """Contract for the tender corpus the matching engine reads from."""

    @abstractmethod
    def find_all(self) -> list[Tender]:
        """Return every tender in the corpus."""

    @abstractmethod
    def find_by_category(self, category: str) -> list[Tender]:
        """Return tenders of one category, compared case-insensitively."""
