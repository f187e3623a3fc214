from abc import ABC, abstractmethod

from autoapply.models import Listing


class ListingSource(ABC):
    @abstractmethod
    def fetch(self, limit: int | None = None) -> list[Listing]:
        pass
