from __future__ import annotations

from abc import ABC, abstractmethod

from hirescout.types import Enrichment, RawProfile


class ProfileSearchProvider(ABC):
    name = "base"

    @property
    def available(self) -> bool:
        return True

    @abstractmethod
    def search(self, *, role: str, skills: list[str], location: str, limit: int) -> list[RawProfile]:
        pass


class ProfileEnricher(ABC):
    @abstractmethod
    def enrich(self, usernames: list[str]) -> dict[str, Enrichment]:
        """Enrichment keyed by GitHub username; unknown usernames are omitted."""
