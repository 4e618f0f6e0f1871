from dataclasses import dataclass
from abc import ABC, abstractmethod
from enum import Enum


class ResultType(str, Enum):
    """Result types the catalog search endpoint knows how to filter on."""
    SERIES = "series"
    EPISODE = "episode"
    MOVIE_LISTING = "movie_listing"


@dataclass
class BaseEntity:
    id: str
    slug_title: str
    title: str
    description: str


@dataclass
class Series(BaseEntity):
    pass


@dataclass
class Season(BaseEntity):
    series_id: str = ""
    season_number: int = 0


@dataclass
class Episode(BaseEntity):
    series_id: str = ""
    season_id: str = ""
    episode_number: int | None = None


@dataclass
class MovieListing(BaseEntity):
    pass


@dataclass
class Movie(BaseEntity):
    listing_id: str = ""


MediaEntity = Series | Season | Episode | MovieListing | Movie


class CatalogClient(ABC):
    @abstractmethod
    def query(
            self,
            text: str,
            limit: int = 10,
            result_type: ResultType | None = None) -> list[MediaEntity]:
        """Run a free text search and return the catalog's top results."""
        ...

    @abstractmethod
    def lookup_url(self, url: str) -> MediaEntity:
        """Resolve a direct content url into the single entity it points at."""
        ...

    @abstractmethod
    def movies(self, listing: MovieListing) -> list[Movie]:
        ...

    @staticmethod
    @abstractmethod
    def is_url(text: str) -> bool:
        ...

    def close(self) -> None:
        pass
