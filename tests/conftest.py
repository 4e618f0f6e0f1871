import pytest

from cr_info.db import (
    CatalogClient, MediaEntity, ResultType, Series, Season, Episode, MovieListing, Movie)
from cr_info.errors import CatalogError


class FakeCatalog(CatalogClient):
    """In-memory stand-in for the Crunchyroll client. Records every call."""

    def __init__(
            self,
            results: list[MediaEntity] | None = None,
            listings: dict[str, list[Movie]] | None = None,
            by_url: dict[str, MediaEntity] | None = None,
            failing_listings: set[str] | None = None):
        self.results = results or []
        self.listings = listings or {}
        self.by_url = by_url or {}
        self.failing_listings = failing_listings or set()
        self.calls: list[tuple] = []
        self.closed = False

    def query(self, text: str, limit: int = 10, result_type: ResultType | None = None) -> list[MediaEntity]:
        self.calls.append(("query", text, limit, result_type))
        return self.results[:limit]

    def lookup_url(self, url: str) -> MediaEntity:
        self.calls.append(("lookup_url", url))
        if url not in self.by_url:
            raise CatalogError(f"Nothing found for '{url}'")
        return self.by_url[url]

    def movies(self, listing: MovieListing) -> list[Movie]:
        self.calls.append(("movies", listing.id))
        if listing.id in self.failing_listings:
            raise CatalogError("Catalog request failed with status 500")
        return self.listings.get(listing.id, [])

    @staticmethod
    def is_url(text: str) -> bool:
        return text.startswith("https://www.crunchyroll.com/")

    def close(self) -> None:
        self.closed = True


# --- test data --------------------------------------------------------------

SERIES = Series(id="G1", slug_title="my-show", title="My Show", description="A tale\nwith lines")
SEASON = Season(id="S1", slug_title="my-show-season-1", title="My Show Season 1", description="", series_id="G1", season_number=1)
EPISODE = Episode(id="E1", slug_title="pilot", title="Pilot", description="It begins.", series_id="G1", season_id="S1", episode_number=1)
LISTING = MovieListing(id="L1", slug_title="the-movie", title="The Movie", description="Listing")
EMPTY_LISTING = MovieListing(id="L2", slug_title="nothing", title="Nothing", description="")
MOVIE = Movie(id="M1", slug_title="the-movie", title="The Movie", description="Feature length", listing_id="L1")
MOVIE_2 = Movie(id="M2", slug_title="the-movie-directors-cut", title="The Movie (Director's Cut)", description="Longer", listing_id="L1")


@pytest.fixture
def catalog() -> FakeCatalog:
    return FakeCatalog(
        results=[SERIES, SEASON, EPISODE, LISTING, EMPTY_LISTING, MOVIE],
        listings={"L1": [MOVIE, MOVIE_2], "L2": []},
        by_url={"https://www.crunchyroll.com/watch/E1/pilot": EPISODE},
    )
