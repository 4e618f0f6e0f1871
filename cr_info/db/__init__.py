from cr_info.db.provider import get_client, ClientSpec
from cr_info.db.core import (
    BaseEntity, Series, Season, Episode, MovieListing, Movie, MediaEntity,
    CatalogClient, ResultType)

__all__ = [
    "get_client",
    "ClientSpec",
    "BaseEntity",
    "Series",
    "Season",
    "Episode",
    "MovieListing",
    "Movie",
    "MediaEntity",
    "CatalogClient",
    "ResultType",
]
