"""
Crunchyroll catalog client
~~~~~~~~~~~~~~~~~~~~~~~~~~

A very thin wrapper around the handful of Crunchyroll web API endpoints the
query tools need, plus a concrete ``CatalogClient`` that exposes **query**,
**lookup_url** and **movies**.

Environment
-----------
• CRUNCHYROLL_BASIC_AUTH – base64 ``client_id:client_secret`` for the token grant
  (defaults to the anonymous web client)
• CRUNCHYROLL_ETP_RT     – refresh token cookie of a logged in browser session
• CRUNCHYROLL_LOCALE     – locale for titles and descriptions (default en-US)
"""

import logging
import os
import re
import time
from typing import Literal, NotRequired, TypedDict, override

import requests

from cr_info.db.core import (
    CatalogClient, MediaEntity, ResultType, Series, Season, Episode, MovieListing, Movie)
from cr_info.errors import CatalogError

logger = logging.getLogger(__name__)

# --------------------------------------------------------------------------- #
# 0.  Constants / helpers                                                     #
# --------------------------------------------------------------------------- #
CRUNCHYROLL_ROOT = "https://www.crunchyroll.com"
_TOKEN_EP        = f"{CRUNCHYROLL_ROOT}/auth/v1/token"
_ANON_BASIC_AUTH = "Y3Jfd2ViOg=="          # base64("cr_web:")
DEFAULT_LOCALE   = "en-US"
REQUEST_TIMEOUT  = 10


def _basic_auth() -> str:
    return os.getenv("CRUNCHYROLL_BASIC_AUTH") or _ANON_BASIC_AUTH


def _etp_rt() -> str | None:
    # only present for logged in sessions, anonymous otherwise
    return os.getenv("CRUNCHYROLL_ETP_RT") or None


def default_locale() -> str:
    return os.getenv("CRUNCHYROLL_LOCALE") or DEFAULT_LOCALE


UrlKind = Literal["series", "watch"]

#  https://www.crunchyroll.com/series/GY8VEQ95Y/darling-in-the-franxx
#  https://www.crunchyroll.com/de/watch/GRDQPM1ZY/alone-and-lonesome
_URL_RE = re.compile(
    r"https?://(?:www\.|beta\.)?crunchyroll\.com/"
    r"(?:[a-z]{2}(?:-(?:[a-z]{2}|\d{3}))?/)?"
    r"(?P<kind>series|watch)/(?P<id>[A-Za-z0-9]+)"
    r"(?:/[^?#]*)?(?:[?#].*)?",
    re.IGNORECASE,
)


def parse_url(url: str) -> tuple[UrlKind, str] | None:
    """
    Return ``(kind, id)`` for a direct series or watch url, ``None`` for
    anything that doesn't look like one (e.g. a free text query).
    """
    m = _URL_RE.fullmatch(url.strip())
    if not m:
        return None
    return m.group("kind").lower(), m.group("id")  # type: ignore[return-value]


# --------------------------------------------------------------------------- #
# 1.  Minimal static typing helpers                                           #
# --------------------------------------------------------------------------- #
class _EpisodeMetadata(TypedDict, total=False):
    series_id: str
    season_id: str
    episode_number: int | None


class _SeasonMetadata(TypedDict, total=False):
    series_id: str
    season_number: int


class _MovieMetadata(TypedDict, total=False):
    movie_listing_id: str


class _Item(TypedDict):
    id: str
    type: str
    slug_title: NotRequired[str]
    title: NotRequired[str]
    description: NotRequired[str]
    episode_metadata: NotRequired[_EpisodeMetadata]
    season_metadata: NotRequired[_SeasonMetadata]
    movie_metadata: NotRequired[_MovieMetadata]
    # seasons coming straight from the cms endpoints are flat
    series_id: NotRequired[str]
    season_number: NotRequired[int]
    listing_id: NotRequired[str]


# --------------------------------------------------------------------------- #
# 2.  Build helpers – adapt raw JSON → entity dataclasses                     #
# --------------------------------------------------------------------------- #
def _common(item: _Item) -> dict[str, str]:
    return {
        "id": item["id"],
        "slug_title": item.get("slug_title") or "",
        "title": item.get("title") or "",
        "description": item.get("description") or "",
    }


def build_entity(item: _Item) -> MediaEntity:
    kind = item.get("type")
    if kind == "series":
        return Series(**_common(item))
    if kind == "season":
        meta = item.get("season_metadata", {})
        return Season(
            **_common(item),
            series_id=meta.get("series_id") or item.get("series_id", ""),
            season_number=meta.get("season_number") or item.get("season_number", 0),
        )
    if kind == "episode":
        meta = item.get("episode_metadata", {})
        return Episode(
            **_common(item),
            series_id=meta.get("series_id", ""),
            season_id=meta.get("season_id", ""),
            episode_number=meta.get("episode_number"),
        )
    if kind == "movie_listing":
        return MovieListing(**_common(item))
    if kind == "movie":
        meta = item.get("movie_metadata", {})
        return Movie(**_common(item), listing_id=meta.get("movie_listing_id") or item.get("listing_id", ""))
    raise CatalogError(f"Unknown catalog object type '{kind}'", f"object id: {item.get('id')}")


# --------------------------------------------------------------------------- #
# 3.  High-level, client-style facade                                         #
# --------------------------------------------------------------------------- #
class CrunchyrollClient(CatalogClient):
    """
    A concrete ``CatalogClient`` backed by the Crunchyroll web API. Every call
    is a single blocking request, no retries.
    """

    def __init__(self, locale: str | None = None, session: requests.Session | None = None):
        self.locale = locale or default_locale()
        self.sess = session or requests.Session()
        self._bearer: str | None = None
        self._bearer_exp: float = 0.0

    # ---------------  auth  --------------------------------------------------
    def _login(self) -> None:
        """Fetch a bearer token, anonymous unless an etp_rt cookie is configured."""
        headers = {"Authorization": f"Basic {_basic_auth()}"}
        data = {"grant_type": "client_id"}
        cookies = None
        if (etp_rt := _etp_rt()):
            data = {"grant_type": "etp_rt_cookie"}
            cookies = {"etp_rt": etp_rt}
        logger.debug("POST %s (%s)", _TOKEN_EP, data["grant_type"])
        try:
            resp = self.sess.post(_TOKEN_EP, headers=headers, data=data, cookies=cookies, timeout=REQUEST_TIMEOUT)
            resp.raise_for_status()
            body = resp.json()
            self._bearer = body["access_token"]
        except (requests.RequestException, ValueError, KeyError) as exc:
            raise CatalogError("Failed to authenticate against Crunchyroll", str(exc)) from exc
        self._bearer_exp = time.time() + float(body.get("expires_in", 300))

    def _auth_header(self) -> dict[str, str]:
        if self._bearer is None or time.time() > self._bearer_exp - 10:
            self._login()
        return {"Authorization": f"Bearer {self._bearer}"}

    def _get(self, path: str, **params) -> dict:
        url = f"{CRUNCHYROLL_ROOT}/{path.lstrip('/')}"
        params = {"locale": self.locale, **params}
        headers = self._auth_header()
        logger.debug("GET %s %s", url, params)
        try:
            resp = self.sess.get(url, params=params, headers=headers, timeout=REQUEST_TIMEOUT)
            resp.raise_for_status()
            body = resp.json()  # pyright: ignore[reportAny]
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else "?"
            raise CatalogError(f"Catalog request failed with status {status}", url) from exc
        except (requests.RequestException, ValueError) as exc:
            raise CatalogError("Catalog request failed", f"{url}: {exc}") from exc
        if not isinstance(body, dict):
            raise CatalogError("Malformed catalog response", f"{url}: expected a JSON object")
        return body

    # ---------------  catalog  -----------------------------------------------
    @override
    def query(
            self,
            text: str,
            limit: int = 10,
            result_type: ResultType | None = None) -> list[MediaEntity]:
        params: dict[str, str | int] = {"q": text, "n": limit}
        if result_type is not None:
            params["type"] = result_type.value
        data = self._get("content/v2/discover/search", **params)

        try:
            for bucket in data.get("data") or []:
                if bucket.get("type") == "top_results":
                    return [build_entity(item) for item in bucket.get("items") or []]
        except (KeyError, TypeError, AttributeError) as exc:
            raise CatalogError("Malformed catalog response", f"search '{text}': {exc!r}") from exc
        raise CatalogError(f"Query '{text}' returned no top results")

    @override
    def lookup_url(self, url: str) -> MediaEntity:
        parsed = parse_url(url)
        if parsed is None:
            raise CatalogError(f"'{url}' is not a Crunchyroll series or watch url")
        _, uid = parsed

        # objects knows series, episodes and movies alike
        data = self._get(f"content/v2/cms/objects/{uid}")
        items = data.get("data") or []
        if not items:
            raise CatalogError(f"Nothing found for '{url}'")
        try:
            return build_entity(items[0])
        except (KeyError, TypeError, AttributeError) as exc:
            raise CatalogError("Malformed catalog response", f"object {uid}: {exc!r}") from exc

    @override
    def movies(self, listing: MovieListing) -> list[Movie]:
        data = self._get(f"content/v2/cms/movie_listings/{listing.id}/movies")
        movies: list[Movie] = []
        try:
            for item in data.get("data") or []:
                movie = build_entity({"type": "movie", **item})
                if isinstance(movie, Movie):
                    movies.append(movie)
        except (KeyError, TypeError, AttributeError) as exc:
            raise CatalogError("Malformed catalog response", f"movie listing {listing.id}: {exc!r}") from exc
        return movies

    @staticmethod
    @override
    def is_url(text: str) -> bool:
        return parse_url(text) is not None

    @override
    def close(self) -> None:
        self.sess.close()
