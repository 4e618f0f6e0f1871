"""
Query / search pipeline.

Turns a free text query or a direct url into one line per catalog item:

    resolve → flatten → project → order_fields → encode
"""

import json
import logging
import sys
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, fields
from enum import Enum
from typing import TextIO

from cr_info.db.core import (
    CatalogClient, MediaEntity, ResultType, Series, Season, Episode, MovieListing, Movie)
from cr_info.errors import ConfigError

logger = logging.getLogger(__name__)

WATCH_URL = "https://www.crunchyroll.com/watch/{id}/{slug}"
SERIES_URL = "https://www.crunchyroll.com/series/{id}/{slug}"

# Serialized field names in schema order. ``type`` carries Output.kind.
FIELD_NAMES: tuple[str, ...] = ("id", "url", "type", "title", "description")

WarnSink = Callable[[str], None]


class Command(str, Enum):
    QUERY = "query"
    SEARCH = "search"


class KindFilter(str, Enum):
    SERIES = "series"
    EPISODE = "episode"
    MOVIE = "movie"

    @classmethod
    def parse(cls, s: str, option: str = "query type") -> "KindFilter":
        aliases = {
            "series": cls.SERIES,
            "episode": cls.EPISODE,
            "episodes": cls.EPISODE,
            "movie": cls.MOVIE,
            "movies": cls.MOVIE,
        }
        if s.lower() not in aliases:
            raise ConfigError(option, s, ["series", "episodes", "movies"])
        return aliases[s.lower()]

    def result_type(self) -> ResultType:
        # movies are only searchable through their listing
        return {
            KindFilter.SERIES: ResultType.SERIES,
            KindFilter.EPISODE: ResultType.EPISODE,
            KindFilter.MOVIE: ResultType.MOVIE_LISTING,
        }[self]


class OutputFormat(str, Enum):
    CSV = "csv"
    QUOTED_CSV = "quoted-csv"
    JSON = "json"

    @classmethod
    def parse(cls, s: str) -> "OutputFormat":
        aliases = {
            "csv": cls.CSV,
            "quoted-csv": cls.QUOTED_CSV,
            "csv-quoted": cls.QUOTED_CSV,
            "json": cls.JSON,
        }
        if s.lower() not in aliases:
            raise ConfigError("output format", s, ["csv", "quoted-csv", "json"])
        return aliases[s.lower()]


@dataclass(frozen=True)
class Output:
    id: str
    url: str
    kind: str
    title: str
    description: str

    def as_fields(self) -> dict[str, str]:
        return {
            "id": self.id,
            "url": self.url,
            "type": self.kind,
            "title": self.title,
            "description": self.description,
        }


@dataclass(frozen=True)
class FieldSelection:
    id: bool = False
    url: bool = False
    type: bool = False
    title: bool = False
    description: bool = False

    def selected(self) -> list[str]:
        return [f.name for f in fields(self) if getattr(self, f.name)]


FormattedOutput = dict[str, str]


@dataclass(frozen=True)
class QueryRequest:
    """Everything one query/search invocation needs, fixed at parse time."""
    command: Command
    input: str
    limit: int = 10
    kind_filter: KindFilter | None = None
    selection: FieldSelection = FieldSelection()
    field_order: tuple[str, ...] = ()
    output_format: OutputFormat = OutputFormat.CSV


# --------------------------------------------------------------------------- #
# resolve                                                                     #
# --------------------------------------------------------------------------- #
def resolve(
        client: CatalogClient,
        raw_input: str,
        limit: int = 10,
        kind_filter: KindFilter | None = None) -> list[MediaEntity]:
    """
    A direct url resolves to exactly one entity (limit and filter don't
    apply). Anything else is sent to the catalog as a query.
    """
    if client.is_url(raw_input):
        return [client.lookup_url(raw_input)]

    result_type = kind_filter.result_type() if kind_filter is not None else None
    return client.query(raw_input, limit=limit, result_type=result_type)


# --------------------------------------------------------------------------- #
# flatten                                                                     #
# --------------------------------------------------------------------------- #
def _watch_output(item: Episode | Movie, kind: str) -> Output:
    return Output(
        id=item.id,
        url=WATCH_URL.format(id=item.id, slug=item.slug_title),
        kind=kind,
        title=item.title,
        description=item.description,
    )


def flatten_one(client: CatalogClient, entity: MediaEntity, warn: WarnSink) -> Output | None:
    if isinstance(entity, Series):
        return Output(
            id=entity.id,
            url=SERIES_URL.format(id=entity.id, slug=entity.slug_title),
            kind="series",
            title=entity.title,
            description=entity.description,
        )
    elif isinstance(entity, Season):
        warn("Found season, skipping")
        return None
    elif isinstance(entity, Episode):
        return _watch_output(entity, "episode")
    elif isinstance(entity, MovieListing):
        movies = client.movies(entity)
        if not movies:
            warn("Movie listing queried but no movie found")
            return None
        # first movie of the listing, in catalog order
        return _watch_output(movies[0], "movie")
    elif isinstance(entity, Movie):
        return _watch_output(entity, "movie")
    else:
        raise TypeError(f"Unexpected catalog entity {entity!r}")


def flatten(
        client: CatalogClient,
        entities: Iterable[MediaEntity],
        warn: WarnSink | None = None) -> list[Output]:
    """
    One ``Output`` per entity, in input order. Seasons and empty movie
    listings are reported to ``warn`` and skipped. Movie listings are expanded
    one at a time through ``client.movies``.
    """
    warn = warn or logger.warning
    outputs: list[Output] = []
    for entity in entities:
        output = flatten_one(client, entity, warn)
        if output is not None:
            outputs.append(output)
    return outputs


# --------------------------------------------------------------------------- #
# project / order / encode                                                    #
# --------------------------------------------------------------------------- #
def project(output: Output, selection: FieldSelection) -> FormattedOutput:
    values = output.as_fields()
    return {name: values[name] for name in selection.selected()}


def order_fields(present: Iterable[str], field_order: Sequence[str]) -> list[str]:
    """
    Order ``present`` by first appearance in ``field_order``. Present fields
    that never show up there go last, in schema order.
    """
    present = set(present)
    ordered: list[str] = []
    for name in field_order:
        if name in present and name not in ordered:
            ordered.append(name)
    ordered.extend(name for name in FIELD_NAMES if name in present and name not in ordered)
    return ordered


def _quote(value: str) -> str:
    # '"' is copied through as is, not doubled
    return '"' + value.replace("\r", "").replace("\n", "") + '"'


def encode(record: FormattedOutput, fmt: OutputFormat) -> str:
    """Serialize an already ordered record into a single line."""
    if fmt == OutputFormat.CSV:
        return ";".join(record.values())
    elif fmt == OutputFormat.QUOTED_CSV:
        return ";".join(_quote(v) for v in record.values())
    elif fmt == OutputFormat.JSON:
        return json.dumps(record, ensure_ascii=False, separators=(",", ":"))
    else:
        raise ValueError(f"Unknown output format {fmt!r}")


def format_output(
        output: Output,
        selection: FieldSelection,
        field_order: Sequence[str],
        fmt: OutputFormat) -> str:
    formatted = project(output, selection)
    ordered = {name: formatted[name] for name in order_fields(formatted, field_order)}
    return encode(ordered, fmt)


def emit(
        outputs: Iterable[Output],
        selection: FieldSelection,
        field_order: Sequence[str],
        fmt: OutputFormat,
        stream: TextIO | None = None) -> int:
    stream = stream or sys.stdout
    count = 0
    for output in outputs:
        print(format_output(output, selection, field_order, fmt), file=stream)
        count += 1
    return count


def run(
        request: QueryRequest,
        client: CatalogClient,
        stream: TextIO | None = None,
        warn: WarnSink | None = None) -> int:
    """Run one query or search end to end. Returns the number of lines written."""
    logger.debug("%s: %r (limit=%d, type=%s)", request.command.value, request.input,
                 request.limit, request.kind_filter.value if request.kind_filter else None)
    entities = resolve(client, request.input, request.limit, request.kind_filter)
    outputs = flatten(client, entities, warn=warn)
    return emit(outputs, request.selection, request.field_order, request.output_format, stream=stream)
