import argparse
import logging
from collections.abc import Sequence
from typing import cast

from cr_info.db import get_client, ClientSpec
from cr_info.errors import CatalogError, ConfigError
from cr_info.query import (
    Command, KindFilter, OutputFormat, FieldSelection, QueryRequest, FIELD_NAMES, run)
from cr_info.utils import die, setup_logging

logger = logging.getLogger(__name__)


class FieldFlag(argparse.Action):
    """
    Boolean ``--<field>`` switch that also records the order the field flags
    were given in, so output columns follow the command line.
    """

    def __init__(self, option_strings, dest, default=False, required=False, help=None):
        super().__init__(option_strings, dest, nargs=0, default=default, required=required, help=help)

    def __call__(self, parser, namespace, values, option_string=None):
        setattr(namespace, self.dest, True)
        order = list(getattr(namespace, "field_order", None) or [])
        order.append(self.dest)
        setattr(namespace, "field_order", order)


U32_MAX = 2**32 - 1


def _u32(s: str) -> int:
    try:
        value = int(s)
    except ValueError:
        raise argparse.ArgumentTypeError(f"'{s}' is not a number")
    if not 0 <= value <= U32_MAX:
        raise argparse.ArgumentTypeError(f"{value} is not in 0..={U32_MAX}")
    return value


def _kind_filter(option: str):
    def parse(s: str) -> KindFilter:
        try:
            return KindFilter.parse(s, option)
        except ConfigError as err:
            raise argparse.ArgumentTypeError(err.message)
    return parse


def _output_format(s: str) -> OutputFormat:
    try:
        return OutputFormat.parse(s)
    except ConfigError as err:
        raise argparse.ArgumentTypeError(err.message)


def build_parser(command: Command, prog: str | None = None) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=prog or command.value,
        description=f"Get information by a word {command.value}",
    )
    _ = parser.add_argument("-n", "--limit", type=_u32, default=10,
                            help="Number of results to fetch")
    _ = parser.add_argument(f"--{command.value}-type", dest="kind_filter",
                            type=_kind_filter(f"{command.value} type"), default=None,
                            help="Type of results to return. Available options are: 'series', "
                                 "'episodes', 'movies'. None means mixed")

    fields = parser.add_argument_group("fields", "Attributes to print, in the order given")
    for name in FIELD_NAMES:
        _ = fields.add_argument(f"--{name}", action=FieldFlag, help=f"Print the {name}")

    _ = parser.add_argument("--output-format", type=_output_format, default=OutputFormat.CSV,
                            help="Format in which the output should be displayed. Available options "
                                 "are: 'csv', 'quoted-csv' and 'json'. Note that 'quoted-csv' will "
                                 "remove all newlines to keep the output parsable")
    _ = parser.add_argument("--locale", type=str, default=None,
                            help="Locale for titles and descriptions (default: $CRUNCHYROLL_LOCALE or en-US)")
    _ = parser.add_argument("-v", "--verbose", action="store_true", help="Log catalog requests")
    _ = parser.add_argument("input", type=str, help="Search term or a direct series/watch url")
    parser.set_defaults(field_order=[])
    return parser


def parse_request(command: Command, argv: Sequence[str] | None = None) -> tuple[QueryRequest, argparse.Namespace]:
    parser = build_parser(command)
    args = parser.parse_args(argv)

    selection = FieldSelection(**{name: cast(bool, getattr(args, name)) for name in FIELD_NAMES})
    request = QueryRequest(
        command=command,
        input=cast(str, args.input),
        limit=cast(int, args.limit),
        kind_filter=cast(KindFilter | None, args.kind_filter),
        selection=selection,
        field_order=tuple(cast(list[str], args.field_order)),
        output_format=cast(OutputFormat, args.output_format),
    )
    return request, args


def run_command(command: Command, argv: Sequence[str] | None = None, client: ClientSpec = None) -> int:
    """Parse ``argv``, run the pipeline and return the process exit status."""
    request, args = parse_request(command, argv)
    setup_logging(cast(bool, args.verbose))

    catalog = get_client(client, locale=cast(str | None, args.locale))
    try:
        run(request, catalog)
    except CatalogError as err:
        logger.debug("catalog failure", exc_info=True)
        die(err.message, err.details)
    finally:
        catalog.close()
    return 0
