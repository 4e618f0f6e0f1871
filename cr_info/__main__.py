import argparse
import sys

from cr_info.commands import run_command
from cr_info.query import Command


def main(argv: list[str] | None = None) -> None:
    argv = sys.argv[1:] if argv is None else argv
    parser = argparse.ArgumentParser(prog="cr_info", description="Look up Crunchyroll catalog items.")
    _ = parser.add_argument("command", choices=[c.value for c in Command])
    args = parser.parse_args(argv[:1])
    sys.exit(run_command(Command(args.command), argv[1:]))


if __name__ == "__main__":
    main()
