import sys

from cr_info.commands import run_command
from cr_info.query import Command


def main() -> None:
    sys.exit(run_command(Command.QUERY))


if __name__ == "__main__":
    main()
