import logging
import sys
from typing import NoReturn


def die(message: str, details: str | None = None, status: int = 1) -> NoReturn:
    """Print an error (and optional details) to stderr and exit."""
    print(f"Error: {message}", file=sys.stderr)
    if details:
        print(f"  {details}", file=sys.stderr)
    sys.exit(status)


def setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        stream=sys.stderr,
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )
    # urllib3 debug output duplicates our own request logging
    logging.getLogger("urllib3").setLevel(logging.WARNING)
