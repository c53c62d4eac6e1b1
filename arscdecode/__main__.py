import argparse
import sys

from loguru import logger

from .dump import get_xml
from .errors import ResParserError

LOG_FORMAT = "{line: >4}:{level}:\t{message}"


def setup_logging(verbose: bool = False) -> None:
    logger.remove()  # All configured handlers are removed
    logger.add(sys.stderr, format=LOG_FORMAT, level="DEBUG" if verbose else "WARNING")


def main(argv=None) -> int:
    ap = argparse.ArgumentParser(
        prog="arscdecode",
        description="Dump the string pools and table types of a compiled resource table as XML",
    )
    ap.add_argument("file", help="resources.arsc or another chunked resource file")
    ap.add_argument("--verbose", "-v", action="store_true", help="trace every decoded field")
    ap.add_argument("--compact", action="store_true", help="do not pretty print the XML")
    args = ap.parse_args(argv)

    setup_logging(args.verbose)

    with open(args.file, "rb") as fp:
        raw = fp.read()

    try:
        xml = get_xml(raw, pretty=not args.compact)
    except ResParserError as e:
        logger.error(f"Could not decode {args.file}: {e}")
        return 1

    sys.stdout.write(xml.decode("utf-8"))
    sys.stdout.flush()
    return 0


if __name__ == "__main__":
    sys.exit(main())
