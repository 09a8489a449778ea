import argparse
from typing import Optional, Sequence


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """
    Parses command-line arguments for the directory extension filter.

    Args:
        argv: Argument list to parse; defaults to sys.argv[1:].

    Returns:
        argparse.Namespace: An object holding the parsed command-line arguments
                            as attributes.
    """
    parser = argparse.ArgumentParser(
        prog="dirfilter",
        description="Lists the entries of a directory whose extension matches.",
    )
    parser.add_argument("directory", help="Directory whose entries are listed")
    parser.add_argument(
        "extension",
        nargs="?",
        default=None,
        help="Extension to match, without the leading dot (e.g. txt). "
        "Falls back to [Filter] extension_no_dot from the config file.",
    )
    parser.add_argument(
        "--config",
        "-c",
        default=None,
        help="Path to an optional INI configuration file",
    )
    parser.add_argument(
        "--dev", action="store_true", help="Enable debug logging to console"
    )
    parser.add_argument(
        "--watch",
        "-w",
        action="store_true",
        help="Keep running and list again whenever matching entries change",
    )
    return parser.parse_args(argv)
