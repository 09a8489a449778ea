import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from dirfilter.app import run, AppSetupError, DirectoryReadError
from dirfilter.startup_code.cli import parse_args
from dirfilter.startup_code.context import build_context
from dirfilter.startup_code.load_config import DEFAULT_CONFIG, load_config, ConfigError
from dirfilter.startup_code.logger_setup import (
    LoggingConfigurationError,
    setup_logging,
)
from dirfilter.startup_code.signal import (
    install_signal_handlers,
    restore_signal_handlers,
)

# For sysexits.h codes
EX_OK = 0  # successful termination
EX_USAGE = 64  # command line usage error
EX_NOINPUT = 66  # cannot open input
EX_SOFTWARE = 70  # internal software error
EX_CONFIG = 78  # configuration error


def main_entrypoint(argv: Optional[Sequence[str]] = None) -> int:
    """
    Parses arguments, loads configuration, sets up logging and runs one
    listing (or a watch loop). Returns a sysexits-style status code.
    """
    # 1. Parse command-line arguments (argparse exits with 2 on its own errors)
    args = parse_args(argv)

    # 2. Load configuration, if one was given
    if args.config is None:
        cfg = DEFAULT_CONFIG
    else:
        try:
            cfg = load_config(args.config)
        except ConfigError as e:
            print(
                f"CRITICAL: Failed to load configuration from '{args.config}': {e}",
                file=sys.stderr,
            )
            return EX_CONFIG

    # 3. Set up logging
    try:
        setup_logging(
            log_file_dir=cfg.log_dir,
            console_level="DEBUG" if args.dev else "INFO",
        )
    except LoggingConfigurationError as e:
        print(f"CRITICAL: Failed to set up logging: {e}", file=sys.stderr)
        return EX_CONFIG

    logger = logging.getLogger(__name__)

    # 4. Resolve the extension
    extension = (
        args.extension if args.extension is not None else cfg.default_extension_no_dot
    )
    if extension is None:
        logger.critical(
            "No extension given on the command line and none configured in [Filter]."
        )
        return EX_USAGE

    # 5. Build context and run
    context = build_context(cfg)
    previous_handlers = install_signal_handlers(context) if args.watch else {}
    logger.debug("Built %s", context)

    try:
        run(
            context,
            directory=Path(args.directory),
            extension=extension,
            watch=args.watch,
        )
    except DirectoryReadError as e:
        logger.error("%s", e)
        return EX_NOINPUT
    except AppSetupError as e:
        logger.critical("Watch setup failed: %s", e)
        return EX_NOINPUT
    except Exception:
        logger.exception("Unexpected error while listing '%s'", args.directory)
        return EX_SOFTWARE
    finally:
        if previous_handlers:
            restore_signal_handlers(previous_handlers)

    return EX_OK


def main() -> None:
    sys.exit(main_entrypoint())


if __name__ == "__main__":
    main()
