from __future__ import annotations

"""Command-line entry point."""

import argparse
import logging
import sys

from .config import CAPABILITY_CHOICES, get_config
from .errors import LinkError, error_code
from .link import create_directory_link_sync
from .probe import LinkCapability, LinkModeProber, capability_from_config, detect_capability


def configure_logging(level: str = "INFO", verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else level,
        format="%(asctime)s | %(levelname)-8s | %(message)s",
        datefmt="%H:%M:%S",
    )


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog="dirlink",
        description="Create a directory symlink (or NTFS junction), replacing whatever is in the way.",
    )
    parser.add_argument("target", help="Directory the link should point to.")
    parser.add_argument("link_path", help="Where to create the link.")
    parser.add_argument(
        "--no-overwrite",
        dest="overwrite",
        action="store_false",
        default=None,
        help="Fail instead of moving or replacing an existing entry.",
    )
    parser.add_argument(
        "--force-symlink",
        action="store_true",
        help="Never fall back to junctions.",
    )
    parser.add_argument(
        "--capability",
        choices=CAPABILITY_CHOICES,
        help="Override DIRLINK_CAPABILITY for this run.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )
    return parser.parse_args(sys.argv[1:] if argv is None else argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    config = get_config()
    configure_logging(config.log_level, args.verbose)

    if args.capability is None:
        capability = capability_from_config(config)
    elif args.capability == "auto":
        capability = detect_capability()
    else:
        capability = LinkCapability(args.capability)
    overwrite = config.overwrite if args.overwrite is None else args.overwrite

    try:
        result = create_directory_link_sync(
            args.target,
            args.link_path,
            overwrite=overwrite,
            force_true_symlink=args.force_symlink,
            prober=LinkModeProber(capability),
        )
    except (LinkError, OSError) as exc:
        logging.error("❌ %s [%s]", exc, error_code(exc) or type(exc).__name__)
        return 1

    if result.reused:
        logging.info("⏭️ Already linked: %s → %s", args.link_path, args.target)
    else:
        logging.info("✅ Linked %s → %s", args.link_path, args.target)
    return 0


if __name__ == "__main__":
    sys.exit(main())
