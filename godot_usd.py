import argparse
import logging
import sys

from config import resolve_config
from converter import usd_to_tscn
from utils import configure_logging

logger = logging.getLogger("godot_usd")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Convert a USD stage into a Godot TSCN scene.")
    parser.add_argument("usd", help="USD stage to read")
    parser.add_argument("tscn", help="TSCN scene to write")
    parser.add_argument("--config", help="JSON or YAML config file")
    parser.add_argument("--verbose", action="store_true", help="Log every prim")
    args = parser.parse_args(argv)

    config = resolve_config(args.config)
    configure_logging(config["log_level"], verbose=args.verbose)

    result = usd_to_tscn(args.usd, args.tscn, config=config)
    if not result.ok:
        logger.error(result.message)
        return 1

    print(result.message)
    return 0


if __name__ == "__main__":
    sys.exit(main())
