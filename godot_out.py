import argparse
import logging
import sys

from config import resolve_config
from converter import ConversionResult, tscn_file_to_usd, tscn_to_usd
from errors import ConversionError
from scene_tree import load_tree
from utils import configure_logging

logger = logging.getLogger("godot_out")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Convert a Godot TSCN scene into a new USD stage.")
    parser.add_argument("tscn", help="TSCN scene to read")
    parser.add_argument("usd", help="USD stage to create")
    parser.add_argument("--tree", help="JSON node tree to use instead of parsing the TSCN file")
    parser.add_argument("--config", help="JSON or YAML config file")
    parser.add_argument("--verbose", action="store_true", help="Log every prim")
    args = parser.parse_args(argv)

    config = resolve_config(args.config)
    configure_logging(config["log_level"], verbose=args.verbose)

    if args.tree:
        try:
            result = tscn_to_usd(args.tscn, args.usd, generic_tree=load_tree(args.tree))
        except ConversionError as e:
            result = ConversionResult(False, str(e), e)
    else:
        result = tscn_file_to_usd(args.tscn, args.usd)

    if not result.ok:
        logger.error(result.message)
        return 1

    print(result.message)
    return 0


if __name__ == "__main__":
    sys.exit(main())
