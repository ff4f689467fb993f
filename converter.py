"""USD <-> Godot TSCN conversion entry points.

Both directions go through the generic node tree in scene_tree. The
conversion is lossy: Vector3 and Transform properties written to USD come
back as plain Gf values, and USD types Godot has no slot for are written
as text.

Every entry point returns a ConversionResult instead of raising.
"""
import logging
import os
from dataclasses import dataclass
from typing import Optional

from config import DEFAULTS
from errors import ConfigurationError, ConversionError, SourceNotFound
from scene_tree import resolve_tree, tree_from_data
from tscn_io import load_tscn, write_tscn
from usd_mapper import MappingStats, created_stage, opened_stage, plan_tree, read_tree, write_tree

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConversionResult:
    ok: bool
    message: str
    error: Optional[ConversionError] = None
    stats: Optional[MappingStats] = None

    def __bool__(self):
        return self.ok


def _failure(error):
    logger.debug("Conversion failed: %s", error)
    return ConversionResult(False, str(error), error)


def usd_to_tscn(source_usd_path: str, dest_tscn_path: str, config: Optional[dict] = None) -> ConversionResult:
    settings = dict(DEFAULTS, **(config or {}))

    try:
        if not os.path.exists(source_usd_path):
            raise SourceNotFound("USD", source_usd_path)

        with opened_stage(source_usd_path) as stage:
            nodes = read_tree(stage)

        count = write_tscn(
            nodes,
            dest_tscn_path,
            root_name=settings["scene_root_name"],
            root_type=settings["scene_root_type"],
        )
    except ConversionError as e:
        return _failure(e)

    stats = MappingStats(count, sum(len(node.properties) for node in nodes), 0)
    message = f"Converted USD {source_usd_path} to TSCN {dest_tscn_path} with {count} nodes"
    logger.info(message)
    return ConversionResult(True, message, stats=stats)


def tscn_to_usd(source_tscn_path: str, dest_usd_path: str, generic_tree=None) -> ConversionResult:
    """Write an already parsed scene tree to a new USD stage.

    There is no TSCN parsing here, generic_tree is required; see
    tscn_file_to_usd for the variant that reads the scene file itself.
    Nothing is written unless the whole tree resolves and is authored.
    """
    if generic_tree is None:
        return _failure(ConfigurationError(
            f"No parsed scene tree given for {source_tscn_path}. Provide generic_tree or use tscn_file_to_usd."
        ))

    try:
        nodes = tree_from_data(generic_tree)
        plan = plan_tree(resolve_tree(nodes))

        with created_stage(dest_usd_path) as stage:
            stats = write_tree(stage, plan)
    except ConversionError as e:
        return _failure(e)

    message = f"Converted TSCN to USD {dest_usd_path} with {stats.nodes} nodes"
    if stats.skipped:
        message += f" ({stats.skipped} properties skipped)"
    logger.info(message)
    return ConversionResult(True, message, stats=stats)


def tscn_file_to_usd(source_tscn_path: str, dest_usd_path: str) -> ConversionResult:
    try:
        nodes = load_tscn(source_tscn_path)
    except ConversionError as e:
        return _failure(e)

    return tscn_to_usd(source_tscn_path, dest_usd_path, generic_tree=nodes)
