import logging
import os

import godot_parser
from godot_parser.objects import GDObject
from pxr import Gf
from pyparsing import ParseBaseException

import scene_tree
from errors import DecodeError, SourceNotFound, StoreOpenFailed

logger = logging.getLogger(__name__)

TRANSFORM_NAMES = ("Transform3D", "Transform")


def flatten_matrix(matrix):
    return (scalar for vector in matrix for scalar in vector[:3])


def to_godot_value(value):
    if isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, scene_tree.Vector3):
        return GDObject("Vector3", value.x, value.y, value.z)
    if isinstance(value, scene_tree.Transform):
        matrix = Gf.Matrix4d(1.0)
        matrix.SetTranslate(Gf.Vec3d(value.origin.x, value.origin.y, value.origin.z))
        return GDObject("Transform3D", *flatten_matrix(matrix))
    if isinstance(value, (Gf.Vec3f, Gf.Vec3d, Gf.Vec3h)):
        return GDObject("Vector3", *(float(scalar) for scalar in value))
    if isinstance(value, Gf.Matrix4d):
        return GDObject("Transform3D", *flatten_matrix(value))
    # Godot has no slot for the rest, keep something readable.
    return str(value)


def from_godot_value(value):
    if isinstance(value, GDObject):
        if value.name == "Vector3" and len(value.args) == 3:
            return scene_tree.Vector3(*value.args)
        # Only the origin survives, the basis has no generic counterpart.
        if value.name in TRANSFORM_NAMES and len(value.args) == 12:
            return scene_tree.Transform(scene_tree.Vector3(*value.args[9:12]))
    return value


def write_tscn(nodes, path, root_name="Root", root_type="Node3D"):
    """Write a generic node list as a Godot scene, returns the node count.

    A Godot scene has exactly one root, so several top level nodes are
    grouped under a root_name/root_type node.
    """
    resolved = scene_tree.resolve_tree(nodes)
    scene = godot_parser.GDScene()

    if resolved:
        with scene.use_tree() as tree:
            path_to_node = {}
            roots = []

            for entry in resolved:
                node = godot_parser.Node(entry.node.name, type=entry.node.type_name or None)

                for key, value in entry.node.properties.items():
                    node[key] = to_godot_value(value)

                if entry.parent is None:
                    roots.append(node)
                else:
                    path_to_node[entry.parent].add_child(node)

                path_to_node[entry.path] = node

            if len(roots) == 1:
                tree.root = roots[0]
            else:
                logger.info("Grouping %d top level nodes under %s", len(roots), root_name)
                tree.root = godot_parser.Node(root_name, type=root_type)
                for root in roots:
                    tree.root.add_child(root)

    try:
        scene.write(path)
    except OSError as e:
        raise StoreOpenFailed(f"Failed to write TSCN {path}: {e}") from e

    return len(resolved)


def load_tscn(path):
    """Parse a Godot scene into a generic node list.

    Godot parents are relative to the scene root ("." or "A/B"); they come
    back as absolute generic paths.
    """
    if not os.path.exists(path):
        raise SourceNotFound("TSCN", path)

    try:
        scene = godot_parser.GDScene.load(path)
    except ParseBaseException as e:
        raise DecodeError(f"Failed to parse TSCN {path}: {e}") from e

    nodes = []
    root_path = None

    for section in scene.find_all():
        if type(section) is not godot_parser.GDNodeSection:
            continue

        parent = section.parent
        if parent is None:
            if root_path is not None:
                raise DecodeError(f"TSCN {path} has more than one root node")
            root_path = "/" + section.name
            parent_path = None
        elif root_path is None:
            raise DecodeError(f"Node {section.name!r} in {path} comes before the scene root")
        elif parent == ".":
            parent_path = root_path
        else:
            parent_path = root_path + "/" + parent

        properties = {key: from_godot_value(value) for key, value in section.properties.items()}
        nodes.append(scene_tree.GenericNode(section.name, section.type or "Node", parent_path, properties))

    logger.debug("Loaded %d nodes from %s", len(nodes), path)
    return nodes
