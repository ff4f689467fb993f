"""Format neutral scene tree shared by the TSCN and USD sides of the converter.

A tree is an ordered list of GenericNode records where parents come before
their children. resolve_tree() turns it into ResolvedNode records carrying
the absolute, slash separated path each node maps to.
"""
import json
import os
from dataclasses import dataclass, field
from typing import Any, Optional

from errors import DecodeError, DuplicatePathError, MissingParentError, SourceNotFound

# Parent markers meaning "this node is a root".
ROOT_SENTINELS = (None, "", ".")


@dataclass(frozen=True)
class Vector3:
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0


@dataclass(frozen=True)
class Transform:
    origin: Vector3 = Vector3()


@dataclass(frozen=True)
class GenericNode:
    name: str
    type_name: str
    parent_path: Optional[str] = None
    properties: dict = field(default_factory=dict)


@dataclass(frozen=True)
class ResolvedNode:
    node: GenericNode
    path: str
    parent: Optional[str] = None

    @property
    def depth(self):
        return self.path.count("/") - 1


def _is_number(value):
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _vector_from_dict(data):
    components = [data.get(key, 0) for key in ("x", "y", "z")]
    if not all(_is_number(component) for component in components):
        return None
    return Vector3(*components)


def coerce_property(value):
    """Turn the JSON form of the structured tags into Vector3 / Transform.

    Everything else is returned untouched; whether it can be stored is up to
    the mapper.
    """
    if not isinstance(value, dict):
        return value

    tag = value.get("type")
    if tag == "Vector3":
        return _vector_from_dict(value) or value
    if tag == "Transform":
        origin = value.get("origin", {})
        if isinstance(origin, Vector3):
            return Transform(origin)
        if isinstance(origin, dict):
            vector = _vector_from_dict(origin)
            if vector is not None:
                return Transform(vector)
    return value


def _join(parent_path, name):
    if parent_path == "/":
        return "/" + name
    return parent_path + "/" + name


def resolve_tree(nodes):
    """Resolve every node to its absolute path, in order.

    A parent reference is either a sentinel, an absolute path of an earlier
    node or the name of an earlier node.
    """
    paths_by_name = {}
    resolved_paths = set()
    resolved = []

    for node in nodes:
        parent = node.parent_path

        if parent in ROOT_SENTINELS or parent == "/":
            parent_path = None
            path = "/" + node.name
        else:
            if parent.startswith("/"):
                parent_path = parent if parent in resolved_paths else None
            else:
                parent_path = paths_by_name.get(parent)
            if parent_path is None:
                raise MissingParentError(node.name, parent)
            path = _join(parent_path, node.name)

        if path in resolved_paths:
            raise DuplicatePathError(path)

        resolved_paths.add(path)
        paths_by_name[node.name] = path
        resolved.append(ResolvedNode(node, path, parent_path))

    return resolved


def node_from_data(data):
    if isinstance(data, GenericNode):
        return data
    if not isinstance(data, dict):
        raise DecodeError(f"Expected a node object, got {type(data).__name__}")

    name = data.get("name", "Node")
    type_name = data.get("type", "Node")
    parent = data.get("parent")
    properties = data.get("properties") or {}

    if not isinstance(name, str) or not isinstance(type_name, str):
        raise DecodeError(f"Node name and type must be strings: {data!r}")
    if parent is not None and not isinstance(parent, str):
        raise DecodeError(f"Parent of node {name!r} must be a string or null")
    if not isinstance(properties, dict):
        raise DecodeError(f"Properties of node {name!r} must be an object")

    return GenericNode(
        name,
        type_name,
        parent,
        {key: coerce_property(value) for key, value in properties.items()},
    )


def tree_from_data(data: Any) -> list:
    """Build a node list from a list of nodes or a {"nodes": [...]} document."""
    if isinstance(data, dict):
        data = data.get("nodes", [])
    if not isinstance(data, (list, tuple)):
        raise DecodeError(f"Expected a list of nodes, got {type(data).__name__}")
    return [node_from_data(item) for item in data]


def load_tree(path):
    if not os.path.exists(path):
        raise SourceNotFound("Tree", path)

    with open(path) as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise DecodeError(f"Failed to decode tree {path}: {e}") from e

    return tree_from_data(data)
