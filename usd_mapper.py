import logging
from contextlib import contextmanager
from dataclasses import dataclass

from pxr import Gf, Sdf, Tf, Usd

from errors import AuthoringFailed, InvalidNodeName, StoreOpenFailed
from scene_tree import GenericNode, Transform, Vector3, coerce_property

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MappingStats:
    nodes: int = 0
    attributes: int = 0
    skipped: int = 0


@contextmanager
def created_stage(path):
    """Author a stage in memory and export it to path if the block succeeds.

    Nothing reaches the disk when the block raises.
    """
    stage = Usd.Stage.CreateInMemory()

    yield stage

    try:
        exported = stage.GetRootLayer().Export(path)
    except Tf.ErrorException as e:
        raise StoreOpenFailed(f"Failed to write USD stage {path}: {e}") from e
    if not exported:
        raise StoreOpenFailed(f"Failed to write USD stage {path}")


@contextmanager
def opened_stage(path):
    try:
        stage = Usd.Stage.Open(path)
    except Tf.ErrorException as e:
        raise StoreOpenFailed(f"Failed to open USD stage {path}: {e}") from e
    if not stage:
        raise StoreOpenFailed(f"Failed to open USD stage {path}")

    yield stage


def attribute_for(value):
    """Return (value type, usd value) for a property, or None if it can't be stored."""
    value = coerce_property(value)

    if isinstance(value, Vector3):
        return Sdf.ValueTypeNames.Vector3f, Gf.Vec3f(value.x, value.y, value.z)
    if isinstance(value, Transform):
        origin = value.origin
        matrix = Gf.Matrix4d(1.0)
        matrix.SetTranslate(Gf.Vec3d(origin.x, origin.y, origin.z))
        return Sdf.ValueTypeNames.Matrix4d, matrix
    if isinstance(value, dict):
        return None
    # bool is an int, so it has to be checked first.
    if isinstance(value, bool):
        return Sdf.ValueTypeNames.Bool, value
    if isinstance(value, (int, float)):
        return Sdf.ValueTypeNames.Float, float(value)
    if isinstance(value, str):
        return Sdf.ValueTypeNames.String, value
    return None


def plan_attributes(node):
    """Split a node's properties into storable attributes and skipped names."""
    attributes = []
    skipped = []

    for name, value in node.properties.items():
        attribute = attribute_for(value) if Sdf.Path.IsValidNamespacedIdentifier(name) else None
        if attribute is None:
            logger.warning("Skipping property %s.%s: %r has no USD attribute type", node.name, name, value)
            skipped.append(name)
            continue
        attributes.append((name,) + attribute)

    return attributes, skipped


def plan_tree(resolved):
    """Validate every node and plan its attributes without touching a stage.

    Raises InvalidNodeName for a node no prim can be defined for, so a tree
    that fails leaves nothing behind.
    """
    plan = []
    for entry in resolved:
        if not Sdf.Path.IsValidIdentifier(entry.node.name):
            raise InvalidNodeName(entry.node.name)
        attributes, skipped = plan_attributes(entry.node)
        plan.append((entry, attributes, skipped))
    return plan


def _clashes_with_schema(prim, name, value_type):
    # Schema attributes (visibility, xformOpOrder, ...) keep their own type.
    existing = prim.GetAttribute(name)
    return existing.IsDefined() and existing.GetTypeName().type != value_type.type


def write_tree(stage, plan):
    """Define one prim per planned node and attach its attributes.

    Properties whose name is taken by a schema attribute of another type
    are skipped like unsupported shapes.
    """
    attribute_count = 0
    skipped_count = 0

    for entry, attributes, skipped in plan:
        skipped_count += len(skipped)

        try:
            prim = stage.DefinePrim(entry.path, entry.node.type_name)
            logger.debug("Defined %s prim %s", entry.node.type_name or "typeless", entry.path)

            for name, value_type, value in attributes:
                if _clashes_with_schema(prim, name, value_type):
                    logger.warning(
                        "Skipping property %s.%s: %s schema defines it as %s",
                        entry.node.name, name, entry.node.type_name, prim.GetAttribute(name).GetTypeName(),
                    )
                    skipped_count += 1
                    continue

                prim.CreateAttribute(name, value_type).Set(value)
                logger.debug("Set %s.%s (%s) = %r", entry.path, name, value_type, value)
                attribute_count += 1
        except Tf.ErrorException as e:
            raise AuthoringFailed(f"Failed to author {entry.path}: {e}") from e

    return MappingStats(len(plan), attribute_count, skipped_count)


def _read_prim(prim, parent_path, nodes):
    path = str(prim.GetPath())

    properties = {}
    for attr in prim.GetAuthoredAttributes():
        value = attr.Get()
        if value is None:
            continue
        properties[attr.GetName()] = value

    nodes.append(GenericNode(prim.GetName(), str(prim.GetTypeName()), parent_path, properties))

    for child in prim.GetChildren():
        _read_prim(child, path, nodes)


def read_tree(stage):
    """Walk the stage depth first and return its prims as generic nodes.

    Attribute values are carried through as returned by USD, so Vector3 and
    Transform properties come back as Gf values rather than their tags.
    """
    nodes = []
    for prim in stage.GetPseudoRoot().GetChildren():
        _read_prim(prim, None, nodes)
    return nodes
