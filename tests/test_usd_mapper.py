import pytest
from pxr import Gf, Sdf, Tf, Usd

from errors import AuthoringFailed, InvalidNodeName
from scene_tree import GenericNode, Transform, Vector3, resolve_tree
from usd_mapper import attribute_for, plan_attributes, plan_tree, read_tree, write_tree


def _write(nodes):
    stage = Usd.Stage.CreateInMemory()
    stats = write_tree(stage, plan_tree(resolve_tree(nodes)))
    return stage, stats


def test_attribute_for_keeps_booleans_boolean():
    assert attribute_for(True) == (Sdf.ValueTypeNames.Bool, True)


def test_attribute_for_stores_numbers_as_float():
    value_type, value = attribute_for(3)

    assert value_type == Sdf.ValueTypeNames.Float
    assert isinstance(value, float)
    assert value == 3.0


def test_attribute_for_stores_strings():
    assert attribute_for("crate") == (Sdf.ValueTypeNames.String, "crate")


def test_attribute_for_vectors():
    value_type, value = attribute_for(Vector3(1, 2, 3))

    assert value_type == Sdf.ValueTypeNames.Vector3f
    assert value == Gf.Vec3f(1, 2, 3)


def test_attribute_for_transform_sets_only_translation():
    value_type, value = attribute_for({"type": "Transform", "origin": {"x": 1, "y": 2, "z": 3}})

    assert value_type == Sdf.ValueTypeNames.Matrix4d
    assert value.ExtractTranslation() == Gf.Vec3d(1, 2, 3)
    assert value.ExtractRotationMatrix() == Gf.Matrix3d(1.0)


@pytest.mark.parametrize("value", [{"type": "Color", "r": 1}, [1, 2], None])
def test_attribute_for_unsupported_shapes(value):
    assert attribute_for(value) is None


def test_plan_attributes_skips_names_usd_cannot_hold():
    node = GenericNode("Root", "Node3D", None, {"metadata/tag": "a", "tag": "b", "tint": {"type": "Color"}})

    attributes, skipped = plan_attributes(node)

    assert [attribute[0] for attribute in attributes] == ["tag"]
    assert sorted(skipped) == ["metadata/tag", "tint"]


def test_plan_tree_rejects_invalid_prim_names():
    with pytest.raises(InvalidNodeName):
        plan_tree(resolve_tree([GenericNode("My Node", "Node3D")]))


def test_write_tree_defines_example_hierarchy(two_node_tree):
    stage, stats = _write(two_node_tree)

    assert [str(prim.GetPath()) for prim in stage.Traverse()] == ["/Root", "/Root/Child"]
    assert stage.GetPrimAtPath("/Root").GetTypeName() == "Node3D"

    child = stage.GetPrimAtPath("/Root/Child")
    assert child.GetTypeName() == "Mesh"
    assert [attr.GetName() for attr in child.GetAuthoredAttributes()] == ["visible"]
    assert child.GetAttribute("visible").GetTypeName() == Sdf.ValueTypeNames.Bool
    assert child.GetAttribute("visible").Get() is True
    assert stats.nodes == 2
    assert stats.attributes == 1
    assert stats.skipped == 0


def test_write_tree_creates_one_prim_per_node():
    nodes = [GenericNode("World", "Xform")]
    nodes += [GenericNode(f"Item{i}", "Xform", "World") for i in range(5)]
    nodes += [GenericNode("Leaf", "Xform", "Item3")]

    stage, stats = _write(nodes)
    paths = [str(prim.GetPath()) for prim in stage.Traverse()]

    assert len(paths) == len(nodes) == stats.nodes
    assert "/World/Item3/Leaf" in paths


def test_write_tree_counts_skipped_properties():
    _, stats = _write([GenericNode("Root", "Node3D", None, {"points": [1, 2, 3], "size": 2})])

    assert stats.attributes == 1
    assert stats.skipped == 1


def test_read_tree_references_parent_paths(two_node_tree):
    stage, _ = _write(two_node_tree + [GenericNode("Leaf", "Xform", "Child")])

    nodes = read_tree(stage)

    assert [(node.name, node.parent_path) for node in nodes] == [
        ("Root", None),
        ("Child", "/Root"),
        ("Leaf", "/Root/Child"),
    ]


def test_plain_properties_round_trip():
    properties = {"speed": 1.5, "count": 3, "label": "crate", "visible": False}
    nodes = [
        GenericNode("Root", "Node3D"),
        GenericNode("Box", "Mesh", "Root", properties),
    ]
    stage, _ = _write(nodes)

    back = read_tree(stage)

    assert [(node.name, node.type_name) for node in back] == [("Root", "Node3D"), ("Box", "Mesh")]
    assert back[1].properties == properties
    assert [entry.path for entry in resolve_tree(back)] == ["/Root", "/Root/Box"]


def test_vector_and_transform_properties_do_not_round_trip():
    properties = {
        "offset": Vector3(1, 2, 3),
        "pose": Transform(Vector3(4, 5, 6)),
    }
    stage, _ = _write([GenericNode("Root", "Node3D", None, properties)])

    back = read_tree(stage)[0].properties

    assert back != properties
    assert not isinstance(back["offset"], Vector3)
    assert back["offset"] == Gf.Vec3f(1, 2, 3)
    assert not isinstance(back["pose"], Transform)
    assert isinstance(back["pose"], Gf.Matrix4d)
    assert back["pose"].ExtractTranslation() == Gf.Vec3d(4, 5, 6)


def test_write_tree_skips_properties_shadowing_schema_attributes():
    properties = {"visibility": True, "purpose": 2, "health": 10}
    stage, stats = _write([GenericNode("Root", "Xform", None, properties)])

    prim = stage.GetPrimAtPath("/Root")
    assert stats.attributes == 1
    assert stats.skipped == 2
    assert prim.GetAttribute("visibility").GetTypeName() == Sdf.ValueTypeNames.Token
    assert not prim.GetAttribute("visibility").HasAuthoredValue()
    assert prim.GetAttribute("health").Get() == 10.0


class _RejectingStage:
    def DefinePrim(self, path, type_name):
        raise Tf.ErrorException("rejected")


def test_write_tree_wraps_usd_errors():
    plan = plan_tree(resolve_tree([GenericNode("Root", "Xform")]))

    with pytest.raises(AuthoringFailed) as excinfo:
        write_tree(_RejectingStage(), plan)

    assert "/Root" in str(excinfo.value)
