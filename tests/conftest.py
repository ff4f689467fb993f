import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(PROJECT_ROOT))

from scene_tree import GenericNode  # noqa: E402


@pytest.fixture
def two_node_tree() -> list:
    return [
        GenericNode("Root", "Node3D", None, {}),
        GenericNode("Child", "Mesh", "Root", {"visible": True}),
    ]


@pytest.fixture
def sample_tscn(tmp_path) -> Path:
    path = tmp_path / "main.tscn"
    path.write_text(
        "[gd_scene load_steps=1 format=3]\n"
        "\n"
        '[node name="Main" type="Node3D"]\n'
        "\n"
        '[node name="Player" type="CharacterBody3D" parent="."]\n'
        "speed = 4.5\n"
        "position = Vector3(1, 2, 3)\n"
        "\n"
        '[node name="Camera" type="Camera3D" parent="Player"]\n'
        "current = true\n"
        'label = "eye"\n'
    )
    return path
