# tests/test_storage.py
import json

import pytest

from scenery.core.models import new_scene
from scenery.storage.manager import (
    StorageManager,
    create_scene_on_disk,
    load_scene_from_disk,
    save_scene_to_disk,
)


def test_create_save_load_scene(tmp_path):
    scene = new_scene("cave", img="maps/cave.png")
    root = create_scene_on_disk(tmp_path, scene)
    assert (root / "scene.json").exists()
    loaded = load_scene_from_disk(root)
    assert loaded.name == "cave"
    assert loaded.img == "maps/cave.png"
    assert loaded.created_at

    loaded.img = "maps/cave-lit.png"
    save_scene_to_disk(loaded)
    assert load_scene_from_disk(root).img == "maps/cave-lit.png"


def test_create_existing_scene_fails(tmp_path):
    manager = StorageManager(tmp_path)
    manager.create_scene("dup")
    with pytest.raises(FileExistsError):
        manager.create_scene("dup")


def test_storage_manager_layout_and_listing(tmp_path):
    manager = StorageManager(tmp_path)
    assert list(manager.list_scenes()) == []
    manager.create_scene("beta")
    manager.create_scene("alpha")
    (tmp_path / "Scenes" / "not-a-scene").mkdir()
    assert list(manager.list_scenes()) == ["alpha", "beta"]
    assert (tmp_path / "Scenes" / "alpha" / "scene.json").exists()


def test_load_scene_by_name_and_path(tmp_path):
    manager = StorageManager(tmp_path)
    manager.create_scene("forest", img="forest.png")
    assert manager.load_scene("forest").img == "forest.png"
    assert manager.load_scene(tmp_path / "Scenes" / "forest").name == "forest"
    with pytest.raises(FileNotFoundError, match="not found"):
        manager.load_scene("ghost")


def test_set_flag_is_full_replacement_and_persisted(tmp_path):
    manager = StorageManager(tmp_path)
    scene = manager.create_scene("keep", img="keep.png")
    flags = manager.flags(scene)
    flags.set("scenery", "data", {"background": "keep.png", "gmImage": "a.png"})
    flags.set("scenery", "data", {"background": "keep.png"})
    reloaded = manager.load_scene("keep")
    assert reloaded.get_flag("scenery", "data") == {"background": "keep.png"}
    assert flags.get("scenery", "data") == {"background": "keep.png"}

    assert flags.unset("scenery", "data") is True
    assert manager.load_scene("keep").get_flag("scenery", "data") is None


def test_update_image(tmp_path):
    manager = StorageManager(tmp_path)
    scene = manager.create_scene("hall", img="hall.png")
    manager.update_image(scene, "hall-night.png")
    assert manager.load_scene("hall").img == "hall-night.png"


def test_set_flag_with_image_is_one_save(tmp_path, monkeypatch):
    manager = StorageManager(tmp_path)
    scene = manager.create_scene("hall", img="hall.png")
    saves = []
    original = manager.save_scene

    def _counting_save(s):
        saves.append(s)
        original(s)

    monkeypatch.setattr(manager, "save_scene", _counting_save)
    manager.set_flag(scene, "scenery", "data", {"background": "hall-night.png"}, img="hall-night.png")
    assert len(saves) == 1
    reloaded = manager.load_scene("hall")
    assert reloaded.img == "hall-night.png"
    assert reloaded.get_flag("scenery", "data") == {"background": "hall-night.png"}
    assert scene.img == "hall-night.png"


def test_failed_save_leaves_scene_unchanged(tmp_path, monkeypatch):
    manager = StorageManager(tmp_path)
    scene = manager.create_scene("hall", img="hall.png")
    manager.set_flag(scene, "scenery", "data", {"background": "hall.png"})
    modified = scene.modified_at

    def _fail(_scene):
        raise OSError("disk full")

    monkeypatch.setattr(manager, "save_scene", _fail)
    with pytest.raises(OSError):
        manager.set_flag(scene, "scenery", "data", {"background": "x.png"}, img="x.png")
    with pytest.raises(OSError):
        manager.unset_flag(scene, "scenery", "data")
    with pytest.raises(OSError):
        manager.update_image(scene, "x.png")

    assert scene.img == "hall.png"
    assert scene.get_flag("scenery", "data") == {"background": "hall.png"}
    assert scene.modified_at == modified


def test_delete_scene(tmp_path):
    manager = StorageManager(tmp_path)
    manager.create_scene("gone")
    manager.delete_scene("gone")
    assert not (tmp_path / "Scenes" / "gone").exists()
    with pytest.raises(FileNotFoundError):
        manager.delete_scene("gone")


def test_global_language(tmp_path):
    manager = StorageManager(tmp_path)
    assert manager.get_global_language(default="en") == "en"
    manager.set_global_language("zh_CN")
    assert manager.get_global_language() == "zh_CN"
    data = json.loads((tmp_path / "global_metadata.json").read_text(encoding="utf-8"))
    assert data == {"language": "zh_CN"}

    (tmp_path / "global_metadata.json").write_text("{broken", encoding="utf-8")
    assert manager.load_global_metadata() == {}
