# tests/test_models.py
from scenery.core.models import (
    Scene,
    SceneryConfig,
    SceneryData,
    Variation,
    get_property,
    has_property,
    new_scene,
)


def test_scenery_data_roundtrip_uses_wire_keys():
    data = SceneryData(
        background="maps/room.png",
        variations=[Variation("night", "maps/room-night.png")],
        gm_image="maps/room-night.png",
        pl_image="maps/room.png",
    )
    d = data.to_dict()
    assert d == {
        "background": "maps/room.png",
        "variations": [{"name": "night", "file": "maps/room-night.png"}],
        "gmImage": "maps/room-night.png",
        "plImage": "maps/room.png",
    }
    assert SceneryData.from_json(data.to_json()) == data


def test_scenery_data_reads_legacy_short_keys():
    data = SceneryData.from_dict(
        {
            "bg": "a.png",
            "gm": "b.png",
            "pl": "a.png",
            "variations": [{"name": "B", "file": "b.png"}],
        }
    )
    assert data.background == "a.png"
    assert data.image_for(True) == "b.png"
    assert data.image_for(False) == "a.png"
    assert data.variations == [Variation("B", "b.png")]


def test_variation_coerce_accepts_pairs_and_mappings():
    assert Variation.coerce(("A", "a.png")) == Variation("A", "a.png")
    assert Variation.coerce({"name": "B"}) == Variation("B", "")
    original = Variation("C", "c.png")
    copy = Variation.coerce(original)
    assert copy == original and copy is not original


def test_scene_flags_replace_and_unset():
    scene = new_scene("tavern", img="tavern.png")
    payload = {"background": "tavern.png", "variations": []}
    scene.set_flag("scenery", "data", payload)
    payload["background"] = "changed.png"
    # stored value is a copy
    assert scene.get_flag("scenery", "data")["background"] == "tavern.png"

    scene.set_flag("scenery", "data", {"background": "other.png"})
    assert scene.get_flag("scenery", "data") == {"background": "other.png"}

    assert scene.unset_flag("scenery", "data") is True
    assert scene.get_flag("scenery", "data") is None
    assert scene.flags == {}
    assert scene.unset_flag("scenery", "data") is False


def test_scene_json_roundtrip():
    scene = new_scene("crypt", img="crypt.png")
    scene.set_flag("scenery", "data", {"background": "crypt.png"})
    loaded = Scene.from_json(scene.to_json())
    assert loaded.id == scene.id
    assert loaded.img == "crypt.png"
    assert loaded.get_flag("scenery", "data") == {"background": "crypt.png"}


def test_property_lookup_nested_and_flattened():
    nested = {"flags": {"scenery": {"data": {"gmImage": "x"}}}}
    flat = {"flags.scenery.data": {"gmImage": "y"}}
    mixed = {"flags": {"scenery.data": {"gmImage": "z"}}}
    assert get_property(nested, "flags.scenery.data") == {"gmImage": "x"}
    assert get_property(flat, "flags.scenery.data") == {"gmImage": "y"}
    assert get_property(mixed, "flags.scenery.data") == {"gmImage": "z"}
    assert not has_property({"flags": {"other": {}}}, "flags.scenery.data")
    assert get_property({"img": "a.png"}, "flags.scenery.data", "none") == "none"


def test_config_flag_path_and_dict():
    cfg = SceneryConfig.from_dict({"flag_scope": "mod", "redraw_delay_ms": 10})
    assert cfg.flag_path == "flags.mod.data"
    assert cfg.redraw_delay_ms == 10
    assert SceneryConfig.from_dict(cfg.to_dict()) == cfg
