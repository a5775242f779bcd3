# tests/test_resolver.py
from scenery.core.models import SceneryConfig, SceneryData, Variation
from scenery.core.resolver import ResolverState, VariationResolver, resolve


class FakeCanvas:
    def __init__(self):
        self.calls = []

    def apply_image(self, path):
        self.calls.append(("apply", path))

    def force_redraw(self):
        self.calls.append(("draw",))


class FakeScheduler:
    def __init__(self):
        self.pending = []

    def __call__(self, delay_ms, callback):
        self.pending.append((delay_ms, callback))

    def run_all(self):
        pending, self.pending = self.pending, []
        for _delay, cb in pending:
            cb()


DATA = SceneryData(
    background="room.png",
    variations=[Variation("night", "room-night.png")],
    gm_image="room-night.png",
    pl_image="room.png",
)


def test_resolve_by_role():
    assert resolve(DATA, True) == "room-night.png"
    assert resolve(DATA, False) == "room.png"
    assert resolve(DATA.to_dict(), True) == "room-night.png"


def test_resolve_without_configuration_is_noop():
    assert resolve(None, True) is None
    assert resolve({}, False) is None


def test_viewer_init_applies_without_redraw():
    canvas = FakeCanvas()
    sched = FakeScheduler()
    r = VariationResolver(canvas, scheduler=sched)
    assert r.state == ResolverState.UNINITIALIZED
    assert r.on_viewer_init(DATA.to_dict(), is_privileged=False) == "room.png"
    assert canvas.calls == [("apply", "room.png")]
    assert sched.pending == []
    assert r.state == ResolverState.RESOLVED
    assert r.active_image == "room.png"


def test_viewer_init_without_data_keeps_current_image():
    canvas = FakeCanvas()
    r = VariationResolver(canvas)
    assert r.on_viewer_init(None, is_privileged=True) is None
    assert canvas.calls == []
    assert r.state == ResolverState.RESOLVED


def test_scene_update_draws_now_and_once_more_later():
    canvas = FakeCanvas()
    sched = FakeScheduler()
    r = VariationResolver(canvas, scheduler=sched)
    update = {"flags": {"scenery": {"data": DATA.to_dict()}}}
    assert r.on_scene_updated(update, is_privileged=True) == "room-night.png"
    assert canvas.calls == [("apply", "room-night.png"), ("draw",)]
    assert [d for d, _ in sched.pending] == [60]
    sched.run_all()
    assert canvas.calls[-1] == ("draw",)
    assert len(canvas.calls) == 3


def test_scene_update_flattened_key():
    canvas = FakeCanvas()
    r = VariationResolver(canvas, config=SceneryConfig(redraw_delay_ms=5))
    r.on_scene_updated({"flags.scenery.data": DATA.to_dict()}, is_privileged=False)
    assert canvas.calls == [("apply", "room.png"), ("draw",)]


def test_scene_update_not_touching_key_does_nothing():
    canvas = FakeCanvas()
    sched = FakeScheduler()
    r = VariationResolver(canvas, scheduler=sched)
    assert r.on_scene_updated({"img": "other.png"}, True) is None
    assert r.on_scene_updated({"flags": {"other": {"data": {}}}}, True) is None
    assert canvas.calls == []
    assert sched.pending == []
    assert r.state == ResolverState.UNINITIALIZED


def test_scene_update_resolves_again_each_time():
    canvas = FakeCanvas()
    r = VariationResolver(canvas)
    r.on_viewer_init(DATA, True)
    newer = SceneryData(background="hall.png", gm_image="hall.png", pl_image="hall.png")
    r.on_scene_updated({"flags": {"scenery": {"data": newer.to_dict()}}}, True)
    assert r.active_image == "hall.png"
    assert r.state == ResolverState.RESOLVED
