import math
import random

import pytest

from backdrop.engine import (
    DESTROYED,
    INERT,
    RUNNING,
    UNINITIALIZED,
    GeometricBackground,
    ParticleNetwork,
    create_background,
)
from backdrop.particles import Particle


def _network(seed=1, config=None):
    return ParticleNetwork(config, rng=random.Random(seed))


def _rest_in_bounds(net):
    return all(0.0 <= p.base_x <= net.width and 0.0 <= p.base_y <= net.height for p in net.particles)


def test_initialize_binds_and_populates(target, scheduler):
    net = _network()
    assert net.state == UNINITIALIZED
    assert net.initialize("backgroundCanvas", {"backgroundCanvas": target}.get, scheduler)
    assert net.state == RUNNING
    assert (net.width, net.height) == (800, 600)
    assert len(net.particles) == 80
    assert scheduler.active
    scheduler.fire()
    assert target.updates == 1
    assert net.last_frame is not None
    assert len(net.last_frame.discs) == 80


def test_missing_target_leaves_background_inert(scheduler, capsys):
    net = _network()
    assert net.initialize("missing", {}.get, scheduler) is False
    assert net.state == INERT
    assert not scheduler.active
    assert net.particles == []
    assert "not found" in capsys.readouterr().err
    frame = net.tick(dark_mode=True)
    assert frame.empty
    net.resize(1024, 768)
    net.pointer_move(10, 10)
    assert net.tick().empty


def test_tick_before_initialize_is_empty():
    net = _network()
    net.resize(640, 480)
    assert (net.width, net.height) == (640, 480)
    assert net.tick().empty


def test_resize_is_applied_on_next_tick(target):
    net = _network()
    net.initialize("s", {"s": target}.get)
    before = list(net.particles)
    net.resize(400, 300)
    assert net.pending_size == (400, 300)
    assert net.particles == before
    assert (net.width, net.height) == (800, 600)

    net.tick()
    assert net.pending_size is None
    assert (net.width, net.height) == (400, 300)
    assert len(net.particles) == net.particle_count == 40
    assert not any(p is q for p in net.particles for q in before)
    assert _rest_in_bounds(net)


def test_only_last_resize_counts(target):
    net = _network()
    net.initialize("s", {"s": target}.get)
    net.resize(300, 200)
    net.resize(1280, 720)
    net.tick()
    assert (net.width, net.height) == (1280, 720)
    assert len(net.particles) == 80


def test_rest_positions_in_bounds_across_resizes(make_target):
    rng = random.Random(4)
    net = _network(config={"network": {"speed": 6.0}})
    net.initialize("s", {"s": make_target(900, 700)}.get)
    for frame in range(400):
        if frame % 50 == 0:
            net.resize(rng.randint(100, 1600), rng.randint(100, 1000))
        if frame % 9 == 0:
            net.pointer_move(rng.uniform(0, net.width), rng.uniform(0, net.height))
        if frame % 13 == 0:
            net.pointer_leave()
        net.tick()
        assert _rest_in_bounds(net)


def test_pointer_and_touch_events(target):
    net = _network()
    net.initialize("s", {"s": target}.get)
    net.pointer_move(12, 34)
    assert net.pointer.active
    assert (net.pointer.x, net.pointer.y) == (12.0, 34.0)
    net.pointer_leave()
    assert not net.pointer.active

    net.touch_move([(5.0, 6.0), (100.0, 100.0)])
    assert (net.pointer.x, net.pointer.y) == (5.0, 6.0)
    net.touch_move([])
    assert (net.pointer.x, net.pointer.y) == (5.0, 6.0)
    net.touch_end()
    assert not net.pointer.active
    assert net.pointer.radius == 150.0


def test_tick_applies_force_model(target):
    net = _network()
    net.initialize("s", {"s": target}.get)
    particle = Particle(400.0, 300.0, 400.0, 300.0, 0.0, 0.0, 2.0, 9.0)
    net.particles = [particle]
    net.pointer_move(400.0, 310.0)
    net.tick()
    assert particle.y == pytest.approx(300.0 - (140.0 / 150.0) * 9.0)
    assert particle.x == pytest.approx(400.0)


def test_tick_builds_links_and_frame(target):
    net = _network()
    net.initialize("s", {"s": target}.get)
    net.particles = [
        Particle(100.0, 100.0, 100.0, 100.0, 0.0, 0.0, 2.0, 5.0),
        Particle(160.0, 100.0, 160.0, 100.0, 0.0, 0.0, 3.0, 5.0),
        Particle(700.0, 500.0, 700.0, 500.0, 0.0, 0.0, 1.5, 5.0),
    ]
    frame = net.tick(dark_mode=False)
    assert len(net.links) == 1
    assert len(frame.discs) == 3
    assert len(frame.segments) == 1
    assert frame.segments[0].color.a == pytest.approx((1 - 60.0 / 120.0) * 0.3)
    assert (frame.width, frame.height) == (800, 600)


def test_dark_mode_is_read_per_tick(target):
    net = _network()
    net.initialize("s", {"s": target}.get)
    light = net.tick(dark_mode=False)
    dark = net.tick(dark_mode=True)
    assert (light.discs[0].color.r, light.discs[0].color.g, light.discs[0].color.b) == (54, 133, 251)
    assert (dark.discs[0].color.r, dark.discs[0].color.g, dark.discs[0].color.b) == (255, 255, 255)


def test_visibility_fades_without_pausing(target):
    net = _network()
    net.initialize("s", {"s": target}.get)
    net.set_visible(False)
    rest_before = [p.rest for p in net.particles]
    frame = net.tick()
    assert frame.opacity == 0.0
    assert [p.rest for p in net.particles] != rest_before
    net.set_visible(True)
    assert net.tick().opacity == 1.0


def test_scheduler_ticks_with_current_theme(target, scheduler):
    dark = [False]
    net = _network()
    net.initialize("s", {"s": target}.get, scheduler, dark_source=lambda: dark[0])
    scheduler.fire()
    assert net.last_frame.dark_mode is False
    dark[0] = True
    scheduler.fire()
    assert net.last_frame.dark_mode is True
    assert target.updates == 2


def test_hidden_surface_keeps_stepping_on_schedule(target, scheduler):
    net = _network()
    net.initialize("s", {"s": target}.get, scheduler)
    net.set_visible(False)
    rest_before = [p.rest for p in net.particles]
    for _ in range(10):
        scheduler.fire()
    assert [p.rest for p in net.particles] != rest_before
    assert net.last_frame.opacity == 0.0


def test_stop_resume_and_destroy(target, scheduler):
    net = _network()
    net.initialize("s", {"s": target}.get, scheduler)
    net.stop()
    assert not scheduler.active
    assert net.state == RUNNING
    net.resume()
    assert scheduler.active and scheduler.starts == 2
    net.destroy()
    assert net.state == DESTROYED
    assert not scheduler.active
    assert net.particles == []
    assert net.last_frame is None
    assert net.tick().empty
    net.resume()
    assert not scheduler.active


def test_initialize_twice_is_ignored(target, make_target):
    net = _network()
    net.initialize("s", {"s": target}.get)
    assert net.initialize("s", {"s": make_target(100, 100)}.get)
    assert net.width == 800


def test_geometric_background(target):
    bg = GeometricBackground(rng=random.Random(2))
    bg.initialize("s", {"s": target}.get)
    assert len(bg.shapes) == 15
    bg.pointer_move(10, 10)
    frame = bg.tick(dark_mode=True)
    assert len(frame.outlines) == 15
    assert not frame.discs and not frame.segments
    assert {o.color.a for o in frame.outlines} == {s.opacity for s in bg.shapes}
    bg.resize(500, 400)
    bg.tick()
    assert len(bg.shapes) == 8


def test_shapes_stay_near_surface(target):
    bg = GeometricBackground(rng=random.Random(8), config={"shapes": {"speed": 40.0}})
    bg.initialize("s", {"s": target}.get)
    for _ in range(200):
        bg.tick()
        for s in bg.shapes:
            assert -s.size - 20 <= s.x <= bg.width + s.size + 20
            assert -s.size - 20 <= s.y <= bg.height + s.size + 20


def test_create_background_uses_style():
    assert isinstance(create_background(), ParticleNetwork)
    assert isinstance(create_background({"system": {"style": "shapes"}}), GeometricBackground)


def test_config_overrides_counts(target):
    net = _network(config={"network": {"particleCount": 12, "linkDistance": 50}})
    net.initialize("s", {"s": target}.get)
    assert len(net.particles) == 12
    assert net.link_distance == 50.0
    assert all(math.isfinite(p.size) for p in net.particles)
