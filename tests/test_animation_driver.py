import pytest

from reveal_app.animation_driver import AnimationPhase, ParticleRevealDriver
from reveal_app.reveal_config import DEFAULT_TITLE, RevealConfig

from conftest import FixedRandom, RecordingSurface


def make_driver(surface, scheduler, clock, **kwargs):
    kwargs.setdefault("rng", FixedRandom(0.5))
    kwargs.setdefault("max_particles", 1300)
    return ParticleRevealDriver(surface=surface, scheduler=scheduler, clock=clock, **kwargs)


def run_to_completion(driver, scheduler, clock, step_ms=100.0, max_frames=200):
    for _ in range(max_frames):
        if not scheduler.pending:
            break
        clock.now += step_ms
        scheduler.fire(clock.now)


def test_mount_starts_and_schedules_one_frame(surface, scheduler, clock):
    running = []
    driver = make_driver(surface, scheduler, clock, on_running_changed=running.append)

    assert driver.mount() is True
    assert driver.mounted
    assert scheduler.scheduled == 1
    assert driver.frame_pending
    assert driver.phase is AnimationPhase.RUNNING
    assert running == [True]
    assert driver.text == DEFAULT_TITLE


def test_each_frame_schedules_exactly_one_next_frame(surface, scheduler, clock):
    driver = make_driver(surface, scheduler, clock)
    driver.start()

    scheduler.fire(clock.now + 16.0)
    assert scheduler.scheduled == 2
    scheduler.fire(clock.now + 32.0)
    assert scheduler.scheduled == 3


def test_progress_is_monotonic_and_reaches_one(surface, scheduler, clock):
    driver = make_driver(surface, scheduler, clock)
    driver.start()
    start = clock.now

    seen = []
    for t in (500.0, 1000.0, 700.0, 1800.0, 2600.0):
        scheduler.fire(start + t)
        seen.append(driver.state.progress)

    assert seen == sorted(seen)
    # Out-of-order timestamp does not move progress backwards.
    assert seen[2] == seen[1]
    assert seen[-1] == 1.0


def test_zero_density_emits_nothing_and_run_finishes(surface, scheduler, clock):
    finished = []
    driver = make_driver(
        surface, scheduler, clock, config=RevealConfig(density=0), on_finished=lambda: finished.append(True)
    )
    driver.start()
    start = clock.now

    for t in (400.0, 1300.0, 2000.0):
        scheduler.fire(start + t)
        assert len(driver.pool) == 0
    scheduler.fire(start + 2600.0)

    assert driver.state.finished
    assert not driver.state.running
    assert not scheduler.pending
    assert finished == [True]
    assert driver.phase is AnimationPhase.FINISHED


def test_run_finishes_after_last_particle_expires(surface, scheduler, clock):
    running = []
    driver = make_driver(
        surface, scheduler, clock, config=RevealConfig(lifespan=200), on_running_changed=running.append
    )
    driver.start()
    start = clock.now

    scheduler.fire(start + 2500.0)
    assert len(driver.pool) > 0

    clock.now = start + 2500.0
    run_to_completion(driver, scheduler, clock)

    assert driver.state.progress == 1.0
    assert len(driver.pool) == 0
    assert driver.state.finished
    assert running == [True, False]


def test_frame_dt_is_capped(surface, scheduler, clock):
    driver = make_driver(surface, scheduler, clock, config=RevealConfig(density=22))
    driver.start()

    # A one second stall is simulated as a single 42ms step.
    scheduler.fire(clock.now + 1000.0)

    # carry 22 * 42 / 220 = 4.2 -> 4 particles, burst round(22 / 9) = 2
    assert len(driver.pool) == 6
    assert driver.state.spawn_carry == pytest.approx(0.2)


def test_equal_timestamps_use_default_step(surface, scheduler, clock):
    driver = make_driver(surface, scheduler, clock, config=RevealConfig(density=16))
    driver.start()

    scheduler.fire(clock.now)

    # carry 16 * 16 / 220 = 1.16 -> 1 particle, burst round(16 / 9) = 2
    assert len(driver.pool) == 3
    assert driver.state.spawn_carry == pytest.approx(16.0 * 16.0 / 220.0 - 1.0)


def test_particle_cap_is_respected(surface, scheduler, clock):
    driver = make_driver(surface, scheduler, clock, config=RevealConfig(density=60), max_particles=5)
    driver.start()

    for t in (16.0, 32.0, 48.0):
        scheduler.fire(clock.now + t)
        assert len(driver.pool) <= 5
    assert len(driver.pool) == 5


def test_restart_cancels_pending_frame(surface, scheduler, clock):
    driver = make_driver(surface, scheduler, clock)
    driver.start()
    scheduler.fire(clock.now + 500.0)
    assert driver.state.progress > 0.0

    clock.now += 600.0
    driver.start()

    assert scheduler.cancelled == 1
    assert scheduler.pending
    assert driver.state.progress == 0.0
    assert driver.state.start_timestamp == clock.now
    assert len(driver.pool) == 0


def test_reduced_motion_mount_renders_final_frame(surface, scheduler, clock):
    finished = []
    driver = make_driver(
        surface, scheduler, clock, text="AB", reduced_motion=True, on_finished=lambda: finished.append(True)
    )

    assert driver.mount() is True

    assert scheduler.scheduled == 0
    assert not driver.frame_pending
    assert driver.state.finished
    assert not driver.state.running
    assert driver.state.progress == 1.0
    assert len(driver.pool) == 0
    assert [op[1] for op in surface.texts()] == ["A", "B"]
    assert all(op[4] == 1.0 for op in surface.texts())
    assert surface.circles() == []
    assert finished == [True]


def test_reduced_motion_start_never_schedules(surface, scheduler, clock):
    driver = make_driver(surface, scheduler, clock, reduced_motion=True)
    driver.mount()
    driver.start()
    driver.resume()

    assert scheduler.scheduled == 0
    assert driver.state.finished


def test_render_static_is_idempotent(surface, scheduler, clock):
    driver = make_driver(surface, scheduler, clock, text="AB")
    driver.mount()

    driver.render_static()
    first = list(surface.ops)
    driver.render_static()

    assert surface.ops == first
    assert driver.state.finished
    assert not scheduler.pending


def test_resize_mid_run_keeps_progress_and_particles(surface, scheduler, clock):
    driver = make_driver(surface, scheduler, clock)
    driver.start()
    scheduler.fire(clock.now + 1000.0)

    progress = driver.state.progress
    particles = len(driver.pool)
    old_layout = driver.layout

    driver.resize(1000.0, 500.0, 2.0)

    assert driver.state.progress == progress
    assert len(driver.pool) == particles
    assert driver.state.running
    assert scheduler.pending
    assert driver.layout is not old_layout
    assert driver.baseline_y == pytest.approx(290.0)
    assert surface.pixel_ratio == 2.0


def test_resize_after_finish_redraws_static_title(surface, scheduler, clock):
    driver = make_driver(surface, scheduler, clock, text="AB", config=RevealConfig(density=0))
    driver.mount()
    scheduler.fire(clock.now + 2600.0)
    assert driver.state.finished

    frames = surface.frames
    driver.resize(600.0, 300.0)

    assert surface.frames == frames + 1
    assert [op[1] for op in surface.texts()] == ["A", "B"]
    assert not scheduler.pending


def test_suspend_and_resume(surface, scheduler, clock):
    driver = make_driver(surface, scheduler, clock)
    driver.start()
    scheduler.fire(clock.now + 100.0)
    progress = driver.state.progress

    driver.suspend()
    assert not scheduler.pending
    assert scheduler.cancelled == 1
    assert driver.phase is AnimationPhase.SUSPENDED
    assert driver.state.progress == progress

    clock.now += 9000.0
    driver.resume()

    assert scheduler.pending
    assert driver.phase is AnimationPhase.RUNNING
    assert driver.state.last_frame_timestamp == clock.now


def test_resume_when_idle_does_nothing(surface, scheduler, clock):
    driver = make_driver(surface, scheduler, clock)
    driver.resume()
    assert scheduler.scheduled == 0
    assert driver.phase is AnimationPhase.IDLE


def test_config_and_text_changes_apply_at_next_start(surface, scheduler, clock):
    driver = make_driver(surface, scheduler, clock)
    driver.start()

    driver.set_config(RevealConfig(text_speed=2.0, mode="word"))
    driver.set_text("  New \n title ")
    assert driver.config.text_speed == 1.0
    assert driver.text == DEFAULT_TITLE

    driver.start()
    assert driver.config.text_speed == 2.0
    assert driver.duration_ms == pytest.approx(1300.0)
    assert driver.text == "New title"
    assert [u.text for u in driver.layout.units] == ["New", " ", "title"]


def test_mount_fails_without_surface(scheduler, clock):
    driver = make_driver(RecordingSurface(ready=False), scheduler, clock)

    assert driver.mount() is False
    assert not driver.mounted
    assert scheduler.scheduled == 0


def test_stop_cancels_pending_frame(surface, scheduler, clock):
    driver = make_driver(surface, scheduler, clock)
    driver.start()
    driver.stop()
    assert not scheduler.pending


def test_resume_without_suspend_leaves_run_untouched(surface, scheduler, clock):
    driver = make_driver(surface, scheduler, clock)
    driver.start()
    last = driver.state.last_frame_timestamp
    scheduled = scheduler.scheduled

    clock.now += 30.0
    driver.resume()

    assert driver.state.last_frame_timestamp == last
    assert scheduler.scheduled == scheduled
    assert driver.phase is AnimationPhase.RUNNING
