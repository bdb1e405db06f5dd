import numpy as np

from loop import LoopState, SimulationLoop

FRAME_MS = 1000 / 60


def test_running_frames_tick_and_render(make_simulation):
    sim = make_simulation(count=20)
    renders = []
    loop = SimulationLoop(sim, render=lambda: renders.append(sim.step_count))

    for tick in range(5):
        assert loop.frame(tick * FRAME_MS)

    assert loop.state is LoopState.RUNNING
    assert sim.step_count == 5
    assert renders == [1, 2, 3, 4, 5]


def test_pause_freezes_state_and_resume_continues(make_simulation):
    sim = make_simulation(count=20, spawn_mode="rain")
    loop = SimulationLoop(sim)
    for tick in range(3):
        loop.frame(tick * FRAME_MS)
    frozen = sim.field.positions.copy()

    loop.set_foreground(False)
    assert loop.state is LoopState.PAUSED
    for tick in range(3, 300):
        assert not loop.frame(tick * FRAME_MS)

    assert sim.step_count == 3
    np.testing.assert_array_equal(sim.field.positions, frozen)

    loop.set_foreground(True)
    assert loop.is_running
    assert loop.frame(300 * FRAME_MS)
    assert sim.step_count == 4
    assert len(sim.field) == 20


def test_offscreen_section_consumes_frames_without_ticking(make_simulation):
    sim = make_simulation(count=5)
    renders = []
    loop = SimulationLoop(sim, render=lambda: renders.append(1))

    loop.set_section_visible(False)
    assert loop.is_running
    assert not loop.frame(0)
    assert loop.frames_skipped == 1
    assert sim.step_count == 0
    assert renders == []

    loop.set_section_visible(True)
    assert loop.frame(FRAME_MS)
    assert renders == [1]


def test_foreground_regained_while_offscreen_stays_paused(make_simulation):
    sim = make_simulation(count=5)
    loop = SimulationLoop(sim)

    loop.set_foreground(False)
    loop.set_section_visible(False)
    loop.set_foreground(True)
    assert loop.state is LoopState.PAUSED

    loop.set_section_visible(True)
    assert loop.state is LoopState.RUNNING


def test_reduced_motion_renders_without_ticking(make_simulation):
    sim = make_simulation(count=20, spawn_mode="home")
    renders = []
    loop = SimulationLoop(sim, render=lambda: renders.append(sim.step_count), reduced_motion=True)
    sim.inputs.set_pointer(250, 250)
    sim.trigger_shockwave(250, 250, now=0)

    for tick in range(10):
        assert not loop.frame(tick * FRAME_MS)

    assert loop.is_running
    assert renders == [0] * 10
    assert loop.frames_run == 10
    assert sim.step_count == 0
    np.testing.assert_array_equal(sim.field.positions, sim.field.homes)
    assert not sim.field.velocities.any()
