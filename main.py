# main.py
"""
Main entry point for the interactive particle field.

This script orchestrates the entire lifecycle:
1. Loads configuration from `config.json`.
2. Initializes the logging system.
3. Opens the window and builds the particle field and simulation.
4. Drives the frame loop: one tick and render per display refresh while
   running, event polling only while paused.
5. Handles clean shutdown.
"""
import argparse
import cProfile
import io
import logging
import pstats
import numpy as np
import pygame
from typing import Tuple
from utils import setup_logging, load_config
from constants import FPS, PAUSED_POLL_FPS, MAX_SHOCKWAVES, SHOCKWAVE_LIFETIME_MS


def read_run_control(run_params: dict) -> Tuple[int, int]:
    """
    Validates the run_control section.

    Returns:
        Tuple[int, int]: (log_throttle_steps, max_steps); max_steps 0 means unbounded.
    """
    log_throttle = int(run_params.get('log_throttle_steps', 300))
    max_steps = int(run_params.get('max_steps', 0))
    if log_throttle <= 0:
        msg = f"Configuration error: log_throttle_steps must be > 0, got {log_throttle}."
        logging.critical(msg)
        raise ValueError(msg)
    if max_steps < 0:
        msg = f"Configuration error: max_steps must be >= 0, got {max_steps}."
        logging.critical(msg)
        raise ValueError(msg)
    return log_throttle, max_steps


def run(config: dict) -> int:
    """
    Runs the interactive simulation until the window closes or max_steps is hit.

    Returns:
        int: The number of simulated ticks.
    """
    sim_params = config.get('simulation_parameters', {})
    run_params = config.get('run_control', {})
    vis_params = config.get('visualization', {})
    log_throttle, max_steps = read_run_control(run_params)

    reduced_motion = bool(vis_params.get('reduced_motion', False))
    if reduced_motion:
        # Particles rest on their homes and the field is never ticked.
        sim_params = dict(sim_params, spawn_mode='home')
        logging.info("Reduced motion enabled: rendering a static field.")

    from particle import ParticleField
    from shockwave import ShockwaveRegistry
    from simulation import Simulation, SimulationInputs
    from loop import SimulationLoop
    from visualization import Visualizer

    # --- Component Initialization ---
    # 1. The visualizer first: it decides the viewport and the palette.
    visualizer = Visualizer(vis_params)

    # 2. The simulation state, sized by the first bind/resize.
    field = ParticleField(sim_params, palette_size=len(visualizer.colors))
    shockwaves = ShockwaveRegistry(
        lifetime_ms=SHOCKWAVE_LIFETIME_MS,
        max_active=int(sim_params.get('max_shockwaves', MAX_SHOCKWAVES))
    )
    sim = Simulation(field, shockwaves, SimulationInputs(), sim_params)
    sim_loop = SimulationLoop(sim, render=visualizer.draw, reduced_motion=reduced_motion)
    visualizer.bind(sim, sim_loop)

    running = True
    while running:
        now = pygame.time.get_ticks()
        if not visualizer.process_events(now):
            break

        if not sim_loop.is_running:
            visualizer.clock.tick(PAUSED_POLL_FPS)
            continue

        if sim_loop.frame(now) and sim.step_count % log_throttle == 0:
            logging.info(f"Simulation tick {sim.step_count}")
            avg_speed = np.mean(np.linalg.norm(field.velocities, axis=1))
            logging.debug(
                f"Tick {sim.step_count} | Average speed: {avg_speed:.4f} | "
                f"Live shockwaves: {len(shockwaves)} | Quadtree nodes: {sim.quadtree.node_count}"
            )

        if max_steps and sim.step_count >= max_steps:
            logging.info(f"Reached max_steps ({max_steps}). Stopping simulation.")
            running = False

        visualizer.clock.tick(FPS)

    visualizer.close()
    logging.info(
        f"Simulation loop finished after {sim.step_count} ticks "
        f"({sim_loop.frames_skipped} frames skipped while off-screen)."
    )
    return sim.step_count


def main():
    """
    The main function to run the simulation.
    """
    parser = argparse.ArgumentParser(description="Interactive particle field.")
    parser.add_argument('--config', default='config.json', help="Path to the JSON configuration file.")
    args = parser.parse_args()

    # Logging is not set up yet, so we use a print for this one error.
    try:
        config = load_config(args.config)
    except Exception as e:
        print(f"FATAL: Could not load {args.config}. Error: {e}")
        return

    setup_logging(config)
    logging.info("--- Particle Field Starting ---")

    if not config.get('run_control', {}).get('profile', False):
        run(config)
        logging.info("--- Particle Field Shutting Down ---")
        return

    profiler = cProfile.Profile()
    profiler.enable()
    run(config)
    profiler.disable()

    logging.info("--- Performance Profile ---")
    s = io.StringIO()
    # Sort by cumulative time spent in the function
    stats = pstats.Stats(profiler, stream=s).sort_stats('cumtime')
    stats.print_stats(20)
    logging.info(f"\n{s.getvalue()}")

    logging.info("--- Particle Field Shutting Down ---")


if __name__ == "__main__":
    main()
