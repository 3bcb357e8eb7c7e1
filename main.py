# main.py
"""
Main entry point for Particula, the interactive particle ring.

Loads `config.json`, sets up logging, opens the window and runs the frame
loop until the window is closed or `run_control.max_steps` is reached.
"""
import cProfile
import io
import logging
import pstats
import sys

from utils import setup_logging, load_config


def _log_profile(profiler: cProfile.Profile, limit: int = 20) -> None:
    buffer = io.StringIO()
    pstats.Stats(profiler, stream=buffer).sort_stats('cumtime').print_stats(limit)
    logging.info(f"--- Performance Profile (top {limit} by cumulative time) ---\n{buffer.getvalue()}")


def main(config_path: str = 'config.json'):
    """
    Runs the particle ring until the window is closed.
    """
    try:
        config = load_config(config_path)
    except Exception as e:
        # Logging is not configured yet.
        print(f"FATAL: Could not load {config_path}. Error: {e}")
        return

    setup_logging(config)
    logging.info("--- Particula Starting ---")

    # pygame and numba load slowly; import them once logging is up.
    from settings import Settings
    from simulation import Simulation
    from visualization import Visualizer

    try:
        settings = Settings.from_dict(config['simulation'])
    except ValueError as e:
        logging.critical(f"Invalid simulation settings: {e}")
        return

    run_control = config['run_control']
    log_every = max(1, run_control.get('log_throttle_steps', 600))
    # 0 means no limit.
    max_steps = run_control.get('max_steps', 0)

    # The window decides the canvas size.
    visualizer = Visualizer()
    sim = Simulation(settings, visualizer.clock, visualizer.sim_width, visualizer.sim_height,
                     renderer=visualizer.renderer)

    profiler = cProfile.Profile() if run_control.get('profile') else None
    if profiler:
        profiler.enable()

    frames = 0
    try:
        while visualizer.process_events(sim):
            sim.on_frame()
            visualizer.draw(sim)
            frames += 1

            if frames % log_every == 0:
                logging.info(f"Frame {frames} | {len(sim.particles.live_particles)} live particles | "
                             f"{visualizer.clock.get_fps():.1f} FPS")
                logging.debug(f"Frame {frames} | Radius: {settings.particles.radius:.1f} | "
                              f"Pending tasks: {sim.scheduler.pending}")

            if max_steps and frames >= max_steps:
                logging.info(f"Stopping after max_steps ({max_steps}) frames.")
                break
    finally:
        if profiler:
            profiler.disable()
        visualizer.close()

    logging.info(f"Frame loop finished after {frames} frames.")
    if profiler:
        _log_profile(profiler)
    logging.info("--- Particula Shutting Down ---")


if __name__ == "__main__":
    main(*sys.argv[1:2])
