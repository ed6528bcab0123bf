import sys

import simpy

from .analyzer.statistics import Statistics
from .config import SimulationConfig, load_simulation_config
from .core.controller import ElevatorController
from .infrastructure.message_broker import MessageBroker
from .infrastructure.realtime_env import RealtimeEnvironment

DEFAULT_SCENARIO = "scenarios/demo.yaml"


def request_generator(env, controller, requests):
    """Press the scripted floor buttons at their scheduled times"""
    for request in sorted(requests, key=lambda r: r.time_ms):
        delay = request.time_ms - env.now
        if delay > 0:
            yield env.timeout(delay)
        print(f"{env.now:.2f} [Scenario] Button pressed for floor {request.floor}.")
        controller.request_floor(request.floor)


def run_scenario(sim_config: SimulationConfig):
    """
    Set up and run one controller against a scripted scenario

    Args:
        sim_config: SimulationConfig, validated before the run

    Returns:
        (controller, statistics) after the run

    Raises:
        ValueError: If the configuration is inconsistent
    """
    sim_config.validate()

    print("\n--- Simulation Setup ---")
    if sim_config.realtime_factor > 0:
        env = RealtimeEnvironment(speed_factor=sim_config.realtime_factor)
        print(f"Real-time pacing enabled (speed factor {sim_config.realtime_factor})")
    else:
        env = simpy.Environment()

    broker = MessageBroker(env)
    statistics = Statistics(env, broker.get_broadcast_pipe())
    statistics.set_simulation_metadata(sim_config.to_dict())
    env.process(statistics.start_listening())

    controller = ElevatorController(
        env, sim_config.elevator_name, broker,
        timing=sim_config.timing,
        initial_floor=sim_config.building.initial_floor,
        service_floors=sim_config.building.service_floors
    )

    env.process(request_generator(env, controller, sim_config.scenario.requests))

    print("\n--- Simulation Start ---")
    env.run(until=sim_config.scenario.duration_ms)
    print("--- Simulation End ---")

    statistics.print_summary()
    if sim_config.event_log_path:
        statistics.save_event_log(sim_config.event_log_path)
    if sim_config.trajectory_plot_path:
        statistics.plot_trajectory_diagram(sim_config.trajectory_plot_path)

    return controller, statistics


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    config_path = argv[0] if argv else DEFAULT_SCENARIO

    print("--- Loading Configuration ---")
    try:
        sim_config = load_simulation_config(config_path)
    except (FileNotFoundError, ValueError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1
    print(f"Simulation Config: {config_path}")

    run_scenario(sim_config)
    return 0
