"""
Configuration management package

Provides configuration classes for the controller and scripted runs.
"""

from .controller import (
    TimingConfig,
    BuildingConfig,
    RequestEvent,
    ScenarioConfig,
    SimulationConfig
)

from .config_loader import (
    ConfigLoader,
    load_simulation_config,
    save_simulation_config
)

__all__ = [
    'TimingConfig',
    'BuildingConfig',
    'RequestEvent',
    'ScenarioConfig',
    'SimulationConfig',

    # Loader
    'ConfigLoader',
    'load_simulation_config',
    'save_simulation_config',
]
