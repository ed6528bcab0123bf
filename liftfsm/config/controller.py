"""
Controller and Scenario Configuration

All durations are in milliseconds of simulation time.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class TimingConfig:
    """Fixed phase durations of the controller"""
    time_per_floor_ms: float = 2000.0  # travel time per floor
    door_open_ms: float = 3000.0       # doors stay open
    door_close_ms: float = 500.0       # closing duration

    def __post_init__(self):
        if self.time_per_floor_ms <= 0:
            raise ValueError("time_per_floor_ms must be positive")
        if self.door_open_ms < 0:
            raise ValueError("door_open_ms cannot be negative")
        if self.door_close_ms < 0:
            raise ValueError("door_close_ms cannot be negative")


@dataclass
class BuildingConfig:
    """Building as seen by one car"""
    initial_floor: int = 0
    service_floors: Optional[List[int]] = None  # None = accept any floor

    def __post_init__(self):
        if self.service_floors is not None:
            if not self.service_floors:
                raise ValueError("service_floors cannot be empty")
            if len(set(self.service_floors)) != len(self.service_floors):
                raise ValueError("service_floors must not contain duplicates")


@dataclass
class RequestEvent:
    """A floor button press at a given simulation time"""
    time_ms: float
    floor: int

    def __post_init__(self):
        if self.time_ms < 0:
            raise ValueError("request time_ms cannot be negative")


@dataclass
class ScenarioConfig:
    """Scripted requests fed to the controller by the runner"""
    duration_ms: float = 60000.0
    requests: List[RequestEvent] = field(default_factory=list)

    def __post_init__(self):
        if self.duration_ms <= 0:
            raise ValueError("duration_ms must be positive")


@dataclass
class SimulationConfig:
    """
    Complete run configuration

    Combines controller timing, building and scenario settings.
    """
    timing: TimingConfig = field(default_factory=TimingConfig)
    building: BuildingConfig = field(default_factory=BuildingConfig)
    scenario: ScenarioConfig = field(default_factory=ScenarioConfig)

    # Run control
    elevator_name: str = "Elevator_1"
    realtime_factor: float = 0.0  # 1.0 = realtime, 0.0 = as fast as possible
    event_log_path: Optional[str] = None
    trajectory_plot_path: Optional[str] = None

    def __post_init__(self):
        if self.realtime_factor < 0:
            raise ValueError("realtime_factor cannot be negative")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SimulationConfig':
        """Create SimulationConfig from dictionary"""
        sim_data = data.get('simulation', data) or {}

        timing_data = sim_data.get('timing', {})
        timing = TimingConfig(
            time_per_floor_ms=timing_data.get('time_per_floor_ms', 2000.0),
            door_open_ms=timing_data.get('door_open_ms', 3000.0),
            door_close_ms=timing_data.get('door_close_ms', 500.0)
        )

        building_data = sim_data.get('building', {})
        building = BuildingConfig(
            initial_floor=building_data.get('initial_floor', 0),
            service_floors=building_data.get('service_floors')
        )

        scenario_data = sim_data.get('scenario', {})
        scenario = ScenarioConfig(
            duration_ms=scenario_data.get('duration_ms', 60000.0),
            requests=[
                RequestEvent(time_ms=r['time_ms'], floor=r['floor'])
                for r in scenario_data.get('requests', [])
            ]
        )

        return cls(
            timing=timing,
            building=building,
            scenario=scenario,
            elevator_name=sim_data.get('elevator_name', 'Elevator_1'),
            realtime_factor=sim_data.get('realtime_factor', 0.0),
            event_log_path=sim_data.get('event_log_path'),
            trajectory_plot_path=sim_data.get('trajectory_plot_path')
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization"""
        result = {
            'simulation': {
                'elevator_name': self.elevator_name,
                'timing': {
                    'time_per_floor_ms': self.timing.time_per_floor_ms,
                    'door_open_ms': self.timing.door_open_ms,
                    'door_close_ms': self.timing.door_close_ms
                },
                'building': {
                    'initial_floor': self.building.initial_floor
                },
                'scenario': {
                    'duration_ms': self.scenario.duration_ms,
                    'requests': [
                        {'time_ms': r.time_ms, 'floor': r.floor}
                        for r in self.scenario.requests
                    ]
                },
                'realtime_factor': self.realtime_factor
            }
        }

        if self.building.service_floors is not None:
            result['simulation']['building']['service_floors'] = list(self.building.service_floors)
        if self.event_log_path is not None:
            result['simulation']['event_log_path'] = self.event_log_path
        if self.trajectory_plot_path is not None:
            result['simulation']['trajectory_plot_path'] = self.trajectory_plot_path

        return result

    def validate(self):
        """Validate configuration consistency"""
        service_floors = self.building.service_floors
        if service_floors is not None:
            if self.building.initial_floor not in service_floors:
                raise ValueError(f"building.initial_floor ({self.building.initial_floor}) must be one of service_floors {service_floors}")
            for request in self.scenario.requests:
                if request.floor not in service_floors:
                    raise ValueError(f"scenario request for floor {request.floor} is outside service_floors {service_floors}")

        for request in self.scenario.requests:
            # env.run(until=duration_ms) stops before events at duration_ms itself
            if request.time_ms >= self.scenario.duration_ms:
                raise ValueError(f"scenario request at {request.time_ms} ms is at or after duration_ms ({self.scenario.duration_ms})")
