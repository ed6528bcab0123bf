"""
RealtimeEnvironment

A SimPy environment that paces simulation time against the wall clock.
Simulation time is kept in milliseconds; `time_unit` converts one simulation
unit into real seconds.
"""

import time

import simpy


class RealtimeEnvironment(simpy.Environment):
    """
    Custom SimPy environment with real-time synchronization.

    All timeout() calls are paced against real time based on speed_factor.

    Args:
        speed_factor (float): Speed multiplier for simulation
            - 1.0 = real-time (1000 sim ms = 1 real second)
            - 0.5 = half speed
            - 2.0 = double speed
            - 0.0 = no delay (fastest possible, default SimPy behavior)
        initial_time (float): Initial simulation time
        time_unit (float): Real seconds per simulation time unit (0.001 for ms)

    Example:
        >>> env = RealtimeEnvironment(speed_factor=0.5)  # Half speed
    """

    def __init__(self, speed_factor=1.0, initial_time=0, time_unit=0.001):
        super().__init__(initial_time=initial_time)
        if speed_factor < 0:
            raise ValueError("speed_factor cannot be negative")
        self.speed_factor = speed_factor
        self.time_unit = time_unit
        self.real_start_time = time.time()
        self.sim_start_time = self.now

    def step(self):
        """
        Execute one simulation step, then sleep until real time catches up.
        """
        result = super().step()

        if self.speed_factor > 0:
            sim_elapsed = (self.now - self.sim_start_time) * self.time_unit
            target_real_time = self.real_start_time + (sim_elapsed / self.speed_factor)
            sleep_time = target_real_time - time.time()
            if sleep_time > 0:
                time.sleep(sleep_time)

        return result

    def set_speed(self, speed_factor):
        """
        Change simulation speed during runtime.

        Timing references are reset so the new pace starts from now.

        Example:
            >>> env.set_speed(0.1)  # Slow down to 10% for debugging
        """
        if speed_factor < 0:
            raise ValueError("speed_factor cannot be negative")
        self.speed_factor = speed_factor
        self.real_start_time = time.time()
        self.sim_start_time = self.now

    def get_speed(self):
        return self.speed_factor
