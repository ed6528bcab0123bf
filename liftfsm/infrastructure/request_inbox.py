import queue

import simpy


class RequestInbox:
    """
    Thread-safe entry point for floor requests produced outside the SimPy thread.

    Producers (button handlers, socket readers) call submit() from any thread;
    it only puts on a queue.Queue and returns. A SimPy process drains the queue
    every poll interval and hands each floor to the controller, so every
    request_floor() call runs on the environment's own thread, serialized with
    the controller's timers.
    """
    def __init__(self, env: simpy.Environment, controller, poll_interval: float = 10.0):
        """
        Args:
            env: SimPy environment driving the controller
            controller: ElevatorController receiving the requests
            poll_interval: Simulation time between drains (ms)
        """
        if poll_interval <= 0:
            raise ValueError("poll_interval must be positive")
        self.env = env
        self.controller = controller
        self.poll_interval = poll_interval
        self.pending = queue.Queue()
        self.delivered = 0
        self._closed = False
        self.process = self.env.process(self.run())

    def submit(self, floor: int):
        """Queue a floor request (safe to call from any thread)."""
        self.pending.put(int(floor))

    def close(self):
        """Stop polling after the next drain."""
        self._closed = True

    def drain(self) -> int:
        """Deliver every pending request to the controller. Returns how many were delivered."""
        count = 0
        while True:
            try:
                floor = self.pending.get_nowait()
            except queue.Empty:
                break
            self.controller.request_floor(floor)
            count += 1
        self.delivered += count
        return count

    def run(self):
        while True:
            self.drain()
            if self._closed:
                return
            yield self.env.timeout(self.poll_interval)
