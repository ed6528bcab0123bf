from typing import Callable, Dict, List

import simpy


class MessageBroker:
    """
    Mediates communication between components within the simulation.
    Implements a topic-based publish-subscribe model.

    Two delivery paths are offered for every published message:
    - synchronous subscribers (callbacks) run inside put(), in subscription
      order, before put() returns. Observers see transitions in exactly the
      order the publisher made them.
    - SimPy pipes (Store per topic, plus one broadcast pipe) for processes
      that prefer `yield broker.get(topic)`; Stores are FIFO so order is kept.
    """
    def __init__(self, env: simpy.Environment, verbose: bool = False):
        """
        Initialize the message broker

        Args:
            env (simpy.Environment): SimPy environment
            verbose (bool): Echo every publish to stdout
        """
        self.env = env
        self.verbose = verbose
        self.topics: Dict[str, simpy.Store] = {}
        self.subscribers: Dict[str, List[Callable]] = {}
        self.broadcast_pipe = simpy.Store(self.env)

    def get_pipe(self, topic: str) -> simpy.Store:
        """
        Get or create a communication pipe (Store) for the specified topic
        """
        if topic not in self.topics:
            self.topics[topic] = simpy.Store(self.env)
        return self.topics[topic]

    def subscribe(self, topic: str, callback: Callable[[dict], None]):
        """
        Register a callback invoked synchronously for every message on topic.

        Callbacks must not raise: an exception is not caught here and reaches
        the publisher, and later callbacks for that message are skipped.
        """
        self.subscribers.setdefault(topic, []).append(callback)

    def unsubscribe(self, topic: str, callback: Callable[[dict], None]):
        callbacks = self.subscribers.get(topic, [])
        if callback in callbacks:
            callbacks.remove(callback)

    def put(self, topic: str, message):
        """
        Publish (put) a message to the specified topic
        """
        if self.verbose:
            print(f"{self.env.now:.2f} [Broker] Publish on '{topic}': {message}")
        # Copy: a callback may subscribe or unsubscribe while we iterate
        for callback in list(self.subscribers.get(topic, [])):
            callback(message)
        pipe = self.get_pipe(topic)
        self.broadcast_pipe.put({'topic': topic, 'message': message})
        return pipe.put(message)

    def get(self, topic: str):
        """
        Wait to receive (get) a message from the specified topic
        """
        pipe = self.get_pipe(topic)
        return pipe.get()

    def get_broadcast_pipe(self) -> simpy.Store:
        """
        Returns the global broadcast pipe (every message, tagged with its topic)
        """
        return self.broadcast_pipe

    def get_current_time(self) -> float:
        """
        Get current simulation time

        Lets components outside SimPy processes read the clock without a
        direct dependency on the environment.
        """
        return self.env.now
