import json
import re
from datetime import datetime

import matplotlib
import matplotlib.pyplot as plt

TOPIC_PATTERN = re.compile(r'elevator/(.*?)/(\w+)$')


class Statistics:
    """
    Receives all broker traffic as an independent "recorder" and keeps what
    is needed to review a run afterwards:
    - event log in JSON Lines format for offline playback
    - state history and car trajectory per elevator
    - door open/close intervals
    - service time of every floor request (queued -> doors open at that floor)
    """
    def __init__(self, env, broadcast_pipe):
        self.env = env
        self.broadcast_pipe = broadcast_pipe
        self.state_history = {}        # {elevator_name: [(timestamp, state)]}
        self.elevator_trajectories = {}  # {elevator_name: [(timestamp, floor)]}
        self.door_events_history = {}  # {elevator_name: [door_event]}
        self.log_lines = {}            # {elevator_name: [(timestamp, message)]}
        self.rejected_requests = {}    # {elevator_name: [(timestamp, floor, reason)]}

        # Request service tracking
        self.pending_requests = {}     # {elevator_name: {floor: queued_time}}
        self.service_times = {}        # {elevator_name: [(floor, queued_time, served_time)]}

        # JSON Lines event log for offline playback
        self.event_log = []
        self.simulation_metadata = {}

    def _add_event_log(self, event_type, event_data):
        self.event_log.append({
            "time": self.env.now,
            "type": event_type,
            "data": event_data
        })

    def set_simulation_metadata(self, metadata):
        """
        Set simulation metadata (called before simulation starts).

        Args:
            metadata (dict): Run configuration to store with the event log
        """
        self.simulation_metadata = {
            "format_version": "1.0",
            "timestamp": datetime.now().isoformat(),
            "config": metadata
        }

    def start_listening(self):
        """
        Main process to start intercepting global broadcasts.
        """
        while True:
            data = yield self.broadcast_pipe.get()
            self.record(data.get('topic', ''), data.get('message', {}))

    def record(self, topic, message):
        """Record a single broker message."""
        match = TOPIC_PATTERN.match(topic)
        if not match:
            return
        elevator_name, kind = match.group(1), match.group(2)
        timestamp = message.get('timestamp', self.env.now)

        if kind == 'status':
            # Only the first status gives the starting position; motion comes from floor events
            trajectory = self.elevator_trajectories.setdefault(elevator_name, [])
            if not trajectory:
                trajectory.append((timestamp, message['current_floor']))
            return

        self._add_event_log(kind, {"elevator_name": elevator_name, **message})

        if kind == 'state':
            self.state_history.setdefault(elevator_name, []).append((timestamp, message['state']))

        elif kind == 'floor':
            trajectory = self.elevator_trajectories.setdefault(elevator_name, [])
            if message.get('travel_duration_ms', 0) > 0:
                # Motion starts: pin the departure point
                trajectory.append((timestamp, message['from_floor']))
            else:
                trajectory.append((timestamp, message['floor']))

        elif kind == 'door_events':
            self.door_events_history.setdefault(elevator_name, []).append(message)
            if message.get('event_type') == 'DOOR_OPENED':
                self._mark_served(elevator_name, message.get('floor'), timestamp)

        elif kind == 'request_queued':
            pending = self.pending_requests.setdefault(elevator_name, {})
            pending.setdefault(message['floor'], timestamp)

        elif kind == 'request_rejected':
            self.rejected_requests.setdefault(elevator_name, []).append(
                (timestamp, message['floor'], message.get('reason')))

        elif kind == 'log':
            self.log_lines.setdefault(elevator_name, []).append((timestamp, message['message']))

    def _mark_served(self, elevator_name, floor, timestamp):
        pending = self.pending_requests.get(elevator_name, {})
        if floor not in pending:
            return
        queued_time = pending.pop(floor)
        self.service_times.setdefault(elevator_name, []).append((floor, queued_time, timestamp))

    def get_summary(self, elevator_name):
        """
        Aggregate figures for one elevator.

        Returns:
            dict with requests served/pending/rejected, service time average and
            maximum (ms), number of trips and of door cycles
        """
        served = self.service_times.get(elevator_name, [])
        waits = [served_time - queued_time for _, queued_time, served_time in served]
        states = [state for _, state in self.state_history.get(elevator_name, [])]
        door_events = self.door_events_history.get(elevator_name, [])
        return {
            "requests_served": len(served),
            "requests_pending": len(self.pending_requests.get(elevator_name, {})),
            "requests_rejected": len(self.rejected_requests.get(elevator_name, [])),
            "average_service_time_ms": sum(waits) / len(waits) if waits else None,
            "max_service_time_ms": max(waits) if waits else None,
            "trips": sum(1 for s in states if s in ("MOVING_UP", "MOVING_DOWN")),
            "door_cycles": sum(1 for e in door_events if e.get('event_type') == 'DOOR_OPENED'),
        }

    def print_summary(self):
        print("\n" + "=" * 60)
        print("   CONTROLLER RUN SUMMARY")
        print("=" * 60)
        names = sorted(set(self.state_history) | set(self.elevator_trajectories))
        for name in names:
            summary = self.get_summary(name)
            print(f"[{name}]")
            print(f"  Requests served:   {summary['requests_served']}")
            print(f"  Requests pending:  {summary['requests_pending']}")
            print(f"  Requests rejected: {summary['requests_rejected']}")
            if summary['average_service_time_ms'] is not None:
                print(f"  Service time avg:  {summary['average_service_time_ms']:.1f} ms")
                print(f"  Service time max:  {summary['max_service_time_ms']:.1f} ms")
            print(f"  Trips:             {summary['trips']}")
            print(f"  Door cycles:       {summary['door_cycles']}")
        print("=" * 60)

    def get_door_open_intervals(self, elevator_name):
        """[(open_time, closed_time, floor)] for every completed door cycle."""
        intervals = []
        opened = None
        for event in self.door_events_history.get(elevator_name, []):
            if event['event_type'] == 'DOOR_OPENED':
                opened = event
            elif event['event_type'] == 'DOOR_CLOSED' and opened is not None:
                intervals.append((opened['timestamp'], event['timestamp'], opened['floor']))
                opened = None
        return intervals

    def plot_trajectory_diagram(self, output_filename='elevator_trajectory_diagram.png', show=False):
        """
        Draw the car trajectory (floor over time) with door-open intervals.

        Args:
            output_filename: PNG file to write
            show: Open an interactive window after saving
        """
        print("\n--- Plotting: Elevator Trajectory Diagram ---")
        if not show:
            matplotlib.use("Agg")
        fig = plt.figure(figsize=(14, 8))

        elevator_colors = ['#1f77b4', '#ff7f0e', '#2ca02c', '#d62728', '#9467bd', '#8c564b']
        for idx, name in enumerate(sorted(self.elevator_trajectories)):
            trajectory = self.elevator_trajectories[name]
            if not trajectory:
                continue
            points = sorted(trajectory, key=lambda x: x[0])
            points.append((self.env.now, points[-1][1]))
            times, floors = zip(*points)
            color = elevator_colors[idx % len(elevator_colors)]
            plt.plot(times, floors, label=name, linewidth=2.5, color=color, alpha=0.8)

            for opened, closed, floor in self.get_door_open_intervals(name):
                plt.hlines(floor + 0.1, opened, closed, colors='green', linewidth=4, alpha=0.6)

        plt.title("Elevator Trajectory Diagram")
        plt.xlabel("Time (ms)")
        plt.ylabel("Floor")
        plt.grid(True, which='both', linestyle='--', alpha=0.7)

        all_floors = [floor for trajectory in self.elevator_trajectories.values() for _, floor in trajectory]
        if all_floors:
            plt.yticks(range(int(min(all_floors)), int(max(all_floors)) + 2))
        plt.legend(loc='upper right', fontsize=10)

        plt.savefig(output_filename, dpi=150, bbox_inches='tight')
        print(f"Trajectory diagram saved to: {output_filename}")

        if show:
            plt.show()
        plt.close(fig)
        return output_filename

    def save_event_log(self, filename='controller_log.jsonl'):
        """
        Save the event log to a JSON Lines file.

        Args:
            filename (str): Name of the output file
        """
        print(f"\nSaving event log to {filename}...")

        with open(filename, 'w', encoding='utf-8') as f:
            if self.simulation_metadata:
                f.write(json.dumps({
                    "type": "metadata",
                    "data": self.simulation_metadata
                }) + '\n')

            # Already in time order: events are recorded sequentially
            for event in self.event_log:
                f.write(json.dumps(event, ensure_ascii=False) + '\n')

        print(f"Event log saved: {len(self.event_log)} events written to {filename}")
        return filename
