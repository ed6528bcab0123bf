import random

import pytest

from liftfsm.core.states import DoorState, ElevatorState


ALLOWED_TRANSITIONS = {
    ("IDLE", "MOVING_UP"),
    ("IDLE", "MOVING_DOWN"),
    ("IDLE", "DOOR_OPEN"),
    ("MOVING_UP", "DOOR_OPEN"),
    ("MOVING_DOWN", "DOOR_OPEN"),
    ("DOOR_OPEN", "IDLE"),
}


def press_at(env, controller, time_ms, floor):
    """Process pressing a floor button at a given time"""
    def _press():
        yield env.timeout(time_ms - env.now)
        controller.request_floor(floor)
    return env.process(_press())


def test_starts_idle_with_doors_closed(make_controller):
    controller, _ = make_controller(initial_floor=4)
    assert controller.state == ElevatorState.IDLE
    assert controller.current_floor == 4
    assert controller.door.state == DoorState.CLOSED
    assert controller.request_queue.as_list() == []


def test_full_cycle_timing(env, make_controller):
    controller, listener = make_controller(initial_floor=0)

    assert controller.request_floor(2)
    assert controller.state == ElevatorState.MOVING_UP

    env.run()

    assert listener.of_kind("state") == [
        (0, "MOVING_UP"),
        (4000, "DOOR_OPEN"),
        (7500, "IDLE"),
    ]
    assert listener.of_kind("doors") == [(4000, True), (7000, False)]
    assert controller.current_floor == 2
    assert env.now == 7500


def test_full_cycle_log_order(env, make_controller):
    controller, listener = make_controller(initial_floor=0)
    controller.request_floor(2)
    env.run()

    assert [message for _, message in listener.of_kind("log")] == [
        "Request for floor 2 added to queue.",
        "Moving UP to floor 2...",
        "Arrived at floor 2.",
        "Doors are opening.",
        "Doors are closing.",
        "Elevator is idle. Waiting for requests.",
    ]


def test_floor_changed_on_departure_and_arrival(env, make_controller):
    controller, listener = make_controller(initial_floor=6)
    controller.request_floor(3)
    env.run()

    assert listener.of_kind("floor") == [(0, (3, 6000)), (6000, (3, 0))]
    assert listener.states()[0] == "MOVING_DOWN"


def test_same_floor_shortcut(env, make_controller):
    controller, listener = make_controller(initial_floor=3)

    controller.request_floor(3)
    assert controller.state == ElevatorState.DOOR_OPEN

    env.run()

    assert listener.states() == ["DOOR_OPEN", "IDLE"]
    assert listener.of_kind("floor") == []
    assert listener.of_kind("log")[1] == (0, "Already at floor 3. Opening doors.")
    assert env.now == 3500


def test_duplicate_request_is_a_no_op(env, make_controller):
    controller, _ = make_controller(initial_floor=0)
    controller.request_floor(9)

    assert controller.request_floor(3)
    assert not controller.request_floor(3)
    assert controller.request_queue.as_list() == [3]


def test_repeated_request_while_idle_queues_floor_once(env, make_controller):
    controller, listener = make_controller(initial_floor=0)
    assert controller.request_floor(5)
    assert controller.request_floor(5)

    assert controller.target_floor == 5
    assert controller.request_queue.as_list() == [5]

    env.run()

    # The second press is served by its own door cycle once the first one ends
    assert listener.of_kind("state") == [
        (0, "MOVING_UP"),
        (10000, "DOOR_OPEN"),
        (13500, "IDLE"),
        (13500, "DOOR_OPEN"),
        (17000, "IDLE"),
    ]
    assert (13500, "Already at floor 5. Opening doors.") in listener.of_kind("log")
    assert controller.request_queue.as_list() == []


def test_request_does_not_interrupt_motion(env, make_controller):
    controller, listener = make_controller(initial_floor=0)
    controller.request_floor(5)

    env.run(until=3000)
    controller.request_floor(1)
    controller.request_floor(7)
    assert controller.state == ElevatorState.MOVING_UP
    assert controller.current_floor == 0
    assert controller.target_floor == 5

    env.run(until=9999)
    assert controller.state == ElevatorState.MOVING_UP
    assert controller.current_floor == 0

    env.run(until=10001)
    assert controller.state == ElevatorState.DOOR_OPEN
    assert controller.current_floor == 5
    assert listener.states() == ["MOVING_UP", "DOOR_OPEN"]


def test_request_during_door_cycle_waits(env, make_controller):
    controller, _ = make_controller(initial_floor=0)
    controller.request_floor(1)

    env.run(until=2500)
    assert controller.state == ElevatorState.DOOR_OPEN
    controller.request_floor(0)
    assert controller.state == ElevatorState.DOOR_OPEN
    assert controller.door.state == DoorState.OPEN
    assert controller.request_queue.as_list() == [0]


def test_direction_aware_dequeue_order(env, make_controller):
    controller, listener = make_controller(initial_floor=0)
    controller.request_floor(9)
    assert controller.state == ElevatorState.MOVING_UP

    for floor in (5, 2, 8):
        controller.request_floor(floor)
    assert controller.request_queue.as_list() == [2, 5, 8]

    controller.request_floor(-1)
    assert controller.request_queue.as_list() == [2, 5, 8, -1]

    env.run()

    assert listener.motion_targets() == [9, 2, 5, 8, -1]
    assert controller.current_floor == -1
    assert controller.state == ElevatorState.IDLE


def test_reentrant_dispatch_after_cycle(env, make_controller):
    controller, listener = make_controller(initial_floor=0)
    controller.request_floor(2)
    press_at(env, controller, 5000, 4)

    env.run()

    assert listener.of_kind("state") == [
        (0, "MOVING_UP"),
        (4000, "DOOR_OPEN"),
        (7500, "IDLE"),
        (7500, "MOVING_UP"),
        (11500, "DOOR_OPEN"),
        (15000, "IDLE"),
    ]
    assert controller.current_floor == 4


def test_current_floor_changes_once_per_motion(env, make_controller, broker):
    controller, _ = make_controller(initial_floor=0)
    arrivals = []
    broker.subscribe("elevator/Elevator_1/arrived", lambda m: arrivals.append((m["timestamp"], m["floor"])))

    controller.request_floor(3)
    controller.request_floor(1)
    env.run()

    assert arrivals == [(6000, 3), (13500, 1)]


def test_invalid_floor_is_rejected_and_logged(env, broker, make_controller):
    controller, listener = make_controller(initial_floor=0, service_floors=range(0, 6))
    rejected = []
    broker.subscribe("elevator/Elevator_1/request_rejected", rejected.append)

    assert not controller.request_floor(9)

    assert controller.state == ElevatorState.IDLE
    assert controller.request_queue.as_list() == []
    assert rejected[0]["floor"] == 9
    assert rejected[0]["reason"] == "INVALID_FLOOR"
    assert listener.of_kind("log")[-1] == (0, "Request for floor 9 rejected: not a service floor.")


def test_reset_abandons_motion_and_ignores_stale_timer(env, make_controller):
    controller, listener = make_controller(initial_floor=0)
    controller.request_floor(5)
    controller.request_floor(7)

    env.run(until=3000)
    controller.reset()

    assert controller.state == ElevatorState.IDLE
    assert controller.current_floor == 0
    assert controller.target_floor is None
    assert controller.request_queue.as_list() == []

    env.run()
    assert controller.state == ElevatorState.IDLE
    assert controller.current_floor == 0
    assert "Arrived at floor 5." not in [m for _, m in listener.of_kind("log")]


def test_new_motion_after_reset_is_not_disturbed_by_old_timer(env, make_controller):
    controller, listener = make_controller(initial_floor=0)
    controller.request_floor(5)
    env.run(until=3000)

    controller.reset()
    controller.request_floor(1)

    env.run(until=10001)
    assert controller.current_floor == 1
    arrivals = [m for _, m in listener.of_kind("log") if m.startswith("Arrived")]
    assert arrivals == ["Arrived at floor 1."]


def test_reset_with_doors_open_closes_them(env, make_controller):
    controller, listener = make_controller(initial_floor=0)
    controller.request_floor(0)
    env.run(until=1000)

    controller.reset()

    assert controller.door.state == DoorState.CLOSED
    assert listener.of_kind("doors") == [(0, True), (1000, False)]
    env.run()
    assert listener.states() == ["DOOR_OPEN", "IDLE"]


def test_status_snapshot(env, make_controller):
    controller, _ = make_controller(initial_floor=1)
    controller.request_floor(4)
    controller.request_floor(2)

    status = controller.status()
    assert status["state"] == "MOVING_UP"
    assert status["direction"] == "UP"
    assert status["current_floor"] == 1
    assert status["target_floor"] == 4
    assert status["door_state"] == "CLOSED"
    assert status["request_queue"] == [2]


def test_status_published_on_state_change(env, broker, make_controller):
    controller, _ = make_controller(initial_floor=0)
    statuses = []
    broker.subscribe("elevator/Elevator_1/status", statuses.append)

    controller.request_floor(1)
    env.run()

    assert [s["state"] for s in statuses] == ["MOVING_UP", "DOOR_OPEN", "DOOR_OPEN", "IDLE"]
    assert statuses[2]["door_state"] == "CLOSING"


def test_random_requests_keep_invariants(env, broker, make_controller):
    controller, listener = make_controller(initial_floor=0)
    rng = random.Random(7)
    queue_snapshots = []
    broker.subscribe("elevator/Elevator_1/request_queued",
                     lambda m: queue_snapshots.append(m["request_queue"]))

    pressed = set()
    for _ in range(40):
        floor = rng.randint(-2, 12)
        pressed.add(floor)
        press_at(env, controller, rng.randint(0, 60000), floor)

    env.run()

    # Pairwise distinct queue entries
    assert all(len(snapshot) == len(set(snapshot)) for snapshot in queue_snapshots)

    # No skipped phases
    states = ["IDLE"] + listener.states()
    for previous, current in zip(states, states[1:]):
        assert (previous, current) in ALLOWED_TRANSITIONS

    # Every pressed floor had its doors opened at least once, and all work is done
    served = [m for _, m in listener.of_kind("log") if m.startswith("Arrived at floor") or m.startswith("Already at floor")]
    served_floors = {int(m.split("floor ")[1].split(".")[0]) for m in served}
    assert pressed <= served_floors
    assert controller.state == ElevatorState.IDLE
    assert controller.request_queue.as_list() == []


def test_idle_is_announced_before_a_request_made_from_a_subscriber(env, broker, make_controller):
    controller, listener = make_controller(initial_floor=0)
    pressed = []

    def press_when_idle(message):
        if message["state"] == "IDLE" and env.now > 0 and not pressed:
            pressed.append(env.now)
            controller.request_floor(3)

    broker.subscribe("elevator/Elevator_1/state", press_when_idle)
    controller.request_floor(1)
    env.run()

    assert [message for _, message in listener.of_kind("log")] == [
        "Request for floor 1 added to queue.",
        "Moving UP to floor 1...",
        "Arrived at floor 1.",
        "Doors are opening.",
        "Doors are closing.",
        "Request for floor 3 added to queue.",
        "Elevator is idle. Waiting for requests.",
        "Moving UP to floor 3...",
        "Arrived at floor 3.",
        "Doors are opening.",
        "Doors are closing.",
        "Elevator is idle. Waiting for requests.",
    ]
    assert listener.of_kind("state") == [
        (0, "MOVING_UP"),
        (2000, "DOOR_OPEN"),
        (5500, "IDLE"),
        (5500, "MOVING_UP"),
        (9500, "DOOR_OPEN"),
        (13000, "IDLE"),
    ]
    assert controller.current_floor == 3


def test_subscriber_error_surfaces_and_reset_recovers(env, broker, make_controller):
    controller, _ = make_controller(initial_floor=0)
    failed = []

    def broken_display(message):
        if message["state"] == "IDLE" and env.now > 0 and not failed:
            failed.append(env.now)
            raise RuntimeError("display unavailable")

    broker.subscribe("elevator/Elevator_1/state", broken_display)
    controller.request_floor(1)

    with pytest.raises(RuntimeError, match="display unavailable"):
        env.run()
    assert env.now == 5500

    controller.reset()
    assert controller.request_floor(2)
    assert controller.state == ElevatorState.MOVING_UP

    env.run()
    assert controller.current_floor == 2
    assert controller.state == ElevatorState.IDLE
    assert controller.door.state == DoorState.CLOSED


def test_first_state_message_has_no_previous_state(env, broker, make_controller):
    messages = []
    broker.subscribe("elevator/Elevator_1/state", messages.append)

    controller, _ = make_controller(initial_floor=0)
    controller.request_floor(1)

    assert messages[0]["state"] == "IDLE"
    assert messages[0]["previous_state"] is None
    assert messages[1]["previous_state"] == "IDLE"
