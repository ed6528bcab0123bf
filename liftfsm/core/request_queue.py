from typing import Iterable, Iterator, List, Optional


def order_requests(floors: Iterable[int], current_floor: int, direction: str) -> List[int]:
    """
    Order pending floors so the car serves its current direction before reversing.

    While moving UP, floors above the current floor come first in ascending
    order; while moving DOWN, floors below it come first in descending order.
    Everything else (including the current floor itself) follows in ascending
    order. With no direction (idle or doors open) the result is plain ascending.

    Args:
        floors: Pending floor numbers
        current_floor: The car's last settled floor (departure floor while moving)
        direction: "UP", "DOWN" or "NO_DIRECTION"

    Returns:
        New list in dispatch order
    """
    if direction == "UP":
        ahead = sorted(f for f in floors if f > current_floor)
        rest = sorted(f for f in floors if f <= current_floor)
    elif direction == "DOWN":
        ahead = sorted((f for f in floors if f < current_floor), reverse=True)
        rest = sorted(f for f in floors if f >= current_floor)
    else:
        return sorted(floors)
    return ahead + rest


class RequestQueue:
    """
    Pending floor requests, distinct and kept in dispatch order.
    """
    def __init__(self):
        self._floors: List[int] = []

    def add(self, floor: int, current_floor: int, direction: str) -> bool:
        """
        Queue a floor and reorder the whole queue.

        Returns:
            True if newly queued, False if the floor was already pending
        """
        if floor in self._floors:
            return False
        self._floors.append(floor)
        self._floors = order_requests(self._floors, current_floor, direction)
        return True

    def pop_next(self) -> Optional[int]:
        """Remove and return the head of the queue, or None when empty."""
        if not self._floors:
            return None
        return self._floors.pop(0)

    def peek(self) -> Optional[int]:
        return self._floors[0] if self._floors else None

    def clear(self):
        self._floors = []

    def as_list(self) -> List[int]:
        return list(self._floors)

    def __contains__(self, floor) -> bool:
        return floor in self._floors

    def __len__(self) -> int:
        return len(self._floors)

    def __iter__(self) -> Iterator[int]:
        return iter(list(self._floors))

    def __repr__(self) -> str:
        return f"RequestQueue({self._floors})"
