from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, field
from typing import Dict

from tapebf.bf_machine import BrainfuckMachine


@dataclass
class MachineRecord:
    machine_id: str
    machine: BrainfuckMachine
    runs: int = 0
    # Held for the whole of a run; the machine itself is not thread-safe.
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False)


class MachineStore:
    """Thread-safe registry of long-lived BrainfuckMachine instances."""

    def __init__(self) -> None:
        self._machines: Dict[str, MachineRecord] = {}
        self._lock = threading.RLock()

    def create_machine(self, *, capacity: int) -> MachineRecord:
        machine = BrainfuckMachine(capacity)
        machine_id = uuid.uuid4().hex
        record = MachineRecord(machine_id=machine_id, machine=machine)
        with self._lock:
            self._machines[machine_id] = record
        return record

    def get(self, machine_id: str) -> MachineRecord:
        with self._lock:
            try:
                return self._machines[machine_id]
            except KeyError as exc:
                raise KeyError(f"Unknown machine id: {machine_id}") from exc

    def reset(self, machine_id: str) -> MachineRecord:
        record = self.get(machine_id)
        with record.lock:
            record.machine.reset()
            record.runs = 0
        return record

    def remove(self, machine_id: str) -> bool:
        with self._lock:
            return self._machines.pop(machine_id, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._machines.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._machines)


__all__ = ["MachineRecord", "MachineStore"]
