"""
Packing Domain Models

These models represent the vocabulary of the bin-packing simulation:
a two-axis resource vector, the workloads that demand it and the nodes
that supply it.

Units:
- cpu: milli-cores (1000 = 1 vCPU)
- ram: MiB
"""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class Dimensions:
    """Two-axis resource vector (value type)"""
    cpu: float = 0.0
    ram: float = 0.0

    def __add__(self, other: "Dimensions") -> "Dimensions":
        return Dimensions(cpu=self.cpu + other.cpu, ram=self.ram + other.ram)

    def __sub__(self, other: "Dimensions") -> "Dimensions":
        return Dimensions(cpu=self.cpu - other.cpu, ram=self.ram - other.ram)

    def fits_within(self, capacity: "Dimensions") -> bool:
        """True if no axis exceeds the given capacity"""
        return self.cpu <= capacity.cpu and self.ram <= capacity.ram


@dataclass(frozen=True)
class Item:
    """
    A deployable workload (e.g. one EC2 instance or pod)

    group is a co-location hint kept for future affinity rules; placement
    ignores it today.
    """
    id: str
    dimensions: Dimensions
    group: Optional[str] = None

    @property
    def area(self) -> float:
        """cpu * ram, the sort key used by Best-Fit-Decreasing"""
        return self.dimensions.cpu * self.dimensions.ram


@dataclass
class Bin:
    """
    A candidate compute node

    Invariant: used <= capacity on every axis. Items keep admission order.
    node_type and pool are labels for reporting; packing ignores them.
    """
    id: str
    capacity: Dimensions
    used: Dimensions = field(default_factory=Dimensions)
    items: List[Item] = field(default_factory=list)
    node_type: Optional[str] = None
    pool: Optional[str] = None

    def can_fit(self, item: Item) -> bool:
        return (self.used + item.dimensions).fits_within(self.capacity)

    def add_item(self, item: Item) -> bool:
        """
        Admit an item if it fits

        Args:
            item: Workload to place

        Returns:
            True if admitted; False leaves the bin untouched
        """
        if not self.can_fit(item):
            return False

        self.items.append(item)
        self.used = self.used + item.dimensions
        return True

    def waste(self) -> Dimensions:
        """Unused capacity per axis"""
        return self.capacity - self.used

    def efficiency(self) -> float:
        """Packing density (0.0 - 1.0): mean of CPU and RAM utilization"""
        cpu_eff = self.used.cpu / self.capacity.cpu if self.capacity.cpu else 0.0
        ram_eff = self.used.ram / self.capacity.ram if self.capacity.ram else 0.0
        return (cpu_eff + ram_eff) / 2.0


@dataclass
class PackingResult:
    """Outcome of one packing attempt"""
    bins: List[Bin] = field(default_factory=list)
    dropped: List[Item] = field(default_factory=list)

    @property
    def packed_count(self) -> int:
        return sum(len(b.items) for b in self.bins)
