"""
Bin Packing Engine (Tetris Algorithm)

Two-dimensional Best-Fit-Decreasing packing of workloads onto nodes.

Algorithm:
1. Sort items by area (cpu * ram), largest first. The sort is stable so
   equal-area items keep their input order.
2. Place each item into the open bin that leaves the least residual space,
   measured as a plain sum over both axes:
       (cap.cpu - used.cpu - item.cpu) + (cap.ram - used.ram - item.ram)
   On equal residual space the earliest-opened bin wins.
3. If nothing fits, open a new bin from the factory.
4. If the item does not fit an empty bin either, it is dropped from this
   attempt and reported in PackingResult.dropped.
"""

from dataclasses import dataclass, field
from itertools import count
from typing import Callable, Iterator, List, Sequence
import logging

from ..schemas.models import Bin, Dimensions, Item, PackingResult

logger = logging.getLogger(__name__)

BinFactory = Callable[[], Bin]


@dataclass
class NodeTemplate:
    """
    Standard bin factory: mints empty nodes of a fixed shape

    Calling the template returns a new Bin with a unique id of the form
    "node-<node_type>-<pool>-<n>".
    """
    capacity: Dimensions
    node_type: str = "generic"
    pool: str = "default"
    _sequence: Iterator[int] = field(default_factory=lambda: count(1), init=False, repr=False)

    def __call__(self) -> Bin:
        return Bin(
            id=f"node-{self.node_type}-{self.pool}-{next(self._sequence)}",
            capacity=self.capacity,
            node_type=self.node_type,
            pool=self.pool,
        )


class Packer:
    """
    Best-Fit-Decreasing bin packer

    Stateless between calls; only bins created during a call are mutated.
    """

    def pack(self, items: Sequence[Item], bin_factory: BinFactory) -> List[Bin]:
        """
        Pack items into as few bins as the heuristic finds

        Oversized items are dropped silently; use pack_with_report to see them.

        Args:
            items: Workloads to place (not mutated, order used for tie-breaks)
            bin_factory: Zero-argument callable returning an empty Bin

        Returns:
            Bins in creation order
        """
        return self.pack_with_report(items, bin_factory).bins

    def pack_with_report(self, items: Sequence[Item], bin_factory: BinFactory) -> PackingResult:
        """Pack items and also return the ones that fit no bin"""
        ordered = sorted(items, key=lambda item: item.area, reverse=True)
        result = PackingResult()

        for item in ordered:
            best_fit = self._best_fit(result.bins, item)

            if best_fit is not None:
                best_fit.add_item(item)
                continue

            new_bin = bin_factory()
            if not new_bin.add_item(item):
                logger.debug(
                    f"Item {item.id} ({item.dimensions.cpu:.0f} mCPU / {item.dimensions.ram:.0f} MiB) "
                    f"exceeds node capacity {new_bin.capacity.cpu:.0f} mCPU / {new_bin.capacity.ram:.0f} MiB"
                )
                result.dropped.append(item)
                continue
            result.bins.append(new_bin)

        return result

    @staticmethod
    def _best_fit(bins: List[Bin], item: Item):
        best = None
        min_residual = float("inf")

        for candidate in bins:
            if not candidate.can_fit(item):
                continue
            residual = (
                (candidate.capacity.cpu - candidate.used.cpu - item.dimensions.cpu)
                + (candidate.capacity.ram - candidate.used.ram - item.dimensions.ram)
            )
            # Strict comparison keeps the earliest bin on ties
            if residual < min_residual:
                min_residual = residual
                best = candidate

        return best
