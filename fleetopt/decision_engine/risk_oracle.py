"""
Interruption Risk Oracle

Tracks an exponentially decaying interruption-risk score per
(availability zone, instance type) pool.

Lifecycle of a score:
- Unknown pool: reads return baseline_risk
- Interruption: score jumps to interruption_penalty (overwrites, not additive)
- Decay tick: score *= decay_factor, floored at baseline_risk

The oracle never schedules decay itself; callers tick it on their own
cadence (e.g. once per scan cycle). All operations hold a lock, so the
oracle can be shared between solver runs and event handlers.
"""

from typing import Dict, Optional
import logging
import threading

from ..config.settings import RiskConfig

logger = logging.getLogger(__name__)


class RiskEngine:
    """
    Thread-safe store of pool interruption risk (0.0 - 1.0)

    Usage:
        oracle = RiskEngine(RiskConfig())
        oracle.record_interruption("us-east-1a", "m5.large")
        oracle.get_risk("us-east-1a", "m5.large")  # 1.0
        oracle.decay()                              # 0.95
    """

    def __init__(self, config: Optional[RiskConfig] = None):
        self.config = config or RiskConfig()
        self._history: Dict[str, float] = {}
        self._lock = threading.Lock()

    @staticmethod
    def pool_key(zone: str, instance_type: str) -> str:
        return f"{zone}:{instance_type}"

    def record_interruption(self, zone: str, instance_type: str) -> None:
        """Spike the pool's risk to the configured interruption penalty"""
        key = self.pool_key(zone, instance_type)
        with self._lock:
            self._history[key] = self.config.interruption_penalty
        logger.warning(
            f"Interruption recorded for pool {key}; risk set to {self.config.interruption_penalty:.2f}"
        )

    def decay(self) -> None:
        """Apply one decay tick to every tracked pool"""
        with self._lock:
            for key, value in self._history.items():
                self._history[key] = max(value * self.config.decay_factor, self.config.baseline_risk)
            tracked = len(self._history)
        logger.debug(f"Risk decay applied to {tracked} pools (factor {self.config.decay_factor})")

    def get_risk(self, zone: str, instance_type: str) -> float:
        """Current interruption probability for a pool"""
        with self._lock:
            return self._history.get(self.pool_key(zone, instance_type), self.config.baseline_risk)

    def snapshot(self) -> Dict[str, float]:
        """Copy of all tracked scores, keyed by zone:instance_type"""
        with self._lock:
            return dict(self._history)
