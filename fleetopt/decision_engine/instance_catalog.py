"""
Instance Catalog Helpers

Bridges discovered infrastructure and pricing data into solver inputs:
- Hardware specs for common EC2 types (with a baseline for unknown types)
- Static monthly cost estimates when live pricing is unavailable
- Catalog building (monthly price -> hourly_cost, default zone placement)
- Workload extraction: one Item per EC2 instance (cpu = vCPU * 1000, ram = MiB)

Live price retrieval is not done here; callers pass a price_lookup
callable returning a monthly USD price.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional
import logging

from ..schemas.models import Dimensions, Item
from ..schemas.optimization import HOURS_PER_MONTH, InstanceType

logger = logging.getLogger(__name__)

# (region, instance_type) -> monthly USD
PriceLookup = Callable[[str, str], float]

EC2_INSTANCE_RESOURCE = "AWS::EC2::Instance"
DEFAULT_INSTANCE_TYPE = "m5.large"


@dataclass(frozen=True)
class InstanceSpecs:
    """Hardware specification of an instance type"""
    vcpu: float
    memory_mib: float
    arch: str = "x86_64"

    def to_dimensions(self) -> Dimensions:
        return Dimensions(cpu=self.vcpu * 1000, ram=self.memory_mib)


# Modern instance types considered when building a catalog
CANDIDATE_TYPES = [
    # General Purpose
    "m5.large", "m5.xlarge", "m5.2xlarge",
    "m6i.large", "m6i.xlarge", "m6i.2xlarge",
    "m6g.large", "m6g.xlarge", "m6g.2xlarge",  # Graviton
    "t3.medium", "t3.large", "t3.xlarge",  # Burstable

    # Compute Optimized
    "c5.large", "c5.xlarge", "c5.2xlarge",
    "c6i.large", "c6i.xlarge", "c6i.2xlarge",
    "c6g.large", "c6g.xlarge", "c6g.2xlarge",

    # Memory Optimized
    "r5.large", "r5.xlarge", "r5.2xlarge",
    "r6i.large", "r6i.xlarge", "r6i.2xlarge",
    "r6g.large", "r6g.xlarge", "r6g.2xlarge",
]

INSTANCE_SPECS: Dict[str, InstanceSpecs] = {
    # T3 (Burstable)
    "t3.nano": InstanceSpecs(2, 512),
    "t3.micro": InstanceSpecs(2, 1024),
    "t3.small": InstanceSpecs(2, 2048),
    "t3.medium": InstanceSpecs(2, 4096),
    "t3.large": InstanceSpecs(2, 8192),
    "t3.xlarge": InstanceSpecs(4, 16384),
    "t3.2xlarge": InstanceSpecs(8, 32768),

    # M5 (General Purpose)
    "m5.large": InstanceSpecs(2, 8192),
    "m5.xlarge": InstanceSpecs(4, 16384),
    "m5.2xlarge": InstanceSpecs(8, 32768),
    "m5.4xlarge": InstanceSpecs(16, 65536),

    # M6g (Graviton)
    "m6g.medium": InstanceSpecs(1, 4096, "arm64"),
    "m6g.large": InstanceSpecs(2, 8192, "arm64"),
    "m6g.xlarge": InstanceSpecs(4, 16384, "arm64"),
    "m6g.2xlarge": InstanceSpecs(8, 32768, "arm64"),

    # C5 (Compute)
    "c5.large": InstanceSpecs(2, 4096),
    "c5.xlarge": InstanceSpecs(4, 8192),
    "c5.2xlarge": InstanceSpecs(8, 16384),

    # C6g (Graviton)
    "c6g.medium": InstanceSpecs(1, 2048, "arm64"),
    "c6g.large": InstanceSpecs(2, 4096, "arm64"),
    "c6g.xlarge": InstanceSpecs(4, 8192, "arm64"),
    "c6g.2xlarge": InstanceSpecs(8, 16384, "arm64"),

    # R5 (Memory)
    "r5.large": InstanceSpecs(2, 16384),
    "r5.xlarge": InstanceSpecs(4, 32768),
    "r5.2xlarge": InstanceSpecs(8, 65536),
}

BASELINE_SPECS = InstanceSpecs(2, 8192)


def get_specs(instance_type: str) -> InstanceSpecs:
    """Specs for an instance type, falling back to a 2 vCPU / 8 GiB baseline if unknown"""
    return INSTANCE_SPECS.get(instance_type, BASELINE_SPECS)


class StaticCostEstimator:
    """
    Rough monthly cost estimates by instance family

    Used when live pricing is unavailable. Region is accepted for interface
    compatibility with live lookups and ignored.
    """

    # family prefix -> (base monthly, .xlarge monthly)
    FAMILY_ESTIMATES = {
        "m": (70.0, 140.0),
        "c": (60.0, 120.0),
        "r": (90.0, 180.0),
    }
    BURSTABLE_ESTIMATE = 30.0
    DEFAULT_ESTIMATE = 50.0

    def get_estimated_cost(self, instance_type: str, region: str = "") -> float:
        if instance_type.startswith("t"):
            return self.BURSTABLE_ESTIMATE

        for prefix, (base, xlarge) in self.FAMILY_ESTIMATES.items():
            if instance_type.startswith(prefix):
                return xlarge if ".xlarge" in instance_type else base

        return self.DEFAULT_ESTIMATE


def resolve_monthly_price(
    instance_type: str,
    region: str,
    price_lookup: Optional[PriceLookup] = None,
    estimator: Optional[StaticCostEstimator] = None
) -> float:
    """
    Monthly price for an instance type

    Uses price_lookup when given; falls back to the static estimator if the
    lookup is missing, fails, or returns 0.
    """
    estimator = estimator or StaticCostEstimator()

    if price_lookup is not None:
        try:
            price = price_lookup(region, instance_type)
        except Exception as e:
            logger.warning(f"Price lookup failed for {instance_type} in {region}: {e}. Using static estimate.")
        else:
            if price:
                return price

    return estimator.get_estimated_cost(instance_type, region)


def build_catalog(
    candidate_types: Iterable[str],
    region: str,
    price_lookup: Optional[PriceLookup] = None
) -> List[InstanceType]:
    """
    Build solver catalog entries

    Args:
        candidate_types: Instance type names to include
        region: AWS region; every entry is placed in "<region>a"
        price_lookup: Optional live monthly price source

    Returns:
        Catalog entries with hourly_cost = monthly price / 730
    """
    catalog = []
    for instance_type in candidate_types:
        specs = get_specs(instance_type)
        monthly = resolve_monthly_price(instance_type, region, price_lookup)
        catalog.append(InstanceType(
            name=instance_type,
            cpu=specs.vcpu * 1000,
            ram=specs.memory_mib,
            hourly_cost=monthly / HOURS_PER_MONTH,
            region=region,
            zone=f"{region}a",
        ))

    logger.info(f"Built catalog with {len(catalog)} instance types for {region}")
    return catalog


def _instance_type_of(resource: Dict[str, Any]) -> str:
    properties = resource.get("properties") or {}
    return resource.get("instance_type") or properties.get("Type") or DEFAULT_INSTANCE_TYPE


def compute_resources(resources: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Only the EC2 instances among discovered resources"""
    return [r for r in resources if r.get("type") == EC2_INSTANCE_RESOURCE]


def build_workloads(resources: Iterable[Dict[str, Any]]) -> List[Item]:
    """
    Turn discovered compute resources into packing items

    Each EC2 instance becomes exactly one Item sized by its instance type.
    Resources look like {"id": ..., "type": "AWS::EC2::Instance",
    "instance_type": "m5.large"}; the type may also sit in
    properties["Type"]. Missing types default to m5.large.
    """
    workloads = []
    for resource in compute_resources(resources):
        workloads.append(Item(
            id=resource["id"],
            dimensions=get_specs(_instance_type_of(resource)).to_dimensions(),
            group=resource.get("group"),
        ))
    return workloads


def current_monthly_spend(
    resources: Iterable[Dict[str, Any]],
    region: str,
    price_lookup: Optional[PriceLookup] = None
) -> float:
    """Sum of monthly prices of all discovered compute resources"""
    return sum(
        resolve_monthly_price(_instance_type_of(resource), region, price_lookup)
        for resource in compute_resources(resources)
    )
