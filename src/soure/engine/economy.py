from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable

from soure.utils.repro import RandomSource

from .types import RESOURCES, ResourceBank, ResourceType

DEFAULT_POPULATION_MAX = 3

STARTING_BUNDLE: ResourceBank = {
    ResourceType.STONE: 1,
    ResourceType.WATER: 1,
    ResourceType.FOOD: 1,
}


def empty_resources() -> ResourceBank:
    return {resource: 0 for resource in RESOURCES}


@dataclass
class Population:
    max: int = DEFAULT_POPULATION_MAX
    used: int = 0

    @property
    def free(self) -> int:
        return self.max - self.used

    def to_dict(self) -> Dict[str, int]:
        return {"max": self.max, "used": self.used}


@dataclass
class PlayerLedger:
    """Bookkeeping for one player. Callers validate; the ledger only refuses to go negative."""

    resources: ResourceBank = field(default_factory=empty_resources)
    population: Population = field(default_factory=Population)
    dominion_points: int = 0
    defense_level: int = 0

    def total(self) -> int:
        return sum(self.resources.values())

    def can_afford(self, cost: ResourceBank) -> bool:
        return all(self.resources[key] >= amount for key, amount in cost.items())

    def shortfall(self, cost: ResourceBank) -> ResourceBank:
        missing: ResourceBank = {}
        for key, amount in cost.items():
            if self.resources[key] < amount:
                missing[key] = amount - self.resources[key]
        return missing

    def spend(self, cost: ResourceBank) -> None:
        if not self.can_afford(cost):
            raise ValueError(f"Cannot spend {cost}; ledger holds {self.resources}")
        for key, amount in cost.items():
            self.resources[key] -= amount

    def grant(self, award: ResourceBank) -> None:
        for key, amount in award.items():
            if amount < 0:
                raise ValueError(f"Negative grant of {key.value}: {amount}")
            self.resources[key] += amount

    def take_one(self, priority: Iterable[ResourceType] = RESOURCES) -> ResourceType | None:
        """Remove one unit of the first held resource in ``priority`` order."""
        for resource in priority:
            if self.resources[resource] > 0:
                self.resources[resource] -= 1
                return resource
        return None

    def discard_random(self, count: int, rng: RandomSource) -> ResourceBank:
        """Drop up to ``count`` single units, each picked with weight equal to the held amount."""
        discarded = empty_resources()
        for _ in range(min(count, self.total())):
            held = [resource for resource in RESOURCES if self.resources[resource] > 0]
            weights = [self.resources[resource] for resource in held]
            resource = rng.choices(held, weights=weights, k=1)[0]
            self.resources[resource] -= 1
            discarded[resource] += 1
        return discarded

    def resources_dict(self) -> Dict[str, int]:
        return {key.value: value for key, value in self.resources.items()}
