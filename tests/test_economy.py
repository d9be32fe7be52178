import random

import pytest

from soure.engine.economy import STARTING_BUNDLE, PlayerLedger
from soure.engine.types import ResourceType


def test_new_ledger_defaults():
    ledger = PlayerLedger()
    assert ledger.total() == 0
    assert ledger.population.to_dict() == {"max": 3, "used": 0}
    assert ledger.dominion_points == 0
    assert ledger.defense_level == 0


def test_shortfall_and_spend():
    ledger = PlayerLedger()
    ledger.grant(STARTING_BUNDLE)
    cost = {ResourceType.STONE: 2, ResourceType.FOOD: 2}

    assert ledger.shortfall(cost) == {ResourceType.STONE: 1, ResourceType.FOOD: 1}
    with pytest.raises(ValueError):
        ledger.spend(cost)
    assert ledger.resources[ResourceType.STONE] == 1

    ledger.spend({ResourceType.STONE: 1, ResourceType.WATER: 1})
    assert ledger.resources_dict() == {"stone": 0, "iron": 0, "food": 1, "water": 0, "gold": 0}


def test_negative_grant_rejected():
    with pytest.raises(ValueError):
        PlayerLedger().grant({ResourceType.GOLD: -1})


def test_take_one_follows_priority():
    ledger = PlayerLedger()
    ledger.grant({ResourceType.FOOD: 1, ResourceType.GOLD: 2})
    assert ledger.take_one() == ResourceType.FOOD
    assert ledger.take_one() == ResourceType.GOLD
    assert ledger.take_one() == ResourceType.GOLD
    assert ledger.take_one() is None


def test_discard_random_never_goes_negative():
    ledger = PlayerLedger()
    ledger.grant({ResourceType.IRON: 1, ResourceType.WATER: 1})
    discarded = ledger.discard_random(4, random.Random(0))
    assert sum(discarded.values()) == 2
    assert ledger.total() == 0
    assert all(amount >= 0 for amount in ledger.resources.values())
