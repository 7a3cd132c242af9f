"""Participant pool and dwelling stock tests"""

import numpy as np
import pytest

from vickrey_housing import ColorState
from vickrey_housing.core.types import NO_DWELLING, NO_OWNER

from conftest import make_market


def current_values(houses, agents, intrinsicness=0.7):
    values = houses.value(intrinsicness)
    dw = agents.data.dwelling
    out = np.full(agents.n, np.nan)
    out[dw != NO_DWELLING] = values[dw[dw != NO_DWELLING]]
    return out


def test_ids_are_monotonic_and_row_lookup():
    _, agents = make_market([1.0], [10.0, 20.0, 30.0])
    assert agents.ids.tolist() == [0, 1, 2]
    agents.remove([1])
    new = agents.add([40.0], 2026)
    assert new.tolist() == [3]
    assert agents.ids.tolist() == [0, 2, 3]
    assert agents.row_of(3) == 2
    assert agents.row_of([0, 3]).tolist() == [0, 2]
    with pytest.raises(KeyError):
        agents.row_of(1)


def test_remove_housed_participant_is_refused():
    houses, agents = make_market([100.0], [200.0])
    houses.transfer_to(0, agents, 0, 100.0)
    with pytest.raises(ValueError):
        agents.remove([0])


def test_can_afford_and_bid_amount():
    _, agents = make_market([1.0], [300_000, 500_000])
    assert agents.can_afford(400_000).tolist() == [False, True]
    assert agents.bid_amount().tolist() == [300_000, 500_000]


def test_upgrade_threshold_gate():
    houses, agents = make_market([400_000, 500_000, 650_000], [1_000_000])
    houses.transfer_to(0, agents, 0, 400_000)
    cur = current_values(houses, agents)
    assert cur[0] == pytest.approx(400_000)

    assert not agents.should_bid(500_000, cur, 1.5)[0]
    assert agents.should_bid(650_000, cur, 1.5)[0]


def test_unhoused_bids_on_anything_affordable():
    houses, agents = make_market([400_000], [450_000, 350_000])
    cur = current_values(houses, agents)
    assert agents.should_bid(400_000, cur, 1.5).tolist() == [True, False]


def test_value_blends_intrinsic_and_last_price():
    houses, _ = make_market([100_000], [1.0])
    houses.last_sale_price[0] = 200_000
    assert houses.value(0.7)[0] == pytest.approx(130_000)
    assert houses.value(1.0, 0) == pytest.approx(100_000)
    assert houses.value(0.0, 0) == pytest.approx(200_000)


def test_transfer_releases_previous_dwelling():
    houses, agents = make_market([100_000, 300_000], [1_000_000])
    houses.transfer_to(0, agents, 0, 90_000)
    houses.age()
    houses.transfer_to(1, agents, 0, 250_000)

    assert houses.owner_id.tolist() == [NO_OWNER, 0]
    assert agents.data.dwelling[0] == 1
    assert houses.last_sale_price[1] == 250_000
    assert houses.last_sale_price[0] == 90_000
    assert houses.years_since_transfer.tolist() == [0, 0]


def test_release_clears_both_sides():
    houses, agents = make_market([100_000, 200_000], [150_000, 250_000])
    houses.transfer_to(0, agents, 0, 100_000)
    houses.transfer_to(1, agents, 1, 200_000)
    houses.age()
    assert houses.release([1], agents) == 1
    assert houses.owner_id.tolist() == [0, NO_OWNER]
    assert agents.data.dwelling.tolist() == [0, NO_DWELLING]
    assert houses.years_since_transfer.tolist() == [1, 0]
    assert houses.available_ids().tolist() == [1]


def test_color_states():
    houses, agents = make_market([1.0, 2.0, 3.0, 4.0], [10.0, 10.0])
    houses.transfer_to(0, agents, 0, 1.0)
    houses.transfer_to(1, agents, 1, 2.0)
    houses.age()
    houses.release([1], agents)
    houses.transfer_to(2, agents, 1, 3.0)

    states = [ColorState(s) for s in houses.color_state()]
    assert states == [ColorState.OCCUPIED, ColorState.JUST_AVAILABLE,
                      ColorState.JUST_OCCUPIED, ColorState.AVAILABLE]
    assert houses.view(3, 0.7).color_state.label == "available"
    assert houses.view(2, 0.7).color_state == ColorState.JUST_OCCUPIED
    assert [d.color_state for d in houses.views(0.7)] == states


def test_age_increments_every_dwelling():
    houses, agents = make_market([1.0, 2.0], [10.0])
    houses.transfer_to(0, agents, 0, 1.0)
    houses.age()
    houses.age()
    assert houses.years_since_transfer.tolist() == [2, 2]


def test_depreciation_two_ticks():
    houses, _ = make_market([100_000], [1.0])
    houses.depreciate(0.05)
    houses.depreciate(0.05)
    assert houses.intrinsic_value[0] == pytest.approx(90_250)


def test_depreciation_skips_occupied_and_respects_floor():
    houses, agents = make_market([100_000, 1_500], [1_000_000])
    houses.transfer_to(0, agents, 0, 100_000)
    houses.depreciate(0.9, min_value=1_000)
    assert houses.intrinsic_value.tolist() == [100_000, 1_000]
    houses.depreciate(0.0)
    assert houses.intrinsic_value.tolist() == [100_000, 1_000]


def test_depreciation_never_raises_value_below_floor():
    houses, _ = make_market([500, 1_020, 50_000], [1.0])
    for _ in range(3):
        before = houses.intrinsic_value.copy()
        houses.depreciate(0.05, min_value=1_000)
        assert np.all(houses.intrinsic_value <= before)
    assert houses.intrinsic_value[0] == 500
    assert houses.intrinsic_value[1] == 1_000


def test_views_are_plain_values():
    houses, agents = make_market([100_000], [150_000])
    houses.transfer_to(0, agents, 0, 120_000)
    p = agents.views()[0]
    d = houses.views(0.7)[0]
    assert (p.id, p.dwelling_id, p.year_entered) == (0, 0, 2025)
    assert d.owner_id == 0 and not d.is_available
    assert d.value == pytest.approx(0.7 * 100_000 + 0.3 * 120_000)
