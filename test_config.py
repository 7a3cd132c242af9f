"""Config schema, preset loader and CLI tests"""

import json

import pytest
from pydantic import ValidationError

from vickrey_housing import MarketEngine, ScenarioConfig, load_scenario, load_scenario_from_dict
from vickrey_housing.__main__ import main
from vickrey_housing.config.loader import available_presets, preset_path


def test_defaults():
    cfg = ScenarioConfig()
    assert cfg.population.participant_count == 10
    assert cfg.housing.dwelling_count == 10
    assert cfg.housing.intrinsicness == 0.7
    assert cfg.housing.vacancy_depreciation_rate == 0.05
    assert cfg.market.upgrade_threshold == 1.5
    assert cfg.market.single_bidder_discount == 0.75
    assert cfg.simulation.starting_year == 2025
    assert cfg.simulation.history_capacity == 1000


@pytest.mark.parametrize("section, key, value", [
    ("population", "participant_count", 0),
    ("population", "wealth_std", 0),
    ("population", "turnover_in", -1),
    ("housing", "dwelling_count", 0),
    ("housing", "intrinsicness", 1.5),
    ("housing", "vacancy_depreciation_rate", 0.25),
    ("housing", "initial_occupancy", -0.1),
    ("market", "upgrade_threshold", 0),
    ("market", "n_auction_steps", 0),
    ("simulation", "history_capacity", 0),
])
def test_out_of_range_rejected(section, key, value):
    with pytest.raises(ValidationError):
        load_scenario_from_dict({section: {key: value}})


def test_unknown_keys_rejected():
    with pytest.raises(ValidationError):
        load_scenario_from_dict({"housing": {"dwelling_cnt": 5}})
    with pytest.raises(ValidationError):
        load_scenario_from_dict({"taxes": {}})


def test_assignment_is_validated():
    cfg = ScenarioConfig()
    cfg.simulation.num_steps = 3
    with pytest.raises(ValidationError):
        cfg.housing.intrinsicness = 2.0
    assert cfg.housing.intrinsicness == 0.7


def test_presets_load():
    assert {"default", "small_town"} <= set(available_presets())
    default = load_scenario(preset_path("default"))
    assert default.population.participant_count == 100
    assert default.market.n_auction_steps == 3
    small = load_scenario(preset_path("small_town") / "scenario.json")
    assert small.simulation.seed == 7
    assert small.housing.initial_occupancy == 0.8


def test_missing_scenario(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_scenario(tmp_path)
    with pytest.raises(FileNotFoundError):
        load_scenario(tmp_path / "nope.json")


def test_engine_from_preset():
    engine = MarketEngine.from_preset(preset_path("small_town"))
    assert engine.agents.n == 10
    assert engine.houses.n == 10
    assert engine.config.simulation.name == "small_town"


def test_cli_quiet_prints_summary(capsys):
    code = main(["--preset", "small_town", "--steps", "4", "--quiet"])
    assert code == 0
    summary = json.loads(capsys.readouterr().out)
    assert summary["ticks"] == 4
    assert summary["last_year"] == 2029


def test_cli_export(tmp_path, capsys):
    out = tmp_path / "history.json"
    code = main(["--preset", "small_town", "--steps", "3", "--seed", "11",
                 "--export", str(out)])
    assert code == 0
    assert "Simulation complete" in capsys.readouterr().out
    doc = json.loads(out.read_text(encoding="utf-8"))
    assert doc["metadata"]["data_point_count"] == 3
    assert [r["tick"] for r in doc["data"]] == [1, 2, 3]


def test_cli_config_file(tmp_path, capsys):
    path = tmp_path / "scenario.json"
    path.write_text(json.dumps({"simulation": {"num_steps": 2},
                                "housing": {"dwelling_count": 4}}), encoding="utf-8")
    assert main(["--config", str(path), "--quiet"]) == 0
    assert json.loads(capsys.readouterr().out)["ticks"] == 2


def test_cli_bad_scenarios(tmp_path):
    assert main(["--preset", "atlantis", "--quiet"]) == 1
    bad = tmp_path / "bad.json"
    bad.write_text(json.dumps({"housing": {"intrinsicness": 3}}), encoding="utf-8")
    assert main(["--config", str(bad), "--quiet"]) == 1
    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    assert main(["--config", str(broken), "--quiet"]) == 1
    assert main(["--preset", "small_town", "--steps", "-1", "--quiet"]) == 1
