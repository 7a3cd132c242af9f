"""JSON -> Python config loader"""

import json
from pathlib import Path

from .schema import ScenarioConfig

PRESETS_DIR = Path(__file__).resolve().parent.parent / "presets"


def load_scenario(preset_dir: str | Path) -> ScenarioConfig:
    """Load a scenario from a preset directory (scenario.json) or a JSON file

    Args:
        preset_dir: preset directory containing scenario.json, or a .json file

    Returns:
        validated ScenarioConfig
    """
    path = Path(preset_dir)
    if path.is_dir():
        path = path / "scenario.json"

    if not path.exists():
        raise FileNotFoundError(f"scenario file not found: {path}")

    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)

    return ScenarioConfig(**data)


def load_scenario_from_dict(data: dict) -> ScenarioConfig:
    """Load directly from a dict"""
    return ScenarioConfig(**data)


def preset_path(name: str) -> Path:
    return PRESETS_DIR / name


def available_presets() -> list[str]:
    return sorted(p.name for p in PRESETS_DIR.iterdir() if (p / "scenario.json").exists())
