import math

import pytest

from ecorisk_core.config import DEFAULT_SCENARIOS
from ecorisk_core.projection import (
    project_scenario,
    project_temperature,
    project_vegetation,
    projection_series,
    scenario_rates,
)

SCENARIOS = list(DEFAULT_SCENARIOS) + ["unknown"]


@pytest.mark.parametrize("scenario", SCENARIOS)
def test_zero_years_is_identity(scenario):
    assert project_vegetation(0.65, 0, scenario) == 0.65
    assert project_temperature(28.2, 0, scenario) == 28.2


def test_rate_table():
    assert project_vegetation(0.5, 10, "low") == pytest.approx(0.492)
    assert project_vegetation(0.5, 10, "medium") == pytest.approx(0.485)
    assert project_vegetation(0.5, 10, "high") == pytest.approx(0.470)
    assert project_temperature(28.0, 10, "low") == pytest.approx(28.1)
    assert project_temperature(28.0, 10, "medium") == pytest.approx(28.2)
    assert project_temperature(28.0, 10, "high") == pytest.approx(28.4)


def test_vegetation_never_negative():
    assert project_vegetation(0.1, 1000, "high") == 0.0


@pytest.mark.parametrize("scenario", SCENARIOS)
def test_temperature_strictly_increasing(scenario):
    values = [project_temperature(25.0, y, scenario) for y in range(0, 60)]
    assert all(a < b for a, b in zip(values, values[1:]))


def test_unknown_scenario_uses_medium_rates():
    assert project_vegetation(0.5, 10, "unknown") == project_vegetation(0.5, 10, "medium")
    assert project_temperature(25.0, 10, "unknown") == project_temperature(25.0, 10, "medium")
    assert scenario_rates("rcp8.5") is DEFAULT_SCENARIOS["medium"]


def test_negative_years_are_clamped():
    assert project_vegetation(0.5, -5, "high") == 0.5
    assert project_temperature(25.0, -5, "high") == 25.0


def test_nan_base_propagates():
    assert math.isnan(project_vegetation(float("nan"), 10, "high"))
    assert math.isnan(project_temperature(float("nan"), 10, "low"))


@pytest.mark.parametrize("scenario", SCENARIOS)
def test_nan_years_propagate(scenario):
    assert math.isnan(project_vegetation(0.5, float("nan"), scenario))
    assert math.isnan(project_temperature(25.0, float("nan"), scenario))


def test_infinite_horizon():
    assert project_vegetation(0.5, float("inf"), "medium") == 0.0
    assert project_temperature(25.0, float("inf"), "medium") == float("inf")


def test_project_scenario_uses_elapsed_years():
    p = project_scenario(0.45, 28.2, base_year=2023, target_year=2050, scenario_id="medium")
    assert p.target_year == 2050
    assert p.scenario_id == "medium"
    assert p.projected_vegetation_index == pytest.approx(0.45 - 0.0015 * 27)
    assert p.projected_temperature_c == pytest.approx(28.2 + 0.02 * 27)


def test_project_scenario_target_in_the_past_keeps_base():
    p = project_scenario(0.45, 28.2, base_year=2023, target_year=2015, scenario_id="high")
    assert p.projected_vegetation_index == 0.45
    assert p.projected_temperature_c == 28.2


def test_projection_series_shape_and_ordering():
    df = projection_series(0.45, 28.2, 2023, 2030, density=3000.0)
    assert len(df) == 3 * 8
    assert set(df["scenario_id"]) == {"low", "medium", "high"}
    assert {"year", "vegetation_index", "surface_temperature_c", "risk_score", "risk_category"} <= set(df.columns)

    first = df[df["year"] == 2023]
    assert (first["vegetation_index"] == 0.45).all()
    assert (first["surface_temperature_c"] == 28.2).all()

    last = df[df["year"] == 2030].set_index("scenario_id")
    assert last.loc["high", "vegetation_index"] < last.loc["low", "vegetation_index"]
    assert last.loc["high", "risk_score"] >= last.loc["low", "risk_score"]
    assert df["risk_score"].between(0, 100).all()


def test_projection_series_subset_of_scenarios():
    df = projection_series(0.6, 25.0, 2023, 2025, scenarios=["low"])
    assert list(df["year"]) == [2023, 2024, 2025]
    assert set(df["scenario_id"]) == {"low"}
