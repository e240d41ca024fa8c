# Tests for growth stage strategies

import pytest

from doklah.stages import (
    AdolescentStrategy,
    AgeRange,
    ChildStrategy,
    CurveMetric,
    InfantStrategy,
    StageStrategy,
    registry,
)
from doklah.units import AgeUnit, GrowthStage


def test_tc001_registry_covers_every_stage():
    assert registry == {
        GrowthStage.INFANT: InfantStrategy,
        GrowthStage.CHILD: ChildStrategy,
        GrowthStage.ADOLESCENT: AdolescentStrategy,
    }


def test_tc002_base_strategy_is_abstract():
    with pytest.raises(TypeError):
        StageStrategy(AgeRange(min=0, max=1))  # type: ignore[abstract]


def test_tc003_stage_derived_from_class_name():
    age_range = AgeRange(min=0, max=23, unit=AgeUnit.MONTH)
    assert InfantStrategy(age_range).stage is GrowthStage.INFANT
    assert AdolescentStrategy(age_range).stage is GrowthStage.ADOLESCENT


@pytest.mark.parametrize("requested", list(CurveMetric))
def test_tc004_adolescent_always_uses_bmi(requested):
    strategy = AdolescentStrategy(AgeRange(min=10, max=19, unit=AgeUnit.YEAR))
    assert strategy.curve_metric(requested) is CurveMetric.BMI


@pytest.mark.parametrize("requested", [CurveMetric.WEIGHT, CurveMetric.HEIGHT])
def test_tc005_infant_and_child_use_requested_metric(requested):
    age_range = AgeRange(min=0, max=23)
    assert InfantStrategy(age_range).curve_metric(requested) is requested
    assert ChildStrategy(age_range).curve_metric(requested) is requested


def test_tc006_lookup_keys():
    assert InfantStrategy(AgeRange(min=0, max=23)).lookup_key(6, "MONTH") == (6, AgeUnit.MONTH)
    adolescent = AdolescentStrategy(AgeRange(min=10, max=19, unit=AgeUnit.YEAR))
    assert adolescent.lookup_key(126, AgeUnit.MONTH) == (11, AgeUnit.YEAR)
    assert adolescent.lookup_key(12, AgeUnit.YEAR) == (12, AgeUnit.YEAR)


def test_tc007_age_range_rejects_min_above_max():
    with pytest.raises(ValueError, match="min must be <= max"):
        AgeRange(min=10, max=2)


def test_tc008_covers_converts_units():
    strategy = ChildStrategy(AgeRange(min=2, max=9, unit=AgeUnit.YEAR))
    assert strategy.covers(24, AgeUnit.MONTH)
    assert strategy.covers(9, AgeUnit.YEAR)
    assert not strategy.covers(23, AgeUnit.MONTH)
    assert not strategy.covers(10, AgeUnit.YEAR)
