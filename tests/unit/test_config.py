"""Unit tests for SimulationConfig validation and construction."""

import pytest

from elasticsim.config import SimulationConfig
from elasticsim.core.temporal import Duration, Instant
from elasticsim.errors import ConfigError
from elasticsim.load.profile import ConstantRateProfile, FunctionProfile, PiecewiseConstantProfile


class TestDefaults:
    def test_defaults(self):
        config = SimulationConfig(job_rate=5)
        assert config.profile == ConstantRateProfile(5.0)
        assert config.service == Duration.from_seconds(1)
        assert config.end_time == Instant.from_seconds(100)
        assert (config.target_low, config.target_mid, config.target_high) == (0.4, 0.5, 0.6)
        assert config.arrival_process == "deterministic"
        assert config.autoscale

    def test_report_interval_follows_scale_interval(self):
        assert SimulationConfig(job_rate=1, scale_interval=2.5).report_interval == 2.5
        assert SimulationConfig(job_rate=1, report_interval=0.5).report_interval == 0.5

    def test_job_rate_inputs_are_normalized(self):
        assert isinstance(SimulationConfig(job_rate=lambda t: 1.0).profile, FunctionProfile)
        assert isinstance(
            SimulationConfig(job_rate=[(0, 1), (10, 2)]).profile, PiecewiseConstantProfile
        )

    def test_with_overrides(self):
        config = SimulationConfig(job_rate=5, initial_capacity=10)
        changed = config.with_overrides(horizon=50.0, seed=3)
        assert changed.horizon == 50.0
        assert changed.seed == 3
        assert changed.initial_capacity == 10
        assert config.horizon == 100.0


class TestValidation:
    @pytest.mark.parametrize(
        "overrides",
        [
            {"service_duration": 0},
            {"service_duration": -1.0},
            {"horizon": 0},
            {"horizon": float("inf")},
            {"scale_interval": 0},
            {"initial_capacity": -1},
            {"initial_capacity": 1.5},
            {"min_capacity": 5, "initial_capacity": 2},
            {"max_capacity": 1, "initial_capacity": 2},
            {"target_low": 0.7},
            {"target_low": 0.0},
            {"target_mid": 0.9},
            {"scale_cooldown": -1},
            {"cost_per_box_per_time": -0.1},
            {"scale_cooldown": None},
            {"scale_cooldown": float("nan")},
            {"cost_per_box_per_time": "cheap"},
            {"target_high": "0.6"},
            {"missed_abort_threshold": "10"},
            {"arrival_process": "bursty"},
            {"missed_abort_threshold": -1},
        ],
    )
    def test_rejects_invalid(self, overrides):
        with pytest.raises(ConfigError):
            SimulationConfig(job_rate=5, **overrides)

    def test_rejects_bad_job_rate(self):
        with pytest.raises(ConfigError, match="Invalid job rate"):
            SimulationConfig(job_rate="fast")
        with pytest.raises(ConfigError):
            SimulationConfig(job_rate=[(10, 1), (0, 2)])

    @pytest.mark.parametrize("name", ["scale_cooldown", "cost_per_box_per_time"])
    def test_non_numeric_rejected_with_config_error(self, name):
        with pytest.raises(ConfigError, match=f"{name} must be a non-negative number"):
            SimulationConfig(job_rate=5, **{name: None})

    @pytest.mark.parametrize("name", ["scale_cooldown", "cost_per_box_per_time"])
    def test_zero_allowed(self, name):
        config = SimulationConfig(job_rate=5, **{name: 0})
        assert getattr(config, name) == 0

    def test_config_error_is_value_error(self):
        with pytest.raises(ValueError):
            SimulationConfig(job_rate=5, horizon=-1)

    def test_sub_nanosecond_service_rejected(self):
        with pytest.raises(ConfigError, match="clock resolution"):
            SimulationConfig(job_rate=5, service_duration=1e-12)


class TestFromDict:
    def test_camel_case_keys(self):
        config = SimulationConfig.from_dict(
            {
                "jobRate": 5,
                "serviceDuration": 2.0,
                "initialCapacity": 10,
                "targetLow": 0.3,
                "targetMid": 0.5,
                "targetHigh": 0.7,
                "scaleCooldown": 10,
                "costPerBoxPerTime": 2.0,
            }
        )
        assert config.service_duration == 2.0
        assert config.initial_capacity == 10
        assert config.target_low == 0.3
        assert config.scale_cooldown == 10
        assert config.cost_per_box_per_time == 2.0

    def test_snake_case_keys(self):
        config = SimulationConfig.from_dict({"job_rate": 1, "horizon": 10.0})
        assert config.horizon == 10.0

    def test_unknown_key(self):
        with pytest.raises(ConfigError, match="Unknown configuration option"):
            SimulationConfig.from_dict({"job_rate": 1, "queue_size": 5})

    def test_duplicate_key(self):
        with pytest.raises(ConfigError, match="given twice"):
            SimulationConfig.from_dict({"job_rate": 1, "jobRate": 2})

    def test_missing_job_rate(self):
        with pytest.raises(ConfigError, match="job_rate"):
            SimulationConfig.from_dict({"horizon": 10.0})
