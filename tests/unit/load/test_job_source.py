"""Unit tests for JobSource and the arrival-time providers."""

import pytest

from elasticsim.core.temporal import Duration, Instant
from elasticsim.load.arrival_time_provider import (
    ConstantArrivalTimeProvider,
    PoissonArrivalTimeProvider,
)
from elasticsim.load.job_source import JobSource
from elasticsim.load.profile import (
    ConstantRateProfile,
    FunctionProfile,
    LinearRampProfile,
    StepProfile,
)

ONE_SECOND = Duration.from_seconds(1)


def arrival_seconds(source):
    return [job.arrival_time.to_seconds() for job in source]


class TestConstantArrivalTimeProvider:
    def test_constant_rate_spacing(self):
        provider = ConstantArrivalTimeProvider(ConstantRateProfile(4.0))
        times = [provider.next_arrival_time().to_seconds() for _ in range(4)]
        assert times == pytest.approx([0.25, 0.5, 0.75, 1.0])

    def test_ramp_follows_integral(self):
        # Rate t on [0, 10]: unit area is reached at sqrt(2), then sqrt(4), ...
        provider = ConstantArrivalTimeProvider(
            LinearRampProfile(start_rate=0, end_rate=10, ramp_start=0, ramp_end=10)
        )
        first = provider.next_arrival_time().to_seconds()
        second = provider.next_arrival_time().to_seconds()
        assert first == pytest.approx(2**0.5, abs=1e-6)
        assert second == pytest.approx(2.0, abs=1e-6)

    def test_zero_rate_without_horizon_raises(self):
        provider = ConstantArrivalTimeProvider(FunctionProfile(lambda t: 0.0))
        with pytest.raises(RuntimeError):
            provider.next_arrival_time()

    def test_zero_rate_with_horizon_is_exhausted(self):
        provider = ConstantArrivalTimeProvider(
            FunctionProfile(lambda t: 0.0), horizon=Instant.from_seconds(10)
        )
        assert provider.next_arrival_time() is None

    @pytest.mark.parametrize("rate", [3, 7, 9, 11])
    def test_rounding_does_not_accumulate(self, rate):
        provider = ConstantArrivalTimeProvider(
            ConstantRateProfile(float(rate)), horizon=Instant.from_seconds(50)
        )
        nanos = []
        while (arrival := provider.next_arrival_time()) is not None:
            nanos.append(arrival.nanoseconds)

        assert nanos == [round(k / rate * 1e9) for k in range(1, len(nanos) + 1)]
        # Arrivals one unit of time apart are exactly one second apart.
        assert all(b - a == 1_000_000_000 for a, b in zip(nanos, nanos[rate:]))

    def test_reset_replays(self):
        provider = ConstantArrivalTimeProvider(ConstantRateProfile(2.0))
        first = [provider.next_arrival_time() for _ in range(3)]
        provider.reset()
        assert [provider.next_arrival_time() for _ in range(3)] == first


class TestPoissonArrivalTimeProvider:
    def test_same_seed_same_arrivals(self):
        a = PoissonArrivalTimeProvider(ConstantRateProfile(10.0), seed=7)
        b = PoissonArrivalTimeProvider(ConstantRateProfile(10.0), seed=7)
        assert [a.next_arrival_time() for _ in range(20)] == [b.next_arrival_time() for _ in range(20)]

    def test_mean_rate_is_close(self):
        provider = PoissonArrivalTimeProvider(
            ConstantRateProfile(10.0), horizon=Instant.from_seconds(200), seed=42
        )
        count = 0
        while provider.next_arrival_time() is not None:
            count += 1
        assert count == pytest.approx(2000, rel=0.1)


class TestJobSource:
    def test_deterministic_arrivals_up_to_horizon(self):
        source = JobSource(5, ONE_SECOND, horizon=Instant.from_seconds(2))
        times = arrival_seconds(source)
        assert len(times) == 10
        assert times[0] == pytest.approx(0.2)
        assert times[-1] == pytest.approx(2.0)
        assert source.exhausted

    def test_jobs_carry_ids_and_service_duration(self):
        source = JobSource(5, ONE_SECOND, horizon=Instant.from_seconds(1))
        jobs = list(source)
        assert [job.id for job in jobs] == list(range(len(jobs)))
        assert all(job.service_duration == ONE_SECOND for job in jobs)
        assert source.emitted == len(jobs)

    def test_arrivals_strictly_increasing(self):
        source = JobSource(
            StepProfile(before=5, after=50, at=10),
            ONE_SECOND,
            horizon=Instant.from_seconds(20),
        )
        times = [job.arrival_time for job in source]
        assert all(b > a for a, b in zip(times, times[1:]))
        # 10 * 5 + 10 * 50 units of rate mass.
        assert abs(len(times) - 550) <= 1

    def test_extreme_rate_bumps_by_one_nanosecond(self):
        source = JobSource(1e10, ONE_SECOND, horizon=Instant.from_seconds(1e-6))
        times = [job.arrival_time.nanoseconds for job in source]
        assert len(times) > 1
        assert all(b > a for a, b in zip(times, times[1:]))

    def test_iteration_restarts(self):
        source = JobSource(3, ONE_SECOND, horizon=Instant.from_seconds(5), arrival_process="poisson", seed=3)
        assert arrival_seconds(source) == arrival_seconds(source)

    def test_zero_rate_is_immediately_exhausted(self):
        source = JobSource(0, ONE_SECOND, horizon=Instant.from_seconds(10))
        assert source.next_job() is None
        assert source.exhausted
        assert source.next_job() is None

    def test_time_series_input(self):
        source = JobSource([(0, 1), (5, 2)], ONE_SECOND, horizon=Instant.from_seconds(10))
        assert len(list(source)) == 15

    def test_unknown_process_rejected(self):
        with pytest.raises(ValueError, match="Unknown arrival process"):
            JobSource(1, ONE_SECOND, arrival_process="bursty")
