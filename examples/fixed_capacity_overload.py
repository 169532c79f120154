"""What a fixed-size pool does when demand steps past its capacity.

With autoscaling off, a pool of ``capacity`` boxes serves at most
``capacity / service`` jobs per unit time. After the step, every job above
that rate is missed:

    missed per unit time ~= after_rate - capacity / service

Run:
    python examples/fixed_capacity_overload.py --after 50 --capacity 10
"""

from __future__ import annotations

from pathlib import Path

from elasticsim import SimulationConfig, StepProfile, run_simulation


def run(before: float, after: float, at: float, capacity: int, service: float, horizon: float):
    config = SimulationConfig(
        job_rate=StepProfile(before=before, after=after, at=at),
        service_duration=service,
        initial_capacity=capacity,
        min_capacity=capacity,
        horizon=horizon,
        autoscale=False,
    )
    return run_simulation(config)


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Fixed capacity under a step increase in demand")
    parser.add_argument("--before", type=float, default=5.0, help="Job rate before the step")
    parser.add_argument("--after", type=float, default=50.0, help="Job rate after the step")
    parser.add_argument("--at", type=float, default=100.0, help="Step time")
    parser.add_argument("--capacity", type=int, default=10, help="Number of boxes")
    parser.add_argument("--service", type=float, default=1.0, help="Service duration per job")
    parser.add_argument("--duration", type=float, default=200.0, help="Simulation horizon")
    parser.add_argument("--output", type=str, default="output/fixed_capacity_overload", help="Output directory")
    args = parser.parse_args()

    result = run(args.before, args.after, args.at, args.capacity, args.service, args.duration)
    print(result.summary)

    expected = max(0.0, args.after - args.capacity / args.service) * (args.duration - args.at)
    print(f"\nExpected misses after the step: ~{expected:.0f}")

    df = result.to_dataframe()
    after_step = df[df["time"] > args.at + 1]
    print(f"Mean misses per interval after the step: {after_step['missed'].mean():.2f}")

    path = Path(args.output) / "series.csv"
    result.to_csv(path)
    print(f"Series saved to: {path.absolute()}")
