"""Autoscaling through a traffic spike.

The job rate sits at a base level, jumps for a while, then drops back:

```
rate
 spike |        ________
       |       |        |
 base  |_______|        |________
       +----------------------------> time
      0    spike_start  spike_end  horizon
```

The autoscaler samples the arrival rate once per scale interval and keeps
utilization (job rate / throughput) inside the target band. Jobs that
arrive while every box is busy are missed, so the interval right after the
spike starts shows a burst of misses until the new boxes come online.

Run:
    python examples/spike_autoscaling.py --spike-rate 80 --cooldown 5
"""

from __future__ import annotations

from pathlib import Path

from elasticsim import (
    SimulationConfig,
    SimulationResult,
    SpikeProfile,
    enable_console_logging,
    run_simulation,
)


def build_config(
    base_rate: float = 5.0,
    spike_rate: float = 50.0,
    spike_start: float = 100.0,
    spike_end: float = 200.0,
    service: float = 1.0,
    cooldown: float = 0.0,
    horizon: float = 300.0,
    seed: int | None = None,
) -> SimulationConfig:
    return SimulationConfig(
        job_rate=SpikeProfile(base_rate, spike_rate, spike_start, spike_end),
        service_duration=service,
        initial_capacity=max(1, round(base_rate * service / 0.5)),
        scale_cooldown=cooldown,
        horizon=horizon,
        arrival_process="poisson" if seed is not None else "deterministic",
        seed=seed,
    )


def print_scaling_history(result: SimulationResult) -> None:
    print("\nScaling actions:")
    if not result.scaling_history:
        print("  (none)")
    for action in result.scaling_history:
        print(
            f"  t={action.time:7.1f}  {action.action:<9}  {action.from_count:4d} -> {action.to_count:<4d}"
            f"  utilization={action.utilization:.2f}"
        )


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Elastic box pool through a traffic spike")
    parser.add_argument("--base-rate", type=float, default=5.0, help="Jobs per unit time outside the spike")
    parser.add_argument("--spike-rate", type=float, default=50.0, help="Jobs per unit time during the spike")
    parser.add_argument("--spike-start", type=float, default=100.0, help="Spike start time")
    parser.add_argument("--spike-end", type=float, default=200.0, help="Spike end time")
    parser.add_argument("--cooldown", type=float, default=0.0, help="Scale cooldown")
    parser.add_argument("--duration", type=float, default=300.0, help="Simulation horizon")
    parser.add_argument("--seed", type=int, default=-1, help="Poisson seed (use -1 for deterministic arrivals)")
    parser.add_argument("--output", type=str, default="output/spike_autoscaling", help="Output directory")
    parser.add_argument("--no-viz", action="store_true", help="Skip visualization generation")
    parser.add_argument("--verbose", action="store_true", help="Log scale actions to stderr")
    args = parser.parse_args()

    if args.verbose:
        enable_console_logging(level="INFO")

    config = build_config(
        base_rate=args.base_rate,
        spike_rate=args.spike_rate,
        spike_start=args.spike_start,
        spike_end=args.spike_end,
        cooldown=args.cooldown,
        horizon=args.duration,
        seed=None if args.seed == -1 else args.seed,
    )
    result = run_simulation(config)

    print(result.summary)
    print_scaling_history(result)

    output_dir = Path(args.output)
    result.to_csv(output_dir / "series.csv")
    if not args.no_viz:
        from elasticsim.visual import plot_result

        plot_result(
            result,
            output_dir / "overview.png",
            band=(config.target_low, config.target_high),
            title=f"Spike {args.base_rate:g} -> {args.spike_rate:g} -> {args.base_rate:g}",
        )
    print(f"\nOutput saved to: {output_dir.absolute()}")
