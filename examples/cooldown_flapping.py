"""Scale cooldown against a square-wave load.

A load that alternates faster than the autoscaler can usefully follow makes
it flap: every tick sees the opposite extreme and resizes the pool again.
A cooldown blocks reversing a resize for a while after it, trading a few
missed jobs for far fewer scale actions.

Run:
    python examples/cooldown_flapping.py --period 5 --cooldowns 0 5 10 20
"""

from __future__ import annotations

from elasticsim import SimulationConfig, SquareWaveProfile, run_simulation


def compare(low: float, high: float, period: float, cooldowns: list[float], horizon: float) -> list[tuple]:
    rows = []
    for cooldown in cooldowns:
        config = SimulationConfig(
            job_rate=SquareWaveProfile(low=low, high=high, period=period),
            initial_capacity=10,
            scale_cooldown=cooldown,
            horizon=horizon,
        )
        summary = run_simulation(config).summary
        rows.append((cooldown, summary.scale_actions, summary.missed, summary.total_cost, summary.average_utilization))
    return rows


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Effect of scale cooldown on a square-wave load")
    parser.add_argument("--low", type=float, default=2.0, help="Low job rate")
    parser.add_argument("--high", type=float, default=20.0, help="High job rate")
    parser.add_argument("--period", type=float, default=5.0, help="Square wave period")
    parser.add_argument("--cooldowns", type=float, nargs="+", default=[0.0, 5.0, 10.0, 20.0])
    parser.add_argument("--duration", type=float, default=200.0, help="Simulation horizon")
    args = parser.parse_args()

    print(f"{'cooldown':>9} {'actions':>8} {'missed':>8} {'cost':>10} {'avg util':>9}")
    for cooldown, actions, missed, cost, utilization in compare(
        args.low, args.high, args.period, args.cooldowns, args.duration
    ):
        print(f"{cooldown:9.1f} {actions:8d} {missed:8d} {cost:10.1f} {utilization:9.3f}")
