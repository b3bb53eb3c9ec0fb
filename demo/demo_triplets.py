#!/usr/bin/env python3
"""
Demo: Triplet Round Trips

Runs the three triplet topologies to completion and compares final ages:
- symmetric: identical trips, identical ages
- distance_scaled: 1x/2x/3x distance, nearer observers wait at home
- velocity_scaled: 1x/2x/4x velocity, faster observers age less in flight

Output: output/demo_triplets/<scenario>.png
"""

import matplotlib.pyplot as plt
from pathlib import Path

from twinsim.engine import create_scenario
from twinsim.logging_config import setup_logging
from twinsim.viz import plot_spacetime_diagram, plot_proper_time, save_figure


def main():
    setup_logging()

    print("=" * 60)
    print("  TRIPLET ROUND TRIPS")
    print("=" * 60)

    output_dir = Path("output/demo_triplets")
    output_dir.mkdir(parents=True, exist_ok=True)

    for i, name in enumerate(("symmetric", "distance_scaled", "velocity_scaled"), start=1):
        scenario = create_scenario(name)
        deriv = scenario.derivation
        params = scenario.parameters

        print(f"\n{i}. {deriv.topology.title}")
        print(f"   v = {params.v}c, D = {params.distance}, completion at t = {deriv.completion_instant:.2f}")

        # Fixed 30 fps frames until the slowest observer is home
        while not scenario.finished:
            scenario.advance(1.0 / 30.0)
        snap = scenario.snapshot()

        for role, state in snap.observers.items():
            obs = deriv.observers[role]
            print(f"   {obs.label:>10}: tau = {state.proper_time:7.3f}, "
                  f"home at t = {obs.milestones.completion:6.2f}, gamma in flight = "
                  f"{1.0 / obs.worldline.proper_time_rate(0.0):.3f}")

        fig, _ = plot_spacetime_diagram(deriv)
        save_figure(fig, output_dir / f"{name}_spacetime.png")
        fig = plot_proper_time(deriv, title=deriv.topology.title)
        output_path = output_dir / f"{name}.png"
        save_figure(fig, output_path)
        plt.close("all")
        print(f"   Saved: {output_path}")

    print("\n" + "=" * 60)
    print("  SUMMARY")
    print("=" * 60)
    print("  • Moving clocks run slow by 1/gamma on every leg")
    print("  • Observers home early age 1:1 while they wait")
    print("=" * 60)


if __name__ == "__main__":
    main()
