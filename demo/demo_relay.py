#!/usr/bin/env python3
"""
Demo: Twin Paradox Relay

S stays at the origin. L flies out at v and hands its clock reading to R
at the turnaround point; R flies back. The relay total (L + R) ends up
smaller than S's reading:

1. Drive the scenario with irregular wall-clock frames, like a render loop
2. Print the clocks at the handoff and at the return
3. Cross-check against numerical integration
4. Plot the spacetime diagram and the clock readings

Output: output/demo_relay/relay.png
"""

import numpy as np
import matplotlib.pyplot as plt
from pathlib import Path

from twinsim.analysis import max_discrepancy
from twinsim.core import gamma
from twinsim.engine import EventFlag, create_scenario
from twinsim.logging_config import setup_logging
from twinsim.scenarios import ObserverRole
from twinsim.viz import plot_spacetime_diagram, save_figure


def main():
    setup_logging()
    rng = np.random.default_rng(42)

    print("=" * 60)
    print("  TWIN PARADOX RELAY")
    print("=" * 60)

    v, distance = 0.5, 10.0
    scenario = create_scenario("relay", v=v, distance=distance, speed=2.0)
    deriv = scenario.derivation

    print(f"\n1. Setup:")
    print(f"   v = {v}c, D = {distance}, gamma = {gamma(v):.4f}")
    print(f"   Handoff at t = {deriv.handoff_instant:.2f}, return at t = {deriv.completion_instant:.2f}")

    print("\n2. Running render loop (jittered 60 fps frames)...")
    handed_off = False
    n_frames = 0
    while True:
        scenario.advance(float(rng.uniform(0.5, 1.5) / 60.0))
        snap = scenario.snapshot()
        n_frames += 1

        if not handed_off and EventFlag.HANDED_OFF in snap[ObserverRole.R].flags:
            handed_off = True
            print(f"   Handoff reached at lab t = {snap.lab_time:.2f}: "
                  f"L frozen at tau = {snap.frozen_donor_proper_time:.3f}")

        if snap.scene_finished:
            break

    print(f"   Finished after {n_frames} frames")
    print(f"   S (stationary): {snap.reference_time:.3f}")
    print(f"   Relay total:    {snap.relay_total:.3f}")
    print(f"   Difference:     {snap.reference_time - snap.relay_total:.3f}")

    print("\n3. Cross-checking clocks against scipy integration...")
    print(f"   Max discrepancy: {max_discrepancy(deriv):.2e}")

    print("\n4. Plotting...")
    fig, axes = plt.subplots(1, 2, figsize=(14, 7))
    plot_spacetime_diagram(deriv, ax=axes[0])

    times = np.linspace(deriv.start_lab_time, deriv.completion_instant, 300)
    totals = [scenario.engine.tick(t).relay_total for t in times]
    references = [scenario.engine.tick(t).reference_time for t in times]
    axes[1].plot(times, references, color="#3498db", linewidth=2, label="S (stationary)")
    axes[1].plot(times, totals, color="gold", linewidth=2, linestyle="--", label="Relay total (L + R)")
    axes[1].axvline(deriv.handoff_instant, color="gray", linestyle=":", alpha=0.6)
    axes[1].set_xlabel("Lab time")
    axes[1].set_ylabel("Clock reading")
    axes[1].set_title("Relay vs Stationary Clock")
    axes[1].legend()
    axes[1].grid(True, alpha=0.3)
    fig.tight_layout()

    output_dir = Path("output/demo_relay")
    output_dir.mkdir(parents=True, exist_ok=True)
    output_path = output_dir / "relay.png"
    save_figure(fig, output_path)
    plt.close()
    print(f"   Saved: {output_path}")

    print("\n" + "=" * 60)
    print("  SUMMARY")
    print("=" * 60)
    print(f"  • Stationary clock: {snap.reference_time:.2f}")
    print(f"  • Relay clock:      {snap.relay_total:.2f} = (2D/v)/gamma")
    print(f"  • The relay ages less, independent of frame timing")
    print("=" * 60)


if __name__ == "__main__":
    main()
