#!/usr/bin/env python3
"""
Run all demos and write a summary report.

Executes the demo scripts for:
1. Simple pendulum (energy drift, convergence)
2. Double pendulum (chaos, twin ribbons)
3. Lorenz attractor (accuracy vs reference)
4. Pendulum on a cart (conservation at 480 Hz)

Figures go to report/figures, the summary to report/full_report.md.
"""

import subprocess
import sys
import os
from datetime import datetime

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

DEMOS = {
    'pendulum': 'run_pendulum.py',
    'double_pendulum': 'run_double_pendulum.py',
    'lorenz': 'run_lorenz.py',
    'pendulum_cart': 'run_pendulum_cart.py',
}


def run_demo(script_name: str, extra_args=()) -> bool:
    """Run a demo script and return success status."""
    print(f"\n{'#'*70}")
    print(f"# Running: {script_name}")
    print('#'*70 + "\n")

    result = subprocess.run(
        [sys.executable, script_name, *extra_args],
        cwd=os.path.dirname(os.path.abspath(__file__))
    )

    return result.returncode == 0


def generate_full_report(results):
    """Generate markdown summary."""
    print(f"\n{'#'*70}")
    print("# Generating Report")
    print('#'*70 + "\n")

    rows = "\n".join(f"| {name} | {'PASSED' if ok else 'FAILED'} |"
                     for name, ok in results.items())

    report = f"""# PhyzViz: Demo Report

Generated: {datetime.now().strftime("%Y-%m-%d %H:%M:%S")}

## Demos

| Demo | Status |
|------|--------|
{rows}

## Systems

- **Simple pendulum**: θ'' = -(g/L) sin θ, L = 2 m, 120 Hz fixed step
- **Double pendulum**: unit masses and rods, half-speed playback
- **Lorenz attractor**: σ = 10, ρ = 28, β = 8/3, quarter-speed playback
- **Pendulum on a cart**: M = 2 kg, m = 1 kg, ℓ = 2 m, 4 substeps per tick

## Numerics

All runs use fixed-step RK4 in single precision. Energy drift figures
(`*_energy_drift.png`) show bounded drift rather than exact conservation;
`pendulum_convergence.png` shows the observed order of accuracy.

## Figures

See `report/figures/`.

---
*Generated automatically by run_all.py*
"""

    os.makedirs('report', exist_ok=True)
    with open('report/full_report.md', 'w', encoding='utf-8') as f:
        f.write(report)

    print("  Saved: report/full_report.md")


def main():
    """Run all demos and generate report."""
    print("=" * 70)
    print("PHYZVIZ: ALL DEMOS")
    print("=" * 70)

    os.makedirs('report/figures', exist_ok=True)

    extra_args = ['--gif'] if '--gif' in sys.argv else []
    results = {name: run_demo(script, extra_args) for name, script in DEMOS.items()}

    generate_full_report(results)

    print("\n" + "=" * 70)
    print("DEMO SUMMARY")
    print("=" * 70)

    for name, success in results.items():
        status = "PASSED" if success else "FAILED"
        print(f"  {name}: {status}")

    all_passed = all(results.values())

    print("\n" + "=" * 70)
    if all_passed:
        print("ALL DEMOS PASSED!")
    else:
        print("SOME DEMOS FAILED!")
    print("=" * 70)

    print("\nGenerated files:")
    print("  - report/full_report.md")
    print("  - report/figures/*.png")

    return 0 if all_passed else 1


if __name__ == '__main__':
    sys.exit(main())
