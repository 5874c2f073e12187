#!/usr/bin/env python3
"""Plot the shell-averaged potential of a field dump against the Coulomb 1/r law."""

import argparse
from collections import defaultdict
from pathlib import Path

import numpy as np
import matplotlib.pyplot as plt


def radial_profile(path: Path) -> tuple[np.ndarray, np.ndarray]:
    """Average phi over cells at the same distance from the centre (columns 3 and 4)."""
    data = np.loadtxt(path, usecols=(3, 4))
    shells = defaultdict(list)
    for r, phi in data:
        shells[round(r, 4)].append(phi)
    r_unique = np.array(sorted(shells))
    phi_avg = np.array([np.mean(shells[r]) for r in r_unique])
    return r_unique, phi_avg


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("field", type=Path, help="poissonOutput.dat written by poisson3d")
    parser.add_argument("--output", type=Path, default=Path("potential.png"))
    parser.add_argument("--permittivity", type=float, default=1.0)
    args = parser.parse_args()

    r, phi = radial_profile(args.field)
    nonzero = r > 0
    coulomb = 1.0 / (4.0 * np.pi * args.permittivity * r[nonzero])

    plt.plot(r, phi, label="Numerical")
    plt.plot(r[nonzero], coulomb, "r--", label="1/(4 pi eps r) (Coulomb)")
    plt.xlabel("Distance r")
    plt.ylabel("Potential")
    plt.xscale("log")
    plt.yscale("log")
    plt.grid(True, which="both", ls="--")
    plt.legend()
    plt.title(f"Poisson solution vs. Coulomb ({args.field.parent.name})")
    plt.savefig(args.output)
    print(f"Saved {args.output}")


if __name__ == "__main__":
    main()
