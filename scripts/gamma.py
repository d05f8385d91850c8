"""Write a synthetic photopeak histogram (line at 988 keV on a linear
background) to CSV, for trying out run_fit.py."""
import argparse

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from photopeak_fit import synthetic_histogram

parser = argparse.ArgumentParser(description=__doc__)
parser.add_argument("output", nargs="?", default="spectrum_988keV.csv")
parser.add_argument("--shape", choices=["gaussian", "lorentzian"], default="gaussian")
parser.add_argument("--seed", type=int, default=None)
parser.add_argument("--show", action="store_true")
args = parser.parse_args()

energy = np.arange(900.0, 1100.0, 0.5)
true_params = [600, 0.05, 1000, 988, 0.8]
hist = synthetic_histogram(args.shape, true_params, energy, noise=True, seed=args.seed)

df = pd.DataFrame({
    'Energy_keV': hist[:, 0],
    'Counts': hist[:, 1],
})
df.to_csv(args.output, index=False)
print(f"Wrote {len(df)} rows to {args.output}")

if args.show:
    plt.plot(hist[:, 0], hist[:, 1])
    plt.xlabel('Energy (keV)')
    plt.ylabel('Counts')
    plt.title(f'Synthetic Spectrum with a {args.shape} line at 988 keV')
    plt.grid()
    plt.show()
