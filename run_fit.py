# File: run_fit.py (Sits at the project root)
import argparse
import logging
import sys

import matplotlib.pyplot as plt

from photopeak_fit import PhotopeakFitError, fit, load_histogram, select_window, summarize_fit
from photopeak_fit.plotting import plot_fit


def _float_list(text):
    return [float(v) for v in text.replace(",", " ").split()]


def parse_arguments(argv=None):
    parser = argparse.ArgumentParser(
        description="Fit one or two gamma photopeaks on a linear background.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("csv", help="histogram CSV with energy and counts columns")
    parser.add_argument("--xlow", type=float, required=True, help="low energy cut (exclusive)")
    parser.add_argument("--xhigh", type=float, required=True, help="high energy cut (exclusive)")
    parser.add_argument("--params", type=_float_list, required=True,
                        help="initial parameters 'c0,c1,A1,mu1,w1[,A2,mu2,w2]'")
    parser.add_argument("--shape", choices=["gaussian", "lorentzian"], default="gaussian")
    parser.add_argument("--peaks", type=int, default=1, help="number of photopeaks (1 or 2)")
    parser.add_argument("--lower", type=_float_list, default=None, help="lower parameter bounds (use --lower=... when the first value is negative)")
    parser.add_argument("--upper", type=_float_list, default=None, help="upper parameter bounds")
    parser.add_argument("--energy-col", default=None, help="energy column name")
    parser.add_argument("--counts-col", default=None, help="counts column name")
    parser.add_argument("--no-plot", action="store_true", help="skip the matplotlib figure")
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_arguments(argv)
    logging.basicConfig(level=args.log_level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    # --- 1. Data Loading ---
    try:
        data = load_histogram(args.csv, energy_col=args.energy_col, counts_col=args.counts_col)
    except (OSError, ValueError) as e:
        print(f"Error: could not read {args.csv}: {e}", file=sys.stderr)
        return 1

    # --- 2. Run Fitting Engine ---
    try:
        result = fit(args.shape, data, args.xlow, args.xhigh, args.params, args.peaks,
                     lower_bounds=args.lower, upper_bounds=args.upper)
    except PhotopeakFitError as e:
        print(f"Analysis terminated due to fit failure: {e}", file=sys.stderr)
        return 1

    # --- 3. Results ---
    p, s, _ = result
    print("\nFit Results (with 1σ uncertainties):")
    for i, (val, err) in enumerate(zip(p, s)):
        print(f"P{i} = {val:.6g} ({err:.3g})")
    gof = summarize_fit(data, args.xlow, args.xhigh, result)['goodness_of_fit']
    print(f"Reduced Chi² = {gof['reduced_chi_squared']:.3f} (DOF={gof['dof']})")

    # --- 4. Plotting ---
    if not args.no_plot:
        x, y = select_window(data, args.xlow, args.xhigh)
        plot_fit(x, y, result, initial_params=args.params)
        plt.show()
    return 0


if __name__ == "__main__":
    sys.exit(main())
