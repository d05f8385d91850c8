# File: photopeak_fit/plotting.py
import matplotlib.pyplot as plt
import numpy as np

from photopeak_fit.models.peak_model import peak_components


def plot_fit(x, y, result, initial_params=None, n_points=500):
    """
    Two-panel view of a photopeak fit: data with the fitted model and its
    components on top, normalized residuals below.

    Returns: the matplotlib Figure.
    """
    params, perr, model = result
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    y_fit = model(x, params)

    # Use np.clip(y_fit) for stable denominator in residuals
    chi_residuals = (y - y_fit) / np.sqrt(np.clip(y_fit, 1, np.inf))
    dof = len(y) - len(params)
    chi2_red = np.sum(chi_residuals**2) / dof if dof > 0 else np.nan

    fig, axes = plt.subplots(2, 1, figsize=(8, 7), sharex=True,
                             gridspec_kw={'height_ratios': [3, 1]})

    # --- TOP PANEL: Fit Decomposition ---
    x_fine = np.linspace(x.min(), x.max(), n_points) if x.size else x
    bg_fit, peaks_fit = peak_components(model.shape, model.peak_count, x_fine, params)

    axes[0].errorbar(x, y, yerr=np.sqrt(np.clip(y, 1, np.inf)),
                     fmt='.', color='blue', label=r'Data ($\pm\sqrt{N}$)',
                     capsize=2, markersize=3, alpha=0.5)
    axes[0].plot(x_fine, model(x_fine, params), label='Total Fitted Model', color='red', linewidth=1.5)
    for i, peak in enumerate(peaks_fit, start=1):
        centroid, centroid_err = params[2 + 3 * (i - 1) + 1], perr[2 + 3 * (i - 1) + 1]
        axes[0].plot(x_fine, peak + bg_fit, linestyle='--', linewidth=1,
                     label=rf'Peak {i}: $\mu$ = {centroid:.3f} $\pm$ {centroid_err:.3f}')
    axes[0].plot(x_fine, bg_fit, label='Fitted Background', color='orange', linestyle=':', linewidth=1)
    if initial_params is not None:
        axes[0].plot(x_fine, model(x_fine, np.asarray(initial_params, dtype=float)),
                     label='Initial Guess', color='gray', linestyle='-.', linewidth=1)

    axes[0].set_title(f'Gamma Photopeak Fit ({model.shape.value}, {model.peak_count} peak(s))')
    axes[0].set_ylabel('Counts / Channel')
    axes[0].legend(loc='best', frameon=True)
    axes[0].grid(True, linestyle=':', alpha=0.6)

    # --- BOTTOM PANEL: Normalized Residuals ---
    axes[1].scatter(x, chi_residuals, s=10, color="black", alpha=0.7)
    axes[1].axhline(0, color="red", linestyle="--")
    axes[1].axhline(1, color="gray", linestyle="-", alpha=0.7)
    axes[1].axhline(-1, color="gray", linestyle="-", alpha=0.7)
    axes[1].text(0.98, 0.90, r'Reduced $\chi^2$ = {chi2_red:.3f}'.format(chi2_red=chi2_red),
                 transform=axes[1].transAxes, ha='right', va='top',
                 bbox=dict(boxstyle="round,pad=0.3", fc="white", alpha=0.8))
    axes[1].set_xlabel('Energy (keV)')
    axes[1].set_ylabel(r'$\frac{N_{data} - N_{fit}}{\sqrt{N_{fit}}}$')
    axes[1].grid(True, linestyle=':', alpha=0.6)

    fig.tight_layout()
    fig.subplots_adjust(hspace=0.0)
    return fig
