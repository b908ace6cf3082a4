import matplotlib.pyplot as plt
import numpy as np

from polartransport.interaction import specular_reflection, specular_transmission

STOKES_LABELS = ["I", "Q", "U", "V"]


def plot_mueller_elements(x, M, filename=None, xlabel="x", title=None, labels=None, normalise=True):
    """
    Plot all sixteen elements of a Mueller matrix stack against a parameter.

    Parameters
    ----------
    x : array-like (N,)
        Parameter values along the first axis of the stack.
    M : ndarray (N, 4, 4) or sequence of such stacks
        Mueller matrices to plot. Several stacks are overlaid.
    filename : str, optional
        If given, the figure is saved there and closed.
    xlabel : str
        Label of the horizontal axis.
    title : str, optional
        Figure title.
    labels : list of str, optional
        Legend entries, one per stack.
    normalise : bool
        Divide every element by M00, the usual way of showing the polarising
        behaviour independently of the throughput. Lanes with M00 = 0 plot as 0.

    Returns
    -------
    fig : matplotlib.figure.Figure
    """
    x = np.asarray(x, dtype=float)
    stacks = [M] if isinstance(M, np.ndarray) else list(M)
    if labels is None:
        labels = [None] * len(stacks)

    fig, axes = plt.subplots(4, 4, figsize=(12, 10), sharex=True, sharey=normalise)
    for stack, label in zip(stacks, labels):
        stack = np.asarray(stack)
        if normalise:
            m00 = stack[:, 0, 0]
            m00_safe = np.where(m00 == 0, 1.0, m00)
            stack = np.where((m00 == 0)[:, None, None], 0.0, stack / m00_safe[:, None, None])
        for i in range(4):
            for j in range(4):
                axes[i, j].plot(x, stack[:, i, j], label=label)

    for i in range(4):
        for j in range(4):
            ax = axes[i, j]
            ax.set_title(f"M{i}{j}", fontsize=9)
            ax.grid(True, alpha=0.3)
            if i == 3:
                ax.set_xlabel(xlabel)
    if normalise:
        axes[0, 0].set_ylim(-1.05, 1.05)
    if any(label is not None for label in labels):
        axes[0, 0].legend(fontsize=8)
    if title is not None:
        fig.suptitle(title)
    fig.tight_layout()

    if filename is not None:
        fig.savefig(filename, dpi=150)
        plt.close(fig)
    return fig


def plot_interface(eta, n_samples=181, filename=None):
    """
    Plot reflection and transmission Mueller matrices of an interface versus incidence angle.

    Transmission is only shown for real ``eta``.
    """
    theta_deg = np.linspace(0, 90, n_samples)
    cos_theta_i = np.cos(np.deg2rad(theta_deg))

    stacks = [specular_reflection(cos_theta_i, eta)]
    labels = ["reflection"]
    if not np.iscomplexobj(eta):
        stacks.append(specular_transmission(cos_theta_i, eta))
        labels.append("transmission")

    return plot_mueller_elements(
        theta_deg,
        stacks,
        filename=filename,
        xlabel="Incidence angle (deg)",
        title=f"Interface Mueller matrix, eta = {eta}",
        labels=labels,
    )
