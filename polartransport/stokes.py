"""
Stokes vector helpers.

Stokes vectors are stored as Mueller matrices with only the first column
populated, so that they compose with Mueller matrices through plain matrix
products. Components are [I, Q, U, V]: total intensity, horizontal minus
vertical, +45 minus -45 degrees, and right minus left circular.
"""

import numpy as np


def stokes_vector(s0, s1=0.0, s2=0.0, s3=0.0):
    """
    Build a Stokes vector from its four components.

    Parameters
    ----------
    s0, s1, s2, s3 : float or array-like
        Stokes components. Arrays broadcast against each other.

    Returns
    -------
    S : ndarray
        Array of shape (..., 4, 4) with columns 1-3 equal to zero.
    """
    components = np.broadcast_arrays(*(np.asarray(s, dtype=float) for s in (s0, s1, s2, s3)))
    S = np.zeros(components[0].shape + (4, 4))
    for i, component in enumerate(components):
        S[..., i, 0] = component
    return S


def unpolarized(intensity=1.0):
    """Stokes vector of unpolarised light."""
    return stokes_vector(intensity)


def stokes_components(S):
    """Return the (..., 4) component vector stored in the first column of ``S``."""
    return np.asarray(S)[..., :, 0]


def compute_stokes_components(I_0, I_45, I_90, I_135, I_rcp=None, I_lcp=None):
    """
    Compute a Stokes vector from analyser intensity measurements.

    Parameters
    ----------
    I_0, I_45, I_90, I_135 : array-like
        Intensity behind a linear analyser at 0, 45, 90 and 135 degrees.
    I_rcp, I_lcp : array-like, optional
        Intensity behind right and left circular analysers. When omitted the
        circular component is taken as zero.

    Returns
    -------
    S : ndarray (..., 4, 4)
        Stokes vector.
    """
    I_0 = np.asarray(I_0, dtype=float)
    I_90 = np.asarray(I_90, dtype=float)
    S0 = I_0 + I_90
    S1 = I_0 - I_90
    S2 = np.asarray(I_45, dtype=float) - np.asarray(I_135, dtype=float)
    if I_rcp is None or I_lcp is None:
        S3 = 0.0
    else:
        S3 = np.asarray(I_rcp, dtype=float) - np.asarray(I_lcp, dtype=float)
    return stokes_vector(S0, S1, S2, S3)


def _safe_intensity(S0):
    return np.where(S0 == 0, 1.0, S0)


def degree_of_polarisation(S):
    """
    Degree of polarisation sqrt(Q^2 + U^2 + V^2) / I.

    Zero where the intensity vanishes.
    """
    s = stokes_components(S)
    p = np.sqrt(s[..., 1] ** 2 + s[..., 2] ** 2 + s[..., 3] ** 2)
    return np.where(s[..., 0] == 0, 0.0, p / _safe_intensity(s[..., 0]))


def degree_of_linear_polarisation(S):
    """Degree of linear polarisation sqrt(Q^2 + U^2) / I."""
    s = stokes_components(S)
    p = np.sqrt(s[..., 1] ** 2 + s[..., 2] ** 2)
    return np.where(s[..., 0] == 0, 0.0, p / _safe_intensity(s[..., 0]))


def angle_of_linear_polarisation(S):
    """Angle of linear polarisation (radians) relative to the reference basis."""
    s = stokes_components(S)
    return 0.5 * np.arctan2(s[..., 2], s[..., 1])


def analyser_intensity(S, angle):
    """
    Intensity transmitted by an ideal linear analyser.

    Parameters
    ----------
    S : ndarray (..., 4, 4)
        Stokes vector.
    angle : float or array-like
        Analyser transmission axis relative to the reference basis (radians).

    Returns
    -------
    ndarray
        I(angle) = (S0 + S1 cos(2 angle) + S2 sin(2 angle)) / 2
    """
    s = stokes_components(S)
    angle = np.asarray(angle, dtype=float)
    return 0.5 * (s[..., 0] + s[..., 1] * np.cos(2 * angle) + s[..., 2] * np.sin(2 * angle))
