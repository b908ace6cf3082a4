"""
Mueller matrices of canonical optical elements and frame transforms.

Every function accepts plain floats or numpy arrays of any broadcastable
shape. Scalar inputs give a (4, 4) matrix; array inputs give a stack of shape
(..., 4, 4), one matrix per element of the broadcast input.

Stokes vectors are observed from the sensor side, looking back along the
propagation direction of the beam.
"""

import numpy as np


def _zeros(*params):
    """Zero Mueller matrix stack with the broadcast shape of ``params``."""
    shape = np.broadcast(*params).shape
    return np.zeros(shape + (4, 4))


def _identity(*params):
    shape = np.broadcast(*params).shape
    return np.broadcast_to(np.eye(4), shape + (4, 4)).copy()


def transpose(M):
    """Transpose the trailing 4x4 axes of a Mueller matrix stack."""
    return np.swapaxes(M, -1, -2)


def depolarizer(value=1.0):
    """
    Mueller matrix of an ideal depolarizer.

    Parameters
    ----------
    value : float or array-like
        The (0, 0) element, i.e. the transmitted fraction of intensity.

    Returns
    -------
    M : ndarray
        Mueller matrix (4x4) or stack (..., 4, 4).
    """
    value = np.asarray(value, dtype=float)
    M = _zeros(value)
    M[..., 0, 0] = value
    return M


def absorber(value):
    """
    Mueller matrix of an ideal absorber.

    Scales all four Stokes components uniformly by ``value`` and leaves the
    polarisation state untouched.
    """
    value = np.asarray(value, dtype=float)
    return value[..., None, None] * np.eye(4)


def linear_polarizer(value=1.0):
    """
    Mueller matrix of a linear polarizer transmitting light polarised at 0 degrees.

    "Polarized Light" by Edward Collett, Ch. 5 eq. (13).

    Parameters
    ----------
    value : float or array-like
        Attenuation of the transmitted component (1 is an ideal polarizer,
        which passes half of an unpolarised beam).
    """
    a = 0.5 * np.asarray(value, dtype=float)
    M = _zeros(a)
    M[..., 0, 0] = a
    M[..., 0, 1] = a
    M[..., 1, 0] = a
    M[..., 1, 1] = a
    return M


def linear_retarder(phase):
    """
    Mueller matrix of a linear retarder with its fast axis aligned vertically.

    Quarter-wave (phase = pi/2) and half-wave (phase = pi) plates are special
    cases.

    "Polarized Light" by Edward Collett, Ch. 5 eq. (27).

    Parameters
    ----------
    phase : float or array-like
        Phase difference between the fast and slow axes (radians).
    """
    phase = np.asarray(phase, dtype=float)
    s = np.sin(phase)
    c = np.cos(phase)

    M = _identity(phase)
    M[..., 2, 2] = c
    M[..., 2, 3] = -s
    M[..., 3, 2] = s
    M[..., 3, 3] = c
    return M


def diattenuator(x, y):
    """
    Mueller matrix of a linear diattenuator.

    Parameters
    ----------
    x : float or array-like
        Attenuation of the electric field component at 0 degrees.
    y : float or array-like
        Attenuation of the electric field component at 90 degrees.

    Returns
    -------
    M : ndarray
        Mueller matrix (4x4) or stack (..., 4, 4).
    """
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    a = 0.5 * (x + y)
    b = 0.5 * (x - y)
    c = np.sqrt(x * y)

    M = _zeros(a)
    M[..., 0, 0] = a
    M[..., 0, 1] = b
    M[..., 1, 0] = b
    M[..., 1, 1] = a
    M[..., 2, 2] = c
    M[..., 3, 3] = c
    return M


def rotator(theta):
    """
    Mueller matrix of an ideal rotator.

    Performs a counter-clockwise rotation of the reference frame by ``theta``
    radians, as seen from the sensor facing the beam. Horizontally polarised
    light [1, 1, 0, 0] therefore reads as -45 degree light [1, 0, -1, 0] after
    a rotator of +45 degrees.

    "Polarized Light" by Edward Collett, Ch. 5 eq. (43).

    Parameters
    ----------
    theta : float or array-like
        Rotation angle (radians).
    """
    theta = np.asarray(theta, dtype=float)
    s = np.sin(2 * theta)
    c = np.cos(2 * theta)

    M = _identity(theta)
    M[..., 1, 1] = c
    M[..., 1, 2] = s
    M[..., 2, 1] = -s
    M[..., 2, 2] = c
    return M


def rotated_element(theta, M):
    """
    Express the element ``M`` rotated counter-clockwise by ``theta`` in the caller's frame.

    Parameters
    ----------
    theta : float or array-like
        Rotation of the element relative to the caller's frame (radians).
    M : ndarray
        Mueller matrix (..., 4, 4) of the element in its own frame.

    Returns
    -------
    ndarray
        R^T M R with R = rotator(theta).
    """
    R = rotator(theta)
    return transpose(R) @ M @ R


def reverse(M):
    """
    Reverse the direction of propagation of the beam.

    Also used when reflecting a reference frame. Negates the U and V rows.
    """
    flip = np.array([1.0, 1.0, -1.0, -1.0])
    return flip[:, None] * np.asarray(M)
