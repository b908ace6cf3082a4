"""
Reference frames for Stokes vectors and Mueller matrices.

A Stokes vector is only meaningful together with the direction of travel of
the beam and a reference basis vector orthogonal to it, which defines what
"horizontal" means. These frames are never stored alongside the matrices:
callers track them and use the functions below to move a Stokes vector or a
Mueller matrix from one frame to another before composing it with matrices
computed in a different local frame.

Vectors are arrays of shape (..., 3); leading axes broadcast.
"""

import numpy as np

from polartransport.elements import rotator, transpose


def normalise(v):
    """Return ``v`` scaled to unit length along the last axis."""
    v = np.asarray(v, dtype=float)
    return v / np.linalg.norm(v, axis=-1, keepdims=True)


def coordinate_system(w):
    """
    Complete a unit vector to an orthonormal basis.

    Branchless construction from "Building an Orthonormal Basis, Revisited"
    (Duff et al., JCGT 2017).

    Parameters
    ----------
    w : array-like (..., 3)
        Unit vector.

    Returns
    -------
    s, t : ndarray (..., 3)
        Unit vectors such that (s, t, w) is a right-handed orthonormal frame.
    """
    w = np.asarray(w, dtype=float)
    x, y, z = w[..., 0], w[..., 1], w[..., 2]

    sign = np.copysign(1.0, z)
    a = -1.0 / (sign + z)
    b = x * y * a

    s = np.stack([1.0 + sign * x * x * a, sign * b, -sign * x], axis=-1)
    t = np.stack([b, sign + y * y * a, -y], axis=-1)
    return s, t


def unit_angle(a, b):
    """
    Angle between two unit vectors.

    Uses the half-chord formulation, which stays accurate for nearly parallel
    and nearly antiparallel vectors where arccos of the dot product does not.
    """
    a = np.asarray(a, dtype=float)
    b = np.asarray(b, dtype=float)
    dot_uv = np.sum(a * b, axis=-1)
    flip = np.where(dot_uv >= 0, 1.0, -1.0)[..., None]
    temp = 2 * np.arcsin(np.clip(0.5 * np.linalg.norm(b - flip * a, axis=-1), 0.0, 1.0))
    return np.where(dot_uv >= 0, temp, np.pi - temp)


def stokes_basis(w):
    """
    Implicit reference basis for a Stokes vector travelling along ``w``.

    The result is one arbitrary unit vector orthogonal to ``w``. It is not
    unique, so frames that must stay consistent along a light path should be
    passed around explicitly rather than recomputed.
    """
    s, _ = coordinate_system(w)
    return s


def rotate_stokes_basis(forward, basis_current, basis_target):
    """
    Mueller matrix that re-expresses a Stokes vector in a new reference basis.

    A Stokes vector ``S`` expressed in ``basis_current`` reads as
    ``rotate_stokes_basis(...) @ S`` in ``basis_target``. For example,
    horizontally polarised light [1, 1, 0, 0] in basis [1, 0, 0] travelling
    along +z is +45 degree light [1, 0, 1, 0] in basis [0.707, -0.707, 0].

    Parameters
    ----------
    forward : array-like (..., 3)
        Direction of travel (normalised).
    basis_current : array-like (..., 3)
        Current Stokes basis, orthogonal to ``forward``.
    basis_target : array-like (..., 3)
        Target Stokes basis, orthogonal to ``forward``.

    Returns
    -------
    ndarray (..., 4, 4)
        Rotator aligning the two frames.

    Notes
    -----
    Orthogonality of the bases to ``forward`` is assumed, not checked.
    """
    forward = np.asarray(forward, dtype=float)
    basis_current = np.asarray(basis_current, dtype=float)
    basis_target = np.asarray(basis_target, dtype=float)

    theta = unit_angle(normalise(basis_current), normalise(basis_target))

    # counter-clockwise as seen by the sensor
    handedness = np.sum(forward * np.cross(basis_current, basis_target), axis=-1)
    theta = np.where(handedness < 0, -theta, theta)
    return rotator(theta)


def rotate_mueller_basis(
    M, in_forward, in_basis_current, in_basis_target, out_forward, out_basis_current, out_basis_target
):
    """
    Re-express a Mueller matrix between new input and output reference frames.

    ``M`` maps Stokes vectors from ``in_basis_current`` to
    ``out_basis_current``. The returned matrix describes the same interaction
    mapping ``in_basis_target`` to ``out_basis_target``. The input and output
    frames are rotated independently.

    Parameters
    ----------
    M : ndarray (..., 4, 4)
        Mueller matrix operating from ``in_basis_current`` to ``out_basis_current``.
    in_forward : array-like (..., 3)
        Direction of travel of the incoming beam (normalised).
    in_basis_current, in_basis_target : array-like (..., 3)
        Current and target input bases, orthogonal to ``in_forward``.
    out_forward : array-like (..., 3)
        Direction of travel of the outgoing beam (normalised).
    out_basis_current, out_basis_target : array-like (..., 3)
        Current and target output bases, orthogonal to ``out_forward``.

    Returns
    -------
    ndarray (..., 4, 4)
        R_out M R_in^T.
    """
    R_in = rotate_stokes_basis(in_forward, in_basis_current, in_basis_target)
    R_out = rotate_stokes_basis(out_forward, out_basis_current, out_basis_target)
    return R_out @ M @ transpose(R_in)


def rotate_mueller_basis_collinear(M, forward, basis_current, basis_target):
    """
    Re-express a Mueller matrix whose input and output share one frame.

    Parameters
    ----------
    M : ndarray (..., 4, 4)
        Mueller matrix operating from ``basis_current`` to ``basis_current``.
    forward : array-like (..., 3)
        Direction of travel (normalised).
    basis_current, basis_target : array-like (..., 3)
        Current and target bases, orthogonal to ``forward``.

    Returns
    -------
    ndarray (..., 4, 4)
        R M R^T.
    """
    R = rotate_stokes_basis(forward, basis_current, basis_target)
    return R @ M @ transpose(R)
