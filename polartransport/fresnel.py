"""
Polarised Fresnel amplitudes at a planar interface.

The interaction builders in :mod:`polartransport.interaction` consume the
complex s/p amplitudes computed here. Inputs broadcast in the usual numpy way
so a whole batch of incidence cosines can be evaluated in lockstep.
"""

import numpy as np


def fresnel_polarized(cos_theta_i, eta):
    """
    Compute the complex Fresnel reflection amplitudes of an interface.

    Parameters
    ----------
    cos_theta_i : float or array-like
        Cosine of the angle between the surface normal and the incident ray.
        Negative values mean the ray arrives from the inside.
    eta : float, complex or array-like
        Relative refractive index of the interface. For real values, eta > 1
        means the surface normal points into the region of lower density.
        Conductors are described by a complex eta = n + ik.

    Returns
    -------
    a_s : ndarray (complex)
        Reflection amplitude for s-polarised light.
    a_p : ndarray (complex)
        Reflection amplitude for p-polarised light (Verdet sign convention).
    cos_theta_t : ndarray
        Signed cosine of the transmitted ray; zero under total internal
        reflection.
    eta_it : ndarray
        Relative index seen from the incident side.
    eta_ti : ndarray
        Reciprocal of ``eta_it``.

    Notes
    -----
    Under total internal reflection the root of cos(theta_t)^2 with negative
    imaginary part is used, which fixes the sign of the phase difference
    between the reflected s and p components. See appendix A.2 of "Stellar
    Polarimetry" by David Clarke.
    """
    cos_theta_i = np.asarray(cos_theta_i, dtype=float)
    eta = np.asarray(eta)
    if not np.iscomplexobj(eta):
        eta = eta.astype(float)

    outside = cos_theta_i >= 0
    rcp_eta = 1.0 / eta
    eta_it = np.where(outside, eta, rcp_eta)
    eta_ti = np.where(outside, rcp_eta, eta)

    # Snell's law
    cos_theta_t_sqr = 1.0 - (1.0 - cos_theta_i**2) * eta_ti**2
    cos_theta_i_abs = np.abs(cos_theta_i)

    cos_theta_t = np.sqrt(cos_theta_t_sqr.astype(complex))
    tir = (np.imag(cos_theta_t_sqr) == 0) & (np.real(cos_theta_t_sqr) < 0)
    cos_theta_t = np.where(tir, np.conj(cos_theta_t), cos_theta_t)

    # 0/0 at grazing incidence on an index-matched interface is masked below
    with np.errstate(divide="ignore", invalid="ignore"):
        a_s = (cos_theta_i_abs - eta_it * cos_theta_t) / (cos_theta_i_abs + eta_it * cos_theta_t)
        a_p = (cos_theta_t - eta_it * cos_theta_i_abs) / (cos_theta_t + eta_it * cos_theta_i_abs)

    index_matched = eta == 1
    a_s = np.where(index_matched, 0.0, a_s).astype(complex)
    a_p = np.where(index_matched, 0.0, a_p).astype(complex)

    cos_theta_t_signed = np.where(
        np.real(cos_theta_t_sqr) >= 0,
        np.where(outside, -np.real(cos_theta_t), np.real(cos_theta_t)),
        0.0,
    )

    return a_s, a_p, cos_theta_t_signed, eta_it, eta_ti


def sincos_arg_diff(a, b):
    """
    Sine and cosine of the phase difference arg(a) - arg(b).

    Returns NaN where either amplitude is zero; callers mask these lanes.
    """
    a = np.asarray(a, dtype=complex)
    b = np.asarray(b, dtype=complex)
    with np.errstate(divide="ignore", invalid="ignore"):
        normalisation = 1.0 / np.sqrt(np.abs(a) ** 2 * np.abs(b) ** 2)
        value = a * np.conj(b) * normalisation
    return np.imag(value), np.real(value)
