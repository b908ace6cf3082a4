"""
Mueller matrices of specular reflection and transmission events.

Both builders return the matrix in the local s/p frame of the interface. Use
:func:`polartransport.basis.rotate_mueller_basis` to bring it into the frame
of an accumulated path throughput before multiplying.
"""

import numpy as np

from polartransport.fresnel import fresnel_polarized, sincos_arg_diff

# Below this |cos(theta_i)| the transmission unit conversion is set to zero
COS_THETA_EPSILON = 1e-8


def specular_reflection(cos_theta_i, eta):
    """
    Mueller matrix of a specular reflection at a dielectric or conductor interface.

    Parameters
    ----------
    cos_theta_i : float or array-like
        Cosine of the angle between the surface normal and the incident ray.
    eta : float, complex or array-like
        Relative refractive index of the interface, real or complex. In the
        real case, eta > 1 means the surface normal points into the region of
        lower density.

    Returns
    -------
    M : ndarray
        Mueller matrix (4x4) or stack (..., 4, 4).
    """
    a_s, a_p, _, _, _ = fresnel_polarized(cos_theta_i, eta)
    sin_delta, cos_delta = sincos_arg_diff(a_s, a_p)

    r_s = np.abs(a_s) ** 2
    r_p = np.abs(a_p) ** 2
    a = 0.5 * (r_s + r_p)
    b = 0.5 * (r_s - r_p)
    c = np.sqrt(r_s * r_p)

    # the phase difference is undefined when either amplitude vanishes
    sin_delta = np.where(c == 0, 0.0, sin_delta)
    cos_delta = np.where(c == 0, 0.0, cos_delta)

    M = np.zeros(a.shape + (4, 4))
    M[..., 0, 0] = a
    M[..., 0, 1] = b
    M[..., 1, 0] = b
    M[..., 1, 1] = a
    M[..., 2, 2] = c * cos_delta
    M[..., 2, 3] = c * sin_delta
    M[..., 3, 2] = -c * sin_delta
    M[..., 3, 3] = c * cos_delta
    return M


def specular_transmission(cos_theta_i, eta):
    """
    Mueller matrix of a specular transmission through a dielectric interface.

    Parameters
    ----------
    cos_theta_i : float or array-like
        Cosine of the angle between the surface normal and the incident ray.
    eta : float or array-like
        Real relative refractive index of the interface. A value greater than
        1.0 means the surface normal points into the region of lower density.

    Returns
    -------
    M : ndarray
        Mueller matrix (4x4) or stack (..., 4, 4). Zero under total internal
        reflection and at grazing incidence.

    Raises
    ------
    TypeError
        If ``eta`` is complex. Transmission into an absorbing medium is not
        modelled.
    """
    if np.iscomplexobj(eta):
        raise TypeError("specular_transmission requires a real-valued eta.")

    cos_theta_i = np.asarray(cos_theta_i, dtype=float)
    a_s, a_p, cos_theta_t, eta_it, eta_ti = fresnel_polarized(cos_theta_i, eta)

    # Radiometric unit conversion factor
    valid = np.abs(cos_theta_i) > COS_THETA_EPSILON
    cos_theta_i_safe = np.where(valid, cos_theta_i, 1.0)
    factor = -eta_it * np.where(valid, cos_theta_t / cos_theta_i_safe, 0.0)

    # Transmission amplitudes
    a_s_r = np.real(a_s) + 1.0
    a_p_r = (1.0 - np.real(a_p)) * eta_ti

    t_s = a_s_r**2
    t_p = a_p_r**2
    a = 0.5 * factor * (t_s + t_p)
    b = 0.5 * factor * (t_s - t_p)
    c = factor * np.sqrt(t_s * t_p)

    M = np.zeros(a.shape + (4, 4))
    M[..., 0, 0] = a
    M[..., 0, 1] = b
    M[..., 1, 0] = b
    M[..., 1, 1] = a
    M[..., 2, 2] = c
    M[..., 3, 3] = c
    return M
