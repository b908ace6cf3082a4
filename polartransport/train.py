"""
Optical trains described in JSON5 parameter files.

An optical train is an ordered list of elements that a beam meets one after
another, all expressed in one shared reference frame. Each element is a
dictionary naming its ``type`` and the parameters of the corresponding
constructor, plus an optional ``angle`` by which the element is rotated.
Any numeric parameter may be a list, in which case the train is evaluated for
every value at once.
"""

import os
from functools import reduce

import json5
import numpy as np

from polartransport import elements, interaction
from polartransport.stokes import degree_of_polarisation, stokes_components, stokes_vector

# Constructor and the ordered (name, default) pairs of its parameters.
# A default of None marks a required parameter.
ELEMENT_TYPES = {
    "depolarizer": (elements.depolarizer, (("value", 1.0),)),
    "absorber": (elements.absorber, (("value", None),)),
    "linear_polarizer": (elements.linear_polarizer, (("value", 1.0),)),
    "linear_retarder": (elements.linear_retarder, (("phase", None),)),
    "diattenuator": (elements.diattenuator, (("x", None), ("y", None))),
    "rotator": (elements.rotator, (("theta", None),)),
    "specular_reflection": (interaction.specular_reflection, (("cos_theta_i", None), ("eta", None))),
    "specular_transmission": (interaction.specular_transmission, (("cos_theta_i", None), ("eta", None))),
}

# Parameters that are angles and are converted when a train uses degrees
ANGLE_PARAMS = {"phase", "theta", "angle"}


def load_params(json_filename):
    """
    Load an optical train parameter file.

    Parameters
    ----------
    json_filename : str
        Path to a JSON or JSON5 file.

    Returns
    -------
    dict
        Parsed parameters.
    """
    if not os.path.exists(json_filename):
        raise ValueError(f"Parameter file not found: {json_filename}")

    with open(json_filename, "r") as f:
        params = json5.load(f)

    if not isinstance(params, dict):
        raise ValueError(f"Parameter file must contain an object, got {type(params).__name__}.")
    return params


def _parse_eta(value):
    """
    Convert a refractive index given as a number, a list or {re, im} to an array.

    Lists are lanes of real indices. Complex indices are only accepted in the
    {re: .., im: ..} form, whose entries may themselves be lists.
    """
    if isinstance(value, dict):
        if "re" not in value:
            raise ValueError(f"Complex eta must contain 're', got keys {sorted(value.keys())}.")
        re = np.asarray(value["re"], dtype=float)
        im = np.asarray(value.get("im", 0.0), dtype=float)
        if np.all(im == 0):
            return re
        return re + 1j * im

    return np.asarray(value, dtype=float)


def build_element(element, degrees=False):
    """
    Build the Mueller matrix of one optical train element.

    Parameters
    ----------
    element : dict
        Element description with a ``type`` key naming one of
        ``ELEMENT_TYPES`` or ``"reverse"``, its parameters, and an optional
        ``angle``.
    degrees : bool
        If True, ``phase``, ``theta`` and ``angle`` are given in degrees.

    Returns
    -------
    ndarray (..., 4, 4)
        Mueller matrix of the element in the train's reference frame.
    """
    if not isinstance(element, dict):
        raise ValueError(f"Element must be an object, got {type(element).__name__}: {element!r}")
    if "type" not in element:
        raise ValueError(f"Element is missing 'type': {element}")

    element_type = element["type"]

    def get_param(name, value):
        value = np.asarray(value, dtype=float)
        if degrees and name in ANGLE_PARAMS:
            value = np.deg2rad(value)
        return value

    if element_type == "reverse":
        M = elements.reverse(np.eye(4))
    elif element_type in ELEMENT_TYPES:
        constructor, signature = ELEMENT_TYPES[element_type]
        args = []
        for name, default in signature:
            if name in element:
                value = element[name]
            elif default is not None:
                value = default
            else:
                raise ValueError(f"Element '{element_type}' requires parameter '{name}'.")

            if name == "eta":
                args.append(_parse_eta(value))
            else:
                args.append(get_param(name, value))
        M = constructor(*args)
    else:
        supported = sorted(ELEMENT_TYPES) + ["reverse"]
        raise ValueError(f"Unsupported element type '{element_type}'. Supported types: {supported}.")

    if "angle" in element:
        M = elements.rotated_element(get_param("angle", element["angle"]), M)
    return M


def compose(matrices):
    """
    Compose Mueller matrices in the order the beam meets them.

    ``compose([M1, M2, M3])`` returns M3 @ M2 @ M1. Stacks broadcast.
    """
    if len(matrices) == 0:
        return np.eye(4)
    return reduce(lambda total, M: M @ total, matrices[1:], matrices[0])


def run_train(params):
    """
    Evaluate an optical train.

    Args:
        params (dict): Configuration dictionary containing:
            - elements (list): Element descriptions, see :func:`build_element`
            - stokes (list, optional): Incoming Stokes vector [I, Q, U, V].
              Defaults to unpolarised light of unit intensity.
            - degrees (bool, optional): Angles and phases in degrees. Defaults to False.
            - output_filename (str, optional): Path of a .npy file to save the
              composed Mueller matrix to.

    Returns:
        dict: ``mueller`` (composed matrix), ``stokes`` (outgoing Stokes
        components, shape (..., 4)) and ``dop`` (degree of polarisation).
    """
    if "elements" not in params:
        raise ValueError("Missing 'elements'. Provide a list of optical elements.")
    if not isinstance(params["elements"], list):
        raise ValueError(f"'elements' must be a list, got {type(params['elements']).__name__}.")

    degrees = bool(params.get("degrees", False))
    matrices = [build_element(element, degrees=degrees) for element in params["elements"]]
    M = compose(matrices)

    stokes_in = np.asarray(params.get("stokes", [1.0, 0.0, 0.0, 0.0]), dtype=float)
    if stokes_in.shape != (4,):
        raise ValueError(f"stokes must have length 4, got shape {stokes_in.shape}.")

    S_out = M @ stokes_vector(*stokes_in)

    output_filename = params.get("output_filename")
    if output_filename is not None:
        ext = os.path.splitext(output_filename)[1].lower()
        if ext != ".npy":
            raise ValueError(f"Unsupported output extension '{ext}'. Use .npy.")
        np.save(output_filename, M)

    return {
        "mueller": M,
        "stokes": stokes_components(S_out),
        "dop": degree_of_polarisation(S_out),
    }
