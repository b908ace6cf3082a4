"""
Tests for optical trains described by parameter dictionaries and JSON5 files.
"""

import numpy as np
import pytest

from polartransport import train
from polartransport.elements import linear_polarizer, linear_retarder, rotated_element
from polartransport.interaction import specular_reflection


@pytest.fixture
def circular_params():
    """Fixture providing a polarizer followed by a quarter-wave plate at 45 degrees."""
    return {
        "degrees": True,
        "elements": [
            {"type": "linear_polarizer"},
            {"type": "linear_retarder", "phase": 90, "angle": 45},
        ],
    }


class TestBuildElement:
    """Tests for build_element."""

    def test_default_parameters(self):
        assert np.allclose(train.build_element({"type": "linear_polarizer"}), linear_polarizer(1.0))

    def test_angle_in_degrees(self):
        M = train.build_element({"type": "linear_polarizer", "value": 0.8, "angle": 30}, degrees=True)
        assert np.allclose(M, rotated_element(np.pi / 6, linear_polarizer(0.8)))

    def test_angle_in_radians(self):
        M = train.build_element({"type": "linear_retarder", "phase": np.pi / 2})
        assert np.allclose(M, linear_retarder(np.pi / 2))

    def test_value_not_converted_to_radians(self):
        M = train.build_element({"type": "absorber", "value": 0.5}, degrees=True)
        assert np.allclose(M, 0.5 * np.eye(4))

    def test_reverse(self):
        assert np.allclose(train.build_element({"type": "reverse"}), np.diag([1.0, 1.0, -1.0, -1.0]))

    def test_eta_list_is_real_lanes(self):
        """A two-element eta list means two real indices, not one complex index."""
        M = train.build_element({"type": "specular_reflection", "cos_theta_i": 1.0, "eta": [1.33, 1.5]})

        assert M.shape == (2, 4, 4)
        assert np.allclose(M[0], specular_reflection(1.0, 1.33))
        assert np.allclose(M[1], specular_reflection(1.0, 1.5))

    def test_eta_list_allowed_for_transmission(self):
        M = train.build_element({"type": "specular_transmission", "cos_theta_i": 1.0, "eta": [1.33, 1.5]})
        assert M.shape == (2, 4, 4)
        assert np.isclose(M[1, 0, 0], 0.96)

    def test_complex_eta_dict(self):
        M = train.build_element({"type": "specular_reflection", "cos_theta_i": 0.6, "eta": {"re": 0.2, "im": 3.6}})
        assert np.allclose(M, specular_reflection(0.6, 0.2 + 3.6j))

    def test_real_eta_lanes(self):
        M = train.build_element({"type": "specular_transmission", "cos_theta_i": 1.0, "eta": {"re": [1.33, 1.5]}})
        assert M.shape == (2, 4, 4)
        assert np.isclose(M[1, 0, 0], 0.96)

    def test_real_eta_with_zero_imaginary_part(self):
        M = train.build_element({"type": "specular_transmission", "cos_theta_i": 1.0, "eta": {"re": 1.5, "im": 0.0}})
        assert np.isclose(M[0, 0], 0.96)

    def test_lane_parameters(self):
        M = train.build_element({"type": "rotator", "theta": [0, 45, 90]}, degrees=True)
        assert M.shape == (3, 4, 4)

    @pytest.mark.parametrize("element", ["linear_polarizer", 1.5, ["linear_polarizer"], None])
    def test_element_not_an_object(self, element):
        with pytest.raises(ValueError, match="Element must be an object"):
            train.build_element(element)

    def test_run_train_rejects_string_element(self):
        with pytest.raises(ValueError, match="Element must be an object"):
            train.run_train({"elements": ["type"]})

    def test_missing_type(self):
        with pytest.raises(ValueError, match="missing 'type'"):
            train.build_element({"value": 1.0})

    def test_unknown_type(self):
        with pytest.raises(ValueError, match="Unsupported element type"):
            train.build_element({"type": "beam_splitter"})

    def test_missing_required_parameter(self):
        with pytest.raises(ValueError, match="requires parameter 'phase'"):
            train.build_element({"type": "linear_retarder"})

    def test_bad_complex_eta(self):
        with pytest.raises(ValueError, match="'re'"):
            train.build_element({"type": "specular_reflection", "cos_theta_i": 1.0, "eta": {"im": 1.0}})


class TestCompose:
    """Tests for compose."""

    def test_order(self):
        first = linear_polarizer()
        second = linear_retarder(np.pi / 2)
        assert np.allclose(train.compose([first, second]), second @ first)

    def test_empty(self):
        assert np.allclose(train.compose([]), np.eye(4))

    def test_broadcast(self):
        stack = linear_retarder(np.array([0.0, np.pi]))
        out = train.compose([linear_polarizer(), stack])
        assert out.shape == (2, 4, 4)


class TestRunTrain:
    """Tests for run_train and load_params."""

    def test_circular_polariser(self, circular_params):
        result = train.run_train(circular_params)

        S = result["stokes"]
        assert np.isclose(S[0], 0.5)
        assert np.allclose(S[1:3], 0.0, atol=1e-12)
        assert np.isclose(abs(S[3]), 0.5)
        assert np.isclose(result["dop"], 1.0)

    def test_incoming_stokes(self):
        params = {
            "degrees": True,
            "stokes": [1.0, 1.0, 0.0, 0.0],
            "elements": [{"type": "linear_polarizer", "angle": [0, 60, 90]}],
        }
        result = train.run_train(params)

        assert result["mueller"].shape == (3, 4, 4)
        assert np.allclose(result["stokes"][:, 0], [1.0, 0.25, 0.0])

    def test_saves_output(self, circular_params, tmp_path):
        out = tmp_path / "train.npy"
        circular_params["output_filename"] = str(out)

        result = train.run_train(circular_params)

        assert out.exists()
        assert np.allclose(np.load(out), result["mueller"])

    def test_rejects_bad_output_extension(self, circular_params, tmp_path):
        circular_params["output_filename"] = str(tmp_path / "train.txt")
        with pytest.raises(ValueError, match="Unsupported output extension"):
            train.run_train(circular_params)

    def test_missing_elements(self):
        with pytest.raises(ValueError, match="Missing 'elements'"):
            train.run_train({})

    def test_bad_stokes(self, circular_params):
        circular_params["stokes"] = [1.0, 0.0, 0.0]
        with pytest.raises(ValueError, match="stokes must have length 4"):
            train.run_train(circular_params)

    def test_load_params_json5(self, tmp_path):
        param_file = tmp_path / "train.json5"
        param_file.write_text(
            """
            {
              // comments and trailing commas are allowed
              degrees: true,
              elements: [
                {type: "linear_polarizer", angle: 90},
              ],
            }
            """
        )

        params = train.load_params(str(param_file))
        result = train.run_train(params)

        assert params["degrees"] is True
        assert np.isclose(result["stokes"][0], 0.5)
        assert np.isclose(result["stokes"][1], -0.5)

    def test_load_params_missing_file(self, tmp_path):
        with pytest.raises(ValueError, match="Parameter file not found"):
            train.load_params(str(tmp_path / "missing.json5"))

    def test_load_params_not_an_object(self, tmp_path):
        param_file = tmp_path / "list.json5"
        param_file.write_text("[1, 2, 3]")
        with pytest.raises(ValueError, match="must contain an object"):
            train.load_params(str(param_file))
