import argparse
import os

import numpy as np

import polartransport.plotting
import polartransport.train


def format_mueller(M, precision=4):
    """Format a single 4x4 Mueller matrix as aligned text rows."""
    M = np.asarray(M)
    rows = []
    for row in M:
        rows.append("  ".join(f"{value: .{precision}f}" for value in row))
    return "\n".join(rows)


def report_train(result):
    """Return a printable summary of an evaluated optical train."""
    M = result["mueller"]
    lines = []
    if M.ndim == 2:
        lines.append("Mueller matrix:")
        lines.append(format_mueller(M))
        lines.append("Outgoing Stokes vector: " + np.array2string(result["stokes"], precision=4))
        lines.append(f"Degree of polarisation: {float(result['dop']):.4f}")
    else:
        lines.append(f"Mueller matrix stack of shape {M.shape}")
        lines.append("Outgoing Stokes vectors:")
        lines.append(np.array2string(result["stokes"], precision=4))
        lines.append("Degree of polarisation: " + np.array2string(result["dop"], precision=4))
    return "\n".join(lines)


def run_train_file(json_filename, output_filename=None):
    """
    Evaluate the optical train described in a JSON5 parameter file.

    Args:
        json_filename (str): Path to the JSON5 parameter file.
        output_filename (str, optional): Path of a .npy file for the composed
            Mueller matrix. Overrides ``output_filename`` in the file.

    Returns:
        dict: Result of :func:`polartransport.train.run_train`.
    """
    params = polartransport.train.load_params(json_filename)
    if output_filename is not None:
        params["output_filename"] = output_filename
    return polartransport.train.run_train(params)


def cli_train():
    """Command line interface for evaluating optical trains."""
    parser = argparse.ArgumentParser(description="Compose the Mueller matrix of an optical train.")
    parser.add_argument(
        "json_filename",
        type=str,
        help="Path to the JSON5 parameter file, or a directory (with --all flag).",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Path to save the composed Mueller matrix as .npy (optional).",
    )
    parser.add_argument(
        "--all",
        action="store_true",
        help="Recursively process all .json5 files in the input directory and subdirectories.",
    )
    args = parser.parse_args()

    if args.all:
        if not os.path.isdir(args.json_filename):
            raise ValueError(f"When using --all flag, json_filename must be a directory. Got: {args.json_filename}")

        from glob import glob

        param_files = sorted(glob(os.path.join(args.json_filename, "**", "*.json5"), recursive=True))

        if len(param_files) == 0:
            print(f"No .json5 files found in {args.json_filename}")
            return

        print(f"Found {len(param_files)} .json5 files to process")

        from tqdm import tqdm

        for param_file in tqdm(param_files, desc="Processing optical trains"):
            try:
                run_train_file(param_file)
            except Exception as e:
                print(f"Error processing {param_file}: {e}")
                continue
    else:
        result = run_train_file(args.json_filename, output_filename=args.output)
        print(report_train(result))
        if args.output is not None:
            print(f"Wrote Mueller matrix: {args.output}")


def cli_interface():
    """Command line interface for plotting interface Mueller matrices."""
    parser = argparse.ArgumentParser(
        description="Plot reflection and transmission Mueller matrices of a planar interface."
    )
    parser.add_argument(
        "--eta",
        type=float,
        required=True,
        help="Real part of the relative refractive index.",
    )
    parser.add_argument(
        "--kappa",
        type=float,
        default=0.0,
        help="Imaginary part (extinction coefficient) of the relative index (default: 0).",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=181,
        help="Number of incidence angles between 0 and 90 degrees (default: 181).",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="interface.png",
        help="Path of the output figure (default: interface.png).",
    )
    args = parser.parse_args()

    eta = args.eta if args.kappa == 0 else complex(args.eta, args.kappa)
    polartransport.plotting.plot_interface(eta, n_samples=args.samples, filename=args.output)
    print(f"Wrote interface plot: {args.output}")
