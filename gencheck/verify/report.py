"""Diagnostic printing for failed comparisons.

Arrays are printed as one labelled row of tab-separated fixed-width numbers,
wrapping every `columns` entries under the label column. Small and moderate
magnitudes use fixed notation, tiny and huge ones scientific notation, so a
column of near-zero differences stays readable next to values in the
thousands.
"""

import sys
from typing import Optional, TextIO, Tuple

import numpy as np

LABEL_WIDTH = 32
NAN_TEXT = " " * 6 + "nan"


def format_scalar(v: float) -> str:
    """Format one value for a diagnostic row."""
    if np.isnan(v):
        return NAN_TEXT
    if v == 0 or (1e-6 < abs(v) < 1e4):
        return "%+6.6f" % v
    return "%+2.3e" % v


def format_array(label: str, values: np.ndarray, columns: Optional[int] = None) -> str:
    """Render a labelled row, wrapping after every `columns` entries.

    Args:
        label: Row label, right-aligned in a 32-character column.
        values: Values to print; flattened in C order.
        columns: Entries per line. None prints everything on one line.

    Returns:
        The formatted text, newline-terminated.
    """
    values = np.asarray(values, dtype=np.float64).ravel()
    columns = columns or len(values) or 1

    text = "%*s: \t" % (LABEL_WIDTH, label)
    for i, v in enumerate(values):
        if i > 0 and i % columns == 0:
            text += "\n" + " " * LABEL_WIDTH + "  \t"
        text += format_scalar(v) + "\t"
    return text + "\n"


def print_array(label: str, values: np.ndarray, columns: Optional[int] = None,
                stream: Optional[TextIO] = None) -> None:
    stream = stream or sys.stdout
    stream.write(format_array(label, values, columns))


def rms_error(a: np.ndarray, b: np.ndarray) -> float:
    """Root-mean-square elementwise difference of two equally-shaped arrays.

    Raises:
        ValueError: If the shapes differ.
    """
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    if a.shape != b.shape:
        raise ValueError(f"Shape mismatch: {a.shape} vs {b.shape}")
    if a.size == 0:
        return 0.0
    return float(np.sqrt(np.mean((a - b) ** 2)))


def diff_array(a: np.ndarray, b: np.ndarray) -> Tuple[np.ndarray, float]:
    """Elementwise |a - b| and its RMS reduction.

    Raises:
        ValueError: If the shapes differ.
    """
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    err = rms_error(a, b)
    return np.abs(a - b), err


def print_diff_array(label: str, x: np.ndarray, reference: np.ndarray, generated: np.ndarray,
                     columns: Optional[int] = None, stream: Optional[TextIO] = None) -> float:
    """Full mismatch report: the offending input, both outputs and their difference.

    Returns:
        RMS difference between reference and generated.
    """
    stream = stream or sys.stdout
    diff, err = diff_array(reference, generated)

    print(f"Mismatch in {label} (rms error {err:.6e})", file=stream)
    print_array("inputs", x, stream=stream)
    print_array("gen outputs", generated, columns, stream)
    print_array("outputs", reference, columns, stream)
    print_array("|Differences|", diff, columns, stream)
    return err
