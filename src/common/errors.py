from __future__ import annotations


class DataUnavailable(RuntimeError):
    """
    Upstream data is missing: the World Bank API could not be reached,
    returned an error payload or no rows, or a referenced column is absent.

    Fatal for the run.
    """


class InsufficientData(UserWarning):
    """
    A single cell could not be computed (a mean over zero non-null values,
    or a correlation with fewer than two paired observations).

    Emitted via `warnings.warn`; the cell is reported as NaN and the rest of
    the computation continues.
    """


__all__ = ["DataUnavailable", "InsufficientData"]
