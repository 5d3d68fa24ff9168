from __future__ import annotations

import matplotlib

# Charts are written to files only; never open a window.
matplotlib.use("Agg")
