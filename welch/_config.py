__all__ = ["DEFAULT_N_SEGMENT", "DEFAULT_OVERLAP", "DEFAULT_WINDOW"]

import os
import multiprocessing

# Ensure OpenBLAS/MKL do not oversubscribe CPU cores when segments are
# transformed in a worker pool
for _var in ("OPENBLAS_NUM_THREADS", "MKL_NUM_THREADS", "OMP_NUM_THREADS"):
    if _var not in os.environ:
        os.environ[_var] = "1"

# Set multiprocessing start method to "spawn" (if not already set)
if multiprocessing.get_start_method(allow_none=True) is None:
    multiprocessing.set_start_method("spawn", force=True)

# Estimator defaults
DEFAULT_N_SEGMENT = 4
DEFAULT_OVERLAP = 0.5
DEFAULT_WINDOW = "one"
