# loader.py
from __future__ import annotations

import runpy
from pathlib import Path

from .model import Pipeline


# ----------------------------------------------------------------------
# Pipeline loading (local file/module)
# ----------------------------------------------------------------------

def load_pipeline(path: str | Path) -> Pipeline:
    """
    Load a pipeline from a python file path.

    The file must define either:
      - pipeline_definition() -> Pipeline
      - PIPELINE = Pipeline(...)

    Returns:
      Pipeline
    """
    pl_path = Path(path).expanduser().resolve()
    if not pl_path.exists():
        raise FileNotFoundError(f"Pipeline file not found: {pl_path}")
    if pl_path.suffix != ".py":
        raise ValueError(f"Pipeline must be a .py file, got: {pl_path.name}")

    module_name = f"kitepipe_pipeline_{pl_path.stem}"
    globals_dict = runpy.run_path(str(pl_path), run_name=module_name)

    result = None
    if "pipeline_definition" in globals_dict and callable(globals_dict["pipeline_definition"]):
        result = globals_dict["pipeline_definition"]()
    elif "PIPELINE" in globals_dict:
        result = globals_dict["PIPELINE"]

    if not isinstance(result, Pipeline):
        raise TypeError(
            "Pipeline file must return/define a Pipeline. "
            "Define pipeline_definition() -> Pipeline or PIPELINE = pipeline(...)."
        )

    return result
