"""
msleep dataset loader.
Reads the bundled mammal sleep table (83 species) into a DataFrame and
checks that the columns the model needs are present.
"""
from pathlib import Path
from typing import Iterable, Optional, Union

import pandas as pd

from sleep_engine.config import MSLEEP_CSV, REQUIRED_COLUMNS


def validate_columns(df: pd.DataFrame, required: Iterable[str] = REQUIRED_COLUMNS) -> None:
    """Raise ValueError listing every required column missing from df."""
    missing = [col for col in required if col not in df.columns]
    if missing:
        raise ValueError(
            f"Dataset is missing required column(s): {', '.join(missing)}. "
            f"Available: {', '.join(map(str, df.columns))}"
        )


def load_msleep(path: Optional[Union[str, Path]] = None) -> pd.DataFrame:
    """
    Load the mammal sleep dataset.

    Args:
        path: CSV to read instead of the bundled copy. Must carry at least
              name, sleep_total, brainwt and bodywt.

    Empty cells become NaN; nothing is dropped here.
    """
    csv_path = Path(path) if path is not None else MSLEEP_CSV
    if not csv_path.exists():
        raise FileNotFoundError(f"Sleep dataset not found: {csv_path}")

    df = pd.read_csv(csv_path)
    validate_columns(df)

    for col in ("sleep_total", "brainwt", "bodywt"):
        df[col] = pd.to_numeric(df[col], errors="raise")

    return df
