"""
Running an analysis over a list of image files, with checkpoints in a CSV file.

Images are processed in chunks of ``stride`` files. After each chunk all rows so far are written to the
output file, so an interrupted run can be resumed with ``restart``, which skips as many files as there are
rows in the existing output. Failures for single images are logged and end up as rows filled with NaN, with
the error message in an ``error`` column.
"""
import logging
import os
from concurrent.futures import ProcessPoolExecutor
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence

import pandas as pd

log = logging.getLogger(__name__)


def read_list(filename: str) -> List[str]:
    """Reads a file with one entry per line, ignoring empty lines."""
    with open(filename, "r") as f:
        return [line.strip() for line in f if line.strip() != ""]


def partition(start: int, stop: int, stride: int) -> Iterator[range]:
    """Splits range(start, stop) into consecutive chunks of at most stride elements."""
    if stride < 1:
        raise ValueError("Stride must be positive.")
    for i in range(start, stop, stride):
        yield range(i, min(i + stride, stop))


def _safe_call(func: Callable[[str], Dict[str, Any]], filename: str) -> Dict[str, Any]:
    try:
        return func(filename)
    except Exception as e:
        log.exception("Could not analyse %s.", filename)
        return {"error": str(e)}


def run_batch(
    func: Callable[[str], Dict[str, Any]],
    files: Sequence[str],
    output: str,
    columns: Sequence[str],
    extra: Optional[Dict[str, Sequence[Any]]] = None,
    stride: int = 4,
    restart: bool = False,
    workers: int = 1,
) -> pd.DataFrame:
    """Analyse a list of files and write one row per file into a CSV file.

    Args:
        func: Function analysing a single file and returning a record. Must be picklable for workers > 1.
        files: Files to analyse.
        output: Name of CSV file.
        columns: Columns of a record, missing values are filled with NaN.
        extra: Additional columns with one value per file, e.g. the file names.
        stride: Number of files between checkpoints.
        restart: Whether to continue after the rows in an existing output file.
        workers: Number of worker processes, 1 runs everything in this process.

    Returns:
        Table with all rows.
    """
    extra = {} if extra is None else extra
    for name, values in extra.items():
        if len(values) != len(files):
            raise ValueError(f"Length of {name} ({len(values)}) and files ({len(files)}) do not match.")
    all_columns = list(columns) + ["error"] + list(extra.keys())

    # existing results?
    if restart and os.path.exists(output):
        df = pd.read_csv(output)
        log.info("Restarting after %d existing rows in %s.", len(df), output)
    else:
        df = pd.DataFrame(columns=all_columns)

    executor = ProcessPoolExecutor(max_workers=workers) if workers > 1 else None
    try:
        for chunk in partition(len(df), len(files), stride):
            log.info("Analysing files %d to %d of %d...", chunk.start + 1, chunk.stop, len(files))
            chunk_files = [files[i] for i in chunk]
            if executor is None:
                records = [_safe_call(func, f) for f in chunk_files]
            else:
                records = list(executor.map(_safe_call, [func] * len(chunk_files), chunk_files))

            # build rows and checkpoint
            rows = pd.DataFrame.from_records(records).reindex(columns=all_columns)
            for name, values in extra.items():
                rows[name] = [values[i] for i in chunk]
            df = rows if len(df) == 0 else pd.concat([df, rows], ignore_index=True)
            df.to_csv(output, index=False)
    finally:
        if executor is not None:
            executor.shutdown()

    log.info("Finished, results are in %s.", output)
    return df


__all__ = ["read_list", "partition", "run_batch"]
