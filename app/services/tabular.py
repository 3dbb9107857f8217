"""
Response-to-table mapping.

Converts Airbyte listing results into flat pandas DataFrames with a stable
leading column order, so exports and API tables look the same whether a
listing returned zero rows or a thousand.
"""
from __future__ import annotations

import json
from typing import Any, Dict, Iterable, List, Mapping, Sequence, Union

import numpy as np
import pandas as pd

from ..models.airbyte import AirbyteResource, Connection, Destination, Job, Source, Workspace

Record = Union[Mapping[str, Any], AirbyteResource]

WORKSPACE_COLUMNS = ["workspaceId", "name"]
SOURCE_COLUMNS = ["sourceId", "name", "sourceType", "workspaceId"]
DESTINATION_COLUMNS = ["destinationId", "name", "destinationType", "workspaceId"]
CONNECTION_COLUMNS = ["connectionId", "name", "sourceId", "destinationId", "workspaceId", "status"]
JOB_COLUMNS = ["jobId", "status", "jobType", "connectionId", "startTime", "duration", "bytesSynced", "rowsSynced"]


def _flatten(value: Any) -> Any:
    if isinstance(value, (dict, list)):
        return json.dumps(value, sort_keys=True, default=str)
    return value


def _as_row(record: Record) -> Dict[str, Any]:
    row = record.to_row() if isinstance(record, AirbyteResource) else dict(record)
    return {key: _flatten(value) for key, value in row.items()}


def records_to_frame(records: Iterable[Record], columns: Sequence[str]) -> pd.DataFrame:
    """Build a DataFrame whose leading columns are exactly `columns`.

    Required columns are always present (filled with None when a record lacks
    them); any additional keys follow in first-seen order.
    """
    rows = [_as_row(r) for r in records]

    ordered: List[str] = list(columns)
    for row in rows:
        for key in row:
            if key not in ordered:
                ordered.append(key)

    if not rows:
        return pd.DataFrame(columns=ordered)
    return pd.DataFrame.from_records(rows).reindex(columns=ordered)


def workspaces_to_frame(workspaces: Iterable[Union[Workspace, Mapping[str, Any]]]) -> pd.DataFrame:
    return records_to_frame(workspaces, WORKSPACE_COLUMNS)


def sources_to_frame(sources: Iterable[Union[Source, Mapping[str, Any]]]) -> pd.DataFrame:
    return records_to_frame(sources, SOURCE_COLUMNS)


def destinations_to_frame(destinations: Iterable[Union[Destination, Mapping[str, Any]]]) -> pd.DataFrame:
    return records_to_frame(destinations, DESTINATION_COLUMNS)


def connections_to_frame(connections: Iterable[Union[Connection, Mapping[str, Any]]]) -> pd.DataFrame:
    return records_to_frame(connections, CONNECTION_COLUMNS)


def jobs_to_frame(jobs: Iterable[Union[Job, Mapping[str, Any]]]) -> pd.DataFrame:
    return records_to_frame(jobs, JOB_COLUMNS)


def _to_python(value: Any) -> Any:
    if pd.isna(value):
        return None
    return value.item() if isinstance(value, np.generic) else value


def frame_to_table(frame: pd.DataFrame) -> Dict[str, Any]:
    """Render a DataFrame as JSON-safe columns + rows (missing values become None).

    Nullable dtypes keep integer columns integral when some rows lack a value.
    """
    clean = frame.convert_dtypes().astype(object)
    rows = [[_to_python(v) for v in row] for row in clean.itertuples(index=False, name=None)]
    return {"columns": [str(c) for c in clean.columns], "rows": rows}
