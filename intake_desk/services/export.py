"""
CSV export of stored records.

Format:
- Header row: the field names of the FIRST record, in its insertion order
  (``id`` when there are no records)
- One row per record over that same field list
- Every cell is the JSON encoding of the value (missing or None -> "")

JSON string quoting stands in for CSV quoting, so a comma inside a value is
protected by the surrounding double quotes and embedded quotes come out as
``\\"``. This is not RFC 4180 CSV; consumers must read cells as JSON.
"""

import json
from typing import Any, Sequence


def encode_cell(value: Any) -> str:
    """JSON-encode one cell, compact and without escaping non-ASCII text."""
    if value is None:
        value = ""
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def build_csv(records: Sequence[dict[str, Any]]) -> str:
    """Render records as the JSON-quoted CSV described above."""
    headers = list(records[0].keys()) if records else ["id"]
    lines = [",".join(headers)]
    for record in records:
        lines.append(",".join(encode_cell(record.get(h)) for h in headers))
    return "\n".join(lines)
