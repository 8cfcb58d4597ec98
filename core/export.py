from typing import Any, Mapping, Sequence

import pandas as pd


def _cell(value: Any) -> Any:
    # lower-case booleans, as a browser's String(true) would write them
    if isinstance(value, bool):
        return "true" if value else "false"
    return value


def to_csv(rows: Sequence[Mapping]) -> str:
    """Render flat records as CSV text.

    The header comes from the first record's keys. Fields containing a comma,
    quote or newline are quoted with inner quotes doubled; ``None`` and empty
    strings are written as empty fields. Rows are newline-joined with no
    trailing newline.
    """
    if not rows:
        return ""
    columns = list(rows[0].keys())
    df = pd.DataFrame([{k: _cell(v) for k, v in r.items()} for r in rows], columns=columns, dtype=object)
    text = df.to_csv(index=False, lineterminator="\n", na_rep="")
    lines = text[:-1].split("\n") if text.endswith("\n") else text.split("\n")
    if len(columns) == 1:
        # the csv writer quotes a lone empty field; a real value of '""' comes out as six quotes
        lines = ["" if line == '""' else line for line in lines]
    return "\n".join(lines)
