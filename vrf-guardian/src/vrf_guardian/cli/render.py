# Render presenters as a plain text table or JSON.
from __future__ import annotations

import json
from typing import List, Sequence

from ..services.presenter import HEADERS, Presenter


def render_table(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> str:
    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(cell))

    def line(cells: Sequence[str]) -> str:
        return "  ".join(cell.ljust(widths[i]) for i, cell in enumerate(cells)).rstrip()

    out: List[str] = [line(headers), line(["-" * w for w in widths])]
    out.extend(line(row) for row in rows)
    return "\n".join(out)


def render_presenters(presenters: Sequence[Presenter], *, as_json: bool = False) -> str:
    if as_json:
        return json.dumps([p.as_dict() for p in presenters], indent=2)
    return render_table(HEADERS, [p.to_row() for p in presenters])


__all__ = ["render_presenters", "render_table"]
