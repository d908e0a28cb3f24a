"""Quote-aware CSV field splitting and escaping.

One quoting rule shared by the tabular parser and every reconciliation
export: a field containing a comma, quote, CR or LF is wrapped in double
quotes with internal quotes doubled. ``split_csv_line(escape(x))`` returns
``[x]`` for any single-line ``x``.
"""

from __future__ import annotations

_NEEDS_QUOTING = (",", '"', "\n", "\r")


def escape_csv_field(value: object) -> str:
    """Render one field, quoting only when required."""
    if value is None:
        return ""
    text = str(value)
    if any(ch in text for ch in _NEEDS_QUOTING):
        return '"' + text.replace('"', '""') + '"'
    return text


def join_csv_row(values: list[object]) -> str:
    return ",".join(escape_csv_field(v) for v in values)


def split_csv_line(line: str) -> list[str]:
    """Split one CSV record into fields.

    Unquoted fields are whitespace-trimmed; quoted fields keep their content
    verbatim, with ``""`` collapsed to ``"``.
    """
    fields: list[str] = []
    buf: list[str] = []
    quoted = False
    in_quotes = False
    i = 0
    n = len(line)

    while i < n:
        ch = line[i]
        if in_quotes:
            if ch == '"':
                if i + 1 < n and line[i + 1] == '"':
                    buf.append('"')
                    i += 1
                else:
                    in_quotes = False
            else:
                buf.append(ch)
        elif ch == '"':
            if not quoted and not "".join(buf).strip():
                buf.clear()
                quoted = True
                in_quotes = True
            else:
                # stray quote inside an unquoted value
                buf.append(ch)
        elif ch == ",":
            fields.append(_finish(buf, quoted))
            buf = []
            quoted = False
        elif quoted and ch.isspace():
            pass  # padding after a closing quote
        else:
            buf.append(ch)
        i += 1

    fields.append(_finish(buf, quoted))
    return fields


def _finish(buf: list[str], quoted: bool) -> str:
    value = "".join(buf)
    return value if quoted else value.strip()
