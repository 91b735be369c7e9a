"""
Table Previews
==============

Compact, column-per-line previews of DataFrames for console and log output.

"""

import pandas as pd


def _format_value(value) -> str:
    if isinstance(value, float):
        return f"{value:.3g}"
    return str(value)


def glimpse(df: pd.DataFrame, width: int = 80) -> str:
    """
    Transposed preview: one line per column with its dtype and leading values.

    Args:
        df: Table to preview
        width: Maximum line width

    Returns:
        Multi-line string, starting with the row and column counts
    """
    lines = [f"Rows: {len(df)}", f"Columns: {df.shape[1]}"]
    if df.shape[1] == 0:
        return '\n'.join(lines)

    name_width = max(len(str(c)) for c in df.columns)
    for column in df.columns:
        series = df[column]
        dtype = f"<{series.dtype}>"
        prefix = f"$ {str(column):<{name_width}} {dtype:<10} "
        values = ', '.join(_format_value(v) for v in series.head(20).tolist())
        line = prefix + values
        if len(line) > width:
            line = line[:width - 1] + '…'
        lines.append(line)
    return '\n'.join(lines)
