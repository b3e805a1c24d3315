"""
Calendar period arithmetic shared by the reporting stages.

Month differences count calendar month boundaries, the way SQL
`DATEDIFF(month, start, end)` does: 2023-01-31 to 2023-02-01 is one month.
"""

from datetime import date
from typing import Optional, Union

import polars as pl

from sales_analytics.config import ReportingSettings

DateLike = Union[pl.Expr, date]


def _as_expr(value: DateLike) -> pl.Expr:
    if isinstance(value, pl.Expr):
        return value
    return pl.lit(value, dtype=pl.Date)


def months_between(start: DateLike, end: DateLike) -> pl.Expr:
    """Calendar months from `start` to `end` (null when either side is null)"""
    start, end = _as_expr(start), _as_expr(end)
    return (
        (end.dt.year().cast(pl.Int64) - start.dt.year().cast(pl.Int64)) * 12
        + end.dt.month().cast(pl.Int64)
        - start.dt.month().cast(pl.Int64)
    )


def years_between(start: DateLike, end: DateLike) -> pl.Expr:
    """Calendar years from `start` to `end`, like `DATEDIFF(year, start, end)`"""
    start, end = _as_expr(start), _as_expr(end)
    return end.dt.year().cast(pl.Int64) - start.dt.year().cast(pl.Int64)


def resolve_reference_date(
    reference_date: Optional[date] = None,
    config: Optional[ReportingSettings] = None,
) -> date:
    """The explicit date, else the configured one, else today"""
    if reference_date is not None:
        return reference_date
    if config is not None and config.reference_date is not None:
        return config.reference_date
    return date.today()
