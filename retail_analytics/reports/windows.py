"""
Window Computations

Row numbering, ranking, bucketing and lag over partitions, built from an
explicit sort followed by per-partition index arithmetic. Every helper sorts
the frame itself, so callers get a deterministic row order back whatever the
input order was.
"""

from typing import List, Sequence, Union

import polars as pl

ColumnList = Union[str, Sequence[str]]


def _as_list(columns: ColumnList) -> List[str]:
    if isinstance(columns, str):
        return [columns]
    return list(columns)


def sort_within_partitions(
    df: pl.DataFrame,
    partition_by: ColumnList,
    order_by: ColumnList,
    descending: Union[bool, Sequence[bool]] = False,
) -> pl.DataFrame:
    """
    Sort by partition keys ascending, then by the ordering keys.

    Nulls go last on ascending keys and first on descending ones, as in a
    PostgreSQL window ORDER BY.
    """
    partition_by = _as_list(partition_by)
    order_by = _as_list(order_by)
    if isinstance(descending, bool):
        descending = [descending] * len(order_by)

    descending = [False] * len(partition_by) + list(descending)

    return df.sort(
        partition_by + order_by,
        descending=descending,
        nulls_last=[not d for d in descending],
        maintain_order=True,
    )


def with_row_number(
    df: pl.DataFrame,
    partition_by: ColumnList,
    order_by: ColumnList,
    descending: Union[bool, Sequence[bool]] = False,
    alias: str = "row_num",
) -> pl.DataFrame:
    """
    Number rows 1..n within each partition.

    Ties are broken by the remaining order_by keys; with no distinguishing
    key, equal rows keep their input order.
    """
    partition_by = _as_list(partition_by)
    df = sort_within_partitions(df, partition_by, order_by, descending)
    return df.with_columns(
        (pl.int_range(pl.len(), dtype=pl.UInt32).over(partition_by) + 1).alias(alias)
    )


def with_rank(
    df: pl.DataFrame,
    partition_by: ColumnList,
    value: str,
    descending: bool = True,
    tiebreak: ColumnList = (),
    alias: str = "rank",
) -> pl.DataFrame:
    """
    Standard competition rank (1, 2, 2, 4) of value within each partition.

    Rows with equal values share the lowest row number of their group; the
    tiebreak keys only fix the output row order.
    """
    partition_by = _as_list(partition_by)
    tiebreak = _as_list(tiebreak)
    df = with_row_number(
        df,
        partition_by,
        [value] + tiebreak,
        [descending] + [False] * len(tiebreak),
        alias="_row_num",
    )
    return df.with_columns(
        pl.col("_row_num").min().over(partition_by + [value]).alias(alias)
    ).drop("_row_num")


def with_ntile(
    df: pl.DataFrame,
    partition_by: ColumnList,
    order_by: ColumnList,
    buckets: int,
    descending: Union[bool, Sequence[bool]] = False,
    alias: str = "ntile",
) -> pl.DataFrame:
    """
    Split each ordered partition into `buckets` groups numbered 1..buckets.

    Group sizes differ by at most one row; the first (n % buckets) groups
    take the extra rows. Partitions smaller than `buckets` fill groups
    1..n with one row each.
    """
    if buckets < 1:
        raise ValueError(f"Bucket count must be positive, got {buckets}")

    partition_by = _as_list(partition_by)
    df = with_row_number(df, partition_by, order_by, descending, alias="_row_num")

    size = pl.len().over(partition_by).cast(pl.Int64)
    base = size // buckets
    remainder = size % buckets
    index = pl.col("_row_num").cast(pl.Int64) - 1
    # Rows held by the larger leading buckets
    head_rows = remainder * (base + 1)

    bucket = (
        pl.when(index < head_rows)
        .then(index // (base + 1))
        .otherwise(remainder + (index - head_rows) // pl.max_horizontal(base, pl.lit(1)))
        + 1
    )

    return df.with_columns(bucket.cast(pl.UInt32).alias(alias)).drop("_row_num")


def with_lag(
    df: pl.DataFrame,
    column: str,
    partition_by: ColumnList,
    order_by: ColumnList,
    alias: str,
    offset: int = 1,
) -> pl.DataFrame:
    """Previous row's value of column within each ordered partition, null on the first row"""
    partition_by = _as_list(partition_by)
    df = sort_within_partitions(df, partition_by, order_by)
    return df.with_columns(pl.col(column).shift(offset).over(partition_by).alias(alias))


def safe_ratio(numerator: pl.Expr, denominator: pl.Expr) -> pl.Expr:
    """numerator / denominator, null when the denominator is null or zero"""
    return (
        pl.when(denominator.is_not_null() & (denominator != 0))
        .then(numerator / denominator)
        .otherwise(None)
    )
