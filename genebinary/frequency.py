import numpy as np
import pandas as pd
from pandas.api.types import is_numeric_dtype
from statsmodels.stats.proportion import proportion_confint as ci

from genebinary.errors import (
    InvalidInputKind,
    MissingIdentifierError,
    NonNumericColumnError,
    OutOfRangeError,
    UnknownColumnError,
    UnknownGroupingVariableError,
)

SAMPLE_ID = "sample_id"


def _column_name(column):
    return column.name if isinstance(column, pd.Series) else column


def _column_names(other_vars) -> list:
    """Get column names from names, Series, or a list of both."""
    if other_vars is None:
        return []
    if isinstance(other_vars, (str, pd.Series)):
        other_vars = [other_vars]
    return [_column_name(x) for x in other_vars]


def _feature_columns(gene_binary: pd.DataFrame, other_vars=None, by=None):
    """Check a gene binary matrix and get the columns to be scored.

    Args:
        gene_binary: binary matrix with a `sample_id` column.
        other_vars: columns to be kept without scoring.
        by: optional grouping column.

    Returns:
        a tuple of the list of feature columns and the grouping column name.
    """
    if not isinstance(gene_binary, pd.DataFrame):
        raise InvalidInputKind("gene_binary must be a DataFrame")
    if SAMPLE_ID not in gene_binary.columns:
        raise MissingIdentifierError(
            "gene_binary must have a `sample_id` column. If sample ids are the "
            "row index, use gene_binary.reset_index()."
        )
    other_vars = _column_names(other_vars)
    missing = [x for x in other_vars if x not in gene_binary.columns]
    if missing:
        raise UnknownColumnError(missing)
    by = _column_name(by)
    if by is not None and by not in gene_binary.columns:
        raise UnknownGroupingVariableError(by, list(gene_binary.columns))

    kept = {SAMPLE_ID, by, *other_vars}
    features = [c for c in gene_binary.columns if c not in kept]
    non_numeric = [c for c in features if not is_numeric_dtype(gene_binary[c])]
    if non_numeric:
        raise NonNumericColumnError(non_numeric)
    return features, by


def _count(values: pd.DataFrame) -> pd.DataFrame:
    """Count altered (== 1) and tested (non-missing) cells per column."""
    mutated = values.eq(1).fillna(False).astype(bool)
    counts = pd.DataFrame(
        {"MUT": mutated.sum(), "N": values.notna().sum()},
        index=values.columns,
    )
    counts.index.name = "feature"
    return counts


def _count_alterations(gene_binary: pd.DataFrame, features: list, by=None):
    """Count altered and tested samples for each feature.

    Args:
        gene_binary: binary matrix.
        features: columns to count.
        by: optional grouping column. Missing values form their own group.

    Returns:
        table with `MUT` and `N` columns, indexed by feature or by group and
            feature.
    """
    if by is None:
        return _count(gene_binary[features])
    counts = {
        level: _count(df[features])
        for level, df in gene_binary.groupby(by, dropna=False, sort=True)
    }
    if not counts:
        index = pd.MultiIndex.from_arrays([[], []], names=[by, "feature"])
        return pd.DataFrame({"MUT": [], "N": []}, index=index, dtype="int64")
    return pd.concat(counts, names=[by, "feature"])


def subset_by_frequency(
    gene_binary: pd.DataFrame,
    threshold: float = 0.1,
    other_vars=None,
    by=None,
) -> pd.DataFrame:
    """Keep alteration columns with a frequency of at least `threshold`.

    The frequency of a column is the number of 1's divided by the number of
    non-missing values, so samples not tested for a gene do not count.
    Columns without any non-missing value are always removed, also for a
    threshold of 0. If `by` is given, frequencies are calculated within each
    group and a column is kept if it reaches the threshold in at least one
    group.

    The `sample_id` column, the `other_vars` columns and the `by` column are
    always kept. The column order is not changed.

    Args:
        gene_binary: binary matrix with a `sample_id` column and numeric
            alteration columns.
        threshold: minimum alteration frequency between 0 and 1.
        other_vars: names (or Series) of non-alteration columns to keep.
        by: name (or Series) of a column defining groups.

    Returns:
        the matrix with the selected columns.

    Examples:
        >>> subset_by_frequency(gene_binary, threshold=0.05)
        >>> subset_by_frequency(
        ...     df, threshold=0.2, other_vars=["sex", "stage"], by="grade"
        ... )
    """
    if not 0 <= threshold <= 1:
        raise OutOfRangeError(f"threshold must be between 0 and 1 (got {threshold})")
    features, by = _feature_columns(gene_binary, other_vars, by)
    counts = _count_alterations(gene_binary, features, by)
    counts = counts[counts["N"] > 0]
    passed = (counts["MUT"] / counts["N"] >= threshold).to_numpy()
    retained = set(counts.index.get_level_values("feature")[passed])
    columns = [c for c in gene_binary.columns if c not in features or c in retained]
    return gene_binary.loc[:, columns]


def _format_confidence_interval(row: pd.Series, precision: int = 1) -> str:
    """Summarize frequency and confidence interval in a single string.

    Creates a string of the format `freq% (ci_low% ... ci_high%)` from
    the three values (frequency and confidence interval limits).

    Args:
        row: dataframe row with frequency and confidence interval limits.
        precision: number of decimal digits.

    Returns:
        string aggregating frequency and confidence interval limits.
    """
    width = 3 + precision  # two leading digits, the dot, precision digits
    f = f"{{:>{width}.{precision}f}}"
    s = (
        f"{f.format(row['AF_PERC'])}% ({f.format(row['AF_PERC_CI_LOWER'])}%"
        + f" ... {f.format(row['AF_PERC_CI_UPPER'])}%)"
    )
    return s


def _add_frequencies_to_counts(counts: pd.DataFrame, precision: int = 1):
    """Add total number of tested samples and alteration frequencies.

    This function expects a dataframe with the two columns "MUT" and "WT"
    which contain the number of samples that are altered or not. The
    function adds these columns:

    * "N" - the total number of samples tested.
    * "AF_PERC" - alteration frequency (percentage)
    * "AF_PERC_CI_LOWER" - lower limit of Clopper-Pearson confidence
      interval
    * "AF_PERC_CI_UPPER" - upper limit of Clopper-Pearson confidence
      interval
    * "AF_FORMATTED" - frequency formatted as "XX% (LO% ... HI%)"

    Features without tested samples get NaN frequencies.

    Args:
        counts: dataframe with columns "MUT" and "WT".
        precision: the number of fractional digits to be used for the
            AF_FORMATTED column.
    """
    counts = counts[["MUT", "WT"]].copy()
    counts["N"] = counts["MUT"] + counts["WT"]
    tested = (counts["N"] > 0).to_numpy()
    counts["AF_PERC"] = np.nan
    counts["AF_PERC_CI_LOWER"] = np.nan
    counts["AF_PERC_CI_UPPER"] = np.nan
    if tested.any():
        mut = counts.loc[tested, "MUT"].to_numpy()
        n = counts.loc[tested, "N"].to_numpy()
        lower, upper = ci(mut, n, method="beta")
        counts.loc[tested, "AF_PERC"] = mut / n * 100.0
        counts.loc[tested, "AF_PERC_CI_LOWER"] = np.asarray(lower) * 100.0
        counts.loc[tested, "AF_PERC_CI_UPPER"] = np.asarray(upper) * 100.0
    if counts.empty:
        counts["AF_FORMATTED"] = pd.Series(dtype=object)
    else:
        counts["AF_FORMATTED"] = counts.apply(
            _format_confidence_interval, axis=1, precision=precision
        )
    return counts


def alteration_frequencies(
    gene_binary: pd.DataFrame, other_vars=None, by=None, precision: int = 1
) -> pd.DataFrame:
    """Get counts and frequencies of alterations for each column.

    Args:
        gene_binary: binary matrix with a `sample_id` column and numeric
            alteration columns.
        other_vars: names (or Series) of non-alteration columns to ignore.
        by: name (or Series) of a column defining groups. If given, counts
            are reported per group and for all samples (group "all").
        precision: number of decimal digits in `AF_FORMATTED`.

    Returns:
        table indexed by feature (or group and feature) with the columns
            MUT, WT, N, AF_PERC, AF_PERC_CI_LOWER, AF_PERC_CI_UPPER and
            AF_FORMATTED.
    """
    features, by = _feature_columns(gene_binary, other_vars, by)
    counts = _count_alterations(gene_binary, features, by)
    if by is not None:
        overall = pd.concat({"all": _count(gene_binary[features])}, names=[by])
        counts = pd.concat([counts, overall])
    counts["WT"] = counts["N"] - counts["MUT"]
    return _add_frequencies_to_counts(counts, precision=precision)
