import numpy as np
import pandas as pd
import pytest

from genebinary import (
    MissingIdentifierError,
    NonNumericColumnError,
    OutOfRangeError,
    UnknownColumnError,
    UnknownGroupingVariableError,
    alteration_frequencies,
    subset_by_frequency,
)


def _binary(**columns) -> pd.DataFrame:
    df = pd.DataFrame(columns)
    df["sample_id"] = [str(i) for i in range(1, len(df) + 1)]
    return df


def _dropped(before: pd.DataFrame, after: pd.DataFrame) -> list:
    return [c for c in before.columns if c not in after.columns]


def _genes() -> pd.DataFrame:
    return _binary(
        gene10=[0] * 9 + [1],
        gen50=[0] * 5 + [1] * 5,
        gene20=[0] * 8 + [1] * 2,
        gene0=[0] * 10,
    )


def _with_clinical(sex: list) -> pd.DataFrame:
    return _binary(
        gen50=[0] * 5 + [1] * 5,
        gene20=[0] * 8 + [1] * 2,
        gene0=[0] * 10,
        sex=sex,
        stage=["I", "II"] * 5,
    )


def test_default_threshold_drops_unaltered_gene() -> None:
    bm = _genes()

    assert _dropped(bm, subset_by_frequency(bm)) == ["gene0"]


def test_thresholds_select_genes_by_frequency() -> None:
    bm = _genes()

    assert _dropped(bm, subset_by_frequency(bm, threshold=0.1)) == ["gene0"]
    assert _dropped(bm, subset_by_frequency(bm, threshold=0.2)) == [
        "gene10",
        "gene0",
    ]
    assert _dropped(bm, subset_by_frequency(bm, threshold=0.5)) == [
        "gene10",
        "gene20",
        "gene0",
    ]
    assert list(subset_by_frequency(bm, threshold=1).columns) == ["sample_id"]
    assert sorted(subset_by_frequency(bm, threshold=0).columns) == sorted(bm.columns)


def test_column_order_is_preserved() -> None:
    bm = _genes()[["sample_id", "gene20", "gen50", "gene10"]]

    sub = subset_by_frequency(bm, threshold=0.2)

    assert list(sub.columns) == ["sample_id", "gene20", "gen50"]


@pytest.mark.parametrize("threshold", [-1, 2, -0.01, 1.01])
def test_threshold_out_of_bounds(threshold: float) -> None:
    with pytest.raises(OutOfRangeError):
        subset_by_frequency(_genes(), threshold=threshold)


def test_missing_sample_id() -> None:
    bm = _genes().drop(columns="sample_id")

    with pytest.raises(MissingIdentifierError):
        subset_by_frequency(bm, threshold=0.5)


def test_non_numeric_columns_are_named() -> None:
    bm = _genes()
    bm["gene10"] = bm["gene10"].astype(str)

    with pytest.raises(NonNumericColumnError, match="gene10$") as excinfo:
        subset_by_frequency(bm, threshold=0.5)
    assert excinfo.value.columns == ["gene10"]


def test_errors_name_non_string_columns() -> None:
    bm = pd.DataFrame({"sample_id": ["1", "2"], 0: ["1", "0"], 1: [0, 0]})

    with pytest.raises(NonNumericColumnError, match="0$") as excinfo:
        subset_by_frequency(bm)
    assert excinfo.value.columns == [0]
    with pytest.raises(UnknownGroupingVariableError, match="sample_id, 0, 1"):
        subset_by_frequency(bm, by="grade")
    with pytest.raises(UnknownColumnError, match="2"):
        subset_by_frequency(bm, other_vars=[0, 2])


def test_frequency_ignores_missing_values() -> None:
    bm = _binary(
        genenow50=[0, 0, 0, 0, 0, 0, 0, 1, 1, 1],
        gen50=[0] * 5 + [1] * 5,
        gene20=[0] * 8 + [1] * 2,
        gene0=[0] * 10,
    )
    bm_na = bm.copy()
    bm_na["genenow50"] = [np.nan] * 4 + [0, 0, 0, 1, 1, 1]

    no_na = subset_by_frequency(bm, threshold=0.5)
    na = subset_by_frequency(bm_na, threshold=0.5)

    assert [c for c in na.columns if c not in no_na.columns] == ["genenow50"]


def test_all_missing_column_is_dropped_at_zero_threshold() -> None:
    bm = _binary(
        allna=[np.nan] * 10,
        gen50=[0] * 5 + [1] * 5,
        gene20=[0] * 8 + [1] * 2,
        gene0=[0] * 10,
    )

    sub = subset_by_frequency(bm, threshold=0)

    assert _dropped(bm, sub) == ["allna"]


def test_nullable_integer_matrix() -> None:
    bm = _genes().astype({"gene10": "Int64"})
    bm.loc[0:4, "gene10"] = pd.NA

    sub = subset_by_frequency(bm, threshold=0.2)

    assert "gene10" in sub.columns


def test_other_vars_are_retained() -> None:
    bm = _with_clinical(["F", "M"] * 5)

    sub = subset_by_frequency(bm.drop(columns=["sex", "stage"]), threshold=0)
    sub2 = subset_by_frequency(bm, threshold=0, other_vars=["sex", "stage"])

    assert [c for c in sub2.columns if c not in sub.columns] == ["sex", "stage"]


def test_other_vars_are_retained_at_any_threshold() -> None:
    bm = _with_clinical(["F", "M"] * 5)
    bm["age"] = range(10)

    sub = subset_by_frequency(bm, threshold=1, other_vars=["sex", "stage", "age"])

    assert list(sub.columns) == ["sex", "stage", "sample_id", "age"]


def test_other_vars_as_names_or_series() -> None:
    bm = _with_clinical(["F", "M"] * 5)

    sub = subset_by_frequency(bm, threshold=0.1, other_vars=[bm["sex"], bm["stage"]])
    sub2 = subset_by_frequency(bm, threshold=0.1, other_vars=["sex", "stage"])

    assert list(sub2.columns) == list(sub.columns)


def test_single_other_var_as_string() -> None:
    bm = _with_clinical(["F", "M"] * 5).drop(columns="stage")

    sub = subset_by_frequency(bm, threshold=0.1, other_vars="sex")

    assert "sex" in sub.columns


def test_unknown_other_var() -> None:
    bm = _with_clinical(["F", "M"] * 5)

    with pytest.raises(UnknownColumnError, match="grade"):
        subset_by_frequency(bm, other_vars=["sex", "stage", "grade"])


def test_unknown_by_variable() -> None:
    bm = _with_clinical(["F", "M"] * 5)

    with pytest.raises(UnknownGroupingVariableError, match="Select from") as excinfo:
        subset_by_frequency(bm, threshold=0.1, other_vars=["sex", "stage"], by="grade")
    assert "gen50" in excinfo.value.available


def test_by_variable() -> None:
    bm = _with_clinical(["F", "M"] * 5)

    sub = subset_by_frequency(bm, threshold=0.1, other_vars="stage", by="sex")

    assert _dropped(bm, sub) == ["gene0"]

    bm1 = _with_clinical(["F"] * 4 + ["M"] * 4 + ["F", "M"])

    sub1 = subset_by_frequency(bm1, threshold=0.25, other_vars="stage", by="sex")
    sub2 = subset_by_frequency(bm1, threshold=0.85, other_vars="stage", by="sex")

    assert _dropped(bm1, sub1) == ["gene20", "gene0"]
    assert _dropped(bm1, sub2) == ["gen50", "gene20", "gene0"]


def test_by_variable_as_series() -> None:
    bm = _with_clinical(["F"] * 4 + ["M"] * 4 + ["F", "M"])

    sub = subset_by_frequency(bm, threshold=0.25, other_vars="stage", by=bm["sex"])

    assert _dropped(bm, sub) == ["gene20", "gene0"]


def test_categorical_by_variable() -> None:
    bm = _binary(
        gen50=[0] * 5 + [1] * 5,
        gene20=[0] * 8 + [1] * 2,
        gene10=[0] * 9 + [1],
        gene0=[0] * 10,
        sex=["F"] * 4 + ["M"] * 4 + ["F", "M"],
        stage=["I", "II"] * 5,
        grade=[1, 2, 3, 4, 1, 2, 3, 4, 1, 2],
    )

    sub = subset_by_frequency(bm, other_vars=["sex", "stage"], by="grade")
    sub1 = subset_by_frequency(bm, threshold=0.35, other_vars=["sex", "stage"], by="grade")

    assert _dropped(bm, sub) == ["gene0"]
    assert _dropped(bm, sub1) == ["gene20", "gene10", "gene0"]


def test_grouped_selection_is_union_of_groups() -> None:
    bm = _with_clinical(["F"] * 4 + ["M"] * 4 + ["F", "M"]).drop(columns="stage")
    genes = ["gen50", "gene20", "gene0"]

    previous = None
    for threshold in [0, 0.1, 0.2, 0.25, 0.5, 0.8, 0.85, 1]:
        grouped = subset_by_frequency(bm, threshold=threshold, by="sex")
        union = set()
        for sex in ["F", "M"]:
            group = bm[bm.sex == sex].drop(columns="sex")
            union |= set(subset_by_frequency(group, threshold=threshold).columns)
        selected = {c for c in grouped.columns if c in genes}
        assert selected == union & set(genes)
        if previous is not None:
            assert selected <= previous
        previous = selected


def test_missing_group_values_form_a_group() -> None:
    bm = _binary(gene=[1, 0, 0, 0], sex=[None, "F", "F", "M"])

    sub = subset_by_frequency(bm, threshold=0.9, by="sex")

    assert "gene" in sub.columns


def test_alteration_frequencies() -> None:
    freqs = alteration_frequencies(_genes())

    assert list(freqs.index) == ["gene10", "gen50", "gene20", "gene0"]
    row = freqs.loc["gen50"]
    assert row["MUT"] == 5
    assert row["WT"] == 5
    assert row["N"] == 10
    assert row["AF_PERC"] == pytest.approx(50.0)
    assert row["AF_PERC_CI_LOWER"] < 50.0 < row["AF_PERC_CI_UPPER"]
    assert row["AF_FORMATTED"].startswith("50.0% (")


def test_alteration_frequencies_by_group() -> None:
    bm = _with_clinical(["F"] * 4 + ["M"] * 4 + ["F", "M"])

    freqs = alteration_frequencies(bm, other_vars="stage", by="sex")

    assert freqs.loc[("M", "gen50"), "MUT"] == 4
    assert freqs.loc[("M", "gen50"), "N"] == 5
    assert freqs.loc[("F", "gen50"), "AF_PERC"] == pytest.approx(20.0)
    assert freqs.loc[("all", "gen50"), "N"] == 10


def test_alteration_frequencies_excludes_missing_values() -> None:
    bm = _binary(gene=[np.nan] * 4 + [0, 0, 0, 1, 1, 1], allna=[np.nan] * 10)

    freqs = alteration_frequencies(bm)

    assert freqs.loc["gene", "N"] == 6
    assert freqs.loc["gene", "AF_PERC"] == pytest.approx(50.0)
    assert freqs.loc["allna", "N"] == 0
    assert np.isnan(freqs.loc["allna", "AF_PERC"])
