import warnings

import numpy as np
import pandas as pd

from genebinary.aliases import recode_alias
from genebinary.errors import (
    BlankMutationStatusWarning,
    InvalidInputKind,
    NoInputProvidedError,
    UnknownPanelError,
)
from genebinary.panels import (
    NO_PANEL,
    annotate_any_panel,
    check_sample_panel_pair,
    sample_panel_table,
    specify_impact_panels,
)
from genebinary.reference import Reference

MUT_TYPES = ("omit_germline", "somatic_only", "germline_only", "all")

IMPACT = ("impact", "IMPACT")


def _check_table(table, name: str) -> None:
    if not isinstance(table, pd.DataFrame):
        raise InvalidInputKind(f"{name} must be a DataFrame")


def _check_mut_type(mut_type: str) -> str:
    if mut_type not in MUT_TYPES:
        raise ValueError(f"mut_type must be one of {', '.join(MUT_TYPES)}")
    return mut_type


def sample_index(samples) -> pd.Index:
    """Get the sample universe as an index of unique sample id strings.

    Args:
        samples: sample identifiers, possibly with duplicates.

    Returns:
        index named `sample_id`, in order of first appearance.

    Raises:
        InvalidInputKind: if `samples` is a single string.
    """
    if isinstance(samples, str):
        raise InvalidInputKind("samples must be a list of sample ids, not a string")
    ids = pd.Series(list(samples), dtype=object).astype(str)
    return pd.Index(pd.unique(ids), name="sample_id", dtype=object)


def _binary_matrix(events: pd.DataFrame, samples, suffix: str = "") -> pd.DataFrame:
    """Create a sample versus gene 0/1 matrix from an event table.

    There is one column for each gene in `events`, in order of first
    appearance, even if the gene is altered only in samples outside of
    `samples`. Events of samples outside of `samples` are ignored.

    Args:
        events: table with `sample_id` and `hugo_symbol` columns.
        samples: the sample universe.
        suffix: appended to the gene symbols to form column names.

    Returns:
        0/1 matrix with one row per sample.
    """
    index = sample_index(samples)
    events = events.dropna(subset=["hugo_symbol"])
    sample_ids = events["sample_id"].astype(str).to_numpy()
    genes = events["hugo_symbol"].astype(str).to_numpy()
    columns = pd.Index(pd.unique(genes), dtype=object)

    rows = index.get_indexer(sample_ids)
    in_universe = rows >= 0
    values = np.zeros((len(index), len(columns)), dtype="int64")
    values[rows[in_universe], columns.get_indexer(genes[in_universe])] = 1

    return pd.DataFrame(
        values, index=index, columns=[f"{g}{suffix}" for g in columns]
    )


def _filter_mutation_status(mutation: pd.DataFrame, mut_type: str) -> pd.DataFrame:
    """Filter mutations by their somatic or germline status.

    Only "SOMATIC" and "GERMLINE" (in any case) are recognized, everything
    else is an unknown status.
    """
    if mut_type == "all":
        return mutation
    status = mutation["mutation_status"].map(
        lambda x: x.strip().lower() if isinstance(x, str) else ""
    )
    if mut_type == "somatic_only":
        return mutation[status == "somatic"]
    if mut_type == "germline_only":
        return mutation[status == "germline"]
    blank_muts = int((status == "").sum())
    if blank_muts > 0:
        warnings.warn(
            f"{blank_muts} mutations marked as blank were retained in the "
            "resulting binary matrix.",
            BlankMutationStatusWarning,
            stacklevel=3,
        )
    return mutation[status != "germline"]


def mutations_gene_binary(
    mutation: pd.DataFrame,
    samples,
    mut_type: str = "omit_germline",
    snp_only: bool = False,
    include_silent: bool = False,
    recode_aliases: bool = True,
    reference: Reference = None,
) -> pd.DataFrame:
    """Make a binary matrix from a mutation table.

    Filters are applied in this order: SNPs only (if requested), removal of
    silent mutations (unless `include_silent`), mutation status.

    Args:
        mutation: mutations with columns `sample_id`, `hugo_symbol`,
            `variant_type`, `variant_classification`, `mutation_status`.
        samples: the sample universe.
        mut_type: one of "omit_germline" (drop germline, keep unknown
            status), "somatic_only", "germline_only", "all".
        snp_only: keep only single nucleotide variants.
        include_silent: keep silent mutations.
        recode_aliases: replace gene aliases with canonical symbols.
        reference: reference data with the alias table (default reference
            if None).

    Returns:
        0/1 matrix with sample ids as rows and gene symbols as columns.
    """
    _check_table(mutation, "mutation")
    mut_type = _check_mut_type(mut_type)
    if recode_aliases:
        mutation = recode_alias(mutation, reference)
    if snp_only:
        mutation = mutation[mutation["variant_type"] == "SNP"]
    if not include_silent:
        mutation = mutation[mutation["variant_classification"] != "Silent"]
    mutation = _filter_mutation_status(mutation, mut_type)
    return _binary_matrix(mutation, samples)


def fusions_gene_binary(
    fusion: pd.DataFrame,
    samples,
    recode_aliases: bool = True,
    reference: Reference = None,
) -> pd.DataFrame:
    """Make a binary matrix from a fusion table.

    Only one partner gene per fusion is modeled. If the table has no
    `hugo_symbol` column, `site_1_hugo_symbol` is used.

    Args:
        fusion: fusions with columns `sample_id` and `hugo_symbol`.
        samples: the sample universe.
        recode_aliases: replace gene aliases with canonical symbols.
        reference: reference data with the alias table.

    Returns:
        0/1 matrix with columns named "<gene>.fus"; no columns if there
            are no fusions in the sample universe.
    """
    _check_table(fusion, "fusion")
    if "hugo_symbol" not in fusion.columns and "site_1_hugo_symbol" in fusion.columns:
        fusion = fusion.rename(columns={"site_1_hugo_symbol": "hugo_symbol"})
    index = sample_index(samples)
    fusion = fusion[fusion["sample_id"].astype(str).isin(index)]
    if recode_aliases:
        fusion = recode_alias(fusion, reference)
    return _binary_matrix(fusion, index, suffix=".fus")


def cna_gene_binary(
    cna: pd.DataFrame,
    samples,
    recode_aliases: bool = True,
    reference: Reference = None,
) -> pd.DataFrame:
    """Make a binary matrix from a copy number alteration table.

    Amplifications and deletions are processed separately. Records with any
    other alteration (e.g. "neutral") are ignored.

    Args:
        cna: alterations with columns `sample_id`, `hugo_symbol` and
            `alteration` ("amplification", "deletion", "neutral", ...).
        samples: the sample universe.
        recode_aliases: replace gene aliases with canonical symbols.
        reference: reference data with the alias table.

    Returns:
        0/1 matrix with "<gene>.Amp" columns followed by "<gene>.Del"
            columns.
    """
    _check_table(cna, "cna")
    if recode_aliases:
        cna = recode_alias(cna, reference)
    alteration = cna["alteration"].astype(str).str.lower()
    amp = _binary_matrix(cna[alteration == "amplification"], samples, ".Amp")
    dels = _binary_matrix(cna[alteration == "deletion"], samples, ".Del")
    return pd.concat([amp, dels], axis=1)


def bind_gene_binaries(*matrices) -> pd.DataFrame:
    """Bind binary matrices of different alteration types by column.

    Matrices that are None are skipped. All other matrices must have the same
    samples in the same order.

    Args:
        matrices: gene binary matrices.

    Returns:
        the combined matrix, columns in the order of the arguments.
    """
    matrices = [m for m in matrices if m is not None]
    if not matrices:
        raise NoInputProvidedError("No binary matrices to bind")
    index = matrices[0].index
    for m in matrices[1:]:
        if not m.index.equals(index):
            raise ValueError("All binary matrices must have the same samples")
    result = pd.concat(matrices, axis=1)
    duplicated = result.columns[result.columns.duplicated()].unique()
    if len(duplicated) > 0:
        raise ValueError(f"Duplicated columns: {', '.join(map(str, duplicated))}")
    result.index.name = "sample_id"
    return result


def _sample_panel_pair(specify_panel, samples: pd.Index, reference: Reference):
    """Resolve `specify_panel` to a table of sample-panel pairs.

    Raises:
        UnknownPanelError: if a requested or inferred panel is not known.
    """
    if isinstance(specify_panel, pd.DataFrame):
        pairs = check_sample_panel_pair(specify_panel)
        reference.panels.check_panel_ids(pairs.unique())
        return pairs.rename_axis("sample_id").reset_index()
    if not isinstance(specify_panel, str):
        raise TypeError(
            "specify_panel must be a single panel id, 'impact', 'no' or a DataFrame"
        )
    if specify_panel in IMPACT:
        pairs = specify_impact_panels(samples, reference.impact_panels)
        reference.panels.check_panel_ids(pairs.panel_id.unique())
        return pairs
    if specify_panel != NO_PANEL and specify_panel not in reference.panels:
        raise UnknownPanelError([specify_panel])
    return sample_panel_table(samples, specify_panel)


def create_gene_binary(
    samples=None,
    mutation: pd.DataFrame = None,
    mut_type: str = "omit_germline",
    snp_only: bool = False,
    include_silent: bool = False,
    fusion: pd.DataFrame = None,
    cna: pd.DataFrame = None,
    specify_panel="no",
    rm_empty: bool = False,
    recode_aliases: bool = True,
    reference: Reference = None,
    verbose: bool = True,
) -> pd.DataFrame:
    """Create a sample versus alteration binary matrix.

    Mutation, fusion and copy number tables are each turned into a 0/1
    matrix and the matrices are combined. Column names are the gene symbol
    for mutations, "<gene>.fus" for fusions, and "<gene>.Amp" and
    "<gene>.Del" for amplifications and deletions. If a panel is specified,
    genes not tested for a sample are set to NA for that sample.

    Args:
        samples: samples to include, in this order. If None, all samples
            found in any of the tables are used. Samples without alterations
            get a row of 0's (or NA's for genes not tested).
        mutation: mutations in canonical MAF format.
        mut_type: one of "omit_germline", "somatic_only", "germline_only" or
            "all". "omit_germline" keeps somatic mutations and mutations with
            unknown status.
        snp_only: keep only SNPs (remove indels).
        include_silent: keep silent mutations.
        fusion: fusions, one modeled gene per row.
        cna: copy number alterations in long format with an `alteration`
            column.
        specify_panel: "no" for no NA annotation, "impact" to infer the
            MSK-IMPACT panel version from each sample id, a panel id used for
            all samples, or a DataFrame with `sample_id` and `panel_id`
            columns (use "no" as panel id to skip a sample).
        rm_empty: remove alteration columns without any event.
        recode_aliases: replace gene aliases with canonical symbols.
        reference: reference data (alias table and gene panels). If None,
            the packaged default reference is used.
        verbose: print informational messages.

    Returns:
        binary matrix with `sample_id` as row index and nullable integer
            columns.

    Examples:
        >>> gene_binary = create_gene_binary(mutation=mutations, cna=cna)
        >>> gene_binary = create_gene_binary(
        ...     samples=samples,
        ...     mutation=mutations,
        ...     mut_type="somatic_only",
        ...     specify_panel="impact",
        ...     reference=reference,
        ... )
    """
    inputs = {"mutation": mutation, "fusion": fusion, "cna": cna}
    if all(x is None for x in inputs.values()):
        raise NoInputProvidedError(
            "You must provide at least one of mutation, fusion or cna."
        )
    not_df = [
        name
        for name, x in inputs.items()
        if x is not None and not isinstance(x, pd.DataFrame)
    ]
    if not_df:
        raise InvalidInputKind(f"{', '.join(not_df)} must be a DataFrame")
    mut_type = _check_mut_type(mut_type)
    if reference is None:
        reference = Reference.default()

    if samples is None:
        if verbose:
            print(
                "samples argument is None. The result will include all samples "
                "with at least one alteration in mutation, fusion or cna.",
                flush=True,
            )
        samples = pd.concat(
            [x["sample_id"] for x in inputs.values() if x is not None],
            ignore_index=True,
        )
    samples = sample_index(samples)
    sample_panel_pair = _sample_panel_pair(specify_panel, samples, reference)

    mutation_binary = fusion_binary = cna_binary = None
    if mutation is not None:
        mutation_binary = mutations_gene_binary(
            mutation,
            samples,
            mut_type=mut_type,
            snp_only=snp_only,
            include_silent=include_silent,
            recode_aliases=recode_aliases,
            reference=reference,
        )
    if fusion is not None:
        fusion_binary = fusions_gene_binary(
            fusion, samples, recode_aliases=recode_aliases, reference=reference
        )
    if cna is not None:
        cna_binary = cna_gene_binary(
            cna, samples, recode_aliases=recode_aliases, reference=reference
        )
    gene_binary = bind_gene_binaries(mutation_binary, fusion_binary, cna_binary)

    gene_binary = annotate_any_panel(sample_panel_pair, gene_binary, reference.panels)

    if rm_empty:
        has_event = gene_binary.eq(1).any(axis=0)
        gene_binary = gene_binary.loc[:, has_event.to_numpy()]
    return gene_binary
