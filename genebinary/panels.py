import re
from typing import Type

import numpy as np
import pandas as pd
from natsort import natsorted

from genebinary.config import Configuration
from genebinary.errors import InvalidInputKind, UnknownPanelError

# Suffixes added to fusion and copy number columns of a gene binary matrix
FEATURE_SUFFIX_PATTERN = re.compile(r"\.(fus|Amp|Del)$")

NO_PANEL = "no"


class Panel:
    """This class represents a gene panel (assay)."""

    def __init__(self, panel_id: str, genes, description: str = ""):
        """Create a new Panel object.

        Args:
            panel_id: the panel identifier.
            genes: HGNC symbols of all genes on the panel.
            description: panel description.

        Attributes:
            id (str): panel identifier.
            description (str): panel description.
            genes (frozenset): genes on panel.
        """
        self.id = panel_id
        self.description = description
        self.genes = frozenset(genes)

    @classmethod
    def from_file(cls, file_name: str) -> "Panel":
        """Read a panel from a gene panel file of a GENIE release.

        The file has three lines: `stable_id: <id>`, `description: <text>` and
        `gene_list:` followed by tab separated gene symbols.

        Args:
            file_name: name of the gene panel file.

        Returns:
            the panel described by the file.
        """
        with open(file_name, "rt") as fh:
            id, description, genes = fh.readlines()[:3]
        panel_id = id.rstrip().replace("stable_id: ", "", 1)
        description = description.rstrip().replace("description: ", "", 1)
        genes = [x for x in genes.rstrip().split("\t")[1:] if x]
        return cls(panel_id, genes, description)

    def gene_is_on_panel(self, gene_symbol: str) -> bool:
        """Check if a gene is included in this panel.

        Args:
            gene_symbol: HGNC gene symbol.

        Returns:
            True if gene is on panel, else False.
        """
        return gene_symbol in self.genes

    def recode(self, aliases: dict) -> "Panel":
        """Get a copy of this panel with gene aliases replaced.

        Args:
            aliases: mapping of alias to canonical gene symbol.

        Returns:
            a new panel with canonical gene symbols.
        """
        return Panel(
            self.id, [aliases.get(g, g) for g in self.genes], self.description
        )

    def __str__(self) -> str:
        s = f"{type(self).__name__}: {self.description or self.id}"
        return s


class PanelSet:
    """Set of known gene panels."""

    def __init__(self, panels=None):
        """Create a new PanelSet.

        Args:
            panels: iterable of `Panel` objects.

        Attributes:
            panels (dict): all known panels, with the panel identifier as key
                and `Panel` as value.
        """
        self.panels = {p.id: p for p in (panels or [])}

    @classmethod
    def from_config(cls, config: Type["Configuration"]) -> "PanelSet":
        """Read all gene panel files found via the configuration.

        Args:
            config: the reference data configuration.

        Returns:
            all panels found in the configured gene panel directory.
        """
        file_names = config.get_gene_panel_file_names()
        return cls(Panel.from_file(f) for f in file_names.values())

    def panel_ids(self) -> list:
        """Get all panel identifiers in natural sort order."""
        return natsorted(self.panels.keys())

    def genes_for_panel(self, panel_id: str) -> frozenset:
        """Get the genes tested by a panel.

        Args:
            panel_id: the panel identifier.

        Returns:
            genes on the panel.

        Raises:
            UnknownPanelError: if the panel is not known.
        """
        self.check_panel_ids([panel_id])
        return self.panels[panel_id].genes

    def check_panel_ids(self, panel_ids) -> None:
        """Make sure that all panel ids are known.

        The special identifier "no" (no panel restriction) is always accepted.

        Args:
            panel_ids: panel identifiers to check.

        Raises:
            UnknownPanelError: naming all unknown panel ids.
        """
        unknown = {
            x for x in panel_ids if x != NO_PANEL and x not in self.panels
        }
        if unknown:
            raise UnknownPanelError(natsorted(unknown))

    def recode(self, aliases: dict) -> "PanelSet":
        """Get a copy of this panel set with gene aliases replaced."""
        return PanelSet(p.recode(aliases) for p in self.panels.values())

    def __contains__(self, panel_id) -> bool:
        return panel_id in self.panels

    def __len__(self) -> int:
        return len(self.panels)


def base_gene(column: str) -> str:
    """Strip the alteration type suffix from a gene binary column name.

    Args:
        column: column name such as "TP53", "ALK.fus", "EGFR.Amp".

    Returns:
        the gene symbol.
    """
    return FEATURE_SUFFIX_PATTERN.sub("", str(column))


def specify_impact_panels(sample_ids, impact_panels: dict) -> pd.DataFrame:
    """Infer the panel used for each sample from its identifier.

    MSK-IMPACT sample identifiers end in a panel version tag such as "-IM5".
    Each pattern of `impact_panels` is checked in order and the first match
    determines the panel. Samples not matching any pattern get "no".

    Args:
        sample_ids: sample identifiers.
        impact_panels: regular expressions as keys and panel ids as values.

    Returns:
        table with columns `sample_id` and `panel_id`.
    """
    ids = pd.Series(list(sample_ids), dtype="object").astype(str)
    if not impact_panels:
        return sample_panel_table(ids, NO_PANEL)
    conditions = [
        ids.str.contains(pattern, regex=True).to_numpy()
        for pattern in impact_panels
    ]
    panel_ids = np.select(
        conditions, list(impact_panels.values()), default=NO_PANEL
    )
    return pd.DataFrame({"sample_id": ids, "panel_id": panel_ids.astype(object)})


def sample_panel_table(sample_ids, panel_id: str) -> pd.DataFrame:
    """Assign the same panel id to all samples."""
    ids = [str(x) for x in sample_ids]
    return pd.DataFrame({"sample_id": ids, "panel_id": [panel_id] * len(ids)})


def check_sample_panel_pair(sample_panel_pair: pd.DataFrame) -> pd.Series:
    """Validate a sample-panel table and convert it to a Series.

    Args:
        sample_panel_pair: table with columns `sample_id` and `panel_id`.

    Returns:
        panel ids indexed by sample id.
    """
    if not isinstance(sample_panel_pair, pd.DataFrame):
        raise InvalidInputKind("sample_panel_pair must be a DataFrame")
    missing = [
        x for x in ["sample_id", "panel_id"] if x not in sample_panel_pair.columns
    ]
    if missing:
        raise ValueError(
            f"sample_panel_pair is missing columns: {', '.join(missing)}"
        )
    pairs = (
        sample_panel_pair[["sample_id", "panel_id"]]
        .astype({"sample_id": str})
        .fillna({"panel_id": NO_PANEL})
        .drop_duplicates()
    )
    duplicated = pairs.loc[pairs.sample_id.duplicated(), "sample_id"].unique()
    if len(duplicated) > 0:
        raise ValueError(
            f"Samples with more than one panel: {', '.join(duplicated)}"
        )
    return pairs.set_index("sample_id")["panel_id"]


def annotate_any_panel(
    sample_panel_pair: pd.DataFrame, gene_binary: pd.DataFrame, panels: PanelSet
) -> pd.DataFrame:
    """Mark genes not tested by a sample's panel as missing.

    For each sample, every column whose gene is not on the panel used for that
    sample is set to NA, whatever the observed value. Samples with panel id
    "no", or not listed in `sample_panel_pair`, are left unchanged.

    Args:
        sample_panel_pair: table with columns `sample_id` and `panel_id`.
        gene_binary: gene binary matrix with sample ids as row index.
        panels: the known gene panels.

    Returns:
        a copy of `gene_binary` with nullable integer columns and NAs for
            genes that were not tested.
    """
    pairs = check_sample_panel_pair(sample_panel_pair)
    panels.check_panel_ids(pairs.unique())
    pairs = pairs.reindex(gene_binary.index.astype(str)).fillna(NO_PANEL)

    result = gene_binary.astype("Int64")
    genes = pd.Series(
        [base_gene(c) for c in result.columns], index=result.columns, dtype=object
    )
    for panel_id in pd.unique(pairs):
        if panel_id == NO_PANEL:
            continue
        not_tested = genes.index[~genes.isin(panels.genes_for_panel(panel_id))]
        if len(not_tested) == 0:
            continue
        rows = (pairs == panel_id).to_numpy()
        result.loc[rows, not_tested] = pd.NA
    return result
