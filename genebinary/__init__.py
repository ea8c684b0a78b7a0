"""Binary alteration matrices from mutation, fusion and copy number data."""

from .aliases import recode_alias
from .binary import (
    bind_gene_binaries,
    cna_gene_binary,
    create_gene_binary,
    fusions_gene_binary,
    mutations_gene_binary,
)
from .config import Configuration, Merger, load_file
from .errors import (
    BlankMutationStatusWarning,
    InvalidInputKind,
    MissingIdentifierError,
    NoInputProvidedError,
    NonNumericColumnError,
    OutOfRangeError,
    UnknownColumnError,
    UnknownGroupingVariableError,
    UnknownPanelError,
)
from .frequency import alteration_frequencies, subset_by_frequency
from .panels import Panel, PanelSet, annotate_any_panel, specify_impact_panels
from .reference import Reference

__all__ = [
    "BlankMutationStatusWarning",
    "Configuration",
    "InvalidInputKind",
    "Merger",
    "MissingIdentifierError",
    "NoInputProvidedError",
    "NonNumericColumnError",
    "OutOfRangeError",
    "Panel",
    "PanelSet",
    "Reference",
    "UnknownColumnError",
    "UnknownGroupingVariableError",
    "UnknownPanelError",
    "alteration_frequencies",
    "annotate_any_panel",
    "bind_gene_binaries",
    "cna_gene_binary",
    "create_gene_binary",
    "fusions_gene_binary",
    "load_file",
    "mutations_gene_binary",
    "recode_alias",
    "specify_impact_panels",
    "subset_by_frequency",
]
