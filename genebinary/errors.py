"""Exceptions and warnings raised by genebinary."""


def _names(labels) -> str:
    return ", ".join(map(str, labels))


class NoInputProvidedError(ValueError):
    """None of the mutation, fusion or CNA tables was provided."""


class InvalidInputKind(TypeError):
    """An input is not of the expected kind, e.g. a list instead of a DataFrame."""


class UnknownPanelError(ValueError):
    """One or more panel identifiers are not part of the panel reference.

    Attributes:
        panel_ids (list): the unknown panel identifiers.
    """

    def __init__(self, panel_ids: list):
        self.panel_ids = list(panel_ids)
        super().__init__(
            f"Panels not known: {_names(self.panel_ids)}. Skip annotation "
            "with specify_panel='no' or use 'no' as panel_id for those samples."
        )


class OutOfRangeError(ValueError):
    """A frequency threshold is outside of [0, 1]."""


class MissingIdentifierError(ValueError):
    """A gene binary matrix has no sample identifier column."""


class NonNumericColumnError(ValueError):
    """Columns scored for alteration frequency are not numeric.

    Attributes:
        columns (list): names of the offending columns.
    """

    def __init__(self, columns: list):
        self.columns = list(columns)
        super().__init__(
            "All alteration columns must be numeric. Add non-numeric columns "
            f"to other_vars or remove them. Non-numeric: {_names(self.columns)}"
        )


class UnknownGroupingVariableError(ValueError):
    """The column requested for stratification does not exist."""

    def __init__(self, by: str, available: list):
        self.by = by
        self.available = list(available)
        super().__init__(
            f"Error in `by=` argument input. Select from: {_names(self.available)}"
            f" (got {by!r})"
        )


class UnknownColumnError(KeyError):
    """Columns requested to be kept are not in the matrix."""

    def __init__(self, columns: list):
        self.columns = list(columns)
        super().__init__(f"Columns not found: {_names(self.columns)}")

    def __str__(self) -> str:
        return self.args[0]


class BlankMutationStatusWarning(UserWarning):
    """Mutations without a status were kept when omitting germline calls."""
