from functools import lru_cache
from types import MappingProxyType
from typing import Type

import pandas as pd

from genebinary.config import Configuration
from genebinary.panels import PanelSet


class Reference:
    """Static reference data used for building gene binary matrices.

    A reference bundles the gene alias table, the known gene panels and the
    sample naming convention used to infer MSK-IMPACT panels. It is read-only
    and passed explicitly to the functions that need it.
    """

    def __init__(
        self,
        aliases: pd.DataFrame = None,
        panels: PanelSet = None,
        impact_panels: dict = None,
    ):
        """Create a new Reference.

        Gene lists of the panels are recoded with the alias table so that they
        use the same canonical symbols as the columns of a gene binary matrix.

        Args:
            aliases: table with columns `alias` and `hugo_symbol`.
            panels: known gene panels.
            impact_panels: regular expressions matching sample ids as keys and
                panel ids as values.

        Attributes:
            aliases (Mapping): alias to canonical gene symbol.
            panels (PanelSet): known gene panels with canonical gene symbols.
            impact_panels (Mapping): sample id patterns to panel ids.
        """
        self.aliases = MappingProxyType(self._alias_mapping(aliases))
        self.panels = (panels or PanelSet()).recode(self.aliases)
        self.impact_panels = MappingProxyType(dict(impact_panels or {}))

    @staticmethod
    def _alias_mapping(aliases: pd.DataFrame) -> dict:
        """Convert an alias table to a dictionary.

        Self references and aliases that are canonical symbols themselves are
        removed so that recoding is idempotent. If an alias is listed more
        than once, the first entry wins.
        """
        if aliases is None or aliases.empty:
            return {}
        df = aliases[["alias", "hugo_symbol"]].dropna().astype(str)
        df = df[df.alias != df.hugo_symbol]
        df = df[~df.alias.isin(set(df.hugo_symbol))]
        df = df.drop_duplicates(subset="alias", keep="first")
        return dict(zip(df.alias, df.hugo_symbol))

    @classmethod
    def load(cls, config: Type["Configuration"]) -> "Reference":
        """Load reference data as specified by a configuration.

        Args:
            config: the reference data configuration.

        Returns:
            the reference data.
        """
        return cls(
            aliases=config.load_aliases(),
            panels=PanelSet.from_config(config),
            impact_panels=config.get_impact_panels(),
        )

    @classmethod
    def default(cls) -> "Reference":
        """Get the packaged default reference (loaded once per process).

        The default reference includes the packaged alias table and the
        MSK-IMPACT naming convention, but no gene panels.
        """
        return _default_reference()


@lru_cache(maxsize=1)
def _default_reference() -> Reference:
    return Reference.load(Configuration())
