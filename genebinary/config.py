import json
import os
import re

import pandas as pd
from importlib_resources import as_file, files

import genebinary.data

DATA_FILE_EXTENSION = re.compile(r"\.(tsv|txt|maf)(\.gz)?$")


class Merger:
    """Deep merging of dictionary hierarchies.

    This class is used to merge the packaged default configuration with a
    user configuration file where the defaults are kept for all values not
    overwritten by the user configuration file.
    """

    @staticmethod
    def deep_merge(dict1: dict, dict2: dict) -> dict:
        """Deep merging of two hierarchical dictionary trees.

        Values from `dict2` take precedence. Nested dictionaries are merged
        key by key instead of being replaced. Neither input is modified.

        Args:
            dict1: the base dictionary.
            dict2: the dictionary with the update information.

        Returns:
            a new dictionary with `dict1` updated by `dict2`.

        Examples:
            >>> genebinary.Merger.deep_merge(default_config, user_config)
        """
        merged = dict(dict1)
        for key, value in dict2.items():
            if isinstance(merged.get(key), dict) and isinstance(value, dict):
                merged[key] = Merger.deep_merge(merged[key], value)
            else:
                merged[key] = value
        return merged


class Configuration:
    """Reference data configuration.

    The default configuration is read from a default JSON config file
    which is part of the package. If a user config file is specified,
    it is used to update the information from the default config file.
    """

    def __init__(self, reference_dir: str = None, config_file: str = None):
        """Creates a new Configuration object.

        Args:
            reference_dir: optional directory with reference data, for
                example the base directory of a GENIE release holding a
                `gene_panels` subdirectory.
            config_file: optional user config file (JSON).

        Examples:
            >>> import os
            >>> import genebinary
            >>> home = os.getenv("HOME")
            >>> genie_dir = os.path.join(home, "genie_data")

            >>> # Packaged alias table, gene panels from a GENIE release
            >>> config = genebinary.Configuration(genie_dir)

            >>> # With a user config file, overwriting some defaults
            >>> config = genebinary.Configuration(genie_dir, "my_config.json")
        """
        source = files(genebinary.data).joinpath("default_config.json")
        with as_file(source) as f:
            with open(f) as fp:
                default_config = json.load(fp)
        if config_file is not None:
            with open(config_file) as f:
                user_config = json.load(f)
                self.config = Merger.deep_merge(default_config, user_config)
        else:
            self.config = default_config

        if reference_dir is not None:
            self.config["dir"]["reference"] = reference_dir

    def _files_by_pattern(self, dir: str, key: str) -> dict:
        """Find the data files of one kind in a directory.

        The configured name is a regular expression prefixed with "re:" and
        holding one group. The text matched by the group identifies the file.

        Args:
            dir: the directory to search.
            key: the key of the file name pattern in the "data" section.

        Returns:
            a dictionary with the identifiers as keys and full file names as
                values.
        """
        pattern = re.compile(re.sub("^re:", "", self.config["data"][key]))
        result = {}
        for name in sorted(os.listdir(dir)):
            m = pattern.fullmatch(name)
            if m:
                result[m.group(1)] = os.path.join(dir, name)
        return result

    def get_config(self) -> dict:
        """Get the complete configuration data.

        Returns:
            complete configuration as dictionary.
        """
        return self.config

    def get_reference_dir(self) -> str:
        """Get the base directory of reference data (None if not set)."""
        return self.config["dir"]["reference"]

    def get_alias_file_name(self):
        """Get the name of the gene alias table.

        A relative file name is looked up in `reference_dir` if it exists
        there, otherwise in the packaged data.

        Returns:
            a file name or a `Traversable` for the packaged table.
        """
        name = self.config["data"]["aliases"]
        reference_dir = self.get_reference_dir()
        if os.path.isabs(name):
            return name
        if reference_dir is not None and os.path.isfile(
            os.path.join(reference_dir, name)
        ):
            return os.path.join(reference_dir, name)
        return files(genebinary.data).joinpath(name)

    def get_gene_panel_file_names(self) -> dict:
        """Get all files with gene panel descriptions.

        Returns:
            dictionary with panel IDs as keys and file names as values. Empty
                if no reference directory is configured.
        """
        reference_dir = self.get_reference_dir()
        if reference_dir is None:
            return {}
        panel_dir = os.path.join(reference_dir, self.config["dir"]["gene_panels"])
        if not os.path.isdir(panel_dir):
            return {}
        return self._files_by_pattern(panel_dir, "gene_panels")

    def get_impact_panels(self) -> dict:
        """Get the sample id pattern to panel id mapping for panel inference.

        Returns:
            dictionary with regular expressions as keys and panel ids as
                values.
        """
        return dict(self.config["impact_panels"])

    def load_aliases(self) -> pd.DataFrame:
        """Load the gene alias table.

        Returns:
            table with columns `alias` and `hugo_symbol`.
        """
        source = self.get_alias_file_name()
        if isinstance(source, str):
            return pd.read_table(source, comment="#")
        with as_file(source) as f:
            return pd.read_table(f, comment="#")


def load_file(file_name: str) -> pd.DataFrame:
    """Load a tab separated data file, using a Parquet cache.

    On first use the file is read, duplicated rows are removed and the
    result is written to a Parquet file next to the data file. Later calls
    read the cache. Lines starting with "#" are skipped.

    Args:
        file_name: the name of the data file or of a Parquet file.

    Returns:
        the data loaded from the file or its cache.
    """
    if file_name.endswith(".parquet"):
        return pd.read_parquet(file_name)
    cache_file = get_cache_file_name(file_name)
    if os.path.isfile(cache_file):
        return pd.read_parquet(cache_file)
    df = pd.read_table(file_name, low_memory=False, comment="#").drop_duplicates()
    df.to_parquet(cache_file)
    return df


def get_cache_file_name(file_name: str) -> str:
    """Get the Parquet cache file name for a data file.

    The ".tsv", ".txt" or ".maf" extension, optionally followed by ".gz", is
    replaced by ".parquet".
    """
    return DATA_FILE_EXTENSION.sub("", file_name) + ".parquet"
