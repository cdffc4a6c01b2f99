"""Manufacturer alias table used by the make and model extractors.

The table maps abbreviations, DMV four-letter codes and common
misspellings to one canonical manufacturer name. It is built once from
YAML and never modified afterwards, so a single instance can be shared
by every extraction without locking.
"""

import re
from collections.abc import Iterable, Iterator, Mapping
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType

import yaml

from title_ocr.utils.config import ExtractionConfig
from title_ocr.utils.logger import get_logger

from .normalizer import normalize

logger = get_logger(__name__)

DEFAULT_ALIASES_PATH = Path(__file__).resolve().parent.parent / "data" / "make_aliases.yaml"

# Shorter keys (VW, KIA, RAM, CHEV) only match as whole words.
MIN_SUBSTRING_KEY_LENGTH = 5


def _alternation(keys: Iterable[str], boundary: bool) -> re.Pattern[str] | None:
    escaped = [re.escape(k) for k in keys]
    if not escaped:
        return None
    body = "|".join(escaped)
    if boundary:
        return re.compile(rf"\b(?:{body})\b")
    return re.compile(f"(?:{body})")


class MakeAliasTable(Mapping[str, str]):
    """Read-only mapping of alias -> canonical manufacturer name.

    Keys are stored in normalized form. Search patterns are compiled
    once and list longer keys first, so ``CHEVROLET`` wins over
    ``CHEV`` at the same position.

    Args:
        aliases: Alias to canonical name pairs.
    """

    def __init__(self, aliases: Mapping[str, str]) -> None:
        table: dict[str, str] = {}
        for alias, canonical in aliases.items():
            key = normalize(alias)
            if key:
                table[key] = canonical.upper()
        self._aliases: Mapping[str, str] = MappingProxyType(table)

        ordered = sorted(table, key=lambda k: (-len(k), k))
        self.boundary_pattern = _alternation(ordered, boundary=True)
        self.substring_pattern = _alternation(
            [k for k in ordered if len(k) >= MIN_SUBSTRING_KEY_LENGTH],
            boundary=False,
        )

    @classmethod
    def from_canonical(cls, groups: Mapping[str, Iterable[str] | None]) -> "MakeAliasTable":
        """Build a table from ``{canonical: [alias, ...]}`` groups.

        Every canonical name also resolves to itself.
        """
        pairs: dict[str, str] = {}
        for canonical, aliases in groups.items():
            pairs[canonical] = canonical
            for alias in aliases or ():
                pairs[str(alias)] = canonical
        return cls(pairs)

    def __getitem__(self, key: str) -> str:
        return self._aliases[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._aliases)

    def __len__(self) -> int:
        return len(self._aliases)

    def resolve(self, token: str) -> str | None:
        """Return the canonical make for ``token``, or ``None``."""
        return self._aliases.get(normalize(token))

    def canonical_makes(self) -> list[str]:
        return sorted(set(self._aliases.values()))

    def keys_for(self, canonical: str) -> list[str]:
        """Return every alias of ``canonical``, longest first."""
        target = canonical.upper()
        return sorted(
            (k for k, v in self._aliases.items() if v == target),
            key=lambda k: (-len(k), k),
        )


@lru_cache(maxsize=8)
def load_make_aliases(path: Path | None = None) -> MakeAliasTable:
    """Load the alias table from YAML.

    The result is cached per path, so repeated calls share one table.

    Args:
        path: YAML file of ``canonical: [aliases]`` entries.
            Defaults to the packaged ``data/make_aliases.yaml``.

    Returns:
        The loaded alias table.
    """
    path = path or DEFAULT_ALIASES_PATH
    with open(path) as f:
        groups = yaml.safe_load(f) or {}
    table = MakeAliasTable.from_canonical(groups)
    logger.info(
        "Loaded %d make aliases for %d manufacturers from %s",
        len(table),
        len(table.canonical_makes()),
        path,
    )
    return table


def load_configured_aliases(config: ExtractionConfig) -> MakeAliasTable:
    """Load the table named by ``config.make_aliases_path``, or the packaged one."""
    path = config.make_aliases_path
    return load_make_aliases(Path(path) if path else None)
