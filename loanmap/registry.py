# loanmap/registry.py

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Optional

import pandas as pd
from unidecode import unidecode

from loanmap.constants import US_STATES


@dataclass(frozen=True)
class RegionInfo:
    name: str
    code: str
    population: Optional[int] = None


class RegionRegistry:
    """
    Static lookup of region name -> {code, population}.
    Names are matched accent- and case-insensitively; codes are upper-cased.
    """

    def __init__(self, regions: List[RegionInfo]):
        self._by_name: Dict[str, RegionInfo] = {}
        self._by_code: Dict[str, RegionInfo] = {}
        for info in regions:
            if info.population is not None and info.population < 0:
                raise ValueError(f"Negative population for region '{info.name}'")
            self._by_name[self._norm(info.name)] = info
            self._by_code[info.code.strip().upper()] = info
        self._by_name = MappingProxyType(self._by_name)
        self._by_code = MappingProxyType(self._by_code)

    @classmethod
    def from_table(cls, table: Mapping[str, Mapping]) -> "RegionRegistry":
        """Builds a registry from a {name: {'abbr': ..., 'pop': ...}} table."""
        regions = []
        for name, entry in table.items():
            pop = entry.get('pop')
            regions.append(RegionInfo(name=name, code=entry['abbr'],
                                      population=int(pop) if pop is not None else None))
        return cls(regions)

    @classmethod
    def default(cls) -> "RegionRegistry":
        return cls.from_table(US_STATES)

    @staticmethod
    def _norm(s: Optional[str]) -> str:
        return unidecode("" if s is None or (isinstance(s, float) and pd.isna(s)) else str(s)).strip().lower()

    def __len__(self) -> int:
        return len(self._by_code)

    def __iter__(self) -> Iterator[RegionInfo]:
        return iter(self._by_code.values())

    def by_name(self, name: Optional[str]) -> Optional[RegionInfo]:
        return self._by_name.get(self._norm(name))

    def by_code(self, code: Optional[str]) -> Optional[RegionInfo]:
        if not code:
            return None
        return self._by_code.get(str(code).strip().upper())

    def code_for(self, name: Optional[str]) -> Optional[str]:
        """Returns the region code for a feature name, or None if unresolved."""
        info = self.by_name(name)
        return info.code if info else None

    def resolve(self, key: Optional[str]) -> Optional[RegionInfo]:
        """Looks a region up by code first, then by name."""
        return self.by_code(key) or self.by_name(key)

    def population_for(self, key: Optional[str]) -> Optional[int]:
        info = self.resolve(key)
        return info.population if info else None
