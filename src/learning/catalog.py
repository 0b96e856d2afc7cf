"""
Catalog browser: free-text / category / difficulty filtering over modules,
with a cumulative "show more" cap.
"""

import logging
from typing import List, Sequence

from learning.content import Difficulty, Module
from learning.errors import UnknownModuleError

logger = logging.getLogger(__name__)

ALL = "All"
CATEGORIES = (ALL, "Government", "Elections", "Rights", "Law", "Policy", "History")
DIFFICULTIES = (ALL,) + tuple(d.value for d in Difficulty)
DEFAULT_PAGE_SIZE = 12
FEATURED_COUNT = 6


def matches(module: Module, query: str = "", category: str = ALL, difficulty: str = ALL) -> bool:
    """All three predicates ANDed. Empty query matches everything."""
    needle = query.strip().lower()
    matches_search = (
        needle in module.title.lower()
        or needle in module.subtitle.lower()
    )
    matches_category = category == ALL or module.category == category
    matches_difficulty = difficulty == ALL or module.difficulty == difficulty
    return matches_search and matches_category and matches_difficulty


class CatalogBrowser:
    def __init__(self, modules: Sequence[Module], page_size: int = DEFAULT_PAGE_SIZE):
        if page_size < 1:
            raise ValueError("page_size must be positive")
        self._modules: List[Module] = list(modules)
        self.page_size = page_size
        self.query = ""
        self.category = ALL
        self.difficulty = ALL
        self.limit = page_size

    @property
    def modules(self) -> List[Module]:
        return list(self._modules)

    @property
    def categories(self) -> tuple:
        return CATEGORIES

    @property
    def difficulties(self) -> tuple:
        return DIFFICULTIES

    def set_query(self, query: str) -> None:
        self.query = query or ""

    def set_category(self, category: str) -> None:
        if category not in CATEGORIES:
            raise ValueError(f"Unknown category: {category}")
        self.category = category

    def set_difficulty(self, difficulty: str) -> None:
        if difficulty not in DIFFICULTIES:
            raise ValueError(f"Unknown difficulty: {difficulty}")
        self.difficulty = difficulty

    def clear_filters(self) -> None:
        self.query = ""
        self.category = ALL
        self.difficulty = ALL

    @property
    def results(self) -> List[Module]:
        """Every module passing the current filters, in catalog order."""
        return [m for m in self._modules if matches(m, self.query, self.category, self.difficulty)]

    @property
    def visible(self) -> List[Module]:
        return self.results[: self.limit]

    @property
    def has_more(self) -> bool:
        return len(self.results) > self.limit

    def show_more(self) -> int:
        """Grow the cap by one page. The cap never shrinks, even when filters change."""
        self.limit += self.page_size
        logger.debug("catalog limit raised to %s", self.limit)
        return self.limit

    def featured(self, count: int = FEATURED_COUNT) -> List[Module]:
        """Teaser slice shown on the home screen, unfiltered."""
        return self._modules[:count]

    def find(self, module_id) -> Module:
        for module in self._modules:
            if module.id == module_id:
                return module
        raise UnknownModuleError(module_id)
