from .window import SearchWindow, count_search_accesses, iter_windows
from .block_matching import BlockMatcher, SAD_INITIAL

__all__ = [
    "SearchWindow",
    "count_search_accesses",
    "iter_windows",
    "BlockMatcher",
    "SAD_INITIAL",
]
