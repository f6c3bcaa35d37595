"""
filters.py - Filter DTOs
Single responsibility: carry the list filter inputs of one resource page.
"""
from dataclasses import dataclass, field


@dataclass
class FilterState:
    active_tab: str = "all"
    search_text: str = ""
    # month / year / category / sort, depending on the page
    extra: dict[str, str] = field(default_factory=dict)
