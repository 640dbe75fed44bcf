"""
Category names and the ordered keyword table.

The table is configuration: `categories.json` in the user config directory
overrides the bundled default. Order matters, the first category whose
keywords match wins.
"""
from typing import Any, Dict, List, Optional, Tuple

from pocket_tracker.config.settings import ConfigLoader

OTHER = "Other"
INCOME = "Income"

# Canonical order, used when no config file can be found
DEFAULT_KEYWORDS: Dict[str, List[str]] = {
    "Food": ["coffee", "lunch", "dinner", "breakfast", "restaurant", "cafe", "pizza", "burger", "food", "meal"],
    "Transport": ["uber", "lyft", "gas", "fuel", "parking", "taxi", "bus", "train", "metro"],
    "Shopping": ["amazon", "walmart", "target", "mall", "store", "shop"],
    "Entertainment": ["netflix", "spotify", "movie", "cinema", "game", "concert"],
    "Bills": ["electric", "water", "internet", "phone", "rent", "bill", "utility"],
    "Health": ["pharmacy", "doctor", "hospital", "medicine", "gym", "fitness"],
    "Education": ["book", "course", "tuition", "school", "university"],
}


def keyword_table_from_config(config: Dict[str, Any]) -> Dict[str, List[str]]:
    """
    Convert a categories config into an ordered {category: keywords} dict.

    Config format:
        {
            "fallback": "Other",
            "categories": [
                {"name": "Food", "keywords": ["coffee", "lunch"]},
                ...
            ]
        }
    """
    table: Dict[str, List[str]] = {}
    for entry in config.get("categories", []):
        table[entry["name"]] = list(entry.get("keywords", []))
    return table


def load_categories(config: Optional[Dict[str, Any]] = None) -> Tuple[Dict[str, List[str]], str]:
    """
    Load the keyword table and the fallback category.

    Args:
        config: Optional config dict. If None, loads from ConfigLoader.

    Returns:
        (ordered mapping of category name to keywords, fallback category)
    """
    if config is None:
        try:
            config = ConfigLoader.load_categories_config()
        except FileNotFoundError:
            return dict(DEFAULT_KEYWORDS), OTHER

    return keyword_table_from_config(config), config.get("fallback") or OTHER


def category_names(keyword_table: Dict[str, List[str]], fallback: str = OTHER) -> List[str]:
    """All categories a transaction may be assigned, fallback last"""
    names = [name for name in keyword_table if name != fallback]
    return names + [fallback]
