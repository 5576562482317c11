"""Transform analytics results to the frontend JSON format."""

import logging
from typing import Any, Dict

from ladder.render import to_jsonable

logger = logging.getLogger(__name__)


def _to_camel_case(snake_str: str) -> str:
    """Convert snake_case to camelCase."""
    components = snake_str.split("_")
    return components[0] + "".join(x.title() for x in components[1:])


def transform_result(result: Any) -> Dict[str, Any]:
    """Convert a result dataclass to a camelCase JSON dict.

    Field names are camelCased; data-keyed dicts (hero usage, hero counts)
    keep their keys.
    """
    return to_jsonable(result, key=_to_camel_case)


def transform_ladder_page(page: Any) -> Dict[str, Any]:
    """Ladder page in frontend format.

    ``full`` is the requested page; ``top`` is the first slice of the
    eligible ladder regardless of the page.
    """
    out = transform_result(page)
    out["battletag"] = out.pop("battleTag")
    logger.debug(f"[ladder] page rows={len(out['full'])} top={len(out['top'])} pool={out['poolSize']}")
    return out
