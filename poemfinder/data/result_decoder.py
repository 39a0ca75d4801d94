# poemfinder/data/result_decoder.py

import logging
from typing import Any, List

from poemfinder.models.poem import Poem

logger = logging.getLogger(__name__)


def decode(raw: Any) -> List[Poem]:
    """
    Normalize a PoetryDB response body into a list of poems.

    Handles the two shapes the service returns:
    - a JSON array of poem objects
    - {"authors": [...]} from the bare /author listing, mapped to
      synthetic "(author listing)" entries with no lines

    Anything else (None, {"status": 404, "reason": "Not found"}, scalars)
    decodes to an empty list. Never raises.
    """
    if isinstance(raw, list):
        poems = []
        for i, item in enumerate(raw):
            if not isinstance(item, dict):
                logger.warning(f"Skipping non-object poem record at position {i}: {type(item).__name__}")
                continue
            try:
                poems.append(Poem.from_dict(item))
            except (TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed poem record at position {i}: {e}")
        return poems

    if isinstance(raw, dict):
        authors = raw.get('authors')
        if isinstance(authors, list):
            return [Poem.author_listing(str(name)) for name in authors if name is not None]
        if 'reason' in raw:
            logger.debug(f"PoetryDB returned no results: {raw.get('status')} {raw.get('reason')}")
            return []

    logger.debug(f"Unrecognized response shape decoded to no poems: {type(raw).__name__}")
    return []
