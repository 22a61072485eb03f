"""
Paginated key enumeration.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Tuple

from .storage_provider import ObjectStore

logger = logging.getLogger(__name__)


def is_directory_marker(key: str) -> bool:
    return key.endswith('/')


def list_keys(store: ObjectStore, prefix: str) -> List[str]:
    """
    Return every key under ``prefix``, following continuation cursors.

    Directory markers are included; callers filter them. A store failure
    propagates, so a partial listing is never returned as complete.
    """
    keys: List[str] = []
    cursor = None
    pages = 0
    while True:
        page = store.list_page(prefix, cursor)
        keys.extend(page.keys)
        pages += 1
        cursor = page.cursor
        if not cursor:
            break
    logger.debug(f"list_keys: prefix='{prefix}' pages={pages} keys={len(keys)}")
    return keys


def list_banks(store: ObjectStore, originals_prefix: str,
               remixes_prefix: str) -> Tuple[List[str], List[str]]:
    """
    List the originals and remixes banks, without directory markers.

    The two prefixes are listed concurrently; pages within one prefix are
    fetched one after another.
    """
    with ThreadPoolExecutor(max_workers=2) as executor:
        originals_future = executor.submit(list_keys, store, originals_prefix)
        remixes_future = executor.submit(list_keys, store, remixes_prefix)
        originals = originals_future.result()
        remixes = remixes_future.result()

    return (
        [k for k in originals if not is_directory_marker(k)],
        [k for k in remixes if not is_directory_marker(k)],
    )
