"""Parent-chain containment check used to gate direct file access."""

from __future__ import annotations

import logging
from collections import deque

from docwiki.providers.content_types import ContentStore

logger = logging.getLogger(__name__)


def is_descendant(store: ContentStore, file_id: str, root_id: str) -> bool:
    """Check whether root_id is an ancestor of file_id.

    Walks parent links breadth-first. The visited set bounds the walk to the
    ancestor set, so parent cycles terminate. Any store error denies access.

    Args:
        store: Content store used to resolve parents
        file_id: File being requested
        root_id: Managed content root folder

    Returns:
        True if root_id is reachable through parent links
    """
    if not file_id or not root_id:
        return False

    try:
        visited = {file_id}
        queue = deque()
        for parent in store.get_parents(file_id):
            if parent not in visited:
                visited.add(parent)
                queue.append(parent)

        while queue:
            current = queue.popleft()
            if current == root_id:
                return True
            for parent in store.get_parents(current):
                if parent not in visited:
                    visited.add(parent)
                    queue.append(parent)
    except Exception as e:
        logger.warning(f"Containment check failed for {file_id}: {e}")
        return False

    return False
