"""
Detects replica rebuilds anywhere in the cluster.
"""

import logging

from constants import VOLUME_PAGE_SIZE
from errors import RestRequestError, VolumeListError

logger = logging.getLogger(__name__)


def _has_active_rebuild(volume: dict) -> bool:
    target = (volume.get("state") or {}).get("target")
    if not target:
        return False
    return any(
        child.get("rebuildProgress") is not None
        for child in target.get("children", [])
    )


class RebuildGuard:
    """Pages through every volume looking for a nexus child that is rebuilding."""

    def __init__(self, rest_client, page_size: int = VOLUME_PAGE_SIZE):
        self.rest = rest_client
        self.page_size = page_size

    def is_rebuilding(self) -> bool:
        """
        Return True as soon as one rebuilding volume is seen.

        False is only returned after the last page (the one without a
        next_token) has been read. A failed page fails the whole call.
        """
        starting_token = 0
        while starting_token is not None:
            try:
                page = self.rest.get_volumes(self.page_size, starting_token)
            except RestRequestError as e:
                raise VolumeListError(starting_token) from e

            for volume in page.get("entries", []):
                if _has_active_rebuild(volume):
                    volume_uuid = (volume.get("spec") or {}).get("uuid", "<unknown>")
                    logger.info(f"Volume {volume_uuid} is rebuilding")
                    return True
            starting_token = page.get("next_token")
        return False
