from typing import List, Optional


class PersistenceFailure(Exception):
    """Reading or writing the stats file failed."""

    def __init__(self, path: str, reason: Exception):
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class ChannelCreationFailed(Exception):
    """
    A category or display channel could not be created during setup.
    Whatever was created before the failure is left in the guild; the ids are
    kept here so an operator can clean them up by hand.
    """

    def __init__(
        self,
        reason: Exception,
        category_id: Optional[int] = None,
        channel_ids: Optional[List[int]] = None,
    ):
        super().__init__(str(reason))
        self.reason = reason
        self.category_id = category_id
        self.channel_ids = list(channel_ids or [])

    @property
    def leaked_ids(self) -> List[int]:
        ids = [self.category_id] if self.category_id is not None else []
        return ids + self.channel_ids
