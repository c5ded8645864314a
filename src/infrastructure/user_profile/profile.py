from __future__ import annotations

import logging
from typing import Any

from domain.schemas import UserProfile

logger = logging.getLogger(__name__)


class ProfileStore:
    """Single-user profile holder; limits default to 0 (unset)."""

    def __init__(self, profile: UserProfile | None = None) -> None:
        self._profile = profile or UserProfile()

    def get(self) -> UserProfile:
        return self._profile.model_copy(deep=True)

    def update(self, **changes: Any) -> UserProfile:
        merged = {**self._profile.model_dump(), **changes}
        self._profile = UserProfile.model_validate(merged)
        logger.info("ProfileStore update fields=%s", sorted(changes))
        return self.get()

    def reset(self) -> None:
        self._profile = UserProfile()
