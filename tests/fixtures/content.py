from __future__ import annotations

from typing import List, Set, Tuple

import pytest

from cinelist.core.exceptions import NotFoundError
from cinelist.schemas.content import ContentDetails
from cinelist.schemas.enums import MediaType


class FakeContent:
    """In-memory stand-in for `TMDBClient.get_details`."""

    def __init__(self) -> None:
        self.calls: List[Tuple[int, MediaType]] = []
        self.missing: Set[int] = set()

    async def get_details(self, content_id: int, media_type) -> ContentDetails:
        media_type = MediaType(media_type)
        self.calls.append((content_id, media_type))
        if content_id in self.missing:
            raise NotFoundError(f"Content not found: {media_type.value}/{content_id}")
        key = "title" if media_type is MediaType.MOVIE else "name"
        return ContentDetails.model_validate(
            {"id": content_id, "media_type": media_type.value, key: f"Title {content_id}"}
        )


@pytest.fixture
def fake_content() -> FakeContent:
    return FakeContent()
