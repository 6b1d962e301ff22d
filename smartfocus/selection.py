from __future__ import annotations

from typing import Optional, Sequence

from loguru import logger

from smartfocus.types import Track


class FocusSelection:
    """
    Which track the user has locked focus on.

    Clicking the locked person again unlocks; clicking someone else switches;
    clicking empty space clears. The id is kept while the track coasts through
    occlusion, so focus comes back when the tracker re-acquires the person.
    """

    def __init__(self) -> None:
        self.selected_id: Optional[int] = None

    def click(self, track: Optional[Track]) -> Optional[int]:
        if track is None:
            self.clear()
        elif track.track_id == self.selected_id:
            logger.info(f"Focus released: person #{track.track_id}")
            self.selected_id = None
        else:
            logger.info(f"Focus locked: person #{track.track_id}")
            self.selected_id = track.track_id
        return self.selected_id

    def select(self, track_id: int) -> None:
        self.selected_id = int(track_id)

    def clear(self) -> None:
        self.selected_id = None

    def is_present(self, tracks: Sequence[Track]) -> bool:
        return self.selected_id is not None and any(t.track_id == self.selected_id for t in tracks)
