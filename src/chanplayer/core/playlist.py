"""Playlist data models and traversal logic."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from enum import Enum
from pathlib import PurePath
from typing import List, Mapping, Optional, Protocol, Sequence, Union

logger = logging.getLogger(__name__)

MetadataValue = Union[float, int, str, bool, None]


class InvalidPlaylistStateError(RuntimeError):
    """Raised when traversal bookkeeping no longer matches the item list."""


class TraversalMode(Enum):
    LINEAR = "linear"
    SHUFFLE = "shuffle"


class PassPolicy(Enum):
    """What a shuffled playlist does once every item of a pass was shown."""

    REPLAY = "replay"
    RESHUFFLE = "reshuffle"


@dataclass(frozen=True)
class PlaylistItem:
    path: str
    name: str
    metadata: Mapping[str, MetadataValue] = field(default_factory=dict, compare=False)

    @property
    def ext(self) -> Optional[str]:
        value = self.metadata.get("ext")
        if isinstance(value, str) and value.strip():
            return value.strip().lower()
        suffix = PurePath(self.name).suffix
        return suffix[1:].lower() if len(suffix) > 1 else None


class Playlist(Protocol):
    def clear(self) -> None: ...

    def reset(self) -> None: ...

    def current(self) -> Optional[PlaylistItem]: ...

    def previous(self) -> Optional[PlaylistItem]: ...

    def next(self) -> Optional[PlaylistItem]: ...


class LinearPlaylist:
    """Cyclic forward/backward traversal in list order."""

    def __init__(self, items: Sequence[PlaylistItem] = (), *, cursor: int = -1) -> None:
        self._items: List[PlaylistItem] = list(items)
        self._cursor = cursor if -1 <= cursor < len(self._items) else -1

    @property
    def cursor(self) -> int:
        return self._cursor

    def clear(self) -> None:
        self._items.clear()
        self._cursor = -1

    def reset(self) -> None:
        self._cursor = -1

    def current(self) -> Optional[PlaylistItem]:
        if 0 <= self._cursor < len(self._items):
            return self._items[self._cursor]
        return None

    def previous(self) -> Optional[PlaylistItem]:
        if not self._items:
            self._cursor = -1
            return None
        if self._cursor < 1:
            self._cursor = len(self._items)
        self._cursor -= 1
        return self.current()

    def next(self) -> Optional[PlaylistItem]:
        if not self._items:
            self._cursor = -1
            return None
        self._cursor += 1
        if self._cursor >= len(self._items):
            self._cursor = 0
        return self.current()


class ShuffledPlaylist:
    """Random order without repeats inside a pass; history is replayable.

    ``order`` keeps every index drawn so far. Moving back with ``previous()``
    and forward again walks that history instead of drawing new indices.
    """

    def __init__(
        self,
        items: Sequence[PlaylistItem] = (),
        *,
        policy: PassPolicy = PassPolicy.REPLAY,
        rng: random.Random | None = None,
    ) -> None:
        self._items: List[PlaylistItem] = list(items)
        self._order: List[int] = []
        self._cursor = -1
        self._policy = policy
        self._rng = rng or random.Random()

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def order(self) -> List[int]:
        return list(self._order)

    def clear(self) -> None:
        self._order.clear()
        self._items.clear()
        self._cursor = -1

    def reset(self) -> None:
        self._order.clear()
        self._cursor = -1

    def current(self) -> Optional[PlaylistItem]:
        if not 0 <= self._cursor < len(self._order):
            return None
        return self._items[self._order[self._cursor]]

    def previous(self) -> Optional[PlaylistItem]:
        if self._cursor < 1:
            return None
        self._cursor -= 1
        return self.current()

    def next(self) -> Optional[PlaylistItem]:
        count = len(self._items)
        if count == 0:
            return None
        self._cursor += 1
        if self._cursor < len(self._order):
            return self.current()
        pass_start = len(self._order) - len(self._order) % count
        if self._policy is PassPolicy.REPLAY and self._cursor >= count:
            # legacy behaviour: the first permutation is replayed forever
            self._cursor = 0
            return self.current()
        used = set(self._order[pass_start:])
        remaining = [index for index in range(count) if index not in used]
        if not remaining:
            raise InvalidPlaylistStateError(
                f"No index left to draw (cursor={self._cursor}, order={len(self._order)}, items={count})"
            )
        self._order.append(self._rng.choice(remaining))
        if pass_start and len(used) == 0:
            logger.debug("Shuffled playlist started pass %d", pass_start // count + 1)
        return self.current()


class PlaylistWrapper:
    """Owns the item list and swaps the traversal strategy at runtime."""

    def __init__(
        self,
        items: Sequence[PlaylistItem],
        *,
        pass_policy: PassPolicy = PassPolicy.REPLAY,
        rng: random.Random | None = None,
    ) -> None:
        self._items: tuple[PlaylistItem, ...] = tuple(items)
        self._pass_policy = pass_policy
        self._rng = rng
        self._mode = TraversalMode.LINEAR
        self._playlist: Playlist = LinearPlaylist(self._items)

    @property
    def items(self) -> tuple[PlaylistItem, ...]:
        return self._items

    @property
    def mode(self) -> TraversalMode:
        return self._mode

    def __len__(self) -> int:
        return len(self._items)

    def previous(self) -> Optional[PlaylistItem]:
        return self._playlist.previous()

    def current(self) -> Optional[PlaylistItem]:
        return self._playlist.current()

    def next(self) -> Optional[PlaylistItem]:
        return self._playlist.next()

    def to_shuffle(self) -> "PlaylistWrapper":
        self._playlist = ShuffledPlaylist(self._items, policy=self._pass_policy, rng=self._rng)
        self._mode = TraversalMode.SHUFFLE
        return self

    def to_linear(self) -> "PlaylistWrapper":
        self._playlist = LinearPlaylist(self._items)
        self._mode = TraversalMode.LINEAR
        return self

    def set_mode(self, mode: TraversalMode) -> "PlaylistWrapper":
        if mode is TraversalMode.SHUFFLE:
            return self.to_shuffle()
        return self.to_linear()

    def clear(self) -> None:
        self._playlist.clear()
        self._items = ()

    def reset(self) -> None:
        self._playlist.reset()

    def remove(self, item: PlaylistItem) -> bool:
        """Drop ``item`` and rebuild the active strategy over the remaining items.

        A linear traversal continues so that ``next()`` returns the item that
        followed the removed one. Shuffled history is discarded.
        """
        index = next((idx for idx, candidate in enumerate(self._items) if candidate is item), None)
        if index is None:
            return False
        self._items = self._items[:index] + self._items[index + 1 :]
        if self._mode is TraversalMode.SHUFFLE:
            self.to_shuffle()
        else:
            self._playlist = LinearPlaylist(self._items, cursor=index - 1)
        logger.debug("Removed %s from playlist, %d items left", item.name, len(self._items))
        return True
