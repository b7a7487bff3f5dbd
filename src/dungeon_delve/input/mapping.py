from __future__ import annotations

import logging
from typing import Dict, Iterable, Mapping, Optional

from ..engine.intents import Direction, Intent, MoveIntent, SpawnSecondPlayer, WaitIntent
from ..entities.entity import PlayerSlot

logger = logging.getLogger(__name__)


def parse_action(name: str) -> Intent:
    """Turn a settings action name into an intent.

    Accepted names: "<primary|secondary>.<up|down|left|right>",
    "spawn_second_player" and "wait".
    """
    n = name.strip().lower()
    if n == "spawn_second_player":
        return SpawnSecondPlayer()
    if n == "wait":
        return WaitIntent()
    slot_name, _, direction_name = n.partition(".")
    try:
        return MoveIntent(PlayerSlot[slot_name.upper()], Direction[direction_name.upper()])
    except KeyError:
        raise ValueError(f"Unknown action name: {name!r}") from None


class IntentMapper:
    """Rebindable mapping from physical keys to intents.

    Keys are strings normalized to uppercase, so any backend can feed it by
    translating its key constants to names first.

    Example usage:
        mapper = IntentMapper.default()
        intent = mapper.translate_key("left")   # -> MoveIntent(PRIMARY, LEFT)
    """

    def __init__(self, bindings: Optional[Dict[str, Intent]] = None) -> None:
        self._bindings: Dict[str, Intent] = {}
        if bindings:
            for key, intent in bindings.items():
                self.bind(key, intent)

    @staticmethod
    def _normalize(key: str) -> Optional[str]:
        if not isinstance(key, str):
            return None
        k = key.strip()
        if not k:
            return None
        return k.upper()

    def bind(self, key: str, intent: Intent) -> None:
        nk = self._normalize(key)
        if nk is None:
            logger.warning("Attempted to bind invalid key: %r", key)
            return
        self._bindings[nk] = intent

    def bind_many(self, keys: Iterable[str], intent: Intent) -> None:
        for k in keys:
            self.bind(k, intent)

    def unbind(self, key: str) -> None:
        nk = self._normalize(key)
        if nk is not None:
            self._bindings.pop(nk, None)

    def translate_key(self, key: str) -> Optional[Intent]:
        """Intent bound to key, or None for unbound keys (which the runner treats as a wait)."""
        nk = self._normalize(key)
        if nk is None:
            return None
        return self._bindings.get(nk)

    @classmethod
    def from_settings(cls, bindings: Mapping[str, str]) -> "IntentMapper":
        """Build a mapper from the settings' key -> action-name table."""
        mapper = cls()
        for key, action in bindings.items():
            mapper.bind(key, parse_action(action))
        return mapper

    @classmethod
    def default(cls) -> "IntentMapper":
        """Arrows drive the primary player, WASD the secondary, F1 brings the secondary in."""
        mapper = cls()
        for key, direction in (("UP", Direction.UP), ("DOWN", Direction.DOWN),
                               ("LEFT", Direction.LEFT), ("RIGHT", Direction.RIGHT)):
            mapper.bind(key, MoveIntent(PlayerSlot.PRIMARY, direction))
        for key, direction in (("W", Direction.UP), ("S", Direction.DOWN),
                               ("A", Direction.LEFT), ("D", Direction.RIGHT)):
            mapper.bind(key, MoveIntent(PlayerSlot.SECONDARY, direction))
        mapper.bind("F1", SpawnSecondPlayer())
        return mapper


__all__ = ["IntentMapper", "parse_action"]
