from __future__ import annotations

import logging
import sys
from typing import Iterable, Optional, TextIO

from .engine.events import ResolverState
from .engine.intents import Intent, SpawnSecondPlayer, WaitIntent
from .engine.resolver import TurnResolver
from .engine.snapshot import Snapshot, render_lines
from .exceptions import DungeonDelveError
from .input.mapping import IntentMapper
from .settings import Settings

logger = logging.getLogger(__name__)

QUIT_WORDS = {"Q", "QUIT", "EXIT"}


def _status_line(snap: Snapshot) -> str:
    parts = [f"Depth {snap.depth}", f"monsters {len(snap.live_monsters())}"]
    for label, p in (("P1", snap.primary), ("P2", snap.secondary)):
        if p is not None:
            parts.append(f"{label} hp {p.health}/{p.max_health} sh {p.shield} dmg {p.current_damage} imm {p.immortality}")
    return " | ".join(parts)


def _show(snap: Snapshot, out: TextIO) -> None:
    print("\n".join(render_lines(snap)), file=out)
    print(_status_line(snap), file=out)


class HeadlessSession:
    """Console boundary around a TurnResolver: keys in, ASCII frames out.

    Owns the restart/quit decision once both players are gone; the resolver
    itself never blocks on input.
    """

    def __init__(self, resolver: TurnResolver, mapper: IntentMapper, out: TextIO) -> None:
        self.resolver = resolver
        self.mapper = mapper
        self.out = out

    def intent_for(self, key: str) -> Intent:
        intent = self.mapper.translate_key(key)
        if intent is None:
            return WaitIntent()
        if isinstance(intent, SpawnSecondPlayer) and not self.resolver.can_spawn_second_player:
            # Secondary already in, or no free spawn point: the key still costs a turn
            return WaitIntent()
        return intent

    def press(self, key: str) -> Snapshot:
        snap = self.resolver.submit(self.intent_for(key))
        _show(snap, self.out)
        return snap

    @property
    def game_over(self) -> bool:
        return self.resolver.state is ResolverState.GAME_OVER

    def run_scripted(self, keys: Iterable[str], max_turns: Optional[int] = None) -> None:
        """Replay a key sequence; the run terminates on game over or when keys run out."""
        for count, key in enumerate(keys, start=1):
            self.press(key)
            if self.game_over or (max_turns is not None and count >= max_turns):
                break
        if self.game_over:
            print("GAME OVER", file=self.out)
        self.resolver.terminate()

    def run_interactive(self, stdin: TextIO, max_turns: Optional[int] = None) -> None:
        turns = 0
        print("Keys: arrows = player 1, WASD = player 2, F1 = player 2 joins, q = quit", file=self.out)
        for line in stdin:
            tokens = line.split() or ["WAIT"]
            for key in tokens:
                if key.upper() in QUIT_WORDS:
                    self.resolver.terminate()
                    return
                self.press(key)
                turns += 1
                if self.game_over:
                    break
            if self.game_over:
                print("GAME OVER. Restart? y/n", file=self.out)
                answer = stdin.readline().strip().upper()
                if answer == "Y":
                    _show(self.resolver.restart(), self.out)
                    continue
                self.resolver.terminate()
                return
            if max_turns is not None and turns >= max_turns:
                break
        self.resolver.terminate()


def run_headless(
    settings: Settings,
    keys: Optional[Iterable[str]] = None,
    max_turns: Optional[int] = None,
    stdin: Optional[TextIO] = None,
    out: Optional[TextIO] = None,
) -> int:
    """Run a game in the console.

    Args:
        settings: Seed and key bindings.
        keys: Scripted key sequence; when None, keys are read from stdin.
        max_turns: Stop after this many turns.

    Returns:
        Process exit code (0 on success).
    """
    out = out or sys.stdout
    stdin = stdin or sys.stdin
    mapper = IntentMapper.from_settings(settings.bindings) if settings.bindings else IntentMapper.default()
    resolver = TurnResolver(seed=settings.seed)
    session = HeadlessSession(resolver, mapper, out)

    print("Dungeon Delve (headless)", file=out)
    try:
        _show(resolver.start_game(), out)
        if keys is not None:
            session.run_scripted(keys, max_turns=max_turns)
        else:
            session.run_interactive(stdin, max_turns=max_turns)
    except KeyboardInterrupt:
        print("Interrupted by user", file=out)
        return 130
    except DungeonDelveError:
        logger.exception("Simulation failed")
        return 1
    print(f"Run complete (depth={resolver.depth}, turns={resolver.turn})", file=out)
    return 0


__all__ = ["HeadlessSession", "run_headless"]
