from __future__ import annotations

import logging
from typing import Callable, List, Optional, Set, Union

from ..ai.pathing import StepOutcome, step_monster
from ..config import RULES, Rules
from ..dungeon.generator import Level, LevelGenerator
from ..dungeon.map import DungeonMap, Point
from ..dungeon.spawns import SpawnPool, place_monsters, place_player, reposition_player
from ..entities.combat import player_strikes_first
from ..entities.entity import Entity, PlayerSlot
from ..entities.loot import open_chest
from ..entities.monsters import MonsterSlots
from ..exceptions import InvalidTransitionError
from ..rng import RandomSource
from .events import GameEvent, ResolverState
from .intents import Direction, Intent, MoveIntent, SpawnSecondPlayer, WaitIntent
from .snapshot import EntityView, Snapshot, render_lines

logger = logging.getLogger(__name__)

Listener = Callable[[GameEvent, Snapshot], None]


class TurnResolver:
    """Owns the run state and adjudicates one turn per intent.

    A turn moves the acting player (walls, the other player and monsters
    block; walking into a monster starts a fight), opens any chest underfoot,
    decays the mover's boosts, advances every monster, clears the dead,
    handles stairs and player deaths, and finally notifies listeners with a
    fresh Snapshot. Randomness comes only from the RandomSource, so a seeded
    resolver replays identically.
    """

    def __init__(
        self,
        seed: Union[int, str, None] = None,
        rules: Rules = RULES,
        rng: Optional[RandomSource] = None,
    ) -> None:
        self.rules = rules
        self.rng = rng if rng is not None else RandomSource(seed)
        self._generator = LevelGenerator(self.rng, rules)
        self._listeners: List[Listener] = []
        self.state = ResolverState.IDLE
        self.depth = 0
        self.turn = 0
        self.level: Optional[Level] = None
        self.monsters = MonsterSlots(0)
        self.primary: Optional[Entity] = None
        self.secondary: Optional[Entity] = None

    # ---- Listeners -------------------------------------------------------
    def add_listener(self, listener: Listener) -> None:
        """Subscribe to game events; each call receives the event and a fresh snapshot."""
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _emit(self, event: GameEvent) -> Snapshot:
        snap = self.snapshot()
        for l in list(self._listeners):
            try:
                l(event, snap)
            except Exception as ex:
                logger.exception("Listener errored on %s: %s", event, ex)
        return snap

    # ---- Accessors -------------------------------------------------------
    @property
    def map(self) -> DungeonMap:
        if self.level is None:
            raise InvalidTransitionError("Game has not been started")
        return self.level.map

    @property
    def pool(self) -> SpawnPool:
        if self.level is None:
            raise InvalidTransitionError("Game has not been started")
        return self.level.pool

    def player(self, slot: PlayerSlot) -> Optional[Entity]:
        return self.primary if slot is PlayerSlot.PRIMARY else self.secondary

    def _set_player(self, slot: PlayerSlot, player: Optional[Entity]) -> None:
        if slot is PlayerSlot.PRIMARY:
            self.primary = player
        else:
            self.secondary = player

    def players(self) -> List[Entity]:
        return [p for p in (self.primary, self.secondary) if p is not None]

    def _occupied(self) -> Set[Point]:
        """Cells held right now by a player or a live monster."""
        cells = {p.pos for p in self.players()}
        cells.update(m.pos for m in self.monsters if m.is_alive)
        return cells

    @property
    def can_spawn_second_player(self) -> bool:
        """True when F1 would succeed: a started game, no secondary, and a free spawn point."""
        if self.level is None or self.secondary is not None:
            return False
        return bool(self.pool.available(self._occupied()))

    def snapshot(self) -> Snapshot:
        tiles = self.level.map.snapshot() if self.level is not None else ()
        return Snapshot(
            depth=self.depth,
            state=self.state,
            tiles=tiles,
            primary=EntityView.of(self.primary),
            secondary=EntityView.of(self.secondary),
            monsters=tuple(EntityView.of(m) for m in self.monsters.as_list()),
        )

    # ---- Lifecycle -------------------------------------------------------
    def _require(self, *states: ResolverState) -> None:
        if self.state not in states:
            raise InvalidTransitionError(f"Not allowed while {self.state.name}")

    def _require_started(self) -> None:
        if self.level is None:
            raise InvalidTransitionError("Game has not been started")

    def start_game(self) -> Snapshot:
        """Generate level 1 and place its monsters and the primary player."""
        self._require(ResolverState.IDLE, ResolverState.GAME_OVER)
        self.depth = 1
        self.turn = 0
        self.level = self._generator.build(self.depth)
        self.monsters = place_monsters(self.pool, self.depth, self.rng, self.rules)
        self.primary = place_player(self.pool, PlayerSlot.PRIMARY, self.rng, self.rules)
        self.secondary = None
        self.state = ResolverState.IDLE
        logger.info("Game started at depth %d with %d monsters", self.depth, len(self.monsters))
        return self._emit(GameEvent.GAME_STARTED)

    def restart(self) -> Snapshot:
        """Throw the run away and start again from depth 1."""
        self._require(ResolverState.IDLE, ResolverState.GAME_OVER)
        logger.info("Restarting run (was depth %d)", self.depth)
        self.start_game()
        return self._emit(GameEvent.RESTARTED)

    def terminate(self) -> Snapshot:
        self._require(ResolverState.IDLE, ResolverState.GAME_OVER)
        self.state = ResolverState.TERMINATED
        logger.info("Run terminated at depth %d after %d turns", self.depth, self.turn)
        return self._emit(GameEvent.TERMINATED)

    def spawn_second_player(self) -> Snapshot:
        """Bring the secondary player in at a fresh spawn point. Does not resolve a turn."""
        self._require(ResolverState.IDLE)
        self._require_started()
        if self.secondary is not None:
            raise InvalidTransitionError("Secondary player is already in the game")
        occupied = self._occupied()
        if not self.pool.available(occupied):
            raise InvalidTransitionError("No free spawn point left on this level")
        self.secondary = place_player(self.pool, PlayerSlot.SECONDARY, self.rng, self.rules, occupied=occupied)
        logger.info("Secondary player joined at (%d,%d)", self.secondary.x, self.secondary.y)
        return self._emit(GameEvent.SECOND_PLAYER_JOINED)

    def submit(self, intent: Intent) -> Snapshot:
        """Dispatch one intent from the input boundary."""
        if isinstance(intent, SpawnSecondPlayer):
            return self.spawn_second_player()
        if isinstance(intent, (MoveIntent, WaitIntent)):
            return self.do_turn(intent)
        raise TypeError(f"Unsupported intent: {intent!r}")

    # ---- Turn ------------------------------------------------------------
    def do_turn(self, intent: Optional[Union[MoveIntent, WaitIntent]] = None) -> Snapshot:
        """Resolve exactly one turn. A move for an empty slot still resolves the turn."""
        self._require(ResolverState.IDLE)
        self._require_started()
        self.state = ResolverState.RESOLVING
        self.turn += 1

        if isinstance(intent, MoveIntent):
            self._move_player(intent.slot, intent.direction)

        self._move_monsters()
        self.monsters.sweep_dead()

        for slot in (PlayerSlot.PRIMARY, PlayerSlot.SECONDARY):
            player = self.player(slot)
            if player is None:
                continue
            if self.map.tile_at(player.pos).is_stairs:
                self._descend()
            if not player.is_alive:
                self._set_player(slot, None)
                logger.info("%s player died at depth %d", slot.name.capitalize(), self.depth)
                self._emit(GameEvent.PLAYER_DIED)

        if self.primary is None and self.secondary is None:
            self.state = ResolverState.GAME_OVER
            logger.info("Game over at depth %d after %d turns", self.depth, self.turn)
            self._emit(GameEvent.GAME_OVER)
        else:
            self.state = ResolverState.IDLE

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Turn %d resolved:\n%s", self.turn, "\n".join(render_lines(self.snapshot())))
        return self._emit(GameEvent.TURN_RESOLVED)

    def _move_player(self, slot: PlayerSlot, direction: Direction) -> None:
        player = self.player(slot)
        if player is None:
            logger.debug("Move for empty %s slot; turn passes", slot.name.lower())
            return

        player.record_previous_position()
        dx, dy = direction.delta
        if not self.map.is_wall(player.x + dx, player.y + dy):
            player.move_to(player.x + dx, player.y + dy)

        other = self.player(PlayerSlot.SECONDARY if slot is PlayerSlot.PRIMARY else PlayerSlot.PRIMARY)
        if other is not None and other.pos == player.pos:
            player.revert()

        blockers = [m for m in self.monsters.at(player.x, player.y) if m.is_alive]
        if blockers:
            player.revert()
            for monster in blockers:
                player_strikes_first(player, monster, self.rng, self.rules)

        open_chest(player, self.map, self.rng, self.rules)
        player.update_stats(self.rules)
        logger.debug("%s moved %s -> %r", slot.name.lower(), direction.name.lower(), player)

    def _move_monsters(self) -> None:
        for index, monster in list(self.monsters.live()):
            if not monster.is_alive:
                continue
            outcome = step_monster(monster, self.primary, self.secondary, self.map, self.rng, self.rules)
            if outcome is StepOutcome.IDLE:
                continue
            if self._contested(index, monster):
                monster.revert()

    def _contested(self, index: int, monster: Entity) -> bool:
        """True if another live monster or any player already holds the monster's cell."""
        here = monster.pos
        if any(o.is_alive and o.pos == here for o in self.monsters.others(index)):
            return True
        return any(p.pos == here for p in self.players())

    def _descend(self) -> None:
        self.state = ResolverState.DESCENDING
        self.depth += 1
        self.level = self._generator.build(self.depth)
        for player in self.players():
            reposition_player(self.pool, player, self.rng)
        self.monsters = place_monsters(self.pool, self.depth, self.rng, self.rules)
        logger.info("Descended to depth %d (%d monsters)", self.depth, len(self.monsters))
        self._emit(GameEvent.LEVEL_DESCENDED)
        self.state = ResolverState.RESOLVING


__all__ = ["TurnResolver", "Listener"]
