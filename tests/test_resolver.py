import pytest

from dungeon_delve.dungeon.map import Point
from dungeon_delve.dungeon.spawns import is_spawn_point
from dungeon_delve.dungeon.tiles import TileType
from dungeon_delve.engine import (
    Direction,
    GameEvent,
    MoveIntent,
    ResolverState,
    SpawnSecondPlayer,
    TurnResolver,
    WaitIntent,
)
from dungeon_delve.entities.entity import Entity, PlayerSlot
from dungeon_delve.exceptions import InvalidTransitionError
from dungeon_delve.rng import RandomSource


CORRIDOR = ["#####", "#...#", "#####"]

OPEN = [
    "#######",
    "#.....#",
    "#.....#",
    "#.....#",
    "#######",
]


def _move(slot, direction):
    return MoveIntent(slot, direction)


def _place(resolver, slot, x, y):
    player = Entity.player(slot, x, y)
    if slot is PlayerSlot.PRIMARY:
        resolver.primary = player
    else:
        resolver.secondary = player
    return player


def _play(seed, intents):
    resolver = TurnResolver(seed=seed)
    frames = [resolver.start_game()]
    for intent in intents:
        if resolver.state is ResolverState.GAME_OVER:
            break
        frames.append(resolver.submit(intent))
    return frames


def test_same_seed_same_run():
    moves = [
        _move(PlayerSlot.PRIMARY, Direction.UP),
        _move(PlayerSlot.PRIMARY, Direction.LEFT),
        _move(PlayerSlot.SECONDARY, Direction.DOWN),
        WaitIntent(),
        _move(PlayerSlot.PRIMARY, Direction.RIGHT),
        _move(PlayerSlot.SECONDARY, Direction.RIGHT),
        _move(PlayerSlot.PRIMARY, Direction.DOWN),
    ]
    intents = moves[:2] + [SpawnSecondPlayer()] + moves[2:] * 2
    assert _play(1234, intents) == _play(1234, intents)


def test_start_game_places_everything():
    resolver = TurnResolver(seed=7)
    snap = resolver.start_game()
    assert snap.depth == 1
    assert snap.state is ResolverState.IDLE
    assert snap.primary is not None and snap.secondary is None
    assert len(snap.live_monsters()) == 1
    assert snap.tile(snap.primary.x, snap.primary.y) is TileType.FLOOR
    assert len(resolver.map.positions_of([TileType.STAIRS])) == 1
    occupied = {snap.primary.pos} | {m.pos for m in snap.live_monsters()}
    assert len(occupied) == 2
    assert not occupied & set(resolver.pool)


def test_wall_bump_keeps_player_in_place(make_resolver):
    resolver = make_resolver(CORRIDOR)
    player = _place(resolver, PlayerSlot.PRIMARY, 1, 1)
    resolver.do_turn(_move(PlayerSlot.PRIMARY, Direction.LEFT))
    assert player.pos == Point(1, 1)
    assert resolver.turn == 1


def test_walking_into_monster_fights_and_reverts(make_resolver, add_monster, scripted_rng):
    rng = scripted_rng(ranges=[10, 5, 3, 7])
    resolver = make_resolver(CORRIDOR, rng=rng)
    player = _place(resolver, PlayerSlot.PRIMARY, 1, 1)
    monster = add_monster(resolver, 0, 2, 1)

    resolver.do_turn(_move(PlayerSlot.PRIMARY, Direction.RIGHT))

    assert player.pos == Point(1, 1)
    assert monster.pos == Point(2, 1)
    # Player's exchange, then the monster's own attack in the monster phase
    assert rng.range_calls == [50, 20, 20, 50]
    assert player.health == 400 - 5 - 3
    assert monster.health == 50 - 10 - 7


def test_players_cannot_share_a_cell(make_resolver):
    resolver = make_resolver(CORRIDOR)
    first = _place(resolver, PlayerSlot.PRIMARY, 1, 1)
    second = _place(resolver, PlayerSlot.SECONDARY, 2, 1)
    resolver.do_turn(_move(PlayerSlot.PRIMARY, Direction.RIGHT))
    assert first.pos == Point(1, 1)
    assert second.pos == Point(2, 1)
    assert (first.health, second.health) == (400, 250)


def test_first_monster_keeps_contested_cell(make_resolver, add_monster):
    resolver = make_resolver(OPEN)
    _place(resolver, PlayerSlot.PRIMARY, 4, 1)
    first = add_monster(resolver, 0, 2, 2)
    second = add_monster(resolver, 1, 3, 3)

    resolver.do_turn(WaitIntent())

    assert first.pos == Point(3, 2)
    assert second.pos == Point(3, 3)


def test_dead_monster_is_swept(make_resolver, add_monster, scripted_rng):
    rng = scripted_rng(ranges=[49, 0])
    resolver = make_resolver(CORRIDOR, rng=rng)
    _place(resolver, PlayerSlot.PRIMARY, 1, 1)
    add_monster(resolver, 0, 2, 1, health=5)

    snap = resolver.do_turn(_move(PlayerSlot.PRIMARY, Direction.RIGHT))

    assert snap.monsters[0] is None
    assert len(resolver.monsters) == 0
    # The dead monster takes no step of its own
    assert rng.range_calls == [50, 20]


def test_chest_is_opened_by_the_mover(make_resolver, scripted_rng):
    rng = scripted_rng(ranges=[1, 7])
    resolver = make_resolver(["#####", "#.w.#", "#####"], rng=rng)
    player = _place(resolver, PlayerSlot.PRIMARY, 1, 1)

    resolver.do_turn(_move(PlayerSlot.PRIMARY, Direction.RIGHT))

    assert resolver.map.get(2, 1) is TileType.FLOOR
    # Boost of 7, then this turn's decay of 2
    assert player.current_damage == 55


def test_stairs_descend(make_resolver):
    resolver = make_resolver(["#####", "#.>.#", "#####"], rng=RandomSource(5))
    player = _place(resolver, PlayerSlot.PRIMARY, 1, 1)
    events = []
    resolver.add_listener(lambda event, snap: events.append(event))

    snap = resolver.do_turn(_move(PlayerSlot.PRIMARY, Direction.RIGHT))

    assert snap.depth == resolver.depth == 2
    assert len(snap.live_monsters()) == 2
    assert snap.state is ResolverState.IDLE
    assert player.previous is None
    assert is_spawn_point(resolver.map, player.x, player.y)
    assert events == [GameEvent.LEVEL_DESCENDED, GameEvent.TURN_RESOLVED]


def test_death_ends_the_game_and_restart_recovers(make_resolver, add_monster, scripted_rng):
    rng = scripted_rng(ranges=[5, 0])
    resolver = make_resolver(CORRIDOR, rng=rng)
    player = _place(resolver, PlayerSlot.PRIMARY, 1, 1)
    player.health = 1
    add_monster(resolver, 0, 2, 1)
    events = []
    resolver.add_listener(lambda event, snap: events.append(event))

    snap = resolver.do_turn(WaitIntent())

    assert snap.primary is None
    assert snap.state is ResolverState.GAME_OVER
    assert events == [GameEvent.PLAYER_DIED, GameEvent.GAME_OVER, GameEvent.TURN_RESOLVED]
    with pytest.raises(InvalidTransitionError):
        resolver.do_turn(WaitIntent())

    snap = resolver.restart()
    assert snap.state is ResolverState.IDLE
    assert snap.depth == 1
    assert snap.primary is not None
    assert snap.primary.health == 400
    assert events[-2:] == [GameEvent.GAME_STARTED, GameEvent.RESTARTED]


def test_survivor_keeps_playing(make_resolver, add_monster, scripted_rng):
    rng = scripted_rng(ranges=[5, 0])
    resolver = make_resolver(OPEN, rng=rng)
    first = _place(resolver, PlayerSlot.PRIMARY, 1, 1)
    first.health = 1
    _place(resolver, PlayerSlot.SECONDARY, 5, 3)
    add_monster(resolver, 0, 2, 1)

    snap = resolver.do_turn(WaitIntent())

    assert snap.primary is None
    assert snap.secondary is not None
    assert snap.state is ResolverState.IDLE
    resolver.do_turn(_move(PlayerSlot.SECONDARY, Direction.LEFT))


def test_restart_clears_secondary():
    resolver = TurnResolver(seed=3)
    resolver.start_game()
    resolver.spawn_second_player()
    snap = resolver.restart()
    assert snap.secondary is None


def test_spawn_second_player():
    resolver = TurnResolver(seed=3)
    resolver.start_game()
    free = len(resolver.pool)
    events = []
    resolver.add_listener(lambda event, snap: events.append(event))

    snap = resolver.submit(SpawnSecondPlayer())

    assert snap.secondary is not None
    assert snap.secondary.health == 250
    assert snap.secondary.pos != snap.primary.pos
    assert len(resolver.pool) == free - 1
    assert resolver.turn == 0
    assert events == [GameEvent.SECOND_PLAYER_JOINED]
    with pytest.raises(InvalidTransitionError):
        resolver.spawn_second_player()


def test_move_for_empty_slot_still_resolves_turn(make_resolver):
    resolver = make_resolver(CORRIDOR)
    _place(resolver, PlayerSlot.PRIMARY, 1, 1)
    resolver.do_turn(_move(PlayerSlot.SECONDARY, Direction.UP))
    assert resolver.turn == 1
    assert resolver.secondary is None


def test_terminate_is_final():
    resolver = TurnResolver(seed=9)
    resolver.start_game()
    snap = resolver.terminate()
    assert snap.state is ResolverState.TERMINATED
    with pytest.raises(InvalidTransitionError):
        resolver.do_turn(WaitIntent())
    with pytest.raises(InvalidTransitionError):
        resolver.start_game()
    with pytest.raises(InvalidTransitionError):
        resolver.restart()


def test_turn_before_start_is_rejected():
    resolver = TurnResolver(seed=1)
    with pytest.raises(InvalidTransitionError):
        resolver.do_turn(WaitIntent())
    with pytest.raises(InvalidTransitionError):
        resolver.spawn_second_player()
    with pytest.raises(InvalidTransitionError):
        resolver.map


def test_unknown_intent_is_rejected():
    resolver = TurnResolver(seed=1)
    resolver.start_game()
    with pytest.raises(TypeError):
        resolver.submit("UP")


def test_removed_listener_is_not_called():
    resolver = TurnResolver(seed=2)
    seen = []

    def listener(event, snap):
        seen.append(event)

    resolver.add_listener(listener)
    resolver.start_game()
    resolver.remove_listener(listener)
    resolver.do_turn(WaitIntent())
    assert seen == [GameEvent.GAME_STARTED]


def test_failing_listener_does_not_break_the_turn():
    resolver = TurnResolver(seed=2)

    def boom(event, snap):
        raise RuntimeError("listener failure")

    resolver.add_listener(boom)
    resolver.start_game()
    snap = resolver.do_turn(WaitIntent())
    assert snap.state in (ResolverState.IDLE, ResolverState.GAME_OVER)


def test_second_player_never_spawns_on_an_occupied_cell(make_resolver, add_monster, scripted_rng):
    # Pool is (2,2), (3,2), (4,2); the primary and a monster stand on the first two
    rng = scripted_rng(ranges=[0])
    resolver = make_resolver(OPEN, rng=rng)
    _place(resolver, PlayerSlot.PRIMARY, 2, 2)
    add_monster(resolver, 0, 3, 2)

    snap = resolver.spawn_second_player()

    assert snap.secondary.pos == Point(4, 2)
    assert rng.range_calls == [1]
    assert set(resolver.pool) == {Point(2, 2), Point(3, 2)}


def test_second_player_spawn_fails_when_every_free_point_is_occupied(make_resolver, add_monster):
    resolver = make_resolver(OPEN)
    _place(resolver, PlayerSlot.PRIMARY, 2, 2)
    add_monster(resolver, 0, 3, 2)
    add_monster(resolver, 1, 4, 2)

    assert not resolver.can_spawn_second_player
    with pytest.raises(InvalidTransitionError):
        resolver.spawn_second_player()
    assert resolver.secondary is None
    assert len(resolver.pool) == 3


def test_dead_monster_does_not_block_a_spawn_point(make_resolver, add_monster, scripted_rng):
    resolver = make_resolver(OPEN, rng=scripted_rng(ranges=[1]))
    _place(resolver, PlayerSlot.PRIMARY, 2, 2)
    corpse = add_monster(resolver, 0, 3, 2)
    corpse.health = 0

    snap = resolver.spawn_second_player()

    assert snap.secondary.pos == Point(4, 2)


def test_player_fights_every_monster_on_the_cell_in_slot_order(make_resolver, add_monster, scripted_rng):
    rng = scripted_rng(ranges=[10, 1, 20, 2, 3, 4, 5, 6])
    resolver = make_resolver(CORRIDOR, rng=rng)
    player = _place(resolver, PlayerSlot.PRIMARY, 1, 1)
    first = add_monster(resolver, 0, 2, 1)
    second = add_monster(resolver, 1, 2, 1)

    resolver.do_turn(_move(PlayerSlot.PRIMARY, Direction.RIGHT))

    assert player.pos == Point(1, 1)
    # Two player-initiated exchanges, then each monster's own attack
    assert rng.range_calls == [50, 20, 50, 20, 20, 50, 20, 50]
    assert first.health == 50 - 10 - 4
    assert second.health == 50 - 20 - 6
    assert player.health == 400 - 1 - 2 - 3 - 5


def test_descent_moves_both_players_to_fresh_points(make_resolver):
    resolver = make_resolver(["#####", "#.>.#", "#####"], rng=RandomSource(8))
    first = _place(resolver, PlayerSlot.PRIMARY, 1, 1)
    second = _place(resolver, PlayerSlot.SECONDARY, 3, 1)
    second.change_health(50)

    resolver.do_turn(_move(PlayerSlot.PRIMARY, Direction.RIGHT))

    assert resolver.depth == 2
    assert resolver.primary is first
    assert resolver.secondary is second
    assert second.health == 200
    assert first.pos != second.pos
    for player in (first, second):
        assert player.pos in resolver.pool.taken
        assert player.pos not in resolver.pool
        assert is_spawn_point(resolver.map, player.x, player.y)
        assert player.previous is None
    monster_cells = {m.pos for m in resolver.monsters}
    assert len(monster_cells) == 2
    assert not monster_cells & {first.pos, second.pos}


def _placements(resolver):
    level = resolver.level
    cells = [level.stairs]
    if level.chest is not None:
        cells.append(level.chest)
    cells.extend(m.pos for m in resolver.monsters)
    cells.extend(p.pos for p in resolver.players())
    return cells


@pytest.mark.parametrize("seed", [0, 3, 11, 2024])
def test_no_coordinate_is_allocated_twice(seed):
    resolver = TurnResolver(seed=seed)
    resolver.start_game()
    resolver.spawn_second_player()

    cells = _placements(resolver)
    assert len(cells) == len(set(cells)) == len(resolver.pool.taken)
    assert not set(cells) & set(resolver.pool)
    assert resolver.map.tile_at(resolver.level.stairs) is TileType.STAIRS


def test_no_coordinate_is_allocated_twice_at_depth(make_resolver):
    resolver = make_resolver(["#####", "#.>.#", "#####"], rng=RandomSource(21), depth=39)
    _place(resolver, PlayerSlot.PRIMARY, 1, 1)
    _place(resolver, PlayerSlot.SECONDARY, 3, 1)

    resolver.do_turn(_move(PlayerSlot.PRIMARY, Direction.RIGHT))

    assert resolver.depth == 40
    cells = _placements(resolver)
    assert len(resolver.monsters) == 40
    assert len(cells) == len(set(cells))
    assert not set(cells) & set(resolver.pool)
