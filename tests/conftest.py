"""Core test fixtures: game-state snapshots and fresh history stores."""

import pytest

from dm_context.config import (
    CombatContextConfig,
    LocationContextConfig,
    NarrativeContextConfig,
    get_settings,
)
from dm_context.history import CombatHistory, LocationHistory, NarrativeHistory
from dm_context.state import (
    CombatAction,
    Combatant,
    CombatState,
    GameStateSnapshot,
    LocationInfo,
    LocationRelationship,
    NPCInfo,
    PlayerCharacter,
    QuestInfo,
)


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Settings are cached per process; reset between tests."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def player() -> PlayerCharacter:
    """A level 3 human fighter."""
    return PlayerCharacter(
        id="player-1",
        name="Aric",
        race="Human",
        classes=["Fighter"],
        level=3,
        hit_points_current=24,
        hit_points_max=28,
        traits=["brave", "honest"],
    )


@pytest.fixture
def town() -> LocationInfo:
    return LocationInfo(
        id="town-1",
        name="Millbrook",
        description="A quiet farming town on the river.",
        type="town",
    )


@pytest.fixture
def tavern() -> LocationInfo:
    return LocationInfo(
        id="tavern-1",
        name="The Rusty Anchor",
        description="A smoky tavern full of sailors.",
        type="tavern",
    )


@pytest.fixture
def forest() -> LocationInfo:
    return LocationInfo(id="forest-1", name="Whispering Woods", type="wilderness")


@pytest.fixture
def snapshot(
    player: PlayerCharacter,
    town: LocationInfo,
    tavern: LocationInfo,
    forest: LocationInfo,
) -> GameStateSnapshot:
    """Player standing in Millbrook with one NPC around and one quest."""
    return GameStateSnapshot(
        player=player,
        current_location=town,
        locations={loc.id: loc for loc in (town, tavern, forest)},
        location_relationships=[
            LocationRelationship(
                **{"from": "town-1", "to": "tavern-1"},
                distance="a short walk",
                description="A cobbled lane",
                travel_time="5 minutes",
            ),
            LocationRelationship(**{"from": "forest-1", "to": "town-1"}, distance="2 miles"),
        ],
        npcs={
            "npc-1": NPCInfo(
                id="npc-1",
                name="Mira Thornwood",
                location_id="town-1",
                occupation="herbalist",
                traits=["loyal"],
            ),
            "npc-2": NPCInfo(id="npc-2", name="Old Tom", location_id="tavern-1"),
        },
        active_quests=[
            QuestInfo(
                id="quest-1",
                title="Missing Cattle",
                description="Find out what is taking the cattle from the northern pastures.",
            )
        ],
        time_of_day="evening",
        weather="light rain",
        world_facts={"river": "The river is frozen"},
    )


@pytest.fixture
def goblin() -> NPCInfo:
    return NPCInfo(id="goblin-1", name="Goblin", location_id="forest-1", is_hostile=True)


@pytest.fixture
def combat_snapshot(snapshot: GameStateSnapshot, goblin: NPCInfo) -> GameStateSnapshot:
    """The same world with a fight under way against a goblin."""
    combat = CombatState(
        round=2,
        turn=1,
        combatants={
            "player-1": Combatant(
                id="player-1", name="Aric", is_player=True, hp_current=24, hp_max=28
            ),
            "goblin-1": Combatant(id="goblin-1", name="Goblin", hp_current=2, hp_max=7),
        },
        current_action=CombatAction(
            actor_id="player-1",
            actor_name="Aric",
            actor_is_player=True,
            action_type="attack",
            target_names=["Goblin"],
            details="Longsword swing",
        ),
    )
    npcs = dict(snapshot.npcs)
    npcs[goblin.id] = goblin
    return snapshot.model_copy(update={"combat": combat, "npcs": npcs})


@pytest.fixture
def narrative_history() -> NarrativeHistory:
    return NarrativeHistory(NarrativeContextConfig())


@pytest.fixture
def location_history() -> LocationHistory:
    return LocationHistory(LocationContextConfig())


@pytest.fixture
def combat_history() -> CombatHistory:
    return CombatHistory(CombatContextConfig())
