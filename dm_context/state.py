"""Read-only game-state snapshot models.

The game engine hands one ``GameStateSnapshot`` to each call. Keyed
collections (locations, NPCs, combatants) arrive already normalised to
ordered ``dict`` containers keyed by id; the core never mutates or
retains a snapshot beyond the call that received it.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ActorClass(str, Enum):
    """Which side an actor in combat belongs to."""

    PLAYER = "player"
    NPC = "npc"
    ENEMY = "enemy"


class _Snapshot(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class PlayerCharacter(_Snapshot):
    """The player's character sheet summary."""

    id: str
    name: str
    race: str = ""
    classes: list[str] = Field(default_factory=list)
    level: int = 1
    hit_points_current: int = 0
    hit_points_max: int = 0
    traits: list[str] = Field(default_factory=list, description="Personality traits, ideals, flaws")


class LocationInfo(_Snapshot):
    """A place in the world."""

    id: str
    name: str
    description: str = ""
    type: str = ""


class LocationRelationship(_Snapshot):
    """An undirected edge in the location graph."""

    from_id: str = Field(alias="from")
    to_id: str = Field(alias="to")
    description: str | None = None
    distance: str | None = None
    travel_time: str | None = None
    difficulty: str | None = None

    def other_end(self, location_id: str) -> str | None:
        """Return the opposite endpoint, or None if location_id is not on this edge."""
        if self.from_id == location_id:
            return self.to_id
        if self.to_id == location_id:
            return self.from_id
        return None


class NPCInfo(_Snapshot):
    """A non-player character."""

    id: str
    name: str
    location_id: str | None = None
    race: str = ""
    occupation: str = ""
    is_hostile: bool = False
    traits: list[str] = Field(default_factory=list)


class QuestInfo(_Snapshot):
    """An active objective."""

    id: str
    title: str
    description: str = ""
    giver: str = ""
    active: bool = True


class Combatant(_Snapshot):
    """A participant in the current fight."""

    id: str
    name: str
    is_player: bool = False
    hp_current: int = 0
    hp_max: int = 0

    @property
    def health_status(self) -> str:
        """Coarse health band for narration."""
        if self.hp_max <= 0:
            return "Unknown"
        percentage = self.hp_current * 100 // self.hp_max
        if percentage > 75:
            return "Healthy"
        if percentage > 50:
            return "Injured"
        if percentage > 25:
            return "Badly wounded"
        return "Near death"


class CombatAction(_Snapshot):
    """The action currently being narrated."""

    actor_id: str
    actor_name: str
    actor_is_player: bool = False
    action_type: str
    target_names: list[str] = Field(default_factory=list)
    details: str = ""


class CombatState(_Snapshot):
    """Combat participants and turn order position."""

    round: int = 1
    turn: int = 1
    combatants: dict[str, Combatant] = Field(default_factory=dict)
    current_action: CombatAction | None = None


class GameStateSnapshot(_Snapshot):
    """Everything the core may read about the game for one call."""

    player: PlayerCharacter | None = None
    current_location: LocationInfo | None = None
    locations: dict[str, LocationInfo] = Field(default_factory=dict)
    location_relationships: list[LocationRelationship] = Field(default_factory=list)
    npcs: dict[str, NPCInfo] = Field(default_factory=dict)
    active_quests: list[QuestInfo] = Field(default_factory=list)
    combat: CombatState | None = None
    time_of_day: str | None = None
    weather: str | None = None
    world_facts: dict[str, str] = Field(default_factory=dict)

    def find_location(self, location_id: str) -> LocationInfo | None:
        """Look up a location, checking the current location first."""
        if self.current_location is not None and self.current_location.id == location_id:
            return self.current_location
        return self.locations.get(location_id)

    def npcs_at(self, location_id: str | None) -> list[NPCInfo]:
        """NPCs whose recorded location id equals location_id exactly."""
        if location_id is None:
            return []
        return [npc for npc in self.npcs.values() if npc.location_id == location_id]

    def npcs_present(self) -> list[NPCInfo]:
        """NPCs at the current location."""
        if self.current_location is None:
            return []
        return self.npcs_at(self.current_location.id)

    def actor_class(self, actor_id: str) -> ActorClass:
        """Classify a combat actor; unknown ids are treated as enemies.

        The player is recognised by the player sheet, or failing that by
        the combat state's own player flags.
        """
        if self.player is not None and actor_id == self.player.id:
            return ActorClass.PLAYER
        if self.combat is not None:
            combatant = self.combat.combatants.get(actor_id)
            if combatant is not None and combatant.is_player:
                return ActorClass.PLAYER
            action = self.combat.current_action
            if action is not None and action.actor_id == actor_id and action.actor_is_player:
                return ActorClass.PLAYER
        npc = self.npcs.get(actor_id)
        if npc is not None:
            return ActorClass.ENEMY if npc.is_hostile else ActorClass.NPC
        return ActorClass.ENEMY
