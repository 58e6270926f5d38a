"""Location context: place details, surroundings and visit history."""

import logging
from dataclasses import dataclass

from dm_context.config import LocationContextConfig
from dm_context.context.budget import render_sections
from dm_context.history.location import LocationHistory
from dm_context.state import GameStateSnapshot, LocationRelationship

logger = logging.getLogger(__name__)

INSUFFICIENT_INFORMATION = "Location Context: Insufficient information available."
FIRST_VISIT_PLACEHOLDER = "This is the first visit to this location."


@dataclass(frozen=True)
class NearbyLocation:
    """A neighbour in the location graph."""

    location_id: str
    name: str
    distance: str | None = None


def nearby_locations(snapshot: GameStateSnapshot, location_id: str) -> list[NearbyLocation]:
    """Neighbours of a location in the (undirected) location graph.

    An edge matches when location_id is either endpoint; the other endpoint
    is resolved to its display name. Endpoints missing from the snapshot
    are skipped.
    """
    neighbours: list[NearbyLocation] = []
    for relationship in snapshot.location_relationships:
        other_id = relationship.other_end(location_id)
        if other_id is None:
            continue
        other = snapshot.find_location(other_id)
        if other is None:
            logger.debug(f"Location {other_id} linked from {location_id} not in snapshot")
            continue
        neighbours.append(
            NearbyLocation(location_id=other.id, name=other.name, distance=relationship.distance)
        )
    return neighbours


def find_connection(
    snapshot: GameStateSnapshot, from_id: str, to_id: str
) -> LocationRelationship | None:
    """The edge joining two locations, in either direction."""
    for relationship in snapshot.location_relationships:
        if relationship.other_end(from_id) == to_id:
            return relationship
    return None


def build_location_context(
    snapshot: GameStateSnapshot | None,
    history: LocationHistory,
    config: LocationContextConfig | None = None,
    location_id: str | None = None,
) -> str:
    """Assemble context describing a location.

    Section order is fixed: location information, environmental
    conditions, nearby locations, NPCs present, visit history. The visit
    history section is always present.

    Args:
        snapshot: Current game state.
        history: This session's location history.
        config: Section toggles (the store's config if None).
        location_id: Location to describe (the current location if None).

    Returns:
        Context text, or a short explanation when the location is unknown.
    """
    if snapshot is None:
        return INSUFFICIENT_INFORMATION

    if location_id is None:
        if snapshot.current_location is None:
            return INSUFFICIENT_INFORMATION
        location_id = snapshot.current_location.id

    location = snapshot.find_location(location_id)
    if location is None:
        return f"Location Context: No information found for location ID {location_id}."

    config = config or history.config
    sections: list[tuple[str, str]] = []

    info = ["## Location Information", f"Name: {location.name}"]
    if location.description:
        info.append(f"Description: {location.description}")
    if location.type:
        info.append(f"Type: {location.type}")
    sections.append(("location_info", "\n".join(info)))

    sections.append(("environment", _format_environment(snapshot, config)))

    if config.include_nearby_locations:
        neighbours = nearby_locations(snapshot, location_id)
        if neighbours:
            lines = ["## Nearby Locations"]
            lines.extend(
                f"- {n.name} ({n.distance})" if n.distance else f"- {n.name}" for n in neighbours
            )
            sections.append(("nearby", "\n".join(lines)))

    if config.include_npc_details:
        npcs = snapshot.npcs_at(location_id)
        if npcs:
            lines = ["## NPCs Present"]
            lines.extend(f"- {npc.name}" for npc in npcs)
            sections.append(("npcs", "\n".join(lines)))

    sections.append(("visits", _format_visit_history(history, location_id, config)))

    return render_sections(sections, config.token_budget, separator="\n\n")


def build_transition_context(
    snapshot: GameStateSnapshot | None,
    history: LocationHistory,
    from_id: str,
    to_id: str,
) -> str:
    """Assemble context for travelling between two locations."""
    if snapshot is None:
        return "Location Transition: Insufficient information available."

    origin = snapshot.find_location(from_id)
    destination = snapshot.find_location(to_id)
    if origin is None or destination is None:
        return "Location Transition: One or both locations not found."

    lines = ["## Location Transition", f"From: {origin.name}", f"To: {destination.name}"]

    connection = find_connection(snapshot, from_id, to_id)
    if connection is not None:
        details: list[str] = []
        if connection.description:
            details.append(connection.description)
        if connection.travel_time:
            details.append(f"Travel Time: {connection.travel_time}")
        if connection.difficulty:
            details.append(f"Difficulty: {connection.difficulty}")
        if details:
            lines.append("\n## Connection Details")
            lines.extend(details)

    lines.append("\n## Destination History")
    visits = history.entries(to_id)
    if not visits:
        lines.append(FIRST_VISIT_PLACEHOLDER)
    else:
        lines.append(f"Previously visited: {len(visits)} times")
        if visits[-1].discoveries:
            lines.append("\nPrevious Discoveries:")
            lines.extend(f"- {d}" for d in visits[-1].discoveries)

    return "\n".join(lines)


def _format_environment(snapshot: GameStateSnapshot, config: LocationContextConfig) -> str:
    lines: list[str] = []
    if config.include_weather and snapshot.weather:
        lines.append(f"Weather: {snapshot.weather}")
    if config.include_time_of_day and snapshot.time_of_day:
        lines.append(f"Time of Day: {snapshot.time_of_day}")
    if not lines:
        return ""
    return "## Environmental Conditions\n" + "\n".join(lines)


def _format_visit_history(
    history: LocationHistory, location_id: str, config: LocationContextConfig
) -> str:
    visits = history.entries(location_id)
    if not visits:
        return f"## Visit History\n{FIRST_VISIT_PLACEHOLDER}"

    lines = ["## Visit History", f"Previously visited: {len(visits)} times"]
    if not config.include_visit_history:
        return "\n".join(lines)

    latest = visits[-1]
    for title, items in (
        ("Key Details", latest.additional_details),
        ("Player Actions", latest.player_actions),
        ("Discoveries", latest.discoveries),
        ("Environmental Changes", latest.environmental_changes),
    ):
        if items:
            lines.append(f"\n{title}:")
            lines.extend(f"- {item}" for item in items)

    if len(visits) > 1 and config.include_player_history:
        lines.append("\nPrior Visits:")
        for visit in reversed(visits[:-1]):
            visit_date = visit.timestamp.date().isoformat()
            if visit.player_actions:
                lines.append(f"- Visit on {visit_date}: {', '.join(visit.player_actions)}")
            else:
                lines.append(f"- Visited on {visit_date}")

    return "\n".join(lines)
