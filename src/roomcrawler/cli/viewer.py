from __future__ import annotations

from roomcrawler.sim.navigation import NavigationEngine

PROMPT = "WHERE TO? >"
UNRECOGNIZED_MESSAGE = "HUH? I DON'T UNDERSTAND THAT ROOM. TRY AGAIN."


class RoomViewer:
    """Read-only text projection of a navigation session."""

    def render_turn(self, engine: NavigationEngine) -> str:
        room = engine.current_room
        return "\n".join(
            [
                f"CURRENT LOCATION: {room.name}",
                f"POSSIBLE CONNECTIONS: {', '.join(engine.available_connections())}.",
            ]
        )

    def render_unrecognized(self) -> str:
        return f"\n{UNRECOGNIZED_MESSAGE}\n"

    def render_time(self, timestamp: str) -> str:
        return f"\n{timestamp}\n"

    def render_victory(self, engine: NavigationEngine) -> str:
        lines = [
            "YOU HAVE FOUND THE END ROOM. CONGRATULATIONS!",
            f"YOU TOOK {engine.step_count} STEPS. YOUR PATH TO VICTORY WAS:",
        ]
        lines.extend(engine.path_history)
        return "\n".join(lines)
