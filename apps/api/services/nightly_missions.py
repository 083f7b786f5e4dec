"""
Nightly Missions

Three small, deterministic actions for tonight:
    1. the bedtime goal (when the profile has one)
    2. one mission per reported sleep challenge, in the profile's order
    3. general tips to fill the remaining slots
"""
from dataclasses import dataclass, asdict
from typing import Dict, List, Optional

MAX_MISSIONS = 3


@dataclass(frozen=True)
class Mission:
    id: str
    text: str
    icon: str  # icon name understood by the client

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


CHALLENGE_MISSIONS: Dict[str, Mission] = {
    "phone": Mission("phone", "Put your phone away 30 min before bed", "phone"),
    "stress": Mission("stress", "Do 5 minutes of deep breathing tonight", "wind"),
    "caffeine": Mission("caffeine", "No caffeine after 3 PM today", "coffee"),
    "irregular": Mission("irregular", "Stick to your sleep schedule tonight", "refresh"),
    "noise": Mission("noise", "Prepare a quiet sleep environment", "volume"),
    "naps": Mission("naps", "Skip any naps today (or keep under 20 min)", "moon"),
}

GENERAL_MISSIONS: List[Mission] = [
    Mission("water", "Drink a glass of water before bed", "droplet"),
    Mission("screen", "Dim your screen 1 hour before sleep", "sun"),
    Mission("journal", "Write down one thing you're grateful for", "edit"),
]


def generate_missions(profile=None) -> List[Mission]:
    missions: List[Mission] = []
    bedtime_goal: Optional[str] = getattr(profile, "bedtime_goal", None) if profile else None
    challenges = (getattr(profile, "sleep_challenges", None) or []) if profile else []

    if bedtime_goal:
        missions.append(Mission("bedtime", f"Get in bed by {bedtime_goal} tonight", "clock"))

    def _has(mission_id: str) -> bool:
        return any(m.id == mission_id for m in missions)

    for challenge in challenges:
        if len(missions) >= MAX_MISSIONS:
            break
        mission = CHALLENGE_MISSIONS.get(challenge)
        if mission is not None and not _has(mission.id):
            missions.append(mission)

    for mission in GENERAL_MISSIONS:
        if len(missions) >= MAX_MISSIONS:
            break
        if not _has(mission.id):
            missions.append(mission)

    return missions[:MAX_MISSIONS]
