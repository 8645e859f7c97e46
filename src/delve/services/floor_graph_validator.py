"""Static floor graph validation utilities."""
from __future__ import annotations

from collections import deque
from dataclasses import dataclass

from delve.core.types import OPPOSITE_DIRECTION
from delve.domain.floor import Floor

Severity = str


@dataclass(frozen=True, slots=True)
class Issue:
    severity: Severity
    code: str
    message: str
    context: dict[str, str]


def format_issue(issue: Issue) -> str:
    context = " ".join(f"{key}={value}" for key, value in issue.context.items())
    suffix = f" ({context})" if context else ""
    return f"[{issue.severity}] {issue.code}: {issue.message}{suffix}"


def validate_floor_graph(floor: Floor) -> list[Issue]:
    """Check the structural invariants every generated floor must satisfy."""
    issues: list[Issue] = []
    level = str(floor.level)
    room_ids: set[str] = set()
    for room in floor.rooms:
        if room.id in room_ids:
            issues.append(
                Issue(
                    severity="ERROR",
                    code="DUPLICATE_ROOM_ID",
                    message="Duplicate room id detected.",
                    context={"floor": level, "room_id": room.id},
                )
            )
        room_ids.add(room.id)

    if floor.entrance_room_id not in room_ids:
        issues.append(
            Issue(
                severity="ERROR",
                code="MISSING_ENTRANCE",
                message="Entrance references a missing room.",
                context={"floor": level, "room_id": floor.entrance_room_id},
            )
        )
        return issues

    _validate_exits(floor, room_ids, issues)
    _validate_reachability(floor, issues)
    _validate_unique_markers(floor, issues)
    return issues


def _validate_exits(floor: Floor, room_ids: set[str], issues: list[Issue]) -> None:
    level = str(floor.level)
    for room in floor.rooms:
        for direction, room_exit in room.exits.items():
            target = floor.find_room(room_exit.target_room_id)
            if room_exit.target_room_id not in room_ids or target is None:
                issues.append(
                    Issue(
                        severity="ERROR",
                        code="DANGLING_EXIT",
                        message="Exit points to a room that does not exist.",
                        context={
                            "floor": level,
                            "room_id": room.id,
                            "direction": direction,
                            "target_id": room_exit.target_room_id,
                        },
                    )
                )
                continue
            back = target.exits.get(OPPOSITE_DIRECTION[direction])
            if back is None or back.target_room_id != room.id:
                issues.append(
                    Issue(
                        severity="ERROR",
                        code="NON_RECIPROCAL_EXIT",
                        message="Exit has no matching return exit.",
                        context={
                            "floor": level,
                            "room_id": room.id,
                            "direction": direction,
                            "target_id": target.id,
                        },
                    )
                )


def _validate_reachability(floor: Floor, issues: list[Issue]) -> None:
    reachable = {floor.entrance_room_id}
    queue = deque([floor.entrance_room_id])
    while queue:
        room = floor.find_room(queue.popleft())
        if room is None:
            continue
        for room_exit in room.exits.values():
            if room_exit.target_room_id not in reachable:
                reachable.add(room_exit.target_room_id)
                queue.append(room_exit.target_room_id)
    for room in floor.rooms:
        if room.id not in reachable:
            issues.append(
                Issue(
                    severity="ERROR",
                    code="UNREACHABLE_ROOM",
                    message="Room cannot be reached from the entrance.",
                    context={"floor": str(floor.level), "room_id": room.id},
                )
            )


def _validate_unique_markers(floor: Floor, issues: list[Issue]) -> None:
    level = str(floor.level)
    boss_rooms = [room.id for room in floor.rooms if room.is_boss_room]
    if len(boss_rooms) > 1:
        issues.append(
            Issue(
                severity="ERROR",
                code="MULTIPLE_BOSS_ROOMS",
                message="A floor may hold at most one boss room.",
                context={"floor": level, "room_ids": ",".join(boss_rooms)},
            )
        )
    stairs = [room.id for room in floor.rooms if room.has_stairs_down]
    if len(stairs) > 1:
        issues.append(
            Issue(
                severity="ERROR",
                code="MULTIPLE_STAIRS",
                message="A floor may hold at most one staircase down.",
                context={"floor": level, "room_ids": ",".join(stairs)},
            )
        )
    if not stairs:
        issues.append(
            Issue(
                severity="WARN",
                code="NO_STAIRS",
                message="Floor has no staircase down.",
                context={"floor": level},
            )
        )
    entrance = floor.find_room(floor.entrance_room_id)
    if entrance is not None and entrance.has_monsters:
        issues.append(
            Issue(
                severity="WARN",
                code="CONTESTED_ENTRANCE",
                message="Entrance room holds monsters.",
                context={"floor": level},
            )
        )
