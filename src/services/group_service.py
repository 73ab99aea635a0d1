"""Group service - named pin groups"""

import uuid
from typing import Dict, Iterable, List, Optional

from models.domain.pin import PinGroup
from models.errors import NotFoundError, ValidationError
from services.pin_registry import PinRegistry
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.GROUP)


class GroupService:
    """
    Owns the group collection.

    A pin belongs to at most one group. The pin side holds only the group
    id; this service keeps both sides in step.
    """

    def __init__(self, registry: PinRegistry):
        self.registry = registry
        self._groups: Dict[str, PinGroup] = {}

    def get(self, group_id: str) -> PinGroup:
        group = self._groups.get(group_id)
        if group is None:
            raise NotFoundError("Group", group_id)
        return group

    def get_all(self) -> List[PinGroup]:
        return list(self._groups.values())

    def create_group(self, name: str, color: str, pin_ids: Iterable[int]) -> PinGroup:
        """
        Create a group from the given pins.

        Unknown pin ids are skipped. Raises ValidationError when the name is
        empty or no known pin is selected.
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Group name is required")

        requested = list(dict.fromkeys(pin_ids or []))
        members = [pin_id for pin_id in requested if pin_id in self.registry]
        if not members:
            raise ValidationError("Select at least one pin for the group", details={"pin_ids": requested})

        skipped = [pin_id for pin_id in requested if pin_id not in members]
        if skipped:
            log.warn("Skipping unknown pins for group", group=name, pins=str(skipped))

        group = PinGroup(id=f"group-{uuid.uuid4().hex[:8]}", name=name, color=color or "blue", pins=set(members))

        # Pins leave whatever group they were in before
        for other in self._groups.values():
            other.pins.difference_update(group.pins)

        self._groups[group.id] = group
        self.registry.assign_group(members, group.id)
        log.info(f"Group created: {name}", id=group.id, pins=len(members))
        return group

    def delete_group(self, group_id: str) -> bool:
        """Remove the group and its references; False if it did not exist"""
        group = self._groups.pop(group_id, None)
        if group is None:
            log.debug(f"Delete ignored, unknown group {group_id}")
            return False

        self.registry.clear_group(group_id)
        log.info(f"Group deleted: {group.name}", id=group_id)
        return True

    def resync(self) -> None:
        """
        Rebuild member sets from the pins after the pin set was replaced
        (preset load, import). References to unknown groups are dropped.
        """
        for group in self._groups.values():
            group.pins.clear()

        orphans = []
        for pin in self.registry.snapshot():
            if pin.group is None:
                continue
            group: Optional[PinGroup] = self._groups.get(pin.group)
            if group is None:
                orphans.append(pin.id)
            else:
                group.pins.add(pin.id)

        if orphans:
            self.registry.assign_group(orphans, None)
            log.debug("Dropped references to unknown groups", pins=str(orphans))
