"""Checker for service-locator registrations that are never resolved."""

from __future__ import annotations

from typing import List, Optional, Set, Tuple

from .base import CheckContext, Checker
from ..models import CheckResult, LocatorRegistration, UnusedItem


class UnusedLocatorChecker(Checker):
    """Reports ``(type, tag)`` registrations without a matching resolution.

    The instance tag is part of the identity: a registration tagged
    ``"primary"`` is not satisfied by an untagged resolution of the same type.
    """

    name = "locator"
    title = "Unused locator registrations"

    def check(self, context: CheckContext) -> CheckResult:
        calls = context.evidence.locator_calls()
        registrations = [
            LocatorRegistration(
                type_name=call.type_name,
                tag=call.tag,
                path=call.path,
                line=call.line,
            )
            for call in calls
            if call.is_registration
        ]
        resolved: Set[Tuple[str, Optional[str]]] = {
            call.identity for call in calls if call.is_resolution
        }
        # Generic calls through other receivers (wrappers, aliases) count as evidence.
        mentioned: Set[Tuple[str, Optional[str]]] = {
            call.identity for call in calls if not call.on_locator
        }

        items: List[UnusedItem] = []
        for registration in registrations:
            if registration.identity in resolved or registration.identity in mentioned:
                continue
            label = registration.type_name
            if registration.tag is not None:
                label = f"{label} [{registration.tag}]"
            items.append(
                UnusedItem(
                    checker=self.name,
                    name=label,
                    path=registration.path,
                    line=registration.line,
                    detail="registered but never resolved",
                )
            )
        return CheckResult(checker=self.name, title=self.title, items=items)
