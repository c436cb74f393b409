"""
Person registry.

Builds the ordered participant list of a card: owner, then members, then
the device-local guests. Lookup failures for the owner or the members
degrade the list instead of failing it; each degradation is logged and
reported in ``ParticipantList.warnings``.
"""

import logging
import uuid
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, MutableMapping, Optional

from django.conf import settings
from django.db import DatabaseError, models

from apps.accounts.models import UNKNOWN_NAME, User
from apps.cards.models import CreditCard
from apps.cards.services import CardNotFoundError, get_card_members

from .exceptions import GuestNotFoundError, LedgerValidationError

logger = logging.getLogger(__name__)

GUEST_ID_PREFIX = 'guest-'


class PersonRole(models.TextChoices):
    OWNER = 'owner', 'Owner'
    MEMBER = 'member', 'Member'
    GUEST = 'guest', 'Guest'


@dataclass(frozen=True)
class Person:
    id: str
    name: str
    role: str

    @classmethod
    def owner(cls, id, name):
        return cls(id=str(id), name=name, role=PersonRole.OWNER)

    @classmethod
    def member(cls, id, name):
        return cls(id=str(id), name=name, role=PersonRole.MEMBER)

    @classmethod
    def guest(cls, id, name):
        return cls(id=str(id), name=name, role=PersonRole.GUEST)


@dataclass
class ParticipantList:
    people: List[Person] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def __iter__(self):
        return iter(self.people)

    def __len__(self):
        return len(self.people)

    def by_id(self) -> Dict[str, Person]:
        return {person.id: person for person in self.people}


class GuestStore:
    """
    Device-local guest list.

    Wraps any mutable mapping (``request.session`` in the API) and keeps
    ``{card_id: [{"id": ..., "name": ...}]}`` under a single key. Guests are
    never written to the database.
    """

    def __init__(self, backing: MutableMapping, key: Optional[str] = None):
        self._backing = backing
        self._key = key or settings.GUEST_SESSION_KEY

    def _all(self) -> dict:
        return dict(self._backing.get(self._key) or {})

    def _save(self, data: dict) -> None:
        # Reassign so session backends notice the change
        self._backing[self._key] = data

    def list(self, card_id) -> List[Person]:
        entries = self._all().get(str(card_id), [])
        return [Person.guest(entry['id'], entry['name']) for entry in entries]

    def add(self, card_id, name: str, taken_names: Iterable[str] = ()) -> Person:
        """
        Add a guest to a card's list.

        ``taken_names`` are the names of the card's owner and members; a guest
        may not reuse one of them or another guest's name.

        Raises:
            LedgerValidationError: If the name is blank or already taken
        """
        name = (name or '').strip()
        if not name:
            raise LedgerValidationError("Guest name is required")

        data = self._all()
        entries = list(data.get(str(card_id), []))
        if name in set(taken_names) or any(entry['name'] == name for entry in entries):
            raise LedgerValidationError(f"'{name}' is already a participant on this card")

        person = Person.guest(f"{GUEST_ID_PREFIX}{uuid.uuid4().hex}", name)
        entries.append({'id': person.id, 'name': person.name})
        data[str(card_id)] = entries
        self._save(data)
        return person

    def remove(self, card_id, guest_id: str) -> None:
        """
        Raises:
            GuestNotFoundError: If the guest is not in the list
        """
        data = self._all()
        entries = data.get(str(card_id), [])
        remaining = [entry for entry in entries if entry['id'] != guest_id]
        if len(remaining) == len(entries):
            raise GuestNotFoundError(f"Guest {guest_id} not found")

        if remaining:
            data[str(card_id)] = remaining
        else:
            data.pop(str(card_id), None)
        self._save(data)


def resolve_participants(card_id, guest_store: Optional[GuestStore] = None) -> ParticipantList:
    """
    Resolve everyone who can appear in a card's ledger.

    Order is owner, members (deduplicated by id), then guests. Owner and
    member identities win over guests: a guest whose id or name matches one
    of them is dropped, as is a second guest with an already-listed name.
    If the card itself cannot be read the list degrades to the guests and a
    warning.

    Raises:
        CardNotFoundError: If card doesn't exist
    """
    result = ParticipantList()
    seen_ids = set()

    try:
        card = CreditCard.objects.get(id=card_id)
    except CreditCard.DoesNotExist:
        raise CardNotFoundError(f"Card with ID {card_id} not found")
    except DatabaseError as e:
        logger.warning("Card lookup failed for card %s: %s", card_id, e)
        card = None
        result.warnings.append("Could not load the card owner and members.")

    if card is not None:
        _add_owner_and_members(card, result, seen_ids)

    if guest_store is not None:
        taken_names = {person.name for person in result.people}
        for guest in guest_store.list(card_id):
            if guest.id in seen_ids or guest.name in taken_names:
                logger.info("Skipping guest %s on card %s: identity already listed", guest.id, card_id)
                continue
            seen_ids.add(guest.id)
            taken_names.add(guest.name)
            result.people.append(guest)

    return result


def _add_owner_and_members(card, result: ParticipantList, seen_ids: set) -> None:
    owner_id = str(card.user_id)

    try:
        owner_name = User.objects.get(id=card.user_id).get_display_name()
    except (User.DoesNotExist, DatabaseError) as e:
        logger.warning("Owner lookup failed for card %s: %s", card.id, e)
        owner_name = UNKNOWN_NAME
        result.warnings.append("Could not load the card owner's profile.")
    result.people.append(Person.owner(owner_id, owner_name))
    seen_ids.add(owner_id)

    try:
        entries = get_card_members(card_id=card.id)
    except DatabaseError as e:
        logger.warning("Member lookup failed for card %s: %s", card.id, e)
        entries = []
        result.warnings.append("Could not load card members.")

    for entry in entries:
        member_id = str(entry.user.id)
        if member_id in seen_ids:
            continue
        seen_ids.add(member_id)
        result.people.append(Person.member(member_id, entry.user.get_display_name()))
