# =============================================================================
# classpoll_core/services/mutation_engine.py
# Optimistic create / update / delete / vote with compensation on failure
# =============================================================================
"""
Every write follows the same contract:

1. compute the new local value (new ids are random UUIDs)
2. apply it to ``AppState`` immediately
3. send the matching Supabase call
4. on failure, compensate locally and queue a dismissible error message

Compensation depends on the kind of write:

    create  -> remove the item that was just inserted locally
    update  -> restore the collection snapshot taken before the change
    delete  -> restore the collection snapshot taken before the change
    vote    -> reload every collection from Supabase

A vote changes the ledger and the derived counts together; rebuilding a
consistent pair by hand is avoided by asking the server for both again.

Usage:
    engine = MutationEngine(state, store, reload=loader.load)
    result = engine.vote_poll(poll_id, option_id)
    if not result:
        ...  # state already compensated, message already queued
"""

from __future__ import annotations
from datetime import datetime
from typing import Callable, Dict, List, Optional, Sequence

from classpoll_core.auth.passwords import hash_password, is_hashed
from classpoll_core.config import (
    DEFAULT_POLL_LIFETIME,
    DEFAULT_RESET_PASSWORD,
    PG_FOREIGN_KEY_VIOLATION,
    SETTINGS_ROW_ID,
)
from classpoll_core.data.models import (
    Announcement,
    ClassGroup,
    Exam,
    Poll,
    PollOption,
    Resource,
    SchoolSettings,
    User,
    UserRole,
    copy_entity,
)
from classpoll_core.data.supabase_client import RemoteStore
from classpoll_core.data.utils import blank_to_none, generate_id, utc_now
from classpoll_core.errors import MutationError, ReferentialIntegrityError, RemoteStoreError
from classpoll_core.state.app_state import AppState
from .base_service import BaseService, ServiceResult


NOT_LOGGED_IN = "Aucun utilisateur connecté"
FOREIGN_KEY_HINT = (
    "Impossible de supprimer : Vous devez exécuter le script SQL 'Cascade' dans "
    "Supabase pour autoriser la suppression d'un utilisateur ayant créé du contenu."
)


def new_poll_options(texts: Sequence[str]) -> List[PollOption]:
    """Options for a new poll; blank entries are dropped."""
    return [PollOption(id=generate_id(), text=text.strip(), votes=0)
            for text in texts if text.strip()]


def merge_poll_options(existing: Sequence[PollOption], texts: Sequence[str]) -> List[PollOption]:
    """
    Apply edited option texts to a poll, matching by position so the votes
    of surviving options are kept. Extra texts become new options; options
    past the end of ``texts`` are dropped.
    """
    merged = []
    for idx, text in enumerate(t.strip() for t in texts if t.strip()):
        if idx < len(existing):
            merged.append(PollOption(id=existing[idx].id, text=text, votes=existing[idx].votes))
        else:
            merged.append(PollOption(id=generate_id(), text=text, votes=0))
    return merged


def apply_vote(poll: Poll, user_id: str, option_id: str) -> Optional[Poll]:
    """
    Move ``user_id``'s single vote to ``option_id``.

    Returns:
        The updated poll, or None when the user already selected that option.
    """
    previous = poll.user_votes.get(user_id)
    if previous == option_id:
        return None

    user_votes = dict(poll.user_votes)
    user_votes[user_id] = option_id

    options = []
    for option in poll.options:
        votes = option.votes
        if option.id == previous:
            votes = max(0, votes - 1)
        if option.id == option_id:
            votes += 1
        options.append(PollOption(id=option.id, text=option.text, votes=votes))

    return copy_entity(poll, user_votes=user_votes, options=options)


def is_foreign_key_violation(error: RemoteStoreError) -> bool:
    return (
        error.db_code == PG_FOREIGN_KEY_VIOLATION
        or "foreign key constraint" in (error.message or "")
    )


class MutationEngine(BaseService):
    """
    The only writer of ``AppState`` after the initial load.

    Args:
        state: the local cache to mutate
        store: remote tables
        reload: full reload of every collection, used to recover from a
            failed vote or user deletion
        clock: returns "now" (aware UTC); injectable for tests
    """

    def __init__(
        self,
        state: AppState,
        store: RemoteStore,
        reload: Optional[Callable[[], ServiceResult]] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        super().__init__()
        self.state = state
        self.store = store
        self.reload = reload
        self.clock = clock or utc_now

    # =========================================================================
    # GENERIC OPTIMISTIC OPERATIONS
    # =========================================================================

    def _report(self, label: str, error: RemoteStoreError) -> ServiceResult:
        text = f"{label}: {error.message or 'Erreur inconnue'}"
        self.state.notify("error", text)
        return ServiceResult.from_exception(
            MutationError(text, entity=error.details.get("table"),
                          action=error.details.get("operation"), details=dict(error.details))
        )

    def _full_reload(self) -> None:
        if self.reload is None:
            self.logger.warning("No reload configured; local state may be stale")
            return
        self.logger.info("Reloading all collections to resynchronize")
        self.reload()

    def _create(self, collection: str, table: str, item, record: Dict, label: str,
                prepend: bool = False) -> ServiceResult:
        items = getattr(self.state, collection)
        setattr(self.state, collection, [item] + items if prepend else items + [item])

        result = self.store.table(table).insert(record)
        if result.ok:
            self.logger.info(f"Created {table}/{item.id}")
            return ServiceResult.ok(item)

        setattr(self.state, collection,
                [x for x in getattr(self.state, collection) if x.id != item.id])
        self.logger.warning(f"Rolled back insert of {table}/{item.id}")
        return self._report(label, result.error)

    def _update(self, collection: str, table: str, item, record: Dict, label: str) -> ServiceResult:
        snapshot = self.state.snapshot(collection)
        setattr(self.state, collection,
                [item if x.id == item.id else x for x in snapshot])

        result = self.store.table(table).update({"id": item.id}, record)
        if result.ok:
            self.logger.info(f"Updated {table}/{item.id}")
            return ServiceResult.ok(item)

        self.state.restore(collection, snapshot)
        self.logger.warning(f"Rolled back update of {table}/{item.id}")
        return self._report(label, result.error)

    def _delete(self, collection: str, table: str, item_id: str, label: str) -> ServiceResult:
        snapshot = self.state.snapshot(collection)
        setattr(self.state, collection, [x for x in snapshot if x.id != item_id])

        result = self.store.table(table).delete({"id": item_id})
        if result.ok:
            self.logger.info(f"Deleted {table}/{item_id}")
            return ServiceResult.ok(item_id)

        self.state.restore(collection, snapshot)
        self.logger.warning(f"Rolled back delete of {table}/{item_id}")
        return self._report(label, result.error)

    def _require_user(self) -> Optional[User]:
        return self.state.current_user

    def _missing(self, collection: str, item_id: str) -> ServiceResult:
        self.logger.warning(f"{collection}/{item_id} is not in the local cache")
        return ServiceResult.fail(f"Élément introuvable: {item_id}", error_code="NOT_FOUND")

    # =========================================================================
    # ANNOUNCEMENTS
    # =========================================================================

    def add_announcement(self, title: str, subject: str, date: datetime,
                         is_urgent: bool = False, meet_link: Optional[str] = None,
                         target_class: Optional[str] = None) -> ServiceResult:
        user = self._require_user()
        if user is None:
            return ServiceResult.fail(NOT_LOGGED_IN, error_code="NO_USER")

        ann = Announcement(
            id=generate_id(),
            title=title,
            subject=subject,
            date=date,
            is_urgent=is_urgent,
            meet_link=blank_to_none(meet_link),
            target_class=blank_to_none(target_class),
            author_id=user.id,
            author_name=user.name,
        )
        return self._create("announcements", "announcements", ann, ann.to_record(),
                            "Erreur lors de la publication", prepend=True)

    def update_announcement(self, updated: Announcement) -> ServiceResult:
        existing = self.state.find("announcements", updated.id)
        if existing is None:
            return self._missing("announcements", updated.id)
        # Author is fixed at creation
        ann = copy_entity(updated, author_id=existing.author_id, author_name=existing.author_name)
        return self._update("announcements", "announcements", ann, ann.to_update_record(),
                            "Erreur lors de la mise à jour")

    def delete_announcement(self, ann_id: str) -> ServiceResult:
        return self._delete("announcements", "announcements", ann_id,
                            "Impossible de supprimer l'annonce. Détails")

    # =========================================================================
    # EXAMS
    # =========================================================================

    def add_exam(self, subject: str, date: datetime, start_time: str, duration_minutes: int,
                 room: str, notes: Optional[str] = None,
                 target_class: Optional[str] = None) -> ServiceResult:
        user = self._require_user()
        if user is None:
            return ServiceResult.fail(NOT_LOGGED_IN, error_code="NO_USER")

        exam = Exam(
            id=generate_id(),
            subject=subject,
            date=date,
            start_time=start_time,
            duration_minutes=int(duration_minutes),
            room=room,
            notes=blank_to_none(notes),
            target_class=blank_to_none(target_class),
            created_by_id=user.id,
        )
        return self._create("exams", "exams", exam, exam.to_record(),
                            "Erreur lors de l'ajout de l'examen")

    def update_exam(self, exam: Exam) -> ServiceResult:
        if self.state.find("exams", exam.id) is None:
            return self._missing("exams", exam.id)
        return self._update("exams", "exams", exam, exam.to_update_record(),
                            "Erreur lors de la mise à jour de l'examen")

    def delete_exam(self, exam_id: str) -> ServiceResult:
        return self._delete("exams", "exams", exam_id,
                            "Impossible de supprimer l'examen. Détails")

    # =========================================================================
    # POLLS
    # =========================================================================

    def add_poll(self, title: str, option_texts: Sequence[str], is_anonymous: bool = False,
                 target_class: Optional[str] = None,
                 expires_at: Optional[datetime] = None) -> ServiceResult:
        user = self._require_user()
        if user is None:
            return ServiceResult.fail(NOT_LOGGED_IN, error_code="NO_USER")

        now = self.clock()
        poll = Poll(
            id=generate_id(),
            title=title,
            options=new_poll_options(option_texts),
            created_at=now,
            expires_at=expires_at or now + DEFAULT_POLL_LIFETIME,
            is_anonymous=is_anonymous,
            target_class=blank_to_none(target_class),
            created_by_id=user.id,
            user_votes={},
        )
        return self._create("polls", "polls", poll, poll.to_record(),
                            "Erreur lors de la création du sondage", prepend=True)

    def update_poll(self, updated: Poll) -> ServiceResult:
        existing = self.state.find("polls", updated.id)
        if existing is None:
            return self._missing("polls", updated.id)

        # The ledger belongs to the vote path; only drop entries whose option
        # no longer exists so counts and ledger stay in step.
        option_ids = {o.id for o in updated.options}
        user_votes = {uid: oid for uid, oid in existing.user_votes.items() if oid in option_ids}
        poll = copy_entity(updated, user_votes=user_votes,
                           created_at=existing.created_at, created_by_id=existing.created_by_id)

        record = poll.to_update_record()
        if len(user_votes) != len(existing.user_votes):
            record["voted_user_ids"] = dict(user_votes)
        return self._update("polls", "polls", poll, record,
                            "Erreur lors de la mise à jour du sondage")

    def vote_poll(self, poll_id: str, option_id: str) -> ServiceResult:
        """
        Select ``option_id`` for the current user, moving any earlier vote.

        Voting for the option already selected does nothing and issues no
        remote call. The full ledger and option list are persisted.
        """
        user = self._require_user()
        if user is None:
            return ServiceResult.fail(NOT_LOGGED_IN, error_code="NO_USER")

        poll = self.state.find("polls", poll_id)
        if poll is None:
            return self._missing("polls", poll_id)
        if option_id not in {o.id for o in poll.options}:
            return ServiceResult.fail(f"Option inconnue: {option_id}", error_code="NOT_FOUND")

        updated = apply_vote(poll, user.id, option_id)
        if updated is None:
            return ServiceResult.ok(poll, metadata={"noop": True})

        self.state.polls = [updated if p.id == poll_id else p for p in self.state.polls]

        result = self.store.table("polls").update(
            {"id": poll_id},
            {"voted_user_ids": dict(updated.user_votes), "options": updated.options_record()},
        )
        if result.ok:
            self.logger.info(f"Vote recorded on polls/{poll_id}")
            return ServiceResult.ok(updated)

        failed = self._report("Erreur lors du vote", result.error)
        self._full_reload()
        return failed

    def delete_poll(self, poll_id: str) -> ServiceResult:
        return self._delete("polls", "polls", poll_id,
                            "Impossible de supprimer le sondage. Détails")

    # =========================================================================
    # RESOURCES
    # =========================================================================

    def add_resource(self, title: str, resource_type: str, content: str, subject: str,
                     description: Optional[str] = None,
                     target_class: Optional[str] = None) -> ServiceResult:
        user = self._require_user()
        if user is None:
            return ServiceResult.fail(NOT_LOGGED_IN, error_code="NO_USER")

        resource = Resource(
            id=generate_id(),
            title=title,
            type=resource_type,
            content=content,
            subject=subject,
            created_at=self.clock(),
            description=blank_to_none(description),
            target_class=blank_to_none(target_class),
            created_by_id=user.id,
        )
        return self._create("resources", "resources", resource, resource.to_record(),
                            "Erreur lors de l'ajout de la ressource", prepend=True)

    def update_resource(self, resource: Resource) -> ServiceResult:
        if self.state.find("resources", resource.id) is None:
            return self._missing("resources", resource.id)
        return self._update("resources", "resources", resource, resource.to_update_record(),
                            "Erreur lors de la mise à jour de la ressource")

    def delete_resource(self, resource_id: str) -> ServiceResult:
        return self._delete("resources", "resources", resource_id,
                            "Impossible de supprimer la ressource. Détails")

    # =========================================================================
    # USERS
    # =========================================================================

    def add_user(self, name: str, email: str, password: str, role: UserRole,
                 class_group: Optional[str] = None) -> ServiceResult:
        email = email.strip()
        if self.state.find_user_by_email(email) is not None:
            text = f"Un utilisateur utilise déjà l'adresse {email}"
            self.state.notify("error", text)
            return ServiceResult.fail(text, error_code="DUPLICATE_EMAIL")

        user = User(
            id=generate_id(),
            name=name,
            email=email,
            password=hash_password(password),
            role=UserRole(role),
            class_group=blank_to_none(class_group),
        )
        return self._create("users", "users", user, user.to_record(), "Erreur lors de l'ajout")

    def update_user(self, updated: User) -> ServiceResult:
        existing = self.state.find("users", updated.id)
        if existing is None:
            return self._missing("users", updated.id)

        user = updated
        if updated.password and not is_hashed(updated.password):
            user = copy_entity(updated, password=hash_password(updated.password))
        elif not updated.password:
            user = copy_entity(updated, password=existing.password)

        result = self._update("users", "users", user, user.to_update_record(),
                              "Erreur lors de la mise à jour")
        if result and self.state.current_user and self.state.current_user.id == user.id:
            self.state.current_user = user
        return result

    def upgrade_password(self, user_id: str, password: str) -> ServiceResult:
        """
        Re-save a legacy plaintext password as a bcrypt hash.

        Runs inside login, so a failure is only logged: the cached row keeps
        its plaintext value and the upgrade is attempted on the next login.
        """
        existing = self.state.find("users", user_id)
        if existing is None:
            return self._missing("users", user_id)

        user = copy_entity(existing, password=hash_password(password))
        snapshot = self.state.snapshot("users")
        self.state.users = [user if u.id == user_id else u for u in snapshot]

        result = self.store.table("users").update({"id": user_id}, {"password": user.password})
        if result.ok:
            self.logger.info(f"Upgraded stored password of users/{user_id} to bcrypt")
            return ServiceResult.ok(user)

        self.state.restore("users", snapshot)
        self.logger.warning(f"Password upgrade of users/{user_id} failed: {result.error}")
        return ServiceResult.from_exception(result.error)

    def reset_user_password(self, user_id: str) -> ServiceResult:
        existing = self.state.find("users", user_id)
        if existing is None:
            return self._missing("users", user_id)

        user = copy_entity(existing, password=hash_password(DEFAULT_RESET_PASSWORD))
        snapshot = self.state.snapshot("users")
        self.state.users = [user if u.id == user_id else u for u in snapshot]

        result = self.store.table("users").update({"id": user_id}, {"password": user.password})
        if result.ok:
            self.state.notify("success", f"Mot de passe réinitialisé à '{DEFAULT_RESET_PASSWORD}'")
            return ServiceResult.ok(user)

        self.state.restore("users", snapshot)
        return self._report("Erreur lors de la réinitialisation", result.error)

    def delete_user(self, user_id: str) -> ServiceResult:
        """
        Delete a user; dependent content goes with it through the database's
        ON DELETE CASCADE foreign keys.
        """
        snapshot = self.state.snapshot("users")
        self.state.users = [u for u in snapshot if u.id != user_id]

        result = self.store.table("users").delete({"id": user_id})
        if result.ok:
            self.logger.info(f"Deleted users/{user_id}")
            return ServiceResult.ok(user_id)

        error = result.error
        self.state.restore("users", snapshot)
        if is_foreign_key_violation(error):
            self.logger.warning(f"users/{user_id} still referenced; cascade not configured")
            self.state.notify("error", FOREIGN_KEY_HINT)
            failed = ServiceResult.from_exception(ReferentialIntegrityError(
                FOREIGN_KEY_HINT, entity="users", action="delete", details=dict(error.details)))
        else:
            failed = self._report("Impossible de supprimer l'utilisateur. Erreur", error)
        self._full_reload()
        return failed

    # =========================================================================
    # SETTINGS & CLASS GROUPS
    # =========================================================================

    def update_settings(self, settings: SchoolSettings) -> ServiceResult:
        previous = self.state.settings
        self.state.settings = settings

        result = self.store.table("school_settings").upsert(settings.to_record(SETTINGS_ROW_ID))
        if result.ok:
            return ServiceResult.ok(settings)

        self.state.settings = previous
        return self._report("Erreur lors de l'enregistrement des paramètres", result.error)

    def add_class_group(self, name: str) -> ServiceResult:
        group = ClassGroup(id=generate_id(), name=name.strip())
        return self._create("class_groups", "class_groups", group, group.to_record(),
                            "Erreur ajout classe")

    def delete_class_group(self, group_id: str) -> ServiceResult:
        return self._delete("class_groups", "class_groups", group_id,
                            "Impossible de supprimer la classe (peut-être utilisée ?)")
