# =============================================================================
# tests/unit/test_migrations.py
# Unit Tests for poll ledger migrations
# =============================================================================

from classpoll_core.data.migrations import (
    CURRENT_LEDGER_VERSION,
    detect_ledger_version,
    migrate_ledger,
    migrate_poll_record,
)


class TestLedgerMigration:

    def test_detect_versions(self):
        assert detect_ledger_version(["u-1"]) == 1
        assert detect_ledger_version({"u-1": "o-1"}) == CURRENT_LEDGER_VERSION

    def test_list_ledger_discarded(self):
        assert migrate_ledger(["u-1", "u-2"]) == {}

    def test_mapping_kept_and_blank_entries_dropped(self):
        assert migrate_ledger({"u-1": "o-1", "u-2": "", "u-3": None}) == {"u-1": "o-1"}

    def test_migrate_poll_record_does_not_mutate_row(self):
        row = {"id": "p-1", "voted_user_ids": ["u-1"]}

        migrated = migrate_poll_record(row)

        assert migrated["voted_user_ids"] == {}
        assert row["voted_user_ids"] == ["u-1"]

    def test_legacy_ledger_resets_counts(self):
        row = {"id": "p-1", "voted_user_ids": ["u-1", "u-2"],
               "options": [{"id": "o-1", "text": "Oui", "votes": 2},
                           {"id": "o-2", "text": "Non", "votes": 1}]}

        migrated = migrate_poll_record(row)

        assert [o["votes"] for o in migrated["options"]] == [0, 0]
        assert [o["text"] for o in migrated["options"]] == ["Oui", "Non"]
        assert row["options"][0]["votes"] == 2

    def test_current_ledger_keeps_counts(self):
        row = {"id": "p-1", "voted_user_ids": {"u-1": "o-1"},
               "options": [{"id": "o-1", "text": "Oui", "votes": 1}]}

        assert migrate_poll_record(row)["options"] == row["options"]

    def test_missing_ledger(self):
        assert migrate_poll_record({"id": "p-1"})["voted_user_ids"] == {}
