from __future__ import annotations

from django.db import migrations

VOTE_APPEND_ONLY_SQL = [
    """
CREATE OR REPLACE FUNCTION core_vote_no_delete() RETURNS trigger AS $$
BEGIN
    RAISE EXCEPTION 'vote rows are append-only (DELETE is not allowed)';
END;
$$ LANGUAGE plpgsql;
""",
    "DROP TRIGGER IF EXISTS core_vote_no_delete_trg ON core_vote;",
    """
CREATE TRIGGER core_vote_no_delete_trg
BEFORE DELETE ON core_vote
FOR EACH ROW
EXECUTE FUNCTION core_vote_no_delete();
""",
    """
CREATE OR REPLACE FUNCTION core_vote_no_update() RETURNS trigger AS $$
BEGIN
    RAISE EXCEPTION 'vote rows are append-only (UPDATE is not allowed)';
END;
$$ LANGUAGE plpgsql;
""",
    "DROP TRIGGER IF EXISTS core_vote_no_update_trg ON core_vote;",
    """
CREATE TRIGGER core_vote_no_update_trg
BEFORE UPDATE ON core_vote
FOR EACH ROW
EXECUTE FUNCTION core_vote_no_update();
""",
]


VOTE_APPEND_ONLY_SQL_REVERSE = [
    "DROP TRIGGER IF EXISTS core_vote_no_update_trg ON core_vote;",
    "DROP TRIGGER IF EXISTS core_vote_no_delete_trg ON core_vote;",
    "DROP FUNCTION IF EXISTS core_vote_no_update();",
    "DROP FUNCTION IF EXISTS core_vote_no_delete();",
]


def _run_on_postgresql(statements: list[str]):
    # plpgsql triggers; other databases rely on the ORM guards in core.models.
    def run(apps, schema_editor) -> None:
        if schema_editor.connection.vendor != "postgresql":
            return
        for statement in statements:
            schema_editor.execute(statement, params=None)

    return run


class Migration(migrations.Migration):
    dependencies = [
        ("core", "0001_initial"),
    ]

    operations = [
        migrations.RunPython(
            _run_on_postgresql(VOTE_APPEND_ONLY_SQL),
            _run_on_postgresql(VOTE_APPEND_ONLY_SQL_REVERSE),
        ),
    ]
