# =============================================================================
# scripts/setup_classpoll_schema.py
# Print the ClassPoll+ schema and check it against a Supabase project
# =============================================================================
"""
Run this script to:
1. Print the SQL that creates every ClassPoll+ table (paste it into the
   Supabase SQL editor)
2. Check that each table answers a select through the API
3. Optionally create the first administrator account

Content tables reference ``users(id)`` with ON DELETE CASCADE, so deleting a
user also deletes what they authored. Run with ``--cascade-only`` on an older
project to print just the statements that add the cascade.

Usage:
    python scripts/setup_classpoll_schema.py              # print SQL + verify
    python scripts/setup_classpoll_schema.py --sql-only
    python scripts/setup_classpoll_schema.py --cascade-only
    python scripts/setup_classpoll_schema.py --seed-admin

Prerequisites:
    - Configure .streamlit/secrets.toml with Supabase credentials
"""

import argparse
import sys
import tomllib
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from dotenv import load_dotenv
from postgrest.exceptions import APIError
from supabase import create_client

from classpoll_core.auth.passwords import hash_password
from classpoll_core.config import (DEFAULT_ADMIN, DEFAULT_SCHOOL_NAME, DEFAULT_THEME_COLOR,
                                   SETTINGS_ROW_ID, load_supabase_credentials)
from classpoll_core.errors import ConfigurationError
from classpoll_core.state.app_state import COLLECTIONS

load_dotenv()

TABLES = ("school_settings",) + COLLECTIONS

SCHEMA_SQL = f"""
create table if not exists school_settings (
    id text primary key,
    school_name text not null default '{DEFAULT_SCHOOL_NAME}',
    theme_color text not null default '{DEFAULT_THEME_COLOR}',
    logo_url text
);

create table if not exists class_groups (
    id text primary key,
    name text not null unique
);

create table if not exists users (
    id text primary key,
    name text not null,
    email text not null unique,
    password text not null,
    role text not null check (role in ('ADMIN', 'RESPONSABLE', 'ELEVE')),
    class_group text
);

create table if not exists announcements (
    id text primary key,
    title text not null,
    subject text,
    meet_link text,
    date timestamptz not null default now(),
    is_urgent boolean not null default false,
    target_class text,
    author_id text references users(id) on delete cascade,
    author_name text
);

create table if not exists exams (
    id text primary key,
    subject text not null,
    date timestamptz not null,
    start_time text,
    duration_minutes integer not null default 60,
    room text,
    notes text,
    target_class text,
    created_by_id text references users(id) on delete cascade
);

create table if not exists polls (
    id text primary key,
    title text not null,
    options jsonb not null default '[]'::jsonb,
    is_anonymous boolean not null default false,
    created_at timestamptz not null default now(),
    expires_at timestamptz,
    target_class text,
    created_by_id text references users(id) on delete cascade,
    voted_user_ids jsonb not null default '{{}}'::jsonb
);

create table if not exists resources (
    id text primary key,
    title text not null,
    type text not null,
    content text not null,
    subject text,
    description text,
    target_class text,
    created_at timestamptz not null default now(),
    created_by_id text references users(id) on delete cascade
);
"""

# Foreign keys to rebuild on projects created before the cascade existed
CASCADE_COLUMNS = [
    ("announcements", "author_id"),
    ("exams", "created_by_id"),
    ("polls", "created_by_id"),
    ("resources", "created_by_id"),
]


def cascade_sql() -> str:
    statements = []
    for table, column in CASCADE_COLUMNS:
        constraint = f"{table}_{column}_fkey"
        statements.append(
            f"alter table {table} drop constraint if exists {constraint};\n"
            f"alter table {table} add constraint {constraint}\n"
            f"    foreign key ({column}) references users(id) on delete cascade;"
        )
    return "\n\n".join(statements)


def load_secrets_toml():
    """Load .streamlit/secrets.toml, or None when the file is missing."""
    secrets_path = project_root / ".streamlit" / "secrets.toml"
    if not secrets_path.exists():
        return None
    with open(secrets_path, "rb") as f:
        return tomllib.load(f)


def get_supabase_client():
    """Get Supabase client with credentials from secrets.toml or environment."""
    try:
        credentials = load_supabase_credentials(load_secrets_toml())
    except ConfigurationError as e:
        print(f"ERROR: {e.message}")
        print()
        print("Option 1: Configure .streamlit/secrets.toml:")
        print('  [supabase]')
        print('  url = "https://your-project.supabase.co"')
        print('  key = "your-anon-key"')
        print()
        print("Option 2: Set environment variables:")
        print("  SUPABASE_URL and SUPABASE_KEY")
        sys.exit(1)

    print(f"Using Supabase URL: {credentials.url[:40]}...")
    return create_client(credentials.url, credentials.key)


def verify_tables(client) -> bool:
    """Select one row from every table; report the ones that fail."""
    print("\nVerifying tables...")
    all_ok = True
    for table in TABLES:
        try:
            client.table(table).select("*").limit(1).execute()
            print(f"      OK       {table}")
        except APIError as e:
            all_ok = False
            print(f"      MISSING  {table}  ({e.code}: {e.message})")
    return all_ok


def seed_admin(client) -> None:
    """Insert the settings row and the default administrator if absent."""
    print("\nSeeding defaults...")
    client.table("school_settings").upsert({
        "id": SETTINGS_ROW_ID,
        "school_name": DEFAULT_SCHOOL_NAME,
        "theme_color": DEFAULT_THEME_COLOR,
    }).execute()

    existing = client.table("users").select("id").eq("email", DEFAULT_ADMIN["email"]).execute()
    if existing.data:
        print(f"      Admin {DEFAULT_ADMIN['email']} already exists.")
        return
    admin = dict(DEFAULT_ADMIN, password=hash_password(DEFAULT_ADMIN["password"]), class_group=None)
    client.table("users").insert(admin).execute()
    print(f"      Created admin {DEFAULT_ADMIN['email']} (password: {DEFAULT_ADMIN['password']}).")


def main():
    parser = argparse.ArgumentParser(description="ClassPoll+ Supabase schema helper")
    parser.add_argument("--sql-only", action="store_true", help="print the schema and exit")
    parser.add_argument("--cascade-only", action="store_true",
                        help="print only the ON DELETE CASCADE migration and exit")
    parser.add_argument("--seed-admin", action="store_true",
                        help="create the settings row and default admin")
    args = parser.parse_args()

    if args.cascade_only:
        print(cascade_sql())
        return

    print("=" * 70)
    print("Paste the following SQL into the Supabase SQL editor:")
    print("=" * 70)
    print(SCHEMA_SQL)
    if args.sql_only:
        return

    client = get_supabase_client()
    if not verify_tables(client):
        print("\nSome tables are missing; run the SQL above, then re-run this script.")
        sys.exit(1)

    if args.seed_admin:
        seed_admin(client)

    print("\nSchema ready.")


if __name__ == "__main__":
    main()
