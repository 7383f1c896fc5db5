# scripts/setup/check_remote.py
"""
Check the remote datastore — connection and every table/view the service uses.
Prints the SQL to create anything that is missing.
Usage: python scripts/setup/check_remote.py
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

import asyncio

from app.config import settings
from app.database import store
from app.errors import RemoteStoreError

TABLES = ["users", "customers", "search_logs", "user_stats_view"]

SCHEMA_SQL = """
create table if not exists users (
  id bigserial primary key,
  username text unique not null,
  password text not null,
  allowed_device_id text
);
create table if not exists customers (
  id bigserial primary key,
  installation_number text unique not null,
  name text, phone text, address text,
  latitude double precision, longitude double precision
);
create table if not exists search_logs (
  id bigserial primary key,
  username text not null,
  installation_number text,
  created_at timestamptz not null default now()
);
create or replace view user_stats_view as
  select username, count(*) as query_count, max(created_at) as last_login
  from search_logs group by username;
"""


async def main():
    print("🗄️  Installation Lookup — remote datastore check")
    print("=" * 48)
    if not settings.REMOTE_CONFIGURED:
        print("❌ SUPABASE_URL / SUPABASE_KEY are not set in .env")
        sys.exit(1)
    print(f"📡 Datastore: {settings.SUPABASE_URL}")

    try:
        count = await store.count("customers")
        print(f"✅ Connection OK — {count} customers")
    except RemoteStoreError as e:
        print(f"❌ {e.message}")

    missing = []
    for table in TABLES:
        ok = await store.probe(table)
        print(f"   {'✅' if ok else '❌'} {table}")
        if not ok:
            missing.append(table)
    await store.close()

    if missing:
        print("\nRun this in the SQL editor, then grant read/write policies for the API key:")
        print(SCHEMA_SQL)
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
