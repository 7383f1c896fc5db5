# scripts/client/staff_client.py
"""
Command-line staff client for the lookup API.

Keeps its device identity, remembered username and session token in a local
state file, so the same device id is sent on every login.

Usage:
  python scripts/client/staff_client.py device                  # show device id
  python scripts/client/staff_client.py device --set MY-PHONE   # override it
  python scripts/client/staff_client.py login -u 12345 --remember
  python scripts/client/staff_client.py accept-terms
  python scripts/client/staff_client.py search 1002003
  python scripts/client/staff_client.py recent
  python scripts/client/staff_client.py logout
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

import argparse
import getpass
import requests

from app.services.device_identity import (load_or_create_device_id, remember_username,
                                          remembered_username, set_device_id)
from app.services.local_state import JsonStateStore

DEFAULT_BACKEND = os.getenv("LOOKUP_BACKEND_URL", "http://127.0.0.1:8080/api/v1")
DEFAULT_STATE = os.path.join(os.path.expanduser("~"), ".installation_lookup", "client.json")
TOKEN_KEY = "session_token"


def _headers(state: JsonStateStore) -> dict:
    token = state.get(TOKEN_KEY)
    return {"Authorization": f"Bearer {token}"} if token else {}


def _fail(resp: requests.Response):
    try:
        detail = resp.json().get("detail")
    except ValueError:
        detail = resp.text
    print(f"❌ {resp.status_code}: {detail}")
    sys.exit(1)


def cmd_device(args, state):
    device_id = set_device_id(state, args.set) if args.set else load_or_create_device_id(state)
    print(f"📱 Device ID: {device_id}")


def cmd_login(args, state):
    username = args.username or remembered_username(state) or input("Username: ")
    password = args.password or getpass.getpass("Password: ")
    device_id = load_or_create_device_id(state)

    resp = requests.post(f"{args.backend}/session/login", timeout=10,
                         json={"username": username, "password": password, "device_id": device_id})
    if resp.status_code != 200:
        _fail(resp)

    body = resp.json()
    state.set(TOKEN_KEY, body["token"])
    remember_username(state, username, args.remember)
    print(f"✅ Logged in as {body['username']}"
          f"{' (admin)' if body['is_admin'] else ''}{' (unrestricted)' if body['unrestricted'] else ''}")
    if body["terms_required"]:
        print("ℹ️  Accept the usage terms before searching: accept-terms")


def cmd_accept_terms(args, state):
    resp = requests.post(f"{args.backend}/session/terms/accept", headers=_headers(state), timeout=10)
    if resp.status_code != 200:
        _fail(resp)
    print("✅ Terms accepted")


def cmd_search(args, state):
    resp = requests.get(f"{args.backend}/lookup/{args.installation_number}", headers=_headers(state), timeout=10)
    if resp.status_code != 200:
        _fail(resp)
    c = resp.json()
    print(f"🏠 {c['installation_number']}{'  (cached)' if c['cached'] else ''}")
    print(f"   Name:    {c['name']}")
    print(f"   Phone:   {c['phone']}")
    print(f"   Address: {c['address']}")
    if c["phone_actions"]["call_url"]:
        print(f"   Call:    {c['phone_actions']['call_url']}")
    if c["map"]["external_url"]:
        print(f"   Map:     {c['map']['external_url']}")


def cmd_recent(args, state):
    resp = requests.get(f"{args.backend}/lookup/recent", headers=_headers(state), timeout=10)
    if resp.status_code != 200:
        _fail(resp)
    for term in resp.json()["items"]:
        print(term)


def cmd_logout(args, state):
    requests.post(f"{args.backend}/session/logout", headers=_headers(state), timeout=10)
    state.remove(TOKEN_KEY)
    print("👋 Logged out")


def main():
    parser = argparse.ArgumentParser(description="Installation lookup staff client")
    parser.add_argument("--backend", default=DEFAULT_BACKEND)
    parser.add_argument("--state", default=DEFAULT_STATE, help="Local state file")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("device", help="Show or set this device's id")
    p.add_argument("--set", help="Replace the device id")
    p.set_defaults(func=cmd_device)

    p = sub.add_parser("login")
    p.add_argument("-u", "--username")
    p.add_argument("-p", "--password")
    p.add_argument("--remember", action="store_true", help="Remember the username")
    p.set_defaults(func=cmd_login)

    sub.add_parser("accept-terms").set_defaults(func=cmd_accept_terms)

    p = sub.add_parser("search")
    p.add_argument("installation_number")
    p.set_defaults(func=cmd_search)

    sub.add_parser("recent").set_defaults(func=cmd_recent)
    sub.add_parser("logout").set_defaults(func=cmd_logout)

    args = parser.parse_args()
    args.func(args, JsonStateStore(args.state))


if __name__ == "__main__":
    main()
