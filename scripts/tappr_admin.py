#!/usr/bin/env python3
"""
Tappr — Admin CLI: question bank checks, expiry sweep, card registration

Management script run against the configured document store.  Provides
three subcommands:

  questions  — Validate the question bank and print its statistics.
  sweep      — Expire pending discovery sessions past their deadline.
  add-card   — Register a card code for a user (local and staging setups).

Usage examples
--------------
  # Check the catalog before a release
  python scripts/tappr_admin.py questions

  # Run one expiry pass (e.g. from Cloud Scheduler)
  STORE_BACKEND=firestore python scripts/tappr_admin.py sweep

  # Register a card for a test user
  python scripts/tappr_admin.py add-card ABC123 user-42 alice
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from datetime import datetime, timezone

from tappr.config import get_settings
from tappr.services.card_service import CARD_CODES_COLLECTION, CardService
from tappr.services.discovery_service import DiscoveryService
from tappr.services.question_bank import QuestionBank
from tappr.store import Filter, create_document_store


# ──────────────────────────────────────────────────────────────────────────────
# Subcommand: questions
# ──────────────────────────────────────────────────────────────────────────────

def cmd_questions(args: argparse.Namespace) -> int:
    bank = QuestionBank()
    validation = bank.validate()
    stats = bank.stats()

    print(f"\n  Questions:          {stats.total}")
    print(f"  Mean options:       {stats.average_options_per_question:.2f}")
    print("  Per category:")
    for category in QuestionBank.CATEGORIES:
        print(f"    {category.value:<14} {stats.categories.get(category.value, 0):>4}")

    if validation.is_valid:
        print("\n  Catalog is valid.\n")
    else:
        print(f"\n  {len(validation.errors)} problem(s) found:")
        for error in validation.errors:
            print(f"    - {error}")
        print()

    if args.json:
        print(json.dumps(
            {
                "stats": stats.model_dump(by_alias=True),
                "validation": validation.model_dump(by_alias=True),
            },
            indent=2,
        ))

    return 0 if validation.is_valid else 1


# ──────────────────────────────────────────────────────────────────────────────
# Subcommand: sweep
# ──────────────────────────────────────────────────────────────────────────────

async def cmd_sweep(args: argparse.Namespace) -> int:
    settings = get_settings()
    if settings.STORE_BACKEND == "memory":
        print("  STORE_BACKEND=memory holds no sessions outside the API process; nothing to sweep.")
        return 0

    store = create_document_store(settings)
    try:
        service = DiscoveryService(
            store,
            QuestionBank(),
            question_count=settings.DISCOVERY_QUESTION_COUNT,
            ttl_hours=settings.DISCOVERY_SESSION_TTL_HOURS,
        )
        expired = await service.sweep_expired_sessions()
    finally:
        await store.close()

    print(f"  Expired {expired} session(s).")
    return 0


# ──────────────────────────────────────────────────────────────────────────────
# Subcommand: add-card
# ──────────────────────────────────────────────────────────────────────────────

async def cmd_add_card(args: argparse.Namespace) -> int:
    settings = get_settings()
    store = create_document_store(settings)
    try:
        existing = await store.query(CARD_CODES_COLLECTION, [Filter("code", "==", args.code)])
        if existing:
            print(f"  Card {args.code} already exists, skipping.")
            return 1

        await store.add(
            CARD_CODES_COLLECTION,
            {
                "code": args.code,
                "userId": args.user_id,
                "username": args.username,
                "active": not args.inactive,
                "tapCount": 0,
                "createdAt": datetime.now(timezone.utc).isoformat(),
            },
        )
    finally:
        await store.close()

    url = CardService(store, base_url=settings.CARD_BASE_URL).card_url(args.code)
    print(f"  Registered card {args.code} for {args.username}: {url}")
    return 0


# ──────────────────────────────────────────────────────────────────────────────
# CLI entry point
# ──────────────────────────────────────────────────────────────────────────────

def main() -> None:
    parser = argparse.ArgumentParser(
        description="Tappr admin — question bank checks, expiry sweep and card registration.",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        help="Available subcommands",
    )

    # ── questions ─────────────────────────────────────────────────────
    questions_parser = subparsers.add_parser(
        "questions",
        help="Validate the question bank and print its statistics.",
    )
    questions_parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Also output raw JSON data.",
    )

    # ── sweep ─────────────────────────────────────────────────────────
    subparsers.add_parser(
        "sweep",
        help="Expire pending discovery sessions past their deadline.",
    )

    # ── add-card ──────────────────────────────────────────────────────
    card_parser = subparsers.add_parser(
        "add-card",
        help="Register a card code for a user.",
    )
    card_parser.add_argument("code", help="Card code printed on the card.")
    card_parser.add_argument("user_id", help="Owner's user id.")
    card_parser.add_argument("username", help="Owner's public username.")
    card_parser.add_argument(
        "--inactive",
        action="store_true",
        default=False,
        help="Register the card as deactivated.",
    )

    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    if args.command == "questions":
        sys.exit(cmd_questions(args))
    elif args.command == "sweep":
        sys.exit(asyncio.run(cmd_sweep(args)))
    elif args.command == "add-card":
        sys.exit(asyncio.run(cmd_add_card(args)))
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
