# backend/rentdesk/cli/__main__.py
from __future__ import annotations

import argparse

from rentdesk.auth import create_access_token
from rentdesk.cli.seed_demo import seed_demo
from rentdesk.db import Base, SessionLocal, engine


def main() -> None:
    p = argparse.ArgumentParser(prog="python -m rentdesk.cli")
    p.add_argument("--prefix", default="demo")
    p.add_argument("--price", type=float, default=2400.0)
    p.add_argument("--deposit", type=float, default=None)
    p.add_argument("--no-agent", action="store_true")
    p.add_argument("--create-schema", action="store_true", help="create tables without alembic (local sqlite)")
    args = p.parse_args()

    if args.create_schema:
        Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        out = seed_demo(
            db,
            prefix=args.prefix,
            with_agent=(not args.no_agent),
            price=args.price,
            deposit=args.deposit,
        )
    finally:
        db.close()

    print(
        {
            "ok": True,
            "application_id": out.application_id,
            "property_id": out.property_id,
            "landlord_token": create_access_token(out.landlord_id),
            "agent_token": create_access_token(out.agent_id) if out.agent_id is not None else None,
            "tenant_id": out.tenant_id,
        }
    )


if __name__ == "__main__":
    main()
