#!/usr/bin/env python
"""Idempotent seed script for the built-in permissions, roles and first admin.

Usage:
    python backend/scripts/seed_rbac.py               # seed normally
    python backend/scripts/seed_rbac.py --show-roles  # print role -> permission counts (after ensuring seed)
    python backend/scripts/seed_rbac.py --dry-run     # run logic then rollback (no DB changes)
"""
from __future__ import annotations
import os, sys, argparse, textwrap, logging
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

# Allow running from repo root
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from rbac_admin import create_app, get_db  # type: ignore
from rbac_admin.models.rbac import Base
from rbac_admin.services.seed import seed_all, summarize_roles


def print_role_summary(session):
    rows = summarize_roles(session)
    if not rows:
        print("[INFO] No roles present.")
        return
    name_w = max(len(r[0]) for r in rows)
    print(f"{'Role'.ljust(name_w)} | Count | Sample (up to 8)")
    print('-' * (name_w + 40))
    for name, cnt, sample in rows:
        print(f"{name.ljust(name_w)} | {str(cnt).rjust(5)} | {', '.join(sample)}")


def parse_args():
    p = argparse.ArgumentParser(
        description="Seed RBAC permissions, roles and the initial admin",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""Examples:\n  seed normally: seed_rbac.py\n  dry run: seed_rbac.py --dry-run\n  show roles: seed_rbac.py --show-roles\n""")
    )
    p.add_argument('--show-roles', action='store_true', help='Print role permission counts after seeding')
    p.add_argument('--dry-run', action='store_true', help='Rollback after operations (no commit)')
    return p.parse_args()


def main():
    args = parse_args()
    logging.basicConfig(level=logging.INFO, format='[%(levelname)s] %(message)s')
    app = create_app()
    with app.app_context():
        session = get_db()
        try:
            session.execute(text('SELECT 1 FROM permissions LIMIT 1'))
        except SQLAlchemyError:
            # Bootstrap schema when migrations have not been run; prefer `alembic upgrade head`
            session.rollback()
            Base.metadata.create_all(session.get_bind())

        try:
            created = seed_all(session)
            if args.dry_run:
                session.rollback()
                print(f"[DRY-RUN] (rolled back) would create: {created}")
            else:
                session.commit()
                print(f"[DONE] created: {created}")
            if args.show_roles:
                print('\nRole Permission Summary:')
                print_role_summary(session)
        except SQLAlchemyError:
            session.rollback()
            raise


if __name__ == '__main__':
    main()
