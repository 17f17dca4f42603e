#!/usr/bin/env python
"""Idempotent bootstrap for the first SUPER_ADMIN account.

Usage:
    python backend/scripts/seed_admin.py               # create admin if missing
    python backend/scripts/seed_admin.py --show-roles  # print role -> capability table
    python backend/scripts/seed_admin.py --dry-run     # run logic then rollback (no DB changes)
"""
from __future__ import annotations
import os, sys, argparse, textwrap
from sqlalchemy import text

# Allow running from repo root
sys.path.append(os.path.abspath('backend'))

from couponops import create_app, get_db  # type: ignore
from couponops.constants.permissions import SUPER_ADMIN
from couponops.models.authz import Admin, Base
from couponops.services.guard import get_registry
from couponops.services.store import AdminStore


def ensure_schema(session):
    try:
        session.execute(text('SELECT 1 FROM admins LIMIT 1'))
    except Exception:
        # Bootstrap fallback; in a real environment prefer `alembic upgrade head`
        session.rollback()
        import couponops.models.user, couponops.models.merchant, couponops.models.coupon, couponops.models.deal  # noqa: F401
        import couponops.models.banner, couponops.models.conversion, couponops.models.audit, couponops.models.click  # noqa: F401
        import couponops.models.extension_setting  # noqa: F401
        Base.metadata.create_all(session.get_bind())
    finally:
        session.commit()


def ensure_initial_admin(session, email: str, password: str) -> bool:
    if AdminStore(session).find_by_email(email):
        print(f"[INFO] Admin {email} already present; nothing to do.")
        return False
    admin = Admin(email=email.strip().lower(), first_name='Super', last_name='Admin', role=SUPER_ADMIN)
    admin.set_password(password)
    session.add(admin)
    session.flush()
    print(f"[INFO] Created initial admin {admin.email} with temporary password.")
    return True


def print_role_summary(registry):
    rows = [(role, sorted(caps)) for role, caps in registry.as_dict().items()]
    name_w = max(len(r[0]) for r in rows)
    print(f"{'Role'.ljust(name_w)} | Count | Capabilities")
    print('-' * (name_w + 40))
    for name, caps in rows:
        print(f"{name.ljust(name_w)} | {str(len(caps)).rjust(5)} | {', '.join(caps)}")


def parse_args(argv=None):
    p = argparse.ArgumentParser(
        description="Seed the initial SUPER_ADMIN account",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""Examples:\n  seed normally: seed_admin.py\n  dry run: seed_admin.py --dry-run\n  show roles: seed_admin.py --show-roles\n""")
    )
    p.add_argument('--show-roles', action='store_true', help='Print the role -> capability table')
    p.add_argument('--dry-run', action='store_true', help='Rollback after operations (no commit)')
    p.add_argument('--email', default=None, help='Override SEED_ADMIN_EMAIL')
    return p.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    app = create_app()
    with app.app_context():
        session = get_db()
        ensure_schema(session)
        email = args.email or app.config['SEED_ADMIN_EMAIL']
        created = ensure_initial_admin(session, email, app.config['SEED_ADMIN_PASSWORD'])
        if args.dry_run:
            session.rollback()
            print(f"[DRY-RUN] (rolled back) Admin would be created: {created}")
        else:
            session.commit()
            print(f"[DONE] Admin created: {created}")
        if args.show_roles:
            print_role_summary(get_registry())
    return 0


if __name__ == '__main__':
    sys.exit(main())
