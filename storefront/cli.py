"""
License Storefront - Command Line
  storefront serve [--host H] [--port P]
  storefront init-db
  storefront generate-keys PRODUCT_ID COUNT
"""
import argparse
import sys
from typing import List, Optional

from storefront.config import settings


def cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("storefront.main:app", host=args.host, port=args.port, reload=args.reload)
    return 0


def cmd_init_db(args: argparse.Namespace) -> int:
    from storefront.database import SessionLocal, init_db
    from storefront.repositories import ProductRepository
    from storefront.services.catalog import seed_products

    init_db()
    db = SessionLocal()
    try:
        count = seed_products(ProductRepository(db))
    finally:
        db.close()
    print(f"Database ready at {settings.DATABASE_URL} ({count} products)")
    return 0


def cmd_generate_keys(args: argparse.Namespace) -> int:
    from storefront.services.license_service import generate_license_keys

    if args.count < 1:
        print("COUNT must be at least 1", file=sys.stderr)
        return 2
    for key in generate_license_keys(args.product_id, args.count):
        print(key)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="storefront", description=settings.APP_NAME)
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default="0.0.0.0")
    serve.add_argument("--port", type=int, default=8000)
    serve.add_argument("--reload", action="store_true")
    serve.set_defaults(func=cmd_serve)

    init = sub.add_parser("init-db", help="Create tables and seed the catalog")
    init.set_defaults(func=cmd_init_db)

    keys = sub.add_parser("generate-keys", help="Print license keys without storing them")
    keys.add_argument("product_id")
    keys.add_argument("count", type=int)
    keys.set_defaults(func=cmd_generate_keys)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
