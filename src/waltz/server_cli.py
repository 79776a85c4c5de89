"""CLI entry point for the Waltz API server."""

import argparse
import os


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="waltz-server",
        description="Waltz API server for enterprise architecture attestations",
    )
    subparsers = parser.add_subparsers(dest="command")

    serve = subparsers.add_parser("serve", help="Run the API server (default)")
    serve.add_argument("--host", default=None, help="Bind host (default: from settings)")
    serve.add_argument("--port", type=int, default=None, help="Bind port (default: from settings)")
    serve.add_argument(
        "--local",
        action="store_true",
        help="Local dev mode: SQLite database, console logs",
    )

    token = subparsers.add_parser("token", help="Issue a development access token")
    token.add_argument("user_id", help="Subject of the token")
    token.add_argument("--role", action="append", default=[], dest="roles", help="Role to grant (repeatable)")
    token.add_argument("--minutes", type=int, default=None, help="Token lifetime in minutes")

    args = parser.parse_args(argv)

    if args.command == "token":
        from waltz.services.tokens import make_access_token

        print(make_access_token(args.user_id, args.roles, args.minutes))
        return

    if getattr(args, "local", False):
        os.environ["WALTZ_LOCAL_MODE"] = "1"

    import uvicorn

    from waltz.config import settings

    uvicorn.run(
        "waltz.main:app",
        host=getattr(args, "host", None) or settings.host,
        port=getattr(args, "port", None) or settings.port,
    )


if __name__ == "__main__":
    main()
