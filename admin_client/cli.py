# admin_client/cli.py
import argparse
import asyncio
import getpass
import json
import logging
import sys

from admin_client.core.config import get_settings
from admin_client.services.api_client import AsyncApiClient, HttpMethod
from admin_client.services.auth import AuthService
from admin_client.services.credentials import build_credential_store
from admin_client.services.errors import ApiError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="admin-session", description="Admin API session tool")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("login", help="password login (sends an OTP)")
    p.add_argument("username")
    p.add_argument("--password", help="prompted for when omitted")

    p = sub.add_parser("verify", help="verify the OTP and store the session token")
    p.add_argument("username")
    p.add_argument("otp")

    p = sub.add_parser("resend", help="send a new OTP")
    p.add_argument("username")

    sub.add_parser("logout", help="drop the stored session token")
    sub.add_parser("status", help="show whether a session token is stored")

    p = sub.add_parser("call", help="call an admin endpoint and print the JSON result")
    p.add_argument("endpoint")
    p.add_argument("-X", "--method", default="GET", choices=[m.value for m in HttpMethod])
    p.add_argument("-d", "--data", help="JSON request body")
    return parser


async def run(args: argparse.Namespace) -> object:
    store = build_credential_store(get_settings())
    client = AsyncApiClient(store)
    auth = AuthService(client, store)

    if args.command == "login":
        password = args.password or getpass.getpass("Password: ")
        return await auth.login(args.username, password)
    if args.command == "verify":
        return await auth.verify_otp(args.username, args.otp)
    if args.command == "resend":
        return await auth.resend_otp(args.username)
    if args.command == "logout":
        auth.logout()
        return {"success": True, "message": "Logged out"}
    if args.command == "status":
        return {"authenticated": auth.is_authenticated()}

    body = json.loads(args.data) if args.data else None
    return await client.request(args.endpoint, args.method, body)


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        result = asyncio.run(run(args))
    except (ApiError, ValueError) as ex:
        print(f"Error: {ex}", file=sys.stderr)
        return 1
    print(json.dumps(result, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
