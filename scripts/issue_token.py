"""Issue a bearer token for local development (stands in for the sign-in front end)"""
from datetime import timedelta

from core.auth import create_access_token


def issue_token(email: str, sub: str | None, name: str | None, minutes: int) -> str:
    claims = {"sub": sub or email, "email": email}
    if name:
        claims["name"] = name
    return create_access_token(claims, expires_delta=timedelta(minutes=minutes))


def main():
    """CLI entry point"""
    import argparse

    parser = argparse.ArgumentParser(
        description="Issue a development bearer token for the timeline API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Example:
  TOKEN=$(python -m scripts.issue_token ada@example.com)
  curl http://localhost:8000/api/entries -H "Authorization: Bearer $TOKEN"
""",
    )
    parser.add_argument("email", help="E-mail of the user (owner of the entries)")
    parser.add_argument("--sub", help="Subject claim (defaults to the e-mail)")
    parser.add_argument("--name", help="Display name")
    parser.add_argument(
        "--minutes", type=int, default=60, help="Lifetime in minutes (default: 60)"
    )

    args = parser.parse_args()

    print(issue_token(args.email, args.sub, args.name, args.minutes))


if __name__ == "__main__":
    main()
