"""Print a user's login IP history."""

import asyncio
import sys

from pocketledger.core.errors import AppError
from pocketledger.core.ip_guardian import IpGuardian
from pocketledger.main import lifespan


def format_history(user_id: str, record) -> list[str]:
    """Human-readable lines for one IP-security record (or its absence)."""
    if record is None:
        return [f"ℹ️  No IP history for {user_id}"]

    lines = [
        f"👤 {user_id}",
        f"   Registered IP: {record.registered_ip}",
        f"   Last login IP: {record.last_login_ip}",
        f"   Last login at: {record.last_login_at.isoformat()}",
    ]
    if not record.change_history:
        lines.append("   No IP changes recorded")
    for change in reversed(record.change_history):
        lines.append(f"   ⚠️  {change.at.isoformat()}  {change.old_ip} → {change.new_ip}")
    return lines


async def show_history(guardian: IpGuardian, user_id: str) -> int:
    try:
        record = await guardian.get_history(user_id)
    except AppError as exc:
        print(f"❌ {exc.message}")
        return 1

    for line in format_history(user_id, record):
        print(line)
    return 0


async def run(user_id: str) -> int:
    async with lifespan() as app:
        return await show_history(app.ip_guardian, user_id)


def main() -> None:
    """CLI entrypoint: pocketledger-ip-history <user_id>."""
    if len(sys.argv) != 2:
        print("Usage: pocketledger-ip-history <user_id>")
        sys.exit(2)

    sys.exit(asyncio.run(run(sys.argv[1])))


if __name__ == "__main__":
    main()
