"""
Script to mark Guardians as verified once their ID and certificates are checked.
Lists unverified Guardians when run without arguments.
"""
import asyncio
import sys
from pathlib import Path

# add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from careconnect.database import init_db, close_db
from careconnect.models import GuardianProfile, User
from beanie import PydanticObjectId as OID


async def find_guardian(guardian_id: str | None = None, email: str | None = None) -> GuardianProfile | None:
    if guardian_id:
        try:
            return await GuardianProfile.get(OID(guardian_id))
        except Exception:
            return None
    if email:
        user = await User.find_one(User.email == email.strip().lower())
        if user:
            return await GuardianProfile.find_one(GuardianProfile.user_id == user.id)
    return None


async def set_verified(guardian: GuardianProfile, verified: bool = True) -> GuardianProfile:
    guardian.is_verified = verified
    await guardian.save()
    return guardian


async def list_unverified() -> list[GuardianProfile]:
    return await GuardianProfile.find(GuardianProfile.is_verified == False).to_list()  # noqa: E712


async def main(guardian_id: str | None, email: str | None, revoke: bool):
    await init_db()
    try:
        if not guardian_id and not email:
            pending = await list_unverified()
            if not pending:
                print("✅ No unverified Guardians")
                return
            print(f"📋 Unverified Guardians: {len(pending)}")
            for g in pending:
                print(f"   {g.id}  {g.name}  certificates: {len(g.certifications)}")
            return

        guardian = await find_guardian(guardian_id, email)
        if not guardian:
            print(f"❌ Guardian not found: {guardian_id or email}")
            return

        await set_verified(guardian, not revoke)
        print(f"✅ {guardian.name} (ID: {guardian.id}) is now {'verified' if guardian.is_verified else 'unverified'}")
    finally:
        await close_db()


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Verify Guardians")
    parser.add_argument("--guardian-id", help="Guardian profile ID", default=None)
    parser.add_argument("--email", help="Guardian account e-mail", default=None)
    parser.add_argument(
        "--revoke",
        action="store_true",
        help="Remove the verified badge instead",
        default=False,
    )

    args = parser.parse_args()
    asyncio.run(main(args.guardian_id, args.email, args.revoke))
