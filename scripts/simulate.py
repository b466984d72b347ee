"""
Login Flow Simulation Script

Walks a running server through signup/login, then fires several
concurrent verify-otp requests carrying the same code to check that
exactly one of them gets a session.

Without SendGrid configured the server prints the code to its log as
"OTP for <email>: <code>"; paste it when prompted.

Run from project root: python scripts/simulate.py --email owner@example.com
"""

import asyncio
import sys
import argparse
import time

import httpx

# Configuration
API_BASE_URL = "http://localhost:8001"
CONCURRENT_VERIFIES = 10


async def request_code(client: httpx.AsyncClient, email: str, name: str, country: str) -> bool:
    """Sign up, or log in when the account already exists."""
    response = await client.post(
        f"{API_BASE_URL}/api/auth/signup",
        json={"email": email, "name": name, "country": country},
    )
    if response.status_code == 409:
        print("   ℹ️ Account exists, requesting a login code instead")
        response = await client.post(f"{API_BASE_URL}/api/auth/login", json={"email": email})

    if response.status_code != 200:
        print(f"   ❌ Failed: {response.status_code} {response.text}")
        return False

    print(f"   ✅ {response.json()['message']}")
    return True


async def verify_once(email: str, code: str) -> tuple[int, bool]:
    """One verify attempt on its own connection."""
    async with httpx.AsyncClient(timeout=30.0) as client:
        response = await client.post(
            f"{API_BASE_URL}/api/auth/verify-otp",
            json={"email": email, "otp": code},
        )
        return response.status_code, "auth_token" in response.cookies


async def race_verifies(email: str, code: str, attempts: int) -> bool:
    """Submit the same code concurrently; expect a single winner."""
    start = time.time()
    results = await asyncio.gather(*(verify_once(email, code) for _ in range(attempts)))
    elapsed = round(time.time() - start, 3)

    winners = [r for r in results if r[0] == 200]
    rejected = [r for r in results if r[0] == 401]
    print(f"   {attempts} attempts in {elapsed}s: {len(winners)} accepted, {len(rejected)} rejected")

    if len(winners) == 1 and all(has_cookie for _, has_cookie in winners):
        print("   ✅ Code was consumed exactly once")
        return True
    print("   ❌ Expected exactly one accepted verification")
    return False


async def check_session(email: str) -> None:
    """Log in again and confirm /api/auth/me sees the session."""
    async with httpx.AsyncClient(timeout=30.0) as client:
        await client.post(f"{API_BASE_URL}/api/auth/login", json={"email": email})
        code = input("   Paste the new OTP from the server log: ").strip()
        response = await client.post(
            f"{API_BASE_URL}/api/auth/verify-otp",
            json={"email": email, "otp": code},
        )
        if response.status_code != 200:
            print(f"   ❌ Verification failed: {response.text}")
            return
        me = await client.get(f"{API_BASE_URL}/api/auth/me")
        print(f"   ✅ /api/auth/me -> {me.json()}")


async def run_simulation(email: str, name: str, country: str, attempts: int) -> bool:
    print("=" * 70)
    print("🔐 OTP LOGIN SIMULATION")
    print("=" * 70)

    async with httpx.AsyncClient(timeout=30.0) as client:
        print("\n1️⃣ Requesting a code...")
        if not await request_code(client, email, name, country):
            return False

    code = input("\n   Paste the OTP from the server log: ").strip()

    print(f"\n2️⃣ Racing {attempts} verifications with the same code...")
    ok = await race_verifies(email, code, attempts)

    print("\n3️⃣ Checking a fresh session...")
    await check_session(email)

    print("\n" + "=" * 70)
    return ok


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="OTP Login Flow Simulation")
    parser.add_argument("--email", required=True, help="Account email")
    parser.add_argument("--name", default="Demo Owner", help="Name used on signup")
    parser.add_argument("--country", default="IN", help="Country used on signup")
    parser.add_argument("--attempts", type=int, default=CONCURRENT_VERIFIES, help="Concurrent verifications")
    args = parser.parse_args()

    success = asyncio.run(run_simulation(args.email, args.name, args.country, args.attempts))
    sys.exit(0 if success else 1)
