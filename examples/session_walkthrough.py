"""
Session walkthrough

Against a running server:
1. register an account (a clash on the username is reported and ignored)
2. log in, fetch the own profile with the session token
3. set a birthday, log out, show that the token no longer works

Usage:
python usher-server.py
python examples/session_walkthrough.py
"""
import asyncio
import sys
from pathlib import Path

# make the project root importable when run from a checkout
sys.path.insert(0, str(Path(__file__).parent.parent))

from usher.client import Client, ClientError


async def main(endpoint: str = "localhost:8000"):
    async with Client(endpoint) as client:
        try:
            await client.register("Test User", "testUsername", "testPassword")
        except ClientError as e:
            if e.status_code != 409:
                raise
            print("testUsername already exists, reusing it")

        await client.login("testUsername", "testPassword")
        me = await client.get_user(client.user_id)
        print(f"Logged in: {me}")

        await client.edit(me.id, birthday="01.01.2000")
        print(f"Birthday set: {(await client.get_user(me.id)).birthday}")

        token = client.token
        await client.logout()
        client.token = token
        try:
            await client.get_user(me.id)
        except ClientError as e:
            print(f"Old token rejected after logout: {e}")
        client.token = None


if __name__ == "__main__":
    asyncio.run(main(*sys.argv[1:2]))
