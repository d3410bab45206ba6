#!/usr/bin/env python3
# Copyright (C) 2024 AlbumRank Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Create a local user and print a bearer token. Run: python -m albumrank_server.scripts.create_user"""

import asyncio
import sys

from sqlalchemy import select

from albumrank_server.auth import create_access_token
from albumrank_server.database import async_session_maker, init_db
from albumrank_server.models import User


async def main():
    await init_db()
    username = input("Username: ").strip()
    display_name = input("Display name (optional): ").strip() or None
    if not username:
        print("Username required")
        sys.exit(1)

    async with async_session_maker() as session:
        result = await session.execute(select(User).where(User.username == username))
        user = result.scalar_one_or_none()
        if user is None:
            user = User(username=username, display_name=display_name)
            session.add(user)
            await session.commit()
            print("User created.")
        else:
            print("User exists.")
        claims = {"sub": str(user.id), "preferred_username": user.username}
        if user.display_name:
            claims["name"] = user.display_name
        print(f"Token: {create_access_token(claims)}")


if __name__ == "__main__":
    asyncio.run(main())
