import asyncio
import logging

from core.errors import FinCoachError
from services.api_client import HttpDataService
from services.chat_controller import ChatController
from services.token_store import TokenStore

COMMANDS = "/guest  /logout  /refresh  /quit"


async def main():
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    controller = ChatController(HttpDataService(), TokenStore())
    await controller.startup()

    print(controller.state.transcript[0].text)
    print(f"Commands: {COMMANDS}")

    while True:
        user_text = (await asyncio.to_thread(input, "you> ")).strip()
        try:
            if user_text == "/quit":
                break
            elif user_text == "/guest":
                await controller.login_as_guest()
                print("Signed in as guest.")
            elif user_text == "/logout":
                await controller.logout()
                print("Signed out.")
            elif user_text == "/refresh":
                snapshot = await controller.refresh_dashboard()
                if snapshot:
                    print(f"Balance: ₹{snapshot.balance}  Level {snapshot.profile.level}  Mood: {controller.state.mood.value}")
            else:
                reply = await controller.submit(user_text)
                if reply:
                    print(f"coach> {reply.text}")
        except FinCoachError as e:
            print(f"!! {e}")

    await controller.voice.shutdown()


if __name__ == "__main__":
    asyncio.run(main())
