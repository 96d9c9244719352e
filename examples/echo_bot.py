"""Echo bot example for continue-py.

The bot asks for the user's name on the first message, remembers it, and
echoes everything afterwards. Each incoming message is one turn: the
conversation's continuation is loaded from a SQLite store, executed, and the
next continuation saved, so the conversation survives a restart of this
script.

Usage:
    python examples/echo_bot.py [conversation_id]
"""

import asyncio
import sys
from pathlib import Path

# Add src to path for development
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from continue_py import (
    Continuation,
    ContinuationDispatcher,
    ContinuationManager,
    ContinuationRegistry,
    DispatchMonitor,
    SQLiteConversationStore,
    configure_logging,
    relative_continuation_id,
)

registry = ContinuationRegistry()
# Keep IDs independent of where this checkout lives
registry.configure(get_continuation_id=relative_continuation_id(str(Path(__file__).parent)))
dispatcher = ContinuationDispatcher(registry, monitor=DispatchMonitor())


@registry.can_continue_with
async def start_continuation(context):
    name = context.state.get("name")
    if not name:
        # Prompt for the user's name and chain the response to name_prompt
        context.reply("Hi! What's your name?")
        return dispatcher.continue_with(name_prompt_continuation)

    context.reply(f"{name}, you said: {context.payload}")
    return dispatcher.dont_continue()


@registry.can_continue_with
async def name_prompt_continuation(context):
    context.state["name"] = context.payload
    context.reply(
        f"Nice to meet you {context.payload}! You can say stuff to me and I'll echo it back."
    )
    return dispatcher.dont_continue()


@registry.can_continue_with
async def lost_continuation(context, missing_id):
    context.reply("Sorry, I lost track of our conversation. Let's start over.")
    return dispatcher.dont_continue()


async def redirect_to_lost(continuation: Continuation, context) -> Continuation:
    return dispatcher.continue_with(lost_continuation, continuation.continuation_id)


registry.configure(function_not_found=redirect_to_lost)


async def main():
    configure_logging()
    conversation_id = sys.argv[1] if len(sys.argv) > 1 else "console"

    manager = ContinuationManager(
        dispatcher,
        start_continuation,
        store=SQLiteConversationStore("data/echo_bot.db"),
    )
    await manager.initialize()

    try:
        print("Type a message (empty line to quit).")
        while True:
            text = input("> ").strip()
            if not text:
                break

            turn = await manager.run_turn(conversation_id, text)
            for reply in turn.replies:
                print(reply)
    finally:
        await manager.close()


if __name__ == "__main__":
    asyncio.run(main())
