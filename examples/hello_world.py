"""Hello world example for continue-py.

This example demonstrates:
1. Registering a continuation function
2. Creating the first continuation with continue_with()
3. Looping over continue_now() until the chain says it's done
"""

import asyncio
import sys
from pathlib import Path

# Add src to path for development
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from continue_py import ContinuationDispatcher, ContinuationRegistry

registry = ContinuationRegistry()
dispatcher = ContinuationDispatcher(registry)


@registry.can_continue_with
async def test_continuation(context):
    """Print the call number and chain back to self until max iterations."""
    context["iterations"] += 1
    print(f"This is call {context['iterations']} of {context['max_iterations']}")

    if context["iterations"] < context["max_iterations"]:
        return dispatcher.continue_with(test_continuation)
    return dispatcher.dont_continue()


async def main():
    context = {"iterations": 0, "max_iterations": 5}

    continuation = dispatcher.continue_with(test_continuation)
    print(f"Starting with {continuation.to_dict()}")

    while not continuation.done:
        continuation = await dispatcher.continue_now(continuation, context)

    print("Done!")


if __name__ == "__main__":
    asyncio.run(main())
