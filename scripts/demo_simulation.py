"""
Demo Simulation Script

Plays a scripted shopping session through the full pipeline:
transcript -> parser -> dispatcher -> list store, with spoken replies printed.

Demo Script:
1. User: "Add 2 bottles of orange juice"
2. User: "I need milk"  (twice, the second one increments)
3. User: "Put three apples on my list"
4. User: "Find chicken"
5. User: "Take milk off my list"
6. User: "asdfghjkl"  (not understood)
"""

import asyncio
import json

from voicecart.adapters.list_store import InMemoryListStore
from voicecart.adapters.suggestions import RuleBasedSuggestionProvider
from voicecart.config.constants import TranscriptError
from voicecart.core.dispatcher import CommandDispatcher
from voicecart.core.intent_engine import CommandParser
from voicecart.core.voice_processor import Transcript, VoiceCommandProcessor


SHOPPING_SESSION = [
    ("Add 2 bottles of orange juice", 0.94),
    ("I need milk", 0.91),
    ("I need milk", 0.88),
    ("Put three apples on my list", 0.90),
    ("Find chicken", 0.86),
    ("Take milk off my list", 0.83),
    ("asdfghjkl", 0.40),
]


class DemoSimulator:
    """
    Simulates a voice shopping session for testing
    """

    def __init__(self, latency: float = 0.05):
        self.suggestions = RuleBasedSuggestionProvider()
        self.dispatcher = CommandDispatcher(InMemoryListStore(latency=latency), self.suggestions)
        self.processor = VoiceCommandProcessor(CommandParser(), self.dispatcher)

    async def run_demo(self):
        """Execute the scripted session"""

        print("\n" + "=" * 70)
        print("VOICECART DEMO - SHOPPING SESSION")
        print("=" * 70 + "\n")

        for text, confidence in SHOPPING_SESSION:
            print(f"\n🎤 USER: \"{text}\"  (confidence {confidence:.2f})")
            await self._simulate_delay(1)

            processed = await self.processor.handle_transcript(Transcript(text=text, confidence=confidence))
            if processed.intent is not None:
                print(f"   Intent: {processed.intent.action} via '{processed.rule}'")

            print(f"🛒 VOICECART: \"{processed.outcome.message}\"")

        await self.dispatcher.drain_background()
        self._print_list()

    async def run_error_demo(self):
        """Recognition errors all map to the same reply"""

        print("\n" + "=" * 70)
        print("VOICECART DEMO - RECOGNITION ERRORS")
        print("=" * 70 + "\n")

        for signal in (TranscriptError.NO_SPEECH, TranscriptError.NOT_ALLOWED, TranscriptError.NETWORK):
            processed = self.processor.handle_error(signal)
            print(f"⚠️  {signal}: \"{processed.outcome.message}\"")

    async def run_suggestions_demo(self):
        print("\n" + "=" * 70)
        print("VOICECART DEMO - SUGGESTIONS")
        print("=" * 70 + "\n")

        suggestions = await self.suggestions.generate(self.dispatcher.items)
        for suggestion in suggestions:
            print(f"💡 {suggestion.name} ({suggestion.category}) - {suggestion.reason}")

    def _print_list(self):
        print("\n📋 SHOPPING LIST:")
        for category, items in self.dispatcher.grouped().items():
            print(f"  {category}:")
            for item in items:
                print(f"    - {item.quantity} x {item.name}")

        print("\n📊 STATISTICS:")
        print(json.dumps(self.dispatcher.statistics(), indent=2))

    async def _simulate_delay(self, seconds: float):
        """Simulate pauses between utterances"""
        await asyncio.sleep(seconds * 0.3)


async def main():
    """Run demo simulations"""
    simulator = DemoSimulator()

    print("\n" + "=" * 70)
    print("SELECT DEMO SCENARIO:")
    print("1. Shopping Session")
    print("2. Recognition Errors")
    print("3. Run All Demos")
    print("=" * 70)

    choice = input("Enter choice (1-3): ").strip()

    if choice == "1":
        await simulator.run_demo()
    elif choice == "2":
        await simulator.run_error_demo()
    elif choice == "3":
        await simulator.run_demo()
        await simulator.run_error_demo()
        await simulator.run_suggestions_demo()
    else:
        print("Invalid choice. Running shopping session...")
        await simulator.run_demo()


if __name__ == "__main__":
    asyncio.run(main())
