"""Simple CLI chatbot that talks to the Bitcoin MCP server.

Connects to the server over stdio with an MCP ClientSession and prints the
JSON text each capability returns.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional

from mcp import ClientSession, StdioServerParameters
from mcp.client.stdio import stdio_client

from .handlers import ALL_CRYPTOS_URI, SUMMARY_TYPES

HELP = (
    "Commands: 'bitcoin', 'all', 'resource', 'search NAME', "
    "'summary top5|gainers|losers', 'quit'."
)


@dataclass
class ChatCommand:
    kind: str  # "tool", "resource" or "prompt"
    name: str
    arguments: Dict[str, Any] = field(default_factory=dict)


def parse_command(text: str) -> Optional[ChatCommand]:
    """Map a line of user input to a capability call, or None if unrecognised."""
    verb, _, rest = text.strip().partition(" ")
    verb = verb.lower()
    rest = rest.strip()

    if verb == "bitcoin":
        return ChatCommand("tool", "get_bitcoin_details")
    if verb == "all":
        return ChatCommand("tool", "get_all_cryptos")
    if verb == "resource":
        return ChatCommand("resource", ALL_CRYPTOS_URI)
    if verb == "search" and rest:
        return ChatCommand("tool", "get_crypto_by_name", {"name": rest})
    if verb == "summary" and rest.lower() in SUMMARY_TYPES:
        return ChatCommand("prompt", "crypto_market_summary", {"type": rest.lower()})
    return None


def _texts(items: Iterable[Any]) -> Iterable[str]:
    for item in items:
        yield getattr(item, "text", None) or str(item)


async def run_command(session: ClientSession, command: ChatCommand) -> Iterable[str]:
    if command.kind == "resource":
        result = await session.read_resource(command.name)
        return list(_texts(result.contents))
    if command.kind == "prompt":
        result = await session.get_prompt(command.name, arguments=command.arguments)
        return list(_texts(message.content for message in result.messages))
    result = await session.call_tool(command.name, arguments=command.arguments)
    return list(_texts(result.content))


async def _chat_loop() -> None:
    print("Bitcoin Market Chatbot. " + HELP)

    params = StdioServerParameters(command="mcp-bitcoin-server")

    async with stdio_client(params) as (read_stream, write_stream):
        async with ClientSession(read_stream, write_stream) as session:
            await session.initialize()
            print("Connected to MCP server.")

            while True:
                user_input = input("you> ").strip()
                if user_input.lower() in {"quit", "exit"}:
                    break

                command = parse_command(user_input)
                if command is None:
                    print("Unknown command. " + HELP)
                    continue

                try:
                    for text in await run_command(session, command):
                        print("mcp>", text)
                except Exception as exc:  # pragma: no cover - for demo convenience
                    print("Error talking to MCP server:", exc)


def main() -> None:
    asyncio.run(_chat_loop())


if __name__ == "__main__":  # pragma: no cover
    main()
