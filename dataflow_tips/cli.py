"""CLI entry point for the Dataflow tips agent."""

import argparse
import asyncio
import os

from .config import load_tool_server_settings
from .errors import AgentError
from .main import DataflowTipsClient
from .observability import configure_logging


async def ask(question: str, stream: bool = False):
    """Answer one question using the configured tool providers."""
    client = DataflowTipsClient()
    try:
        if stream:
            async for chunk in client.stream(question):
                print(chunk, end='', flush=True)
            print()
        else:
            print(await client.ask(question))
    except AgentError as e:
        print(f"Error: {e.message}")


async def list_tools():
    """Print the tools discovered on every configured provider."""
    client = DataflowTipsClient()
    try:
        tools = await client.list_tools()
    except AgentError as e:
        print(f"Error: {e.message}")
        return
    
    print("Available Tools:")
    print("-" * 50)
    for tool in tools:
        print(f"{tool['name']} ({tool['provider']}: {tool['tool']})")
        print(f"   {tool['description']}")
        print()


def serve_agent(host: str, port: int):
    import uvicorn
    from .http import create_app
    
    uvicorn.run(create_app(), host=host, port=port)


def serve_tools(host: str, port: int):
    import uvicorn
    from .mcp import create_tool_app
    from .tools import build_tool_server
    
    uvicorn.run(create_tool_app(build_tool_server(load_tool_server_settings())), host=host, port=port)


def main():
    """Main CLI function."""
    parser = argparse.ArgumentParser(description="Dataflow tips agent CLI")
    parser.add_argument('--log-level', default=os.getenv("LOG_LEVEL", "INFO"), help='Logging level')
    subparsers = parser.add_subparsers(dest='command', help='Available commands')
    
    # Ask command
    ask_parser = subparsers.add_parser('ask', help='Ask a question about Dataflow jobs')
    ask_parser.add_argument('question', help='Question text')
    ask_parser.add_argument('--stream', action='store_true', help='Stream the response')
    
    # Servers
    agent_parser = subparsers.add_parser('serve-agent', help='Serve the agent HTTP API')
    agent_parser.add_argument('--host', default='0.0.0.0')
    agent_parser.add_argument('--port', type=int, default=8080)
    
    tools_parser = subparsers.add_parser('serve-tools', help='Serve the pipeline tools over MCP')
    tools_parser.add_argument('--host', default='0.0.0.0')
    tools_parser.add_argument('--port', type=int, default=8081)
    
    subparsers.add_parser('list-tools', help='List the tools of the configured providers')
    
    args = parser.parse_args()
    configure_logging(args.log_level)
    
    if args.command == 'ask':
        asyncio.run(ask(args.question, args.stream))
    elif args.command == 'list-tools':
        asyncio.run(list_tools())
    elif args.command == 'serve-agent':
        serve_agent(args.host, args.port)
    elif args.command == 'serve-tools':
        serve_tools(args.host, args.port)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
