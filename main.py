#!/usr/bin/env python3
"""Blue Ocean Copilot CLI."""

import argparse
import logging
import sys
from config.settings import Settings
from errors import AgentError, InitializationError
from schemas.agent import AgentRequest
from orchestrator import AgentService


def print_response(response):
    """Print one assistant response."""
    print(f"\n{response.message}\n")
    if response.suggestions:
        print("Suggestions: " + " | ".join(response.suggestions))
    print(
        f"[intent confidence {response.metadata.confidence:.2f}, "
        f"{response.metadata.processing_time} ms]\n"
    )


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Blue Ocean Copilot - shopping assistant for the furniture storefront"
    )
    parser.add_argument(
        "--message",
        "-m",
        type=str,
        help="Single message to send (omit for an interactive session)"
    )
    parser.add_argument(
        "--conversation-id",
        type=str,
        help="Continue an existing conversation"
    )
    parser.add_argument(
        "--user-id",
        type=str,
        help="Optional user ID"
    )
    parser.add_argument(
        "--products-csv",
        type=str,
        help="Product CSV export (uses the built-in sample catalog if omitted)"
    )
    parser.add_argument(
        "--categories-csv",
        type=str,
        help="Category CSV export"
    )
    parser.add_argument(
        "--db-path",
        type=str,
        help="SQLite file for conversation history (default: data/conversations.db)"
    )
    parser.add_argument(
        "--list-conversations",
        action="store_true",
        help="List stored conversations (filtered by --user-id) and exit"
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging"
    )

    args = parser.parse_args()

    settings = Settings(
        products_csv_path=args.products_csv,
        categories_csv_path=args.categories_csv,
        db_path=args.db_path,
    )

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    service = AgentService(settings=settings)
    conversation_id = args.conversation_id

    try:
        if args.list_conversations:
            for stored in service.list_conversations(user_id=args.user_id):
                print(
                    f"{stored.conversation_id}  {stored.metadata.message_count} messages  "
                    f"last update {stored.metadata.last_update:%Y-%m-%d %H:%M}"
                )
            return

        if args.message:
            response = service.process_request(AgentRequest(
                message=args.message,
                conversation_id=conversation_id,
                user_id=args.user_id,
            ))
            print(f"Conversation: {response.conversation_id}")
            print_response(response)
            return

        print("Blue Ocean Copilot (empty line or Ctrl-D to quit)")
        while True:
            try:
                message = input("> ")
            except EOFError:
                break
            if not message.strip():
                break

            response = service.process_request(AgentRequest(
                message=message,
                conversation_id=conversation_id,
                user_id=args.user_id,
            ))
            conversation_id = response.conversation_id
            print_response(response)
    except InitializationError as e:
        logging.getLogger(__name__).error(f"Initialization failed: {e}")
        print(e.user_message, file=sys.stderr)
        sys.exit(1)
    except AgentError as e:
        print(f"Error processing message: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)
    finally:
        service.shutdown()


if __name__ == "__main__":
    main()
