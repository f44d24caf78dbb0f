import asyncio
import sys

from dotenv import load_dotenv
from loguru import logger

from elevate_chat.app_config import load_json_config, parse_app_config, resolve_runtime_env
from elevate_chat.bootstrap import bootstrap_runtime
from elevate_chat.console import ChatConsole


async def main() -> None:
    load_dotenv()

    app = parse_app_config(load_json_config())
    env = resolve_runtime_env(app.provider_name)
    if not env.provider_api_key:
        print(f"{env.provider_env_var} environment variable is required.", file=sys.stderr)
        sys.exit(1)
    if app.user_id is None:
        print("UserId must be set in config.json to sign in.", file=sys.stderr)
        sys.exit(1)

    runtime = bootstrap_runtime(app, env)
    console = ChatConsole(runtime.controller)

    print("elevate-chat (type 'exit' to quit, '/help' for commands)")
    print(f"Provider: {app.provider_name} ({app.model})")
    profile = runtime.controller.user_profile()
    if profile is not None:
        print(f"Signed in as {profile.name or profile.uid}")
    if runtime.controller.sessions:
        print(f"Chats: {len(runtime.controller.sessions)} (use /chats to list)")
    if runtime.log_descriptions:
        print(f"Logging: {', '.join(runtime.log_descriptions)}")
    print()

    try:
        while True:
            try:
                user_input = await asyncio.to_thread(input, "you> ")
            except (EOFError, KeyboardInterrupt):
                break

            trimmed = user_input.strip()

            if trimmed in ("exit", "quit"):
                break

            if not trimmed:
                continue

            try:
                await console.handle(trimmed)
            except Exception as ex:
                logger.error(f"Unhandled error: {ex}")
    finally:
        await runtime.controller.wait_for_turn()
        console.close()
        runtime.close()


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
