import asyncio
import sys

from dotenv import load_dotenv
from loguru import logger

from finchat import i18n
from finchat.app_config import load_json_config, parse_app_config, resolve_runtime_env
from finchat.bootstrap import bootstrap_runtime
from finchat.console import USER_PREFIX
from finchat.shell import ChatShell


async def main() -> None:
    load_dotenv()

    app = parse_app_config(load_json_config())
    env = resolve_runtime_env(app.provider_name)

    if not env.provider_api_key:
        print(f"{env.provider_env_var} environment variable is required.", file=sys.stderr)
        sys.exit(1)

    runtime = await bootstrap_runtime(app, env)
    controller = runtime.controller

    await controller.load(runtime.user_id)
    snapshot = await runtime.snapshots.get_snapshot(runtime.user_id)
    shell = ChatShell(controller, runtime.monitor, snapshot=snapshot)

    print(i18n.t("cli.banner", controller.language))
    print(f"User: {runtime.user_id or 'guest'} | Provider: {app.provider_name} ({app.model})")
    if runtime.log_descriptions:
        print(f"Logging: {', '.join(runtime.log_descriptions)}")
    print()
    shell.print_transcript()

    try:
        while True:
            try:
                user_input = await asyncio.to_thread(input, USER_PREFIX)
            except (EOFError, KeyboardInterrupt):
                break

            trimmed = user_input.strip()

            if trimmed in ("exit", "quit"):
                break

            if not trimmed:
                continue

            try:
                await shell.handle(user_input)
            except Exception as ex:
                logger.error(f"Unhandled error: {ex}")
    finally:
        await runtime.close()


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
