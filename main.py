"""Entry point — run a small example bot with automatic restarts.

Registers a few handlers to show the delivery-queue style:

* ``/reply <text>``  — echoes ``<text>`` back as a reply
* ``/location <longitude> <latitude>`` — sends a location pin
* any other command  — "unknown command" answer
* inline queries     — one article result echoing the query
* callback queries   — acknowledged with the button data

The dispatch loop is restarted after a recoverable error and stops on a
fatal one.
"""

import asyncio

import config
from bot.dispatcher import Bot
from bot.queues import DeliveryQueue
from core.logger import TelerouteLogger
from sdk.calls import SendLocation
from sdk.exceptions import BotAPIError
from sdk.models import InlineQueryResultArticle, InputTextMessageContent

logger = TelerouteLogger.get_logger()


# ── Handlers ─────────────────────────────────────────────────────────────────


async def reply_handler(queue: DeliveryQueue) -> None:
    async for client, message in queue:
        text = message.text or "(nothing to repeat)"
        try:
            await client.send_message(message.chat.id, text, reply_to_message_id=message.message_id)
        except BotAPIError as exc:
            logger.error("Reply failed", extra={"chat_id": message.chat.id, "error": str(exc)})


async def location_handler(queue: DeliveryQueue) -> None:
    """Parse ``<longitude> <latitude>`` and send a pin, or explain the format."""
    async for client, message in queue:
        parts = (message.text or "").split()
        try:
            longitude, latitude = (float(part) for part in parts)
        except ValueError:
            await _answer(client, message.chat.id, "Couldn't parse the location! Usage: /location <longitude> <latitude>")
            continue
        try:
            await client.acall(SendLocation(chat_id=message.chat.id, longitude=longitude, latitude=latitude))
        except BotAPIError as exc:
            await _answer(client, message.chat.id, f"Telegram error: {exc}")


async def unknown_command_handler(queue: DeliveryQueue) -> None:
    async for client, message in queue:
        await _answer(client, message.chat.id, "Unknown command. Try /reply or /location.")


async def inline_handler(queue: DeliveryQueue) -> None:
    async for client, query in queue:
        result = InlineQueryResultArticle(
            id="echo",
            title=query.query or "Type something",
            input_message_content=InputTextMessageContent(message_text=query.query or "…"),
        )
        try:
            await client.answer_inline_query(query.id, [result], cache_time=0)
        except BotAPIError as exc:
            logger.error("Inline answer failed", extra={"query_id": query.id, "error": str(exc)})


async def callback_handler(queue: DeliveryQueue) -> None:
    async for client, query in queue:
        try:
            await client.answer_callback_query(query.id, text=f"Pressed: {query.data}")
        except BotAPIError as exc:
            logger.error("Callback answer failed", extra={"callback_query_id": query.id, "error": str(exc)})


async def _answer(client, chat_id: int, text: str) -> None:
    try:
        await client.send_message(chat_id, text)
    except BotAPIError as exc:
        logger.error("Send failed", extra={"chat_id": chat_id, "error": str(exc)})


# ── Runner ───────────────────────────────────────────────────────────────────


async def run_forever(bot: Bot, restart_delay: float = config.RESTART_DELAY) -> None:
    """Run the dispatch loop, restarting after recoverable errors.

    The update cursor lives on *bot*, so a restart resumes where the previous
    loop stopped.

    Raises:
        BotAPIError: If the error is fatal.
    """
    push = config.UPDATE_MODE == "push"
    push_options = {
        "host": config.WEBHOOK_HOST,
        "port": config.WEBHOOK_PORT,
        "path": config.WEBHOOK_PATH,
        "secret_token": config.WEBHOOK_SECRET,
    } if push else {}

    while True:
        try:
            await bot.run(push=push, **push_options)
        except BotAPIError as exc:
            if exc.fatal:
                logger.error("Fatal dispatch error, stopping", extra={"error": str(exc), "error_type": type(exc).__name__})
                raise
            logger.warning(
                "Dispatch loop failed, restarting",
                extra={"error": str(exc), "error_type": type(exc).__name__, "retryable": exc.retryable, "delay": restart_delay},
            )
            await asyncio.sleep(restart_delay)


async def main() -> None:
    """Build the bot from :mod:`config` and run it with the example handlers.

    Raises:
        EnvironmentError: If ``BOT_TOKEN`` is not set.
    """
    if not config.BOT_TOKEN:
        raise EnvironmentError("BOT_TOKEN environment variable is not set or is empty.")

    bot = Bot(
        config.BOT_TOKEN,
        host=config.API_HOST,
        update_interval=config.UPDATE_INTERVAL,
        timeout=config.POLL_TIMEOUT,
        request_timeout=config.REQUEST_TIMEOUT,
    )

    logger.info("Teleroute example bot starting", extra={"mode": config.UPDATE_MODE})
    await asyncio.gather(
        run_forever(bot),
        reply_handler(bot.new_cmd("/reply")),
        location_handler(bot.new_cmd("/location")),
        unknown_command_handler(bot.unknown_cmd()),
        inline_handler(bot.inline()),
        callback_handler(bot.callback()),
    )


if __name__ == "__main__":
    asyncio.run(main())
