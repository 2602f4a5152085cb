"""Main entry point for the claim rewards bot."""
from claimrewards_bot.config import Settings
from claimrewards_bot.bot import create_bot
from claimrewards_bot.utils.logger import get_logger

logger = get_logger("claimrewards.run")


def main() -> None:
    settings = Settings()

    missing = settings.validate()
    if missing:
        logger.error("Missing %s in environment or .env. See .env.example", ", ".join(missing))
        return

    bot = create_bot(settings)
    logger.info("Using data directory %s", settings.DATA_DIR)
    # discord.py installs its own handler unless told otherwise
    bot.run(settings.TOKEN, log_handler=None)


if __name__ == "__main__":
    main()
