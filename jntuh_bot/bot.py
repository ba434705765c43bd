import logging
import sys
import threading

from telegram.ext import Application

from jntuh_bot.catalog import Catalog
from jntuh_bot.config import ConfigError, load_settings
from jntuh_bot.conversation import ConversationEngine
from jntuh_bot.handlers import register_handlers
from jntuh_bot.web import create_app, run_flask

# --- LOGGING ---
logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s", level=logging.INFO
)
logging.getLogger("httpx").setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


def main():
    try:
        settings = load_settings()
    except ConfigError as e:
        logger.error(f"Error: {e}")
        sys.exit(1)
    logging.getLogger().setLevel(settings.log_level)

    catalog = Catalog(settings.db_name)
    catalog.init_db()

    application = Application.builder().token(settings.token).build()
    engine = ConversationEngine(application.bot, catalog, settings)
    register_handlers(application, engine)

    # Web API in the background, bot in the foreground
    web_app = create_app(catalog, settings.admin_ids)
    threading.Thread(target=run_flask, args=(web_app, settings.port), daemon=True).start()
    logger.info(f"Web API on port {settings.port}, admins: {len(settings.admin_ids)}")

    application.run_polling()


if __name__ == "__main__":
    main()
