import logging

from telegram import Update
from telegram.ext import (
    Application,
    CallbackQueryHandler,
    CommandHandler,
    ContextTypes,
    MessageHandler,
    filters,
)

from jntuh_bot.conversation import ConversationEngine

logger = logging.getLogger(__name__)

ENGINE_KEY = "engine"


def _engine(context: ContextTypes.DEFAULT_TYPE) -> ConversationEngine:
    return context.bot_data[ENGINE_KEY]


async def start(update: Update, context: ContextTypes.DEFAULT_TYPE):
    await _engine(context).handle_start(update.effective_chat.id, update.effective_user)


async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    await _engine(context).handle_help(update.effective_chat.id, update.effective_user)


async def cancel(update: Update, context: ContextTypes.DEFAULT_TYPE):
    await _engine(context).handle_cancel(update.effective_chat.id, update.effective_user)


async def admin_panel(update: Update, context: ContextTypes.DEFAULT_TYPE):
    await _engine(context).handle_admin_command(update.effective_chat.id, update.effective_user)


async def text_message(update: Update, context: ContextTypes.DEFAULT_TYPE):
    await _engine(context).handle_text(
        update.effective_chat.id, update.effective_user, update.message.text
    )


async def document_message(update: Update, context: ContextTypes.DEFAULT_TYPE):
    doc = update.message.document
    await _engine(context).handle_document(
        update.effective_chat.id, update.effective_user, doc.file_id, doc.file_name
    )


async def callback_query(update: Update, context: ContextTypes.DEFAULT_TYPE):
    query = update.callback_query
    if query.message is None:
        # Buttons on messages the bot can no longer see.
        await query.answer()
        return
    await _engine(context).handle_callback(
        query.id, query.message.chat.id, query.message.message_id, query.from_user, query.data
    )


async def error_handler(update: object, context: ContextTypes.DEFAULT_TYPE):
    logger.error("Unhandled error while processing an update", exc_info=context.error)


def register_handlers(application: Application, engine: ConversationEngine) -> None:
    application.bot_data[ENGINE_KEY] = engine

    application.add_handler(CommandHandler("start", start))
    application.add_handler(CommandHandler("help", help_command))
    application.add_handler(CommandHandler("cancel", cancel))
    application.add_handler(CommandHandler("admin", admin_panel))

    application.add_handler(MessageHandler(filters.Document.ALL, document_message))
    application.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND, text_message))
    application.add_handler(CallbackQueryHandler(callback_query))

    application.add_error_handler(error_handler)
