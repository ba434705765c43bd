"""Conversation state machine.

Every inbound event for a chat is handled under that chat's lock. An event
either continues the chat's open dialog (search, request or upload) or is
dispatched to the main menu. Errors are contained here: store failures turn
into a generic reply and delivery failures are logged, so one broken chat
never affects another.
"""

import asyncio
import logging
import sqlite3
from typing import Callable, Iterable, List, Optional

from telegram import Bot, User
from telegram.constants import ChatMemberStatus
from telegram.error import TelegramError

from jntuh_bot import keyboards, texts
from jntuh_bot.catalog import Catalog
from jntuh_bot.config import Settings
from jntuh_bot.dialogs import (
    EmptySelectionError,
    EmptyValueError,
    InvalidFileTypeError,
    InvalidRequestFormatError,
    RequestDialog,
    SearchDialog,
    SourceFile,
    UnknownBranchError,
    UploadDialog,
    UploadStep,
    parse_request,
)
from jntuh_bot.models import BRANCHES, FileRecord, FileType
from jntuh_bot.sessions import InMemorySessionStore, SessionStore

logger = logging.getLogger(__name__)

MEMBER_STATUSES = (
    ChatMemberStatus.MEMBER,
    ChatMemberStatus.ADMINISTRATOR,
    ChatMemberStatus.OWNER,
)

STEP_ERRORS = {
    UploadStep.SUBJECT: texts.EMPTY_SUBJECT,
    UploadStep.REGULATION: texts.EMPTY_REGULATION,
    UploadStep.TYPE: texts.INVALID_TYPE,
}


class ConversationEngine:
    def __init__(
        self,
        bot: Bot,
        catalog: Catalog,
        settings: Settings,
        sessions: Optional[SessionStore] = None,
    ):
        self.bot = bot
        self.catalog = catalog
        self.settings = settings
        self.sessions = sessions if sessions is not None else InMemorySessionStore()

    # --- Outbound helpers ---

    async def _send(self, chat_id: int, text: str, **kwargs):
        try:
            return await self.bot.send_message(chat_id=chat_id, text=text, **kwargs)
        except TelegramError as e:
            logger.warning(f"Could not send message to {chat_id}: {e}")
            return None

    async def _answer(self, callback_id: str, text: Optional[str] = None) -> None:
        try:
            await self.bot.answer_callback_query(callback_query_id=callback_id, text=text)
        except TelegramError as e:
            logger.warning(f"Could not answer callback {callback_id}: {e}")

    async def notify_admins(self, text: str, exclude: Optional[int] = None) -> None:
        """Send ``text`` to every admin except ``exclude``, one task per admin."""
        recipients = sorted(a for a in self.settings.admin_ids if a != exclude)
        if not recipients:
            return
        results = await asyncio.gather(
            *(self.bot.send_message(chat_id=admin_id, text=text) for admin_id in recipients),
            return_exceptions=True,
        )
        for admin_id, result in zip(recipients, results):
            if isinstance(result, Exception):
                logger.warning(f"Could not notify admin {admin_id}: {result}")

    async def _deliver(
        self,
        chat_id: int,
        user_id: int,
        files: Iterable[FileRecord],
        caption: Callable[[FileRecord], str],
    ) -> int:
        """Send each file on its own; a failed file does not stop the rest."""
        is_admin = self.settings.is_admin(user_id)
        delivered = 0
        for f in files:
            markup = keyboards.delete_file_keyboard(f.id) if is_admin else None
            try:
                await self.bot.send_document(
                    chat_id=chat_id, document=f.file_id, caption=caption(f), reply_markup=markup
                )
            except TelegramError as e:
                logger.warning(f"Error sending file {f.id} to {chat_id}: {e}")
                await self._send(chat_id, texts.send_failed(f.file_name))
                continue
            delivered += 1
            try:
                self.catalog.record_download(f.id, user_id)
            except sqlite3.Error:
                logger.exception(f"Could not record download of file {f.id}")
        return delivered

    # --- Access control ---

    def _touch_user(self, user: User) -> None:
        try:
            self.catalog.upsert_user(user.id, user.username, user.first_name, user.last_name)
        except sqlite3.Error:
            logger.exception(f"Could not register user {user.id}")

    async def is_member(self, user_id: int) -> bool:
        # No caching: every gated event asks Telegram again.
        try:
            member = await self.bot.get_chat_member(
                chat_id=self.settings.must_join_channel, user_id=user_id
            )
        except TelegramError as e:
            logger.warning(f"Membership check failed for {user_id}: {e}")
            return False
        return member.status in MEMBER_STATUSES

    async def _passes_gate(self, chat_id: int, user_id: int) -> bool:
        if self.settings.is_admin(user_id) or await self.is_member(user_id):
            return True
        logger.info(f"User {user_id} has not joined {self.settings.must_join_channel}")
        await self._send(
            chat_id,
            texts.MUST_JOIN,
            reply_markup=keyboards.join_channel_keyboard(self.settings.channel_url),
        )
        return False

    # --- Commands ---

    async def handle_start(self, chat_id: int, user: User) -> None:
        self._touch_user(user)
        await self._send(chat_id, texts.WELCOME, reply_markup=keyboards.main_menu_keyboard())

    async def handle_help(self, chat_id: int, user: User) -> None:
        self._touch_user(user)
        await self._send(chat_id, texts.HELP)

    async def handle_cancel(self, chat_id: int, user: User) -> None:
        async with self.sessions.lock(chat_id):
            self._touch_user(user)
            removed = self.sessions.remove(chat_id)
        if removed is None:
            await self._send(chat_id, texts.NOTHING_TO_CANCEL)
        else:
            logger.info(f"Chat {chat_id} cancelled {removed.kind.value} dialog")
            await self._send(chat_id, texts.CANCELLED, reply_markup=keyboards.main_menu_keyboard())

    async def handle_admin_command(self, chat_id: int, user: User) -> None:
        self._touch_user(user)
        if not self.settings.is_admin(user.id):
            return
        await self._send(chat_id, texts.ADMIN_PANEL, reply_markup=keyboards.admin_panel_keyboard())

    # --- Text messages ---

    async def handle_text(self, chat_id: int, user: User, text: str) -> None:
        async with self.sessions.lock(chat_id):
            self._touch_user(user)
            dialog = self.sessions.get(chat_id)
            if dialog is None:
                if await self._passes_gate(chat_id, user.id):
                    await self._dispatch_menu(chat_id, user, text)
                return

            if isinstance(dialog, SearchDialog):
                self.sessions.remove(chat_id)
                await self._run_search(chat_id, user, dialog.file_type, text)
            elif isinstance(dialog, RequestDialog):
                self.sessions.remove(chat_id)
                await self._submit_request(chat_id, user, text)
            else:
                await self._advance_upload(chat_id, user, dialog, text)

    async def _dispatch_menu(self, chat_id: int, user: User, text: str) -> None:
        if text == keyboards.FIND_NOTES:
            await self._open_search(chat_id, FileType.NOTES)
        elif text == keyboards.FIND_PAPERS:
            await self._open_search(chat_id, FileType.PAPER)
        elif text == keyboards.REQUEST_FILES:
            self.sessions.put(chat_id, RequestDialog())
            await self._send(chat_id, texts.REQUEST_FORM)
        elif text == keyboards.BROWSE_BRANCH:
            await self._send(
                chat_id, texts.BROWSE_PROMPT, reply_markup=keyboards.browse_branch_keyboard()
            )
        elif text == keyboards.FILE_STATUS:
            await self._show_file_status(chat_id)
        elif text == keyboards.BOT_USERS:
            if self.settings.is_admin(user.id):
                await self._show_all_users(chat_id)
            else:
                await self._show_user_stats(chat_id, user.id)
        elif text == keyboards.HELP:
            await self._send(chat_id, texts.HELP)
        else:
            await self._send(chat_id, texts.MENU_HINT, reply_markup=keyboards.main_menu_keyboard())

    async def _open_search(self, chat_id: int, file_type: FileType) -> None:
        self.sessions.put(chat_id, SearchDialog(file_type))
        await self._send(chat_id, texts.search_prompt(file_type))

    async def _run_search(self, chat_id: int, user: User, file_type: FileType, query: str) -> List[FileRecord]:
        query = (query or "").strip()
        try:
            files = self.catalog.search_by_kind_and_subject(file_type, query)
        except sqlite3.Error:
            logger.exception(f"Search failed for {query!r}")
            await self._send(chat_id, texts.GENERIC_ERROR)
            return []
        if not files:
            await self._send(chat_id, texts.search_not_found(file_type, query))
            return files
        await self._send(chat_id, texts.search_found(len(files), file_type, query))
        await self._deliver(chat_id, user.id, files, texts.search_caption)
        return files

    async def _submit_request(self, chat_id: int, user: User, text: str) -> None:
        try:
            fields = parse_request(text)
        except InvalidRequestFormatError:
            await self._send(chat_id, texts.REQUEST_FORMAT_ERROR)
            return
        try:
            self.catalog.save_request(
                user_id=user.id,
                username=user.username,
                first_name=user.first_name,
                subject=fields.subject,
                branch=fields.branch,
                regulation=fields.regulation,
                file_type=fields.file_type,
                description=fields.description,
            )
        except sqlite3.Error:
            logger.exception(f"Could not save request from {user.id}")
            await self._send(chat_id, texts.REQUEST_FAILED)
            return
        await self._send(chat_id, texts.REQUEST_SAVED)
        await self.notify_admins(texts.request_notice(user.username, text))

    # --- Upload dialog ---

    async def handle_document(self, chat_id: int, user: User, file_id: str, file_name: Optional[str]) -> None:
        async with self.sessions.lock(chat_id):
            self._touch_user(user)
            if not self.settings.is_admin(user.id):
                await self._send(chat_id, texts.ADMINS_ONLY_UPLOAD)
                return

            file_name = file_name or "document"
            previous = self.sessions.get(chat_id)
            if isinstance(previous, UploadDialog):
                await self._send(chat_id, texts.upload_replaced(previous.source.file_name))
            self.sessions.put(chat_id, UploadDialog(source=SourceFile(file_id, file_name)))
            logger.info(f"Admin {user.id} started upload of {file_name}")
            await self._send(chat_id, texts.file_received(file_name))

    async def _advance_upload(self, chat_id: int, user: User, dialog: UploadDialog, text: str) -> None:
        if dialog.step is UploadStep.BRANCHES:
            # Branches come from buttons; typed text only brings the selector back.
            await self._show_branch_selector(chat_id, dialog)
            return

        try:
            if dialog.step is UploadStep.SUBJECT:
                nxt = dialog.with_subject(text)
            elif dialog.step is UploadStep.REGULATION:
                nxt = dialog.with_regulation(text)
            else:
                nxt = dialog.with_type(text)
        except (EmptyValueError, InvalidFileTypeError):
            await self._send(chat_id, STEP_ERRORS[dialog.step])
            return

        if nxt.step is UploadStep.DONE:
            self.sessions.remove(chat_id)
            await self._finish_upload(chat_id, user, nxt)
            return

        self.sessions.put(chat_id, nxt)
        if nxt.step is UploadStep.BRANCHES:
            await self._show_branch_selector(chat_id, nxt)
        else:
            await self._send(chat_id, texts.TYPE_PROMPT)

    async def _show_branch_selector(self, chat_id: int, dialog: UploadDialog) -> None:
        await self._send(
            chat_id,
            texts.branch_selector(dialog.selection_label),
            reply_markup=keyboards.branch_selector_keyboard(),
        )

    async def _finish_upload(self, chat_id: int, user: User, dialog: UploadDialog) -> None:
        branches = dialog.ordered_branches()
        regulation = dialog.regulation.upper()
        file_type = dialog.file_type.value
        try:
            new_id = self.catalog.save_file(
                file_name=dialog.source.file_name,
                file_id=dialog.source.file_id,
                subject=dialog.subject,
                branches=branches,
                regulation=regulation,
                file_type=file_type,
                uploaded_by=user.id,
            )
        except sqlite3.Error:
            logger.exception(f"Upload error for {dialog.source.file_name}")
            await self._send(chat_id, texts.UPLOAD_FAILED)
            return

        logger.info(f"Saved file {new_id} ({dialog.subject}, {', '.join(branches)}) from admin {user.id}")
        summary = texts.upload_success(
            dialog.source.file_name, dialog.subject, ", ".join(branches), regulation, file_type
        )
        await self._send(chat_id, summary)
        await self.notify_admins(texts.upload_notice(summary), exclude=user.id)

    # --- Callback queries ---

    async def handle_callback(
        self, callback_id: str, chat_id: int, message_id: int, user: User, data: str
    ) -> None:
        data = data or ""
        async with self.sessions.lock(chat_id):
            self._touch_user(user)
            if data == keyboards.CHECK_MEMBERSHIP:
                await self._check_membership(callback_id, chat_id, user.id)
            elif keyboards.is_selector_callback(data):
                await self._handle_selector(callback_id, chat_id, message_id, data)
            elif data.startswith("admin_") or data.startswith(keyboards.DELETE_FILE_PREFIX):
                if not self.settings.is_admin(user.id):
                    await self._answer(callback_id, texts.ADMINS_ONLY)
                    return
                await self._answer(callback_id)
                await self._handle_admin_action(chat_id, message_id, data)
            elif data.startswith(keyboards.BROWSE_BRANCH_PREFIX):
                await self._answer(callback_id)
                if await self._passes_gate(chat_id, user.id):
                    code = data[len(keyboards.BROWSE_BRANCH_PREFIX):]
                    await self._browse_branch(chat_id, user, code)
            else:
                logger.debug(f"Ignoring unknown callback {data!r}")
                await self._answer(callback_id)

    async def _check_membership(self, callback_id: str, chat_id: int, user_id: int) -> None:
        if self.settings.is_admin(user_id) or await self.is_member(user_id):
            await self._answer(callback_id, "✅ Membership verified!")
            await self._send(chat_id, texts.MEMBERSHIP_OK, reply_markup=keyboards.main_menu_keyboard())
        else:
            await self._answer(callback_id, "❌ Please join the channel first!")

    async def _handle_selector(self, callback_id: str, chat_id: int, message_id: int, data: str) -> None:
        dialog = self.sessions.get(chat_id)
        if not isinstance(dialog, UploadDialog) or dialog.step is not UploadStep.BRANCHES:
            await self._answer(callback_id, texts.SELECTION_EXPIRED)
            return

        if data == keyboards.CONFIRM_BRANCHES:
            try:
                nxt = dialog.confirm_branches()
            except EmptySelectionError:
                await self._answer(callback_id, texts.SELECT_AT_LEAST_ONE)
                return
            self.sessions.put(chat_id, nxt)
            await self._answer(callback_id, texts.SELECTION_CONFIRMED)
            await self._send(chat_id, texts.branches_confirmed(nxt.selection_label))
            return

        if data == keyboards.SELECT_ALL_BRANCHES:
            nxt, notice = dialog.select_all(), texts.ALL_SELECTED
        elif data == keyboards.CLEAR_ALL_BRANCHES:
            nxt, notice = dialog.clear_all(), texts.ALL_CLEARED
        else:
            code = data[len(keyboards.TOGGLE_BRANCH_PREFIX):]
            try:
                nxt = dialog.toggle_branch(code)
            except UnknownBranchError:
                await self._answer(callback_id, texts.UNKNOWN_BRANCH)
                return
            notice = texts.branch_toggled(code, code in nxt.selected_branches)

        self.sessions.put(chat_id, nxt)
        await self._answer(callback_id, notice)
        # Edit in place so repeated presses do not flood the chat.
        try:
            await self.bot.edit_message_text(
                text=texts.branch_selector(nxt.selection_label),
                chat_id=chat_id,
                message_id=message_id,
                reply_markup=keyboards.branch_selector_keyboard(),
            )
        except TelegramError as e:
            logger.debug(f"Selector edit skipped in {chat_id}: {e}")

    async def _browse_branch(self, chat_id: int, user: User, code: str) -> None:
        if code not in BRANCHES:
            await self._send(chat_id, texts.branch_not_found(code))
            return
        try:
            files = self.catalog.list_by_branch(code)
        except sqlite3.Error:
            logger.exception(f"Browse failed for {code}")
            await self._send(chat_id, texts.GENERIC_ERROR)
            return
        if not files:
            await self._send(chat_id, texts.branch_not_found(code))
            return
        await self._send(chat_id, texts.branch_found(code))
        await self._deliver(chat_id, user.id, files, texts.browse_caption)

    # --- Reports ---

    async def _show_file_status(self, chat_id: int) -> None:
        try:
            summary = self.catalog.file_status_summary()
        except sqlite3.Error:
            logger.exception("Could not build file status")
            await self._send(chat_id, texts.FILE_STATUS_ERROR)
            return
        await self._send(chat_id, texts.file_status(summary))

    async def _show_user_stats(self, chat_id: int, user_id: int) -> None:
        try:
            summary = self.catalog.user_status_summary(user_id)
        except sqlite3.Error:
            logger.exception(f"Could not build stats for {user_id}")
            await self._send(chat_id, texts.USER_STATS_ERROR)
            return
        await self._send(chat_id, texts.user_stats(summary))

    async def _show_all_users(self, chat_id: int) -> None:
        try:
            summary = self.catalog.all_users_summary()
        except sqlite3.Error:
            logger.exception("Could not build users report")
            await self._send(chat_id, texts.USERS_ERROR)
            return
        await self._send(chat_id, texts.users_report(summary))

    async def _handle_admin_action(self, chat_id: int, message_id: int, data: str) -> None:
        try:
            if data == keyboards.ADMIN_UPLOAD_HELP:
                await self._send(chat_id, texts.UPLOAD_HELP)
            elif data == keyboards.ADMIN_VIEW_REQUESTS:
                await self._send(chat_id, texts.pending_requests(self.catalog.pending_requests()))
            elif data == keyboards.ADMIN_STATS:
                await self._send(chat_id, texts.admin_stats(self.catalog.admin_stats()))
            elif data == keyboards.ADMIN_ALL_USERS:
                await self._show_all_users(chat_id)
            elif data == keyboards.ADMIN_DELETE_FILE:
                await self._send(chat_id, texts.DELETE_HELP)
            elif data.startswith(keyboards.DELETE_FILE_PREFIX):
                await self._delete_file(chat_id, message_id, data[len(keyboards.DELETE_FILE_PREFIX):])
        except sqlite3.Error:
            logger.exception(f"Admin action {data!r} failed")
            await self._send(chat_id, texts.GENERIC_ERROR)

    async def _delete_file(self, chat_id: int, message_id: int, raw_id: str) -> None:
        try:
            file_id = int(raw_id)
        except ValueError:
            logger.warning(f"Bad delete token {raw_id!r}")
            return
        if not self.catalog.delete_file(file_id):
            await self._send(chat_id, "❌ File not found.")
            return
        logger.info(f"File {file_id} deleted from chat {chat_id}")
        try:
            await self.bot.edit_message_caption(
                chat_id=chat_id, message_id=message_id, caption="🗑 File deleted by Admin."
            )
        except TelegramError as e:
            logger.debug(f"Caption edit skipped in {chat_id}: {e}")
            await self._send(chat_id, "🗑 File deleted by Admin.")
