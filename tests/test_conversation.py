"""
Test suite for ConversationEngine.

Drives the engine with inbound events against a real sqlite catalog and a
mocked telegram.Bot, then checks dialog state, catalog writes and outbound
calls.
"""

import sqlite3
from unittest.mock import MagicMock

import pytest
from telegram import User
from telegram.error import BadRequest, Forbidden, NetworkError

from jntuh_bot import keyboards, texts
from jntuh_bot.dialogs import RequestDialog, SearchDialog, UploadDialog, UploadStep
from jntuh_bot.models import BRANCHES, FileType

from helpers import ADMIN_ID, OTHER_ADMIN_ID, STUDENT_ID, answers, insert_legacy_file, sent_texts, sent_to

ADMIN_CHAT = ADMIN_ID
STUDENT_CHAT = STUDENT_ID
SELECTOR_MESSAGE = 777


def _save(catalog, subject, branches=("CSE",), file_type="notes"):
    return catalog.save_file(
        file_name=f"{subject}.pdf",
        file_id=f"tg-{subject}",
        subject=subject,
        branches=list(branches),
        regulation="R18",
        file_type=file_type,
        uploaded_by=ADMIN_ID,
    )


async def _press(engine, user, data, chat_id=None, message_id=SELECTOR_MESSAGE):
    await engine.handle_callback("cb-1", chat_id or user.id, message_id, user, data)


async def _upload_to_branches(engine, admin, subject="Data Structures"):
    await engine.handle_document(ADMIN_CHAT, admin, "tg-doc-1", "ds.pdf")
    await engine.handle_text(ADMIN_CHAT, admin, subject)


class TestEntryGate:
    @pytest.mark.asyncio
    async def test_non_member_gets_join_prompt(self, engine, bot, sessions, student):
        bot.get_chat_member.return_value = MagicMock(status="left")

        await engine.handle_text(STUDENT_CHAT, student, keyboards.FIND_NOTES)

        assert sent_texts(bot) == [texts.MUST_JOIN]
        markup = bot.send_message.await_args.kwargs["reply_markup"]
        buttons = markup.inline_keyboard[0]
        assert buttons[0].url == "https://t.me/testchannel"
        assert buttons[1].callback_data == keyboards.CHECK_MEMBERSHIP
        assert sessions.get(STUDENT_CHAT) is None

    @pytest.mark.asyncio
    async def test_gateway_error_denies(self, engine, bot, student):
        bot.get_chat_member.side_effect = NetworkError("timeout")

        await engine.handle_text(STUDENT_CHAT, student, keyboards.HELP)

        assert sent_texts(bot) == [texts.MUST_JOIN]

    @pytest.mark.asyncio
    async def test_membership_checked_every_time(self, engine, bot, student):
        await engine.handle_text(STUDENT_CHAT, student, keyboards.HELP)
        await engine.handle_text(STUDENT_CHAT, student, keyboards.HELP)

        assert bot.get_chat_member.await_count == 2
        assert bot.get_chat_member.await_args.kwargs == {"chat_id": "@testchannel", "user_id": STUDENT_ID}

    @pytest.mark.asyncio
    async def test_admin_skips_membership_check(self, engine, bot, admin):
        await engine.handle_text(ADMIN_CHAT, admin, keyboards.HELP)

        bot.get_chat_member.assert_not_awaited()
        assert sent_texts(bot) == [texts.HELP]

    @pytest.mark.asyncio
    async def test_open_dialog_continues_without_gate(self, engine, bot, catalog, student):
        await engine.handle_text(STUDENT_CHAT, student, keyboards.FIND_NOTES)
        bot.get_chat_member.return_value = MagicMock(status="left")

        await engine.handle_text(STUDENT_CHAT, student, "DBMS")

        assert bot.get_chat_member.await_count == 1
        assert texts.MUST_JOIN not in sent_texts(bot)

    @pytest.mark.asyncio
    async def test_check_membership_button(self, engine, bot, student):
        await _press(engine, student, keyboards.CHECK_MEMBERSHIP)

        assert answers(bot) == ["✅ Membership verified!"]
        assert sent_texts(bot) == [texts.MEMBERSHIP_OK]

    @pytest.mark.asyncio
    async def test_check_membership_button_still_not_member(self, engine, bot, student):
        bot.get_chat_member.return_value = MagicMock(status="kicked")

        await _press(engine, student, keyboards.CHECK_MEMBERSHIP)

        assert answers(bot) == ["❌ Please join the channel first!"]
        bot.send_message.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_every_event_registers_the_user(self, engine, catalog, bot, student):
        bot.get_chat_member.return_value = MagicMock(status="left")

        await engine.handle_text(STUDENT_CHAT, student, "hello")

        assert catalog.get_user(STUDENT_ID).username == "ravi"


class TestSearchDialog:
    @pytest.mark.asyncio
    async def test_menu_opens_search(self, engine, bot, sessions, student):
        await engine.handle_text(STUDENT_CHAT, student, keyboards.FIND_PAPERS)

        assert sessions.get(STUDENT_CHAT) == SearchDialog(FileType.PAPER)
        assert sent_texts(bot) == [texts.search_prompt(FileType.PAPER)]

    @pytest.mark.asyncio
    async def test_search_sends_files_and_counts_downloads(self, engine, bot, catalog, sessions, student):
        file_id = _save(catalog, "Data Structures")

        await engine.handle_text(STUDENT_CHAT, student, keyboards.FIND_NOTES)
        await engine.handle_text(STUDENT_CHAT, student, "data")

        assert sessions.get(STUDENT_CHAT) is None
        assert sent_texts(bot)[-1] == texts.search_found(1, FileType.NOTES, "data")
        doc_call = bot.send_document.await_args
        assert doc_call.kwargs["document"] == "tg-Data Structures"
        assert doc_call.kwargs["reply_markup"] is None
        assert catalog.get_file(file_id).downloads == 1
        assert catalog.get_user(STUDENT_ID).download_count == 1

    @pytest.mark.asyncio
    async def test_not_found_ends_dialog(self, engine, bot, sessions, student):
        await engine.handle_text(STUDENT_CHAT, student, keyboards.FIND_NOTES)
        await engine.handle_text(STUDENT_CHAT, student, "Astrophysics")

        assert sessions.get(STUDENT_CHAT) is None
        assert sent_texts(bot)[-1] == texts.search_not_found(FileType.NOTES, "Astrophysics")
        bot.send_document.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failed_file_does_not_stop_delivery(self, engine, bot, catalog, student):
        ids = [_save(catalog, f"Maths {i}") for i in range(3)]
        bot.send_document.side_effect = [None, Forbidden("bot was blocked"), None]

        await engine.handle_text(STUDENT_CHAT, student, keyboards.FIND_NOTES)
        await engine.handle_text(STUDENT_CHAT, student, "maths")

        assert bot.send_document.await_count == 3
        assert texts.send_failed("Maths 1.pdf") in sent_texts(bot)
        assert [catalog.get_file(i).downloads for i in ids] == [1, 0, 1]

    @pytest.mark.asyncio
    async def test_admin_results_carry_delete_button(self, engine, bot, catalog, admin):
        file_id = _save(catalog, "DBMS")

        await engine.handle_text(ADMIN_CHAT, admin, keyboards.FIND_NOTES)
        await engine.handle_text(ADMIN_CHAT, admin, "dbms")

        markup = bot.send_document.await_args.kwargs["reply_markup"]
        assert markup.inline_keyboard[0][0].callback_data == f"del_{file_id}"

    @pytest.mark.asyncio
    async def test_store_failure_gives_generic_message(self, engine, bot, catalog, sessions, student, monkeypatch):
        def broken(*args, **kwargs):
            raise sqlite3.OperationalError("disk I/O error")

        monkeypatch.setattr(catalog, "search_by_kind_and_subject", broken)

        await engine.handle_text(STUDENT_CHAT, student, keyboards.FIND_NOTES)
        await engine.handle_text(STUDENT_CHAT, student, "dbms")

        assert sent_texts(bot)[-1] == texts.GENERIC_ERROR
        assert sessions.get(STUDENT_CHAT) is None


class TestRequestDialog:
    @pytest.mark.asyncio
    async def test_three_fields_rejected_without_saving(self, engine, bot, catalog, sessions, student):
        await engine.handle_text(STUDENT_CHAT, student, keyboards.REQUEST_FILES)
        assert isinstance(sessions.get(STUDENT_CHAT), RequestDialog)

        await engine.handle_text(STUDENT_CHAT, student, "DBMS|CSE|R18")

        assert sent_texts(bot)[-1] == texts.REQUEST_FORMAT_ERROR
        assert catalog.pending_requests() == []
        assert sessions.get(STUDENT_CHAT) is None

    @pytest.mark.asyncio
    async def test_valid_request_saved_and_admins_notified(self, engine, bot, catalog, sessions, student):
        text = "DBMS|CSE|R18|notes|need full notes"

        await engine.handle_text(STUDENT_CHAT, student, keyboards.REQUEST_FILES)
        await engine.handle_text(STUDENT_CHAT, student, text)

        (req,) = catalog.pending_requests()
        assert req.description == "need full notes"
        assert req.user_id == STUDENT_ID
        assert sent_to(bot, STUDENT_CHAT)[-1] == texts.REQUEST_SAVED
        assert sent_to(bot, ADMIN_ID) == [texts.request_notice("ravi", text)]
        assert sent_to(bot, OTHER_ADMIN_ID) == [texts.request_notice("ravi", text)]
        assert sessions.get(STUDENT_CHAT) is None

    @pytest.mark.asyncio
    async def test_one_admin_unreachable_does_not_block_others(self, engine, bot, catalog, student):
        def send(**kwargs):
            if kwargs["chat_id"] == ADMIN_ID:
                raise Forbidden("blocked")
            return MagicMock(message_id=1)

        await engine.handle_text(STUDENT_CHAT, student, keyboards.REQUEST_FILES)
        bot.send_message.side_effect = send
        await engine.handle_text(STUDENT_CHAT, student, "OS|IT|R22|paper")

        assert len(catalog.pending_requests()) == 1
        assert len(sent_to(bot, OTHER_ADMIN_ID)) == 1


class TestUploadDialog:
    @pytest.mark.asyncio
    async def test_non_admin_document_rejected(self, engine, bot, sessions, student):
        await engine.handle_document(STUDENT_CHAT, student, "tg-x", "x.pdf")

        assert sent_texts(bot) == [texts.ADMINS_ONLY_UPLOAD]
        assert sessions.get(STUDENT_CHAT) is None

    @pytest.mark.asyncio
    async def test_document_opens_upload_at_subject(self, engine, bot, sessions, admin):
        await engine.handle_document(ADMIN_CHAT, admin, "tg-doc-1", "ds.pdf")

        dialog = sessions.get(ADMIN_CHAT)
        assert isinstance(dialog, UploadDialog)
        assert dialog.step is UploadStep.SUBJECT
        assert dialog.source.file_id == "tg-doc-1"
        assert sent_texts(bot) == [texts.file_received("ds.pdf")]

    @pytest.mark.asyncio
    async def test_full_upload(self, engine, bot, catalog, sessions, admin):
        await _upload_to_branches(engine, admin)
        assert sessions.get(ADMIN_CHAT).step is UploadStep.BRANCHES

        await _press(engine, admin, f"{keyboards.TOGGLE_BRANCH_PREFIX}IT")
        await _press(engine, admin, f"{keyboards.TOGGLE_BRANCH_PREFIX}CSE")
        await _press(engine, admin, keyboards.CONFIRM_BRANCHES)
        assert sessions.get(ADMIN_CHAT).step is UploadStep.REGULATION

        await engine.handle_text(ADMIN_CHAT, admin, "r18")
        await engine.handle_text(ADMIN_CHAT, admin, "Notes")

        (record,) = catalog.list_files()
        assert record.subject == "Data Structures"
        assert record.branches == ["CSE", "IT"]
        assert record.regulation == "R18"
        assert record.type == "notes"
        assert record.file_id == "tg-doc-1"
        assert record.uploaded_by == ADMIN_ID
        assert sessions.get(ADMIN_CHAT) is None

        summary = texts.upload_success("ds.pdf", "Data Structures", "CSE, IT", "R18", "notes")
        assert sent_to(bot, ADMIN_CHAT)[-1] == summary
        assert sent_to(bot, OTHER_ADMIN_ID) == [texts.upload_notice(summary)]

    @pytest.mark.asyncio
    async def test_toggle_edits_selector_in_place(self, engine, bot, sessions, admin):
        await _upload_to_branches(engine, admin)
        sends_before = bot.send_message.await_count

        await _press(engine, admin, f"{keyboards.TOGGLE_BRANCH_PREFIX}ECE")

        assert bot.send_message.await_count == sends_before
        edit = bot.edit_message_text.await_args.kwargs
        assert edit["message_id"] == SELECTOR_MESSAGE
        assert edit["text"] == texts.branch_selector("ECE")
        assert answers(bot)[-1] == texts.branch_toggled("ECE", True)

    @pytest.mark.asyncio
    async def test_toggle_twice_restores_selection(self, engine, bot, sessions, admin):
        await _upload_to_branches(engine, admin)
        await _press(engine, admin, f"{keyboards.TOGGLE_BRANCH_PREFIX}EEE")
        before = sessions.get(ADMIN_CHAT).selected_branches

        await _press(engine, admin, f"{keyboards.TOGGLE_BRANCH_PREFIX}CSE")
        await _press(engine, admin, f"{keyboards.TOGGLE_BRANCH_PREFIX}CSE")

        assert sessions.get(ADMIN_CHAT).selected_branches == before
        assert answers(bot)[-1] == texts.branch_toggled("CSE", False)

    @pytest.mark.asyncio
    async def test_select_all_then_clear_all(self, engine, bot, sessions, admin):
        await _upload_to_branches(engine, admin)
        await _press(engine, admin, f"{keyboards.TOGGLE_BRANCH_PREFIX}CIVIL")

        await _press(engine, admin, keyboards.SELECT_ALL_BRANCHES)
        assert sessions.get(ADMIN_CHAT).selected_branches == frozenset(BRANCHES)

        await _press(engine, admin, keyboards.CLEAR_ALL_BRANCHES)
        assert sessions.get(ADMIN_CHAT).selected_branches == frozenset()
        assert bot.edit_message_text.await_args.kwargs["text"] == texts.branch_selector("None")

    @pytest.mark.asyncio
    async def test_confirm_empty_selection_rejected(self, engine, bot, sessions, admin):
        await _upload_to_branches(engine, admin)

        await _press(engine, admin, keyboards.CONFIRM_BRANCHES)

        assert sessions.get(ADMIN_CHAT).step is UploadStep.BRANCHES
        assert answers(bot)[-1] == texts.SELECT_AT_LEAST_ONE

    @pytest.mark.asyncio
    async def test_unknown_branch_code_ignored(self, engine, bot, sessions, admin):
        await _upload_to_branches(engine, admin)

        await _press(engine, admin, f"{keyboards.TOGGLE_BRANCH_PREFIX}ARCH")

        assert sessions.get(ADMIN_CHAT).selected_branches == frozenset()
        assert answers(bot)[-1] == texts.UNKNOWN_BRANCH

    @pytest.mark.asyncio
    async def test_stray_text_redisplays_selector(self, engine, bot, sessions, admin):
        await _upload_to_branches(engine, admin)
        await _press(engine, admin, f"{keyboards.TOGGLE_BRANCH_PREFIX}IT")

        await engine.handle_text(ADMIN_CHAT, admin, "CSE please")

        dialog = sessions.get(ADMIN_CHAT)
        assert dialog.step is UploadStep.BRANCHES
        assert dialog.selected_branches == frozenset({"IT"})
        assert sent_texts(bot)[-1] == texts.branch_selector("IT")

    @pytest.mark.asyncio
    async def test_invalid_type_holds_step(self, engine, bot, sessions, catalog, admin):
        await _upload_to_branches(engine, admin)
        await _press(engine, admin, keyboards.SELECT_ALL_BRANCHES)
        await _press(engine, admin, keyboards.CONFIRM_BRANCHES)
        await engine.handle_text(ADMIN_CHAT, admin, "R22")

        await engine.handle_text(ADMIN_CHAT, admin, "slides")

        assert sessions.get(ADMIN_CHAT).step is UploadStep.TYPE
        assert sent_texts(bot)[-1] == texts.INVALID_TYPE
        assert catalog.list_files() == []

    @pytest.mark.asyncio
    async def test_second_document_replaces_upload(self, engine, bot, sessions, admin):
        await _upload_to_branches(engine, admin)

        await engine.handle_document(ADMIN_CHAT, admin, "tg-doc-2", "os.pdf")

        dialog = sessions.get(ADMIN_CHAT)
        assert dialog.step is UploadStep.SUBJECT
        assert dialog.source.file_id == "tg-doc-2"
        assert texts.upload_replaced("ds.pdf") in sent_texts(bot)
        assert len(sessions) == 1

    @pytest.mark.asyncio
    async def test_stale_selector_button(self, engine, bot, admin):
        await _press(engine, admin, keyboards.CONFIRM_BRANCHES)

        assert answers(bot) == [texts.SELECTION_EXPIRED]

    @pytest.mark.asyncio
    async def test_save_failure_discards_dialog(self, engine, bot, catalog, sessions, admin, monkeypatch):
        def broken(**kwargs):
            raise sqlite3.OperationalError("database is locked")

        monkeypatch.setattr(catalog, "save_file", broken)
        await _upload_to_branches(engine, admin)
        await _press(engine, admin, f"{keyboards.TOGGLE_BRANCH_PREFIX}CSE")
        await _press(engine, admin, keyboards.CONFIRM_BRANCHES)
        await engine.handle_text(ADMIN_CHAT, admin, "R18")
        await engine.handle_text(ADMIN_CHAT, admin, "paper")

        assert sent_texts(bot)[-1] == texts.UPLOAD_FAILED
        assert sessions.get(ADMIN_CHAT) is None
        assert sent_to(bot, OTHER_ADMIN_ID) == []

    @pytest.mark.asyncio
    async def test_edit_failure_is_not_fatal(self, engine, bot, sessions, admin):
        bot.edit_message_text.side_effect = BadRequest("Message is not modified")
        await _upload_to_branches(engine, admin)

        await _press(engine, admin, f"{keyboards.TOGGLE_BRANCH_PREFIX}CSE")

        assert sessions.get(ADMIN_CHAT).selected_branches == frozenset({"CSE"})


class TestDialogInvariant:
    @pytest.mark.asyncio
    async def test_one_dialog_per_chat_across_events(self, engine, sessions, admin, student):
        await engine.handle_text(ADMIN_CHAT, admin, keyboards.FIND_NOTES)
        await engine.handle_document(ADMIN_CHAT, admin, "tg-1", "a.pdf")
        await engine.handle_text(STUDENT_CHAT, student, keyboards.REQUEST_FILES)

        assert len(sessions) == 2
        assert isinstance(sessions.get(ADMIN_CHAT), UploadDialog)
        assert isinstance(sessions.get(STUDENT_CHAT), RequestDialog)

    @pytest.mark.asyncio
    async def test_cancel_removes_dialog(self, engine, bot, sessions, student):
        await engine.handle_text(STUDENT_CHAT, student, keyboards.FIND_NOTES)

        await engine.handle_cancel(STUDENT_CHAT, student)

        assert sessions.get(STUDENT_CHAT) is None
        assert sent_texts(bot)[-1] == texts.CANCELLED

    @pytest.mark.asyncio
    async def test_cancel_without_dialog(self, engine, bot, student):
        await engine.handle_cancel(STUDENT_CHAT, student)

        assert sent_texts(bot) == [texts.NOTHING_TO_CANCEL]


class TestMenu:
    @pytest.mark.asyncio
    async def test_start_shows_main_menu(self, engine, bot, catalog, student):
        await engine.handle_start(STUDENT_CHAT, student)

        assert sent_texts(bot) == [texts.WELCOME]
        assert catalog.get_user(STUDENT_ID) is not None

    @pytest.mark.asyncio
    async def test_browse_by_branch_reads_legacy_records(self, engine, bot, catalog, student):
        _save(catalog, "Compilers", branches=["CSE", "IT"])
        insert_legacy_file(catalog, "Old DBMS", branch="CSE")
        _save(catalog, "Signals", branches=["ECE"])

        await _press(engine, student, f"{keyboards.BROWSE_BRANCH_PREFIX}CSE")

        assert sent_texts(bot) == [texts.branch_found("CSE")]
        sent_docs = sorted(c.kwargs["document"] for c in bot.send_document.await_args_list)
        assert sent_docs == ["tg-Compilers", "tg-Old DBMS"]

    @pytest.mark.asyncio
    async def test_browse_empty_branch(self, engine, bot, student):
        await _press(engine, student, f"{keyboards.BROWSE_BRANCH_PREFIX}AIML")

        assert sent_texts(bot) == [texts.branch_not_found("AIML")]

    @pytest.mark.asyncio
    async def test_file_status(self, engine, bot, catalog, student):
        _save(catalog, "DBMS")

        await engine.handle_text(STUDENT_CHAT, student, keyboards.FILE_STATUS)

        assert "📚 Total Files: 1" in sent_texts(bot)[-1]

    @pytest.mark.asyncio
    async def test_bot_users_for_student_shows_own_stats(self, engine, bot, student):
        await engine.handle_text(STUDENT_CHAT, student, keyboards.BOT_USERS)

        assert sent_texts(bot)[-1].startswith("👤 Your Statistics")

    @pytest.mark.asyncio
    async def test_bot_users_for_admin_shows_report(self, engine, bot, admin):
        await engine.handle_text(ADMIN_CHAT, admin, keyboards.BOT_USERS)

        assert sent_texts(bot)[-1].startswith("👥 Bot Users Report")

    @pytest.mark.asyncio
    async def test_unknown_text_gets_hint(self, engine, bot, student):
        await engine.handle_text(STUDENT_CHAT, student, "hello?")

        assert sent_texts(bot) == [texts.MENU_HINT]


class TestAdminActions:
    @pytest.mark.asyncio
    async def test_admin_command_ignored_for_students(self, engine, bot, student):
        await engine.handle_admin_command(STUDENT_CHAT, student)

        bot.send_message.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_admin_panel(self, engine, bot, admin):
        await engine.handle_admin_command(ADMIN_CHAT, admin)

        assert sent_texts(bot) == [texts.ADMIN_PANEL]

    @pytest.mark.asyncio
    async def test_admin_callback_refused_for_students(self, engine, bot, student):
        await _press(engine, student, keyboards.ADMIN_STATS)

        assert answers(bot) == [texts.ADMINS_ONLY]
        bot.send_message.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_view_requests(self, engine, bot, catalog, admin):
        catalog.save_request(STUDENT_ID, "ravi", "Ravi", "DBMS", "CSE", "R18", "notes", "unit 3")

        await _press(engine, admin, keyboards.ADMIN_VIEW_REQUESTS)

        assert "🎓 DBMS | CSE | R18" in sent_texts(bot)[-1]

    @pytest.mark.asyncio
    async def test_admin_stats(self, engine, bot, catalog, admin):
        _save(catalog, "DBMS", branches=["CSE", "IT"])

        await _press(engine, admin, keyboards.ADMIN_STATS)

        report = sent_texts(bot)[-1]
        assert "• CSE: 1 files" in report
        assert "• IT: 1 files" in report

    @pytest.mark.asyncio
    async def test_delete_file_button(self, engine, bot, catalog, admin):
        file_id = _save(catalog, "DBMS")

        await _press(engine, admin, f"{keyboards.DELETE_FILE_PREFIX}{file_id}", message_id=55)

        assert catalog.get_file(file_id) is None
        assert bot.edit_message_caption.await_args.kwargs["message_id"] == 55


class TestNotifyAdmins:
    @pytest.mark.asyncio
    async def test_excludes_sender(self, engine, bot):
        await engine.notify_admins("hi", exclude=ADMIN_ID)

        assert [c.kwargs["chat_id"] for c in bot.send_message.await_args_list] == [OTHER_ADMIN_ID]

    @pytest.mark.asyncio
    async def test_no_admins_configured(self, bot, catalog, settings):
        from dataclasses import replace

        from jntuh_bot.conversation import ConversationEngine

        lonely = ConversationEngine(bot, catalog, replace(settings, admin_ids=frozenset()))
        await lonely.notify_admins("hi")

        bot.send_message.assert_not_awaited()


@pytest.mark.asyncio
async def test_user_without_username_can_request(engine, bot, catalog):
    user = User(id=300, first_name="Anon", is_bot=False)

    await engine.handle_text(300, user, keyboards.REQUEST_FILES)
    await engine.handle_text(300, user, "M1|CIVIL|R18|paper")

    assert catalog.pending_requests()[0].username is None
    assert sent_to(bot, ADMIN_ID) == [texts.request_notice(None, "M1|CIVIL|R18|paper")]
