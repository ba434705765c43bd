from typing import List

from telegram import InlineKeyboardButton, InlineKeyboardMarkup, ReplyKeyboardMarkup

from jntuh_bot.models import BRANCHES

# --- Main menu labels ---
FIND_NOTES = "📚 Find Notes"
FIND_PAPERS = "📝 Find Papers"
REQUEST_FILES = "📋 Request Files"
BROWSE_BRANCH = "🔍 Browse by Branch"
FILE_STATUS = "📊 File Status"
BOT_USERS = "👥 Bot Users"
HELP = "❓ Help"

# --- Callback data ---
CHECK_MEMBERSHIP = "check_membership"
TOGGLE_BRANCH_PREFIX = "toggle_branch_"
SELECT_ALL_BRANCHES = "select_all_branches"
CLEAR_ALL_BRANCHES = "clear_all_branches"
CONFIRM_BRANCHES = "confirm_branch_selection"
BROWSE_BRANCH_PREFIX = "branch_"
DELETE_FILE_PREFIX = "del_"

ADMIN_UPLOAD_HELP = "admin_upload_help"
ADMIN_VIEW_REQUESTS = "admin_view_requests"
ADMIN_STATS = "admin_stats"
ADMIN_ALL_USERS = "admin_all_users"
ADMIN_DELETE_FILE = "admin_delete_file"

SELECTOR_CALLBACKS = (SELECT_ALL_BRANCHES, CLEAR_ALL_BRANCHES, CONFIRM_BRANCHES)


def is_selector_callback(data: str) -> bool:
    return data.startswith(TOGGLE_BRANCH_PREFIX) or data in SELECTOR_CALLBACKS


def chunk(items: list, n: int) -> List[list]:
    return [items[i:i + n] for i in range(0, len(items), n)]


def main_menu_keyboard() -> ReplyKeyboardMarkup:
    keyboard = [
        [FIND_NOTES, FIND_PAPERS],
        [REQUEST_FILES, BROWSE_BRANCH],
        [FILE_STATUS, BOT_USERS],
        [HELP],
    ]
    return ReplyKeyboardMarkup(keyboard, resize_keyboard=True)


def join_channel_keyboard(channel_url: str) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup([[
        InlineKeyboardButton("📢 Join Channel", url=channel_url),
        InlineKeyboardButton("✅ Check Membership", callback_data=CHECK_MEMBERSHIP),
    ]])


def browse_branch_keyboard() -> InlineKeyboardMarkup:
    buttons = [InlineKeyboardButton(b, callback_data=f"{BROWSE_BRANCH_PREFIX}{b}") for b in BRANCHES]
    return InlineKeyboardMarkup(chunk(buttons, 2))


def branch_selector_keyboard() -> InlineKeyboardMarkup:
    buttons = [InlineKeyboardButton(b, callback_data=f"{TOGGLE_BRANCH_PREFIX}{b}") for b in BRANCHES]
    rows = chunk(buttons, 2)
    rows.append([
        InlineKeyboardButton("✅ Select All", callback_data=SELECT_ALL_BRANCHES),
        InlineKeyboardButton("❌ Clear All", callback_data=CLEAR_ALL_BRANCHES),
    ])
    rows.append([InlineKeyboardButton("✔️ Done", callback_data=CONFIRM_BRANCHES)])
    return InlineKeyboardMarkup(rows)


def admin_panel_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup([
        [InlineKeyboardButton("📤 Upload Instructions", callback_data=ADMIN_UPLOAD_HELP)],
        [InlineKeyboardButton("📋 View Requests", callback_data=ADMIN_VIEW_REQUESTS)],
        [InlineKeyboardButton("📊 Statistics", callback_data=ADMIN_STATS)],
        [InlineKeyboardButton("👥 All Users", callback_data=ADMIN_ALL_USERS)],
        [InlineKeyboardButton("🗑 Delete File", callback_data=ADMIN_DELETE_FILE)],
    ])


def delete_file_keyboard(file_id: int) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup([
        [InlineKeyboardButton("🗑 Delete", callback_data=f"{DELETE_FILE_PREFIX}{file_id}")]
    ])
