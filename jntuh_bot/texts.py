from datetime import datetime
from typing import List, Optional

from jntuh_bot.models import (
    AdminStats,
    AllUsersSummary,
    FileRecord,
    FileStatusSummary,
    FileType,
    RequestRecord,
    UserStatusSummary,
)

WELCOME = (
    "🎓 Welcome to JNTUH Student Helper Bot!\n\n"
    "I can help you with:\n"
    "📚 Find Notes by Subject\n"
    "📝 Find Previous Papers\n"
    "📋 Request Study Materials\n"
    "🔍 Search by Branch & Regulation\n\n"
    "Use the menu below to get started!"
)

MUST_JOIN = (
    "❌ You must join our channel first to use this bot!\n\n"
    "👆 Click the button below to join our channel, then try again."
)

MEMBERSHIP_OK = "✅ Welcome! You can now use the bot."

MENU_HINT = "🤔 Please choose an option from the menu below."

HELP = (
    "❓ How to use this bot:\n\n"
    "📚 Find Notes: Search for study notes by subject name\n"
    "📝 Find Papers: Search for previous year question papers\n"
    "📋 Request Files: Request materials that aren't available\n"
    "🔍 Browse by Branch: Browse materials by engineering branch\n"
    "📊 File Status: View file statistics and recent uploads\n"
    "👥 Bot Users: View your stats or all users (admin only)\n\n"
    "🔍 Search Tips:\n"
    "• Use exact subject names for better results\n"
    "• Include regulation (R18, R16, etc.) for specific results\n"
    "• Be specific in your requests\n\n"
    "👨‍💼 Admin Features:\n"
    "• Upload files by sending documents directly\n"
    "• Select multiple branches for each file\n"
    "• View and manage user requests\n"
    "• Access detailed statistics\n\n"
    "Type /cancel to stop any step. Need help? Contact administrators."
)

UPLOAD_HELP = (
    "📤 How to Upload Files:\n\n"
    "1. Send any document (PDF, DOC, etc.) to this chat\n"
    "2. I'll ask for details step by step:\n"
    "   • Subject Name\n"
    "   • Branch Selection (multiple branches can be selected)\n"
    "   • Regulation (R18, R16, etc.)\n"
    "   • Type (notes or paper)\n"
    "3. File will be saved and available for students\n\n"
    "📝 Tips:\n"
    "• Use clear, consistent naming\n"
    "• Papers should be named with exam year if available\n"
    "• Select all relevant branches to maximize file accessibility"
)

DELETE_HELP = (
    "🗑 To delete a file, search for it or browse its branch.\n"
    "Every file you receive as an admin has a 🗑 Delete button."
)

ADMIN_PANEL = "🔧 Admin Panel\n\nChoose an option:"
BROWSE_PROMPT = "Select your branch:"

REQUEST_FORM = (
    "📋 Request Study Materials\n\n"
    "Please provide the following information:\n"
    "Format: Subject Name | Branch | Regulation | Type (notes/paper) | Description\n\n"
    "Example: Data Structures | CSE | R18 | notes | Need complete notes for exam"
)
REQUEST_FORMAT_ERROR = (
    "❌ Invalid format. Please use: Subject | Branch | Regulation | Type | Description"
)
REQUEST_SAVED = "✅ Your request has been submitted! Admins will review it soon."
REQUEST_FAILED = "❌ Error submitting your request. Please try again."

ADMINS_ONLY_UPLOAD = "❌ Only admins can upload files."
UPLOAD_FAILED = "❌ Error uploading file. Please try again."
SUBJECT_PROMPT = "Step 1/4: Enter Subject Name\nExample: Data Structures, Operating Systems"
BRANCH_SELECTOR = "Step 2/4: Select Branch(es)\n\nChoose one or multiple branches for this file:"
REGULATION_PROMPT = "Step 3/4: Enter Regulation\nExample: R18, R16, R15, R13"
TYPE_PROMPT = "Step 4/4: Enter Type\nChoose: notes or paper"
EMPTY_SUBJECT = "❌ Subject name cannot be empty.\n\n" + SUBJECT_PROMPT
EMPTY_REGULATION = "❌ Regulation cannot be empty.\n\n" + REGULATION_PROMPT
INVALID_TYPE = "❌ Type must be notes or paper.\n\n" + TYPE_PROMPT
SELECT_AT_LEAST_ONE = "⚠️ Please select at least one branch!"
SELECTION_CONFIRMED = "✅ Branch selection confirmed!"
ALL_SELECTED = "✅ All branches selected!"
ALL_CLEARED = "❌ All branches cleared!"
SELECTION_EXPIRED = "⌛ This selection has expired."
UNKNOWN_BRANCH = "❓ Unknown branch."

CANCELLED = "🚫 Action canceled."
NOTHING_TO_CANCEL = "Nothing to cancel."
GENERIC_ERROR = "❌ Something went wrong. Please try again later."
FILE_STATUS_ERROR = "❌ Error fetching file status."
USER_STATS_ERROR = "❌ Error fetching user stats."
USERS_ERROR = "❌ Error fetching users data."
ADMINS_ONLY = "⛔ Admins only."


def _day(value: Optional[datetime]) -> str:
    return value.strftime("%a %b %d %Y") if value else "Unknown"


def search_prompt(file_type: FileType) -> str:
    return f"🔍 Search for {file_type.label}\n\nPlease enter the subject name:"


def file_received(file_name: str) -> str:
    return (
        f"📁 File received: {file_name}\n\n"
        "Please provide the following details:\n\n" + SUBJECT_PROMPT
    )


def upload_replaced(previous_name: str) -> str:
    return f"⚠️ Previous upload of {previous_name} was discarded. Starting over with the new file."


def branch_selector(selection_label: str) -> str:
    return f"{BRANCH_SELECTOR}\n\nSelected: {selection_label}"


def branches_confirmed(selection_label: str) -> str:
    return f"✅ Selected branches: {selection_label}\n\n{REGULATION_PROMPT}"


def branch_toggled(code: str, added: bool) -> str:
    return f"✅ Added {code}" if added else f"❌ Removed {code}"


def upload_success(file_name, subject, branches_label, regulation, file_type) -> str:
    return (
        "✅ File uploaded successfully!\n\n"
        f"📄 File: {file_name}\n"
        f"🎓 Subject: {subject}\n"
        f"🏢 Branches: {branches_label}\n"
        f"📅 Regulation: {regulation}\n"
        f"📝 Type: {file_type}"
    )


def upload_notice(summary: str) -> str:
    return f"📤 New file uploaded by admin:\n\n{summary}"


def request_notice(username: Optional[str], text: str) -> str:
    return f"📋 New file request from @{username or 'Unknown'}:\n\n{text}"


def search_not_found(file_type: FileType, query: str) -> str:
    return f"❌ No {file_type.value} found for \"{query}\". Try requesting it using 📋 Request Files."


def search_found(count: int, file_type: FileType, query: str) -> str:
    return f"📚 Found {count} {file_type.value} for \"{query}\":"


def branch_not_found(code: str) -> str:
    return f"❌ No files found for {code} branch."


def branch_found(code: str) -> str:
    return f"📚 Files for {code} branch:"


def send_failed(file_name: str) -> str:
    return f"❌ Error sending file: {file_name}"


def search_caption(f: FileRecord) -> str:
    return (
        f"📄 {f.file_name}\n"
        f"🎓 Subject: {f.subject}\n"
        f"🏢 Branches: {f.branches_label}\n"
        f"📅 Regulation: {f.regulation}\n"
        f"📥 Downloads: {f.downloads}"
    )


def browse_caption(f: FileRecord) -> str:
    return f"📄 {f.file_name}\n🎓 {f.subject}\n🏢 {f.branches_label}\n📅 {f.regulation}"


def file_status(summary: FileStatusSummary) -> str:
    lines = [
        "📊 File Status Report",
        "",
        f"📚 Total Files: {summary.total}",
        f"📖 Notes: {summary.notes}",
        f"📝 Papers: {summary.papers}",
        "",
        "📅 Recent Uploads:",
    ]
    lines += [f"{i}. {f.subject} ({f.branches_label})" for i, f in enumerate(summary.recent, 1)]
    lines += ["", "🔥 Most Downloaded:"]
    lines += [
        f"{i}. {f.subject} - {f.downloads} downloads"
        for i, f in enumerate(summary.top_downloaded, 1)
    ]
    return "\n".join(lines)


def user_stats(summary: UserStatusSummary) -> str:
    user = summary.user
    return (
        "👤 Your Statistics\n\n"
        f"📥 Downloads: {user.download_count if user else 0}\n"
        f"📅 Joined: {_day(user.join_date if user else None)}\n"
        f"🕒 Last Active: {_day(user.last_active if user else None)}\n\n"
        "🌐 Bot Statistics:\n"
        f"👥 Total Users: {summary.total_users}\n"
        f"🟢 Active Users (7 days): {summary.active_users}"
    )


def users_report(summary: AllUsersSummary) -> str:
    lines = [
        "👥 Bot Users Report",
        "",
        "📊 Overview:",
        f"• Total Users: {summary.total_users}",
        f"• Active Users (7 days): {summary.active_users}",
        f"• Inactive Users: {summary.inactive_users}",
        "",
        "👆 Recent Users:",
    ]
    lines += [
        f"{i}. @{u.username or 'Unknown'} - {u.first_name or ''}"
        for i, u in enumerate(summary.recent, 1)
    ]
    lines += ["", "🔥 Top Users (Downloads):"]
    lines += [
        f"{i}. @{u.username or 'Unknown'} - {u.download_count} downloads"
        for i, u in enumerate(summary.top_downloaders, 1)
    ]
    return "\n".join(lines)


def admin_stats(stats: AdminStats) -> str:
    lines = [
        "📊 Admin Statistics",
        "",
        f"👥 Total Users: {stats.total_users}",
        f"📚 Total Files: {stats.total_files}",
        f"📋 Pending Requests: {stats.pending_requests}",
        f"📥 Total Downloads: {stats.total_downloads}",
        "",
        "📈 Files by Branch:",
    ]
    lines += [f"• {code}: {count} files" for code, count in stats.branch_counts]
    return "\n".join(lines)


def pending_requests(requests: List[RequestRecord]) -> str:
    if not requests:
        return "📋 No pending requests."
    lines = ["📋 Pending Requests:", ""]
    for i, req in enumerate(requests, 1):
        lines.append(f"{i}. @{req.username or 'Unknown'}")
        lines.append(f"   🎓 {req.subject} | {req.branch} | {req.regulation}")
        lines.append(f"   📝 {req.type} | {req.description}")
        lines.append("")
    return "\n".join(lines).rstrip()
