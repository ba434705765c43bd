from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

# Fixed branch universe, in display order.
BRANCHES = ("CSE", "ECE", "EEE", "MECH", "CIVIL", "IT", "CSM", "CSD", "CSC", "AIDS", "AIML")

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class FileType(str, Enum):
    NOTES = "notes"
    PAPER = "paper"

    @property
    def label(self) -> str:
        return "Notes" if self is FileType.NOTES else "Papers"


class RequestStatus(str, Enum):
    PENDING = "pending"
    FULFILLED = "fulfilled"
    REJECTED = "rejected"


def format_date(value: Optional[datetime]) -> Optional[str]:
    return value.strftime(DATE_FORMAT) if value else None


def parse_date(value: Optional[str]) -> Optional[datetime]:
    return datetime.strptime(value, DATE_FORMAT) if value else None


@dataclass
class FileRecord:
    id: int
    file_name: str
    file_id: str
    subject: str
    branches: List[str] = field(default_factory=list)
    regulation: str = ""
    type: str = FileType.NOTES.value
    upload_date: Optional[datetime] = None
    uploaded_by: Optional[int] = None
    downloads: int = 0

    @property
    def branches_label(self) -> str:
        return ", ".join(self.branches) if self.branches else "All"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "fileName": self.file_name,
            "fileId": self.file_id,
            "subjectName": self.subject,
            "branches": list(self.branches),
            "regulation": self.regulation,
            "type": self.type,
            "uploadDate": self.upload_date.isoformat() if self.upload_date else None,
            "uploadedBy": self.uploaded_by,
            "downloads": self.downloads,
        }


@dataclass
class RequestRecord:
    id: int
    user_id: int
    username: Optional[str]
    first_name: Optional[str]
    subject: str
    branch: str
    regulation: str
    type: str
    description: str = ""
    status: str = RequestStatus.PENDING.value
    request_date: Optional[datetime] = None


@dataclass
class UserRecord:
    user_id: int
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    join_date: Optional[datetime] = None
    last_active: Optional[datetime] = None
    download_count: int = 0


@dataclass
class FileStatusSummary:
    total: int
    notes: int
    papers: int
    recent: List[FileRecord]
    top_downloaded: List[FileRecord]


@dataclass
class UserStatusSummary:
    user: Optional[UserRecord]
    total_users: int
    active_users: int


@dataclass
class AllUsersSummary:
    total_users: int
    active_users: int
    recent: List[UserRecord]
    top_downloaders: List[UserRecord]

    @property
    def inactive_users(self) -> int:
        return self.total_users - self.active_users


@dataclass
class AdminStats:
    total_users: int
    total_files: int
    pending_requests: int
    total_downloads: int
    branch_counts: List[tuple]
