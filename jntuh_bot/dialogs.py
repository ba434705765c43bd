"""Per-chat dialog states.

Each dialog kind is its own frozen dataclass. The upload dialog moves through
``UploadStep`` via pure transition methods that return a new value, so a
handler either stores the next state or leaves the old one untouched.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import FrozenSet, Optional, Union

from jntuh_bot.models import BRANCHES, FileType


class DialogKind(str, Enum):
    SEARCH = "search"
    REQUEST = "request"
    UPLOAD = "upload"


class UploadStep(str, Enum):
    SUBJECT = "subject"
    BRANCHES = "branches"
    REGULATION = "regulation"
    TYPE = "type"
    DONE = "done"


class DialogError(ValueError):
    """Input that a dialog cannot accept at its current step."""


class DialogStepError(DialogError):
    pass


class EmptyValueError(DialogError):
    pass


class UnknownBranchError(DialogError):
    pass


class EmptySelectionError(DialogError):
    pass


class InvalidFileTypeError(DialogError):
    pass


class InvalidRequestFormatError(DialogError):
    pass


@dataclass(frozen=True)
class SourceFile:
    file_id: str
    file_name: str


@dataclass(frozen=True)
class SearchDialog:
    file_type: FileType
    kind = DialogKind.SEARCH


@dataclass(frozen=True)
class RequestDialog:
    kind = DialogKind.REQUEST


@dataclass(frozen=True)
class UploadDialog:
    source: SourceFile
    step: UploadStep = UploadStep.SUBJECT
    subject: Optional[str] = None
    selected_branches: FrozenSet[str] = field(default_factory=frozenset)
    regulation: Optional[str] = None
    file_type: Optional[FileType] = None
    kind = DialogKind.UPLOAD

    def _expect(self, step: UploadStep) -> None:
        if self.step is not step:
            raise DialogStepError(f"expected step {step.value}, dialog is at {self.step.value}")

    def with_subject(self, text: str) -> "UploadDialog":
        self._expect(UploadStep.SUBJECT)
        subject = text.strip()
        if not subject:
            raise EmptyValueError("subject")
        return replace(self, subject=subject, step=UploadStep.BRANCHES)

    def toggle_branch(self, code: str) -> "UploadDialog":
        self._expect(UploadStep.BRANCHES)
        if code not in BRANCHES:
            raise UnknownBranchError(code)
        return replace(self, selected_branches=self.selected_branches ^ {code})

    def select_all(self) -> "UploadDialog":
        self._expect(UploadStep.BRANCHES)
        return replace(self, selected_branches=frozenset(BRANCHES))

    def clear_all(self) -> "UploadDialog":
        self._expect(UploadStep.BRANCHES)
        return replace(self, selected_branches=frozenset())

    def confirm_branches(self) -> "UploadDialog":
        self._expect(UploadStep.BRANCHES)
        if not self.selected_branches:
            raise EmptySelectionError("select at least one branch")
        return replace(self, step=UploadStep.REGULATION)

    def with_regulation(self, text: str) -> "UploadDialog":
        self._expect(UploadStep.REGULATION)
        regulation = text.strip()
        if not regulation:
            raise EmptyValueError("regulation")
        return replace(self, regulation=regulation, step=UploadStep.TYPE)

    def with_type(self, text: str) -> "UploadDialog":
        self._expect(UploadStep.TYPE)
        try:
            file_type = FileType(text.strip().lower())
        except ValueError:
            raise InvalidFileTypeError(text) from None
        return replace(self, file_type=file_type, step=UploadStep.DONE)

    def ordered_branches(self) -> list:
        return [b for b in BRANCHES if b in self.selected_branches]

    @property
    def selection_label(self) -> str:
        return ", ".join(self.ordered_branches()) or "None"


Dialog = Union[SearchDialog, RequestDialog, UploadDialog]


@dataclass(frozen=True)
class RequestFields:
    subject: str
    branch: str
    regulation: str
    file_type: str
    description: str = ""


def parse_request(text: str) -> RequestFields:
    """Parse ``Subject | Branch | Regulation | Type | Description``."""
    parts = [p.strip() for p in (text or "").split("|")]
    if len(parts) < 4:
        raise InvalidRequestFormatError(text)
    description = " | ".join(parts[4:]) if len(parts) > 4 else ""
    return RequestFields(
        subject=parts[0],
        branch=parts[1],
        regulation=parts[2],
        file_type=parts[3],
        description=description,
    )
