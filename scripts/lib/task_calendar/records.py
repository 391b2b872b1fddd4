"""Task records built from the checklist lines of each document."""

import logging
from dataclasses import dataclass, field

from .errors import ScanIOError
from .extractor import extract
from .grammar import STATUS_WEIGHTS, parse_task_line

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Document:
    path: str
    name: str


@dataclass(frozen=True)
class TaskRecord:
    document_path: str
    document_name: str
    line_index: int
    status: str
    date: str
    description: str
    raw_line: str

    @property
    def task_id(self) -> str:
        return make_task_id(self.document_path, self.line_index)

    @property
    def status_weight(self) -> int:
        return STATUS_WEIGHTS[self.status]


@dataclass
class ScanResult:
    records: list[TaskRecord] = field(default_factory=list)
    errors: list[ScanIOError] = field(default_factory=list)
    documents_scanned: int = 0


def make_task_id(document_path: str, line_index: int) -> str:
    return f"{document_path}:{line_index}"


def parse_task_id(task_id: str) -> tuple[str, int] | None:
    """Split ``path:line`` into its parts. The path itself may contain colons."""
    path, sep, line = task_id.rpartition(':')
    if not sep or not path or not line.isdecimal():
        return None
    return path, int(line)


def build_task_records(document: Document, text: str) -> list[TaskRecord]:
    """Build a record for every dated checklist line in ``text``.

    Lines are split on ``\\n`` only, so a trailing ``\\r`` stays in
    ``raw_line`` and line indexes match what an edit will rewrite.
    """
    records = []
    for index, line in enumerate(text.split('\n')):
        parsed = parse_task_line(line)
        if parsed is None:
            continue
        status, remainder = parsed
        task_date, description = extract(remainder, status)
        if task_date is None:
            continue
        records.append(TaskRecord(
            document_path=document.path,
            document_name=document.name,
            line_index=index,
            status=status,
            date=task_date,
            description=description,
            raw_line=line,
        ))
    return records


def scan_documents(store) -> ScanResult:
    """Scan every document in ``store`` for dated tasks.

    ``store`` needs ``list_documents()`` and ``read(document)``. A document
    that cannot be read is logged and skipped; the rest of the scan goes on.
    """
    result = ScanResult()
    for document in store.list_documents():
        try:
            text = store.read(document)
        except (PermissionError, UnicodeDecodeError, OSError) as exc:
            error = ScanIOError(document.path, exc)
            logger.warning(f"Skipping document: {error}")
            result.errors.append(error)
            continue
        result.documents_scanned += 1
        result.records.extend(build_task_records(document, text))

    logger.debug(
        f"Scanned {result.documents_scanned} document(s), "
        f"found {len(result.records)} dated task(s)"
    )
    return result
