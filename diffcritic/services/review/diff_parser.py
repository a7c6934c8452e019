import re
from dataclasses import dataclass, field
from enum import Enum

DEV_NULL = "/dev/null"


class LineType(str, Enum):
    CONTEXT = "context"
    ADDITION = "addition"
    DELETION = "deletion"


@dataclass
class DiffLine:
    """A single line in a diff."""

    type: LineType
    content: str
    old_line_no: int | None = None
    new_line_no: int | None = None

    @property
    def line_number(self) -> int | None:
        """Destination number for additions and context, origin number for deletions."""
        if self.type == LineType.DELETION:
            return self.old_line_no
        return self.new_line_no

    def __str__(self) -> str:
        prefix = {
            LineType.CONTEXT: " ",
            LineType.ADDITION: "+",
            LineType.DELETION: "-",
        }[self.type]
        return f"{prefix}{self.content}"


@dataclass
class Hunk:
    """A hunk (section) of changes in a diff."""

    old_start: int
    old_count: int
    new_start: int
    new_count: int
    header: str  # The @@ line
    lines: list[DiffLine] = field(default_factory=list)

    def destination_line_numbers(self) -> set[int]:
        """Line numbers of the new file that this hunk shows (additions and context)."""
        return {
            line.new_line_no
            for line in self.lines
            if line.type != LineType.DELETION and line.new_line_no is not None
        }

    def body(self) -> str:
        """The hunk's content lines, without the @@ header."""
        return "\n".join(str(line) for line in self.lines)


@dataclass
class FileDiff:
    """Parsed diff for a single file.

    ``new_path`` is None when the change deletes the file, ``old_path`` is None
    when it creates one.
    """

    old_path: str | None = None
    new_path: str | None = None
    hunks: list[Hunk] = field(default_factory=list)

    @property
    def path(self) -> str:
        return self.new_path or self.old_path or ""


def _strip_path(raw: str, prefix: str) -> str | None:
    """Normalize a path from a ---/+++ line. Returns None for /dev/null."""
    # Some tools append a tab and a timestamp after the path
    path = raw.split("\t", 1)[0].strip()
    if path.startswith('"') and path.endswith('"') and len(path) >= 2:
        path = path[1:-1]
    if path == DEV_NULL:
        return None
    if path.startswith(prefix):
        path = path[len(prefix) :]
    return path


class DiffParser:
    """Parser for unified diff format.

    Hunk bodies are consumed according to the line counts of their @@ header,
    so a removed line reading ``-- foo`` is never mistaken for a file header.
    Anything that is not recognisable diff syntax is ignored, which makes
    garbage input parse to an empty list.
    """

    # Regex patterns
    FILE_HEADER_PATTERN = re.compile(r"^diff --git a/(.*) b/(.*)$")
    OLD_FILE_PATTERN = re.compile(r"^--- (.*)$")
    NEW_FILE_PATTERN = re.compile(r"^\+\+\+ (.*)$")
    HUNK_HEADER_PATTERN = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@(.*)$")
    RENAME_FROM_PATTERN = re.compile(r"^rename from (.*)$")
    RENAME_TO_PATTERN = re.compile(r"^rename to (.*)$")

    def parse(self, diff_text: str) -> list[FileDiff]:
        """Parse a unified diff into structured FileDiff objects."""
        if not diff_text or not diff_text.strip():
            return []

        files: list[FileDiff] = []
        current_file: FileDiff | None = None
        current_hunk: Hunk | None = None
        old_line_no = 0
        new_line_no = 0
        old_remaining = 0
        new_remaining = 0

        lines = diff_text.split("\n")
        # A trailing newline is a terminator, not an empty context line
        if lines and lines[-1] == "":
            lines.pop()

        for line in lines:
            # Diff content lines keep any carriage return as part of their content
            if current_hunk is not None and (old_remaining > 0 or new_remaining > 0):
                if line.startswith("\\"):
                    # "\ No newline at end of file"
                    continue
                if line.startswith("+") and new_remaining > 0:
                    current_hunk.lines.append(
                        DiffLine(
                            type=LineType.ADDITION,
                            content=line[1:],
                            new_line_no=new_line_no,
                        )
                    )
                    new_line_no += 1
                    new_remaining -= 1
                    continue
                if line.startswith("-") and old_remaining > 0:
                    current_hunk.lines.append(
                        DiffLine(
                            type=LineType.DELETION,
                            content=line[1:],
                            old_line_no=old_line_no,
                        )
                    )
                    old_line_no += 1
                    old_remaining -= 1
                    continue
                blank = line in ("", "\r")
                if (line.startswith(" ") or blank) and old_remaining > 0 and new_remaining > 0:
                    current_hunk.lines.append(
                        DiffLine(
                            type=LineType.CONTEXT,
                            content=line if blank else line[1:],
                            old_line_no=old_line_no,
                            new_line_no=new_line_no,
                        )
                    )
                    old_line_no += 1
                    new_line_no += 1
                    old_remaining -= 1
                    new_remaining -= 1
                    continue
                # Truncated hunk: fall through and treat the line as a header
                current_hunk = None

            line = line.rstrip("\r")

            if line.startswith("\\"):
                continue

            # New file diff starting
            file_match = self.FILE_HEADER_PATTERN.match(line)
            if file_match:
                current_file = FileDiff(old_path=file_match.group(1), new_path=file_match.group(2))
                files.append(current_file)
                current_hunk = None
                continue

            if line.startswith("new file mode") and current_file:
                current_file.old_path = None
                continue

            if line.startswith("deleted file mode") and current_file:
                current_file.new_path = None
                continue

            rename_match = self.RENAME_FROM_PATTERN.match(line)
            if rename_match and current_file:
                current_file.old_path = rename_match.group(1)
                continue

            rename_match = self.RENAME_TO_PATTERN.match(line)
            if rename_match and current_file:
                current_file.new_path = rename_match.group(1)
                continue

            # Old file line (--- a/file)
            old_match = self.OLD_FILE_PATTERN.match(line)
            if old_match:
                if current_file is None or current_file.hunks:
                    # Plain unified diff without a "diff --git" line
                    current_file = FileDiff()
                    files.append(current_file)
                current_file.old_path = _strip_path(old_match.group(1), "a/")
                current_hunk = None
                continue

            # New file line (+++ b/file)
            new_match = self.NEW_FILE_PATTERN.match(line)
            if new_match and current_file:
                current_file.new_path = _strip_path(new_match.group(1), "b/")
                continue

            # Hunk header
            hunk_match = self.HUNK_HEADER_PATTERN.match(line)
            if hunk_match and current_file:
                old_start = int(hunk_match.group(1))
                old_count = int(hunk_match.group(2) or 1)
                new_start = int(hunk_match.group(3))
                new_count = int(hunk_match.group(4) or 1)

                current_hunk = Hunk(
                    old_start=old_start,
                    old_count=old_count,
                    new_start=new_start,
                    new_count=new_count,
                    header=line,
                )
                current_file.hunks.append(current_hunk)

                old_line_no = old_start
                new_line_no = new_start
                old_remaining = old_count
                new_remaining = new_count
                continue

        # Drop header-only records that never got a usable path
        return [f for f in files if f.new_path is not None or f.old_path is not None]
