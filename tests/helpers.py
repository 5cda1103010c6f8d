"""Test helpers shared across test modules."""

import os
from pathlib import Path

from nasher.builds.toolchain import converted_name
from nasher.project.paths import ensure_dir


class ScriptedPrompter:
    """Prompter that replays canned answers and records questions.

    When a queue runs out, the question's default is returned.
    """

    def __init__(
        self,
        answers: list[str] | None = None,
        confirms: list[bool] | None = None,
    ) -> None:
        self.answers = list(answers or [])
        self.confirms = list(confirms or [])
        self.questions: list[str] = []
        self.confirm_defaults: list[bool] = []

    def ask(self, question: str, default: str = "", allow_blank: bool = True) -> str:
        self.questions.append(question)
        if self.answers:
            return self.answers.pop(0)
        return default

    def confirm(
        self, question: str, default: bool = False, repeat: bool = False
    ) -> bool:
        self.questions.append(question)
        self.confirm_defaults.append(default)
        if self.confirms:
            return self.confirms.pop(0)
        return default


def write_file(path: Path, text: str = "", mtime: float | None = None) -> Path:
    """Create a file, optionally with a fixed modification time."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    if mtime is not None:
        os.utime(path, (mtime, mtime))
    return path


class FakeToolchain:
    """Toolchain stand-in that performs file effects without external tools."""

    def __init__(
        self,
        compiler_exit: int = 0,
        archive_contents: dict[str, str] | None = None,
    ) -> None:
        self.compiler_exit = compiler_exit
        self.archive_contents = archive_contents or {}
        self.compiled: list[list[str]] = []
        self.packed: list[tuple[Path, list[str]]] = []
        self.converted: list[Path] = []

    def run_compiler(self, binary: str, args, cwd: Path) -> int:
        self.compiled.append([binary, *args])
        return self.compiler_exit

    def extract_archive(self, archive: Path, dest_dir: Path) -> None:
        for name, text in self.archive_contents.items():
            (dest_dir / name).write_text(text)

    def create_archive(self, out_path: Path, files) -> None:
        ensure_dir(out_path.parent)
        names = [Path(f).name for f in files]
        out_path.write_text("\n".join(names))
        self.packed.append((out_path, names))

    def convert(self, path: Path, dest_dir: Path | None = None) -> Path:
        out = (dest_dir or path.parent) / converted_name(path)
        out.write_text(path.read_text())
        self.converted.append(path)
        return out
