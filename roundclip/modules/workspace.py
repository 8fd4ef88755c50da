"""
Temp Resource Manager

У каждой задачи своя рабочая папка. Все файлы задачи создаются только
внутри неё и удаляются вместе с ней при любом исходе.
"""
import logging
import re
import shutil
from pathlib import Path
from typing import List

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_.-]+")


def safe_name(name: str, max_length: int = 80) -> str:
    """Очищает имя файла от символов, недопустимых в пути"""
    cleaned = _UNSAFE_CHARS.sub("_", name).strip("._")
    return cleaned[:max_length] or "file"


class JobWorkspace:
    """
    Рабочая папка одной задачи

    Использование:
        with JobWorkspace(root, job_id) as workspace:
            input_path = workspace.input_path("youtube-abc.mp4")
            ...
        # папка удалена
    """

    def __init__(self, root: Path, job_id: str):
        self.root = Path(root)
        self.job_id = safe_name(job_id)
        self.work_dir = self.root / f"job-{self.job_id}"
        self._cleaned = False

    def __enter__(self) -> "JobWorkspace":
        self.create()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.cleanup()
        return False

    def create(self) -> Path:
        self.work_dir.mkdir(parents=True, exist_ok=True)
        return self.work_dir

    def input_path(self, name: str) -> Path:
        """Путь входного файла задачи"""
        return self.work_dir / safe_name(name)

    def segment_path(self, index: int, container: str = "mp4") -> Path:
        """Путь очередного выходного сегмента"""
        return self.work_dir / f"output-{self.job_id}-{index}.{container}"

    def release(self, path: Path) -> None:
        """Удаляет один файл задачи сразу после использования"""
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Failed to delete file {path}: {e}")

    def files(self) -> List[Path]:
        """Файлы, которые сейчас лежат в рабочей папке"""
        if not self.work_dir.exists():
            return []
        return sorted(p for p in self.work_dir.iterdir() if p.is_file())

    def cleanup(self) -> None:
        """Удаляет рабочую папку целиком. Повторный вызов безопасен."""
        if self._cleaned:
            return
        self._cleaned = True

        if self.work_dir.exists():
            shutil.rmtree(self.work_dir, ignore_errors=True)
            logger.debug(f"🧹 Cleaned up {self.work_dir}")

        if self.work_dir.exists():
            logger.error(f"Work dir survived cleanup: {self.work_dir}")
