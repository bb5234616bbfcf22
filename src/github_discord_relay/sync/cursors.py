import json
import os
import pathlib
import tempfile

from pydantic import ValidationError

from github_discord_relay.errors import CursorWriteError
from github_discord_relay.models import Cursor
from github_discord_relay.utils.logging_utils import get_logger

CURSOR_PATH = pathlib.Path("data/github-cache.json")

log = get_logger("relay.cursors")


class CursorStore:
    def __init__(self, path: pathlib.Path | str = CURSOR_PATH):
        self.path = pathlib.Path(path)

    def read(self) -> Cursor:
        """Return the stored cursor, or the zero-cursor if there is none usable."""
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return Cursor.zero()
        except (OSError, UnicodeDecodeError) as exc:
            log.warning("Could not read cursor %s (%s); starting from zero", self.path, exc)
            return Cursor.zero()

        try:
            data = json.loads(text)
            if not isinstance(data, dict):
                raise ValueError("cursor is not a JSON object")
            return Cursor.model_validate(data)
        except (ValueError, ValidationError) as exc:
            log.warning("Ignoring unreadable cursor %s (%s); starting from zero", self.path, exc)
            return Cursor.zero()

    def write(self, cursor: Cursor) -> None:
        payload = json.dumps(cursor.model_dump(mode="json"))
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    fh.write(payload)
                os.replace(tmp_name, self.path)
            except BaseException:
                pathlib.Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise CursorWriteError(f"Could not write cursor {self.path}: {exc}") from exc

    def reset(self) -> bool:
        """Delete the stored cursor. Returns False if there was nothing to delete."""
        try:
            self.path.unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            raise CursorWriteError(f"Could not remove cursor {self.path}: {exc}") from exc
        return True
