# Acquire key passwords from a file or an interactive prompt.
from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from ..exceptions import FileReadFailure, MissingInput


def read_password(password_file: Optional[Path], *, confirm: bool = False) -> str:
    """Return the password from ``password_file`` or prompt for it.

    Only the first line of the file is used, with its line ending stripped.
    """
    if password_file is not None:
        try:
            content = password_file.read_text(encoding="utf-8")
        except OSError as exc:
            raise FileReadFailure(f"failed to read password file {password_file}: {exc.strerror or exc}") from exc
        lines = content.splitlines()
        password = lines[0] if lines else ""
        if not password:
            raise MissingInput(f"password file {password_file} is empty")
        return password
    return typer.prompt("Password", hide_input=True, confirmation_prompt=confirm)
