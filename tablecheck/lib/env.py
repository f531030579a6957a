"""Environment helpers for schema documents and the CLI.

``data_dir`` in a schema document may reference environment variables,
and ``--env-file`` loads extra ``TABLECHECK_*`` settings through
python-dotenv before settings are read.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Union

from dotenv import load_dotenv

__all__ = ["expand_env_vars", "load_env_file"]

# ${NAME} or $NAME
ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}|\$([A-Za-z_][A-Za-z0-9_]*)")


def load_env_file(path: Union[str, Path]) -> bool:
    """Load ``path`` into the environment without overriding set variables.

    Returns:
        True if the file was found and loaded
    """
    return load_dotenv(dotenv_path=path)


def expand_env_vars(value: str) -> str:
    """Substitute ``${NAME}`` and ``$NAME`` references in ``value``.

    Unset variables are left as written, so a path that happens to
    contain ``$`` survives unchanged.

    Example:
        >>> os.environ["DATA_ROOT"] = "/srv/exports"
        >>> expand_env_vars("${DATA_ROOT}/daily")
        '/srv/exports/daily'
    """

    def substitute(match: re.Match[str]) -> str:
        name = match.group(1) or match.group(2)
        return os.environ.get(name, match.group(0))

    return ENV_VAR_PATTERN.sub(substitute, value)
