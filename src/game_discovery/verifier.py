"""Check a candidate directory really holds an application."""

import asyncio
import errno
import logging
import os
from dataclasses import dataclass, field

from game_discovery.models import Installable

logger = logging.getLogger(__name__)


class MissingRequiredFile(FileNotFoundError):
    """A required file is absent from the candidate directory."""

    def __init__(self, path: str) -> None:
        super().__init__(errno.ENOENT, "required file missing", path)
        self.path = path


@dataclass
class Verification:
    path: str
    denied: list[str] = field(default_factory=list)  # present but not readable

    @property
    def complete(self) -> bool:
        return not self.denied


def _probe(path: str) -> os.stat_result:
    # Plain stat: no locking, no attempt to gain access to locked files.
    return os.stat(path)


async def verify_application_dir(application: Installable, candidate: str) -> Verification:
    """
    Stat every required file of application under candidate.
    Raises MissingRequiredFile if one is absent. Permission errors are a soft
    accept and listed in Verification.denied; any other OSError propagates.
    """
    result = Verification(path=candidate)
    for file_name in application.required_files:
        full_path = os.path.join(candidate, file_name)
        try:
            await asyncio.to_thread(_probe, full_path)
        except FileNotFoundError:
            raise MissingRequiredFile(full_path) from None
        except PermissionError:
            logger.warning(
                "%s can't be read due to file permissions: %s", application.name, full_path
            )
            result.denied.append(full_path)
    return result


async def assert_application_dir(application: Installable, test_path: str | None) -> str | None:
    """Validate a user-supplied install directory. Returns it, or None if empty."""
    if not test_path:
        return None
    try:
        await verify_application_dir(application, test_path)
    except MissingRequiredFile as e:
        logger.warning(
            "directory not valid for %s: %s (missing %s)", application.name, test_path, e.path
        )
        raise
    except OSError as e:
        logger.error("failed to verify directory %s: %s", test_path, e)
        raise
    return test_path
