"""
Persists service profiles in an INI file, one `[profile:<id>]` section each.
"""

import configparser
import json
import logging
import uuid
from pathlib import Path
from typing import Dict, List, Optional, Union

from pydantic import ValidationError
from rich.markup import escape

from shareconnect.exceptions import ConfigurationError, ProfileNotFoundError
from shareconnect.models.profile import Profile

log = logging.getLogger(__name__)

SECTION_PREFIX = "profile:"
_FIELDS = (
    "name",
    "base_url",
    "port",
    "service_kind",
    "torrent_client",
    "username",
    "password",
    "is_default",
)
_QUOTED_FIELDS = ("username", "password")

ProfileId = Union[uuid.UUID, str]


class ProfileStore:
    """
    Loads profiles eagerly and writes the whole file back after every change.

    At most one profile carries the default flag. A file with several flagged
    profiles keeps the first and clears the others on load.
    """

    def __init__(self, profiles_file_path: Path):
        self.profiles_file_path = profiles_file_path
        self._profiles: Dict[uuid.UUID, Profile] = {}
        self._load()

    def list_profiles(self) -> List[Profile]:
        """All profiles in file order."""
        return list(self._profiles.values())

    def get(self, profile_id: ProfileId) -> Profile:
        key = _parse_id(profile_id)
        if key is None or key not in self._profiles:
            raise ProfileNotFoundError(f"No profile with id '{profile_id}'.")
        return self._profiles[key]

    def find(self, name_or_id: str) -> Profile:
        """Looks a profile up by id, then by exact name, then case-insensitively."""
        key = _parse_id(name_or_id)
        if key is not None and key in self._profiles:
            return self._profiles[key]

        for profile in self._profiles.values():
            if profile.name == name_or_id:
                return profile
        matches = [
            p for p in self._profiles.values() if p.name.lower() == name_or_id.lower()
        ]
        if len(matches) == 1:
            return matches[0]
        if len(matches) > 1:
            raise ConfigurationError(
                f"Profile name '{name_or_id}' is ambiguous; use the profile id."
            )
        raise ProfileNotFoundError(f"No profile named '{name_or_id}'.")

    def default_profile(self) -> Optional[Profile]:
        """The flagged default profile, else the first profile, else None."""
        for profile in self._profiles.values():
            if profile.is_default:
                return profile
        return next(iter(self._profiles.values()), None)

    def add(self, profile: Profile) -> Profile:
        if profile.id in self._profiles:
            raise ConfigurationError(f"A profile with id '{profile.id}' already exists.")
        if profile.is_default or not self._profiles:
            # The first profile becomes the default.
            self._clear_default_flags()
            profile = profile.model_copy(update={"is_default": True})
        self._profiles[profile.id] = profile
        self.save()
        log.info(f"Added profile [bold]{escape(profile.name)}[/]")
        return profile

    def update(self, profile: Profile) -> Profile:
        if profile.id not in self._profiles:
            raise ProfileNotFoundError(f"No profile with id '{profile.id}'.")
        if profile.is_default:
            self._clear_default_flags()
        self._profiles[profile.id] = profile
        self.save()
        return profile

    def delete(self, profile_id: ProfileId) -> Profile:
        profile = self.get(profile_id)
        del self._profiles[profile.id]
        self.save()
        log.info(f"Removed profile [bold]{escape(profile.name)}[/]")
        return profile

    def set_default(self, profile_id: ProfileId) -> Profile:
        """Flags one profile as default and clears the flag on all others."""
        target = self.get(profile_id)
        self._profiles = {
            pid: p.model_copy(update={"is_default": pid == target.id})
            for pid, p in self._profiles.items()
        }
        self.save()
        return self._profiles[target.id]

    def save(self) -> None:
        parser = configparser.ConfigParser(interpolation=None)
        for profile in self._profiles.values():
            parser[f"{SECTION_PREFIX}{profile.id}"] = _to_section(profile)

        try:
            self.profiles_file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.profiles_file_path, "w", encoding="utf-8") as f:
                parser.write(f)
        except OSError as e:
            raise ConfigurationError(f"Failed to save profiles file: {e}") from e

    def _clear_default_flags(self) -> None:
        self._profiles = {
            pid: p.model_copy(update={"is_default": False}) if p.is_default else p
            for pid, p in self._profiles.items()
        }

    def _load(self) -> None:
        if not self.profiles_file_path.is_file():
            log.debug(f"No profiles file at '{self.profiles_file_path}'.")
            return

        parser = configparser.ConfigParser(interpolation=None)
        try:
            parser.read(self.profiles_file_path, encoding="utf-8")
        except configparser.Error as e:
            raise ConfigurationError(f"Error parsing profiles file: {e}") from e

        seen_default = False
        for section_name in parser.sections():
            if not section_name.startswith(SECTION_PREFIX):
                log.debug(f"Ignoring section [{section_name}] in profiles file.")
                continue
            profile = _from_section(section_name, parser[section_name])

            if profile.is_default:
                if seen_default:
                    log.warning(
                        f"[yellow]Profile '{escape(profile.name)}' is also marked as default; "
                        "keeping the first default only.[/yellow]"
                    )
                    profile = profile.model_copy(update={"is_default": False})
                seen_default = True
            self._profiles[profile.id] = profile


def _to_section(profile: Profile) -> Dict[str, str]:
    data = profile.model_dump(mode="json", include=set(_FIELDS))
    section = {}
    for key in _FIELDS:
        value = data.get(key)
        if isinstance(value, bool):
            section[key] = "true" if value else "false"
        elif value is None:
            section[key] = ""
        elif key in _QUOTED_FIELDS:
            # configparser strips values on read; quoting keeps edge whitespace.
            section[key] = json.dumps(value)
        else:
            section[key] = str(value)
    return section


def _from_section(section_name: str, section: configparser.SectionProxy) -> Profile:
    raw_id = section_name[len(SECTION_PREFIX) :]
    data = {key: section.get(key) for key in _FIELDS if section.get(key)}
    for key in _QUOTED_FIELDS:
        if key in data:
            data[key] = _unquote(data[key])
    try:
        data["is_default"] = section.getboolean("is_default", False)
        return Profile(id=raw_id, **data)
    except (ValueError, ValidationError) as e:
        raise ConfigurationError(f"Invalid profile [{section_name}]:\n{e}") from e


def _unquote(value: str) -> str:
    """Reads a JSON-quoted value; hand-written unquoted values are kept as is."""
    if not value.startswith('"'):
        return value
    try:
        decoded = json.loads(value)
    except json.JSONDecodeError:
        return value
    return decoded if isinstance(decoded, str) else value


def _parse_id(value: ProfileId) -> Optional[uuid.UUID]:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None
