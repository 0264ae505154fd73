"""
Per-class submission switches (classActiveSettings).

Two shapes exist on disk:

- Legacy: a flat map ``{"경제A": true, "경제B": false}``.
- V2: ``{"version": 2, "defaultByClass": {...}, "bySession": {sid: {...}}, "updatedAt": ms}``.

The raw document is parsed once into ``LegacySettings | V2Settings``.
Reads accept both; every write goes through ``normalize`` so stored state only
ever moves to V2. Missing values at every level mean "open".
"""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Mapping, Optional, Union

SETTINGS_VERSION = 2
# Scope of the class-wide defaults, as opposed to a session id
DEFAULT_SCOPE = "__default__"

_RESERVED_KEYS = frozenset({"version", "defaultByClass", "bySession", "updatedAt"})


@dataclass(frozen=True)
class LegacySettings:
    flags: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class V2Settings:
    default_by_class: Dict[str, Any] = field(default_factory=dict)
    by_session: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    updated_at: Optional[int] = None
    # Class keys merged into the top level of a V2 document by mistake
    stray: Dict[str, bool] = field(default_factory=dict)


ClassActiveSettings = Union[LegacySettings, V2Settings]


def _now_ms() -> int:
    return int(time.time() * 1000)


def is_v2_document(raw: Mapping[str, Any]) -> bool:
    return isinstance(raw.get("defaultByClass"), Mapping) or isinstance(raw.get("bySession"), Mapping)


def parse_settings(raw: Optional[Mapping[str, Any]]) -> ClassActiveSettings:
    """Decide the shape of a stored settings document once."""
    if not isinstance(raw, Mapping):
        return LegacySettings()
    if not is_v2_document(raw):
        return LegacySettings(flags=dict(raw))

    default_by_class = raw.get("defaultByClass")
    by_session = raw.get("bySession")
    updated_at = raw.get("updatedAt")
    return V2Settings(
        default_by_class=dict(default_by_class) if isinstance(default_by_class, Mapping) else {},
        by_session={
            sid: dict(classes)
            for sid, classes in (by_session.items() if isinstance(by_session, Mapping) else ())
            if isinstance(classes, Mapping)
        },
        updated_at=updated_at if isinstance(updated_at, int) else None,
        stray={
            key: value
            for key, value in raw.items()
            if key not in _RESERVED_KEYS and isinstance(value, bool)
        },
    )


def can_submit(settings: ClassActiveSettings, class_group: str, session_id: Optional[str]) -> bool:
    """Whether ``class_group`` may currently submit ``session_id``."""
    if isinstance(settings, LegacySettings):
        value = settings.flags.get(class_group)
        return value if isinstance(value, bool) else True

    session_flags = settings.by_session.get(session_id) if session_id else None
    if session_flags is not None and isinstance(session_flags.get(class_group), bool):
        return session_flags[class_group]

    default = settings.default_by_class.get(class_group)
    if isinstance(default, bool):
        return default
    return True


def normalize(settings: ClassActiveSettings, now: Optional[int] = None) -> V2Settings:
    """Convert any shape to a fresh V2 value with a refreshed ``updated_at``."""
    stamp = now if now is not None else _now_ms()
    if isinstance(settings, LegacySettings):
        return V2Settings(default_by_class=dict(settings.flags), by_session={}, updated_at=stamp)

    default_by_class = dict(settings.default_by_class)
    default_by_class.update(settings.stray)
    return V2Settings(
        default_by_class=default_by_class,
        by_session={sid: dict(classes) for sid, classes in settings.by_session.items()},
        updated_at=stamp,
    )


def to_document(settings: V2Settings) -> Dict[str, Any]:
    return {
        "version": SETTINGS_VERSION,
        "defaultByClass": dict(settings.default_by_class),
        "bySession": {sid: dict(classes) for sid, classes in settings.by_session.items()},
        "updatedAt": settings.updated_at if settings.updated_at is not None else _now_ms(),
    }


def normalize_document(raw: Optional[Mapping[str, Any]], now: Optional[int] = None) -> Dict[str, Any]:
    """Raw document in, storable V2 document out."""
    return to_document(normalize(parse_settings(raw), now=now))


def _with_scope(
    settings: ClassActiveSettings,
    scope: str,
    values: Mapping[str, bool],
    now: Optional[int],
) -> V2Settings:
    base = normalize(settings, now=now)
    if scope == DEFAULT_SCOPE:
        default_by_class = dict(base.default_by_class)
        default_by_class.update(values)
        return V2Settings(default_by_class=default_by_class, by_session=base.by_session, updated_at=base.updated_at)

    by_session = dict(base.by_session)
    session_flags = dict(by_session.get(scope, {}))
    session_flags.update(values)
    by_session[scope] = session_flags
    return V2Settings(default_by_class=base.default_by_class, by_session=by_session, updated_at=base.updated_at)


def set_all(
    settings: ClassActiveSettings,
    classes: Iterable[str],
    scope: str,
    value: bool,
    now: Optional[int] = None,
) -> V2Settings:
    """Set every class in ``classes`` to ``value`` within one scope."""
    return _with_scope(settings, scope, {c: value for c in classes}, now)


def toggle(settings: ClassActiveSettings, class_group: str, scope: str, now: Optional[int] = None) -> V2Settings:
    """Flip the effective switch of one class in one scope."""
    session_id = None if scope == DEFAULT_SCOPE else scope
    current = can_submit(settings, class_group, session_id)
    return _with_scope(settings, scope, {class_group: not current}, now)


def ensure_classes(settings: ClassActiveSettings, classes: Iterable[str], now: Optional[int] = None) -> Optional[V2Settings]:
    """
    Give newly seen class groups an explicit open default.

    Returns None when every class already has a default, so callers can skip the write.
    """
    base = normalize(settings, now=now)
    added = {c: True for c in classes if c not in base.default_by_class}
    if not added:
        return None
    default_by_class = dict(base.default_by_class)
    default_by_class.update(added)
    return V2Settings(default_by_class=default_by_class, by_session=base.by_session, updated_at=base.updated_at)
