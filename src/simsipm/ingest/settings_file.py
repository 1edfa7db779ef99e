# src/simsipm/ingest/settings_file.py
"""Readers for SiPM property files.

Text settings (``read_settings``):
   # comment             (also lines starting with '/')
   size = 6
   pitch=25
   -> whitespace anywhere on a line is ignored; names are case-insensitive

Structured settings (``load_properties``), JSON or YAML mapping:
   size: 6
   pitch: 25
   hit_distribution: circle
   pde_spectrum:
     wavelengths: [300, 400, 500]
     efficiencies: [0.2, 0.4, 0.3]
"""

from __future__ import annotations

import json
import logging
import pathlib
from typing import Any, Iterator, Mapping, Optional, TextIO, Tuple, Union

import yaml

from ..core.properties import DeviceProperties
from ..errors import InvalidParameter, SettingsParseError

logger = logging.getLogger(__name__)

_COMMENT_CHARS = ("#", "/")


def _parse_line(line: str) -> Optional[Tuple[str, float]]:
    compact = "".join(line.split())
    if not compact or compact.startswith(_COMMENT_CHARS):
        return None
    name, sep, raw_value = compact.partition("=")
    if not sep or not name:
        raise ValueError(f"Expected name=value, got {line.strip()!r}")
    try:
        return name, float(raw_value)
    except ValueError:
        raise ValueError(f"Invalid numeric value {raw_value!r} for {name}") from None


def _iter_assignments(fh: TextIO, *, path: Union[str, pathlib.Path]) -> Iterator[Tuple[int, str, float]]:
    for lineno, raw in enumerate(fh, start=1):
        try:
            parsed = _parse_line(raw)
        except ValueError as e:
            raise SettingsParseError(str(e), path=path, line=lineno) from e
        if parsed is not None:
            yield lineno, parsed[0], parsed[1]


def _apply(
    props: DeviceProperties,
    fh: TextIO,
    *,
    path: Union[str, pathlib.Path],
    log: logging.Logger,
) -> None:
    for lineno, name, value in _iter_assignments(fh, path=path):
        try:
            props.set_property(name, value, log=log)
        except InvalidParameter as e:
            raise SettingsParseError(str(e), path=path, line=lineno) from e


def read_settings(
    source: Union[str, pathlib.Path, TextIO],
    *,
    log: Optional[logging.Logger] = None,
) -> DeviceProperties:
    """Build :class:`DeviceProperties` from a ``name=value`` text source.

    ``source`` is a path or an open text stream.  Unknown property names are
    reported on ``log`` and skipped.  A line without ``=`` or with a value
    that is not a number raises :class:`~simsipm.errors.SettingsParseError`;
    the same happens when a value is rejected by its setter.

    A path that cannot be opened is reported on ``log`` and the defaults are
    returned.
    """

    log = log or logger
    props = DeviceProperties()
    if isinstance(source, (str, pathlib.Path)):
        p = pathlib.Path(source)
        try:
            fh = open(p, "r", encoding="utf8")
        except OSError as exc:
            log.error("Could not open %s for reading! (%s)", p, exc)
            return DeviceProperties()
        with fh:
            _apply(props, fh, path=p, log=log)
    else:
        _apply(props, source, path=getattr(source, "name", "<stream>"), log=log)
    return props


def properties_from_mapping(
    data: Mapping[str, Any],
    *,
    log: Optional[logging.Logger] = None,
) -> DeviceProperties:
    """Build :class:`DeviceProperties` from a mapping of property names.

    Numeric entries go through :meth:`DeviceProperties.set_property`.  The
    keys ``hit_distribution`` and ``pde_spectrum`` (a mapping with
    ``wavelengths`` and ``efficiencies`` lists) are handled separately.
    """

    log = log or logger
    props = DeviceProperties()
    for name, value in data.items():
        key = str(name).lower()
        if key == "hit_distribution":
            props.set_hit_distribution(str(value))
        elif key == "pde_spectrum":
            if not isinstance(value, Mapping):
                raise TypeError("pde_spectrum must map 'wavelengths' and 'efficiencies' to lists")
            props.set_pde_spectrum(value.get("wavelengths", []), value.get("efficiencies", []))
        else:
            props.set_property(str(name), float(value), log=log)
    return props


def load_properties(
    path: Union[str, pathlib.Path],
    *,
    log: Optional[logging.Logger] = None,
) -> DeviceProperties:
    """Load properties from a JSON, YAML or ``name=value`` text file.

    The format is chosen from the suffix: ``.json``, ``.yaml``/``.yml``;
    anything else is read with :func:`read_settings`.
    """

    p = pathlib.Path(path)
    suffix = p.suffix.lower()
    if suffix not in {".json", ".yaml", ".yml"}:
        return read_settings(p, log=log)

    text = p.read_text(encoding="utf8")
    data = json.loads(text) if suffix == ".json" else yaml.safe_load(text)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise TypeError("Property file must define a mapping")
    return properties_from_mapping(data, log=log)


__all__ = ["read_settings", "load_properties", "properties_from_mapping"]
