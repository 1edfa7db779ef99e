from __future__ import annotations

"""Command line interface for simsipm using Typer."""

from pathlib import Path
from typing import Dict, List, Optional

import json
import logging

import numpy as np
import typer
import yaml
from pydantic import ValidationError

from .config import Settings, load_settings
from .core.properties import DeviceProperties
from .errors import InvalidParameter
from .export import save_spectrum
from .ingest import load_properties, load_waveform
from .utils.logging import get_logger

app = typer.Typer(help="SiPM device properties and waveform features")
logger = logging.getLogger(__name__)


def _parse_override_value(raw: str) -> object:
    lower = raw.lower()
    if lower in {"true", "false"}:
        return lower == "true"
    if lower in {"null", "none"}:
        return None
    try:
        return int(raw)
    except ValueError:
        pass
    try:
        return float(raw)
    except ValueError:
        pass
    if raw.startswith("[") or raw.startswith("{"):
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            raise typer.BadParameter(f"invalid JSON override value: {raw}") from None
    return raw


def _ensure_path(settings: Settings, keys: List[str]) -> None:
    current: object = settings
    for key in keys[:-1]:
        if not hasattr(current, key):
            raise typer.BadParameter(f"unknown configuration key: {'.'.join(keys)}")
        current = getattr(current, key)
    if not hasattr(current, keys[-1]):
        raise typer.BadParameter(f"unknown configuration key: {'.'.join(keys)}")


def _apply_override(data: Dict[str, object], keys: List[str], value: object) -> None:
    target = data
    for key in keys[:-1]:
        existing = target.get(key)
        if not isinstance(existing, dict):
            existing = {}
            target[key] = existing
        target = existing
    target[keys[-1]] = value


def _load_device(path: Optional[Path]) -> DeviceProperties:
    if path is None:
        return DeviceProperties()
    try:
        return load_properties(path)
    except (OSError, ValueError, TypeError, yaml.YAMLError) as exc:
        raise typer.BadParameter(f"failed to load properties: {exc}") from exc


@app.callback()
def init(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        dir_okay=False,
        file_okay=True,
        exists=False,
        help="Path to a YAML or JSON configuration file.",
    ),
    set_overrides: List[str] = typer.Option(
        [],
        "--set",
        help="Override configuration values using dotted paths, e.g. features.threshold=0.3",
    ),
) -> None:
    """Initialise the Typer context with validated settings."""

    if isinstance(ctx.obj, Settings) and config is None and not set_overrides:
        settings = ctx.obj
    else:
        if config is not None and not config.exists():
            raise typer.BadParameter(f"configuration file not found: {config}")

        try:
            settings = load_settings(config) if config else Settings()
        except (FileNotFoundError, TypeError, json.JSONDecodeError) as exc:
            raise typer.BadParameter(f"failed to load configuration: {exc}") from exc

    if set_overrides:
        data = settings.model_dump()
        for override in set_overrides:
            if "=" not in override:
                raise typer.BadParameter(
                    "overrides must be of the form --set section.key=value"
                )
            key, raw_value = override.split("=", 1)
            if not key:
                raise typer.BadParameter("override key cannot be empty")
            keys = key.split(".")
            _ensure_path(settings, keys)
            value = _parse_override_value(raw_value)
            _apply_override(data, keys, value)
        try:
            settings = Settings.model_validate(data)
        except ValidationError as exc:
            raise typer.BadParameter(f"invalid configuration override: {exc}") from exc

    get_logger("simsipm", level=settings.logging.level, fmt=settings.logging.format)
    ctx.obj = settings


@app.command()
def show(
    ctx: typer.Context,
    properties: Optional[Path] = typer.Argument(None, help="Settings file (name=value, JSON or YAML)."),
) -> None:
    """Print the report of a SiPM description.

    Without an argument the file named by ``device.properties`` is used, or
    the built-in defaults when that is unset.
    """

    cfg: Settings = ctx.obj
    if properties is None and cfg.device.properties:
        properties = Path(cfg.device.properties)
    props = _load_device(properties)
    typer.echo(str(props), nl=False)


@app.command()
def resample(
    ctx: typer.Context,
    spectrum: Path = typer.Argument(..., exists=True, dir_okay=False, help="CSV with wavelength,pde columns."),
    output: Optional[Path] = typer.Option(None, "--output", "-o"),
) -> None:
    """Resample a measured PDE curve onto the 32 point grid."""

    cfg: Settings = ctx.obj
    data = np.genfromtxt(spectrum, delimiter=",", dtype=float)
    data = data[~np.isnan(data).any(axis=1)] if data.ndim == 2 else data
    if data.ndim != 2 or data.shape[1] < 2:
        raise typer.BadParameter(f"expected two columns wavelength,pde in {spectrum}")

    props = DeviceProperties()
    try:
        props.set_pde_spectrum(data[:, 0], data[:, 1])
    except InvalidParameter as exc:
        raise typer.BadParameter(str(exc)) from exc

    if output:
        path = save_spectrum(props, output)
        typer.echo(f"saved {len(props.pde_spectrum)} points to {path}")
        return

    digits = cfg.export.precision
    for wavelength, pde in props.pde_spectrum.items():
        typer.echo(f"{wavelength:.{digits}f},{pde:.{digits}f}")


@app.command()
def features(
    ctx: typer.Context,
    waveform: Path = typer.Argument(..., exists=True, dir_okay=False, help="Waveform file (.npy, .npz, .csv)."),
    sampling: Optional[float] = typer.Option(None, "--sampling", help="Sampling period in ns"),
    start: Optional[float] = typer.Option(None, "--start", help="Window start in ns"),
    stop: Optional[float] = typer.Option(None, "--stop", help="Window end in ns"),
    baseline: Optional[float] = typer.Option(None, "--baseline"),
    threshold: Optional[float] = typer.Option(None, "--threshold"),
) -> None:
    """Print integral, peak, tot, toa and top of a waveform."""

    cfg: Settings = ctx.obj
    feat = cfg.features
    sampling = sampling if sampling is not None else cfg.waveform.sampling
    try:
        signal = load_waveform(waveform, sampling=sampling)
    except ValueError as exc:
        raise typer.BadParameter(f"failed to load waveform: {exc}") from exc

    start = start if start is not None else feat.start
    stop = stop if stop is not None else feat.stop
    if stop is None:
        stop = (signal.size - 1) * signal.sampling
    baseline = baseline if baseline is not None else feat.baseline
    threshold = threshold if threshold is not None else feat.threshold
    logger.debug("features of %s in [%s, %s] ns", waveform, start, stop)

    digits = cfg.export.precision
    values = {
        "integral": signal.integral(start, stop, baseline),
        "peak": signal.peak(start, stop, baseline),
        "tot": signal.tot(start, stop, threshold, baseline),
        "toa": signal.toa(start, stop, threshold, baseline),
        "top": signal.top(start, stop, threshold, baseline),
    }
    for name, value in values.items():
        typer.echo(f"{name}={value:.{digits}f}")


def main() -> None:
    """Execute the Typer application."""

    app()


if __name__ == "__main__":
    main()
