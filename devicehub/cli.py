"""Typer CLI entrypoint."""

from __future__ import annotations

import logging
from pathlib import Path
from xml.etree import ElementTree as ET

import typer

from devicehub.core.codec import DeviceManager
from devicehub.core.config import Config, load_config
from devicehub.core.device import Device
from devicehub.core.errors import DevicehubError, MalformedFieldError
from devicehub.core.registry import DEFAULT_REGISTRY

app = typer.Typer(help="Manage serial port and TCP listener device descriptors")

FILE_OPTION = typer.Option(None, "--file", "-f", help="Devices XML document")


def _load_config() -> Config:
    config = load_config()
    logging.basicConfig(level=config.log_level, format="%(levelname)s %(name)s: %(message)s")
    return config


def _devices_file(file: Path | None) -> Path:
    config = _load_config()
    return file or config.devices_file


def _describe(index: int, device: Device) -> str:
    registered = "true" if device.is_registered else "false"
    fields = ""
    if device.settings is not None:
        pairs = DEFAULT_REGISTRY.write_settings(device.settings)
        fields = " " + " ".join(f"{name}={value}" for name, value in pairs if value is not None)
    return f"[{index}] {device.kind} registered={registered}{fields}"


def _settings_element(kind_fields: tuple[str, ...], assignments: list[str]) -> ET.Element:
    element = ET.Element("Settings")
    for assignment in assignments:
        name, sep, value = assignment.partition("=")
        name = name.strip()
        if not sep or not name:
            raise MalformedFieldError(f"Expected Field=value, got '{assignment}'")
        if name not in kind_fields:
            allowed = ", ".join(kind_fields) or "<none>"
            raise MalformedFieldError(f"Unknown settings field '{name}'. Allowed: {allowed}")
        ET.SubElement(element, name).text = value
    return element


@app.command("kinds")
def list_kinds() -> None:
    """List supported device kinds and their settings fields."""
    for kind in DEFAULT_REGISTRY.kinds:
        registration = DEFAULT_REGISTRY.registration(kind)
        fields = ", ".join(registration.fields) if registration else ""
        typer.echo(f"{kind}: {fields}")


@app.command("list")
def list_devices(file: Path | None = FILE_OPTION) -> None:
    """List devices stored in the document."""
    try:
        manager = DeviceManager()
        devices = manager.load(_devices_file(file))
        if not devices:
            typer.echo("No devices defined")
            return
        for index, device in enumerate(devices):
            typer.echo(_describe(index, device))
    except DevicehubError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("add")
def add_device(
    kind: str,
    assignments: list[str] | None = typer.Option(
        None, "--set", help="Settings field as Field=value, e.g. PortName=COM3"
    ),
    registered: bool = typer.Option(False, "--registered/--unregistered"),
    file: Path | None = FILE_OPTION,
) -> None:
    """Append a device of KIND to the document, creating it if needed."""
    try:
        path = _devices_file(file)
        manager = DeviceManager()
        if path.exists():
            manager.load(path)

        device = Device(is_registered=registered)
        device.assign_kind(kind)
        registration = DEFAULT_REGISTRY.registration(device.kind)
        kind_fields = registration.fields if registration else ()
        device.configure(_settings_element(kind_fields, assignments or []))

        manager.add(device)
        manager.save(path)
        typer.echo(f"Added {_describe(len(manager.devices) - 1, device)}")
    except DevicehubError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


def _set_registration(index: int, value: bool, file: Path | None) -> None:
    try:
        path = _devices_file(file)
        manager = DeviceManager()
        manager.load(path)
        device = manager.get(index)
        device.is_registered = value
        manager.save(path)
        typer.echo(_describe(index, device))
    except DevicehubError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("register")
def register_device(index: int, file: Path | None = FILE_OPTION) -> None:
    """Approve the device at INDEX for use."""
    _set_registration(index, True, file)


@app.command("unregister")
def unregister_device(index: int, file: Path | None = FILE_OPTION) -> None:
    """Withdraw approval for the device at INDEX."""
    _set_registration(index, False, file)


@app.command("check")
def check_devices(file: Path | None = FILE_OPTION) -> None:
    """Construct each device instance and apply its settings.

    Listener sockets are bound and released again; nothing is opened or sent.
    """
    try:
        manager = DeviceManager()
        devices = manager.load(_devices_file(file))
        for index, device in enumerate(devices):
            device.create_instance()
            try:
                device.apply_settings()
                device.start()
                typer.echo(f"[{index}] {device.kind} ok -> {device.instance.describe()}")
                device.stop()
            finally:
                close = getattr(device.instance, "close", None)
                if close is not None:
                    close()
    except DevicehubError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


def run() -> None:
    app()


if __name__ == "__main__":
    run()
