from __future__ import annotations

from pathlib import Path
from xml.etree import ElementTree as ET

import pytest

from devicehub.core.codec import DeviceManager, load_devices, save_devices
from devicehub.core.device import Device
from devicehub.core.errors import (
    MalformedDocumentError,
    MalformedFieldError,
    SourceNotFoundError,
    UnknownKindError,
    VariantMismatchError,
)
from devicehub.core.model import DeviceKind, SerialPortSettings, TcpListenerSettings


def _write_doc(path: Path, content: str) -> Path:
    path.write_text(content, encoding="utf-8")
    return path


SCENARIO = """<?xml version="1.0" encoding="utf-8"?>
<Devices>
  <Device>
    <Type>SerialPort</Type>
    <IsRegistered>true</IsRegistered>
    <Settings>
      <PortName>COM3</PortName>
      <BaudRate>115200</BaudRate>
    </Settings>
  </Device>
  <Device>
    <Type>TcpListener</Type>
    <IsRegistered>false</IsRegistered>
    <Settings>
      <TcpAddress>0.0.0.0</TcpAddress>
      <TcpPort>8080</TcpPort>
    </Settings>
  </Device>
</Devices>
"""


def test_load_mixed_document_in_order(tmp_path: Path) -> None:
    devices = load_devices(_write_doc(tmp_path / "devices.xml", SCENARIO))

    assert len(devices) == 2
    serial_device, tcp_device = devices

    assert serial_device.kind is DeviceKind.SERIAL_PORT
    assert serial_device.is_registered is True
    assert serial_device.settings == SerialPortSettings(port_name="COM3", baud_rate=115200)
    assert serial_device.instance is None

    assert tcp_device.kind is DeviceKind.TCP_LISTENER
    assert tcp_device.is_registered is False
    assert tcp_device.settings == TcpListenerSettings(address="0.0.0.0", port=8080)
    assert tcp_device.instance is None


def test_missing_source_raises(tmp_path: Path) -> None:
    with pytest.raises(SourceNotFoundError):
        load_devices(tmp_path / "missing.xml")


def test_unknown_kind_aborts_load(tmp_path: Path) -> None:
    path = _write_doc(
        tmp_path / "devices.xml",
        """<Devices>
  <Device><Type>SerialPort</Type><IsRegistered>true</IsRegistered></Device>
  <Device><Type>Bluetooth</Type><IsRegistered>true</IsRegistered></Device>
</Devices>""",
    )
    with pytest.raises(UnknownKindError):
        load_devices(path)


def test_non_boolean_registration_flag_rejected(tmp_path: Path) -> None:
    path = _write_doc(
        tmp_path / "devices.xml",
        "<Devices><Device><Type>SerialPort</Type><IsRegistered>maybe</IsRegistered></Device></Devices>",
    )
    with pytest.raises(MalformedFieldError):
        load_devices(path)


def test_missing_registration_flag_rejected(tmp_path: Path) -> None:
    path = _write_doc(
        tmp_path / "devices.xml",
        "<Devices><Device><Type>SerialPort</Type></Device></Devices>",
    )
    with pytest.raises(MalformedFieldError):
        load_devices(path)


def test_registration_flag_accepts_any_case(tmp_path: Path) -> None:
    path = _write_doc(
        tmp_path / "devices.xml",
        "<Devices><Device><Type>TcpListener</Type><IsRegistered> True </IsRegistered></Device></Devices>",
    )
    assert load_devices(path)[0].is_registered is True


def test_missing_type_rejected(tmp_path: Path) -> None:
    path = _write_doc(
        tmp_path / "devices.xml",
        "<Devices><Device><IsRegistered>true</IsRegistered></Device></Devices>",
    )
    with pytest.raises(MalformedFieldError):
        load_devices(path)


def test_non_integer_numeric_field_rejected(tmp_path: Path) -> None:
    path = _write_doc(
        tmp_path / "devices.xml",
        """<Devices><Device>
  <Type>SerialPort</Type>
  <IsRegistered>true</IsRegistered>
  <Settings><PortName>COM1</PortName><BaudRate>fast</BaudRate></Settings>
</Device></Devices>""",
    )
    with pytest.raises(MalformedFieldError):
        load_devices(path)


def test_absent_settings_yield_zero_valued_variant(tmp_path: Path) -> None:
    path = _write_doc(
        tmp_path / "devices.xml",
        "<Devices><Device><Type>TcpListener</Type><IsRegistered>false</IsRegistered></Device></Devices>",
    )
    (device,) = load_devices(path)
    assert device.settings == TcpListenerSettings()


def test_malformed_xml_rejected(tmp_path: Path) -> None:
    path = _write_doc(tmp_path / "devices.xml", "<Devices><Device>")
    with pytest.raises(MalformedDocumentError):
        load_devices(path)


def test_save_then_load_round_trips(tmp_path: Path) -> None:
    devices = [
        Device(DeviceKind.SERIAL_PORT, SerialPortSettings(port_name="COM2", baud_rate=9600), is_registered=True),
        Device(DeviceKind.TCP_LISTENER, TcpListenerSettings(address="127.0.0.1", port=5000)),
        Device(DeviceKind.SERIAL_PORT, SerialPortSettings()),
        Device(DeviceKind.SERIAL_PORT, SerialPortSettings(port_name="", baud_rate=0)),
    ]
    devices[1].create_instance()

    path = tmp_path / "devices.xml"
    save_devices(devices, path)

    assert load_devices(path) == devices


def test_save_writes_kind_specific_fields_only(tmp_path: Path) -> None:
    path = tmp_path / "devices.xml"
    save_devices(
        [
            Device(DeviceKind.SERIAL_PORT, SerialPortSettings(port_name="COM3", baud_rate=115200), is_registered=True),
            Device(DeviceKind.TCP_LISTENER, TcpListenerSettings(address="0.0.0.0", port=8080)),
        ],
        path,
    )

    root = ET.parse(path).getroot()
    assert root.tag == "Devices"
    serial_el, tcp_el = root.findall("Device")
    assert serial_el.findtext("Type") == "SerialPort"
    assert serial_el.findtext("IsRegistered") == "true"
    assert [child.tag for child in serial_el.find("Settings")] == ["PortName", "BaudRate"]
    assert tcp_el.findtext("IsRegistered") == "false"
    assert [child.tag for child in tcp_el.find("Settings")] == ["TcpAddress", "TcpPort"]
    assert tcp_el.findtext("Settings/TcpPort") == "8080"


def test_save_overwrites_destination(tmp_path: Path) -> None:
    path = _write_doc(tmp_path / "devices.xml", SCENARIO)
    save_devices([], path)
    assert load_devices(path) == []


def test_device_manager_load_add_save(tmp_path: Path) -> None:
    path = _write_doc(tmp_path / "devices.xml", SCENARIO)
    manager = DeviceManager()
    manager.load(path)

    device = Device()
    device.assign_kind("SerialPort")
    device.create_settings()
    device.settings.port_name = "COM2"
    device.settings.baud_rate = 9600
    device.is_registered = True
    manager.add(device)
    manager.save(path)

    reloaded = DeviceManager()
    devices = reloaded.load(path)
    assert len(devices) == 3
    assert devices[2] == device
    assert reloaded.get(0).settings.port_name == "COM3"


def test_round_trip_keeps_device_name(tmp_path: Path) -> None:
    devices = [
        Device(DeviceKind.SERIAL_PORT, SerialPortSettings(device_name="Scale", port_name="COM1", baud_rate=9600)),
        Device(DeviceKind.TCP_LISTENER, TcpListenerSettings(device_name="PLC feed", address="0.0.0.0", port=502)),
    ]
    path = tmp_path / "devices.xml"
    save_devices(devices, path)

    reloaded = load_devices(path)
    assert reloaded == devices
    assert reloaded[0].settings.device_name == "Scale"
    assert reloaded[1].display_name == "PLC feed"


def test_serial_settings_equality_ignores_unpersisted_network_fields(tmp_path: Path) -> None:
    settings = SerialPortSettings(port_name="COM1", baud_rate=9600)
    settings.address = "10.0.0.5"
    settings.port = 4000
    path = tmp_path / "devices.xml"
    save_devices([Device(DeviceKind.SERIAL_PORT, settings)], path)

    (device,) = load_devices(path)
    assert device.settings == settings
    assert device.settings.address is None


def test_save_rejects_settings_of_another_kind(tmp_path: Path) -> None:
    path = _write_doc(tmp_path / "devices.xml", SCENARIO)
    device = Device(DeviceKind.SERIAL_PORT, TcpListenerSettings(address="127.0.0.1", port=5000))

    with pytest.raises(VariantMismatchError):
        save_devices([device], path)
    assert len(load_devices(path)) == 2


def test_save_rejects_device_without_kind(tmp_path: Path) -> None:
    path = tmp_path / "devices.xml"
    with pytest.raises(UnknownKindError):
        save_devices([Device()], path)
    assert not path.exists()


def test_save_rejects_characters_xml_cannot_store(tmp_path: Path) -> None:
    path = tmp_path / "devices.xml"
    device = Device(DeviceKind.SERIAL_PORT, SerialPortSettings(port_name="COM\x011", baud_rate=9600))
    with pytest.raises(MalformedFieldError):
        save_devices([device], path)
    assert not path.exists()


def test_unreadable_source_raises_domain_error(tmp_path: Path) -> None:
    with pytest.raises(SourceNotFoundError):
        load_devices(tmp_path)


def test_non_integer_tcp_port_rejected(tmp_path: Path) -> None:
    path = _write_doc(
        tmp_path / "devices.xml",
        """<Devices><Device>
  <Type>TcpListener</Type>
  <IsRegistered>false</IsRegistered>
  <Settings><TcpAddress>0.0.0.0</TcpAddress><TcpPort>http</TcpPort></Settings>
</Device></Devices>""",
    )
    with pytest.raises(MalformedFieldError):
        load_devices(path)


def test_partial_settings_keep_zero_values(tmp_path: Path) -> None:
    path = _write_doc(
        tmp_path / "devices.xml",
        """<Devices>
  <Device>
    <Type>SerialPort</Type>
    <IsRegistered>true</IsRegistered>
    <Settings><BaudRate>4800</BaudRate></Settings>
  </Device>
  <Device>
    <Type>TcpListener</Type>
    <IsRegistered>true</IsRegistered>
    <Settings><TcpAddress>127.0.0.1</TcpAddress></Settings>
  </Device>
</Devices>""",
    )
    serial_device, tcp_device = load_devices(path)
    assert serial_device.settings == SerialPortSettings(port_name=None, baud_rate=4800)
    assert tcp_device.settings == TcpListenerSettings(address="127.0.0.1", port=0)
