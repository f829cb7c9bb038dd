"""Simulated embedded controller services: CRC, NVRAM, power button, HID interrupt passthrough and demos."""

__version__ = "0.1.0"

__all__ = [
    "button",
    "button_interpreter",
    "crc",
    "debounce",
    "espi_mock",
    "i2c",
    "image",
    "interrupt",
    "nvram",
    "power_button",
    "transport",
]