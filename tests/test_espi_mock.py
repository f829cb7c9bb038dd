import pytest

from ecplatform.espi_mock import (
    BatteryService,
    EspiService,
    SetBatteryCharge,
    UpdateBatteryStatus,
    main,
    run_mock_espi,
)


def test_espi_rejects_charge_request():
    espi = EspiService()
    with pytest.raises(TypeError):
        espi.receive(SetBatteryCharge(1))
    assert not espi.signal.signaled()


def test_battery_rejects_status_update():
    battery = BatteryService()
    with pytest.raises(TypeError):
        battery.receive(UpdateBatteryStatus(0))
    assert not battery.signal.signaled()


@pytest.mark.asyncio
async def test_forward_reaches_battery_config():
    espi = EspiService()
    battery = BatteryService()
    espi.forward_set_battery_charge(battery, 5)
    assert await battery.run_config(1) == [5]


@pytest.mark.asyncio
async def test_espi_run_handles_update():
    espi = EspiService()
    espi.receive(UpdateBatteryStatus(7))
    assert await espi.run(1) == [UpdateBatteryStatus(7)]
    assert not espi.signal.signaled()


@pytest.mark.asyncio
async def test_update_sends_count_and_keeps_latest():
    espi = EspiService()
    battery = BatteryService()
    assert await battery.update(espi, 2, 0.0) == 2
    assert await espi.signal.wait() == UpdateBatteryStatus(0)


@pytest.mark.asyncio
async def test_run_mock_espi_exchanges_everything():
    updates, charges = await run_mock_espi(3, 0.001)
    assert updates == [UpdateBatteryStatus(0)] * 3
    assert charges == [1, 2, 3]


@pytest.mark.asyncio
async def test_run_mock_espi_rejects_negative_ticks():
    with pytest.raises(ValueError):
        await run_mock_espi(-1, 0.0)


def test_main_reports(capsys):
    assert main(["--ticks", "2", "--interval", "0.001"]) == 0
    out = capsys.readouterr().out
    assert "Status updates: 2" in out
    assert "Charges set: 1, 2" in out