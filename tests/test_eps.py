import pytest

from satlink.eps import ElectricalPowerSystem
from satlink.power_components import (
    Battery,
    BatteryState,
    Load,
    OperationalMode,
    PowerDistributionUnit,
    SolarPanel,
)


def _panels(area=0.1, efficiency=0.3, deployed=True, count=2):
    panels = [SolarPanel(f"panel-{i}", area, efficiency) for i in range(count)]
    if deployed:
        for panel in panels:
            panel.deploy()
    return panels


def _battery(charge_wh=20.0, capacity_wh=40.0):
    return Battery("bat", capacity_wh, charge_wh, 8.0, 20.0, 20.0)


def _pdu():
    pdu = PowerDistributionUnit()
    pdu.add_load(Load("OBC", 0.5, True))
    pdu.add_load(Load("COM_RX", 0.3, True))
    pdu.add_load(Load("COM_TX", 4.0, False))
    pdu.add_load(Load("Heaters", 2.0, False))
    pdu.add_load(Load("PayloadCam", 3.0, False))
    pdu.add_load(Load("PayloadTx", 5.0, False))
    return pdu


def _loads_on(pdu):
    return {load.id for load in pdu.loads if load.is_on}


def test_eclipse_generates_nothing():
    eps = ElectricalPowerSystem(_panels(), _battery(), _pdu(), OperationalMode.NOMINAL_ECLIPSE)
    eps.update_solar_power_generation()
    assert eps.total_generated_power_w == 0.0


def test_undeployed_panels_generate_nothing():
    eps = ElectricalPowerSystem(_panels(deployed=False), _battery(), _pdu())
    eps.update_solar_power_generation()
    assert eps.total_generated_power_w == 0.0


def test_total_is_sum_of_panel_outputs():
    eps = ElectricalPowerSystem(_panels(count=3), _battery(), _pdu())
    eps.update_solar_power_generation()
    assert eps.total_generated_power_w > 0.0
    assert eps.total_generated_power_w == pytest.approx(
        sum(p.current_power_output_w for p in eps.solar_panels)
    )


def test_safe_mode_generates_less_than_sunlit():
    sunlit = ElectricalPowerSystem(_panels(), _battery(), _pdu())
    sunlit.update_solar_power_generation()
    safe = ElectricalPowerSystem(_panels(), _battery(), _pdu(), OperationalMode.SAFE_MODE)
    safe.update_solar_power_generation()
    assert safe.total_generated_power_w / sunlit.total_generated_power_w == pytest.approx(0.5 / 0.8)


def test_surplus_charges_battery():
    eps = ElectricalPowerSystem(_panels(), _battery(charge_wh=10.0), _pdu())
    eps.pdu.switch_load("OBC", True)
    eps.manage_power(0.1)
    assert eps.battery.current_charge_wh > 10.0
    assert eps.battery.state in (BatteryState.CHARGING, BatteryState.FULL)


def test_deficit_is_covered_by_battery():
    eps = ElectricalPowerSystem(_panels(), _battery(charge_wh=20.0), _pdu(), OperationalMode.NOMINAL_ECLIPSE)
    eps.pdu.switch_load("OBC", True)
    eps.manage_power(0.5)
    assert eps.battery.current_charge_wh < 20.0
    assert eps.battery.state is BatteryState.DISCHARGING
    assert eps.current_mode is OperationalMode.NOMINAL_ECLIPSE
    assert "OBC" in _loads_on(eps.pdu)


def test_empty_battery_in_eclipse_enters_safe_mode():
    eps = ElectricalPowerSystem(_panels(), _battery(charge_wh=0.0), _pdu(), OperationalMode.NOMINAL_ECLIPSE)
    for load_id in ("OBC", "COM_TX", "PayloadCam"):
        eps.pdu.switch_load(load_id, True)
    eps.manage_power(0.5)
    assert eps.current_mode is OperationalMode.SAFE_MODE
    assert eps.battery.state is BatteryState.EMPTY
    assert _loads_on(eps.pdu) == {"OBC", "COM_RX"}


def test_shedding_that_resolves_deficit_keeps_mode():
    eps = ElectricalPowerSystem(_panels(area=0.01, efficiency=0.1, count=1), _battery(charge_wh=0.0))
    eps.pdu.add_load(Load("OBC", 0.5, True, is_on=True))
    eps.pdu.add_load(Load("PayloadTx", 10.0, False, is_on=True))
    eps.manage_power(0.5)
    assert eps.current_mode is OperationalMode.NOMINAL_SUNLIT
    assert _loads_on(eps.pdu) == {"OBC"}


@pytest.mark.parametrize(
    ("charge_wh", "expected"),
    [(40.0, BatteryState.FULL), (0.0, BatteryState.EMPTY), (20.0, BatteryState.IDLE)],
)
def test_balanced_power_settles_battery_state(charge_wh, expected):
    eps = ElectricalPowerSystem(_panels(), _battery(charge_wh=charge_wh), _pdu(), OperationalMode.NOMINAL_ECLIPSE)
    eps.battery.state = BatteryState.CHARGING
    eps.manage_power(1.0)
    assert eps.battery.state is expected
    assert eps.battery.current_charge_wh == charge_wh


def test_balanced_power_leaves_other_states_alone():
    eps = ElectricalPowerSystem(_panels(), _battery(), _pdu(), OperationalMode.NOMINAL_ECLIPSE)
    eps.battery.state = BatteryState.IDLE
    eps.manage_power(1.0)
    assert eps.battery.state is BatteryState.IDLE


def test_manage_power_rejects_non_positive_step():
    eps = ElectricalPowerSystem(_panels(), _battery(), _pdu())
    with pytest.raises(ValueError):
        eps.manage_power(0.0)


def test_setting_same_mode_changes_nothing():
    eps = ElectricalPowerSystem(_panels(), _battery(), _pdu())
    eps.pdu.switch_load("PayloadCam", True)
    eps.set_satellite_mode(OperationalMode.NOMINAL_SUNLIT)
    assert _loads_on(eps.pdu) == {"PayloadCam"}


def test_payload_operation_turns_on_payloads_and_critical_loads():
    eps = ElectricalPowerSystem(_panels(), _battery(), _pdu())
    eps.pdu.switch_load("Heaters", True)
    eps.set_satellite_mode(OperationalMode.PAYLOAD_OPERATION)
    assert eps.current_mode is OperationalMode.PAYLOAD_OPERATION
    assert _loads_on(eps.pdu) == {"OBC", "COM_RX", "PayloadCam", "PayloadTx"}


def test_nominal_mode_baseline_loads():
    eps = ElectricalPowerSystem(_panels(), _battery(), _pdu(), OperationalMode.SAFE_MODE)
    eps.pdu.switch_load("COM_TX", True)
    eps.pdu.switch_load("PayloadTx", True)
    eps.set_satellite_mode(OperationalMode.NOMINAL_ECLIPSE)
    assert _loads_on(eps.pdu) == {"OBC", "COM_RX", "Heaters"}


def test_safe_mode_keeps_only_critical_loads():
    eps = ElectricalPowerSystem(_panels(), _battery(), _pdu())
    for load in eps.pdu.loads:
        load.turn_on()
    eps.set_satellite_mode(OperationalMode.SAFE_MODE)
    assert _loads_on(eps.pdu) == {"OBC", "COM_RX"}


def test_missing_mode_loads_are_ignored():
    pdu = PowerDistributionUnit()
    pdu.add_load(Load("OBC", 0.5, True))
    eps = ElectricalPowerSystem(_panels(), _battery(), pdu)
    eps.set_satellite_mode(OperationalMode.PAYLOAD_OPERATION)
    assert eps.current_mode is OperationalMode.PAYLOAD_OPERATION
    assert _loads_on(pdu) == {"OBC"}