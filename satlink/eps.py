"""The electrical power system that ties panels, battery and loads together."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from satlink.power_components import (
    SOLAR_FLUX_LEO_AVG_W_M2,
    Battery,
    BatteryState,
    LoadNotFoundError,
    OperationalMode,
    PowerDistributionUnit,
    SolarPanel,
)

logger = logging.getLogger(__name__)

# (sun intensity in W/m^2, attitude angle factor) seen by the panels in each mode.
_ILLUMINATION = {
    OperationalMode.NOMINAL_SUNLIT: (SOLAR_FLUX_LEO_AVG_W_M2, 0.8),
    OperationalMode.PAYLOAD_OPERATION: (SOLAR_FLUX_LEO_AVG_W_M2, 0.8),
    OperationalMode.NOMINAL_ECLIPSE: (0.0, 0.0),
    OperationalMode.SAFE_MODE: (SOLAR_FLUX_LEO_AVG_W_M2, 0.5),
}

_SUPPLY_TOLERANCE = 0.99
_CRITICAL_SOC_PERCENT = 10.0
_FULL_FRACTION = 0.999
_EMPTY_FRACTION = 0.001


@dataclass
class ElectricalPowerSystem:
    """Balances solar generation, battery storage and load demand over time."""

    solar_panels: list[SolarPanel]
    battery: Battery
    pdu: PowerDistributionUnit = field(default_factory=PowerDistributionUnit)
    current_mode: OperationalMode = OperationalMode.NOMINAL_SUNLIT

    def update_solar_power_generation(self) -> None:
        """Recompute every panel's output for the current operational mode."""
        sun_intensity, angle_modifier = _ILLUMINATION[self.current_mode]
        for panel in self.solar_panels:
            panel.update_power_output(sun_intensity, angle_modifier)

    @property
    def total_generated_power_w(self) -> float:
        """Sum of the current output of all panels."""
        return sum(panel.current_power_output_w for panel in self.solar_panels)

    def manage_power(self, time_step_h: float) -> None:
        """Run one power-balance step lasting ``time_step_h`` hours."""
        if time_step_h <= 0.0:
            raise ValueError("time_step_h must be positive")

        self.update_solar_power_generation()
        generated_w = self.total_generated_power_w
        demanded_w = self.pdu.total_demand_w

        logger.info(
            "--- Power Management Step (Mode: %s, Time Step: %.2fh) ---",
            self.current_mode.name,
            time_step_h,
        )
        logger.info(
            "Solar Generation: %.2f W, Initial Demand: %.2f W, Battery SoC: %.1f%% (%s)",
            generated_w,
            demanded_w,
            self.battery.soc_percentage,
            self.battery.state.name,
        )

        net_w = generated_w - demanded_w
        if net_w > 0.0:
            logger.info("Surplus power %.2f W available for charging.", net_w)
            self.battery.charge(net_w, time_step_h)
        elif net_w == 0.0:
            logger.info("Power balanced by solar generation.")
            self._settle_battery_state()
        else:
            self._cover_deficit(-net_w, generated_w, time_step_h)

        logger.info(
            "End of Step: Battery SoC: %.1f%% (%s), Total Demand: %.2fW",
            self.battery.soc_percentage,
            self.battery.state.name,
            self.pdu.total_demand_w,
        )

    def _settle_battery_state(self) -> None:
        battery = self.battery
        if battery.state not in (BatteryState.CHARGING, BatteryState.DISCHARGING):
            return
        capacity = battery.effective_capacity_wh
        if battery.current_charge_wh >= capacity * _FULL_FRACTION:
            battery.state = BatteryState.FULL
        elif battery.current_charge_wh <= capacity * _EMPTY_FRACTION:
            battery.state = BatteryState.EMPTY
        else:
            battery.state = BatteryState.IDLE

    def _cover_deficit(self, deficit_w: float, generated_w: float, time_step_h: float) -> None:
        logger.info("Power deficit of %.2f W. Attempting to use battery.", deficit_w)
        supplied_w = self.battery.discharge(deficit_w, time_step_h)

        if supplied_w >= deficit_w * _SUPPLY_TOLERANCE:
            logger.info("Battery supplied %.2f W to cover deficit.", supplied_w)
            return

        logger.warning(
            "Battery supplied %.2f W, but %.2f W was needed. Load shedding may be required.",
            supplied_w,
            deficit_w,
        )
        if not (
            self.battery.state is BatteryState.EMPTY
            or self.battery.soc_percentage < _CRITICAL_SOC_PERCENT
        ):
            return

        logger.warning("Battery empty or critically low. Attempting to shed non-critical loads.")
        self.pdu.shed_non_critical_loads()
        demanded_w = self.pdu.total_demand_w
        remaining_net_w = generated_w - demanded_w
        if remaining_net_w < 0.0:
            self.battery.discharge(-remaining_net_w, time_step_h)
            if self.battery.state is BatteryState.EMPTY:
                logger.warning(
                    "Critical power situation even after shedding. Demanded: %.2f W. "
                    "Entering Safe Mode.",
                    demanded_w,
                )
                self.set_satellite_mode(OperationalMode.SAFE_MODE)

    def _switch_if_present(self, load_id: str, new_state: bool) -> None:
        try:
            self.pdu.switch_load(load_id, new_state)
        except LoadNotFoundError:
            pass

    def set_satellite_mode(self, mode: OperationalMode) -> None:
        """Enter ``mode`` and reconfigure the loads for it; no-op if already there."""
        if self.current_mode is mode:
            return
        logger.info("Changing satellite mode from %s to %s", self.current_mode.name, mode.name)
        self.current_mode = mode

        for load in self.pdu.loads:
            if load.is_critical:
                load.turn_on()
            else:
                load.turn_off()

        if mode is OperationalMode.SAFE_MODE:
            logger.info("SafeMode: Ensuring only critical loads are active.")
        elif mode is OperationalMode.PAYLOAD_OPERATION:
            self._switch_if_present("PayloadCam", True)
            self._switch_if_present("PayloadTx", True)
            logger.info("PayloadOperation: Activating payload camera and transmitter.")
        else:
            self._switch_if_present("COM_RX", True)
            self._switch_if_present("COM_TX", False)
            self._switch_if_present("Heaters", True)
            logger.info("Nominal Mode (%s): Baseline operations.", mode.name)