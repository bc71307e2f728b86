"""Building blocks of a CubeSat electrical power system.

Solar panels generate power, a battery stores it, and a power distribution
unit switches the loads (subsystems and payloads) that consume it.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

#: Average solar flux in low Earth orbit, in watts per square metre.
SOLAR_FLUX_LEO_AVG_W_M2 = 1367.0

#: Fault reason that blocks charging.
FAULT_OVER_TEMPERATURE = "Over-temperature"
#: Fault reason that blocks discharging.
FAULT_UNDER_VOLTAGE = "Under-voltage"
#: Fault reason set when the battery health drops too far.
FAULT_SEVERELY_DEGRADED = "Severely Degraded"

_DEGRADED_HEALTH_THRESHOLD = 20.0


class BatteryState(enum.Enum):
    """What the battery is currently doing."""

    CHARGING = "charging"
    DISCHARGING = "discharging"
    IDLE = "idle"
    FULL = "full"
    EMPTY = "empty"
    FAULT = "fault"


class OperationalMode(enum.Enum):
    """Operational power modes of the satellite."""

    NOMINAL_SUNLIT = "nominal_sunlit"
    NOMINAL_ECLIPSE = "nominal_eclipse"
    SAFE_MODE = "safe_mode"
    PAYLOAD_OPERATION = "payload_operation"


class LoadNotFoundError(LookupError):
    """Raised when a load id is not known to the power distribution unit."""

    def __init__(self, load_id: str) -> None:
        super().__init__(f"Load with ID {load_id} not found.")
        self.load_id = load_id


@dataclass
class SolarPanel:
    """A deployable solar panel whose output depends on sun and attitude."""

    id: str
    area_m2: float
    efficiency: float
    current_power_output_w: float = 0.0
    is_deployed: bool = False
    degradation_factor: float = 1.0

    def deploy(self) -> None:
        """Deploy the panel so that it can generate power."""
        self.is_deployed = True
        logger.info("Solar panel %s deployed.", self.id)

    def update_power_output(self, sun_intensity_w_m2: float, angle_modifier: float) -> None:
        """Recompute the output for the given flux and angle factor (0.0 to 1.0)."""
        if self.is_deployed:
            self.current_power_output_w = (
                self.area_m2
                * self.efficiency
                * sun_intensity_w_m2
                * angle_modifier
                * self.degradation_factor
            )
        else:
            self.current_power_output_w = 0.0

    def apply_degradation(self, factor_decrease: float) -> None:
        """Lower the degradation factor, never below zero."""
        self.degradation_factor = max(self.degradation_factor - factor_decrease, 0.0)


@dataclass
class Battery:
    """A rechargeable battery with efficiency losses, rate limits and health."""

    id: str
    capacity_wh: float
    current_charge_wh: float
    voltage_v: float
    max_charge_rate_w: float
    max_discharge_rate_w: float
    state: BatteryState = BatteryState.IDLE
    fault_reason: str | None = None
    health_percentage: float = 100.0
    charge_efficiency: float = 0.9
    discharge_efficiency: float = 0.9
    cycles: int = 0

    def __post_init__(self) -> None:
        self.current_charge_wh = min(self.current_charge_wh, self.capacity_wh)

    @property
    def effective_capacity_wh(self) -> float:
        """Capacity scaled by the battery health."""
        return self.capacity_wh * (self.health_percentage / 100.0)

    @property
    def soc_percentage(self) -> float:
        """State of charge relative to the effective capacity, in percent."""
        capacity = self.effective_capacity_wh
        if capacity <= 0.0:
            return 0.0
        return self.current_charge_wh / capacity * 100.0

    def _has_fault(self, reason: str) -> bool:
        return self.state is BatteryState.FAULT and self.fault_reason == reason

    def _set_state(self, state: BatteryState) -> None:
        self.state = state
        self.fault_reason = None

    def charge(self, power_w: float, duration_h: float) -> None:
        """Store ``power_w`` for ``duration_h`` hours, within rate and capacity limits."""
        if self._has_fault(FAULT_OVER_TEMPERATURE):
            logger.warning("Battery %s is faulty, cannot charge.", self.id)
            return

        power_w = min(power_w, self.max_charge_rate_w * (self.health_percentage / 100.0))
        energy_to_add_wh = power_w * duration_h * self.charge_efficiency
        effective_capacity = self.effective_capacity_wh

        if self.current_charge_wh >= effective_capacity:
            self._set_state(BatteryState.FULL)
            self.current_charge_wh = effective_capacity
            return

        self._set_state(BatteryState.CHARGING)
        self.current_charge_wh += energy_to_add_wh

        if self.current_charge_wh >= effective_capacity:
            self.current_charge_wh = effective_capacity
            self._set_state(BatteryState.FULL)

    def discharge(self, power_demand_w: float, duration_h: float) -> float:
        """Draw power for ``duration_h`` hours and return the power actually supplied."""
        if duration_h <= 0.0:
            raise ValueError("duration_h must be positive")
        if self._has_fault(FAULT_UNDER_VOLTAGE):
            logger.warning("Battery %s is faulty, cannot discharge.", self.id)
            return 0.0

        power_demand_w = min(
            power_demand_w, self.max_discharge_rate_w * (self.health_percentage / 100.0)
        )
        energy_needed_wh = power_demand_w * duration_h / self.discharge_efficiency

        if self.current_charge_wh <= 0.0:
            self._set_state(BatteryState.EMPTY)
            self.current_charge_wh = 0.0
            return 0.0

        self._set_state(BatteryState.DISCHARGING)
        energy_supplied_wh = min(self.current_charge_wh, energy_needed_wh)
        self.current_charge_wh -= energy_supplied_wh

        if self.current_charge_wh <= 0.0:
            self.current_charge_wh = 0.0
            self._set_state(BatteryState.EMPTY)
            self.cycles += 1

        return energy_supplied_wh * self.discharge_efficiency / duration_h

    def apply_health_degradation(self, percentage_decrease: float) -> None:
        """Lower the health by some percentage points; flag a fault below 20 %."""
        self.health_percentage = max(self.health_percentage - percentage_decrease, 0.0)
        if self.health_percentage < _DEGRADED_HEALTH_THRESHOLD and not self._has_fault("Degraded"):
            self.state = BatteryState.FAULT
            self.fault_reason = FAULT_SEVERELY_DEGRADED


@dataclass
class Load:
    """A subsystem or payload that draws power while switched on."""

    id: str
    power_consumption_w: float
    is_critical: bool
    is_on: bool = False

    def turn_on(self) -> None:
        """Switch the load on."""
        self.is_on = True

    def turn_off(self) -> None:
        """Switch the load off."""
        self.is_on = False

    @property
    def power_demand_w(self) -> float:
        """Power drawn right now: the consumption when on, zero when off."""
        return self.power_consumption_w if self.is_on else 0.0


@dataclass
class PowerDistributionUnit:
    """Switches loads on and off and reports the total demand."""

    loads: list[Load] = field(default_factory=list)

    def add_load(self, load: Load) -> None:
        """Attach a load to the unit."""
        self.loads.append(load)

    def switch_load(self, load_id: str, new_state: bool) -> None:
        """Turn the first load with ``load_id`` on or off."""
        load = next((candidate for candidate in self.loads if candidate.id == load_id), None)
        if load is None:
            raise LoadNotFoundError(load_id)
        if new_state:
            load.turn_on()
        else:
            load.turn_off()

    @property
    def total_demand_w(self) -> float:
        """Sum of the power drawn by all loads."""
        return sum(load.power_demand_w for load in self.loads)

    def shed_non_critical_loads(self) -> float:
        """Switch off every non-critical load that is on; return the power shed."""
        shed_power = 0.0
        for load in self.loads:
            if load.is_on and not load.is_critical:
                load.turn_off()
                shed_power += load.power_consumption_w
                logger.info("Shedding non-critical load: %s", load.id)
        return shed_power