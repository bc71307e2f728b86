"""CubeSat power-system simulation, a radio dongle model, ground-station tools and orbit frames."""

__version__ = "0.1.0"